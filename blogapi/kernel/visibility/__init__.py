"""
Visibility Policy - who may see and touch moderated posts and comments.
"""

from blogapi.kernel.visibility.policy import (
    Action,
    Decision,
    ModeratableEntity,
    decide,
    decide_nested,
    filter_visible,
)
from blogapi.kernel.visibility.visibility_service import VisibilityService

__all__ = [
    "Action",
    "Decision",
    "ModeratableEntity",
    "decide",
    "decide_nested",
    "filter_visible",
    "VisibilityService",
]
