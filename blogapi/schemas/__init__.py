"""
Pydantic schemas for API request/response validation.
"""

from blogapi.schemas.common import ErrorResponse, HealthResponse, SuccessResponse
from blogapi.schemas.auth import AuthResponse, UserCreate, UserLogin, UserResponse
from blogapi.schemas.comment import CommentCreate, CommentResponse, CommentUpdate
from blogapi.schemas.post import LikesResponse, PostCreate, PostResponse, PostUpdate
from blogapi.schemas.report import ReportAction, ReportCreate, ReportHandle, ReportResponse, ReportStats
from blogapi.schemas.user import ProfileResponse, SubscriptionResponse

__all__ = [
    # Common
    "ErrorResponse",
    "HealthResponse",
    "SuccessResponse",
    # Auth
    "AuthResponse",
    "UserCreate",
    "UserLogin",
    "UserResponse",
    # Comments
    "CommentCreate",
    "CommentResponse",
    "CommentUpdate",
    # Posts
    "LikesResponse",
    "PostCreate",
    "PostResponse",
    "PostUpdate",
    # Reports
    "ReportAction",
    "ReportCreate",
    "ReportHandle",
    "ReportResponse",
    "ReportStats",
    # Users
    "ProfileResponse",
    "SubscriptionResponse",
]
