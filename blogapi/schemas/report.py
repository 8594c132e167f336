"""
Report schemas.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from blogapi.kernel.models.report import Report, ReportAction, ReportStatus, ReportType


class ReportCreate(BaseModel):
    """Report request for a post or a user."""

    reason: str = Field(..., min_length=1, max_length=1000)

    @field_validator("reason")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v.strip()


class ReportHandle(BaseModel):
    """Admin decision on a report."""

    action: ReportAction
    admin_response: Optional[str] = Field(None, max_length=1000)


class ReportResponse(BaseModel):
    """Report as returned to clients."""

    id: uuid.UUID
    type: ReportType
    status: ReportStatus
    reason: str
    reporter: str
    reported_username: Optional[str] = None
    reported_post_id: Optional[uuid.UUID] = None
    reported_post_title: Optional[str] = None
    handled_by: Optional[str] = None
    admin_response: Optional[str] = None
    handled_at: Optional[datetime] = None
    created_at: datetime

    @classmethod
    def from_report(cls, report: Report, show_post: bool = True) -> "ReportResponse":
        """
        Build the response. With ``show_post`` False the post's id and title
        are left out, for callers who can no longer read the post.
        """
        post = report.reported_post if show_post else None
        if report.reported_user is not None:
            reported_username = report.reported_user.username
        elif post is not None:
            reported_username = post.author.username
        else:
            reported_username = None

        return cls(
            id=report.id,
            type=report.type,
            status=report.status,
            reason=report.reason,
            reporter=report.reporter.username,
            reported_username=reported_username,
            reported_post_id=post.id if post is not None else None,
            reported_post_title=post.title if post is not None else None,
            handled_by=report.handled_by.username if report.handled_by else None,
            admin_response=report.admin_response,
            handled_at=report.handled_at,
            created_at=report.created_at,
        )


class ReportStats(BaseModel):
    """Report counts for the admin dashboard."""

    pending: int
    total: int
