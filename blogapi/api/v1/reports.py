"""
Report endpoints.

Reporting a post counts as interacting with it, so a hidden post cannot be
reported and answers 404 like any other interaction.
"""

import uuid
from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from blogapi.api.deps import AdminPrincipal, CurrentPrincipal, CurrentUser, DbSession, Visibility
from blogapi.api.errors import NOT_FOUND
from blogapi.kernel.identity.identity_service import IdentityService
from blogapi.kernel.models.report import ReportStatus, ReportType
from blogapi.kernel.moderation.report_service import ReportService
from blogapi.kernel.visibility.policy import decide
from blogapi.schemas.report import ReportCreate, ReportHandle, ReportResponse, ReportStats

router = APIRouter()


def get_report_service(db: DbSession, visibility: Visibility) -> ReportService:
    return ReportService(db, visibility)


Reports = Annotated[ReportService, Depends(get_report_service)]


def _bad_request(e: ValueError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail=str(e),
    )


@router.post("/posts/{post_id}", response_model=ReportResponse, status_code=status.HTTP_201_CREATED)
async def report_post(
    post_id: uuid.UUID,
    data: ReportCreate,
    user: CurrentUser,
    reports: Reports,
    db: DbSession,
):
    """Report a post to the admins."""
    try:
        report = await reports.report_post(user, post_id, data.reason)
    except ValueError as e:
        raise _bad_request(e)

    await db.refresh(report)
    return ReportResponse.from_report(report)


@router.post("/users/{user_id}", response_model=ReportResponse, status_code=status.HTTP_201_CREATED)
async def report_user(
    user_id: uuid.UUID,
    data: ReportCreate,
    user: CurrentUser,
    reports: Reports,
    db: DbSession,
):
    """Report another user to the admins."""
    target = await IdentityService(db).get_user_by_id(user_id)
    if target is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=NOT_FOUND,
        )

    try:
        report = await reports.report_user(user, target, data.reason)
    except ValueError as e:
        raise _bad_request(e)

    await db.refresh(report)
    return ReportResponse.from_report(report)


@router.get("/mine", response_model=List[ReportResponse])
async def list_my_reports(principal: CurrentPrincipal, reports: Reports):
    """
    Reports the caller filed.

    A reported post that has since been hidden is left out of the entry, so
    the list never shows content the caller could not fetch directly.
    """
    mine = await reports.list_reports(reporter_id=principal.id)
    return [
        ReportResponse.from_report(
            r,
            show_post=r.reported_post is not None and decide(r.reported_post, principal).allowed,
        )
        for r in mine
    ]


@router.get("", response_model=List[ReportResponse])
async def list_reports(
    admin: AdminPrincipal,
    reports: Reports,
    report_status: Annotated[Optional[ReportStatus], Query(alias="status")] = None,
    report_type: Annotated[Optional[ReportType], Query(alias="type")] = None,
):
    """All reports, optionally filtered by status and type (admin only)."""
    found = await reports.list_reports(status=report_status, report_type=report_type)
    return [ReportResponse.from_report(r) for r in found]


@router.get("/stats", response_model=ReportStats)
async def report_stats(admin: AdminPrincipal, reports: Reports):
    """Pending and total report counts (admin only)."""
    pending, total = await reports.count_reports()
    return ReportStats(pending=pending, total=total)


@router.put("/{report_id}", response_model=ReportResponse)
async def handle_report(
    report_id: uuid.UUID,
    data: ReportHandle,
    admin: AdminPrincipal,
    reports: Reports,
    db: DbSession,
):
    """Dismiss a report, or act on it by hiding the post or banning the user (admin only)."""
    report = await reports.get_report(report_id)
    if report is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=NOT_FOUND,
        )

    try:
        report = await reports.handle(report, admin, data.action, data.admin_response)
    except ValueError as e:
        raise _bad_request(e)

    await db.refresh(report)
    return ReportResponse.from_report(report)
