"""
Report service: users flag posts or other users, admins review the flags.

Acting on a report reuses the same paths as direct moderation: hiding goes
through VisibilityService and banning through IdentityService, so a report
can never do more than the admin handling it could do by hand.
"""

import uuid
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from blogapi.kernel.identity.identity_service import IdentityService
from blogapi.kernel.identity.principal import Principal
from blogapi.kernel.models.report import Report, ReportAction, ReportStatus, ReportType
from blogapi.kernel.models.user import User
from blogapi.kernel.visibility.policy import Action
from blogapi.kernel.visibility.visibility_service import VisibilityService
from blogapi.logging_config import get_logger

logger = get_logger(__name__)


class ReportService:
    """Service for filing and handling reports."""

    def __init__(self, session: AsyncSession, visibility: Optional[VisibilityService] = None):
        self.session = session
        self.visibility = visibility or VisibilityService(session)

    async def report_post(self, reporter: User, post_id: uuid.UUID, reason: str) -> Report:
        """
        File a report against a post the reporter can see.

        Raises:
            VisibilityDenied: the post is missing or hidden from the reporter
            ValueError: own post, or already reported by this user
        """
        principal = Principal.from_user(reporter)
        post = await self.visibility.require_post(post_id, principal, Action.INTERACT)

        if post.author_id == reporter.id:
            raise ValueError("You cannot report your own post")
        if await self._exists(Report.reported_post_id == post.id, reporter.id):
            raise ValueError("You have already reported this post")

        report = Report(
            reporter=reporter,
            type=ReportType.POST,
            reported_post=post,
            reported_user=None,
            reason=reason,
            status=ReportStatus.PENDING,
            handled_by=None,
        )
        await self._insert(report, "You have already reported this post")
        return report

    async def report_user(self, reporter: User, target: User, reason: str) -> Report:
        """
        File a report against another user.

        Raises:
            ValueError: self-report, or already reported by this user
        """
        if target.id == reporter.id:
            raise ValueError("You cannot report yourself")
        if await self._exists(Report.reported_user_id == target.id, reporter.id):
            raise ValueError("You have already reported this user")

        report = Report(
            reporter=reporter,
            type=ReportType.USER,
            reported_post=None,
            reported_user=target,
            reason=reason,
            status=ReportStatus.PENDING,
            handled_by=None,
        )
        await self._insert(report, "You have already reported this user")
        return report

    async def get_report(self, report_id: uuid.UUID) -> Optional[Report]:
        """Get a report by ID."""
        return await self.session.get(Report, report_id)

    async def list_reports(
        self,
        status: Optional[ReportStatus] = None,
        report_type: Optional[ReportType] = None,
        reporter_id: Optional[uuid.UUID] = None,
    ) -> List[Report]:
        """Reports, newest first, optionally filtered."""
        query = select(Report).order_by(Report.created_at.desc())
        if status is not None:
            query = query.where(Report.status == status)
        if report_type is not None:
            query = query.where(Report.type == report_type)
        if reporter_id is not None:
            query = query.where(Report.reporter_id == reporter_id)

        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def count_reports(self) -> Tuple[int, int]:
        """(pending, total) report counts."""
        total = await self.session.scalar(select(func.count()).select_from(Report))
        pending = await self.session.scalar(
            select(func.count()).select_from(Report).where(Report.status == ReportStatus.PENDING)
        )
        return pending or 0, total or 0

    async def handle(
        self,
        report: Report,
        admin: Principal,
        action: ReportAction,
        admin_response: Optional[str] = None,
    ) -> Report:
        """
        Resolve a pending report.

        DISMISS rejects it. HIDE_POST hides the reported post and BAN_USER bans
        the reported user (the post's author for post reports); both approve it.

        Raises:
            ValueError: report already handled, HIDE_POST on a user report,
                or an admin banning themselves
        """
        if report.status != ReportStatus.PENDING:
            raise ValueError("Report already handled")

        if action is ReportAction.DISMISS:
            report.status = ReportStatus.REJECTED

        elif action is ReportAction.HIDE_POST:
            if report.type != ReportType.POST:
                raise ValueError("Only post reports can hide a post")
            await self.visibility.hide_post(report.reported_post_id, admin)
            report.status = ReportStatus.APPROVED

        elif action is ReportAction.BAN_USER:
            target_id = self._reported_user_id(report)
            if target_id == admin.id:
                raise ValueError("Administrators cannot ban themselves")
            await IdentityService(self.session).set_banned(target_id, True, changed_by=admin.id)
            report.status = ReportStatus.APPROVED

        report.handled_by = await self.session.get(User, admin.id)
        report.admin_response = admin_response
        report.handled_at = datetime.now(timezone.utc)
        await self.session.flush()

        logger.info(
            "Report handled",
            extra={
                "report_id": str(report.id),
                "action": action.value,
                "status": ReportStatus(report.status).value,
                "handled_by": str(admin.id),
            },
        )
        return report

    @staticmethod
    def _reported_user_id(report: Report) -> uuid.UUID:
        if report.type == ReportType.USER:
            return report.reported_user_id
        return report.reported_post.author_id

    async def _exists(self, target_clause, reporter_id: uuid.UUID) -> bool:
        result = await self.session.execute(
            select(Report.id).where(Report.reporter_id == reporter_id, target_clause)
        )
        return result.first() is not None

    async def _insert(self, report: Report, duplicate_message: str) -> None:
        self.session.add(report)
        try:
            await self.session.flush()
        except IntegrityError:
            await self.session.rollback()
            raise ValueError(duplicate_message)

        logger.info(
            "Report filed",
            extra={
                "report_id": str(report.id),
                "report_type": ReportType(report.type).value,
                "reporter_id": str(report.reporter_id),
            },
        )
