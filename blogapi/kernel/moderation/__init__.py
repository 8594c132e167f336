"""
Moderation: user reports and their admin review.
"""

from blogapi.kernel.moderation.report_service import ReportService

__all__ = ["ReportService"]
