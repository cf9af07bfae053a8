from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from .model import ContentChanges, DailyReport, NewReport, ReportFilters, ReviewChanges


class ReportRepository(Protocol):
    def create(self, report: NewReport) -> int:
        """Insert a report; raises ConflictError on a duplicate (employee, day)."""

        raise NotImplementedError

    def get_by_id(self, report_id: int) -> Optional[DailyReport]:
        raise NotImplementedError

    def get_for_employee_and_date(self, employee_id: int, report_date: date) -> Optional[DailyReport]:
        raise NotImplementedError

    def list(self, filters: ReportFilters, *, offset: int, limit: int) -> tuple[Sequence[DailyReport], int]:
        """Return one page (newest first) and the total count for ``filters``."""

        raise NotImplementedError

    def update(
        self,
        report_id: int,
        *,
        content: ContentChanges,
        review: ReviewChanges,
        reviewed_by: Optional[int] = None,
        reviewed_at: Optional[datetime] = None,
    ) -> bool:
        """Apply content and review fields in one write.

        ``None`` fields are left unchanged; reviewer stamps are only written when given.
        """

        raise NotImplementedError

    def delete(self, report_id: int) -> bool:
        raise NotImplementedError

    def count_by_status(self, *, start_date: Optional[date], end_date: Optional[date]) -> dict[str, int]:
        raise NotImplementedError

    def average_hours(self, *, start_date: Optional[date], end_date: Optional[date]) -> Optional[float]:
        raise NotImplementedError

    def count_for_date(self, report_date: date) -> int:
        raise NotImplementedError
