from __future__ import annotations

import logging
import secrets
import string
from datetime import date, datetime
from typing import Any, Callable, Mapping, Optional

from ..common.datetime_utils import now_local, parse_optional_date
from ..common.validators import optional_text, require_non_empty, require_number_in_range, require_positive_int
from ..core.constants import (
    BLOCKERS_MAX,
    DEFAULT_PAGE_SIZE,
    MANAGER_NOTES_MAX,
    MAX_HOURS_WORKED,
    MAX_PAGE_SIZE,
    PLANNED_TOMORROW_MAX,
    WORK_SUMMARY_MAX,
    WORK_SUMMARY_MIN,
)
from ..core.enums import ReportStatus, TaskCategory
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..security.access import Action, authorize, is_reviewer
from ..users.model import User
from .model import (
    ContentChanges,
    DailyReport,
    NewReport,
    ReportFilters,
    ReportPage,
    ReportStats,
    ReviewChanges,
    TaskItem,
)
from .repository import ReportRepository

logger = logging.getLogger(__name__)

CONTENT_FIELDS = ("tasksCompleted", "workSummary", "hoursWorked", "blockers", "plannedTomorrow")
REVIEW_FIELDS = ("status", "managerNotes")

_CODE_ALPHABET = string.ascii_uppercase + string.digits


def generate_report_code(day: date) -> str:
    suffix = "".join(secrets.choice(_CODE_ALPHABET) for _ in range(6))
    return f"RPT-{day:%Y%m%d}-{suffix}"


def _parse_tasks(value: Any) -> tuple[TaskItem, ...]:
    if value is None:
        return ()
    if not isinstance(value, list):
        raise ValidationError("tasksCompleted must be a list")

    tasks: list[TaskItem] = []
    for i, raw in enumerate(value, start=1):
        if not isinstance(raw, Mapping):
            raise ValidationError(f"Task #{i} is invalid")
        title = require_non_empty(raw.get("title"), f"Task #{i} title")
        description = optional_text(raw.get("description"), f"Task #{i} description", WORK_SUMMARY_MAX) or ""
        try:
            category = TaskCategory(raw.get("category") or TaskCategory.OTHER.value)
        except ValueError:
            raise ValidationError(f"Task #{i} has an invalid category")
        tasks.append(TaskItem(title=title, description=description, category=category))
    return tuple(tasks)


def _parse_work_summary(value: Any) -> str:
    summary = require_non_empty(value, "Work summary")
    if len(summary) < WORK_SUMMARY_MIN:
        raise ValidationError(f"Work summary must be at least {WORK_SUMMARY_MIN} characters")
    if len(summary) > WORK_SUMMARY_MAX:
        raise ValidationError(f"Work summary cannot exceed {WORK_SUMMARY_MAX} characters")
    return summary


def _parse_hours(value: Any) -> float:
    if value is None or value == "":
        raise ValidationError("Hours worked is required")
    return require_number_in_range(value, "Hours worked", 0, MAX_HOURS_WORKED)


def parse_content_changes(payload: Mapping[str, Any]) -> ContentChanges:
    return ContentChanges(
        tasks_completed=_parse_tasks(payload["tasksCompleted"]) if payload.get("tasksCompleted") is not None else None,
        work_summary=_parse_work_summary(payload["workSummary"]) if payload.get("workSummary") else None,
        hours_worked=_parse_hours(payload["hoursWorked"]) if payload.get("hoursWorked") is not None else None,
        blockers=optional_text(payload.get("blockers"), "Blockers", BLOCKERS_MAX),
        planned_tomorrow=optional_text(payload.get("plannedTomorrow"), "Tomorrow's plan", PLANNED_TOMORROW_MAX),
    )


def parse_review_changes(payload: Mapping[str, Any]) -> ReviewChanges:
    status = None
    if payload.get("status"):
        try:
            status = ReportStatus(payload["status"])
        except ValueError:
            raise ValidationError("Status must be one of Submitted, Reviewed, Pending")
    return ReviewChanges(
        status=status,
        manager_notes=optional_text(payload.get("managerNotes"), "Manager notes", MANAGER_NOTES_MAX),
    )


class ReportService:
    """Daily report lifecycle: create, read, same-day edit, review, delete, stats."""

    def __init__(self, reports: ReportRepository, *, clock: Optional[Callable[[], datetime]] = None):
        self._reports = reports
        self._clock = clock or now_local

    def _require_report(self, report_id: int) -> DailyReport:
        report = self._reports.get_by_id(int(report_id))
        if not report:
            raise NotFoundError("Report not found")
        return report

    def create(self, caller: User, payload: Mapping[str, Any], *, now: Optional[datetime] = None) -> DailyReport:
        now = now or self._clock()
        today = now.date()
        authorize(caller, Action.REPORT_CREATE)

        if self._reports.get_for_employee_and_date(caller.user_id, today):
            raise ConflictError("You have already submitted a report today. You can update it instead.")

        new_report = NewReport(
            report_code=generate_report_code(today),
            employee_id=caller.user_id,
            employee_name=caller.name,
            employee_email=caller.email,
            report_date=today,
            work_summary=_parse_work_summary(payload.get("workSummary")),
            hours_worked=_parse_hours(payload.get("hoursWorked")),
            tasks_completed=_parse_tasks(payload.get("tasksCompleted")),
            blockers=optional_text(payload.get("blockers"), "Blockers", BLOCKERS_MAX),
            planned_tomorrow=optional_text(payload.get("plannedTomorrow"), "Tomorrow's plan", PLANNED_TOMORROW_MAX),
            status=ReportStatus.SUBMITTED,
            created_at=now,
        )
        report_id = self._reports.create(new_report)
        logger.info("Report %s created by user_id=%s for %s", report_id, caller.user_id, today)
        return self._require_report(report_id)

    def list_reports(
        self,
        caller: User,
        *,
        employee_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        status: Optional[ReportStatus] = None,
        page: int = 1,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> ReportPage:
        page = max(int(page), 1)
        limit = min(max(int(limit), 1), MAX_PAGE_SIZE)

        if is_reviewer(caller):
            authorize(caller, Action.REPORT_LIST_ALL)
            owner_filter = employee_id
        else:
            # Employees only ever see their own reports; any employee filter is ignored.
            owner_filter = caller.user_id

        if start_date and end_date and end_date < start_date:
            raise ValidationError("End date must be on or after start date")

        filters = ReportFilters(employee_id=owner_filter, start_date=start_date, end_date=end_date, status=status)
        items, total = self._reports.list(filters, offset=(page - 1) * limit, limit=limit)
        return ReportPage(items=list(items), total=int(total), page=page, limit=limit)

    def list_from_query(self, caller: User, query: Mapping[str, str]) -> ReportPage:
        """``list_reports`` fed from raw query-string values."""

        status = None
        if query.get("status"):
            try:
                status = ReportStatus(query["status"])
            except ValueError:
                raise ValidationError("Status must be one of Submitted, Reviewed, Pending")

        employee_id = query.get("employeeId")
        return self.list_reports(
            caller,
            employee_id=require_positive_int(employee_id, "employeeId") if employee_id else None,
            start_date=parse_optional_date(query.get("startDate")),
            end_date=parse_optional_date(query.get("endDate")),
            status=status,
            page=require_positive_int(query.get("page") or 1, "page"),
            limit=require_positive_int(query.get("limit") or DEFAULT_PAGE_SIZE, "limit"),
        )

    def get(self, caller: User, report_id: int) -> DailyReport:
        report = self._require_report(report_id)
        authorize(caller, Action.REPORT_READ, report)
        return report

    def get_today(self, caller: User, *, now: Optional[datetime] = None) -> Optional[DailyReport]:
        today = (now or self._clock()).date()
        return self._reports.get_for_employee_and_date(caller.user_id, today)

    def update(
        self,
        caller: User,
        report_id: int,
        payload: Mapping[str, Any],
        *,
        now: Optional[datetime] = None,
    ) -> DailyReport:
        now = now or self._clock()
        report = self._require_report(report_id)

        wants_content = any(k in payload for k in CONTENT_FIELDS)
        wants_review = any(k in payload for k in REVIEW_FIELDS)
        if not wants_content and not wants_review:
            raise ValidationError("Nothing to update")

        # Check every permission before writing anything.
        if wants_content:
            authorize(caller, Action.REPORT_EDIT_CONTENT, report, today=now.date())
        if wants_review:
            authorize(caller, Action.REPORT_REVIEW, report)

        content = parse_content_changes(payload) if wants_content else ContentChanges()
        review = parse_review_changes(payload) if wants_review else ReviewChanges()

        if not content.is_empty() or not review.is_empty():
            stamp = review.status == ReportStatus.REVIEWED
            self._reports.update(
                report.report_id,
                content=content,
                review=review,
                reviewed_by=caller.user_id if stamp else None,
                reviewed_at=now if stamp else None,
            )

        logger.info("Report %s updated by user_id=%s", report.report_id, caller.user_id)
        return self._require_report(report.report_id)

    def delete(self, caller: User, report_id: int) -> None:
        report = self._require_report(report_id)
        authorize(caller, Action.REPORT_DELETE, report)
        if not self._reports.delete(report.report_id):
            raise NotFoundError("Report not found")
        logger.info("Report %s deleted by user_id=%s", report.report_id, caller.user_id)

    def force_delete(self, caller: User, report_id: int) -> None:
        authorize(caller, Action.REPORT_FORCE_DELETE)
        report = self._require_report(report_id)
        if not self._reports.delete(report.report_id):
            raise NotFoundError("Report not found")
        logger.warning("Report %s force deleted by admin user_id=%s", report.report_id, caller.user_id)

    def stats(
        self,
        caller: User,
        *,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        now: Optional[datetime] = None,
    ) -> ReportStats:
        authorize(caller, Action.REPORT_STATS)
        today = (now or self._clock()).date()

        breakdown = self._reports.count_by_status(start_date=start_date, end_date=end_date)
        avg = self._reports.average_hours(start_date=start_date, end_date=end_date)
        return ReportStats(
            total_reports=sum(breakdown.values()),
            today_submissions=self._reports.count_for_date(today),
            average_hours_worked=float(avg or 0.0),
            status_breakdown=breakdown,
        )
