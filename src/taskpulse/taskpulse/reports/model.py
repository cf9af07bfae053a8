from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from ..core.enums import ReportStatus, TaskCategory


@dataclass(frozen=True)
class TaskItem:
    title: str
    description: str = ""
    category: TaskCategory = TaskCategory.OTHER

    def to_dict(self) -> dict:
        return {"title": self.title, "description": self.description, "category": self.category.value}

    @classmethod
    def from_dict(cls, data: dict) -> "TaskItem":
        return cls(
            title=data["title"],
            description=data.get("description") or "",
            category=TaskCategory(data.get("category") or TaskCategory.OTHER.value),
        )


@dataclass(frozen=True)
class DailyReport:
    """Domain entity: one employee's report for one calendar day."""

    report_id: int
    report_code: str
    employee_id: int
    employee_name: str
    employee_email: str
    report_date: date
    work_summary: str
    hours_worked: float
    tasks_completed: tuple[TaskItem, ...] = ()
    blockers: Optional[str] = None
    planned_tomorrow: Optional[str] = None
    status: ReportStatus = ReportStatus.SUBMITTED
    reviewed_by: Optional[int] = None
    reviewed_at: Optional[datetime] = None
    manager_notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.report_id,
            "reportId": self.report_code,
            "employeeId": self.employee_id,
            "employeeName": self.employee_name,
            "employeeEmail": self.employee_email,
            "date": self.report_date.isoformat(),
            "tasksCompleted": [t.to_dict() for t in self.tasks_completed],
            "workSummary": self.work_summary,
            "hoursWorked": self.hours_worked,
            "blockers": self.blockers,
            "plannedTomorrow": self.planned_tomorrow,
            "status": self.status.value,
            "reviewedBy": self.reviewed_by,
            "reviewedAt": self.reviewed_at.isoformat() if self.reviewed_at else None,
            "managerNotes": self.manager_notes,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }


@dataclass(frozen=True)
class NewReport:
    """Validated values for inserting a report."""

    report_code: str
    employee_id: int
    employee_name: str
    employee_email: str
    report_date: date
    work_summary: str
    hours_worked: float
    tasks_completed: tuple[TaskItem, ...] = ()
    blockers: Optional[str] = None
    planned_tomorrow: Optional[str] = None
    status: ReportStatus = ReportStatus.SUBMITTED
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class ContentChanges:
    """Owner-editable fields; ``None`` means "leave unchanged"."""

    tasks_completed: Optional[tuple[TaskItem, ...]] = None
    work_summary: Optional[str] = None
    hours_worked: Optional[float] = None
    blockers: Optional[str] = None
    planned_tomorrow: Optional[str] = None

    def is_empty(self) -> bool:
        return all(
            v is None
            for v in (self.tasks_completed, self.work_summary, self.hours_worked, self.blockers, self.planned_tomorrow)
        )


@dataclass(frozen=True)
class ReviewChanges:
    """Manager/admin fields; ``None`` means "leave unchanged"."""

    status: Optional[ReportStatus] = None
    manager_notes: Optional[str] = None

    def is_empty(self) -> bool:
        return self.status is None and self.manager_notes is None


@dataclass(frozen=True)
class ReportFilters:
    employee_id: Optional[int] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: Optional[ReportStatus] = None


@dataclass(frozen=True)
class ReportPage:
    items: list[DailyReport]
    total: int
    page: int
    limit: int

    @property
    def pages(self) -> int:
        return (self.total + self.limit - 1) // self.limit if self.limit else 0

    def to_dict(self) -> dict:
        return {
            "count": len(self.items),
            "total": self.total,
            "pages": self.pages,
            "currentPage": self.page,
            "data": {"reports": [r.to_dict() for r in self.items]},
        }


@dataclass(frozen=True)
class ReportStats:
    total_reports: int
    today_submissions: int
    average_hours_worked: float
    status_breakdown: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "totalReports": self.total_reports,
            "todaySubmissions": self.today_submissions,
            "averageHoursWorked": round(self.average_hours_worked, 1),
            "statusBreakdown": dict(self.status_breakdown),
        }
