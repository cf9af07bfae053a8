from __future__ import annotations

import json
from datetime import date, datetime
from typing import Any, Dict, Optional, Sequence

import mysql.connector

from ..core.enums import ReportStatus
from ..core.exceptions import ConflictError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, load_json_column
from .model import ContentChanges, DailyReport, NewReport, ReportFilters, ReviewChanges, TaskItem
from .repository import ReportRepository

_COLUMNS = """
    report_id, report_code, employee_id, employee_name, employee_email, report_date,
    tasks_completed, work_summary, hours_worked, blockers, planned_tomorrow,
    status, reviewed_by, reviewed_at, manager_notes, created_at, updated_at
"""


def _dump_tasks(tasks: Sequence[TaskItem]) -> str:
    return json.dumps([t.to_dict() for t in tasks])


def _to_report(r: Dict[str, Any]) -> DailyReport:
    return DailyReport(
        report_id=int(r["report_id"]),
        report_code=r["report_code"],
        employee_id=int(r["employee_id"]),
        employee_name=r["employee_name"],
        employee_email=r["employee_email"],
        report_date=r["report_date"],
        tasks_completed=tuple(TaskItem.from_dict(t) for t in load_json_column(r.get("tasks_completed"), [])),
        work_summary=r["work_summary"],
        hours_worked=float(r["hours_worked"]),
        blockers=r.get("blockers"),
        planned_tomorrow=r.get("planned_tomorrow"),
        status=ReportStatus(r["status"]),
        reviewed_by=r.get("reviewed_by"),
        reviewed_at=r.get("reviewed_at"),
        manager_notes=r.get("manager_notes"),
        created_at=r.get("created_at"),
        updated_at=r.get("updated_at"),
    )


def _date_clauses(start_date: Optional[date], end_date: Optional[date]) -> tuple[list[str], list[object]]:
    clauses: list[str] = []
    params: list[object] = []
    if start_date is not None:
        clauses.append("report_date>=%s")
        params.append(start_date)
    if end_date is not None:
        clauses.append("report_date<=%s")
        params.append(end_date)
    return clauses, params


class MySQLReportRepository(ReportRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def create(self, report: NewReport) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO daily_reports(
                        report_code, employee_id, employee_name, employee_email, report_date,
                        tasks_completed, work_summary, hours_worked, blockers, planned_tomorrow,
                        status, created_at
                    )
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,COALESCE(%s, NOW()))
                    """,
                    (
                        report.report_code,
                        int(report.employee_id),
                        report.employee_name,
                        report.employee_email,
                        report.report_date,
                        _dump_tasks(report.tasks_completed),
                        report.work_summary,
                        report.hours_worked,
                        report.blockers,
                        report.planned_tomorrow,
                        report.status.value,
                        report.created_at,
                    ),
                )
                return int(cur.lastrowid)
        except mysql.connector.IntegrityError:
            # uq_daily_reports_employee_day is the backstop for concurrent creates.
            raise ConflictError("You have already submitted a report today. You can update it instead.")

    def get_by_id(self, report_id: int) -> Optional[DailyReport]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM daily_reports WHERE report_id=%s", (int(report_id),))
            r = fetchone(cur)
            return _to_report(r) if r else None

    def get_for_employee_and_date(self, employee_id: int, report_date: date) -> Optional[DailyReport]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM daily_reports WHERE employee_id=%s AND report_date=%s",
                (int(employee_id), report_date),
            )
            r = fetchone(cur)
            return _to_report(r) if r else None

    def list(self, filters: ReportFilters, *, offset: int, limit: int) -> tuple[Sequence[DailyReport], int]:
        clauses, params = _date_clauses(filters.start_date, filters.end_date)
        if filters.employee_id is not None:
            clauses.append("employee_id=%s")
            params.append(int(filters.employee_id))
        if filters.status is not None:
            clauses.append("status=%s")
            params.append(filters.status.value)

        where = " AND ".join(clauses) or "1=1"

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS total FROM daily_reports WHERE {where}", tuple(params))
            total = int((fetchone(cur) or {}).get("total") or 0)

            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM daily_reports
                WHERE {where}
                ORDER BY report_date DESC, created_at DESC
                LIMIT %s OFFSET %s
                """,
                tuple(params + [int(limit), int(offset)]),
            )
            return [_to_report(r) for r in fetchall(cur)], total

    def update(
        self,
        report_id: int,
        *,
        content: ContentChanges,
        review: ReviewChanges,
        reviewed_by: Optional[int] = None,
        reviewed_at: Optional[datetime] = None,
    ) -> bool:
        sets: list[str] = []
        params: list[object] = []
        if content.tasks_completed is not None:
            sets.append("tasks_completed=%s")
            params.append(_dump_tasks(content.tasks_completed))
        for column, value in (
            ("work_summary", content.work_summary),
            ("hours_worked", content.hours_worked),
            ("blockers", content.blockers),
            ("planned_tomorrow", content.planned_tomorrow),
            ("status", review.status.value if review.status is not None else None),
            ("manager_notes", review.manager_notes),
        ):
            if value is not None:
                sets.append(f"{column}=%s")
                params.append(value)
        if reviewed_by is not None:
            sets.extend(["reviewed_by=%s", "reviewed_at=%s"])
            params.extend([int(reviewed_by), reviewed_at])
        if not sets:
            return False

        # One statement, so content and review changes commit together.
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE daily_reports SET {', '.join(sets)} WHERE report_id=%s",
                tuple(params + [int(report_id)]),
            )
        # rowcount is 0 when values are unchanged; existence is checked by the service.
        return True

    def delete(self, report_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM daily_reports WHERE report_id=%s", (int(report_id),))
            return cur.rowcount > 0

    def count_by_status(self, *, start_date: Optional[date], end_date: Optional[date]) -> dict[str, int]:
        clauses, params = _date_clauses(start_date, end_date)
        where = " AND ".join(clauses) or "1=1"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT status, COUNT(*) AS n FROM daily_reports WHERE {where} GROUP BY status",
                tuple(params),
            )
            return {r["status"]: int(r["n"]) for r in fetchall(cur)}

    def average_hours(self, *, start_date: Optional[date], end_date: Optional[date]) -> Optional[float]:
        clauses, params = _date_clauses(start_date, end_date)
        where = " AND ".join(clauses) or "1=1"
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT AVG(hours_worked) AS avg_hours FROM daily_reports WHERE {where}", tuple(params))
            value = (fetchone(cur) or {}).get("avg_hours")
            return float(value) if value is not None else None

    def count_for_date(self, report_date: date) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS n FROM daily_reports WHERE report_date=%s", (report_date,))
            return int((fetchone(cur) or {}).get("n") or 0)
