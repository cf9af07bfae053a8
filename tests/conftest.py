from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, timedelta
from typing import Optional

import pytest
from werkzeug.security import generate_password_hash

from src.taskpulse.taskpulse.core.enums import Role
from src.taskpulse.taskpulse.core.exceptions import ConflictError
from src.taskpulse.taskpulse.otp.model import OTPRecord
from src.taskpulse.taskpulse.reports.model import ContentChanges, DailyReport, NewReport, ReportFilters, ReviewChanges
from src.taskpulse.taskpulse.users.model import User


class FixedClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


class InMemoryUsers:
    def __init__(self):
        self.by_id: dict[int, User] = {}
        self._id = 0

    def add(self, *, name: str, email: str, password: str, role: Role, is_active: bool = True) -> User:
        user_id = self.create_user(
            name=name,
            email=email,
            password_hash=generate_password_hash(password),
            role=role,
            department="General",
        )
        if not is_active:
            self.set_active(user_id, is_active=False)
        return self.by_id[user_id]

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self.by_id.get(user_id)

    def get_by_email(self, email: str) -> Optional[User]:
        return next((u for u in self.by_id.values() if u.email == email), None)

    def get_by_google_id(self, google_id: str) -> Optional[User]:
        return next((u for u in self.by_id.values() if u.google_id == google_id), None)

    def create_user(self, *, name, email, password_hash, role, department, is_email_verified=False, google_id=None) -> int:
        if self.get_by_email(email):
            raise ConflictError("User with this email already exists")
        self._id += 1
        self.by_id[self._id] = User(
            user_id=self._id,
            name=name,
            email=email,
            password_hash=password_hash,
            role=role,
            department=department,
            is_email_verified=is_email_verified,
            google_id=google_id,
        )
        return self._id

    def _update(self, user_id: int, **changes) -> bool:
        if user_id not in self.by_id:
            return False
        self.by_id[user_id] = replace(self.by_id[user_id], **changes)
        return True

    def update_profile(self, user_id: int, *, name: str, department: str) -> bool:
        return self._update(user_id, name=name, department=department)

    def set_password_hash(self, user_id: int, password_hash: str) -> bool:
        return self._update(user_id, password_hash=password_hash)

    def set_active(self, user_id: int, *, is_active: bool) -> bool:
        return self._update(user_id, is_active=is_active)

    def mark_email_verified(self, email: str) -> bool:
        user = self.get_by_email(email)
        return bool(user) and self._update(user.user_id, is_email_verified=True)

    def link_google_id(self, user_id: int, google_id: str) -> bool:
        return self._update(user_id, google_id=google_id)

    def touch_last_login(self, user_id: int, when: datetime) -> None:
        self._update(user_id, last_login=when)

    def list_all(self):
        return list(self.by_id.values())


class InMemoryOTPs:
    def __init__(self):
        self.by_email: dict[str, OTPRecord] = {}

    def replace(self, record: OTPRecord) -> None:
        self.by_email[record.email] = record

    def consume(self, *, email: str, code: str, now: datetime) -> bool:
        rec = self.by_email.get(email)
        if not rec or rec.code != code or rec.used or rec.expires_at <= now:
            return False
        self.by_email[email] = replace(rec, used=True)
        return True

    def get(self, email: str) -> Optional[OTPRecord]:
        return self.by_email.get(email)

    def delete_expired(self, now: datetime) -> int:
        expired = [e for e, r in self.by_email.items() if r.expires_at <= now]
        for e in expired:
            del self.by_email[e]
        return len(expired)


class InMemoryReports:
    def __init__(self):
        self.by_id: dict[int, DailyReport] = {}
        self._id = 0
        self.update_calls = 0

    def create(self, report: NewReport) -> int:
        if self.get_for_employee_and_date(report.employee_id, report.report_date):
            raise ConflictError("You have already submitted a report today. You can update it instead.")
        self._id += 1
        self.by_id[self._id] = DailyReport(
            report_id=self._id,
            report_code=report.report_code,
            employee_id=report.employee_id,
            employee_name=report.employee_name,
            employee_email=report.employee_email,
            report_date=report.report_date,
            work_summary=report.work_summary,
            hours_worked=report.hours_worked,
            tasks_completed=report.tasks_completed,
            blockers=report.blockers,
            planned_tomorrow=report.planned_tomorrow,
            status=report.status,
            created_at=report.created_at,
            updated_at=report.created_at,
        )
        return self._id

    def get_by_id(self, report_id: int) -> Optional[DailyReport]:
        return self.by_id.get(report_id)

    def get_for_employee_and_date(self, employee_id: int, report_date: date) -> Optional[DailyReport]:
        return next(
            (r for r in self.by_id.values() if r.employee_id == employee_id and r.report_date == report_date),
            None,
        )

    def list(self, filters: ReportFilters, *, offset: int, limit: int):
        items = [
            r
            for r in self.by_id.values()
            if (filters.employee_id is None or r.employee_id == filters.employee_id)
            and (filters.start_date is None or r.report_date >= filters.start_date)
            and (filters.end_date is None or r.report_date <= filters.end_date)
            and (filters.status is None or r.status == filters.status)
        ]
        items.sort(key=lambda r: (r.report_date, r.report_id), reverse=True)
        return items[offset : offset + limit], len(items)

    def update(self, report_id: int, *, content: ContentChanges, review: ReviewChanges, reviewed_by=None, reviewed_at=None) -> bool:
        self.update_calls += 1
        fields = {
            "tasks_completed": content.tasks_completed,
            "work_summary": content.work_summary,
            "hours_worked": content.hours_worked,
            "blockers": content.blockers,
            "planned_tomorrow": content.planned_tomorrow,
            "status": review.status,
            "manager_notes": review.manager_notes,
            "reviewed_by": reviewed_by,
            "reviewed_at": reviewed_at,
        }
        self.by_id[report_id] = replace(self.by_id[report_id], **{k: v for k, v in fields.items() if v is not None})
        return True

    def delete(self, report_id: int) -> bool:
        return self.by_id.pop(report_id, None) is not None

    def _in_range(self, start_date, end_date):
        return [
            r
            for r in self.by_id.values()
            if (start_date is None or r.report_date >= start_date) and (end_date is None or r.report_date <= end_date)
        ]

    def count_by_status(self, *, start_date, end_date) -> dict[str, int]:
        counts: dict[str, int] = {}
        for r in self._in_range(start_date, end_date):
            counts[r.status.value] = counts.get(r.status.value, 0) + 1
        return counts

    def average_hours(self, *, start_date, end_date) -> Optional[float]:
        items = self._in_range(start_date, end_date)
        return sum(r.hours_worked for r in items) / len(items) if items else None

    def count_for_date(self, report_date: date) -> int:
        return sum(1 for r in self.by_id.values() if r.report_date == report_date)


class RecordingMailer:
    def __init__(self):
        self.sent: list[tuple[str, str, str]] = []

    def send_otp_email(self, to_email: str, code: str, *, ttl_minutes: int) -> bool:
        self.sent.append(("otp", to_email, code))
        return True

    def send_password_reset_email(self, to_email: str, code: str, *, ttl_minutes: int) -> bool:
        self.sent.append(("reset", to_email, code))
        return True


@pytest.fixture
def clock():
    return FixedClock(datetime(2024, 3, 11, 9, 0, 0))


@pytest.fixture
def users_repo():
    return InMemoryUsers()


@pytest.fixture
def otp_repo():
    return InMemoryOTPs()


@pytest.fixture
def reports_repo():
    return InMemoryReports()


@pytest.fixture
def mailer():
    return RecordingMailer()


@pytest.fixture
def employee(users_repo):
    return users_repo.add(name="Emma Employee", email="emma@example.com", password="secret123", role=Role.EMPLOYEE)


@pytest.fixture
def other_employee(users_repo):
    return users_repo.add(name="Oscar Other", email="oscar@example.com", password="secret123", role=Role.EMPLOYEE)


@pytest.fixture
def manager(users_repo):
    return users_repo.add(name="Mia Manager", email="mia@example.com", password="secret123", role=Role.MANAGER)


@pytest.fixture
def admin(users_repo):
    return users_repo.add(name="Adam Admin", email="adam@example.com", password="secret123", role=Role.ADMIN)
