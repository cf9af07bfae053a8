from __future__ import annotations

from datetime import date, timedelta

import pytest

from src.taskpulse.taskpulse.core.enums import ReportStatus, TaskCategory
from src.taskpulse.taskpulse.core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from src.taskpulse.taskpulse.reports.service import ReportService, generate_report_code


def _payload(**overrides):
    data = {
        "workSummary": "Finished the login page and fixed two bugs",
        "hoursWorked": 7.5,
        "tasksCompleted": [{"title": "Login page", "category": "development"}],
        "blockers": "None",
    }
    data.update(overrides)
    return data


@pytest.fixture
def service(reports_repo, clock):
    return ReportService(reports_repo, clock=clock)


def test_report_code_format():
    code = generate_report_code(date(2024, 3, 11))
    assert code.startswith("RPT-20240311-")
    assert len(code.split("-")[-1]) == 6


def test_create_stores_submitted_report_for_today(service, employee, clock):
    report = service.create(employee, _payload())

    assert report.employee_id == employee.user_id
    assert report.employee_name == employee.name
    assert report.report_date == clock.now.date()
    assert report.status == ReportStatus.SUBMITTED
    assert report.tasks_completed[0].category == TaskCategory.DEVELOPMENT


def test_second_report_same_day_conflicts(service, employee):
    service.create(employee, _payload())
    with pytest.raises(ConflictError):
        service.create(employee, _payload())


def test_new_day_allows_new_report(service, employee, clock):
    service.create(employee, _payload())
    clock.advance(days=1)
    assert service.create(employee, _payload()).report_date == clock.now.date()


@pytest.mark.parametrize(
    "overrides",
    [
        {"workSummary": "too short"},
        {"workSummary": "x" * 2001},
        {"hoursWorked": -1},
        {"hoursWorked": 25},
        {"hoursWorked": None},
        {"hoursWorked": True},
        {"tasksCompleted": "not a list"},
        {"tasksCompleted": [{"title": ""}]},
        {"tasksCompleted": [{"title": "x", "category": "party"}]},
        {"blockers": "b" * 501},
    ],
)
def test_create_rejects_invalid_fields(service, employee, overrides):
    with pytest.raises(ValidationError):
        service.create(employee, _payload(**overrides))


def test_owner_can_edit_on_same_day(service, employee):
    report = service.create(employee, _payload())
    updated = service.update(employee, report.report_id, {"hoursWorked": 8, "blockers": "Waiting on API keys"})

    assert updated.hours_worked == 8
    assert updated.blockers == "Waiting on API keys"


def test_owner_cannot_edit_next_day(service, employee, clock):
    report = service.create(employee, _payload())
    clock.advance(days=1)

    with pytest.raises(AuthorizationError):
        service.update(employee, report.report_id, {"hoursWorked": 8})


def test_owner_can_still_delete_next_day(service, employee, clock, reports_repo):
    report = service.create(employee, _payload())
    clock.advance(days=3)

    service.delete(employee, report.report_id)
    assert reports_repo.get_by_id(report.report_id) is None


def test_other_employee_cannot_read_edit_or_delete(service, employee, other_employee):
    report = service.create(employee, _payload())

    with pytest.raises(AuthorizationError):
        service.get(other_employee, report.report_id)
    with pytest.raises(AuthorizationError):
        service.update(other_employee, report.report_id, {"hoursWorked": 1})
    with pytest.raises(AuthorizationError):
        service.delete(other_employee, report.report_id)


def test_employee_cannot_review_own_report(service, employee):
    report = service.create(employee, _payload())
    with pytest.raises(AuthorizationError):
        service.update(employee, report.report_id, {"status": "Reviewed"})


def test_mixed_update_is_rejected_without_partial_write(service, employee, reports_repo):
    report = service.create(employee, _payload())
    with pytest.raises(AuthorizationError):
        service.update(employee, report.report_id, {"hoursWorked": 2, "managerNotes": "self review"})

    assert reports_repo.get_by_id(report.report_id).hours_worked == 7.5


def test_manager_review_stamps_reviewer(service, employee, manager, clock):
    report = service.create(employee, _payload())
    clock.advance(hours=3)
    reviewed = service.update(manager, report.report_id, {"status": "Reviewed", "managerNotes": "Good work"})

    assert reviewed.status == ReportStatus.REVIEWED
    assert reviewed.reviewed_by == manager.user_id
    assert reviewed.reviewed_at == clock.now
    assert reviewed.manager_notes == "Good work"


def test_pending_status_keeps_previous_reviewer(service, employee, manager, admin):
    report = service.create(employee, _payload())
    service.update(manager, report.report_id, {"status": "Reviewed"})
    pending = service.update(admin, report.report_id, {"status": "Pending"})

    assert pending.status == ReportStatus.PENDING
    assert pending.reviewed_by == manager.user_id


def test_manager_cannot_edit_employee_content(service, employee, manager):
    report = service.create(employee, _payload())
    with pytest.raises(AuthorizationError):
        service.update(manager, report.report_id, {"workSummary": "Rewritten by the manager"})


def test_owner_can_edit_reviewed_report_same_day(service, employee, manager):
    report = service.create(employee, _payload())
    service.update(manager, report.report_id, {"status": "Reviewed"})
    updated = service.update(employee, report.report_id, {"plannedTomorrow": "Write tests"})

    assert updated.planned_tomorrow == "Write tests"
    assert updated.status == ReportStatus.REVIEWED


def test_invalid_status_is_rejected(service, employee, manager):
    report = service.create(employee, _payload())
    with pytest.raises(ValidationError):
        service.update(manager, report.report_id, {"status": "Approved"})


def test_empty_update_is_rejected(service, employee):
    report = service.create(employee, _payload())
    with pytest.raises(ValidationError):
        service.update(employee, report.report_id, {"unrelated": 1})


def test_force_delete_is_admin_only(service, employee, manager, admin):
    report = service.create(employee, _payload())

    with pytest.raises(AuthorizationError):
        service.force_delete(manager, report.report_id)

    service.force_delete(admin, report.report_id)
    with pytest.raises(NotFoundError):
        service.get(admin, report.report_id)


def test_unknown_report_is_not_found(service, admin):
    with pytest.raises(NotFoundError):
        service.get(admin, 999)


def test_employee_listing_is_scoped_to_self(service, employee, other_employee):
    service.create(employee, _payload())
    service.create(other_employee, _payload())

    page = service.list_reports(employee, employee_id=other_employee.user_id)
    assert page.total == 1
    assert all(r.employee_id == employee.user_id for r in page.items)


def test_manager_listing_filters_and_pages(service, employee, other_employee, manager, clock):
    for _ in range(3):
        service.create(employee, _payload())
        service.create(other_employee, _payload())
        clock.advance(days=1)

    everyone = service.list_reports(manager, limit=4)
    assert everyone.total == 6
    assert len(everyone.items) == 4
    assert everyone.pages == 2
    assert everyone.items[0].report_date >= everyone.items[-1].report_date

    only_oscar = service.list_reports(manager, employee_id=other_employee.user_id)
    assert only_oscar.total == 3


def test_list_from_query_parses_values(service, employee, manager):
    service.create(employee, _payload())
    page = service.list_from_query(manager, {"status": "Submitted", "page": "1", "limit": "5"})
    assert page.total == 1
    assert page.limit == 5

    with pytest.raises(ValidationError):
        service.list_from_query(manager, {"status": "Nope"})
    with pytest.raises(ValidationError):
        service.list_from_query(manager, {"startDate": "2024-13-01"})


def test_list_rejects_inverted_date_range(service, manager, clock):
    today = clock.now.date()
    with pytest.raises(ValidationError):
        service.list_reports(manager, start_date=today, end_date=today - timedelta(days=1))


def test_get_today(service, employee, clock):
    assert service.get_today(employee) is None
    report = service.create(employee, _payload())
    assert service.get_today(employee).report_id == report.report_id
    clock.advance(days=1)
    assert service.get_today(employee) is None


def test_stats_for_reviewers_only(service, employee, other_employee, manager):
    service.create(employee, _payload(hoursWorked=8))
    other = service.create(other_employee, _payload(hoursWorked=6))
    service.update(manager, other.report_id, {"status": "Reviewed"})

    with pytest.raises(AuthorizationError):
        service.stats(employee)

    stats = service.stats(manager).to_dict()
    assert stats["totalReports"] == 2
    assert stats["todaySubmissions"] == 2
    assert stats["averageHoursWorked"] == 7.0
    assert stats["statusBreakdown"] == {"Submitted": 1, "Reviewed": 1}


@pytest.mark.parametrize("hours", ["nan", "NaN", float("nan"), "inf", float("-inf")])
def test_non_finite_hours_are_rejected(service, employee, hours):
    with pytest.raises(ValidationError, match="Hours worked must be a number"):
        service.create(employee, _payload(hoursWorked=hours))

    report = service.create(employee, _payload())
    with pytest.raises(ValidationError):
        service.update(employee, report.report_id, {"hoursWorked": hours})


def test_store_duplicate_reaches_caller_when_precheck_misses(clock, employee):
    class RacingReports:
        # Another request inserted the same (employee, day) after our check.
        def get_for_employee_and_date(self, employee_id, report_date):
            return None

        def create(self, report):
            raise ConflictError("You have already submitted a report today. You can update it instead.")

    with pytest.raises(ConflictError):
        ReportService(RacingReports(), clock=clock).create(employee, _payload())


def test_own_report_content_and_review_are_written_together(service, manager, reports_repo, clock):
    report = service.create(manager, _payload())
    updated = service.update(manager, report.report_id, {"hoursWorked": 6, "status": "Reviewed"})

    assert reports_repo.update_calls == 1
    assert updated.hours_worked == 6
    assert updated.status == ReportStatus.REVIEWED
    assert updated.reviewed_by == manager.user_id
