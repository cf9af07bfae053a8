"""Capability checks.

Every role/ownership decision in the application goes through ``is_allowed``;
services call ``authorize`` and never branch on roles themselves.
"""
from __future__ import annotations

import logging
from datetime import date
from enum import Enum
from typing import Optional

from ..core.enums import Role
from ..core.exceptions import AuthorizationError
from ..reports.model import DailyReport
from ..users.model import User

logger = logging.getLogger(__name__)


class Action(str, Enum):
    REPORT_CREATE = "report:create"
    REPORT_READ = "report:read"
    REPORT_LIST_ALL = "report:list_all"
    REPORT_EDIT_CONTENT = "report:edit_content"
    REPORT_REVIEW = "report:review"
    REPORT_DELETE = "report:delete"
    REPORT_FORCE_DELETE = "report:force_delete"
    REPORT_STATS = "report:stats"
    USER_LIST = "user:list"
    USER_SET_ACTIVE = "user:set_active"


REVIEWER_ROLES = frozenset({Role.MANAGER, Role.ADMIN})

_DENIAL_MESSAGES = {
    Action.REPORT_READ: "Not authorized to view this report",
    Action.REPORT_LIST_ALL: "Only managers and admins can list other employees' reports",
    Action.REPORT_EDIT_CONTENT: "You can only edit your own reports submitted today",
    Action.REPORT_REVIEW: "Only managers and admins can review reports",
    Action.REPORT_DELETE: "Not authorized to delete this report",
    Action.REPORT_FORCE_DELETE: "Only admins can force delete reports",
    Action.REPORT_STATS: "Only managers and admins can view report statistics",
    Action.USER_LIST: "Only admins can list users",
    Action.USER_SET_ACTIVE: "Only admins can change account status",
}


def is_reviewer(caller: User) -> bool:
    return caller.role in REVIEWER_ROLES


def is_owner(caller: User, report: DailyReport) -> bool:
    return report.employee_id == caller.user_id


def is_allowed(
    caller: User,
    action: Action,
    report: Optional[DailyReport] = None,
    *,
    today: Optional[date] = None,
) -> bool:
    if action == Action.REPORT_CREATE:
        return True

    if action in {Action.REPORT_LIST_ALL, Action.REPORT_REVIEW, Action.REPORT_STATS}:
        return is_reviewer(caller)

    if action in {Action.REPORT_FORCE_DELETE, Action.USER_LIST, Action.USER_SET_ACTIVE}:
        return caller.role == Role.ADMIN

    if report is None:
        raise ValueError(f"{action.value} needs the target report")

    if action == Action.REPORT_READ:
        return is_owner(caller, report) or is_reviewer(caller)

    if action == Action.REPORT_EDIT_CONTENT:
        if today is None:
            raise ValueError(f"{action.value} needs today's date")
        # Same-day window applies regardless of review status.
        return is_owner(caller, report) and report.report_date == today

    if action == Action.REPORT_DELETE:
        # Owners may delete at any age; editing stays same-day only.
        return is_owner(caller, report) or caller.role == Role.ADMIN

    raise ValueError(f"Unknown action: {action!r}")


def authorize(
    caller: User,
    action: Action,
    report: Optional[DailyReport] = None,
    *,
    today: Optional[date] = None,
) -> None:
    if not is_allowed(caller, action, report, today=today):
        logger.debug("Denied %s for user_id=%s role=%s", action.value, caller.user_id, caller.role.value)
        raise AuthorizationError(_DENIAL_MESSAGES.get(action, "Access denied"))
