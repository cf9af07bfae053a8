from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User roles used for authorization."""

    EMPLOYEE = "employee"
    MANAGER = "manager"
    ADMIN = "admin"


class ReportStatus(str, Enum):
    """Review state of a daily report as stored in the database."""

    SUBMITTED = "Submitted"
    PENDING = "Pending"
    REVIEWED = "Reviewed"


class TaskCategory(str, Enum):
    DEVELOPMENT = "development"
    MEETING = "meeting"
    REVIEW = "review"
    DOCUMENTATION = "documentation"
    TESTING = "testing"
    OTHER = "other"
