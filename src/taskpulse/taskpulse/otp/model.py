from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class OTPRecord:
    """The single active one-time code for an email address."""

    email: str
    code: str
    created_at: datetime
    expires_at: datetime
    used: bool = False


@dataclass(frozen=True)
class VerificationResult:
    valid: bool
    message: str
