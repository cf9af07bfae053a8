from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from werkzeug.security import generate_password_hash

from ..common.validators import require_email, require_min_length
from ..core.constants import MIN_PASSWORD_LENGTH
from ..core.exceptions import NotFoundError, ValidationError
from ..notifications.email_service import Mailer
from ..otp.service import OTPService
from .repository import UserRepository

logger = logging.getLogger(__name__)

RESET_REQUESTED_MESSAGE = "If this email exists, a password reset code has been sent"


def _require_code_text(code: Any, field_name: str) -> str:
    # Codes keep their leading zeros only as strings.
    if not isinstance(code, str):
        raise ValidationError(f"{field_name} must be a string")
    return code.strip()


@dataclass(frozen=True)
class IssuedCode:
    email: str
    ttl_minutes: int
    # Only populated when codes are echoed back (non-production).
    code: Optional[str] = None

    def to_dict(self) -> dict:
        data = {"email": self.email, "expiresIn": f"{self.ttl_minutes} minutes"}
        if self.code is not None:
            data["otp"] = self.code
        return data


class AccountVerificationService:
    """Email verification and password reset on top of the one-time codes."""

    def __init__(
        self,
        users: UserRepository,
        otp: OTPService,
        mailer: Mailer,
        *,
        expose_codes: bool = False,
    ):
        self._users = users
        self._otp = otp
        self._mailer = mailer
        self._expose_codes = bool(expose_codes)

    def send_verification_code(self, email: str) -> IssuedCode:
        email = require_email(email)
        existing = self._users.get_by_email(email)
        if existing and existing.is_email_verified:
            raise ValidationError("This email is already registered and verified")

        code = self._otp.issue(email)
        self._mailer.send_otp_email(email, code, ttl_minutes=self._otp.ttl_minutes)
        return IssuedCode(email=email, ttl_minutes=self._otp.ttl_minutes, code=code if self._expose_codes else None)

    def confirm_email(self, email: str, code: str) -> str:
        if not email or not code:
            raise ValidationError("Email and OTP are required")
        code = _require_code_text(code, "OTP")
        email = require_email(email)
        self._otp.require_valid(email, code)
        if self._users.mark_email_verified(email):
            logger.info("Email verified for %s", email)
        return email

    def request_password_reset(self, email: str) -> Optional[str]:
        """Send a reset code when the account exists.

        Returns the code only when codes are exposed; callers answer the same way
        whether or not the email is known.
        """

        email = require_email(email)
        if not self._users.get_by_email(email):
            logger.info("Password reset requested for unknown email")
            return None

        code = self._otp.issue(email)
        self._mailer.send_password_reset_email(email, code, ttl_minutes=self._otp.ttl_minutes)
        return code if self._expose_codes else None

    def reset_password(self, *, email: str, token: str, new_password: str) -> None:
        if not token or not email or not new_password:
            raise ValidationError("Token, email and new password are required")
        token = _require_code_text(token, "Token")
        require_min_length(new_password, "Password", MIN_PASSWORD_LENGTH)
        email = require_email(email)

        self._otp.require_valid(email, token, message="Invalid or expired reset token")

        user = self._users.get_by_email(email)
        if not user:
            raise NotFoundError("User not found")

        self._users.set_password_hash(user.user_id, generate_password_hash(new_password))
        logger.info("Password reset for user_id=%s", user.user_id)
