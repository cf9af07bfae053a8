from __future__ import annotations

import logging
import secrets
from datetime import datetime, timedelta
from typing import Callable, Optional

from ..common.datetime_utils import now_local
from ..common.validators import normalize_email, require_email
from ..core.constants import OTP_LENGTH, OTP_TTL_MINUTES
from ..core.exceptions import ExpiredOrInvalidTokenError
from .model import OTPRecord, VerificationResult
from .repository import OTPRepository

logger = logging.getLogger(__name__)

INVALID_CODE_MESSAGE = "Invalid or expired code"


def generate_code(length: int = OTP_LENGTH) -> str:
    """Uniformly random decimal code, left-zero-padded to ``length`` digits."""

    return f"{secrets.randbelow(10 ** length):0{length}d}"


class OTPService:
    """Issue and single-use-verify emailed one-time codes."""

    def __init__(
        self,
        otps: OTPRepository,
        *,
        ttl_minutes: int = OTP_TTL_MINUTES,
        clock: Optional[Callable[[], datetime]] = None,
        code_factory: Callable[[], str] = generate_code,
    ):
        self._otps = otps
        self._ttl = timedelta(minutes=int(ttl_minutes))
        self._clock = clock or now_local
        self._code_factory = code_factory

    @property
    def ttl_minutes(self) -> int:
        return int(self._ttl.total_seconds() // 60)

    def issue(self, email: str, *, now: Optional[datetime] = None) -> str:
        email = require_email(email)
        now = now or self._clock()

        swept = self._otps.delete_expired(now)
        if swept:
            logger.debug("Swept %s expired one-time codes", swept)

        code = self._code_factory()
        self._otps.replace(
            OTPRecord(email=email, code=code, created_at=now, expires_at=now + self._ttl, used=False)
        )
        logger.info("Issued one-time code for %s (expires in %s min)", email, self.ttl_minutes)
        return code

    def verify(self, email: str, code: str, *, now: Optional[datetime] = None) -> VerificationResult:
        email = normalize_email(email)
        code = str(code or "").strip()
        now = now or self._clock()

        if not email or len(code) != OTP_LENGTH or not code.isdigit():
            return VerificationResult(valid=False, message=INVALID_CODE_MESSAGE)

        if not self._otps.consume(email=email, code=code, now=now):
            return VerificationResult(valid=False, message=INVALID_CODE_MESSAGE)

        return VerificationResult(valid=True, message="Code verified successfully")

    def require_valid(
        self,
        email: str,
        code: str,
        *,
        now: Optional[datetime] = None,
        message: str = INVALID_CODE_MESSAGE,
    ) -> None:
        if not self.verify(email, code, now=now).valid:
            raise ExpiredOrInvalidTokenError(message)
