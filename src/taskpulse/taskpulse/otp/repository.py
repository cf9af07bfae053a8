from __future__ import annotations

from datetime import datetime
from typing import Protocol

from .model import OTPRecord


class OTPRepository(Protocol):
    """Storage for one-time codes, keyed by normalized email (one row per email)."""

    def replace(self, record: OTPRecord) -> None:
        """Store ``record``, discarding whatever code the email had before."""

        raise NotImplementedError

    def consume(self, *, email: str, code: str, now: datetime) -> bool:
        """Atomically flag the matching unused, unexpired code as used.

        Returns False when nothing matched.
        """

        raise NotImplementedError

    def delete_expired(self, now: datetime) -> int:
        raise NotImplementedError
