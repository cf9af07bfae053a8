from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import Role
from .model import User


class UserRepository(Protocol):
    """Repository interface for User.

    Note (DIP): the service layer depends on this interface, not on a concrete DB.
    """

    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

    def get_by_google_id(self, google_id: str) -> Optional[User]:
        raise NotImplementedError

    def create_user(
        self,
        *,
        name: str,
        email: str,
        password_hash: str,
        role: Role,
        department: str,
        is_email_verified: bool = False,
        google_id: Optional[str] = None,
    ) -> int:
        """Insert a user; raises ConflictError when the email is taken."""

        raise NotImplementedError

    def update_profile(self, user_id: int, *, name: str, department: str) -> bool:
        raise NotImplementedError

    def set_password_hash(self, user_id: int, password_hash: str) -> bool:
        raise NotImplementedError

    def set_active(self, user_id: int, *, is_active: bool) -> bool:
        raise NotImplementedError

    def mark_email_verified(self, email: str) -> bool:
        raise NotImplementedError

    def link_google_id(self, user_id: int, google_id: str) -> bool:
        raise NotImplementedError

    def touch_last_login(self, user_id: int, when: datetime) -> None:
        raise NotImplementedError

    def list_all(self) -> Sequence[User]:
        raise NotImplementedError
