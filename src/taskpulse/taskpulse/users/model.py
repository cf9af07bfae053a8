from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Domain entity: User.

    Plain data object; no database access here.
    """

    user_id: int
    name: str
    email: str
    password_hash: str
    role: Role
    department: str
    is_active: bool = True
    is_email_verified: bool = False
    google_id: Optional[str] = None
    last_login: Optional[datetime] = None
    created_at: Optional[datetime] = None

    def to_public_dict(self) -> dict:
        return {
            "id": self.user_id,
            "name": self.name,
            "email": self.email,
            "role": self.role.value,
            "department": self.department,
            "isActive": self.is_active,
            "isEmailVerified": self.is_email_verified,
            "lastLogin": self.last_login.isoformat() if self.last_login else None,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }


@dataclass(frozen=True)
class OAuthProfile:
    """Verified claims handed over by an external identity provider."""

    provider_id: str
    email: str
    name: str
