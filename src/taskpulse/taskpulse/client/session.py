from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

REVIEWER_ROLES = {"manager", "admin"}


class AuthSession:
    """Credential holder for one API client.

    Call ``load()`` to pick up a previously saved credential and ``clear()`` to
    sign out; nothing is shared between instances.
    """

    def __init__(self, path: Optional[Path] = None):
        self._path = Path(path) if path else None
        self.token: Optional[str] = None
        self.user: Optional[dict] = None

    def load(self) -> "AuthSession":
        if not self._path or not self._path.exists():
            return self
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            logger.warning("Ignoring unreadable session file %s", self._path)
            return self
        self.token = data.get("token") or None
        self.user = data.get("user") or None
        return self

    def save(self, token: str, user: Optional[dict]) -> None:
        self.token = token
        self.user = user
        if self._path:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(json.dumps({"token": token, "user": user}), encoding="utf-8")
            # Holds a bearer token; owner read/write only.
            self._path.chmod(0o600)

    def clear(self) -> None:
        self.token = None
        self.user = None
        if self._path and self._path.exists():
            self._path.unlink()

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    @property
    def role(self) -> Optional[str]:
        return (self.user or {}).get("role")

    @property
    def is_manager_or_admin(self) -> bool:
        return self.role in REVIEWER_ROLES

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"
