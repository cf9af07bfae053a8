from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

import jwt

from ..core.constants import DEFAULT_TOKEN_DAYS
from ..core.exceptions import AuthenticationError

_ALGORITHM = "HS256"


class TokenCodec:
    """Issue and verify the bearer JWT handed to clients after login."""

    def __init__(
        self,
        secret: str,
        *,
        expires_days: int = DEFAULT_TOKEN_DAYS,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        if not secret:
            raise ValueError("JWT secret must not be empty")
        self._secret = secret
        self._ttl = timedelta(days=int(expires_days))
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def issue(self, user_id: int) -> str:
        now = self._clock()
        payload = {"id": int(user_id), "iat": now, "exp": now + self._ttl}
        return jwt.encode(payload, self._secret, algorithm=_ALGORITHM)

    def decode(self, token: str) -> int:
        """Return the user id carried by ``token``."""

        try:
            payload = jwt.decode(token, self._secret, algorithms=[_ALGORITHM])
        except jwt.ExpiredSignatureError:
            raise AuthenticationError("Token is invalid or expired. Please login again.")
        except jwt.InvalidTokenError:
            raise AuthenticationError("Token is invalid or expired. Please login again.")

        user_id = payload.get("id")
        if not isinstance(user_id, int):
            raise AuthenticationError("Token is invalid or expired. Please login again.")
        return user_id
