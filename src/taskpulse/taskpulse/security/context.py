from __future__ import annotations

from functools import wraps
from typing import Optional

from flask import g, request

from ..core.exceptions import AuthenticationError
from ..users.model import User
from ..users.repository import UserRepository
from .tokens import TokenCodec


def extract_bearer(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token or token.lower() in {"null", "undefined"}:
        return None
    return token


class CallerResolver:
    """Turn an ``Authorization`` header into the active account behind it."""

    def __init__(self, tokens: TokenCodec, users: UserRepository):
        self._tokens = tokens
        self._users = users

    def resolve(self, authorization: Optional[str]) -> User:
        token = extract_bearer(authorization)
        if not token:
            raise AuthenticationError("Not authorized to access this route. Please login.")

        user = self._users.get_by_id(self._tokens.decode(token))
        if not user:
            raise AuthenticationError("User not found. Please login again.")
        if not user.is_active:
            raise AuthenticationError("Your account has been deactivated. Contact admin.")
        return user


def auth_required(resolver: CallerResolver):
    """Route decorator: authenticate before the view runs and expose ``g.current_user``."""

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            g.current_user = resolver.resolve(request.headers.get("Authorization"))
            return view(*args, **kwargs)

        return wrapper

    return decorator


def current_user() -> User:
    return g.current_user
