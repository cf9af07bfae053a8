from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional, Sequence

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.datetime_utils import now_local
from ..common.validators import normalize_email, require_email, require_min_length, require_non_empty
from ..core.constants import DEFAULT_DEPARTMENT, MIN_PASSWORD_LENGTH
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, AuthorizationError, ConflictError, NotFoundError, ValidationError
from ..security.access import Action, authorize
from ..security.tokens import TokenCodec
from .model import OAuthProfile, User
from .repository import UserRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthResult:
    """What the API hands back after a successful sign-in."""

    user: User
    token: str

    def to_dict(self) -> dict:
        return {"user": self.user.to_public_dict(), "token": self.token}


def _parse_role(value: Optional[str]) -> Role:
    if not value:
        return Role.EMPLOYEE
    try:
        return Role(str(value).strip().lower())
    except ValueError:
        raise ValidationError("Invalid role")


class AuthService:
    """Use cases: register, login, profile and password management."""

    def __init__(
        self,
        users: UserRepository,
        tokens: TokenCodec,
        *,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._users = users
        self._tokens = tokens
        self._clock = clock or now_local

    def _require_user(self, user_id: int) -> User:
        user = self._users.get_by_id(int(user_id))
        if not user:
            raise NotFoundError("User not found")
        return user

    def register(
        self,
        *,
        name: str,
        email: str,
        password: str,
        role: Optional[str] = None,
        department: Optional[str] = None,
    ) -> AuthResult:
        name = require_non_empty(name, "Name")
        email = require_email(email)
        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)
        parsed_role = _parse_role(role)
        if parsed_role == Role.ADMIN:
            raise ValidationError("Admin accounts cannot be self-registered")

        if self._users.get_by_email(email):
            raise ConflictError("User with this email already exists")

        user_id = self._users.create_user(
            name=name,
            email=email,
            password_hash=generate_password_hash(password),
            role=parsed_role,
            department=(department or "").strip() or DEFAULT_DEPARTMENT,
        )
        user = self._require_user(user_id)
        logger.info("Registered user_id=%s role=%s", user.user_id, user.role.value)
        return AuthResult(user=user, token=self._tokens.issue(user.user_id))

    def login(self, email: str, password: str) -> AuthResult:
        if not email or not password:
            raise ValidationError("Please provide email and password")

        user = self._users.get_by_email(normalize_email(email))
        if not user:
            raise AuthenticationError("Invalid credentials")
        if not user.is_active:
            raise AuthenticationError("Your account has been deactivated. Contact admin.")

        try:
            ok = check_password_hash(user.password_hash, password)
        except (TypeError, ValueError):
            # e.g. placeholder hashes or corrupted values
            ok = False
        if not ok:
            raise AuthenticationError("Invalid credentials")

        self._users.touch_last_login(user.user_id, self._clock())
        user = self._require_user(user.user_id)
        return AuthResult(user=user, token=self._tokens.issue(user.user_id))

    def login_with_oauth(self, profile: OAuthProfile) -> AuthResult:
        """Create or link an account from verified provider claims."""

        provider_id = require_non_empty(profile.provider_id, "Provider id")
        email = require_email(profile.email)

        user = self._users.get_by_google_id(provider_id) or self._users.get_by_email(email)
        if user:
            if not user.is_active:
                raise AuthenticationError("Your account has been deactivated. Contact admin.")
            if not user.google_id:
                self._users.link_google_id(user.user_id, provider_id)
                logger.info("Linked OAuth identity to user_id=%s", user.user_id)
            if not user.is_email_verified:
                self._users.mark_email_verified(user.email)
            user_id = user.user_id
        else:
            user_id = self._users.create_user(
                name=(profile.name or "").strip() or email.split("@")[0],
                email=email,
                # OAuth accounts never log in with a password.
                password_hash=generate_password_hash(secrets.token_urlsafe(32)),
                role=Role.EMPLOYEE,
                department=DEFAULT_DEPARTMENT,
                is_email_verified=True,
                google_id=provider_id,
            )
            logger.info("Created user_id=%s from OAuth profile", user_id)

        self._users.touch_last_login(user_id, self._clock())
        user = self._require_user(user_id)
        return AuthResult(user=user, token=self._tokens.issue(user.user_id))

    def get_me(self, caller: User) -> User:
        return self._require_user(caller.user_id)

    def update_profile(self, caller: User, *, name: Optional[str], department: Optional[str]) -> User:
        new_name = require_non_empty(name, "Name") if name is not None else caller.name
        new_department = (department or "").strip() or caller.department
        self._users.update_profile(caller.user_id, name=new_name, department=new_department)
        return self._require_user(caller.user_id)

    def change_password(self, caller: User, *, current_password: str, new_password: str) -> str:
        if not current_password or not new_password:
            raise ValidationError("Please provide current and new password")
        require_min_length(new_password, "Password", MIN_PASSWORD_LENGTH)

        user = self._require_user(caller.user_id)
        if not check_password_hash(user.password_hash, current_password):
            raise AuthenticationError("Current password is incorrect")

        self._users.set_password_hash(user.user_id, generate_password_hash(new_password))
        logger.info("Password changed for user_id=%s", user.user_id)
        return self._tokens.issue(user.user_id)


class UserService:
    """Use cases: account administration (admin)."""

    def __init__(self, users: UserRepository):
        self._users = users

    def list_users(self, caller: User) -> Sequence[User]:
        authorize(caller, Action.USER_LIST)
        return self._users.list_all()

    def set_active(self, caller: User, *, user_id: int, is_active: bool) -> User:
        authorize(caller, Action.USER_SET_ACTIVE)
        if int(user_id) == caller.user_id and not is_active:
            raise AuthorizationError("You cannot deactivate your own account")

        target = self._users.get_by_id(int(user_id))
        if not target:
            raise NotFoundError("User not found")

        self._users.set_active(target.user_id, is_active=bool(is_active))
        logger.info("user_id=%s set is_active=%s by user_id=%s", target.user_id, is_active, caller.user_id)
        return self._users.get_by_id(target.user_id) or target
