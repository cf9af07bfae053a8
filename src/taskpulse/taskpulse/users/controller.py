from __future__ import annotations

import json
import logging
from urllib.parse import urlencode

from flask import Flask, current_app, redirect, url_for

from ..common.http import json_body, ok
from ..core.exceptions import AuthenticationError, ValidationError
from ..container import Container
from ..security.context import auth_required, current_user

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    login_required = auth_required(container.caller_resolver)

    @app.route("/api/auth/register", methods=["POST"], endpoint="auth_register")
    def register_user():
        data = json_body()
        result = container.auth_service.register(
            name=data.get("name", ""),
            email=data.get("email", ""),
            password=data.get("password", ""),
            role=data.get("role"),
            department=data.get("department"),
        )
        return ok(result.to_dict(), message="User registered successfully", status=201)

    @app.route("/api/auth/login", methods=["POST"], endpoint="auth_login")
    def login():
        data = json_body()
        result = container.auth_service.login(data.get("email", ""), data.get("password", ""))
        return ok(result.to_dict(), message="Login successful")

    @app.route("/api/auth/me", methods=["GET"], endpoint="auth_me")
    @login_required
    def me():
        user = container.auth_service.get_me(current_user())
        return ok({"user": user.to_public_dict()})

    @app.route("/api/auth/profile", methods=["PUT"], endpoint="auth_profile")
    @login_required
    def update_profile():
        data = json_body()
        user = container.auth_service.update_profile(
            current_user(),
            name=data.get("name"),
            department=data.get("department"),
        )
        return ok({"user": user.to_public_dict()}, message="Profile updated successfully")

    @app.route("/api/auth/password", methods=["PUT"], endpoint="auth_password")
    @login_required
    def change_password():
        data = json_body()
        token = container.auth_service.change_password(
            current_user(),
            current_password=data.get("currentPassword", ""),
            new_password=data.get("newPassword", ""),
        )
        return ok({"token": token}, message="Password changed successfully")

    @app.route("/api/auth/users", methods=["GET"], endpoint="auth_users")
    @login_required
    def list_users():
        users = container.user_service.list_users(current_user())
        return ok({"users": [u.to_public_dict() for u in users]}, count=len(users))

    @app.route("/api/auth/users/<int:user_id>/active", methods=["PUT"], endpoint="auth_user_active")
    @login_required
    def set_user_active(user_id: int):
        data = json_body()
        if not isinstance(data.get("isActive"), bool):
            raise ValidationError("isActive must be true or false")
        user = container.user_service.set_active(current_user(), user_id=user_id, is_active=data["isActive"])
        return ok({"user": user.to_public_dict()}, message="Account status updated")

    @app.route("/api/auth/google", methods=["GET"], endpoint="auth_google")
    def google_login():
        if not container.google_login.enabled:
            raise AuthenticationError("Google login is not available")
        return container.google_login.authorize_redirect(url_for("auth_google_callback", _external=True))

    @app.route("/api/auth/google/callback", methods=["GET"], endpoint="auth_google_callback")
    def google_callback():
        frontend_url = current_app.config["FRONTEND_URL"].rstrip("/")
        try:
            profile = container.google_login.fetch_profile()
            result = container.auth_service.login_with_oauth(profile)
        except (AuthenticationError, ValidationError) as e:
            logger.warning("Google login failed: %s", e)
            return redirect(f"{frontend_url}/login.html?error=google_auth_failed")

        user = result.user
        query = urlencode(
            {
                "token": result.token,
                "user": json.dumps(
                    {
                        "id": user.user_id,
                        "name": user.name,
                        "email": user.email,
                        "role": user.role.value,
                        "department": user.department,
                    }
                ),
            }
        )
        return redirect(f"{frontend_url}/oauth-callback.html?{query}")
