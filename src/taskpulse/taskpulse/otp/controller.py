from __future__ import annotations

from flask import Flask

from ..common.http import json_body, ok
from ..container import Container
from ..users.verification_service import RESET_REQUESTED_MESSAGE


def register(app: Flask, container: Container) -> None:
    @app.route("/api/auth/send-otp", methods=["POST"], endpoint="auth_send_otp")
    def send_otp():
        data = json_body()
        issued = container.verification_service.send_verification_code(data.get("email", ""))
        return ok(issued.to_dict(), message="OTP sent successfully to your email")

    @app.route("/api/auth/verify-otp", methods=["POST"], endpoint="auth_verify_otp")
    def verify_otp():
        data = json_body()
        email = container.verification_service.confirm_email(data.get("email", ""), data.get("otp"))
        return ok({"email": email, "isVerified": True}, message="Email verified successfully")

    @app.route("/api/auth/forgot-password", methods=["POST"], endpoint="auth_forgot_password")
    def forgot_password():
        data = json_body()
        code = container.verification_service.request_password_reset(data.get("email", ""))
        return ok({"resetToken": code} if code else None, message=RESET_REQUESTED_MESSAGE)

    @app.route("/api/auth/reset-password", methods=["POST"], endpoint="auth_reset_password")
    def reset_password():
        data = json_body()
        container.verification_service.reset_password(
            email=data.get("email", ""),
            token=data.get("token"),
            new_password=data.get("newPassword", ""),
        )
        return ok(message="Password reset successfully. You can now login with your new password.")
