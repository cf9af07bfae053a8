from __future__ import annotations

import logging
import smtplib
from dataclasses import dataclass
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional, Protocol

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SMTPSettings:
    host: Optional[str]
    port: int = 587
    user: Optional[str] = None
    password: Optional[str] = None
    use_tls: bool = True
    sender: str = "TaskPulse <noreply@taskpulse.local>"

    @property
    def configured(self) -> bool:
        return bool(self.host)


class Mailer(Protocol):
    def send_otp_email(self, to_email: str, code: str, *, ttl_minutes: int) -> bool:
        raise NotImplementedError

    def send_password_reset_email(self, to_email: str, code: str, *, ttl_minutes: int) -> bool:
        raise NotImplementedError


class SMTPMailer(Mailer):
    """Plain-text mail over SMTP.

    Without an SMTP host the message is written to the log instead, which is
    how codes reach developers on a local setup.
    """

    def __init__(self, settings: SMTPSettings):
        self._settings = settings

    def _send_plain_email(self, to_email: str, subject: str, body: str) -> bool:
        s = self._settings
        if not s.configured:
            logger.warning("SMTP not configured; email to %s not sent.\nSubject: %s\n%s", to_email, subject, body)
            return False

        msg = MIMEMultipart()
        msg["From"] = s.sender
        msg["To"] = to_email
        msg["Subject"] = subject
        msg.attach(MIMEText(body, "plain"))

        try:
            with smtplib.SMTP(s.host, s.port, timeout=30) as server:
                server.ehlo()
                if s.use_tls:
                    server.starttls()
                    server.ehlo()
                if s.user and s.password:
                    server.login(s.user, s.password)
                server.send_message(msg)
        except (smtplib.SMTPException, OSError):
            logger.exception("Email delivery to %s failed", to_email)
            return False

        logger.info("Email sent to %s (%s)", to_email, subject)
        return True

    def send_otp_email(self, to_email: str, code: str, *, ttl_minutes: int) -> bool:
        subject = "TaskPulse - Email Verification Code"
        body = (
            f"Your TaskPulse verification code is: {code}\n\n"
            f"This code expires in {ttl_minutes} minutes.\n\n"
            "If you didn't request this, please ignore this email."
        )
        return self._send_plain_email(to_email, subject, body)

    def send_password_reset_email(self, to_email: str, code: str, *, ttl_minutes: int) -> bool:
        subject = "TaskPulse - Password Reset"
        body = (
            f"Your TaskPulse password reset code is: {code}\n\n"
            f"This code expires in {ttl_minutes} minutes.\n\n"
            "If you didn't request a password reset, you can ignore this email."
        )
        return self._send_plain_email(to_email, subject, body)
