from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from .common.datetime_utils import now_local
from .database.connection import DBConfig, DatabaseConnection
from .notifications.email_service import Mailer, SMTPMailer, SMTPSettings
from .oauth.provider import GoogleLogin
from .otp.mysql_otp_repository import MySQLOTPRepository
from .otp.repository import OTPRepository
from .otp.service import OTPService
from .reports.mysql_report_repository import MySQLReportRepository
from .reports.repository import ReportRepository
from .reports.service import ReportService
from .security.context import CallerResolver
from .security.tokens import TokenCodec
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import AuthService, UserService
from .users.verification_service import AccountVerificationService


@dataclass(frozen=True)
class Container:
    users_repo: UserRepository
    otp_repo: OTPRepository
    reports_repo: ReportRepository

    tokens: TokenCodec
    caller_resolver: CallerResolver
    mailer: Mailer
    google_login: GoogleLogin

    auth_service: AuthService
    user_service: UserService
    otp_service: OTPService
    verification_service: AccountVerificationService
    report_service: ReportService


def assemble_container(
    *,
    users_repo: UserRepository,
    otp_repo: OTPRepository,
    reports_repo: ReportRepository,
    tokens: TokenCodec,
    mailer: Mailer,
    google_login: Optional[GoogleLogin] = None,
    expose_codes: bool = False,
    clock: Callable[[], datetime] = now_local,
) -> Container:
    """Wire services on top of the given repositories (real or in-memory)."""

    otp_service = OTPService(otp_repo, clock=clock)
    return Container(
        users_repo=users_repo,
        otp_repo=otp_repo,
        reports_repo=reports_repo,
        tokens=tokens,
        caller_resolver=CallerResolver(tokens, users_repo),
        mailer=mailer,
        google_login=google_login or GoogleLogin(client_id=None, client_secret=None),
        auth_service=AuthService(users_repo, tokens, clock=clock),
        user_service=UserService(users_repo),
        otp_service=otp_service,
        verification_service=AccountVerificationService(users_repo, otp_service, mailer, expose_codes=expose_codes),
        report_service=ReportService(reports_repo, clock=clock),
    )


def build_container(*, db_config: dict, settings) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))

    smtp = SMTPSettings(
        host=getattr(settings, "SMTP_HOST", None),
        port=int(getattr(settings, "SMTP_PORT", 587)),
        user=getattr(settings, "SMTP_USER", None),
        password=getattr(settings, "SMTP_PASSWORD", None),
        use_tls=bool(getattr(settings, "SMTP_USE_TLS", True)),
        sender=getattr(settings, "MAIL_FROM", "TaskPulse <noreply@taskpulse.local>"),
    )

    return assemble_container(
        users_repo=MySQLUserRepository(conn),
        otp_repo=MySQLOTPRepository(conn),
        reports_repo=MySQLReportRepository(conn),
        tokens=TokenCodec(
            getattr(settings, "JWT_SECRET", None) or settings.SECRET_KEY,
            expires_days=int(getattr(settings, "JWT_EXPIRES_DAYS", 7)),
        ),
        mailer=SMTPMailer(smtp),
        google_login=GoogleLogin(
            client_id=getattr(settings, "GOOGLE_CLIENT_ID", None),
            client_secret=getattr(settings, "GOOGLE_CLIENT_SECRET", None),
        ),
        expose_codes=bool(getattr(settings, "EXPOSE_DEV_CODES", False)),
    )
