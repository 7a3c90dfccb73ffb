from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from types import ModuleType

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.service import AttendanceService
from .core.constants import DEFAULT_SESSION_DAYS, DEFAULT_VERIFICATION_HOURS
from .database.connection import DatabaseConnection, DBConfig
from .mail.mailer import Mailer, NullMailer, SMTPSettings, SmtpMailer
from .security.passwords import PasswordHasher
from .security.tokens import TokenCodec
from .users.mysql_user_repository import MySQLUserRepository
from .users.service import AuthService


@dataclass(frozen=True)
class Container:
    auth_service: AuthService
    attendance_service: AttendanceService


def build_mailer(settings: ModuleType) -> Mailer:
    verify_url = getattr(settings, "VERIFY_EMAIL_URL")
    if not getattr(settings, "MAIL_ENABLED", False):
        return NullMailer(verify_url=verify_url)

    return SmtpMailer(
        SMTPSettings(
            host=settings.MAIL_HOST,
            port=int(settings.MAIL_PORT),
            username=settings.MAIL_USERNAME,
            password=settings.MAIL_PASSWORD,
            sender=settings.MAIL_SENDER,
            use_tls=bool(settings.MAIL_USE_TLS),
        ),
        verify_url=verify_url,
        valid_hours=int(getattr(settings, "VERIFICATION_TOKEN_HOURS", DEFAULT_VERIFICATION_HOURS)),
    )


def build_services(*, users, attendance, tokens: TokenCodec, mailer: Mailer, settings=None) -> Container:
    session_days = int(getattr(settings, "SESSION_TOKEN_DAYS", DEFAULT_SESSION_DAYS))
    verification_hours = int(getattr(settings, "VERIFICATION_TOKEN_HOURS", DEFAULT_VERIFICATION_HOURS))

    auth_service = AuthService(
        users,
        PasswordHasher(),
        tokens,
        mailer,
        session_ttl=timedelta(days=session_days),
        verification_ttl=timedelta(hours=verification_hours),
    )
    attendance_service = AttendanceService(attendance, users)

    return Container(auth_service=auth_service, attendance_service=attendance_service)


def build_container(settings: ModuleType) -> Container:
    """Build process-wide resources once (pool, codec, mailer) and wire services."""
    conn = DatabaseConnection(DBConfig.from_dict(settings.DB_CONFIG))

    return build_services(
        users=MySQLUserRepository(conn),
        attendance=MySQLAttendanceRepository(conn),
        tokens=TokenCodec(settings.JWT_SECRET, algorithm=getattr(settings, "JWT_ALGORITHM", "HS256")),
        mailer=build_mailer(settings),
        settings=settings,
    )
