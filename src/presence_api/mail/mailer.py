from __future__ import annotations

import logging
import smtplib
from dataclasses import dataclass
from email.message import EmailMessage
from typing import Protocol
from urllib.parse import urlencode

from jinja2 import Environment, PackageLoader, TemplateError, select_autoescape

logger = logging.getLogger(__name__)

VERIFY_SUBJECT = "Verify your email - Presence"


class Mailer(Protocol):
    """Outbound mail. Implementations report failure as ``False``, never raise."""

    def send_verification(self, *, email: str, full_name: str, token: str) -> bool:
        raise NotImplementedError


def build_verification_link(base_url: str, token: str) -> str:
    sep = "&" if "?" in base_url else "?"
    return f"{base_url}{sep}{urlencode({'token': token})}"


@dataclass(frozen=True)
class SMTPSettings:
    host: str
    port: int
    username: str
    password: str
    sender: str
    use_tls: bool = True
    timeout: float = 10.0


class SmtpMailer:
    def __init__(self, settings: SMTPSettings, *, verify_url: str, valid_hours: int = 24):
        self._settings = settings
        self._verify_url = verify_url
        self._valid_hours = int(valid_hours)
        self._env = Environment(
            loader=PackageLoader("presence_api", "templates"),
            autoescape=select_autoescape(["html"]),
        )

    def render_verification(self, *, full_name: str, link: str) -> str:
        template = self._env.get_template("email/verify_email.html")
        return template.render(full_name=full_name, link=link, valid_hours=self._valid_hours)

    def _send(self, msg: EmailMessage) -> None:
        s = self._settings
        with smtplib.SMTP(s.host, s.port, timeout=s.timeout) as smtp:
            if s.use_tls:
                smtp.starttls()
            if s.username:
                smtp.login(s.username, s.password)
            smtp.send_message(msg)

    def send_verification(self, *, email: str, full_name: str, token: str) -> bool:
        link = build_verification_link(self._verify_url, token)
        try:
            msg = EmailMessage()
            msg["Subject"] = VERIFY_SUBJECT
            msg["From"] = self._settings.sender
            msg["To"] = email
            msg.set_content(f"Hello {full_name},\n\nVerify your email: {link}\n")
            msg.add_alternative(self.render_verification(full_name=full_name, link=link), subtype="html")
            self._send(msg)
        except (smtplib.SMTPException, OSError, TemplateError):
            logger.exception("Failed to send verification email to %s", email)
            return False

        logger.info("Verification email sent to %s", email)
        return True


class NullMailer:
    """Used when mail is disabled: logs the link instead of sending it."""

    def __init__(self, *, verify_url: str):
        self._verify_url = verify_url

    def send_verification(self, *, email: str, full_name: str, token: str) -> bool:
        logger.info("Mail disabled; verification link for %s: %s", email, build_verification_link(self._verify_url, token))
        return True
