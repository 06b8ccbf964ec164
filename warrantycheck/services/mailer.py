"""Outbound mail over SMTP.

OTP mail goes through the system relay configured in settings; report mail
goes through the relay each user stores in their panel. Delivery failures
are logged and reported as False, never raised.
"""

import logging
import smtplib
from dataclasses import dataclass
from email.mime.application import MIMEApplication
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from warrantycheck.config import settings
from warrantycheck.utils.constants import OTP_EMAIL_SUBJECT

logger = logging.getLogger(__name__)


@dataclass
class SmtpConfig:
    host: str
    port: int
    username: str = ""
    password: str = ""
    secure: bool = True  # implicit TLS (SMTPS); False means STARTTLS when offered
    sender: str = ""
    timeout: float = 30.0

    @property
    def is_complete(self) -> bool:
        return bool(self.host and self.port)


def system_smtp_config() -> SmtpConfig:
    """Relay used for OTP delivery, from WC_SMTP_* settings."""
    return SmtpConfig(
        host=settings.smtp_host,
        port=settings.smtp_port,
        username=settings.smtp_user,
        password=settings.smtp_pass,
        secure=settings.smtp_port == 465,
        sender=settings.smtp_from or settings.smtp_user,
    )


def _build_message(
    sender: str,
    to: str,
    subject: str,
    body: str,
    attachments: list[tuple[str, str]] | tuple = (),
) -> MIMEMultipart:
    msg = MIMEMultipart()
    msg["Subject"] = subject
    msg["From"] = sender
    msg["To"] = to
    msg.attach(MIMEText(body, "plain"))
    for filename, content in attachments:
        part = MIMEApplication(content.encode("utf-8"), Name=filename)
        part["Content-Disposition"] = f'attachment; filename="{filename}"'
        msg.attach(part)
    return msg


def send_mail(
    config: SmtpConfig,
    to: str,
    subject: str,
    body: str,
    attachments: list[tuple[str, str]] | tuple = (),
) -> bool:
    """Send one message. Returns True on success; failures are logged."""
    if not config.is_complete:
        logger.warning(f"SMTP relay not configured; not sending '{subject}' to {to}")
        return False

    sender = config.sender or config.username
    msg = _build_message(sender, to, subject, body, attachments)

    try:
        if config.secure:
            server = smtplib.SMTP_SSL(config.host, config.port, timeout=config.timeout)
        else:
            server = smtplib.SMTP(config.host, config.port, timeout=config.timeout)
        with server:
            if not config.secure:
                server.ehlo()
                if server.has_extn("starttls"):
                    server.starttls()
                    server.ehlo()
            if config.username:
                server.login(config.username, config.password)
            server.sendmail(sender, [to], msg.as_string())
    except (smtplib.SMTPException, OSError) as e:
        logger.error(f"Failed to send '{subject}' to {to} via {config.host}:{config.port}: {e}")
        return False

    logger.info(f"Sent '{subject}' to {to}")
    return True


def send_otp_email(email: str, code: str) -> bool:
    return send_mail(
        system_smtp_config(),
        to=email,
        subject=OTP_EMAIL_SUBJECT,
        body=f"Your one-time password is: {code}",
    )
