"""Report delivery over SMTP."""

from __future__ import annotations

import logging
import smtplib
from email.mime.application import MIMEApplication
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formatdate
from pathlib import Path

from dbsuspend.core.settings import MailSettings
from dbsuspend.core.units import DbSuspendError

logger = logging.getLogger(__name__)

BODY = (
    "Please find attached the database suspension report.\n\n"
    "Databases at or below the free space threshold are excluded from "
    "provisioning until enough space is available again.\n"
)


class MailError(DbSuspendError):
    """Raised when the report mail cannot be sent."""


def build_message(report: Path, settings: MailSettings) -> MIMEMultipart:
    """Build the report mail with the CSV attached."""
    message = MIMEMultipart()
    message["From"] = settings.sender
    message["To"] = ", ".join(settings.recipients)
    message["Subject"] = settings.subject
    message["Date"] = formatdate(localtime=True)
    message.attach(MIMEText(BODY, "plain", "utf-8"))

    attachment = MIMEApplication(report.read_bytes(), _subtype="csv")
    attachment.add_header("Content-Disposition", "attachment", filename=report.name)
    message.attach(attachment)
    return message


def send_report(report: Path | str, settings: MailSettings) -> None:
    """
    Send an exported report to the configured recipients.

    Raises:
        MailError: If the attachment cannot be read or delivery fails.
    """
    report = Path(report)
    try:
        payload = build_message(report, settings).as_string()
    except OSError as exc:
        raise MailError(f"Could not read report {report}: {exc}") from exc

    try:
        with smtplib.SMTP(
            settings.smtp_server, settings.smtp_port, timeout=settings.timeout
        ) as client:
            if settings.use_tls:
                client.starttls()
            if settings.has_credentials:
                client.login(settings.username, settings.password)
            client.sendmail(settings.sender, list(settings.recipients), payload)
    except (smtplib.SMTPException, OSError) as exc:
        raise MailError(
            f"Could not send report via {settings.smtp_server}:{settings.smtp_port}: {exc}"
        ) from exc
    logger.info("Report %s sent to %s", report.name, ", ".join(settings.recipients))
