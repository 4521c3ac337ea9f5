"""Run configuration bundles.

Settings are built once per invocation (usually from CLI options) and
passed explicitly to the components that need them.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

DEFAULT_SUBJECT = "Database Suspension Report"


@dataclass(frozen=True)
class ExportSettings:
    """Where the CSV report is written."""

    directory: Path


@dataclass(frozen=True)
class MailSettings:
    """SMTP delivery settings for the report mail."""

    smtp_server: str
    sender: str
    recipients: tuple[str, ...]
    smtp_port: int = 25
    username: str | None = None
    password: str | None = None
    use_tls: bool = False
    subject: str = DEFAULT_SUBJECT
    timeout: float = 30

    def __post_init__(self) -> None:
        if not self.recipients:
            raise ValueError("At least one mail recipient is required.")
        if not self.sender:
            raise ValueError("A mail sender is required.")
        if not self.smtp_server:
            raise ValueError("An SMTP server is required.")
        if not 0 < self.smtp_port < 65536:
            raise ValueError(f"Invalid SMTP port: {self.smtp_port}")

    @property
    def has_credentials(self) -> bool:
        """True if both username and password are set."""
        return bool(self.username and self.password)
