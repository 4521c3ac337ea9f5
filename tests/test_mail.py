import smtplib
from email import message_from_string

import pytest

from dbsuspend.core.mail import BODY, MailError, build_message, send_report
from dbsuspend.core.settings import DEFAULT_SUBJECT, MailSettings


class _SMTP:
    instances: list["_SMTP"] = []

    def __init__(self, host, port, timeout=None):
        self.host = host
        self.port = port
        self.timeout = timeout
        self.calls: list[tuple] = []
        _SMTP.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def starttls(self):
        self.calls.append(("starttls",))

    def login(self, user, password):
        self.calls.append(("login", user, password))

    def sendmail(self, sender, recipients, payload):
        self.calls.append(("sendmail", sender, recipients, payload))


@pytest.fixture
def smtp(monkeypatch):
    _SMTP.instances = []
    monkeypatch.setattr(smtplib, "SMTP", _SMTP)
    return _SMTP


@pytest.fixture
def report(tmp_path):
    path = tmp_path / "2024-01-01 DBSuspensionReport.csv"
    path.write_text("Name;Excluded\nDB01;False\n", encoding="utf-8")
    return path


def _settings(**kwargs) -> MailSettings:
    base = dict(
        smtp_server="smtp.example.com",
        sender="dbsuspend@example.com",
        recipients=("ops@example.com", "dba@example.com"),
    )
    base.update(kwargs)
    return MailSettings(**base)


def test_mail_settings_validate_required_fields():
    with pytest.raises(ValueError, match="recipient"):
        _settings(recipients=())
    with pytest.raises(ValueError, match="port"):
        _settings(smtp_port=0)
    assert _settings().subject == DEFAULT_SUBJECT


def test_build_message_attaches_report(report):
    msg = message_from_string(build_message(report, _settings()).as_string())

    parts = list(msg.walk())
    assert msg["Subject"] == "Database Suspension Report"
    assert msg["To"] == "ops@example.com, dba@example.com"
    assert parts[1].get_payload(decode=True).decode("utf-8") == BODY
    assert parts[2].get_filename() == report.name
    assert b"DB01;False" in parts[2].get_payload(decode=True)


def test_send_report_without_tls_or_credentials(smtp, report):
    send_report(report, _settings(smtp_port=2525))

    client = smtp.instances[0]
    assert (client.host, client.port) == ("smtp.example.com", 2525)
    assert [c[0] for c in client.calls] == ["sendmail"]
    assert client.calls[0][2] == ["ops@example.com", "dba@example.com"]


def test_send_report_with_tls_and_credentials(smtp, report):
    send_report(report, _settings(use_tls=True, username="u", password="p"))

    calls = smtp.instances[0].calls
    assert calls[0] == ("starttls",)
    assert calls[1] == ("login", "u", "p")
    assert calls[2][0] == "sendmail"


def test_send_report_skips_login_without_password(smtp, report):
    send_report(report, _settings(username="u"))

    assert [c[0] for c in smtp.instances[0].calls] == ["sendmail"]


def test_send_report_wraps_smtp_errors(monkeypatch, report):
    def _refuse(*args, **kwargs):
        raise ConnectionRefusedError("connection refused")

    monkeypatch.setattr(smtplib, "SMTP", _refuse)

    with pytest.raises(MailError, match="connection refused"):
        send_report(report, _settings())


def test_send_report_missing_attachment(smtp, tmp_path):
    with pytest.raises(MailError, match="Could not read"):
        send_report(tmp_path / "missing.csv", _settings())
