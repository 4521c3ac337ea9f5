import shlex
import subprocess
from types import SimpleNamespace

import pytest

from dbsuspend.core.adapters.ssh import RemoteExecutionError, SshChannel


@pytest.fixture
def ssh_on_path(monkeypatch):
    monkeypatch.setattr(
        "dbsuspend.core.adapters.ssh.shutil.which", lambda name: f"/usr/bin/{name}"
    )


def test_command_quotes_remote_arguments():
    cmd = SshChannel("svc", connect_timeout=5).command(
        "mx02", "print(1)", ["/data/it's here.edb"]
    )

    assert cmd[:6] == ["ssh", "-o", "BatchMode=yes", "-o", "ConnectTimeout=5", "-l"]
    assert cmd[6:9] == ["svc", "--", "mx02"]
    assert shlex.split(cmd[9]) == ["python3", "-c", "print(1)", "/data/it's here.edb"]


def test_execute_returns_stdout(monkeypatch, ssh_on_path):
    seen = {}

    def _run(cmd, **kwargs):
        seen["cmd"] = cmd
        seen["timeout"] = kwargs["timeout"]
        return SimpleNamespace(returncode=0, stdout='{"total": 1, "free": 1}\n', stderr="")

    monkeypatch.setattr(subprocess, "run", _run)

    assert SshChannel().execute("mx02", "x", ["/p"], timeout=12) == '{"total": 1, "free": 1}\n'
    assert seen["timeout"] == 12
    assert "mx02" in seen["cmd"]


def test_execute_reports_remote_failure(monkeypatch, ssh_on_path):
    monkeypatch.setattr(
        subprocess,
        "run",
        lambda cmd, **kw: SimpleNamespace(
            returncode=1,
            stdout="",
            stderr="Traceback...\nFileNotFoundError: /p\n",
        ),
    )

    with pytest.raises(RemoteExecutionError, match="mx02: FileNotFoundError: /p"):
        SshChannel().execute("mx02", "x", ["/p"], timeout=5)


def test_execute_reports_timeout(monkeypatch, ssh_on_path):
    def _run(cmd, **kwargs):
        raise subprocess.TimeoutExpired(cmd, kwargs["timeout"])

    monkeypatch.setattr(subprocess, "run", _run)

    with pytest.raises(RemoteExecutionError, match="timed out"):
        SshChannel().execute("mx02", "x", [], timeout=3)


def test_execute_without_ssh_binary(monkeypatch):
    monkeypatch.setattr("dbsuspend.core.adapters.ssh.shutil.which", lambda name: None)

    with pytest.raises(RemoteExecutionError, match="not found"):
        SshChannel().execute("mx02", "x", [], timeout=3)
