from __future__ import annotations

import logging
import shlex
import shutil
import subprocess
from typing import Sequence

from dbsuspend.core.units import DbSuspendError

logger = logging.getLogger(__name__)


class RemoteExecutionError(DbSuspendError):
    """Raised when a command cannot be run on a remote host."""


class SshChannel:
    """Run short Python snippets on remote hosts over OpenSSH.

    The remote command line is quoted for a POSIX shell, so the login shell
    of the remote account must be sh-compatible (bash, dash, zsh). Windows
    OpenSSH hosts need their DefaultShell set to a POSIX shell; with the
    default cmd.exe the quoted command is mis-parsed.
    """

    def __init__(
        self,
        user: str | None = None,
        *,
        connect_timeout: int = 10,
        python: str = "python3",
        ssh_binary: str = "ssh",
    ) -> None:
        self.user = user
        self.connect_timeout = connect_timeout
        self.python = python
        self.ssh_binary = ssh_binary

    def command(self, host: str, script: str, args: Sequence[str]) -> list[str]:
        """Return the argv used to run `script` with `args` on `host`."""
        cmd = [
            self.ssh_binary,
            "-o",
            "BatchMode=yes",
            "-o",
            f"ConnectTimeout={self.connect_timeout}",
        ]
        if self.user:
            cmd += ["-l", self.user]
        # ssh joins remote argv with spaces, so each piece must be shell-quoted
        remote = [self.python, "-c", script, *args]
        cmd += ["--", host, " ".join(shlex.quote(part) for part in remote)]
        return cmd

    def execute(
        self,
        host: str,
        script: str,
        args: Sequence[str],
        *,
        timeout: float,
    ) -> str:
        """Run a Python snippet on `host` and return its stdout."""
        if shutil.which(self.ssh_binary) is None:
            raise RemoteExecutionError(f"'{self.ssh_binary}' was not found on PATH")

        cmd = self.command(host, script, args)
        logger.debug("Running remote command on %s", host)
        try:
            proc = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as exc:
            raise RemoteExecutionError(
                f"{host}: remote command timed out after {timeout:g}s"
            ) from exc
        except OSError as exc:
            raise RemoteExecutionError(f"{host}: {exc}") from exc

        if proc.returncode != 0:
            detail = (proc.stderr or proc.stdout or "").strip().splitlines()
            reason = detail[-1] if detail else f"exit code {proc.returncode}"
            raise RemoteExecutionError(f"{host}: {reason}")
        return proc.stdout
