"""Volume fact collection.

Each unit's data file lives on some volume of the unit's host. This module
resolves the capacity and free bytes of that volume, either directly when
the unit lives on this machine or through a remote channel otherwise.
Queries to the same host are serialized; different hosts are independent.
"""

from __future__ import annotations

import json
import logging
import shutil
import socket
import threading
from typing import Protocol, Sequence

from dbsuspend.core.units import DbSuspendError, Unit, VolumeFacts

logger = logging.getLogger(__name__)

# Runs on the remote host; prints the usage of the volume holding argv[1].
VOLUME_PROBE = (
    "import json, shutil, sys\n"
    "u = shutil.disk_usage(sys.argv[1])\n"
    "print(json.dumps({'total': u.total, 'free': u.free}))\n"
)


class VolumeQueryError(DbSuspendError):
    """Raised when volume facts for a unit cannot be collected."""

    def __init__(self, unit: str, cause: str):
        super().__init__(f"{unit}: {cause}")
        self.unit = unit
        self.cause = cause


class RemoteChannel(Protocol):
    """Interface for running a Python snippet on another host."""

    def execute(
        self,
        host: str,
        script: str,
        args: Sequence[str],
        *,
        timeout: float,
    ) -> str:
        """Run `script` with `args` on `host` and return its stdout."""
        ...


class VolumeQuerier(Protocol):
    """Interface for resolving the volume that holds a path."""

    def volume_info(self, host: str, path: str) -> tuple[int, int]:
        """Return `(total, free)` bytes of the volume holding `path`."""
        ...


class LocalVolumeQuerier:
    """Query volumes mounted on this machine."""

    def volume_info(self, host: str, path: str) -> tuple[int, int]:
        usage = shutil.disk_usage(path)
        return usage.total, usage.free


class RemoteVolumeQuerier:
    """Query volumes on another host through a remote channel."""

    def __init__(self, channel: RemoteChannel, *, timeout: float = 60) -> None:
        self.channel = channel
        self.timeout = timeout

    def volume_info(self, host: str, path: str) -> tuple[int, int]:
        raw = self.channel.execute(host, VOLUME_PROBE, [path], timeout=self.timeout)
        return parse_probe_output(raw)


def parse_probe_output(raw: str) -> tuple[int, int]:
    """Parse the JSON line printed by the remote volume probe."""
    lines = [line for line in (raw or "").splitlines() if line.strip()]
    if not lines:
        raise ValueError("volume probe returned no output")
    try:
        payload = json.loads(lines[-1])
        return int(payload["total"]), int(payload["free"])
    except (json.JSONDecodeError, KeyError, TypeError, ValueError) as exc:
        raise ValueError(f"unexpected volume probe output: {lines[-1]!r}") from exc


def local_host_names(local_host: str | None = None) -> set[str]:
    """Return the lower-cased names that identify this machine."""
    if local_host:
        names = {local_host}
    else:
        names = {socket.gethostname(), socket.getfqdn()}
    names |= {n.split(".", 1)[0] for n in names}
    return {n.lower() for n in names if n}


class VolumeCollector:
    """
    Collect volume facts for units, locally or remotely.

    The querier is picked per unit by comparing the unit host with the
    local host identity. The metrics and decision steps never see which
    querier served a unit.
    """

    def __init__(
        self,
        remote: VolumeQuerier,
        *,
        local: VolumeQuerier | None = None,
        local_host: str | None = None,
    ) -> None:
        self.remote = remote
        self.local = local or LocalVolumeQuerier()
        self._local_names = local_host_names(local_host)
        self._host_locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def is_local(self, host: str) -> bool:
        """Return True if `host` names this machine."""
        host = host.strip().lower()
        return host in self._local_names or host.split(".", 1)[0] in self._local_names

    def querier_for(self, unit: Unit) -> VolumeQuerier:
        """Return the querier that serves `unit`."""
        return self.local if self.is_local(unit.host) else self.remote

    def _host_lock(self, host: str) -> threading.Lock:
        with self._locks_guard:
            return self._host_locks.setdefault(host.strip().lower(), threading.Lock())

    def collect(self, unit: Unit) -> VolumeFacts:
        """
        Return the volume facts for a unit.

        Raises:
            VolumeQueryError: If the volume cannot be resolved or the query
                fails for any reason.
        """
        querier = self.querier_for(unit)
        try:
            with self._host_lock(unit.host):
                total, free = querier.volume_info(unit.host, unit.storage_path)
        except Exception as exc:  # noqa: BLE001
            raise VolumeQueryError(unit.name, str(exc) or type(exc).__name__) from exc

        if total <= 0:
            raise VolumeQueryError(unit.name, f"volume reports capacity {total}")
        if free < 0 or free > total:
            raise VolumeQueryError(
                unit.name, f"volume reports {free} free of {total} bytes"
            )
        logger.debug("%s: volume total=%d free=%d", unit.name, total, free)
        return VolumeFacts(total=total, free=free)
