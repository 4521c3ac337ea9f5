"""Application context management for the CLI."""

from dataclasses import dataclass
from pathlib import Path

from dbsuspend.core.adapters.jsoninventory import JsonInventoryAdapter
from dbsuspend.core.adapters.ssh import SshChannel
from dbsuspend.core.volumes import RemoteVolumeQuerier, VolumeCollector


@dataclass
class RunAppContext:
    """Application context holding the inventory adapter and volume collector."""

    inventory: JsonInventoryAdapter
    collector: VolumeCollector


def build_run_context(
    inventory_path: Path | None,
    *,
    local_host: str | None = None,
    ssh_user: str | None = None,
    timeout: float = 60,
) -> RunAppContext:
    """Build and return the context used by a provisioning pass.

    Args:
        inventory_path: Inventory file; None selects the env/default path.
        local_host: Name of this machine, if hostname detection is not wanted.
        ssh_user: User for remote volume queries.
        timeout: Timeout in seconds for each remote volume query.

    Returns:
        RunAppContext: Context with inventory adapter and volume collector.
    """
    inventory = JsonInventoryAdapter(inventory_path)
    remote = RemoteVolumeQuerier(SshChannel(ssh_user), timeout=timeout)
    collector = VolumeCollector(remote, local_host=local_host)
    return RunAppContext(inventory=inventory, collector=collector)
