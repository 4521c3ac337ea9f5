"""Unit catalog lookup.

The inventory is the system of record for database units and their
admission-exclusion flags. This module defines the adapter interface the
core relies on and the catalog listing used at the start of every pass.
"""

from __future__ import annotations

import logging
from typing import Iterable, Protocol

from dbsuspend.core.units import DbSuspendError, Unit

logger = logging.getLogger(__name__)


class CatalogError(DbSuspendError):
    """Raised when the unit catalog cannot be listed."""


class InventoryAdapter(Protocol):
    """Interface for reading units and writing their exclusion flags."""

    def list_units(self) -> list[Unit]:
        """Return every unit known to the inventory."""
        ...

    def set_excluded(self, name: str, excluded: bool, reason: str | None) -> None:
        """Persist the exclusion flag (and reason) for one unit."""
        ...


class ExclusionWriter(Protocol):
    """Subset of the inventory interface used to apply decisions."""

    def set_excluded(self, name: str, excluded: bool, reason: str | None) -> None:
        """Persist the exclusion flag (and reason) for one unit."""
        ...


def list_units(
    adapter: InventoryAdapter,
    exclude_names: Iterable[str] = (),
) -> list[Unit]:
    """
    List manageable units, sorted by name.

    Args:
        adapter: Inventory adapter used to fetch units.
        exclude_names: Unit names to leave out of the pass. Matching is
            case-insensitive.

    Returns:
        Units not named in `exclude_names`, sorted by name.

    Raises:
        CatalogError: If the inventory cannot be read.
    """
    skip = {n.strip().lower() for n in exclude_names if n and n.strip()}
    try:
        units = adapter.list_units()
    except Exception as exc:  # noqa: BLE001
        raise CatalogError(f"Could not list database units: {exc}") from exc

    kept = [u for u in units if u.name.lower() not in skip]
    if len(kept) != len(units):
        logger.debug("Skipping %d excluded unit(s)", len(units) - len(kept))
    return sorted(kept, key=lambda u: u.name)
