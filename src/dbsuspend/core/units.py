"""Core domain models for database space evaluation.

This module defines the data structures that flow through a single pass:
the catalog entry for a database unit, the facts gathered about its storage
volume, the derived space metrics, and the admission decision. They are
intentionally free of CLI, inventory and transport concerns.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum


class DbSuspendError(RuntimeError):
    """Base class for all errors raised by dbsuspend."""


@dataclass(frozen=True)
class Unit:
    """
    Represents a storage-backed database unit as listed by the inventory.

    Attributes:
        name: Unique identifier of the unit, used as sort and lookup key.
        host: Machine that owns the unit's storage.
        storage_path: Path to the unit's primary data file.
        size: Current on-disk size of the unit's data, in bytes.
        whitespace: Free space reclaimable inside the unit, in bytes.
        excluded: Current admission-exclusion flag.
    """

    name: str
    host: str
    storage_path: str
    size: int
    whitespace: int
    excluded: bool


@dataclass(frozen=True)
class VolumeFacts:
    """Capacity and free bytes of the volume holding a unit's data file."""

    total: int
    free: int


@dataclass(frozen=True)
class SpaceMetrics:
    """
    Normalized space figures for one unit.

    GB values are binary gigabytes rounded to one decimal place, percentages
    are whole integers. Percentages are not clamped to 0..100.
    """

    size_gb: float
    disk_free_gb: float
    disk_free_pct: int
    whitespace_gb: float
    whitespace_pct: int
    total_free_gb: float
    total_free_pct: int


class Action(str, Enum):
    """
    Admission change required for a unit.

    Values:
        NONE: The flag already reflects the observed space.
        RESUME: The unit is excluded but has enough space again.
        SUSPEND: The unit is included but is running out of space.
    """

    NONE = "none"
    RESUME = "resume"
    SUSPEND = "suspend"


@dataclass(frozen=True)
class Decision:
    """Outcome of the admission decision for a single unit."""

    unit: str
    excluded: bool
    action: Action


@dataclass(frozen=True)
class MetricsRow:
    """One line of the metrics table, as rendered and exported."""

    name: str
    excluded: bool
    metrics: SpaceMetrics

    def with_excluded(self, excluded: bool) -> MetricsRow:
        """Return a copy of this row carrying a confirmed exclusion flag."""
        return replace(self, excluded=excluded)


@dataclass(frozen=True)
class UnitFailure:
    """A per-unit failure recorded during a pass."""

    unit: str
    stage: str
    error: str
