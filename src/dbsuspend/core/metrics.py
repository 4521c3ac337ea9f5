"""Space metrics calculation.

Turns a unit's size and whitespace plus its volume facts into the figures
used for reporting and for the admission decision. All rounding is half
away from zero; Python's built-in round() rounds half to even and is not
used here.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from dbsuspend.core.units import DbSuspendError, SpaceMetrics, Unit, VolumeFacts

GIB = 1024**3


class MetricsError(DbSuspendError):
    """Raised when metrics cannot be computed for a unit."""


def round_half_up(value: Decimal, places: int = 0) -> Decimal:
    """Round a decimal half away from zero to `places` decimal places."""
    return value.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)


def percent(part: int, whole: int) -> int:
    """Return `part / whole` as a whole percentage."""
    return int(round_half_up(Decimal(part) * 100 / Decimal(whole)))


def to_gb(num_bytes: int) -> float:
    """Convert bytes to binary gigabytes with one decimal place."""
    return float(round_half_up(Decimal(num_bytes) / GIB, 1))


def compute_metrics(unit: Unit, facts: VolumeFacts) -> SpaceMetrics:
    """
    Compute the space metrics for a unit.

    Args:
        unit: Unit providing size and whitespace.
        facts: Capacity and free bytes of the unit's volume.

    Returns:
        SpaceMetrics for the unit.

    Raises:
        MetricsError: If the unit size or the volume capacity is zero.
    """
    if unit.size <= 0:
        raise MetricsError(f"{unit.name}: unit size is unknown or zero")
    if facts.total <= 0:
        raise MetricsError(f"{unit.name}: volume capacity is zero")

    total_free = facts.free + unit.whitespace
    return SpaceMetrics(
        size_gb=to_gb(unit.size),
        disk_free_gb=to_gb(facts.free),
        disk_free_pct=percent(facts.free, facts.total),
        whitespace_gb=to_gb(unit.whitespace),
        whitespace_pct=percent(unit.whitespace, unit.size),
        total_free_gb=to_gb(total_free),
        total_free_pct=percent(total_free, facts.total),
    )
