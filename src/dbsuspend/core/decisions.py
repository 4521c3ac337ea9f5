"""Admission decision logic.

A unit is either included in (or excluded from) new workload placement.
Reaching the threshold counts as not enough space: a unit is suspended at
`total_free_pct <= threshold` and resumed only at `total_free_pct >
threshold`, so a unit sitting exactly on the threshold never flaps.
"""

from __future__ import annotations

from dbsuspend.core.units import Action, Decision

SUSPEND_REASON = "Suspended automatically: total free space at or below threshold"


def decide(
    unit: str,
    excluded: bool,
    total_free_pct: int,
    threshold: int,
) -> Decision:
    """
    Decide the admission flag for a unit from its observed state.

    Args:
        unit: Name of the unit the decision is for.
        excluded: Current admission-exclusion flag.
        total_free_pct: Total free percentage computed for the unit.
        threshold: Minimum free percentage required to accept new workloads.

    Returns:
        Decision with the flag the unit should carry and the action needed
        to get there.
    """
    enough_space = total_free_pct > threshold

    if excluded and enough_space:
        return Decision(unit=unit, excluded=False, action=Action.RESUME)
    if not excluded and not enough_space:
        return Decision(unit=unit, excluded=True, action=Action.SUSPEND)
    return Decision(unit=unit, excluded=excluded, action=Action.NONE)


def reason_for(decision: Decision) -> str | None:
    """Return the exclusion reason to store alongside a decision."""
    return SUSPEND_REASON if decision.action == Action.SUSPEND else None
