"""Provisioning pass orchestration.

This module runs the per-unit pipeline (volume facts, metrics, decision,
flag write) for every unit in the catalog. Units are independent: a failure
in one unit is recorded and never stops the others. The work may be spread
over a bounded thread pool; results are merged into a name-indexed table
on the calling thread, so no shared state is written from the workers.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Iterable, Protocol

from dbsuspend.core.decisions import decide, reason_for
from dbsuspend.core.inventory import ExclusionWriter
from dbsuspend.core.metrics import compute_metrics
from dbsuspend.core.units import (
    Action,
    Decision,
    MetricsRow,
    Unit,
    UnitFailure,
    VolumeFacts,
)

logger = logging.getLogger(__name__)

STAGE_VOLUME = "volume"
STAGE_METRICS = "metrics"
STAGE_WRITE = "write"


class FactsCollector(Protocol):
    """Interface for collecting volume facts for a unit."""

    def collect(self, unit: Unit) -> VolumeFacts:
        """Return volume facts for `unit` or raise."""
        ...


@dataclass(frozen=True)
class UnitOutcome:
    """Result of processing a single unit."""

    unit: str
    row: MetricsRow | None = None
    decision: Decision | None = None
    applied: bool = False
    failure: UnitFailure | None = None


@dataclass
class PassResult:
    """
    Outcome of a complete pass.

    Attributes:
        table: Metrics rows indexed by unit name. `excluded` reflects the
            last confirmed flag of each unit.
        decisions: Every decision taken, including `none` actions.
        applied: Decisions whose flag write succeeded.
        failures: Per-unit failures, in unit-name order.
    """

    table: dict[str, MetricsRow] = field(default_factory=dict)
    decisions: list[Decision] = field(default_factory=list)
    applied: list[Decision] = field(default_factory=list)
    failures: list[UnitFailure] = field(default_factory=list)

    @property
    def rows(self) -> list[MetricsRow]:
        """Metrics rows sorted by unit name."""
        return [self.table[name] for name in sorted(self.table)]

    @property
    def ok(self) -> bool:
        """True if no unit failed."""
        return not self.failures


def process_unit(
    unit: Unit,
    threshold: int,
    collector: FactsCollector,
    writer: ExclusionWriter,
    *,
    dry_run: bool = False,
) -> UnitOutcome:
    """
    Run the full pipeline for one unit.

    Steps run strictly in order and stop at the first failure. A failed
    flag write keeps the observed flag in the returned row.
    """
    try:
        facts = collector.collect(unit)
    except Exception as exc:  # noqa: BLE001
        return _failed(unit, STAGE_VOLUME, exc)

    try:
        metrics = compute_metrics(unit, facts)
    except Exception as exc:  # noqa: BLE001
        return _failed(unit, STAGE_METRICS, exc)

    row = MetricsRow(name=unit.name, excluded=unit.excluded, metrics=metrics)
    decision = decide(unit.name, unit.excluded, metrics.total_free_pct, threshold)

    if decision.action == Action.NONE or dry_run:
        return UnitOutcome(unit=unit.name, row=row, decision=decision)

    try:
        writer.set_excluded(unit.name, decision.excluded, reason_for(decision))
    except Exception as exc:  # noqa: BLE001
        failure = _failure(unit.name, STAGE_WRITE, exc)
        return UnitOutcome(unit=unit.name, row=row, decision=decision, failure=failure)

    logger.info(
        "%s: %s (total free %d%%, threshold %d%%)",
        unit.name,
        "suspended" if decision.action == Action.SUSPEND else "resumed",
        metrics.total_free_pct,
        threshold,
    )
    return UnitOutcome(
        unit=unit.name,
        row=row.with_excluded(decision.excluded),
        decision=decision,
        applied=True,
    )


def _failure(name: str, stage: str, exc: Exception) -> UnitFailure:
    message = str(exc) or type(exc).__name__
    logger.warning("%s: %s step failed: %s", name, stage, message)
    return UnitFailure(unit=name, stage=stage, error=message)


def _failed(unit: Unit, stage: str, exc: Exception) -> UnitOutcome:
    return UnitOutcome(unit=unit.name, failure=_failure(unit.name, stage, exc))


def run_pass(
    units: Iterable[Unit],
    threshold: int,
    collector: FactsCollector,
    writer: ExclusionWriter,
    *,
    max_parallel: int = 1,
    dry_run: bool = False,
) -> PassResult:
    """
    Evaluate every unit and apply the resulting admission changes.

    Args:
        units: Units to process (normally the catalog listing).
        threshold: Minimum total free percentage to stay included.
        collector: Volume facts collector.
        writer: Inventory adapter used to persist exclusion flags.
        max_parallel: Maximum number of units processed concurrently.
        dry_run: Compute decisions without writing any flag.

    Returns:
        PassResult with the metrics table, decisions and failures.
    """
    if max_parallel < 1:
        raise ValueError("max_parallel must be >= 1")

    units = list(units)
    if max_parallel == 1 or len(units) <= 1:
        outcomes = [
            process_unit(u, threshold, collector, writer, dry_run=dry_run)
            for u in units
        ]
    else:
        with ThreadPoolExecutor(max_workers=max_parallel) as pool:
            outcomes = list(
                pool.map(
                    lambda u: process_unit(
                        u, threshold, collector, writer, dry_run=dry_run
                    ),
                    units,
                )
            )

    return _merge(outcomes)


def pending_changes(result: PassResult) -> list[Decision]:
    """Return decisions that still need a flag write."""
    applied = {d.unit for d in result.applied}
    return [
        d
        for d in result.decisions
        if d.action != Action.NONE
        and d.unit not in applied
        and result.table[d.unit].excluded != d.excluded
    ]


def apply_decisions(result: PassResult, writer: ExclusionWriter) -> PassResult:
    """
    Apply the pending decisions of a dry-run pass.

    Writes are done one unit at a time. Failed writes are added to the
    failures and leave the unit's row untouched.
    """
    for decision in pending_changes(result):
        try:
            writer.set_excluded(decision.unit, decision.excluded, reason_for(decision))
        except Exception as exc:  # noqa: BLE001
            result.failures.append(_failure(decision.unit, STAGE_WRITE, exc))
            continue
        result.table[decision.unit] = result.table[decision.unit].with_excluded(
            decision.excluded
        )
        result.applied.append(decision)

    result.failures.sort(key=lambda f: f.unit)
    result.applied.sort(key=lambda d: d.unit)
    return result


def _merge(outcomes: Iterable[UnitOutcome]) -> PassResult:
    result = PassResult()
    for outcome in sorted(outcomes, key=lambda o: o.unit):
        if outcome.row is not None:
            result.table[outcome.unit] = outcome.row
        if outcome.decision is not None:
            result.decisions.append(outcome.decision)
            if outcome.applied:
                result.applied.append(outcome.decision)
        if outcome.failure is not None:
            result.failures.append(outcome.failure)
    return result
