from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Ensure tests always import the local src tree, not an older installed wheel.
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
sys.path.insert(0, str(SRC))

from dbsuspend.core.units import Unit, VolumeFacts  # noqa: E402

GIB = 1024**3


def make_unit(
    name: str = "DB01",
    *,
    host: str = "mx01",
    size: int = 100 * GIB,
    whitespace: int = 0,
    excluded: bool = False,
) -> Unit:
    return Unit(
        name=name,
        host=host,
        storage_path=f"/data/{name}/{name}.edb",
        size=size,
        whitespace=whitespace,
        excluded=excluded,
    )


class StubCollector:
    """Returns canned volume facts per unit; raises for names in `failing`."""

    def __init__(self, facts: dict[str, VolumeFacts], failing: set[str] = frozenset()):
        self.facts = facts
        self.failing = set(failing)

    def collect(self, unit: Unit) -> VolumeFacts:
        if unit.name in self.failing:
            raise RuntimeError(f"{unit.name}: volume not found")
        return self.facts[unit.name]


class StubWriter:
    """Records flag writes; raises for names in `failing`."""

    def __init__(self, failing: set[str] = frozenset()):
        self.failing = set(failing)
        self.calls: list[tuple[str, bool, str | None]] = []

    def set_excluded(self, name: str, excluded: bool, reason: str | None) -> None:
        if name in self.failing:
            raise RuntimeError("access denied")
        self.calls.append((name, excluded, reason))


@pytest.fixture
def writer() -> StubWriter:
    return StubWriter()
