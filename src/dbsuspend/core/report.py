"""CSV export of the metrics table."""

from __future__ import annotations

import csv
import datetime as dt
from pathlib import Path
from typing import Iterable

from dbsuspend.core.settings import ExportSettings
from dbsuspend.core.units import DbSuspendError, MetricsRow, SpaceMetrics

REPORT_SUFFIX = "DBSuspensionReport.csv"
DELIMITER = ";"
HEADER = (
    "Name",
    "Excluded",
    "SizeGB",
    "DiskFreeGB",
    "DiskFreePct",
    "WhitespaceGB",
    "WhitespacePct",
    "TotalFreeGB",
    "TotalFreePct",
)


class ReportError(DbSuspendError):
    """Raised when the report cannot be written or read."""


def report_filename(today: dt.date | None = None) -> str:
    """Return the report file name for a given day (default: today)."""
    day = today or dt.date.today()
    return f"{day.isoformat()} {REPORT_SUFFIX}"


def _row_values(row: MetricsRow) -> list[str]:
    m = row.metrics
    return [
        row.name,
        str(row.excluded),
        f"{m.size_gb:.1f}",
        f"{m.disk_free_gb:.1f}",
        str(m.disk_free_pct),
        f"{m.whitespace_gb:.1f}",
        str(m.whitespace_pct),
        f"{m.total_free_gb:.1f}",
        str(m.total_free_pct),
    ]


def export_report(
    rows: Iterable[MetricsRow],
    settings: ExportSettings,
    *,
    today: dt.date | None = None,
) -> Path:
    """
    Write the metrics table as a `;`-separated UTF-8 file.

    Rows are written in unit-name order regardless of input order.

    Returns:
        Path of the written report.

    Raises:
        ReportError: If the file cannot be written.
    """
    path = Path(settings.directory) / report_filename(today)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8", newline="") as fh:
            writer = csv.writer(fh, delimiter=DELIMITER)
            writer.writerow(HEADER)
            for row in sorted(rows, key=lambda r: r.name):
                writer.writerow(_row_values(row))
    except OSError as exc:
        raise ReportError(f"Could not write report {path}: {exc}") from exc
    return path


def _parse_bool(value: str) -> bool:
    v = value.strip().lower()
    if v in {"true", "1", "yes"}:
        return True
    if v in {"false", "0", "no"}:
        return False
    raise ValueError(f"not a boolean: {value!r}")


def read_report(path: Path | str) -> list[MetricsRow]:
    """Parse a report written by `export_report`."""
    path = Path(path)
    try:
        with path.open(encoding="utf-8", newline="") as fh:
            reader = csv.reader(fh, delimiter=DELIMITER)
            header = next(reader, None)
            if header is None or tuple(header) != HEADER:
                raise ReportError(f"{path}: unexpected report header {header!r}")
            rows: list[MetricsRow] = []
            for lineno, values in enumerate(reader, start=2):
                if not values:
                    continue
                try:
                    rows.append(_parse_row(values))
                except (TypeError, ValueError) as exc:
                    raise ReportError(f"{path}:{lineno}: {exc}") from exc
    except OSError as exc:
        raise ReportError(f"Could not read report {path}: {exc}") from exc
    return rows


def _parse_row(values: list[str]) -> MetricsRow:
    if len(values) != len(HEADER):
        raise ValueError(f"expected {len(HEADER)} columns, got {len(values)}")
    name, excluded, size, disk_free, disk_pct, ws, ws_pct, total, total_pct = values
    return MetricsRow(
        name=name,
        excluded=_parse_bool(excluded),
        metrics=SpaceMetrics(
            size_gb=float(size),
            disk_free_gb=float(disk_free),
            disk_free_pct=int(disk_pct),
            whitespace_gb=float(ws),
            whitespace_pct=int(ws_pct),
            total_free_gb=float(total),
            total_free_pct=int(total_pct),
        ),
    )
