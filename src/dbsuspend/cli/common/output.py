"""Output formatting utilities for the CLI."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

import questionary
from rich.console import Console
from rich.table import Table
from rich.theme import Theme

from dbsuspend.cli.common.tui_style import QUESTIONARY_STYLE_CONFIRM

_THEME = Theme(
    {
        "ok": "bold green",
        "warn": "yellow",
        "err": "bold red",
        "title": "bold cyan",
        "meta": "dim",
    }
)

console = Console(theme=_THEME)
err_console = Console(theme=_THEME, stderr=True)


@dataclass(frozen=True)
class Out:
    """Output formatter for CLI messages and tables."""

    def info(self, msg: str) -> None:
        """Print an info message."""
        console.print(f"[title]›[/] {msg}")

    @contextmanager
    def status(self, msg: str):
        """Show a transient status spinner while work is in progress."""
        with console.status(msg, spinner="dots"):
            yield

    def success(self, msg: str) -> None:
        """Print a success message."""
        console.print(f"[ok]✓[/] {msg}")

    def warn(self, msg: str) -> None:
        """Print a warning message."""
        console.print(f"[warn]⚠[/] {msg}")

    def error(self, msg: str) -> None:
        """Print an error message."""
        console.print(f"[err]✗[/] {msg}")

    def header(self, title: str) -> None:
        """Print a header message."""
        console.print(f"[title]{title}[/]")

    def kv(self, items: Mapping[str, Any]) -> None:
        """Print key-value pairs."""
        for k, v in items.items():
            console.print(f"[meta]{k}[/]: {v}")

    def confirm(self, message: str, *, default: bool = False) -> bool:
        """
        Ask the user for confirmation using a standardized Questionary prompt.

        Args:
            message: Confirmation question shown to the user.
            default: Default answer if the user just presses enter.

        Returns:
            True if the user confirms, False otherwise.
        """
        console.print("[meta]Use y/n then Enter[/]")

        prompt = questionary.confirm(
            f"[DBSUSPEND] {message}",
            default=default,
            style=QUESTIONARY_STYLE_CONFIRM,
            qmark="✦",
            auto_enter=False,
        )
        return bool(prompt.ask())

    def metrics_table(self, rows: Iterable[Any], title: str = "Database space") -> None:
        """
        Expects objects with .name .excluded .metrics (like dbsuspend.core.units.MetricsRow)
        """
        t = Table(title=title, show_lines=False)
        t.add_column("Database", style="ok", no_wrap=True)
        t.add_column("Excluded")
        t.add_column("Size GB", justify="right")
        t.add_column("Disk free GB", justify="right")
        t.add_column("Disk free %", justify="right")
        t.add_column("Whitespace GB", justify="right")
        t.add_column("Whitespace %", justify="right")
        t.add_column("Total free GB", justify="right")
        t.add_column("Total free %", justify="right", style="title")

        for r in rows:
            m = r.metrics
            excluded = "[warn]yes[/]" if r.excluded else "no"
            t.add_row(
                r.name,
                excluded,
                f"{m.size_gb:.1f}",
                f"{m.disk_free_gb:.1f}",
                str(m.disk_free_pct),
                f"{m.whitespace_gb:.1f}",
                str(m.whitespace_pct),
                f"{m.total_free_gb:.1f}",
                str(m.total_free_pct),
            )

        console.print(t)

    def decisions_table(self, decisions: Iterable[Any], title: str = "Changes") -> None:
        """
        Expects objects with .unit .excluded .action (like dbsuspend.core.units.Decision)
        """
        t = Table(title=title, show_lines=False)
        t.add_column("Database", style="ok", no_wrap=True)
        t.add_column("Action")
        t.add_column("Excluded")

        for d in decisions:
            action = d.action.value if hasattr(d.action, "value") else str(d.action)
            style = "warn" if action == "suspend" else "ok"
            t.add_row(
                d.unit,
                f"[{style}]{action}[/{style}]",
                "yes" if d.excluded else "no",
            )

        console.print(t)

    def failures_table(self, failures: Iterable[Any], title: str = "Failures") -> None:
        """
        Expects objects with .unit .stage .error (like dbsuspend.core.units.UnitFailure)
        """
        t = Table(title=title, show_lines=False)
        t.add_column("Database", style="ok", no_wrap=True)
        t.add_column("Step", style="meta")
        t.add_column("Error", style="err")

        for f in failures:
            t.add_row(str(f.unit), str(f.stage), str(f.error))

        console.print(t)


out = Out()
