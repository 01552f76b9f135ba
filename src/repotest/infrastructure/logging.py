"""Logging & console helpers.

Features:
    * RichHandler based console logging (color, tracebacks)
    * Optional JSON logging mode (machine ingest, e.g. CI log collectors)
    * Helper utilities (`get_console`, `render_panel`, `render_results_table`)
      so service layers never import rich directly.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from collections.abc import Iterable
from typing import Any

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from repotest.domain.models import ProgramRun, TestResult

_INITIALIZED = False
_JSON_MODE = False
_CONSOLE: Console | None = None


class _JsonHandler(logging.Handler):
    """One JSON object per record on stderr (stdout stays free for command output)."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            data = {
                "level": record.levelname,
                "name": record.name,
                "message": record.getMessage(),
            }
            if record.exc_info:
                data["exc_info"] = logging.Formatter().formatException(record.exc_info)
            print(json.dumps(data, ensure_ascii=False), file=sys.stderr)
        except Exception:  # pragma: no cover
            self.handleError(record)


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in {"1", "true", "yes", "on"}


def setup_logging(
    level: str | None = None, json_mode: bool | None = None, *, force: bool = False
) -> None:
    """Install the root handler once; `force` re-installs it (mode switch).

    JSON mode comes from `json_mode`, else stays as previously chosen, else
    from the `LOG_JSON` env var.
    """
    global _INITIALIZED, _JSON_MODE
    if _INITIALIZED and not force:
        return
    if json_mode is None:
        json_mode = _JSON_MODE or _env_flag("LOG_JSON")
    _JSON_MODE = json_mode
    lvl_name = (level or os.getenv("LOG_LEVEL") or "INFO").upper()
    lvl = getattr(logging, lvl_name, logging.INFO)
    if not isinstance(lvl, int):
        lvl = logging.INFO
    handler: logging.Handler
    if _JSON_MODE:
        handler = _JsonHandler()
    else:
        handler = RichHandler(
            console=Console(stderr=True), rich_tracebacks=True, markup=False, show_path=False
        )
    logging.basicConfig(
        level=lvl,
        handlers=[handler],
        force=True,
        format="%(message)s",
        datefmt="%H:%M:%S",
    )
    _INITIALIZED = True


def enable_json_logging() -> None:
    """Switch to JSON logging, also after `setup_logging` already ran."""
    setup_logging(json_mode=True, force=True)


def json_logging_enabled() -> bool:
    return _INITIALIZED and _JSON_MODE


def get_console() -> Console:
    """Return the shared rich Console."""
    global _CONSOLE
    if _CONSOLE is None:
        _CONSOLE = Console()
    return _CONSOLE


def render_panel(title: str, body: str, *, style: str = "cyan") -> None:
    get_console().print(Panel.fit(body, title=title, border_style=style))


def render_results_table(
    rows: Iterable[ProgramRun | TestResult], *, title: str = "Test results"
) -> None:
    """Print one row per executed program (pass/fail plus degraded steps)."""
    table = Table(title=title)
    table.add_column("#", justify="right")
    table.add_column("Program")
    table.add_column("Result")
    table.add_column("Notes")
    for i, row in enumerate(rows, start=1):
        result = row.result if isinstance(row, ProgramRun) else row
        notes: list[str] = []
        if isinstance(row, ProgramRun):
            notes = [f"{s.step}: {s.reason}" for s in row.degraded]
        status = "[green]pass[/green]" if result.success else "[red]fail[/red]"
        table.add_row(str(i), result.program, status, "; ".join(notes))
    get_console().print(table)


def log_run_start(*, install_root: Any, candidates: int) -> None:
    """Standard run start banner."""
    body = f"[bold cyan]Install root:[/bold cyan] {install_root}\n[dim]{candidates} candidates[/dim]"
    render_panel("run", body, style="cyan")


__all__ = [
    "enable_json_logging",
    "get_console",
    "json_logging_enabled",
    "log_run_start",
    "render_panel",
    "render_results_table",
    "setup_logging",
]
