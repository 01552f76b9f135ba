"""CLI layer (run/order/list/report)."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated, Any

import orjson
import typer
from rich.console import Console
from rich.json import JSON
from rich.table import Table

from repotest.domain.errors import FatalRunError
from repotest.domain.models import TestResult
from repotest.infrastructure.fs import read_json
from repotest.infrastructure.logging import (
    enable_json_logging,
    render_panel,
    render_results_table,
)
from repotest.infrastructure.notify import LogNotifier, Notifier, WebhookNotifier, webhook_url
from repotest.infrastructure.process import DryRunRunner, ProcessRunner, SubprocessRunner
from repotest.runtime import AppContext, RuntimeConfig, bootstrap
from repotest.services.registry import resolve_install_root
from repotest.services.runner import prepare_programs, run_registry
from repotest.services.traversal import plan_order

logger = logging.getLogger(__name__)

app = typer.Typer(help="Install, update and test every registry program in dependency order")


@app.callback()
def init(
    json_logs: Annotated[
        bool, typer.Option("--json-logs", help="Emit log records as JSON lines on stderr")
    ] = False,
) -> None:
    """Bootstrap environment (dotenv + config + logging) before any command."""
    bootstrap()
    if json_logs:
        enable_json_logging()


def _console() -> Console:
    return Console()


def _config() -> RuntimeConfig:
    return AppContext.get().config


def _install_root(override: Path | None, config: RuntimeConfig) -> Path:
    try:
        return resolve_install_root(override or config.install_root)
    except FatalRunError as exc:
        logger.error("%s", exc)
        raise typer.Exit(code=1) from exc


def _runner(dry_run: bool) -> ProcessRunner:
    return DryRunRunner() if dry_run else SubprocessRunner()


def _notifier(dry_run: bool, config: RuntimeConfig) -> Notifier:
    if dry_run:
        return LogNotifier()
    return WebhookNotifier(
        webhook_url(config.webhook_env),
        username=config.bot_username,
        timeout=config.http_timeout,
    )


@app.command("run")
def run_cmd(
    install_root: Annotated[
        Path | None, typer.Option(help="Install root (default from config)")
    ] = None,
    report: Annotated[Path | None, typer.Option(help="Report artifact path")] = None,
    pinned: Annotated[str | None, typer.Option(help="Program always traversed first")] = None,
    skip_fetch: Annotated[
        bool, typer.Option("--skip-fetch", help="Use the install root as-is (no clone/copy)")
    ] = False,
    dry_run: Annotated[
        bool, typer.Option("--dry-run", help="Log commands and notifications instead of running them")
    ] = False,
) -> None:
    cfg = _config()
    root = _install_root(install_root, cfg)
    report_path = report or cfg.report_path
    notifier = _notifier(dry_run, cfg)
    try:
        out = run_registry(
            runner=_runner(dry_run),
            notifier=notifier,
            install_root=root,
            report_path=report_path,
            registry_url=None if skip_fetch else cfg.registry_url,
            checkout_dir=cfg.checkout_dir,
            pinned_first=pinned or cfg.pinned_first,
            manifest_options=cfg.manifest_options(),
            commands={
                "install_cmd": cfg.install_cmd,
                "update_cmd": cfg.update_cmd,
                "test_cmd": cfg.test_cmd,
            },
        )
    except FatalRunError as exc:
        logger.error("Run aborted: %s", exc)
        raise typer.Exit(code=1) from exc
    finally:
        if isinstance(notifier, WebhookNotifier):
            notifier.close()
    render_results_table(out.aggregator.runs)
    s = out.summary
    info = [
        f"passed: {s.passed}/{s.total}",
        f"failed: {s.failed}",
        f"degraded steps: {s.degraded_steps}",
        f"skipped programs: {s.skipped_programs}",
        f"unresolved dependencies: {s.unresolved_dependencies}",
    ]
    if out.report_path is not None:
        info.append(f"report: {out.report_path}")
    render_panel("run summary", "\n".join(info), style="green" if s.failed == 0 else "red")


@app.command("order")
def order_cmd(
    install_root: Annotated[
        Path | None, typer.Option(help="Install root (default from config)")
    ] = None,
    pinned: Annotated[str | None, typer.Option(help="Program always traversed first")] = None,
) -> None:
    """Print the execution order without running anything."""
    cfg = _config()
    root = _install_root(install_root, cfg)
    pinned_first = pinned or cfg.pinned_first
    try:
        programs, _skipped = prepare_programs(
            root, pinned_first=pinned_first, manifest_options=cfg.manifest_options()
        )
        order = plan_order(programs, pinned_first=pinned_first)
    except FatalRunError as exc:
        logger.error("%s", exc)
        raise typer.Exit(code=1) from exc
    render_panel("execution order", " -> ".join(order) or "(nothing to run)", style="cyan")


@app.command("list")
def list_cmd(
    install_root: Annotated[
        Path | None, typer.Option(help="Install root (default from config)")
    ] = None,
    json_out: Annotated[bool, typer.Option("--json", help="Emit JSON list")] = False,
) -> None:
    cfg = _config()
    cons = _console()
    root = _install_root(install_root, cfg)
    try:
        programs, skipped = prepare_programs(
            root, pinned_first=cfg.pinned_first, manifest_options=cfg.manifest_options()
        )
    except FatalRunError as exc:
        logger.error("%s", exc)
        raise typer.Exit(code=1) from exc
    if json_out:
        data: dict[str, Any] = {
            "programs": [p.model_dump(mode="json", exclude={"path"}) for p in programs],
            "skipped": [s.model_dump() for s in skipped],
        }
        cons.print(JSON.from_data(data), soft_wrap=True)
        return
    if not programs and not skipped:
        cons.print("[yellow]No programs found[/yellow]")
        return
    table = Table(title=f"Programs in {root}")
    for col in ("Name", "Dependencies", "package.json"):
        table.add_column(col)
    for p in programs:
        table.add_row(p.name, ", ".join(p.dependencies) or "-", "yes" if p.has_package_manifest else "no")
    cons.print(table)
    if skipped:
        body = "\n".join(f"{s.name}: {s.reason}" for s in skipped)
        render_panel("skipped", body, style="yellow")


@app.command("report")
def report_cmd(
    path: Annotated[Path | None, typer.Argument(help="Report artifact (default from config)")] = None,
) -> None:
    """Render an existing report artifact."""
    target = path or _config().report_path
    if not target.exists():
        raise typer.BadParameter(f"Report not found: {target}")
    try:
        rows = [TestResult.model_validate(item) for item in read_json(target)]
    except (orjson.JSONDecodeError, TypeError, ValueError) as exc:
        raise typer.BadParameter(f"Invalid report {target}: {exc}") from exc
    render_results_table(rows, title=f"Report {target}")


if __name__ == "__main__":  # pragma: no cover
    app()
