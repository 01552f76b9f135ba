"""High-level orchestration: end-to-end registry run.

Responsibilities:
    * Fetch the registry checkout and overlay it onto the install root
    * Discover candidates and read their manifests (skipping unusable ones)
    * Traverse dependency-first, executing every program exactly once
    * Persist the report artifact (also after a fatal error mid-traversal)
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from repotest.domain.models import Program, RunSummary, SkippedProgram
from repotest.infrastructure.logging import log_run_start
from repotest.infrastructure.notify import Notifier
from repotest.infrastructure.process import ProcessRunner
from repotest.services.aggregator import ResultAggregator
from repotest.services.execution import ExecutionAction
from repotest.services.manifest import load_programs
from repotest.services.registry import (
    discover_candidates,
    fetch_registry,
    install_checkout,
)
from repotest.services.traversal import TraversalContext, order_candidates, traverse

logger = logging.getLogger(__name__)


class RunOutput:
    def __init__(
        self,
        *,
        aggregator: ResultAggregator,
        context: TraversalContext,
        skipped: list[SkippedProgram],
        report_path: Path | None,
    ) -> None:
        self.aggregator = aggregator
        self.context = context
        self.skipped = skipped
        self.report_path = report_path

    @property
    def summary(self) -> RunSummary:
        return self.aggregator.summary(
            skipped_programs=len(self.skipped), unresolved=len(self.context.unresolved)
        )


def prepare_programs(
    install_root: Path,
    *,
    pinned_first: str | None = None,
    manifest_options: dict[str, Any] | None = None,
) -> tuple[list[Program], list[SkippedProgram]]:
    """Candidates in traversal order, read into `Program` records."""
    names = order_candidates(discover_candidates(install_root), pinned_first)
    return load_programs(names, install_root, **(manifest_options or {}))


def run_registry(
    *,
    runner: ProcessRunner,
    notifier: Notifier,
    install_root: Path,
    report_path: Path,
    registry_url: str | None = None,
    checkout_dir: Path | None = None,
    pinned_first: str | None = None,
    manifest_options: dict[str, Any] | None = None,
    commands: dict[str, list[str]] | None = None,
) -> RunOutput:
    """Run the whole pipeline. `registry_url=None` skips the fetch/copy stage."""
    if registry_url is not None:
        checkout = fetch_registry(runner, registry_url, checkout_dir or Path("directory"))
        install_checkout(checkout, install_root)
    programs, skipped = prepare_programs(
        install_root, pinned_first=pinned_first, manifest_options=manifest_options
    )
    log_run_start(install_root=install_root, candidates=len(programs) + len(skipped))
    action = ExecutionAction(runner, notifier, install_root=install_root, **(commands or {}))
    aggregator = ResultAggregator()
    ctx = TraversalContext.from_programs(programs)
    try:
        traverse(programs, aggregator.collect(action), pinned_first=pinned_first, ctx=ctx)
    finally:
        report = aggregator.write_report(report_path)
    logger.info(
        "Executed %d programs (%d skipped, %d unresolved dependencies)",
        len(aggregator.runs),
        len(skipped),
        len(ctx.unresolved),
    )
    return RunOutput(aggregator=aggregator, context=ctx, skipped=skipped, report_path=report)


__all__ = ["RunOutput", "prepare_programs", "run_registry"]
