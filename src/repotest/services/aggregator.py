"""Result aggregation & report artifact."""
from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

from repotest.domain.models import Program, ProgramRun, RunSummary, TestResult
from repotest.infrastructure.fs import write_json

logger = logging.getLogger(__name__)

REPORT_NAME = "results.json"


class ResultAggregator:
    """Ordered, append-only record of executed programs (completion order)."""

    def __init__(self) -> None:
        self._runs: list[ProgramRun] = []

    def record(self, run: ProgramRun) -> ProgramRun:
        self._runs.append(run)
        return run

    def collect(self, execute: Callable[[Program], ProgramRun]) -> Callable[[Program], ProgramRun]:
        """Wrap an execution action so each outcome is recorded as it completes."""

        def _action(program: Program) -> ProgramRun:
            return self.record(execute(program))

        return _action

    @property
    def runs(self) -> list[ProgramRun]:
        return list(self._runs)

    @property
    def results(self) -> list[TestResult]:
        return [r.result for r in self._runs]

    def summary(self, *, skipped_programs: int = 0, unresolved: int = 0) -> RunSummary:
        passed = sum(1 for r in self._runs if r.result.success)
        return RunSummary(
            total=len(self._runs),
            passed=passed,
            failed=len(self._runs) - passed,
            degraded_steps=sum(len(r.degraded) for r in self._runs),
            skipped_programs=skipped_programs,
            unresolved_dependencies=unresolved,
        )

    def write_report(self, path: str | Path = REPORT_NAME) -> Path | None:
        """Serialize `[{"program", "success"}, ...]`; write failures are logged only."""
        try:
            return write_json(path, [r.model_dump() for r in self.results])
        except (OSError, TypeError) as exc:
            logger.error("Error writing test results to %s: %s", path, exc)
            return None


__all__ = ["REPORT_NAME", "ResultAggregator"]
