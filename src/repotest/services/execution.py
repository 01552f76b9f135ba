"""Execution action: install -> update -> test -> notify for one program."""
from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

from repotest.domain.errors import ProcessSpawnError
from repotest.domain.models import Program, ProgramRun, StepOutcome, TestResult
from repotest.infrastructure.notify import Notifier
from repotest.infrastructure.process import ProcessRunner

logger = logging.getLogger(__name__)

DEFAULT_INSTALL_CMD: tuple[str, ...] = ("yarn",)
DEFAULT_UPDATE_CMD: tuple[str, ...] = ("mctl", "update")
DEFAULT_TEST_CMD: tuple[str, ...] = ("mctl", "test")


def result_message(program: str, success: bool) -> str:
    if success:
        return f"🎉 Test passed for {program}"
    return f"❌ Test failed for {program}"


class ExecutionAction:
    """Callable handed to the traversal; returns a `ProgramRun` per program.

    Install and update problems are recorded as degraded steps and never stop
    the test step. The test exit code alone decides success. Failing to spawn
    the update/test tool at all raises `ProcessSpawnError`.
    """

    def __init__(
        self,
        runner: ProcessRunner,
        notifier: Notifier,
        *,
        install_root: Path,
        install_cmd: Sequence[str] = DEFAULT_INSTALL_CMD,
        update_cmd: Sequence[str] = DEFAULT_UPDATE_CMD,
        test_cmd: Sequence[str] = DEFAULT_TEST_CMD,
    ):
        self.runner = runner
        self.notifier = notifier
        self.install_root = install_root
        self.install_cmd = list(install_cmd)
        self.update_cmd = list(update_cmd)
        self.test_cmd = list(test_cmd)

    def __call__(self, program: Program) -> ProgramRun:
        logger.info("Running program: %s", program.name)
        steps = [self.install(program), self.update(program)]
        test_step = self.test(program)
        steps.append(test_step)
        success = test_step.status == "ok"
        steps.append(self.notify(program.name, success))
        return ProgramRun(result=TestResult(program=program.name, success=success), steps=steps)

    def _workdir(self, program: Program) -> Path:
        return program.path or (self.install_root / program.name)

    def install(self, program: Program) -> StepOutcome:
        if not program.has_package_manifest:
            return StepOutcome(step="install", status="skipped", reason="no package manifest")
        try:
            code = self.runner.run(self.install_cmd, cwd=self._workdir(program))
        except OSError as exc:
            logger.error("Error spawning %s for %s: %s", self.install_cmd[0], program.name, exc)
            return StepOutcome(step="install", status="degraded", reason=f"spawn failed: {exc}")
        if code != 0:
            logger.warning("Install failed for %s (exit %s)", program.name, code)
            return StepOutcome(
                step="install", status="degraded", reason=f"exit code {code}", exit_code=code
            )
        return StepOutcome(step="install", status="ok", exit_code=code)

    def update(self, program: Program) -> StepOutcome:
        args = [*self.update_cmd, program.name]
        logger.info("Updating %s", program.name)
        try:
            code = self.runner.run(args)
        except OSError as exc:
            raise ProcessSpawnError(args, exc) from exc
        if code != 0:
            logger.warning("Update failed for %s (exit %s)", program.name, code)
            return StepOutcome(
                step="update", status="degraded", reason=f"exit code {code}", exit_code=code
            )
        return StepOutcome(step="update", status="ok", exit_code=code)

    def test(self, program: Program) -> StepOutcome:
        args = [*self.test_cmd, program.name]
        logger.info("Running test in %s", program.name)
        try:
            code = self.runner.run(args)
        except OSError as exc:
            raise ProcessSpawnError(args, exc) from exc
        if code != 0:
            return StepOutcome(step="test", status="failed", reason=f"exit code {code}", exit_code=code)
        return StepOutcome(step="test", status="ok", exit_code=code)

    def notify(self, program: str, success: bool) -> StepOutcome:
        sent = self.notifier.send(result_message(program, success))
        if not sent.delivered:
            return StepOutcome(step="notify", status="degraded", reason=sent.error_message)
        return StepOutcome(step="notify", status="ok")


__all__ = ["ExecutionAction", "result_message"]
