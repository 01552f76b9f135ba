"""Domain models (Pydantic) defining stable contracts for a registry run."""
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field

StepName = Literal["install", "update", "test", "notify"]
StepStatus = Literal["ok", "skipped", "degraded", "failed"]


# -------------------- Programs -------------------- #


class Program(BaseModel):
    """One installable/testable program read from its manifest.

    `dependencies` is deduplicated, sorted and free of reserved-prefix
    (built-in capability) names.
    """

    model_config = {"frozen": True}

    name: str = Field(min_length=1)
    dependencies: list[str] = Field(default_factory=list)
    has_package_manifest: bool = False
    path: Path | None = None


class SkippedProgram(BaseModel):
    """Candidate excluded from the run because its manifest could not be used."""

    name: str
    reason: str


# -------------------- Execution outcomes -------------------- #


class StepOutcome(BaseModel):
    """Result of one step of the execution action.

    `failed` is reserved for the test step exiting non-zero; install/update
    and notification problems are `degraded`.
    """

    step: StepName
    status: StepStatus
    reason: str | None = None
    exit_code: int | None = None


class TestResult(BaseModel):
    """Report artifact entry: one per executed program."""

    __test__ = False  # keep pytest from collecting this class

    program: str
    success: bool


class ProgramRun(BaseModel):
    """Everything observed while executing one program."""

    result: TestResult
    steps: list[StepOutcome] = Field(default_factory=list)

    @property
    def program(self) -> str:
        return self.result.program

    @property
    def degraded(self) -> list[StepOutcome]:
        return [s for s in self.steps if s.status == "degraded"]


class RunSummary(BaseModel):
    total: int = 0
    passed: int = 0
    failed: int = 0
    degraded_steps: int = 0
    skipped_programs: int = 0
    unresolved_dependencies: int = 0


__all__ = [
    "Program",
    "ProgramRun",
    "RunSummary",
    "SkippedProgram",
    "StepName",
    "StepOutcome",
    "StepStatus",
    "TestResult",
]
