"""Process runner capability used for git, yarn and mctl invocations.

Runners return the exit code and raise `OSError` when the executable cannot
be spawned; callers decide which of those is fatal.
"""
from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)


class ProcessRunner(Protocol):
    def run(self, args: list[str], *, cwd: Path | None = None) -> int:  # pragma: no cover
        ...


class SubprocessRunner:
    """Blocking runner; child output goes straight to the parent's stdout/stderr."""

    def run(self, args: list[str], *, cwd: Path | None = None) -> int:
        logger.debug("exec %s (cwd=%s)", args, cwd)
        completed = subprocess.run(args, cwd=cwd, check=False)
        return completed.returncode


class DryRunRunner:
    """Logs the command it would have run and reports success."""

    def __init__(self) -> None:
        self.calls: list[tuple[list[str], Path | None]] = []

    def run(self, args: list[str], *, cwd: Path | None = None) -> int:
        self.calls.append((list(args), cwd))
        logger.info("[dry-run] %s%s", " ".join(args), f" (in {cwd})" if cwd else "")
        return 0


__all__ = ["DryRunRunner", "ProcessRunner", "SubprocessRunner"]
