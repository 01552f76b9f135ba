"""Error hierarchy shared by services and the CLI."""
from __future__ import annotations


class RepotestError(RuntimeError):
    """Base error."""


class FatalRunError(RepotestError):
    """Aborts the whole run."""


class RegistryFetchError(FatalRunError):
    pass


class InstallRootError(FatalRunError):
    pass


class ProcessSpawnError(FatalRunError):
    def __init__(self, args: list[str], cause: OSError):
        super().__init__(f"Failed to execute {' '.join(args)!r}: {cause}")
        self.command = list(args)
        self.cause = cause


class CyclicDependency(FatalRunError):
    def __init__(self, cycle: list[str]):
        super().__init__("Dependency cycle detected: " + " -> ".join(cycle))
        self.cycle = list(cycle)


class ManifestError(RepotestError):
    """Per-program failure; the program is skipped, the run continues."""

    def __init__(self, program: str, reason: str):
        super().__init__(f"{program}: {reason}")
        self.program = program
        self.reason = reason


class ManifestUnreadable(ManifestError):
    pass


class ManifestMalformed(ManifestError):
    pass


__all__ = [
    "CyclicDependency",
    "FatalRunError",
    "InstallRootError",
    "ManifestError",
    "ManifestMalformed",
    "ManifestUnreadable",
    "ProcessSpawnError",
    "RegistryFetchError",
    "RepotestError",
]
