"""Dependency-ordered install/update/test orchestrator for a program registry."""

__version__ = "0.1.0"

__all__ = [
    "cli",
]
