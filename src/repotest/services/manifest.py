"""Manifest reading: program directory -> `Program` record."""
from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

import orjson

from repotest.domain.errors import ManifestError, ManifestMalformed, ManifestUnreadable
from repotest.domain.models import Program, SkippedProgram

logger = logging.getLogger(__name__)

MANIFEST_NAME = "memconfig.json"
PACKAGE_MANIFEST_NAME = "package.json"
RESERVED_PREFIX = "sys-"


def extract_dependency_names(
    mapping: Mapping[str, Any], *, reserved_prefix: str = RESERVED_PREFIX
) -> list[str]:
    """Program names referenced by `"<name>:<version>"` values.

    Keys are irrelevant. Values that are not strings or carry no `:` are
    ignored, as are built-in capabilities (`reserved_prefix`). An empty name
    (`":1.0"`) is kept so traversal reports it as an unresolved dependency.
    """
    names: set[str] = set()
    for value in mapping.values():
        if not isinstance(value, str) or ":" not in value:
            continue
        name = value.split(":", 1)[0]
        if name.startswith(reserved_prefix):
            continue
        names.add(name)
    return sorted(names)


def _load_manifest(name: str, path: Path) -> dict[str, Any]:
    try:
        raw = path.read_bytes()
    except OSError as exc:
        raise ManifestUnreadable(name, f"cannot read {path}: {exc.strerror or exc}") from exc
    try:
        data = orjson.loads(raw)
    except orjson.JSONDecodeError as exc:
        raise ManifestUnreadable(name, f"invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ManifestUnreadable(name, f"{path} root must be an object")
    return data


def read_program(
    name: str,
    install_root: Path,
    *,
    manifest_name: str = MANIFEST_NAME,
    package_manifest_name: str = PACKAGE_MANIFEST_NAME,
    reserved_prefix: str = RESERVED_PREFIX,
) -> Program:
    folder = install_root / name
    data = _load_manifest(name, folder / manifest_name)
    deps = data.get("dependencies", {})
    if not isinstance(deps, dict):
        raise ManifestMalformed(
            name, f"'dependencies' must be an object, got {type(deps).__name__}"
        )
    return Program(
        name=name,
        dependencies=extract_dependency_names(deps, reserved_prefix=reserved_prefix),
        has_package_manifest=(folder / package_manifest_name).exists(),
        path=folder,
    )


def load_programs(
    names: Iterable[str],
    install_root: Path,
    **options: Any,
) -> tuple[list[Program], list[SkippedProgram]]:
    """Read every candidate, keeping order; unusable manifests are skipped."""
    programs: list[Program] = []
    skipped: list[SkippedProgram] = []
    for name in names:
        try:
            programs.append(read_program(name, install_root, **options))
        except ManifestError as exc:
            logger.warning("Skipping %s: %s", name, exc.reason)
            skipped.append(SkippedProgram(name=name, reason=exc.reason))
    return programs, skipped


__all__ = [
    "MANIFEST_NAME",
    "PACKAGE_MANIFEST_NAME",
    "RESERVED_PREFIX",
    "extract_dependency_names",
    "load_programs",
    "read_program",
]
