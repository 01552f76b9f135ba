"""Registry checkout, install-root sync and candidate discovery."""
from __future__ import annotations

import logging
from pathlib import Path

from repotest.domain.errors import InstallRootError, RegistryFetchError
from repotest.infrastructure.fs import sync_tree
from repotest.infrastructure.process import ProcessRunner

logger = logging.getLogger(__name__)

EXCLUDED_DIRS = frozenset({".git"})


def fetch_registry(runner: ProcessRunner, url: str, dest: Path) -> Path:
    """Clone `url` into `dest` and bring every submodule up to date."""
    steps = [
        (["git", "clone", url, str(dest)], None),
        (["git", "submodule", "update", "--init", "--recursive"], dest),
    ]
    for args, cwd in steps:
        try:
            code = runner.run(args, cwd=cwd)
        except OSError as exc:
            raise RegistryFetchError(f"failed to run {' '.join(args)}: {exc}") from exc
        if code != 0:
            raise RegistryFetchError(f"{' '.join(args)} exited with {code}")
    logger.info("Registry cloned into %s", dest)
    return dest


def resolve_install_root(raw: str | Path) -> Path:
    try:
        return Path(raw).expanduser().resolve()
    except (RuntimeError, OSError) as exc:
        raise InstallRootError(f"cannot resolve install root {raw!s}: {exc}") from exc


def install_checkout(checkout: Path, install_root: Path) -> int:
    """Overlay the checkout onto the install root; failures are logged only."""
    try:
        copied = sync_tree(checkout, install_root)
    except OSError as exc:
        logger.error("Copying %s into %s failed: %s", checkout, install_root, exc)
        return 0
    logger.info("Copied %d files into %s", copied, install_root)
    return copied


def discover_candidates(install_root: Path) -> list[str]:
    """Names of program directories under the install root (unordered)."""
    try:
        entries = list(install_root.iterdir())
    except OSError as exc:
        raise InstallRootError(f"error reading directory {install_root}: {exc}") from exc
    return [e.name for e in entries if e.is_dir() and e.name not in EXCLUDED_DIRS]


__all__ = [
    "discover_candidates",
    "fetch_registry",
    "install_checkout",
    "resolve_install_root",
]
