from __future__ import annotations

import json
from pathlib import Path

import pytest

from repotest.domain.models import Program
from repotest.infrastructure.notify import NotifyResult
from repotest.infrastructure import logging as log_setup
from repotest.runtime import AppContext


class FakeRunner:
    """Process runner returning scripted exit codes and recording every call."""

    def __init__(self, codes: dict[tuple[str, ...], int | Exception] | None = None):
        self.codes = codes or {}
        self.calls: list[tuple[list[str], Path | None]] = []

    def run(self, args: list[str], *, cwd: Path | None = None) -> int:
        self.calls.append((list(args), cwd))
        outcome = self.codes.get(tuple(args), 0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def commands(self) -> list[str]:
        return [" ".join(args) for args, _ in self.calls]


class RecordingNotifier:
    def __init__(self, deliver: bool = True):
        self.deliver = deliver
        self.messages: list[str] = []

    def send(self, message: str) -> NotifyResult:
        self.messages.append(message)
        if self.deliver:
            return NotifyResult(delivered=True, status_code=204)
        return NotifyResult(delivered=False, error_message="unreachable")


def prog(name: str, *deps: str, npm: bool = False) -> Program:
    return Program(name=name, dependencies=sorted(set(deps)), has_package_manifest=npm)


def write_program(
    root: Path,
    name: str,
    dependencies: object | None = None,
    *,
    package_json: bool = False,
    raw_manifest: str | None = None,
) -> Path:
    folder = root / name
    folder.mkdir(parents=True, exist_ok=True)
    if raw_manifest is not None:
        (folder / "memconfig.json").write_text(raw_manifest, encoding="utf-8")
    else:
        manifest = {"name": name}
        if dependencies is not None:
            manifest["dependencies"] = dependencies
        (folder / "memconfig.json").write_text(json.dumps(manifest), encoding="utf-8")
    if package_json:
        (folder / "package.json").write_text("{}", encoding="utf-8")
    return folder


@pytest.fixture
def runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def install_root(tmp_path: Path) -> Path:
    root = tmp_path / "membrane"
    root.mkdir()
    return root


@pytest.fixture(autouse=True)
def _reset_app_context():
    AppContext.reset()
    yield
    AppContext.reset()


@pytest.fixture(autouse=True)
def _restore_console_logging():
    yield
    if log_setup.json_logging_enabled():
        log_setup.setup_logging(json_mode=False, force=True)
