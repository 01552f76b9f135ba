"""Runtime context & bootstrap utilities."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from repotest.infrastructure.logging import setup_logging

DEFAULT_CONFIG_PATH = "configs/default.yaml"


@dataclass(slots=True)
class RuntimeConfig:
    raw: dict[str, Any]
    path: Path

    def _get(self, key: str, default: Any) -> Any:
        value = self.raw.get(key)
        return default if value is None else value

    @property
    def registry_url(self) -> str:
        return self._get("registry_url", "https://github.com/membrane-io/directory.git")

    @property
    def checkout_dir(self) -> Path:
        return Path(self._get("checkout_dir", "directory"))

    @property
    def install_root(self) -> str:
        return str(self._get("install_root", "~/membrane"))

    @property
    def pinned_first(self) -> str | None:
        return self.raw.get("pinned_first", "todo")

    @property
    def manifest_name(self) -> str:
        return self._get("manifest_name", "memconfig.json")

    @property
    def package_manifest_name(self) -> str:
        return self._get("package_manifest_name", "package.json")

    @property
    def reserved_prefix(self) -> str:
        return self._get("reserved_prefix", "sys-")

    @property
    def install_cmd(self) -> list[str]:
        return list(self._get("install_cmd", ["yarn"]))

    @property
    def update_cmd(self) -> list[str]:
        return list(self._get("update_cmd", ["mctl", "update"]))

    @property
    def test_cmd(self) -> list[str]:
        return list(self._get("test_cmd", ["mctl", "test"]))

    @property
    def report_path(self) -> Path:
        return Path(self._get("report_path", "results.json"))

    @property
    def webhook_env(self) -> str:
        return self._get("webhook_env", "DISCORD_WEBHOOK_URL")

    @property
    def bot_username(self) -> str:
        return self._get("bot_username", "Test Bot")

    @property
    def http_timeout(self) -> float:
        return float(self._get("http_timeout", 10.0))

    def manifest_options(self) -> dict[str, str]:
        return {
            "manifest_name": self.manifest_name,
            "package_manifest_name": self.package_manifest_name,
            "reserved_prefix": self.reserved_prefix,
        }


class AppContext:
    _instance: AppContext | None = None

    def __init__(self, config: RuntimeConfig):
        self.config = config

    @classmethod
    def init(cls, config: RuntimeConfig) -> AppContext:
        if cls._instance is None:
            cls._instance = cls(config)
        return cls._instance

    @classmethod
    def get(cls) -> AppContext:
        if cls._instance is None:
            raise RuntimeError("AppContext not initialized")
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        cls._instance = None


def load_config(path: Path) -> RuntimeConfig:
    if not path.exists():
        return RuntimeConfig(raw={}, path=path)
    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError("Config root must be a mapping")
    return RuntimeConfig(raw=data, path=path)


def bootstrap(force: bool = False) -> AppContext:
    if not force:
        try:
            return AppContext.get()
        except RuntimeError:
            pass
    else:
        AppContext.reset()
    load_dotenv(override=False)
    setup_logging()
    cfg_path = Path(os.getenv("REPOTEST_CONFIG", DEFAULT_CONFIG_PATH))
    config = load_config(cfg_path)
    return AppContext.init(config)
