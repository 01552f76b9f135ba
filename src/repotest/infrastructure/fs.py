"""File-system helpers (JSON artifacts, tree sync) isolated from domain logic."""
from __future__ import annotations

import shutil
from pathlib import Path
from typing import Any

import orjson


def write_json(path: str | Path, data: Any) -> Path:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_bytes(orjson.dumps(data, option=orjson.OPT_INDENT_2))
    return p


def read_json(path: str | Path) -> Any:
    return orjson.loads(Path(path).read_bytes())


def sync_tree(source: str | Path, destination: str | Path) -> int:
    """Copy every file under `source` into `destination`, overwriting by name.

    Directories are created as needed; files already in `destination` but
    absent from `source` are left alone. Walks with an explicit stack so
    deep trees cannot hit the recursion limit. Returns the number of files
    copied.
    """
    src_root = Path(source)
    dst_root = Path(destination)
    dst_root.mkdir(parents=True, exist_ok=True)
    copied = 0
    stack: list[tuple[Path, Path]] = [(src_root, dst_root)]
    while stack:
        src_dir, dst_dir = stack.pop()
        for entry in src_dir.iterdir():
            target = dst_dir / entry.name
            if entry.is_dir():
                target.mkdir(exist_ok=True)
                stack.append((entry, target))
            else:
                shutil.copy2(entry, target)
                copied += 1
    return copied


__all__ = ["read_json", "sync_tree", "write_json"]
