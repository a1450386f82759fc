"""Persist rendered reports."""

from __future__ import annotations

import os
from pathlib import Path

__all__ = ["resolve_output_path", "write_output"]


def resolve_output_path(path: str | Path, *, cwd: Path | None = None) -> Path:
    """Resolve ``path`` against ``cwd`` (the process cwd by default) unless absolute."""

    candidate = Path(path).expanduser()
    if candidate.is_absolute():
        return candidate
    return (cwd or Path.cwd()) / candidate


def write_output(content: str, path: str | Path, *, cwd: Path | None = None) -> Path:
    """Write ``content`` atomically and return the final path."""

    target = resolve_output_path(path, cwd=cwd)
    target.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = target.with_suffix(target.suffix + ".tmp")
    try:
        with tmp_path.open("w", encoding="utf-8") as handle:
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_path, target)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise
    return target
