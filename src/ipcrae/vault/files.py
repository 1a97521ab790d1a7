"""File primitives for vault writers.

Each write is atomic-by-replace: content goes to a temp file in the same
directory which is then renamed over the target. There is no locking;
concurrent writers to one file are not serialized.
"""

import asyncio
import os
import tempfile
from pathlib import Path


def _write_atomic(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
        os.replace(tmp, path)
    except BaseException:
        Path(tmp).unlink(missing_ok=True)
        raise


def _read_or_empty(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return ""


def _append(path: Path, content: str) -> None:
    _write_atomic(path, _read_or_empty(path) + content)


async def write_text(path: Path, content: str) -> Path:
    """Replace path with content, creating parent directories."""
    await asyncio.to_thread(_write_atomic, path, content)
    return path


async def append_text(path: Path, content: str) -> Path:
    """Append content to path (created if missing)."""
    await asyncio.to_thread(_append, path, content)
    return path


async def read_text_or_empty(path: Path) -> str:
    """Read path, treating a missing file as empty. Other errors propagate."""
    return await asyncio.to_thread(_read_or_empty, path)


async def read_text(path: Path) -> str:
    """Read path; errors propagate."""
    return await asyncio.to_thread(path.read_text, encoding="utf-8")
