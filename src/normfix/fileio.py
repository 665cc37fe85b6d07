"""Source file discovery, exact reads, and atomic writes."""

from __future__ import annotations

import os
import tempfile
from collections.abc import Iterator
from pathlib import Path

SOURCE_SUFFIXES = frozenset({".c", ".h"})


def iter_source_files(root: Path) -> Iterator[Path]:
    """Yield ``.c``/``.h`` files: *root* itself, or everything below it in sorted order."""
    if root.is_file():
        if root.suffix in SOURCE_SUFFIXES:
            yield root
        return
    for path in sorted(root.rglob("*")):
        if path.is_file() and path.suffix in SOURCE_SUFFIXES:
            yield path


def read_source(path: Path) -> str:
    """Read *path* without newline translation so CRLF survives a round trip."""
    with open(path, encoding="utf-8", newline="") as f:
        return f.read()


def atomic_write_text(path: Path, text: str) -> None:
    """Replace *path* with *text* in one step, keeping its permission bits.

    The new content goes to a temporary file in the same directory and is
    moved over the target only once fully written, so an interrupted run
    leaves the previous content in place.
    """
    target = path.resolve()
    tmp_path: Path | None = None
    existing_mode: int | None = None
    try:
        if target.exists():
            existing_mode = target.stat().st_mode & 0o777
        with tempfile.NamedTemporaryFile(
            "w", encoding="utf-8", newline="", delete=False, dir=target.parent
        ) as tmp:
            tmp.write(text)
            tmp.flush()
            os.fsync(tmp.fileno())
            tmp_path = Path(tmp.name)
        if existing_mode is not None:
            os.chmod(tmp_path, existing_mode)
        os.replace(tmp_path, target)
    finally:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
