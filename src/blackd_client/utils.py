from __future__ import annotations

import os
import shutil
import tempfile
from pathlib import Path

from .errors import FileAccessError, PersistError


def resolve_target(raw: str | os.PathLike[str]) -> Path:
    """Canonicalize a target path, falling back to the literal path when that fails."""

    candidate = Path(raw)
    try:
        return candidate.resolve(strict=True)
    except (OSError, RuntimeError):
        return candidate


def read_source(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except OSError as exc:
        raise FileAccessError(f"Could not read {path}: {exc.strerror or exc}") from exc


def _discard(tmp_path: Path | None) -> None:
    if tmp_path is not None:
        tmp_path.unlink(missing_ok=True)


def atomic_write_bytes(path: Path, data: bytes) -> None:
    """Replace ``path`` with ``data`` through a temp file in the same directory.

    The original file is left untouched unless the final rename succeeds, and
    the temp file never outlives a failed call.
    """

    tmp_path: Path | None = None
    try:
        with tempfile.NamedTemporaryFile(
            "wb", delete=False, dir=path.parent, prefix=f".{path.name}.", suffix=".tmp"
        ) as tmp:
            tmp_path = Path(tmp.name)
            tmp.write(data)
            tmp.flush()
            os.fsync(tmp.fileno())
        if path.exists():
            shutil.copymode(path, tmp_path)
    except OSError as exc:
        _discard(tmp_path)
        raise PersistError("Could not persist reformatted code to disk!") from exc

    try:
        os.replace(tmp_path, path)
    except OSError as exc:
        _discard(tmp_path)
        raise PersistError(f"Could not replace {path}: {exc.strerror or exc}") from exc


__all__ = ["resolve_target", "read_source", "atomic_write_bytes"]
