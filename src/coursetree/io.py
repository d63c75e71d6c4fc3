"""Safe file I/O helpers for coursetree.

Collections are always written whole, so every write goes through a
temp-file-and-rename to keep the previous collection intact if the
process dies mid-write. Reads never raise; callers get defaults or a
structured result they can inspect.
"""

from __future__ import annotations

import contextlib
import dataclasses
import json
import os
import tempfile
from pathlib import Path
from typing import Any


def ensure_parent_dir(path: Path | str) -> Path:
    """Ensure the parent directory of a path exists.

    Args:
        path: File path whose parent directory should be created.

    Returns:
        The path as a Path object.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def read_file(path: Path | str, default: str | None = None) -> str | None:
    """Read a UTF-8 file, returning default if missing or unreadable."""
    try:
        return Path(path).read_text(encoding="utf-8")
    except (FileNotFoundError, PermissionError, OSError, UnicodeDecodeError):
        return default


def read_json(path: Path | str, default: Any = None) -> Any:
    """Read and parse a JSON file, returning default on any error."""
    content = read_file(path)
    if content is None:
        return default
    try:
        return json.loads(content)
    except (json.JSONDecodeError, ValueError):
        return default


@dataclasses.dataclass(frozen=True)
class JsonDocument:
    """Result of loading a JSON document from disk.

    Unlike read_json, keeps "file is missing" apart from "file is there but
    broken", which matters when the caller is about to overwrite the file.
    """

    exists: bool
    data: Any = None
    raw: str | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.exists and self.error is None


def load_json_document(path: Path | str) -> JsonDocument:
    """Load a JSON document, reporting missing/unreadable/invalid separately.

    Args:
        path: Path to the JSON file.

    Returns:
        JsonDocument describing what was found.
    """
    path = Path(path)
    if not path.exists():
        return JsonDocument(exists=False)

    raw = read_file(path)
    if raw is None:
        return JsonDocument(exists=True, error=f"could not read {path}")

    try:
        data = json.loads(raw)
    except (json.JSONDecodeError, ValueError) as e:
        return JsonDocument(exists=True, raw=raw, error=f"invalid JSON in {path}: {e}")

    return JsonDocument(exists=True, data=data, raw=raw)


def write_file(path: Path | str, content: str) -> bool:
    """Write content to a file atomically.

    Args:
        path: Destination file path.
        content: String content to write.

    Returns:
        True if write succeeded, False otherwise.
    """
    path = Path(path)
    try:
        ensure_parent_dir(path)
        # Temp file in the same directory so the rename stays on one filesystem
        fd, tmp_path = tempfile.mkstemp(
            suffix=".tmp",
            prefix=path.name + ".",
            dir=path.parent,
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
                f.write(content)
            os.replace(tmp_path, path)
            return True
        except Exception:
            with contextlib.suppress(OSError):
                os.unlink(tmp_path)
            raise
    except (OSError, PermissionError):
        return False


def write_json(
    path: Path | str,
    data: Any,
    indent: int = 2,
) -> bool:
    """Write data as JSON to a file atomically.

    Args:
        path: Destination file path.
        data: Data to serialize as JSON.
        indent: JSON indentation level (default 2).

    Returns:
        True if write succeeded, False otherwise.
    """
    try:
        content = json.dumps(data, indent=indent, ensure_ascii=False)
    except (TypeError, ValueError):
        return False
    if not content.endswith("\n"):
        content += "\n"
    return write_file(path, content)


def safe_unlink(path: Path | str) -> bool:
    """Delete a file if it exists.

    Returns True if the file was removed or did not exist, False on failure.
    """
    try:
        Path(path).unlink(missing_ok=True)
        return True
    except (OSError, PermissionError, ValueError):
        return False
