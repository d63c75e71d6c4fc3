"""Program and curriculum-progress repositories.

Collections are read and written whole. The JSON-file repositories keep
programs.json and curriculum_progress.json under the data directory,
validated against the bundled schemas on both load and save. Blocking
file I/O runs in a worker thread so the async services stay responsive.
"""

from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Protocol

import anyio.to_thread

from coursetree.config import (
    get_last_import_path,
    get_program_schema_path,
    get_programs_json_path,
    get_progress_json_path,
    get_progress_schema_path,
)
from coursetree.curriculum.program import CurriculumProgress, Program
from coursetree.errors import CoursetreeError, RepositoryError
from coursetree.io import load_json_document, write_file, write_json
from coursetree.jsonschema import validate
from coursetree.logging import get_logger

_logger = get_logger("curriculum.store")


class ProgramRepository(Protocol):
    async def get_programs(self) -> list[Program]: ...

    async def save_programs(self, programs: list[Program]) -> None: ...


class ProgressRepository(Protocol):
    async def get_progress(self) -> dict[str, CurriculumProgress]: ...

    async def save_progress(self, progress: dict[str, CurriculumProgress]) -> None: ...


def _load_collection(path: Path, schema_path: Path, empty: Any) -> Any:
    """Load and validate a persisted collection.

    A missing file is an empty collection. A file that exists but cannot be
    read, parsed or validated is backed up next to itself and reported,
    never replaced: the next whole-collection write would erase it.

    Raises:
        RepositoryError: If the file exists but is not a valid collection.
    """
    doc = load_json_document(path)
    if not doc.exists:
        _logger.info("No %s found, starting with an empty collection", path.name)
        return empty

    if doc.ok:
        is_valid, errors = validate(doc.data, schema_path)
        if is_valid:
            return doc.data
        problem = "; ".join(errors)
    else:
        problem = doc.error or "unknown error"

    backup_path = path.with_suffix(".json.bak")
    if doc.raw is not None and write_file(backup_path, doc.raw):
        _logger.info("Backed up invalid %s to %s", path.name, backup_path)
    _logger.error("%s is not a valid collection: %s", path, problem)
    raise RepositoryError(f"{path} is not a valid collection: {problem}")


def _save_collection(path: Path, schema_path: Path, data: Any) -> None:
    is_valid, errors = validate(data, schema_path)
    if not is_valid:
        _logger.error("Validation failed, not saving %s: %s", path.name, errors)
        raise RepositoryError(f"Refusing to save invalid {path.name}: {'; '.join(errors)}")

    if not write_json(path, data):
        _logger.error("Failed to save %s", path)
        raise RepositoryError(f"Failed to write {path}")
    _logger.debug("Saved %s", path)


class JsonProgramRepository:
    """Programs stored as one JSON array.

    Args:
        path: Path to programs.json. Defaults to the data directory.
    """

    def __init__(self, path: Path | str | None = None) -> None:
        self.path = Path(path) if path is not None else get_programs_json_path()

    def _read(self) -> list[Program]:
        data = _load_collection(self.path, get_program_schema_path(), [])
        try:
            return [Program.from_dict(entry) for entry in data]
        except CoursetreeError as e:
            raise RepositoryError(f"{self.path}: {e}") from e

    def _write(self, programs: list[Program]) -> None:
        _save_collection(
            self.path,
            get_program_schema_path(),
            [program.to_dict() for program in programs],
        )

    async def get_programs(self) -> list[Program]:
        return await anyio.to_thread.run_sync(self._read)

    async def save_programs(self, programs: list[Program]) -> None:
        await anyio.to_thread.run_sync(self._write, list(programs))


class JsonProgressRepository:
    """Progress copies stored as one JSON object keyed by enrollment id.

    Args:
        path: Path to curriculum_progress.json. Defaults to the data directory.
    """

    def __init__(self, path: Path | str | None = None) -> None:
        self.path = Path(path) if path is not None else get_progress_json_path()

    def _read(self) -> dict[str, CurriculumProgress]:
        data = _load_collection(self.path, get_progress_schema_path(), {})
        try:
            return {key: CurriculumProgress.from_dict(entry) for key, entry in data.items()}
        except CoursetreeError as e:
            raise RepositoryError(f"{self.path}: {e}") from e

    def _write(self, progress: dict[str, CurriculumProgress]) -> None:
        _save_collection(
            self.path,
            get_progress_schema_path(),
            {key: record.to_dict() for key, record in progress.items()},
        )

    async def get_progress(self) -> dict[str, CurriculumProgress]:
        return await anyio.to_thread.run_sync(self._read)

    async def save_progress(self, progress: dict[str, CurriculumProgress]) -> None:
        await anyio.to_thread.run_sync(self._write, dict(progress))


class InMemoryProgramRepository:
    """Program repository held in memory, for tests and embedding."""

    def __init__(self, programs: list[Program] | None = None) -> None:
        self.programs = list(programs or [])
        self.saves = 0

    async def get_programs(self) -> list[Program]:
        return list(self.programs)

    async def save_programs(self, programs: list[Program]) -> None:
        self.programs = list(programs)
        self.saves += 1


class InMemoryProgressRepository:
    """Progress repository held in memory, for tests and embedding."""

    def __init__(self, progress: dict[str, CurriculumProgress] | None = None) -> None:
        self.progress = dict(progress or {})
        self.saves = 0

    async def get_progress(self) -> dict[str, CurriculumProgress]:
        return dict(self.progress)

    async def save_progress(self, progress: dict[str, CurriculumProgress]) -> None:
        self.progress = dict(progress)
        self.saves += 1


def save_last_import(
    program_id: str,
    status: str,
    *,
    error: str | None = None,
    item_count: int = 0,
    warnings: list[str] | None = None,
    path: Path | str | None = None,
) -> bool:
    """Save metadata about the most recent import, for debugging.

    Args:
        program_id: Program the document was imported into.
        status: Import status ("success" or "failed").
        error: Error message if failed.
        item_count: Number of nodes in the imported tree.
        warnings: Non-fatal problems reported by the import.
        path: Destination. Defaults to import.last_update.json in the data dir.

    Returns:
        True if save succeeded.
    """
    data: dict[str, Any] = {
        "timestamp": datetime.now(UTC).isoformat(),
        "program_id": program_id,
        "status": status,
        "item_count": item_count,
    }
    if error:
        data["error"] = error
    if warnings:
        data["warnings"] = list(warnings)

    return write_json(path if path is not None else get_last_import_path(), data)
