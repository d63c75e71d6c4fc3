"""Helpers shared by the CLI command groups."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import anyio
import typer

from coursetree.config import get_last_import_path
from coursetree.curriculum.models import ContentKind, CurriculumStatus
from coursetree.curriculum.service import CurriculumService, ProgressService
from coursetree.curriculum.store import JsonProgramRepository, JsonProgressRepository
from coursetree.errors import CoursetreeError
from coursetree.logging import get_logger

_logger = get_logger("cli")

T = TypeVar("T")


def curriculum_service() -> CurriculumService:
    """Build a CurriculumService over the data directory."""
    return CurriculumService(JsonProgramRepository(), import_log_path=get_last_import_path())


def progress_service() -> ProgressService:
    """Build a ProgressService over the data directory."""
    return ProgressService(JsonProgramRepository(), JsonProgressRepository())


def run(func: Callable[..., Awaitable[T]], *args: Any) -> T:
    """Run an async service call, turning domain errors into exit code 1."""
    try:
        return anyio.run(func, *args)
    except CoursetreeError as e:
        _logger.debug("Command failed: %r", e)
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from e


def _normalize(value: str) -> str:
    return value.strip().lower().replace("-", " ").replace("_", " ")


def parse_status(value: str) -> CurriculumStatus:
    """Parse a status name leniently ("completed", "in-progress", "In Progress")."""
    wanted = _normalize(value)
    for status in CurriculumStatus:
        if _normalize(status.value) == wanted:
            return status
    choices = ", ".join(s.value for s in CurriculumStatus)
    typer.echo(f"Error: Unknown status {value!r} (expected one of: {choices})", err=True)
    raise typer.Exit(1)


def parse_content_kind(value: str) -> ContentKind:
    """Parse an attachment kind by its value, ignoring case."""
    for kind in ContentKind:
        if kind.value.lower() == value.strip().lower():
            return kind
    choices = ", ".join(k.value for k in ContentKind)
    typer.echo(f"Error: Unknown content kind {value!r} (expected one of: {choices})", err=True)
    raise typer.Exit(1)
