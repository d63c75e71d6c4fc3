"""Curriculum authoring and progress services.

Each mutating call reads the whole collection from its repository, applies
one tree operation, and writes the whole collection back. Tree work is
synchronous and pure; only the repositories are async.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from coursetree.curriculum import attachments, progress, serializer
from coursetree.curriculum.models import (
    ContentKind,
    CurriculumItem,
    CurriculumStatus,
    ItemType,
    ResourceKind,
    can_contain,
    new_id,
)
from coursetree.curriculum.program import CurriculumProgress, Program, ProgramStatus
from coursetree.curriculum.store import (
    ProgramRepository,
    ProgressRepository,
    save_last_import,
)
from coursetree.curriculum.tree import CurriculumTree
from coursetree.errors import (
    DocumentFormatError,
    HierarchyError,
    ProgramNotFoundError,
    ProgressNotFoundError,
)
from coursetree.logging import get_logger

_logger = get_logger("curriculum.service")


@dataclass
class ImportReport:
    """Summary of a successful import.

    Attributes:
        item_count: Structural nodes in the new tree.
        warnings: Non-fatal problems, e.g. rows skipped for a missing title.
        dropped_rows: Rows that did not make it into the tree.
    """

    item_count: int
    warnings: list[str] = field(default_factory=list)
    dropped_rows: int = 0


class CurriculumService:
    """Authoring operations on program curricula.

    Args:
        programs: Program repository.
        import_log_path: Where to record the last import. None disables it.
    """

    def __init__(
        self,
        programs: ProgramRepository,
        *,
        import_log_path: Path | str | None = None,
    ) -> None:
        self.programs = programs
        self.import_log_path = import_log_path

    async def list_programs(self) -> list[Program]:
        return await self.programs.get_programs()

    async def create_program(
        self,
        title: str,
        description: str = "",
        status: ProgramStatus | str = ProgramStatus.DRAFT,
    ) -> Program:
        """Create a program with an empty curriculum."""
        program = Program(
            id=new_id("prog"),
            title=title,
            description=description,
            status=ProgramStatus(status).value,
        )
        programs = await self.programs.get_programs()
        await self.programs.save_programs([*programs, program])
        _logger.info("Created program %s (%r)", program.id, title)
        return program

    async def get_program(self, program_id: str) -> Program:
        """Return one program.

        Raises:
            ProgramNotFoundError: If no program has this id.
        """
        for program in await self.programs.get_programs():
            if program.id == program_id:
                return program
        raise ProgramNotFoundError(f"Program not found: {program_id}")

    async def _apply(
        self,
        program_id: str,
        change: Callable[[CurriculumTree], CurriculumTree],
    ) -> Program:
        """Read all programs, change one program's tree, write all back."""
        programs = await self.programs.get_programs()
        for index, program in enumerate(programs):
            if program.id == program_id:
                break
        else:
            raise ProgramNotFoundError(f"Program not found: {program_id}")

        tree = change(program.structure)
        if tree is program.structure:
            _logger.debug("Program %s unchanged, nothing to save", program_id)
            return program

        updated = program.with_structure(tree)
        programs[index] = updated
        await self.programs.save_programs(programs)
        return updated

    async def add_item(
        self,
        program_id: str,
        parent_id: str | None,
        title: str,
        item_type: ItemType | str,
    ) -> CurriculumItem:
        """Add a Chapter at the top level or a child under parent_id.

        Returns:
            The new node.

        Raises:
            HierarchyError: If item_type may not sit at that position, or
                parent_id is not in the tree.
        """
        item_type = ItemType(item_type)
        item = CurriculumItem(id=new_id("item"), title=title, type=item_type)

        def change(tree: CurriculumTree) -> CurriculumTree:
            parent_type = None
            if parent_id is not None:
                parent = tree.find(parent_id)
                if parent is None:
                    raise HierarchyError(f"Parent item not found: {parent_id}")
                parent_type = parent.type
            if not can_contain(parent_type, item_type):
                where = f"a {parent_type}" if parent_type else "the top level"
                raise HierarchyError(f"A {item_type} cannot be added to {where}")
            return tree.insert(parent_id, item)

        await self._apply(program_id, change)
        _logger.info("Added %s %r to program %s", item_type, title, program_id)
        return item

    async def rename_item(self, program_id: str, item_id: str, title: str) -> Program:
        return await self._apply(program_id, lambda tree: tree.update(item_id, title=title))

    async def delete_item(self, program_id: str, item_id: str) -> Program:
        """Remove a node and its whole subtree."""
        return await self._apply(program_id, lambda tree: tree.delete(item_id))

    async def add_resource(
        self,
        program_id: str,
        item_id: str,
        kind: ResourceKind | str,
        title: str,
        url: str,
    ) -> Program:
        return await self._apply(
            program_id,
            lambda tree: attachments.add_resource(tree, item_id, kind, title, url),
        )

    async def add_assignment(
        self,
        program_id: str,
        item_id: str,
        title: str,
        url: str,
        instructions: str | None = None,
    ) -> Program:
        return await self._apply(
            program_id,
            lambda tree: attachments.add_assignment(tree, item_id, title, url, instructions),
        )

    async def remove_content(
        self,
        program_id: str,
        item_id: str,
        kind: ContentKind | str,
        content_id: str,
    ) -> Program:
        return await self._apply(
            program_id,
            lambda tree: attachments.remove_content(tree, item_id, kind, content_id),
        )

    async def update_content(
        self,
        program_id: str,
        item_id: str,
        kind: ContentKind | str,
        content_id: str,
        **changes: Any,
    ) -> Program:
        return await self._apply(
            program_id,
            lambda tree: attachments.update_content(tree, item_id, kind, content_id, **changes),
        )

    async def export_program(self, program_id: str) -> tuple[str, str]:
        """Export a program's tree.

        Returns:
            (filename, document text).
        """
        program = await self.get_program(program_id)
        return serializer.export_filename(program.title), serializer.export_tree(
            program.structure
        )

    async def import_program(self, program_id: str, text: str) -> ImportReport:
        """Replace a program's whole tree with one built from a document.

        The document is decoded and built in memory first; nothing is
        written unless that succeeds.

        Raises:
            DocumentFormatError: If the document cannot be parsed.
            ProgramNotFoundError: If no program has this id.
        """
        try:
            result = serializer.import_document(text)
        except DocumentFormatError as e:
            self._log_import(program_id, "failed", error=str(e))
            raise

        await self._apply(program_id, lambda _tree: result.tree)
        report = ImportReport(
            item_count=len(result.tree),
            warnings=list(result.warnings),
            dropped_rows=result.dropped_rows,
        )
        self._log_import(
            program_id, "success", item_count=report.item_count, warnings=report.warnings
        )
        _logger.info(
            "Imported %d item(s) into program %s (%d row(s) dropped)",
            report.item_count,
            program_id,
            report.dropped_rows,
        )
        return report

    def _log_import(self, program_id: str, status: str, **details: Any) -> None:
        if self.import_log_path is None:
            return
        if not save_last_import(program_id, status, path=self.import_log_path, **details):
            _logger.warning("Could not record last import at %s", self.import_log_path)

    def template_document(self) -> str:
        return serializer.build_template_document()

    async def clone_program(self, program_id: str) -> Program:
        """Copy a program under a new id, as a Draft titled "<title> (Copy)"."""
        programs = await self.programs.get_programs()
        source = next((p for p in programs if p.id == program_id), None)
        if source is None:
            raise ProgramNotFoundError(f"Program not found: {program_id}")

        clone = dataclasses.replace(
            source,
            id=new_id("prog"),
            title=f"{source.title} (Copy)",
            status=ProgramStatus.DRAFT.value,
            extra=dict(source.extra),
        )
        await self.programs.save_programs([*programs, clone])
        _logger.info("Cloned program %s as %s", program_id, clone.id)
        return clone


class ProgressService:
    """Per-enrollment progress over frozen copies of program trees.

    Args:
        programs: Program repository, read when a copy is created.
        progress: Progress repository.
    """

    def __init__(self, programs: ProgramRepository, progress: ProgressRepository) -> None:
        self.programs = programs
        self.progress = progress

    async def create_progress(self, enrollment_id: str, program_id: str) -> CurriculumProgress:
        """Start tracking an enrollment with a fresh copy of the program tree.

        The copy is taken now; later edits to the program do not reach it.
        An existing copy for the enrollment is replaced.
        """
        program = await CurriculumService(self.programs).get_program(program_id)
        record = CurriculumProgress(
            enrollment_id=enrollment_id,
            program_title=program.title,
            structure=progress.project(program.structure),
        )
        records = await self.progress.get_progress()
        if enrollment_id in records:
            _logger.warning("Replacing existing progress for enrollment %s", enrollment_id)
        records[enrollment_id] = record
        await self.progress.save_progress(records)
        return record

    async def get_progress(self, enrollment_id: str) -> CurriculumProgress:
        """Return an enrollment's progress copy.

        Raises:
            ProgressNotFoundError: If the enrollment has no progress copy.
        """
        records = await self.progress.get_progress()
        try:
            return records[enrollment_id]
        except KeyError:
            raise ProgressNotFoundError(
                f"No curriculum progress for enrollment: {enrollment_id}"
            ) from None

    async def set_status(
        self,
        enrollment_id: str,
        item_id: str,
        status: CurriculumStatus | str,
    ) -> CurriculumProgress:
        """Change one node's status, cascading and re-aggregating the copy."""
        records = await self.progress.get_progress()
        record = records.get(enrollment_id)
        if record is None:
            raise ProgressNotFoundError(
                f"No curriculum progress for enrollment: {enrollment_id}"
            )

        tree = progress.set_status(record.structure, item_id, status)
        if tree is record.structure:
            return record

        record = record.with_structure(tree)
        records[enrollment_id] = record
        await self.progress.save_progress(records)
        return record

    async def percent_complete(self, enrollment_id: str) -> int:
        record = await self.get_progress(enrollment_id)
        return progress.percent_complete(record.structure)
