"""Program and CurriculumProgress records.

Both are persisted as whole collections by repositories. Program keeps
every field it does not know about in `extra`, so writing the collection
back never drops data owned by other parts of the platform.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from coursetree.curriculum.tree import CurriculumTree


class ProgramStatus(StrEnum):
    DRAFT = "Draft"
    ACTIVE = "Active"
    ARCHIVED = "Archived"


_PROGRAM_KEYS = frozenset({"id", "title", "description", "status", "structure"})


@dataclass(frozen=True)
class Program:
    """An education program and its authoring tree.

    Attributes:
        id: Program identifier.
        title: Program title; also used to name exports.
        description: Free text.
        status: Draft, Active or Archived (kept as given).
        structure: The authoring tree.
        extra: Fields owned by other subsystems, preserved verbatim.
    """

    id: str
    title: str
    description: str = ""
    status: str = ProgramStatus.DRAFT.value
    structure: CurriculumTree = field(default_factory=CurriculumTree)
    extra: dict[str, Any] = field(default_factory=dict)

    def with_structure(self, tree: CurriculumTree) -> Program:
        return dataclasses.replace(self, structure=tree)

    def to_dict(self) -> dict[str, Any]:
        return {
            **self.extra,
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "status": self.status,
            "structure": self.structure.to_structure(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Program:
        return cls(
            id=str(data["id"]),
            title=data.get("title", ""),
            description=data.get("description") or "",
            status=data.get("status") or ProgramStatus.DRAFT.value,
            structure=CurriculumTree.from_structure(data.get("structure")),
            extra={k: v for k, v in data.items() if k not in _PROGRAM_KEYS},
        )


@dataclass(frozen=True)
class CurriculumProgress:
    """One enrollment's status-tracking copy of a program's tree."""

    enrollment_id: str
    program_title: str
    structure: CurriculumTree = field(default_factory=CurriculumTree)

    def with_structure(self, tree: CurriculumTree) -> CurriculumProgress:
        return dataclasses.replace(self, structure=tree)

    def to_dict(self) -> dict[str, Any]:
        return {
            "enrollmentId": self.enrollment_id,
            "programTitle": self.program_title,
            "structure": self.structure.to_structure(include_content=False),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CurriculumProgress:
        # Attachments are not tracked per enrollment; drop any that slipped in
        tree = CurriculumTree.from_structure(data.get("structure"))
        return cls(
            enrollment_id=str(data["enrollmentId"]),
            program_title=data.get("programTitle", ""),
            structure=tree.map_items(
                lambda item: item if not item.has_content else dataclasses.replace(
                    item, student_resources=(), teacher_resources=(), assignments=()
                )
            ),
        )
