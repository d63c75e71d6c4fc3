"""Curriculum data model.

Node records are frozen and carry no children: the tree shape lives in
CurriculumTree. Dict conversion uses the camelCase keys of the persisted
JSON documents.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from enum import StrEnum
from typing import Any


class ItemType(StrEnum):
    """The three fixed levels of a curriculum tree, top to bottom."""

    CHAPTER = "Chapter"
    TOPIC = "Topic"
    SUB_TOPIC = "Sub-Topic"


class CurriculumStatus(StrEnum):
    """Completion state of a node inside a progress projection."""

    LOCKED = "Locked"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"


class ResourceKind(StrEnum):
    """Audience of a resource link."""

    STUDENT = "student"
    TEACHER = "teacher"


class ContentKind(StrEnum):
    """Attachment list of a node."""

    STUDENT_RESOURCE = "studentResource"
    TEACHER_RESOURCE = "teacherResource"
    ASSIGNMENT = "assignment"


# Which child type each level may hold; Sub-Topic is a leaf
CHILD_TYPE: dict[ItemType, ItemType | None] = {
    ItemType.CHAPTER: ItemType.TOPIC,
    ItemType.TOPIC: ItemType.SUB_TOPIC,
    ItemType.SUB_TOPIC: None,
}


def can_contain(parent_type: ItemType | str | None, child_type: ItemType | str) -> bool:
    """Check whether a node of child_type may sit under parent_type.

    A parent_type of None means the top level, where only Chapters live.
    """
    child_type = ItemType(child_type)
    if parent_type is None:
        return child_type is ItemType.CHAPTER
    return CHILD_TYPE[ItemType(parent_type)] is child_type


def new_id(prefix: str = "item") -> str:
    """Generate an opaque identifier."""
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


@dataclass(frozen=True)
class ResourceLink:
    """A titled URL attached to a node for students or teachers."""

    id: str
    title: str
    url: str

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "title": self.title, "url": self.url}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ResourceLink:
        return cls(
            id=str(data.get("id") or new_id("res")),
            title=data.get("title", ""),
            url=data.get("url", ""),
        )


@dataclass(frozen=True)
class AssignmentTemplate:
    """Gradable work attached to a node."""

    id: str
    title: str
    url: str
    instructions: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"id": self.id, "title": self.title, "url": self.url}
        if self.instructions is not None:
            data["instructions"] = self.instructions
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AssignmentTemplate:
        return cls(
            id=str(data.get("id") or new_id("asg")),
            title=data.get("title", ""),
            url=data.get("url", ""),
            instructions=data.get("instructions"),
        )


@dataclass(frozen=True)
class CurriculumItem:
    """A single Chapter, Topic or Sub-Topic, without its children.

    Attributes:
        id: Stable identifier, unique within one tree.
        title: Display title; also the cross-reference key on import.
        type: Level of the node.
        status: Completion state (only meaningful in a progress copy).
        student_resources: Links shown to students.
        teacher_resources: Links shown to teachers.
        assignments: Assignment templates.
    """

    id: str
    title: str
    type: ItemType
    status: CurriculumStatus = CurriculumStatus.LOCKED
    student_resources: tuple[ResourceLink, ...] = ()
    teacher_resources: tuple[ResourceLink, ...] = ()
    assignments: tuple[AssignmentTemplate, ...] = ()

    def __post_init__(self) -> None:
        # Accept plain strings and lists from callers building patches
        object.__setattr__(self, "type", ItemType(self.type))
        object.__setattr__(self, "status", CurriculumStatus(self.status))
        for name in ("student_resources", "teacher_resources", "assignments"):
            value = getattr(self, name)
            if not isinstance(value, tuple):
                object.__setattr__(self, name, tuple(value))

    @property
    def has_content(self) -> bool:
        return bool(self.student_resources or self.teacher_resources or self.assignments)

    def stripped(self) -> CurriculumItem:
        """Copy keeping only id, title and type; status reset to Locked."""
        return CurriculumItem(id=self.id, title=self.title, type=self.type)

    def to_dict(self, *, include_content: bool = True) -> dict[str, Any]:
        """Convert to a JSON-ready dict (children are added by the tree)."""
        data: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "type": str(self.type),
            "status": str(self.status),
        }
        if include_content:
            data["studentResources"] = [r.to_dict() for r in self.student_resources]
            data["teacherResources"] = [r.to_dict() for r in self.teacher_resources]
            data["assignments"] = [a.to_dict() for a in self.assignments]
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CurriculumItem:
        """Build a node from a JSON dict, ignoring any children key."""
        return cls(
            id=str(data["id"]),
            title=data.get("title", ""),
            type=ItemType(data["type"]),
            status=CurriculumStatus(data.get("status") or CurriculumStatus.LOCKED),
            student_resources=tuple(
                ResourceLink.from_dict(r) for r in data.get("studentResources") or []
            ),
            teacher_resources=tuple(
                ResourceLink.from_dict(r) for r in data.get("teacherResources") or []
            ),
            assignments=tuple(
                AssignmentTemplate.from_dict(a) for a in data.get("assignments") or []
            ),
        )
