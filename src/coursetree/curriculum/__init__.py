"""Curriculum module for coursetree.

Provides the curriculum tree, attachments, CSV exchange, progress
tracking, rendering, storage and the services built on top of them.
"""

from coursetree.curriculum.models import (
    AssignmentTemplate,
    ContentKind,
    CurriculumItem,
    CurriculumStatus,
    ItemType,
    ResourceKind,
    ResourceLink,
    can_contain,
)
from coursetree.curriculum.program import CurriculumProgress, Program, ProgramStatus
from coursetree.curriculum.render import render_compact, render_outline, render_progress
from coursetree.curriculum.service import CurriculumService, ImportReport, ProgressService
from coursetree.curriculum.store import (
    InMemoryProgramRepository,
    InMemoryProgressRepository,
    JsonProgramRepository,
    JsonProgressRepository,
    save_last_import,
)
from coursetree.curriculum.tree import CurriculumTree

__all__ = [
    "AssignmentTemplate",
    "ContentKind",
    "CurriculumItem",
    "CurriculumProgress",
    "CurriculumService",
    "CurriculumStatus",
    "CurriculumTree",
    "ImportReport",
    "InMemoryProgramRepository",
    "InMemoryProgressRepository",
    "ItemType",
    "JsonProgramRepository",
    "JsonProgressRepository",
    "Program",
    "ProgramStatus",
    "ProgressService",
    "ResourceKind",
    "ResourceLink",
    "can_contain",
    "render_compact",
    "render_outline",
    "render_progress",
    "save_last_import",
]
