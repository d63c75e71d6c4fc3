"""Resource links and assignment templates attached to curriculum nodes.

Every function takes a tree and returns a new tree. A node id that is no
longer in the tree makes the call a no-op, so a stale selection in the
caller cannot corrupt anything.
"""

from __future__ import annotations

import dataclasses
from typing import Any

from coursetree.curriculum.models import (
    AssignmentTemplate,
    ContentKind,
    CurriculumItem,
    ResourceKind,
    ResourceLink,
    new_id,
)
from coursetree.curriculum.tree import CurriculumTree
from coursetree.logging import get_logger

_logger = get_logger("curriculum.attachments")

# Node field holding each attachment list
CONTENT_FIELDS: dict[ContentKind, str] = {
    ContentKind.STUDENT_RESOURCE: "student_resources",
    ContentKind.TEACHER_RESOURCE: "teacher_resources",
    ContentKind.ASSIGNMENT: "assignments",
}

RESOURCE_CONTENT: dict[ResourceKind, ContentKind] = {
    ResourceKind.STUDENT: ContentKind.STUDENT_RESOURCE,
    ResourceKind.TEACHER: ContentKind.TEACHER_RESOURCE,
}


def content_of(
    item: CurriculumItem, kind: ContentKind | str
) -> tuple[ResourceLink, ...] | tuple[AssignmentTemplate, ...]:
    """Return one attachment list of a node."""
    return getattr(item, CONTENT_FIELDS[ContentKind(kind)])


def _append(
    tree: CurriculumTree,
    node_id: str,
    kind: ContentKind,
    entry: ResourceLink | AssignmentTemplate,
) -> CurriculumTree:
    item = tree.find(node_id)
    if item is None:
        _logger.info("Cannot attach %s to missing node %s", kind, node_id)
        return tree
    field_name = CONTENT_FIELDS[kind]
    return tree.update(node_id, **{field_name: getattr(item, field_name) + (entry,)})


def add_resource(
    tree: CurriculumTree,
    node_id: str,
    kind: ResourceKind | str,
    title: str,
    url: str,
    *,
    resource_id: str | None = None,
) -> CurriculumTree:
    """Append a student or teacher resource link to a node.

    Duplicate titles and urls are allowed.

    Args:
        tree: Tree to modify.
        node_id: Target node.
        kind: "student" or "teacher".
        title: Link title.
        url: Link target.
        resource_id: Id for the new link; generated when omitted.

    Returns:
        New tree, or the same tree if node_id is unknown.
    """
    link = ResourceLink(id=resource_id or new_id("res"), title=title, url=url)
    return _append(tree, node_id, RESOURCE_CONTENT[ResourceKind(kind)], link)


def add_assignment(
    tree: CurriculumTree,
    node_id: str,
    title: str,
    url: str,
    instructions: str | None = None,
    *,
    assignment_id: str | None = None,
) -> CurriculumTree:
    """Append an assignment template to a node.

    Empty instructions are stored as None, as on import.
    """
    template = AssignmentTemplate(
        id=assignment_id or new_id("asg"),
        title=title,
        url=url,
        instructions=instructions or None,
    )
    return _append(tree, node_id, ContentKind.ASSIGNMENT, template)


def remove_content(
    tree: CurriculumTree,
    node_id: str,
    kind: ContentKind | str,
    content_id: str,
) -> CurriculumTree:
    """Remove one attachment from a node by id."""
    kind = ContentKind(kind)
    item = tree.find(node_id)
    if item is None:
        return tree
    entries = content_of(item, kind)
    kept = tuple(e for e in entries if e.id != content_id)
    if len(kept) == len(entries):
        return tree
    return tree.update(node_id, **{CONTENT_FIELDS[kind]: kept})


def update_content(
    tree: CurriculumTree,
    node_id: str,
    kind: ContentKind | str,
    content_id: str,
    **changes: Any,
) -> CurriculumTree:
    """Edit one attachment in place, keeping its position and id."""
    kind = ContentKind(kind)
    item = tree.find(node_id)
    if item is None:
        return tree
    changes.pop("id", None)
    if "instructions" in changes:
        changes["instructions"] = changes["instructions"] or None
    entries = content_of(item, kind)
    if not any(e.id == content_id for e in entries):
        return tree
    updated = tuple(
        dataclasses.replace(e, **changes) if e.id == content_id else e for e in entries
    )
    return tree.update(node_id, **{CONTENT_FIELDS[kind]: updated})
