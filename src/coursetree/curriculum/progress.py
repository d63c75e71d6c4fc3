"""Per-enrollment progress tracking over a curriculum tree.

A progress copy is a status-only projection of the authoring tree, taken
once when the enrollment starts. Status changes propagate in two passes:

1. cascade (pre-order): completing a node completes every descendant;
2. aggregate (post-order): every node with children takes a status
   derived from its children, deepest nodes first.

There is no automatic "unlock the next node" sequencing; an instructor
may move any node to any state.
"""

from __future__ import annotations

import dataclasses
from collections import Counter
from collections.abc import Iterable

from coursetree.curriculum.models import CurriculumItem, CurriculumStatus
from coursetree.curriculum.tree import CurriculumTree
from coursetree.logging import get_logger

_logger = get_logger("curriculum.progress")


def project(tree: CurriculumTree) -> CurriculumTree:
    """Create a fresh progress copy of an authoring tree.

    Ids, titles, types and shape are kept; attachments are dropped and every
    node starts Locked.
    """
    return tree.map_items(CurriculumItem.stripped)


def aggregate_status(statuses: Iterable[CurriculumStatus]) -> CurriculumStatus:
    """Derive a parent's status from its children's statuses.

    Completed if every child is Completed, In Progress if any child is
    In Progress or Completed, otherwise Locked.
    """
    statuses = list(statuses)
    if statuses and all(s is CurriculumStatus.COMPLETED for s in statuses):
        return CurriculumStatus.COMPLETED
    if any(s is not CurriculumStatus.LOCKED for s in statuses):
        return CurriculumStatus.IN_PROGRESS
    return CurriculumStatus.LOCKED


def cascade(tree: CurriculumTree, item_id: str) -> CurriculumTree:
    """Force every descendant of a node to Completed."""
    updates = {
        item.id: dataclasses.replace(item, status=CurriculumStatus.COMPLETED)
        for item in tree.descendants_of(item_id)
        if item.status is not CurriculumStatus.COMPLETED
    }
    return tree.replace_items(updates)


def aggregate(tree: CurriculumTree) -> CurriculumTree:
    """Recompute the status of every node that has children, bottom-up."""
    statuses: dict[str, CurriculumStatus] = {}
    updates: dict[str, CurriculumItem] = {}
    for item in tree.post_order():
        child_ids = tree.children[item.id]
        if not child_ids:
            statuses[item.id] = item.status
            continue
        status = aggregate_status(statuses[c] for c in child_ids)
        statuses[item.id] = status
        if status is not item.status:
            updates[item.id] = dataclasses.replace(item, status=status)
    return tree.replace_items(updates)


def set_status(
    tree: CurriculumTree,
    item_id: str,
    status: CurriculumStatus | str,
) -> CurriculumTree:
    """Set one node's status and propagate it through the tree.

    Args:
        tree: Progress tree.
        item_id: Node to change.
        status: New status.

    Returns:
        New tree; the same tree if item_id is unknown.
    """
    status = CurriculumStatus(status)
    if item_id not in tree:
        _logger.info("Status change for unknown item %s ignored", item_id)
        return tree

    tree = tree.update(item_id, status=status)
    if status is CurriculumStatus.COMPLETED:
        tree = cascade(tree, item_id)
    return aggregate(tree)


def percent_complete(tree: CurriculumTree) -> int:
    """Share of Completed nodes across all levels, as a whole percent.

    Halves round up; an empty tree is 0.
    """
    total = len(tree)
    if not total:
        return 0
    completed = status_counts(tree)[CurriculumStatus.COMPLETED]
    return (completed * 200 + total) // (total * 2)


def status_counts(tree: CurriculumTree) -> dict[CurriculumStatus, int]:
    """Number of nodes in each status (every status present, possibly 0)."""
    counts = Counter(item.status for item in tree.items.values())
    return {status: counts.get(status, 0) for status in CurriculumStatus}


def journey(tree: CurriculumTree) -> list[CurriculumItem]:
    """All nodes in reading order (pre-order)."""
    return list(tree)


def current_item(tree: CurriculumTree) -> CurriculumItem | None:
    """The node a learner is on: first In Progress node, else the first node."""
    nodes = journey(tree)
    for item in nodes:
        if item.status is CurriculumStatus.IN_PROGRESS:
            return item
    return nodes[0] if nodes else None


def milestones(tree: CurriculumTree, item_ids: Iterable[str]) -> list[str]:
    """Titles of Completed nodes among item_ids, in reading order.

    item_ids is typically the curriculum items covered by completed sessions
    in a reporting window.
    """
    wanted = set(item_ids)
    return [
        item.title
        for item in tree
        if item.id in wanted and item.status is CurriculumStatus.COMPLETED
    ]
