"""Persistent curriculum tree.

The tree is an arena: node records addressed by id plus an ordered tuple of
child ids per node and an ordered tuple of root ids. Every mutation returns
a new CurriculumTree; the old value stays valid and untouched node records
are shared between the two.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from functools import cached_property
from types import MappingProxyType
from typing import Any

from coursetree.curriculum.models import CurriculumItem, can_contain
from coursetree.errors import DuplicateItemError
from coursetree.logging import get_logger

_logger = get_logger("curriculum.tree")


@dataclass(frozen=True)
class CurriculumTree:
    """Immutable Chapter → Topic → Sub-Topic tree.

    Attributes:
        items: Node records by id.
        children: Ordered child ids by parent id (every node has an entry).
        roots: Ordered ids of the top-level Chapters.
    """

    items: Mapping[str, CurriculumItem] = field(default_factory=lambda: MappingProxyType({}))
    children: Mapping[str, tuple[str, ...]] = field(
        default_factory=lambda: MappingProxyType({})
    )
    roots: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        children = {item_id: tuple(self.children.get(item_id, ())) for item_id in self.items}
        object.__setattr__(self, "items", MappingProxyType(dict(self.items)))
        object.__setattr__(self, "children", MappingProxyType(children))
        object.__setattr__(self, "roots", tuple(self.roots))

    # -- construction -------------------------------------------------------

    @classmethod
    def from_structure(cls, structure: Iterable[dict[str, Any]] | None) -> CurriculumTree:
        """Build a tree from the nested JSON `structure` shape.

        Raises:
            DuplicateItemError: If two nodes share an id.
        """
        items: dict[str, CurriculumItem] = {}
        children: dict[str, list[str]] = {}
        roots: list[str] = []

        stack: list[tuple[dict[str, Any], str | None]] = [
            (data, None) for data in reversed(list(structure or []))
        ]
        while stack:
            data, parent_id = stack.pop()
            item = CurriculumItem.from_dict(data)
            if item.id in items:
                raise DuplicateItemError(f"Duplicate curriculum item id: {item.id}")
            items[item.id] = item
            children[item.id] = []
            if parent_id is None:
                roots.append(item.id)
            else:
                children[parent_id].append(item.id)
            for child in reversed(data.get("children") or []):
                stack.append((child, item.id))

        return cls(
            items=items,
            children={k: tuple(v) for k, v in children.items()},
            roots=tuple(roots),
        )

    def to_structure(self, *, include_content: bool = True) -> list[dict[str, Any]]:
        """Convert to the nested JSON `structure` shape."""
        out: list[dict[str, Any]] = []
        stack: list[tuple[str, list[dict[str, Any]]]] = [
            (root_id, out) for root_id in reversed(self.roots)
        ]
        while stack:
            item_id, siblings = stack.pop()
            data = self.items[item_id].to_dict(include_content=include_content)
            data["children"] = []
            siblings.append(data)
            for child_id in reversed(self.children[item_id]):
                stack.append((child_id, data["children"]))
        return out

    # -- queries ------------------------------------------------------------

    def __len__(self) -> int:
        return len(self.items)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self.items

    def __iter__(self) -> Iterator[CurriculumItem]:
        for item, _depth in self.walk():
            yield item

    @cached_property
    def _parents(self) -> dict[str, str]:
        return {
            child_id: parent_id
            for parent_id, child_ids in self.children.items()
            for child_id in child_ids
        }

    @property
    def top_level(self) -> tuple[CurriculumItem, ...]:
        return tuple(self.items[r] for r in self.roots)

    def find(self, item_id: str) -> CurriculumItem | None:
        """Return the node with this id, or None."""
        return self.items.get(item_id)

    def children_of(self, item_id: str) -> tuple[CurriculumItem, ...]:
        return tuple(self.items[c] for c in self.children.get(item_id, ()))

    def parent_of(self, item_id: str) -> CurriculumItem | None:
        parent_id = self._parents.get(item_id)
        return self.items[parent_id] if parent_id is not None else None

    def ancestors_of(self, item_id: str) -> list[CurriculumItem]:
        """Ancestors of a node, nearest first."""
        result = []
        parent_id = self._parents.get(item_id)
        while parent_id is not None:
            result.append(self.items[parent_id])
            parent_id = self._parents.get(parent_id)
        return result

    def subtree_ids(self, item_id: str) -> list[str]:
        """Ids of a node and all its descendants, pre-order."""
        if item_id not in self.items:
            return []
        result = []
        stack = [item_id]
        while stack:
            current = stack.pop()
            result.append(current)
            stack.extend(reversed(self.children[current]))
        return result

    def descendants_of(self, item_id: str) -> list[CurriculumItem]:
        """All descendants of a node, pre-order, excluding the node."""
        return [self.items[i] for i in self.subtree_ids(item_id)[1:]]

    def walk(self) -> Iterator[tuple[CurriculumItem, int]]:
        """Pre-order traversal yielding (node, depth); roots have depth 0."""
        stack = [(root_id, 0) for root_id in reversed(self.roots)]
        while stack:
            item_id, depth = stack.pop()
            yield self.items[item_id], depth
            stack.extend((c, depth + 1) for c in reversed(self.children[item_id]))

    def post_order(self) -> Iterator[CurriculumItem]:
        """Post-order traversal: every node after all of its children."""
        stack = [(root_id, False) for root_id in reversed(self.roots)]
        while stack:
            item_id, expanded = stack.pop()
            if expanded:
                yield self.items[item_id]
                continue
            stack.append((item_id, True))
            stack.extend((c, False) for c in reversed(self.children[item_id]))

    def hierarchy_problems(self) -> list[str]:
        """Describe every node whose type is not allowed where it sits."""
        problems = []
        for item, _depth in self.walk():
            parent = self.parent_of(item.id)
            if can_contain(parent.type if parent else None, item.type):
                continue
            where = f"under {parent.type} {parent.title!r}" if parent else "at the top level"
            problems.append(f"{item.type} {item.title!r} is not allowed {where}")
        return problems

    # -- mutations (each returns a new tree) --------------------------------

    def insert(self, parent_id: str | None, item: CurriculumItem) -> CurriculumTree:
        """Append a node as a new root (parent_id None) or as a parent's last child.

        Node types are not checked here; see can_contain.

        Raises:
            DuplicateItemError: If the tree already holds item.id.
        """
        if item.id in self.items:
            raise DuplicateItemError(f"Duplicate curriculum item id: {item.id}")
        if parent_id is not None and parent_id not in self.items:
            _logger.warning("Insert target %s not found, tree unchanged", parent_id)
            return self

        items = dict(self.items)
        items[item.id] = item
        children = dict(self.children)
        children[item.id] = ()
        roots = self.roots
        if parent_id is None:
            roots = roots + (item.id,)
        else:
            children[parent_id] = children[parent_id] + (item.id,)
        return CurriculumTree(items=items, children=children, roots=roots)

    def update(self, item_id: str, **changes: Any) -> CurriculumTree:
        """Return a tree where one node's fields are replaced from changes.

        Unknown ids leave the tree unchanged. Ids cannot be changed.
        """
        item = self.items.get(item_id)
        if item is None:
            return self
        if changes.get("id", item_id) != item_id:
            raise ValueError("Curriculum item ids cannot be changed")
        changes.pop("id", None)
        return self.replace_items({item_id: dataclasses.replace(item, **changes)})

    def replace_items(self, updates: Mapping[str, CurriculumItem]) -> CurriculumTree:
        """Swap several node records at once, keeping the shape.

        Ids not in the tree are ignored.
        """
        updates = {k: v for k, v in updates.items() if k in self.items}
        if not updates:
            return self
        for item_id, item in updates.items():
            if item.id != item_id:
                raise ValueError(f"Replacement for {item_id} carries id {item.id}")
        items = dict(self.items)
        items.update(updates)
        return CurriculumTree(items=items, children=self.children, roots=self.roots)

    def map_items(self, fn: Callable[[CurriculumItem], CurriculumItem]) -> CurriculumTree:
        """Apply fn to every node record, keeping the shape."""
        return self.replace_items({item_id: fn(item) for item_id, item in self.items.items()})

    def delete(self, item_id: str) -> CurriculumTree:
        """Remove a node and its whole subtree. Unknown ids are a no-op."""
        if item_id not in self.items:
            return self

        doomed = set(self.subtree_ids(item_id))
        items = {k: v for k, v in self.items.items() if k not in doomed}
        children = {k: v for k, v in self.children.items() if k not in doomed}
        parent_id = self._parents.get(item_id)
        roots = self.roots
        if parent_id is None:
            roots = tuple(r for r in roots if r != item_id)
        else:
            children[parent_id] = tuple(c for c in children[parent_id] if c != item_id)

        _logger.debug("Deleted %s and %d descendant(s)", item_id, len(doomed) - 1)
        return CurriculumTree(items=items, children=children, roots=roots)
