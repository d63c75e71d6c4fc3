"""CSV export/import of curriculum trees.

A tree is flattened to one row per node and one row per attachment. Rows
reference their parent by *title*, not id, so hand-written documents can be
imported. Import rebuilds the tree in two passes: create every structural
node and index it by title, then link rows to their parents through that
index.

Titles must be unique for an export to re-import faithfully; with
duplicate titles the last node indexed under a title wins.
"""

from __future__ import annotations

import csv
import io
import re
from dataclasses import dataclass, field

from coursetree.curriculum.models import (
    AssignmentTemplate,
    CurriculumItem,
    ItemType,
    ResourceLink,
    new_id,
)
from coursetree.curriculum.tree import CurriculumTree
from coursetree.errors import DocumentFormatError
from coursetree.logging import get_logger

_logger = get_logger("curriculum.serializer")

HEADERS: tuple[str, ...] = ("id", "parentTitle", "record_type", "title", "url", "instructions")
REQUIRED_COLUMNS = frozenset({"record_type", "title"})

STUDENT_RESOURCE = "StudentResource"
TEACHER_RESOURCE = "TeacherResource"
ASSIGNMENT = "Assignment"

STRUCTURAL_TYPES = frozenset(t.value for t in ItemType)
CONTENT_TYPES = frozenset({STUDENT_RESOURCE, TEACHER_RESOURCE, ASSIGNMENT})

Row = dict[str, str]

TEMPLATE_ROWS: tuple[Row, ...] = (
    {"parentTitle": "", "record_type": "Chapter", "title": "Chapter 1: Getting Started"},
    {
        "parentTitle": "Chapter 1: Getting Started",
        "record_type": "Topic",
        "title": "Topic 1.1: First Steps",
    },
    {
        "parentTitle": "Topic 1.1: First Steps",
        "record_type": STUDENT_RESOURCE,
        "title": "Intro Video",
        "url": "https://example.com/video1",
    },
    {
        "parentTitle": "Topic 1.1: First Steps",
        "record_type": TEACHER_RESOURCE,
        "title": "Teacher Notes for 1.1",
        "url": "https://example.com/notes1",
    },
    {
        "parentTitle": "Topic 1.1: First Steps",
        "record_type": "Sub-Topic",
        "title": "Sub-Topic 1.1.1: Your First Assignment",
    },
    {
        "parentTitle": "Sub-Topic 1.1.1: Your First Assignment",
        "record_type": ASSIGNMENT,
        "title": "Worksheet 1",
        "url": "https://example.com/worksheet1.pdf",
        "instructions": "Complete all questions.",
    },
    {
        "parentTitle": "Chapter 1: Getting Started",
        "record_type": "Topic",
        "title": "Topic 1.2: Advanced Concepts",
    },
    {"parentTitle": "", "record_type": "Chapter", "title": "Chapter 2: Moving Forward"},
)


@dataclass
class BuildResult:
    """Outcome of rebuilding a tree from rows.

    Attributes:
        tree: The reconstructed tree.
        warnings: Non-fatal problems worth showing to the user.
        dropped_rows: Rows that did not make it into the tree.
    """

    tree: CurriculumTree
    warnings: list[str] = field(default_factory=list)
    dropped_rows: int = 0


def _row(
    item_id: str,
    parent_title: str,
    record_type: str,
    title: str,
    url: str = "",
    instructions: str = "",
) -> Row:
    return {
        "id": item_id,
        "parentTitle": parent_title,
        "record_type": record_type,
        "title": title,
        "url": url,
        "instructions": instructions,
    }


def flatten(tree: CurriculumTree) -> list[Row]:
    """Flatten a tree to export rows, pre-order.

    Each node's row is followed by its student resources, teacher resources
    and assignments, then by its children's rows.
    """
    rows: list[Row] = []
    for item, _depth in tree.walk():
        parent = tree.parent_of(item.id)
        rows.append(_row(item.id, parent.title if parent else "", str(item.type), item.title))
        for res in item.student_resources:
            rows.append(_row(res.id, item.title, STUDENT_RESOURCE, res.title, res.url))
        for res in item.teacher_resources:
            rows.append(_row(res.id, item.title, TEACHER_RESOURCE, res.title, res.url))
        for asg in item.assignments:
            rows.append(
                _row(asg.id, item.title, ASSIGNMENT, asg.title, asg.url, asg.instructions or "")
            )
    return rows


def encode(rows: list[Row]) -> str:
    """Encode rows as CSV text with the fixed export header.

    Fields holding a comma, a quote or a line break are quoted, with
    embedded quotes doubled. A record with a carriage return anywhere is
    written fully quoted; the writer only quotes on its own terminator.
    """
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n", quoting=csv.QUOTE_MINIMAL)
    quoted = csv.writer(buf, lineterminator="\n", quoting=csv.QUOTE_ALL)
    writer.writerow(HEADERS)
    for row in rows:
        values = [row.get(h) or "" for h in HEADERS]
        if any("\r" in value for value in values):
            quoted.writerow(values)
        else:
            writer.writerow(values)
    return buf.getvalue()


def decode(text: str) -> list[Row]:
    """Parse CSV text into rows keyed by the document's header.

    Blank records are skipped. Short records are padded with empty strings;
    extra trailing fields are ignored.

    Raises:
        DocumentFormatError: If the text is empty, the header lacks a
            required column, or the CSV is malformed.
    """
    # Spreadsheet exports often start with a byte-order mark
    text = text.removeprefix("\ufeff")

    reader = csv.reader(io.StringIO(text, newline=""), strict=True)
    header: list[str] | None = None
    rows: list[Row] = []
    try:
        for record in reader:
            if not record or (len(record) == 1 and not record[0].strip()):
                continue
            if header is None:
                header = [name.strip() for name in record]
                missing = REQUIRED_COLUMNS - set(header)
                if missing:
                    raise DocumentFormatError(
                        f"Header is missing column(s): {', '.join(sorted(missing))}"
                    )
                continue
            rows.append(
                {name: record[i] if i < len(record) else "" for i, name in enumerate(header)}
            )
    except csv.Error as e:
        raise DocumentFormatError(f"Malformed CSV near line {reader.line_num}: {e}") from e

    if header is None:
        raise DocumentFormatError("Document is empty")
    return rows


def _is_ancestor(candidate: str, node_id: str, parent_of: dict[str, str]) -> bool:
    current: str | None = node_id
    while current is not None:
        if current == candidate:
            return True
        current = parent_of.get(current)
    return False


def build(rows: list[Row]) -> BuildResult:
    """Rebuild a tree from rows, linking by parent title.

    Pass 1 creates a node for every structural row and indexes it by title.
    Pass 2 links structural rows under their parent (or as roots when a
    Chapter has no parentTitle) and attaches content rows to their parent.
    Rows whose parent cannot be resolved are dropped; rows with an empty
    title are skipped with a warning.
    """
    warnings: list[str] = []
    dropped = 0

    # Pass 1: structural nodes by title (last one wins on duplicates)
    by_title: dict[str, CurriculumItem] = {}
    used_ids: set[str] = set()
    for row in rows:
        record_type = (row.get("record_type") or "").strip()
        title = row.get("title") or ""
        if record_type not in STRUCTURAL_TYPES or not title:
            continue
        item_id = (row.get("id") or "").strip()
        if not item_id or item_id in used_ids:
            item_id = new_id("item")
        used_ids.add(item_id)
        if title in by_title:
            _logger.debug("Duplicate title %r, keeping the later row", title)
        by_title[title] = CurriculumItem(id=item_id, title=title, type=ItemType(record_type))

    # Pass 2: link
    roots: list[str] = []
    placed: set[str] = set()
    children: dict[str, list[str]] = {}
    parent_of: dict[str, str] = {}
    content: dict[str, dict[str, list[ResourceLink | AssignmentTemplate]]] = {}

    for number, row in enumerate(rows, start=1):
        record_type = (row.get("record_type") or "").strip()
        title = row.get("title") or ""
        parent_title = row.get("parentTitle") or ""

        if not title:
            warnings.append(f"Row {number}: skipped {record_type or 'record'} with missing title")
            dropped += 1
            continue

        parent = by_title.get(parent_title) if parent_title else None

        if record_type in STRUCTURAL_TYPES:
            item = by_title[title]
            if item.id in placed:
                warnings.append(f"Row {number}: {title!r} is already placed, duplicate ignored")
                dropped += 1
            elif parent is not None:
                if _is_ancestor(item.id, parent.id, parent_of):
                    warnings.append(f"Row {number}: {title!r} cannot be placed under itself")
                    dropped += 1
                    continue
                children.setdefault(parent.id, []).append(item.id)
                parent_of[item.id] = parent.id
                placed.add(item.id)
            elif not parent_title and item.type is ItemType.CHAPTER:
                roots.append(item.id)
                placed.add(item.id)
            else:
                _logger.debug(
                    "Row %d: parent %r not found, dropping %r", number, parent_title, title
                )
                dropped += 1

        elif record_type in CONTENT_TYPES:
            if parent is None:
                _logger.debug(
                    "Row %d: parent %r not found, dropping %r", number, parent_title, title
                )
                dropped += 1
                continue
            content_id = (row.get("id") or "").strip()
            lists = content.setdefault(parent.id, {})
            if record_type == ASSIGNMENT:
                entry: ResourceLink | AssignmentTemplate = AssignmentTemplate(
                    id=content_id or new_id("asg"),
                    title=title,
                    url=row.get("url") or "",
                    instructions=row.get("instructions") or None,
                )
                lists.setdefault("assignments", []).append(entry)
            else:
                entry = ResourceLink(
                    id=content_id or new_id("res"), title=title, url=row.get("url") or ""
                )
                key = (
                    "student_resources"
                    if record_type == STUDENT_RESOURCE
                    else "teacher_resources"
                )
                lists.setdefault(key, []).append(entry)

        else:
            warnings.append(f"Row {number}: unknown record_type {record_type!r}")
            dropped += 1

    # Keep only what hangs off a root
    items: dict[str, CurriculumItem] = {}
    node_by_id = {item.id: item for item in by_title.values()}
    stack = list(reversed(roots))
    while stack:
        item_id = stack.pop()
        node = node_by_id[item_id]
        attached = content.get(item_id)
        if attached:
            node = CurriculumItem(
                id=node.id,
                title=node.title,
                type=node.type,
                student_resources=tuple(attached.get("student_resources", ())),
                teacher_resources=tuple(attached.get("teacher_resources", ())),
                assignments=tuple(attached.get("assignments", ())),
            )
        items[item_id] = node
        stack.extend(reversed(children.get(item_id, [])))

    orphaned = len(node_by_id) - len(items)
    if orphaned:
        _logger.debug("%d node(s) not reachable from any Chapter were dropped", orphaned)

    tree = CurriculumTree(
        items=items,
        children={k: tuple(v) for k, v in children.items() if k in items},
        roots=tuple(roots),
    )
    for warning in warnings:
        _logger.info(warning)
    return BuildResult(tree=tree, warnings=warnings, dropped_rows=dropped)


def build_template_document() -> str:
    """Return the fixed example document shown to users before an import."""
    rows = [
        _row(
            "",
            r["parentTitle"],
            r["record_type"],
            r["title"],
            r.get("url", ""),
            r.get("instructions", ""),
        )
        for r in TEMPLATE_ROWS
    ]
    return encode(rows)


def export_filename(program_title: str) -> str:
    """Derive the export filename from a program title."""
    slug = re.sub(r"[^a-z0-9]", "_", program_title, flags=re.IGNORECASE).lower()
    return f"{slug}_curriculum.csv"


def export_tree(tree: CurriculumTree) -> str:
    """Flatten and encode a tree in one step."""
    return encode(flatten(tree))


def import_document(text: str) -> BuildResult:
    """Decode and build in one step; nothing is persisted here.

    Raises:
        DocumentFormatError: If the document cannot be parsed.
    """
    return build(decode(text))
