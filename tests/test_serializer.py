"""Tests for coursetree.curriculum.serializer module."""

from __future__ import annotations

import pytest

from coursetree.curriculum.models import ItemType
from coursetree.curriculum.serializer import (
    HEADERS,
    build,
    build_template_document,
    decode,
    encode,
    export_filename,
    export_tree,
    flatten,
    import_document,
)
from coursetree.curriculum.tree import CurriculumTree
from coursetree.errors import DocumentFormatError

HEADER_LINE = "id,parentTitle,record_type,title,url,instructions\n"


def row(record_type: str, title: str, parent: str = "", **fields: str) -> dict[str, str]:
    return {
        "id": fields.get("id", ""),
        "parentTitle": parent,
        "record_type": record_type,
        "title": title,
        "url": fields.get("url", ""),
        "instructions": fields.get("instructions", ""),
    }


class TestFlatten:
    """Tests for flatten."""

    def test_row_order(self, sample_tree: CurriculumTree) -> None:
        """Should list each node, then its attachments, then its children."""
        rows = flatten(sample_tree)

        assert [(r["record_type"], r["title"]) for r in rows] == [
            ("Chapter", "Numbers"),
            ("Topic", "Integers"),
            ("StudentResource", "Intro Video"),
            ("TeacherResource", "Notes"),
            ("Sub-Topic", "Addition"),
            ("Assignment", "Worksheet 1"),
            ("Sub-Topic", "Subtraction"),
            ("Topic", "Fractions"),
            ("Chapter", "Geometry"),
        ]

    def test_parent_titles(self, sample_tree: CurriculumTree) -> None:
        rows = {r["title"]: r for r in flatten(sample_tree)}

        assert rows["Numbers"]["parentTitle"] == ""
        assert rows["Addition"]["parentTitle"] == "Integers"
        assert rows["Worksheet 1"]["parentTitle"] == "Addition"
        assert rows["Worksheet 1"]["instructions"] == "Show your work"
        assert rows["Intro Video"]["url"] == "https://example.com/v1"

    def test_empty_tree(self) -> None:
        assert flatten(CurriculumTree()) == []
        assert export_tree(CurriculumTree()) == HEADER_LINE


class TestEncodeDecode:
    """Tests for encode and decode."""

    def test_header_first(self) -> None:
        assert encode([]).splitlines()[0] == ",".join(HEADERS)

    def test_quoting(self) -> None:
        """Should quote only fields that need it and double embedded quotes."""
        text = encode([row("Chapter", 'Say "hi", then go')])

        assert text == HEADER_LINE + ',,Chapter,"Say ""hi"", then go",,\n'

    def test_escaping_inverse(self) -> None:
        """Should decode exactly what was encoded, including line breaks."""
        rows = [
            row("Chapter", "Plain"),
            row("Topic", "Commas, here", "Plain"),
            row("Assignment", 'He said "ok"', "Commas, here", instructions="Line 1\nLine 2"),
            row("StudentResource", "Windows\r\nbreak", "Plain", url="https://x?a=1,2"),
            row("Topic", "Old Mac\rbreak", "Plain", instructions="a\rb"),
        ]

        assert decode(encode(rows)) == rows

    def test_bare_carriage_return_quoted(self) -> None:
        """A lone carriage return must not split the record on re-import."""
        rows = [dict(zip(HEADERS, ("a\r\nb", 'x,"y"', "Chapter", "t\rz", " u ", "\n")))]

        text = encode(rows)

        assert '"t\rz"' in text
        assert decode(text) == rows

    def test_bom_and_crlf(self) -> None:
        """Should accept a byte-order mark and CRLF record ends."""
        text = "\ufeffrecord_type,title\r\nChapter,One\r\n"

        assert decode(text) == [{"record_type": "Chapter", "title": "One"}]

    def test_blank_lines_skipped_and_short_rows_padded(self) -> None:
        text = "record_type,title,url\n\nChapter,One\n\n"

        assert decode(text) == [{"record_type": "Chapter", "title": "One", "url": ""}]

    def test_missing_required_column(self) -> None:
        with pytest.raises(DocumentFormatError, match="record_type"):
            decode("id,title\n1,One\n")

    def test_empty_document(self) -> None:
        with pytest.raises(DocumentFormatError):
            decode("")

    def test_unterminated_quote(self) -> None:
        """Should reject a quoted field that never closes."""
        with pytest.raises(DocumentFormatError):
            decode('record_type,title\nChapter,"never closed\n')

    def test_text_after_closing_quote(self) -> None:
        with pytest.raises(DocumentFormatError, match="Malformed CSV"):
            decode('record_type,title\nChapter,"One"two\n')


class TestBuild:
    """Tests for build."""

    def test_round_trip(self, sample_tree: CurriculumTree) -> None:
        """Should rebuild types, titles, shape and attachments."""
        result = import_document(export_tree(sample_tree))
        rebuilt = result.tree

        assert result.warnings == []
        assert [(i.type, i.title) for i in rebuilt] == [(i.type, i.title) for i in sample_tree]
        assert [len(rebuilt.children[i.id]) for i in rebuilt] == [
            len(sample_tree.children[i.id]) for i in sample_tree
        ]
        integers = next(i for i in rebuilt if i.title == "Integers")
        assert [(r.title, r.url) for r in integers.student_resources] == [
            ("Intro Video", "https://example.com/v1")
        ]
        assert [r.title for r in integers.teacher_resources] == ["Notes"]
        addition = next(i for i in rebuilt if i.title == "Addition")
        assert addition.assignments[0].instructions == "Show your work"

    def test_ids_preserved(self, sample_tree: CurriculumTree) -> None:
        rebuilt = import_document(export_tree(sample_tree)).tree

        assert [i.id for i in rebuilt] == [i.id for i in sample_tree]
        assert rebuilt.find("t1").student_resources[0].id == "r1"

    def test_missing_ids_generated(self) -> None:
        result = build([row("Chapter", "C"), row("Topic", "T", "C")])

        assert len(result.tree) == 2
        assert all(i.id for i in result.tree)

    def test_duplicate_ids_regenerated(self) -> None:
        result = build([row("Chapter", "A", id="x"), row("Chapter", "B", id="x")])

        assert len(result.tree) == 2
        assert len(set(result.tree.items)) == 2

    def test_unmatched_content_parent_dropped(self) -> None:
        """A content row whose parent title is unknown is dropped quietly."""
        result = build(
            [
                row("Chapter", "Ch 1"),
                row("StudentResource", "Video", "No Such Title", url="https://v"),
            ]
        )

        (only,) = list(result.tree)
        assert only.title == "Ch 1"
        assert only.student_resources == ()
        assert result.warnings == []
        assert result.dropped_rows == 1

    def test_unmatched_structural_parent_not_promoted(self) -> None:
        """A Topic with an unknown parent is dropped, not made a root."""
        result = build([row("Chapter", "A"), row("Topic", "Lost", "Nowhere")])

        assert [i.title for i in result.tree] == ["A"]

    def test_parentless_topic_dropped(self) -> None:
        """Only Chapters may be roots."""
        result = build([row("Topic", "Floating")])

        assert len(result.tree) == 0

    def test_duplicate_titles_do_not_crash(self) -> None:
        """Two Chapters with one title plus content for that title."""
        result = build(
            [
                row("Chapter", "Same"),
                row("Chapter", "Same"),
                row("StudentResource", "Video", "Same", url="https://v"),
            ]
        )

        assert len(result.tree) >= 1
        assert all(i.title == "Same" for i in result.tree)

    def test_empty_title_warns(self) -> None:
        result = build([row("Chapter", "A"), row("Topic", "", "A")])

        assert len(result.tree) == 1
        assert result.warnings == ["Row 2: skipped Topic with missing title"]

    def test_unknown_record_type_warns(self) -> None:
        result = build([row("Chapter", "A"), row("Video", "Clip", "A")])

        assert len(result.tree) == 1
        assert "unknown record_type 'Video'" in result.warnings[0]

    def test_children_before_parents(self) -> None:
        """Row order does not matter for linking."""
        result = build([row("Sub-Topic", "S", "T"), row("Topic", "T", "C"), row("Chapter", "C")])

        assert [(i.type, i.title) for i in result.tree] == [
            (ItemType.CHAPTER, "C"),
            (ItemType.TOPIC, "T"),
            (ItemType.SUB_TOPIC, "S"),
        ]

    def test_self_parent_cycle_dropped(self) -> None:
        result = build([row("Chapter", "C"), row("Topic", "Loop", "Loop")])

        assert [i.title for i in result.tree] == ["C"]

    def test_hierarchy_not_enforced(self) -> None:
        """Types are kept as written even where the levels do not fit."""
        result = build([row("Chapter", "C"), row("Sub-Topic", "S", "C")])

        assert result.tree.find(result.tree.children[result.tree.roots[0]][0]).type is (
            ItemType.SUB_TOPIC
        )
        assert result.tree.hierarchy_problems() != []


class TestTemplate:
    """Tests for the template document."""

    def test_template_imports_cleanly(self) -> None:
        result = import_document(build_template_document())

        assert result.warnings == []
        assert [i.title for i in result.tree.top_level] == [
            "Chapter 1: Getting Started",
            "Chapter 2: Moving Forward",
        ]
        assert len(result.tree) == 5
        sub = next(i for i in result.tree if i.type is ItemType.SUB_TOPIC)
        assert sub.assignments[0].instructions == "Complete all questions."

    def test_template_header(self) -> None:
        assert build_template_document().startswith(HEADER_LINE)


class TestExportFilename:
    """Tests for export_filename."""

    @pytest.mark.parametrize(
        ("title", "expected"),
        [
            ("Math 101", "math_101_curriculum.csv"),
            ("Intro: Python & AI!", "intro__python___ai__curriculum.csv"),
            ("Café", "caf__curriculum.csv"),
            ("", "_curriculum.csv"),
        ],
    )
    def test_slug(self, title: str, expected: str) -> None:
        assert export_filename(title) == expected
