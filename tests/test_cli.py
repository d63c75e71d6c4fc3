"""Tests for the coursetree CLI."""

from __future__ import annotations

import json
import os
from pathlib import Path
from unittest import mock

import pytest
from typer.testing import CliRunner

from coursetree.cli import app

runner = CliRunner()


def invoke(*args: str, input: str | None = None):
    return runner.invoke(app, list(args), input=input)


@pytest.fixture
def program_id() -> str:
    result = invoke("program", "create", "Math 101", "--status", "Active")
    assert result.exit_code == 0, result.output
    return result.output.strip().splitlines()[-1]


def add(program_id: str, title: str, *options: str) -> str:
    result = invoke("item", "add", program_id, title, *options)
    assert result.exit_code == 0, result.output
    return result.output.strip().splitlines()[-1]


class TestProgramCommands:
    """Tests for `coursetree program`."""

    def test_no_args_shows_help(self) -> None:
        result = invoke()

        assert "program" in result.output
        assert "progress" in result.output

    def test_create_and_list(self, program_id: str, data_dir: Path) -> None:
        result = invoke("program", "list")

        assert result.exit_code == 0
        assert f"{program_id}\tActive\tMath 101" in result.output
        stored = json.loads((data_dir / "programs.json").read_text(encoding="utf-8"))
        assert stored[0]["title"] == "Math 101"

    def test_show_lists_ids(self, program_id: str) -> None:
        chapter_id = add(program_id, "Numbers")

        result = invoke("program", "show", program_id)

        assert result.exit_code == 0
        assert f"- [Chapter] Numbers ({chapter_id})" in result.output

    def test_unknown_program(self) -> None:
        result = invoke("program", "show", "nope")

        assert result.exit_code == 1
        assert "Error: Program not found: nope" in result.output

    def test_outline(self, program_id: str) -> None:
        chapter_id = add(program_id, "Numbers")
        add(program_id, "Integers", "--parent", chapter_id)

        result = invoke("program", "outline", program_id)

        assert result.exit_code == 0
        assert "- [Chapter] Numbers\n  - [Topic] Integers\n" in result.output

    def test_outline_to_file(self, program_id: str, tmp_path: Path) -> None:
        add(program_id, "Numbers")
        out = tmp_path / "outline.txt"

        result = invoke("program", "outline", program_id, "--output", str(out))

        assert result.exit_code == 0
        assert "- [Chapter] Numbers" in out.read_text(encoding="utf-8")

    def test_clone(self, program_id: str) -> None:
        result = invoke("program", "clone", program_id)

        assert result.exit_code == 0
        assert "Math 101 (Copy)" in invoke("program", "list").output

    def test_export_and_import(self, program_id: str, tmp_path: Path, data_dir: Path) -> None:
        chapter_id = add(program_id, "Numbers")
        add(program_id, "Integers", "--parent", chapter_id)

        exported = invoke("program", "export", program_id)
        assert exported.exit_code == 0
        path = data_dir / "exports" / "math_101_curriculum.csv"
        assert path.exists()

        other = invoke("program", "create", "Copy Target").output.strip().splitlines()[-1]
        result = invoke("program", "import", other, str(path), "--yes")

        assert result.exit_code == 0, result.output
        assert "Imported 2 item(s)" in result.output
        assert "- [Topic] Integers" in invoke("program", "outline", other).output

    def test_import_asks_first(self, program_id: str, tmp_path: Path) -> None:
        doc = tmp_path / "doc.csv"
        doc.write_text("record_type,title\nChapter,Only\n", encoding="utf-8")

        declined = invoke("program", "import", program_id, str(doc), input="n\n")
        assert declined.exit_code == 1
        assert "Only" not in invoke("program", "outline", program_id).output

        accepted = invoke("program", "import", program_id, str(doc), input="y\n")
        assert accepted.exit_code == 0
        assert "- [Chapter] Only" in invoke("program", "outline", program_id).output

    def test_import_malformed(self, program_id: str, tmp_path: Path) -> None:
        doc = tmp_path / "doc.csv"
        doc.write_text("id,title\n1,One\n", encoding="utf-8")

        result = invoke("program", "import", program_id, str(doc), "--yes")

        assert result.exit_code == 1
        assert "Error: Header is missing column(s): record_type" in result.output

    def test_import_missing_file(self, program_id: str, tmp_path: Path) -> None:
        result = invoke("program", "import", program_id, str(tmp_path / "no.csv"), "--yes")

        assert result.exit_code == 1
        assert "Could not read" in result.output

    def test_template(self, tmp_path: Path) -> None:
        result = invoke("program", "template")

        assert result.exit_code == 0
        assert result.output.startswith("id,parentTitle,record_type,title,url,instructions\n")

        out = tmp_path / "template.csv"
        assert invoke("program", "template", "--output", str(out)).exit_code == 0
        assert "Worksheet 1" in out.read_text(encoding="utf-8")

    def test_corrupt_store_reported(self, data_dir: Path) -> None:
        data_dir.mkdir(parents=True)
        (data_dir / "programs.json").write_text("{oops", encoding="utf-8")

        result = invoke("program", "list")

        assert result.exit_code == 1
        assert "Error:" in result.output
        assert (data_dir / "programs.json.bak").exists()

    def test_data_dir_option(self, tmp_path: Path) -> None:
        target = tmp_path / "elsewhere"
        with mock.patch.dict(os.environ, {}):
            result = invoke("--data-dir", str(target), "program", "create", "Remote")

        assert result.exit_code == 0
        assert (target / "programs.json").exists()


class TestItemCommands:
    """Tests for `coursetree item`."""

    def test_type_inferred_from_parent(self, program_id: str) -> None:
        chapter_id = add(program_id, "Numbers")
        topic_id = add(program_id, "Integers", "--parent", chapter_id)
        add(program_id, "Addition", "--parent", topic_id)

        output = invoke("program", "show", program_id).output

        assert "    - [Sub-Topic] Addition" in output

    def test_wrong_level_rejected(self, program_id: str) -> None:
        result = invoke("item", "add", program_id, "Loose", "--type", "Topic")

        assert result.exit_code == 1
        assert "Error: A Topic cannot be added to the top level" in result.output

    def test_sub_topic_has_no_children(self, program_id: str) -> None:
        chapter_id = add(program_id, "C")
        topic_id = add(program_id, "T", "--parent", chapter_id)
        sub_id = add(program_id, "S", "--parent", topic_id)

        result = invoke("item", "add", program_id, "Deeper", "--parent", sub_id)

        assert result.exit_code == 1
        assert "cannot have children" in result.output

    def test_rename_and_delete(self, program_id: str) -> None:
        chapter_id = add(program_id, "Numbers")
        add(program_id, "Integers", "--parent", chapter_id)

        assert invoke("item", "rename", program_id, chapter_id, "Arithmetic").exit_code == 0
        assert "Arithmetic" in invoke("program", "outline", program_id).output

        result = invoke("item", "delete", program_id, chapter_id)
        assert result.exit_code == 0
        assert "Deleted 2 item(s)" in result.output

    def test_unknown_item(self, program_id: str) -> None:
        assert invoke("item", "rename", program_id, "ghost", "X").exit_code == 1
        assert invoke("item", "delete", program_id, "ghost").exit_code == 1


class TestContentCommands:
    """Tests for `coursetree content`."""

    def test_add_list_remove(self, program_id: str) -> None:
        chapter_id = add(program_id, "Numbers")
        invoke("content", "add-resource", program_id, chapter_id, "Video", "https://v")
        invoke("content", "add-resource", program_id, chapter_id, "Key", "https://k", "--teacher")
        invoke(
            "content",
            "add-assignment",
            program_id,
            chapter_id,
            "Quiz",
            "https://q",
            "--instructions",
            "Timed",
        )

        listing = invoke("content", "list", program_id, chapter_id).output.splitlines()
        kinds = [line.split("\t")[0] for line in listing]
        assert kinds == ["studentResource", "teacherResource", "assignment"]

        content_id = listing[1].split("\t")[1]
        result = invoke("content", "remove", program_id, chapter_id, "teacherresource", content_id)
        assert result.exit_code == 0
        assert "Key" not in invoke("content", "list", program_id, chapter_id).output

    def test_remove_unknown_attachment(self, program_id: str) -> None:
        chapter_id = add(program_id, "Numbers")
        invoke("content", "add-resource", program_id, chapter_id, "Video", "https://v")

        result = invoke("content", "remove", program_id, chapter_id, "studentResource", "ghost")

        assert result.exit_code == 1
        assert f"Error: No studentResource ghost on {chapter_id}" in result.output
        assert "Removed" not in result.output
        assert "Video" in invoke("content", "list", program_id, chapter_id).output

    def test_unknown_kind(self, program_id: str) -> None:
        chapter_id = add(program_id, "Numbers")

        result = invoke("content", "remove", program_id, chapter_id, "video", "x")

        assert result.exit_code == 1
        assert "Unknown content kind" in result.output

    def test_missing_item(self, program_id: str) -> None:
        result = invoke("content", "add-resource", program_id, "ghost", "V", "https://v")

        assert result.exit_code == 1
        assert "Item not found" in result.output


class TestProgressCommands:
    """Tests for `coursetree progress`."""

    def test_track_enrollment(self, program_id: str) -> None:
        chapter_id = add(program_id, "Numbers")
        topic_id = add(program_id, "Integers", "--parent", chapter_id)
        add(program_id, "Fractions", "--parent", chapter_id)

        assert invoke("progress", "create", "e1", program_id).exit_code == 0

        result = invoke("progress", "set", "e1", topic_id, "completed")
        assert result.exit_code == 0, result.output
        assert "Integers: Completed (33% complete)" in result.output

        shown = invoke("progress", "show", "e1").output
        assert "- [~] Numbers" in shown
        assert "  - [x] Integers" in shown
        assert "Current: Numbers" in shown

    def test_lenient_status_names(self, program_id: str) -> None:
        chapter_id = add(program_id, "Numbers")
        invoke("progress", "create", "e1", program_id)

        result = invoke("progress", "set", "e1", chapter_id, "in-progress")

        assert result.exit_code == 0
        assert "Numbers: In Progress" in result.output

    def test_bad_status(self, program_id: str) -> None:
        chapter_id = add(program_id, "Numbers")
        invoke("progress", "create", "e1", program_id)

        result = invoke("progress", "set", "e1", chapter_id, "done")

        assert result.exit_code == 1
        assert "Unknown status" in result.output

    def test_unknown_enrollment(self) -> None:
        result = invoke("progress", "show", "e404")

        assert result.exit_code == 1
        assert "No curriculum progress for enrollment: e404" in result.output
