"""Shared fixtures for coursetree tests."""

from __future__ import annotations

import os
from collections.abc import Iterator
from pathlib import Path
from unittest import mock

import pytest

from coursetree.curriculum.models import (
    AssignmentTemplate,
    CurriculumItem,
    ItemType,
    ResourceLink,
)
from coursetree.curriculum.program import Program
from coursetree.curriculum.tree import CurriculumTree


@pytest.fixture(autouse=True)
def data_dir(tmp_path: Path) -> Iterator[Path]:
    """Point COURSETREE_DATA_DIR at a per-test directory."""
    path = tmp_path / "data"
    with mock.patch.dict(os.environ, {"COURSETREE_DATA_DIR": str(path)}):
        yield path


def chapter(item_id: str, title: str, **kwargs) -> CurriculumItem:
    return CurriculumItem(id=item_id, title=title, type=ItemType.CHAPTER, **kwargs)


def topic(item_id: str, title: str, **kwargs) -> CurriculumItem:
    return CurriculumItem(id=item_id, title=title, type=ItemType.TOPIC, **kwargs)


def sub_topic(item_id: str, title: str, **kwargs) -> CurriculumItem:
    return CurriculumItem(id=item_id, title=title, type=ItemType.SUB_TOPIC, **kwargs)


@pytest.fixture
def sample_tree() -> CurriculumTree:
    """Two chapters; the first has two topics, one with two sub-topics.

    c1 Numbers
      t1 Integers  (student + teacher resource)
        s1 Addition  (assignment)
        s2 Subtraction
      t2 Fractions
    c2 Geometry
    """
    tree = CurriculumTree()
    tree = tree.insert(None, chapter("c1", "Numbers"))
    tree = tree.insert(
        "c1",
        topic(
            "t1",
            "Integers",
            student_resources=(ResourceLink("r1", "Intro Video", "https://example.com/v1"),),
            teacher_resources=(ResourceLink("r2", "Notes", "https://example.com/n1"),),
        ),
    )
    tree = tree.insert(
        "t1",
        sub_topic(
            "s1",
            "Addition",
            assignments=(
                AssignmentTemplate(
                    "a1", "Worksheet 1", "https://example.com/ws1.pdf", "Show your work"
                ),
            ),
        ),
    )
    tree = tree.insert("t1", sub_topic("s2", "Subtraction"))
    tree = tree.insert("c1", topic("t2", "Fractions"))
    tree = tree.insert(None, chapter("c2", "Geometry"))
    return tree


@pytest.fixture
def sample_program(sample_tree: CurriculumTree) -> Program:
    return Program(
        id="p1",
        title="Math 101",
        description="Foundations",
        status="Active",
        structure=sample_tree,
        extra={"teacherIds": ["u1"]},
    )
