"""Curriculum renderers.

Renders programs and progress copies to human-readable text: the
downloadable program outline, a compact one-line summary, and a status
checklist for an enrollment.
"""

from __future__ import annotations

from pathlib import Path

from coursetree.curriculum.models import CurriculumItem, CurriculumStatus
from coursetree.curriculum.program import CurriculumProgress, Program
from coursetree.curriculum.progress import percent_complete
from coursetree.curriculum.tree import CurriculumTree
from coursetree.io import write_file
from coursetree.logging import get_logger

_logger = get_logger("curriculum.render")

# Checklist marks for progress states
STATUS_ICONS = {
    CurriculumStatus.LOCKED: " ",
    CurriculumStatus.IN_PROGRESS: "~",
    CurriculumStatus.COMPLETED: "x",
}


def render_outline(program: Program) -> str:
    """Render a program and its curriculum as a plain-text outline.

    Args:
        program: Program to render.

    Returns:
        Outline text, one `- [Type] Title` line per node, indented two
        spaces per level, with attachment blocks under each node.
    """
    lines: list[str] = [
        f"Program: {program.title}",
        f"Status: {program.status}",
        "",
    ]
    if program.description:
        lines += ["Description:", program.description, ""]

    lines += ["Curriculum", "==========", ""]

    tree = program.structure
    if not tree.roots:
        lines.append("No curriculum defined for this program.")
        return "\n".join(lines) + "\n"

    previous_depth = None
    for item, depth in tree.walk():
        # Blank line between chapters
        if depth == 0 and previous_depth is not None:
            lines.append("")
        _render_item(item, "  " * depth, lines)
        previous_depth = depth

    return "\n".join(lines) + "\n"


def _render_item(item: CurriculumItem, indent: str, lines: list[str]) -> None:
    lines.append(f"{indent}- [{item.type}] {item.title}")

    if item.student_resources:
        lines.append(f"{indent}  Student Resources:")
        for res in item.student_resources:
            lines.append(f"{indent}    - {res.title}: {res.url}")

    if item.teacher_resources:
        lines.append(f"{indent}  Teacher Resources:")
        for res in item.teacher_resources:
            lines.append(f"{indent}    - {res.title}: {res.url}")

    if item.assignments:
        lines.append(f"{indent}  Assignments:")
        for asg in item.assignments:
            lines.append(f"{indent}    - {asg.title}")
            if asg.instructions:
                lines.append(f"{indent}      Instructions: {asg.instructions}")
            if asg.url:
                lines.append(f"{indent}      URL: {asg.url}")


def render_compact(tree: CurriculumTree) -> str:
    """Render a one-line summary of a tree."""
    attachments = sum(
        len(i.student_resources) + len(i.teacher_resources) + len(i.assignments)
        for i in tree.items.values()
    )
    parts = [f"chapters={len(tree.roots)}", f"items={len(tree)}"]
    if attachments:
        parts.append(f"attachments={attachments}")
    return f"Curriculum({', '.join(parts)})"


def render_progress(progress: CurriculumProgress) -> str:
    """Render an enrollment's progress as a Markdown checklist."""
    tree = progress.structure
    lines = [
        f"# {progress.program_title or 'Curriculum'}",
        "",
        f"_Enrollment {progress.enrollment_id}: {percent_complete(tree)}% complete_",
        "",
    ]
    if not tree.roots:
        lines.append("_No curriculum items._")
        return "\n".join(lines) + "\n"

    for item, depth in tree.walk():
        icon = STATUS_ICONS.get(item.status, " ")
        lines.append(f"{'  ' * depth}- [{icon}] {item.title} `{item.id}`")
    return "\n".join(lines) + "\n"


def render_and_save(program: Program, output_path: Path | str) -> bool:
    """Render a program outline and save it to a file.

    Returns:
        True if save succeeded.
    """
    success = write_file(output_path, render_outline(program))
    if success:
        _logger.debug("Rendered outline of %s to %s", program.id, output_path)
    else:
        _logger.error("Failed to write outline to %s", output_path)
    return success
