"""Curriculum item commands."""

from typing import Annotated

import typer

from coursetree.cli.common import curriculum_service, run
from coursetree.curriculum.models import CHILD_TYPE, CurriculumItem, ItemType
from coursetree.curriculum.service import CurriculumService
from coursetree.errors import HierarchyError

app = typer.Typer(
    name="item",
    help="Chapters, Topics and Sub-Topics",
    no_args_is_help=True,
)


async def _add(
    service: CurriculumService,
    program_id: str,
    parent_id: str | None,
    title: str,
    item_type: ItemType | None,
) -> CurriculumItem:
    # Without an explicit type, add the level that fits under the parent
    if item_type is None:
        if parent_id is None:
            item_type = ItemType.CHAPTER
        else:
            program = await service.get_program(program_id)
            parent = program.structure.find(parent_id)
            if parent is None:
                raise HierarchyError(f"Parent item not found: {parent_id}")
            item_type = CHILD_TYPE[parent.type]
            if item_type is None:
                raise HierarchyError(f"A {parent.type} cannot have children")
    return await service.add_item(program_id, parent_id, title, item_type)


@app.command("add")
def add(
    program_id: Annotated[str, typer.Argument(help="Program id")],
    title: Annotated[str, typer.Argument(help="Item title")],
    parent: Annotated[
        str | None,
        typer.Option("--parent", "-p", help="Parent item id (omit for a Chapter)"),
    ] = None,
    item_type: Annotated[
        ItemType | None,
        typer.Option("--type", "-t", case_sensitive=False, help="Item type"),
    ] = None,
) -> None:
    """Add a Chapter, or a child under --parent."""
    item = run(_add, curriculum_service(), program_id, parent, title, item_type)
    typer.echo(item.id)


@app.command("rename")
def rename(
    program_id: Annotated[str, typer.Argument(help="Program id")],
    item_id: Annotated[str, typer.Argument(help="Item id")],
    title: Annotated[str, typer.Argument(help="New title")],
) -> None:
    """Rename an item."""
    program = run(curriculum_service().rename_item, program_id, item_id, title)
    if item_id not in program.structure:
        typer.echo(f"Error: Item not found: {item_id}", err=True)
        raise typer.Exit(1)
    typer.echo(f"Renamed {item_id} to {title!r}", err=True)


@app.command("delete")
def delete(
    program_id: Annotated[str, typer.Argument(help="Program id")],
    item_id: Annotated[str, typer.Argument(help="Item id")],
) -> None:
    """Delete an item and everything under it."""
    service = curriculum_service()
    before = run(service.get_program, program_id)
    if item_id not in before.structure:
        typer.echo(f"Error: Item not found: {item_id}", err=True)
        raise typer.Exit(1)
    after = run(service.delete_item, program_id, item_id)
    typer.echo(f"Deleted {len(before.structure) - len(after.structure)} item(s)", err=True)
