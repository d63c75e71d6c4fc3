"""Resource and assignment attachment commands."""

from typing import Annotated

import typer

from coursetree.cli.common import curriculum_service, parse_content_kind, run
from coursetree.curriculum.attachments import content_of
from coursetree.curriculum.models import ContentKind, ResourceKind
from coursetree.curriculum.program import Program

app = typer.Typer(
    name="content",
    help="Resources and assignments attached to items",
    no_args_is_help=True,
)


def _require_item(program: Program, item_id: str) -> None:
    if item_id not in program.structure:
        typer.echo(f"Error: Item not found: {item_id}", err=True)
        raise typer.Exit(1)


@app.command("add-resource")
def add_resource(
    program_id: Annotated[str, typer.Argument(help="Program id")],
    item_id: Annotated[str, typer.Argument(help="Item id")],
    title: Annotated[str, typer.Argument(help="Link title")],
    url: Annotated[str, typer.Argument(help="Link URL")],
    teacher: Annotated[
        bool,
        typer.Option("--teacher", help="Attach as a teacher resource"),
    ] = False,
) -> None:
    """Attach a resource link to an item (student resource by default)."""
    kind = ResourceKind.TEACHER if teacher else ResourceKind.STUDENT
    program = run(curriculum_service().add_resource, program_id, item_id, kind, title, url)
    _require_item(program, item_id)
    typer.echo(f"Added {kind} resource {title!r} to {item_id}", err=True)


@app.command("add-assignment")
def add_assignment(
    program_id: Annotated[str, typer.Argument(help="Program id")],
    item_id: Annotated[str, typer.Argument(help="Item id")],
    title: Annotated[str, typer.Argument(help="Assignment title")],
    url: Annotated[str, typer.Argument(help="Assignment URL")],
    instructions: Annotated[
        str | None,
        typer.Option("--instructions", "-i", help="Instructions for students"),
    ] = None,
) -> None:
    """Attach an assignment template to an item."""
    program = run(
        curriculum_service().add_assignment, program_id, item_id, title, url, instructions
    )
    _require_item(program, item_id)
    typer.echo(f"Added assignment {title!r} to {item_id}", err=True)


@app.command("list")
def list_content(
    program_id: Annotated[str, typer.Argument(help="Program id")],
    item_id: Annotated[str, typer.Argument(help="Item id")],
) -> None:
    """List the attachments of an item with their ids."""
    program = run(curriculum_service().get_program, program_id)
    _require_item(program, item_id)
    item = program.structure.items[item_id]
    for kind in ContentKind:
        for entry in content_of(item, kind):
            typer.echo(f"{kind}\t{entry.id}\t{entry.title}\t{entry.url}")


@app.command("remove")
def remove(
    program_id: Annotated[str, typer.Argument(help="Program id")],
    item_id: Annotated[str, typer.Argument(help="Item id")],
    kind: Annotated[
        str,
        typer.Argument(help="studentResource, teacherResource or assignment"),
    ],
    content_id: Annotated[str, typer.Argument(help="Attachment id")],
) -> None:
    """Remove one attachment from an item."""
    content_kind = parse_content_kind(kind)
    service = curriculum_service()
    program = run(service.get_program, program_id)
    _require_item(program, item_id)
    entries = content_of(program.structure.items[item_id], content_kind)
    if not any(entry.id == content_id for entry in entries):
        typer.echo(f"Error: No {content_kind} {content_id} on {item_id}", err=True)
        raise typer.Exit(1)
    run(service.remove_content, program_id, item_id, content_kind, content_id)
    typer.echo(f"Removed {content_kind} {content_id} from {item_id}", err=True)
