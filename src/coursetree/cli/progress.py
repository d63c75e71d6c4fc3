"""Enrollment progress commands."""

from typing import Annotated

import typer

from coursetree.cli.common import parse_status, progress_service, run
from coursetree.curriculum.progress import current_item
from coursetree.curriculum.render import render_progress

app = typer.Typer(
    name="progress",
    help="Per-enrollment curriculum progress",
    no_args_is_help=True,
)


@app.command("create")
def create(
    enrollment_id: Annotated[str, typer.Argument(help="Enrollment id")],
    program_id: Annotated[str, typer.Argument(help="Program to track")],
) -> None:
    """Start tracking an enrollment against a copy of a program's curriculum."""
    record = run(progress_service().create_progress, enrollment_id, program_id)
    typer.echo(
        f"Tracking {len(record.structure)} item(s) of {record.program_title!r} "
        f"for {enrollment_id}",
        err=True,
    )


@app.command("show")
def show(
    enrollment_id: Annotated[str, typer.Argument(help="Enrollment id")],
) -> None:
    """Show an enrollment's progress as a checklist."""
    record = run(progress_service().get_progress, enrollment_id)
    typer.echo(render_progress(record), nl=False)
    current = current_item(record.structure)
    if current is not None:
        typer.echo(f"\nCurrent: {current.title}")


@app.command("set")
def set_status(
    enrollment_id: Annotated[str, typer.Argument(help="Enrollment id")],
    item_id: Annotated[str, typer.Argument(help="Item id")],
    status: Annotated[str, typer.Argument(help="Locked, In Progress or Completed")],
) -> None:
    """Set an item's status; completing an item completes everything under it."""
    new_status = parse_status(status)
    service = progress_service()
    record = run(service.set_status, enrollment_id, item_id, new_status)
    if item_id not in record.structure:
        typer.echo(f"Error: Item not found: {item_id}", err=True)
        raise typer.Exit(1)
    percent = run(service.percent_complete, enrollment_id)
    typer.echo(f"{record.structure.items[item_id].title}: {new_status} ({percent}% complete)")
