"""Program commands: listing, outlines, cloning and CSV exchange."""

from pathlib import Path
from typing import Annotated

import typer

from coursetree.cli.common import curriculum_service, run
from coursetree.config import get_exports_dir
from coursetree.curriculum.program import ProgramStatus
from coursetree.curriculum.render import render_and_save, render_compact, render_outline
from coursetree.io import read_file, write_file

app = typer.Typer(
    name="program",
    help="Programs and their curricula",
    no_args_is_help=True,
)


@app.command("list")
def list_programs() -> None:
    """List all programs."""
    programs = run(curriculum_service().list_programs)
    if not programs:
        typer.echo("No programs.", err=True)
        return
    for program in programs:
        typer.echo(
            f"{program.id}\t{program.status}\t{program.title}\t"
            f"{render_compact(program.structure)}"
        )


@app.command("create")
def create(
    title: Annotated[str, typer.Argument(help="Program title")],
    description: Annotated[
        str,
        typer.Option("--description", "-d", help="Program description"),
    ] = "",
    status: Annotated[
        ProgramStatus,
        typer.Option("--status", "-s", case_sensitive=False, help="Program status"),
    ] = ProgramStatus.DRAFT,
) -> None:
    """Create a program with an empty curriculum."""
    program = run(curriculum_service().create_program, title, description, status)
    typer.echo(program.id)


@app.command("show")
def show(
    program_id: Annotated[str, typer.Argument(help="Program id")],
) -> None:
    """Show a program's tree with item ids."""
    program = run(curriculum_service().get_program, program_id)
    typer.echo(f"{program.title} [{program.status}]")
    typer.echo(render_compact(program.structure))
    for item, depth in program.structure.walk():
        typer.echo(f"{'  ' * depth}- [{item.type}] {item.title} ({item.id})")
    for problem in program.structure.hierarchy_problems():
        typer.echo(f"Warning: {problem}", err=True)


@app.command("outline")
def outline(
    program_id: Annotated[str, typer.Argument(help="Program id")],
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Write the outline to this file"),
    ] = None,
) -> None:
    """Print a program's curriculum as a text outline."""
    program = run(curriculum_service().get_program, program_id)
    if output is None:
        typer.echo(render_outline(program), nl=False)
        return
    if not render_and_save(program, output):
        typer.echo(f"Error: Could not write {output}", err=True)
        raise typer.Exit(1)
    typer.echo(f"Outline written to {output}", err=True)


@app.command("clone")
def clone(
    program_id: Annotated[str, typer.Argument(help="Program id")],
) -> None:
    """Copy a program as a new Draft."""
    program = run(curriculum_service().clone_program, program_id)
    typer.echo(program.id)
    typer.echo(f"Cloned as {program.title!r}", err=True)


@app.command("export")
def export(
    program_id: Annotated[str, typer.Argument(help="Program id")],
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Output path (default: exports dir)"),
    ] = None,
) -> None:
    """Export a program's curriculum as CSV."""
    filename, text = run(curriculum_service().export_program, program_id)
    path = output or get_exports_dir() / filename
    if not write_file(path, text):
        typer.echo(f"Error: Could not write {path}", err=True)
        raise typer.Exit(1)
    typer.echo(str(path))


@app.command("import")
def import_(
    program_id: Annotated[str, typer.Argument(help="Program id")],
    file: Annotated[Path, typer.Argument(help="CSV document to import")],
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Replace the curriculum without asking"),
    ] = False,
) -> None:
    """Replace a program's curriculum with one read from a CSV document."""
    text = read_file(file)
    if text is None:
        typer.echo(f"Error: Could not read {file}", err=True)
        raise typer.Exit(1)

    service = curriculum_service()
    if not yes:
        program = run(service.get_program, program_id)
        typer.confirm(
            f"This replaces the whole curriculum of {program.title!r}. Continue?",
            abort=True,
        )

    report = run(service.import_program, program_id, text)
    for warning in report.warnings:
        typer.echo(f"Warning: {warning}", err=True)
    typer.echo(f"Imported {report.item_count} item(s)")


@app.command("template")
def template(
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Write the template to this file"),
    ] = None,
) -> None:
    """Print an example import document."""
    text = curriculum_service().template_document()
    if output is None:
        typer.echo(text, nl=False)
        return
    if not write_file(output, text):
        typer.echo(f"Error: Could not write {output}", err=True)
        raise typer.Exit(1)
    typer.echo(f"Template written to {output}", err=True)
