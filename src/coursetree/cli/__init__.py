"""Unified CLI for coursetree.

Provides a single entry point with subcommands organized by domain:

    coursetree program list            # List programs
    coursetree program create ...      # Create a program
    coursetree program outline ...     # Print a curriculum outline
    coursetree program export ...      # Export a curriculum as CSV
    coursetree program import ...      # Replace a curriculum from CSV
    coursetree item add ...            # Add a Chapter, Topic or Sub-Topic
    coursetree content add-resource .. # Attach a resource link
    coursetree progress set ...        # Change an enrollment's item status
"""

import os
from pathlib import Path
from typing import Annotated

import typer

from coursetree.cli import content, item, program, progress

app = typer.Typer(
    name="coursetree",
    help="coursetree: curriculum hierarchies for education programs",
    no_args_is_help=True,
)

app.add_typer(program.app)
app.add_typer(item.app)
app.add_typer(content.app)
app.add_typer(progress.app)


@app.callback()
def callback(
    data_dir: Annotated[
        Path | None,
        typer.Option("--data-dir", help="Data directory (default: ./.coursetree)"),
    ] = None,
) -> None:
    """Curriculum hierarchies for education programs."""
    if data_dir is not None:
        os.environ["COURSETREE_DATA_DIR"] = str(data_dir)


def main() -> None:
    """Main entry point for the coursetree CLI."""
    app()


if __name__ == "__main__":
    main()
