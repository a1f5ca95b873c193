"""
Command-line interface for the block editor core.

Usage:
    templebuilder show temple.json
    templebuilder materials
    templebuilder replay session.json --output ./output/temple.json --verbose
    templebuilder replay more.json --project temple.json -o temple2.json
"""

import logging
from pathlib import Path

import click
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from templebuilder.config import load_settings
from templebuilder.logging_config import setup_logging
from templebuilder.models import PlacedGroup
from templebuilder.replay import run_replay
from templebuilder.session import PlacementSession
from templebuilder.tools.catalog import get_material, list_materials
from templebuilder.tools.project_io import load_project_file


# Load TEMPLEBUILDER_* settings from a .env file if present.
load_dotenv()


console = Console()


def _fmt(values: tuple[float, float, float]) -> str:
    return ", ".join(f"{v:.3f}" for v in values)


def _material_label(name: str) -> str:
    # Unknown materials render as stone.
    material = get_material(name)
    return f"[{material.color}]{material.display_name}[/]"


@click.group()
def main():
    """Place, group and undo blocks without a viewport."""


@main.command()
@click.argument("project", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def show(project: Path):
    """
    Print the entities and structures stored in a project file.

    PROJECT: Path to a saved project JSON file
    """
    try:
        data = load_project_file(project)
    except Exception as e:
        console.print(f"[red bold]Error:[/red bold] {e}")
        raise click.Abort()

    table = Table(title=f"Placed entities ({len(data.entities)})")
    table.add_column("Id", style="dim")
    table.add_column("Kind")
    table.add_column("Shape / name")
    table.add_column("Material")
    table.add_column("Position", justify="right")
    for entity in data.entities:
        if isinstance(entity, PlacedGroup):
            table.add_row(entity.id, "group", entity.structure.name, "-", _fmt(entity.position))
        else:
            table.add_row(entity.id, "block", entity.shape.value, _material_label(entity.material), _fmt(entity.position))
    console.print(table)

    structures = Table(title=f"Structures ({len(data.structures)})")
    structures.add_column("Id", style="dim")
    structures.add_column("Name")
    structures.add_column("Blocks", justify="right")
    for structure in data.structures:
        structures.add_row(structure.id, structure.name, str(len(structure.blocks)))
    console.print(structures)


@main.command()
def materials():
    """List the materials blocks can be painted with."""
    table = Table(title="Materials")
    table.add_column("Id")
    table.add_column("Name")
    table.add_column("Color")
    table.add_column("Opacity", justify="right")
    for name in list_materials():
        material = get_material(name)
        table.add_row(
            name,
            material.display_name,
            f"[{material.color}]{material.color}[/]",
            f"{material.opacity:.1f}",
        )
    console.print(table)


@main.command()
@click.argument("script", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--output", "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    default=Path("./output/project.json"),
    help="Where to write the resulting project."
)
@click.option(
    "--project", "-p",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Existing project to start from."
)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    help="Show every step and debug logging."
)
def replay(script: Path, output: Path, project: Path | None, verbose: bool):
    """
    Replay a scripted editing session and save the result.

    SCRIPT: JSON list of session steps (pointer_move, confirm, undo, ...)
    """
    try:
        settings = load_settings()
        setup_logging(logging.DEBUG if verbose else settings.log_level)

        console.print("[bold]Temple Builder replay[/bold]")
        console.print(f"Script: {script}")
        console.print()

        run_replay(
            script,
            output,
            session=PlacementSession(settings),
            project_path=project,
            verbose=verbose,
        )
    except Exception as e:
        console.print(f"[red bold]Error:[/red bold] {e}")
        raise click.Abort()


if __name__ == "__main__":
    main()
