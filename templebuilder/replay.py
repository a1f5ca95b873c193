"""
Scripted session replay.

Drives a PlacementSession from a JSON list of steps, the same commands the
interactive front end sends. Used to build scenes headless and to reproduce
editing sessions.

Each step is an object with an "op" key:
    {"op": "pointer_move", "hit": {"point": [0, 0, 0], "normal": [0, 1, 0]}}
    {"op": "pointer_move", "hit": {"point": [0, 1, 0], "normal": [0, 1, 0], "target": 0}}
    {"op": "confirm"}
    {"op": "rotate", "axis": "y"}
    {"op": "toggle", "index": 0}
    {"op": "create_structure", "name": "Pillar"}

Entities can be referenced by "id" or by "index" into the current scene.
A hit's "target" index fills in the target kind, transform and shape.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel

from templebuilder.errors import ReplayError, TempleBuilderError
from templebuilder.models import HitContext, PlacedEntity, TargetKind
from templebuilder.session import PlacementSession
from templebuilder.tools.project_io import load_project_file, save_project_file


logger = logging.getLogger(__name__)

console = Console()


@dataclass
class ReplayResult:
    """Outcome of a replay run."""
    steps: int = 0
    placed: int = 0
    structures: int = 0
    log: list[str] = field(default_factory=list)


# ============================================================================
# Step Helpers
# ============================================================================

def _entity(session: PlacementSession, step: dict) -> PlacedEntity:
    if "id" in step:
        return session.get_entity(str(step["id"]))
    index = step.get("index")
    if not isinstance(index, int) or isinstance(index, bool):
        raise ReplayError(f"Step {step.get('op')!r} needs an 'id' or integer 'index'")
    try:
        return session.entities[index]
    except IndexError:
        raise ReplayError(f"No entity at index {index}") from None


def _hit(session: PlacementSession, raw: Any) -> HitContext | None:
    if raw is None:
        return None
    if not isinstance(raw, dict):
        raise ReplayError("'hit' must be an object or null")

    values = {k: v for k, v in raw.items() if k != "target"}
    if "target" in raw:
        target = _entity(session, {"op": "pointer_move", "index": raw["target"]})
        values["target_kind"] = TargetKind.GROUP if target.is_group else TargetKind.BLOCK
        values["target_transform"] = target.transform
        values["target_shape"] = None if target.is_group else target.shape

    try:
        return HitContext(**values)
    except ValidationError as e:
        raise ReplayError(f"Invalid hit: {e}") from e


def _structure_id(session: PlacementSession, step: dict) -> str:
    if "id" in step:
        return str(step["id"])
    if "name" in step:
        for structure in session.structures:
            if structure.name == step["name"]:
                return structure.id
        raise ReplayError(f"No structure named {step['name']!r}")
    index = step.get("index", -1)
    try:
        return session.structures[index].id
    except (IndexError, TypeError):
        raise ReplayError(f"No structure at index {index}") from None


def apply_step(session: PlacementSession, step: dict) -> str:
    """Run one step against the session. Returns a short description."""
    if not isinstance(step, dict) or "op" not in step:
        raise ReplayError(f"Step must be an object with an 'op' key: {step!r}")
    op = step["op"]

    if op == "pointer_move":
        position = session.pointer_move(_hit(session, step.get("hit")))
        return f"pointer_move -> {position}"
    elif op == "confirm":
        entity = session.confirm()
        return f"confirm -> {entity.id if entity else 'nothing placed'}"
    elif op == "rotate":
        return f"rotate -> {session.rotate(step.get('axis', 'y'))}"
    elif op == "set_scale":
        session.set_scale(step["axis"], step["value"])
        return f"set_scale -> {session.scale}"
    elif op == "select_material":
        session.select_material(step["name"])
        return f"select_material {step['name']}"
    elif op == "select_shape":
        session.select_shape(step["name"])
        return f"select_shape {step['name']}"
    elif op == "set_mode":
        session.set_mode(step["mode"])
        return f"set_mode {session.mode.value}"
    elif op == "height_lock":
        session.set_height_lock(bool(step.get("active", True)))
        return f"height_lock -> {session.height_lock}"
    elif op == "toggle":
        entity = _entity(session, step)
        selected = session.toggle_selection(entity.id)
        return f"toggle {entity.id} -> {'selected' if selected else 'not selected'}"
    elif op == "clear_selection":
        session.clear_selection()
        return "clear_selection"
    elif op == "delete_selection":
        return f"delete_selection -> {session.delete_selection()} removed"
    elif op == "create_structure":
        structure = session.create_structure(step.get("name"))
        return f"create_structure {structure.name!r} ({len(structure.blocks)} blocks)"
    elif op == "select_structure":
        session.select_structure(_structure_id(session, step))
        return f"select_structure {session.active_structure.name!r}"
    elif op == "cancel_structure":
        session.cancel_structure()
        return "cancel_structure"
    elif op == "remove":
        return f"remove {session.remove(_entity(session, step).id).id}"
    elif op == "grab":
        return f"grab {session.grab(_entity(session, step).id).id}"
    elif op == "clear":
        session.clear()
        return "clear"
    elif op == "undo":
        return f"undo -> {'ok' if session.undo() else 'nothing to undo'}"
    elif op == "redo":
        return f"redo -> {'ok' if session.redo() else 'nothing to redo'}"

    raise ReplayError(f"Unknown op: {op}")


def replay_script(steps: list[dict], session: PlacementSession) -> ReplayResult:
    """Apply every step in order. Stops at the first failing step."""
    if not isinstance(steps, list):
        raise ReplayError("A replay script must be a list of steps")

    result = ReplayResult()
    for step in steps:
        try:
            line = apply_step(session, step)
        except TempleBuilderError:
            raise
        except (KeyError, ValueError, TypeError) as e:
            raise ReplayError(f"Step {result.steps + 1} failed: {e!r}") from e
        logger.debug(line)
        result.log.append(line)
        result.steps += 1

    result.placed = len(session.entities)
    result.structures = len(session.structures)
    return result


def load_script(path: Path) -> list[dict]:
    try:
        return json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise ReplayError(f"Cannot read script {path}: {e}") from e


# ============================================================================
# Orchestration
# ============================================================================

def run_replay(
    script_path: Path,
    output_path: Path,
    session: PlacementSession | None = None,
    project_path: Path | None = None,
    verbose: bool = False
) -> ReplayResult:
    """
    Replay a script file and save the resulting project.

    Starts from project_path when given, otherwise from an empty scene.
    """
    session = session or PlacementSession()

    if project_path:
        session.load_state(load_project_file(project_path))
        console.print(f"[green]✓[/green] Loaded {len(session.entities)} entities from {project_path}")

    steps = load_script(script_path)
    console.print(Panel(f"Replaying {len(steps)} steps", style="bold blue"))
    result = replay_script(steps, session)

    if verbose:
        for line in result.log:
            console.print(f"[dim]{line}[/dim]")

    output_path.parent.mkdir(parents=True, exist_ok=True)
    save_project_file(session.export_state(), output_path)
    console.print(f"[green]✓[/green] Saved project to {output_path}")

    console.print(Panel(
        f"[bold green]Replay complete![/bold green]\n\n"
        f"Steps: {result.steps}\n"
        f"Entities: {result.placed}\n"
        f"Structures: {result.structures}\n"
        f"Undo steps available: {session.history.undo_depth}",
        title="Complete"
    ))
    return result
