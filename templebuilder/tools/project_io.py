"""
Project files: JSON save/load of the scene and the structure library.

Written format:
{
  "placedEntities": [
    {"id": "...", "position": [x, y, z], "type": "stone", "shape": "cube",
     "rotation": [rx, ry, rz], "scale": [sx, sy, sz]},
    {"id": "...", "position": [...], "rotation": [...], "isGroup": true,
     "type": "structure", "name": "Pillar", "structureData": {...}}
  ],
  "structureDefinitions": [
    {"id": "...", "name": "Pillar",
     "blocks": [{"type": "stone", "shape": "cube", "rotation": [...],
                 "scale": [...], "relPos": [x, y, z]}]}
  ]
}

Also accepted on load: {"pieces": [...], "savedGroups": [...]} and a bare list
of pieces, both written by earlier versions of the editor. Rotation and scale
are normalized leniently; a missing or non-numeric position is an error.
"""

import json
import logging
from pathlib import Path
from typing import Any

from templebuilder.errors import MalformedProjectData
from templebuilder.models import (
    PlacedBlock,
    PlacedEntity,
    PlacedGroup,
    ProjectData,
    RelativeBlock,
    Shape,
    StructureDefinition,
    Transform,
    Vec3Tuple,
    new_id,
)
from templebuilder.tools.catalog import DEFAULT_MATERIAL
from templebuilder.tools.transform_utils import as_triple, normalize_rotation, normalize_scale


logger = logging.getLogger(__name__)


# ============================================================================
# Writing
# ============================================================================

def _structure_to_dict(structure: StructureDefinition) -> dict:
    return {
        "id": structure.id,
        "name": structure.name,
        "blocks": [
            {
                "type": block.material,
                "shape": block.shape.value,
                "rotation": list(block.rotation),
                "scale": list(block.scale),
                "relPos": list(block.relative_position),
            }
            for block in structure.blocks
        ],
    }


def _entity_to_dict(entity: PlacedEntity) -> dict:
    if isinstance(entity, PlacedGroup):
        return {
            "id": entity.id,
            "position": list(entity.transform.position),
            "rotation": list(entity.transform.rotation),
            "isGroup": True,
            "type": "structure",
            "name": entity.structure.name,
            "structureData": _structure_to_dict(entity.structure),
        }
    return {
        "id": entity.id,
        "position": list(entity.transform.position),
        "type": entity.material,
        "shape": entity.shape.value,
        "rotation": list(entity.transform.rotation),
        "scale": list(entity.transform.scale),
    }


def dump_project(project: ProjectData) -> dict:
    """Convert project data to a JSON-ready dict."""
    return {
        "placedEntities": [_entity_to_dict(e) for e in project.entities],
        "structureDefinitions": [_structure_to_dict(s) for s in project.structures],
    }


def save_project_file(project: ProjectData, output_path: Path) -> None:
    """Save a project as a JSON file."""
    output_path = Path(output_path)
    output_path.write_text(json.dumps(dump_project(project), indent=2), encoding="utf-8")
    logger.info("Saved %d entities to %s", len(project.entities), output_path)


# ============================================================================
# Reading
# ============================================================================

def _position(raw: dict, key: str, where: str) -> Vec3Tuple:
    value = as_triple(raw.get(key))
    if value is None:
        raise MalformedProjectData(f"{where}: '{key}' must be a list of three numbers")
    return value


def _mapping(raw: Any, where: str) -> dict:
    if not isinstance(raw, dict):
        raise MalformedProjectData(f"{where}: expected an object, got {type(raw).__name__}")
    return raw


def _parse_structure(raw: Any, where: str) -> StructureDefinition:
    raw = _mapping(raw, where)
    blocks_raw = raw.get("blocks")
    if not isinstance(blocks_raw, list) or not blocks_raw:
        raise MalformedProjectData(f"{where}: 'blocks' must be a non-empty list")

    blocks = []
    for index, block in enumerate(blocks_raw):
        block_where = f"{where}.blocks[{index}]"
        block = _mapping(block, block_where)
        blocks.append(RelativeBlock(
            shape=Shape.parse(block.get("shape")),
            material=str(block.get("type") or DEFAULT_MATERIAL),
            rotation=normalize_rotation(block.get("rotation")),
            scale=normalize_scale(block.get("scale")),
            relative_position=_position(block, "relPos", block_where),
        ))

    return StructureDefinition(
        id=str(raw.get("id") or new_id()),
        name=str(raw.get("name") or "Structure"),
        blocks=tuple(blocks),
    )


def _parse_entity(
    raw: Any,
    where: str,
    library: dict[str, StructureDefinition]
) -> PlacedEntity:
    raw = _mapping(raw, where)
    entity_id = str(raw.get("id") or new_id())
    position = _position(raw, "position", where)
    rotation = normalize_rotation(raw.get("rotation"))

    if raw.get("isGroup"):
        structure = _parse_structure(raw.get("structureData"), f"{where}.structureData")
        # Groups stamped from a library structure share that definition.
        structure = library.get(structure.id, structure)
        return PlacedGroup(
            id=entity_id,
            transform=Transform(position=position, rotation=rotation),
            structure=structure,
        )

    return PlacedBlock(
        id=entity_id,
        shape=Shape.parse(raw.get("shape")),
        material=str(raw.get("type") or DEFAULT_MATERIAL),
        transform=Transform(
            position=position,
            rotation=rotation,
            scale=normalize_scale(raw.get("scale")),
        ),
    )


def parse_project(data: Any) -> ProjectData:
    """
    Parse a decoded project payload.

    Raises:
        MalformedProjectData: the payload doesn't have a recognizable shape
    """
    if isinstance(data, list):
        pieces_raw, structures_raw = data, []
    elif isinstance(data, dict):
        if "placedEntities" in data or "structureDefinitions" in data:
            pieces_raw = data.get("placedEntities") or []
            structures_raw = data.get("structureDefinitions") or []
        else:
            pieces_raw = data.get("pieces") or []
            structures_raw = data.get("savedGroups") or []
    else:
        raise MalformedProjectData(f"Expected a project object or list, got {type(data).__name__}")

    if not isinstance(pieces_raw, list) or not isinstance(structures_raw, list):
        raise MalformedProjectData("Placed entities and structures must be lists")

    structures = [
        _parse_structure(raw, f"structures[{i}]")
        for i, raw in enumerate(structures_raw)
    ]
    library = {s.id: s for s in structures}
    entities = [
        _parse_entity(raw, f"entities[{i}]", library)
        for i, raw in enumerate(pieces_raw)
    ]

    return ProjectData(entities=entities, structures=structures)


def load_project_text(text: str) -> ProjectData:
    """Parse a project from JSON text."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise MalformedProjectData(f"Invalid JSON: {e}") from e
    return parse_project(data)


def load_project_file(path: str | Path) -> ProjectData:
    """Load a project JSON file."""
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise MalformedProjectData(f"Cannot read {path}: {e}") from e
    project = load_project_text(text)
    logger.info("Loaded %d entities from %s", len(project.entities), path)
    return project
