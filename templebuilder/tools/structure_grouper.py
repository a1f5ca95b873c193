"""
Structure grouping: turn a selection of placed blocks into a reusable prefab.

The lowest block of the selection becomes the pivot. Every other block is
stored as an offset from the pivot's world position, with its own rotation
and scale carried over unchanged. Placing the structure again creates a
PlacedGroup that references the definition instead of copying blocks.
"""

import logging
from collections.abc import Sequence

from templebuilder.errors import EmptySelection, NestedGroupNotAllowed
from templebuilder.models import (
    PlacedBlock,
    PlacedEntity,
    PlacedGroup,
    RelativeBlock,
    StructureDefinition,
    Transform,
    Vec3Tuple,
)
from templebuilder.tools.transform_utils import Vec3, compose_rotation, rotate_euler


logger = logging.getLogger(__name__)


def create_structure(selected: Sequence[PlacedEntity], name: str) -> StructureDefinition:
    """
    Build a structure definition from selected blocks.

    Blocks are ordered by world Y; the sort is stable, so blocks at equal
    height keep their selection order and the first of the lowest becomes the
    pivot.

    Raises:
        EmptySelection: nothing is selected
        NestedGroupNotAllowed: the selection contains a placed group
    """
    if not selected:
        raise EmptySelection("Select at least one block to create a structure.")
    if any(entity.is_group for entity in selected):
        raise NestedGroupNotAllowed("Structures cannot contain other structures.")

    ordered = sorted(selected, key=lambda block: block.transform.position[1])
    pivot = Vec3.of(ordered[0].transform.position)

    blocks = []
    for block in ordered:
        offset = Vec3.of(block.transform.position) - pivot
        blocks.append(RelativeBlock(
            shape=block.shape,
            material=block.material,
            rotation=block.transform.rotation,
            scale=block.transform.scale,
            relative_position=offset.as_tuple(),
        ))

    definition = StructureDefinition(name=name, blocks=tuple(blocks))
    logger.debug("Created structure %r with %d blocks", name, len(blocks))
    return definition


def instantiate(
    definition: StructureDefinition,
    position: Vec3Tuple,
    rotation: Vec3Tuple = (0.0, 0.0, 0.0)
) -> PlacedGroup:
    """Place a structure at a world transform. The definition is shared, not copied."""
    return PlacedGroup(
        transform=Transform(position=position, rotation=rotation),
        structure=definition,
    )


def expand_group(group: PlacedGroup) -> list[PlacedBlock]:
    """
    World-space blocks of a placed group.

    Used for per-block hitboxes and rendering. Sub-block ids are derived from
    the group id so hits can be traced back to the group.
    """
    origin = Vec3.of(group.transform.position)
    rotation = group.transform.rotation

    world_blocks = []
    for index, block in enumerate(group.structure.blocks):
        offset = Vec3.of(rotate_euler(block.relative_position, rotation))
        world_blocks.append(PlacedBlock(
            id=f"{group.id}:{index}",
            shape=block.shape,
            material=block.material,
            transform=Transform(
                position=(origin + offset).as_tuple(),
                rotation=compose_rotation(rotation, block.rotation),
                scale=block.scale,
            ),
        ))

    return world_blocks
