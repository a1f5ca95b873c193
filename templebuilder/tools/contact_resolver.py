"""
Contact resolution: where does the pending object come to rest?

Given a pointer hit (ground or an existing entity) and the object being
positioned, compute the position at which the object sits on the hit surface
without overlapping it, plus the footprint used to draw the placement guide.

Vertical placement depends on which face was hit:
- ground: the object's bottom sits at y = 0
- top face: the bottom sits exactly on the impact point, nudged down slightly
- underside: the object is centred on the target's own center height
- side face: the object's bottom aligns with the target's floor

Horizontal placement offsets the impact point outwards along the normal by half
the object's footprint so the two faces touch.
"""

import math

from templebuilder.models import (
    ContactResult,
    Footprint,
    HitContext,
    PendingObject,
    PendingStructure,
    Shape,
    Vec3Tuple,
)
from templebuilder.tools.catalog import base_height
from templebuilder.tools.transform_utils import compose_rotation, footprint, physical_height


# Vertical positions snap to quarter units, horizontal ones to half units.
VERTICAL_GRID = 0.25
HORIZONTAL_GRID = 0.5

# Top-stacked objects sink this far into their support to avoid z-fighting.
STACK_EPSILON = 0.002

# Normal Y components beyond this count as a top face / underside.
FACE_THRESHOLD = 0.5

# Groups don't track per-sub-block height.
GROUP_TARGET_HEIGHT = 1.0


def snap_to_grid(value: float, step: float) -> float:
    """Round to the nearest multiple of step, halves rounding up."""
    return math.floor(value / step + 0.5) * step


def pending_envelope(pending: PendingObject) -> tuple[float, Footprint]:
    """
    Physical height and footprint of the object being placed.

    A structure is represented by its pivot block, turned by the structure's
    placement rotation. Taller structures are therefore under-estimated.
    """
    if isinstance(pending, PendingStructure):
        pivot = pending.structure.pivot
        rotation = compose_rotation(pending.rotation, pivot.rotation)
        return physical_height(pivot.shape, pivot.scale, rotation), footprint(pivot.scale, rotation)

    return (
        physical_height(pending.shape, pending.scale, pending.rotation),
        footprint(pending.scale, pending.rotation),
    )


def _target_height(hit: HitContext) -> float:
    if hit.is_group:
        return GROUP_TARGET_HEIGHT
    shape = hit.target_shape or Shape.CUBE
    return base_height(shape) * hit.target_transform.scale[1]


def _resolve_y(hit: HitContext, my_height: float) -> float:
    normal_y = hit.normal[1]

    if hit.is_ground:
        contact_y = 0.0
    elif normal_y > FACE_THRESHOLD:
        # Stacking: rest on the impact point itself so non-flat tops still work.
        return hit.point[1] + my_height / 2 - STACK_EPSILON
    elif normal_y < -FACE_THRESHOLD:
        contact_y = hit.target_transform.position[1]
    else:
        contact_y = hit.target_transform.position[1] - _target_height(hit) / 2

    return snap_to_grid(contact_y + my_height / 2, VERTICAL_GRID)


def resolve_contact(
    hit: HitContext,
    pending: PendingObject,
    height_lock: float | None = None
) -> ContactResult:
    """
    Compute the resting position of a pending object for a pointer hit.

    Args:
        hit: The raycaster's hit against the ground or a placed entity
        pending: The block or structure being positioned
        height_lock: When set, y is frozen at this value and x/z follow the
            impact point directly with no normal offset

    Returns:
        ContactResult with the position (x, y, z) and the guide footprint.
    """
    my_height, guide = pending_envelope(pending)
    px, _, pz = hit.point

    if height_lock is not None:
        y = height_lock
        ideal_x, ideal_z = px, pz
    else:
        y = _resolve_y(hit, my_height)
        nx, _, nz = hit.normal
        ideal_x = px + nx * guide.width / 2
        ideal_z = pz + nz * guide.depth / 2

    position: Vec3Tuple = (
        snap_to_grid(ideal_x, HORIZONTAL_GRID),
        y,
        snap_to_grid(ideal_z, HORIZONTAL_GRID),
    )
    return ContactResult(position=position, footprint=guide)
