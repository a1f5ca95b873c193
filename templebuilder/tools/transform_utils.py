"""
Rotation and scale helpers.

Persisted blocks carry rotation and scale in whatever form they were saved in
(a bare Y angle, a 3-element list, nothing at all), so normalization never
fails: it substitutes defaults. Height and footprint use a tilt-threshold
approximation rather than a full oriented-bounding-box projection.
"""

import math
from dataclasses import dataclass
from numbers import Real

from templebuilder.models import Footprint, Shape, Vec3Tuple
from templebuilder.tools.catalog import base_height


# |sin(angle)| above this means the object is tipped onto a side (or quarter-turned).
TILT_THRESHOLD = 0.5

IDENTITY_ROTATION: Vec3Tuple = (0.0, 0.0, 0.0)
UNIT_SCALE: Vec3Tuple = (1.0, 1.0, 1.0)


# ============================================================================
# Vector Math Helpers
# ============================================================================

@dataclass
class Vec3:
    """Simple vector for internal calculations."""
    x: float
    y: float
    z: float

    def __add__(self, other: "Vec3") -> "Vec3":
        return Vec3(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: "Vec3") -> "Vec3":
        return Vec3(self.x - other.x, self.y - other.y, self.z - other.z)

    @classmethod
    def of(cls, values: Vec3Tuple) -> "Vec3":
        return cls(values[0], values[1], values[2])

    def as_tuple(self) -> Vec3Tuple:
        return (self.x, self.y, self.z)


def _is_number(value) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool) and math.isfinite(value)


def as_triple(value) -> Vec3Tuple | None:
    """Three finite numbers as a float tuple, or None."""
    if isinstance(value, (str, bytes)):
        return None
    try:
        items = list(value)
    except TypeError:
        return None
    if len(items) != 3 or not all(_is_number(v) for v in items):
        return None
    return (float(items[0]), float(items[1]), float(items[2]))


# ============================================================================
# Normalization
# ============================================================================

def normalize_rotation(value) -> Vec3Tuple:
    """
    Canonical (rx, ry, rz) rotation in radians.

    A scalar is a rotation about Y only. Missing or malformed input gives the
    identity rotation.
    """
    if _is_number(value):
        return (0.0, float(value), 0.0)
    triple = as_triple(value)
    return triple if triple is not None else IDENTITY_ROTATION


def normalize_scale(value) -> Vec3Tuple:
    """Canonical (sx, sy, sz) scale. Missing, malformed or non-positive input gives (1, 1, 1)."""
    triple = as_triple(value)
    if triple is None or any(v <= 0 for v in triple):
        return UNIT_SCALE
    return triple


# ============================================================================
# Extents
# ============================================================================

def physical_height(shape: Shape, scale: Vec3Tuple, rotation: Vec3Tuple) -> float:
    """
    World-vertical extent of an object.

    An object tipped about X or Z is assumed to lie on a side face, so its
    height becomes its X scale. X tilt is checked first.
    """
    if abs(math.sin(rotation[0])) > TILT_THRESHOLD:
        return scale[0]
    elif abs(math.sin(rotation[2])) > TILT_THRESHOLD:
        return scale[0]
    return base_height(shape) * scale[1]


def footprint(scale: Vec3Tuple, rotation: Vec3Tuple) -> Footprint:
    """X/Z extent on the ground. A quarter turn about Y swaps width and depth."""
    if abs(math.sin(rotation[1])) > TILT_THRESHOLD:
        return Footprint(width=scale[2], depth=scale[0])
    return Footprint(width=scale[0], depth=scale[2])


# ============================================================================
# Frame Composition
# ============================================================================

def rotate_euler(point: Vec3Tuple, rotation: Vec3Tuple) -> Vec3Tuple:
    """
    Rotate a point by an XYZ Euler rotation (matrix Rx * Ry * Rz).

    Z is applied to the point first, then Y, then X.
    """
    v = Vec3.of(point)
    rx, ry, rz = rotation

    if rz:
        c, s = math.cos(rz), math.sin(rz)
        v = Vec3(v.x * c - v.y * s, v.x * s + v.y * c, v.z)
    if ry:
        c, s = math.cos(ry), math.sin(ry)
        v = Vec3(v.x * c + v.z * s, v.y, -v.x * s + v.z * c)
    if rx:
        c, s = math.cos(rx), math.sin(rx)
        v = Vec3(v.x, v.y * c - v.z * s, v.y * s + v.z * c)

    return v.as_tuple()


def compose_rotation(outer: Vec3Tuple, inner: Vec3Tuple) -> Vec3Tuple:
    """
    Combined rotation of a child inside a rotated parent.

    Component-wise sum: exact when both rotations turn about the same single
    axis, which is what quarter-turn stepping produces.
    """
    return (outer[0] + inner[0], outer[1] + inner[1], outer[2] + inner[2])
