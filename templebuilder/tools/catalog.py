"""
Shape and material catalog.

Static registries consulted by the transform math, the contact resolver and the
session's tool state. Adding a shape means adding one Shape member and one
entry in SHAPES; nothing else branches on shape identifiers.
"""

from functools import lru_cache

from templebuilder.errors import UnknownCatalogEntry
from templebuilder.models import MaterialDescriptor, Shape, ShapeDescriptor


# ============================================================================
# Shapes
# ============================================================================

SHAPES: dict[Shape, ShapeDescriptor] = {
    Shape.CUBE: ShapeDescriptor(shape=Shape.CUBE, name="Cube", base_height=1.0),
    Shape.SLAB: ShapeDescriptor(shape=Shape.SLAB, name="Slab (0.5)", base_height=0.5),
    Shape.COLUMN: ShapeDescriptor(shape=Shape.COLUMN, name="Column", base_height=1.0),
    Shape.SLOPE: ShapeDescriptor(shape=Shape.SLOPE, name="Roof (prism)", base_height=1.0),
}


# ============================================================================
# Materials
# ============================================================================

DEFAULT_MATERIAL = "stone"

MATERIALS: dict[str, MaterialDescriptor] = {
    "stone": MaterialDescriptor(name="stone", display_name="Stone", color="#808080"),
    "wood": MaterialDescriptor(name="wood", display_name="Wood", color="#8B4513"),
    "gold": MaterialDescriptor(name="gold", display_name="Gold", color="#FFD700"),
    "brick": MaterialDescriptor(name="brick", display_name="Brick", color="#A52A2A"),
    "water": MaterialDescriptor(name="water", display_name="Water", color="#4FC3F7", opacity=0.6),
    "grass": MaterialDescriptor(name="grass", display_name="Grass", color="#4CAF50"),
    "roof": MaterialDescriptor(name="roof", display_name="Roof tile", color="#8B0000"),
}


# ============================================================================
# Lookups
# ============================================================================

def list_shapes() -> list[str]:
    """Return every registered shape identifier."""
    return [shape.value for shape in SHAPES]


def list_materials() -> list[str]:
    """Return every registered material identifier."""
    return list(MATERIALS.keys())


def get_shape_details(shape: Shape | str | None) -> ShapeDescriptor:
    """
    Look up a shape descriptor.

    Accepts loose identifiers; anything unknown resolves to the cube, which is
    how persisted data without a shape has always been treated.
    """
    return SHAPES[Shape.parse(shape)]


@lru_cache(maxsize=None)
def base_height(shape: Shape) -> float:
    """Unscaled height of a shape along its local Y axis."""
    return get_shape_details(shape).base_height


def require_shape(name: str) -> Shape:
    """Strict lookup used for explicit user choices."""
    try:
        shape = Shape(name)
    except ValueError:
        raise UnknownCatalogEntry(f"Unknown shape: {name}") from None
    if shape not in SHAPES:
        raise UnknownCatalogEntry(f"Unknown shape: {name}")
    return shape


def get_material(name: str | None) -> MaterialDescriptor:
    """Material for rendering. Unknown materials render as stone."""
    return MATERIALS.get(name or DEFAULT_MATERIAL, MATERIALS[DEFAULT_MATERIAL])


def require_material(name: str) -> MaterialDescriptor:
    """Strict lookup used for explicit user choices."""
    material = MATERIALS.get(name)
    if material is None:
        raise UnknownCatalogEntry(f"Unknown material: {name}")
    return material
