"""
Pydantic models for the block editor.

These models define the shapes of placed blocks, saved structures, pointer hits
and the object currently being positioned. Placed entities and structures are
frozen so a tuple of them can be kept as an undo snapshot without copying.
"""

from enum import Enum
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, model_validator


# Y is up. Rotations are radians, scale is applied before rotation.
Vec3Tuple = tuple[float, float, float]


def new_id() -> str:
    """Return a fresh entity identifier."""
    return uuid4().hex


class Shape(str, Enum):
    """Every block shape the editor knows about."""
    CUBE = "cube"
    SLAB = "slab"
    COLUMN = "column"
    SLOPE = "slope"

    @classmethod
    def parse(cls, value) -> "Shape":
        """Read a shape identifier from loose data. Unknown values become a cube."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return cls.CUBE


class Axis(str, Enum):
    X = "x"
    Y = "y"
    Z = "z"

    @property
    def index(self) -> int:
        return "xyz".index(self.value)


class AppMode(str, Enum):
    """Application modes. Pointer moves and commits only count in CONSTRUCTION."""
    CONSTRUCTION = "construction"
    SELECTION = "selection"
    VIEW = "view"


class TargetKind(str, Enum):
    GROUND = "ground"
    BLOCK = "block"
    GROUP = "group"


class ShapeDescriptor(BaseModel):
    """
    Static description of a shape.

    base_height is the unscaled height along local Y; the physical height of a
    placed block is derived from it together with the block's scale and tilt.
    """
    model_config = ConfigDict(frozen=True)

    shape: Shape
    name: str
    base_height: float
    default_scale: Vec3Tuple = (1.0, 1.0, 1.0)


class MaterialDescriptor(BaseModel):
    """A paintable material. Opacity below 1 renders translucent."""
    model_config = ConfigDict(frozen=True)

    name: str
    display_name: str
    color: str
    opacity: float = 1.0


class Transform(BaseModel):
    """World placement of an entity."""
    model_config = ConfigDict(frozen=True)

    position: Vec3Tuple = (0.0, 0.0, 0.0)
    rotation: Vec3Tuple = (0.0, 0.0, 0.0)
    scale: Vec3Tuple = (1.0, 1.0, 1.0)


class PlacedBlock(BaseModel):
    """A single block sitting in the scene. Position is the block's center."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_id)
    shape: Shape = Shape.CUBE
    material: str = "stone"
    transform: Transform = Field(default_factory=Transform)

    @property
    def is_group(self) -> bool:
        return False

    @property
    def position(self) -> Vec3Tuple:
        return self.transform.position


class RelativeBlock(BaseModel):
    """One block of a structure, positioned relative to the structure's pivot."""
    model_config = ConfigDict(frozen=True)

    shape: Shape = Shape.CUBE
    material: str = "stone"
    rotation: Vec3Tuple = (0.0, 0.0, 0.0)
    scale: Vec3Tuple = (1.0, 1.0, 1.0)
    relative_position: Vec3Tuple = (0.0, 0.0, 0.0)


class StructureDefinition(BaseModel):
    """
    A reusable multi-block prefab.

    blocks[0] is the pivot block (lowest world Y at creation time) and sits at
    relative position (0, 0, 0). Definitions are read-only templates shared by
    every group placed from them.
    """
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_id)
    name: str
    blocks: tuple[RelativeBlock, ...]

    @property
    def pivot(self) -> RelativeBlock:
        return self.blocks[0]


class PlacedGroup(BaseModel):
    """A placed instance of a structure. Selected and removed as one entity."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_id)
    transform: Transform = Field(default_factory=Transform)
    structure: StructureDefinition

    @property
    def is_group(self) -> bool:
        return True

    @property
    def position(self) -> Vec3Tuple:
        return self.transform.position


PlacedEntity = PlacedBlock | PlacedGroup


class HitContext(BaseModel):
    """
    A pointer hit reported by the scene's raycaster.

    target_transform and target_shape describe the entity that was hit and are
    unset for ground hits. target_shape stays unset for groups since group
    height is not tracked per sub-block.
    """
    point: Vec3Tuple
    normal: Vec3Tuple = (0.0, 1.0, 0.0)
    target_kind: TargetKind = TargetKind.GROUND
    target_transform: Transform | None = None
    target_shape: Shape | None = None

    @model_validator(mode="after")
    def _target_needs_transform(self) -> "HitContext":
        if self.target_kind != TargetKind.GROUND and self.target_transform is None:
            raise ValueError(f"A {self.target_kind.value} hit needs the target's transform")
        return self

    @property
    def is_ground(self) -> bool:
        return self.target_kind == TargetKind.GROUND

    @property
    def is_group(self) -> bool:
        return self.target_kind == TargetKind.GROUP


class PendingBlock(BaseModel):
    """Tool state for placing a single block."""
    model_config = ConfigDict(frozen=True)

    material: str = "stone"
    shape: Shape = Shape.CUBE
    rotation: Vec3Tuple = (0.0, 0.0, 0.0)
    scale: Vec3Tuple = (1.0, 1.0, 1.0)


class PendingStructure(BaseModel):
    """Tool state for placing an instance of a saved structure."""
    model_config = ConfigDict(frozen=True)

    structure: StructureDefinition
    rotation: Vec3Tuple = (0.0, 0.0, 0.0)


PendingObject = PendingBlock | PendingStructure


class Footprint(BaseModel):
    """World X/Z extent of the placement guide."""
    model_config = ConfigDict(frozen=True)

    width: float
    depth: float


class ContactResult(BaseModel):
    """Where a pending object comes to rest, plus its guide footprint."""
    model_config = ConfigDict(frozen=True)

    position: Vec3Tuple
    footprint: Footprint


class ProjectData(BaseModel):
    """Everything that gets persisted: the scene and the structure library."""
    entities: list[PlacedEntity] = Field(default_factory=list)
    structures: list[StructureDefinition] = Field(default_factory=list)
