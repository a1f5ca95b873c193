"""
Placement session: the editor's command surface.

Holds the current tool state (material, shape, rotation, scale, or a structure
to stamp), resolves the pending position on every pointer move, and commits
blocks and structure instances on confirm. Every mutation of the placed-entity
collection goes through the history manager: snapshot first, then replace.
"""

import logging
import math

from templebuilder.config import EditorSettings
from templebuilder.errors import UnknownCatalogEntry, UnknownEntity
from templebuilder.history import HistoryManager
from templebuilder.models import (
    AppMode,
    Axis,
    ContactResult,
    Footprint,
    HitContext,
    PendingBlock,
    PendingObject,
    PendingStructure,
    PlacedBlock,
    PlacedEntity,
    ProjectData,
    Shape,
    StructureDefinition,
    Transform,
    Vec3Tuple,
)
from templebuilder.tools.catalog import require_material, require_shape
from templebuilder.tools.contact_resolver import resolve_contact
from templebuilder.tools.project_io import parse_project
from templebuilder.tools.structure_grouper import create_structure, instantiate
from templebuilder.tools.transform_utils import normalize_rotation, normalize_scale


logger = logging.getLogger(__name__)

# One press of a rotate key turns a quarter turn.
ROTATION_STEP = math.pi / 2


class PlacementSession:
    """
    Editor state and commands.

    Pointer moves and confirms are only processed in construction mode. The
    structure library lives outside history: undoing a grouping brings the
    source blocks back but keeps the new structure available.
    """

    def __init__(self, settings: EditorSettings | None = None):
        self.settings = settings or EditorSettings()
        self.history = HistoryManager(max_depth=self.settings.history_depth)
        self.structures: list[StructureDefinition] = []
        self.selected_ids: list[str] = []
        self.mode = AppMode.CONSTRUCTION

        self.material = require_material(self.settings.default_material).name
        self.shape = self.settings.default_shape
        self.rotation: Vec3Tuple = (0.0, 0.0, 0.0)
        self.scale: Vec3Tuple = (1.0, 1.0, 1.0)
        self.active_structure: StructureDefinition | None = None

        self.height_lock: float | None = None
        self._contact: ContactResult | None = None

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def entities(self) -> tuple[PlacedEntity, ...]:
        return self.history.present

    @property
    def can_undo(self) -> bool:
        return self.history.can_undo

    @property
    def can_redo(self) -> bool:
        return self.history.can_redo

    @property
    def pending(self) -> PendingObject:
        """The object the next confirm would place."""
        if self.active_structure is not None:
            return PendingStructure(structure=self.active_structure, rotation=self.rotation)
        return PendingBlock(
            material=self.material,
            shape=self.shape,
            rotation=self.rotation,
            scale=self.scale,
        )

    @property
    def pending_position(self) -> Vec3Tuple | None:
        return self._contact.position if self._contact else None

    @property
    def pending_footprint(self) -> Footprint | None:
        return self._contact.footprint if self._contact else None

    @property
    def preview(self) -> tuple[PendingObject, Vec3Tuple] | None:
        """Pending object and its resolved position, for the translucent ghost."""
        if self.mode != AppMode.CONSTRUCTION or self._contact is None:
            return None
        return self.pending, self._contact.position

    def get_entity(self, entity_id: str) -> PlacedEntity:
        for entity in self.entities:
            if entity.id == entity_id:
                return entity
        raise UnknownEntity(f"No placed entity with id {entity_id}")

    def get_structure(self, structure_id: str) -> StructureDefinition:
        for structure in self.structures:
            if structure.id == structure_id:
                return structure
        raise UnknownCatalogEntry(f"Unknown structure: {structure_id}")

    # ------------------------------------------------------------------
    # Modes and tool state
    # ------------------------------------------------------------------

    def set_mode(self, mode: AppMode | str) -> None:
        """Switch modes. Leaving construction drops the pending position and height lock."""
        mode = AppMode(mode)
        if mode != AppMode.CONSTRUCTION:
            self._contact = None
            self.height_lock = None
        if mode == AppMode.VIEW:
            self.active_structure = None
        self.mode = mode

    def select_material(self, name: str) -> None:
        self.material = require_material(name).name
        self.active_structure = None

    def select_shape(self, name: Shape | str) -> None:
        self.shape = require_shape(name.value if isinstance(name, Shape) else name)
        self.active_structure = None

    def set_scale(self, axis: Axis | str, value: float) -> None:
        axis = Axis(axis)
        value = float(value)
        if not math.isfinite(value) or value <= 0:
            raise ValueError(f"Scale must be a positive number, got {value}")
        scale = list(self.scale)
        scale[axis.index] = value
        self.scale = tuple(scale)

    def rotate(self, axis: Axis | str) -> Vec3Tuple:
        """Turn the tool a quarter turn about an axis. Returns the new rotation."""
        axis = Axis(axis)
        rotation = list(self.rotation)
        rotation[axis.index] += ROTATION_STEP
        self.rotation = tuple(rotation)
        return self.rotation

    def select_structure(self, structure_id: str) -> None:
        """Make a saved structure the pending object and return to construction."""
        self.active_structure = self.get_structure(structure_id)
        self.set_mode(AppMode.CONSTRUCTION)

    def cancel_structure(self) -> None:
        self.active_structure = None

    def set_height_lock(self, active: bool) -> None:
        """
        Hold or release the height lock.

        Holding captures the y of the current pending position; without one
        there is nothing to lock and the lock stays off.
        """
        if active and self.mode == AppMode.CONSTRUCTION and self._contact is not None:
            self.height_lock = self._contact.position[1]
        else:
            self.height_lock = None

    # ------------------------------------------------------------------
    # Pointer
    # ------------------------------------------------------------------

    def pointer_move(self, hit: HitContext | None) -> Vec3Tuple | None:
        """Resolve the pending position for a pointer hit. No hit clears it."""
        if self.mode != AppMode.CONSTRUCTION:
            return None
        if hit is None:
            self._contact = None
            return None
        self._contact = resolve_contact(hit, self.pending, self.height_lock)
        return self._contact.position

    # ------------------------------------------------------------------
    # Mutations (snapshot, then replace)
    # ------------------------------------------------------------------

    def confirm(self) -> PlacedEntity | None:
        """Commit the pending object at its resolved position."""
        if self.mode != AppMode.CONSTRUCTION or self._contact is None:
            return None

        position = self._contact.position
        if self.active_structure is not None:
            entity = instantiate(self.active_structure, position, self.rotation)
        else:
            entity = PlacedBlock(
                shape=self.shape,
                material=self.material,
                transform=Transform(position=position, rotation=self.rotation, scale=self.scale),
            )

        self.history.commit(self.entities + (entity,))
        logger.debug("Placed %s at %s", entity.id, position)
        return entity

    def remove(self, entity_id: str) -> PlacedEntity:
        entity = self.get_entity(entity_id)
        self._remove_ids({entity_id})
        return entity

    def grab(self, entity_id: str) -> PlacedEntity:
        """
        Pick an entity back up: remove it and make it the pending object.

        A block hands over its material, shape, rotation and scale; a group
        hands over its structure and rotation.
        """
        entity = self.get_entity(entity_id)
        self._remove_ids({entity_id})

        if entity.is_group:
            self.active_structure = entity.structure
            self.rotation = normalize_rotation(entity.transform.rotation)
        else:
            self.active_structure = None
            self.material = entity.material
            self.shape = entity.shape
            self.rotation = normalize_rotation(entity.transform.rotation)
            self.scale = normalize_scale(entity.transform.scale)

        self.set_mode(AppMode.CONSTRUCTION)
        return entity

    def clear(self) -> None:
        """Remove everything in one undoable step."""
        self.history.commit(())
        self.selected_ids = []

    def _remove_ids(self, ids: set[str]) -> None:
        self.history.commit(tuple(e for e in self.entities if e.id not in ids))
        self.selected_ids = [i for i in self.selected_ids if i not in ids]
        logger.debug("Removed %d entities", len(ids))

    # ------------------------------------------------------------------
    # Selection and grouping
    # ------------------------------------------------------------------

    def toggle_selection(self, entity_id: str) -> bool:
        """Add or remove an entity from the selection. Returns whether it is now selected."""
        if self.mode != AppMode.SELECTION:
            return False
        self.get_entity(entity_id)
        if entity_id in self.selected_ids:
            self.selected_ids.remove(entity_id)
            return False
        self.selected_ids.append(entity_id)
        return True

    def clear_selection(self) -> None:
        self.selected_ids = []

    def selected_entities(self) -> list[PlacedEntity]:
        """Selected entities in selection order."""
        by_id = {entity.id: entity for entity in self.entities}
        return [by_id[i] for i in self.selected_ids if i in by_id]

    def delete_selection(self) -> int:
        """Remove every selected entity in one undoable step. Returns how many."""
        selected = self.selected_entities()
        if not selected:
            return 0
        self._remove_ids({entity.id for entity in selected})
        return len(selected)

    def create_structure(self, name: str | None = None) -> StructureDefinition:
        """
        Turn the selection into a saved structure.

        The source blocks leave the scene in a single undoable step. On error
        (empty selection, nested group) nothing changes.
        """
        # Scene order, so ties on the lowest Y go to the earliest placed block.
        chosen = set(self.selected_ids)
        selected = [entity for entity in self.entities if entity.id in chosen]
        name = (name or "").strip() or f"Structure {len(self.structures) + 1}"
        definition = create_structure(selected, name)

        self.structures.append(definition)
        self._remove_ids({entity.id for entity in selected})
        self.set_mode(AppMode.CONSTRUCTION)
        logger.info("Structure %r created from %d blocks", name, len(definition.blocks))
        return definition

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    def undo(self) -> bool:
        changed = self.history.undo()
        if changed:
            self._prune_selection()
        return changed

    def redo(self) -> bool:
        changed = self.history.redo()
        if changed:
            self._prune_selection()
        return changed

    def _prune_selection(self) -> None:
        live = {entity.id for entity in self.entities}
        self.selected_ids = [i for i in self.selected_ids if i in live]

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def export_state(self) -> ProjectData:
        return ProjectData(entities=list(self.entities), structures=list(self.structures))

    def load_payload(self, payload) -> None:
        """
        Load a decoded project payload.

        Parsing happens before anything is replaced, so MalformedProjectData
        leaves the session untouched.
        """
        self.load_state(parse_project(payload))

    def load_state(self, project: ProjectData) -> None:
        """Replace the scene and structure library. History starts empty."""
        self.history.reset(project.entities)
        self.structures = list(project.structures)
        self.selected_ids = []
        self.active_structure = None
        self._contact = None
        self.height_lock = None
        logger.info(
            "Loaded %d entities and %d structures",
            len(project.entities),
            len(project.structures),
        )
