"""Tests for the placement session command surface.

Tests cover:
- The place / stack / group / undo scenario
- Height lock capture and release
- Mode gating
- Grab, remove, delete selection and clear as undoable steps
- Structure placement
- Loading projects
"""

import math

import pytest

from templebuilder.config import EditorSettings
from templebuilder.errors import (
    EmptySelection,
    MalformedProjectData,
    NestedGroupNotAllowed,
    UnknownCatalogEntry,
    UnknownEntity,
)
from templebuilder.models import AppMode, PendingStructure, PlacedGroup, Shape
from templebuilder.session import PlacementSession

from conftest import entity_hit, ground_hit


def _select_all(session: PlacementSession) -> None:
    session.set_mode(AppMode.SELECTION)
    for entity in session.entities:
        session.toggle_selection(entity.id)


class TestPillarScenario:
    def test_place_stack_group_undo(self, session):
        session.pointer_move(ground_hit())
        bottom = session.confirm()
        assert bottom.transform.position == (0.0, 0.5, 0.0)

        session.pointer_move(entity_hit(bottom, (0.0, 1.0, 0.0), (0.0, 1.0, 0.0)))
        top = session.confirm()
        assert top.transform.position[1] == pytest.approx(1.498)

        _select_all(session)
        structure = session.create_structure("Pillar")

        assert structure.name == "Pillar"
        assert structure.blocks[0].relative_position == (0.0, 0.0, 0.0)
        assert structure.blocks[1].relative_position == pytest.approx((0.0, 1.0, 0.0), abs=0.01)
        assert session.entities == ()
        assert session.structures == [structure]
        assert session.mode == AppMode.CONSTRUCTION

        # Grouping is a single undo step; the structure survives it.
        assert session.undo()
        assert [e.id for e in session.entities] == [bottom.id, top.id]
        assert session.structures == [structure]
        assert session.can_redo

    def test_failed_grouping_changes_nothing(self, pillar_session):
        _select_all(pillar_session)
        pillar_session.create_structure("Pillar")
        pillar_session.set_mode(AppMode.CONSTRUCTION)
        pillar_session.select_structure(pillar_session.structures[0].id)
        pillar_session.pointer_move(ground_hit(3.0, 0.0))
        pillar_session.confirm()
        pillar_session.undo()
        pillar_session.undo()
        assert len(pillar_session.entities) == 2

        pillar_session.redo()
        pillar_session.redo()
        before = pillar_session.entities
        depth = pillar_session.history.undo_depth
        assert isinstance(before[0], PlacedGroup)

        pillar_session.set_mode(AppMode.SELECTION)
        pillar_session.toggle_selection(before[0].id)
        with pytest.raises(NestedGroupNotAllowed):
            pillar_session.create_structure("Nested")

        assert pillar_session.entities == before
        assert pillar_session.history.undo_depth == depth
        assert len(pillar_session.structures) == 1

    def test_grouping_nothing(self, pillar_session):
        with pytest.raises(EmptySelection):
            pillar_session.create_structure("Empty")

    def test_blank_name_gets_default(self, pillar_session):
        _select_all(pillar_session)
        assert pillar_session.create_structure("  ").name == "Structure 1"

    def test_equal_heights_pivot_on_first_placed(self, session):
        session.pointer_move(ground_hit(0.0, 0.0))
        first = session.confirm()
        session.pointer_move(ground_hit(3.0, 0.0))
        second = session.confirm()

        session.set_mode(AppMode.SELECTION)
        session.toggle_selection(second.id)
        session.toggle_selection(first.id)
        structure = session.create_structure("Row")

        assert structure.blocks[0].relative_position == (0.0, 0.0, 0.0)
        assert structure.blocks[1].relative_position == (3.0, 0.0, 0.0)


class TestHeightLock:
    def test_lock_holds_y_until_released(self, pillar_session):
        session = pillar_session
        top = session.entities[1]

        session.pointer_move(ground_hit(2.0, 0.0))
        session.set_height_lock(True)
        assert session.height_lock == 0.5

        hits = [
            entity_hit(top, (0.0, 1.998, 0.0), (0.0, 1.0, 0.0)),
            entity_hit(top, (0.5, 1.5, 0.0), (1.0, 0.0, 0.0)),
            ground_hit(-4.0, 3.0),
        ]
        for hit in hits:
            assert session.pointer_move(hit)[1] == 0.5

        session.set_height_lock(False)
        assert session.pointer_move(hits[0])[1] == pytest.approx(2.496)

    def test_lock_without_pending_position(self, session):
        session.set_height_lock(True)
        assert session.height_lock is None

    def test_mode_switch_clears_lock(self, session):
        session.pointer_move(ground_hit())
        session.set_height_lock(True)
        session.set_mode(AppMode.SELECTION)
        assert session.height_lock is None
        assert session.pending_position is None


class TestModes:
    def test_pointer_and_confirm_ignored_outside_construction(self, session):
        session.set_mode(AppMode.VIEW)
        assert session.pointer_move(ground_hit()) is None
        assert session.confirm() is None
        assert session.entities == ()
        assert not session.can_undo

    def test_no_hit_clears_pending(self, session):
        session.pointer_move(ground_hit())
        assert session.preview is not None
        session.pointer_move(None)
        assert session.pending_position is None
        assert session.confirm() is None

    def test_toggle_only_in_selection_mode(self, pillar_session):
        entity_id = pillar_session.entities[0].id
        assert pillar_session.toggle_selection(entity_id) is False
        pillar_session.set_mode("selection")
        assert pillar_session.toggle_selection(entity_id) is True
        assert pillar_session.toggle_selection(entity_id) is False

    def test_view_mode_cancels_structure(self, pillar_session):
        _select_all(pillar_session)
        structure = pillar_session.create_structure("Pillar")
        pillar_session.select_structure(structure.id)
        pillar_session.set_mode(AppMode.VIEW)
        assert pillar_session.active_structure is None


class TestToolState:
    def test_rotate_steps_quarter_turns(self, session):
        session.rotate("y")
        assert session.rotate("y") == (0.0, math.pi, 0.0)
        assert session.rotate("x")[0] == pytest.approx(math.pi / 2)

    def test_rotation_feeds_footprint(self, session):
        session.set_scale("x", 2)
        session.rotate("y")
        session.pointer_move(ground_hit())
        footprint = session.pending_footprint
        assert (footprint.width, footprint.depth) == (1.0, 2.0)

    def test_scale_must_be_positive(self, session):
        with pytest.raises(ValueError):
            session.set_scale("y", 0)

    def test_unknown_catalog_entries(self, session):
        with pytest.raises(UnknownCatalogEntry):
            session.select_material("marble")
        with pytest.raises(UnknownCatalogEntry):
            session.select_shape("pyramid")
        with pytest.raises(UnknownCatalogEntry):
            session.select_structure("missing")

    def test_slab_on_ground(self, session):
        session.select_shape("slab")
        session.select_material("wood")
        assert session.pointer_move(ground_hit()) == (0.0, 0.25, 0.0)
        block = session.confirm()
        assert (block.shape, block.material) == (Shape.SLAB, "wood")


class TestMutations:
    def test_remove_and_undo(self, pillar_session):
        bottom = pillar_session.entities[0]
        pillar_session.remove(bottom.id)
        assert len(pillar_session.entities) == 1
        pillar_session.undo()
        assert pillar_session.entities[0] == bottom

    def test_remove_unknown(self, session):
        with pytest.raises(UnknownEntity):
            session.remove("nope")

    def test_grab_block_copies_tool_state(self, session):
        session.select_material("brick")
        session.select_shape("column")
        session.set_scale("y", 2)
        session.rotate("y")
        session.pointer_move(ground_hit())
        placed = session.confirm()

        session.select_material("stone")
        session.select_shape("cube")
        session.set_scale("y", 1)
        session.set_mode(AppMode.SELECTION)

        session.grab(placed.id)
        assert session.entities == ()
        assert session.mode == AppMode.CONSTRUCTION
        assert (session.material, session.shape, session.scale) == ("brick", Shape.COLUMN, (1.0, 2.0, 1.0))
        assert session.rotation == placed.transform.rotation

    def test_grab_group_picks_structure(self, pillar_session):
        _select_all(pillar_session)
        structure = pillar_session.create_structure("Pillar")
        pillar_session.select_structure(structure.id)
        pillar_session.rotate("y")
        pillar_session.pointer_move(ground_hit())
        group = pillar_session.confirm()
        pillar_session.cancel_structure()
        pillar_session.rotate("y")

        pillar_session.grab(group.id)
        assert pillar_session.active_structure is structure
        assert pillar_session.rotation == group.transform.rotation
        assert isinstance(pillar_session.pending, PendingStructure)

    def test_delete_selection_is_one_step(self, pillar_session):
        _select_all(pillar_session)
        depth = pillar_session.history.undo_depth
        assert pillar_session.delete_selection() == 2
        assert pillar_session.history.undo_depth == depth + 1
        assert pillar_session.selected_ids == []
        pillar_session.undo()
        assert len(pillar_session.entities) == 2

    def test_delete_empty_selection(self, pillar_session):
        depth = pillar_session.history.undo_depth
        assert pillar_session.delete_selection() == 0
        assert pillar_session.history.undo_depth == depth

    def test_clear_is_undoable(self, pillar_session):
        pillar_session.clear()
        assert pillar_session.entities == ()
        pillar_session.undo()
        assert len(pillar_session.entities) == 2

    def test_sixty_placements_leave_fifty_undo_steps(self, session):
        session.pointer_move(ground_hit())
        for _ in range(60):
            session.confirm()
        assert session.history.undo_depth == 50
        for _ in range(50):
            assert session.undo()
        assert not session.undo()
        assert len(session.entities) == 10

    def test_history_depth_from_settings(self):
        session = PlacementSession(EditorSettings(history_depth=2))
        session.pointer_move(ground_hit())
        for _ in range(5):
            session.confirm()
        assert session.history.undo_depth == 2


class TestStructurePlacement:
    def test_place_structure_instance(self, pillar_session):
        _select_all(pillar_session)
        structure = pillar_session.create_structure("Pillar")
        pillar_session.select_structure(structure.id)

        assert pillar_session.pointer_move(ground_hit(4.0, 0.0)) == (4.0, 0.5, 0.0)
        group = pillar_session.confirm()
        assert isinstance(group, PlacedGroup)
        assert group.structure is structure

    def test_selecting_material_drops_structure(self, pillar_session):
        _select_all(pillar_session)
        structure = pillar_session.create_structure("Pillar")
        pillar_session.select_structure(structure.id)
        pillar_session.select_material("gold")
        assert pillar_session.active_structure is None


class TestLoading:
    def test_malformed_payload_leaves_state(self, pillar_session):
        before = pillar_session.entities
        with pytest.raises(MalformedProjectData):
            pillar_session.load_payload({"placedEntities": [{"id": "x", "position": "here"}]})
        assert pillar_session.entities == before
        assert pillar_session.can_undo

    def test_load_resets_history(self, pillar_session):
        payload = pillar_session.export_state()
        pillar_session.clear()
        pillar_session.load_state(payload)
        assert len(pillar_session.entities) == 2
        assert not pillar_session.can_undo
        assert not pillar_session.can_redo

    def test_load_bare_array(self, session):
        session.load_payload([{"position": [0, 0.5, 0], "type": "wood", "rotation": 1.0}])
        block = session.entities[0]
        assert block.material == "wood"
        assert block.transform.rotation == (0.0, 1.0, 0.0)
