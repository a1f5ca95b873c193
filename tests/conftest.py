"""Pytest configuration and shared fixtures for editor tests."""

import pytest

from templebuilder.models import (
    HitContext,
    PendingBlock,
    PlacedBlock,
    PlacedEntity,
    Shape,
    TargetKind,
    Transform,
)
from templebuilder.session import PlacementSession


# =============================================================================
# Hit builders
# =============================================================================


def ground_hit(x: float = 0.0, z: float = 0.0) -> HitContext:
    """A pointer hit on the ground plane."""
    return HitContext(point=(x, 0.0, z), normal=(0.0, 1.0, 0.0), target_kind=TargetKind.GROUND)


def entity_hit(
    entity: PlacedEntity,
    point: tuple[float, float, float],
    normal: tuple[float, float, float],
) -> HitContext:
    """A pointer hit on a placed block or group."""
    return HitContext(
        point=point,
        normal=normal,
        target_kind=TargetKind.GROUP if entity.is_group else TargetKind.BLOCK,
        target_transform=entity.transform,
        target_shape=None if entity.is_group else entity.shape,
    )


def block_at(
    x: float,
    y: float,
    z: float,
    shape: Shape = Shape.CUBE,
    material: str = "stone",
    scale: tuple[float, float, float] = (1.0, 1.0, 1.0),
) -> PlacedBlock:
    return PlacedBlock(
        shape=shape,
        material=material,
        transform=Transform(position=(x, y, z), scale=scale),
    )


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def unit_cube() -> PendingBlock:
    """A 1x1x1 stone cube with no rotation."""
    return PendingBlock(material="stone", shape=Shape.CUBE)


@pytest.fixture
def session() -> PlacementSession:
    """A fresh session in construction mode."""
    return PlacementSession()


@pytest.fixture
def pillar_session(session: PlacementSession) -> PlacementSession:
    """Session with two unit cubes stacked at the origin."""
    session.pointer_move(ground_hit())
    bottom = session.confirm()
    session.pointer_move(entity_hit(bottom, (0.0, 1.0, 0.0), (0.0, 1.0, 0.0)))
    session.confirm()
    return session
