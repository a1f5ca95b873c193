"""
Undo/redo history over the placed-entity collection.

The collection is stored as an immutable tuple of frozen entities, so a
snapshot is just a reference to the current tuple. Callers take a snapshot
immediately before every mutation; any new snapshot invalidates redo.
"""

import logging
from collections import deque
from collections.abc import Iterable

from templebuilder.models import PlacedEntity


logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 50

Snapshot = tuple[PlacedEntity, ...]


class HistoryManager:
    """
    Bounded snapshot stack.

    Usage:
        history = HistoryManager()
        history.commit(history.present + (block,))  # snapshot, then mutate
        history.undo()  # back to the previous collection
        history.redo()
    """

    def __init__(self, initial: Iterable[PlacedEntity] = (), max_depth: int = DEFAULT_MAX_DEPTH):
        if max_depth < 1:
            raise ValueError("max_depth must be at least 1")
        self._present: Snapshot = tuple(initial)
        self._undo: deque[Snapshot] = deque(maxlen=max_depth)
        self._redo: deque[Snapshot] = deque()
        self._max_depth = max_depth

    @property
    def present(self) -> Snapshot:
        """The current placed-entity collection."""
        return self._present

    @property
    def max_depth(self) -> int:
        return self._max_depth

    @property
    def can_undo(self) -> bool:
        return bool(self._undo)

    @property
    def can_redo(self) -> bool:
        return bool(self._redo)

    @property
    def undo_depth(self) -> int:
        return len(self._undo)

    @property
    def redo_depth(self) -> int:
        return len(self._redo)

    def snapshot(self) -> None:
        """
        Record the current collection before a mutation.

        The oldest entry is dropped once max_depth is reached. Redo is cleared.
        """
        self._undo.append(self._present)
        self._redo.clear()

    def apply(self, entities: Iterable[PlacedEntity]) -> None:
        """Replace the current collection without touching the stacks."""
        self._present = tuple(entities)

    def commit(self, entities: Iterable[PlacedEntity]) -> None:
        """Snapshot, then make entities the current collection."""
        self.snapshot()
        self.apply(entities)

    def undo(self) -> bool:
        """Step back one snapshot. Returns False when there is nothing to undo."""
        if not self._undo:
            return False
        self._redo.appendleft(self._present)
        self._present = self._undo.pop()
        logger.debug("Undo: %d undo / %d redo left", len(self._undo), len(self._redo))
        return True

    def redo(self) -> bool:
        """Step forward one snapshot. Returns False when there is nothing to redo."""
        if not self._redo:
            return False
        self._undo.append(self._present)
        self._present = self._redo.popleft()
        logger.debug("Redo: %d undo / %d redo left", len(self._undo), len(self._redo))
        return True

    def reset(self, entities: Iterable[PlacedEntity] = ()) -> None:
        """Replace the collection and forget all history, e.g. after loading a project."""
        self._present = tuple(entities)
        self._undo.clear()
        self._redo.clear()
