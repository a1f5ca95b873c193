"""Exceptions raised by the editor core."""


class TempleBuilderError(Exception):
    """Base class for every error the editor reports to the user."""


class EmptySelection(TempleBuilderError):
    """Grouping was requested with nothing selected."""


class NestedGroupNotAllowed(TempleBuilderError):
    """The selection contains a placed group. Groups of groups are not supported."""


class MalformedProjectData(TempleBuilderError):
    """A project payload could not be parsed. The current state is left untouched."""


class UnknownEntity(TempleBuilderError, KeyError):
    """No placed entity has the requested id."""

    def __str__(self) -> str:
        return Exception.__str__(self)


class UnknownCatalogEntry(TempleBuilderError, KeyError):
    """A material, shape or structure id is not registered."""

    def __str__(self) -> str:
        return Exception.__str__(self)


class ReplayError(TempleBuilderError):
    """A replay script step is invalid."""
