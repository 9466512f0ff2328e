"""Exceptions raised while synthesizing a space graph."""

from __future__ import annotations


class DungeonGenerationError(Exception):
    """Base class for every error raised by the space-graph generator."""


class MissionGraphError(DungeonGenerationError, ValueError):
    """The mission graph cannot be used as input (e.g. it does not start at an entrance)."""


class RuleConfigurationError(DungeonGenerationError, ValueError):
    """A rule template or catalog entry violates an authoring constraint."""


class PlacementInfeasible(DungeonGenerationError):
    """Placement could not make progress; the whole build has to restart.

    This is a recoverable signal. The generator catches it and rebuilds the
    dungeon from the entrance with a fresh layout.
    """

    def __init__(self, message: str, *, node_type: object = None) -> None:
        super().__init__(message)
        self.node_type = node_type


class GenerationFailedError(DungeonGenerationError, RuntimeError):
    """The generator used up its restart budget without producing a dungeon."""

    def __init__(self, message: str, *, restarts: int) -> None:
        super().__init__(message)
        self.restarts = restarts
