"""Spatial index for tracking which grid positions are occupied by rooms."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Dict, Optional

from dungeon_geometry import GridPos


class SpatialIndex:
    """Caches position occupancy to accelerate collision checks."""

    def __init__(self) -> None:
        self._position_to_room: Dict[GridPos, int] = {}

    def add_room(self, room_index: int, position: GridPos) -> None:
        """Record ``position`` as occupied by ``room_index``."""
        owner = self._position_to_room.get(position)
        if owner is not None and owner != room_index:
            raise ValueError(f"Position {position.to_tuple()} is already occupied by room {owner}")
        self._position_to_room[position] = room_index

    def remove_room(self, room_index: int, position: GridPos) -> None:
        """Remove the entry for ``position`` if it still maps to ``room_index``."""
        if self._position_to_room.get(position) == room_index:
            self._position_to_room.pop(position, None)

    def get_room_at(self, position: GridPos) -> Optional[int]:
        """Return the room index occupying ``position`` if any."""
        return self._position_to_room.get(position)

    def is_area_clear(self, positions: Iterable[GridPos]) -> bool:
        """Return True if none of ``positions`` is occupied."""
        return not any(position in self._position_to_room for position in positions)

    def __len__(self) -> int:
        return len(self._position_to_room)
