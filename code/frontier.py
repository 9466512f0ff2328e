"""Tracks placed rooms that can still be used as attachment points."""

from __future__ import annotations

import random
from typing import Dict, Iterable, Iterator, List, Optional

from models import GridRoom


class FrontierTracker:
    """Set of rooms with at least one unused connection slot.

    Membership is by identity. Iteration follows insertion order so that a
    seeded generator reproduces the same draws.
    """

    def __init__(self, rooms: Iterable[GridRoom] = ()) -> None:
        self._rooms: Dict[int, GridRoom] = {}
        for room in rooms:
            self.add(room)

    def add(self, room: GridRoom) -> None:
        self._rooms.setdefault(id(room), room)

    def discard(self, room: GridRoom) -> None:
        self._rooms.pop(id(room), None)

    def clear(self) -> None:
        self._rooms.clear()

    def reset_to(self, room: GridRoom) -> None:
        """Forget every tracked room and keep only ``room``."""
        self._rooms.clear()
        self.add(room)

    def add_if_open(self, room: GridRoom) -> bool:
        if room.has_free_connection():
            self.add(room)
            return True
        return False

    def discard_if_full(self, room: GridRoom) -> bool:
        if not room.has_free_connection():
            self.discard(room)
            return True
        return False

    def choose(self, rng: Optional[random.Random] = None) -> GridRoom:
        if not self._rooms:
            raise IndexError("Cannot choose from an empty frontier")
        generator = rng if rng is not None else random
        return generator.choice(self.rooms)

    @property
    def rooms(self) -> List[GridRoom]:
        return list(self._rooms.values())

    def matches(self, rooms: Iterable[GridRoom]) -> bool:
        """Return True if the frontier is exactly the rooms in ``rooms`` with a free slot."""
        expected = {id(room) for room in rooms if room.has_free_connection()}
        return expected == set(self._rooms)

    def __contains__(self, room: object) -> bool:
        return id(room) in self._rooms

    def __iter__(self) -> Iterator[GridRoom]:
        return iter(list(self._rooms.values()))

    def __len__(self) -> int:
        return len(self._rooms)

    def __bool__(self) -> bool:
        return bool(self._rooms)
