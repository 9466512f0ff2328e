"""Data container for the state of a dungeon being synthesized."""

from __future__ import annotations

from typing import Iterable, Iterator, List, NamedTuple, Optional, Tuple

from dungeon_geometry import ORIGIN, Direction, GridPos
from frontier import FrontierTracker
from models import GridRoom, RoomContent, connect_rooms, lock_connection
from spatial_index import SpatialIndex


class RoomLink(NamedTuple):
    """One connection between two placed rooms, reported once per pair."""

    room_a: GridRoom
    side_a: Direction
    room_b: GridRoom
    locked: bool


class DungeonLayout:
    """Owns the placed rooms, the frontier, and the occupancy index of one build.

    A restart throws the whole layout away and starts from a new instance.
    """

    def __init__(self) -> None:
        self.rooms: List[GridRoom] = []
        self.frontier = FrontierTracker()
        self.spatial_index = SpatialIndex()
        # Index of the most recent lock room; rooms before it never rejoin the frontier.
        self.frontier_floor = 0

    @classmethod
    def with_entrance(cls) -> DungeonLayout:
        """Create a layout holding a single entrance room at the origin."""
        layout = cls()
        entrance = GridRoom(contents=frozenset((RoomContent.ENTRANCE,)), position=ORIGIN)
        layout.register_room(entrance)
        layout.frontier.add(entrance)
        return layout

    @property
    def entrance(self) -> GridRoom:
        if not self.rooms:
            raise IndexError("Layout has no rooms")
        return self.rooms[0]

    def register_room(self, room: GridRoom, position: Optional[GridPos] = None) -> int:
        """Add ``room`` to the layout, optionally moving it to ``position`` first."""
        if position is not None:
            room.position = position
        room_index = len(self.rooms)
        self.spatial_index.add_room(room_index, room.position)
        room.index = room_index
        self.rooms.append(room)
        return room_index

    def connect(self, base: GridRoom, side: Direction, room: GridRoom) -> None:
        connect_rooms(base, side, room)

    def lock(self, first: GridRoom, second: GridRoom) -> Direction:
        return lock_connection(first, second)

    def is_area_clear(self, positions: Iterable[GridPos]) -> bool:
        return self.spatial_index.is_area_clear(positions)

    def room_at(self, position: GridPos) -> Optional[GridRoom]:
        room_index = self.spatial_index.get_room_at(position)
        return self.rooms[room_index] if room_index is not None else None

    def iter_links(self) -> Iterator[RoomLink]:
        """Yield each connected pair once, from the room with the lower index."""
        for room in self.rooms:
            for direction, connection in room.used_connections():
                other = connection.room
                if room.index < other.index:
                    yield RoomLink(room, direction, other, connection.locked)

    def bounds(self) -> Tuple[int, int, int, int]:
        """Return ``(min_x, min_y, max_x, max_y)`` over all placed rooms."""
        if not self.rooms:
            return 0, 0, 0, 0
        xs = [room.position.x for room in self.rooms]
        ys = [room.position.y for room in self.rooms]
        return min(xs), min(ys), max(xs), max(ys)

    def find_invariant_violations(self) -> List[str]:
        """Describe every structural invariant the layout currently breaks."""
        problems: List[str] = []
        positions = {}
        for room in self.rooms:
            if room.position in positions:
                problems.append(
                    f"{room.name} and {positions[room.position].name} share position {room.position.to_tuple()}"
                )
            positions[room.position] = room

        for room in self.rooms:
            for direction, connection in room.used_connections():
                back = connection.room.get_connection(direction.opposite())
                if back is None or back.room is not room:
                    problems.append(f"{room.name} {direction.name} connection is not mirrored")
                elif back.locked != connection.locked:
                    problems.append(f"{room.name} {direction.name} connection lock state differs from its mirror")

        if not self.frontier.matches(self.rooms[self.frontier_floor:]):
            problems.append("frontier does not match the rooms with free connections")
        return problems

    def __len__(self) -> int:
        return len(self.rooms)

    def __iter__(self) -> Iterator[GridRoom]:
        return iter(self.rooms)

    def __repr__(self) -> str:
        return f"DungeonLayout(rooms={len(self.rooms)}, frontier={len(self.frontier)})"
