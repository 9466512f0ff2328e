"""Core room and rule-template types used by the space-graph generator."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, Iterable, List, Optional, Sequence, Tuple

from dungeon_geometry import (
    ORIGIN,
    Direction,
    GridPos,
    Rotation,
    rotate_direction,
    rotate_position,
)
from errors import RuleConfigurationError


class RoomContent(Enum):
    """Tags describing what a room holds. Only the lock tags affect placement."""
    ENTRANCE = 0
    GOAL = 1
    KEY = 2
    FINAL_KEY = 3
    LOCK = 4 # Gated transition; growth continues only through this room.
    FINAL_LOCK = 5 # Gate in front of the goal; same placement semantics as LOCK.
    MONSTER = 6
    BOSS = 7
    TREASURE = 8
    ITEM = 9
    PUZZLE = 10
    SECRET = 11
    EMPTY = 12


LOCK_CONTENTS = frozenset((RoomContent.LOCK, RoomContent.FINAL_LOCK))


@dataclass
class Connection:
    """One used connection slot: the room on the other side and whether the door is locked."""

    room: GridRoom
    locked: bool = False


@dataclass(eq=False)
class GridRoom:
    """A single room on the integer grid with four directional connection slots."""

    contents: FrozenSet[RoomContent] = frozenset()
    position: GridPos = ORIGIN
    connections: List[Optional[Connection]] = field(default_factory=lambda: [None] * 4)
    index: int = -1

    def __post_init__(self) -> None:
        self.contents = frozenset(self.contents)
        if not isinstance(self.position, GridPos):
            self.position = GridPos.from_tuple(self.position)
        if len(self.connections) != len(Direction):
            raise ValueError("GridRoom needs exactly one connection slot per direction")

    def get_connection(self, direction: Direction) -> Optional[Connection]:
        return self.connections[direction.index]

    def set_connection(self, direction: Direction, room: Optional[GridRoom], *, locked: bool = False) -> None:
        """Point the ``direction`` slot at ``room`` (or clear it with ``None``)."""
        if room is None:
            self.connections[direction.index] = None
            return
        self.connections[direction.index] = Connection(room, locked)

    def neighbour(self, direction: Direction) -> Optional[GridRoom]:
        connection = self.connections[direction.index]
        return connection.room if connection is not None else None

    def is_locked(self, direction: Direction) -> bool:
        connection = self.connections[direction.index]
        return connection is not None and connection.locked

    def free_connections(self) -> List[Direction]:
        return [direction for direction in Direction if self.connections[direction.index] is None]

    def used_connections(self) -> List[Tuple[Direction, Connection]]:
        return [
            (direction, connection)
            for direction in Direction
            if (connection := self.connections[direction.index]) is not None
        ]

    def has_free_connection(self) -> bool:
        return any(connection is None for connection in self.connections)

    def lock_door(self, direction: Direction) -> None:
        connection = self.connections[direction.index]
        if connection is None:
            raise ValueError(f"Cannot lock unused {direction.name} connection")
        connection.locked = True

    def direction_to(self, other: GridRoom) -> Optional[Direction]:
        """Return the slot that points at ``other``, if any."""
        for direction, connection in self.used_connections():
            if connection.room is other:
                return direction
        return None

    def has_content(self, content: RoomContent) -> bool:
        return content in self.contents

    @property
    def is_lock_room(self) -> bool:
        return not self.contents.isdisjoint(LOCK_CONTENTS)

    @property
    def name(self) -> str:
        return f"room_{self.index}" if self.index >= 0 else f"room@{self.position.x},{self.position.y}"

    def __repr__(self) -> str:
        tags = ",".join(sorted(content.name for content in self.contents)) or "-"
        links = " ".join(
            f"{direction.name}{'*' if connection.locked else ''}->{connection.room.name}"
            for direction, connection in self.used_connections()
        )
        return f"GridRoom({self.name} at {self.position.to_tuple()} [{tags}] {links})"


def connect_rooms(first: GridRoom, side: Direction, second: GridRoom, *, locked: bool = False) -> None:
    """Connect ``first`` on ``side`` to ``second`` on the opposite side."""
    first.set_connection(side, second, locked=locked)
    second.set_connection(side.opposite(), first, locked=locked)


def lock_connection(first: GridRoom, second: GridRoom) -> Direction:
    """Lock the shared connection between two rooms from both sides.

    Returns the side of ``first`` that was locked.
    """
    side = first.direction_to(second)
    if side is None or second.neighbour(side.opposite()) is not first:
        raise ValueError("The two rooms to be locked must be connected")
    first.lock_door(side)
    second.lock_door(side.opposite())
    return side


def rotate_rooms(rooms: Sequence[GridRoom], rotation: Rotation, *, rotate_connections: bool = False) -> None:
    """Rotate the positions of a freshly instantiated cluster about the origin.

    Connection slots keep their directions unless ``rotate_connections`` is set,
    in which case every slot is moved to the rotated direction as well.
    """
    for room in rooms:
        room.position = rotate_position(room.position, rotation)
        if rotate_connections and rotation is not Rotation.DEG_0:
            rotated: List[Optional[Connection]] = [None] * len(Direction)
            for direction in Direction:
                rotated[rotate_direction(direction, rotation).index] = room.connections[direction.index]
            room.connections = rotated


@dataclass
class RuleTemplate:
    """A pre-authored cluster of rooms that realizes one mission node.

    Positions are relative to the first room, which sits at the origin and is
    the only room wired to the dungeon when the rule is applied.
    """

    name: str
    rooms: List[GridRoom]

    def __post_init__(self) -> None:
        self.rooms = list(self.rooms)
        self.validate()

    def validate(self) -> None:
        if not self.rooms:
            raise RuleConfigurationError(f"Rule {self.name} must contain at least one room")
        if self.rooms[0].position != ORIGIN:
            raise RuleConfigurationError(
                f"Rule {self.name} first room must sit at the origin, got {self.rooms[0].position.to_tuple()}"
            )
        seen: Dict[GridPos, int] = {}
        for room_index, room in enumerate(self.rooms):
            if room.position in seen:
                raise RuleConfigurationError(
                    f"Rule {self.name} rooms {seen[room.position]} and {room_index} share position {room.position.to_tuple()}"
                )
            seen[room.position] = room_index

        members = {id(room) for room in self.rooms}
        for room_index, room in enumerate(self.rooms):
            for direction, connection in room.used_connections():
                other = connection.room
                if id(other) not in members:
                    raise RuleConfigurationError(
                        f"Rule {self.name} room {room_index} connects {direction.name} to a room outside the rule"
                    )
                back = other.get_connection(direction.opposite())
                if back is None or back.room is not room or back.locked != connection.locked:
                    raise RuleConfigurationError(
                        f"Rule {self.name} room {room_index} {direction.name} connection is not mirrored"
                    )

        reached = {id(self.rooms[0])}
        pending = [self.rooms[0]]
        while pending:
            room = pending.pop()
            for _, connection in room.used_connections():
                if id(connection.room) not in reached:
                    reached.add(id(connection.room))
                    pending.append(connection.room)
        if len(reached) != len(self.rooms):
            raise RuleConfigurationError(f"Rule {self.name} rooms are not all connected to the first room")

    @property
    def first_room(self) -> GridRoom:
        return self.rooms[0]

    @property
    def is_locked_rule(self) -> bool:
        return self.first_room.is_lock_room

    def __len__(self) -> int:
        return len(self.rooms)

    def instantiate(self) -> List[GridRoom]:
        """Return fresh copies of the rooms with internal connections re-pointed at the copies."""
        copies = [GridRoom(contents=room.contents, position=room.position) for room in self.rooms]
        copy_by_id = {id(original): clone for original, clone in zip(self.rooms, copies)}
        for original, clone in zip(self.rooms, copies):
            for direction, connection in original.used_connections():
                clone.set_connection(direction, copy_by_id[id(connection.room)], locked=connection.locked)
        return copies

    @classmethod
    def build(
        cls,
        name: str,
        cells: Iterable[Tuple[Tuple[int, int], Iterable[RoomContent]]],
        links: Iterable[Tuple[int, Direction, int]] = (),
    ) -> RuleTemplate:
        """Build a rule from ``((x, y), contents)`` cells and ``(a, side, b)`` links between cell indices."""
        rooms = [GridRoom(contents=frozenset(contents), position=GridPos.from_tuple(pos)) for pos, contents in cells]
        for first, side, second in links:
            try:
                first_room, second_room = rooms[first], rooms[second]
            except IndexError as exc:
                raise RuleConfigurationError(f"Rule {name} link ({first}, {second}) is out of range") from exc
            connect_rooms(first_room, side, second_room)
        return cls(name=name, rooms=rooms)
