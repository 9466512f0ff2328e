"""Geometry helpers for grid positions, directions, and quarter-turn rotations."""

from __future__ import annotations

import random
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Tuple


class Rotation(Enum):
    """Represents counter-clockwise rotations in 90° increments on a y-up grid."""

    DEG_0 = 0
    DEG_90 = 90
    DEG_180 = 180
    DEG_270 = 270

    def quarter_turns(self) -> int:
        return (self.value // 90) % 4

    def inverse(self) -> Rotation:
        return Rotation.from_degrees(-self.value)

    def compose(self, other: Rotation) -> Rotation:
        """Return the rotation equivalent to applying ``self`` and then ``other``."""
        return Rotation.from_degrees(self.value + other.value)

    @classmethod
    def from_degrees(cls, value: int) -> Rotation:
        try:
            return cls(value % 360)
        except ValueError as exc:
            raise ValueError(f"Unsupported rotation {value}") from exc

    @classmethod
    def all(cls) -> Tuple[Rotation, ...]:
        return tuple(cls)

    @staticmethod
    def random(rng: Optional[random.Random] = None) -> Rotation:
        generator = rng if rng is not None else random
        return generator.choice(VALID_ROTATIONS)


VALID_ROTATIONS = tuple(Rotation)


class Direction(Enum):
    """The four connection slots of a room, indexed the way rooms store them."""

    LEFT = 0
    TOP = 1
    RIGHT = 2
    BOTTOM = 3

    @property
    def index(self) -> int:
        return self.value

    @property
    def dx(self) -> int:
        return _DIRECTION_VECTORS[self][0]

    @property
    def dy(self) -> int:
        return _DIRECTION_VECTORS[self][1]

    def opposite(self) -> Direction:
        return Direction((self.value + 2) % 4)

    @classmethod
    def from_tuple(cls, value: Tuple[int, int]) -> Direction:
        for direction, vector in _DIRECTION_VECTORS.items():
            if vector == tuple(value):
                return direction
        raise ValueError(f"Unsupported direction {value}")


# y grows upwards, so TOP is +y.
_DIRECTION_VECTORS = {
    Direction.LEFT: (-1, 0),
    Direction.TOP: (0, 1),
    Direction.RIGHT: (1, 0),
    Direction.BOTTOM: (0, -1),
}


@dataclass(frozen=True, order=True)
class GridPos:
    """Integer grid coordinate of a room."""

    x: int
    y: int

    def __iter__(self):
        yield self.x
        yield self.y

    def step(self, direction: Direction) -> GridPos:
        """Return the neighbouring position one grid step towards ``direction``."""
        return GridPos(self.x + direction.dx, self.y + direction.dy)

    def offset(self, dx: int, dy: int) -> GridPos:
        return GridPos(self.x + dx, self.y + dy)

    def to_tuple(self) -> Tuple[int, int]:
        return self.x, self.y

    @classmethod
    def from_tuple(cls, value: Tuple[int, int]) -> GridPos:
        return cls(*value)


ORIGIN = GridPos(0, 0)


def rotate_point(x: int, y: int, rotation: Rotation) -> Tuple[int, int]:
    if rotation is Rotation.DEG_0:
        return x, y
    if rotation is Rotation.DEG_90:
        return -y, x
    if rotation is Rotation.DEG_180:
        return -x, -y
    if rotation is Rotation.DEG_270:
        return y, -x
    raise AssertionError(f"Unhandled rotation {rotation}")


def rotate_position(position: GridPos, rotation: Rotation) -> GridPos:
    return GridPos(*rotate_point(position.x, position.y, rotation))


def rotate_positions(positions: Iterable[GridPos], rotation: Rotation) -> Tuple[GridPos, ...]:
    """Rotate every position about the origin, returning a new tuple."""
    return tuple(rotate_position(position, rotation) for position in positions)


def rotate_direction(direction: Direction, rotation: Rotation) -> Direction:
    """Rotate a direction the same way ``rotate_point`` rotates its unit vector."""
    return Direction.from_tuple(rotate_point(direction.dx, direction.dy, rotation))
