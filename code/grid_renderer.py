"""Render a dungeon layout to an ASCII grid."""

from __future__ import annotations

from typing import List, Tuple

from dungeon_geometry import Direction
from dungeon_layout import DungeonLayout
from models import GridRoom, RoomContent

# Checked in order; the first tag a room carries picks its glyph.
CONTENT_GLYPHS = (
    (RoomContent.ENTRANCE, "E"),
    (RoomContent.GOAL, "G"),
    (RoomContent.FINAL_LOCK, "F"),
    (RoomContent.LOCK, "L"),
    (RoomContent.FINAL_KEY, "k"),
    (RoomContent.KEY, "K"),
    (RoomContent.BOSS, "B"),
    (RoomContent.MONSTER, "M"),
    (RoomContent.TREASURE, "T"),
    (RoomContent.ITEM, "I"),
    (RoomContent.PUZZLE, "P"),
    (RoomContent.SECRET, "S"),
)
EMPTY_ROOM_GLYPH = "O"


def room_glyph(room: GridRoom) -> str:
    for content, glyph in CONTENT_GLYPHS:
        if content in room.contents:
            return glyph
    return EMPTY_ROOM_GLYPH


def render_grid(layout: DungeonLayout) -> List[str]:
    """Draw rooms on even cells and their connections between them, with +y pointing up.

    Connections whose rooms are not grid neighbours are left out.
    """
    if not layout.rooms:
        return []
    min_x, min_y, max_x, max_y = layout.bounds()
    width = 2 * (max_x - min_x) + 1
    height = 2 * (max_y - min_y) + 1
    grid = [[" " for _ in range(width)] for _ in range(height)]

    def cell(x: int, y: int) -> Tuple[int, int]:
        return 2 * (max_y - y), 2 * (x - min_x)

    for room in layout.rooms:
        row, col = cell(room.position.x, room.position.y)
        grid[row][col] = room_glyph(room)

    for link in layout.iter_links():
        if link.room_a.position.step(link.side_a) != link.room_b.position:
            continue
        row_a, col_a = cell(link.room_a.position.x, link.room_a.position.y)
        row_b, col_b = cell(link.room_b.position.x, link.room_b.position.y)
        if link.locked:
            glyph = "#"
        elif link.side_a in (Direction.LEFT, Direction.RIGHT):
            glyph = "-"
        else:
            glyph = "|"
        grid[(row_a + row_b) // 2][(col_a + col_b) // 2] = glyph

    return ["".join(row).rstrip() for row in grid]


def print_grid(layout: DungeonLayout) -> None:
    """Prints the ASCII grid to the console."""
    for line in render_grid(layout):
        print(line)
