"""Export a finished layout as Graphviz text or as a networkx graph."""

from __future__ import annotations

from pathlib import Path
from typing import List, Tuple, Union

import networkx as nx

from dungeon_constants import EXPORT_SCALE
from dungeon_layout import DungeonLayout
from models import GridRoom


def _format_number(value: float) -> str:
    return f"{value:g}"


def room_label(room: GridRoom) -> str:
    tags = sorted(content.name.lower() for content in room.contents)
    return "\\n".join([room.name, *tags]) if tags else room.name


def room_gv_position(room: GridRoom, scale: Tuple[float, float] = EXPORT_SCALE) -> str:
    x = room.position.x * scale[0]
    y = room.position.y * scale[1]
    return f"\"{_format_number(x)},{_format_number(y)}!\""


def to_graphviz(layout: DungeonLayout, scale: Tuple[float, float] = EXPORT_SCALE) -> str:
    """Return a Graphviz ``graph`` description with pinned room positions.

    Every connected pair appears as exactly one edge; locked edges are dashed.
    """
    lines: List[str] = ["graph space {", "node [shape=\"box\"];"]
    for room in layout.rooms:
        lines.append(
            f"{room.name} [label=\"{room_label(room)}\" pos={room_gv_position(room, scale)}];"
        )
    for link in layout.iter_links():
        style = " [style=\"dashed\" label=\"locked\"]" if link.locked else ""
        lines.append(f"{link.room_a.name} -- {link.room_b.name}{style};")
    lines.append("}")
    return "\n".join(lines) + "\n"


def write_graphviz(
    layout: DungeonLayout,
    path: Union[str, Path],
    scale: Tuple[float, float] = EXPORT_SCALE,
) -> Path:
    output_path = Path(path)
    with open(output_path, "w", encoding="utf-8") as handle:
        handle.write(to_graphviz(layout, scale))
    return output_path


def build_room_graph(layout: DungeonLayout) -> nx.Graph:
    """Return an undirected graph of rooms keyed by room index."""
    graph = nx.Graph()
    for room in layout.rooms:
        graph.add_node(
            room.index,
            pos=room.position.to_tuple(),
            contents=frozenset(content.name for content in room.contents),
        )
    for link in layout.iter_links():
        graph.add_edge(link.room_a.index, link.room_b.index, locked=link.locked, side=link.side_a.name)
    return graph


def open_subgraph(graph: nx.Graph) -> nx.Graph:
    """Return the view of ``graph`` that keeps only unlocked connections."""
    return nx.subgraph_view(graph, filter_edge=lambda a, b: not graph.edges[a, b]["locked"])


def rooms_reachable_without_keys(layout: DungeonLayout) -> List[int]:
    """Room indices reachable from the entrance without passing a locked door."""
    if not layout.rooms:
        return []
    graph = open_subgraph(build_room_graph(layout))
    return sorted(nx.node_connected_component(graph, layout.entrance.index))
