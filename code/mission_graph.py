"""Minimal mission-graph model consumed by the space-graph generator.

The generator only reads a mission graph: each node has a type from the mission
alphabet and four directional edge slots. An edge is shared by both nodes it
touches and always points at its target, so a node sees the edge it was reached
through as pointing back at itself.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Iterator, List, Optional

from dungeon_geometry import Direction
from errors import MissionGraphError


class NodeType(Enum):
    """Mission alphabet. The second value marks terminal symbols, which have rules."""

    ENTRANCE = ("entrance", True)
    GOAL = ("goal", True)
    KEY = ("key", True)
    FINAL_KEY = ("final_key", True)
    LOCK = ("lock", True)
    FINAL_LOCK = ("final_lock", True)
    TEST = ("test", True) # Combat encounter.
    TEST_SECRET = ("test_secret", True)
    ITEM = ("item", True)
    BOSS = ("boss", True)
    TREASURE = ("treasure", True)
    PUZZLE = ("puzzle", True)
    START = ("start", False)
    DUNGEON = ("dungeon", False)
    CHAIN = ("chain", False)
    GATE = ("gate", False)

    @property
    def label(self) -> str:
        return self.value[0]

    @property
    def is_terminal(self) -> bool:
        return self.value[1]

    @property
    def is_entrance(self) -> bool:
        return self is NodeType.ENTRANCE

    @property
    def is_lock(self) -> bool:
        return self in (NodeType.LOCK, NodeType.FINAL_LOCK)

    @classmethod
    def terminals(cls) -> List[NodeType]:
        return [node_type for node_type in cls if node_type.is_terminal]


@dataclass(eq=False)
class MissionGraphNode:
    node_type: NodeType
    connections: List[Optional[MissionGraphEdge]] = field(default_factory=lambda: [None] * 4)
    index: int = -1

    def get_connection(self, direction: Direction) -> Optional[MissionGraphEdge]:
        return self.connections[direction.index]

    def __repr__(self) -> str:
        return f"MissionGraphNode({self.index}, {self.node_type.label})"


@dataclass(eq=False)
class MissionGraphEdge:
    pointing_from: MissionGraphNode
    pointing_to: MissionGraphNode


@dataclass
class MissionGraph:
    """Ordered collection of mission nodes; the first node is where the walk starts."""

    nodes: List[MissionGraphNode] = field(default_factory=list)

    def add_node(self, node_type: NodeType) -> MissionGraphNode:
        node = MissionGraphNode(node_type)
        node.index = len(self.nodes)
        self.nodes.append(node)
        return node

    def connect(
        self,
        source: MissionGraphNode,
        side: Direction,
        target: MissionGraphNode,
    ) -> MissionGraphEdge:
        """Add a directed edge from ``source`` to ``target``.

        The edge fills ``side`` on the source and the opposite slot on the target.
        """
        if source is target:
            raise MissionGraphError("A mission node cannot connect to itself")
        for node, slot in ((source, side), (target, side.opposite())):
            if node.connections[slot.index] is not None:
                raise MissionGraphError(f"{node!r} already has an edge on its {slot.name} slot")
        edge = MissionGraphEdge(pointing_from=source, pointing_to=target)
        source.connections[side.index] = edge
        target.connections[side.opposite().index] = edge
        return edge

    @property
    def entrance(self) -> MissionGraphNode:
        if not self.nodes:
            raise MissionGraphError("Mission graph has no nodes")
        return self.nodes[0]

    def __iter__(self) -> Iterator[MissionGraphNode]:
        return iter(self.nodes)

    def __len__(self) -> int:
        return len(self.nodes)

    @classmethod
    def linear(cls, node_types: Iterable[NodeType], side: Direction = Direction.TOP) -> MissionGraph:
        """Build a chain of nodes, each linked to the next through ``side``."""
        graph = cls()
        previous: Optional[MissionGraphNode] = None
        for node_type in node_types:
            node = graph.add_node(node_type)
            if previous is not None:
                graph.connect(previous, side, node)
            previous = node
        return graph
