"""Lookup from mission node types to the rule templates that can realize them."""

from __future__ import annotations

import random
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from dungeon_geometry import Direction
from errors import RuleConfigurationError
from mission_graph import MissionGraphNode, NodeType
from models import RoomContent, RuleTemplate


class RuleCatalog:
    """Holds the candidate rule templates for each terminal mission node type."""

    def __init__(self, rules: Mapping[NodeType, Sequence[RuleTemplate]]) -> None:
        self._rules: Dict[NodeType, List[RuleTemplate]] = {}
        for node_type, templates in rules.items():
            self.register(node_type, templates)

    def register(self, node_type: NodeType, templates: Iterable[RuleTemplate]) -> None:
        templates = list(templates)
        if not node_type.is_terminal:
            raise RuleConfigurationError(f"Rules can only be registered for terminal types, not {node_type.label}")
        if not templates:
            raise RuleConfigurationError(f"Node type {node_type.label} needs at least one rule template")
        if node_type.is_lock:
            for template in templates:
                if not template.is_locked_rule:
                    raise RuleConfigurationError(
                        f"Rule {template.name} for {node_type.label} must start with a lock room"
                    )
        self._rules[node_type] = templates

    def rules_for(self, node_type: NodeType) -> List[RuleTemplate]:
        if not node_type.is_terminal:
            raise RuleConfigurationError("nodes used in the mission graph must be terminal")
        templates = self._rules.get(node_type)
        if not templates:
            raise RuleConfigurationError(f"No rule templates registered for {node_type.label}")
        return list(templates)

    def select(self, node: MissionGraphNode, rng: Optional[random.Random] = None) -> RuleTemplate:
        """Draw one rule template for ``node`` uniformly at random."""
        generator = rng if rng is not None else random
        return generator.choice(self.rules_for(node.node_type))

    def __contains__(self, node_type: NodeType) -> bool:
        return node_type in self._rules

    @property
    def node_types(self) -> List[NodeType]:
        return list(self._rules)


def _single(name: str, *contents: RoomContent) -> RuleTemplate:
    return RuleTemplate.build(name, [((0, 0), contents)])


def _corridor(name: str, *contents: RoomContent) -> RuleTemplate:
    # Straight run of three rooms with the tagged room at the far end.
    return RuleTemplate.build(
        name,
        [((0, 0), ()), ((0, 1), ()), ((0, 2), contents)],
        links=[(0, Direction.TOP, 1), (1, Direction.TOP, 2)],
    )


def _bend(name: str, *contents: RoomContent) -> RuleTemplate:
    return RuleTemplate.build(
        name,
        [((0, 0), ()), ((1, 0), contents)],
        links=[(0, Direction.RIGHT, 1)],
    )


def _l_shape(name: str, *contents: RoomContent) -> RuleTemplate:
    return RuleTemplate.build(
        name,
        [((0, 0), ()), ((0, 1), ()), ((1, 1), contents)],
        links=[(0, Direction.TOP, 1), (1, Direction.RIGHT, 2)],
    )


def default_rule_catalog() -> RuleCatalog:
    """Prototype rules for every terminal type of the default mission alphabet."""
    rules: Dict[NodeType, List[RuleTemplate]] = {
        NodeType.ENTRANCE: [_single("entrance", RoomContent.ENTRANCE)],
        NodeType.GOAL: [
            _single("goal_room", RoomContent.GOAL),
            _bend("goal_antechamber", RoomContent.GOAL),
        ],
        NodeType.KEY: [
            _single("key_room", RoomContent.KEY),
            _bend("key_alcove", RoomContent.KEY),
            _l_shape("key_hideaway", RoomContent.KEY),
        ],
        NodeType.FINAL_KEY: [
            _single("final_key_room", RoomContent.FINAL_KEY),
            _corridor("final_key_vault", RoomContent.FINAL_KEY),
        ],
        NodeType.LOCK: [_single("locked_door", RoomContent.LOCK)],
        NodeType.FINAL_LOCK: [_single("final_locked_door", RoomContent.FINAL_LOCK)],
        NodeType.TEST: [
            _single("monster_room", RoomContent.MONSTER),
            _corridor("monster_gauntlet", RoomContent.MONSTER),
            _l_shape("monster_ambush", RoomContent.MONSTER),
        ],
        NodeType.TEST_SECRET: [
            _single("secret_room", RoomContent.SECRET, RoomContent.MONSTER),
            _bend("secret_passage", RoomContent.SECRET),
        ],
        NodeType.ITEM: [
            _single("item_room", RoomContent.ITEM),
            _bend("item_alcove", RoomContent.ITEM),
        ],
        NodeType.BOSS: [_single("boss_room", RoomContent.BOSS)],
        NodeType.TREASURE: [
            _single("treasure_room", RoomContent.TREASURE),
            _l_shape("treasure_vault", RoomContent.TREASURE),
        ],
        NodeType.PUZZLE: [
            _single("puzzle_room", RoomContent.PUZZLE),
            _corridor("puzzle_hall", RoomContent.PUZZLE),
        ],
    }
    return RuleCatalog(rules)
