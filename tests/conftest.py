import random
import sys
from pathlib import Path
from typing import Callable

import pytest

ROOT_DIR = Path(__file__).resolve().parent.parent
CODE_DIR = ROOT_DIR / "code"
if str(CODE_DIR) not in sys.path:
    sys.path.insert(0, str(CODE_DIR))

from dungeon_config import GeneratorConfig
from dungeon_geometry import Direction
from dungeon_layout import DungeonLayout
from mission_graph import MissionGraph, NodeType
from models import RoomContent, RuleTemplate
from rule_catalog import RuleCatalog, default_rule_catalog


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def single_room_rule() -> RuleTemplate:
    return RuleTemplate.build("corridor_room", [((0, 0), (RoomContent.EMPTY,))])


@pytest.fixture
def lock_rule() -> RuleTemplate:
    return RuleTemplate.build("locked_door", [((0, 0), (RoomContent.LOCK,))])


@pytest.fixture
def l_shaped_rule() -> RuleTemplate:
    return RuleTemplate.build(
        "l_shape",
        [((0, 0), ()), ((0, 1), ()), ((1, 1), (RoomContent.TREASURE,))],
        links=[(0, Direction.TOP, 1), (1, Direction.RIGHT, 2)],
    )


@pytest.fixture
def simple_catalog(single_room_rule: RuleTemplate, lock_rule: RuleTemplate) -> RuleCatalog:
    return RuleCatalog(
        {
            NodeType.TEST: [single_room_rule],
            NodeType.KEY: [RuleTemplate.build("key_room", [((0, 0), (RoomContent.KEY,))])],
            NodeType.LOCK: [lock_rule],
            NodeType.GOAL: [RuleTemplate.build("goal_room", [((0, 0), (RoomContent.GOAL,))])],
        }
    )


@pytest.fixture
def default_catalog() -> RuleCatalog:
    return default_rule_catalog()


@pytest.fixture
def entrance_layout() -> DungeonLayout:
    return DungeonLayout.with_entrance()


@pytest.fixture
def make_config() -> Callable[..., GeneratorConfig]:
    def _make_config(**overrides) -> GeneratorConfig:
        values = dict(random_seed=7, max_restarts=50)
        values.update(overrides)
        return GeneratorConfig(**values)

    return _make_config


@pytest.fixture
def branching_mission() -> MissionGraph:
    """Entrance with a key branch, a lock, and a goal behind the lock."""
    mission = MissionGraph()
    entrance = mission.add_node(NodeType.ENTRANCE)
    hub = mission.add_node(NodeType.TEST)
    key = mission.add_node(NodeType.KEY)
    side = mission.add_node(NodeType.TEST)
    lock = mission.add_node(NodeType.LOCK)
    goal = mission.add_node(NodeType.GOAL)
    mission.connect(entrance, Direction.TOP, hub)
    mission.connect(hub, Direction.TOP, key)
    mission.connect(hub, Direction.RIGHT, side)
    mission.connect(side, Direction.TOP, lock)
    mission.connect(lock, Direction.TOP, goal)
    return mission
