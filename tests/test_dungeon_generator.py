import networkx as nx
import pytest

from dungeon_generator import SpaceGraphGenerator, generate_space_graph, outgoing_targets
from dungeon_geometry import Direction, GridPos
from errors import GenerationFailedError, MissionGraphError, PlacementInfeasible, RuleConfigurationError
from graph_export import build_room_graph
from main import build_sample_mission
from mission_graph import MissionGraph, NodeType
from models import RoomContent, RuleTemplate
from room_placement import PlacementSearch
from rule_catalog import RuleCatalog


def _positions(layout):
    return [room.position for room in layout.rooms]


def test_entrance_to_single_room_corridor(simple_catalog, make_config):
    mission = MissionGraph.linear([NodeType.ENTRANCE, NodeType.TEST])
    generator = SpaceGraphGenerator(make_config(), simple_catalog)

    layout = generator.generate(mission)

    assert len(layout) == 2
    entrance, corridor = layout.rooms
    assert entrance.position == GridPos(0, 0)
    side = entrance.direction_to(corridor)
    assert side is not None
    assert corridor.position == entrance.position.step(side)
    assert corridor.neighbour(side.opposite()) is entrance
    assert not entrance.is_locked(side)


def test_lock_connection_is_locked_and_growth_continues_from_lock(simple_catalog, make_config):
    mission = MissionGraph()
    entrance = mission.add_node(NodeType.ENTRANCE)
    first = mission.add_node(NodeType.TEST)
    second = mission.add_node(NodeType.TEST)
    lock = mission.add_node(NodeType.LOCK)
    goal = mission.add_node(NodeType.GOAL)
    mission.connect(entrance, Direction.TOP, first)
    mission.connect(entrance, Direction.RIGHT, second)
    mission.connect(second, Direction.TOP, lock)
    mission.connect(lock, Direction.TOP, goal)

    for seed in range(10):
        generator = SpaceGraphGenerator(make_config(random_seed=seed), simple_catalog)
        layout = generator.generate(mission)

        lock_room = next(room for room in layout.rooms if room.has_content(RoomContent.LOCK))
        goal_room = next(room for room in layout.rooms if room.has_content(RoomContent.GOAL))
        locked_links = [link for link in layout.iter_links() if link.locked]
        assert len(locked_links) == 1
        assert lock_room in (locked_links[0].room_a, locked_links[0].room_b)
        side = locked_links[0].side_a
        assert locked_links[0].room_b.is_locked(side.opposite())
        # Only the lock room was left to grow from.
        assert goal_room.direction_to(lock_room) is not None
        assert not goal_room.is_locked(goal_room.direction_to(lock_room))
        assert layout.frontier_floor == lock_room.index
        assert layout.find_invariant_violations() == []


def test_non_entrance_first_node_fails_before_placing_rooms(simple_catalog, make_config):
    mission = MissionGraph.linear([NodeType.TEST, NodeType.GOAL])
    generator = SpaceGraphGenerator(make_config(), simple_catalog)

    with pytest.raises(MissionGraphError):
        generator.generate(mission)
    assert generator.layout is None


def test_empty_mission_is_rejected(simple_catalog, make_config):
    with pytest.raises(MissionGraphError):
        SpaceGraphGenerator(make_config(), simple_catalog).generate(MissionGraph())


def test_non_terminal_node_is_fatal_and_not_retried(simple_catalog, make_config):
    mission = MissionGraph.linear([NodeType.ENTRANCE, NodeType.CHAIN])
    generator = SpaceGraphGenerator(make_config(collect_metrics=True), simple_catalog)

    with pytest.raises(RuleConfigurationError):
        generator.generate(mission)
    assert generator.metrics.restarts == 0


def test_left_slot_edges_are_never_followed(simple_catalog, make_config):
    mission = MissionGraph()
    entrance = mission.add_node(NodeType.ENTRANCE)
    ignored = mission.add_node(NodeType.TEST)
    mission.connect(entrance, Direction.LEFT, ignored)

    layout = SpaceGraphGenerator(make_config(), simple_catalog).generate(mission)

    assert len(layout) == 1


def test_edges_are_walked_top_bottom_right_depth_first(make_config):
    mission = MissionGraph()
    entrance = mission.add_node(NodeType.ENTRANCE)
    hub = mission.add_node(NodeType.TEST)
    right = mission.add_node(NodeType.ITEM)
    bottom = mission.add_node(NodeType.PUZZLE)
    top = mission.add_node(NodeType.KEY)
    beyond_top = mission.add_node(NodeType.TREASURE)
    mission.connect(entrance, Direction.TOP, hub)
    mission.connect(hub, Direction.RIGHT, right)
    mission.connect(hub, Direction.TOP, top)
    mission.connect(top, Direction.TOP, beyond_top)
    mission.connect(entrance, Direction.BOTTOM, bottom)

    single = {
        node_type: [RuleTemplate.build(node_type.label, [((0, 0), ())])]
        for node_type in (NodeType.TEST, NodeType.ITEM, NodeType.PUZZLE, NodeType.KEY, NodeType.TREASURE)
    }
    generator = SpaceGraphGenerator(make_config(), RuleCatalog(single))
    generator.generate(mission)

    order = [applied.template.name for applied in generator.applied_rules]
    assert order == ["test", "key", "treasure", "item", "puzzle"]
    assert list(outgoing_targets(hub)) == [top, right]


def test_node_reached_twice_is_expanded_once(simple_catalog, make_config):
    mission = MissionGraph()
    entrance = mission.add_node(NodeType.ENTRANCE)
    left_branch = mission.add_node(NodeType.TEST)
    right_branch = mission.add_node(NodeType.KEY)
    goal = mission.add_node(NodeType.GOAL)
    mission.connect(entrance, Direction.TOP, left_branch)
    mission.connect(entrance, Direction.RIGHT, right_branch)
    mission.connect(left_branch, Direction.TOP, goal)
    mission.connect(right_branch, Direction.RIGHT, goal)

    layout = SpaceGraphGenerator(make_config(), simple_catalog).generate(mission)

    assert len(layout) == 4
    assert sum(room.has_content(RoomContent.GOAL) for room in layout.rooms) == 1


def test_placement_failure_restarts_with_fresh_layout(simple_catalog, make_config, monkeypatch):
    mission = MissionGraph.linear([NodeType.ENTRANCE, NodeType.TEST, NodeType.KEY, NodeType.GOAL])
    original = PlacementSearch.place_rule
    calls = {"count": 0}

    def flaky_place_rule(self, layout, template, **kwargs):
        calls["count"] += 1
        if calls["count"] == 2:
            raise PlacementInfeasible("simulated dead end")
        return original(self, layout, template, **kwargs)

    monkeypatch.setattr(PlacementSearch, "place_rule", flaky_place_rule)
    generator = SpaceGraphGenerator(make_config(collect_metrics=True), simple_catalog)

    layout = generator.generate(mission)

    assert generator.metrics.restarts == 1
    assert len(layout) == 4
    assert [room.index for room in layout.rooms] == [0, 1, 2, 3]
    assert layout.find_invariant_violations() == []


def _plus_rule():
    # The first room uses all four slots internally, so nothing can attach to it.
    return RuleTemplate.build(
        "plus",
        [((0, 0), ()), ((-1, 0), ()), ((0, 1), ()), ((1, 0), ()), ((0, -1), ())],
        links=[
            (0, Direction.LEFT, 1),
            (0, Direction.TOP, 2),
            (0, Direction.RIGHT, 3),
            (0, Direction.BOTTOM, 4),
        ],
    )


def test_unplaceable_rule_exhausts_restart_budget(make_config):
    catalog = RuleCatalog({NodeType.TEST: [_plus_rule()]})
    mission = MissionGraph.linear([NodeType.ENTRANCE, NodeType.TEST])
    config = make_config(max_placement_attempts=5, max_rotation_retries=2, max_restarts=2, collect_metrics=True)
    generator = SpaceGraphGenerator(config, catalog)

    with pytest.raises(GenerationFailedError) as excinfo:
        generator.generate(mission)

    assert excinfo.value.restarts == 2
    assert generator.metrics.restarts == 2
    assert generator.metrics.rotation_retries == 6


def test_failed_rule_is_replaced_by_another_rule_without_restarting(make_config, single_room_rule):
    catalog = RuleCatalog({NodeType.TEST: [_plus_rule(), single_room_rule]})
    mission = MissionGraph.linear([NodeType.ENTRANCE, NodeType.TEST])

    for seed in range(20):
        config = make_config(random_seed=seed, max_placement_attempts=5, max_restarts=0, collect_metrics=True)
        generator = SpaceGraphGenerator(config, catalog)

        layout = generator.generate(mission)

        assert len(layout) == 2
        assert generator.metrics.restarts == 0
        assert generator.applied_rules[0].template.name == "corridor_room"


def test_walk_depth_limit_is_reported_as_generation_failure(simple_catalog, make_config):
    mission = MissionGraph.linear([NodeType.ENTRANCE] + [NodeType.TEST] * 10)
    generator = SpaceGraphGenerator(make_config(max_walk_depth=3, max_restarts=0), simple_catalog)

    with pytest.raises(GenerationFailedError):
        generator.generate(mission)


def test_same_seed_reproduces_layout(default_catalog, make_config):
    mission = build_sample_mission()

    first = SpaceGraphGenerator(make_config(random_seed=99), default_catalog).generate(mission)
    second = SpaceGraphGenerator(make_config(random_seed=99), default_catalog).generate(mission)

    assert _positions(first) == _positions(second)


@pytest.mark.parametrize("rotate_connections", [False, True])
def test_generated_layouts_hold_invariants(default_catalog, make_config, branching_mission, rotate_connections):
    for seed in range(25):
        for mission in (branching_mission, build_sample_mission()):
            config = make_config(random_seed=seed, rotate_connections=rotate_connections)
            layout = SpaceGraphGenerator(config, default_catalog).generate(mission)

            positions = _positions(layout)
            assert len(positions) == len(set(positions))
            assert layout.find_invariant_violations() == []

            graph = build_room_graph(layout)
            assert nx.is_connected(graph)
            lock_nodes = sum(1 for node in mission.nodes if node.node_type.is_lock)
            assert sum(1 for link in layout.iter_links() if link.locked) == lock_nodes


def test_rotated_connections_are_geometrically_adjacent(default_catalog, make_config):
    config = make_config(random_seed=4, rotate_connections=True)

    layout = SpaceGraphGenerator(config, default_catalog).generate(build_sample_mission())

    for link in layout.iter_links():
        assert link.room_a.position.step(link.side_a) == link.room_b.position


def test_generate_space_graph_uses_defaults():
    layout = generate_space_graph(build_sample_mission())

    assert len(layout) >= len(build_sample_mission())
    assert layout.entrance.has_content(RoomContent.ENTRANCE)
