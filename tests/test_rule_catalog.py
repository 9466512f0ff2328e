import random
from collections import Counter

import pytest

from errors import RuleConfigurationError
from mission_graph import MissionGraph, NodeType
from models import RuleTemplate
from rule_catalog import RuleCatalog


def test_register_rejects_non_terminal_types(single_room_rule):
    with pytest.raises(RuleConfigurationError):
        RuleCatalog({NodeType.DUNGEON: [single_room_rule]})


def test_register_rejects_empty_rule_list():
    with pytest.raises(RuleConfigurationError):
        RuleCatalog({NodeType.KEY: []})


def test_lock_types_need_lock_rooms_first(single_room_rule, lock_rule):
    with pytest.raises(RuleConfigurationError):
        RuleCatalog({NodeType.LOCK: [single_room_rule]})

    catalog = RuleCatalog({NodeType.LOCK: [lock_rule]})
    assert NodeType.LOCK in catalog


def test_rules_for_non_terminal_is_a_configuration_error(simple_catalog):
    with pytest.raises(RuleConfigurationError, match="must be terminal"):
        simple_catalog.rules_for(NodeType.GATE)


def test_rules_for_unregistered_type(simple_catalog):
    with pytest.raises(RuleConfigurationError):
        simple_catalog.rules_for(NodeType.BOSS)


def test_select_draws_every_template(single_room_rule):
    other = RuleTemplate.build("other_room", [((0, 0), ())])
    catalog = RuleCatalog({NodeType.TEST: [single_room_rule, other]})
    node = MissionGraph.linear([NodeType.TEST]).nodes[0]
    rng = random.Random(3)

    picks = Counter(catalog.select(node, rng).name for _ in range(200))

    assert set(picks) == {"corridor_room", "other_room"}
    assert min(picks.values()) > 50


def test_select_is_reproducible_with_same_seed(default_catalog):
    node = MissionGraph.linear([NodeType.KEY]).nodes[0]

    first = [default_catalog.select(node, random.Random(8)).name for _ in range(5)]
    second = [default_catalog.select(node, random.Random(8)).name for _ in range(5)]

    assert first == second


def test_default_catalog_covers_every_terminal(default_catalog):
    assert set(default_catalog.node_types) == set(NodeType.terminals())
    for node_type in (NodeType.LOCK, NodeType.FINAL_LOCK):
        for template in default_catalog.rules_for(node_type):
            assert template.is_locked_rule
            assert len(template) == 1
