"""SpaceGraphGenerator walks a mission graph and grows the matching dungeon layout."""

from __future__ import annotations

import logging
import random
from time import perf_counter
from typing import Iterator, List, Optional, Set

from dungeon_config import GeneratorConfig
from dungeon_constants import MISSION_TRAVERSAL_ORDER
from dungeon_layout import DungeonLayout
from errors import GenerationFailedError, MissionGraphError, PlacementInfeasible
from metrics import GenerationMetrics
from mission_graph import MissionGraph, MissionGraphNode
from room_placement import AppliedRule, PlacementSearch
from rule_catalog import RuleCatalog, default_rule_catalog

logger = logging.getLogger(__name__)


def outgoing_targets(node: MissionGraphNode) -> Iterator[MissionGraphNode]:
    """Yield the nodes reachable from ``node`` in traversal order.

    Edges pointing back at ``node`` are the ones it was reached through and are skipped.
    """
    for direction in MISSION_TRAVERSAL_ORDER:
        edge = node.get_connection(direction)
        if edge is not None and edge.pointing_to is not node:
            yield edge.pointing_to


class SpaceGraphGenerator:
    """Manages the overall process of turning a mission graph into a space graph."""

    def __init__(
        self,
        config: Optional[GeneratorConfig] = None,
        catalog: Optional[RuleCatalog] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.config = config if config is not None else GeneratorConfig()
        self.catalog = catalog if catalog is not None else default_rule_catalog()
        self.rng = rng if rng is not None else self.config.make_rng()
        self.metrics = GenerationMetrics() if self.config.collect_metrics else None
        self.layout: Optional[DungeonLayout] = None
        self.applied_rules: List[AppliedRule] = []

    def generate(self, mission: MissionGraph) -> DungeonLayout:
        """Build a complete layout for ``mission``, restarting from scratch when a build gets stuck."""
        entrance = self._check_entrance(mission)
        start = perf_counter()
        restarts = 0
        try:
            while True:
                try:
                    layout = self._build_once(entrance)
                except PlacementInfeasible as exc:
                    if self.config.max_restarts is not None and restarts >= self.config.max_restarts:
                        raise GenerationFailedError(
                            f"Gave up after {restarts} restarts: {exc}", restarts=restarts
                        ) from exc
                    restarts += 1
                    if self.metrics is not None:
                        self.metrics.record_restart()
                    logger.warning("Restarting build (%d): %s", restarts, exc)
                    continue
                break
        finally:
            if self.metrics is not None:
                self.metrics.total_time += perf_counter() - start

        self.layout = layout
        logger.info("Built space graph with %d rooms after %d restarts", len(layout), restarts)
        return layout

    def _check_entrance(self, mission: MissionGraph) -> MissionGraphNode:
        if not mission.nodes:
            raise MissionGraphError("Mission graph has no nodes")
        entrance = mission.entrance
        if not entrance.node_type.is_entrance:
            raise MissionGraphError(
                f"First mission node must be an entrance, got {entrance.node_type.label}"
            )
        return entrance

    def _build_once(self, entrance: MissionGraphNode) -> DungeonLayout:
        """Run one full walk over the mission graph on a fresh layout."""
        layout = DungeonLayout.with_entrance()
        search = PlacementSearch(self.config, self.rng, self.metrics)
        applied: List[AppliedRule] = []
        visited: Set[int] = {id(entrance)}

        # Depth-first walk: each stack entry iterates one node's outgoing edges.
        stack = [outgoing_targets(entrance)]
        while stack:
            target = next(stack[-1], None)
            if target is None:
                stack.pop()
                continue
            if id(target) in visited:
                continue
            visited.add(id(target))
            applied.append(self._extend(layout, search, target))
            if len(stack) >= self.config.max_walk_depth:
                raise PlacementInfeasible(
                    f"Mission walk exceeded depth {self.config.max_walk_depth}",
                    node_type=target.node_type.label,
                )
            stack.append(outgoing_targets(target))

        self.applied_rules = applied
        return layout

    def _extend(self, layout: DungeonLayout, search: PlacementSearch, node: MissionGraphNode) -> AppliedRule:
        # Each retry draws a new rule as well as a new rotation.
        applied = search.place_rule(
            layout,
            self.catalog.select(node, self.rng),
            label=node.node_type.label,
            reselect=lambda: self.catalog.select(node, self.rng),
        )
        template = applied.template
        logger.debug(
            "Expanded %r with %s at %s off %s",
            node,
            template.name,
            applied.plan.positions[0].to_tuple(),
            applied.plan.base.name,
        )
        if self.metrics is not None:
            self.metrics.record_rule(
                node.node_type.label, template.name, len(applied.rooms), locked=applied.locked
            )
        return applied


def generate_space_graph(
    mission: MissionGraph,
    catalog: Optional[RuleCatalog] = None,
    config: Optional[GeneratorConfig] = None,
) -> DungeonLayout:
    """Convenience wrapper around ``SpaceGraphGenerator.generate``."""
    return SpaceGraphGenerator(config=config, catalog=catalog).generate(mission)
