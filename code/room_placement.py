"""Placement search: find where a rule's room cluster can attach to the dungeon."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

from dungeon_config import GeneratorConfig
from dungeon_geometry import Direction, GridPos, Rotation
from dungeon_layout import DungeonLayout
from errors import PlacementInfeasible
from locking import check_lock_rule, update_frontier
from metrics import GenerationMetrics
from models import GridRoom, RuleTemplate, rotate_rooms

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlacementPlan:
    """A collision-free attachment of a cluster to ``base`` on ``side``."""

    base: GridRoom
    side: Direction
    positions: Tuple[GridPos, ...]
    attempts: int


@dataclass
class AppliedRule:
    """Outcome of attaching one rule template to the dungeon."""

    template: RuleTemplate
    rooms: List[GridRoom]
    plan: PlacementPlan
    rotation: Rotation
    locked: bool


def adjust_coords(rule_rooms: Sequence[GridRoom], side: Direction, base: GridRoom) -> Tuple[GridPos, ...]:
    """Translate the cluster so its first room sits one step from ``base`` towards ``side``."""
    origin = base.position.step(side)
    anchor = rule_rooms[0].position
    dx, dy = origin.x - anchor.x, origin.y - anchor.y
    return tuple(room.position.offset(dx, dy) for room in rule_rooms)


class PlacementSearch:
    """Bounded random search for a place to attach a rule's rooms."""

    def __init__(
        self,
        config: GeneratorConfig,
        rng: random.Random,
        metrics: Optional[GenerationMetrics] = None,
    ) -> None:
        self.config = config
        self.rng = rng
        self.metrics = metrics

    def find_placement(self, layout: DungeonLayout, rule_rooms: Sequence[GridRoom]) -> Optional[PlacementPlan]:
        """Try up to ``max_placement_attempts`` base/side draws for an already rotated cluster."""
        if not layout.frontier:
            return None

        max_attempts = self.config.max_placement_attempts
        for attempt in range(1, max_attempts + 1):
            base = layout.frontier.choose(self.rng)
            free_sides = base.free_connections()
            if not free_sides:
                continue
            side = self.rng.choice(free_sides)
            # The first room's facing slot may already carry an internal connection.
            if rule_rooms[0].get_connection(side.opposite()) is not None:
                continue
            positions = adjust_coords(rule_rooms, side, base)
            if layout.is_area_clear(positions):
                if self.metrics is not None:
                    self.metrics.record_placement(attempt, success=True)
                return PlacementPlan(base=base, side=side, positions=positions, attempts=attempt)

        if self.metrics is not None:
            self.metrics.record_placement(max_attempts, success=False)
        return None

    def place_rule(
        self,
        layout: DungeonLayout,
        template: RuleTemplate,
        *,
        label: str = "",
        reselect: Optional[Callable[[], RuleTemplate]] = None,
    ) -> AppliedRule:
        """Instantiate, rotate, and attach ``template``; re-rotate when a rotation does not fit.

        When ``reselect`` is given, every retry after the first also draws a fresh
        template from it. Raises PlacementInfeasible once every retry has failed.
        """
        if not layout.frontier:
            raise PlacementInfeasible(f"No frontier rooms left to attach {template.name}", node_type=label or None)

        for retry in range(self.config.max_rotation_retries):
            if retry and reselect is not None:
                template = reselect()
            rule_rooms = template.instantiate()
            rotation = Rotation.random(self.rng)
            rotate_rooms(rule_rooms, rotation, rotate_connections=self.config.rotate_connections)
            plan = self.find_placement(layout, rule_rooms)
            if plan is not None:
                locked = self.apply_plan(layout, plan, rule_rooms)
                return AppliedRule(template=template, rooms=rule_rooms, plan=plan, rotation=rotation, locked=locked)
            logger.debug(
                "Rule %s did not fit at %s after %d attempts (retry %d)",
                template.name,
                rotation.name,
                self.config.max_placement_attempts,
                retry + 1,
            )

        raise PlacementInfeasible(
            f"No rule for {label or template.name} could be placed after {self.config.max_rotation_retries} retries",
            node_type=label or None,
        )

    def apply_plan(self, layout: DungeonLayout, plan: PlacementPlan, rule_rooms: Sequence[GridRoom]) -> bool:
        """Merge the rooms into ``layout``, wire the attachment, and update the frontier.

        Returns True if the rule was a locked transition. Nothing is changed if
        the rule breaks an authoring constraint.
        """
        if len(plan.positions) != len(rule_rooms):
            raise ValueError("rule rooms and adjusted positions must map to each other exactly")
        check_lock_rule(rule_rooms)

        for room, position in zip(rule_rooms, plan.positions):
            layout.register_room(room, position)

        # Internal connections are already wired; only the attachment is new.
        layout.connect(plan.base, plan.side, rule_rooms[0])
        return update_frontier(layout, plan.base, rule_rooms)
