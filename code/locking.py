"""Frontier bookkeeping after a rule is attached, including gated transitions."""

from __future__ import annotations

import logging
from typing import Sequence

from dungeon_layout import DungeonLayout
from errors import RuleConfigurationError
from models import GridRoom

logger = logging.getLogger(__name__)


def check_lock_rule(rule_rooms: Sequence[GridRoom]) -> None:
    """Raise RuleConfigurationError if a rule starting with a lock room has more than that room."""
    if rule_rooms[0].is_lock_room and len(rule_rooms) != 1:
        raise RuleConfigurationError(
            "Rules for locked nodes must only contain one room; add new alphabet symbols "
            "or mission rules for more complex structures"
        )


def update_frontier(layout: DungeonLayout, base: GridRoom, rule_rooms: Sequence[GridRoom]) -> bool:
    """Apply the locking policy for the rule just attached to ``base``.

    Returns True if the rule was a locked transition. Lock rules must already
    have passed ``check_lock_rule``.
    """
    first_room = rule_rooms[0]
    if first_room.is_lock_room:
        layout.lock(base, first_room)
        # Nothing placed before the gate may be grown from again.
        layout.frontier.reset_to(first_room)
        layout.frontier_floor = first_room.index
        logger.debug("Locked %s behind %s; frontier reset", first_room.name, base.name)
        return True

    for room in rule_rooms:
        layout.frontier.add_if_open(room)
    layout.frontier.discard_if_full(base)
    return False
