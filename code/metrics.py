"""Helpers for collecting instrumentation data during space-graph generation."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Dict


@dataclass
class GenerationMetrics:
    """Counters recorded across every attempt of one ``generate`` call."""

    restarts: int = 0
    placement_attempts: int = 0
    rotation_retries: int = 0
    rules_applied: int = 0
    locks_placed: int = 0
    rooms_placed: int = 0
    total_time: float = 0.0
    expansions_by_type: Counter = field(default_factory=Counter)
    rules_by_name: Counter = field(default_factory=Counter)

    def record_placement(self, attempts: int, *, success: bool) -> None:
        self.placement_attempts += attempts
        if not success:
            self.rotation_retries += 1

    def record_rule(self, node_type_label: str, rule_name: str, room_count: int, *, locked: bool) -> None:
        self.rules_applied += 1
        self.rooms_placed += room_count
        self.expansions_by_type[node_type_label] += 1
        self.rules_by_name[rule_name] += 1
        if locked:
            self.locks_placed += 1

    def record_restart(self) -> None:
        self.restarts += 1

    def snapshot(self) -> Dict[str, object]:
        average_attempts = (
            self.placement_attempts / self.rules_applied if self.rules_applied else 0.0
        )
        return {
            "restarts": self.restarts,
            "placement_attempts": self.placement_attempts,
            "average_placement_attempts": average_attempts,
            "rotation_retries": self.rotation_retries,
            "rules_applied": self.rules_applied,
            "locks_placed": self.locks_placed,
            "rooms_placed": self.rooms_placed,
            "total_time": self.total_time,
            "expansions_by_type": dict(self.expansions_by_type),
            "rules_by_name": dict(self.rules_by_name),
        }
