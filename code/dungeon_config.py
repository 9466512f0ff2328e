"""Configuration container for the space-graph generator."""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Optional, Tuple

from dungeon_constants import (
    EXPORT_SCALE,
    MAX_PLACEMENT_ATTEMPTS,
    MAX_RESTARTS,
    MAX_ROTATION_RETRIES,
    MAX_WALK_DEPTH,
    RANDOM_SEED,
)


@dataclass
class GeneratorConfig:
    """Aggregates all tunable parameters for space-graph generation."""

    # Base/side draws for one rotation of a rule before re-rotating it.
    max_placement_attempts: int = MAX_PLACEMENT_ATTEMPTS
    # Fresh rotation draws for one mission node before the build restarts.
    max_rotation_retries: int = MAX_ROTATION_RETRIES
    # Maximum depth of the mission-graph walk.
    max_walk_depth: int = MAX_WALK_DEPTH
    # Whole-build restarts allowed; None means unbounded.
    max_restarts: Optional[int] = MAX_RESTARTS
    random_seed: Optional[int] = RANDOM_SEED
    # Move connection slots along with coordinates when a rule is rotated.
    rotate_connections: bool = False
    collect_metrics: bool = False
    export_scale: Tuple[float, float] = EXPORT_SCALE

    def __post_init__(self) -> None:
        if self.max_placement_attempts <= 0:
            raise ValueError("GeneratorConfig max_placement_attempts must be positive")
        if self.max_rotation_retries <= 0:
            raise ValueError("GeneratorConfig max_rotation_retries must be positive")
        if self.max_walk_depth <= 0:
            raise ValueError("GeneratorConfig max_walk_depth must be positive")
        if self.max_restarts is not None and self.max_restarts < 0:
            raise ValueError("GeneratorConfig max_restarts must be non-negative or None")

        scale_x, scale_y = self.export_scale
        if scale_x <= 0 or scale_y <= 0:
            raise ValueError("GeneratorConfig export_scale entries must be positive")
        self.export_scale = (float(scale_x), float(scale_y))

    def make_rng(self) -> random.Random:
        return random.Random(self.random_seed)
