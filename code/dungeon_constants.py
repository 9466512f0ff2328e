"""Shared constants for the space-graph generator."""

from __future__ import annotations

from dungeon_geometry import Direction

MAX_PLACEMENT_ATTEMPTS = 100 # Base/side draws per rotation before a fresh rotation is tried.
MAX_ROTATION_RETRIES = 25 # Fresh rotation draws per mission node before the whole build restarts.
MAX_WALK_DEPTH = 500 # Deepest mission-graph path the walker follows before giving up on the build.
MAX_RESTARTS = None # None keeps restarting until a build succeeds.
RANDOM_SEED = None  # Set to a number for reproducible behavior (for debugging); set to None to produce different dungeon on every run.

# Mission edges are followed in this slot order; the LEFT slot is never followed.
MISSION_TRAVERSAL_ORDER = (Direction.TOP, Direction.BOTTOM, Direction.RIGHT)

# Graphviz layout position = grid coordinate * scale, per axis.
EXPORT_SCALE = (1.5, 1.5)
