#!/usr/bin/env python3

from __future__ import annotations

import argparse
import logging
import random

from dungeon_config import GeneratorConfig
from dungeon_generator import SpaceGraphGenerator
from dungeon_geometry import Direction
from graph_export import write_graphviz
from grid_renderer import print_grid
from mission_graph import MissionGraph, NodeType


def build_sample_mission() -> MissionGraph:
    """A small lock-and-key mission: two keys on side branches, one lock, one final lock."""
    mission = MissionGraph()
    entrance = mission.add_node(NodeType.ENTRANCE)
    fight = mission.add_node(NodeType.TEST)
    key = mission.add_node(NodeType.KEY)
    puzzle = mission.add_node(NodeType.PUZZLE)
    lock = mission.add_node(NodeType.LOCK)
    treasure = mission.add_node(NodeType.TREASURE)
    final_key = mission.add_node(NodeType.FINAL_KEY)
    final_lock = mission.add_node(NodeType.FINAL_LOCK)
    boss = mission.add_node(NodeType.BOSS)
    goal = mission.add_node(NodeType.GOAL)

    # TOP edges are walked before RIGHT ones, so each key branch is finished before its lock.
    mission.connect(entrance, Direction.TOP, fight)
    mission.connect(fight, Direction.TOP, key)
    mission.connect(fight, Direction.RIGHT, puzzle)
    mission.connect(puzzle, Direction.TOP, lock)
    mission.connect(lock, Direction.TOP, treasure)
    mission.connect(lock, Direction.RIGHT, final_key)
    mission.connect(final_key, Direction.TOP, final_lock)
    mission.connect(final_lock, Direction.TOP, boss)
    mission.connect(boss, Direction.TOP, goal)
    return mission


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate a dungeon space graph from a sample mission graph.")
    parser.add_argument("--seed", type=int, default=None, help="Random seed; picked and printed when omitted.")
    parser.add_argument("--gv", type=str, default=None, help="Write a Graphviz description to this path.")
    parser.add_argument("--rotate-connections", action="store_true", help="Rotate connection slots with rule coordinates.")
    parser.add_argument("--max-restarts", type=int, default=None, help="Give up after this many whole-build restarts.")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="Increase logging output.")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    level = logging.WARNING
    if args.verbose == 1:
        level = logging.INFO
    elif args.verbose > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    seed = args.seed
    if seed is None:
        # Pick a random seed randomly and print it, so we can reproduce bugs by passing --seed on the next run.
        seed = random.randint(0, 1000000)
    print(f"Using random seed {seed}")

    config = GeneratorConfig(
        random_seed=seed,
        rotate_connections=args.rotate_connections,
        max_restarts=args.max_restarts,
        collect_metrics=True,
    )
    generator = SpaceGraphGenerator(config)
    layout = generator.generate(build_sample_mission())

    print_grid(layout)
    if generator.metrics is not None:
        snapshot = generator.metrics.snapshot()
        print(
            f"{len(layout)} rooms, {snapshot['restarts']} restarts, "
            f"{snapshot['placement_attempts']} placement attempts"
        )
    if args.gv:
        output_path = write_graphviz(layout, args.gv, config.export_scale)
        print(f"Wrote {output_path}")


if __name__ == "__main__":
    main()
