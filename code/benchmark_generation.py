#!/usr/bin/env python3

# This file performs multiple runs of space-graph generation, collecting and reporting metrics.
# Used for testing both performance of the algorithm and the shape of resulting dungeons.

from __future__ import annotations

import argparse
import json
import math
import random
import statistics
import time
from collections import Counter
from dataclasses import dataclass
from typing import Any, Dict, List

import networkx as nx

from dungeon_config import GeneratorConfig
from dungeon_generator import SpaceGraphGenerator
from graph_export import build_room_graph, rooms_reachable_without_keys
from main import build_sample_mission

PERCENTILES = [5.0, 25.0, 50.0, 75.0, 95.0, 99.0]


@dataclass
class GenerationRunResult:
    seed: int
    duration: float
    total_rooms: int
    restarts: int
    placement_attempts: int
    rotation_retries: int
    locks_placed: int
    graph_diameter: int
    bounding_box_fill: float
    open_fraction: float
    rule_counts: Counter[str]


def gini_coefficient(counts: List[int]) -> float:
    """Compute the Gini coefficient for a list of non-negative counts."""
    data = sorted(value for value in counts if value > 0)
    if not data:
        return 0.0
    total = sum(data)
    n = len(data)
    weighted_sum = sum(index * value for index, value in enumerate(data, start=1))
    return (2.0 * weighted_sum) / (n * total) - (n + 1) / n


def percentile(values: List[float], pct: float) -> float:
    if not values:
        return float("nan")
    ordered = sorted(values)
    rank = (len(ordered) - 1) * (pct / 100.0)
    lower = math.floor(rank)
    upper = math.ceil(rank)
    if lower == upper:
        return ordered[int(rank)]
    fraction = rank - lower
    return ordered[lower] + (ordered[upper] - ordered[lower]) * fraction


def run_single_generation(seed: int, rotate_connections: bool) -> GenerationRunResult:
    """Run one generation with the provided seed and collect metrics."""
    config = GeneratorConfig(random_seed=seed, rotate_connections=rotate_connections, collect_metrics=True)
    generator = SpaceGraphGenerator(config)

    start = time.perf_counter()
    layout = generator.generate(build_sample_mission())
    duration = time.perf_counter() - start

    graph = build_room_graph(layout)
    graph_diameter = int(nx.diameter(graph)) if graph.number_of_nodes() > 1 else 0

    min_x, min_y, max_x, max_y = layout.bounds()
    bbox_cells = (max_x - min_x + 1) * (max_y - min_y + 1)
    open_rooms = rooms_reachable_without_keys(layout)

    metrics = generator.metrics.snapshot() if generator.metrics else {}
    return GenerationRunResult(
        seed=seed,
        duration=duration,
        total_rooms=len(layout),
        restarts=int(metrics.get("restarts", 0)),
        placement_attempts=int(metrics.get("placement_attempts", 0)),
        rotation_retries=int(metrics.get("rotation_retries", 0)),
        locks_placed=int(metrics.get("locks_placed", 0)),
        graph_diameter=graph_diameter,
        bounding_box_fill=len(layout) / bbox_cells if bbox_cells else 0.0,
        open_fraction=len(open_rooms) / len(layout) if len(layout) else 0.0,
        rule_counts=Counter(metrics.get("rules_by_name", {})),
    )


def run_benchmark(num_runs: int, seed: int | None, rotate_connections: bool) -> List[GenerationRunResult]:
    """Run the generator multiple times and collect run-level metrics."""
    rng = random.Random(seed)
    return [
        run_single_generation(rng.randint(0, 1_000_000), rotate_connections)
        for _ in range(num_runs)
    ]


def summarize(values: List[float]) -> Dict[str, float]:
    summary = {
        "mean": statistics.mean(values),
        "median": statistics.median(values),
        "min": min(values),
        "max": max(values),
        "stdev": statistics.stdev(values) if len(values) > 1 else float("nan"),
    }
    for pct in PERCENTILES:
        summary[f"p{pct:g}"] = percentile(values, pct)
    return summary


def report_metric(name: str, values: List[float]) -> Dict[str, float]:
    stats = summarize(values)
    print(
        f"{name}: mean {stats['mean']:.3f}, median {stats['median']:.3f}, "
        f"min {stats['min']:.3f}, max {stats['max']:.3f}, p95 {stats['p95']:.3f}"
    )
    return stats


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Benchmark space-graph generation over many seeds.")
    parser.add_argument("--runs", type=int, default=100, help="Number of generations to run.")
    parser.add_argument("--seed", type=int, default=None, help="Seed for picking per-run seeds.")
    parser.add_argument("--rotate-connections", action="store_true", help="Rotate connection slots with rule coordinates.")
    parser.add_argument("--json", type=str, default=None, help="Write aggregated results to this JSON file.")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    if args.runs <= 0:
        raise SystemExit("--runs must be positive")

    results = run_benchmark(args.runs, args.seed, args.rotate_connections)

    metrics = {
        "duration_seconds": [result.duration for result in results],
        "total_rooms": [float(result.total_rooms) for result in results],
        "restarts": [float(result.restarts) for result in results],
        "placement_attempts": [float(result.placement_attempts) for result in results],
        "rotation_retries": [float(result.rotation_retries) for result in results],
        "graph_diameter": [float(result.graph_diameter) for result in results],
        "bounding_box_fill": [result.bounding_box_fill for result in results],
        "open_fraction": [result.open_fraction for result in results],
    }

    aggregated: Dict[str, Any] = {}
    for name, values in metrics.items():
        aggregated[name] = report_metric(name, values)

    rule_totals: Counter[str] = Counter()
    for result in results:
        rule_totals.update(result.rule_counts)
    diversity = 1.0 - gini_coefficient(list(rule_totals.values()))
    print(f"Rule diversity (1 - gini): {diversity:.3f}")
    aggregated["rule_diversity"] = diversity

    worst = max(results, key=lambda result: result.duration)
    print(f"Slowest run: seed {worst.seed} took {worst.duration * 1000:.1f}ms with {worst.restarts} restarts")

    if args.json:
        with open(args.json, "w", encoding="utf-8") as handle:
            json.dump({"runs": args.runs, "seed": args.seed, "aggregated": aggregated}, handle, indent=2, sort_keys=True)
            handle.write("\n")
        print(f"Saved benchmark results to {args.json}")


if __name__ == "__main__":
    main()
