from __future__ import annotations

import argparse
import csv
import json
import logging
import math
from pathlib import Path
from typing import Mapping, Optional

from ..sim.core.config import PARAMETER_NAMES, SimulationConfig
from ..sim.core.world import World

logger = logging.getLogger(__name__)


_BASIC_HEADER = [
    "tick",
    "population",
    "neighbor_checks",
    "avg_speed",
    "peak_speed",
    "wraps",
    "isolated",
    "tick_ms",
]

_DETAILED_HEADER = [
    "tick",
    "population",
    "neighbor_checks",
    "avg_speed",
    "peak_speed",
    "wraps",
    "isolated",
    "tick_ms",
    "elapsed",
    "isolated_ratio",
    "neighbor_checks_per_agent",
    "tick_ms_per_agent",
    "polarization",
    "centroid_x",
    "centroid_y",
    "spread",
    "cohesion_range",
    "cohesion_strength",
    "separation_range",
    "separation_strength",
    "alignment_range",
    "alignment_strength",
]


def _format_basic_row(metrics: object, tick_ms: float) -> list[object]:
    return [
        metrics.tick,
        metrics.population,
        metrics.neighbor_checks,
        f"{metrics.average_speed:.4f}",
        f"{metrics.peak_speed:.4f}",
        metrics.wraps,
        metrics.isolated,
        f"{tick_ms:.3f}",
    ]


def _format_detailed_row(world: World, metrics: object, tick_ms: float) -> list[object]:
    population = metrics.population
    if population <= 0:
        isolated_ratio = 0.0
        neighbor_checks_per_agent = 0.0
        tick_ms_per_agent = 0.0
        polarization = 0.0
        centroid_x = 0.0
        centroid_y = 0.0
        spread = 0.0
    else:
        isolated_ratio = metrics.isolated / population
        neighbor_checks_per_agent = metrics.neighbor_checks / population
        tick_ms_per_agent = tick_ms / population

        facing_x = 0.0
        facing_y = 0.0
        sum_x = 0.0
        sum_y = 0.0
        for agent in world.agents:
            facing_x += agent.facing.x
            facing_y += agent.facing.y
            sum_x += agent.position.x
            sum_y += agent.position.y
        polarization = math.hypot(facing_x, facing_y) / population
        centroid_x = sum_x / population
        centroid_y = sum_y / population
        spread = (
            sum(math.hypot(agent.position.x - centroid_x, agent.position.y - centroid_y) for agent in world.agents)
            / population
        )

    params = world.parameters
    return [
        *_format_basic_row(metrics, tick_ms),
        f"{metrics.elapsed:.6f}",
        f"{isolated_ratio:.4f}",
        f"{neighbor_checks_per_agent:.4f}",
        f"{tick_ms_per_agent:.4f}",
        f"{polarization:.4f}",
        f"{centroid_x:.4f}",
        f"{centroid_y:.4f}",
        f"{spread:.4f}",
        f"{params.get('cohesion_range'):.6g}",
        f"{params.get('cohesion_strength'):.6g}",
        f"{params.get('separation_range'):.6g}",
        f"{params.get('separation_strength'):.6g}",
        f"{params.get('alignment_range'):.6g}",
        f"{params.get('alignment_strength'):.6g}",
    ]


def _percentile(sorted_values: list[float], percentile: float) -> float:
    if not sorted_values:
        return 0.0
    if len(sorted_values) == 1:
        return float(sorted_values[0])
    pos = (len(sorted_values) - 1) * percentile
    low = int(math.floor(pos))
    high = int(math.ceil(pos))
    if low == high:
        return float(sorted_values[low])
    weight = pos - low
    return float(sorted_values[low] + (sorted_values[high] - sorted_values[low]) * weight)


def _summary_stats(values: list[float]) -> dict[str, float]:
    if not values:
        return {"min": 0.0, "max": 0.0, "avg": 0.0, "p50": 0.0, "p90": 0.0, "p95": 0.0, "p99": 0.0}
    sorted_values = sorted(values)
    total = sum(values)
    count = len(values)
    return {
        "min": float(sorted_values[0]),
        "max": float(sorted_values[-1]),
        "avg": float(total / count),
        "p50": _percentile(sorted_values, 0.50),
        "p90": _percentile(sorted_values, 0.90),
        "p95": _percentile(sorted_values, 0.95),
        "p99": _percentile(sorted_values, 0.99),
    }


def parse_overrides(values: list[str]) -> dict[str, float]:
    overrides: dict[str, float] = {}
    for item in values:
        name, sep, raw = item.partition("=")
        if not sep or not name.strip():
            raise ValueError(f"Expected name=value, got {item!r}")
        try:
            overrides[name.strip()] = float(raw)
        except ValueError:
            raise ValueError(f"Parameter {name.strip()!r} needs a numeric value, got {raw!r}") from None
    return overrides


def run_headless(
    steps: int,
    seed: Optional[int],
    log_path: Optional[Path],
    deterministic_log: bool = False,
    log_format: str = "detailed",
    summary_path: Optional[Path] = None,
    summary_window: int = 5000,
    config: Optional[SimulationConfig] = None,
    overrides: Optional[Mapping[str, float]] = None,
) -> None:
    config = config if config is not None else SimulationConfig()
    if seed is not None:
        config.seed = seed

    log_mode = log_format.lower().strip()
    if log_mode not in {"basic", "detailed"}:
        raise ValueError(f"Unknown log format: {log_format}")

    world = World(config)
    for name, value in (overrides or {}).items():
        world.parameters.set(name, value)

    writer = None
    csv_file = None
    if log_path:
        csv_file = Path(log_path).open("w", newline="")
        writer = csv.writer(csv_file)
        writer.writerow(_DETAILED_HEADER if log_mode == "detailed" else _BASIC_HEADER)

    tick_ms_series: list[float] = []
    avg_speed_series: list[float] = []
    isolated_series: list[float] = []
    wraps_total = 0
    max_tick_ms = (-1.0, -1)

    try:
        for tick in range(steps):
            metrics = world.step(tick)
            tick_ms = 0.0 if deterministic_log else metrics.tick_duration_ms

            if summary_path:
                tick_ms_series.append(tick_ms)
                avg_speed_series.append(metrics.average_speed)
                isolated_series.append(float(metrics.isolated))
                wraps_total += metrics.wraps
                if tick_ms > max_tick_ms[0]:
                    max_tick_ms = (tick_ms, tick)

            if writer:
                if log_mode == "detailed":
                    writer.writerow(_format_detailed_row(world, metrics, tick_ms))
                else:
                    writer.writerow(_format_basic_row(metrics, tick_ms))
    finally:
        if csv_file:
            csv_file.close()

    logger.info("Ran %d ticks with %d agents (seed=%d)", steps, len(world.agents), config.seed)

    if summary_path:
        window = max(1, int(summary_window))
        tail_slice = slice(max(0, len(tick_ms_series) - window), len(tick_ms_series))
        summary = {
            "steps": steps,
            "seed": config.seed,
            "agents": len(world.agents),
            "integration_mode": config.integration_mode,
            "log_format": log_mode,
            "deterministic_log": deterministic_log,
            "parameters": world.parameters.as_dict(),
            "tick_ms": _summary_stats(tick_ms_series),
            "avg_speed": _summary_stats(avg_speed_series),
            "isolated": _summary_stats(isolated_series),
            "wraps_total": wraps_total,
            "peaks": {
                "tick_ms": {"value": float(max_tick_ms[0]), "tick": max_tick_ms[1]},
            },
            "tail_window": {
                "window": window,
                "tick_ms": _summary_stats(tick_ms_series[tail_slice]),
                "avg_speed": _summary_stats(avg_speed_series[tail_slice]),
                "isolated": _summary_stats(isolated_series[tail_slice]),
            },
        }
        Path(summary_path).write_text(json.dumps(summary, indent=2))


def main() -> None:
    parser = argparse.ArgumentParser(description="Headless boids simulation")
    parser.add_argument("--steps", type=int, default=3000)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--config", type=Path, default=None, help="YAML simulation config")
    parser.add_argument("--log", type=Path, default=None, help="CSV file to write metrics")
    parser.add_argument(
        "--log-format",
        choices=["basic", "detailed"],
        default="detailed",
        help="CSV format to write when --log is provided.",
    )
    parser.add_argument(
        "--summary",
        type=Path,
        default=None,
        help="Optional JSON file to write summary stats for the run.",
    )
    parser.add_argument(
        "--summary-window",
        type=int,
        default=5000,
        help="Tail window size (ticks) for summary stats.",
    )
    parser.add_argument(
        "--deterministic-log",
        action="store_true",
        help="Write deterministic CSV (tick_ms is forced to 0.000 so identical seeds match).",
    )
    parser.add_argument(
        "--set",
        dest="overrides",
        action="append",
        default=[],
        metavar="NAME=VALUE",
        help="Override a flocking parameter, e.g. --set cohesion_range=80 (clamped to its range).",
    )
    parser.add_argument("--verbose", action="store_true", help="Log every tick.")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        overrides = parse_overrides(args.overrides)
    except ValueError as exc:
        parser.error(str(exc))
    for name in overrides:
        if name not in PARAMETER_NAMES:
            parser.error(f"Unknown parameter: {name}")
    config = SimulationConfig.from_yaml(args.config) if args.config else None
    run_headless(
        args.steps,
        args.seed,
        args.log,
        deterministic_log=args.deterministic_log,
        log_format=args.log_format,
        summary_path=args.summary,
        summary_window=args.summary_window,
        config=config,
        overrides=overrides,
    )


if __name__ == "__main__":
    main()
