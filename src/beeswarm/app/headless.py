from __future__ import annotations

import argparse
import csv
import json
import logging
import math
from contextlib import ExitStack
from dataclasses import replace
from pathlib import Path
from typing import Optional

from ..config import ScatterPolicy, SwarmConfig
from ..sim.core.clock import ManualClock
from ..sim.core.flock import Flock
from ..sim.core.host import AnchorRect, PointerFeed, ViewportContainer
from ..sim.types.metrics import TickMetrics

logger = logging.getLogger(__name__)

_HEADER = [
    "tick",
    "time_ms",
    "running",
    "phase",
    "target_x",
    "target_y",
    "population",
    "wraps",
    "separating",
    "avg_turn",
    "avg_neighbor_distance",
    "tick_ms",
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
        return {"min": 0.0, "max": 0.0, "avg": 0.0, "p50": 0.0, "p90": 0.0, "p99": 0.0}
    sorted_values = sorted(values)
    return {
        "min": float(sorted_values[0]),
        "max": float(sorted_values[-1]),
        "avg": float(sum(values) / len(values)),
        "p50": _percentile(sorted_values, 0.50),
        "p90": _percentile(sorted_values, 0.90),
        "p99": _percentile(sorted_values, 0.99),
    }


def build_flock(config: SwarmConfig, clock: ManualClock) -> Flock:
    container = ViewportContainer(config.viewport_width, config.viewport_height)
    anchor = AnchorRect(config.anchor.left, config.anchor.top, config.anchor.width, config.anchor.height)
    flock = Flock(config)
    flock.initialize(
        container,
        anchor,
        input_source=PointerFeed(),
        frame_scheduler=clock,
        timer=clock,
    )
    population = config.population
    flock.populate(population.count, population.width, population.height, population.speed)
    return flock


def run_headless(
    frames: int,
    seed: Optional[int],
    log_path: Optional[Path],
    deterministic_log: bool = False,
    summary_path: Optional[Path] = None,
    config: Optional[SwarmConfig] = None,
) -> Flock:
    config = config or SwarmConfig()
    if seed is not None:
        config = replace(config, seed=seed)
    clock = ManualClock()
    flock = build_flock(config, clock)
    frame_ms = config.frame_interval * 1000.0

    tick_ms_series: list[float] = []
    turn_series: list[float] = []
    distance_series: list[float] = []
    total_wraps = 0
    phase_changes = 0

    with ExitStack() as stack:
        writer = None
        if log_path:
            writer = csv.writer(stack.enter_context(Path(log_path).open("w", newline="")))
            writer.writerow(_HEADER)

        def record(metrics: TickMetrics) -> None:
            nonlocal total_wraps
            tick_ms = 0.0 if deterministic_log else metrics.tick_duration_ms
            tick_ms_series.append(tick_ms)
            turn_series.append(metrics.average_turn)
            distance_series.append(metrics.average_neighbor_distance)
            total_wraps += metrics.wraps
            if writer:
                target_x, target_y = flock.target
                writer.writerow(
                    [
                        metrics.tick,
                        f"{clock.now_ms:.1f}",
                        int(flock.running),
                        flock.phase.value if flock.phase is not None else "",
                        f"{target_x:.2f}",
                        f"{target_y:.2f}",
                        metrics.population,
                        metrics.wraps,
                        metrics.separating,
                        f"{metrics.average_turn:.6f}",
                        f"{metrics.average_neighbor_distance:.4f}",
                        f"{tick_ms:.3f}",
                    ]
                )

        # start() runs the first tick before any frame is requested.
        flock.start()
        if flock.metrics is not None:
            record(flock.metrics)
        last_phase = flock.phase
        for _ in range(frames):
            if not flock.running:
                break
            last_tick = flock.tick
            clock.run_frames(1, frame_ms)
            metrics = flock.metrics
            if metrics is None or flock.tick == last_tick:
                continue
            if flock.phase != last_phase:
                phase_changes += 1
                last_phase = flock.phase
            record(metrics)

    if not flock.running:
        logger.warning("swarm stopped early at tick %d", flock.tick)

    if summary_path:
        summary = {
            "frames": frames,
            "ticks": flock.tick,
            "recorded_ticks": len(tick_ms_series),
            "seed": config.seed,
            "scatter_policy": config.oscillation.scatter_policy.value,
            "population": len(flock.agents),
            "completed": flock.running,
            "total_wraps": total_wraps,
            "phase_changes": phase_changes,
            "tick_ms": _summary_stats(tick_ms_series),
            "average_turn": _summary_stats(turn_series),
            "average_neighbor_distance": _summary_stats(distance_series),
        }
        Path(summary_path).write_text(json.dumps(summary, indent=2))

    flock.stop()
    return flock


def main() -> None:
    parser = argparse.ArgumentParser(description="Headless bee swarm simulation")
    parser.add_argument("--frames", type=int, default=3600)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--config", type=Path, default=None, help="YAML swarm configuration")
    parser.add_argument("--width", type=float, default=None, help="Viewport width override")
    parser.add_argument("--height", type=float, default=None, help="Viewport height override")
    parser.add_argument(
        "--scatter",
        choices=[policy.value for policy in ScatterPolicy],
        default=None,
        help="Where the swarm goes during the scatter phase.",
    )
    parser.add_argument("--log", type=Path, default=None, help="CSV file to write per-tick metrics")
    parser.add_argument("--summary", type=Path, default=None, help="Optional JSON summary of the run")
    parser.add_argument(
        "--deterministic-log",
        action="store_true",
        help="Write deterministic CSV (tick_ms is forced to 0.000 so identical seeds match).",
    )
    parser.add_argument("--log-level", default="WARNING")
    args = parser.parse_args()

    logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")
    config = SwarmConfig.from_yaml(args.config) if args.config else SwarmConfig()
    if args.width is not None:
        config.viewport_width = args.width
    if args.height is not None:
        config.viewport_height = args.height
    if args.scatter is not None:
        config.oscillation.scatter_policy = ScatterPolicy(args.scatter)
    run_headless(
        args.frames,
        args.seed,
        args.log,
        deterministic_log=args.deterministic_log,
        summary_path=args.summary,
        config=config,
    )


if __name__ == "__main__":
    main()
