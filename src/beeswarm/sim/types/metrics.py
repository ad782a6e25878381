from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class TickMetrics:
    tick: int
    population: int
    wraps: int
    separating: int
    average_turn: float
    average_neighbor_distance: float
    tick_duration_ms: float = 0.0
