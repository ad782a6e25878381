from __future__ import annotations

from typing import Sequence

from ..core.agent import Agent, SteeringMode
from ..types.metrics import TickMetrics


def create_metrics(tick: int, agents: Sequence[Agent], duration_ms: float) -> TickMetrics:
    population = len(agents)
    wraps = 0
    separating = 0
    turn_sum = 0.0
    distance_sum = 0.0
    for agent in agents:
        if agent.wrapped:
            wraps += 1
        if agent.mode is SteeringMode.SEPARATE:
            separating += 1
        turn_sum += abs(agent.last_turn)
        distance_sum += agent.last_neighbor_distance
    return TickMetrics(
        tick=tick,
        population=population,
        wraps=wraps,
        separating=separating,
        average_turn=turn_sum / population if population else 0.0,
        average_neighbor_distance=distance_sum / population if population else 0.0,
        tick_duration_ms=duration_ms,
    )
