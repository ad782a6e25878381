from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from ...config import SteeringConfig
from ..core.rng import DeterministicRng


@dataclass(slots=True, frozen=True)
class NeighborSample:
    id: int
    x: float
    y: float
    size: float


@dataclass(slots=True, frozen=True)
class FlockView:
    """What an agent may read about its flock during one tick.

    ``neighbors`` is captured before any agent moves, so update order inside a
    tick does not change the outcome.
    """

    width: float
    height: float
    target_x: float
    target_y: float
    neighbors: Tuple[NeighborSample, ...]
    steering: SteeringConfig
    rng: DeterministicRng

    @property
    def has_target(self) -> bool:
        return bool(self.target_x) and bool(self.target_y)
