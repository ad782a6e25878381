from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from pygame.math import Vector2

from ..systems import steering
from ..types.snapshot import RenderTransform
from ..types.view import FlockView, NeighborSample
from ..utils.math2d import _unit_from_heading


class SteeringMode(str, Enum):
    IDLE = "Idle"
    SEEK = "Seek"
    GATHER = "Gather"
    SEPARATE = "Separate"


@dataclass(slots=True)
class Agent:
    id: int
    position: Vector2
    heading: float
    size: float
    speed: float
    visual: Any = None
    velocity: Vector2 = field(default_factory=Vector2)
    mode: SteeringMode = SteeringMode.IDLE
    last_turn: float = 0.0
    last_neighbor_distance: float = 0.0
    wrapped: bool = False
    transform: Optional[RenderTransform] = None

    def __post_init__(self) -> None:
        self.velocity = _unit_from_heading(self.heading)

    def sample(self) -> NeighborSample:
        return NeighborSample(id=self.id, x=self.position.x, y=self.position.y, size=self.size)

    def update(self, view: FlockView) -> Optional[RenderTransform]:
        self.last_turn = 0.0
        self.wrapped = False
        neighbor = steering.nearest_neighbor(self, view.neighbors)
        if neighbor is None:
            self.mode = SteeringMode.IDLE
            return None

        config = view.steering
        heading = steering.heading_vector(self, view, neighbor)
        desired, distance, separating = steering.blend_vector(self, heading, neighbor, config, view.rng)
        self.last_neighbor_distance = distance
        if separating:
            self.mode = SteeringMode.SEPARATE
        elif distance > config.max_comfortable_distance:
            self.mode = SteeringMode.GATHER
        else:
            self.mode = SteeringMode.SEEK

        self.last_turn = steering.turn_toward(self.velocity, desired, config.turn_rate)
        self.heading += self.last_turn
        self.velocity = _unit_from_heading(self.heading)
        self.position += self.velocity * self.speed
        self.wrapped = steering.wrap_position(self.position, self.size, view.width, view.height)

        self.transform = steering.render_transform(self.position, self.heading)
        if self.visual is not None:
            self.visual.render(self.transform)
        return self.transform

    def to_payload(self) -> dict:
        transform = self.transform or steering.render_transform(self.position, self.heading)
        return {
            "id": self.id,
            "x": self.position.x,
            "y": self.position.y,
            "heading": self.heading,
            "vx": self.velocity.x,
            "vy": self.velocity.y,
            "size": self.size,
            "mode": self.mode.value,
            "transform": transform.css(),
        }
