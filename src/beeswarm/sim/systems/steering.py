from __future__ import annotations

import math
from typing import Optional, Sequence, Tuple, TYPE_CHECKING

from pygame.math import Vector2

from ...config import SteeringConfig
from ..types.snapshot import RenderTransform
from ..types.view import FlockView, NeighborSample
from ..utils.math2d import _safe_normalize_xy, _signed_angle

if TYPE_CHECKING:
    from ..core.agent import Agent
    from ..core.rng import DeterministicRng


def nearest_neighbor(agent: Agent, neighbors: Sequence[NeighborSample]) -> Optional[NeighborSample]:
    """Closest other agent by ``dx*dx + dy*dy - size*size`` of the neighbor.

    Bigger neighbors look closer than their centres are. The comfort
    distances in ``SteeringConfig`` are tuned against this bias.
    """
    best: Optional[NeighborSample] = None
    best_metric = math.inf
    pos_x = agent.position.x
    pos_y = agent.position.y
    for other in neighbors:
        if other.id == agent.id:
            continue
        dx = other.x - pos_x
        dy = other.y - pos_y
        metric = dx * dx + dy * dy - other.size * other.size
        if metric < best_metric:
            best_metric = metric
            best = other
    return best


def direction_to(position: Vector2, x: float, y: float, rng: DeterministicRng) -> Tuple[Vector2, float]:
    dx = x - position.x
    dy = y - position.y
    distance = math.sqrt(dx * dx + dy * dy)
    if distance == 0.0:
        return rng.next_unit_circle(), 0.0
    return Vector2(dx / distance, dy / distance), distance


def heading_vector(agent: Agent, view: FlockView, neighbor: NeighborSample) -> Vector2:
    if view.has_target:
        toward_target, distance = direction_to(agent.position, view.target_x, view.target_y, view.rng)
        if distance <= view.steering.influence_radius:
            return toward_target
    toward_neighbor, _ = direction_to(agent.position, neighbor.x, neighbor.y, view.rng)
    return toward_neighbor


def blend_vector(
    agent: Agent,
    heading: Vector2,
    neighbor: NeighborSample,
    config: SteeringConfig,
    rng: DeterministicRng,
) -> Tuple[Vector2, float, bool]:
    """Mix goal seeking with cohesion or separation against the neighbor.

    Returns the unnormalized blend, the size-adjusted neighbor distance and
    whether the agent is backing away from the neighbor.
    """
    toward, distance = direction_to(agent.position, neighbor.x, neighbor.y, rng)
    adjusted = distance - neighbor.size
    if adjusted > config.max_comfortable_distance:
        return heading + toward, adjusted, False
    if adjusted < config.min_comfortable_distance:
        return -toward, adjusted, True
    return Vector2(heading), adjusted, False


def turn_toward(velocity: Vector2, desired: Vector2, turn_rate: float) -> float:
    """Heading change for this tick, or 0.0 when ``desired`` cancelled out."""
    unit = _safe_normalize_xy(desired.x, desired.y)
    if unit.x == 0.0 and unit.y == 0.0:
        return 0.0
    return _signed_angle(velocity, unit) * turn_rate


def wrap_position(position: Vector2, size: float, width: float, height: float) -> bool:
    wrapped = False
    if position.x < -size * 2:
        position.x = width
        wrapped = True
    elif position.x > width + size:
        position.x = -size
        wrapped = True
    if position.y < -size * 3:
        position.y = height
        wrapped = True
    elif position.y > height + size:
        position.y = -size
        wrapped = True
    return wrapped


def render_transform(position: Vector2, heading: float) -> RenderTransform:
    # Sprites point up at rotation zero.
    return RenderTransform(x=position.x, y=position.y, rotation=math.degrees(heading) - 90.0)
