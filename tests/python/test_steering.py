from __future__ import annotations

import math

import pytest
from pygame.math import Vector2
from pytest import approx

from beeswarm.sim.core.agent import Agent
from beeswarm.sim.systems import steering
from beeswarm.sim.types.view import NeighborSample
from beeswarm.sim.utils.math2d import _signed_angle, _unit_from_heading


@pytest.mark.parametrize(
    "current, desired, expected",
    [
        (0.0, math.pi / 2, math.pi / 2),
        (0.0, -math.pi / 2, -math.pi / 2),
        (0.0, 0.0, 0.0),
        (0.0, 3 * math.pi / 4, 3 * math.pi / 4),
        (0.0, -3 * math.pi / 4, -3 * math.pi / 4),
        (3 * math.pi / 4, -3 * math.pi / 4, math.pi / 2),
        (-3 * math.pi / 4, 3 * math.pi / 4, -math.pi / 2),
    ],
)
def test_signed_angle_is_continuous_across_the_wrap(current, desired, expected):
    result = _signed_angle(_unit_from_heading(current), _unit_from_heading(desired))
    assert result == approx(expected, abs=1e-9)


def test_nearest_neighbor_uses_size_biased_metric():
    agent = Agent(id=0, position=Vector2(), heading=0.0, size=4.0, speed=1.0)
    small_close = NeighborSample(id=1, x=10.0, y=0.0, size=1.0)
    big_far = NeighborSample(id=2, x=12.0, y=0.0, size=8.0)

    nearest = steering.nearest_neighbor(agent, [agent.sample(), small_close, big_far])

    # 100 - 1 against 144 - 64
    assert nearest is big_far


def test_nearest_neighbor_skips_self():
    agent = Agent(id=3, position=Vector2(), heading=0.0, size=4.0, speed=1.0)

    assert steering.nearest_neighbor(agent, [agent.sample()]) is None


def test_turn_toward_zero_vector_is_noop():
    assert steering.turn_toward(Vector2(1.0, 0.0), Vector2(), 0.05) == 0.0


@pytest.mark.parametrize(
    "start, expected",
    [
        ((-20.5, 5.0), (400.0, 5.0)),
        ((-20.0, 5.0), (-20.0, 5.0)),
        ((410.5, 5.0), (-10.0, 5.0)),
        ((5.0, -30.5), (5.0, 300.0)),
        ((5.0, -30.0), (5.0, -30.0)),
        ((5.0, 310.5), (5.0, -10.0)),
    ],
)
def test_wrap_position_uses_asymmetric_margins(start, expected):
    position = Vector2(*start)

    wrapped = steering.wrap_position(position, size=10.0, width=400.0, height=300.0)

    assert (position.x, position.y) == expected
    assert wrapped == (start != expected)


def test_render_transform_rotates_sprite_up_at_zero():
    transform = steering.render_transform(Vector2(3.0, 4.0), math.pi)

    assert transform.x == 3.0
    assert transform.y == 4.0
    assert transform.rotation == approx(90.0)
