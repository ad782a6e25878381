from __future__ import annotations

from beeswarm.config import OscillationConfig, ScatterPolicy
from beeswarm.sim.core.rng import DeterministicRng
from beeswarm.sim.systems.oscillation import duration_for_area, duration_for_viewport, scatter_point

CONFIG = OscillationConfig()
MIN_AREA = CONFIG.low_end_width * CONFIG.low_end_height
MAX_AREA = CONFIG.high_end_width * CONFIG.high_end_height


def test_duration_at_calibration_bounds():
    assert duration_for_area(CONFIG, MIN_AREA) == 5000
    assert duration_for_area(CONFIG, MAX_AREA) == 15000


def test_duration_is_clamped_outside_calibration():
    assert duration_for_area(CONFIG, 0.0) == 5000
    assert duration_for_area(CONFIG, MIN_AREA / 2) == 5000
    assert duration_for_area(CONFIG, MAX_AREA * 4) == 15000


def test_duration_at_midpoint_is_mean():
    assert duration_for_area(CONFIG, (MIN_AREA + MAX_AREA) / 2) == 10000


def test_duration_for_viewport_uses_area():
    assert duration_for_viewport(CONFIG, 2560, 1245) == 15000
    assert 5000 < duration_for_viewport(CONFIG, 1280, 800) < 15000


def test_fixed_duration_overrides_interpolation():
    config = OscillationConfig(fixed_duration_ms=9000)

    assert duration_for_area(config, MIN_AREA) == 9000
    assert duration_for_area(config, MAX_AREA) == 9000


def test_degenerate_calibration_falls_back_to_minimum():
    config = OscillationConfig(high_end_width=320.0, high_end_height=695.0)

    assert duration_for_area(config, 10_000_000) == 5000


def test_origin_scatter_is_origin():
    assert scatter_point(ScatterPolicy.ORIGIN, DeterministicRng(1), 800.0, 600.0) == (0.0, 0.0)


def test_random_scatter_is_deterministic_and_inside_bounds():
    rng_a = DeterministicRng(5)
    rng_b = DeterministicRng(5)
    first = [scatter_point(ScatterPolicy.RANDOM, rng_a, 800.0, 600.0) for _ in range(10)]
    second = [scatter_point(ScatterPolicy.RANDOM, rng_b, 800.0, 600.0) for _ in range(10)]

    assert first == second
    for x, y in first:
        assert 0.0 <= x < 800.0
        assert 0.0 <= y < 600.0
