from __future__ import annotations

from typing import Tuple

from ...config import OscillationConfig, ScatterPolicy
from ..core.rng import DeterministicRng
from ..utils.math2d import _clamp_value, _lerp


def duration_for_area(config: OscillationConfig, area: float) -> int:
    """Milliseconds to hold a scatter/home phase on a viewport of ``area``.

    Small screens cycle at ``min_seconds``, large ones at ``max_seconds``;
    areas outside the calibrated range are clamped before interpolating.
    """
    if config.fixed_duration_ms is not None:
        return int(config.fixed_duration_ms)
    min_area = config.low_end_width * config.low_end_height
    max_area = config.high_end_width * config.high_end_height
    if max_area <= min_area:
        return round(config.min_seconds * 1000)
    clamped = _clamp_value(area, min_area, max_area)
    t = (clamped - min_area) / (max_area - min_area)
    return round(_lerp(config.min_seconds, config.max_seconds, t) * 1000)


def duration_for_viewport(config: OscillationConfig, width: float, height: float) -> int:
    return duration_for_area(config, width * height)


def scatter_point(
    policy: ScatterPolicy, rng: DeterministicRng, width: float, height: float
) -> Tuple[float, float]:
    # The origin reads as "no target", so agents fall back to chasing each other.
    if policy is ScatterPolicy.RANDOM:
        return rng.next_float() * width, rng.next_float() * height
    return 0.0, 0.0
