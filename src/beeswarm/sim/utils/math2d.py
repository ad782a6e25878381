from __future__ import annotations

import math

from pygame.math import Vector2


def _safe_normalize_xy(x: float, y: float) -> Vector2:
    magnitude_sq = x * x + y * y
    if magnitude_sq < 1e-18:
        return Vector2()
    inv = 1.0 / math.sqrt(magnitude_sq)
    return Vector2(x * inv, y * inv)


def _unit_from_heading(heading: float) -> Vector2:
    return Vector2(math.cos(heading), math.sin(heading))


def _signed_angle(current: Vector2, desired: Vector2) -> float:
    """Signed angle in radians from unit ``current`` to unit ``desired``.

    The cross product gives the turn direction and, through ``asin``, the
    magnitude for angles up to 90 degrees. Past that the dot product goes
    negative and the magnitude is mirrored to ``pi - asin``, which keeps the
    result continuous across the +/-pi wrap.
    """
    cross = _clamp_value(current.x * desired.y - current.y * desired.x, -1.0, 1.0)
    dot = current.x * desired.x + current.y * desired.y
    if dot > 0.0:
        magnitude = abs(math.asin(cross))
    else:
        magnitude = math.pi - abs(math.asin(cross))
    return magnitude if cross > 0.0 else -magnitude


def _lerp(low: float, high: float, t: float) -> float:
    return low + (high - low) * t


def _clamp_value(value: float, min_value: float, max_value: float) -> float:
    return max(min_value, min(max_value, value))
