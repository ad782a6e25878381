from __future__ import annotations

import math
import random

from pygame.math import Vector2


class DeterministicRng:
    def __init__(self, seed: int):
        self._random = random.Random(seed)

    def next_float(self) -> float:
        return self._random.random()

    def next_angle(self) -> float:
        """Heading in [0, 2*pi)."""
        return self._random.random() * 2.0 * math.pi

    def next_unit_circle(self) -> Vector2:
        angle = self._random.uniform(0, 2 * math.pi)
        vector = Vector2()
        vector.from_polar((1, math.degrees(angle)))
        return vector
