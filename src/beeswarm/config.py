from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional

import yaml


class ScatterPolicy(str, Enum):
    ORIGIN = "origin"
    RANDOM = "random"


@dataclass
class SteeringConfig:
    turn_rate: float = 0.05
    min_comfortable_distance: float = 6.0
    max_comfortable_distance: float = 30.0
    influence_radius: float = 300.0


@dataclass
class OscillationConfig:
    min_seconds: float = 5.0
    max_seconds: float = 15.0
    low_end_width: float = 320.0
    low_end_height: float = 695.0
    high_end_width: float = 2560.0
    high_end_height: float = 1245.0
    scatter_policy: ScatterPolicy = ScatterPolicy.ORIGIN
    # Older pages used a flat 9s cycle; set this to get that behaviour back.
    fixed_duration_ms: Optional[int] = None


@dataclass
class PopulationConfig:
    count: int = 30
    width: float = 10.0
    height: float = 10.0
    speed: float = 3.0


@dataclass
class AnchorConfig:
    left: float = 40.0
    top: float = 24.0
    width: float = 180.0
    height: float = 110.0


@dataclass
class SwarmConfig:
    viewport_width: float = 1280.0
    viewport_height: float = 800.0
    frame_interval: float = 1.0 / 60.0
    seed: int = 42
    steering: SteeringConfig = field(default_factory=SteeringConfig)
    oscillation: OscillationConfig = field(default_factory=OscillationConfig)
    population: PopulationConfig = field(default_factory=PopulationConfig)
    anchor: AnchorConfig = field(default_factory=AnchorConfig)

    @staticmethod
    def from_yaml(path: Path) -> "SwarmConfig":
        data = yaml.safe_load(Path(path).read_text()) or {}
        return load_config(data)


@dataclass
class AppConfig:
    swarm: SwarmConfig = field(default_factory=SwarmConfig)
    broadcast_interval: float = 1.0 / 30.0


def load_config(raw: dict) -> SwarmConfig:
    steering = SteeringConfig(**raw.get("steering", {}))
    oscillation_raw = dict(raw.get("oscillation", {}))
    if "scatter_policy" in oscillation_raw:
        oscillation_raw["scatter_policy"] = ScatterPolicy(str(oscillation_raw["scatter_policy"]).lower())
    oscillation = OscillationConfig(**oscillation_raw)
    population = PopulationConfig(**raw.get("population", {}))
    anchor = AnchorConfig(**raw.get("anchor", {}))
    swarm_values = {k: v for k, v in raw.items() if k not in {"steering", "oscillation", "population", "anchor"}}
    return SwarmConfig(
        steering=steering,
        oscillation=oscillation,
        population=population,
        anchor=anchor,
        **swarm_values,
    )
