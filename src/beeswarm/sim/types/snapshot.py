from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .metrics import TickMetrics


@dataclass(slots=True, frozen=True)
class RenderTransform:
    x: float
    y: float
    rotation: float

    def css(self) -> str:
        return f"translate3d({self.x}px,{self.y}px,0) rotateZ({self.rotation}deg)"


@dataclass(slots=True)
class Snapshot:
    tick: int
    running: bool
    phase: Optional[str]
    target: "SnapshotPoint"
    bounds: "SnapshotBounds"
    metrics: Optional[TickMetrics]
    agents: List[Dict[str, Any]]


@dataclass(slots=True)
class SnapshotPoint:
    x: float
    y: float


@dataclass(slots=True)
class SnapshotBounds:
    width: float
    height: float
