from __future__ import annotations

import logging
import math
from enum import Enum
from time import perf_counter
from typing import Any, Callable, List, Optional, Tuple

from pygame.math import Vector2

from ...config import SwarmConfig
from ..systems import metrics as metrics_system, oscillation
from ..types.metrics import TickMetrics
from ..types.snapshot import Snapshot, SnapshotBounds, SnapshotPoint
from ..types.view import FlockView
from .agent import Agent
from .errors import InitializationError, NumericInstabilityError
from .host import (
    POINTER_DOWN,
    TOUCH_START,
    Anchor,
    Container,
    ErrorSink,
    FrameScheduler,
    InputSource,
    Sprite,
    Timer,
    VisualHandle,
)
from .rng import DeterministicRng

logger = logging.getLogger(__name__)

VisualFactory = Callable[[float, float], VisualHandle]


class OscillationPhase(str, Enum):
    HOME = "home"
    SCATTER = "scatter"


def _log_tick_error(error: BaseException) -> None:
    logger.error("swarm tick failed, animation stopped", exc_info=error)


class Flock:
    def __init__(self, config: SwarmConfig):
        self._config = config
        self._rng = DeterministicRng(config.seed)
        self._agents: List[Agent] = []
        self._next_id = 0
        self._target_x = 0.0
        self._target_y = 0.0
        self._container: Optional[Container] = None
        self._anchor: Optional[Anchor] = None
        self._input: Optional[InputSource] = None
        self._frames: Optional[FrameScheduler] = None
        self._timer: Optional[Timer] = None
        self._error_sink: ErrorSink = _log_tick_error
        self._visual_factory: VisualFactory = Sprite
        self._running = False
        self._frame_handle: Any = None
        self._timer_handle: Any = None
        self._phase: Optional[OscillationPhase] = None
        self._tick = 0
        self._metrics: TickMetrics | None = None

    @property
    def agents(self) -> Tuple[Agent, ...]:
        return tuple(self._agents)

    @property
    def running(self) -> bool:
        return self._running

    @property
    def target(self) -> Tuple[float, float]:
        return self._target_x, self._target_y

    @property
    def bounds(self) -> Tuple[float, float]:
        container = self._require_container()
        return container.width, container.height

    @property
    def phase(self) -> Optional[OscillationPhase]:
        return self._phase

    @property
    def tick(self) -> int:
        return self._tick

    @property
    def metrics(self) -> TickMetrics | None:
        return self._metrics

    @property
    def initialized(self) -> bool:
        return self._container is not None

    def initialize(
        self,
        container: Optional[Container],
        anchor: Optional[Anchor],
        *,
        input_source: InputSource,
        frame_scheduler: FrameScheduler,
        timer: Timer,
        error_sink: Optional[ErrorSink] = None,
        visual_factory: Optional[VisualFactory] = None,
    ) -> "Flock":
        if self.initialized:
            logger.warning("initialize() already completed, ignoring repeated call")
            return self
        if container is None:
            raise InitializationError("swarm container is missing")
        if anchor is None:
            raise InitializationError("swarm home anchor is missing")
        self._container = container
        self._anchor = anchor
        self._input = input_source
        self._frames = frame_scheduler
        self._timer = timer
        if error_sink is not None:
            self._error_sink = error_sink
        if visual_factory is not None:
            self._visual_factory = visual_factory
        anchor.bind_activate(self.toggle)
        container.hide()
        return self

    def populate(self, count: int, width: float, height: float, speed: float) -> None:
        if count < 0:
            raise ValueError(f"agent count must be non-negative, got {count}")
        container = self._require_container()
        size = max(width, height)
        for _ in range(count):
            visual = self._visual_factory(width, height)
            agent = Agent(
                id=self._next_id,
                position=Vector2(
                    self._rng.next_float() * container.width,
                    self._rng.next_float() * container.height,
                ),
                heading=self._rng.next_angle(),
                size=size,
                speed=speed,
                visual=visual,
            )
            self._next_id += 1
            container.attach(visual)
            self._agents.append(agent)
        logger.debug("populated %d agents (total %d)", count, len(self._agents))

    def add_agent(self, agent: Agent) -> None:
        container = self._require_container()
        if agent.visual is not None:
            container.attach(agent.visual)
        self._agents.append(agent)
        self._next_id = max(self._next_id, agent.id + 1)

    def clear(self) -> None:
        self.stop()
        for agent in self._agents:
            if agent.visual is not None and self._container is not None:
                self._container.detach(agent.visual)
        self._agents.clear()

    def set_target(self, x: float, y: float) -> None:
        self._target_x = x
        self._target_y = y

    def toggle(self) -> None:
        if self._running:
            self.stop()
        else:
            self.start()

    def start(self) -> None:
        if self._running:
            return
        container = self._require_container()
        self._running = True
        self._input.subscribe(POINTER_DOWN, self.set_target)
        self._input.subscribe(TOUCH_START, self.set_target)
        logger.debug("swarm started with %d agents", len(self._agents))
        self._home()
        container.show()
        self._update()

    def stop(self) -> None:
        if not self._running:
            return
        self._running = False
        if self._frames is not None:
            self._frames.cancel_frame(self._frame_handle)
        if self._timer is not None:
            self._timer.clear_timeout(self._timer_handle)
        self._frame_handle = None
        self._timer_handle = None
        self._phase = None
        if self._input is not None:
            self._input.unsubscribe(POINTER_DOWN, self.set_target)
            self._input.unsubscribe(TOUCH_START, self.set_target)
        self._target_x = self._target_y = 0.0
        if self._container is not None:
            self._container.hide()
        logger.debug("swarm stopped at tick %d", self._tick)

    def scatter_home_duration(self) -> int:
        width, height = self.bounds
        return oscillation.duration_for_viewport(self._config.oscillation, width, height)

    def _home(self) -> None:
        self.set_target(*self._anchor.center())
        self._phase = OscillationPhase.HOME
        self._schedule(self._scatter)

    def _scatter(self) -> None:
        width, height = self.bounds
        self.set_target(*oscillation.scatter_point(self._config.oscillation.scatter_policy, self._rng, width, height))
        self._phase = OscillationPhase.SCATTER
        self._schedule(self._home)

    def _schedule(self, transition: Callable[[], None]) -> None:
        self._timer.clear_timeout(self._timer_handle)
        duration = self.scatter_home_duration()
        logger.debug("oscillation %s for %d ms", self._phase.value, duration)
        self._timer_handle = self._timer.set_timeout(transition, duration)

    def _update(self) -> None:
        self._frame_handle = None
        if not self._running:
            return
        try:
            self.step()
        except Exception as error:
            self.stop()
            self._error_sink(error)
            return
        if self._running:
            self._frame_handle = self._frames.request_frame(self._update)

    def step(self) -> TickMetrics:
        """Advance every agent once against a snapshot of the flock."""
        start = perf_counter()
        view = self._view()
        for agent in self._agents:
            agent.update(view)
            if not (math.isfinite(agent.position.x) and math.isfinite(agent.position.y)):
                raise NumericInstabilityError(f"agent {agent.id} reached a non-finite position")
        self._tick += 1
        duration_ms = (perf_counter() - start) * 1000.0
        self._metrics = metrics_system.create_metrics(self._tick, self._agents, duration_ms)
        return self._metrics

    def _view(self) -> FlockView:
        width, height = self.bounds
        return FlockView(
            width=width,
            height=height,
            target_x=self._target_x,
            target_y=self._target_y,
            neighbors=tuple(agent.sample() for agent in self._agents),
            steering=self._config.steering,
            rng=self._rng,
        )

    def snapshot(self) -> Snapshot:
        width, height = self.bounds
        return Snapshot(
            tick=self._tick,
            running=self._running,
            phase=self._phase.value if self._phase is not None else None,
            target=SnapshotPoint(x=self._target_x, y=self._target_y),
            bounds=SnapshotBounds(width=width, height=height),
            metrics=self._metrics,
            agents=[agent.to_payload() for agent in self._agents],
        )

    def _require_container(self) -> Container:
        if self._container is None:
            raise InitializationError("initialize() must be completed first")
        return self._container
