from __future__ import annotations

import asyncio
import heapq
import itertools
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple


@dataclass
class ManualClock:
    """Virtual frame and timer source.

    Frames requested during ``run_frame`` are queued for the following frame,
    the way a browser defers ``requestAnimationFrame`` callbacks registered
    while a frame is being painted.
    """

    now_ms: float = 0.0
    _frames: Dict[int, Callable[[], None]] = field(default_factory=dict)
    _timers: List[Tuple[float, int, Callable[[], None]]] = field(default_factory=list)
    _cancelled_timers: set = field(default_factory=set)
    _ids: itertools.count = field(default_factory=lambda: itertools.count(1))

    def request_frame(self, callback: Callable[[], None]) -> int:
        handle = next(self._ids)
        self._frames[handle] = callback
        return handle

    def cancel_frame(self, handle: Optional[int]) -> None:
        if handle is not None:
            self._frames.pop(handle, None)

    def set_timeout(self, callback: Callable[[], None], delay_ms: int) -> int:
        handle = next(self._ids)
        heapq.heappush(self._timers, (self.now_ms + max(0, delay_ms), handle, callback))
        return handle

    def clear_timeout(self, handle: Optional[int]) -> None:
        if handle is not None and any(item[1] == handle for item in self._timers):
            self._cancelled_timers.add(handle)

    @property
    def pending_frames(self) -> int:
        return len(self._frames)

    @property
    def pending_timers(self) -> int:
        return sum(1 for _, handle, _ in self._timers if handle not in self._cancelled_timers)

    def run_frame(self) -> int:
        pending = self._frames
        self._frames = {}
        for callback in pending.values():
            callback()
        return len(pending)

    def advance(self, delta_ms: float) -> None:
        deadline = self.now_ms + delta_ms
        while self._timers and self._timers[0][0] <= deadline:
            due, handle, callback = heapq.heappop(self._timers)
            if handle in self._cancelled_timers:
                self._cancelled_timers.discard(handle)
                continue
            self.now_ms = due
            callback()
        self.now_ms = deadline

    def run_frames(self, count: int, frame_ms: float) -> int:
        ran = 0
        for _ in range(count):
            self.advance(frame_ms)
            ran += self.run_frame()
        return ran


class AsyncioScheduler:
    def __init__(self, frame_interval: float, loop: asyncio.AbstractEventLoop | None = None):
        self.frame_interval = frame_interval
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def request_frame(self, callback: Callable[[], None]) -> asyncio.TimerHandle:
        return self.loop.call_later(self.frame_interval, callback)

    def cancel_frame(self, handle: asyncio.TimerHandle | None) -> None:
        if handle is not None:
            handle.cancel()

    def set_timeout(self, callback: Callable[[], None], delay_ms: int) -> asyncio.TimerHandle:
        return self.loop.call_later(max(0, delay_ms) / 1000.0, callback)

    def clear_timeout(self, handle: asyncio.TimerHandle | None) -> None:
        if handle is not None:
            handle.cancel()
