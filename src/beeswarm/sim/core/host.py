"""Host collaborators the flock is wired to.

The flock only talks to these protocols. The concrete classes below are the
in-memory host used by the web server and the headless runner: a container
whose size is whatever the client last reported, an anchor rectangle, a
pointer feed and sprites that remember their last transform.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional, Protocol, Sequence, Tuple

from ..types.snapshot import RenderTransform

POINTER_DOWN = "pointerdown"
TOUCH_START = "touchstart"

PressHandler = Callable[[float, float], None]
ErrorSink = Callable[[BaseException], None]


class VisualHandle(Protocol):
    def render(self, transform: RenderTransform) -> None: ...


class Container(Protocol):
    @property
    def width(self) -> float: ...

    @property
    def height(self) -> float: ...

    def attach(self, visual: VisualHandle) -> None: ...

    def detach(self, visual: VisualHandle) -> None: ...

    def show(self) -> None: ...

    def hide(self) -> None: ...


class Anchor(Protocol):
    def center(self) -> Tuple[float, float]: ...

    def bind_activate(self, callback: Callable[[], None]) -> None: ...


class InputSource(Protocol):
    def subscribe(self, kind: str, handler: PressHandler) -> None: ...

    def unsubscribe(self, kind: str, handler: PressHandler) -> None: ...


class FrameScheduler(Protocol):
    def request_frame(self, callback: Callable[[], None]) -> Any: ...

    def cancel_frame(self, handle: Any) -> None: ...


class Timer(Protocol):
    def set_timeout(self, callback: Callable[[], None], delay_ms: int) -> Any: ...

    def clear_timeout(self, handle: Any) -> None: ...


@dataclass(eq=False)
class Sprite:
    width: float
    height: float
    transform: Optional[RenderTransform] = None

    def render(self, transform: RenderTransform) -> None:
        self.transform = transform


class ViewportContainer:
    def __init__(self, width: float, height: float):
        self._width = float(width)
        self._height = float(height)
        self.visible = False
        self.visuals: List[VisualHandle] = []

    @property
    def width(self) -> float:
        return self._width

    @property
    def height(self) -> float:
        return self._height

    def resize(self, width: float, height: float) -> None:
        self._width = max(0.0, float(width))
        self._height = max(0.0, float(height))

    def attach(self, visual: VisualHandle) -> None:
        self.visuals.append(visual)

    def detach(self, visual: VisualHandle) -> None:
        if visual in self.visuals:
            self.visuals.remove(visual)

    def show(self) -> None:
        self.visible = True

    def hide(self) -> None:
        self.visible = False


class AnchorRect:
    def __init__(self, left: float, top: float, width: float, height: float):
        self.left = left
        self.top = top
        self.width = width
        self.height = height
        self._on_activate: Optional[Callable[[], None]] = None

    def center(self) -> Tuple[float, float]:
        return self.left + self.width / 2, self.top + self.height / 2

    def bind_activate(self, callback: Callable[[], None]) -> None:
        self._on_activate = callback

    def activate(self) -> None:
        if self._on_activate is not None:
            self._on_activate()


@dataclass
class PointerFeed:
    handlers: Dict[str, List[PressHandler]] = field(default_factory=dict)

    def subscribe(self, kind: str, handler: PressHandler) -> None:
        self.handlers.setdefault(kind, []).append(handler)

    def unsubscribe(self, kind: str, handler: PressHandler) -> None:
        bucket = self.handlers.get(kind)
        if bucket and handler in bucket:
            bucket.remove(handler)

    def listener_count(self) -> int:
        return sum(len(bucket) for bucket in self.handlers.values())

    def pointer_down(self, x: float, y: float) -> None:
        self._dispatch(POINTER_DOWN, x, y)

    def touch_start(self, touches: Sequence[Iterable[float]]) -> None:
        if not touches:
            return
        x, y = tuple(touches[0])[:2]
        self._dispatch(TOUCH_START, x, y)

    def _dispatch(self, kind: str, x: float, y: float) -> None:
        for handler in list(self.handlers.get(kind, ())):
            handler(float(x), float(y))
