from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict, Set

from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.responses import FileResponse, JSONResponse

from ..config import AppConfig
from ..sim.core.clock import AsyncioScheduler
from ..sim.core.flock import Flock
from ..sim.core.host import AnchorRect, PointerFeed, ViewportContainer

logger = logging.getLogger(__name__)


class SwarmController:
    def __init__(self, config: AppConfig):
        self.config = config
        swarm = config.swarm
        self.container = ViewportContainer(swarm.viewport_width, swarm.viewport_height)
        self.anchor = AnchorRect(swarm.anchor.left, swarm.anchor.top, swarm.anchor.width, swarm.anchor.height)
        self.pointer = PointerFeed()
        self.scheduler = AsyncioScheduler(swarm.frame_interval)
        self.flock = Flock(swarm)
        self.flock.initialize(
            self.container,
            self.anchor,
            input_source=self.pointer,
            frame_scheduler=self.scheduler,
            timer=self.scheduler,
        )
        self._populate()
        self.clients: Set[WebSocket] = set()
        self._broadcast_task: asyncio.Task | None = None
        self._sent_running: bool | None = None

    def _populate(self) -> None:
        population = self.config.swarm.population
        self.flock.populate(population.count, population.width, population.height, population.speed)

    async def start(self) -> None:
        if self._broadcast_task is None:
            self._broadcast_task = asyncio.create_task(self._loop())
        self.flock.start()

    async def stop(self) -> None:
        self.flock.stop()
        await self._broadcast_snapshot()

    async def toggle(self) -> None:
        self.anchor.activate()
        await self._broadcast_snapshot()

    async def reset(self) -> None:
        was_running = self.flock.running
        self.flock.clear()
        self._populate()
        if was_running:
            self.flock.start()
        await self._broadcast_snapshot()

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self.config.broadcast_interval)
            # A stop from a message or a tick error still sends one final snapshot.
            if self.flock.running or self.flock.running != self._sent_running:
                await self._broadcast_snapshot()

    def handle_message(self, payload: Dict[str, Any]) -> None:
        kind = payload.get("type")
        if kind == "pointer":
            self.pointer.pointer_down(float(payload["x"]), float(payload["y"]))
        elif kind == "touch":
            self.pointer.touch_start(payload.get("touches") or [])
        elif kind == "resize":
            self.container.resize(float(payload["width"]), float(payload["height"]))
        elif kind == "toggle":
            self.anchor.activate()

    def serialize_snapshot(self) -> str:
        snapshot = self.flock.snapshot()
        return json.dumps({"type": "snapshot", "payload": asdict(snapshot)})

    async def _broadcast_snapshot(self) -> None:
        self._sent_running = self.flock.running
        if not self.clients:
            return
        payload = self.serialize_snapshot()
        stale: Set[WebSocket] = set()
        for client in self.clients:
            try:
                await client.send_text(payload)
            except WebSocketDisconnect:
                stale.add(client)
        for client in stale:
            self.clients.discard(client)


app = FastAPI(title="Bee Swarm")
controller = SwarmController(AppConfig())
static_dir = Path(__file__).parent / "static"


@app.on_event("startup")
async def _startup() -> None:
    await controller.start()


@app.get("/")
async def index() -> FileResponse:
    return FileResponse(static_dir / "index.html")


@app.get("/api/status")
async def status() -> JSONResponse:
    flock = controller.flock
    width, height = flock.bounds
    return JSONResponse(
        {
            "running": flock.running,
            "tick": flock.tick,
            "population": len(flock.agents),
            "phase": flock.phase.value if flock.phase is not None else None,
            "target": list(flock.target),
            "bounds": [width, height],
        }
    )


@app.post("/api/control/start")
async def start_swarm() -> JSONResponse:
    await controller.start()
    return JSONResponse({"running": controller.flock.running})


@app.post("/api/control/stop")
async def stop_swarm() -> JSONResponse:
    await controller.stop()
    return JSONResponse({"running": controller.flock.running})


@app.post("/api/control/toggle")
async def toggle_swarm() -> JSONResponse:
    await controller.toggle()
    return JSONResponse({"running": controller.flock.running})


@app.post("/api/control/reset")
async def reset_swarm() -> JSONResponse:
    await controller.reset()
    return JSONResponse({"running": controller.flock.running, "population": len(controller.flock.agents)})


@app.post("/api/viewport")
async def resize_viewport(payload: dict) -> JSONResponse:
    controller.handle_message({"type": "resize", **payload})
    return JSONResponse({"width": controller.container.width, "height": controller.container.height})


@app.post("/api/target")
async def press(payload: dict) -> JSONResponse:
    controller.handle_message({"type": "pointer", **payload})
    return JSONResponse({"target": list(controller.flock.target)})


@app.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket) -> None:
    await websocket.accept()
    controller.clients.add(websocket)
    await websocket.send_text(controller.serialize_snapshot())
    try:
        while True:
            message = await websocket.receive_text()
            try:
                payload = json.loads(message)
            except json.JSONDecodeError:
                continue
            if not isinstance(payload, dict):
                continue
            try:
                controller.handle_message(payload)
            except (KeyError, TypeError, ValueError) as error:
                logger.debug("ignoring malformed message %r: %s", payload, error)
    except WebSocketDisconnect:
        controller.clients.discard(websocket)


__all__ = ["app", "controller"]
