"""
WebSocket host display module.

Each host display connects to ``/ws/host`` and gets its own HostPictureView.
The browser forwards pointer events on the canvas; the server owns bubble
positions and stacking, saves dragged positions, and pushes new comments as
they arrive.

Client messages: show, pointer_down, pointer_move, pointer_up, click.
Server messages: state, comment, position, front, error.

Author: Matthew Picone (mail@matthewpicone.com)
Date: 2025-12-17
"""

import asyncio
from typing import Any, Dict, Optional, Set

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from loguru import logger

from logic.config import load_config
from logic.drag import CanvasRect, PointerEvent
from logic.host_view import HostPictureView
from logic.photos import find_photo, load_catalog
from logic.positions import UnknownBubbleError

router = APIRouter()


# ==========================
# Helpers
# ==========================
def parse_pointer(msg: Dict[str, Any]) -> PointerEvent:
    """Build a PointerEvent from a client message.

    Raises:
        ValueError: If coordinates are missing or not numeric.
    """
    try:
        return PointerEvent(
            int(msg.get("pointer_id", 0)),
            float(msg["x"]),
            float(msg["y"]),
        )
    except (KeyError, TypeError, ValueError):
        raise ValueError("Invalid pointer event")


def parse_rect(msg: Dict[str, Any]) -> CanvasRect:
    """Build a CanvasRect from the ``rect`` field of a client message.

    Raises:
        ValueError: If the rect is missing or not numeric.
    """
    rect = msg.get("rect")
    if not isinstance(rect, dict):
        raise ValueError("Missing canvas rect")
    try:
        return CanvasRect(
            float(rect["left"]),
            float(rect["top"]),
            float(rect["width"]),
            float(rect["height"]),
        )
    except (KeyError, TypeError, ValueError):
        raise ValueError("Invalid canvas rect")


def position_message(view: HostPictureView, comment_id: str, point) -> Dict[str, Any]:
    return {
        "type": "position",
        "id": comment_id,
        "top": point.top,
        "left": point.left,
        "z": view.positions.stack_order_of(comment_id),
        "paused": view.drag.is_paused(comment_id),
    }


class HostSession:
    """One connected host display.

    Attributes:
        ws: WebSocket connection.
        view: Host view driven by this connection.
        outbox: Messages waiting to be sent, in order.
    """

    def __init__(self, ws: WebSocket, store, config: Dict[str, Any]):
        self.ws = ws
        self.config = config
        self.outbox: asyncio.Queue = asyncio.Queue()
        self.view = HostPictureView(store, config, on_change=self._on_change)
        self._show_tasks: Set[asyncio.Task] = set()

    def _on_change(self, kind: str, payload: Dict[str, Any]):
        self.send({"type": kind, **payload} if kind == "state" else {"type": kind, "bubble": payload})

    def send(self, payload: Dict[str, Any]):
        self.outbox.put_nowait(payload)

    async def sender(self):
        while True:
            payload = await self.outbox.get()
            await self.ws.send_json(payload)

    def show(self, photo_id: Optional[str]):
        """Switch photos without waiting for the previous load to finish."""
        photo_id = photo_id or self.config["default_photo"]
        if find_photo(load_catalog(self.config), photo_id) is None:
            self.send({"type": "error", "message": f"Photo '{photo_id}' not found"})
            return
        task = asyncio.create_task(self.view.show(photo_id))
        self._show_tasks.add(task)
        task.add_done_callback(self._show_tasks.discard)

    async def handle(self, msg: Dict[str, Any]):
        msg_type = msg.get("type")
        comment_id = msg.get("id")

        if msg_type == "show":
            self.show(msg.get("photo"))
            return

        if not comment_id:
            self.send({"type": "error", "message": "Missing comment id"})
            return
        if not isinstance(comment_id, str):
            self.send({"type": "error", "message": "Comment id must be a string"})
            return

        try:
            if msg_type == "pointer_down":
                point = self.view.pointer_down(comment_id, parse_pointer(msg), parse_rect(msg))
            elif msg_type == "pointer_move":
                point = self.view.pointer_move(comment_id, parse_pointer(msg), parse_rect(msg))
            elif msg_type == "pointer_up":
                point = self.view.pointer_up(comment_id, parse_pointer(msg))
            elif msg_type == "click":
                z = self.view.click(comment_id)
                self.send({"type": "front", "id": comment_id, "z": z})
                return
            else:
                self.send({"type": "error", "message": f"Unknown message type: {msg_type}"})
                return
        except UnknownBubbleError:
            self.send({"type": "error", "message": f"Comment '{comment_id}' is not displayed"})
            return
        except ValueError as e:
            self.send({"type": "error", "message": str(e)})
            return

        if point is not None:
            self.send(position_message(self.view, comment_id, point))

    async def close(self):
        # Every load started on this connection settles before teardown
        if self._show_tasks:
            await asyncio.gather(*list(self._show_tasks), return_exceptions=True)
        await self.view.dispose()


# ==========================
# WebSocket Endpoint
# ==========================
@router.websocket("/ws/host")
async def host_endpoint(ws: WebSocket):
    await ws.accept()

    session = HostSession(ws, ws.app.state.store, load_config())
    sender = asyncio.create_task(session.sender())
    session.show(ws.query_params.get("photo"))

    try:
        while True:
            msg = await ws.receive_json()
            if not isinstance(msg, dict):
                session.send({"type": "error", "message": "Expected a JSON object"})
                continue
            await session.handle(msg)

    except WebSocketDisconnect:
        logger.debug(f"Host display disconnected from {session.view.photo_id}")

    finally:
        sender.cancel()
        await session.close()
