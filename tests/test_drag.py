"""
Tests for the drag interaction controller.

Run with: python -m pytest tests/test_drag.py -v
"""

import pytest

from logic.drag import CanvasRect, DragController, PointerEvent, pointer_to_percent
from logic.models import BubblePoint
from logic.placement import placement
from logic.positions import PositionStateManager
from tests.helpers import make_comments

# 1000x500 canvas placed at (100, 50) in the viewport
RECT = CanvasRect(left=100, top=50, width=1000, height=500)


def at(top_pct, left_pct, pointer_id=1):
    """Pointer event at the given canvas percentages."""
    return PointerEvent(
        pointer_id,
        RECT.left + RECT.width * left_pct / 100,
        RECT.top + RECT.height * top_pct / 100,
    )


class Recorder:
    def __init__(self):
        self.calls = []

    async def __call__(self, comment_id, point):
        self.calls.append((comment_id, point))


@pytest.fixture
def setup():
    manager = PositionStateManager()
    manager.ensure_initialized(make_comments("c1", "c2"))
    persist = Recorder()
    return manager, DragController(manager, persist), persist


def test_pointer_to_percent():
    assert pointer_to_percent(PointerEvent(1, 600, 300), RECT) == BubblePoint(50.0, 50.0)
    assert pointer_to_percent(PointerEvent(1, 100, 50), RECT) == BubblePoint(0.0, 0.0)
    assert pointer_to_percent(PointerEvent(1, 0, 0), CanvasRect(0, 0, 0, 100)) is None


def test_pointer_down_brings_to_front_and_moves(setup):
    manager, drag, _ = setup

    point = drag.pointer_down("c1", at(25, 75), RECT)

    assert point == BubblePoint(25.0, 75.0)
    assert drag.active_id == "c1"
    assert manager.stack_order_of("c1") > manager.stack_order_of("c2")
    assert drag.is_paused("c1")
    assert not drag.is_paused("c2")


def test_pointer_move_only_for_capture_owner(setup):
    manager, drag, _ = setup
    drag.pointer_down("c1", at(25, 75), RECT)

    assert drag.pointer_move("c2", at(10, 10), RECT) is None
    assert drag.pointer_move("c1", at(10, 10, pointer_id=2), RECT) is None
    assert manager.position_of("c2") == placement("c2")

    assert drag.pointer_move("c1", at(40, 60), RECT) == BubblePoint(40.0, 60.0)


def test_second_drag_is_ignored(setup):
    manager, drag, _ = setup
    drag.pointer_down("c1", at(25, 75), RECT)
    z_c2 = manager.stack_order_of("c2")

    assert drag.pointer_down("c2", at(10, 10, pointer_id=2), RECT) is None
    assert drag.active_id == "c1"
    assert manager.stack_order_of("c2") == z_c2


@pytest.mark.asyncio
async def test_release_persists_clamped_position_once(setup):
    manager, drag, persist = setup

    drag.pointer_down("c1", at(50, 50), RECT)
    drag.pointer_move("c1", at(120, 20), RECT)
    drag.pointer_move("c1", at(150, -10), RECT)
    final = drag.pointer_up("c1", at(150, -10))
    await drag.drain()

    assert final == BubblePoint(96, 4)
    assert persist.calls == [("c1", BubblePoint(96, 4))]
    assert drag.active_id is None
    assert not drag.is_paused("c1")


@pytest.mark.asyncio
async def test_pointer_up_without_drag_does_nothing(setup):
    _, drag, persist = setup

    assert drag.pointer_up("c1", at(10, 10)) is None
    await drag.drain()

    assert persist.calls == []


def test_zero_size_canvas_keeps_position(setup):
    manager, drag, _ = setup
    before = manager.position_of("c1")

    point = drag.pointer_down("c1", at(10, 10), CanvasRect(0, 0, 0, 0))

    assert point == before
    assert drag.active_id == "c1"


def test_click_brings_to_front_without_moving(setup):
    manager, drag, _ = setup
    before = manager.position_of("c1")

    z = drag.click("c1")

    assert z == manager.top_stack_value
    assert manager.position_of("c1") == before
    assert drag.active_id is None


@pytest.mark.asyncio
async def test_cancel_drops_drag_without_saving(setup):
    _, drag, persist = setup
    drag.pointer_down("c1", at(30, 30), RECT)

    drag.cancel()
    assert drag.pointer_up("c1", at(30, 30)) is None
    await drag.drain()

    assert persist.calls == []
