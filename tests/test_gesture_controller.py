import math
import random

import pytest
from PyQt5.QtCore import QEvent, QPointF, Qt
from PyQt5.QtGui import QKeyEvent, QMouseEvent

from formstamp.controllers import GestureController
from formstamp.controllers.gesture_controller import resize_bounds
from formstamp.core.markup import Point, Rect, ResizeAnchor


class Zoom:
    def __init__(self, scale=1.0):
        self.scale = scale

    def __call__(self):
        return self.scale


@pytest.fixture
def zoom():
    return Zoom()


@pytest.fixture
def gestures(store, zoom):
    controller = GestureController(store, zoom)
    yield controller
    controller.teardown()


def mouse_event(kind, x, y, button=Qt.NoButton):
    pos = QPointF(x, y)
    buttons = Qt.LeftButton if kind == QEvent.MouseMove else Qt.NoButton
    return QMouseEvent(kind, pos, pos, button, buttons, Qt.NoModifier)


def bounds_of(store, annotation_id):
    return store.get(annotation_id).bounds.as_tuple()


class TestResize:
    def test_southeast_grows(self, store, gestures, text_box):
        session = gestures.begin_resize(text_box, ResizeAnchor.SE, Point(0, 0))
        session.move_to(Point(50, 20))
        assert bounds_of(store, text_box) == (100, 200, 200, 60)

    def test_northwest_pins_opposite_corner(self, store, gestures, text_box):
        session = gestures.begin_resize(text_box, ResizeAnchor.NW, Point(0, 0))
        session.move_to(Point(300, 300))
        x, y, width, height = bounds_of(store, text_box)
        assert (width, height) == (20, 20)
        assert (x + width, y + height) == (250, 240)

    def test_minimum_follows_zoom(self, store, gestures, zoom, text_box):
        zoom.scale = 2.0
        session = gestures.begin_resize(text_box, ResizeAnchor.E, Point(0, 0))
        session.move_to(Point(-1000, 0))
        assert store.get(text_box).width == 10

    def test_edge_anchor_leaves_other_axis(self, store, gestures, text_box):
        session = gestures.begin_resize(text_box, ResizeAnchor.N, Point(0, 0))
        session.move_to(Point(40, -10))
        assert bounds_of(store, text_box) == (100, 190, 150, 50)

    def test_deltas_are_from_gesture_start(self, store, gestures, text_box):
        session = gestures.begin_resize(text_box, ResizeAnchor.SE, Point(10, 10))
        session.move_to(Point(20, 20))
        session.move_to(Point(20, 20))
        assert bounds_of(store, text_box) == (100, 200, 160, 50)

    def test_resize_bounds_west(self):
        result = resize_bounds(Rect(0, 0, 100, 50), ResizeAnchor.W, 30, 99, 20)
        assert result == Rect(30, 0, 70, 50)


class TestMove:
    def test_move_divides_by_scale(self, store, gestures, zoom, text_box):
        zoom.scale = 2.0
        session = gestures.begin_move(text_box, Point(500, 500))
        session.move_to(Point(540, 480))
        assert bounds_of(store, text_box) == (120, 190, 150, 40)

    def test_invalid_scale_is_ignored(self, store, gestures, zoom, text_box):
        session = gestures.begin_move(text_box, Point(0, 0))
        zoom.scale = 0
        assert session.move_to(Point(50, 50)) is None
        zoom.scale = math.nan
        assert session.move_to(Point(50, 50)) is None
        assert bounds_of(store, text_box) == (100, 200, 150, 40)

    def test_non_finite_pointer_is_ignored(self, store, gestures, text_box):
        session = gestures.begin_move(text_box, Point(0, 0))
        assert session.move_to(Point(math.inf, 0)) is None
        assert bounds_of(store, text_box) == (100, 200, 150, 40)

    def test_requires_selection(self, store, gestures, text_box):
        store.select(None)
        assert gestures.begin_move(text_box, Point(0, 0)) is None

    def test_deleted_mid_gesture_ends_session(self, store, gestures, text_box):
        session = gestures.begin_move(text_box, Point(0, 0))
        store.delete(text_box)
        assert session.move_to(Point(10, 10)) is None
        assert not session.is_active
        assert not session.is_listening


class TestSessionLifecycle:
    def test_listens_only_while_active(self, gestures, text_box):
        session = gestures.begin_move(text_box, Point(0, 0))
        assert session.is_listening
        assert gestures.active_session is session
        session.finish()
        assert not session.is_listening
        assert gestures.active_session is None

    def test_teardown_detaches(self, gestures, text_box):
        session = gestures.begin_resize(text_box, ResizeAnchor.S, Point(0, 0))
        gestures.teardown()
        assert not session.is_active
        assert not session.is_listening

    def test_new_gesture_ends_previous(self, gestures, text_box):
        first = gestures.begin_move(text_box, Point(0, 0))
        second = gestures.begin_resize(text_box, ResizeAnchor.E, Point(0, 0))
        assert not first.is_listening
        assert gestures.active_session is second

    def test_pointer_events_drive_session(self, store, gestures, text_box):
        finished = []
        gestures.gesture_finished.connect(finished.append)
        session = gestures.begin_move(text_box, Point(0, 0))

        session.eventFilter(None, mouse_event(QEvent.MouseMove, 10, 5))
        assert bounds_of(store, text_box) == (110, 205, 150, 40)

        session.eventFilter(None, mouse_event(QEvent.MouseButtonRelease, 20, 10, Qt.LeftButton))
        assert bounds_of(store, text_box) == (120, 210, 150, 40)
        assert finished == [text_box]
        assert not session.is_listening

    def test_escape_restores_initial_bounds(self, store, gestures, text_box):
        session = gestures.begin_resize(text_box, ResizeAnchor.SE, Point(0, 0))
        session.move_to(Point(80, 80))
        consumed = session.eventFilter(None, QKeyEvent(QEvent.KeyPress, Qt.Key_Escape, Qt.NoModifier))
        assert consumed is True
        assert bounds_of(store, text_box) == (100, 200, 150, 40)
        assert not session.is_active


EXTREME_DELTAS = [0.0, -0.0, 1e-9, -1e-9, 1e6, -1e6, 1e12, -1e12, 1e300, -1e300,
                  math.inf, -math.inf, math.nan]
SCALES = [1e-6, 0.1, 0.5, 1.0, 2.0, 10.0, 1e6]


def random_delta(rng):
    if rng.random() < 0.2:
        return rng.choice(EXTREME_DELTAS)
    return rng.uniform(-5000, 5000)


@pytest.mark.parametrize("seed", range(5))
def test_size_stays_positive_for_any_pointer_path(store, gestures, zoom, text_box, seed):
    rng = random.Random(seed)
    modes = list(ResizeAnchor) + [None]

    for _ in range(200):
        zoom.scale = rng.choice(SCALES)
        before = store.get(text_box).bounds
        anchor = rng.choice(modes)
        start = Point(rng.uniform(-1000, 1000), rng.uniform(-1000, 1000))
        if anchor is None:
            session = gestures.begin_move(text_box, start)
        else:
            session = gestures.begin_resize(text_box, anchor, start)
        assert session is not None

        for _ in range(5):
            session.move_to(Point(start.x + random_delta(rng), start.y + random_delta(rng)))
            bounds = store.get(text_box).bounds
            assert bounds.width > 0 and bounds.height > 0
            assert all(math.isfinite(v) for v in bounds.as_tuple())
            if anchor is None:
                assert (bounds.width, bounds.height) == (before.width, before.height)
        session.finish()


@pytest.mark.parametrize("anchor", list(ResizeAnchor))
@pytest.mark.parametrize("delta", [-1e9, -500.0, -1.0, 0.0, 1.0, 500.0, 1e9])
def test_resize_bounds_respects_minimum(anchor, delta):
    initial = Rect(100, 200, 150, 40)
    result = resize_bounds(initial, anchor, delta, delta, 20)
    assert result.width >= 20 and result.height >= 20
    if anchor.moves_left_edge:
        assert result.right == pytest.approx(initial.right)
    if anchor.moves_top_edge:
        assert result.bottom == pytest.approx(initial.bottom)
