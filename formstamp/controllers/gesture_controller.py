"""
Drag and resize handling for the selected annotation.
"""
import logging
from enum import Enum
from typing import Callable, Optional

from PyQt5.QtCore import QEvent, QObject, Qt, pyqtSignal
from PyQt5.QtWidgets import QApplication

from formstamp.core.markup import MarkupStore, Point, Rect, ResizeAnchor
from formstamp.core.markup.geometry import (
    MIN_SCREEN_SIZE,
    is_finite,
    is_valid_scale,
    min_document_size,
)

logger = logging.getLogger(__name__)


class GestureMode(Enum):
    MOVE = "move"
    RESIZE = "resize"


def move_bounds(initial: Rect, dx: float, dy: float) -> Rect:
    """Translate ``initial`` by a document-space delta."""
    return initial.translated(dx, dy)


def resize_bounds(initial: Rect, anchor: ResizeAnchor, dx: float, dy: float,
                  min_size: float) -> Rect:
    """
    Resize ``initial`` by dragging ``anchor`` by a document-space delta.

    Edges not touched by the anchor stay put. A dimension that would drop
    below ``min_size`` is pinned to it; for anchors on the left/top side
    the position is recomputed so the opposite edge does not move.

    Args:
        initial: Bounds when the gesture started
        anchor: Handle being dragged
        dx, dy: Pointer delta in document units
        min_size: Minimum width/height in document units

    Returns:
        The new bounds
    """
    x, y, width, height = initial.as_tuple()

    if anchor.moves_left_edge:
        x += dx
        width -= dx
    elif anchor.moves_right_edge:
        width += dx

    if anchor.moves_top_edge:
        y += dy
        height -= dy
    elif anchor.moves_bottom_edge:
        height += dy

    if width < min_size:
        width = min_size
        if anchor.moves_left_edge:
            x = initial.right - min_size
    if height < min_size:
        height = min_size
        if anchor.moves_top_edge:
            y = initial.bottom - min_size

    return Rect(x, y, width, height)


class GestureSession(QObject):
    """
    One continuous drag or resize, from pointer-down to pointer-up.

    While active the session listens to application-wide mouse events
    through an event filter, so the gesture keeps tracking when the pointer
    leaves the annotation. The filter is removed on finish, cancel or
    teardown. Deltas are always applied to the bounds captured at
    pointer-down, never to the live bounds.
    """

    finished = pyqtSignal(str)  # annotation id

    def __init__(self, store: MarkupStore, annotation_id: str, mode: GestureMode,
                 start: Point, initial: Rect, scale_source: Callable[[], float],
                 anchor: Optional[ResizeAnchor] = None,
                 min_screen_size: float = MIN_SCREEN_SIZE, parent=None):
        super().__init__(parent)
        self.store = store
        self.annotation_id = annotation_id
        self.mode = mode
        self.anchor = anchor
        self.start = start
        self.initial = initial
        self.min_screen_size = min_screen_size
        self._scale_source = scale_source
        self._active = True
        self._filter_target: Optional[QObject] = None

    @property
    def is_active(self) -> bool:
        return self._active

    @property
    def is_listening(self) -> bool:
        return self._filter_target is not None

    def attach(self) -> None:
        """Start receiving application-wide pointer events."""
        app = QApplication.instance()
        if app is None or self._filter_target is not None:
            return
        app.installEventFilter(self)
        self._filter_target = app

    def detach(self) -> None:
        if self._filter_target is not None:
            self._filter_target.removeEventFilter(self)
            self._filter_target = None

    def move_to(self, point: Point) -> Optional[Rect]:
        """
        Apply the pointer position to the annotation.

        Args:
            point: Current pointer position, same coordinate system as
                the start point

        Returns:
            The bounds written to the store, or None if nothing was written
        """
        if not self._active:
            return None

        scale = self._scale_source()
        if not is_valid_scale(scale) or not is_finite(point.x, point.y):
            logger.debug("Ignoring pointer move with scale=%r point=%s", scale, point)
            return None

        dx = (point.x - self.start.x) / scale
        dy = (point.y - self.start.y) / scale
        if not is_finite(dx, dy):
            return None

        min_size = min_document_size(scale, self.min_screen_size)
        if self.mode == GestureMode.MOVE:
            bounds = move_bounds(self.initial, dx, dy)
            changes = {"x": bounds.x, "y": bounds.y}
        else:
            bounds = resize_bounds(self.initial, self.anchor, dx, dy, min_size)
            changes = {"x": bounds.x, "y": bounds.y,
                       "width": bounds.width, "height": bounds.height}

        if not self.store.update(self.annotation_id, changes, min_size=min_size):
            # Annotation went away mid-gesture
            self.finish()
            return None
        return bounds

    def finish(self) -> None:
        """End the gesture, keeping the last applied bounds."""
        if not self._active:
            return
        self._active = False
        self.detach()
        self.finished.emit(self.annotation_id)

    def cancel(self) -> None:
        """End the gesture and put the annotation back where it started."""
        if not self._active:
            return
        self.store.update(self.annotation_id, {
            "x": self.initial.x, "y": self.initial.y,
            "width": self.initial.width, "height": self.initial.height,
        })
        self.finish()

    def eventFilter(self, obj, event):
        if not self._active:
            return False

        etype = event.type()
        if etype == QEvent.MouseMove:
            pos = event.globalPos()
            self.move_to(Point(pos.x(), pos.y()))
        elif etype == QEvent.MouseButtonRelease and event.button() == Qt.LeftButton:
            pos = event.globalPos()
            self.move_to(Point(pos.x(), pos.y()))
            self.finish()
        elif etype == QEvent.KeyPress and event.key() == Qt.Key_Escape:
            self.cancel()
            return True
        return False


class GestureController(QObject):
    """
    Starts drag/resize sessions for the selected annotation.

    At most one session exists at a time; starting another ends the
    previous one.
    """

    # Signals
    gesture_started = pyqtSignal(str, object)  # annotation id, GestureMode
    gesture_finished = pyqtSignal(str)

    def __init__(self, store: MarkupStore, scale_source: Callable[[], float],
                 min_screen_size: float = MIN_SCREEN_SIZE, parent=None):
        super().__init__(parent)
        self.store = store
        self.min_screen_size = min_screen_size
        self._scale_source = scale_source
        self._session: Optional[GestureSession] = None

    @property
    def active_session(self) -> Optional[GestureSession]:
        if self._session is not None and self._session.is_active:
            return self._session
        return None

    def begin_move(self, annotation_id: str, start: Point) -> Optional[GestureSession]:
        return self._begin(annotation_id, GestureMode.MOVE, start)

    def begin_resize(self, annotation_id: str, anchor: ResizeAnchor,
                     start: Point) -> Optional[GestureSession]:
        return self._begin(annotation_id, GestureMode.RESIZE, start, anchor)

    def teardown(self) -> None:
        """End any gesture in flight, e.g. when the page widget goes away."""
        session = self._session
        self._session = None
        if session is not None:
            session.finish()

    def _begin(self, annotation_id: str, mode: GestureMode, start: Point,
               anchor: Optional[ResizeAnchor] = None) -> Optional[GestureSession]:
        if self.store.state.selected_annotation_id != annotation_id:
            logger.debug("Gesture on unselected annotation %s ignored", annotation_id)
            return None
        annotation = self.store.get(annotation_id)
        if annotation is None:
            return None

        self.teardown()
        session = GestureSession(
            self.store, annotation_id, mode, start, annotation.bounds,
            self._scale_source, anchor=anchor, min_screen_size=self.min_screen_size,
            parent=self,
        )
        session.finished.connect(self._on_session_finished)
        session.attach()
        self._session = session
        self.gesture_started.emit(annotation_id, mode)
        return session

    def _on_session_finished(self, annotation_id: str) -> None:
        if self._session is not None and not self._session.is_active:
            self._session = None
        self.gesture_finished.emit(annotation_id)
