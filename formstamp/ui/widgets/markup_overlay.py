"""
Transparent page overlay hosting the markup annotations.
"""
import logging
from typing import Optional

from PyQt5.QtCore import Qt
from PyQt5.QtGui import QMouseEvent, QPainter
from PyQt5.QtWidgets import QWidget

from formstamp.config import MarkupSettings
from formstamp.controllers import GestureController, InteractionController
from formstamp.core.markup import MarkupStore, Point, ResizeAnchor
from formstamp.styles import ThemeColors, ThemeManager
from formstamp.ui.rendering import (
    HitResult,
    HitType,
    MarkupPainter,
    hit_test,
    render_page,
    render_placement_hint,
    render_selection,
)

logger = logging.getLogger(__name__)

_ANCHOR_CURSORS = {
    ResizeAnchor.NW: Qt.SizeFDiagCursor,
    ResizeAnchor.SE: Qt.SizeFDiagCursor,
    ResizeAnchor.NE: Qt.SizeBDiagCursor,
    ResizeAnchor.SW: Qt.SizeBDiagCursor,
    ResizeAnchor.N: Qt.SizeVerCursor,
    ResizeAnchor.S: Qt.SizeVerCursor,
    ResizeAnchor.E: Qt.SizeHorCursor,
    ResizeAnchor.W: Qt.SizeHorCursor,
}


class MarkupOverlay(QWidget):
    """
    Page surface for markup.

    Paints the annotations of one page at the current scale and routes
    pointer input: clicks on an annotation (or its controls) go to that
    annotation and never reach the placement handler; only clicks on bare
    page area count as placement/background clicks.
    """

    def __init__(self, store: MarkupStore, interaction: InteractionController,
                 settings: Optional[MarkupSettings] = None,
                 theme: Optional[ThemeColors] = None, parent=None):
        super().__init__(parent)
        self.store = store
        self.interaction = interaction
        self.settings = settings or MarkupSettings()
        self.theme = theme or ThemeManager.theme(False)
        self.gestures = GestureController(
            store, lambda: self.interaction.page.scale,
            min_screen_size=self.settings.min_screen_size, parent=self,
        )
        self.markup_painter = MarkupPainter(danger_color=self.theme.danger)

        self.setAttribute(Qt.WA_TranslucentBackground)
        self.setMouseTracking(True)
        self.setFocusPolicy(Qt.StrongFocus)

        self.store.annotations_changed.connect(self._on_annotations_changed)
        self.store.selection_changed.connect(lambda _id: self.update())
        self.store.state_changed.connect(self._on_state_changed)
        self.interaction.state_changed.connect(self._on_state_changed)

    # ------------------------------------------------------------------
    # Page binding
    # ------------------------------------------------------------------

    @property
    def page_number(self) -> int:
        return self.interaction.page.page_number

    @property
    def scale(self) -> float:
        return self.interaction.page.scale

    def set_page(self, page_number: int, scale: float, width: int, height: int) -> None:
        """Show ``page_number`` at ``scale`` in a ``width`` x ``height`` surface."""
        if page_number != self.page_number:
            self.gestures.teardown()
        self.interaction.set_page(page_number, scale, width, height)
        self.setFixedSize(width, height)
        self.update()

    def teardown(self) -> None:
        """Release gesture listeners; call before the surface goes away."""
        self.gestures.teardown()

    # ------------------------------------------------------------------
    # Painting
    # ------------------------------------------------------------------

    def paintEvent(self, event):
        painter = QPainter(self)
        try:
            painter.setRenderHint(QPainter.Antialiasing)
            annotations = self.store.by_page(self.page_number)
            for visual in render_page(annotations, self.scale):
                self.markup_painter.paint(painter, visual)

            selected = self.store.selected_annotation()
            if selected is not None and selected.page_number == self.page_number:
                decoration = render_selection(
                    selected, self.scale, self.settings.handle_size,
                    self.settings.control_cluster_offset,
                )
                decoration.outline_color = self.theme.selection_outline
                self.markup_painter.paint_selection(painter, decoration)

            tool = self.store.state.active_tool
            if tool is not None:
                hint = render_placement_hint(tool, self.width())
                self.markup_painter.paint_placement_hint(painter, hint)
        finally:
            painter.end()

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------

    def hit_at(self, x: float, y: float) -> HitResult:
        return hit_test(
            self.store.by_page(self.page_number),
            self.store.state.selected_annotation_id,
            x, y, self.scale,
            self.settings.handle_size,
            self.settings.control_cluster_offset,
        )

    def mousePressEvent(self, event: QMouseEvent):
        self.setFocus()
        if event.button() != Qt.LeftButton:
            return super().mousePressEvent(event)

        pos = event.pos()
        hit = self.hit_at(pos.x(), pos.y())
        global_pos = event.globalPos()
        start = Point(global_pos.x(), global_pos.y())

        if hit.type == HitType.ANCHOR:
            self.gestures.begin_resize(hit.annotation_id, hit.anchor, start)
        elif hit.type == HitType.DRAG_HANDLE:
            self.gestures.begin_move(hit.annotation_id, start)
        elif hit.type == HitType.EDIT:
            self.interaction.invoke_edit(hit.annotation_id)
        elif hit.type == HitType.DELETE:
            self.interaction.delete(hit.annotation_id)
        elif hit.type == HitType.ELEMENT:
            self.interaction.element_click(hit.annotation_id)
        else:
            self.interaction.surface_click(Point(pos.x(), pos.y()))
        event.accept()

    def mouseMoveEvent(self, event: QMouseEvent):
        if self.gestures.active_session is not None:
            # The session's application-wide filter does the work
            return
        pos = event.pos()
        self._update_cursor(self.hit_at(pos.x(), pos.y()))

    def keyPressEvent(self, event):
        if event.key() == Qt.Key_Escape:
            self.interaction.escape()
            event.accept()
        elif event.key() in (Qt.Key_Delete, Qt.Key_Backspace):
            self.interaction.delete_selected()
            event.accept()
        else:
            super().keyPressEvent(event)

    def hideEvent(self, event):
        self.teardown()
        super().hideEvent(event)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _update_cursor(self, hit: HitResult) -> None:
        if hit.type == HitType.ANCHOR:
            self.setCursor(_ANCHOR_CURSORS[hit.anchor])
        elif hit.type == HitType.DRAG_HANDLE:
            self.setCursor(Qt.OpenHandCursor)
        elif hit.type in (HitType.EDIT, HitType.DELETE):
            self.setCursor(Qt.PointingHandCursor)
        elif hit.type == HitType.BACKGROUND and self.store.state.active_tool is not None:
            self.setCursor(Qt.CrossCursor)
        else:
            self.setCursor(Qt.ArrowCursor)

    def _on_annotations_changed(self, page_number: int) -> None:
        if page_number == self.page_number:
            self.update()

    def _on_state_changed(self) -> None:
        if self.store.state.active_tool is not None:
            self.setCursor(Qt.CrossCursor)
        else:
            self.unsetCursor()
        self.update()
