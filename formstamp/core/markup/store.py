"""
In-memory store for every markup annotation of the open document.
"""
import logging
import uuid
from dataclasses import fields, replace
from typing import Any, Dict, Iterator, List, Mapping, Optional

from PyQt5.QtCore import QObject, pyqtSignal

from .geometry import MIN_SCREEN_SIZE, is_finite
from .models import (
    BOUNDS_FIELDS,
    IDENTITY_FIELDS,
    Annotation,
    InteractionState,
    MarkupTool,
    Point,
    ToolDefaults,
)

logger = logging.getLogger(__name__)


class MarkupStore(QObject):
    """
    Authoritative collection of annotations plus the engine's interaction
    state (armed tool, selection, pending placement, edit target).

    Annotations are kept in creation order and indexed by page, so
    ``by_page`` only touches the annotations of the requested page.
    Every anomaly (stale id, degenerate size) degrades to a logged no-op
    or a clamp; nothing here raises for bad geometry.
    """

    # Signals
    annotations_changed = pyqtSignal(int)  # page number that changed
    selection_changed = pyqtSignal(object)  # selected id or None
    state_changed = pyqtSignal()  # tool / placement / toolbar state

    def __init__(self, parent=None):
        super().__init__(parent)

        self._annotations: Dict[str, Annotation] = {}
        self._page_index: Dict[int, List[str]] = {}
        self.state = InteractionState()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get(self, annotation_id: Optional[str]) -> Optional[Annotation]:
        if annotation_id is None:
            return None
        return self._annotations.get(annotation_id)

    def by_page(self, page_number: int) -> List[Annotation]:
        """
        Annotations on a page, in creation order.

        Args:
            page_number: 1-based page number

        Returns:
            A fresh list built from the current state on every call
        """
        return [self._annotations[i] for i in self._page_index.get(page_number, [])]

    def selected_annotation(self) -> Optional[Annotation]:
        return self.get(self.state.selected_annotation_id)

    def count(self) -> int:
        return len(self._annotations)

    def __iter__(self) -> Iterator[Annotation]:
        return iter(list(self._annotations.values()))

    def __contains__(self, annotation_id) -> bool:
        return annotation_id in self._annotations

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create(self, annotation: Annotation, min_size: float = MIN_SCREEN_SIZE) -> str:
        """
        Insert a new annotation and select it.

        Args:
            annotation: Fully-formed annotation; an id is assigned if absent
            min_size: Footprint used when width/height are degenerate

        Returns:
            The id of the stored annotation
        """
        if not isinstance(annotation, Annotation):
            raise TypeError(f"Expected an Annotation, got {type(annotation).__name__}")

        annotation_id = annotation.id
        if not annotation_id or annotation_id in self._annotations:
            if annotation_id:
                logger.warning("Annotation id %s already in use, assigning a new one", annotation_id)
            annotation_id = self._generate_id()

        width = self._sanitize_dimension(annotation.width, min_size, annotation_id, "width")
        height = self._sanitize_dimension(annotation.height, min_size, annotation_id, "height")
        x = annotation.x if is_finite(annotation.x) else 0.0
        y = annotation.y if is_finite(annotation.y) else 0.0

        stored = replace(annotation, id=annotation_id, x=x, y=y, width=width, height=height)
        self._annotations[annotation_id] = stored
        self._page_index.setdefault(stored.page_number, []).append(annotation_id)

        self.state.selected_annotation_id = annotation_id
        self.state.pending_placement = None

        logger.debug("Created %s %s on page %d", stored.variant.value, annotation_id, stored.page_number)
        self.annotations_changed.emit(stored.page_number)
        self.selection_changed.emit(annotation_id)
        self.state_changed.emit()
        return annotation_id

    def update(self, annotation_id: str, changes: Mapping[str, Any],
               min_size: float = MIN_SCREEN_SIZE) -> bool:
        """
        Merge field changes into an existing annotation.

        An unknown id is treated as an annotation deleted while an
        interaction still referenced it, and ignored.

        Args:
            annotation_id: Target annotation
            changes: Field name to new value
            min_size: Footprint used when width/height are degenerate

        Returns:
            True if the annotation existed and was updated
        """
        current = self._annotations.get(annotation_id)
        if current is None:
            logger.debug("Ignoring update for missing annotation %s", annotation_id)
            return False

        allowed = {f.name for f in fields(current)} - IDENTITY_FIELDS
        clean: Dict[str, Any] = {}
        for name, value in changes.items():
            if name not in allowed:
                logger.debug("Ignoring field %r on %s", name, annotation_id)
                continue
            if name in BOUNDS_FIELDS:
                if name in ("width", "height"):
                    value = self._sanitize_dimension(value, min_size, annotation_id, name)
                elif not is_finite(value):
                    logger.debug("Dropping non-finite %s on %s", name, annotation_id)
                    continue
            clean[name] = value

        if not clean:
            return True

        self._annotations[annotation_id] = replace(current, **clean)
        self.annotations_changed.emit(current.page_number)
        return True

    def delete(self, annotation_id: str) -> bool:
        """
        Remove an annotation; deleting twice is harmless.

        Returns:
            True if something was removed
        """
        annotation = self._annotations.pop(annotation_id, None)
        if annotation is None:
            return False

        page_ids = self._page_index.get(annotation.page_number, [])
        if annotation_id in page_ids:
            page_ids.remove(annotation_id)
        if not page_ids:
            self._page_index.pop(annotation.page_number, None)

        if self.state.editing_annotation_id == annotation_id:
            self.state.editing_annotation_id = None

        self.annotations_changed.emit(annotation.page_number)
        if self.state.selected_annotation_id == annotation_id:
            self.select(None)
        return True

    def select(self, annotation_id: Optional[str]) -> None:
        """Select an annotation; a missing id deselects."""
        if annotation_id is not None and annotation_id not in self._annotations:
            logger.debug("Selecting missing annotation %s, deselecting instead", annotation_id)
            annotation_id = None

        if self.state.selected_annotation_id == annotation_id:
            return

        self.state.selected_annotation_id = annotation_id
        self.selection_changed.emit(annotation_id)

    def clear_all(self) -> None:
        """Drop every annotation and the selection."""
        pages = list(self._page_index.keys())
        self._annotations.clear()
        self._page_index.clear()
        self.state.editing_annotation_id = None
        for page_number in pages:
            self.annotations_changed.emit(page_number)
        self.select(None)

    def reset(self) -> None:
        """Start a fresh document session."""
        self.clear_all()
        collapsed = self.state.toolbar_collapsed
        defaults = self.state.tool_defaults
        self.state = InteractionState(toolbar_collapsed=collapsed, tool_defaults=defaults)
        self.state_changed.emit()

    # ------------------------------------------------------------------
    # Interaction state setters
    # ------------------------------------------------------------------

    def set_active_tool(self, tool: Optional[MarkupTool]) -> None:
        """
        Arm a tool, or disarm with None.

        A captured placement belongs to the tool it was captured for, so it
        is dropped whenever the armed tool changes.
        """
        if self.state.active_tool == tool:
            return
        self.state.active_tool = tool
        self.state.pending_placement = None
        self.state_changed.emit()

    def set_pending_placement(self, point: Optional[Point]) -> None:
        if point is not None and self.state.active_tool is None:
            logger.debug("No tool armed, ignoring placement at %s", point)
            return
        self.state.pending_placement = point
        self.state_changed.emit()

    def set_editing_annotation(self, annotation_id: Optional[str]) -> None:
        self.state.editing_annotation_id = annotation_id
        self.state_changed.emit()

    def set_toolbar_collapsed(self, collapsed: bool) -> None:
        if self.state.toolbar_collapsed == collapsed:
            return
        self.state.toolbar_collapsed = collapsed
        self.state_changed.emit()

    def toggle_toolbar_collapsed(self) -> None:
        self.set_toolbar_collapsed(not self.state.toolbar_collapsed)

    # Tool defaults

    @property
    def tool_defaults(self) -> ToolDefaults:
        return self.state.tool_defaults

    def set_highlight_color(self, color: str) -> None:
        self.state.tool_defaults.highlight_color = color

    def set_highlight_opacity(self, opacity: float) -> None:
        self.state.tool_defaults.highlight_opacity = opacity

    def set_text_font_size(self, size: float) -> None:
        self.state.tool_defaults.text_font_size = size

    def set_text_font_family(self, family: str) -> None:
        self.state.tool_defaults.text_font_family = family

    def set_text_color(self, color: str) -> None:
        self.state.tool_defaults.text_color = color

    def set_date_time_format(self, fmt: str) -> None:
        self.state.tool_defaults.date_time_format = fmt

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _generate_id() -> str:
        return f"annotation_{uuid.uuid4().hex}"

    @staticmethod
    def _sanitize_dimension(value: Any, min_size: float, annotation_id: str, name: str) -> float:
        if is_finite(value) and value > 0:
            return float(value)
        logger.warning("Clamping degenerate %s=%r on %s to %s", name, value, annotation_id, min_size)
        return float(min_size)
