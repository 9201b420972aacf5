"""
Controller turning tool, click and edit events into store mutations.
"""
import logging
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple

from PyQt5.QtCore import QObject, pyqtSignal

from formstamp.core.markup import (
    Annotation,
    HighlightShape,
    MarkupStore,
    MarkupTool,
    Point,
    TextAlign,
    annotation_class_for,
)
from formstamp.core.markup.datetime_format import format_date_time
from formstamp.core.markup.geometry import is_valid_scale, min_document_size, point_to_document
from formstamp.core.markup.models import IDENTITY_FIELDS

logger = logging.getLogger(__name__)


class InteractionPhase(Enum):
    IDLE = "idle"
    TOOL_ARMED = "tool_armed"
    AWAITING_CONFIGURATION = "awaiting_configuration"
    SELECTED = "selected"


@dataclass(frozen=True)
class ControllerState:
    """Snapshot of where the placement/edit state machine is."""

    phase: InteractionPhase
    tool: Optional[MarkupTool] = None
    point: Optional[Point] = None
    editing_id: Optional[str] = None
    selected_id: Optional[str] = None


@dataclass
class PageContext:
    """What the page surface reports about the page currently shown."""

    page_number: int = 1
    scale: float = 1.0
    container_width: float = 0.0
    container_height: float = 0.0


@dataclass
class ConfigurationRequest:
    """Ask a configuration step to collect a payload for ``tool``."""

    tool: MarkupTool
    page_number: int
    prefill: Dict[str, Any] = field(default_factory=dict)
    placement: Optional[Point] = None
    editing_id: Optional[str] = None

    @property
    def is_edit(self) -> bool:
        return self.editing_id is not None


@dataclass
class ConfigurationResult:
    committed: bool
    payload: Optional[Dict[str, Any]] = None


class ConfigurationProvider:
    """
    Collects a variant payload from the user.

    Implementations may resolve synchronously (modal dialogs) by returning
    a result, or return None and later call ``InteractionController.commit``
    or ``cancel`` themselves.
    """

    def configure(self, request: ConfigurationRequest) -> Optional[ConfigurationResult]:
        raise NotImplementedError


# Footprint (document units) used when a payload carries no size
DEFAULT_SIZES: Dict[MarkupTool, Tuple[float, float]] = {
    MarkupTool.IMAGE_STAMP: (150.0, 100.0),
    MarkupTool.HIGHLIGHT_AREA: (200.0, 50.0),
    MarkupTool.SIGNATURE: (200.0, 80.0),
    MarkupTool.DATE_TIME_STAMP: (120.0, 30.0),
    MarkupTool.TEXT_AREA: (200.0, 100.0),
    MarkupTool.IMAGE_ATTACHMENT: (200.0, 150.0),
}

_ENUM_FIELDS = {"shape": HighlightShape, "text_align": TextAlign}


def default_size(tool: MarkupTool, payload: Mapping[str, Any]) -> Tuple[float, float]:
    """
    Footprint for a new annotation whose payload has no width/height.

    Date/time stamps are sized to their formatted text.
    """
    width, height = DEFAULT_SIZES[tool]
    if tool == MarkupTool.DATE_TIME_STAMP and payload.get("date_time") is not None:
        text = format_date_time(payload["date_time"], payload.get("format") or "",
                                payload.get("timezone"))
        width = max(len(text) * 8.0, 120.0)
    return width, height


def coerce_payload(annotation_cls, payload: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Keep only fields the variant knows, converting enum values given as
    strings. Identity fields are never taken from a payload.

    Raises:
        ValueError: if an enum field holds a value the enum does not define
    """
    known = {f.name for f in fields(annotation_cls)} - IDENTITY_FIELDS
    clean: Dict[str, Any] = {}
    for name, value in payload.items():
        if name not in known:
            if name not in ("variant", "type"):
                logger.debug("Dropping unknown payload field %r for %s", name, annotation_cls.__name__)
            continue
        enum_cls = _ENUM_FIELDS.get(name)
        if enum_cls is not None and not isinstance(value, enum_cls):
            value = enum_cls(value)
        clean[name] = value
    return clean


class InteractionController(QObject):
    """
    Placement / selection / edit state machine.

    States are derived from the store plus the outstanding configuration
    request: Idle, ToolArmed(tool), AwaitingConfiguration(tool, point,
    editing) and Selected(id). The controller is the only place
    annotations get created.
    """

    # Signals
    state_changed = pyqtSignal()
    configuration_requested = pyqtSignal(object)  # ConfigurationRequest
    annotation_committed = pyqtSignal(str)  # id created or updated

    def __init__(self, store: MarkupStore,
                 provider: Optional[ConfigurationProvider] = None,
                 min_screen_size: float = 20.0, parent=None):
        super().__init__(parent)
        self.store = store
        self.provider = provider
        self.min_screen_size = min_screen_size
        self.page = PageContext()
        self._request: Optional[ConfigurationRequest] = None

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def state(self) -> ControllerState:
        s = self.store.state
        if self._request is not None:
            return ControllerState(
                InteractionPhase.AWAITING_CONFIGURATION,
                tool=self._request.tool,
                point=self._request.placement,
                editing_id=self._request.editing_id,
                selected_id=s.selected_annotation_id,
            )
        if s.active_tool is not None:
            return ControllerState(InteractionPhase.TOOL_ARMED, tool=s.active_tool,
                                   selected_id=s.selected_annotation_id)
        if s.selected_annotation_id is not None:
            return ControllerState(InteractionPhase.SELECTED, selected_id=s.selected_annotation_id)
        return ControllerState(InteractionPhase.IDLE)

    @property
    def phase(self) -> InteractionPhase:
        return self.state.phase

    @property
    def pending_request(self) -> Optional[ConfigurationRequest]:
        return self._request

    def set_page(self, page_number: int, scale: float,
                 container_width: float = 0.0, container_height: float = 0.0) -> None:
        """Bind to the page the surface is currently showing."""
        self.page = PageContext(page_number, scale, container_width, container_height)

    def min_size(self) -> float:
        return min_document_size(self.page.scale, self.min_screen_size)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def arm_tool(self, tool: Optional[MarkupTool]) -> None:
        """
        Arm ``tool``; arming the tool that is already armed disarms it.

        Arming while a configuration step is outstanding cancels that step
        first.
        """
        previous = self.store.state.active_tool
        if self._request is not None:
            previous = self._request.tool if not self._request.is_edit else None
            self.cancel()

        if tool is None or tool == previous:
            self.store.set_active_tool(None)
        else:
            self.store.set_active_tool(tool)
        self.state_changed.emit()

    def surface_click(self, screen_point: Point) -> None:
        """
        Handle a click on the bare page surface (never on an annotation).

        Args:
            screen_point: Pixel position relative to the page surface origin
        """
        if self._request is not None:
            logger.debug("Configuration pending, ignoring surface click")
            return
        if not is_valid_scale(self.page.scale):
            logger.debug("Invalid scale %r, ignoring surface click", self.page.scale)
            return

        tool = self.store.state.active_tool
        self.store.select(None)
        if tool is None:
            self.state_changed.emit()
            return

        point = point_to_document(screen_point, self.page.scale)
        self.store.set_pending_placement(point)
        self._request_configuration(ConfigurationRequest(
            tool=tool,
            page_number=self.page.page_number,
            prefill=self.store.tool_defaults.for_tool(tool),
            placement=point,
        ))

    def element_click(self, annotation_id: str) -> None:
        """Clicking an annotation selects it; it never places or edits."""
        if self._request is not None:
            return
        self.store.select(annotation_id)
        self.state_changed.emit()

    def invoke_edit(self, annotation_id: Optional[str] = None) -> None:
        """Open the configuration step pre-filled from the selected annotation."""
        if self._request is not None:
            return
        selected = self.store.state.selected_annotation_id
        annotation_id = annotation_id or selected
        if annotation_id is None or annotation_id != selected:
            logger.debug("Edit requested for unselected annotation %s", annotation_id)
            return
        annotation = self.store.get(annotation_id)
        if annotation is None:
            logger.debug("Edit requested for missing annotation %s", annotation_id)
            return

        self.store.set_active_tool(None)
        self.store.set_editing_annotation(annotation_id)
        self._request_configuration(ConfigurationRequest(
            tool=annotation.variant,
            page_number=annotation.page_number,
            prefill=annotation.payload(),
            placement=Point(annotation.x, annotation.y),
            editing_id=annotation_id,
        ))

    def commit(self, payload: Mapping[str, Any]) -> Optional[str]:
        """
        Finish the outstanding configuration step.

        Creates a new annotation at the pending placement, or in edit mode
        updates only the fields that changed.

        Returns:
            Id of the created/updated annotation, or None if nothing happened
        """
        request = self._request
        if request is None:
            logger.debug("Commit without a pending configuration step")
            return None
        self._request = None

        try:
            if request.is_edit:
                result = self._commit_edit(request, payload)
            else:
                result = self._commit_create(request, payload)
        except (ValueError, TypeError) as e:
            logger.warning("Dropping %s commit with invalid payload: %s", request.tool.value, e)
            result = None
        finally:
            self._clear_transient()
        if result is not None:
            self.annotation_committed.emit(result)
        return result

    def cancel(self) -> None:
        """Abandon the configuration step; tool, placement and edit target all reset."""
        self._request = None
        self._clear_transient()

    def resolve(self, result: Optional[ConfigurationResult]) -> None:
        if result is None:
            return
        if result.committed and result.payload is not None:
            self.commit(result.payload)
        else:
            self.cancel()

    def delete(self, annotation_id: str) -> None:
        self.store.delete(annotation_id)
        self.state_changed.emit()

    def delete_selected(self) -> None:
        selected = self.store.state.selected_annotation_id
        if selected is not None:
            self.delete(selected)

    def escape(self) -> None:
        """Back out one level: configuration, then armed tool, then selection."""
        if self._request is not None:
            self.cancel()
        elif self.store.state.active_tool is not None:
            self.arm_tool(None)
        else:
            self.store.select(None)
            self.state_changed.emit()

    def reset(self) -> None:
        """Forget everything for a new document session."""
        self._request = None
        self.store.reset()
        self.state_changed.emit()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _request_configuration(self, request: ConfigurationRequest) -> None:
        self._request = request
        self.state_changed.emit()
        self.configuration_requested.emit(request)
        if self.provider is not None and self._request is request:
            self.resolve(self.provider.configure(request))

    def _commit_create(self, request: ConfigurationRequest,
                       payload: Mapping[str, Any]) -> Optional[str]:
        placement = self.store.state.pending_placement or request.placement
        if placement is None:
            logger.warning("No placement recorded for %s, dropping commit", request.tool.value)
            return None

        annotation_cls = annotation_class_for(request.tool)
        data = coerce_payload(annotation_cls, payload)
        data.pop("x", None)
        data.pop("y", None)
        width, height = default_size(request.tool, data)
        data.setdefault("width", width)
        data.setdefault("height", height)

        annotation: Annotation = annotation_cls(
            page_number=request.page_number, x=placement.x, y=placement.y, **data
        )
        return self.store.create(annotation, min_size=self.min_size())

    def _commit_edit(self, request: ConfigurationRequest,
                     payload: Mapping[str, Any]) -> Optional[str]:
        current = self.store.get(request.editing_id)
        if current is None:
            logger.debug("Annotation %s deleted during edit, dropping commit", request.editing_id)
            return None

        data = coerce_payload(type(current), payload)
        changed = {
            name: value for name, value in data.items()
            if getattr(current, name) != value
        }
        if changed:
            self.store.update(current.id, changed, min_size=self.min_size())
        return current.id

    def _clear_transient(self) -> None:
        self.store.set_active_tool(None)
        self.store.set_pending_placement(None)
        self.store.set_editing_annotation(None)
        self.state_changed.emit()
