"""
Data model for markup annotations and the engine's interaction state.
"""
from dataclasses import dataclass, field, fields, replace
from datetime import datetime
from enum import Enum
from typing import Any, ClassVar, Dict, Optional, Tuple, Type


# ==============================================================================
# Enums
# ==============================================================================


class MarkupTool(Enum):
    """The six placeable markup kinds."""

    IMAGE_STAMP = "image-stamp"
    HIGHLIGHT_AREA = "highlight-area"
    SIGNATURE = "signature"
    DATE_TIME_STAMP = "date-time-stamp"
    TEXT_AREA = "text-area"
    IMAGE_ATTACHMENT = "image-attachment"

    @property
    def label(self) -> str:
        return TOOL_LABELS[self]


TOOL_LABELS = {
    MarkupTool.IMAGE_STAMP: "Image Stamp",
    MarkupTool.HIGHLIGHT_AREA: "Highlight Area",
    MarkupTool.SIGNATURE: "Signature",
    MarkupTool.DATE_TIME_STAMP: "Date/Time Stamp",
    MarkupTool.TEXT_AREA: "Text Area",
    MarkupTool.IMAGE_ATTACHMENT: "Image Attachment",
}


class ResizeAnchor(Enum):
    """The eight resize handles around a selected annotation."""

    NW = "nw"
    N = "n"
    NE = "ne"
    E = "e"
    SE = "se"
    S = "s"
    SW = "sw"
    W = "w"

    @property
    def moves_left_edge(self) -> bool:
        return "w" in self.value

    @property
    def moves_right_edge(self) -> bool:
        return "e" in self.value

    @property
    def moves_top_edge(self) -> bool:
        return "n" in self.value

    @property
    def moves_bottom_edge(self) -> bool:
        return "s" in self.value


class HighlightShape(Enum):
    RECTANGLE = "rectangle"
    FREEFORM = "freeform"


class TextAlign(Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


# ==============================================================================
# Geometry primitives
# ==============================================================================


@dataclass(frozen=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle, origin at the top-left corner."""

    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def contains(self, px: float, py: float) -> bool:
        return self.x <= px <= self.right and self.y <= py <= self.bottom

    def translated(self, dx: float, dy: float) -> "Rect":
        return Rect(self.x + dx, self.y + dy, self.width, self.height)

    def as_tuple(self) -> Tuple[float, float, float, float]:
        return (self.x, self.y, self.width, self.height)


# ==============================================================================
# Annotations
# ==============================================================================

# Fields every variant shares; edits never touch the identity ones.
IDENTITY_FIELDS = frozenset({"id", "page_number", "created_at"})
BOUNDS_FIELDS = ("x", "y", "width", "height")


@dataclass
class Annotation:
    """Base record for one placed markup object."""

    variant: ClassVar[MarkupTool]

    page_number: int  # 1-based
    x: float
    y: float
    width: float
    height: float
    id: str = ""
    created_at: datetime = field(default_factory=datetime.now)

    @property
    def bounds(self) -> Rect:
        return Rect(self.x, self.y, self.width, self.height)

    @classmethod
    def payload_field_names(cls) -> Tuple[str, ...]:
        """Names of the variant-specific fields."""
        base = {f.name for f in fields(Annotation)}
        return tuple(f.name for f in fields(cls) if f.name not in base)

    def payload(self) -> Dict[str, Any]:
        """
        Variant payload plus the current footprint.

        This is what a configuration step receives as pre-fill data when
        an existing annotation is edited.
        """
        data = {name: getattr(self, name) for name in self.payload_field_names()}
        data["width"] = self.width
        data["height"] = self.height
        return data

    def copy_with(self, **changes) -> "Annotation":
        return replace(self, **changes)


@dataclass
class ImageStampAnnotation(Annotation):
    variant: ClassVar[MarkupTool] = MarkupTool.IMAGE_STAMP

    image_data: str = ""
    opacity: float = 1.0
    rotation: float = 0.0


@dataclass
class HighlightAnnotation(Annotation):
    variant: ClassVar[MarkupTool] = MarkupTool.HIGHLIGHT_AREA

    color: str = "#ffff00"
    opacity: float = 0.3
    # Freeform only changes the drawn style; no traced path is stored.
    shape: HighlightShape = HighlightShape.RECTANGLE


@dataclass
class SignatureAnnotation(Annotation):
    variant: ClassVar[MarkupTool] = MarkupTool.SIGNATURE

    signature_data: str = ""


@dataclass
class DateTimeStampAnnotation(Annotation):
    variant: ClassVar[MarkupTool] = MarkupTool.DATE_TIME_STAMP

    date_time: datetime = field(default_factory=datetime.now)
    format: str = "MM/dd/yyyy HH:mm:ss"
    timezone: Optional[str] = None
    auto_update: bool = False


@dataclass
class TextAreaAnnotation(Annotation):
    variant: ClassVar[MarkupTool] = MarkupTool.TEXT_AREA

    text: str = ""
    font_size: float = 14.0
    font_family: str = "Arial, sans-serif"
    color: str = "#000000"
    background_color: Optional[str] = None
    border_color: Optional[str] = None
    text_align: TextAlign = TextAlign.LEFT
    bold: bool = False
    italic: bool = False
    underline: bool = False


@dataclass
class ImageAttachmentAnnotation(Annotation):
    variant: ClassVar[MarkupTool] = MarkupTool.IMAGE_ATTACHMENT

    attachment_id: str = ""
    attachment_name: str = ""
    image_data: str = ""


ANNOTATION_TYPES: Dict[MarkupTool, Type[Annotation]] = {
    MarkupTool.IMAGE_STAMP: ImageStampAnnotation,
    MarkupTool.HIGHLIGHT_AREA: HighlightAnnotation,
    MarkupTool.SIGNATURE: SignatureAnnotation,
    MarkupTool.DATE_TIME_STAMP: DateTimeStampAnnotation,
    MarkupTool.TEXT_AREA: TextAreaAnnotation,
    MarkupTool.IMAGE_ATTACHMENT: ImageAttachmentAnnotation,
}


def annotation_class_for(tool: MarkupTool) -> Type[Annotation]:
    return ANNOTATION_TYPES[tool]


# ==============================================================================
# Interaction state
# ==============================================================================


@dataclass
class ToolDefaults:
    """Session-wide defaults handed to configuration steps on create."""

    highlight_color: str = "#ffff00"
    highlight_opacity: float = 0.3
    text_font_size: float = 14.0
    text_font_family: str = "Arial, sans-serif"
    text_color: str = "#000000"
    date_time_format: str = "MM/dd/yyyy HH:mm:ss"

    def for_tool(self, tool: MarkupTool) -> Dict[str, Any]:
        if tool == MarkupTool.HIGHLIGHT_AREA:
            return {"color": self.highlight_color, "opacity": self.highlight_opacity}
        if tool == MarkupTool.TEXT_AREA:
            return {
                "font_size": self.text_font_size,
                "font_family": self.text_font_family,
                "color": self.text_color,
            }
        if tool == MarkupTool.DATE_TIME_STAMP:
            return {"format": self.date_time_format}
        return {}


@dataclass
class InteractionState:
    """Per-session interaction state; never persisted."""

    active_tool: Optional[MarkupTool] = None
    selected_annotation_id: Optional[str] = None
    pending_placement: Optional[Point] = None  # document space
    editing_annotation_id: Optional[str] = None
    toolbar_collapsed: bool = False
    tool_defaults: ToolDefaults = field(default_factory=ToolDefaults)
