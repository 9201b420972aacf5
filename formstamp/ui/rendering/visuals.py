from dataclasses import dataclass, field
from typing import Dict, List, Optional

from formstamp.core.markup import Rect, ResizeAnchor, TextAlign

# ==============================================================================
# Variant visuals
# ==============================================================================


@dataclass
class Visual:
    """Positioned, styled element for one annotation (screen space)."""

    annotation_id: str
    rect: Rect


@dataclass
class HighlightVisual(Visual):
    color: str = "#ffff00"
    opacity: float = 0.3
    ellipse: bool = False


@dataclass
class ImageVisual(Visual):
    image_data: str = ""
    opacity: float = 1.0
    rotation: float = 0.0
    alt_text: str = ""


@dataclass
class DateTimeVisual(Visual):
    text: str = ""
    font_size: float = 14.0
    font_family: str = "Arial, sans-serif"
    background_color: str = "rgba(255, 255, 255, 0.9)"
    border_color: str = "#cccccc"


@dataclass
class TextVisual(Visual):
    text: str = ""
    lines: List[str] = field(default_factory=list)
    font_size: float = 14.0
    font_family: str = "Arial, sans-serif"
    color: str = "#000000"
    background_color: str = "rgba(255, 255, 255, 0.9)"
    border_color: str = "#cccccc"
    align: TextAlign = TextAlign.LEFT
    bold: bool = False
    italic: bool = False
    underline: bool = False
    padding: float = 4.0


# ==============================================================================
# Overlays independent of variant
# ==============================================================================


@dataclass
class SelectionDecoration:
    """Dashed outline, handles and control cluster of the selected element."""

    annotation_id: str
    outline: Rect
    anchors: Dict[ResizeAnchor, Rect]
    cluster: Rect
    drag_handle: Rect
    edit_button: Rect
    delete_button: Rect
    outline_color: str = "#2196f3"


@dataclass
class PlacementHint:
    """Badge shown while a tool is armed."""

    text: str
    rect: Rect
    background_color: str = "rgba(0, 0, 0, 0.7)"
    color: str = "#ffffff"
    tool_label: Optional[str] = None
