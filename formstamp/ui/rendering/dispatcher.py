"""
Turns stored annotations into screen-space visual descriptions.

Everything here is a pure function of the annotation and the current
scale; nothing is cached between renders.
"""
from typing import Dict, List

from PyQt5.QtGui import QFont, QFontMetricsF

from formstamp.core.markup import (
    Annotation,
    DateTimeStampAnnotation,
    HighlightAnnotation,
    HighlightShape,
    ImageAttachmentAnnotation,
    ImageStampAnnotation,
    MarkupTool,
    Rect,
    ResizeAnchor,
    SignatureAnnotation,
    TextAreaAnnotation,
)
from formstamp.core.markup.datetime_format import format_date_time
from formstamp.core.markup.geometry import to_screen

from .visuals import (
    DateTimeVisual,
    HighlightVisual,
    ImageVisual,
    PlacementHint,
    SelectionDecoration,
    TextVisual,
    Visual,
)

DEFAULT_BACKGROUND = "rgba(255, 255, 255, 0.9)"
DEFAULT_BORDER = "#cccccc"

TEXT_PADDING = 4.0

HANDLE_SIZE = 8.0
CLUSTER_OFFSET = 24.0
CLUSTER_BUTTON_SIZE = 20.0


def render(annotation: Annotation, scale: float) -> Visual:
    """
    Build the visual for one annotation at the given scale.

    Args:
        annotation: Stored annotation (document space)
        scale: Current page scale

    Returns:
        A variant-specific visual positioned in screen pixels
    """
    rect = to_screen(annotation.bounds, scale)
    variant = annotation.variant

    if variant == MarkupTool.HIGHLIGHT_AREA:
        return _render_highlight(annotation, rect)
    if variant == MarkupTool.IMAGE_STAMP:
        return _render_image_stamp(annotation, rect)
    if variant == MarkupTool.SIGNATURE:
        return _render_signature(annotation, rect)
    if variant == MarkupTool.IMAGE_ATTACHMENT:
        return _render_attachment(annotation, rect)
    if variant == MarkupTool.DATE_TIME_STAMP:
        return _render_date_time(annotation, rect)
    if variant == MarkupTool.TEXT_AREA:
        return _render_text_area(annotation, rect, scale)
    raise ValueError(f"Unhandled markup variant: {variant!r}")


def render_page(annotations: List[Annotation], scale: float) -> List[Visual]:
    """Visuals for a page, in creation (paint) order."""
    return [render(annotation, scale) for annotation in annotations]


def _render_highlight(annotation: HighlightAnnotation, rect: Rect) -> HighlightVisual:
    return HighlightVisual(
        annotation_id=annotation.id,
        rect=rect,
        color=annotation.color or "#ffff00",
        opacity=annotation.opacity if annotation.opacity is not None else 0.3,
        ellipse=annotation.shape == HighlightShape.FREEFORM,
    )


def _render_image_stamp(annotation: ImageStampAnnotation, rect: Rect) -> ImageVisual:
    return ImageVisual(
        annotation_id=annotation.id,
        rect=rect,
        image_data=annotation.image_data,
        opacity=annotation.opacity if annotation.opacity is not None else 1.0,
        rotation=annotation.rotation or 0.0,
        alt_text="Image stamp",
    )


def _render_signature(annotation: SignatureAnnotation, rect: Rect) -> ImageVisual:
    return ImageVisual(annotation_id=annotation.id, rect=rect,
                       image_data=annotation.signature_data, alt_text="Signature")


def _render_attachment(annotation: ImageAttachmentAnnotation, rect: Rect) -> ImageVisual:
    return ImageVisual(annotation_id=annotation.id, rect=rect,
                       image_data=annotation.image_data,
                       alt_text=annotation.attachment_name or "Image attachment")


def _render_date_time(annotation: DateTimeStampAnnotation, rect: Rect) -> DateTimeVisual:
    # Re-derived every render so a format-only edit shows up immediately
    text = format_date_time(annotation.date_time, annotation.format, annotation.timezone)
    return DateTimeVisual(
        annotation_id=annotation.id,
        rect=rect,
        text=text,
        font_size=min(rect.height * 0.4, 14.0),
        background_color=DEFAULT_BACKGROUND,
        border_color=DEFAULT_BORDER,
    )


def _render_text_area(annotation: TextAreaAnnotation, rect: Rect, scale: float) -> TextVisual:
    font_size = (annotation.font_size or 12.0) * scale
    font_family = annotation.font_family or "Arial, sans-serif"
    font = text_font(font_family, font_size, bool(annotation.bold),
                     bool(annotation.italic), bool(annotation.underline))
    return TextVisual(
        annotation_id=annotation.id,
        rect=rect,
        text=annotation.text,
        lines=wrap_text(annotation.text, rect.width - 2 * TEXT_PADDING, font),
        font_size=font_size,
        font_family=font_family,
        color=annotation.color or "#000000",
        background_color=annotation.background_color or DEFAULT_BACKGROUND,
        border_color=annotation.border_color or DEFAULT_BORDER,
        align=annotation.text_align,
        bold=bool(annotation.bold),
        italic=bool(annotation.italic),
        underline=bool(annotation.underline),
        padding=TEXT_PADDING,
    )


def text_font(family: str, pixel_size: float, bold: bool = False,
              italic: bool = False, underline: bool = False) -> QFont:
    """
    Qt font for a CSS-style family list such as ``"Arial, sans-serif"``.

    Only the first family is requested; Qt substitutes when it is missing.
    """
    font = QFont(family.split(",")[0].strip() or "Arial")
    font.setPixelSize(max(int(round(pixel_size)), 1))
    font.setBold(bold)
    font.setItalic(italic)
    font.setUnderline(underline)
    return font


def wrap_text(text: str, available_width: float, font: QFont) -> List[str]:
    """
    Word-wrap ``text`` to the available width using the font's real metrics.

    Explicit line breaks are kept. A word wider than the line is broken
    between characters.

    Args:
        text: Text to lay out
        available_width: Line width in pixels
        font: Font the text will be drawn with

    Returns:
        The lines, each no wider than ``available_width`` unless a single
        character already is
    """
    metrics = QFontMetricsF(font)
    width = max(available_width, 1.0)

    def fits(candidate: str) -> bool:
        return metrics.horizontalAdvance(candidate) <= width

    lines: List[str] = []
    for paragraph in text.split("\n"):
        words = paragraph.split()
        if not words:
            lines.append("")
            continue

        current = ""
        for word in words:
            candidate = f"{current} {word}" if current else word
            if fits(candidate):
                current = candidate
                continue
            if current:
                lines.append(current)
                current = ""
            # Break an overlong word into chunks that fit
            for char in word:
                if current and not fits(current + char):
                    lines.append(current)
                    current = ""
                current += char
        lines.append(current)
    return lines


def anchor_rects(rect: Rect, handle_size: float = HANDLE_SIZE) -> Dict[ResizeAnchor, Rect]:
    """Hit-targets for the eight resize handles, centred on the box edges."""
    half = handle_size / 2
    cx = rect.x + rect.width / 2
    cy = rect.y + rect.height / 2
    centres = {
        ResizeAnchor.NW: (rect.x, rect.y),
        ResizeAnchor.N: (cx, rect.y),
        ResizeAnchor.NE: (rect.right, rect.y),
        ResizeAnchor.E: (rect.right, cy),
        ResizeAnchor.SE: (rect.right, rect.bottom),
        ResizeAnchor.S: (cx, rect.bottom),
        ResizeAnchor.SW: (rect.x, rect.bottom),
        ResizeAnchor.W: (rect.x, cy),
    }
    return {
        anchor: Rect(x - half, y - half, handle_size, handle_size)
        for anchor, (x, y) in centres.items()
    }


def render_selection(annotation: Annotation, scale: float,
                     handle_size: float = HANDLE_SIZE,
                     cluster_offset: float = CLUSTER_OFFSET) -> SelectionDecoration:
    """
    Decoration layered over whichever variant is selected.

    The control cluster sits above the box. When that would put it above
    the surface origin it moves below the box, clear of the bottom handles,
    and it never starts left of the surface.
    """
    rect = to_screen(annotation.bounds, scale)
    button = CLUSTER_BUTTON_SIZE
    top = rect.y - cluster_offset
    if top < 0:
        top = max(rect.bottom + handle_size / 2, 0.0)
    left = max(rect.x, 0.0)
    drag_handle = Rect(left + 2, top + 2, button, button)
    edit_button = Rect(drag_handle.right + 2, top + 2, button, button)
    delete_button = Rect(edit_button.right + 2, top + 2, button, button)
    cluster = Rect(left, top, delete_button.right + 2 - left, button + 4)
    return SelectionDecoration(
        annotation_id=annotation.id,
        outline=rect,
        anchors=anchor_rects(rect, handle_size),
        cluster=cluster,
        drag_handle=drag_handle,
        edit_button=edit_button,
        delete_button=delete_button,
    )


def render_placement_hint(tool: MarkupTool, container_width: float) -> PlacementHint:
    """The "click to place" badge in the top-right corner of the page."""
    text = f"Click to place {tool.value.replace('-', ' ')}"
    width = len(text) * 7.0 + 32.0
    return PlacementHint(
        text=text,
        rect=Rect(max(container_width - width - 8.0, 0.0), 8.0, width, 28.0),
        tool_label=tool.label,
    )
