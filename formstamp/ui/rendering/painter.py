"""
QPainter backend for markup visuals.
"""
import base64
import binascii
import logging
import re
from typing import Dict, Optional

from PyQt5.QtCore import QPointF, QRectF, Qt
from PyQt5.QtGui import QBrush, QColor, QPainter, QPen, QPixmap

from formstamp.core.markup import Rect, TextAlign

from .dispatcher import text_font
from .visuals import (
    DateTimeVisual,
    HighlightVisual,
    ImageVisual,
    PlacementHint,
    SelectionDecoration,
    TextVisual,
    Visual,
)

logger = logging.getLogger(__name__)

_RGBA_RE = re.compile(
    r"rgba?\(\s*(\d+)\s*,\s*(\d+)\s*,\s*(\d+)\s*(?:,\s*([\d.]+)\s*)?\)"
)

_ALIGN_FLAGS = {
    TextAlign.LEFT: Qt.AlignLeft,
    TextAlign.CENTER: Qt.AlignHCenter,
    TextAlign.RIGHT: Qt.AlignRight,
}


def parse_color(value: Optional[str], fallback: str = "#000000") -> QColor:
    """
    Parse ``#rrggbb``, named colors and CSS ``rgb()``/``rgba()`` strings.
    """
    if value:
        match = _RGBA_RE.fullmatch(value.strip())
        if match:
            r, g, b, a = match.groups()
            color = QColor(int(r), int(g), int(b))
            if a is not None:
                color.setAlphaF(max(0.0, min(1.0, float(a))))
            return color
        color = QColor(value)
        if color.isValid():
            return color
    return QColor(fallback)


def to_qrect(rect: Rect) -> QRectF:
    return QRectF(rect.x, rect.y, rect.width, rect.height)


def decode_image(image_data: str) -> Optional[bytes]:
    """Bytes of a ``data:`` URL or bare base64 string."""
    if not image_data:
        return None
    payload = image_data.split(",", 1)[1] if image_data.startswith("data:") else image_data
    try:
        return base64.b64decode(payload, validate=False)
    except (binascii.Error, ValueError):
        logger.warning("Could not decode image data (%d chars)", len(image_data))
        return None


class MarkupPainter:
    """Draws visual descriptions onto a QPainter."""

    def __init__(self, max_cache_size: int = 32, danger_color: str = "#ff6b6b"):
        self._pixmap_cache: Dict[int, QPixmap] = {}
        self._max_cache_size = max_cache_size
        self.danger_color = danger_color

    def paint(self, painter: QPainter, visual: Visual) -> None:
        painter.save()
        try:
            if isinstance(visual, HighlightVisual):
                self._paint_highlight(painter, visual)
            elif isinstance(visual, ImageVisual):
                self._paint_image(painter, visual)
            elif isinstance(visual, DateTimeVisual):
                self._paint_date_time(painter, visual)
            elif isinstance(visual, TextVisual):
                self._paint_text(painter, visual)
        finally:
            painter.restore()

    def paint_selection(self, painter: QPainter, decoration: SelectionDecoration) -> None:
        painter.save()
        accent = parse_color(decoration.outline_color)

        # Dashed outline
        pen = QPen(accent, 2, Qt.DashLine)
        painter.setPen(pen)
        painter.setBrush(Qt.NoBrush)
        painter.drawRect(to_qrect(decoration.outline))

        # Resize handles
        painter.setPen(QPen(QColor("#ffffff"), 1))
        painter.setBrush(QBrush(accent))
        for rect in decoration.anchors.values():
            painter.drawRect(to_qrect(rect))

        # Control cluster
        painter.setPen(QPen(QColor("#cccccc"), 1))
        painter.setBrush(QBrush(QColor("#ffffff")))
        painter.drawRoundedRect(to_qrect(decoration.cluster), 4, 4)

        painter.setPen(QPen(QColor("#555555"), 1))
        painter.drawText(to_qrect(decoration.drag_handle), Qt.AlignCenter, "⠿")
        painter.drawText(to_qrect(decoration.edit_button), Qt.AlignCenter, "✎")
        painter.setPen(QPen(parse_color(self.danger_color), 1))
        painter.drawText(to_qrect(decoration.delete_button), Qt.AlignCenter, "✕")
        painter.restore()

    def paint_placement_hint(self, painter: QPainter, hint: PlacementHint) -> None:
        painter.save()
        painter.setPen(Qt.NoPen)
        painter.setBrush(QBrush(parse_color(hint.background_color)))
        painter.drawRoundedRect(to_qrect(hint.rect), 4, 4)
        painter.setPen(QPen(parse_color(hint.color)))
        painter.drawText(to_qrect(hint.rect), Qt.AlignCenter, hint.text)
        painter.restore()

    # Variant painters

    def _paint_highlight(self, painter: QPainter, visual: HighlightVisual) -> None:
        color = parse_color(visual.color, "#ffff00")
        painter.setOpacity(max(0.0, min(1.0, visual.opacity)))
        painter.setPen(Qt.NoPen)
        painter.setBrush(QBrush(color))
        if visual.ellipse:
            painter.drawEllipse(to_qrect(visual.rect))
        else:
            painter.drawRect(to_qrect(visual.rect))

    def _paint_image(self, painter: QPainter, visual: ImageVisual) -> None:
        target = to_qrect(visual.rect)
        pixmap = self._pixmap_for(visual.image_data)
        if pixmap is None:
            painter.setPen(QPen(QColor("#999999"), 1, Qt.DashLine))
            painter.drawRect(target)
            painter.drawText(target, Qt.AlignCenter, visual.alt_text)
            return

        # Fit inside the box, keeping aspect ratio
        scaled = pixmap.size().scaled(int(target.width()), int(target.height()), Qt.KeepAspectRatio)
        fitted = QRectF(0, 0, scaled.width(), scaled.height())
        fitted.moveCenter(target.center())

        painter.setOpacity(max(0.0, min(1.0, visual.opacity)))
        painter.setRenderHint(QPainter.SmoothPixmapTransform)
        if visual.rotation:
            centre = target.center()
            painter.translate(centre)
            painter.rotate(visual.rotation)
            painter.translate(-centre)
        painter.drawPixmap(fitted, pixmap, QRectF(pixmap.rect()))

    def _paint_date_time(self, painter: QPainter, visual: DateTimeVisual) -> None:
        target = to_qrect(visual.rect)
        painter.setPen(QPen(parse_color(visual.border_color), 1))
        painter.setBrush(QBrush(parse_color(visual.background_color)))
        painter.drawRect(target)

        painter.setFont(text_font(visual.font_family, visual.font_size))
        painter.setPen(QPen(QColor("#000000")))
        painter.drawText(target, Qt.AlignCenter, visual.text)

    def _paint_text(self, painter: QPainter, visual: TextVisual) -> None:
        target = to_qrect(visual.rect)
        painter.setPen(QPen(parse_color(visual.border_color), 1))
        painter.setBrush(QBrush(parse_color(visual.background_color)))
        painter.drawRect(target)

        painter.setFont(text_font(visual.font_family, visual.font_size,
                                  visual.bold, visual.italic, visual.underline))
        painter.setPen(QPen(parse_color(visual.color)))

        inner = target.adjusted(visual.padding, visual.padding, -visual.padding, -visual.padding)
        painter.setClipRect(target)
        # Lines arrive pre-wrapped for this font
        flags = int(_ALIGN_FLAGS.get(visual.align, Qt.AlignLeft)) | int(Qt.AlignTop)
        painter.drawText(inner, flags, "\n".join(visual.lines))

    # Helpers

    def _pixmap_for(self, image_data: str) -> Optional[QPixmap]:
        key = hash(image_data)
        cached = self._pixmap_cache.get(key)
        if cached is not None:
            return cached

        raw = decode_image(image_data)
        if raw is None:
            return None
        pixmap = QPixmap()
        if not pixmap.loadFromData(raw):
            logger.warning("Image data is not a readable image")
            return None

        self._pixmap_cache[key] = pixmap
        if len(self._pixmap_cache) > self._max_cache_size:
            oldest_key = next(iter(self._pixmap_cache))
            del self._pixmap_cache[oldest_key]
        return pixmap
