"""
Default configuration steps built from Qt dialogs.

Each step collects the payload for one markup tool. When editing, the
dialogs start from the annotation's current values, and backing out of an
optional step keeps the existing value.
"""
import logging
import uuid
from pathlib import Path
from typing import Any, Dict, Optional

from PyQt5.QtGui import QColor
from PyQt5.QtWidgets import QColorDialog, QDialog, QFileDialog, QInputDialog, QWidget

from formstamp.controllers import ConfigurationProvider, ConfigurationRequest, ConfigurationResult
from formstamp.core.markup import HighlightShape, MarkupTool

from .markup_dialogs import (
    IMAGE_FILTER,
    DateTimeStampDialog,
    SignatureDialog,
    TextAreaDialog,
    file_to_data_url,
)

logger = logging.getLogger(__name__)

CANCELLED = ConfigurationResult(committed=False)


class QtDialogProvider(ConfigurationProvider):
    """Resolves configuration requests synchronously with modal dialogs."""

    def __init__(self, parent: Optional[QWidget] = None):
        self.parent_widget = parent

    def configure(self, request: ConfigurationRequest) -> ConfigurationResult:
        handlers = {
            MarkupTool.IMAGE_STAMP: self._image_stamp,
            MarkupTool.HIGHLIGHT_AREA: self._highlight,
            MarkupTool.SIGNATURE: self._signature,
            MarkupTool.DATE_TIME_STAMP: self._date_time,
            MarkupTool.TEXT_AREA: self._text_area,
            MarkupTool.IMAGE_ATTACHMENT: self._attachment,
        }
        try:
            payload = handlers[request.tool](dict(request.prefill), request.is_edit)
        except OSError as e:
            logger.error("Configuration step for %s failed: %s", request.tool.value, e)
            return CANCELLED
        if payload is None:
            return CANCELLED
        return ConfigurationResult(committed=True, payload=payload)

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def _image_stamp(self, prefill: Dict[str, Any], editing: bool) -> Optional[Dict[str, Any]]:
        image_data = self._choose_image("Choose Stamp Image", prefill.get("image_data"), editing)
        if image_data is None:
            return None

        opacity, ok = QInputDialog.getDouble(
            self.parent_widget, "Stamp Opacity", "Opacity (0-1):",
            float(prefill.get("opacity", 1.0)), 0.05, 1.0, 2,
        )
        if not ok:
            return None
        rotation, ok = QInputDialog.getInt(
            self.parent_widget, "Stamp Rotation", "Rotation (degrees):",
            int(prefill.get("rotation", 0)), -360, 360,
        )
        if not ok:
            return None

        payload = dict(prefill, image_data=image_data, opacity=opacity, rotation=float(rotation))
        return payload

    def _highlight(self, prefill: Dict[str, Any], editing: bool) -> Optional[Dict[str, Any]]:
        initial = QColor(prefill.get("color", "#ffff00"))
        color = QColorDialog.getColor(initial, self.parent_widget, "Choose Highlight Color")
        if not color.isValid():
            return None

        opacity, ok = QInputDialog.getDouble(
            self.parent_widget, "Highlight Opacity", "Opacity (0-1):",
            float(prefill.get("opacity", 0.3)), 0.05, 1.0, 2,
        )
        if not ok:
            return None

        shapes = [shape.value for shape in HighlightShape]
        current = prefill.get("shape", HighlightShape.RECTANGLE)
        current = current.value if isinstance(current, HighlightShape) else current
        shape, ok = QInputDialog.getItem(
            self.parent_widget, "Highlight Shape", "Shape:", shapes,
            shapes.index(current) if current in shapes else 0, False,
        )
        if not ok:
            return None

        return dict(prefill, color=color.name(), opacity=opacity, shape=HighlightShape(shape))

    def _signature(self, prefill: Dict[str, Any], editing: bool) -> Optional[Dict[str, Any]]:
        dialog = SignatureDialog(prefill, editing, self.parent_widget)
        return self._run(dialog)

    def _date_time(self, prefill: Dict[str, Any], editing: bool) -> Optional[Dict[str, Any]]:
        dialog = DateTimeStampDialog(prefill, editing, self.parent_widget)
        return self._run(dialog)

    def _text_area(self, prefill: Dict[str, Any], editing: bool) -> Optional[Dict[str, Any]]:
        dialog = TextAreaDialog(prefill, editing, self.parent_widget)
        return self._run(dialog)

    def _attachment(self, prefill: Dict[str, Any], editing: bool) -> Optional[Dict[str, Any]]:
        path, _ = QFileDialog.getOpenFileName(
            self.parent_widget, "Choose Attachment", "", IMAGE_FILTER,
        )
        if not path:
            return prefill if editing and prefill.get("image_data") else None
        return dict(
            prefill,
            attachment_id=prefill.get("attachment_id") or uuid.uuid4().hex,
            attachment_name=Path(path).name,
            image_data=file_to_data_url(path),
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _choose_image(self, title: str, current: Optional[str], editing: bool) -> Optional[str]:
        path, _ = QFileDialog.getOpenFileName(self.parent_widget, title, "", IMAGE_FILTER)
        if path:
            return file_to_data_url(path)
        if editing and current:
            return current
        return None

    def _run(self, dialog) -> Optional[Dict[str, Any]]:
        if dialog.exec_() != QDialog.Accepted:
            return None
        return dialog.payload()
