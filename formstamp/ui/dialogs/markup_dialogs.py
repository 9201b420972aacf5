"""
Modal configuration dialogs for the richer markup tools.

Each dialog is built from a pre-fill mapping (tool defaults on create, the
annotation's current payload on edit) and exposes ``payload()`` with the
values the user settled on.
"""
import base64
import logging
import mimetypes
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from PyQt5.QtCore import QBuffer, QByteArray, QDateTime, QIODevice, QPointF, Qt, pyqtSignal
from PyQt5.QtGui import QColor, QFont, QPainter, QPainterPath, QPen, QPixmap
from PyQt5.QtWidgets import (
    QCheckBox, QColorDialog, QComboBox, QDateTimeEdit, QDialog, QDialogButtonBox,
    QDoubleSpinBox, QFileDialog, QFormLayout, QHBoxLayout, QLabel, QLineEdit,
    QPlainTextEdit, QPushButton, QSpinBox, QTabWidget, QVBoxLayout, QWidget
)

from formstamp.core.markup import TextAlign
from formstamp.core.markup.datetime_format import (
    DATE_TIME_FORMATS,
    DEFAULT_FORMAT,
    TIMEZONES,
    format_date_time,
)

logger = logging.getLogger(__name__)

IMAGE_FILTER = "Images (*.png *.jpg *.jpeg *.gif *.bmp *.svg)"

# (family list, label) offered for text areas
FONT_FAMILIES = [
    ("Arial, sans-serif", "Arial"),
    ("Times New Roman, serif", "Times New Roman"),
    ("Helvetica, sans-serif", "Helvetica"),
    ("Georgia, serif", "Georgia"),
    ("Verdana, sans-serif", "Verdana"),
    ("Courier New, monospace", "Courier New"),
    ("Calibri, sans-serif", "Calibri"),
    ("Trebuchet MS, sans-serif", "Trebuchet MS"),
    ("Tahoma, sans-serif", "Tahoma"),
]

# (family, label) for typed signatures
SIGNATURE_FONTS = [
    ("Dancing Script", "Dancing Script"),
    ("Great Vibes", "Great Vibes"),
    ("Allura", "Allura"),
    ("Pacifico", "Pacifico"),
    ("Satisfy", "Satisfy"),
    ("Brush Script MT", "Brush Script"),
]

DEFAULT_BORDER_COLOR = "#cccccc"
SIGNATURE_SIZE = (400, 150)


def file_to_data_url(path: str) -> str:
    """Read an image file into a ``data:`` URL."""
    mime = mimetypes.guess_type(path)[0] or "application/octet-stream"
    encoded = base64.b64encode(Path(path).read_bytes()).decode("ascii")
    return f"data:{mime};base64,{encoded}"


def pixmap_to_data_url(pixmap: QPixmap) -> str:
    """Encode a pixmap as a PNG ``data:`` URL."""
    data = QByteArray()
    buffer = QBuffer(data)
    buffer.open(QIODevice.WriteOnly)
    pixmap.save(buffer, "PNG")
    buffer.close()
    encoded = base64.b64encode(bytes(data)).decode("ascii")
    return f"data:image/png;base64,{encoded}"


def render_typed_signature(text: str, family: str = SIGNATURE_FONTS[0][0],
                           size=(400, 100)) -> Optional[str]:
    """
    Draw ``text`` in a script font onto a transparent image.

    Returns:
        PNG data URL, or None for blank text
    """
    if not text.strip():
        return None

    pixmap = QPixmap(*size)
    pixmap.fill(Qt.transparent)

    font = QFont(family)
    font.setStyleHint(QFont.Cursive)
    font.setPixelSize(32)

    painter = QPainter(pixmap)
    try:
        painter.setRenderHint(QPainter.Antialiasing)
        painter.setRenderHint(QPainter.TextAntialiasing)
        painter.setFont(font)
        painter.setPen(QPen(QColor("#000000")))
        painter.drawText(pixmap.rect(), Qt.AlignCenter, text.strip())
    finally:
        painter.end()
    return pixmap_to_data_url(pixmap)


class ColorButton(QPushButton):
    """Push button showing a color swatch; clicking opens a color picker."""

    color_changed = pyqtSignal(str)

    def __init__(self, color: str = "#000000", title: str = "Choose Color", parent=None):
        super().__init__(parent)
        self.title = title
        self._color = color
        self.setFixedWidth(80)
        self.clicked.connect(self.choose_color)
        self._refresh()

    def color(self) -> str:
        return self._color

    def set_color(self, color: str) -> None:
        self._color = QColor(color).name() if QColor(color).isValid() else color
        self._refresh()
        self.color_changed.emit(self._color)

    def choose_color(self) -> None:
        chosen = QColorDialog.getColor(QColor(self._color), self, self.title)
        if chosen.isValid():
            self.set_color(chosen.name())

    def _refresh(self) -> None:
        self.setText(self._color)
        self.setStyleSheet(f"QPushButton {{ background-color: {self._color}; }}")


# ==============================================================================
# Text area
# ==============================================================================


class TextAreaDialog(QDialog):
    """Text, font, style, colors and box size for a text area."""

    def __init__(self, prefill: Mapping[str, Any], editing: bool = False, parent=None):
        super().__init__(parent)
        self.setWindowTitle("Edit Text Area" if editing else "Add Text Area")
        self.setModal(True)
        self.prefill = dict(prefill)

        layout = QVBoxLayout(self)
        form = QFormLayout()

        self.text_edit = QPlainTextEdit(self)
        self.text_edit.setPlainText(prefill.get("text") or "")
        form.addRow("Text:", self.text_edit)

        self.family_combo = QComboBox(self)
        families = [value for value, _label in FONT_FAMILIES]
        for value, label in FONT_FAMILIES:
            self.family_combo.addItem(label, value)
        family = prefill.get("font_family") or FONT_FAMILIES[0][0]
        if family not in families:
            self.family_combo.addItem(family.split(",")[0], family)
            families.append(family)
        self.family_combo.setCurrentIndex(families.index(family))
        form.addRow("Font:", self.family_combo)

        self.size_spin = QSpinBox(self)
        self.size_spin.setRange(6, 96)
        self.size_spin.setValue(int(prefill.get("font_size") or 14))
        form.addRow("Font size:", self.size_spin)

        style_row = QHBoxLayout()
        self.bold_check = QCheckBox("Bold", self)
        self.bold_check.setChecked(bool(prefill.get("bold", False)))
        self.italic_check = QCheckBox("Italic", self)
        self.italic_check.setChecked(bool(prefill.get("italic", False)))
        self.underline_check = QCheckBox("Underline", self)
        self.underline_check.setChecked(bool(prefill.get("underline", False)))
        for check in (self.bold_check, self.italic_check, self.underline_check):
            style_row.addWidget(check)
        form.addRow("Style:", style_row)

        self.align_combo = QComboBox(self)
        for align in TextAlign:
            self.align_combo.addItem(align.value.capitalize(), align)
        current_align = prefill.get("text_align") or TextAlign.LEFT
        if not isinstance(current_align, TextAlign):
            current_align = TextAlign(current_align)
        self.align_combo.setCurrentIndex(list(TextAlign).index(current_align))
        form.addRow("Alignment:", self.align_combo)

        self.color_button = ColorButton(prefill.get("color") or "#000000", "Text Color", self)
        form.addRow("Text color:", self.color_button)

        background = prefill.get("background_color")
        self.background_check = QCheckBox("Fill", self)
        self.background_check.setChecked(bool(background))
        self.background_button = ColorButton(background or "#ffffff", "Background Color", self)
        background_row = QHBoxLayout()
        background_row.addWidget(self.background_check)
        background_row.addWidget(self.background_button)
        form.addRow("Background:", background_row)

        border = prefill.get("border_color")
        self.border_check = QCheckBox("Show border", self)
        self.border_check.setChecked(bool(border))
        self.border_button = ColorButton(border or DEFAULT_BORDER_COLOR, "Border Color", self)
        border_row = QHBoxLayout()
        border_row.addWidget(self.border_check)
        border_row.addWidget(self.border_button)
        form.addRow("Border:", border_row)

        self.width_spin = self._size_spin(prefill.get("width", 200.0))
        self.height_spin = self._size_spin(prefill.get("height", 100.0))
        size_row = QHBoxLayout()
        size_row.addWidget(self.width_spin)
        size_row.addWidget(QLabel("x", self))
        size_row.addWidget(self.height_spin)
        form.addRow("Box size:", size_row)

        layout.addLayout(form)

        self.button_box = QDialogButtonBox(QDialogButtonBox.Ok | QDialogButtonBox.Cancel, self)
        self.button_box.accepted.connect(self.accept)
        self.button_box.rejected.connect(self.reject)
        layout.addWidget(self.button_box)

        self.text_edit.textChanged.connect(self._update_ok)
        self._update_ok()

    def _size_spin(self, value: float) -> QDoubleSpinBox:
        spin = QDoubleSpinBox(self)
        spin.setRange(1.0, 5000.0)
        spin.setDecimals(1)
        spin.setValue(float(value))
        return spin

    def _update_ok(self) -> None:
        has_text = bool(self.text_edit.toPlainText().strip())
        self.button_box.button(QDialogButtonBox.Ok).setEnabled(has_text)

    def payload(self) -> Dict[str, Any]:
        return dict(
            self.prefill,
            text=self.text_edit.toPlainText(),
            font_family=self.family_combo.currentData(),
            font_size=float(self.size_spin.value()),
            bold=self.bold_check.isChecked(),
            italic=self.italic_check.isChecked(),
            underline=self.underline_check.isChecked(),
            text_align=self.align_combo.currentData(),
            color=self.color_button.color(),
            background_color=self.background_button.color() if self.background_check.isChecked() else None,
            border_color=self.border_button.color() if self.border_check.isChecked() else None,
            width=self._size_value(self.width_spin, "width"),
            height=self._size_value(self.height_spin, "height"),
        )

    def _size_value(self, spin: QDoubleSpinBox, key: str) -> float:
        # An untouched spin box keeps the stored, unrounded size
        original = self.prefill.get(key)
        if original is not None and round(float(original), spin.decimals()) == spin.value():
            return original
        return spin.value()


# ==============================================================================
# Date / time stamp
# ==============================================================================


class DateTimeStampDialog(QDialog):
    """Moment, format, time zone and auto-update for a date/time stamp."""

    def __init__(self, prefill: Mapping[str, Any], editing: bool = False, parent=None):
        super().__init__(parent)
        self.setWindowTitle("Edit Date/Time Stamp" if editing else "Add Date/Time Stamp")
        self.setModal(True)
        self.prefill = dict(prefill)

        layout = QVBoxLayout(self)
        form = QFormLayout()

        moment_row = QHBoxLayout()
        self.date_time_edit = QDateTimeEdit(self)
        self.date_time_edit.setCalendarPopup(True)
        self.date_time_edit.setDisplayFormat("yyyy-MM-dd HH:mm:ss")
        self.set_date_time(prefill.get("date_time") or datetime.now())
        moment_row.addWidget(self.date_time_edit)
        self.now_button = QPushButton("Now", self)
        self.now_button.clicked.connect(lambda: self.set_date_time(datetime.now()))
        moment_row.addWidget(self.now_button)
        form.addRow("Date & time:", moment_row)

        self.format_combo = QComboBox(self)
        for fmt, label in DATE_TIME_FORMATS:
            self.format_combo.addItem(label, fmt)
        form.addRow("Format:", self.format_combo)

        self.custom_check = QCheckBox("Use custom format", self)
        self.custom_edit = QLineEdit(self)
        self.custom_edit.setPlaceholderText("e.g. EEEE 'at' hh:mm a")
        form.addRow(self.custom_check, self.custom_edit)

        current_format = prefill.get("format") or DEFAULT_FORMAT
        formats = [fmt for fmt, _label in DATE_TIME_FORMATS]
        if current_format in formats:
            self.format_combo.setCurrentIndex(formats.index(current_format))
        else:
            self.custom_check.setChecked(True)
            self.custom_edit.setText(current_format)

        self.timezone_combo = QComboBox(self)
        zones = [zone for zone, _label in TIMEZONES]
        for zone, label in TIMEZONES:
            self.timezone_combo.addItem(label, zone)
        current_zone = prefill.get("timezone")
        self.timezone_combo.setCurrentIndex(zones.index(current_zone) if current_zone in zones else 0)
        form.addRow("Time zone:", self.timezone_combo)

        self.auto_update_check = QCheckBox("Auto-update when document opens", self)
        self.auto_update_check.setChecked(bool(prefill.get("auto_update", False)))
        form.addRow("", self.auto_update_check)

        self.preview_label = QLabel(self)
        form.addRow("Preview:", self.preview_label)

        layout.addLayout(form)

        button_box = QDialogButtonBox(QDialogButtonBox.Ok | QDialogButtonBox.Cancel, self)
        button_box.accepted.connect(self.accept)
        button_box.rejected.connect(self.reject)
        layout.addWidget(button_box)

        self.date_time_edit.dateTimeChanged.connect(self.update_preview)
        self.format_combo.currentIndexChanged.connect(self.update_preview)
        self.custom_check.toggled.connect(self._on_custom_toggled)
        self.custom_edit.textChanged.connect(self.update_preview)
        self.timezone_combo.currentIndexChanged.connect(self.update_preview)
        self._on_custom_toggled(self.custom_check.isChecked())

    def set_date_time(self, value: datetime) -> None:
        self.date_time_edit.setDateTime(QDateTime(value))

    def selected_date_time(self) -> datetime:
        """The picked moment; an untouched picker keeps the stored value."""
        original = self.prefill.get("date_time")
        picked = self.date_time_edit.dateTime()
        if original is not None and QDateTime(original).toSecsSinceEpoch() == picked.toSecsSinceEpoch():
            return original
        return picked.toPyDateTime()

    def selected_format(self) -> str:
        if self.custom_check.isChecked() and self.custom_edit.text().strip():
            return self.custom_edit.text()
        return self.format_combo.currentData()

    def _on_custom_toggled(self, checked: bool) -> None:
        self.custom_edit.setEnabled(checked)
        self.format_combo.setEnabled(not checked)
        self.update_preview()

    def update_preview(self, *_args) -> None:
        self.preview_label.setText(format_date_time(
            self.date_time_edit.dateTime().toPyDateTime(),
            self.selected_format(),
            self.timezone_combo.currentData(),
        ))

    def payload(self) -> Dict[str, Any]:
        return dict(
            self.prefill,
            date_time=self.selected_date_time(),
            format=self.selected_format(),
            timezone=self.timezone_combo.currentData(),
            auto_update=self.auto_update_check.isChecked(),
        )


# ==============================================================================
# Signature
# ==============================================================================


class SignaturePad(QWidget):
    """Freehand drawing surface for a signature."""

    changed = pyqtSignal()

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setFixedSize(*SIGNATURE_SIZE)
        self.setAttribute(Qt.WA_StyledBackground)
        self.setStyleSheet("background-color: white; border: 1px dashed #999999;")
        self._strokes: List[List[QPointF]] = []

    def is_empty(self) -> bool:
        return not any(len(stroke) > 1 for stroke in self._strokes)

    def clear(self) -> None:
        self._strokes = []
        self.update()
        self.changed.emit()

    def add_stroke(self, points: List[QPointF]) -> None:
        self._strokes.append(list(points))
        self.update()
        self.changed.emit()

    def mousePressEvent(self, event):
        if event.button() == Qt.LeftButton:
            self._strokes.append([QPointF(event.pos())])
            self.update()

    def mouseMoveEvent(self, event):
        if event.buttons() & Qt.LeftButton and self._strokes:
            self._strokes[-1].append(QPointF(event.pos()))
            self.update()

    def mouseReleaseEvent(self, event):
        if event.button() == Qt.LeftButton:
            self.changed.emit()

    def paintEvent(self, event):
        super().paintEvent(event)
        painter = QPainter(self)
        try:
            self._draw_strokes(painter)
        finally:
            painter.end()

    def to_pixmap(self) -> QPixmap:
        pixmap = QPixmap(*SIGNATURE_SIZE)
        pixmap.fill(Qt.transparent)
        painter = QPainter(pixmap)
        try:
            self._draw_strokes(painter)
        finally:
            painter.end()
        return pixmap

    def to_data_url(self) -> Optional[str]:
        if self.is_empty():
            return None
        return pixmap_to_data_url(self.to_pixmap())

    def _draw_strokes(self, painter: QPainter) -> None:
        painter.setRenderHint(QPainter.Antialiasing)
        pen = QPen(QColor("#000000"), 2)
        pen.setCapStyle(Qt.RoundCap)
        pen.setJoinStyle(Qt.RoundJoin)
        painter.setPen(pen)
        for stroke in self._strokes:
            if len(stroke) < 2:
                continue
            path = QPainterPath(stroke[0])
            for point in stroke[1:]:
                path.lineTo(point)
            painter.drawPath(path)


class SignatureDialog(QDialog):
    """Type, draw or upload a signature."""

    TYPE_TAB, DRAW_TAB, UPLOAD_TAB = range(3)

    def __init__(self, prefill: Mapping[str, Any], editing: bool = False, parent=None):
        super().__init__(parent)
        self.setWindowTitle("Edit Signature" if editing else "Add Signature")
        self.setModal(True)
        self.prefill = dict(prefill)
        self.editing = editing
        self.uploaded_data: Optional[str] = None

        layout = QVBoxLayout(self)
        self.tabs = QTabWidget(self)

        # Type
        type_page = QWidget(self)
        type_layout = QFormLayout(type_page)
        self.name_edit = QLineEdit(type_page)
        self.name_edit.setPlaceholderText("Type your name")
        type_layout.addRow("Name:", self.name_edit)
        self.font_combo = QComboBox(type_page)
        for family, label in SIGNATURE_FONTS:
            self.font_combo.addItem(label, family)
        type_layout.addRow("Style:", self.font_combo)
        self.tabs.addTab(type_page, "Type Signature")

        # Draw
        draw_page = QWidget(self)
        draw_layout = QVBoxLayout(draw_page)
        self.pad = SignaturePad(draw_page)
        draw_layout.addWidget(self.pad)
        clear_button = QPushButton("Clear", draw_page)
        clear_button.clicked.connect(self.pad.clear)
        draw_layout.addWidget(clear_button, 0, Qt.AlignRight)
        self.tabs.addTab(draw_page, "Draw Signature")

        # Upload
        upload_page = QWidget(self)
        upload_layout = QVBoxLayout(upload_page)
        self.upload_label = QLabel("No image chosen", upload_page)
        upload_layout.addWidget(self.upload_label)
        browse_button = QPushButton("Choose Image...", upload_page)
        browse_button.clicked.connect(self.choose_image)
        upload_layout.addWidget(browse_button, 0, Qt.AlignLeft)
        self.tabs.addTab(upload_page, "Upload Image")

        layout.addWidget(self.tabs)

        button_box = QDialogButtonBox(QDialogButtonBox.Ok | QDialogButtonBox.Cancel, self)
        button_box.accepted.connect(self.accept)
        button_box.rejected.connect(self.reject)
        layout.addWidget(button_box)

    def choose_image(self) -> None:
        path, _ = QFileDialog.getOpenFileName(self, "Choose Signature Image", "", IMAGE_FILTER)
        if not path:
            return
        try:
            self.uploaded_data = file_to_data_url(path)
        except OSError as e:
            logger.error("Could not read signature image %s: %s", path, e)
            return
        self.upload_label.setText(path)

    def signature_data(self) -> Optional[str]:
        """The signature from the active tab, or the existing one when editing."""
        tab = self.tabs.currentIndex()
        if tab == self.TYPE_TAB:
            data = render_typed_signature(self.name_edit.text(), self.font_combo.currentData())
        elif tab == self.DRAW_TAB:
            data = self.pad.to_data_url()
        else:
            data = self.uploaded_data

        if data is None and self.editing:
            return self.prefill.get("signature_data") or None
        return data

    def payload(self) -> Optional[Dict[str, Any]]:
        data = self.signature_data()
        if data is None:
            return None
        return dict(self.prefill, signature_data=data)
