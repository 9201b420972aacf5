from typing import Dict, Optional

from PyQt5.QtCore import Qt, pyqtSignal
from PyQt5.QtGui import QColor
from PyQt5.QtWidgets import (
    QFrame, QVBoxLayout, QHBoxLayout, QLabel,
    QToolButton, QGraphicsDropShadowEffect, QSizePolicy
)

from formstamp.core.markup import MarkupStore, MarkupTool

# (glyph, description) per tool
TOOL_INFO = {
    MarkupTool.IMAGE_STAMP: ("🖼", "Add image stamps, logos, or watermarks"),
    MarkupTool.HIGHLIGHT_AREA: ("▮", "Highlight important sections"),
    MarkupTool.SIGNATURE: ("✍", "Add signatures anywhere on the document"),
    MarkupTool.DATE_TIME_STAMP: ("🕒", "Insert current or custom date/time"),
    MarkupTool.TEXT_AREA: ("T", "Add text annotations anywhere"),
    MarkupTool.IMAGE_ATTACHMENT: ("📎", "Select and embed attachments"),
}

EXPANDED_WIDTH = 220
COLLAPSED_WIDTH = 52


class MarkupToolbar(QFrame):
    """Tool palette: arms and disarms the six markup tools."""

    tool_selected = pyqtSignal(object)  # MarkupTool

    def __init__(self, store: MarkupStore, parent=None):
        super().__init__(parent)
        self.setObjectName("MarkupToolbar")
        self.store = store
        self.tool_buttons: Dict[MarkupTool, QToolButton] = {}

        self.setup_ui()
        self.store.state_changed.connect(self.sync_with_store)
        self.sync_with_store()

    def setup_ui(self):
        self.setSizePolicy(QSizePolicy.Fixed, QSizePolicy.Preferred)

        main_layout = QVBoxLayout(self)
        main_layout.setContentsMargins(8, 8, 8, 8)
        main_layout.setSpacing(4)

        # Header
        header_layout = QHBoxLayout()
        header_layout.setSpacing(4)

        self.header_label = QLabel("Markup Tools", self)
        header_layout.addWidget(self.header_label)
        header_layout.addStretch()

        self.collapse_button = QToolButton(self)
        self.collapse_button.setFixedSize(24, 24)
        self.collapse_button.clicked.connect(self.store.toggle_toolbar_collapsed)
        header_layout.addWidget(self.collapse_button)

        main_layout.addLayout(header_layout)

        for tool, (glyph, description) in TOOL_INFO.items():
            button = QToolButton(self)
            button.setCheckable(True)
            button.setToolButtonStyle(Qt.ToolButtonTextOnly)
            button.setFixedHeight(32)
            button.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Fixed)
            button.setProperty("glyph", glyph)
            button.setToolTip(f"{tool.label}: {description}")
            button.clicked.connect(lambda _checked, t=tool: self.tool_selected.emit(t))
            main_layout.addWidget(button)
            self.tool_buttons[tool] = button

        main_layout.addStretch()

        shadow = QGraphicsDropShadowEffect()
        shadow.setBlurRadius(20)
        shadow.setColor(QColor(0, 0, 0, 80))
        shadow.setOffset(0, 2)
        self.setGraphicsEffect(shadow)

    def sync_with_store(self):
        """Mirror the armed tool and the collapse flag from the store."""
        active: Optional[MarkupTool] = self.store.state.active_tool
        collapsed = self.store.state.toolbar_collapsed

        for tool, button in self.tool_buttons.items():
            button.setChecked(tool == active)
            glyph = button.property("glyph")
            button.setText(glyph if collapsed else f"{glyph}  {tool.label}")

        self.header_label.setVisible(not collapsed)
        self.collapse_button.setText("»" if collapsed else "«")
        self.collapse_button.setToolTip("Expand toolbar" if collapsed else "Collapse toolbar")
        self.setFixedWidth(COLLAPSED_WIDTH if collapsed else EXPANDED_WIDTH)

    def is_collapsed(self) -> bool:
        return self.store.state.toolbar_collapsed
