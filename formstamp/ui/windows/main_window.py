import logging
from typing import Optional

from PyQt5.QtCore import Qt
from PyQt5.QtWidgets import (
    QMainWindow, QWidget, QHBoxLayout, QVBoxLayout, QLabel, QFileDialog,
    QScrollArea, QFrame, QMessageBox, QToolButton, QShortcut
)
from PyQt5.QtGui import QKeySequence

from formstamp.config import MarkupSettings
from formstamp.controllers import InteractionController
from formstamp.core.document.page_source import PageSource, open_page_source
from formstamp.core.markup import MarkupStore
from formstamp.styles import ThemeManager
from formstamp.ui.dialogs import QtDialogProvider
from formstamp.ui.toolbars import MarkupToolbar
from formstamp.ui.widgets import MarkupOverlay

logger = logging.getLogger(__name__)


class MainWindow(QMainWindow):
    """Single-page viewer with the markup palette and overlay."""

    def __init__(self, file_path: Optional[str] = None,
                 settings: Optional[MarkupSettings] = None):
        super().__init__()
        self.setWindowTitle("formstamp")

        self.settings = settings or MarkupSettings()
        self.zoom = self.settings.default_zoom
        self.page_number = 1
        self.dark_mode = False
        self.page_source: PageSource = open_page_source(None)

        self.store = MarkupStore(self)
        self.interaction = InteractionController(
            self.store, QtDialogProvider(self),
            min_screen_size=self.settings.min_screen_size, parent=self,
        )

        self.setup_ui()
        ThemeManager.apply_theme(self, self.dark_mode)

        if file_path:
            self.load_pdf(file_path)
        else:
            self.show_page(1)

    def setup_ui(self):
        central = QWidget(self)
        layout = QHBoxLayout(central)
        layout.setContentsMargins(8, 8, 8, 8)
        layout.setSpacing(8)

        # Tool palette
        self.markup_toolbar = MarkupToolbar(self.store, central)
        self.markup_toolbar.tool_selected.connect(self.interaction.arm_tool)
        self.interaction.state_changed.connect(self.markup_toolbar.sync_with_store)
        layout.addWidget(self.markup_toolbar, 0, Qt.AlignTop)

        right = QVBoxLayout()
        right.setSpacing(6)

        # Navigation / zoom bar
        nav = QFrame(central)
        nav_layout = QHBoxLayout(nav)
        nav_layout.setContentsMargins(0, 0, 0, 0)

        self.open_button = self._make_button("Open", "Open PDF (Ctrl+O)", self.open_pdf, nav)
        nav_layout.addWidget(self.open_button)
        nav_layout.addWidget(self._make_button("◀", "Previous page", self.previous_page, nav))
        self.page_label = QLabel(nav)
        nav_layout.addWidget(self.page_label)
        nav_layout.addWidget(self._make_button("▶", "Next page", self.next_page, nav))
        nav_layout.addStretch()
        nav_layout.addWidget(self._make_button("−", "Zoom out (Ctrl+-)", self.zoom_out, nav))
        self.zoom_label = QLabel(nav)
        nav_layout.addWidget(self.zoom_label)
        nav_layout.addWidget(self._make_button("+", "Zoom in (Ctrl+=)", self.zoom_in, nav))
        right.addWidget(nav)

        # Page with overlay on top
        self.scroll_area = QScrollArea(central)
        self.scroll_area.setAlignment(Qt.AlignCenter)
        self.page_container = QLabel()
        self.page_container.setAlignment(Qt.AlignTop | Qt.AlignLeft)
        self.overlay = MarkupOverlay(self.store, self.interaction, self.settings,
                                     ThemeManager.theme(self.dark_mode),
                                     parent=self.page_container)
        self.scroll_area.setWidget(self.page_container)
        right.addWidget(self.scroll_area, 1)

        layout.addLayout(right, 1)
        self.setCentralWidget(central)

        QShortcut(QKeySequence.Open, self, activated=self.open_pdf)
        QShortcut(QKeySequence.ZoomIn, self, activated=self.zoom_in)
        QShortcut(QKeySequence("Ctrl+="), self, activated=self.zoom_in)
        QShortcut(QKeySequence.ZoomOut, self, activated=self.zoom_out)

    def _make_button(self, text, tooltip, slot, parent):
        btn = QToolButton(parent)
        btn.setText(text)
        btn.setToolTip(tooltip)
        btn.clicked.connect(slot)
        return btn

    # ------------------------------------------------------------------
    # Document session
    # ------------------------------------------------------------------

    def open_pdf(self):
        path, _ = QFileDialog.getOpenFileName(self, "Open PDF", "", "PDF Files (*.pdf)")
        if path:
            self.load_pdf(path)

    def load_pdf(self, path: str):
        try:
            source = open_page_source(path)
        except (RuntimeError, ValueError, OSError) as e:
            logger.exception("Error loading PDF")
            QMessageBox.critical(self, "Error", f"Could not open PDF:\n{e}")
            return

        self.overlay.teardown()
        self.page_source.close()
        self.page_source = source
        # Markup lives only as long as the document session
        self.interaction.reset()
        self.setWindowTitle(f"formstamp - {path}")
        self.show_page(1)

    def show_page(self, page_number: int):
        if not 1 <= page_number <= self.page_source.page_count:
            return
        self.page_number = page_number
        pixmap = self.page_source.render_pixmap(page_number, self.zoom)
        self.page_container.setPixmap(pixmap)
        self.page_container.setFixedSize(pixmap.size())
        self.overlay.set_page(page_number, self.zoom, pixmap.width(), pixmap.height())
        self.overlay.move(0, 0)
        self.overlay.raise_()

        self.page_label.setText(f"{page_number} / {self.page_source.page_count}")
        self.zoom_label.setText(f"{int(round(self.zoom * 100))}%")

    # ------------------------------------------------------------------
    # Navigation and zoom
    # ------------------------------------------------------------------

    def next_page(self):
        self.show_page(self.page_number + 1)

    def previous_page(self):
        self.show_page(self.page_number - 1)

    def set_zoom(self, zoom: float):
        zoom = self.settings.clamp_zoom(zoom)
        if zoom != self.zoom:
            self.zoom = zoom
            self.show_page(self.page_number)

    def zoom_in(self):
        self.set_zoom(self.zoom + self.settings.zoom_step)

    def zoom_out(self):
        self.set_zoom(self.zoom - self.settings.zoom_step)

    def closeEvent(self, event):
        self.overlay.teardown()
        self.page_source.close()
        super().closeEvent(event)
