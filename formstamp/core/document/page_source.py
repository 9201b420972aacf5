"""
Page rendering for the viewer surface.

The markup engine only needs a page's size and current scale; these
sources provide that plus a pixmap to draw underneath the overlay.
"""
import logging
from typing import Dict, Optional, Tuple

import fitz
from PyQt5.QtCore import Qt
from PyQt5.QtGui import QColor, QImage, QPixmap

logger = logging.getLogger(__name__)

# US Letter in points
DEFAULT_PAGE_SIZE = (612.0, 792.0)


class PageSource:
    """Interface for something that can show numbered pages."""

    page_count: int = 0

    def page_size(self, page_number: int) -> Tuple[float, float]:
        raise NotImplementedError

    def render_pixmap(self, page_number: int, zoom: float) -> QPixmap:
        raise NotImplementedError

    def scaled_size(self, page_number: int, zoom: float) -> Tuple[int, int]:
        width, height = self.page_size(page_number)
        return int(round(width * zoom)), int(round(height * zoom))

    def close(self) -> None:
        pass


class BlankPageSource(PageSource):
    """Blank white pages, used when no document is open."""

    def __init__(self, page_count: int = 1, size: Tuple[float, float] = DEFAULT_PAGE_SIZE):
        self.page_count = page_count
        self._size = size

    def page_size(self, page_number: int) -> Tuple[float, float]:
        return self._size

    def render_pixmap(self, page_number: int, zoom: float) -> QPixmap:
        width, height = self.scaled_size(page_number, zoom)
        pixmap = QPixmap(max(width, 1), max(height, 1))
        pixmap.fill(QColor(Qt.white))
        return pixmap


class PdfPageSource(PageSource):
    """PDF pages rendered with PyMuPDF."""

    def __init__(self, path: str, max_cache_size: int = 3):
        self.path = path
        self._doc: Optional[fitz.Document] = fitz.open(path)
        self.page_count = self._doc.page_count
        self._pixmap_cache: Dict[Tuple[int, float], QPixmap] = {}
        self._max_cache_size = max_cache_size

    def page_size(self, page_number: int) -> Tuple[float, float]:
        rect = self._load_page(page_number).rect
        return rect.width, rect.height

    def render_pixmap(self, page_number: int, zoom: float) -> QPixmap:
        """
        Render a page at the specified zoom level.

        Args:
            page_number: 1-based page number
            zoom: Zoom factor (1.0 = 100%)

        Returns:
            QPixmap of the rendered page
        """
        cache_key = (page_number, zoom)
        if cache_key in self._pixmap_cache:
            return self._pixmap_cache[cache_key]

        mat = fitz.Matrix(zoom, zoom)
        pix = self._load_page(page_number).get_pixmap(matrix=mat, alpha=False)
        img = QImage(pix.samples, pix.width, pix.height, pix.stride, QImage.Format_RGB888)
        pixmap = QPixmap.fromImage(img.copy())

        self._pixmap_cache[cache_key] = pixmap
        if len(self._pixmap_cache) > self._max_cache_size:
            oldest_key = next(iter(self._pixmap_cache))
            del self._pixmap_cache[oldest_key]
        return pixmap

    def close(self) -> None:
        if self._doc is not None:
            self._doc.close()
            self._doc = None
        self._pixmap_cache.clear()

    def _load_page(self, page_number: int) -> fitz.Page:
        if self._doc is None:
            raise ValueError("Document is closed")
        if not 1 <= page_number <= self.page_count:
            raise IndexError(f"Page {page_number} out of range 1..{self.page_count}")
        return self._doc.load_page(page_number - 1)


def open_page_source(path: Optional[str]) -> PageSource:
    """Open ``path`` as a PDF, or return a blank page when no path is given."""
    if not path:
        return BlankPageSource()
    logger.info("Opening %s", path)
    return PdfPageSource(path)
