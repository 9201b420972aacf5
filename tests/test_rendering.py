from datetime import datetime

import pytest
from PyQt5.QtGui import QFontMetricsF

from formstamp.core.markup import (
    DateTimeStampAnnotation,
    HighlightAnnotation,
    HighlightShape,
    ImageAttachmentAnnotation,
    MarkupTool,
    Rect,
    ResizeAnchor,
    SignatureAnnotation,
    TextAreaAnnotation,
)
from formstamp.ui.rendering import HitType, hit_test, render, render_placement_hint, render_selection
from formstamp.ui.rendering.dispatcher import text_font, wrap_text
from formstamp.ui.rendering.visuals import DateTimeVisual, HighlightVisual, ImageVisual, TextVisual


def stamp(**kwargs):
    values = dict(page_number=1, x=10, y=10, width=200, height=30,
                  date_time=datetime(2024, 3, 5, 14, 7, 9), format="MM/dd/yyyy")
    values.update(kwargs)
    return DateTimeStampAnnotation(**values)


class TestRender:
    def test_highlight(self):
        visual = render(HighlightAnnotation(page_number=1, x=10, y=20, width=100, height=40,
                                            id="h", shape=HighlightShape.FREEFORM), 2.0)
        assert isinstance(visual, HighlightVisual)
        assert visual.rect == Rect(20, 40, 200, 80)
        assert visual.ellipse is True
        assert visual.opacity == 0.3

    def test_image_variants(self):
        signature = render(SignatureAnnotation(page_number=1, x=0, y=0, width=10, height=10,
                                               signature_data="data:sig"), 1.0)
        attachment = render(ImageAttachmentAnnotation(page_number=1, x=0, y=0, width=10, height=10,
                                                      attachment_name="logo.png"), 1.0)
        assert isinstance(signature, ImageVisual)
        assert signature.image_data == "data:sig"
        assert attachment.alt_text == "logo.png"

    def test_date_time_text_follows_format(self):
        annotation = stamp()
        assert render(annotation, 1.0).text == "03/05/2024"
        edited = annotation.copy_with(format="yyyy-MM-dd")
        visual = render(edited, 1.0)
        assert isinstance(visual, DateTimeVisual)
        assert visual.text == "2024-03-05"

    def test_date_time_font_tracks_height(self):
        assert render(stamp(height=20), 1.0).font_size == pytest.approx(8.0)
        assert render(stamp(height=100), 1.0).font_size == 14.0

    def test_text_area_scales_font_and_wraps(self):
        annotation = TextAreaAnnotation(page_number=1, x=0, y=0, width=100, height=80,
                                        text="one two three four five six", font_size=10)
        visual = render(annotation, 2.0)
        assert isinstance(visual, TextVisual)
        assert visual.font_size == 20
        assert len(visual.lines) > 1
        assert " ".join(visual.lines) == annotation.text

    def test_text_area_line_uses_available_width(self):
        annotation = TextAreaAnnotation(page_number=1, x=0, y=0, width=400, height=80,
                                        text="iiiiiiiiii iiiiiiiiii iiiiiiiiii", font_size=14)
        assert render(annotation, 1.0).lines == [annotation.text]


class TestWrapText:
    def test_keeps_line_breaks(self):
        assert wrap_text("a\n\nb", 500, text_font("Arial", 10)) == ["a", "", "b"]

    def test_text_that_fits_stays_on_one_line(self):
        font = text_font("Arial", 14)
        text = "iiiiiiiiii iiiiiiiiii iiiiiiiiii"
        width = QFontMetricsF(font).horizontalAdvance(text) + 1
        assert wrap_text(text, width, font) == [text]

    def test_lines_never_exceed_width(self):
        font = text_font("Arial", 14)
        metrics = QFontMetricsF(font)
        lines = wrap_text("WWWWWWWWWWWWWWWWWW WWW", 142, font)
        assert len(lines) > 1
        assert all(metrics.horizontalAdvance(line) <= 142 for line in lines)
        assert "".join(lines).replace(" ", "") == "W" * 21

    def test_words_wrap_at_spaces(self):
        font = text_font("Arial", 14)
        word_width = QFontMetricsF(font).horizontalAdvance("alpha beta")
        lines = wrap_text("alpha beta gamma delta", word_width + 1, font)
        assert lines[0] == "alpha beta"
        assert " ".join(lines) == "alpha beta gamma delta"

    def test_bold_font_is_measured(self):
        font = text_font("Arial", 20, bold=True)
        assert font.bold()
        assert font.pixelSize() == 20


class TestSelection:
    def test_decoration_layout(self):
        annotation = TextAreaAnnotation(page_number=1, x=100, y=200, width=150, height=40, id="t")
        decoration = render_selection(annotation, 1.0)
        assert decoration.outline == Rect(100, 200, 150, 40)
        assert set(decoration.anchors) == set(ResizeAnchor)
        se = decoration.anchors[ResizeAnchor.SE]
        assert (se.x + se.width / 2, se.y + se.height / 2) == (250, 240)
        assert decoration.cluster.y == 176
        assert decoration.drag_handle.x < decoration.edit_button.x < decoration.delete_button.x

    def test_cluster_moves_below_box_near_top_edge(self):
        annotation = TextAreaAnnotation(page_number=1, x=90, y=0, width=150, height=40, id="t")
        decoration = render_selection(annotation, 1.0)
        assert decoration.cluster.y >= 40 + 4
        assert decoration.drag_handle.y >= 0

    def test_cluster_stays_inside_left_edge(self):
        annotation = TextAreaAnnotation(page_number=1, x=-30, y=100, width=150, height=40, id="t")
        decoration = render_selection(annotation, 1.0)
        assert decoration.cluster.x == 0

    def test_placement_hint(self):
        hint = render_placement_hint(MarkupTool.IMAGE_STAMP, 800)
        assert hint.text == "Click to place image stamp"
        assert hint.rect.right <= 800


class TestHitTest:
    @pytest.fixture
    def page(self):
        lower = HighlightAnnotation(page_number=1, x=0, y=100, width=100, height=100, id="lower")
        upper = HighlightAnnotation(page_number=1, x=50, y=150, width=100, height=100, id="upper")
        return [lower, upper]

    def test_background(self, page):
        assert hit_test(page, None, 400, 400, 1.0).type == HitType.BACKGROUND

    def test_newest_element_wins(self, page):
        result = hit_test(page, None, 75, 175, 1.0)
        assert result.type == HitType.ELEMENT
        assert result.annotation_id == "upper"
        assert result.is_element

    def test_anchor_of_selected(self, page):
        result = hit_test(page, "lower", 100, 200, 1.0)
        assert result.type == HitType.ANCHOR
        assert result.anchor == ResizeAnchor.SE

    def test_cluster_buttons(self, page):
        decoration = render_selection(page[0], 1.0)
        for rect, expected in ((decoration.drag_handle, HitType.DRAG_HANDLE),
                               (decoration.edit_button, HitType.EDIT),
                               (decoration.delete_button, HitType.DELETE)):
            cx = rect.x + rect.width / 2
            cy = rect.y + rect.height / 2
            assert hit_test(page, "lower", cx, cy, 1.0).type == expected

    def test_controls_only_for_selected(self, page):
        decoration = render_selection(page[0], 1.0)
        rect = decoration.delete_button
        result = hit_test(page, None, rect.x + 1, rect.y + 1, 1.0)
        assert result.type == HitType.BACKGROUND


def test_controls_reachable_for_box_at_top_edge():
    annotation = TextAreaAnnotation(page_number=1, x=90, y=0, width=150, height=40, id="top")
    found = {
        hit_test([annotation], "top", x, y, 1.0).type
        for x in range(90, 260)
        for y in range(0, 90)
    }
    assert {HitType.DRAG_HANDLE, HitType.EDIT, HitType.DELETE} <= found
