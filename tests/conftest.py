import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

import pytest
from PyQt5.QtWidgets import QApplication

from formstamp.core.markup import MarkupStore, TextAreaAnnotation


@pytest.fixture(scope="session", autouse=True)
def qapp():
    app = QApplication.instance() or QApplication([])
    yield app


@pytest.fixture
def store():
    return MarkupStore()


@pytest.fixture
def text_box(store):
    """A 150x40 text area at (100, 200) on page 1, selected."""
    annotation_id = store.create(TextAreaAnnotation(
        page_number=1, x=100, y=200, width=150, height=40, text="Hello",
    ))
    return annotation_id
