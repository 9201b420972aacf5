import math

import pytest

from formstamp.core.markup import Point, Rect
from formstamp.core.markup.geometry import (
    clamp_dimension,
    is_finite,
    is_valid_scale,
    min_document_size,
    point_to_document,
    point_to_screen,
    to_document,
    to_screen,
)


@pytest.mark.parametrize("scale", [0.5, 1.0, 1.5, 3.0])
def test_screen_document_round_trip(scale):
    rect = Rect(12.5, 40.0, 150.0, 75.0)
    back = to_document(to_screen(rect, scale), scale)
    for got, expected in zip(back.as_tuple(), rect.as_tuple()):
        assert got == pytest.approx(expected)


def test_to_screen_scales_every_component():
    assert to_screen(Rect(10, 20, 30, 40), 2.0) == Rect(20, 40, 60, 80)


def test_point_conversions():
    assert point_to_document(Point(50, 50), 2.0) == Point(25, 25)
    assert point_to_screen(Point(25, 25), 2.0) == Point(50, 50)


@pytest.mark.parametrize("scale", [0, -1.0, math.nan, math.inf, None])
def test_invalid_scales(scale):
    assert not is_valid_scale(scale)


def test_min_document_size_follows_zoom():
    assert min_document_size(1.0) == 20.0
    assert min_document_size(2.0) == 10.0
    assert min_document_size(0.5) == 40.0


def test_min_document_size_falls_back_on_bad_scale():
    assert min_document_size(0) == 20.0
    assert min_document_size(math.nan, 16.0) == 16.0


def test_is_finite():
    assert is_finite(1, 2.5)
    assert not is_finite(1, math.nan)
    assert not is_finite("3")


def test_clamp_dimension():
    assert clamp_dimension(5.0, 20.0) == 20.0
    assert clamp_dimension(math.inf, 20.0) == 20.0
    assert clamp_dimension(30.0, 20.0) == 30.0
