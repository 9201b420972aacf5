"""
Conversions between document space (zoom 1.0) and screen space.

Annotations are always stored in document units. The current zoom is
supplied by the caller on every call; nothing here caches a scale.
"""
import math

from .models import Point, Rect

# Smallest on-screen footprint an annotation may be resized to, in pixels.
MIN_SCREEN_SIZE = 20.0


def is_valid_scale(scale: float) -> bool:
    """True for a finite, strictly positive zoom factor."""
    try:
        return math.isfinite(scale) and scale > 0
    except TypeError:
        return False


def is_finite(*values: float) -> bool:
    return all(isinstance(v, (int, float)) and math.isfinite(v) for v in values)


def to_screen(rect: Rect, scale: float) -> Rect:
    """Map a document-space rectangle to screen pixels."""
    return Rect(rect.x * scale, rect.y * scale, rect.width * scale, rect.height * scale)


def to_document(rect: Rect, scale: float) -> Rect:
    """Map a screen-space rectangle back to document units."""
    return Rect(rect.x / scale, rect.y / scale, rect.width / scale, rect.height / scale)


def point_to_document(point: Point, scale: float) -> Point:
    return Point(point.x / scale, point.y / scale)


def point_to_screen(point: Point, scale: float) -> Point:
    return Point(point.x * scale, point.y * scale)


def min_document_size(scale: float, min_screen_size: float = MIN_SCREEN_SIZE) -> float:
    """
    Minimum footprint in document units for the given zoom.

    Falls back to the raw screen size when the scale is unusable, so the
    result is always a positive finite number.
    """
    if not is_valid_scale(scale):
        return min_screen_size
    return min_screen_size / scale


def clamp_dimension(value: float, minimum: float) -> float:
    """Return ``value`` unless it is non-finite or below ``minimum``."""
    if not is_finite(value) or value < minimum:
        return minimum
    return value
