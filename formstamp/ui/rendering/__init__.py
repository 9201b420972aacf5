"""
Render dispatch, hit-testing and painting for markup annotations.
"""
from .dispatcher import render, render_page, render_placement_hint, render_selection
from .hit_test import HitResult, HitType, hit_test
from .painter import MarkupPainter

__all__ = [
    'render',
    'render_page',
    'render_placement_hint',
    'render_selection',
    'HitResult',
    'HitType',
    'hit_test',
    'MarkupPainter',
]
