"""
Custom widgets for the page surface.
"""
from .markup_overlay import MarkupOverlay

__all__ = ['MarkupOverlay']
