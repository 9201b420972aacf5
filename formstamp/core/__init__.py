"""
Core logic for the formstamp markup engine.
"""
from .markup import Annotation, MarkupStore, MarkupTool

__all__ = ['Annotation', 'MarkupStore', 'MarkupTool']
