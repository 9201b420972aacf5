"""
Markup annotation engine: data model, geometry and store.
"""
from .models import (
    ANNOTATION_TYPES,
    Annotation,
    DateTimeStampAnnotation,
    HighlightAnnotation,
    HighlightShape,
    ImageAttachmentAnnotation,
    ImageStampAnnotation,
    InteractionState,
    MarkupTool,
    Point,
    Rect,
    ResizeAnchor,
    SignatureAnnotation,
    TextAlign,
    TextAreaAnnotation,
    ToolDefaults,
    annotation_class_for,
)
from .store import MarkupStore

__all__ = [
    'ANNOTATION_TYPES',
    'Annotation',
    'DateTimeStampAnnotation',
    'HighlightAnnotation',
    'HighlightShape',
    'ImageAttachmentAnnotation',
    'ImageStampAnnotation',
    'InteractionState',
    'MarkupTool',
    'Point',
    'Rect',
    'ResizeAnchor',
    'SignatureAnnotation',
    'TextAlign',
    'TextAreaAnnotation',
    'ToolDefaults',
    'annotation_class_for',
    'MarkupStore',
]
