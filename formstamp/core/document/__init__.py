"""
Page sources for the viewer surface.
"""
from .page_source import BlankPageSource, PageSource, PdfPageSource, open_page_source

__all__ = ['BlankPageSource', 'PageSource', 'PdfPageSource', 'open_page_source']
