"""
formstamp: interactive markup annotations for PDF form pages.
"""
__version__ = "0.1.0"
