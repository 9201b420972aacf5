"""
Configuration steps for markup tools.
"""
from .configuration_dialogs import QtDialogProvider
from .markup_dialogs import DateTimeStampDialog, SignatureDialog, SignaturePad, TextAreaDialog

__all__ = ['QtDialogProvider', 'TextAreaDialog', 'DateTimeStampDialog', 'SignatureDialog', 'SignaturePad']
