"""
Theme management and styling for the viewer and the markup palette.
"""
from PyQt5.QtWidgets import QWidget

from .models import ThemeColors


class ThemeManager:
    """Manages application themes and styling."""

    DARK_THEME = ThemeColors(
        bg_primary="#2e2e2e",
        bg_secondary="#3e3e3e",
        bg_tertiary="#4e4e4e",
        text_primary="#f0f0f0",
        text_muted="#8899AA",
        accent_primary="#4a9eff",
        accent_hover="#3a8eef",
        border_primary="#555555",
        selection_outline="#2196f3",
        danger="#ff6b6b",
    )

    LIGHT_THEME = ThemeColors(
        bg_primary="#f0f0f0",
        bg_secondary="#ffffff",
        bg_tertiary="#e0e0e0",
        text_primary="#2e2e2e",
        text_muted="#8899AA",
        accent_primary="#4a9eff",
        accent_hover="#3a8eef",
        border_primary="#cccccc",
        selection_outline="#2196f3",
        danger="#ff6b6b",
    )

    @classmethod
    def theme(cls, dark_mode: bool) -> ThemeColors:
        return cls.DARK_THEME if dark_mode else cls.LIGHT_THEME

    @classmethod
    def apply_theme(cls, widget: QWidget, dark_mode: bool) -> None:
        """
        Apply theme to a widget and its children.

        Args:
            widget: Widget to style
            dark_mode: Whether to use dark theme
        """
        widget.setStyleSheet(cls.generate_stylesheet(cls.theme(dark_mode)))

    @classmethod
    def generate_stylesheet(cls, theme: ThemeColors) -> str:
        return f"""
            QMainWindow, QScrollArea {{
                background-color: {theme.bg_primary};
                color: {theme.text_primary};
            }}

            QFrame#MarkupToolbar {{
                background-color: {theme.bg_secondary};
                border: 1px solid {theme.border_primary};
                border-radius: 6px;
            }}
            QFrame#MarkupToolbar QLabel {{
                background-color: transparent;
                color: {theme.text_muted};
                font-weight: bold;
            }}

            QToolButton {{
                background-color: transparent;
                color: {theme.text_primary};
                border: none;
                border-radius: 4px;
                padding: 4px 8px;
                text-align: left;
            }}
            QToolButton:hover {{
                background-color: {theme.bg_tertiary};
            }}
            QToolButton:checked {{
                background-color: {theme.accent_primary};
                color: white;
            }}
            QToolButton:checked:hover {{
                background-color: {theme.accent_hover};
            }}
        """
