"""
Runtime settings for the markup engine and the demo viewer.
"""
import logging
import os
from dataclasses import dataclass, fields

logger = logging.getLogger(__name__)

ENV_PREFIX = "FORMSTAMP_"


@dataclass
class MarkupSettings:
    """Tunable values; every field can be overridden from the environment."""

    # Interaction geometry (screen pixels)
    min_screen_size: float = 20.0
    handle_size: float = 8.0
    control_cluster_offset: float = 24.0

    # Zoom
    default_zoom: float = 1.5
    zoom_step: float = 0.25
    min_zoom: float = 0.25
    max_zoom: float = 5.0

    # Logging
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls, environ=None) -> "MarkupSettings":
        """
        Build settings from ``FORMSTAMP_*`` variables.

        Args:
            environ: Mapping to read from (defaults to ``os.environ``)

        Returns:
            Settings with any valid overrides applied
        """
        environ = os.environ if environ is None else environ
        settings = cls()
        for f in fields(cls):
            raw = environ.get(ENV_PREFIX + f.name.upper())
            if raw is None:
                continue
            try:
                value = float(raw) if f.type in (float, "float") else raw
            except ValueError:
                logger.warning("Ignoring invalid %s%s=%r", ENV_PREFIX, f.name.upper(), raw)
                continue
            setattr(settings, f.name, value)
        return settings

    def clamp_zoom(self, zoom: float) -> float:
        return max(self.min_zoom, min(self.max_zoom, zoom))
