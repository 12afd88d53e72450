"""
Editor settings and logging setup.
"""
import logging
import os
from dataclasses import dataclass, field, fields
from typing import Optional, Tuple

from dotenv import load_dotenv

ENV_PREFIX = "PAGESCRIBE_"

# A4 in PDF points
A4_SIZE: Tuple[float, float] = (595.28, 841.89)


@dataclass
class EditorSettings:
    """Defaults for tools, zoom and rendering."""

    # Zoom
    default_zoom: float = 1.5
    zoom_step: float = 0.25
    min_zoom: float = 0.5
    max_zoom: float = 3.0

    # Pencil
    pencil_color: str = "#000000"
    pencil_width: float = 3.0
    pencil_opacity: float = 1.0

    # Eraser diameter in screen pixels
    eraser_size: float = 20.0

    # Text (font size in screen pixels, divided by zoom on placement)
    text_font_size: float = 16.0
    text_color: str = "#000000"
    placeholder_text: str = "New text"
    drag_threshold: float = 3.0

    # Rendering
    render_retry_delay_ms: int = 50
    thumbnail_max_width: float = 150.0

    # Pages
    blank_page_size: Tuple[float, float] = field(default=A4_SIZE)

    history_size: int = 50
    log_level: str = "INFO"

    def clamp_zoom(self, zoom: float) -> float:
        """Clamp a zoom factor to the configured range."""
        return max(self.min_zoom, min(self.max_zoom, zoom))

    @classmethod
    def from_env(cls, dotenv_path: Optional[str] = None) -> "EditorSettings":
        """
        Build settings from PAGESCRIBE_* environment variables.

        A .env file is loaded first if present. Unset variables keep
        their defaults.

        Args:
            dotenv_path: Optional explicit path to a .env file

        Returns:
            EditorSettings instance
        """
        load_dotenv(dotenv_path)
        settings = cls()

        for f in fields(cls):
            raw = os.getenv(ENV_PREFIX + f.name.upper())
            if raw is None:
                continue

            current = getattr(settings, f.name)
            if isinstance(current, tuple):
                width, height = (float(v) for v in raw.split(","))
                setattr(settings, f.name, (width, height))
            elif isinstance(current, bool):
                setattr(settings, f.name, raw.lower() in ("1", "true", "yes"))
            else:
                setattr(settings, f.name, type(current)(raw))

        return settings


def configure_logging(level: str = "INFO") -> None:
    """
    Set the package log level and install a basic stderr handler.

    The root handler is only added if the application has not configured
    logging itself. Unknown level names fall back to INFO.
    """
    numeric = getattr(logging, str(level).upper(), None)
    if not isinstance(numeric, int):
        numeric = logging.INFO

    logging.getLogger("pagescribe").setLevel(numeric)
    logging.basicConfig(
        level=numeric,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
