"""
Global UI tuning knobs for the GraphBlast GUI.

Values are loaded from the project-root `configuration.py` when available,
otherwise fall back to the defaults defined here.
"""

from pathlib import Path
from typing import Optional

from graphblast.settings import _cfg_value

# Font candidate priority (first available wins)
FONT_CANDIDATES = _cfg_value(
    "FONT_CANDIDATES",
    ["Segoe UI", "PingFang SC", "Noto Sans", "Arial", "Helvetica"],
)

# Optional font scaling; 1.0 = default.
FONT_SCALING: float = _cfg_value("FONT_SCALING", 1.25)
# Optional UI scaling factor for control heights/widths/icons; 1.0 = default.
UI_SCALING: float = _cfg_value("UI_SCALING", 1.25)

# Initial window size (width, height)
WINDOW_WIDTH: int = _cfg_value("WINDOW_WIDTH", 1600)
WINDOW_HEIGHT: int = _cfg_value("WINDOW_HEIGHT", 1000)

# Size presets (in points)
BASE_FONT_SIZE = int(10 * FONT_SCALING)
HERO_FONT_SIZE = int(14 * FONT_SCALING)
WIDGET_FONT_SIZE = int(10 * FONT_SCALING)
CONTROL_HEIGHT = int(32 * UI_SCALING)
ICON_SIZE = int(16 * UI_SCALING)

# Padding tweaks (pixels)
PANEL_PADDING = int(12 * UI_SCALING)

# Default working directory (None means OS default)
DEFAULT_BROWSE_DIR: Optional[str | Path] = _cfg_value("DEFAULT_BROWSE_DIR", None)
