"""Layout constants for the terminal UI."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

# Board placement inside the terminal
BOARD_ORIGIN: Tuple[int, int] = (0, 0)

# curses colour pair used for every drawn row
BOARD_COLOR_PAIR: int = 1

# Tone parameters for synthesized cues, as (frequency Hz, duration ms)
CUE_TONES = {
    "blocked_by_wall": (220, 90),
    "blocked_by_box": (330, 90),
    "push": (520, 40),
    "win": (880, 260),
}
TONE_VOLUME: float = 0.35

# Mixer settings requested from pygame
MIXER_FREQUENCY: int = 22050
MIXER_SIZE: int = -16
MIXER_CHANNELS: int = 1
MIXER_BUFFER: int = 512


@dataclass(frozen=True)
class ScreenGeometry:
    """Visible part of the board for a given terminal size."""

    origin: Tuple[int, int]
    visible_rows: int
    visible_columns: int


def compute_geometry(screen_height: int, screen_width: int) -> ScreenGeometry:
    """Clip the drawable area to the terminal; rows never wrap or scroll."""

    origin_x, origin_y = BOARD_ORIGIN
    visible_rows = max(0, screen_height - origin_y)
    # The bottom-right cell cannot be written by curses without an error.
    visible_columns = max(0, screen_width - origin_x - 1)
    return ScreenGeometry(
        origin=(origin_x, origin_y),
        visible_rows=visible_rows,
        visible_columns=visible_columns,
    )
