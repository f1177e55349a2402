"""User interface package for the Sokoban game."""

from .audio import Cue, SoundBoard
from .main import (
    GameDirectories,
    SokobanApp,
    main,
    resolve_directories,
    run,
)
from .toolkit import read_input, render_lines

__all__ = [
    "Cue",
    "GameDirectories",
    "SokobanApp",
    "SoundBoard",
    "main",
    "read_input",
    "render_lines",
    "resolve_directories",
    "run",
]
