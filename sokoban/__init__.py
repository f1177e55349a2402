"""Terminal Sokoban package."""

from .game import (
    Cell,
    Direction,
    Grid,
    Level,
    LevelCatalog,
    LevelId,
    LevelLoader,
    Session,
    SolutionValidator,
    resolve_move,
)

__all__ = [
    "Cell",
    "Direction",
    "Grid",
    "Level",
    "LevelCatalog",
    "LevelId",
    "LevelLoader",
    "Session",
    "SolutionValidator",
    "resolve_move",
]
