"""Terminal-independent helpers shared by the curses UI and the tests.

Keys arrive as the integers returned by ``curses.window.getch`` and are
mapped to engine commands here, so the mapping can be exercised without a
real terminal.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from ..game import (
    ChooseLevel,
    Command,
    Direction,
    LevelId,
    Move,
    Quit,
    Reset,
    SelectLevel,
    Session,
    UndoMove,
)
from . import layout

KEY_COMMANDS: Dict[str, Command] = {
    "q": Quit(),
    "m": ChooseLevel(),
    "w": Move(Direction.UP),
    "a": Move(Direction.LEFT),
    "s": Move(Direction.DOWN),
    "d": Move(Direction.RIGHT),
    "r": Reset(),
    "b": UndoMove(),
}
KEY_COMMANDS.update({level.label: SelectLevel(level) for level in LevelId})


def read_input(key: int) -> Optional[Command]:
    """Translate a key code into a command; anything unmapped is ``None``."""

    if key < 0 or key > 0x10FFFF:
        return None
    return KEY_COMMANDS.get(chr(key))


def render_lines(session: Session) -> List[str]:
    """One line per grid row, or the idle message rows."""

    return session.screen_rows()


def clip_lines(lines: List[str], geometry: layout.ScreenGeometry) -> List[str]:
    return [line[: geometry.visible_columns] for line in lines[: geometry.visible_rows]]
