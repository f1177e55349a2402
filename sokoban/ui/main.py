"""Interactive terminal front end for the Sokoban engine using curses."""

from __future__ import annotations

import curses
import logging
import logging.handlers
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..game import LevelCatalog, LevelLoader, Session
from . import layout
from .audio import SoundBoard, cue_for
from .toolkit import clip_lines, read_input, render_lines

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


@dataclass(frozen=True)
class GameDirectories:
    """Bundle with resolved data directories required by the game."""

    level_root: Path
    solution_root: Path


def _default_level_root() -> Path:
    return Path(__file__).resolve().parents[1] / "levels"


def _default_solution_root() -> Path:
    return Path(__file__).resolve().parents[1] / "solutions"


def resolve_directories(check_exists: bool = True) -> GameDirectories:
    """Resolve the packaged data directories.

    Parameters
    ----------
    check_exists:
        When *True*, raise :class:`FileNotFoundError` if a directory is
        missing on disk.
    """

    level_root = _default_level_root()
    solution_root = _default_solution_root()

    if check_exists:
        missing = [path for path in (level_root, solution_root) if not path.exists()]
        if missing:
            missing_str = ", ".join(str(path) for path in missing)
            raise FileNotFoundError(
                f"Required game data directories do not exist: {missing_str}"
            )

    return GameDirectories(level_root=level_root, solution_root=solution_root)


def configure_logging(level: int = logging.INFO) -> logging.handlers.MemoryHandler:
    """Buffer log records while curses owns the screen.

    The returned handler is flushed to stderr once the terminal has been
    restored.
    """

    stream = logging.StreamHandler(sys.stderr)
    stream.setFormatter(logging.Formatter(LOG_FORMAT))
    buffered = logging.handlers.MemoryHandler(
        capacity=1000, flushLevel=logging.CRITICAL + 1, target=stream
    )
    root = logging.getLogger()
    root.setLevel(level)
    root.addHandler(buffered)
    return buffered


class SokobanApp:
    """curses driven application for the puzzle."""

    def __init__(
        self,
        screen,
        session: Session,
        *,
        sounds: Optional[SoundBoard] = None,
        use_color: bool = False,
    ) -> None:
        self.screen = screen
        self.session = session
        self.sounds = sounds or SoundBoard()
        self.row_attr = curses.A_NORMAL
        if use_color:
            self.row_attr = self._init_colors()

    @staticmethod
    def _init_colors() -> int:
        if not curses.has_colors():
            return curses.A_NORMAL
        curses.start_color()
        curses.use_default_colors()
        curses.init_pair(layout.BOARD_COLOR_PAIR, curses.COLOR_BLUE, -1)
        return curses.color_pair(layout.BOARD_COLOR_PAIR)

    def draw(self) -> None:
        height, width = self.screen.getmaxyx()
        geometry = layout.compute_geometry(height, width)
        origin_x, origin_y = geometry.origin
        self.screen.erase()
        for index, line in enumerate(clip_lines(render_lines(self.session), geometry)):
            try:
                self.screen.addstr(origin_y + index, origin_x, line, self.row_attr)
            except curses.error:
                # Terminal shrank between measuring and drawing.
                break
        self.screen.refresh()

    def handle_key(self, key: int) -> bool:
        """Process one key press. Returns ``False`` once the game should stop."""

        command = read_input(key)
        if command is None:
            return True
        result = self.session.dispatch(command)
        if result.quit:
            return False
        self.sounds.play(cue_for(result))
        return True

    def run(self) -> None:
        self.draw()
        while True:
            key = self.screen.getch()
            if not self.handle_key(key):
                return
            self.draw()


def _play(screen, session: Session, sounds: SoundBoard) -> None:
    try:
        curses.curs_set(0)
    except curses.error:
        logger.debug("Terminal cannot hide the cursor")
    app = SokobanApp(screen, session, sounds=sounds, use_color=True)
    app.run()


def run() -> int:
    """Entry point helper that loads the levels and runs the UI."""

    buffered = configure_logging()
    try:
        directories = resolve_directories()
        catalog = LevelCatalog(LevelLoader(directories.level_root))
        session = Session(catalog)
        sounds = SoundBoard().load()
        try:
            curses.wrapper(_play, session, sounds)
        except curses.error as exc:
            logger.error("Could not initialise the terminal: %s", exc)
            return 1
        finally:
            sounds.close()
        return 0
    finally:
        buffered.close()
        logging.getLogger().removeHandler(buffered)


def main() -> None:
    sys.exit(run())


if __name__ == "__main__":  # pragma: no cover - manual invocation entry point
    main()
