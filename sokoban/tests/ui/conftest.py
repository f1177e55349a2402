"""Shared pytest fixtures for UI tests.

The tests force SDL into a deterministic headless configuration by using the
``dummy`` audio driver, and drive the curses application through a fake
window so no real terminal is needed.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Generator, List, Tuple

import pytest

from sokoban.game import LevelCatalog, LevelLoader, Session


LEVEL_ROOT = Path(__file__).resolve().parents[2] / "levels"


class FakeScreen:
    """Records what the application draws, in place of a curses window."""

    def __init__(self, keys=(), size: Tuple[int, int] = (24, 80)) -> None:
        self.keys: List[int] = [ord(key) if isinstance(key, str) else key for key in keys]
        self.size = size
        self.lines: List[Tuple[int, int, str]] = []
        self.refreshes = 0

    def getmaxyx(self) -> Tuple[int, int]:
        return self.size

    def erase(self) -> None:
        self.lines = []

    def addstr(self, y: int, x: int, text: str, attr: int = 0) -> None:
        self.lines.append((y, x, text))

    def refresh(self) -> None:
        self.refreshes += 1

    def getch(self) -> int:
        return self.keys.pop(0)

    def text(self) -> List[str]:
        return [text for _y, _x, text in self.lines]


class RecordingSounds:
    def __init__(self) -> None:
        self.played = []

    def play(self, cue) -> None:
        if cue is not None:
            self.played.append(cue)


@pytest.fixture(scope="session", autouse=True)
def configure_headless_environment() -> Generator[None, None, None]:
    os.environ.setdefault("SDL_AUDIODRIVER", "dummy")
    os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")
    yield


@pytest.fixture(scope="session")
def catalog() -> LevelCatalog:
    return LevelCatalog(LevelLoader(LEVEL_ROOT))


@pytest.fixture
def session(catalog: LevelCatalog) -> Session:
    return Session(catalog)


@pytest.fixture
def sounds() -> RecordingSounds:
    return RecordingSounds()


@pytest.fixture
def make_screen():
    return FakeScreen
