"""Core puzzle logic for the terminal Sokoban game."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

logger = logging.getLogger(__name__)

Position = Tuple[int, int]

WELCOME_MESSAGE = ("Welcome!",)
CHOOSE_LEVEL_MESSAGE = ("Choose level:", "1 2 3 4 5")


class Cell(Enum):
    """A single grid cell. The value is the glyph drawn on screen."""

    WALL = "#"
    FLOOR = " "
    TARGET = "."
    BOX = "$"
    BOX_ON_TARGET = "*"
    PLAYER = "@"
    PLAYER_ON_TARGET = "+"

    @property
    def glyph(self) -> str:
        return self.value

    @staticmethod
    def from_glyph(glyph: str) -> "Cell":
        try:
            return Cell(glyph)
        except ValueError as exc:
            raise ValueError(f"Unknown cell glyph: {glyph!r}") from exc

    @property
    def underlay(self) -> Optional["Cell"]:
        """Floor kind beneath a box or player; ``None`` for walls."""
        return _UNDERLAY[self]

    @property
    def has_box(self) -> bool:
        return self in (Cell.BOX, Cell.BOX_ON_TARGET)

    @property
    def has_player(self) -> bool:
        return self in (Cell.PLAYER, Cell.PLAYER_ON_TARGET)

    @property
    def is_open(self) -> bool:
        return self in (Cell.FLOOR, Cell.TARGET)

    def with_box(self) -> "Cell":
        return Cell.BOX_ON_TARGET if self.underlay is Cell.TARGET else Cell.BOX

    def with_player(self) -> "Cell":
        return Cell.PLAYER_ON_TARGET if self.underlay is Cell.TARGET else Cell.PLAYER

    def vacated(self) -> "Cell":
        if self.underlay is None:
            raise ValueError("A wall cannot be vacated")
        return self.underlay


_UNDERLAY: Dict[Cell, Optional[Cell]] = {
    Cell.WALL: None,
    Cell.FLOOR: Cell.FLOOR,
    Cell.TARGET: Cell.TARGET,
    Cell.BOX: Cell.FLOOR,
    Cell.BOX_ON_TARGET: Cell.TARGET,
    Cell.PLAYER: Cell.FLOOR,
    Cell.PLAYER_ON_TARGET: Cell.TARGET,
}


class Direction(Enum):
    """Cardinal movement directions as (column, row) deltas."""

    UP = (0, -1)
    DOWN = (0, 1)
    LEFT = (-1, 0)
    RIGHT = (1, 0)

    @property
    def vector(self) -> Tuple[int, int]:
        return self.value

    @staticmethod
    def from_key(key: str) -> "Direction":
        try:
            return _KEY_DIRECTIONS[key]
        except KeyError as exc:
            raise ValueError(f"Unknown move key: {key!r}") from exc

    def reverse(self) -> "Direction":
        mapping = {
            Direction.UP: Direction.DOWN,
            Direction.DOWN: Direction.UP,
            Direction.LEFT: Direction.RIGHT,
            Direction.RIGHT: Direction.LEFT,
        }
        return mapping[self]


_KEY_DIRECTIONS: Dict[str, Direction] = {
    "w": Direction.UP,
    "a": Direction.LEFT,
    "s": Direction.DOWN,
    "d": Direction.RIGHT,
}


class Grid:
    """Mutable surface of cells. Rows may differ in length."""

    def __init__(self, rows: Iterable[Iterable[Cell]]):
        self.rows: List[List[Cell]] = [list(row) for row in rows]

    @classmethod
    def from_text(cls, lines: Iterable[str]) -> "Grid":
        return cls([Cell.from_glyph(glyph) for glyph in line] for line in lines)

    @property
    def height(self) -> int:
        return len(self.rows)

    def row_length(self, row: int) -> int:
        return len(self.rows[row])

    def contains(self, position: Position) -> bool:
        column, row = position
        return 0 <= row < self.height and 0 <= column < self.row_length(row)

    def get(self, position: Position) -> Cell:
        column, row = position
        return self.rows[row][column]

    def set(self, position: Position, cell: Cell) -> None:
        column, row = position
        self.rows[row][column] = cell

    def count(self, cell: Cell) -> int:
        return sum(row.count(cell) for row in self.rows)

    def find_player(self) -> List[Position]:
        return [
            (column, row_index)
            for row_index, row in enumerate(self.rows)
            for column, cell in enumerate(row)
            if cell.has_player
        ]

    def copy(self) -> "Grid":
        return Grid(self.rows)

    def rows_as_text(self) -> List[str]:
        return ["".join(cell.glyph for cell in row) for row in self.rows]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Grid):
            return NotImplemented
        return self.rows == other.rows

    def __repr__(self) -> str:
        return f"Grid({self.rows_as_text()!r})"


class MoveOutcome(Enum):
    MOVED = "moved"
    ABSORBED = "absorbed"
    BLOCKED_BY_WALL = "blocked_by_wall"
    BLOCKED_BY_BOX = "blocked_by_box"

    @property
    def succeeded(self) -> bool:
        return self is MoveOutcome.MOVED

    @property
    def rejected(self) -> bool:
        return self in (MoveOutcome.BLOCKED_BY_WALL, MoveOutcome.BLOCKED_BY_BOX)


@dataclass(frozen=True)
class MoveResult:
    """What happened to a single directional move."""

    outcome: MoveOutcome
    position: Position
    pushed: bool = False


def step(grid: Grid, position: Position, direction: Direction) -> Position:
    """Shift ``position`` by one cell, staying put when that leaves the grid."""

    candidate = (
        position[0] + direction.vector[0],
        position[1] + direction.vector[1],
    )
    if not grid.contains(candidate):
        return position
    return candidate


def resolve_move(grid: Grid, position: Position, direction: Direction) -> MoveResult:
    """Apply one player move to ``grid``.

    The grid is only written once the move is known to succeed, so a blocked
    move leaves both the grid and the position exactly as they were.
    """

    target = step(grid, position, direction)
    if target == position:
        return MoveResult(MoveOutcome.ABSORBED, position)

    target_cell = grid.get(target)
    if target_cell is Cell.WALL:
        return MoveResult(MoveOutcome.BLOCKED_BY_WALL, position)

    pushed = False
    if target_cell.has_box:
        push_to = step(grid, target, direction)
        if push_to == target:
            # The far side of the box is off the grid, which counts as a wall.
            return MoveResult(MoveOutcome.BLOCKED_BY_BOX, position)
        push_cell = grid.get(push_to)
        if not push_cell.is_open:
            return MoveResult(MoveOutcome.BLOCKED_BY_BOX, position)
        grid.set(push_to, push_cell.with_box())
        pushed = True

    grid.set(target, target_cell.with_player())
    current_cell = grid.get(position)
    if current_cell.has_player:
        grid.set(position, current_cell.vacated())
    return MoveResult(MoveOutcome.MOVED, target, pushed=pushed)


def is_solved(grid: Grid) -> bool:
    """A grid is solved once no box is left off a target."""
    return grid.count(Cell.BOX) == 0


class LevelId(Enum):
    """The fixed set of authored puzzles."""

    ONE = 1
    TWO = 2
    THREE = 3
    FOUR = 4
    FIVE = 5

    @property
    def key(self) -> str:
        return f"level_{self.value}"

    @property
    def label(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class Level:
    """Immutable starting layout of an authored puzzle."""

    level_id: LevelId
    name: str
    rows: Tuple[Tuple[Cell, ...], ...]
    start: Position

    def start_grid(self) -> Grid:
        return Grid(self.rows)

    @property
    def box_count(self) -> int:
        return sum(1 for row in self.rows for cell in row if cell.has_box)

    @property
    def metadata(self) -> Dict[str, object]:
        return {
            "name": self.name,
            "level": self.level_id.value,
            "rows": len(self.rows),
            "boxes": self.box_count,
        }


class LevelLoader:
    """Load level files stored as JSON."""

    def __init__(self, root: Path):
        self.root = Path(root)

    def load(self, level_id: LevelId) -> Level:
        path = self.root / f"{level_id.key}.json"
        if not path.exists():
            raise FileNotFoundError(path)
        data = json.loads(path.read_text())
        return self._parse_level(level_id, data)

    def _parse_level(self, level_id: LevelId, data: Dict) -> Level:
        name = data.get("name") or level_id.key
        lines = data.get("rows")
        if not lines or not isinstance(lines, list):
            raise ValueError(f"{level_id.key}: missing 'rows'")
        grid = Grid.from_text(str(line) for line in lines)

        players = grid.find_player()
        if len(players) != 1:
            raise ValueError(
                f"{level_id.key}: expected exactly one player cell, found {len(players)}"
            )
        start = tuple(int(v) for v in data.get("player", players[0]))
        if start != players[0]:
            raise ValueError(
                f"{level_id.key}: player position {start} does not match grid {players[0]}"
            )
        return Level(
            level_id=level_id,
            name=str(name),
            rows=tuple(tuple(row) for row in grid.rows),
            start=players[0],
        )


class LevelCatalog:
    """Every authored level, loaded once at startup."""

    def __init__(self, loader: LevelLoader):
        self.loader = loader
        self._levels: Dict[LevelId, Level] = {
            level_id: loader.load(level_id) for level_id in LevelId
        }

    def get(self, level_id: LevelId) -> Level:
        return self._levels[level_id]

    def all(self) -> List[Level]:
        return [self._levels[level_id] for level_id in LevelId]


# ----------------------------------------------------------------------
# Commands
# ----------------------------------------------------------------------
@dataclass(frozen=True)
class Quit:
    pass


@dataclass(frozen=True)
class ChooseLevel:
    pass


@dataclass(frozen=True)
class SelectLevel:
    level: LevelId


@dataclass(frozen=True)
class Reset:
    pass


@dataclass(frozen=True)
class Move:
    direction: Direction


@dataclass(frozen=True)
class UndoMove:
    pass


Command = Union[Quit, ChooseLevel, SelectLevel, Reset, Move, UndoMove]


@dataclass
class LevelScore:
    """Move counts for one level. ``best == 0`` means no record yet."""

    best: int = 0
    current: int = 0


@dataclass(frozen=True)
class WinResult:
    level: LevelId
    moves: int
    new_record: bool

    @property
    def message(self) -> str:
        text = f"Level {self.level.label} solved in {self.moves} moves."
        if self.new_record:
            return f"{text} New record!"
        return text


@dataclass(frozen=True)
class CommandResult:
    """Observable effects of a dispatched command, consumed by the UI."""

    outcome: Optional[MoveOutcome] = None
    pushed: bool = False
    win: Optional[WinResult] = None
    quit: bool = False


@dataclass
class Session:
    """Single owner of all mutable game state."""

    catalog: LevelCatalog
    grid: Optional[Grid] = None
    position: Position = (0, 0)
    level: Optional[LevelId] = None
    scores: Dict[LevelId, LevelScore] = field(default_factory=dict)
    history: List[Direction] = field(default_factory=list)
    message: Tuple[str, ...] = WELCOME_MESSAGE

    @property
    def playing(self) -> bool:
        return self.level is not None

    def score(self, level_id: LevelId) -> LevelScore:
        return self.scores.setdefault(level_id, LevelScore())

    def screen_rows(self) -> List[str]:
        if self.grid is not None and self.playing:
            return self.grid.rows_as_text()
        return list(self.message)

    def dispatch(self, command: Command) -> CommandResult:
        if isinstance(command, Quit):
            return CommandResult(quit=True)
        if isinstance(command, SelectLevel):
            self.start_level(command.level)
            return CommandResult()
        if isinstance(command, ChooseLevel):
            self.choose_level()
            return CommandResult()
        if not self.playing:
            logger.debug("Ignoring %s while no level is active", command)
            return CommandResult()
        if isinstance(command, Reset):
            self.start_level(self.level)
            return CommandResult()
        if isinstance(command, Move):
            return self.move(command.direction)
        if isinstance(command, UndoMove):
            return self.undo()
        raise TypeError(f"Unknown command: {command!r}")

    def start_level(self, level_id: LevelId) -> None:
        level = self.catalog.get(level_id)
        self.level = level_id
        self.grid = level.start_grid()
        self.position = level.start
        self.history = []
        self.score(level_id).current = 0
        logger.debug("Started %s (%s)", level_id.key, level.name)

    def choose_level(self) -> None:
        self.level = None
        self.grid = None
        self.message = CHOOSE_LEVEL_MESSAGE

    def move(self, direction: Direction) -> CommandResult:
        result = resolve_move(self.grid, self.position, direction)
        if result.outcome.rejected:
            logger.debug("Move %s %s", direction.name, result.outcome.value)
        if not result.outcome.succeeded:
            return CommandResult(outcome=result.outcome)
        self.position = result.position
        self.history.append(direction)
        self.score(self.level).current += 1
        return CommandResult(
            outcome=result.outcome,
            pushed=result.pushed,
            win=self._check_win(),
        )

    def undo(self) -> CommandResult:
        """Step the player back against the last recorded move.

        Only the player's own step is reversed; a box pushed by that move
        stays where it is. The replay is not a forward move, so the move
        count is left as it was.
        """
        if not self.history:
            return CommandResult()
        direction = self.history.pop()
        result = resolve_move(self.grid, self.position, direction.reverse())
        if not result.outcome.succeeded:
            return CommandResult(outcome=result.outcome)
        self.position = result.position
        return CommandResult(
            outcome=result.outcome,
            pushed=result.pushed,
            win=self._check_win(),
        )

    def _check_win(self) -> Optional[WinResult]:
        if not is_solved(self.grid):
            return None
        level_id = self.level
        score = self.score(level_id)
        moves = score.current
        new_record = score.best == 0 or moves < score.best
        if new_record:
            score.best = moves
        score.current = 0
        win = WinResult(level=level_id, moves=moves, new_record=new_record)
        self.level = None
        self.grid = None
        self.history = []
        self.message = (win.message,)
        logger.info("%s solved in %d moves (best %d)", level_id.key, moves, score.best)
        return win


class SolutionValidator:
    """Replay stored move sequences to check that each level is solvable."""

    def __init__(self, catalog: LevelCatalog, solutions_root: Path):
        self.catalog = catalog
        self.solutions_root = Path(solutions_root)

    def load_solution(self, level_id: LevelId) -> Dict:
        path = self.solutions_root / f"{level_id.key}.json"
        if not path.exists():
            raise FileNotFoundError(path)
        return json.loads(path.read_text())

    def replay(self, level_id: LevelId, moves: Sequence[str]) -> Tuple[Session, Optional[WinResult]]:
        session = Session(self.catalog)
        session.dispatch(SelectLevel(level_id))
        win: Optional[WinResult] = None
        for key in moves:
            if not session.playing:
                break
            result = session.dispatch(Move(Direction.from_key(key)))
            if result.win is not None:
                win = result.win
        return session, win

    def validate(self, level_id: LevelId) -> bool:
        solution = self.load_solution(level_id)
        _, win = self.replay(level_id, solution.get("moves", ""))
        if win is None:
            return False
        expected_moves = solution.get("expected_moves")
        if expected_moves is not None and win.moves != int(expected_moves):
            return False
        return True
