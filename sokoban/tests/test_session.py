"""Tests for the Session state machine: levels, scoring, reset and undo."""

from __future__ import annotations

from pathlib import Path

import pytest

from sokoban.game import (
    CHOOSE_LEVEL_MESSAGE,
    WELCOME_MESSAGE,
    ChooseLevel,
    Direction,
    Grid,
    Level,
    LevelCatalog,
    LevelId,
    LevelLoader,
    LevelScore,
    Move,
    MoveOutcome,
    Quit,
    Reset,
    SelectLevel,
    Session,
    UndoMove,
)

LEVEL_ROOT = Path(__file__).resolve().parents[1] / "levels"


@pytest.fixture(scope="module")
def catalog() -> LevelCatalog:
    return LevelCatalog(LevelLoader(LEVEL_ROOT))


@pytest.fixture
def session(catalog: LevelCatalog) -> Session:
    return Session(catalog)


def play(session: Session, keys: str):
    results = []
    for key in keys:
        results.append(session.dispatch(Move(Direction.from_key(key))))
    return results


# ---------------------------------------------------------------------------
# Idle state
# ---------------------------------------------------------------------------

class TestIdle:
    def test_starts_idle_with_welcome(self, session: Session):
        assert not session.playing
        assert session.screen_rows() == list(WELCOME_MESSAGE)
        assert session.scores == {}

    @pytest.mark.parametrize("command", [Move(Direction.LEFT), Reset(), UndoMove()])
    def test_level_commands_are_ignored_while_idle(self, session: Session, command):
        result = session.dispatch(command)
        assert result.outcome is None
        assert not session.playing
        assert session.screen_rows() == list(WELCOME_MESSAGE)

    def test_choose_level_shows_picker(self, session: Session):
        session.dispatch(ChooseLevel())
        assert session.screen_rows() == list(CHOOSE_LEVEL_MESSAGE)

    def test_choose_level_leaves_scores_alone(self, session: Session):
        session.dispatch(SelectLevel(LevelId.TWO))
        play(session, "a")
        session.dispatch(ChooseLevel())
        assert not session.playing
        assert session.scores[LevelId.TWO] == LevelScore(best=0, current=1)

    def test_quit_from_any_state(self, session: Session):
        assert session.dispatch(Quit()).quit
        session.dispatch(SelectLevel(LevelId.ONE))
        assert session.dispatch(Quit()).quit


# ---------------------------------------------------------------------------
# Selecting and resetting levels
# ---------------------------------------------------------------------------

class TestLevelSelection:
    def test_select_level_starts_fresh(self, session: Session, catalog: LevelCatalog):
        session.dispatch(SelectLevel(LevelId.ONE))
        level = catalog.get(LevelId.ONE)

        assert session.level is LevelId.ONE
        assert session.position == level.start
        assert session.grid == level.start_grid()
        assert session.history == []
        assert session.scores[LevelId.ONE] == LevelScore(best=0, current=0)

    def test_score_entry_created_lazily(self, session: Session):
        session.dispatch(SelectLevel(LevelId.THREE))
        assert list(session.scores) == [LevelId.THREE]

    def test_reset_restores_start_exactly(self, session: Session, catalog: LevelCatalog):
        session.dispatch(SelectLevel(LevelId.THREE))
        play(session, "aww")
        assert session.history

        session.dispatch(Reset())

        level = catalog.get(LevelId.THREE)
        assert session.grid == level.start_grid()
        assert session.position == level.start
        assert session.history == []
        assert session.scores[LevelId.THREE].current == 0

    def test_reset_keeps_best(self, session: Session):
        session.dispatch(SelectLevel(LevelId.ONE))
        play(session, "a")
        session.dispatch(SelectLevel(LevelId.ONE))
        play(session, "w")

        session.dispatch(Reset())

        assert session.scores[LevelId.ONE].best == 1

    def test_switching_levels_mid_play(self, session: Session, catalog: LevelCatalog):
        session.dispatch(SelectLevel(LevelId.TWO))
        play(session, "a")
        session.dispatch(SelectLevel(LevelId.FOUR))

        assert session.level is LevelId.FOUR
        assert session.grid == catalog.get(LevelId.FOUR).start_grid()
        assert session.scores[LevelId.TWO].current == 1


# ---------------------------------------------------------------------------
# Moving and scoring
# ---------------------------------------------------------------------------

class TestMoves:
    def test_successful_move_counts_once(self, session: Session):
        session.dispatch(SelectLevel(LevelId.THREE))
        result = session.dispatch(Move(Direction.LEFT))

        assert result.outcome is MoveOutcome.MOVED
        assert session.scores[LevelId.THREE].current == 1
        assert session.history == [Direction.LEFT]

    def test_wall_rejection_changes_nothing(self, session: Session):
        session.dispatch(SelectLevel(LevelId.ONE))
        grid_before = session.grid.copy()

        result = session.dispatch(Move(Direction.RIGHT))

        assert result.outcome is MoveOutcome.BLOCKED_BY_WALL
        assert session.grid == grid_before
        assert session.position == (3, 2)
        assert session.scores[LevelId.ONE].current == 0
        assert session.history == []

    def test_box_rejection_changes_nothing(self, session: Session):
        session.dispatch(SelectLevel(LevelId.TWO))
        play(session, "a")
        grid_before = session.grid.copy()

        result = session.dispatch(Move(Direction.LEFT))

        assert result.outcome is MoveOutcome.BLOCKED_BY_BOX
        assert session.grid == grid_before
        assert session.scores[LevelId.TWO].current == 1

    def test_push_reported(self, session: Session):
        session.dispatch(SelectLevel(LevelId.TWO))
        result = session.dispatch(Move(Direction.LEFT))
        assert result.pushed
        assert result.win is None


# ---------------------------------------------------------------------------
# Winning
# ---------------------------------------------------------------------------

class TestWin:
    def test_level_one_round_trip(self, session: Session):
        session.dispatch(SelectLevel(LevelId.ONE))
        grid = session.grid
        result = session.dispatch(Move(Direction.LEFT))

        assert grid.rows_as_text()[2] == "#*@ #"
        assert result.win is not None
        assert result.win.level is LevelId.ONE
        assert result.win.moves == 1
        assert result.win.new_record
        assert session.scores[LevelId.ONE] == LevelScore(best=1, current=0)
        assert not session.playing
        assert session.screen_rows() == ["Level 1 solved in 1 moves. New record!"]

    def test_win_fires_only_on_last_box(self, session: Session):
        session.dispatch(SelectLevel(LevelId.TWO))
        first, second, third = play(session, "add")

        assert first.win is None and second.win is None
        assert third.win is not None
        assert third.win.moves == 3

    def test_reselect_after_win_keeps_best(self, session: Session):
        session.dispatch(SelectLevel(LevelId.ONE))
        play(session, "a")
        session.dispatch(SelectLevel(LevelId.ONE))

        assert session.scores[LevelId.ONE] == LevelScore(best=1, current=0)
        assert session.playing

    def test_slower_solve_is_not_a_record(self, session: Session):
        session.dispatch(SelectLevel(LevelId.ONE))
        play(session, "a")
        session.dispatch(SelectLevel(LevelId.ONE))
        results = play(session, "wsa")

        win = results[-1].win
        assert win is not None
        assert win.moves == 3
        assert not win.new_record
        assert session.scores[LevelId.ONE].best == 1
        assert session.screen_rows() == ["Level 1 solved in 3 moves."]

    def test_faster_solve_replaces_record(self, session: Session):
        session.dispatch(SelectLevel(LevelId.ONE))
        play(session, "wsa")
        session.dispatch(SelectLevel(LevelId.ONE))
        results = play(session, "a")

        assert results[-1].win.new_record
        assert session.scores[LevelId.ONE].best == 1

    def test_moves_after_win_are_ignored(self, session: Session):
        session.dispatch(SelectLevel(LevelId.ONE))
        play(session, "a")
        result = session.dispatch(Move(Direction.RIGHT))
        assert result.outcome is None


# ---------------------------------------------------------------------------
# Undo
# ---------------------------------------------------------------------------

class TestUndo:
    def test_undo_plain_move_restores_position(self, session: Session, catalog: LevelCatalog):
        session.dispatch(SelectLevel(LevelId.THREE))
        play(session, "a")

        result = session.dispatch(UndoMove())

        assert result.outcome is MoveOutcome.MOVED
        assert session.position == catalog.get(LevelId.THREE).start
        assert session.grid == catalog.get(LevelId.THREE).start_grid()
        assert session.history == []
        assert session.scores[LevelId.THREE].current == 1

    def test_undo_never_changes_the_count(self, session: Session):
        session.dispatch(SelectLevel(LevelId.FOUR))
        play(session, "aww")
        count = session.scores[LevelId.FOUR].current

        session.dispatch(UndoMove())

        assert len(session.history) == 2
        assert session.scores[LevelId.FOUR].current == count

    def test_undo_with_empty_history_is_ignored(self, session: Session, catalog: LevelCatalog):
        session.dispatch(SelectLevel(LevelId.THREE))
        result = session.dispatch(UndoMove())

        assert result.outcome is None
        assert session.grid == catalog.get(LevelId.THREE).start_grid()

    def test_undo_of_push_leaves_box_in_place(self, session: Session):
        session.dispatch(SelectLevel(LevelId.THREE))
        play(session, "aw")
        assert session.grid.rows_as_text()[2] == "# $  #"

        session.dispatch(UndoMove())

        assert session.position == (2, 4)
        assert session.grid.rows_as_text()[2] == "# $  #"
        assert session.grid.rows_as_text()[3] == "#    #"

    def test_win_reached_by_undo_keeps_forward_count(self):
        # The last undo steps left into the box and shoves it onto the target.
        grid = Grid.from_text(["#####", "#   #", "# $ #", "#.@ #", "#####"])
        level = Level(
            level_id=LevelId.ONE,
            name="Backwards",
            rows=tuple(tuple(row) for row in grid.rows),
            start=(2, 3),
        )

        class SingleLevel:
            def get(self, level_id):
                return level

        session = Session(SingleLevel())
        session.dispatch(SelectLevel(LevelId.ONE))
        play(session, "dwwas")

        results = [session.dispatch(UndoMove()) for _ in range(5)]

        win = results[-1].win
        assert all(result.win is None for result in results[:-1])
        assert win is not None
        assert win.moves == 5
        assert win.new_record
        assert session.scores[LevelId.ONE].best == 5
