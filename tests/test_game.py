"""Unit tests for tic-tac-toe board rules."""

import pytest

from optimalxo.game import (
    Action,
    Board,
    IllegalMoveError,
    Mark,
    Outcome,
    parse_cell_id,
)

X, O, _ = "X", "O", " "


def play(*actions):
    board = Board.empty()
    for action in actions:
        board = board.apply(action)
    return board


def test_empty_board_starts_with_first_player():
    assert Board.empty().next_player() is Mark.FIRST
    # Structural check: any all-empty board, not one particular instance
    assert Board.from_rows([[None] * 3 for _ in range(3)]).next_player() is Mark.FIRST


def test_players_alternate():
    board = play((0, 0))
    assert board.next_player() is Mark.SECOND
    assert board.apply((1, 1)).next_player() is Mark.FIRST


def test_allowed_actions_are_empty_cells_in_row_major_order():
    board = play((1, 1), (0, 0))
    actions = board.allowed_actions()
    assert len(actions) == 7
    assert actions[0] == (0, 1)
    assert actions == sorted(actions)
    assert (1, 1) not in actions


def test_allowed_actions_always_apply():
    frontier = [Board.empty()]
    seen = 0
    while frontier and seen < 2000:
        board = frontier.pop()
        seen += 1
        actions = board.allowed_actions()
        assert len(actions) == board.cells.count(Mark.EMPTY)
        if board.is_terminal():
            continue
        frontier.extend(board.apply(a) for a in actions)


def test_apply_is_pure():
    board = play((0, 0))
    before = board.cells
    child = board.apply((2, 2))
    assert board.cells == before
    assert board.next_player() is Mark.SECOND
    assert child.at(2, 2) is Mark.SECOND
    assert child is not board


@pytest.mark.parametrize("action", [(0, 0), (-1, 0), (0, 3), (3, 3)])
def test_illegal_actions_leave_board_unchanged(action):
    board = play((0, 0))
    before = board.rows()
    with pytest.raises(IllegalMoveError):
        board.apply(action)
    assert board.rows() == before


@pytest.mark.parametrize(
    "action", [(0,), (0, 1, 2), ("0", "1"), None, (True, False), (1.0, 0)]
)
def test_malformed_actions_are_rejected(action):
    with pytest.raises(IllegalMoveError):
        Board.empty().apply(action)


def test_first_completes_top_row():
    board = Board.from_rows([[X, X, _], [O, O, _], [_, _, _]])
    assert board.next_player() is Mark.FIRST
    won = board.apply((0, 2))
    assert won.winner() is Mark.FIRST
    assert won.utility() == 1
    assert won.is_terminal()
    assert won.outcome() is Outcome.FIRST_WINS


@pytest.mark.parametrize(
    "rows",
    [
        [[O, X, X], [O, X, _], [O, _, _]],  # column
        [[O, X, X], [X, O, _], [_, _, O]],  # diagonal
        [[X, X, O], [X, O, _], [O, _, _]],  # anti-diagonal
    ],
)
def test_second_player_lines(rows):
    board = Board.from_rows(rows)
    assert board.winner() is Mark.SECOND
    assert board.utility() == -1
    assert board.outcome() is Outcome.SECOND_WINS


def test_full_board_without_line_is_a_tie():
    board = Board.from_rows([[X, O, X], [X, O, O], [O, X, X]])
    assert board.is_terminal()
    assert board.winner() is None
    assert board.utility() == 0
    assert board.outcome() is Outcome.TIE
    assert board.allowed_actions() == []


def test_unfinished_board_is_undetermined():
    board = play((1, 1))
    assert not board.is_terminal()
    assert board.utility() == 0
    assert board.outcome() is Outcome.UNDETERMINED


def test_queries_are_idempotent():
    board = Board.from_rows([[X, X, X], [O, O, _], [_, _, _]])
    assert board.is_terminal() == board.is_terminal()
    assert board.winner() == board.winner() == Mark.FIRST
    assert board.utility() == board.utility()
    assert board.allowed_actions() == board.allowed_actions()


def test_rows_round_trip():
    board = play((0, 0), (1, 1), (2, 1))
    assert Board.from_rows(board.rows()) == board
    assert board.rows()[1] == [" ", "O", " "]


@pytest.mark.parametrize(
    "rows",
    [
        [[X, X, _], [_, _, _], [_, _, _]],  # X is two ahead
        [[O, _, _], [_, _, _], [_, _, _]],  # O moved first
        [[X, "Z", _], [_, _, _], [_, _, _]],
        [[X, _], [_, _], [_, _]],
    ],
)
def test_invalid_boards_are_rejected(rows):
    with pytest.raises(ValueError):
        Board.from_rows(rows)


def test_boards_are_frozen():
    board = Board.empty()
    with pytest.raises(AttributeError):
        board.cells = ()


def test_parse_cell_id():
    assert parse_cell_id("02") == Action(0, 2)
    assert parse_cell_id("21") == (2, 1)
    for bad in ("", "0", "123", "a1", "30", "03 "):
        with pytest.raises(IllegalMoveError):
            parse_cell_id(bad)


def test_mark_opponent():
    assert Mark.FIRST.opponent() is Mark.SECOND
    assert Mark.SECOND.opponent() is Mark.FIRST
    with pytest.raises(ValueError):
        Mark.EMPTY.opponent()
