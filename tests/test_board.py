"""Tests for the board, gravity projection and win detection."""

import logging
import sys
import threading
from pathlib import Path

import numpy as np
import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from connect4_events.debug import LOGGER_NAME
from connect4_events.game.board import (ColumnFullError, ProjectionError, check_game_over, empty_board,
                                        project_board, winning_positions)
from connect4_events.game.events import Player, TokenPlaced
from connect4_events.utils import ROWS, Position, Token, column_positions

RED = Player("1", Token.RED)
YELLOW = Player("2", Token.YELLOW)


def placed(token, column):
    return TokenPlaced(game=0, token=token, column=column)


def board_from(moves):
    """Build a board from (token, column) pairs without any turn checks."""
    board = empty_board()
    for token, column in moves:
        project_board(board, placed(token, column))
    return board


def test_no_winner_on_empty_board():
    assert check_game_over(empty_board(), RED, YELLOW) is None


def test_horizontal_win():
    moves = []
    for column in range(4):
        moves.append((Token.RED, column))
        if column != 3:
            moves.append((Token.YELLOW, column))
    board = board_from(moves)
    assert check_game_over(board, RED, YELLOW) == RED


def test_vertical_win():
    moves = []
    for round_number in range(4):
        moves.append((Token.RED, 0))
        if round_number != 3:
            moves.append((Token.YELLOW, 1))
    board = board_from(moves)
    assert check_game_over(board, RED, YELLOW) == RED


def test_up_right_diagonal_win():
    board = board_from([
        (Token.RED, 0),
        (Token.YELLOW, 1), (Token.RED, 1),
        (Token.YELLOW, 2), (Token.YELLOW, 2), (Token.RED, 2),
        (Token.YELLOW, 3), (Token.YELLOW, 3), (Token.YELLOW, 3), (Token.RED, 3),
    ])
    assert check_game_over(board, RED, YELLOW) == RED
    assert winning_positions(board) == [Position(0, 0), Position(1, 1), Position(2, 2), Position(3, 3)]


def test_up_left_diagonal_win():
    board = board_from([
        (Token.RED, 6),
        (Token.YELLOW, 5), (Token.RED, 5),
        (Token.YELLOW, 4), (Token.YELLOW, 4), (Token.RED, 4),
        (Token.YELLOW, 3), (Token.YELLOW, 3), (Token.YELLOW, 3), (Token.RED, 3),
    ])
    assert check_game_over(board, RED, YELLOW) == RED


def test_winner_is_matched_by_token_not_seat():
    board = board_from([(Token.YELLOW, column) for column in range(2, 6)])
    assert check_game_over(board, RED, YELLOW) == YELLOW
    assert check_game_over(board, YELLOW, RED) == YELLOW


def test_line_does_not_wrap_across_board_edge():
    # Flat indices 5, 6, 7, 8 are consecutive but span two rows
    board = board_from([
        (Token.RED, 5), (Token.RED, 6),
        (Token.YELLOW, 0), (Token.RED, 0),
        (Token.YELLOW, 1), (Token.RED, 1),
    ])
    assert check_game_over(board, RED, YELLOW) is None
    assert winning_positions(board) == []


def test_three_in_a_row_is_not_a_win():
    board = board_from([(Token.RED, 0), (Token.RED, 1), (Token.RED, 2), (Token.YELLOW, 3)])
    assert check_game_over(board, RED, YELLOW) is None


def test_vertical_line_at_top_of_column():
    board = board_from([(Token.YELLOW, 2), (Token.YELLOW, 2)] + [(Token.RED, 2)] * 4)
    assert check_game_over(board, RED, YELLOW) == RED


@pytest.mark.parametrize("count", [0, 1, 3, ROWS])
def test_gravity_fills_column_from_bottom(count):
    board = board_from([(Token.RED, 4)] * count)
    occupied = [board.slot(pos) is not None for pos in column_positions(4)]
    assert occupied == [True] * count + [False] * (ROWS - count)
    assert board.column_height(4) == count
    assert board.token_count() == count


def test_projecting_into_full_column_raises():
    board = board_from([(Token.RED, 0)] * ROWS)
    before = board.copy()
    with pytest.raises(ColumnFullError) as excinfo:
        project_board(board, placed(Token.YELLOW, 0))
    assert excinfo.value.column == 0
    assert board == before


def test_projecting_off_board_column_raises():
    with pytest.raises(ProjectionError):
        project_board(empty_board(), placed(Token.RED, 7))


def test_same_event_applied_twice_changes_board_again():
    board = empty_board()
    event = placed(Token.RED, 2)
    project_board(board, event)
    after_first = board.copy()
    project_board(board, event)
    assert board != after_first
    assert board.column_height(2) == 2


def test_get_state_is_a_grid_copy():
    board = board_from([(Token.RED, 3)])
    grid = board.get_state()
    assert grid.shape == (6, 7)
    assert grid[0, 3] == Token.RED.value
    grid[0, 0] = Token.YELLOW.value
    assert board.slot(Position(0, 0)) is None


def test_full_board():
    board = empty_board()
    assert not board.is_full()
    board.slots[:] = np.where(np.arange(42) % 2, Token.RED.value, Token.YELLOW.value)
    assert board.is_full()
    assert board.lowest_empty(0) is None


def test_lines_ending_on_the_last_column_and_row():
    board = board_from([(Token.YELLOW, 6)] * 2 + [(Token.RED, 6)] * 4)
    assert check_game_over(board, RED, YELLOW) == RED
    assert winning_positions(board) == [Position(6, row) for row in range(2, 6)]

    board = board_from([(Token.YELLOW, column) for column in range(3, 7)])
    assert winning_positions(board) == [Position(column, 0) for column in range(3, 7)]


def test_concurrent_win_checks_log_no_warnings(caplog):
    board = board_from([(Token.RED, column) for column in range(4)])
    errors = []

    def check():
        for _ in range(500):
            if check_game_over(board, RED, YELLOW) != RED:
                errors.append("wrong winner")

    with caplog.at_level(logging.WARNING, logger=LOGGER_NAME):
        threads = [threading.Thread(target=check) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

    assert errors == []
    assert [record.getMessage() for record in caplog.records if record.levelno >= logging.WARNING] == []
