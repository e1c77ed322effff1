"""
board.py - Board representation, gravity and win detection for Connect Four

This module implements the Board class, the projection that drops a placed
token into its column, and the scan that decides whether a board has a winner.
"""

import time

import numpy as np
from typing import List, Optional, Tuple

from connect4_events.debug import debug
from connect4_events.game.events import Player, TokenPlaced
from connect4_events.utils import (COLS, CONNECT_N, DIRECTION_VECTORS, EMPTY, ROWS, SLOT_COUNT,
                                   Direction, Position, Token,
                                   board_positions, column_positions, is_on_board, is_valid_column)


class ProjectionError(Exception):
    """An event could not be folded into the current state."""


class ColumnFullError(ProjectionError):
    """A token was projected into a column that has no empty slot."""

    def __init__(self, column: int):
        super().__init__(f"Column {column} is full")
        self.column = column


class Board:
    """
    A Connect Four board of 42 slots.

    Slots are stored in a flat numpy array addressed by Position.translate();
    a slot holds EMPTY or the value of the Token occupying it.
    """

    def __init__(self, slots: Optional[np.ndarray] = None):
        if slots is None:
            slots = np.full(SLOT_COUNT, EMPTY, dtype=np.int8)
        elif slots.shape != (SLOT_COUNT,):
            raise ValueError(f"Board needs {SLOT_COUNT} slots, got shape {slots.shape}")
        self.slots = slots

    def copy(self) -> 'Board':
        return Board(self.slots.copy())

    def slot(self, position: Position) -> Optional[Token]:
        """
        Get the token occupying a position.

        Returns:
            The Token, or None for an empty slot
        """
        value = int(self.slots[position.translate()])
        return None if value == EMPTY else Token(value)

    def place(self, position: Position, token: Token) -> None:
        self.slots[position.translate()] = token.value

    def is_empty_at(self, position: Position) -> bool:
        return self.slots[position.translate()] == EMPTY

    def column_height(self, column: int) -> int:
        """Number of tokens in a column."""
        return sum(1 for pos in column_positions(column) if not self.is_empty_at(pos))

    def lowest_empty(self, column: int) -> Optional[Position]:
        """
        Find where a token dropped into a column would land.

        Returns:
            The lowest empty position of the column, or None if it is full
        """
        for pos in column_positions(column):
            if self.is_empty_at(pos):
                return pos
        return None

    def is_full(self) -> bool:
        return not np.any(self.slots == EMPTY)

    def token_count(self) -> int:
        return int(np.count_nonzero(self.slots))

    def get_state(self) -> np.ndarray:
        """
        Get the board as a 6x7 grid.

        Returns:
            Copy of the slots reshaped to (ROWS, COLS); row 0 is the bottom row
        """
        return self.slots.reshape(ROWS, COLS).copy()

    def __eq__(self, other):
        if not isinstance(other, Board):
            return NotImplemented
        return bool(np.array_equal(self.slots, other.slots))

    def __repr__(self):
        return f"Board(tokens={self.token_count()})"


def empty_board() -> Board:
    return Board()


def project_board(board: Board, event: TokenPlaced) -> None:
    """
    Drop the event's token into the lowest empty slot of its column.

    Args:
        board: Board to update in place
        event: A TokenPlaced event, normally produced from a validated command

    Raises:
        ColumnFullError: If the column has no empty slot
        ProjectionError: If the column is off the board
    """
    if not is_valid_column(event.column):
        debug.error(f"TokenPlaced for game {event.game} targets column {event.column} off the board", "board")
        raise ProjectionError(f"Column {event.column} is off the board")

    pos = board.lowest_empty(event.column)
    if pos is None:
        debug.error(f"TokenPlaced for game {event.game} targets full column {event.column}", "board")
        raise ColumnFullError(event.column)

    debug.trace(f"Placing {event.token} at {pos}", "board")
    board.place(pos, event.token)


def _shift(anchor: Position, direction: Direction, steps: int) -> Position:
    step_x, step_y = DIRECTION_VECTORS[direction]
    pos = anchor.add_x(step_x * steps) if step_x >= 0 else anchor.sub_x(-step_x * steps)
    return pos.add_y(step_y * steps)


def _fits(anchor: Position, direction: Direction) -> bool:
    """Bounds predicate: does a line of CONNECT_N from anchor stay on the board?"""
    return is_on_board(_shift(anchor, direction, CONNECT_N - 1))


def _line_from(board: Board, anchor: Position, direction: Direction) -> bool:
    value = board.slots[anchor.translate()]
    return all(board.slots[_shift(anchor, direction, i).translate()] == value
               for i in range(1, CONNECT_N))


def _first_line(board: Board) -> Optional[Tuple[Position, Direction]]:
    """
    Scan the board for four in a row.

    Every occupied slot is tried as the starting corner of a line going right,
    up, up-right and up-left. Each direction is bounds checked before any slot
    is read, so no shifted position wraps into a neighbouring column.

    Returns:
        (anchor, direction) of the first line in column-major scan order, or None
    """
    for pos in board_positions():
        if board.is_empty_at(pos):
            continue
        for direction in DIRECTION_VECTORS:
            if _fits(pos, direction) and _line_from(board, pos, direction):
                debug.trace(f"Line of {CONNECT_N} anchored at {pos} going {direction.name}", "board")
                return pos, direction
    return None


def check_game_over(board: Board, player1: Player, player2: Player) -> Optional[Player]:
    """
    Decide whether a board has a winner.

    Only reads the board, so it is safe to call from any thread.

    Args:
        board: Board to inspect
        player1: First seated player
        player2: Second seated player

    Returns:
        The player whose token forms a line, or None if nobody has won
    """
    started = time.perf_counter()
    line = _first_line(board)
    debug.trace(f"Win check took {time.perf_counter() - started:.6f} seconds", "board")
    if line is None:
        return None
    token = board.slot(line[0])
    return player1 if player1.token == token else player2


def winning_positions(board: Board) -> List[Position]:
    """
    Positions of the first winning line, for rendering collaborators.

    Returns:
        CONNECT_N positions starting at the anchor, or an empty list
    """
    line = _first_line(board)
    if line is None:
        return []
    anchor, direction = line
    return [_shift(anchor, direction, i) for i in range(CONNECT_N)]
