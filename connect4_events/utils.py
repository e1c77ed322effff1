"""
utils.py - Constants, tokens and the board coordinate system

This module provides the board geometry constants, the Token enumeration and
the Position type that maps (column, row) coordinates onto the flat board
index used everywhere else in the package.
"""

import numbers
from enum import Enum, auto
from typing import List, NamedTuple

# Board geometry
COLS = 7
ROWS = 6
SLOT_COUNT = COLS * ROWS
CONNECT_N = 4  # Number of tokens in a line to win

EMPTY = 0  # Value of an unoccupied slot in the board array


class Token(Enum):
    """The mark a player places on the board."""
    RED = 1
    YELLOW = 2

    def other(self) -> 'Token':
        """Get the opposing token."""
        return Token.YELLOW if self == Token.RED else Token.RED

    def __str__(self):
        return self.name.capitalize()


class Direction(Enum):
    """Directions a winning line is followed from its starting corner."""
    RIGHT = auto()
    UP = auto()
    UP_RIGHT = auto()
    UP_LEFT = auto()


# Direction vectors (column, row); dict order is the order lines are tried
DIRECTION_VECTORS = {
    Direction.RIGHT: (1, 0),
    Direction.UP: (0, 1),
    Direction.UP_RIGHT: (1, 1),
    Direction.UP_LEFT: (-1, 1),
}


class Position(NamedTuple):
    """
    A (column, row) coordinate on the board.

    Row 0 is the bottom row, so gravity fills a column in ascending row order.
    The shift helpers do no bounds checking: guard with is_on_board() before
    translating a shifted position.
    """
    column: int
    row: int

    def translate(self) -> int:
        """Flat board index of this position: column + COLS * row."""
        return self.column + COLS * self.row

    @classmethod
    def from_index(cls, index: int) -> 'Position':
        """
        Inverse of translate().

        Raises:
            ValueError: If the index is outside the board
        """
        if not (0 <= index < SLOT_COUNT):
            raise ValueError(f"Board index {index} out of range [0, {SLOT_COUNT})")
        row, column = divmod(index, COLS)
        return cls(column, row)

    def add_x(self, offset: int) -> 'Position':
        return Position(self.column + offset, self.row)

    def sub_x(self, offset: int) -> 'Position':
        return Position(self.column - offset, self.row)

    def add_y(self, offset: int) -> 'Position':
        return Position(self.column, self.row + offset)

    def __str__(self):
        return f"({self.column}, {self.row})"


def is_on_board(position: Position) -> bool:
    """
    Check if a position is within the board boundaries.

    Args:
        position: Position to check

    Returns:
        True if the position maps to a live board index
    """
    return 0 <= position.column < COLS and 0 <= position.row < ROWS


def is_valid_column(column: int) -> bool:
    """Check that a column is an integer index on the board."""
    if isinstance(column, bool) or not isinstance(column, numbers.Integral):
        return False
    return 0 <= column < COLS


def board_positions() -> List[Position]:
    """
    Enumerate all board positions column by column.

    Returns:
        The 42 positions, outer loop over columns, inner loop over rows
    """
    return [Position(column, row) for column in range(COLS) for row in range(ROWS)]


def column_positions(column: int) -> List[Position]:
    """
    Enumerate the positions of a single column from the bottom up.

    Args:
        column: Column index

    Returns:
        One position per row, ascending row order
    """
    return [Position(column, row) for row in range(ROWS)]
