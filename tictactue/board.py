"""The 3x3 tic-tac-toe board."""

from __future__ import annotations

import logging
import sys

logger = logging.getLogger(__name__)

SIZE = 3
EMPTY = " "
X_MARK = "x"
O_MARK = "o"
_VALID_CELLS = frozenset((EMPTY, X_MARK, O_MARK))

_LINES = (
    # rows
    ((0, 0), (0, 1), (0, 2)),
    ((1, 0), (1, 1), (1, 2)),
    ((2, 0), (2, 1), (2, 2)),
    # columns
    ((0, 0), (1, 0), (2, 0)),
    ((0, 1), (1, 1), (2, 1)),
    ((0, 2), (1, 2), (2, 2)),
    # diagonals
    ((0, 0), (1, 1), (2, 2)),
    ((0, 2), (1, 1), (2, 0)),
)


class Board:
    """A 3x3 grid holding ``'x'``, ``'o'`` or ``' '`` in each cell."""

    def __init__(self) -> None:
        self._grid = [[EMPTY] * SIZE for _ in range(SIZE)]

    def clear(self) -> None:
        """Empty every cell."""
        for row in self._grid:
            row[:] = [EMPTY] * SIZE
        logger.debug("Board cleared")

    def render(self) -> str:
        """Return the board drawn as text."""
        separator = "---+---+---\n"
        rows = [" " + " | ".join(row) + "\n" for row in self._grid]
        return "\n" + separator.join(rows) + "\n"

    def display(self) -> str:
        """Write the drawn board to standard output and return the text written."""
        text = self.render()
        sys.stdout.write(text)
        sys.stdout.flush()
        return text

    def place_mark(self, row: int, col: int, x_move: bool) -> bool:
        """Put a mark on an empty cell; return False if the cell is off-board or taken."""
        if not (0 <= row < SIZE and 0 <= col < SIZE) or self._grid[row][col] != EMPTY:
            return False
        self._grid[row][col] = X_MARK if x_move else O_MARK
        return True

    def is_full(self) -> bool:
        """Return True when no cell is empty."""
        return all(cell != EMPTY for row in self._grid for cell in row)

    def check_winner(self) -> str:
        """Return the winning mark, or ``' '`` when nobody has three in a line."""
        for line in _LINES:
            first, second, third = (self._grid[r][c] for r, c in line)
            if first != EMPTY and first == second == third:
                return first
        return EMPTY

    @property
    def sequence(self) -> str:
        """The nine cells, row by row, as one string."""
        return "".join(cell for row in self._grid for cell in row)

    def set_sequence(self, seq: str) -> None:
        """Fill the board from a nine-character string of ``'x'``, ``'o'`` and ``' '``."""
        if len(seq) != SIZE * SIZE:
            raise ValueError("Board sequence not in correct length")
        if any(ch not in _VALID_CELLS for ch in seq):
            raise ValueError("Invalid character in board sequence")
        self._grid = [list(seq[i : i + SIZE]) for i in range(0, SIZE * SIZE, SIZE)]