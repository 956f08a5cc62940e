"""
Board logic for a 10x18 falling-block grid.

The board is a 2D numpy array (height x width) of bool values, indexed as
grid[y, x]:
  - False = free cell
  - True  = occupied by a locked block

Row 0 is the floor and y grows upward. The active piece is never written
into the grid until it locks. Row `height` acts as a spawn buffer above the
visible top; it is not part of the grid, so callers must bounds-check with
in_bounds() before any occupancy query.
"""

from __future__ import annotations

import numpy as np


class Board:
    """Grid of locked cells with full-row detection and row collapse.

    Attributes:
        width: Number of columns (default 10).
        height: Number of rows (default 18).
        grid: 2D numpy array of shape (height, width), dtype bool.
    """

    def __init__(self, width: int = 10, height: int = 18) -> None:
        """Initialize an all-free board.

        Args:
            width: Number of columns.
            height: Number of rows.

        Raises:
            ValueError: If either dimension is not positive.
        """
        if width <= 0 or height <= 0:
            raise ValueError(f"Board dimensions must be positive, got {width}x{height}")
        self.width = width
        self.height = height
        self.grid = np.zeros((self.height, self.width), dtype=bool)

    def in_bounds(self, x: int, y: int) -> bool:
        """Return True if (x, y) lies inside [0, width) x [0, height)."""
        return 0 <= x < self.width and 0 <= y < self.height

    def _check(self, x: int, y: int) -> None:
        if not self.in_bounds(x, y):
            raise IndexError(
                f"Cell ({x}, {y}) is outside the {self.width}x{self.height} board"
            )

    def is_occupied(self, x: int, y: int) -> bool:
        """Return whether a locked block occupies (x, y).

        Raises:
            IndexError: If (x, y) is out of range. Callers bounds-check first.
        """
        self._check(x, y)
        return bool(self.grid[y, x])

    def set(self, x: int, y: int, occupied: bool) -> None:
        """Mark (x, y) as occupied or free.

        Raises:
            IndexError: If (x, y) is out of range.
        """
        self._check(x, y)
        self.grid[y, x] = occupied

    def clear_all(self) -> None:
        """Free every cell."""
        self.grid = np.zeros((self.height, self.width), dtype=bool)

    def full_rows(self) -> list[int]:
        """Return the indices of rows where every cell is occupied, bottom first."""
        full = np.all(self.grid, axis=1)
        return [int(y) for y in np.flatnonzero(full)]

    def collapse_rows(self, rows: list[int]) -> None:
        """Remove the given rows and shift every row above them down.

        A surviving row y moves down by the number of removed rows below it.
        Empty rows are appended at the top so the board keeps its height.

        Args:
            rows: Row indices to remove. Duplicates are ignored.
        """
        if not rows:
            return
        for y in rows:
            self._check(0, y)
        mask = np.ones(self.height, dtype=bool)
        mask[list(set(rows))] = False
        remaining = self.grid[mask]
        empty_rows = np.zeros((self.height - remaining.shape[0], self.width), dtype=bool)
        self.grid = np.vstack([remaining, empty_rows])

    def occupied_cells(self) -> list[tuple[int, int]]:
        """Return every occupied cell as an (x, y) tuple, bottom row first."""
        ys, xs = np.nonzero(self.grid)
        return [(int(x), int(y)) for y, x in zip(ys, xs)]

    def count(self) -> int:
        """Return the number of occupied cells."""
        return int(self.grid.sum())

    def get_grid(self) -> np.ndarray:
        """Return a copy of the board grid.

        Returns:
            A numpy array of shape (height, width), dtype bool.
        """
        return self.grid.copy()
