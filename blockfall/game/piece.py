"""
The falling piece: four cells that each carry an absolute position and an
offset from the piece's pivot.

Position = pivot + offset holds for every cell at all times. Translation
moves positions and keeps offsets; rotation rewrites both while the pivot
stays put. All transforms return new cell lists so the caller can validate
a candidate before committing it.
"""

from __future__ import annotations

from dataclasses import dataclass

from blockfall.game.pieces import Color, Offset, PiecePattern

Position = tuple[int, int]


@dataclass(frozen=True)
class PieceCell:
    """One cell of the active piece."""

    position: Position
    offset: Offset

    @property
    def pivot(self) -> Position:
        return (self.position[0] - self.offset[0], self.position[1] - self.offset[1])


def rotate_offset_cw(offset: Offset) -> Offset:
    """Rotate an offset 90 degrees clockwise with the matrix [[0, 1], [-1, 0]]."""
    ox, oy = offset
    return (oy, -ox)


class ActivePiece:
    """The single unlocked piece on the board.

    Attributes:
        name: Pattern name ("I", "J", ...).
        color: RGB colour shared by all cells.
        cells: The 4 cells, in pattern order.
    """

    def __init__(self, name: str, color: Color, cells: list[PieceCell]) -> None:
        self.name = name
        self.color = color
        self.cells = list(cells)

    @classmethod
    def spawn(cls, pattern: PiecePattern, color: Color, pivot: Position) -> ActivePiece:
        """Build a piece with its pivot at the given position.

        Args:
            pattern: Shape to place.
            color: Colour of every cell.
            pivot: Absolute position of the (0, 0) offset.

        Returns:
            A new ActivePiece. No collision checking is done here.
        """
        px, py = pivot
        cells = [PieceCell((px + dx, py + dy), (dx, dy)) for dx, dy in pattern.offsets]
        return cls(pattern.name, color, cells)

    @property
    def positions(self) -> list[Position]:
        """Absolute positions of all cells."""
        return [cell.position for cell in self.cells]

    def translated(self, dx: int, dy: int) -> list[PieceCell]:
        """Return the cells shifted by (dx, dy), offsets unchanged."""
        return [
            PieceCell((c.position[0] + dx, c.position[1] + dy), c.offset)
            for c in self.cells
        ]

    def rotated(self) -> list[PieceCell]:
        """Return the cells turned 90 degrees clockwise about the pivot."""
        result = []
        for c in self.cells:
            pivot_x, pivot_y = c.pivot
            new_offset = rotate_offset_cw(c.offset)
            result.append(
                PieceCell((pivot_x + new_offset[0], pivot_y + new_offset[1]), new_offset)
            )
        return result

    def translate(self, dx: int, dy: int) -> None:
        """Move every cell by (dx, dy)."""
        self.cells = self.translated(dx, dy)

    def commit(self, cells: list[PieceCell]) -> None:
        """Replace all cells at once with a previously validated candidate."""
        if len(cells) != len(self.cells):
            raise ValueError(f"Expected {len(self.cells)} cells, got {len(cells)}")
        self.cells = list(cells)

    def __repr__(self) -> str:
        return f"ActivePiece({self.name!r}, {self.positions})"
