"""
Tetromino patterns and the colour palette.

Each pattern is a list of exactly 4 (dx, dy) offsets from a pivot cell at
(0, 0). The pivot is the rotation centre, so the exact offsets decide how
every piece turns and must not be normalized to a bounding box.

Coordinate convention:
  - dx grows to the right, dy grows upward (row 0 is the floor).
"""

from __future__ import annotations

import random
from dataclasses import dataclass

Offset = tuple[int, int]
Color = tuple[int, int, int]


@dataclass(frozen=True)
class PiecePattern:
    """One fixed tetromino shape, as offsets from its pivot."""

    name: str
    offsets: tuple[Offset, ...]

    def __post_init__(self) -> None:
        if len(self.offsets) != 4:
            raise ValueError(
                f"Pattern {self.name!r} must have exactly 4 cells, got {len(self.offsets)}"
            )


# =============================================================================
# Tetromino Definitions
# =============================================================================

I_PATTERN = PiecePattern("I", ((0, 0), (0, -1), (0, 1), (0, 2)))
J_PATTERN = PiecePattern("J", ((0, 0), (0, -1), (0, 1), (-1, 1)))
L_PATTERN = PiecePattern("L", ((0, 0), (0, -1), (0, 1), (1, 1)))
S_PATTERN = PiecePattern("S", ((0, 0), (0, -1), (1, 0), (1, 1)))
Z_PATTERN = PiecePattern("Z", ((0, 0), (1, 0), (0, 1), (1, -1)))
O_PATTERN = PiecePattern("O", ((0, 0), (0, 1), (1, 0), (1, 1)))
T_PATTERN = PiecePattern("T", ((0, 0), (-1, 0), (1, 0), (0, 1)))

PIECE_PATTERNS: list[PiecePattern] = [
    I_PATTERN,
    J_PATTERN,
    L_PATTERN,
    S_PATTERN,
    Z_PATTERN,
    O_PATTERN,
    T_PATTERN,
]

PATTERNS_BY_NAME: dict[str, PiecePattern] = {p.name: p for p in PIECE_PATTERNS}

# =============================================================================
# Piece Colors (RGB)
# =============================================================================

COLOR_GREEN  = (64, 230, 100)
COLOR_RED    = (220, 64, 90)
COLOR_BLUE   = (70, 150, 210)
COLOR_YELLOW = (220, 230, 70)
COLOR_CYAN   = (35, 220, 241)
COLOR_ORANGE = (240, 140, 70)

PALETTE: list[Color] = [
    COLOR_GREEN,
    COLOR_RED,
    COLOR_BLUE,
    COLOR_YELLOW,
    COLOR_CYAN,
    COLOR_ORANGE,
]


class PieceCatalog:
    """Uniform random source of patterns and colours.

    Attributes:
        patterns: The patterns to draw from.
        palette: The colours to draw from.
    """

    def __init__(
        self,
        patterns: list[PiecePattern] | None = None,
        palette: list[Color] | None = None,
        seed: int | None = None,
    ) -> None:
        """Initialize the catalog.

        Args:
            patterns: Patterns to choose from (default: the 7 tetrominoes).
            palette: Colours to choose from (default: the 6-entry palette).
            seed: Seed for the catalog's own RNG, or None for a random seed.

        Raises:
            ValueError: If patterns or palette is empty.
        """
        self.patterns = list(PIECE_PATTERNS if patterns is None else patterns)
        self.palette = [tuple(c) for c in (PALETTE if palette is None else palette)]
        if not self.patterns:
            raise ValueError("PieceCatalog needs at least one pattern")
        if not self.palette:
            raise ValueError("PieceCatalog needs at least one colour")
        self._rng = random.Random(seed)

    def random_pattern(self) -> PiecePattern:
        """Return one of the patterns, each equally likely."""
        return self._rng.choice(self.patterns)

    def random_color(self) -> Color:
        """Return one of the palette colours, each equally likely."""
        return self._rng.choice(self.palette)
