"""
Game engine: per-step rule evaluation for the falling-block simulation.

Each call to step() advances both timers and then runs the rules in a fixed
order, each seeing the board and piece exactly as the previous rule left
them:

  1. spawn        (when requested: startup, after a lock, after a reset)
  2. gravity/lock (gravity timer)
  3. row clear    (gravity timer, after lock)
  4. left / right (input-repeat timer, while held)
  5. hard drop    (edge-triggered)
  6. rotate       (edge-triggered)
  7. game over    (spawn blocked or lock out: full reset)

The engine is the only writer of the board and the active piece. Callers
get read-only Snapshot values and the list of events emitted in the step.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Iterable, Union

from blockfall.game.board import Board
from blockfall.game.clock import GameClock
from blockfall.game.piece import ActivePiece, PieceCell, Position
from blockfall.game.pieces import PATTERNS_BY_NAME, Color, PieceCatalog


class Command(enum.IntEnum):
    """Player commands. Moves repeat while held; drop and rotate fire per press."""
    MOVE_LEFT = 0
    MOVE_RIGHT = 1
    HARD_DROP = 2
    ROTATE_CW = 3


class KeyLatch:
    """Turns the set of currently held commands into just-pressed transitions.

    Feed it the held set once per frame; update() returns only the commands
    that were not held on the previous frame.
    """

    def __init__(self) -> None:
        self._held: frozenset[Command] = frozenset()

    def update(self, held: Iterable[Command]) -> set[Command]:
        current = frozenset(held)
        pressed = set(current - self._held)
        self._held = current
        return pressed

    def reset(self) -> None:
        self._held = frozenset()


# ── Events ───────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class PieceSpawned:
    name: str
    color: Color
    cells: tuple[Position, ...]


@dataclass(frozen=True)
class PieceMoved:
    dx: int
    dy: int


@dataclass(frozen=True)
class PieceRotated:
    cells: tuple[Position, ...]


@dataclass(frozen=True)
class PieceLocked:
    cells: tuple[Position, ...]


@dataclass(frozen=True)
class RowsCleared:
    """Rows removed in one collapse, bottom first. Rows above shifted down."""
    rows: tuple[int, ...]


@dataclass(frozen=True)
class GameOver:
    reason: str


Event = Union[PieceSpawned, PieceMoved, PieceRotated, PieceLocked, RowsCleared, GameOver]


@dataclass(frozen=True)
class Snapshot:
    """Read-only view of the game for a renderer."""

    occupied: tuple[Position, ...]
    piece_cells: tuple[Position, ...]
    piece_color: Color | None
    piece_name: str | None
    game_over: bool


@dataclass(frozen=True)
class StepResult:
    snapshot: Snapshot
    events: tuple[Event, ...]


class GameEngine:
    """Owns the board, the active piece and the clock, and applies the rules.

    Attributes:
        board: Grid of locked cells.
        catalog: Source of new patterns and colours.
        clock: Gravity and input-repeat timers.
        piece: The active piece, or None between lock and the next spawn.
        games_played: Number of game-over resets so far.
        pieces_locked: Pieces locked since construction or reset().
        rows_cleared: Rows cleared since construction or reset().
        steps: Number of step() calls since construction or reset().
    """

    def __init__(
        self,
        board_width: int = 10,
        board_height: int = 18,
        gravity_ms: float = 400,
        input_repeat_ms: float = 100,
        catalog: PieceCatalog | None = None,
        seed: int | None = None,
    ) -> None:
        """Initialize the engine with an empty board and a pending spawn.

        Args:
            board_width: Board width in columns.
            board_height: Visible board height in rows.
            gravity_ms: Gravity period in milliseconds.
            input_repeat_ms: Horizontal repeat period in milliseconds.
            catalog: Piece source (default: the 7 tetrominoes, 6 colours).
            seed: Seed for the default catalog. Ignored if catalog is given.
        """
        self.board = Board(board_width, board_height)
        self.catalog = catalog if catalog is not None else PieceCatalog(seed=seed)
        self.clock = GameClock(gravity_ms, input_repeat_ms)
        self.piece: ActivePiece | None = None

        self.games_played: int = 0
        self.pieces_locked: int = 0
        self.rows_cleared: int = 0
        self.steps: int = 0

        # Internal state
        self._spawn_requested: bool = True
        self._game_over_reason: str | None = None
        self._events: list[Event] = []

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> GameEngine:
        """Build an engine from a config dict (see config/game.yaml).

        Missing keys fall back to the defaults: 10x18 board, 400 ms gravity,
        100 ms input repeat, the built-in palette and a random seed.
        """
        palette = config.get("palette")
        catalog = PieceCatalog(
            palette=[tuple(c) for c in palette] if palette else None,
            seed=config.get("seed"),
        )
        return cls(
            board_width=config.get("board_width", 10),
            board_height=config.get("board_height", 18),
            gravity_ms=config.get("gravity_ms", 400),
            input_repeat_ms=config.get("input_repeat_ms", 100),
            catalog=catalog,
        )

    @property
    def width(self) -> int:
        return self.board.width

    @property
    def height(self) -> int:
        return self.board.height

    @property
    def spawn_pivot(self) -> Position:
        """Pivot of a new piece: centred, one row above the visible top."""
        return (self.board.width // 2, self.board.height)

    def reset(self) -> Snapshot:
        """Start over: empty board, no piece, fresh timers and statistics.

        The first piece spawns on the next step().
        """
        self.board.clear_all()
        self.clock.reset()
        self.piece = None
        self.games_played = 0
        self.pieces_locked = 0
        self.rows_cleared = 0
        self.steps = 0
        self._spawn_requested = True
        self._game_over_reason = None
        self._events = []
        return self.snapshot()

    def step(
        self,
        delta_ms: float,
        held: Iterable[Command] = (),
        pressed: Iterable[Command] = (),
    ) -> StepResult:
        """Advance the simulation by one step.

        Args:
            delta_ms: Time elapsed since the previous step, in milliseconds.
            held: Commands currently held down. Only MOVE_LEFT and MOVE_RIGHT
                are read from here, and only when the input timer fires.
            pressed: Commands pressed since the previous step. Only HARD_DROP
                and ROTATE_CW are read from here.

        Returns:
            StepResult with the post-step snapshot and the events emitted.
        """
        held = set(held)
        pressed = set(pressed)
        self.steps += 1
        self.clock.tick(delta_ms)

        if self._spawn_requested and self.piece is None:
            self._spawn_requested = False
            self.spawn()

        if self.clock.gravity.finished:
            self.apply_gravity()
            self.clear_full_rows()

        if self.clock.input_repeat.finished:
            if Command.MOVE_LEFT in held:
                self.move_horizontal(-1)
            if Command.MOVE_RIGHT in held:
                self.move_horizontal(1)

        if Command.HARD_DROP in pressed:
            self.hard_drop()

        if Command.ROTATE_CW in pressed:
            self.rotate()

        game_over = self._game_over_reason is not None
        if game_over:
            self._reset_after_game_over()

        return StepResult(self.snapshot(game_over), tuple(self.drain_events()))

    # ── Rules ────────────────────────────────────────────────────────────

    def spawn(self) -> bool:
        """Create a new random piece at the spawn pivot.

        Returns:
            True if the piece was created, False if a spawn cell overlaps a
            locked block. In that case the game-over signal is raised and no
            piece is created.
        """
        pattern = self.catalog.random_pattern()
        color = self.catalog.random_color()
        piece = ActivePiece.spawn(pattern, color, self.spawn_pivot)
        if not self._fits(piece.cells):
            self._signal_game_over("spawn blocked")
            return False
        self.piece = piece
        self._events.append(PieceSpawned(piece.name, piece.color, tuple(piece.positions)))
        return True

    def apply_gravity(self) -> bool:
        """Drop the piece one row, or lock it if any cell cannot fall.

        A cell cannot fall when it is on row 0 or the cell below it is
        occupied. The piece always moves or locks as a whole.

        Returns:
            True if the piece locked, False if it fell or there is no piece.
        """
        if self.piece is None:
            return False
        candidate = self.piece.translated(0, -1)
        if not self._fits(candidate):
            self._lock()
            return True
        self.piece.commit(candidate)
        self._events.append(PieceMoved(0, -1))
        return False

    def clear_full_rows(self) -> list[int]:
        """Clear every full row and collapse the locked cells above.

        Returns:
            The cleared row indices, bottom first (empty if none).
        """
        rows = self.board.full_rows()
        if not rows:
            return []
        self.board.collapse_rows(rows)
        self.rows_cleared += len(rows)
        self._events.append(RowsCleared(tuple(rows)))
        return rows

    def move_horizontal(self, dx: int) -> bool:
        """Shift the piece one column left (dx=-1) or right (dx=1).

        The move happens only if every cell stays inside the columns and,
        for cells inside the visible rows, lands on a free cell.

        Returns:
            True if the piece moved.

        Raises:
            ValueError: If dx is not -1 or 1.
        """
        if dx not in (-1, 1):
            raise ValueError(f"dx must be -1 or 1, got {dx}")
        if self.piece is None:
            return False
        candidate = self.piece.translated(dx, 0)
        if not self._fits(candidate):
            return False
        self.piece.commit(candidate)
        self._events.append(PieceMoved(dx, 0))
        return True

    def hard_drop(self) -> int:
        """Move the piece straight down as far as it goes without locking it.

        The piece stays active and locks on a later gravity tick.

        Returns:
            Number of rows dropped (0 if already resting or no piece).
        """
        if self.piece is None:
            return 0
        down_height = 0
        while self._fits(self.piece.translated(0, -(down_height + 1))):
            down_height += 1
        if down_height:
            self.piece.translate(0, -down_height)
            self._events.append(PieceMoved(0, -down_height))
        return down_height

    def rotate(self) -> bool:
        """Turn the piece 90 degrees clockwise about its pivot.

        Every rotated cell must lie inside the visible board and be free;
        otherwise nothing changes.

        Returns:
            True if the piece rotated.
        """
        if self.piece is None:
            return False
        candidate = self.piece.rotated()
        for cell in candidate:
            x, y = cell.position
            if not self.board.in_bounds(x, y) or self.board.is_occupied(x, y):
                return False
        self.piece.commit(candidate)
        self._events.append(PieceRotated(tuple(self.piece.positions)))
        return True

    # ── State access ─────────────────────────────────────────────────────

    def place_piece(self, name: str, pivot: Position, color: Color | None = None) -> ActivePiece:
        """Replace the active piece with a given pattern at a given pivot.

        Used to set up positions directly instead of waiting for a random
        spawn. Cancels any pending spawn.

        Args:
            name: Pattern name ("I", "J", "L", "S", "Z", "O" or "T").
            pivot: Absolute position of the pattern's (0, 0) cell.
            color: Colour of the piece (default: first palette entry).

        Returns:
            The new active piece.

        Raises:
            ValueError: If the name is unknown or the piece does not fit.
        """
        if name not in PATTERNS_BY_NAME:
            raise ValueError(f"Unknown pattern: {name!r}")
        piece = ActivePiece.spawn(
            PATTERNS_BY_NAME[name],
            color if color is not None else self.catalog.palette[0],
            pivot,
        )
        if not self._fits(piece.cells):
            raise ValueError(f"Piece {name!r} at pivot {pivot} overlaps the board")
        self.piece = piece
        self._spawn_requested = False
        return piece

    def snapshot(self, game_over: bool = False) -> Snapshot:
        if self.piece is None:
            return Snapshot(tuple(self.board.occupied_cells()), (), None, None, game_over)
        return Snapshot(
            occupied=tuple(self.board.occupied_cells()),
            piece_cells=tuple(self.piece.positions),
            piece_color=self.piece.color,
            piece_name=self.piece.name,
            game_over=game_over,
        )

    def drain_events(self) -> list[Event]:
        """Return and forget the events emitted since the last drain."""
        events, self._events = self._events, []
        return events

    def get_stats(self) -> dict[str, int]:
        return {
            "steps": self.steps,
            "games_played": self.games_played,
            "pieces_locked": self.pieces_locked,
            "rows_cleared": self.rows_cleared,
            "occupied": self.board.count(),
        }

    # ── Internals ────────────────────────────────────────────────────────

    def _is_free(self, x: int, y: int) -> bool:
        # Rows at or above the top are never occupied.
        if x < 0 or x >= self.board.width or y < 0:
            return False
        if y >= self.board.height:
            return True
        return not self.board.is_occupied(x, y)

    def _fits(self, cells: list[PieceCell]) -> bool:
        return all(self._is_free(*cell.position) for cell in cells)

    def _lock(self) -> None:
        """Write the piece into the board and discard it.

        A cell still above the top row cannot be stored; locking such a piece
        raises the game-over signal instead of requesting a spawn.
        """
        positions = self.piece.positions
        locked_out = False
        for x, y in positions:
            if y >= self.board.height:
                locked_out = True
                continue
            self.board.set(x, y, True)
        self.piece = None
        self.pieces_locked += 1
        self._events.append(PieceLocked(tuple(positions)))
        if locked_out:
            self._signal_game_over("lock out")
        else:
            self._spawn_requested = True

    def _signal_game_over(self, reason: str) -> None:
        if self._game_over_reason is None:
            self._game_over_reason = reason

    def _reset_after_game_over(self) -> None:
        reason = self._game_over_reason
        self.board.clear_all()
        self.piece = None
        self.games_played += 1
        self._game_over_reason = None
        self._spawn_requested = True
        self._events.append(GameOver(reason))
