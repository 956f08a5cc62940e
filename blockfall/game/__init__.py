"""Game logic: board, pieces, timers, and the rule engine."""

from blockfall.game.pieces import PIECE_PATTERNS, PALETTE, PiecePattern, PieceCatalog
from blockfall.game.board import Board
from blockfall.game.piece import ActivePiece, PieceCell
from blockfall.game.clock import GameClock, IntervalTimer
from blockfall.game.engine import Command, GameEngine, KeyLatch, Snapshot, StepResult

__all__ = [
    "PIECE_PATTERNS",
    "PALETTE",
    "PiecePattern",
    "PieceCatalog",
    "Board",
    "ActivePiece",
    "PieceCell",
    "GameClock",
    "IntervalTimer",
    "Command",
    "GameEngine",
    "KeyLatch",
    "Snapshot",
    "StepResult",
]
