"""Game module for the pentomino puzzle.

Exports the puzzle engine and supporting classes:
- Pentomino / PentominoType / CATALOG: the twelve shapes and their rotations
- Board: occupancy grid that validates and records placements
- TimerScheduler: keyed one-shot timers on a virtual clock
- Piece / PieceState: per-piece lifecycle (spawn, select, place, delete, vanish)
- PuzzleSession / SessionConfig: spawning, clocks and win/loss
"""

from .geometry import CATALOG, PENTOMINOES, Cell, Pentomino, PentominoType, normalize, rotate
from .board import Board
from .timers import TimerScheduler
from .piece import Piece, PieceState
from .session import (
    EventKind,
    Outcome,
    PuzzleSession,
    SessionConfig,
    SessionEvent,
    SessionState,
)

__all__ = [
    "CATALOG",
    "PENTOMINOES",
    "Cell",
    "Pentomino",
    "PentominoType",
    "normalize",
    "rotate",
    "Board",
    "TimerScheduler",
    "Piece",
    "PieceState",
    "EventKind",
    "Outcome",
    "PuzzleSession",
    "SessionConfig",
    "SessionEvent",
    "SessionState",
]
