from __future__ import annotations

import itertools
import logging
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple

from .board import Board
from .geometry import CATALOG
from .piece import UNLOCKED_STATES, Piece, PieceState
from .timers import TimerScheduler

logger = logging.getLogger(__name__)

CLOCK_KEY = "clock"
TICK_SECONDS = 1.0


class Outcome(Enum):
    WIN = "win"
    LOSS = "loss"


class EventKind(Enum):
    NEW_GAME = "new_game"
    SPAWNED = "spawned"
    FOCUS_CHANGED = "focus_changed"
    ROTATED = "rotated"
    PLACED = "placed"
    REMOVED = "removed"
    VANISHING = "vanishing"
    VANISHED = "vanished"
    TICK = "tick"
    GAME_OVER = "game_over"


@dataclass(frozen=True)
class SessionEvent:
    kind: EventKind
    piece_id: Optional[int] = None


Listener = Callable[[SessionEvent], None]


@dataclass
class SessionConfig:
    width: int = 10
    height: int = 6
    initial_seconds: int = 240
    spawn_vanish_seconds: Tuple[int, int] = (5, 10)
    engaged_vanish_seconds: Tuple[int, int] = (20, 30)
    fade_seconds: float = 0.15
    random_seed: Optional[int] = None

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"board size must be positive, got {self.width}x{self.height}")
        if self.initial_seconds <= 0:
            raise ValueError(f"initial_seconds must be positive, got {self.initial_seconds}")
        for name in ("spawn_vanish_seconds", "engaged_vanish_seconds"):
            low, high = getattr(self, name)
            if low < 1 or low > high:
                raise ValueError(f"{name} must satisfy 1 <= low <= high, got {(low, high)}")
        if self.fade_seconds < 0:
            raise ValueError(f"fade_seconds must be non-negative, got {self.fade_seconds}")


@dataclass
class SessionState:
    """Mutable state of one game.

    Invariants: ``active_piece`` is the only unlocked piece in ``pieces``;
    ``focused_piece`` is ``None`` or a member of ``pieces``; once
    ``game_over`` is set nothing else changes until the next game.
    """

    remaining_seconds: int = 0
    elapsed_seconds: int = 0
    active_piece: Optional[Piece] = None
    focused_piece: Optional[Piece] = None
    pieces: Dict[int, Piece] = field(default_factory=dict)
    game_over: bool = False
    outcome: Optional[Outcome] = None
    reason: str = ""

    def unlocked_pieces(self) -> List[Piece]:
        return [p for p in self.pieces.values() if p.state in UNLOCKED_STATES]

    def locked_pieces(self) -> List[Piece]:
        return [p for p in self.pieces.values() if p.locked]


class PuzzleSession:
    """Timed pentomino session: spawning, clocks, commands and win/loss."""

    def __init__(
        self,
        config: Optional[SessionConfig] = None,
        rng: Optional[random.Random] = None,
        scheduler: Optional[TimerScheduler] = None,
    ) -> None:
        self.config = config or SessionConfig()
        self.rng = rng or random.Random(self.config.random_seed)
        self.scheduler = scheduler or TimerScheduler()
        self.board = Board(self.config.width, self.config.height)
        self.state = SessionState()
        self._listeners: List[Listener] = []
        self._ids = itertools.count(1)
        self.new_game()

    # ---------- Observers ----------
    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _emit(self, kind: EventKind, piece_id: Optional[int] = None) -> None:
        event = SessionEvent(kind, piece_id)
        for listener in list(self._listeners):
            listener(event)

    # ---------- Game flow ----------
    def new_game(self, seed: Optional[int] = None) -> None:
        if seed is not None:
            self.rng.seed(seed)
        self._cancel_timers()
        for piece in self.state.pieces.values():
            piece.state = PieceState.REMOVED
        self.board.clear()
        self.state = SessionState(remaining_seconds=self.config.initial_seconds)
        self.scheduler.schedule(CLOCK_KEY, TICK_SECONDS, self._on_clock)
        logger.debug("new game on %dx%d board", self.board.width, self.board.height)
        self._emit(EventKind.NEW_GAME)
        self.spawn_next()

    def spawn_next(self) -> Optional[Piece]:
        state = self.state
        if state.game_over or state.active_piece is not None:
            return None
        shape = self.rng.choice(CATALOG)
        piece = Piece(next(self._ids), shape, self)
        state.pieces[piece.piece_id] = piece
        state.active_piece = piece
        piece.start_spawn_timer()
        logger.debug("spawned %r", piece)
        self._emit(EventKind.SPAWNED, piece.piece_id)
        return piece

    def advance(self, seconds: float) -> int:
        return self.scheduler.advance(seconds)

    def tick(self) -> None:
        state = self.state
        if state.game_over:
            return
        state.elapsed_seconds += 1
        state.remaining_seconds -= 1
        self._emit(EventKind.TICK)
        if state.remaining_seconds <= 0:
            self.end_game(False, "Time's up!")

    def _on_clock(self) -> None:
        self.tick()
        if not self.state.game_over:
            self.scheduler.schedule(CLOCK_KEY, TICK_SECONDS, self._on_clock)

    def on_board_changed(self) -> None:
        if self.board.is_complete():
            self.end_game(True, "Grid complete.")

    def end_game(self, win: bool, reason: str) -> None:
        state = self.state
        if state.game_over:
            return
        state.game_over = True
        state.outcome = Outcome.WIN if win else Outcome.LOSS
        state.reason = reason
        self._cancel_timers()
        logger.info("game over: %s %s", state.outcome.value, reason)
        self._emit(EventKind.GAME_OVER)

    def _cancel_timers(self) -> None:
        self.scheduler.cancel(CLOCK_KEY)
        for piece in self.state.pieces.values():
            self.scheduler.cancel(piece.timer_key)

    # ---------- Focus ----------
    def set_focus(self, piece: Optional[Piece]) -> None:
        if self.state.focused_piece is piece:
            return
        self.state.focused_piece = piece
        self._emit(EventKind.FOCUS_CHANGED, piece.piece_id if piece is not None else None)

    def clear_focus(self) -> None:
        self.set_focus(None)

    # ---------- Commands ----------
    def piece(self, piece_id: int) -> Optional[Piece]:
        return self.state.pieces.get(piece_id)

    def _target(self, piece_id: int) -> Optional[Piece]:
        if self.state.game_over:
            return None
        return self.state.pieces.get(piece_id)

    def select(self, piece_id: int) -> bool:
        piece = self._target(piece_id)
        return piece is not None and piece.select()

    def rotate(self, piece_id: int, direction: int) -> bool:
        piece = self._target(piece_id)
        return piece is not None and piece.rotate(direction)

    def attempt_place(self, piece_id: int, anchor_x: int, anchor_y: int) -> bool:
        piece = self._target(piece_id)
        return piece is not None and piece.attempt_place(anchor_x, anchor_y)

    def delete(self, piece_id: int) -> bool:
        piece = self._target(piece_id)
        return piece is not None and piece.delete()

    # ---------- Piece callbacks ----------
    def _on_piece_rotated(self, piece: Piece) -> None:
        self._emit(EventKind.ROTATED, piece.piece_id)

    def _on_piece_placed(self, piece: Piece) -> None:
        state = self.state
        state.elapsed_seconds = 0
        if state.active_piece is piece:
            state.active_piece = None
        self._emit(EventKind.PLACED, piece.piece_id)
        self.on_board_changed()
        self.spawn_next()

    def _on_piece_removed(self, piece: Piece) -> None:
        self.state.pieces.pop(piece.piece_id, None)
        if self.state.focused_piece is piece:
            self.clear_focus()
        self._emit(EventKind.REMOVED, piece.piece_id)
        self.on_board_changed()

    def _on_piece_vanishing(self, piece: Piece) -> None:
        self._emit(EventKind.VANISHING, piece.piece_id)

    def _on_piece_vanished(self, piece: Piece) -> None:
        state = self.state
        state.pieces.pop(piece.piece_id, None)
        if state.active_piece is piece:
            state.active_piece = None
        if state.focused_piece is piece:
            self.clear_focus()
        state.elapsed_seconds = 0
        self._emit(EventKind.VANISHED, piece.piece_id)
        self.spawn_next()

    # ---------- Rendering ----------
    def snapshot(self) -> Dict[str, Any]:
        state = self.state
        focused = state.focused_piece
        active = state.active_piece
        pieces = [
            {
                "id": piece.piece_id,
                "kind": piece.shape.name,
                "rotation": piece.rotation,
                "cells": [tuple(c) for c in piece.cells()],
                "locked": piece.locked,
                "focused": piece is focused,
                "anchor": tuple(piece.anchor) if piece.anchor is not None else None,
                "fading": piece.fading,
            }
            for piece in state.pieces.values()
        ]
        return {
            "grid": self.board.clone_state(),
            "pieces": pieces,
            "remaining_seconds": state.remaining_seconds,
            "elapsed_seconds": state.elapsed_seconds,
            "game_over": state.game_over,
            "outcome": state.outcome.value if state.outcome is not None else None,
            "reason": state.reason,
            "active_piece_id": active.piece_id if active is not None else None,
            "focused_piece_id": focused.piece_id if focused is not None else None,
        }
