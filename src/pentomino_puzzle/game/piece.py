from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING, Optional, Tuple

from .geometry import Cell, Pentomino, rotate

if TYPE_CHECKING:
    from .session import PuzzleSession

logger = logging.getLogger(__name__)


class PieceState(Enum):
    SPAWNED = "spawned"
    ACTIVATED = "activated"
    LOCKED = "locked"
    REMOVED = "removed"
    VANISHED = "vanished"


UNLOCKED_STATES = (PieceState.SPAWNED, PieceState.ACTIVATED)


class Piece:
    """One pentomino from spawn until it is removed or vanishes.

    Transitions::

        SPAWNED --select--> ACTIVATED --place--> LOCKED --delete--> REMOVED
        SPAWNED/ACTIVATED --vanish timer--> VANISHED

    Unlocked pieces carry a vanish timer on the session scheduler: a short one
    from spawn, a longer one restarted by every select. Placing cancels it for
    good. An activated piece fades for ``fade_seconds`` before it vanishes and
    ignores commands meanwhile.
    """

    def __init__(self, piece_id: int, shape: Pentomino, session: "PuzzleSession") -> None:
        self.piece_id = piece_id
        self.shape = shape
        self.session = session
        self.rotation = 0
        self.state = PieceState.SPAWNED
        self.ever_activated = False
        self.fading = False
        self.anchor: Optional[Cell] = None

    def __repr__(self) -> str:
        return f"Piece(id={self.piece_id}, kind={self.shape.name}, rotation={self.rotation}, state={self.state.name})"

    @property
    def timer_key(self) -> Tuple[str, int]:
        return ("vanish", self.piece_id)

    @property
    def locked(self) -> bool:
        return self.state is PieceState.LOCKED

    @property
    def alive(self) -> bool:
        return self.state in UNLOCKED_STATES or self.state is PieceState.LOCKED

    @property
    def movable(self) -> bool:
        return self.state in UNLOCKED_STATES and not self.fading and not self.session.state.game_over

    def cells(self) -> Tuple[Cell, ...]:
        return rotate(self.shape, self.rotation)

    def board_cells(self) -> Tuple[Cell, ...]:
        return self.session.board.cells_of(self.piece_id)

    # ---------- Commands ----------
    def select(self) -> bool:
        """Focus the piece; unlocked pieces also get the longer vanish window."""
        if not self.alive or self.fading or self.session.state.game_over:
            return False
        if not self.locked:
            if self.state is PieceState.SPAWNED:
                self.state = PieceState.ACTIVATED
                self.ever_activated = True
            self._start_vanish_timer(self.session.config.engaged_vanish_seconds)
        self.session.set_focus(self)
        return True

    def rotate(self, direction: int) -> bool:
        if not self.movable:
            return False
        self.rotation = (self.rotation + (1 if direction > 0 else 3)) % 4
        self.session._on_piece_rotated(self)
        return True

    def attempt_place(self, anchor_x: int, anchor_y: int) -> bool:
        if not self.movable:
            return False
        board = self.session.board
        if not board.fits(self.shape, self.rotation, anchor_x, anchor_y):
            return False
        self.session.scheduler.cancel(self.timer_key)
        board.place(self.shape, self.rotation, anchor_x, anchor_y, self.piece_id)
        self.state = PieceState.LOCKED
        self.anchor = Cell(anchor_x, anchor_y)
        logger.debug("placed %r at (%d, %d)", self, anchor_x, anchor_y)
        self.session._on_piece_placed(self)
        return True

    def delete(self) -> bool:
        if not self.locked or self.session.state.game_over:
            return False
        self.session.board.remove(self.piece_id)
        self.session.scheduler.cancel(self.timer_key)
        self.state = PieceState.REMOVED
        self.anchor = None
        logger.debug("deleted %r", self)
        self.session._on_piece_removed(self)
        return True

    # ---------- Vanish timer ----------
    def start_spawn_timer(self) -> None:
        self._start_vanish_timer(self.session.config.spawn_vanish_seconds)

    def _start_vanish_timer(self, bounds: Tuple[int, int]) -> None:
        low, high = bounds
        seconds = self.session.rng.randint(low, high)
        self.session.scheduler.schedule(self.timer_key, seconds, self._on_vanish_timeout)

    def _on_vanish_timeout(self) -> None:
        # The piece may have been placed after the timer started
        if not self.movable:
            return
        if self.ever_activated:
            self.fading = True
            self.session._on_piece_vanishing(self)
            fade = self.session.config.fade_seconds
            if fade > 0:
                self.session.scheduler.schedule(self.timer_key, fade, self._vanish)
                return
        self._vanish()

    def _vanish(self) -> None:
        if self.state not in UNLOCKED_STATES:
            return
        self.state = PieceState.VANISHED
        self.fading = False
        logger.debug("vanished %r", self)
        self.session._on_piece_vanished(self)
