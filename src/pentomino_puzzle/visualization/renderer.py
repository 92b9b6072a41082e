from __future__ import annotations

import colorsys
import random
from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Tuple

import pygame

from pentomino_puzzle.game import EventKind, Outcome, Piece, PuzzleSession, SessionEvent

Color = Tuple[int, int, int]


def _random_color(rng: random.Random) -> Color:
    r, g, b = colorsys.hsv_to_rgb(rng.random(), 0.75, 0.95)
    return int(r * 255), int(g * 255), int(b * 255)


@dataclass
class PieceView:
    color: Color
    x: float
    y: float
    fade_started: Optional[int] = None


class PieceViews:
    """Colors, pool positions and fades for pieces; none of it is engine state."""

    def __init__(self, renderer: "Renderer", session: PuzzleSession, rng: Optional[random.Random] = None) -> None:
        self.renderer = renderer
        self.session = session
        self.rng = rng or random.Random()
        self._views: Dict[int, PieceView] = {}
        session.subscribe(self.on_event)

    def on_event(self, event: SessionEvent) -> None:
        if event.kind is EventKind.NEW_GAME:
            self._views.clear()
        elif event.kind is EventKind.VANISHING and event.piece_id is not None:
            self.get(event.piece_id).fade_started = pygame.time.get_ticks()
        elif event.kind in (EventKind.VANISHED, EventKind.REMOVED) and event.piece_id is not None:
            self._views.pop(event.piece_id, None)

    def get(self, piece_id: int) -> PieceView:
        view = self._views.get(piece_id)
        if view is None:
            view = self._spawn_view(piece_id)
            self._views[piece_id] = view
        return view

    def _spawn_view(self, piece_id: int) -> PieceView:
        pool = self.renderer.pool_rect(self.session.board.width)
        piece = self.session.piece(piece_id)
        w, h = piece.shape.bounding_box(piece.rotation) if piece is not None else (1, 1)
        cell = self.renderer.cell_size
        x = pool.x + self.rng.random() * max(0, pool.width - w * cell)
        y = pool.y + self.rng.random() * max(0, pool.height - h * cell)
        return PieceView(color=_random_color(self.rng), x=x, y=y)

    def alpha(self, piece_id: int) -> int:
        view = self.get(piece_id)
        if view.fade_started is None:
            return 255
        fade_ms = max(1.0, self.session.config.fade_seconds * 1000.0)
        progress = (pygame.time.get_ticks() - view.fade_started) / fade_ms
        return max(0, int(255 * (1.0 - progress)))


class Renderer:
    def __init__(self, cell_size: int = 40, margin: int = 10, status_height: int = 36, pool_rows: int = 6) -> None:
        self.cell_size = cell_size
        self.margin = margin
        self.status_height = status_height
        self.pool_rows = pool_rows
        self._font: Optional[pygame.font.Font] = None

    # ---------- Layout ----------
    def pool_rect(self, width: int) -> pygame.Rect:
        return pygame.Rect(self.margin, self.status_height, width * self.cell_size, self.pool_rows * self.cell_size)

    def board_rect(self, width: int, height: int) -> pygame.Rect:
        pool = self.pool_rect(width)
        return pygame.Rect(self.margin, pool.bottom + self.margin, width * self.cell_size, height * self.cell_size)

    def window_size(self, width: int, height: int) -> Tuple[int, int]:
        board = self.board_rect(width, height)
        return max(board.right + self.margin, 600), board.bottom + self.margin

    def anchor_for(self, board: pygame.Rect, x: float, y: float) -> Tuple[int, int]:
        """Grid anchor nearest to a piece's top-left pixel position"""
        return round((x - board.x) / self.cell_size), round((y - board.y) / self.cell_size)

    def piece_origin(self, session: PuzzleSession, piece: Piece, views: PieceViews) -> Tuple[float, float]:
        if piece.locked and piece.anchor is not None:
            board = self.board_rect(session.board.width, session.board.height)
            return board.x + piece.anchor.x * self.cell_size, board.y + piece.anchor.y * self.cell_size
        view = views.get(piece.piece_id)
        return view.x, view.y

    def piece_rects(self, session: PuzzleSession, piece: Piece, views: PieceViews) -> Iterable[pygame.Rect]:
        ox, oy = self.piece_origin(session, piece, views)
        for cx, cy in piece.cells():
            yield pygame.Rect(int(ox + cx * self.cell_size), int(oy + cy * self.cell_size), self.cell_size, self.cell_size)

    def hit_test(self, session: PuzzleSession, views: PieceViews, pos: Tuple[int, int]) -> Optional[int]:
        # Unlocked pieces are drawn on top, so they win
        pieces = sorted(session.state.pieces.values(), key=lambda p: p.locked)
        for piece in pieces:
            if any(rect.collidepoint(pos) for rect in self.piece_rects(session, piece, views)):
                return piece.piece_id
        return None

    # ---------- Drawing ----------
    def _grid(self, screen: pygame.Surface, board: pygame.Rect, width: int, height: int) -> None:
        pygame.draw.rect(screen, (255, 255, 255), board)
        for c in range(width + 1):
            x = board.x + c * self.cell_size
            pygame.draw.line(screen, (211, 211, 211), (x, board.y), (x, board.bottom))
        for r in range(height + 1):
            y = board.y + r * self.cell_size
            pygame.draw.line(screen, (211, 211, 211), (board.x, y), (board.right, y))

    def _piece(self, screen: pygame.Surface, session: PuzzleSession, piece: Piece, views: PieceViews) -> None:
        color = views.get(piece.piece_id).color
        alpha = views.alpha(piece.piece_id)
        focused = session.state.focused_piece is piece
        for rect in self.piece_rects(session, piece, views):
            tile = pygame.Surface((rect.width - 2, rect.height - 2), pygame.SRCALPHA)
            pygame.draw.rect(tile, (*color, alpha), tile.get_rect(), border_radius=4)
            pygame.draw.rect(tile, (128, 128, 128, alpha), tile.get_rect(), 1, border_radius=4)
            screen.blit(tile, (rect.x + 1, rect.y + 1))
            if focused:
                pygame.draw.rect(screen, (40, 40, 40), rect, 2)

    def _status(self, screen: pygame.Surface, session: PuzzleSession) -> None:
        if self._font is None:
            self._font = pygame.font.SysFont(None, 24)
        state = session.state
        if state.game_over:
            text = "You win! Grid complete." if state.outcome is Outcome.WIN else f"You lose. {state.reason}"
            text += "   R: restart"
        else:
            text = f"Pentomino Puzzle   Elapsed time of block: {state.elapsed_seconds}s   Time Left: {state.remaining_seconds}s"
        img = self._font.render(text, True, (30, 30, 36))
        screen.blit(img, (self.margin, (self.status_height - img.get_height()) // 2))

    def draw(self, screen: pygame.Surface, session: PuzzleSession, views: PieceViews) -> None:
        width, height = session.board.width, session.board.height
        screen.fill((236, 238, 244))
        pygame.draw.rect(screen, (246, 247, 251), self.pool_rect(width))
        pygame.draw.rect(screen, (207, 211, 225), self.pool_rect(width), 1)
        self._grid(screen, self.board_rect(width, height), width, height)
        pieces = sorted(session.state.pieces.values(), key=lambda p: not p.locked)
        for piece in pieces:
            self._piece(screen, session, piece, views)
        self._status(screen, session)
        pygame.display.flip()
