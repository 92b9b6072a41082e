from __future__ import annotations

import argparse
import logging
from typing import Optional, Tuple

import pygame

from pentomino_puzzle.game import PuzzleSession, SessionConfig
from .renderer import PieceViews, Renderer

DOUBLE_CLICK_MS = 400

ROTATE_KEYS = {
    pygame.K_RIGHT: 1,
    pygame.K_LEFT: -1,
}


def run(config: Optional[SessionConfig] = None) -> None:
    pygame.init()
    try:
        clock = pygame.time.Clock()
        session = PuzzleSession(config)
        renderer = Renderer()
        views = PieceViews(renderer, session)
        width, height = session.board.width, session.board.height
        board_rect = renderer.board_rect(width, height)

        screen = pygame.display.set_mode(renderer.window_size(width, height))
        pygame.display.set_caption("Pentomino Puzzle Game")

        # (piece_id, offset from the piece origin to the pointer)
        drag: Optional[Tuple[int, float, float]] = None
        last_click: Tuple[Optional[int], int] = (None, 0)

        running = True
        while running:
            dt_ms = clock.tick(60)
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN:
                    if event.key == pygame.K_ESCAPE:
                        running = False
                    elif event.key == pygame.K_r:
                        drag = None
                        session.new_game()
                    elif event.key in ROTATE_KEYS and session.state.focused_piece is not None:
                        session.rotate(session.state.focused_piece.piece_id, ROTATE_KEYS[event.key])
                elif event.type == pygame.MOUSEBUTTONDOWN:
                    piece_id = renderer.hit_test(session, views, event.pos)
                    piece = session.piece(piece_id) if piece_id is not None else None
                    if piece is None:
                        continue
                    now = pygame.time.get_ticks()
                    if event.button == 3:
                        session.delete(piece_id)
                    elif event.button == 1 and piece.locked:
                        double = last_click[0] == piece_id and now - last_click[1] <= DOUBLE_CLICK_MS
                        if double:
                            session.delete(piece_id)
                        else:
                            session.select(piece_id)
                    elif event.button == 1 and session.select(piece_id):
                        view = views.get(piece_id)
                        drag = (piece_id, event.pos[0] - view.x, event.pos[1] - view.y)
                    last_click = (piece_id, now)
                elif event.type == pygame.MOUSEMOTION and drag is not None:
                    piece_id, dx, dy = drag
                    view = views.get(piece_id)
                    view.x, view.y = event.pos[0] - dx, event.pos[1] - dy
                elif event.type == pygame.MOUSEBUTTONUP and event.button == 1 and drag is not None:
                    piece_id = drag[0]
                    drag = None
                    piece = session.piece(piece_id)
                    if piece is None:
                        continue
                    rects = list(renderer.piece_rects(session, piece, views))
                    if any(board_rect.colliderect(rect) for rect in rects):
                        view = views.get(piece_id)
                        anchor_x, anchor_y = renderer.anchor_for(board_rect, view.x, view.y)
                        # A rejected drop stays where it was released
                        session.attempt_place(piece_id, anchor_x, anchor_y)

            session.advance(dt_ms / 1000.0)
            if drag is not None and session.piece(drag[0]) is None:
                drag = None
            renderer.draw(screen, session, views)
    finally:
        pygame.quit()


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Play the timed pentomino puzzle")
    p.add_argument("--seconds", type=int, default=240, help="Initial countdown in seconds")
    p.add_argument("--width", type=int, default=10)
    p.add_argument("--height", type=int, default=6)
    p.add_argument("--seed", type=int, default=None)
    p.add_argument("--log-level", type=str, default="WARNING")
    return p


def main() -> None:
    args = build_parser().parse_args()
    logging.basicConfig(level=args.log_level.upper())
    run(SessionConfig(width=args.width, height=args.height, initial_seconds=args.seconds, random_seed=args.seed))


if __name__ == "__main__":  # pragma: no cover
    main()
