from __future__ import annotations

import argparse
import logging
from typing import Callable, Dict, Optional

import pygame

from falling_blocks.game import GameOver, GameSession, LinesCleared, SessionFinished
from .renderer import Renderer

logger = logging.getLogger(__name__)


KEY_TO_COMMAND: Dict[int, Callable[[GameSession], object]] = {
    pygame.K_LEFT: GameSession.move_left,
    pygame.K_RIGHT: GameSession.move_right,
    pygame.K_DOWN: GameSession.soft_drop,
    pygame.K_UP: GameSession.rotate,
    pygame.K_SPACE: GameSession.rotate,
}


def _log_lines(event: LinesCleared) -> None:
    logger.info("Cleared %d line(s): score=%d level=%d", event.count, event.score, event.level)


def _log_game_over(event: GameOver) -> None:
    logger.info("Game over (%s)", event.reason)


def _log_finished(event: SessionFinished) -> None:
    summary = event.summary
    logger.info(
        "Session %s: score=%d level=%d lines=%d duration=%dms actions=%d",
        summary.status, summary.score, summary.level, summary.lines_cleared,
        summary.duration_ms, len(summary.actions),
    )


def new_session(seed: Optional[int]) -> GameSession:
    session = GameSession()
    session.events.subscribe(LinesCleared, _log_lines)
    session.events.subscribe(GameOver, _log_game_over)
    session.events.subscribe(SessionFinished, _log_finished)
    session.start(seed)
    return session


def run(seed: Optional[int] = None, cell_size: int = 28) -> None:
    pygame.init()
    try:
        clock = pygame.time.Clock()
        session = new_session(seed)
        renderer = Renderer(cell_size=cell_size)
        screen = pygame.display.set_mode(renderer.window_size(session))
        pygame.display.set_caption("Falling Blocks")

        last_fall = pygame.time.get_ticks()

        running = True
        while running:
            # Input handling
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    session.abandon()
                    running = False
                elif event.type == pygame.KEYDOWN:
                    if event.key == pygame.K_ESCAPE:
                        session.abandon()
                        running = False
                    elif event.key == pygame.K_p:
                        if not session.pause():
                            session.resume()
                        last_fall = pygame.time.get_ticks()
                    elif event.key == pygame.K_r and session.is_over:
                        session = new_session(seed)
                        last_fall = pygame.time.get_ticks()
                    else:
                        command = KEY_TO_COMMAND.get(event.key)
                        if command is not None:
                            command(session)

            # Gravity; the interval follows the current level
            now = pygame.time.get_ticks()
            if now - last_fall >= session.gravity_interval_ms:
                session.tick()
                last_fall = now

            renderer.draw(screen, session)
            clock.tick(60)
    finally:
        pygame.quit()


def main() -> None:
    p = argparse.ArgumentParser()
    p.add_argument("--seed", type=int, default=None)
    p.add_argument("--cell-size", type=int, default=28)
    p.add_argument("--log-level", default="INFO")
    args = p.parse_args()
    logging.basicConfig(level=args.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    run(args.seed, args.cell_size)


if __name__ == "__main__":  # pragma: no cover
    main()
