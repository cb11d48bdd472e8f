from __future__ import annotations

from typing import List, Tuple

import numpy as np
import pygame

from falling_blocks.game import GameSession, SessionStatus, shape_for


def _color_for_value(v: int) -> Tuple[int, int, int]:
    palette = {
        0: (20, 20, 26),
        1: (0, 240, 240),  # I
        2: (240, 240, 0),  # O
        3: (160, 0, 240),  # T
        4: (0, 240, 0),    # S
        5: (240, 0, 0),    # Z
        6: (0, 0, 240),    # J
        7: (240, 160, 0),  # L
    }
    return palette.get(abs(v), (200, 200, 200))


class Renderer:
    """Draws a session read-only: board, falling piece, next queue and totals."""

    def __init__(self, cell_size: int = 30, margin: int = 20, panel_cells: int = 6) -> None:
        self.cell_size = cell_size
        self.margin = margin
        self.panel_cells = panel_cells
        self._font = None

    def window_size(self, session: GameSession) -> Tuple[int, int]:
        board_w = session.config.width * self.cell_size
        board_h = session.config.height * self.cell_size
        panel_w = self.panel_cells * self.cell_size
        return self.margin * 3 + board_w + panel_w, self.margin * 2 + board_h

    def _grid_surface(self, state: np.ndarray) -> pygame.Surface:
        h, w = state.shape
        surf = pygame.Surface((w * self.cell_size, h * self.cell_size))
        surf.fill((30, 30, 36))
        for y in range(h):
            for x in range(w):
                rect = pygame.Rect(
                    x * self.cell_size,
                    y * self.cell_size,
                    self.cell_size - 1,
                    self.cell_size - 1,
                )
                pygame.draw.rect(surf, _color_for_value(int(state[y, x])), rect)
        return surf

    def _panel_lines(self, session: GameSession) -> List[str]:
        lines = [
            f"Score: {session.score}",
            f"Level: {session.level}",
            f"Lines: {session.lines_cleared}",
        ]
        if session.status is SessionStatus.PAUSED:
            lines.append("Paused - P to resume")
        elif session.is_over:
            lines.append("Game Over - R to restart")
        return lines

    def draw(self, screen: pygame.Surface, session: GameSession) -> None:
        if self._font is None:
            self._font = pygame.font.SysFont(None, 24)
        screen.fill((10, 10, 14))
        screen.blit(self._grid_surface(session.get_state()), (self.margin, self.margin))

        x0 = self.margin * 2 + session.config.width * self.cell_size
        y0 = self.margin
        for idx, kind in enumerate(session.next_queue):
            shape = shape_for(kind)
            off_y = y0 + idx * self.cell_size * 3
            for py in range(shape.shape[0]):
                for px in range(shape.shape[1]):
                    if shape[py, px]:
                        rect = pygame.Rect(
                            x0 + px * self.cell_size,
                            off_y + py * self.cell_size,
                            self.cell_size - 1,
                            self.cell_size - 1,
                        )
                        pygame.draw.rect(screen, _color_for_value(int(kind)), rect)

        y_text = y0 + len(session.next_queue) * self.cell_size * 3 + 10
        for i, txt in enumerate(self._panel_lines(session)):
            img = self._font.render(txt, True, (230, 230, 230))
            screen.blit(img, (x0, y_text + i * 22))
        pygame.display.flip()
