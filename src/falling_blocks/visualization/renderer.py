from __future__ import annotations

from typing import Optional, Tuple

import pygame

from falling_blocks.game import Phase, SessionState
from falling_blocks.game.grid import ACTIVE

Color = Tuple[int, int, int]


def hex_to_rgb(value: str) -> Color:
    value = value.lstrip("#")
    return int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16)


def _color_for_value(v: int, active_color: Optional[Color]) -> Color:
    if v == ACTIVE and active_color is not None:
        return active_color
    palette = {
        0: (20, 20, 26),
        1: (190, 190, 190),
        ACTIVE: (70, 140, 230),
    }
    return palette.get(v, (200, 200, 200))


class Renderer:
    def __init__(self, cell_size: int = 30, margin: int = 20, panel_cells: int = 6) -> None:
        self.cell_size = cell_size
        self.margin = margin
        self.panel_cells = panel_cells
        self._font: Optional[pygame.font.Font] = None

    def window_size(self, width: int, height: int) -> Tuple[int, int]:
        board_w = width * self.cell_size
        panel_w = self.panel_cells * self.cell_size
        return board_w + panel_w + self.margin * 3, height * self.cell_size + self.margin * 2

    def _font_obj(self) -> pygame.font.Font:
        if self._font is None:
            self._font = pygame.font.SysFont(None, 26)
        return self._font

    def _board_surface(self, state: SessionState) -> pygame.Surface:
        grid = state.display_grid()
        h, w = grid.shape
        surf = pygame.Surface((w * self.cell_size, h * self.cell_size))
        surf.fill((30, 30, 36))
        active = hex_to_rgb(state.current_piece.tetromino.color) if state.current_piece else None
        for y in range(h):
            for x in range(w):
                rect = pygame.Rect(x * self.cell_size, y * self.cell_size, self.cell_size - 1, self.cell_size - 1)
                pygame.draw.rect(surf, _color_for_value(int(grid[y, x]), active), rect)
        return surf

    def _draw_panel(self, screen: pygame.Surface, state: SessionState, x0: int) -> None:
        font = self._font_obj()
        preview = state.next_piece
        small = self.cell_size * 2 // 3
        screen.blit(font.render("Next", True, (230, 230, 230)), (x0, self.margin))
        for py in range(preview.height):
            for px in range(preview.width):
                if preview.shape[py, px]:
                    rect = pygame.Rect(x0 + px * small, self.margin + 24 + py * small, small - 1, small - 1)
                    pygame.draw.rect(screen, hex_to_rgb(preview.color), rect)
        lines = [
            f"Score: {state.score}",
            f"Level: {state.level}",
            f"Lines: {state.lines_cleared}",
        ]
        if state.phase is Phase.PAUSED:
            lines.append("Paused (P)")
        for i, txt in enumerate(lines):
            screen.blit(font.render(txt, True, (230, 230, 230)), (x0, self.margin + 110 + i * 24))

    def draw(self, screen: pygame.Surface, state: SessionState, overlay: Optional[str] = None) -> None:
        screen.fill((10, 10, 14))
        screen.blit(self._board_surface(state), (self.margin, self.margin))
        x0 = self.margin * 2 + state.grid.shape[1] * self.cell_size
        self._draw_panel(screen, state, x0)
        if overlay:
            text = self._font_obj().render(overlay, True, (255, 255, 255))
            rect = text.get_rect(center=(screen.get_width() // 2, self.margin // 2 + 4))
            screen.blit(text, rect)
        pygame.display.flip()
