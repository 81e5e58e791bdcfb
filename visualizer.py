#Pygame visualization for the lightning cycle

from __future__ import annotations

import pygame

from lightning import Kind, Phase

#Newly reached path cells flare up and fade out over this many milliseconds
PATH_FADE_MS = 400


def path_alpha(weight, age_ms, peak=255):
    if age_ms >= PATH_FADE_MS:
        return 0
    return int(peak * weight * (1 - max(0, age_ms) / PATH_FADE_MS))


class LightningVisualizer:
    #Draws the grid of a LightningCycle and advances it on the recommended delays

    def __init__(
        self,
        cycle,
        tile_size=6,
        stats_height=60,
        fps=60,
        title_suffix="",
    ):
        self.cycle = cycle
        self.tile_size = tile_size
        self.stats_height = stats_height
        self.fps = fps
        self.title_suffix = title_suffix

    def _compute_layout(self, container_w, container_h):
        width, height = self.cycle.grid.dimensions()
        usable_w = max(160, container_w - 16)
        usable_h = max(240, container_h - 16)

        max_tile_w = max(2, usable_w // width)
        max_tile_h = max(2, (usable_h - self.stats_height) // height)
        tile_size = max(2, min(self.tile_size, max_tile_w, max_tile_h))

        view_width = width * tile_size
        view_height = height * tile_size
        offset_x = max(0, (container_w - view_width) // 2)
        offset_y = max(0, (container_h - view_height - self.stats_height) // 2)
        return tile_size, view_width, view_height, offset_x, offset_y

    def _render_walls(self, tile_size, colors):
        #Walls never change, so they are drawn once per layout
        grid = self.cycle.grid
        width, height = grid.dimensions()
        surface = pygame.Surface((width * tile_size + 1, height * tile_size + 1), pygame.SRCALPHA)
        for r in range(height):
            for c in range(width):
                cell = grid.cell_at(r, c)
                x, y = c * tile_size, r * tile_size
                if cell.has_top_wall:
                    pygame.draw.line(surface, colors["wall"], (x, y), (x + tile_size, y))
                if cell.has_left_wall:
                    pygame.draw.line(surface, colors["wall"], (x, y), (x, y + tile_size))
        return surface

    def run(self):
        pygame.init()
        display_info = pygame.display.Info()
        default_w = max(480, int(display_info.current_w * 0.5))
        default_h = max(480, int(display_info.current_h * 0.9))
        screen = pygame.display.set_mode((default_w, default_h), pygame.RESIZABLE)
        pygame.display.set_caption(f"Lightning{self.title_suffix}")
        tile_size, view_width, view_height, offset_x, offset_y = self._compute_layout(*screen.get_size())
        font = pygame.font.SysFont(None, 18)
        clock = pygame.time.Clock()
        fullscreen = False
        last_window_size = screen.get_size()

        #color schemes for visual aspects
        colors = {
            "background": (0, 0, 0),
            "wall": (255, 255, 255),
            "start": (255, 255, 221),
            "strike": (255, 255, 221),
            "path": (255, 255, 221),
            "flash": (170, 200, 255),
        }

        wall_surface = self._render_walls(tile_size, colors)
        phase = self.cycle.advance()
        path_since = {}
        last_step = pygame.time.get_ticks()

        #Semi transparent fill for path cells, brighter closer to the strike
        overlays = {}

        def draw_alpha_rect(surface, color, rect, alpha):
            key = (color, rect.width, rect.height, alpha)
            overlay = overlays.get(key)
            if overlay is None:
                overlay = pygame.Surface((rect.width, rect.height), pygame.SRCALPHA)
                overlay.fill((*color, alpha))
                overlays[key] = overlay
            surface.blit(overlay, rect.topleft)

        running = True
        while running:
            clock.tick(self.fps)
            for event in pygame.event.get():
                if event.type == pygame.QUIT or (
                    event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE
                ):
                    running = False
                if event.type == pygame.VIDEORESIZE and not fullscreen:
                    last_window_size = (event.w, event.h)
                    screen = pygame.display.set_mode(last_window_size, pygame.RESIZABLE)
                if event.type == pygame.KEYDOWN and event.key == pygame.K_f:
                    fullscreen = not fullscreen
                    if fullscreen:
                        display_info = pygame.display.Info()
                        screen = pygame.display.set_mode((display_info.current_w, display_info.current_h), pygame.FULLSCREEN)
                    else:
                        screen = pygame.display.set_mode(last_window_size, pygame.RESIZABLE)

            layout = self._compute_layout(*screen.get_size())
            if layout[0] != tile_size:
                wall_surface = self._render_walls(layout[0], colors)
            tile_size, view_width, view_height, offset_x, offset_y = layout

            now = pygame.time.get_ticks()
            if now - last_step > self.cycle.delay_ms():
                last_step = now
                phase = self.cycle.advance()
                if phase is Phase.START:
                    path_since.clear()

            screen.fill(colors["background"])
            flicker = (now // 50) % 2 == 0
            grid = self.cycle.grid
            for r, row in enumerate(grid.states):
                for c, state in enumerate(row):
                    if state.kind is Kind.EMPTY:
                        continue
                    rect = pygame.Rect(
                        offset_x + c * tile_size,
                        offset_y + r * tile_size,
                        tile_size,
                        tile_size,
                    )
                    if state.kind is Kind.PATH:
                        since = path_since.setdefault((r, c), now)
                        alpha = path_alpha(state.weight, now - since)
                        if alpha > 0:
                            draw_alpha_rect(screen, colors["path"], rect, alpha)
                    elif state.kind is Kind.FLASH:
                        pygame.draw.rect(screen, colors["flash"] if flicker else colors["strike"], rect)
                    else:
                        pygame.draw.rect(screen, colors[state.kind.value], rect)

            screen.blit(wall_surface, (offset_x, offset_y))

            lines = [
                f"phase: {phase.value}",
                f"cycle: {self.cycle.cycles + 1}",
                f"rounds: {self.cycle.rounds}",
                f"route length: {self.cycle.route_length if phase in (Phase.STRIKE, Phase.FLASH) else '-'}",
            ]
            stats_rect = pygame.Rect(offset_x, offset_y + view_height + 4, view_width, self.stats_height)
            pygame.draw.rect(screen, (25, 25, 25), stats_rect)
            for i, text in enumerate(lines):
                surface = font.render(text, True, (235, 235, 235))
                screen.blit(surface, (stats_rect.x + 6 + (i % 2) * (view_width // 2), stats_rect.y + 6 + (i // 2) * 20))

            pygame.display.flip()

        pygame.quit()
