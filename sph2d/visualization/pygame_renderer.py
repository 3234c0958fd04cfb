"""
Particle renderer using Pygame.

Draws every particle as a filled circle on a gray background with the
world y axis pointing up, plus a frame-rate and particle-count overlay.
"""

import numpy as np
import pygame
from typing import Tuple

from ..core.particles import ParticleArrays


def world_to_screen(positions: np.ndarray, domain_size: Tuple[float, float],
                    window_size: Tuple[int, int]) -> np.ndarray:
    """Map world coordinates to integer pixel coordinates.

    World y points up, screen y points down, so y is flipped.

    Args:
        positions: Array of shape (N, 2) in world units
        domain_size: (width, height) of the domain
        window_size: (width, height) of the window in pixels

    Returns:
        Integer array of shape (N, 2)
    """
    positions = np.asarray(positions, dtype=np.float64).reshape(-1, 2)
    scale_x = window_size[0] / domain_size[0]
    scale_y = window_size[1] / domain_size[1]

    screen = np.empty((positions.shape[0], 2), dtype=np.int64)
    screen[:, 0] = np.floor(positions[:, 0] * scale_x).astype(np.int64)
    screen[:, 1] = np.floor(window_size[1] - positions[:, 1] * scale_y).astype(np.int64)
    return screen


class PygameRenderer:
    """Pygame window for the dam-break simulation."""

    def __init__(self, domain_size: Tuple[float, float] = (1000.0, 1000.0),
                 window_size: Tuple[int, int] = (800, 800),
                 title: str = "SPH Dam Break"):
        """Initialize Pygame renderer.

        Args:
            domain_size: Physical domain size (width, height)
            window_size: Window size in pixels
            title: Window title
        """
        self.domain_size = domain_size
        self.window_size = window_size

        pygame.init()
        self.screen = pygame.display.set_mode(window_size)
        pygame.display.set_caption(title)
        self.clock = pygame.time.Clock()

        # Scaling from physical to pixel coordinates
        self.scale_x = window_size[0] / domain_size[0]
        self.scale_y = window_size[1] / domain_size[1]
        self.particle_radius = max(1, int(round(4 * max(self.scale_x, self.scale_y))))

        self.color_mode = 'water'
        self.show_stats = True
        self.is_paused = False
        self.reset_requested = False

        self.font = pygame.font.Font(None, 32)

        self.bg_color = (130, 130, 130)
        self.particle_color = (0, 121, 241)
        self.text_color = (253, 249, 0)

    def _speed_colors(self, particles: ParticleArrays) -> np.ndarray:
        """Blue for slow particles fading to white for fast ones."""
        speed = np.sqrt(particles.velocity_x ** 2 + particles.velocity_y ** 2)
        finite = speed[np.isfinite(speed)]
        top = float(finite.max()) if finite.size and finite.max() > 0 else 1.0
        t = np.clip(np.nan_to_num(speed / top), 0.0, 1.0)[:, np.newaxis]
        base = np.array(self.particle_color, dtype=np.float64)
        return (base + t * (255.0 - base)).astype(np.uint8)

    def draw(self, particles: ParticleArrays, fps: float = None):
        """Render one frame.

        Args:
            particles: Particle data
            fps: Frame rate to display (None for the clock's estimate)
        """
        self.screen.fill(self.bg_color)

        n = particles.n_particles
        if n > 0:
            # Blown-up particles are not drawn
            visible = np.isfinite(particles.position_x) & np.isfinite(particles.position_y)
            screen_pos = world_to_screen(particles.get_positions()[visible],
                                         self.domain_size, self.window_size)
            if self.color_mode == 'speed':
                colors = self._speed_colors(particles)[visible]
            else:
                colors = None

            for k in range(screen_pos.shape[0]):
                color = self.particle_color if colors is None else tuple(int(c) for c in colors[k])
                pygame.draw.circle(self.screen, color,
                                   (int(screen_pos[k, 0]), int(screen_pos[k, 1])),
                                   self.particle_radius)

        if self.show_stats:
            self._draw_stats(n, self.clock.get_fps() if fps is None else fps)

        pygame.display.flip()

    def _draw_stats(self, n_particles: int, fps: float):
        lines = [f"{int(fps)} FPS", f"{n_particles} PARTICLES"]
        y_offset = 10
        for line in lines:
            text = self.font.render(line, True, self.text_color)
            self.screen.blit(text, (10, y_offset))
            y_offset += 30

    def tick(self, max_fps: int = 60) -> float:
        """Wait for the next frame; returns seconds since the previous one."""
        return self.clock.tick(max_fps) / 1000.0

    def handle_events(self) -> bool:
        """Handle pygame events.

        R requests a reset, Space toggles pause, C toggles speed coloring,
        S toggles the overlay.

        Returns:
            False if window should close
        """
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                return False

            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    return False
                elif event.key == pygame.K_r:
                    self.reset_requested = True
                elif event.key == pygame.K_SPACE:
                    self.is_paused = not self.is_paused
                elif event.key == pygame.K_c:
                    self.color_mode = 'speed' if self.color_mode == 'water' else 'water'
                elif event.key == pygame.K_s:
                    self.show_stats = not self.show_stats

        return True

    def close(self):
        """Clean up and close the renderer."""
        pygame.quit()
