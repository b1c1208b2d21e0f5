from __future__ import annotations

import math
from typing import Iterable, Tuple

import pygame

from .content import ENEMY_VARIANTS, POWERUP_VARIANTS, EnemyKind, PowerUpKind
from .snapshot import BulletView, EnemyView, PlayerView, WorldSnapshot

BULLET_COLORS = {
    "normal": (255, 255, 0),
    "laser": (0, 255, 255),
    "plasma": (255, 0, 255),
    "energy": (255, 255, 255),
}
ENEMY_BULLET_COLOR = (255, 68, 68)


def _alpha_blit(surf: pygame.Surface, color: Tuple[int, int, int], alpha: float, center: Tuple[float, float], radius: float) -> None:
    r = max(1, int(radius))
    overlay = pygame.Surface((r * 2 + 2, r * 2 + 2), pygame.SRCALPHA)
    pygame.draw.circle(overlay, (*color[:3], int(255 * max(0.0, min(1.0, alpha)))), (r + 1, r + 1), r)
    surf.blit(overlay, (int(center[0] - r - 1), int(center[1] - r - 1)))


class Renderer:
    """Draws a WorldSnapshot with pygame primitives; HUD text is left to GameUI."""

    def __init__(self, surface: pygame.Surface) -> None:
        self.surf = surface
        self.stars = [((i * 73) % surface.get_width(), (i * 151) % surface.get_height()) for i in range(60)]
        self.scroll = 0.0

    def draw(self, snap: WorldSnapshot) -> None:
        self.surf.fill((10, 10, 26))
        self._background(snap)
        for view in snap.powerups:
            color = POWERUP_VARIANTS[PowerUpKind(view.kind)].color
            y = view.y + math.sin(view.bob) * 3
            rect = pygame.Rect(0, 0, int(view.width), int(view.height))
            rect.center = (int(view.x), int(y))
            pygame.draw.rect(self.surf, color, rect, 2, border_radius=6)
            pygame.draw.circle(self.surf, color, rect.center, int(view.width / 4))
        for view in snap.enemies:
            self._enemy(view)
        for view in snap.bullets:
            self._bullet(view)
        if snap.player is not None:
            self._player(snap.player)
        for p in snap.particles:
            _alpha_blit(self.surf, p.color, p.alpha, (p.x, p.y), p.size / 2)

    def _background(self, snap: WorldSnapshot) -> None:
        # slower scroll while time is slowed
        self.scroll = (self.scroll + 1.5 * snap.hud.time_scale) % snap.height
        for sx, sy in self.stars:
            y = (sy + self.scroll) % snap.height
            self.surf.set_at((int(sx), int(y)), (120, 120, 150))

    def _trail(self, points: Iterable[Tuple[float, float]], color: Tuple[int, int, int], size: float) -> None:
        pts = list(points)
        for i, (x, y) in enumerate(pts):
            _alpha_blit(self.surf, color, (i + 1) / (len(pts) + 1) * 0.5, (x, y), size * (i + 1) / len(pts))

    def _player(self, view: PlayerView) -> None:
        if view.invulnerable and view.animation_frame % 10 < 5:
            return
        self._trail(view.trail, (78, 205, 196), 4)
        x, y, w, h = view.x, view.y, view.width, view.height
        body = [(x, y - h / 2), (x - w / 2, y + h / 2), (x, y + h / 4), (x + w / 2, y + h / 2)]
        pygame.draw.polygon(self.surf, (78, 205, 196), body)
        flame = 4 + view.animation_frame % 6
        pygame.draw.circle(self.surf, (255, 165, 0), (int(x), int(y + h / 2)), flame // 2)
        if view.energy_shield > 0:
            pygame.draw.circle(self.surf, (255, 215, 0), (int(x), int(y)), int(max(w, h) * 0.75), 2)
        if view.shield > 0:
            pygame.draw.circle(self.surf, (68, 68, 255), (int(x), int(y)), int(max(w, h) * 0.65), 2)

    def _enemy(self, view: EnemyView) -> None:
        kind = EnemyKind(view.kind)
        color = ENEMY_VARIANTS[kind].color
        if view.boss_state == "attack":
            color = (255, 50, 50)
        self._trail(view.trail, color, 3)
        rect = pygame.Rect(0, 0, int(view.width), int(view.height))
        rect.center = (int(view.x), int(view.y))
        if view.alpha < 1.0:
            overlay = pygame.Surface(rect.size, pygame.SRCALPHA)
            overlay.fill((*color, int(255 * view.alpha)))
            self.surf.blit(overlay, rect.topleft)
        elif kind is EnemyKind.BOSS:
            pygame.draw.ellipse(self.surf, color, rect)
        else:
            tip = [(rect.centerx, rect.bottom), (rect.left, rect.top), (rect.right, rect.top)]
            pygame.draw.polygon(self.surf, color, tip)
        if view.health_fraction < 1.0:
            bar = pygame.Rect(rect.left, rect.top - 8, rect.width, 4)
            pygame.draw.rect(self.surf, (60, 60, 60), bar)
            pygame.draw.rect(self.surf, (60, 200, 80), (bar.left, bar.top, int(bar.width * view.health_fraction), bar.height))

    def _bullet(self, view: BulletView) -> None:
        color = BULLET_COLORS.get(view.kind, (255, 255, 255)) if view.from_player else ENEMY_BULLET_COLOR
        self._trail(view.trail, color, view.width / 2)
        rect = pygame.Rect(0, 0, max(1, int(view.width)), max(1, int(view.height)))
        rect.center = (int(view.x), int(view.y))
        if view.from_player:
            pygame.draw.rect(self.surf, color, rect)
        else:
            pygame.draw.circle(self.surf, color, rect.center, rect.width // 2)
