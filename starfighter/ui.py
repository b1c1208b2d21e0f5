from __future__ import annotations

from pathlib import Path
from typing import Dict, Optional

import pygame
import pygame_gui

from .snapshot import HudView
from .utils import format_time

SKILL_LABELS = {
    "super_shot": "1 Super",
    "time_warp": "2 Warp",
    "energy_shield": "3 Shield",
    "clear_bomb": "4 Bomb",
}


class GameUI:
    def __init__(self, width: int, height: int) -> None:
        theme_path = Path('assets/ui/theme.json')
        self.manager = pygame_gui.UIManager((width, height), theme_path if theme_path.exists() else None)
        self.width = width
        self.height = height

        self.pause_window: Optional[pygame_gui.elements.UIWindow] = None
        self.pause_buttons: Dict[str, pygame_gui.elements.UIButton] = {}

        # HUD elements
        self.hud_panel: Optional[pygame_gui.elements.UIPanel] = None
        self.hp_bar: Optional[pygame_gui.elements.UIProgressBar] = None
        self.score_label: Optional[pygame_gui.elements.UILabel] = None
        self.status_label: Optional[pygame_gui.elements.UILabel] = None
        self.effects_label: Optional[pygame_gui.elements.UILabel] = None
        self.skill_bars: Dict[str, pygame_gui.elements.UIProgressBar] = {}
        self.warning_label: Optional[pygame_gui.elements.UILabel] = None
        # Banner
        self.banner_label: Optional[pygame_gui.elements.UILabel] = None
        self.banner_time_left: float = 0.0

    def process_event(self, event: pygame.event.Event) -> None:
        self.manager.process_events(event)

    def update(self, dt: float) -> None:
        self.manager.update(dt)
        if self.banner_time_left > 0:
            self.banner_time_left -= dt
            if self.banner_time_left <= 0 and self.banner_label is not None:
                self.banner_label.kill()
                self.banner_label = None

    def draw(self, surface: pygame.Surface) -> None:
        self.manager.draw_ui(surface)

    # Pause menu
    def open_pause(self) -> None:
        if self.pause_window is not None:
            return
        w, h = 260, 160
        x, y = (self.width - w) // 2, (self.height - h) // 2
        self.pause_window = pygame_gui.elements.UIWindow(rect=pygame.Rect(x, y, w, h), window_display_title='Paused', manager=self.manager, object_id='#pause_window')
        container = self.pause_window
        self.pause_buttons['resume'] = pygame_gui.elements.UIButton(relative_rect=pygame.Rect(40, 10, 160, 36), text='Resume (P)', manager=self.manager, container=container)
        self.pause_buttons['quit_run'] = pygame_gui.elements.UIButton(relative_rect=pygame.Rect(40, 56, 160, 36), text='End Run', manager=self.manager, container=container)

    def close_pause(self) -> None:
        if self.pause_window is not None:
            self.pause_window.kill()
            self.pause_window = None
            self.pause_buttons.clear()

    def handle_ui_event(self, event: pygame.event.Event) -> Optional[str]:
        """Map a pause-window button press to 'resume' or 'quit_run'."""
        if event.type != pygame_gui.UI_BUTTON_PRESSED or self.pause_window is None:
            return None
        for name, btn in self.pause_buttons.items():
            if btn == event.ui_element:
                return name
        return None

    # HUD helpers
    def ensure_hud(self) -> None:
        if self.hud_panel is not None:
            return
        self.hud_panel = pygame_gui.elements.UIPanel(pygame.Rect(10, 10, 300, 96), manager=self.manager)
        pygame_gui.elements.UILabel(pygame.Rect(4, 0, 24, 18), text='HP', manager=self.manager, container=self.hud_panel)
        self.hp_bar = pygame_gui.elements.UIProgressBar(pygame.Rect(28, 2, 200, 14), manager=self.manager, container=self.hud_panel)
        self.score_label = pygame_gui.elements.UILabel(pygame.Rect(4, 20, 290, 20), text='Score 0', manager=self.manager, container=self.hud_panel)
        self.status_label = pygame_gui.elements.UILabel(pygame.Rect(4, 42, 290, 20), text='', manager=self.manager, container=self.hud_panel)
        self.effects_label = pygame_gui.elements.UILabel(pygame.Rect(4, 64, 290, 20), text='', manager=self.manager, container=self.hud_panel)
        # skill cooldowns along the bottom edge
        for i, (key, label) in enumerate(SKILL_LABELS.items()):
            x = 10 + i * 110
            y = self.height - 44
            pygame_gui.elements.UILabel(pygame.Rect(x, y, 100, 18), text=label, manager=self.manager)
            self.skill_bars[key] = pygame_gui.elements.UIProgressBar(pygame.Rect(x, y + 20, 100, 12), manager=self.manager)

    def update_hud(self, hud: HudView) -> None:
        self.ensure_hud()
        if self.hp_bar is not None and hud.max_health > 0:
            self.hp_bar.set_current_progress(int(100 * max(0.0, min(1.0, hud.health / hud.max_health))))
        if self.score_label is not None:
            self.score_label.set_text(f'Score {hud.score}  Best {hud.high_score}  Kills {hud.kills}')
        if self.status_label is not None:
            combo = f'  Combo x{hud.combo}' if hud.combo > 1 else ''
            self.status_label.set_text(f'Wave {hud.wave}  Lv {hud.level}  Lives {hud.lives}  {format_time(hud.elapsed_ms)}{combo}')
        if self.effects_label is not None:
            fx = ', '.join(f'{name} {ms / 1000:.0f}s' for name, ms in hud.effects.items() if ms > 0)
            self.effects_label.set_text(fx)
        for key, bar in self.skill_bars.items():
            bar.set_current_progress(int(100 * (1.0 - hud.skills.get(key, 0.0))))
        self._update_warning(hud)

    def _update_warning(self, hud: HudView) -> None:
        if hud.boss_warning_ms > 0:
            if self.warning_label is None:
                self.warning_label = pygame_gui.elements.UILabel(pygame.Rect(0, self.height // 2 - 20, self.width, 40), text='WARNING: BOSS APPROACHING', manager=self.manager)
        elif self.warning_label is not None:
            self.warning_label.kill()
            self.warning_label = None

    def show_banner(self, text: str, seconds: float = 2.0) -> None:
        if not text:
            return
        if self.banner_label is not None:
            self.banner_label.kill()
        width = min(500, self.width - 40)
        x = (self.width - width) // 2
        self.banner_label = pygame_gui.elements.UILabel(pygame.Rect(x, 120, width, 30), text=text, manager=self.manager)
        self.banner_time_left = seconds
