from __future__ import annotations

from typing import Dict, Optional

import pygame
import pygame_gui

from .config import Settings
from .content import Content
from .records import RecordStore, RunRecord, RunSummary
from .utils import format_time


def _stats_html(records: RecordStore, content: Content) -> str:
    stats = records.statistics()
    lines = ["<b>Records</b><br><br>"]
    if not stats["total_games"]:
        lines.append("No runs recorded yet.<br>")
    else:
        lines.append(f"Games {stats['total_games']}  Best {stats['best_score']}  Avg {stats['average_score']}<br>")
        lines.append(f"Kills {stats['total_kills']}  Best combo {stats['best_combo']}  Accuracy {stats['average_accuracy']}%<br>")
        lines.append(f"Play time {stats['total_play_time_formatted']}  Trend {stats['recent_trend']}<br><br>")
        lines.append("<b>Recent</b><br>")
        for rec in records.recent(5):
            lines.append(f"{rec.score} pts, {rec.kills} kills, {rec.survival_time_formatted} ({rec.difficulty})<br>")
    unlocked = set()
    for rec in records.all_records():
        unlocked.update(rec.achievements)
    lines.append("<br><b>Achievements</b><br>")
    for key, meta in content.achievements.items():
        ok = key in unlocked
        name = meta.get('name', key)
        lines.append(f"<font color=#{'66FF66' if ok else 'CCCCCC'}>{name}</font> {meta.get('description', '')}<br>")
    return "".join(lines)


def run_start_menu(screen: pygame.Surface, settings: Settings, content: Content, records: RecordStore) -> Optional[str]:
    """Returns the chosen difficulty key, or None when the window is closed."""
    width, height = settings.window.width, settings.window.height
    pygame.display.set_caption(settings.window.title)
    clock = pygame.time.Clock()
    ui = pygame_gui.UIManager((width, height))

    pygame_gui.elements.UILabel(pygame.Rect(0, 30, width, 40), settings.window.title, manager=ui)
    diff_buttons: Dict[str, pygame_gui.elements.UIButton] = {}
    for i, (key, meta) in enumerate(content.difficulties.items()):
        diff_buttons[key] = pygame_gui.elements.UIButton(
            relative_rect=pygame.Rect(20 + (i % 2) * 150, 90 + (i // 2) * 44, 140, 36),
            text=str(meta.get('name', key.title())),
            manager=ui,
        )
    selected = settings.gameplay.difficulty if settings.gameplay.difficulty in diff_buttons else next(iter(diff_buttons), "normal")
    selected_label = pygame_gui.elements.UILabel(pygame.Rect(320, 90, width - 340, 36), f"Difficulty: {selected}", manager=ui)

    text_top = 200
    stats_box = pygame_gui.elements.UITextBox(html_text=_stats_html(records, content), relative_rect=pygame.Rect(20, text_top, width - 40, height - text_top - 70), manager=ui)
    start_btn = pygame_gui.elements.UIButton(pygame.Rect(20, height - 56, 200, 36), text="Start Run (S)", manager=ui)
    clear_btn = pygame_gui.elements.UIButton(pygame.Rect(width - 220, height - 56, 200, 36), text="Clear Records", manager=ui)

    while True:
        time_delta = clock.tick(60) / 1000.0
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                return None
            if event.type == pygame.KEYDOWN and event.key in (pygame.K_s, pygame.K_RETURN):
                return selected
            if event.type == pygame_gui.UI_BUTTON_PRESSED:
                if event.ui_element == start_btn:
                    return selected
                if event.ui_element == clear_btn:
                    records.clear()
                    stats_box.set_text(_stats_html(records, content))
                for key, btn in diff_buttons.items():
                    if event.ui_element == btn:
                        selected = key
                        selected_label.set_text(f"Difficulty: {key}")
                        break
            ui.process_events(event)

        ui.update(time_delta)
        screen.fill((18, 18, 22))
        ui.draw_ui(screen)
        pygame.display.flip()


def run_game_over(screen: pygame.Surface, settings: Settings, record: Optional[RunRecord], summary: RunSummary) -> bool:
    """Post-run panel. True to return to the start menu, False to exit."""
    width, height = settings.window.width, settings.window.height
    clock = pygame.time.Clock()
    ui = pygame_gui.UIManager((width, height))

    pw, ph = min(420, width - 40), 320
    panel = pygame_gui.elements.UIPanel(pygame.Rect((width - pw) // 2, (height - ph) // 2, pw, ph), manager=ui)
    title = "New High Score!" if summary.score >= summary.high_score and summary.score > 0 else "Game Over"
    pygame_gui.elements.UILabel(pygame.Rect(10, 10, pw - 20, 30), title, manager=ui, container=panel)
    accuracy = record.accuracy if record is not None else 0
    lines = [
        f"Score {summary.score}   Best {summary.high_score}",
        f"Kills {summary.kills}   Max combo {summary.max_combo}",
        f"Survived {format_time(summary.survival_time_ms)}   Level {summary.level}",
        f"Accuracy {accuracy}%",
        f"Achievements {len(summary.achievements)}",
    ]
    for i, line in enumerate(lines):
        pygame_gui.elements.UILabel(pygame.Rect(10, 50 + i * 30, pw - 20, 26), line, manager=ui, container=panel)
    menu_btn = pygame_gui.elements.UIButton(pygame.Rect(20, ph - 60, 160, 36), text="Menu (Enter)", manager=ui, container=panel)
    quit_btn = pygame_gui.elements.UIButton(pygame.Rect(pw - 180, ph - 60, 160, 36), text="Quit", manager=ui, container=panel)

    while True:
        time_delta = clock.tick(60) / 1000.0
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                return False
            if event.type == pygame.KEYDOWN and event.key == pygame.K_RETURN:
                return True
            if event.type == pygame_gui.UI_BUTTON_PRESSED:
                if event.ui_element == menu_btn:
                    return True
                if event.ui_element == quit_btn:
                    return False
            ui.process_events(event)

        ui.update(time_delta)
        screen.fill((18, 18, 22))
        ui.draw_ui(screen)
        pygame.display.flip()
