from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Tuple

import pygame

from .content import SkillKind

SKILL_KEYS = {
    pygame.K_1: SkillKind.SUPER_SHOT,
    pygame.K_2: SkillKind.TIME_WARP,
    pygame.K_3: SkillKind.ENERGY_SHIELD,
    pygame.K_4: SkillKind.CLEAR_BOMB,
}


@dataclass
class InputState:
    """What the player asked for during one tick."""

    target: Optional[Tuple[float, float]] = None
    left: bool = False
    right: bool = False
    up: bool = False
    down: bool = False
    shoot: bool = False
    skills: Tuple[str, ...] = ()
    pause: bool = False
    quit: bool = False

    @property
    def directional(self) -> bool:
        return self.left or self.right or self.up or self.down


class InputPoller:
    def __init__(self) -> None:
        self.dragging = False

    def poll(self, events: Iterable[pygame.event.Event], pressed: Optional[Sequence[bool]] = None) -> InputState:
        state = InputState()
        skills = []
        for event in events:
            if event.type == pygame.QUIT:
                state.quit = True
            elif event.type == pygame.KEYDOWN:
                if event.key in (pygame.K_p, pygame.K_ESCAPE):
                    state.pause = True
                elif event.key in SKILL_KEYS:
                    skills.append(SKILL_KEYS[event.key].value)
                elif event.key == pygame.K_q and event.mod & pygame.KMOD_CTRL:
                    state.quit = True
            elif event.type == pygame.MOUSEBUTTONDOWN and event.button == 1:
                self.dragging = True
                state.target = (float(event.pos[0]), float(event.pos[1]))
            elif event.type == pygame.MOUSEBUTTONUP and event.button == 1:
                self.dragging = False
            elif event.type == pygame.MOUSEMOTION and self.dragging:
                state.target = (float(event.pos[0]), float(event.pos[1]))
        state.skills = tuple(skills)

        if pressed is None:
            pressed = pygame.key.get_pressed()
        state.left = bool(pressed[pygame.K_a] or pressed[pygame.K_LEFT])
        state.right = bool(pressed[pygame.K_d] or pressed[pygame.K_RIGHT])
        state.up = bool(pressed[pygame.K_w] or pressed[pygame.K_UP])
        state.down = bool(pressed[pygame.K_s] or pressed[pygame.K_DOWN])
        state.shoot = bool(pressed[pygame.K_SPACE])
        return state


def poll_input(
    events: Iterable[pygame.event.Event],
    poller: Optional[InputPoller] = None,
    pressed: Optional[Sequence[bool]] = None,
) -> InputState:
    return (poller or InputPoller()).poll(events, pressed)
