from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List

from .content import SkillKind


@dataclass
class Skill:
    max_cooldown_ms: float
    duration_ms: float = 0.0
    cooldown_ms: float = 0.0
    remaining_ms: float = 0.0

    @property
    def ready(self) -> bool:
        return self.cooldown_ms <= 0

    @property
    def active(self) -> bool:
        return self.remaining_ms > 0

    @property
    def cooldown_fraction(self) -> float:
        if self.max_cooldown_ms <= 0:
            return 0.0
        return max(0.0, min(1.0, self.cooldown_ms / self.max_cooldown_ms))


def default_skills() -> Dict[SkillKind, Skill]:
    return {
        SkillKind.SUPER_SHOT: Skill(max_cooldown_ms=10000),
        SkillKind.TIME_WARP: Skill(max_cooldown_ms=15000, duration_ms=3000),
        SkillKind.ENERGY_SHIELD: Skill(max_cooldown_ms=12000),
        SkillKind.CLEAR_BOMB: Skill(max_cooldown_ms=20000),
    }


class SkillBook:
    def __init__(self) -> None:
        self.skills: Dict[SkillKind, Skill] = default_skills()

    def __getitem__(self, kind: SkillKind) -> Skill:
        return self.skills[kind]

    def ready(self, kind: SkillKind) -> bool:
        return self.skills[kind].ready

    def active(self, kind: SkillKind) -> bool:
        return self.skills[kind].active

    def trigger(self, kind: SkillKind) -> bool:
        """Start the skill's cooldown (and duration). False while cooling down."""
        skill = self.skills[kind]
        if not skill.ready:
            return False
        skill.cooldown_ms = skill.max_cooldown_ms
        skill.remaining_ms = skill.duration_ms
        return True

    def tick(self, ms: float) -> List[SkillKind]:
        ended: List[SkillKind] = []
        for kind, skill in self.skills.items():
            if skill.cooldown_ms > 0:
                skill.cooldown_ms = max(0.0, skill.cooldown_ms - ms)
            if skill.remaining_ms > 0:
                skill.remaining_ms = max(0.0, skill.remaining_ms - ms)
                if skill.remaining_ms == 0:
                    ended.append(kind)
        return ended

    def reset(self) -> None:
        self.skills = default_skills()
