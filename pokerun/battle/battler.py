"""Runtime battle participant: stats, HP, stages, status, exp and skill slots.

A Battler is created fresh for every battle from an external statline and a
level (``Battler.create``). Mutators never raise; out-of-range input is
clamped or ignored.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from pokerun.events.signal import Signal
from .skills import SkillDefinition
from .types import BattleStat, StatusAilment, clamp_stage, stage_multiplier

SKILL_SLOTS = 4

# Flat growth applied on every level-up
LEVEL_UP_HP = 2
LEVEL_UP_STAT = 1

def exp_to_next_level(level: int) -> int:
    return 10 + max(1, int(level)) * 5

def max_hp_for(stats: Optional["BaseStats"], level: int) -> int:
    level = max(1, int(level))
    if stats is None:
        return 10 + level * 2
    return max(1, stats.hp + level * 2)

@dataclass(frozen=True)
class BaseStats:
    name: str
    hp: int
    atk: int
    def_: int
    sp_atk: int
    sp_def: int
    speed: int

@dataclass
class Stages:
    attack: int = 0
    defense: int = 0
    sp_atk: int = 0
    sp_def: int = 0
    speed: int = 0

    def as_dict(self) -> Dict[str, int]:
        return {s.value: getattr(self, s.value) for s in BattleStat}

@dataclass(frozen=True)
class BattlerSnapshot:
    name: str
    level: int
    hp: int
    max_hp: int
    exp: int
    exp_to_next: int
    status: StatusAilment
    stages: Dict[str, int]

    @property
    def is_fainted(self) -> bool:
        return self.hp <= 0

@dataclass
class Battler:
    name: str = "Unknown"
    level: int = 1
    max_hp: int = 12
    hp: int = 12
    base: Dict[BattleStat, int] = field(default_factory=lambda: {s: 6 for s in BattleStat})
    stages: Stages = field(default_factory=Stages)
    status: StatusAilment = StatusAilment.NONE
    exp: int = 0
    exp_to_next: int = field(default_factory=lambda: exp_to_next_level(1))
    skills: List[Optional[SkillDefinition]] = field(default_factory=lambda: [None] * SKILL_SLOTS)
    # UI binding hooks: hp_changed(hp, max_hp), exp_changed(exp, exp_to_next), level_changed(level)
    hp_changed: Signal = field(default_factory=lambda: Signal("hp_changed"), repr=False, compare=False)
    exp_changed: Signal = field(default_factory=lambda: Signal("exp_changed"), repr=False, compare=False)
    level_changed: Signal = field(default_factory=lambda: Signal("level_changed"), repr=False, compare=False)

    @classmethod
    def create(cls, stats: Optional[BaseStats], level: int, skills: Optional[List[Optional[SkillDefinition]]] = None,
               *, fallback_name: Optional[str] = None) -> "Battler":
        b = cls()
        b.setup(stats, level, fallback_name=fallback_name)
        if skills:
            b.set_skills(*skills)
        return b

    # ------------------------------------------------------------------
    # Setup
    # ------------------------------------------------------------------
    def setup(self, stats: Optional[BaseStats], level: int, *, fallback_name: Optional[str] = None):
        """(Re)initialize from a statline; ``None`` selects synthetic defaults."""
        self.level = max(1, int(level))
        if stats is None:
            self.name = fallback_name or "Unknown"
            self.max_hp = max_hp_for(None, self.level)
            self.base = {s: 5 + self.level for s in BattleStat}
        else:
            self.name = stats.name
            self.max_hp = max_hp_for(stats, self.level)
            self.base = {
                BattleStat.ATTACK: max(1, stats.atk + self.level),
                BattleStat.DEFENSE: max(1, stats.def_ + self.level),
                BattleStat.SP_ATTACK: max(1, stats.sp_atk + self.level),
                BattleStat.SP_DEFENSE: max(1, stats.sp_def + self.level),
                BattleStat.SPEED: max(1, stats.speed + self.level),
            }
        self.hp = self.max_hp
        self.reset_stages_and_status()
        self.exp = 0
        self.exp_to_next = exp_to_next_level(self.level)
        self._raise_all_vitals()

    def reset_stages_and_status(self):
        self.stages = Stages()
        self.status = StatusAilment.NONE

    # ------------------------------------------------------------------
    # Skills
    # ------------------------------------------------------------------
    def set_skills(self, *skills: Optional[SkillDefinition]):
        slots = list(skills[:SKILL_SLOTS])
        self.skills = slots + [None] * (SKILL_SLOTS - len(slots))

    def get_skill(self, slot: int) -> Optional[SkillDefinition]:
        if slot < 0 or slot >= SKILL_SLOTS:
            return None
        return self.skills[slot]

    @property
    def has_skills(self) -> bool:
        return any(s is not None for s in self.skills)

    # ------------------------------------------------------------------
    # Stats / stages
    # ------------------------------------------------------------------
    def stage(self, stat: BattleStat) -> int:
        return getattr(self.stages, stat.value)

    def get_stat(self, stat: BattleStat) -> int:
        base = self.base.get(stat, 1)
        return max(1, round(base * stage_multiplier(self.stage(stat))))

    def apply_stage_delta(self, stat: BattleStat, delta: int) -> int:
        """Shift a stage and return the delta actually applied (0 when capped)."""
        if delta == 0:
            return 0
        before = self.stage(stat)
        after = clamp_stage(before + delta)
        setattr(self.stages, stat.value, after)
        return after - before

    # ------------------------------------------------------------------
    # HP
    # ------------------------------------------------------------------
    @property
    def is_fainted(self) -> bool:
        return self.hp <= 0

    def apply_damage(self, amount: int):
        if amount <= 0:
            return
        self._set_hp(self.hp - amount)

    def heal(self, amount: int):
        if amount <= 0:
            return
        self._set_hp(self.hp + amount)

    def _set_hp(self, value: int):
        nxt = max(0, min(int(value), max(1, self.max_hp)))
        if nxt == self.hp:
            return
        self.hp = nxt
        self.hp_changed.emit(self.hp, self.max_hp)

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------
    def apply_status(self, ailment: StatusAilment) -> bool:
        if ailment == StatusAilment.NONE or self.status != StatusAilment.NONE:
            return False
        self.status = ailment
        return True

    def clear_status(self):
        self.status = StatusAilment.NONE

    def compute_end_turn_dot(self) -> int:
        if self.status == StatusAilment.POISON:
            return max(1, self.max_hp // 8)
        if self.status == StatusAilment.BURN:
            return max(1, self.max_hp // 16)
        return 0

    # ------------------------------------------------------------------
    # Experience
    # ------------------------------------------------------------------
    def gain_exp(self, amount: int) -> int:
        """Add exp, levelling up as many times as it covers. Returns levels gained."""
        if amount <= 0:
            return 0
        self.exp += amount
        self.exp_changed.emit(self.exp, self.exp_to_next)
        gained = 0
        while self.exp_to_next > 0 and self.exp >= self.exp_to_next:
            self.exp -= self.exp_to_next
            self._level_up_once()
            gained += 1
            self.exp_changed.emit(self.exp, self.exp_to_next)
        return gained

    def _level_up_once(self):
        self.level += 1
        self.max_hp = max(1, self.max_hp + LEVEL_UP_HP)
        self.hp = min(self.max_hp, self.hp + LEVEL_UP_HP)
        for stat in BattleStat:
            self.base[stat] = max(1, self.base[stat] + LEVEL_UP_STAT)
        self.exp_to_next = exp_to_next_level(self.level)
        self.level_changed.emit(self.level)
        self.hp_changed.emit(self.hp, self.max_hp)

    def _raise_all_vitals(self):
        self.hp_changed.emit(self.hp, self.max_hp)
        self.exp_changed.emit(self.exp, self.exp_to_next)
        self.level_changed.emit(self.level)

    def snapshot(self) -> BattlerSnapshot:
        return BattlerSnapshot(
            name=self.name, level=self.level, hp=self.hp, max_hp=self.max_hp,
            exp=self.exp, exp_to_next=self.exp_to_next, status=self.status,
            stages=self.stages.as_dict(),
        )

__all__ = ["Battler","BaseStats","Stages","BattlerSnapshot","SKILL_SLOTS","exp_to_next_level","max_hp_for"]
