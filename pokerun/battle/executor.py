"""Skill resolution: accuracy, damage, stage changes and status ailments.

Damage uses integer-truncating arithmetic at each division step::

    a   = (2 * level) // 5 + 2
    raw = ((a * power * atk) // max(1, def)) // 50 + 2
    dmg = max(1, round(raw * uniform(0.85, 1.01)))

Every random draw comes from the injected ``random.Random``.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Optional
import random

from pokerun.core.logging import logger
from . import texts
from .battler import Battler
from .log import LogChannel
from .skills import SkillDefinition
from .types import BattleStat, EffectTarget, SkillCategory

VARIANCE_MIN = 0.85
VARIANCE_MAX = 1.01

@dataclass
class SkillOutcome:
    acted: bool = False
    hit: bool = False
    damage: int = 0
    stage_applied: int = 0
    status_applied: bool = False
    defender_fainted: bool = False

    @property
    def changed_state(self) -> bool:
        return self.damage > 0 or self.stage_applied != 0 or self.status_applied

def base_damage(level: int, power: int, atk: int, def_: int) -> int:
    a = (2 * max(1, level)) // 5 + 2
    power = max(1, power)
    return ((a * power * atk) // max(1, def_)) // 50 + 2

class SkillExecutor:
    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def roll(self, chance_percent: int) -> bool:
        c = max(0, min(100, int(chance_percent)))
        if c <= 0:
            return False
        if c >= 100:
            return True
        return self.rng.randint(1, 100) <= c

    def execute(self, attacker: Optional[Battler], defender: Optional[Battler],
                skill: Optional[SkillDefinition], log: Optional[LogChannel]) -> SkillOutcome:
        outcome = SkillOutcome()
        if attacker is None or defender is None or skill is None or log is None:
            logger.warn("SkillExecuteInvalidArgs", attacker=attacker is not None, defender=defender is not None,
                        skill=skill is not None, log=log is not None)
            return outcome

        if attacker.is_fainted:
            log.push_text(texts.cannot_act(attacker.name))
            return outcome

        outcome.acted = True
        log.push_text(texts.use_skill(attacker.name, skill.name))

        if not self.roll(skill.accuracy):
            log.push_text(texts.missed())
            return outcome
        outcome.hit = True

        if skill.category == SkillCategory.STATUS:
            self._apply_effects(attacker, defender, skill, log, outcome)
            if not outcome.changed_state:
                log.push_text(texts.nothing_happened())
            return outcome

        dmg = self.compute_damage(attacker, defender, skill)
        defender.apply_damage(dmg)
        outcome.damage = dmg
        log.push_text(texts.damage(defender.name, dmg))

        if defender.is_fainted:
            outcome.defender_fainted = True
            log.push_text(texts.fainted(defender.name))
            return outcome

        self._apply_effects(attacker, defender, skill, log, outcome)
        return outcome

    def compute_damage(self, attacker: Battler, defender: Battler, skill: SkillDefinition) -> int:
        if skill.category == SkillCategory.PHYSICAL:
            atk = attacker.get_stat(BattleStat.ATTACK)
            def_ = defender.get_stat(BattleStat.DEFENSE)
        else:
            atk = attacker.get_stat(BattleStat.SP_ATTACK)
            def_ = defender.get_stat(BattleStat.SP_DEFENSE)
        raw = base_damage(attacker.level, skill.power, atk, def_)
        variance = self.rng.uniform(VARIANCE_MIN, VARIANCE_MAX)
        return max(1, round(raw * variance))

    def _apply_effects(self, attacker: Battler, defender: Battler, skill: SkillDefinition,
                       log: LogChannel, outcome: SkillOutcome):
        # Stage and ailment effects roll independently
        if skill.has_stage_effect and self.roll(skill.stage_chance):
            target = attacker if skill.stage_target == EffectTarget.SELF else defender
            applied = target.apply_stage_delta(skill.stage_stat, skill.stage_delta)
            if applied != 0:
                outcome.stage_applied = applied
                log.push_text(texts.stage_changed(target.name, skill.stage_stat, applied))

        if skill.has_ailment_effect and self.roll(skill.ailment_chance):
            if defender.apply_status(skill.ailment):
                outcome.status_applied = True
                log.push_text(texts.status_applied(defender.name, skill.ailment))

__all__ = ["SkillExecutor","SkillOutcome","base_damage"]
