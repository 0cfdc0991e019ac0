"""Enums and the stat-stage table shared by the battle modules."""
from __future__ import annotations
from enum import Enum

STAGE_MIN = -6
STAGE_MAX = 6

class SkillCategory(str, Enum):
    PHYSICAL = "physical"
    SPECIAL = "special"
    STATUS = "status"

class BattleStat(str, Enum):
    # Values double as attribute names on Stages
    ATTACK = "attack"
    DEFENSE = "defense"
    SP_ATTACK = "sp_atk"
    SP_DEFENSE = "sp_def"
    SPEED = "speed"

class StatusAilment(str, Enum):
    NONE = "none"
    POISON = "poison"
    BURN = "burn"

class EffectTarget(str, Enum):
    FOE = "foe"
    SELF = "self"

STAT_LABELS = {
    BattleStat.ATTACK: "Attack",
    BattleStat.DEFENSE: "Defense",
    BattleStat.SP_ATTACK: "Sp. Atk",
    BattleStat.SP_DEFENSE: "Sp. Def",
    BattleStat.SPEED: "Speed",
}

def clamp_stage(stage: int) -> int: return max(STAGE_MIN, min(STAGE_MAX, int(stage)))

def stage_multiplier(stage: int) -> float:
    s = clamp_stage(stage)
    return (2 + s)/2 if s >= 0 else 2/(2 + abs(s))

def clamp_percent(value: int, lo: int = 0) -> int:
    return max(lo, min(100, int(value)))

__all__ = [
    "SkillCategory","BattleStat","StatusAilment","EffectTarget","STAT_LABELS",
    "STAGE_MIN","STAGE_MAX","clamp_stage","stage_multiplier","clamp_percent",
]
