"""Encounter pools and the generator that turns a run position into an Encounter."""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, List, Mapping, Optional, Tuple
import random

from pokerun.battle.battler import SKILL_SLOTS
from pokerun.core.errors import ValidationError

if TYPE_CHECKING:
    from .config import RunConfig

@dataclass(frozen=True)
class EncounterEntry:
    enemy_id: int
    level_offset: int = 0
    skill_ids: Tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "EncounterEntry":
        try:
            enemy_id = int(raw["enemy_id"])
        except (KeyError, TypeError, ValueError) as e:
            raise ValidationError(f"Encounter entry needs a numeric enemy_id: {raw!r}") from e
        if enemy_id < 1:
            raise ValidationError(f"Encounter enemy_id must be >= 1: {enemy_id}")
        skills = tuple(str(s) for s in (raw.get("skills") or [])[:SKILL_SLOTS])
        return cls(enemy_id=enemy_id, level_offset=max(0, int(raw.get("level_offset", 0))), skill_ids=skills)

@dataclass
class EncounterPool:
    entries: List[EncounterEntry] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.entries)

    def try_get_random(self, rng: random.Random) -> Optional[EncounterEntry]:
        if not self.entries:
            return None
        return self.entries[rng.randrange(len(self.entries))]

@dataclass(frozen=True)
class Encounter:
    enemy_id: int
    level: int
    skill_ids: Tuple[str, ...] = ()

    @classmethod
    def create(cls, entry: EncounterEntry, level: int) -> "Encounter":
        return cls(enemy_id=entry.enemy_id, level=level, skill_ids=entry.skill_ids)

def battle_level(config: "RunConfig", stage_index: int, level_offset: int) -> int:
    level = config.base_battle_level + (stage_index - 1) * config.level_step_per_stage + level_offset
    return max(1, level)

def generate(config: Optional["RunConfig"], biome_index: int, stage_index: int,
             rng: random.Random) -> Optional[Encounter]:
    """Pick the next opponent, or None when no pool can supply one."""
    if config is None:
        return None
    pool = config.get_pool(biome_index, stage_index)
    if pool is None:
        return None
    entry = pool.try_get_random(rng)
    if entry is None:
        return None
    return Encounter.create(entry, battle_level(config, stage_index, entry.level_offset))

__all__ = ["EncounterEntry","EncounterPool","Encounter","generate","battle_level"]
