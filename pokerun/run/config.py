"""Run configuration: economy, battle level curve and per-biome encounter pools."""
from __future__ import annotations
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any, List, Mapping, Optional, Tuple

from pokerun.core.errors import ValidationError
from pokerun.core.logging import logger
from pokerun.core.paths import RUN_CONFIG_FILE
from pokerun.data.loader import read_json
from .encounters import EncounterEntry, EncounterPool

STAGES_PER_BIOME = 10
EARLY_STAGE_MAX = 3
MID_STAGE_MAX = 7

@dataclass
class BiomePools:
    name: str = ""
    early: Optional[EncounterPool] = None
    mid: Optional[EncounterPool] = None
    late: Optional[EncounterPool] = None

    def pick(self, stage_in_biome: int) -> Optional[EncounterPool]:
        if stage_in_biome <= EARLY_STAGE_MAX and self.early:
            return self.early
        if stage_in_biome <= MID_STAGE_MAX and self.mid:
            return self.mid
        if self.late:
            return self.late
        return self.early or self.mid or self.late

@dataclass(frozen=True)
class StarterConfig:
    id: int = 4
    level: int = 5
    skills: Tuple[str, ...] = ()

@dataclass
class RunConfig:
    start_gold: int = 0
    base_battle_level: int = 5
    level_step_per_stage: int = 1
    gold_per_victory: int = 100
    exp_per_victory: int = 12
    starter: StarterConfig = field(default_factory=StarterConfig)
    biomes: List[BiomePools] = field(default_factory=list)

    def biome(self, biome_index: int) -> Optional[BiomePools]:
        if not self.biomes:
            return None
        # Past the last configured biome, keep reusing it
        i = max(1, min(int(biome_index), len(self.biomes)))
        return self.biomes[i - 1]

    def get_pool(self, biome_index: int, stage_index: int) -> Optional[EncounterPool]:
        b = self.biome(biome_index)
        if b is None:
            return None
        stage_in_biome = ((max(1, stage_index) - 1) % STAGES_PER_BIOME) + 1
        return b.pick(stage_in_biome)

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> "RunConfig":
        def pool(data: Any) -> Optional[EncounterPool]:
            if not data:
                return None
            if not isinstance(data, list):
                raise ValidationError(f"Encounter pool must be a list, got {type(data).__name__}")
            return EncounterPool([EncounterEntry.from_dict(e) for e in data])

        biomes = [
            BiomePools(name=str(b.get("name", "")), early=pool(b.get("early")),
                       mid=pool(b.get("mid")), late=pool(b.get("late")))
            for b in raw.get("biomes", [])
        ]
        st = raw.get("starter") or {}
        starter = StarterConfig(
            id=int(st.get("id", 4)),
            level=max(1, int(st.get("level", 5))),
            skills=tuple(str(s) for s in st.get("skills", [])),
        )
        return cls(
            start_gold=max(0, int(raw.get("start_gold", 0))),
            base_battle_level=max(1, int(raw.get("base_battle_level", 5))),
            level_step_per_stage=max(0, int(raw.get("level_step_per_stage", 1))),
            gold_per_victory=max(0, int(raw.get("gold_per_victory", 100))),
            exp_per_victory=max(0, int(raw.get("exp_per_victory", 12))),
            starter=starter,
            biomes=biomes,
        )

@lru_cache(maxsize=None)
def load_run_config(path: Optional[Path] = None) -> RunConfig:
    p = path or RUN_CONFIG_FILE
    cfg = RunConfig.from_dict(read_json(p))
    logger.debug("RunConfigLoaded", path=str(p), biomes=len(cfg.biomes))
    return cfg

__all__ = ["RunConfig","BiomePools","StarterConfig","load_run_config","STAGES_PER_BIOME"]
