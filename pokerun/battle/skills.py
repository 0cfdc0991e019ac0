"""Immutable skill definitions and the in-memory catalog keyed by id."""
from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Iterator, Mapping, Optional

from pokerun.core.errors import ValidationError
from pokerun.core.logging import logger
from .types import (
    BattleStat, EffectTarget, SkillCategory, StatusAilment,
    clamp_percent, clamp_stage,
)

@dataclass(frozen=True)
class SkillDefinition:
    id: str
    name: str
    category: SkillCategory = SkillCategory.PHYSICAL
    power: int = 40
    accuracy: int = 100
    pp: int = 20  # informational; not consumed in battle
    ailment: StatusAilment = StatusAilment.NONE
    ailment_chance: int = 0
    stage_stat: BattleStat = BattleStat.ATTACK
    stage_delta: int = 0
    stage_chance: int = 0
    stage_target: EffectTarget = EffectTarget.FOE

    @property
    def has_stage_effect(self) -> bool:
        return self.stage_delta != 0

    @property
    def has_ailment_effect(self) -> bool:
        return self.ailment != StatusAilment.NONE

    @classmethod
    def from_dict(cls, skill_id: str, raw: Mapping[str, Any]) -> "SkillDefinition":
        """Build a definition from a JSON record, clamping numeric fields.

        Unknown enum names raise ValidationError.
        """
        stage = raw.get("stage") or {}
        try:
            category = SkillCategory(str(raw.get("category", "physical")).lower())
            ailment = StatusAilment(str(raw.get("ailment") or "none").lower())
            stage_stat = BattleStat(str(stage.get("stat", "attack")).lower())
            stage_target = EffectTarget(str(stage.get("target", "foe")).lower())
        except ValueError as e:
            raise ValidationError(f"Skill '{skill_id}': {e}") from e
        return cls(
            id=skill_id,
            name=str(raw.get("name") or skill_id.replace("_", " ").title()),
            category=category,
            power=max(0, int(raw.get("power", 0) or 0)),
            accuracy=clamp_percent(raw.get("accuracy", 100), lo=1),
            pp=max(0, int(raw.get("pp", 20) or 0)),
            ailment=ailment,
            ailment_chance=clamp_percent(raw.get("ailment_chance", 0) or 0),
            stage_stat=stage_stat,
            stage_delta=clamp_stage(stage.get("delta", 0) or 0),
            stage_chance=clamp_percent(stage.get("chance", 0) or 0),
            stage_target=stage_target,
        )

class SkillCatalog:
    """Read-only lookup of SkillDefinition by id."""

    def __init__(self, skills: Iterable[SkillDefinition] = ()):
        self._by_id: Dict[str, SkillDefinition] = {}
        for s in skills:
            if s.id in self._by_id:
                logger.warn("SkillCatalogDuplicateId", id=s.id)
                continue
            self._by_id[s.id] = s

    def get(self, skill_id: Optional[str]) -> Optional[SkillDefinition]:
        if not skill_id:
            return None
        skill = self._by_id.get(skill_id)
        if skill is None:
            logger.warn("SkillNotFound", id=skill_id)
        return skill

    def resolve(self, skill_ids: Iterable[Optional[str]]) -> list[Optional[SkillDefinition]]:
        return [self.get(sid) for sid in skill_ids]

    def __contains__(self, skill_id: object) -> bool:
        return skill_id in self._by_id

    def __iter__(self) -> Iterator[SkillDefinition]:
        return iter(self._by_id.values())

    def __len__(self) -> int:
        return len(self._by_id)

__all__ = ["SkillDefinition","SkillCatalog"]
