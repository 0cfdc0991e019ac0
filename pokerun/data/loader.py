"""Runtime loaders for the bundled JSON data.

Provides cached access to statlines (pokedex.json), skills (skills.json) and
item names (items.json). Battle code only sees the in-memory lookups built
here; a missing statline or skill is not an error at this layer.
"""
from __future__ import annotations
import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from pokerun.battle.battler import BaseStats
from pokerun.battle.skills import SkillCatalog, SkillDefinition
from pokerun.core.errors import DataLoadError, ValidationError
from pokerun.core.logging import logger
from pokerun.core.paths import ITEMS_FILE, POKEDEX_FILE, SKILLS_FILE

def read_json(path: Path) -> Any:
    try:
        return json.loads(Path(path).read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise DataLoadError(str(path), "file not found") from e
    except json.JSONDecodeError as e:
        raise DataLoadError(str(path), f"invalid JSON ({e.msg} at line {e.lineno})") from e

class Pokedex:
    """Statline lookup: species id -> BaseStats, or None when unknown."""

    def __init__(self, entries: Optional[Dict[int, BaseStats]] = None):
        self._entries: Dict[int, BaseStats] = dict(entries or {})

    def get(self, species_id: int) -> Optional[BaseStats]:
        stats = self._entries.get(int(species_id))
        if stats is None:
            logger.warn("StatlineMissingUsingDefaults", species=species_id)
        return stats

    def name(self, species_id: int) -> str:
        stats = self._entries.get(int(species_id))
        return stats.name if stats else f"#{species_id:03}"

    def ids(self) -> Iterable[int]:
        return tuple(sorted(self._entries))

    def __contains__(self, species_id: object) -> bool:
        return species_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

def _statline_from_dict(species_id: str, raw: Dict[str, Any]) -> BaseStats:
    try:
        return BaseStats(
            name=str(raw["name"]),
            hp=int(raw["hp"]),
            atk=int(raw["atk"]),
            def_=int(raw["def"]),
            sp_atk=int(raw["sp_atk"]),
            sp_def=int(raw["sp_def"]),
            speed=int(raw["speed"]),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise ValidationError(f"Statline '{species_id}': {e!r}") from e

def parse_pokedex(data: Dict[str, Any]) -> Pokedex:
    entries: Dict[int, BaseStats] = {}
    for sid, raw in data.items():
        if not str(sid).isdigit():
            raise ValidationError(f"Statline key must be numeric: {sid!r}")
        entries[int(sid)] = _statline_from_dict(sid, raw)
    return Pokedex(entries)

def parse_skills(data: Dict[str, Any]) -> SkillCatalog:
    return SkillCatalog(SkillDefinition.from_dict(sid, raw) for sid, raw in data.items())

@lru_cache(maxsize=None)
def load_pokedex(path: Optional[Path] = None) -> Pokedex:
    p = path or POKEDEX_FILE
    dex = parse_pokedex(read_json(p))
    logger.debug("PokedexLoaded", path=str(p), count=len(dex))
    return dex

@lru_cache(maxsize=None)
def load_skill_catalog(path: Optional[Path] = None) -> SkillCatalog:
    p = path or SKILLS_FILE
    catalog = parse_skills(read_json(p))
    logger.debug("SkillCatalogLoaded", path=str(p), count=len(catalog))
    return catalog

@lru_cache(maxsize=None)
def load_item_names(path: Optional[Path] = None) -> List[str]:
    p = path or ITEMS_FILE
    data = read_json(p)
    if not isinstance(data, list):
        raise DataLoadError(str(p), "expected a list of item names")
    return [str(n) for n in data]

__all__ = [
    "Pokedex","read_json","parse_pokedex","parse_skills",
    "load_pokedex","load_skill_catalog","load_item_names",
]
