import json
import pytest
from pokerun.battle.types import BattleStat, EffectTarget, SkillCategory, StatusAilment
from pokerun.core.errors import DataLoadError, ValidationError
from pokerun.data.loader import (
    Pokedex, load_item_names, load_pokedex, load_skill_catalog, parse_pokedex, parse_skills, read_json,
)
from pokerun.run.config import load_run_config
from pokerun.run.items import ItemDatabase, ItemEffectType

# Bundled data invariants

def test_bundled_pokedex():
    dex = load_pokedex()
    assert len(dex) >= 10
    assert 4 in dex
    stats = dex.get(4)
    assert stats.name and stats.hp > 0


def test_bundled_skills_cover_encounters():
    catalog = load_skill_catalog()
    cfg = load_run_config()
    dex = load_pokedex()
    for sid in cfg.starter.skills:
        assert sid in catalog
    assert cfg.starter.id in dex
    for biome in cfg.biomes:
        for pool in (biome.early, biome.mid, biome.late):
            for entry in (pool.entries if pool else []):
                assert entry.enemy_id in dex
                for sid in entry.skill_ids:
                    assert sid in catalog, sid


def test_bundled_skill_shapes():
    catalog = load_skill_catalog()
    growl = catalog.get("growl")
    assert growl.category == SkillCategory.STATUS
    assert growl.stage_stat == BattleStat.ATTACK and growl.stage_delta == -1
    harden = catalog.get("harden")
    assert harden.stage_target == EffectTarget.SELF
    ember = catalog.get("ember")
    assert ember.ailment == StatusAilment.BURN and ember.ailment_chance == 10


def test_bundled_items_all_have_rules_but_one():
    db = ItemDatabase(load_item_names())
    without_rule = [i.id for i in db if i.effect == ItemEffectType.NONE]
    assert without_rule == ["Oran Berry"]


def test_loaders_are_cached():
    assert load_pokedex() is load_pokedex()
    assert load_run_config() is load_run_config()


def test_read_json_missing(tmp_path):
    with pytest.raises(DataLoadError) as ei:
        read_json(tmp_path / "nope.json")
    assert "file not found" in str(ei.value)


def test_read_json_invalid(tmp_path):
    p = tmp_path / "bad.json"
    p.write_text("{not json", encoding="utf-8")
    with pytest.raises(DataLoadError) as ei:
        read_json(p)
    assert ei.value.path == str(p)


def test_custom_pokedex_path(tmp_path):
    p = tmp_path / "dex.json"
    p.write_text(json.dumps({"151": {"name": "Mew", "hp": 100, "atk": 100, "def": 100,
                                     "sp_atk": 100, "sp_def": 100, "speed": 100}}), encoding="utf-8")
    dex = load_pokedex(p)
    assert dex.ids() == (151,)
    assert dex.name(151) == "Mew"


def test_parse_pokedex_validation():
    with pytest.raises(ValidationError):
        parse_pokedex({"abc": {}})
    with pytest.raises(ValidationError):
        parse_pokedex({"1": {"name": "Missing"}})


def test_unknown_statline(capsys):
    dex = Pokedex()
    assert dex.get(999) is None
    assert dex.name(7) == "#007"
    assert "StatlineMissingUsingDefaults" in capsys.readouterr().out


def test_parse_skills_clamps_and_validates():
    catalog = parse_skills({
        "wild": {"power": -5, "accuracy": 0, "ailment_chance": 300, "ailment": "POISON",
                 "stage": {"stat": "speed", "delta": -9, "chance": 50}},
    })
    s = catalog.get("wild")
    assert s.name == "Wild"
    assert s.power == 0 and s.accuracy == 1 and s.ailment_chance == 100
    assert s.ailment == StatusAilment.POISON
    assert s.stage_delta == -6 and s.stage_chance == 50
    with pytest.raises(ValidationError):
        parse_skills({"x": {"category": "psychic"}})
    with pytest.raises(ValidationError):
        parse_skills({"x": {"stage": {"stat": "luck", "delta": 1}}})


def test_missing_skill_warns(capsys):
    catalog = parse_skills({"tackle": {"power": 40}})
    assert catalog.resolve(["tackle", "nope", None]) == [catalog.get("tackle"), None, None]
    assert "SkillNotFound" in capsys.readouterr().out


def test_item_names_must_be_list(tmp_path):
    p = tmp_path / "items.json"
    p.write_text(json.dumps({"Potion": 1}), encoding="utf-8")
    with pytest.raises(DataLoadError):
        load_item_names(p)
