import io
import json
import random
from rich.console import Console
from pokerun.battle.battler import Battler
from pokerun.battle.log import LogChannel
from pokerun.context import GameContext, _create_rng
from pokerun.run.state import RunState
from pokerun.system.settings import Settings, SettingsData
from pokerun.ui.console import ConsolePresenter, hp_bar


def quiet_presenter():
    buf = io.StringIO()
    return ConsolePresenter(Console(file=buf, width=80, color_system=None), text_speed=0), buf


def settings(tmp_path, **kw):
    return Settings(SettingsData(**kw), tmp_path / "settings.json")


def test_rng_seed_from_settings_and_env(monkeypatch):
    assert _create_rng(5).random() == random.Random(5).random()
    monkeypatch.setenv("POKERUN_RNG_SEED", "11")
    assert _create_rng(5).random() == random.Random(11).random()
    monkeypatch.setenv("POKERUN_RNG_SEED", "eleven")
    assert _create_rng(5).random() == random.Random(5).random()


def test_context_plays_bundled_run(tmp_path):
    presenter, buf = quiet_presenter()
    ctx = GameContext.create(settings(tmp_path, text_speed=0), rng=random.Random(3), presenter=presenter)
    assert ctx.run.start_new_run()
    assert ctx.run.state == RunState.IN_BATTLE
    state = ctx.auto_play(max_battles=2)
    assert state in (RunState.IN_SHOP_OR_REWARD, RunState.GAME_OVER)
    out = buf.getvalue()
    assert "Battle start!" in out
    assert "What will" in out


def test_seeded_runs_are_reproducible(tmp_path):
    def play():
        ctx = GameContext.create(settings(tmp_path, rng_seed=21))
        ctx.run.start_new_run()
        ctx.auto_play(max_battles=3)
        return ctx.log.history(), ctx.run.gold, ctx.run.stage_index

    assert play() == play()


def test_biome_transition_end_to_end(tmp_path):
    dex = tmp_path / "dex.json"
    dex.write_text(json.dumps({
        "1": {"name": "Champ", "hp": 80, "atk": 80, "def": 80, "sp_atk": 80, "sp_def": 80, "speed": 80},
        "2": {"name": "Minnow", "hp": 1, "atk": 1, "def": 1, "sp_atk": 1, "sp_def": 1, "speed": 1},
    }))
    cfg = tmp_path / "run.json"
    cfg.write_text(json.dumps({
        "start_gold": 0, "base_battle_level": 3, "level_step_per_stage": 1,
        "gold_per_victory": 10, "exp_per_victory": 12,
        "starter": {"id": 1, "level": 10, "skills": ["tackle"]},
        "biomes": [{"name": "Pond", "early": [{"enemy_id": 2, "skills": ["tackle"]}]}],
    }))
    ctx = GameContext.create(settings(tmp_path), rng=random.Random(8), pokedex_path=dex, run_config_path=cfg)
    states = []
    ctx.run.state_changed.subscribe(states.append)
    ctx.run.start_new_run()
    ctx.auto_play(max_battles=11)
    assert ctx.run.biome_index == 2
    assert RunState.BIOME_TRANSITION in states
    assert ctx.run.state == RunState.IN_SHOP_OR_REWARD
    assert ctx.run.stage_index == 12
    assert ctx.run.gold == 110
    assert ctx.run.player.level > 10


def test_unwire_stops_battles(tmp_path):
    ctx = GameContext.create(settings(tmp_path), rng=random.Random(1))
    ctx.unwire()
    ctx.run.start_new_run()
    assert ctx.run.state == RunState.IN_BATTLE
    assert ctx.battles.player is None


def test_settings_change_reaches_collaborators(tmp_path):
    presenter, _ = quiet_presenter()
    s = settings(tmp_path)
    ctx = GameContext.create(s, rng=random.Random(1), presenter=presenter)
    s.update(debug=True, text_speed=3)
    assert ctx.run.debug and ctx.rewards.debug
    assert presenter.text_speed == 3


def test_presenter_renders_and_pumps():
    presenter, buf = quiet_presenter()
    log = LogChannel()
    presenter.attach(log)
    log.push_text("A used Tackle!")
    log.push_text("B took 5 damage!")
    log.push_prompt("What will A do? (1-4)")
    assert presenter.pump() == 2
    assert not log.is_busy
    out = buf.getvalue()
    assert out.index("A used Tackle!") < out.index("B took 5 damage!") < out.index("What will A do?")
    presenter.detach()
    log.push_text("unseen")
    assert "unseen" not in buf.getvalue()
    assert presenter.pump() == 0


def test_presenter_battler_table():
    presenter, buf = quiet_presenter()
    p = Battler.create(None, 5, fallback_name="Hero")
    e = Battler.create(None, 3, fallback_name="Foe")
    presenter.show_battlers(p, e)
    presenter.show_skills(p)
    out = buf.getvalue()
    assert "Hero" in out and "Foe" in out and "20/20" in out
    assert "1) -" in out
    assert hp_bar(0, 10).plain.endswith("0/10")
