from pokerun.battle.battler import BaseStats
from pokerun.battle.manager import BattleManager
from pokerun.battle.skills import SkillCatalog, SkillDefinition
from pokerun.data.loader import Pokedex
from pokerun.run.config import BiomePools, RunConfig, StarterConfig
from pokerun.run.encounters import EncounterEntry, EncounterPool
from pokerun.run.manager import RunManager
from pokerun.run.rewards import RewardResolver
from pokerun.run.state import RunState

STRONG, WEAK, FAST = 1, 2, 3
DEX = Pokedex({
    STRONG: BaseStats("Strong", 50, 50, 50, 50, 50, 50),
    WEAK: BaseStats("Weak", 1, 1, 1, 1, 1, 1),
    FAST: BaseStats("Fast", 1, 1, 1, 1, 1, 100),
})
CATALOG = SkillCatalog([SkillDefinition("tackle", "Tackle", power=40)])


class World:
    def __init__(self, rng, player=STRONG, enemy=WEAK, exp=12, gold=100):
        cfg = RunConfig(
            exp_per_victory=exp, gold_per_victory=gold,
            starter=StarterConfig(id=player, level=5, skills=("tackle",)),
            biomes=[BiomePools("Route", early=EncounterPool([EncounterEntry(enemy, 0, ("tackle",))]))],
        )
        self.battles = BattleManager(DEX, CATALOG, rng=rng)
        self.battles.enable()
        self.run = RunManager(cfg, rng, pokedex=DEX)
        self.run.encounter_prepared.subscribe(lambda e: self.battles.start_battle(e, self.run.player))
        self.rewards = RewardResolver(self.battles, self.run)
        self.rewards.enable()
        self.log = self.battles.log
        self.ended = []
        self.battles.battle_ended.subscribe(lambda won, p, e: self.ended.append((won, p, e)))

    def drain(self):
        while self.log.is_busy:
            self.log.acknowledge()

    def fight(self):
        self.drain()
        assert self.battles.select_skill_slot(0)
        self.drain()


def test_victory_settles_exp_and_gold(fixed_rng):
    w = World(fixed_rng)
    w.run.start_new_run()
    w.fight()
    assert w.run.state == RunState.IN_SHOP_OR_REWARD
    assert w.run.gold == 100
    assert (w.run.player.level, w.run.player.exp) == (5, 12)
    hist = w.log.history()
    assert "Strong gained 12 EXP. Points!" in hist
    assert "You got 100 gold for winning!" in hist


def test_report_waits_for_log_idle(fixed_rng):
    w = World(fixed_rng)
    w.run.start_new_run()
    w.drain()
    w.battles.select_skill_slot(0)
    while w.log.is_busy and not w.ended:
        w.log.acknowledge()
    assert w.ended
    assert w.rewards.is_resolving
    assert w.run.state == RunState.IN_BATTLE
    w.drain()
    assert not w.rewards.is_resolving
    assert w.run.state == RunState.IN_SHOP_OR_REWARD


def test_battle_ended_carries_snapshots(fixed_rng):
    w = World(fixed_rng)
    w.run.start_new_run()
    w.fight()
    won, player, enemy = w.ended[0]
    assert won is True
    assert player.name == "Strong" and enemy.name == "Weak"
    assert enemy.is_fainted and not player.is_fainted


def test_exp_boost_and_level_up(fixed_rng):
    w = World(fixed_rng, exp=100)
    w.run.start_new_run()
    w.run.player.exp_boost_percent = 10
    w.fight()
    # 110 exp from Lv5: 35 -> Lv6, 40 -> Lv7, 35 left
    assert (w.run.player.level, w.run.player.exp) == (7, 35)
    assert "Strong grew to Lv. 7!" in w.log.history()
    assert w.run.player.hp is None


def test_carried_hp_written_back_and_reused(fixed_rng):
    w = World(fixed_rng, enemy=FAST)
    w.run.start_new_run()
    w.fight()
    # Fast hits first for 2 before fainting
    assert w.run.player.hp == 58
    w.run.commit_shop_and_continue()
    assert w.battles.player.hp == 58


def test_defeat_ends_run(fixed_rng):
    w = World(fixed_rng, player=WEAK, enemy=STRONG)
    w.run.start_new_run()
    w.fight()
    assert w.run.state == RunState.GAME_OVER
    assert w.run.gold == 0
    assert w.log.history()[-1] == "Defeat..."


def test_disabled_resolver_does_not_report(fixed_rng):
    w = World(fixed_rng)
    w.rewards.disable()
    w.run.start_new_run()
    w.fight()
    assert w.ended
    assert w.run.state == RunState.IN_BATTLE
