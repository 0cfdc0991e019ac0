import random
import pytest
from pokerun.battle.battler import BaseStats
from pokerun.data.loader import Pokedex
from pokerun.run.config import BiomePools, RunConfig, StarterConfig
from pokerun.run.encounters import EncounterEntry, EncounterPool
from pokerun.run.items import Item, ItemDatabase, ItemEffectType, ItemExecutor, ItemRuleTable
from pokerun.run.manager import RunManager
from pokerun.run.shop import Shop
from pokerun.run.state import RunState

NAMES = ["Good Potion", "Super Potion", "Gold Orb", "Golden Egg", "Lucky Egg",
         "Good Experience Charm", "Reroll Ticket", "Oran Berry"]


@pytest.mark.parametrize("name,rule", [
    ("Good Potion", (ItemEffectType.HEAL_HP_PERCENT, 25, 250)),
    ("Gold Orb", (ItemEffectType.GAIN_GOLD, 100, 300)),
    ("Golden Egg", (ItemEffectType.EXP_BOOST_PERCENT, 20, 400)),
    ("Good Experience Charm", (ItemEffectType.EXP_BOOST_PERCENT, 10, 200)),
    ("Reroll Ticket", (ItemEffectType.REROLL_SHOP, 1, 150)),
    ("Super Potion", (ItemEffectType.HEAL_HP_PERCENT, 20, 200)),
    ("hyper potion", (ItemEffectType.HEAL_HP_PERCENT, 20, 200)),
    ("Lucky Egg", (ItemEffectType.EXP_BOOST_PERCENT, 15, 300)),
])
def test_rule_table(name, rule):
    assert ItemRuleTable.try_get(name) == rule


def test_rule_table_unknown():
    assert ItemRuleTable.try_get("Oran Berry") is None
    assert ItemRuleTable.try_get("") is None
    assert ItemRuleTable.try_get(None) is None


def test_database_build(capsys):
    db = ItemDatabase(["Gold Orb", "Oran Berry", "Gold Orb", ""])
    assert len(db) == 2
    assert db.get("Gold Orb").price == 300
    berry = db.get("Oran Berry")
    assert berry.effect == ItemEffectType.NONE and berry.price == 0
    assert db.get("nope") is None and db.get(None) is None
    out = capsys.readouterr().out
    assert "ItemDuplicateId" in out and "ItemMissingRule" in out


def test_database_random_pick():
    db = ItemDatabase(NAMES)
    rng = random.Random(4)
    for _ in range(20):
        assert db.get_random(rng).id in db
    assert ItemDatabase().get_random(rng) is None


def make_run(gold=0):
    cfg = RunConfig(
        start_gold=gold,
        starter=StarterConfig(id=1, level=5, skills=("tackle",)),
        biomes=[BiomePools("Route", early=EncounterPool([EncounterEntry(1, 0, ("tackle",))]))],
    )
    dex = Pokedex({1: BaseStats("Bulbasaur", 20, 6, 6, 6, 6, 6)})  # max hp 30 at Lv5
    return RunManager(cfg, random.Random(2), pokedex=dex, items=ItemDatabase(NAMES))


def test_executor_effects():
    run = make_run()
    run.start_new_run()
    ex = run.item_executor
    assert ex.try_use(run.items.get("Gold Orb"), run)
    assert run.gold == 100
    assert ex.try_use(run.items.get("Golden Egg"), run)
    assert ex.try_use(run.items.get("Good Experience Charm"), run)
    assert run.player.exp_boost_percent == 30
    assert run.player.boosted_exp(10) == 13
    run.player.hp = 10
    assert ex.try_use(run.items.get("Good Potion"), run)  # 25% of 30 -> 7
    assert run.player.hp == 17
    assert ex.try_use(Item("Fresh Water", "Fresh Water", ItemEffectType.HEAL_HP_FLAT, 50), run)
    assert run.player.hp is None


def test_executor_reroll_signal_and_rejections():
    run = make_run()
    ex = ItemExecutor()
    fired = []
    ex.reroll_requested.subscribe(lambda: fired.append(True))
    assert not ex.try_use(run.items.get("Reroll Ticket"), run)  # no run started
    run.start_new_run()
    assert ex.try_use(run.items.get("Reroll Ticket"), run)
    assert fired == [True]
    assert not ex.try_use(run.items.get("Oran Berry"), run)
    assert not ex.try_use(None, run)


def shop_for(run):
    shop = Shop(run)
    shop.enable()
    run.start_new_run()
    run.report_battle_ended(True)
    assert run.state == RunState.IN_SHOP_OR_REWARD
    return shop


def test_offers_rolled_on_entering_shop():
    run = make_run()
    shop = shop_for(run)
    assert len(shop.offers) == 3
    assert len({o.id for o in shop.offers}) == 3
    run.commit_shop_and_continue()
    assert shop.offers == []


def test_buy_spends_gold_and_applies():
    run = make_run(gold=1000)
    shop = shop_for(run)
    shop.offers = [run.items.get("Gold Orb")]
    assert shop.buy("Gold Orb")
    assert run.gold == 1000 - 300 + 100
    assert shop.offers == []


def test_buy_rejections(capsys):
    run = make_run(gold=100)
    shop = Shop(run)
    shop.enable()
    run.start_new_run()
    assert not shop.buy("Gold Orb")  # in battle
    run.report_battle_ended(True)
    shop.offers = [run.items.get("Gold Orb")]
    assert not shop.buy("Golden Egg")
    assert not shop.buy("Gold Orb")  # 300 > 100
    assert run.gold == 100
    out = capsys.readouterr().out
    assert "not_in_shop_or_reward" in out and "not_offered" in out and "insufficient_gold" in out


def test_buy_reroll_ticket_refreshes_offers():
    run = make_run(gold=500)
    shop = shop_for(run)
    ticket = run.items.get("Reroll Ticket")
    shop.offers = [ticket]
    assert shop.buy("Reroll Ticket")
    assert run.gold == 350
    assert len(shop.offers) == 3


def test_item_without_effect_is_refunded():
    run = make_run(gold=10)
    shop = shop_for(run)
    shop.offers = [Item("Odd Stone", "Odd Stone", ItemEffectType.NONE, 0, 5)]
    assert not shop.buy("Odd Stone")
    assert run.gold == 10


def test_disable_stops_listening():
    run = make_run()
    shop = Shop(run)
    shop.enable()
    shop.disable()
    run.start_new_run()
    run.report_battle_ended(True)
    assert shop.offers == []
