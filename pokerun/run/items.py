"""Items: name-driven rule table, in-memory database and effect executor.

Items are declared by display name only (``items.json``); the rule table maps
a name to its effect, value and price. Exact names win over keyword rules.
"""
from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Dict, Iterable, Iterator, List, Optional, Tuple
import random

from pokerun.core.logging import logger
from pokerun.events.signal import Signal

if TYPE_CHECKING:
    from .manager import RunManager

class ItemEffectType(str, Enum):
    NONE = "none"
    HEAL_HP_PERCENT = "heal_hp_percent"
    HEAL_HP_FLAT = "heal_hp_flat"
    GAIN_GOLD = "gain_gold"
    EXP_BOOST_PERCENT = "exp_boost_percent"
    REROLL_SHOP = "reroll_shop"

# name -> (effect, value, price)
Rule = Tuple[ItemEffectType, int, int]

class ItemRuleTable:
    EXACT: Dict[str, Rule] = {
        "Good Potion": (ItemEffectType.HEAL_HP_PERCENT, 25, 250),
        "Gold Orb": (ItemEffectType.GAIN_GOLD, 100, 300),
        "Golden Egg": (ItemEffectType.EXP_BOOST_PERCENT, 20, 400),
        "Good Experience Charm": (ItemEffectType.EXP_BOOST_PERCENT, 10, 200),
        "Reroll Ticket": (ItemEffectType.REROLL_SHOP, 1, 150),
    }
    # Checked in order, case-insensitive substring match
    KEYWORDS: List[Tuple[str, Rule]] = [
        ("potion", (ItemEffectType.HEAL_HP_PERCENT, 20, 200)),
        ("egg", (ItemEffectType.EXP_BOOST_PERCENT, 15, 300)),
    ]

    @classmethod
    def try_get(cls, name: Optional[str]) -> Optional[Rule]:
        if not name:
            return None
        rule = cls.EXACT.get(name)
        if rule is not None:
            return rule
        lowered = name.lower()
        for token, kw_rule in cls.KEYWORDS:
            if token in lowered:
                return kw_rule
        return None

@dataclass(frozen=True)
class Item:
    id: str
    name: str
    effect: ItemEffectType = ItemEffectType.NONE
    value: int = 0
    price: int = 0

class ItemDatabase:
    def __init__(self, names: Iterable[str] = ()):
        self._by_id: Dict[str, Item] = {}
        for name in names:
            if not name:
                continue
            if name in self._by_id:
                logger.error("ItemDuplicateId", id=name)
                continue
            rule = ItemRuleTable.try_get(name)
            if rule is None:
                logger.warn("ItemMissingRule", name=name)
                self._by_id[name] = Item(id=name, name=name)
                continue
            effect, value, price = rule
            self._by_id[name] = Item(id=name, name=name, effect=effect, value=value, price=price)
        logger.debug("ItemDatabaseBuilt", count=len(self._by_id))

    def get(self, item_id: Optional[str]) -> Optional[Item]:
        if not item_id:
            return None
        return self._by_id.get(item_id)

    def get_random(self, rng: random.Random) -> Optional[Item]:
        if not self._by_id:
            return None
        items = list(self._by_id.values())
        return items[rng.randrange(len(items))]

    def ids(self) -> List[str]:
        return list(self._by_id)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._by_id

    def __iter__(self) -> Iterator[Item]:
        return iter(self._by_id.values())

    def __len__(self) -> int:
        return len(self._by_id)

class ItemExecutor:
    """Applies an item's effect to the current run."""

    def __init__(self):
        # reroll_requested(): a reroll item was used; the shop refreshes its offers
        self.reroll_requested: Signal = Signal("reroll_requested")

    def try_use(self, item: Optional[Item], run: Optional["RunManager"]) -> bool:
        if item is None or run is None:
            logger.warn("ItemUseInvalidArgs", item=item is not None, run=run is not None)
            return False
        if run.player is None:
            logger.warn("ItemUseNoPlayer", item=item.id)
            return False
        logger.debug("ItemUse", name=item.name, effect=item.effect.value, value=item.value)

        effect = item.effect
        if effect == ItemEffectType.HEAL_HP_PERCENT:
            max_hp = run.player_max_hp()
            return run.heal_player(max(1, max_hp * item.value // 100))
        if effect == ItemEffectType.HEAL_HP_FLAT:
            return run.heal_player(item.value)
        if effect == ItemEffectType.GAIN_GOLD:
            run.add_gold(item.value)
            return True
        if effect == ItemEffectType.EXP_BOOST_PERCENT:
            run.player.exp_boost_percent += max(0, item.value)
            return True
        if effect == ItemEffectType.REROLL_SHOP:
            self.reroll_requested.emit()
            return True

        logger.warn("ItemHasNoEffect", name=item.name)
        return False

__all__ = ["ItemEffectType","ItemRuleTable","Item","ItemDatabase","ItemExecutor"]
