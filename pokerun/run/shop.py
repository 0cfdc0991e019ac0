"""Between-battle shop: a rolled set of offers bought with run gold."""
from __future__ import annotations
from typing import List, Optional
import random

from pokerun.core.logging import logger
from .items import Item, ItemDatabase, ItemExecutor
from .manager import RunManager
from .state import RunState

DEFAULT_OFFER_COUNT = 3

class Shop:
    def __init__(self, run: RunManager, items: Optional[ItemDatabase] = None,
                 executor: Optional[ItemExecutor] = None, rng: Optional[random.Random] = None,
                 offer_count: int = DEFAULT_OFFER_COUNT):
        self.run = run
        self.items = items or run.items
        self.executor = executor or run.item_executor
        self.rng = rng or run.rng
        self.offer_count = max(1, offer_count)
        self.offers: List[Item] = []
        self._enabled = False

    def enable(self):
        if self._enabled:
            return
        self.run.state_changed.subscribe(self._on_state_changed)
        self.executor.reroll_requested.subscribe(self.reroll)
        self._enabled = True

    def disable(self):
        if not self._enabled:
            return
        self.run.state_changed.unsubscribe(self._on_state_changed)
        self.executor.reroll_requested.unsubscribe(self.reroll)
        self._enabled = False

    def _on_state_changed(self, state: RunState):
        if state == RunState.IN_SHOP_OR_REWARD:
            self.reroll()
        else:
            self.offers = []

    def reroll(self):
        pool = list(self.items)
        if not pool:
            self.offers = []
            return
        if len(pool) <= self.offer_count:
            self.offers = pool
        else:
            self.offers = self.rng.sample(pool, self.offer_count)
        logger.debug("ShopRerolled", offers=",".join(i.id for i in self.offers))

    def find_offer(self, item_id: str) -> Optional[Item]:
        for item in self.offers:
            if item.id == item_id:
                return item
        return None

    def buy(self, item_id: str) -> bool:
        if self.run.state != RunState.IN_SHOP_OR_REWARD:
            logger.warn("ShopBuyRejected", reason="not_in_shop_or_reward", state=self.run.state.value)
            return False
        item = self.find_offer(item_id)
        if item is None:
            logger.warn("ShopBuyRejected", reason="not_offered", item=item_id)
            return False
        if not self.run.try_spend_gold(item.price):
            logger.warn("ShopBuyRejected", reason="insufficient_gold", item=item_id,
                        price=item.price, gold=self.run.gold)
            return False
        self.offers.remove(item)
        if not self.executor.try_use(item, self.run):
            self.run.add_gold(item.price)
            logger.warn("ShopBuyRefunded", item=item_id)
            return False
        logger.info("ShopBought", item=item_id, price=item.price, gold=self.run.gold)
        return True

__all__ = ["Shop","DEFAULT_OFFER_COUNT"]
