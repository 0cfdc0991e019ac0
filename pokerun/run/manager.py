"""Run progression: battle -> reward/shop -> next battle, biome every 10 stages.

The controller serializes its own transitions by rejecting calls made from the
wrong state; a rejected call is logged and changes nothing.
"""
from __future__ import annotations
from typing import TYPE_CHECKING, Optional
import random

from pokerun.battle.battler import max_hp_for
from pokerun.core.logging import logger
from pokerun.events.signal import Signal
from .config import RunConfig, STAGES_PER_BIOME
from .encounters import Encounter, generate
from .items import ItemDatabase, ItemExecutor
from .state import PlayerProgress, RunState

if TYPE_CHECKING:
    from pokerun.data.loader import Pokedex

def is_biome_transition_stage(cleared_stage: int) -> bool:
    if cleared_stage <= 0:
        return False
    return cleared_stage % STAGES_PER_BIOME == 0

class RunManager:
    def __init__(self, config: Optional[RunConfig], rng: Optional[random.Random] = None, *,
                 pokedex: Optional["Pokedex"] = None, items: Optional[ItemDatabase] = None,
                 item_executor: Optional[ItemExecutor] = None, debug: bool = False):
        self.config = config
        self.rng = rng or random.Random()
        self.pokedex = pokedex
        self.items = items or ItemDatabase()
        self.item_executor = item_executor or ItemExecutor()
        self.debug = debug
        self.state = RunState.NONE
        self.biome_index = 1
        self.stage_index = 0
        self.gold = 0
        self.player: Optional[PlayerProgress] = None
        self.current_encounter: Optional[Encounter] = None
        self._reward_used = False
        # state_changed(state), encounter_prepared(encounter)
        self.state_changed: Signal = Signal("state_changed")
        self.encounter_prepared: Signal = Signal("encounter_prepared")

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    @property
    def reward_locked(self) -> bool:
        return self._reward_used

    @property
    def stage_in_biome(self) -> int:
        return ((max(1, self.stage_index) - 1) % STAGES_PER_BIOME) + 1

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------
    def start_new_run(self, starter_id: Optional[int] = None) -> bool:
        if self.config is None:
            logger.error("RunConfigMissing", op="start_new_run")
            return False
        starter = self.config.starter
        self.biome_index = 1
        self.stage_index = 1
        self.gold = self.config.start_gold
        self._reward_used = False
        self.current_encounter = None
        self.player = PlayerProgress(
            species_id=int(starter_id) if starter_id is not None else starter.id,
            level=starter.level,
            skill_ids=list(starter.skills),
        )
        logger.info("RunStarted", starter=self.player.species_id, gold=self.gold)
        ok = self._prepare_next_battle()
        self._tag("StartNewRun")
        return ok

    def prepare_next_battle(self) -> bool:
        """Retry battle preparation after a transition whose own attempt failed.

        Allowed only from BIOME_TRANSITION, or from IN_SHOP_OR_REWARD once the
        reward has been committed; every other state rejects the call.
        """
        retry_after_commit = self.state == RunState.IN_SHOP_OR_REWARD and self._reward_used
        if self.state != RunState.BIOME_TRANSITION and not retry_after_commit:
            logger.warn("PrepareNextBattleIgnored", state=self.state.value)
            return False
        return self._prepare_next_battle()

    def _prepare_next_battle(self) -> bool:
        if self.config is None:
            logger.error("RunConfigMissing", op="prepare_next_battle")
            return False
        encounter = generate(self.config, self.biome_index, self.stage_index, self.rng)
        if encounter is None:
            logger.error("EncounterPoolExhausted", biome=self.biome_index, stage=self.stage_index)
            return False
        self.current_encounter = encounter
        self._set_state(RunState.IN_BATTLE)
        logger.debug("EncounterPrepared", enemy=encounter.enemy_id, level=encounter.level,
                     biome=self.biome_index, stage=self.stage_index)
        self.encounter_prepared.emit(encounter)
        self._tag("PrepareNextBattle")
        return True

    def report_battle_ended(self, player_won: bool) -> bool:
        if self.state != RunState.IN_BATTLE:
            logger.warn("ReportBattleEndedIgnored", state=self.state.value)
            return False
        if not player_won:
            self._set_state(RunState.GAME_OVER)
            logger.info("RunOver", biome=self.biome_index, stage=self.stage_index, gold=self.gold)
            self._tag("GameOver")
            return True

        self.stage_index += 1
        if is_biome_transition_stage(self.stage_index - 1):
            self.biome_index += 1
            self._set_state(RunState.BIOME_TRANSITION)
            self._tag("BiomeTransition")
            self._prepare_next_battle()
            return True

        self._set_state(RunState.IN_SHOP_OR_REWARD)
        self._tag("ToShopOrReward")
        return True

    def commit_reward_and_continue(self, item_id: Optional[str] = None) -> bool:
        if not self._can_commit("commit_reward"):
            return False
        item = self.items.get(item_id)
        if item_id and item is None:
            logger.warn("RewardItemUnknown", item=item_id)
            return False
        self._reward_used = True
        if item is not None:
            self.item_executor.try_use(item, self)
        self._tag("CommitRewardAndContinue")
        return self._prepare_next_battle()

    def commit_shop_and_continue(self) -> bool:
        if not self._can_commit("commit_shop"):
            return False
        self._reward_used = True
        self._tag("CommitShopAndContinue")
        return self._prepare_next_battle()

    def _can_commit(self, op: str) -> bool:
        if self.state != RunState.IN_SHOP_OR_REWARD:
            logger.warn("CommitIgnored", op=op, reason="not_in_shop_or_reward", state=self.state.value)
            return False
        if self._reward_used:
            logger.warn("CommitIgnored", op=op, reason="reward_already_used")
            return False
        return True

    # ------------------------------------------------------------------
    # Economy / player
    # ------------------------------------------------------------------
    def add_gold(self, amount: int):
        if amount <= 0:
            return
        self.gold += amount
        self._tag("AddGold")

    def try_spend_gold(self, amount: int) -> bool:
        if amount <= 0:
            return True
        if self.gold < amount:
            return False
        self.gold -= amount
        self._tag("SpendGold")
        return True

    def player_max_hp(self) -> int:
        if self.player is None:
            return 0
        stats = self.pokedex.get(self.player.species_id) if self.pokedex is not None else None
        return max_hp_for(stats, self.player.level)

    def heal_player(self, amount: int) -> bool:
        """Restore carried HP; None already means full. Returns False without a player."""
        if self.player is None:
            return False
        if amount <= 0 or self.player.hp is None:
            return True
        max_hp = self.player_max_hp()
        healed = min(max_hp, self.player.hp + amount)
        # Back at full: the next battle starts fresh
        self.player.hp = None if healed >= max_hp else healed
        return True

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _set_state(self, nxt: RunState):
        if self.state == nxt:
            return
        self.state = nxt
        if nxt == RunState.IN_SHOP_OR_REWARD:
            self._reward_used = False
        self.state_changed.emit(nxt)
        self._tag("StateChanged")

    def _tag(self, tag: str):
        if not self.debug:
            return
        logger.debug(f"[Run]{tag}", state=self.state.value, biome=self.biome_index,
                     stage=self.stage_index, gold=self.gold)

__all__ = ["RunManager","is_biome_transition_stage"]
