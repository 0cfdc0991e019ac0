"""Application root: builds and wires every collaborator once.

``GameContext.create()`` loads settings and bundled data, then connects:

  RunManager.encounter_prepared -> BattleManager.start_battle
  LogChannel.idle               -> TurnSystem.resume (via BattleManager)
  BattleManager.battle_ended    -> RewardResolver -> RunManager.report_battle_ended
  RunManager.state_changed      -> Shop offers
"""
from __future__ import annotations
import os
from pathlib import Path
from typing import Callable, Optional
import random

from pokerun.battle.log import LogChannel
from pokerun.battle.manager import BattleManager
from pokerun.battle.skills import SkillCatalog
from pokerun.core.logging import logger
from pokerun.data.loader import Pokedex, load_item_names, load_pokedex, load_skill_catalog
from pokerun.run.config import RunConfig, load_run_config
from pokerun.run.encounters import Encounter
from pokerun.run.items import ItemDatabase, ItemExecutor
from pokerun.run.manager import RunManager
from pokerun.run.rewards import RewardResolver
from pokerun.run.shop import Shop
from pokerun.run.state import RunState
from pokerun.system.settings import Settings
from pokerun.ui.console import ConsolePresenter

SEED_ENV = "POKERUN_RNG_SEED"

def _create_rng(seed: Optional[int] = None) -> random.Random:
    env = os.getenv(SEED_ENV)
    if env:
        try:
            seed = int(env)
        except ValueError:
            logger.warn("InvalidSeedEnv", value=env)
    if seed is not None:
        logger.debug("RngSeeded", seed=seed)
    return random.Random(seed)

class GameContext:
    def __init__(self, settings: Settings, pokedex: Pokedex, catalog: SkillCatalog,
                 config: Optional[RunConfig], items: ItemDatabase, *,
                 rng: Optional[random.Random] = None, presenter: Optional[ConsolePresenter] = None):
        self.settings = settings
        self.rng = rng or _create_rng(settings.data.rng_seed)
        debug = settings.data.debug
        self.pokedex = pokedex
        self.catalog = catalog
        self.log = LogChannel()
        self.battles = BattleManager(pokedex, catalog, log=self.log, rng=self.rng)
        self.item_executor = ItemExecutor()
        self.run = RunManager(config, self.rng, pokedex=pokedex, items=items,
                              item_executor=self.item_executor, debug=debug)
        self.shop = Shop(self.run)
        self.rewards = RewardResolver(self.battles, self.run, debug=debug)
        self.presenter = presenter
        self._wired = False
        settings.on_change(self._on_settings_changed)

    @classmethod
    def create(cls, settings: Optional[Settings] = None, *, rng: Optional[random.Random] = None,
               presenter: Optional[ConsolePresenter] = None,
               pokedex_path: Optional[Path] = None, skills_path: Optional[Path] = None,
               items_path: Optional[Path] = None, run_config_path: Optional[Path] = None) -> "GameContext":
        settings = settings or Settings.load()
        settings.apply_log_level()
        ctx = cls(
            settings,
            load_pokedex(pokedex_path),
            load_skill_catalog(skills_path),
            load_run_config(run_config_path),
            ItemDatabase(load_item_names(items_path)),
            rng=rng,
            presenter=presenter,
        )
        ctx.wire()
        return ctx

    def wire(self):
        if self._wired:
            return
        self.battles.enable()
        self.rewards.enable()
        self.shop.enable()
        self.run.encounter_prepared.subscribe(self._on_encounter_prepared)
        if self.presenter is not None:
            self.presenter.set_text_speed(self.settings.data.text_speed)
            self.presenter.attach(self.log)
        self._wired = True

    def unwire(self):
        if not self._wired:
            return
        self.run.encounter_prepared.unsubscribe(self._on_encounter_prepared)
        self.shop.disable()
        self.rewards.disable()
        self.battles.disable()
        if self.presenter is not None:
            self.presenter.detach()
        self._wired = False

    def _on_encounter_prepared(self, encounter: Encounter):
        self.battles.start_battle(encounter, self.run.player)

    def _on_settings_changed(self, data):
        self.run.debug = data.debug
        self.rewards.debug = data.debug
        if self.presenter is not None:
            self.presenter.set_text_speed(data.text_speed)

    # ------------------------------------------------------------------
    # Headless driving
    # ------------------------------------------------------------------
    def acknowledge_all(self, limit: int = 1000) -> int:
        if self.presenter is not None and self.presenter.log is self.log:
            return self.presenter.pump(limit)
        sent = 0
        while self.log.is_busy and sent < limit:
            self.log.acknowledge()
            sent += 1
        return sent

    def auto_play(self, max_battles: int = 10, choose_slot: Optional[Callable[[BattleManager], int]] = None,
                  max_turns: int = 200) -> RunState:
        """Play battles with a fixed policy until game over or ``max_battles`` are cleared.

        The default policy always picks slot 0. Shop/reward screens are skipped.
        """
        choose = choose_slot or (lambda _bm: 0)
        cleared = 0
        turns = 0
        while cleared < max_battles and turns < max_turns:
            self.acknowledge_all()
            state = self.run.state
            if state == RunState.GAME_OVER:
                break
            if state == RunState.IN_SHOP_OR_REWARD:
                cleared += 1
                if cleared >= max_battles or not self.run.commit_shop_and_continue():
                    break
                continue
            if self.battles.turns.is_waiting_for_player_choice:
                stage_before = self.run.stage_index
                self.battles.select_skill_slot(choose(self.battles))
                turns += 1
                self.acknowledge_all()
                if self.run.state == RunState.IN_BATTLE and self.run.stage_index != stage_before:
                    # Biome transition went straight into the next battle
                    cleared += 1
                continue
            break
        return self.run.state

__all__ = ["GameContext","SEED_ENV"]
