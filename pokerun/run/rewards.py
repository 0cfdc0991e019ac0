"""Post-battle settlement between the battle harness and the run controller.

On victory the player's battler earns exp (boosted by the run's exp buff)
and the run earns gold; level, exp and remaining HP are written back to the
run's PlayerProgress. The outcome is reported to the run only after the log
channel has gone idle, so the settlement narration is read first.
"""
from __future__ import annotations
from typing import Optional

from pokerun.battle import texts
from pokerun.battle.battler import BattlerSnapshot
from pokerun.battle.manager import BattleManager
from pokerun.core.logging import logger
from .manager import RunManager

class RewardResolver:
    def __init__(self, battles: BattleManager, run: RunManager, *, debug: bool = False):
        self.battles = battles
        self.run = run
        self.debug = debug
        self._pending: Optional[bool] = None
        self._enabled = False

    @property
    def is_resolving(self) -> bool:
        return self._pending is not None

    def enable(self):
        if self._enabled:
            return
        self.battles.battle_ended.subscribe(self.on_battle_ended)
        self._enabled = True

    def disable(self):
        if not self._enabled:
            return
        self.battles.battle_ended.unsubscribe(self.on_battle_ended)
        self.battles.log.idle.unsubscribe(self._on_log_idle)
        self._pending = None
        self._enabled = False

    def on_battle_ended(self, player_won: bool, player: BattlerSnapshot, enemy: BattlerSnapshot):
        if self._pending is not None:
            logger.warn("SettlementAlreadyRunning")
            return
        self._tag("ResolveStart")
        self._pending = player_won
        if player_won:
            self._settle_victory(enemy)
        log = self.battles.log
        if log.is_busy:
            log.idle.subscribe(self._on_log_idle)
        else:
            self._report()

    def _settle_victory(self, enemy: BattlerSnapshot):
        log = self.battles.log
        battler = self.battles.player
        progress = self.run.player
        if battler is None or progress is None:
            logger.warn("SettlementMissingPlayer", battler=battler is not None, progress=progress is not None)
            return
        cfg = self.run.config
        base_exp = cfg.exp_per_victory if cfg is not None else 0
        exp = progress.boosted_exp(base_exp)
        if exp > 0:
            log.push_text(texts.gained_exp(battler.name, exp))
            levels = battler.gain_exp(exp)
            if levels > 0:
                log.push_text(texts.grew_to_level(battler.name, battler.level))
        progress.level = battler.level
        progress.exp = battler.exp
        progress.hp = None if battler.hp >= battler.max_hp else battler.hp
        gold = cfg.gold_per_victory if cfg is not None else 0
        if gold > 0:
            self.run.add_gold(gold)
            log.push_text(texts.picked_up_gold(gold))
        logger.info("VictorySettled", enemy=enemy.name, exp=exp, level=progress.level, gold=self.run.gold)

    def _on_log_idle(self):
        if self.battles.log.is_busy:
            return
        self.battles.log.idle.unsubscribe(self._on_log_idle)
        self._report()

    def _report(self):
        player_won, self._pending = self._pending, None
        if player_won is None:
            return
        self.run.report_battle_ended(player_won)
        self._tag("ReportBattleEnded")

    def _tag(self, tag: str):
        if not self.debug:
            return
        logger.debug(f"[RewardResolver]{tag}")

__all__ = ["RewardResolver"]
