"""Turn state machine for a single-vs-single battle.

Phases::

    AWAITING_CHOICE -> RESOLVING -> END_TURN_EFFECTS -> AWAITING_CHOICE ...

A faint during RESOLVING or END_TURN_EFFECTS goes straight to BATTLE_OVER.

The machine never blocks. It suspends in two places, one at a time:

* waiting for the player's choice (``submit_player_choice``)
* waiting for the log channel to go idle after a narrating step

The host resumes it by calling ``resume()`` once the log is idle (normally by
subscribing ``resume`` to ``LogChannel.idle``). ``begin_battle`` or ``cancel``
abandon any in-flight battle without firing its completion callback.
"""
from __future__ import annotations
from enum import Enum
from typing import Callable, List, Optional, Tuple
import random

from pokerun.core.logging import logger
from . import texts
from .battler import Battler, SKILL_SLOTS
from .executor import SkillExecutor
from .log import LogChannel
from .types import BattleStat

class TurnPhase(str, Enum):
    IDLE = "idle"
    AWAITING_CHOICE = "awaiting_choice"
    RESOLVING = "resolving"
    END_TURN_EFFECTS = "end_turn_effects"
    BATTLE_OVER = "battle_over"

# (actor, target, slot)
Action = Tuple[Battler, Battler, int]

def choose_enemy_slot(b: Battler) -> int:
    """Highest-power populated slot; lowest index wins ties; 0 if none."""
    best_slot = -1
    best_power = -1
    for i in range(SKILL_SLOTS):
        s = b.get_skill(i)
        if s is None:
            continue
        if s.power > best_power:
            best_power = s.power
            best_slot = i
    return best_slot if best_slot >= 0 else 0

def player_moves_first(player: Battler, enemy: Battler, rng: random.Random) -> bool:
    sp_p = player.get_stat(BattleStat.SPEED)
    sp_e = enemy.get_stat(BattleStat.SPEED)
    if sp_p != sp_e:
        return sp_p > sp_e
    return rng.randint(0, 1) == 0

class TurnSystem:
    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()
        self.phase = TurnPhase.IDLE
        self.player: Optional[Battler] = None
        self.enemy: Optional[Battler] = None
        self.executor: Optional[SkillExecutor] = None
        self.log: Optional[LogChannel] = None
        self.turn_count = 0
        self.player_won: Optional[bool] = None
        self._on_ended: Optional[Callable[[bool], None]] = None
        self._chosen_slot: Optional[int] = None
        self._order: List[Action] = []
        self._step = 0
        self._waiting_for_log = False
        self._end_check_pending = False
        self._token = 0
        self._running = False

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    @property
    def is_waiting_for_player_choice(self) -> bool:
        return self.phase == TurnPhase.AWAITING_CHOICE and self._chosen_slot is None

    @property
    def is_waiting_for_log(self) -> bool:
        return self._waiting_for_log

    @property
    def is_battle_over(self) -> bool:
        return self.phase == TurnPhase.BATTLE_OVER

    @property
    def in_progress(self) -> bool:
        return self.phase not in (TurnPhase.IDLE, TurnPhase.BATTLE_OVER)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def begin_battle(self, player: Optional[Battler], enemy: Optional[Battler],
                     executor: Optional[SkillExecutor], log: Optional[LogChannel],
                     on_ended: Optional[Callable[[bool], None]] = None) -> bool:
        self.cancel()
        if player is None or enemy is None or executor is None or log is None:
            logger.warn("BeginBattleInvalidRefs", player=player is not None, enemy=enemy is not None,
                        executor=executor is not None, log=log is not None)
            return False
        self.player = player
        self.enemy = enemy
        self.executor = executor
        self.log = log
        self._on_ended = on_ended
        logger.debug("BattleBegin", player=player.name, enemy=enemy.name)
        log.push_text(texts.battle_start())
        log.push_text(texts.versus(player.name, enemy.name))
        self._enter_awaiting_choice()
        return True

    def cancel(self):
        """Abandon the current battle; its completion callback will never fire."""
        if self.in_progress:
            logger.info("BattleCancelled", turn=self.turn_count)
        self._token += 1
        self._running = False
        self.phase = TurnPhase.IDLE
        self._on_ended = None
        self._chosen_slot = None
        self._order = []
        self._step = 0
        self._waiting_for_log = False
        self._end_check_pending = False
        self.turn_count = 0
        self.player_won = None

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------
    def submit_player_choice(self, slot: int) -> bool:
        if not self.is_waiting_for_player_choice:
            logger.warn("PlayerChoiceRejected", reason="not_awaiting_choice", phase=self.phase.value)
            return False
        if slot < 0 or slot >= SKILL_SLOTS:
            logger.warn("PlayerChoiceRejected", reason="slot_out_of_range", slot=slot)
            return False
        if self.player is None or self.player.get_skill(slot) is None:
            logger.warn("PlayerChoiceRejected", reason="empty_slot", slot=slot)
            return False
        self._chosen_slot = slot
        self._start_turn()
        self.resume()
        return True

    # ------------------------------------------------------------------
    # Driving
    # ------------------------------------------------------------------
    def resume(self):
        """Advance until the next suspension point. Safe to call at any time."""
        if self._running or not self.in_progress:
            return
        token = self._token
        self._running = True
        try:
            while token == self._token:
                if self._waiting_for_log:
                    if self.log is not None and self.log.is_busy:
                        return
                    self._waiting_for_log = False
                if not self._step_once():
                    return
        finally:
            if token == self._token:
                self._running = False

    def _step_once(self) -> bool:
        if self._end_check_pending:
            self._end_check_pending = False
            self.turn_count += 1
            if self._anyone_fainted():
                self._finish()
            else:
                self._enter_awaiting_choice()
            return False

        if self.phase == TurnPhase.RESOLVING:
            actor, target, slot = self._order[self._step]
            self._execute_action(actor, target, slot)
            self._step += 1
            if self._anyone_fainted():
                # Skips the second action and end-of-turn damage
                self._end_check_pending = True
            elif self._step >= len(self._order):
                self.phase = TurnPhase.END_TURN_EFFECTS
                self._step = 0
            self._suspend_for_log()
            return True

        if self.phase == TurnPhase.END_TURN_EFFECTS:
            battler = self._order[self._step][0]
            self._apply_end_turn_effects(battler)
            self._step += 1
            if self._anyone_fainted() or self._step >= len(self._order):
                self._end_check_pending = True
            self._suspend_for_log()
            return True

        return False

    def _start_turn(self):
        if self.player is None or self.enemy is None:
            logger.error("TurnStartInvalidRefs", player=self.player is not None, enemy=self.enemy is not None)
            return
        enemy_slot = choose_enemy_slot(self.enemy)
        slot = self._chosen_slot if self._chosen_slot is not None else 0
        player_action: Action = (self.player, self.enemy, slot)
        enemy_action: Action = (self.enemy, self.player, enemy_slot)
        if player_moves_first(self.player, self.enemy, self.rng):
            self._order = [player_action, enemy_action]
        else:
            self._order = [enemy_action, player_action]
        self._step = 0
        self.phase = TurnPhase.RESOLVING
        if self.log is not None:
            self.log.clear_prompt()
        logger.debug("TurnStart", turn=self.turn_count + 1, first=self._order[0][0].name,
                     player_slot=self._chosen_slot, enemy_slot=enemy_slot)
        # Intro / previous narration finishes before the turn plays out
        self._suspend_for_log()

    def _enter_awaiting_choice(self):
        self.phase = TurnPhase.AWAITING_CHOICE
        self._chosen_slot = None
        if self.log is not None and self.player is not None:
            self.log.push_prompt(texts.prompt_what_will_do(self.player.name))

    def _suspend_for_log(self):
        if self.log is not None and self.log.is_busy:
            self._waiting_for_log = True

    def _execute_action(self, actor: Battler, target: Battler, slot: int):
        if self.executor is None or self.log is None:
            logger.error("ExecuteActionInvalidRefs", actor=actor.name)
            return
        skill = actor.get_skill(slot)
        if skill is None:
            self.log.push_text(texts.no_skill(actor.name))
            return
        self.executor.execute(actor, target, skill, self.log)

    def _apply_end_turn_effects(self, b: Battler):
        if self.log is None or b.is_fainted:
            return
        dot = b.compute_end_turn_dot()
        if dot <= 0:
            return
        b.apply_damage(dot)
        self.log.push_text(texts.dot_damage(b.name, b.status, dot))
        if b.is_fainted:
            self.log.push_text(texts.fainted(b.name))

    def _anyone_fainted(self) -> bool:
        return bool((self.player and self.player.is_fainted) or (self.enemy and self.enemy.is_fainted))

    def _finish(self):
        if self.player is None or self.enemy is None or self.log is None:
            logger.error("BattleFinishInvalidRefs")
            self.cancel()
            return
        self.phase = TurnPhase.BATTLE_OVER
        self.player_won = self.enemy.is_fainted and not self.player.is_fainted
        self.log.clear_prompt()
        self.log.push_text(texts.victory() if self.player_won else texts.defeat())
        logger.info("BattleOver", player_won=self.player_won, turns=self.turn_count)
        cb, self._on_ended = self._on_ended, None
        if cb is not None:
            cb(self.player_won)

__all__ = ["TurnSystem","TurnPhase","choose_enemy_slot","player_moves_first"]
