"""Battle harness: builds both battlers for an encounter and drives the turn system.

Hosts call ``enable()`` once so the log channel's ``idle`` signal resumes the
turn system, then ``start_battle`` per encounter and ``select_skill_slot``
for player input. ``battle_ended(player_won, player_snapshot, enemy_snapshot)``
fires exactly once per finished battle.
"""
from __future__ import annotations
from typing import TYPE_CHECKING, Optional, Sequence
import random

from pokerun.core.logging import logger
from pokerun.events.signal import Signal
from .battler import Battler
from .executor import SkillExecutor
from .log import LogChannel
from .skills import SkillCatalog
from .turns import TurnSystem

if TYPE_CHECKING:
    from pokerun.data.loader import Pokedex
    from pokerun.run.encounters import Encounter
    from pokerun.run.state import PlayerProgress

class BattleManager:
    def __init__(self, pokedex: "Pokedex", catalog: SkillCatalog, *,
                 executor: Optional[SkillExecutor] = None, turns: Optional[TurnSystem] = None,
                 log: Optional[LogChannel] = None, rng: Optional[random.Random] = None):
        rng = rng or random.Random()
        self.pokedex = pokedex
        self.catalog = catalog
        self.executor = executor or SkillExecutor(rng)
        self.turns = turns or TurnSystem(rng)
        self.log = log or LogChannel()
        self.battle_ended: Signal = Signal("battle_ended")
        self._player: Optional[Battler] = None
        self._enemy: Optional[Battler] = None
        self._enabled = False

    @property
    def player(self) -> Optional[Battler]:
        return self._player

    @property
    def enemy(self) -> Optional[Battler]:
        return self._enemy

    @property
    def enabled(self) -> bool:
        return self._enabled

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def enable(self):
        if self._enabled:
            return
        self.log.idle.subscribe(self._on_log_idle)
        self._enabled = True

    def disable(self):
        """Unhook from the log and abandon any battle in progress."""
        if not self._enabled:
            return
        self.log.idle.unsubscribe(self._on_log_idle)
        self.turns.cancel()
        self._enabled = False

    def _on_log_idle(self):
        # Another idle listener may already have queued more narration
        if self.log.is_busy:
            return
        self.turns.resume()

    # ------------------------------------------------------------------
    # Battles
    # ------------------------------------------------------------------
    def build_battler(self, species_id: int, level: int, skill_ids: Sequence[str] = ()) -> Battler:
        stats = self.pokedex.get(species_id)
        skills = self.catalog.resolve(skill_ids)
        return Battler.create(stats, level, skills, fallback_name=self.pokedex.name(species_id))

    def start_battle(self, encounter: Optional["Encounter"], progress: Optional["PlayerProgress"]) -> bool:
        if encounter is None or progress is None:
            logger.warn("StartBattleInvalidRefs", encounter=encounter is not None, progress=progress is not None)
            return False
        player = self.build_battler(progress.species_id, progress.level, progress.skill_ids)
        player.exp = max(0, progress.exp)
        if progress.hp is not None:
            player.hp = max(1, min(progress.hp, player.max_hp))
        enemy = self.build_battler(encounter.enemy_id, encounter.level, encounter.skill_ids)
        return self.start_with(player, enemy)

    def start_with(self, player: Battler, enemy: Battler) -> bool:
        """Begin a battle between two prepared battlers."""
        self.log.clear()
        self._player = player
        self._enemy = enemy
        logger.info("BattleStarted", player=player.name, player_level=player.level,
                    enemy=enemy.name, enemy_level=enemy.level)
        return self.turns.begin_battle(player, enemy, self.executor, self.log, self._on_battle_ended)

    def select_skill_slot(self, slot: int) -> bool:
        return self.turns.submit_player_choice(slot)

    def skill_name(self, slot: int) -> str:
        s = self._player.get_skill(slot) if self._player is not None else None
        return s.name if s is not None else "-"

    def _on_battle_ended(self, player_won: bool):
        if self._player is None or self._enemy is None:
            logger.warn("BattleEndedWithoutBattlers", player_won=player_won)
            return
        self.battle_ended.emit(player_won, self._player.snapshot(), self._enemy.snapshot())

__all__ = ["BattleManager"]
