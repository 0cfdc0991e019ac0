"""Run-level state enum and the player's carried-over progress."""
from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

class RunState(str, Enum):
    NONE = "none"
    IN_BATTLE = "in_battle"
    IN_SHOP_OR_REWARD = "in_shop_or_reward"
    BIOME_TRANSITION = "biome_transition"
    GAME_OVER = "game_over"

@dataclass
class PlayerProgress:
    species_id: int
    level: int = 5
    exp: int = 0
    hp: Optional[int] = None  # None -> start the next battle at full HP
    skill_ids: List[str] = field(default_factory=list)
    exp_boost_percent: int = 0

    def boosted_exp(self, amount: int) -> int:
        if amount <= 0:
            return 0
        return amount + (amount * max(0, self.exp_boost_percent)) // 100

__all__ = ["RunState","PlayerProgress"]
