"""Narration strings pushed into the battle log."""
from __future__ import annotations

from .types import STAT_LABELS, BattleStat, StatusAilment

_STATUS_VERB = {
    StatusAilment.POISON: "was poisoned",
    StatusAilment.BURN: "was burned",
}

_DOT_CAUSE = {
    StatusAilment.POISON: "poison",
    StatusAilment.BURN: "its burn",
}

def battle_start() -> str:
    return "Battle start!"

def versus(player_name: str, enemy_name: str) -> str:
    return f"{player_name} VS {enemy_name}"

def prompt_what_will_do(player_name: str) -> str:
    return f"What will {player_name} do? (1-4)"

def use_skill(attacker: str, skill: str) -> str:
    return f"{attacker} used {skill}!"

def cannot_act(name: str) -> str:
    return f"{name} fainted and cannot act!"

def no_skill(name: str) -> str:
    return f"{name} has no move to use!"

def missed() -> str:
    return "But it missed!"

def damage(defender: str, amount: int) -> str:
    return f"{defender} took {amount} damage!"

def fainted(name: str) -> str:
    return f"{name} fainted!"

def stage_changed(target: str, stat: BattleStat, applied: int) -> str:
    label = STAT_LABELS.get(stat, "stat")
    if applied >= 2:
        return f"{target}'s {label} rose sharply!"
    if applied > 0:
        return f"{target}'s {label} rose!"
    if applied <= -2:
        return f"{target}'s {label} harshly fell!"
    return f"{target}'s {label} fell!"

def status_applied(target: str, ailment: StatusAilment) -> str:
    return f"{target} {_STATUS_VERB.get(ailment, 'was afflicted')}!"

def nothing_happened() -> str:
    return "But nothing happened!"

def dot_damage(name: str, ailment: StatusAilment, amount: int) -> str:
    return f"{name} is hurt by {_DOT_CAUSE.get(ailment, 'its condition')}! ({amount})"

def victory() -> str:
    return "Victory!"

def defeat() -> str:
    return "Defeat..."

def gained_exp(name: str, amount: int) -> str:
    return f"{name} gained {amount} EXP. Points!"

def grew_to_level(name: str, level: int) -> str:
    return f"{name} grew to Lv. {level}!"

def picked_up_gold(amount: int) -> str:
    return f"You got {amount} gold for winning!"
