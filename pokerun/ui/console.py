"""Reference terminal presenter for the battle log, rendered with rich.

The presenter is the log channel's only consumer: it prints every displayed
entry and acknowledges blocking entries. It never acknowledges from inside the
``displayed`` handler; ``pump()`` drives acknowledgments in a flat loop so the
narration of a whole turn does not nest on the call stack.
"""
from __future__ import annotations
from typing import Optional
import time

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from rich.box import ROUNDED

from pokerun.battle.battler import Battler
from pokerun.battle.log import LogChannel, LogEntry, LogKind
from pokerun.battle.types import StatusAilment

# Per-character delay; 0 prints instantly
# 1 = fast, 2 = normal, 3 = slow
SPEED_MAP = {0: 0.0, 1: 0.004, 2: 0.012, 3: 0.02}

_STATUS_STYLE = {
    StatusAilment.POISON: ("PSN", "magenta"),
    StatusAilment.BURN: ("BRN", "red"),
}

def hp_bar(cur: int, max_hp: int, width: int = 20) -> Text:
    max_hp = max(1, max_hp)
    cur = max(0, min(cur, max_hp))
    ratio = cur / max_hp
    filled = max(0, min(width, int(round(ratio * width))))
    color = "green" if ratio > 0.5 else "yellow" if ratio > 0.2 else "red"
    bar = Text("█" * filled, style=color)
    bar.append("░" * (width - filled), style="grey37")
    bar.append(f" {cur}/{max_hp}")
    return bar

class ConsolePresenter:
    def __init__(self, console: Optional[Console] = None, text_speed: int = 2):
        self.console = console or Console()
        self.text_speed = text_speed
        self.log: Optional[LogChannel] = None

    def attach(self, log: LogChannel):
        self.detach()
        self.log = log
        log.displayed.subscribe(self.render)

    def detach(self):
        if self.log is not None:
            self.log.displayed.unsubscribe(self.render)
            self.log = None

    def set_text_speed(self, speed: int):
        self.text_speed = speed

    def render(self, entry: LogEntry):
        if entry.kind == LogKind.PROMPT:
            self.console.print(Panel(Text(entry.text, style="bold cyan"), box=ROUNDED, expand=False))
            return
        self._type_out(entry.text)

    def _type_out(self, text: str):
        delay = SPEED_MAP.get(self.text_speed, 0.012)
        if delay <= 0:
            self.console.print(Text(text))
            return
        for ch in text:
            self.console.print(ch, end="", markup=False, highlight=False)
            time.sleep(delay)
        self.console.print()

    def pump(self, limit: int = 1000) -> int:
        """Acknowledge until the channel is idle. Returns the number of acks sent."""
        if self.log is None:
            return 0
        sent = 0
        while self.log.is_busy and sent < limit:
            self.log.acknowledge()
            sent += 1
        return sent

    def show_battlers(self, player: Battler, enemy: Battler):
        table = Table(box=ROUNDED, show_header=False, expand=False)
        table.add_column("name", style="bold")
        table.add_column("level")
        table.add_column("hp")
        table.add_column("status")
        for b in (enemy, player):
            label, style = _STATUS_STYLE.get(b.status, ("", ""))
            table.add_row(b.name, f"Lv{b.level}", hp_bar(b.hp, b.max_hp), Text(label, style=style))
        self.console.print(table)

    def show_skills(self, player: Battler):
        for i, skill in enumerate(player.skills):
            name = skill.name if skill is not None else "-"
            self.console.print(f"  {i + 1}) {name}")

__all__ = ["ConsolePresenter","hp_bar","SPEED_MAP"]
