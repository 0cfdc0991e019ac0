"""Acknowledgment-gated battle log.

The engine is the only producer; a presenter is the only consumer. Blocking
entries are shown one at a time and each must be acknowledged before the next
appears. Prompt entries are not queued: the latest one is cached and shown
whenever the channel is idle.
"""
from __future__ import annotations
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Deque, List, Optional

from pokerun.core.logging import logger
from pokerun.events.signal import Signal

DEFAULT_HISTORY = 32
MIN_HISTORY = 8

class LogKind(str, Enum):
    BLOCKING = "blocking"
    PROMPT = "prompt"

@dataclass(frozen=True)
class LogEntry:
    text: str
    kind: LogKind = LogKind.BLOCKING

class LogChannel:
    def __init__(self, history: int = DEFAULT_HISTORY):
        self._queue: Deque[LogEntry] = deque()
        self._current: Optional[LogEntry] = None
        self._prompt: Optional[LogEntry] = None
        self._pending_ack = False
        # set when idle is emitted, cleared by the next blocking push
        self._idle = False
        self._history: Deque[str] = deque(maxlen=max(MIN_HISTORY, history))
        # displayed(entry): an entry starts showing; idle(): last blocking entry acknowledged
        self.displayed: Signal = Signal("displayed")
        self.idle: Signal = Signal("idle")

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------
    @property
    def is_busy(self) -> bool:
        return self._current is not None or bool(self._queue)

    @property
    def current(self) -> Optional[LogEntry]:
        return self._current

    @property
    def prompt(self) -> Optional[LogEntry]:
        return self._prompt

    @property
    def pending(self) -> int:
        return len(self._queue)

    @property
    def has_buffered_ack(self) -> bool:
        return self._pending_ack

    def history(self) -> List[str]:
        return list(self._history)

    # ------------------------------------------------------------------
    # Producer side
    # ------------------------------------------------------------------
    def push(self, entry: Optional[LogEntry]):
        if entry is None or not entry.text:
            return
        self._history.append(entry.text)
        logger.debug("BattleLog", kind=entry.kind.value, text=entry.text.replace("\n", " "))
        if entry.kind == LogKind.PROMPT:
            self._prompt = entry
            if not self.is_busy:
                self.displayed.emit(entry)
            return
        self._idle = False
        self._queue.append(entry)
        if self._current is None:
            self._show_next()

    def push_text(self, text: str):
        self.push(LogEntry(text, LogKind.BLOCKING))

    def push_prompt(self, text: str):
        self.push(LogEntry(text, LogKind.PROMPT))

    def clear_prompt(self):
        self._prompt = None

    def clear(self):
        """Drop queued entries, the cached prompt and any buffered acknowledgment."""
        self._queue.clear()
        self._current = None
        self._prompt = None
        self._pending_ack = False
        self._idle = False

    # ------------------------------------------------------------------
    # Consumer side
    # ------------------------------------------------------------------
    def acknowledge(self):
        if self._current is None:
            if self._idle:
                return
            # Nothing on screen yet; keep one ack for the next blocking entry
            self._pending_ack = True
            return
        self._current = None
        if self._queue:
            self._show_next()
            return
        self._idle = True
        if self._prompt is not None:
            self.displayed.emit(self._prompt)
        self.idle.emit()

    def _show_next(self):
        entry = self._queue.popleft()
        self._current = entry
        self.displayed.emit(entry)
        if self._pending_ack and self._current is entry:
            self._pending_ack = False
            self.acknowledge()

__all__ = ["LogChannel","LogEntry","LogKind"]
