"""Explicit subscribe/unsubscribe channel used in place of multicast delegates."""
from __future__ import annotations
from typing import Callable, Generic, List
from typing_extensions import ParamSpec

P = ParamSpec("P")

class Signal(Generic[P]):
    """Ordered list of listeners notified synchronously on ``emit``.

    Emission walks a copy of the listener list, so a listener may subscribe or
    unsubscribe (itself or others) while being notified; the change applies to
    the next emission.
    """

    def __init__(self, name: str = ""):
        self.name = name
        self._listeners: List[Callable[P, None]] = []

    def subscribe(self, fn: Callable[P, None]) -> Callable[P, None]:
        if fn not in self._listeners:
            self._listeners.append(fn)
        return fn

    def unsubscribe(self, fn: Callable[P, None]) -> bool:
        try:
            self._listeners.remove(fn)
        except ValueError:
            return False
        return True

    def clear(self):
        self._listeners.clear()

    def emit(self, *args: P.args, **kwargs: P.kwargs) -> None:
        for fn in list(self._listeners):
            fn(*args, **kwargs)

    def __len__(self) -> int:
        return len(self._listeners)

    def __contains__(self, fn: object) -> bool:
        return fn in self._listeners

    def __repr__(self) -> str:
        return f"Signal({self.name!r}, listeners={len(self._listeners)})"

__all__ = ["Signal"]
