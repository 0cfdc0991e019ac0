"""Run progression: encounters, rewards, items and shop."""
from .manager import RunManager
from .state import PlayerProgress, RunState
__all__ = ["RunManager","RunState","PlayerProgress"]
