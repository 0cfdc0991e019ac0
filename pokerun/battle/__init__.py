"""
Battle engine package.
Modules:
- types.py (stats, stages, ailments)
- battler.py (combatant model)
- skills.py (skill definitions and catalog)
- executor.py (accuracy, damage, effects)
- turns.py (turn state machine)
- log.py (ack-gated narration channel)
- manager.py (battle harness)
"""
from .manager import BattleManager
from .turns import TurnSystem, TurnPhase
from .log import LogChannel, LogEntry, LogKind
__all__ = ["BattleManager","TurnSystem","TurnPhase","LogChannel","LogEntry","LogKind"]
