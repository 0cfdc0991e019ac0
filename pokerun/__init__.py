"""pokerun - single-vs-single turn battle engine with roguelike run progression.

Subpackages:
- battle (battlers, skill resolution, turn state machine, log channel)
- run (run state machine, encounters, rewards, shop)
- data (JSON statline / skill / item loaders)
"""
__version__ = "0.1.0"
