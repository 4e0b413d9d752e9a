"""
Battle engine module.

This module contains all battle-related engine code, split into logical components:
- movement.py: Per-archetype move and attack patterns
- queries.py: Line of sight, occupancy and threat queries
- combat.py: Damage and attack-effect classification
- aoe.py: Boss blast and line attacks
- state.py: BattleState aggregate
- turns.py: TurnEngine state machine (player commands, enemy phase)
- pacing.py: Timed enemy phase playback
- scoring.py: End-of-battle score
- types.py: Battle dataclasses (BattleUnit, EnemyAction, AttackEffect)
"""

from .state import BattleState
from .turns import TurnEngine
from .types import BattleUnit, EnemyAction, Phase

__all__ = ["BattleState", "TurnEngine", "BattleUnit", "EnemyAction", "Phase"]
