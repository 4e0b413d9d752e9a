"""
Battle AI system.

Enemy decision-making for the enemy phase, split into:
- core.py: EnemyAI priority ladder
- coordination.py: target assignment and shadow bishop colour
- positioning.py: advance, retreat and colour-switch scoring
- threat.py: player-threatened tiles
"""

from .core import EnemyAI
from .coordination import CoordinationManager, manhattan
from .positioning import PositioningHelper
from .threat import ThreatMap, boss_threat_map

__all__ = [
    # Core
    "EnemyAI",
    # Coordination
    "CoordinationManager",
    "manhattan",
    # Positioning
    "PositioningHelper",
    # Threat
    "ThreatMap",
    "boss_threat_map",
]
