"""
Coordination system for enemy AI.

Spreads enemies across player targets at the start of each enemy phase and
commits shadow bishops to a diagonal colour.
"""

from typing import Dict

from settings import AI_TARGET_SPREAD_PENALTY
from engine.error_handler import get_logger
from engine.battle.state import BattleState
from engine.battle.types import BattleUnit

log = get_logger("battle.ai.coordination")


def manhattan(a: BattleUnit, b: BattleUnit) -> int:
    return abs(a.x - b.x) + abs(a.y - b.y)


class CoordinationManager:
    """
    Manages target assignments between enemy units.

    Tracks how many enemies are on each player unit so later enemies prefer
    a different target unless the closer one is much closer.
    """

    def __init__(self, state: BattleState):
        self.state = state
        self.focus_counts: Dict[str, int] = {}  # player unit id -> enemies assigned

    def assign_targets(self) -> None:
        """
        Give every live enemy its closest player unit, penalising targets
        that already have enemies assigned.
        """
        players = self.state.player_units
        self.focus_counts = {p.id: 0 for p in players}

        for enemy in self.state.enemy_units:
            if not players:
                enemy.assigned_target_id = None
                continue

            def cost(p: BattleUnit) -> int:
                return manhattan(enemy, p) + AI_TARGET_SPREAD_PENALTY * self.focus_counts.get(p.id, 0)

            chosen = min(players, key=cost)
            enemy.assigned_target_id = chosen.id
            self.focus_counts[chosen.id] = self.focus_counts.get(chosen.id, 0) + 1
            log.debug(f"{enemy.id} targets {chosen.id}")

    def commit_shadow_parity(self) -> None:
        """
        Shadow bishops pick the diagonal colour they will strike on this phase:
        their target's colour, or a turn/health fallback with no target.
        """
        players = self.state.player_units
        for enemy in self.state.enemy_units:
            if not enemy.is_shadow_bishop:
                continue
            target = self.state.assigned_target(enemy) or (players[0] if players else None)
            if target is not None:
                enemy.bishop_diagonal_parity = target.diagonal_parity
            else:
                health_ratio = enemy.health / enemy.max_health if enemy.max_health else 1.0
                enemy.bishop_diagonal_parity = (self.state.turn % 2 + (1 if health_ratio < 0.5 else 0)) % 2

