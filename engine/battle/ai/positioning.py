"""
Positioning and movement system for AI.

Scores enemy destinations for:
- Advancing toward the assigned target
- Boss free retreat after an attack
- The shadow bishop's free diagonal-colour switch
"""

from typing import List, Optional

from settings import (
    AI_BOSS_ESCAPE_BONUS,
    AI_BOSS_SAFE_BONUS,
    AI_BOSS_EXPOSED_PENALTY,
    AI_THREATEN_FROM_DEST_BONUS,
    AI_CLUSTER_PENALTY,
    AI_CLUSTER_RADIUS,
    AI_RETREAT_SAFE_BONUS,
    AI_RETREAT_ESCAPE_BONUS,
)
from engine.battle.movement import get_attack_range, diagonal_parity
from engine.battle.queries import has_unit_in_between
from engine.battle.state import BattleState
from engine.battle.types import BattleUnit, Coord, EnemyAction
from engine.battle.aoe import adjacent_tiles
from .threat import ThreatMap


def _manhattan(ax: int, ay: int, bx: int, by: int) -> int:
    return abs(ax - bx) + abs(ay - by)


class PositioningHelper:
    """Finds movement destinations for enemy units."""

    def __init__(self, state: BattleState):
        self.state = state

    def legal_destinations(self, unit: BattleUnit) -> List[Coord]:
        """
        Tiles the unit may move to right now: on the board, obstacle-free,
        unoccupied, and (except for knights) not past another unit.
        """
        board = self.state.board
        units = self.state.units
        moves = unit.valid_moves(board.width, board.height, board.obstacle_grid())
        result: List[Coord] = []
        for m in moves:
            if not board.is_valid_position(*m) or board.has_obstacle(*m):
                continue
            if self.state.unit_at(*m) is not None:
                continue
            if unit.archetype != "knight" and has_unit_in_between(units, unit.position, m):
                continue
            result.append(m)
        return result

    # ------------ Advance ------------

    def score_advance(
        self,
        enemy: BattleUnit,
        target: BattleUnit,
        dest: Coord,
        threat: Optional[ThreatMap],
    ) -> float:
        """
        Bosses weigh distance gained against safety; regular enemies prefer
        the closest tile, a tile they can strike from, and open space.
        """
        board = self.state.board
        current_dist = _manhattan(enemy.x, enemy.y, target.x, target.y)
        new_dist = _manhattan(dest[0], dest[1], target.x, target.y)
        score: float = current_dist - new_dist

        if enemy.is_boss:
            if threat is not None:
                dest_safe = threat.is_safe(dest)
                if dest_safe and threat.unit_threatened(enemy):
                    score += AI_BOSS_ESCAPE_BONUS
                elif dest_safe:
                    score += AI_BOSS_SAFE_BONUS
                else:
                    score -= AI_BOSS_EXPOSED_PENALTY
            return score

        score = -new_dist
        # Raw reach from the destination; line of sight is not checked here.
        reach = set(get_attack_range(enemy.archetype, dest[0], dest[1], board.width, board.height, board.obstacle_grid()))
        if any(p.position in reach for p in self.state.player_units):
            score += AI_THREATEN_FROM_DEST_BONUS
        allies_near = sum(
            1 for o in self.state.enemy_units
            if o is not enemy
            and not o.has_moved
            and abs(o.x - dest[0]) <= AI_CLUSTER_RADIUS
            and abs(o.y - dest[1]) <= AI_CLUSTER_RADIUS
        )
        score -= AI_CLUSTER_PENALTY * allies_near
        return score

    def best_advance(self, ap_available: int, threat: Optional[ThreatMap]) -> Optional[EnemyAction]:
        """Best (enemy, destination) pair across every enemy that can still move."""
        best: Optional[EnemyAction] = None
        best_score = float("-inf")
        for enemy in self.state.enemy_units:
            target = self.state.assigned_target(enemy)
            if target is None or enemy.has_moved:
                continue
            if ap_available < enemy.move_cost:
                continue
            for dest in self.legal_destinations(enemy):
                score = self.score_advance(enemy, target, dest, threat)
                if score > best_score:
                    best_score = score
                    best = EnemyAction(
                        kind="move",
                        enemy_id=enemy.id,
                        cost=enemy.move_cost,
                        dest=dest,
                        score=score,
                    )
        return best

    # ------------ Boss retreat ------------

    def best_retreat(self, boss: BattleUnit, threat: Optional[ThreatMap]) -> Optional[EnemyAction]:
        """
        Free escape step after a boss attack: get away from the reference
        target, strongly preferring tiles the player cannot strike.
        """
        players = self.state.player_units
        ref = self.state.assigned_target(boss) or (players[0] if players else None)
        currently_threatened = threat is not None and threat.unit_threatened(boss)

        best: Optional[EnemyAction] = None
        best_score = float("-inf")
        for dest in self.legal_destinations(boss):
            score: float = _manhattan(dest[0], dest[1], ref.x, ref.y) if ref is not None else 0
            if threat is not None and threat.is_safe(dest):
                score += AI_RETREAT_SAFE_BONUS
                if currently_threatened:
                    score += AI_RETREAT_ESCAPE_BONUS
            if score > best_score:
                best_score = score
                best = EnemyAction(kind="retreat", enemy_id=boss.id, cost=0, dest=dest, score=score)
        return best

    # ------------ Shadow bishop colour switch ------------

    def best_color_switch(self, bishop: BattleUnit) -> Optional[EnemyAction]:
        """
        One free step onto an adjacent tile of the target's square colour,
        closest to the target first.
        """
        players = self.state.player_units
        target = self.state.assigned_target(bishop) or (players[0] if players else None)
        if target is None:
            return None
        own = bishop.diagonal_parity
        if own == target.diagonal_parity:
            return None

        board = self.state.board
        options = [
            t for t in adjacent_tiles(bishop.x, bishop.y)
            if board.is_valid_position(*t)
            and not board.has_obstacle(*t)
            and self.state.unit_at(*t) is None
            and diagonal_parity(*t) != own
        ]
        if not options:
            return None
        dest = min(options, key=lambda t: _manhattan(t[0], t[1], target.x, target.y))
        return EnemyAction(kind="color_switch", enemy_id=bishop.id, cost=0, dest=dest, target_ids=[target.id])
