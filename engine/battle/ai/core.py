"""
Core battle AI module.

Contains the EnemyAI class that picks one enemy action at a time during the
enemy phase. It only decides; the turn engine commits.
"""

from typing import List, Optional

from settings import AI_KILL_SCORE, AI_HIT_SCORE, AI_ASSIGNED_TARGET_BONUS
from engine.error_handler import get_logger
from engine.battle.aoe import (
    BLAST_ARCHETYPES,
    LINE_ATTACK_ARCHETYPES,
    get_blast_victims,
    get_line_attack_victims,
)
from engine.battle.combat import expected_damage
from engine.battle.queries import attackable_tiles
from engine.battle.state import BattleState
from engine.battle.types import BattleUnit, EnemyAction

from .coordination import CoordinationManager
from .positioning import PositioningHelper
from .threat import boss_threat_map

log = get_logger("battle.ai")


class EnemyAI:
    """
    Enemy decision procedure.

    Each call to choose_action() looks at the current state and returns the
    single highest-priority action, in this order:
    1. Owed boss retreat
    2. Shadow bishop free colour switch
    3. Boss area abilities (boss levels only)
    4. Direct attack
    5. Advance toward target
    6. Fallback attack
    """

    def __init__(self, state: BattleState):
        self.state = state
        self.coordination = CoordinationManager(state)
        self.positioning = PositioningHelper(state)

    def begin_phase(self) -> None:
        """Once per enemy phase, after flags are reset and AP refilled."""
        self.coordination.assign_targets()
        self.coordination.commit_shadow_parity()

    def choose_action(self) -> Optional[EnemyAction]:
        state = self.state

        retreat = self._pending_retreat()
        if retreat is not None:
            return retreat

        if not state.player_units or state.enemy_ap <= 0:
            return None

        action = (
            self._color_switch()
            or self._boss_ability()
            or self._best_attack()
            or self.positioning.best_advance(state.enemy_ap, boss_threat_map(state))
            # Nothing to move: make sure an attack is never left on the table.
            or self._best_attack()
        )
        if action is not None:
            log.debug(f"Chose {action.kind} for {action.enemy_id} (score={action.score})")
        return action

    # ------------ Priority tiers ------------

    def _pending_retreat(self) -> Optional[EnemyAction]:
        state = self.state
        boss = state.get_unit(state.pending_retreat_id)
        if boss is None or boss.has_done_free_retreat:
            return None
        return self.positioning.best_retreat(boss, boss_threat_map(state))

    def _color_switch(self) -> Optional[EnemyAction]:
        for enemy in self.state.enemy_units:
            if not enemy.is_shadow_bishop or enemy.has_done_free_color_switch:
                continue
            action = self.positioning.best_color_switch(enemy)
            if action is not None:
                return action
        return None

    def _boss_ability(self) -> Optional[EnemyAction]:
        state = self.state
        if not state.is_boss_level:
            return None

        for enemy in self._ready_bosses(BLAST_ARCHETYPES):
            victims = get_blast_victims(enemy, state.units)
            if victims:
                return EnemyAction(
                    kind="area_blast",
                    enemy_id=enemy.id,
                    cost=enemy.attack_cost,
                    target_ids=[v.id for v in victims],
                )

        for enemy in self._ready_bosses(LINE_ATTACK_ARCHETYPES):
            victims = get_line_attack_victims(state.board, enemy, state.units)
            if victims:
                return EnemyAction(
                    kind="line_attack",
                    enemy_id=enemy.id,
                    cost=enemy.attack_cost,
                    target_ids=[v.id for v in victims],
                )
        return None

    def _ready_bosses(self, archetypes) -> List[BattleUnit]:
        return [
            e for e in self.state.enemy_units
            if e.is_boss
            and not e.has_acted
            and e.archetype in archetypes
            and self.state.enemy_ap >= e.attack_cost
        ]

    def score_attack(self, enemy: BattleUnit, target: BattleUnit, damage: int) -> float:
        would_kill = target.health <= damage
        score = (AI_KILL_SCORE if would_kill else AI_HIT_SCORE) - target.health
        if enemy.assigned_target_id == target.id:
            score += AI_ASSIGNED_TARGET_BONUS
        return score

    def attack_candidates(self) -> List[EnemyAction]:
        state = self.state
        board = state.board
        grid = board.obstacle_grid()
        players = state.player_units
        candidates: List[EnemyAction] = []
        for enemy in state.enemy_units:
            if enemy.has_acted or state.enemy_ap < enemy.attack_cost:
                continue
            reach = attackable_tiles(board, enemy, grid)
            for p in players:
                if p.position not in reach:
                    continue
                damage = expected_damage(enemy, p)
                candidates.append(EnemyAction(
                    kind="attack",
                    enemy_id=enemy.id,
                    cost=enemy.attack_cost,
                    target_ids=[p.id],
                    damage=damage,
                    score=self.score_attack(enemy, p, damage),
                ))
        return candidates

    def _best_attack(self) -> Optional[EnemyAction]:
        candidates = self.attack_candidates()
        if not candidates:
            return None
        # max() keeps the first of equal scores
        return max(candidates, key=lambda a: a.score)
