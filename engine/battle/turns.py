"""
Turn engine.

Owns the rules for every mutation of a BattleState: player selection, moves
and attacks, the enemy phase, and victory/defeat detection.

Player commands never raise. A command that is not allowed right now
returns False and leaves the state untouched; callers re-read the state.
"""

from typing import List, Optional

from engine.error_handler import BattleError, get_logger
from engine.battle.ai import EnemyAI
from engine.battle.combat import apply_damage, compute_damage, make_attack_effect
from engine.battle.queries import has_line_of_sight
from engine.battle.scoring import ScoreResult, score_result
from engine.battle.state import BattleState
from engine.battle.types import AttackEffect, BattleUnit, Coord, EnemyAction, Phase
from systems.pieces import is_ranged
from telemetry.logger import telemetry

log = get_logger("battle.turns")


class TurnEngine:
    """
    State machine: PLAYER_TURN -> ENEMY_TURN -> PLAYER_TURN ... until
    VICTORY or DEFEAT, both of which are final.
    """

    def __init__(self, state: BattleState):
        self.state = state
        self.ai = EnemyAI(state)
        telemetry.log(
            "battle_start",
            name=state.name,
            width=state.board.width,
            height=state.board.height,
            is_boss_level=state.is_boss_level,
            players=len(state.player_units),
            enemies=len(state.enemy_units),
        )

    # ------------ Queries ------------

    @property
    def phase(self) -> Phase:
        return self.state.phase

    @property
    def is_over(self) -> bool:
        return self.state.phase.is_terminal

    def is_valid_move_target(self, x: int, y: int) -> bool:
        return (x, y) in self.state.valid_moves

    def is_valid_attack_target(self, x: int, y: int) -> bool:
        return (x, y) in self.state.attack_range

    def preview_attack(self, attacker_id: str, target_id: str) -> Optional[int]:
        """Damage a player attack would deal, or None if it is not allowed now."""
        attacker = self.state.get_unit(attacker_id)
        target = self.state.get_unit(target_id)
        if attacker is None or target is None or not self._can_player_attack(attacker, target):
            return None
        return compute_damage(attacker.attack, target.defense)

    def score_result(self) -> ScoreResult:
        return score_result(self.state)

    # ------------ Player commands ------------

    def select_unit(self, unit_id: str) -> bool:
        """Select a live player unit and compute its moves and attack targets."""
        state = self.state
        unit = state.get_unit(unit_id)
        if state.phase is not Phase.PLAYER_TURN or unit is None or not unit.is_player:
            log.debug(f"Rejected select {unit_id} in {state.phase.value}")
            return False

        state.clear_selection()
        state.selected_unit_id = unit.id
        unit.selected = True

        board = state.board
        grid = board.obstacle_grid()
        state.valid_moves = [
            m for m in unit.valid_moves(board.width, board.height, grid)
            if not board.has_obstacle(*m) and state.unit_at(*m) is None
        ]

        state.attack_range = self._attack_targets(unit)
        return True

    def _attack_targets(self, unit: BattleUnit) -> List[Coord]:
        """Enemy-occupied tiles the unit can strike right now."""
        if not unit.can_attack:
            return []
        state = self.state
        board = state.board
        targets = []
        for t in unit.attack_range(board.width, board.height, board.obstacle_grid()):
            occupant = state.unit_at(*t)
            if occupant is None or occupant.is_player:
                continue
            if is_ranged(unit.archetype) and not has_line_of_sight(board, unit.position, t):
                continue
            targets.append(t)
        return targets

    def clear_selection(self) -> bool:
        if self.state.phase is not Phase.PLAYER_TURN:
            return False
        self.state.clear_selection()
        return True

    def move_selected_to(self, x: int, y: int) -> bool:
        """Move the selected unit to one of its valid destinations."""
        unit = self.state.selected_unit
        if unit is None or not self.is_valid_move_target(x, y) or self.state.unit_at(x, y) is not None:
            log.debug(f"Rejected move to {(x, y)}")
            return False
        return self.move_unit(unit, x, y)

    def attack_with(self, attacker_id: str, target_id: str) -> bool:
        """Attack with the selected unit at an enemy inside its attack range."""
        state = self.state
        attacker = state.selected_unit
        target = state.get_unit(target_id)
        if attacker is None or attacker.id != attacker_id or target is None:
            log.debug(f"Rejected attack {attacker_id} -> {target_id}: not selected or no target")
            return False
        if not self.is_valid_attack_target(target.x, target.y):
            log.debug(f"Rejected attack {attacker_id} -> {target_id}: out of range")
            return False
        return self.attack_unit(attacker, target)

    def move_unit(self, unit: BattleUnit, x: int, y: int) -> bool:
        """Relocate a player unit, paying its move cost from the shared pool."""
        state = self.state
        if state.phase is not Phase.PLAYER_TURN or not unit.is_player or not unit.is_alive:
            return False
        cost = unit.move_cost
        if state.player_ap < cost:
            log.debug(f"Rejected move of {unit.id}: needs {cost} AP, {state.player_ap} left")
            return False

        state.player_ap -= cost
        state.total_ap_spent += cost
        origin = unit.position
        unit.x, unit.y = x, y
        unit.has_moved = True
        state.clear_selection()

        log.info(f"{unit.id} moves {origin} -> {(x, y)} ({cost} AP)")
        telemetry.log("player_move", unit=unit.id, origin=origin, dest=(x, y), cost=cost)
        return True

    def _can_player_attack(self, attacker: BattleUnit, target: BattleUnit) -> bool:
        state = self.state
        return (
            state.phase is Phase.PLAYER_TURN
            and attacker.is_player
            and attacker.is_alive
            and not target.is_player
            and target.is_alive
            and state.player_ap >= attacker.attack_cost
            and target.position in self._attack_targets(attacker)
        )

    def attack_unit(self, attacker: BattleUnit, target: BattleUnit) -> bool:
        """Resolve a player attack. Killing an enemy king wins immediately."""
        state = self.state
        if not self._can_player_attack(attacker, target):
            log.debug(f"Rejected attack {attacker.id} -> {target.id}")
            return False

        cost = attacker.attack_cost
        state.player_ap -= cost
        state.total_ap_spent += cost
        damage = apply_damage(target, compute_damage(attacker.attack, target.defense))
        state.last_attack_effect = make_attack_effect(attacker, target)

        log.info(f"{attacker.id} hits {target.id} for {damage} ({target.health}/{target.max_health} left)")
        telemetry.log("player_attack", attacker=attacker.id, target=target.id, damage=damage, cost=cost)

        if not target.is_alive:
            state.remove_unit(target)
            if target.archetype == "king":
                self._end_battle(Phase.VICTORY, reason=f"enemy king {target.id} slain")
                return True

        state.clear_selection()
        self.check_game_state()
        return True

    def end_player_turn(self) -> bool:
        """Hand the turn to the enemy side."""
        state = self.state
        if state.phase is not Phase.PLAYER_TURN:
            log.debug(f"Rejected end turn in {state.phase.value}")
            return False
        state.clear_selection()
        self._set_phase(Phase.ENEMY_TURN)
        self.begin_enemy_phase()
        return True

    # ------------ Enemy phase ------------

    def begin_enemy_phase(self) -> None:
        """Refill the enemy pool, reset enemy flags, assign targets."""
        state = self.state
        state.enemy_ap = state.enemy_ap_max
        state.pending_retreat_id = None
        state.enemy_preview = None
        for enemy in state.enemy_units:
            enemy.reset_turn()
        if state.enemies_act and state.player_units:
            self.ai.begin_phase()

    def plan_enemy_action(self) -> Optional[EnemyAction]:
        """Next enemy action without applying it, or None when the phase is over."""
        state = self.state
        if state.phase is not Phase.ENEMY_TURN or not state.enemies_act:
            return None
        return self.ai.choose_action()

    def commit_enemy_action(self, action: EnemyAction) -> None:
        """Apply a planned enemy action. Actions always complete once chosen."""
        state = self.state
        if state.phase is not Phase.ENEMY_TURN:
            return
        enemy = state.get_unit(action.enemy_id)
        state.enemy_preview = None
        if enemy is None:
            return

        if action.kind != "retreat":
            state.pending_retreat_id = None

        if action.kind == "color_switch":
            enemy.x, enemy.y = action.dest
            enemy.has_done_free_color_switch = True
            enemy.bishop_diagonal_parity = enemy.diagonal_parity
        elif action.kind == "retreat":
            enemy.x, enemy.y = action.dest
            enemy.has_done_free_retreat = True
            state.pending_retreat_id = None
        elif action.kind == "move":
            # The destination may have filled up since the preview.
            if state.unit_at(*action.dest) is None:
                state.enemy_ap -= action.cost
                enemy.x, enemy.y = action.dest
            else:
                log.debug(f"{enemy.id} move to {action.dest} blocked; turn forfeited")
            enemy.has_moved = True
        elif action.kind in ("area_blast", "line_attack"):
            self._commit_area_attack(enemy, action)
        elif action.kind == "attack":
            self._commit_attack(enemy, action)
        else:
            raise BattleError(f"Unknown enemy action kind: {action.kind!r}")

        log.info(f"Enemy {action.kind}: {enemy.id} dest={action.dest} targets={action.target_ids}")
        telemetry.log(
            "enemy_action",
            kind=action.kind,
            enemy=enemy.id,
            dest=action.dest,
            targets=action.target_ids,
            cost=action.cost,
            enemy_ap=state.enemy_ap,
        )

        if action.is_attack:
            self.check_game_state()
            if (
                not state.phase.is_terminal
                and enemy.is_boss
                and enemy.is_alive
                and not enemy.has_done_free_retreat
            ):
                state.pending_retreat_id = enemy.id

    def _commit_attack(self, enemy: BattleUnit, action: EnemyAction) -> None:
        state = self.state
        target = state.get_unit(action.primary_target_id)
        state.enemy_ap -= action.cost
        enemy.has_acted = True
        if target is None:
            return
        damage = target.health if enemy.is_boss else compute_damage(enemy.attack, target.defense)
        apply_damage(target, damage)
        state.last_attack_effect = make_attack_effect(enemy, target)
        if not target.is_alive:
            state.remove_unit(target)

    def _commit_area_attack(self, enemy: BattleUnit, action: EnemyAction) -> None:
        state = self.state
        state.enemy_ap -= action.cost
        enemy.has_acted = True
        victims = [u for u in (state.get_unit(i) for i in action.target_ids) if u is not None]
        for victim in victims:
            victim.health = 0
            state.remove_unit(victim)

        if action.kind == "area_blast":
            state.last_attack_effect = AttackEffect(
                attacker_id=enemy.id,
                target_id=None,
                style="area",
                origin=enemy.position,
                impact=enemy.position,
            )
        elif victims:
            state.last_attack_effect = make_attack_effect(enemy, victims[-1])

    def step_enemy_phase(self) -> Optional[EnemyAction]:
        """Plan and commit one enemy action; end the phase when none is left."""
        action = self.plan_enemy_action()
        if action is None:
            if self.state.phase is Phase.ENEMY_TURN:
                self.finish_enemy_phase()
            return None
        self.commit_enemy_action(action)
        return action

    def run_enemy_phase(self) -> List[EnemyAction]:
        """Run the whole enemy phase with no pacing."""
        actions: List[EnemyAction] = []
        while self.state.phase is Phase.ENEMY_TURN:
            action = self.step_enemy_phase()
            if action is None:
                break
            actions.append(action)
        return actions

    def finish_enemy_phase(self) -> None:
        """Back to the player: next turn, fresh flags, full player pool."""
        state = self.state
        if state.phase is not Phase.ENEMY_TURN:
            return
        state.enemy_preview = None
        state.pending_retreat_id = None
        state.turn += 1
        state.player_ap = state.player_ap_max
        for u in state.live_units():
            u.reset_turn()
        self._set_phase(Phase.PLAYER_TURN)

        if state.survive_turns is not None and state.turn > state.survive_turns:
            self._end_battle(Phase.VICTORY, reason=f"survived {state.survive_turns} turns")
        else:
            self.check_game_state()

    # ------------ Victory / defeat ------------

    def check_game_state(self) -> Phase:
        state = self.state
        if state.phase.is_terminal:
            return state.phase

        if not state.player_units:
            self._end_battle(Phase.DEFEAT, reason="no player units left")
        elif state.is_boss_level:
            if not state.bosses:
                self._end_battle(Phase.VICTORY, reason="boss defeated")
        elif not state.enemy_units:
            self._end_battle(Phase.VICTORY, reason="all enemies eliminated")
        return state.phase

    def _set_phase(self, phase: Phase) -> None:
        previous = self.state.phase
        self.state.phase = phase
        log.info(f"Turn {self.state.turn}: {previous.value} -> {phase.value}")
        telemetry.log("phase_change", turn=self.state.turn, previous=previous.value, phase=phase.value)

    def _end_battle(self, phase: Phase, reason: str) -> None:
        state = self.state
        state.clear_selection()
        state.enemy_preview = None
        state.pending_retreat_id = None
        self._set_phase(phase)
        result = score_result(state)
        log.info(f"Battle over: {phase.value} ({reason}), score {result.score}")
        telemetry.log(
            "battle_end",
            outcome=phase.value,
            reason=reason,
            turns=result.turns,
            score=result.score,
            units_lost=result.units_lost,
        )
