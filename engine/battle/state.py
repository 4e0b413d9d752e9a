"""
Battle state aggregate.

One BattleState per level load. It is owned by whoever built it and handed
explicitly to the turn engine and the AI; there is no module-level battle.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from settings import PLAYER_ACTION_POINTS, ENEMY_ACTION_POINTS
from world.board import Board
from engine.battle.queries import unit_at
from engine.battle.types import AttackEffect, BattleUnit, Coord, EnemyAction, Phase, Side


@dataclass
class BattleState:
    board: Board
    units: List[BattleUnit] = field(default_factory=list)

    phase: Phase = Phase.PLAYER_TURN
    turn: int = 1

    player_ap: int = PLAYER_ACTION_POINTS
    player_ap_max: int = PLAYER_ACTION_POINTS
    enemy_ap: int = 0
    enemy_ap_max: int = ENEMY_ACTION_POINTS

    is_boss_level: bool = False
    survive_turns: Optional[int] = None
    # False for scripted scenarios whose enemies never act.
    enemies_act: bool = True
    name: str = ""

    selected_unit_id: Optional[str] = None
    valid_moves: List[Coord] = field(default_factory=list)
    attack_range: List[Coord] = field(default_factory=list)

    total_ap_spent: int = 0
    units_lost: List[str] = field(default_factory=list)

    # Presentation side channels
    last_attack_effect: Optional[AttackEffect] = None
    enemy_preview: Optional[EnemyAction] = None
    # Boss owed a free retreat step before the next enemy action.
    pending_retreat_id: Optional[str] = None

    # ------------ Roster queries ------------

    def live_units(self, side: Optional[Side] = None) -> List[BattleUnit]:
        return [
            u for u in self.units
            if u.is_alive and (side is None or u.side == side)
        ]

    @property
    def player_units(self) -> List[BattleUnit]:
        return self.live_units("player")

    @property
    def enemy_units(self) -> List[BattleUnit]:
        return self.live_units("enemy")

    def get_unit(self, unit_id: Optional[str]) -> Optional[BattleUnit]:
        """Live unit with this id, or None."""
        if unit_id is None:
            return None
        for u in self.units:
            if u.id == unit_id and u.is_alive:
                return u
        return None

    def unit_at(self, x: int, y: int) -> Optional[BattleUnit]:
        return unit_at(self.units, x, y)

    def assigned_target(self, unit: BattleUnit) -> Optional[BattleUnit]:
        """The unit's assigned target if it is still alive."""
        return self.get_unit(unit.assigned_target_id)

    @property
    def selected_unit(self) -> Optional[BattleUnit]:
        return self.get_unit(self.selected_unit_id)

    @property
    def bosses(self) -> List[BattleUnit]:
        return [u for u in self.enemy_units if u.is_boss]

    # ------------ Mutation helpers ------------

    def clear_selection(self) -> None:
        for u in self.units:
            u.selected = False
        self.selected_unit_id = None
        self.valid_moves = []
        self.attack_range = []

    def remove_unit(self, unit: BattleUnit) -> None:
        """Drop a unit from the live roster, recording player losses."""
        if unit.is_player:
            self.units_lost.append(unit.archetype or "pawn")
        self.units = [u for u in self.units if u.id != unit.id]
        if self.selected_unit_id == unit.id:
            self.clear_selection()

    # ------------ Rendering snapshot ------------

    def snapshot(self) -> dict:
        return {
            "name": self.name,
            "board": self.board.snapshot(),
            "units": [u.snapshot() for u in self.live_units()],
            "phase": self.phase.value,
            "turn": self.turn,
            "player_ap": self.player_ap,
            "player_ap_max": self.player_ap_max,
            "enemy_ap": self.enemy_ap,
            "enemy_ap_max": self.enemy_ap_max,
            "is_boss_level": self.is_boss_level,
            "selected_unit_id": self.selected_unit_id,
            "valid_moves": list(self.valid_moves),
            "attack_range": list(self.attack_range),
            "total_ap_spent": self.total_ap_spent,
            "units_lost": list(self.units_lost),
        }
