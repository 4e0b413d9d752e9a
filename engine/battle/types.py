"""
Battle type definitions.

Contains dataclasses and type aliases used throughout the battle system.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Literal, List, Optional, Tuple

from systems.pieces import get_piece_stats, normalize_archetype
from engine.battle.movement import (
    Coord,
    ObstacleGrid,
    get_moves,
    get_attack_range,
    diagonal_parity,
)


# Type aliases
Side = Literal["player", "enemy"]
AttackStyle = Literal["melee", "ranged", "area"]
EnemyActionKind = Literal[
    "color_switch",
    "area_blast",
    "line_attack",
    "attack",
    "move",
    "retreat",
]


class Phase(Enum):
    PLAYER_TURN = "player_turn"
    ENEMY_TURN = "enemy_turn"
    VICTORY = "victory"
    DEFEAT = "defeat"

    @property
    def is_terminal(self) -> bool:
        return self in (Phase.VICTORY, Phase.DEFEAT)


@dataclass
class BattleUnit:
    """
    One combatant on the grid.

    Stats come from the archetype table unless passed explicitly (boss
    upgrades overwrite them after construction). A unit with health 0 is
    dead and is removed from the live roster by the turn engine.
    """
    id: str
    archetype: str
    side: Side
    x: int
    y: int

    health: int = -1
    max_health: int = -1
    attack: int = -1
    defense: int = -1
    # Per-unit AP from the archetype table. Kept for display only; actions
    # are gated by the shared pools on BattleState.
    action_points_max: int = -1

    has_moved: bool = False
    has_acted: bool = False
    has_done_free_color_switch: bool = False
    has_done_free_retreat: bool = False

    can_attack: bool = True
    selected: bool = False

    is_boss: bool = False
    boss_display_name: Optional[str] = None

    # Enemy-only, recomputed every enemy phase. Stored as an id and resolved
    # against the live roster on every read.
    assigned_target_id: Optional[str] = None

    shadow_bishop: bool = False
    bishop_diagonal_parity: Optional[int] = None

    def __post_init__(self) -> None:
        self.archetype = normalize_archetype(self.archetype)
        stats = get_piece_stats(self.archetype)
        if self.max_health < 0:
            self.max_health = stats.health
        if self.health < 0:
            self.health = self.max_health
        if self.attack < 0:
            self.attack = stats.attack
        if self.defense < 0:
            self.defense = stats.defense
        if self.action_points_max < 0:
            self.action_points_max = stats.action_points

    # ------------ State helpers ------------

    @property
    def is_alive(self) -> bool:
        return self.health > 0

    @property
    def is_player(self) -> bool:
        return self.side == "player"

    @property
    def position(self) -> Coord:
        return (self.x, self.y)

    @property
    def move_cost(self) -> int:
        return get_piece_stats(self.archetype).move_cost

    @property
    def attack_cost(self) -> int:
        return get_piece_stats(self.archetype).attack_cost

    @property
    def diagonal_parity(self) -> int:
        return diagonal_parity(self.x, self.y)

    @property
    def is_shadow_bishop(self) -> bool:
        return self.shadow_bishop and self.archetype == "bishop"

    @property
    def display_name(self) -> str:
        return self.boss_display_name or self.archetype.capitalize()

    def reset_turn(self) -> None:
        self.has_moved = False
        self.has_acted = False
        self.has_done_free_color_switch = False
        self.has_done_free_retreat = False

    # ------------ Movement ------------

    def valid_moves(self, width: int, height: int, grid: ObstacleGrid) -> List[Coord]:
        moves = get_moves(self.archetype, self.x, self.y, width, height, grid)
        if self.is_shadow_bishop:
            # Normal moves keep the shadow bishop on its square colour;
            # switching colour is the free step handled by the AI.
            own = self.diagonal_parity
            moves = [m for m in moves if diagonal_parity(*m) == own]
        return moves

    def attack_range(self, width: int, height: int, grid: ObstacleGrid) -> List[Coord]:
        tiles = get_attack_range(self.archetype, self.x, self.y, width, height, grid)
        if self.is_shadow_bishop and self.bishop_diagonal_parity is not None:
            parity = self.bishop_diagonal_parity
            tiles = [t for t in tiles if diagonal_parity(*t) == parity]
        return tiles

    def snapshot(self) -> dict:
        return {
            "id": self.id,
            "archetype": self.archetype,
            "side": self.side,
            "x": self.x,
            "y": self.y,
            "health": self.health,
            "max_health": self.max_health,
            "attack": self.attack,
            "defense": self.defense,
            "is_boss": self.is_boss,
            "boss_display_name": self.boss_display_name,
            "selected": self.selected,
        }


@dataclass
class EnemyAction:
    """
    One enemy decision, exposed for preview before it is committed.

    `dest` is set for movement kinds; `target_ids` lists every unit the
    action will hit (one for a plain attack, several for area/line attacks).
    """
    kind: EnemyActionKind
    enemy_id: str
    cost: int = 0
    dest: Optional[Coord] = None
    target_ids: List[str] = field(default_factory=list)
    damage: int = 0
    score: float = 0.0

    @property
    def is_attack(self) -> bool:
        return self.kind in ("area_blast", "line_attack", "attack")

    @property
    def primary_target_id(self) -> Optional[str]:
        return self.target_ids[0] if self.target_ids else None


@dataclass
class AttackEffect:
    """Last attack, for the renderer's projectile/slash/blast effect."""
    attacker_id: str
    target_id: Optional[str]
    style: AttackStyle
    origin: Tuple[int, int]
    impact: Tuple[int, int]
