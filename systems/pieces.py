"""
Chess-piece archetypes.

Fixed stat tables for the six archetypes a unit can be. These are not
configurable; boss upgrades are applied on top by systems.bosses.
"""

from dataclasses import dataclass
from typing import Dict, Tuple


ARCHETYPES: Tuple[str, ...] = ("pawn", "rook", "bishop", "knight", "queen", "king")

# Rook, bishop and queen attack along rays and need a clear line of sight.
RANGED_ARCHETYPES = frozenset({"rook", "bishop", "queen"})


@dataclass(frozen=True)
class PieceStats:
    action_points: int  # per-unit AP; informational, the shared pools gate actions
    health: int
    attack: int
    defense: int
    move_cost: int
    attack_cost: int


PIECE_STATS: Dict[str, PieceStats] = {
    "pawn": PieceStats(action_points=2, health=3, attack=1, defense=0, move_cost=1, attack_cost=1),
    "rook": PieceStats(action_points=3, health=5, attack=2, defense=1, move_cost=2, attack_cost=3),
    "bishop": PieceStats(action_points=3, health=4, attack=2, defense=0, move_cost=2, attack_cost=3),
    "knight": PieceStats(action_points=2, health=4, attack=3, defense=1, move_cost=2, attack_cost=3),
    "queen": PieceStats(action_points=4, health=6, attack=3, defense=1, move_cost=3, attack_cost=4),
    "king": PieceStats(action_points=2, health=5, attack=2, defense=1, move_cost=4, attack_cost=5),
}

DEFAULT_STATS = PieceStats(action_points=2, health=3, attack=1, defense=0, move_cost=2, attack_cost=2)

# Score penalty per lost player unit.
UNIT_VALUES: Dict[str, int] = {
    "pawn": 1,
    "knight": 2,
    "bishop": 2,
    "rook": 3,
    "queen": 5,
    "king": 10,
}
DEFAULT_UNIT_VALUE = 1


def normalize_archetype(archetype: str) -> str:
    return (archetype or "").strip().lower()


def is_known_archetype(archetype: str) -> bool:
    return normalize_archetype(archetype) in PIECE_STATS


def get_piece_stats(archetype: str) -> PieceStats:
    """Stats for an archetype; unknown names get DEFAULT_STATS."""
    return PIECE_STATS.get(normalize_archetype(archetype), DEFAULT_STATS)


def unit_value(archetype: str) -> int:
    return UNIT_VALUES.get(normalize_archetype(archetype), DEFAULT_UNIT_VALUE)


def is_ranged(archetype: str) -> bool:
    return normalize_archetype(archetype) in RANGED_ARCHETYPES
