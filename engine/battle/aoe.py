"""
Area of Effect (AoE) helper module.

Boss-only abilities: the rook/queen blast on all adjacent tiles and the
king's cardinal line attack.
"""

from typing import Iterable, List, Tuple

from world.board import Board
from engine.battle.movement import KING_OFFSETS, ORTHOGONAL_DIRECTIONS
from engine.battle.queries import unit_at
from engine.battle.types import BattleUnit

BLAST_ARCHETYPES = frozenset({"rook", "queen"})
LINE_ATTACK_ARCHETYPES = frozenset({"king"})


def adjacent_tiles(x: int, y: int) -> List[Tuple[int, int]]:
    """All 8 tiles around (x, y); may include off-board coordinates."""
    return [(x + dx, y + dy) for dx, dy in KING_OFFSETS]


def get_blast_victims(center: BattleUnit, units: Iterable[BattleUnit]) -> List[BattleUnit]:
    """Live player units on the 8 tiles around the blasting unit."""
    around = set(adjacent_tiles(center.x, center.y))
    return [u for u in units if u.is_player and u.is_alive and u.position in around]


def scan_line(board: Board, units: List[BattleUnit], x: int, y: int, dx: int, dy: int) -> List[BattleUnit]:
    """Every live unit along one ray from (x, y), stopping at the first obstacle."""
    hit: List[BattleUnit] = []
    nx, ny = x + dx, y + dy
    while board.is_valid_position(nx, ny):
        if board.has_obstacle(nx, ny):
            break
        u = unit_at(units, nx, ny)
        if u is not None:
            hit.append(u)
        nx += dx
        ny += dy
    return hit


def get_line_attack_victims(board: Board, attacker: BattleUnit, units: Iterable[BattleUnit]) -> List[BattleUnit]:
    """
    Pick the cardinal ray holding the most units, among rays that contain at
    least one player unit. Earlier directions win ties (up, down, left, right).

    Everything on that ray is hit, allies of the attacker included.
    """
    units = list(units)
    best: List[BattleUnit] = []
    for dx, dy in ORTHOGONAL_DIRECTIONS:
        line = scan_line(board, units, attacker.x, attacker.y, dx, dy)
        if any(u.is_player for u in line) and len(line) > len(best):
            best = line
    return best
