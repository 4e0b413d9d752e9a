"""
Occupancy and line-of-sight queries.

Shared by player input validation and the enemy AI. All queries ignore dead
units.
"""

import math
from typing import Iterable, Iterator, Optional, Set

from systems.pieces import is_ranged
from world.board import Board
from engine.battle.types import BattleUnit, Coord


def unit_at(units: Iterable[BattleUnit], x: int, y: int) -> Optional[BattleUnit]:
    """First live unit standing on (x, y), or None."""
    for u in units:
        if u.x == x and u.y == y and u.is_alive:
            return u
    return None


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def line_between(a: Coord, b: Coord) -> Iterator[Coord]:
    """
    Tiles strictly between a and b.

    Samples Chebyshev-distance steps along the straight segment and rounds
    each sample to the nearest tile (halves round up). Endpoints excluded.
    """
    ax, ay = a
    bx, by = b
    dx = bx - ax
    dy = by - ay
    steps = max(abs(dx), abs(dy))
    if steps <= 1:
        return
    step_x = dx / steps
    step_y = dy / steps
    for i in range(1, steps):
        yield (_round_half_up(ax + step_x * i), _round_half_up(ay + step_y * i))


def has_line_of_sight(board: Board, a: Coord, b: Coord) -> bool:
    """True if no obstacle lies strictly between a and b."""
    return not any(board.has_obstacle(x, y) for x, y in line_between(a, b))


def has_unit_in_between(units: Iterable[BattleUnit], a: Coord, b: Coord) -> bool:
    """True if a live unit stands strictly between a and b."""
    units = list(units)
    return any(unit_at(units, x, y) is not None for x, y in line_between(a, b))


def attackable_tiles(board: Board, unit: BattleUnit, grid=None) -> Set[Coord]:
    """
    Tiles this unit could strike, with line of sight applied for ranged pieces.

    Occupancy and side are not checked.
    """
    if grid is None:
        grid = board.obstacle_grid()
    tiles = unit.attack_range(board.width, board.height, grid)
    if is_ranged(unit.archetype):
        return {t for t in tiles if has_line_of_sight(board, unit.position, t)}
    return set(tiles)


def threatened_tiles(board: Board, units: Iterable[BattleUnit]) -> Set[Coord]:
    """Union of attackable tiles over every live player unit."""
    grid = board.obstacle_grid()
    threatened: Set[Coord] = set()
    for u in units:
        if u.is_player and u.is_alive:
            threatened |= attackable_tiles(board, u, grid)
    return threatened
