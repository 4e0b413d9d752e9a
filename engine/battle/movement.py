"""
Chess-derived movement rules.

Pure functions mapping (archetype, position, board size, obstacle grid) to
the list of reachable tiles. Occupancy, side and line-of-sight filtering
happen in the turn engine, not here.

The obstacle grid is row-major: grid[y][x] is truthy where an obstacle stands.
"""

from typing import Callable, Dict, List, Sequence, Tuple

from systems.pieces import normalize_archetype

Coord = Tuple[int, int]
ObstacleGrid = Sequence[Sequence[bool]]
MoveRule = Callable[[int, int, int, int, ObstacleGrid], List[Coord]]

ORTHOGONAL_DIRECTIONS: Tuple[Coord, ...] = ((0, -1), (0, 1), (-1, 0), (1, 0))
DIAGONAL_DIRECTIONS: Tuple[Coord, ...] = ((-1, -1), (1, -1), (-1, 1), (1, 1))
KNIGHT_OFFSETS: Tuple[Coord, ...] = (
    (-2, -1), (-2, 1),
    (-1, -2), (-1, 2),
    (1, -2), (1, 2),
    (2, -1), (2, 1),
)
KING_OFFSETS: Tuple[Coord, ...] = (
    (-1, -1), (0, -1), (1, -1),
    (-1, 0),           (1, 0),
    (-1, 1),  (0, 1),  (1, 1),
)


def _in_bounds(x: int, y: int, width: int, height: int) -> bool:
    return 0 <= x < width and 0 <= y < height


def _offsets(x: int, y: int, width: int, height: int, offsets: Sequence[Coord]) -> List[Coord]:
    return [
        (x + dx, y + dy)
        for dx, dy in offsets
        if _in_bounds(x + dx, y + dy, width, height)
    ]


def cast_rays(
    x: int,
    y: int,
    width: int,
    height: int,
    grid: ObstacleGrid,
    directions: Sequence[Coord],
) -> List[Coord]:
    """
    Walk each direction until the board edge.

    The first obstacle tile on a ray is included and the ray stops there.
    """
    tiles: List[Coord] = []
    for dx, dy in directions:
        nx, ny = x + dx, y + dy
        while _in_bounds(nx, ny, width, height):
            tiles.append((nx, ny))
            if grid[ny][nx]:
                break
            nx += dx
            ny += dy
    return tiles


def pawn_moves(x: int, y: int, width: int, height: int, grid: ObstacleGrid) -> List[Coord]:
    """One step up or down the column onto an obstacle-free tile."""
    moves: List[Coord] = []
    for dy in (-1, 1):
        ny = y + dy
        if 0 <= ny < height and not grid[ny][x]:
            moves.append((x, ny))
    return moves


def pawn_attacks(x: int, y: int, width: int, height: int, grid: ObstacleGrid) -> List[Coord]:
    """All four diagonal neighbours, regardless of what stands there."""
    return _offsets(x, y, width, height, DIAGONAL_DIRECTIONS)


def rook_moves(x: int, y: int, width: int, height: int, grid: ObstacleGrid) -> List[Coord]:
    return cast_rays(x, y, width, height, grid, ORTHOGONAL_DIRECTIONS)


def bishop_moves(x: int, y: int, width: int, height: int, grid: ObstacleGrid) -> List[Coord]:
    return cast_rays(x, y, width, height, grid, DIAGONAL_DIRECTIONS)


def knight_moves(x: int, y: int, width: int, height: int, grid: ObstacleGrid) -> List[Coord]:
    # Knights jump: only the board edge limits them.
    return _offsets(x, y, width, height, KNIGHT_OFFSETS)


def queen_moves(x: int, y: int, width: int, height: int, grid: ObstacleGrid) -> List[Coord]:
    return rook_moves(x, y, width, height, grid) + bishop_moves(x, y, width, height, grid)


def king_moves(x: int, y: int, width: int, height: int, grid: ObstacleGrid) -> List[Coord]:
    return _offsets(x, y, width, height, KING_OFFSETS)


MOVE_RULES: Dict[str, MoveRule] = {
    "pawn": pawn_moves,
    "rook": rook_moves,
    "bishop": bishop_moves,
    "knight": knight_moves,
    "queen": queen_moves,
    "king": king_moves,
}

# Only the pawn attacks differently from how it moves.
ATTACK_RULES: Dict[str, MoveRule] = {**MOVE_RULES, "pawn": pawn_attacks}


def get_moves(archetype: str, x: int, y: int, width: int, height: int, grid: ObstacleGrid) -> List[Coord]:
    """Move destinations before occupancy filtering. Unknown archetypes cannot move."""
    rule = MOVE_RULES.get(normalize_archetype(archetype))
    if rule is None:
        return []
    return rule(x, y, width, height, grid)


def get_attack_range(archetype: str, x: int, y: int, width: int, height: int, grid: ObstacleGrid) -> List[Coord]:
    """Attackable tiles before occupancy, side and line-of-sight filtering."""
    rule = ATTACK_RULES.get(normalize_archetype(archetype))
    if rule is None:
        return []
    return rule(x, y, width, height, grid)


def diagonal_parity(x: int, y: int) -> int:
    """Square colour: 0 or 1."""
    return (x + y) % 2
