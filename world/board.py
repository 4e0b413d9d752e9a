# world/board.py

import math
import random
from typing import Callable, List, Optional, Set, Tuple

from settings import (
    TILE_SIZE,
    LCG_MULTIPLIER,
    LCG_INCREMENT,
    LCG_MASK,
    SPAWN_ROWS,
    OBSTACLE_BASE_FRACTION,
    OBSTACLE_FRACTION_PER_DIFFICULTY,
    OBSTACLE_MAX_FRACTION,
    OBSTACLE_MIN_COUNT,
    OBSTACLE_ATTEMPTS_PER_TARGET,
    COVER_BASE_FRACTION,
    COVER_FRACTION_PER_DIFFICULTY,
    COVER_MAX_FRACTION,
)
from engine.error_handler import ValidationError, get_logger

Coord = Tuple[int, int]

BOARD_SHAPES = ("normal", "arena", "tutorial")

log = get_logger("world.board")


def seeded_random(seed: int) -> Callable[[], float]:
    """
    Linear-congruential stream of floats in [0, 1].

    The same seed always yields the same sequence, so restarting a level
    reproduces its layout.
    """
    state = int(seed)

    def _next() -> float:
        nonlocal state
        # Product and sum are taken in double precision before masking;
        # existing seeds map to their layouts through this exact rounding.
        state = int(float(state) * LCG_MULTIPLIER + LCG_INCREMENT) & LCG_MASK
        return state / LCG_MASK

    return _next


class Board:
    """
    Rectangular battle grid with impassable obstacles and cover tiles.

    Obstacles block movement, rays and line of sight. Cover is a marker the
    renderer shows; the rules engine does not read it.
    """

    def __init__(self, width: int, height: int, tile_size: int = TILE_SIZE) -> None:
        if width <= 0 or height <= 0:
            raise ValidationError(f"Board dimensions must be positive, got {width}x{height}")
        self.width: int = width
        self.height: int = height
        self.tile_size: int = tile_size
        self.obstacles: Set[Coord] = set()
        self.cover: Set[Coord] = set()

    # ------------------------------------------------------------------
    # Tile helpers
    # ------------------------------------------------------------------

    def is_valid_position(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def has_obstacle(self, x: int, y: int) -> bool:
        return (x, y) in self.obstacles

    def has_cover(self, x: int, y: int) -> bool:
        return (x, y) in self.cover

    def add_obstacle(self, x: int, y: int) -> None:
        if self.is_valid_position(x, y):
            self.obstacles.add((x, y))

    def add_cover(self, x: int, y: int) -> None:
        if self.is_valid_position(x, y):
            self.cover.add((x, y))

    def obstacle_grid(self) -> List[List[bool]]:
        """Row-major obstacle grid: grid[y][x] is True where an obstacle stands."""
        grid = [[False] * self.width for _ in range(self.height)]
        for x, y in self.obstacles:
            grid[y][x] = True
        return grid

    def snapshot(self) -> dict:
        return {
            "width": self.width,
            "height": self.height,
            "tile_size": self.tile_size,
            "obstacles": sorted(self.obstacles),
            "cover": sorted(self.cover),
        }


def spawn_zone_forbidden(width: int, height: int) -> Set[Coord]:
    """Top two rows (enemy) and bottom two rows (player): never obstacles or cover."""
    rows = {0, 1, height - 2, height - 1}
    return {(x, y) for x in range(width) for y in rows if 0 <= y < height}


def middle_band(height: int) -> Tuple[int, int]:
    """Inclusive row range where obstacles may be placed; empty when top > bottom."""
    return SPAWN_ROWS, height - SPAWN_ROWS - 1


def generate_level(
    width: int,
    height: int,
    difficulty: float = 1,
    seed: Optional[int] = None,
    shape: str = "normal",
) -> Board:
    """
    Generate a board layout.

    - "tutorial": empty board
    - "arena": walls down the left/right columns of the middle band, then
      random obstacles
    - "normal": random obstacles and cover in the middle band only

    Obstacle target is 6% of the playable area at difficulty 0, +2% per
    difficulty step, capped at 18% (minimum 2). Placement stops after
    4x the target number of attempts even if under-filled.

    Args:
        width, height: Board size in tiles
        difficulty: Scales obstacle and cover density
        seed: Deterministic layout when given; None uses an unseeded stream
        shape: One of BOARD_SHAPES

    Returns:
        The generated Board
    """
    if shape not in BOARD_SHAPES:
        raise ValidationError(f"Unknown board shape: {shape!r}")

    board = Board(width, height)
    if shape == "tutorial":
        return board

    rnd = seeded_random(seed) if seed is not None else random.Random().random
    difficulty = difficulty or 0

    top, bottom = middle_band(height)
    playable_rows = max(0, bottom - top + 1)
    playable_area = playable_rows * width

    if shape == "arena" and width > 2:
        for y in range(top, bottom + 1):
            board.add_obstacle(0, y)
            board.add_obstacle(width - 1, y)

    target_fraction = min(
        OBSTACLE_MAX_FRACTION,
        OBSTACLE_BASE_FRACTION + difficulty * OBSTACLE_FRACTION_PER_DIFFICULTY,
    )
    obstacle_count = min(
        max(OBSTACLE_MIN_COUNT, math.floor(playable_area * target_fraction)),
        max(OBSTACLE_MIN_COUNT, math.floor(playable_area * OBSTACLE_MAX_FRACTION)),
    )

    placed = 0
    max_attempts = obstacle_count * OBSTACLE_ATTEMPTS_PER_TARGET
    for _ in range(max_attempts):
        if placed >= obstacle_count:
            break
        x = math.floor(rnd() * width)
        y = top + math.floor(rnd() * playable_rows)
        if y > bottom or x >= width:
            continue
        if not board.has_obstacle(x, y):
            board.add_obstacle(x, y)
            placed += 1

    cover_fraction = min(
        COVER_MAX_FRACTION,
        COVER_BASE_FRACTION + difficulty * COVER_FRACTION_PER_DIFFICULTY,
    )
    cover_count = min(
        math.floor(playable_area * cover_fraction),
        max(0, playable_area - len(board.obstacles) - 1),
    )
    for _ in range(cover_count):
        x = math.floor(rnd() * width)
        y = top + math.floor(rnd() * playable_rows)
        if y > bottom or x >= width:
            continue
        if not board.has_obstacle(x, y) and not board.has_cover(x, y):
            board.add_cover(x, y)

    log.debug(
        f"Generated {shape} board {width}x{height} (difficulty={difficulty}, seed={seed}): "
        f"{len(board.obstacles)} obstacles, {len(board.cover)} cover"
    )
    return board


def is_pawn_spawn_valid(board: Board, x: int, y: int, is_player_unit: bool) -> bool:
    """A pawn may spawn here only if its forward tile is on the board and obstacle-free."""
    forward_y = y - 1 if is_player_unit else y + 1
    if forward_y < 0 or forward_y >= board.height:
        return False
    return not board.has_obstacle(x, forward_y)
