"""
Scenario construction.

Turns level definitions into ready-to-play BattleState objects:
- ScenarioSpec / UnitSpec: board parameters and rosters with spawn tiles
- pick_spawns: centre-first spawn placement for rosters
- chess_formation_enemies: full chess starting rows for the enemy
- tutorial_scenario: the three scripted training pages
- LEVELS / load_level: the built-in level table
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from world.board import Board, Coord, generate_level, is_pawn_spawn_valid
from engine.config import EngineConfig, get_config
from engine.error_handler import get_logger
from engine.battle.state import BattleState
from engine.battle.types import BattleUnit, Side
from systems.bosses import BossSpec, designate_boss, get_boss
from systems.pieces import is_known_archetype, normalize_archetype

log = get_logger("scenarios")

CHESS_BACK_ROW = ("rook", "knight", "bishop", "queen", "king", "bishop", "knight", "rook")


@dataclass(frozen=True)
class UnitSpec:
    archetype: str
    x: int
    y: int
    can_attack: bool = True


@dataclass
class ScenarioSpec:
    """
    Everything needed to build a battle.

    The board is regenerated from (width, height, difficulty, seed, shape),
    so spawn tiles picked against a seeded board stay valid.
    """
    name: str
    width: int
    height: int
    difficulty: float = 0
    seed: Optional[int] = None
    shape: str = "normal"
    players: List[UnitSpec] = field(default_factory=list)
    enemies: List[UnitSpec] = field(default_factory=list)
    boss: Optional[BossSpec] = None
    survive_turns: Optional[int] = None
    enemies_act: bool = True
    extra_obstacles: List[Coord] = field(default_factory=list)


@dataclass(frozen=True)
class LevelDef:
    """One row of the built-in level table."""
    name: str
    width: int
    height: int
    difficulty: int
    shape: str
    player_roster: Tuple[str, ...]
    enemy_roster: Tuple[str, ...] = ()
    boss_id: Optional[str] = None
    chess_formation: bool = False


# ------------ Battle building ------------

def _make_units(specs: Sequence[UnitSpec], side: Side, board: Board) -> List[BattleUnit]:
    units: List[BattleUnit] = []
    for i, spec in enumerate(specs):
        if not board.is_valid_position(spec.x, spec.y):
            log.warning(f"Skipping {side} {spec.archetype} at {(spec.x, spec.y)}: off the board")
            continue
        if not is_known_archetype(spec.archetype):
            log.warning(f"Unknown archetype {spec.archetype!r} for {side}_{i}; using default stats")
        units.append(BattleUnit(
            id=f"{side}_{i}",
            archetype=normalize_archetype(spec.archetype),
            side=side,
            x=spec.x,
            y=spec.y,
            can_attack=spec.can_attack,
        ))
    return units


def build_battle(spec: ScenarioSpec, config: Optional[EngineConfig] = None) -> BattleState:
    """
    Build the battle state for a scenario.

    The level counts as a boss level only if a boss was actually placed;
    enemy AP is then the boss pool instead of the regular one.

    Raises:
        ValidationError: Non-positive board size or unknown shape
    """
    config = config or get_config()
    board = generate_level(spec.width, spec.height, spec.difficulty, spec.seed, spec.shape)
    for x, y in spec.extra_obstacles:
        board.add_obstacle(x, y)

    players = _make_units(spec.players, "player", board)
    enemies = _make_units(spec.enemies, "enemy", board)

    boss = designate_boss(enemies, spec.boss) if spec.boss is not None else None
    is_boss_level = boss is not None

    state = BattleState(
        board=board,
        units=players + enemies,
        player_ap=config.player_ap_max,
        player_ap_max=config.player_ap_max,
        enemy_ap_max=config.enemy_ap_for(is_boss_level),
        is_boss_level=is_boss_level,
        survive_turns=spec.survive_turns,
        enemies_act=spec.enemies_act,
        name=spec.name,
    )
    log.info(
        f"Built battle {spec.name!r}: {spec.width}x{spec.height} {spec.shape}, "
        f"{len(players)} vs {len(enemies)}{' (boss)' if is_boss_level else ''}"
    )
    return state


# ------------ Spawn picking ------------

def _zone_slots(board: Board, rows: Sequence[int], is_player: bool) -> Tuple[List[Coord], List[Coord]]:
    """Split a spawn zone into pawn slots and other slots, centre columns first."""
    center_x = (board.width - 1) / 2
    cells = [
        (x, y) for y in rows for x in range(board.width)
        if 0 <= y < board.height and not board.has_obstacle(x, y)
    ]
    pawn_slots = [c for c in cells if is_pawn_spawn_valid(board, c[0], c[1], is_player)]
    other_slots = [c for c in cells if c not in pawn_slots]

    def dist(c: Coord) -> float:
        return (c[0] - center_x) ** 2

    return sorted(pawn_slots, key=dist), sorted(other_slots, key=dist)


def _fill_roster(roster: Sequence[str], pawn_slots: List[Coord], other_slots: List[Coord]) -> List[UnitSpec]:
    placed: List[UnitSpec] = []
    pawn_idx = other_idx = 0
    for archetype in roster:
        if archetype == "pawn" and pawn_idx < len(pawn_slots):
            slot = pawn_slots[pawn_idx]
            pawn_idx += 1
        elif other_idx < len(other_slots):
            slot = other_slots[other_idx]
            other_idx += 1
        elif pawn_idx < len(pawn_slots):
            slot = pawn_slots[pawn_idx]
            pawn_idx += 1
        else:
            log.warning(f"No spawn slot left for {archetype}")
            continue
        placed.append(UnitSpec(archetype, slot[0], slot[1]))
    return placed


def pick_spawns(
    board: Board,
    player_roster: Sequence[str],
    enemy_roster: Sequence[str],
) -> Tuple[List[UnitSpec], List[UnitSpec]]:
    """
    Place rosters in their spawn zones: players in the bottom two rows,
    enemies in the top two. Pawns take tiles whose forward tile is open.

    Returns:
        (player specs, enemy specs)
    """
    h = board.height
    player_pawns, player_other = _zone_slots(board, (h - 1, h - 2), is_player=True)
    enemy_pawns, enemy_other = _zone_slots(board, (0, 1), is_player=False)
    return (
        _fill_roster(player_roster, player_pawns, player_other),
        _fill_roster(enemy_roster, enemy_pawns, enemy_other),
    )


def chess_formation_enemies(board: Board) -> List[UnitSpec]:
    """Back row on row 0, eight pawns on row 1. Boards narrower than 8 get none."""
    if board.width < len(CHESS_BACK_ROW):
        return []
    enemies = [
        UnitSpec(archetype, x, 0)
        for x, archetype in enumerate(CHESS_BACK_ROW)
        if not board.has_obstacle(x, 0)
    ]
    enemies.extend(
        UnitSpec("pawn", x, 1)
        for x in range(len(CHESS_BACK_ROW))
        if not board.has_obstacle(x, 1)
    )
    return enemies


# ------------ Tutorial ------------

TUTORIAL_PAGE_NAMES = ("Close Range Combat", "Ranged Combat", "Defend")

DEFEND_OBSTACLES: List[Coord] = [(2, 2), (4, 2), (3, 3), (5, 3), (2, 4), (4, 4)]


def tutorial_scenario(page: int) -> Optional[ScenarioSpec]:
    """Scripted training page, or None for an unknown page."""
    if page == 0:
        return ScenarioSpec(
            name=TUTORIAL_PAGE_NAMES[0],
            width=6,
            height=6,
            shape="tutorial",
            players=[UnitSpec("pawn", 2, 5)],
            enemies=[UnitSpec("pawn", 3, 4)],
            enemies_act=False,
        )
    if page == 1:
        return ScenarioSpec(
            name=TUTORIAL_PAGE_NAMES[1],
            width=8,
            height=6,
            shape="tutorial",
            players=[UnitSpec("knight", 2, 5)],
            enemies=[UnitSpec("knight", 4, 3)],
            enemies_act=False,
        )
    if page == 2:
        # The rook only moves; obstacles give it places to break the knights' reach.
        return ScenarioSpec(
            name=TUTORIAL_PAGE_NAMES[2],
            width=8,
            height=6,
            shape="tutorial",
            players=[UnitSpec("rook", 4, 5, can_attack=False)],
            enemies=[UnitSpec("knight", 1, 0), UnitSpec("knight", 6, 0)],
            survive_turns=5,
            extra_obstacles=list(DEFEND_OBSTACLES),
        )
    return None


# ---------------------------------------------------------------------------
# Level Table
# ---------------------------------------------------------------------------

LEVELS: Tuple[LevelDef, ...] = (
    LevelDef("The Knight's Trial", 8, 6, 0, "arena",
             ("pawn", "pawn", "knight"),
             ("knight", "pawn", "pawn"), boss_id="rourke"),
    LevelDef("First Steps", 9, 7, 1, "normal",
             ("pawn", "knight"),
             ("pawn", "pawn", "pawn", "knight", "knight")),
    LevelDef("Reinforcements", 11, 8, 1, "normal",
             ("pawn", "knight", "bishop"),
             ("pawn", "pawn", "knight", "knight", "bishop", "pawn")),
    LevelDef("The Bishop's Gambit", 10, 8, 2, "arena",
             ("pawn", "knight", "bishop"),
             ("bishop", "pawn", "pawn", "knight"), boss_id="valdris"),
    LevelDef("Hold the Line", 13, 9, 2, "normal",
             ("pawn", "pawn", "knight", "bishop"),
             ("pawn", "pawn", "pawn", "knight", "knight", "bishop", "bishop")),
    LevelDef("Heavy Support", 15, 10, 2, "normal",
             ("pawn", "pawn", "knight", "bishop", "rook"),
             ("pawn", "pawn", "pawn", "knight", "bishop", "bishop", "rook", "pawn")),
    LevelDef("Tower's Wrath", 12, 9, 3, "arena",
             ("pawn", "pawn", "knight", "bishop", "rook"),
             ("rook", "rook", "bishop", "pawn", "pawn", "knight"), boss_id="torvald"),
    LevelDef("Royal Power", 17, 11, 3, "normal",
             ("pawn", "pawn", "knight", "bishop", "rook", "queen"),
             ("pawn", "pawn", "pawn", "knight", "bishop", "rook", "rook", "queen", "pawn")),
    LevelDef("Crown Guard", 19, 12, 3, "normal",
             ("pawn", "pawn", "knight", "bishop", "rook", "queen", "king"),
             ("pawn", "pawn", "pawn", "knight", "bishop", "rook", "queen", "queen", "king", "pawn")),
    LevelDef("The Queen's Fury", 14, 10, 4, "arena",
             ("pawn", "pawn", "knight", "bishop", "rook", "queen", "king"),
             ("queen", "rook", "bishop", "knight", "pawn", "pawn"), boss_id="morana"),
    LevelDef("The King's Decree", 8, 10, 5, "normal",
             ("pawn", "pawn", "knight", "bishop", "rook", "queen", "king"),
             boss_id="aldric", chess_formation=True),
)


def level_count() -> int:
    return len(LEVELS)


def load_level(number: int) -> Optional[ScenarioSpec]:
    """
    Scenario for a 1-based level number, or None if there is no such level.

    The board is seeded with the level number, so a level always plays on
    the same layout.
    """
    if not 1 <= number <= len(LEVELS):
        log.debug(f"No level {number}")
        return None
    level = LEVELS[number - 1]
    board = generate_level(level.width, level.height, level.difficulty, number, level.shape)

    if level.chess_formation:
        players, _ = pick_spawns(board, level.player_roster, ())
        enemies = chess_formation_enemies(board)
    else:
        players, enemies = pick_spawns(board, level.player_roster, level.enemy_roster)

    return ScenarioSpec(
        name=level.name,
        width=level.width,
        height=level.height,
        difficulty=level.difficulty,
        seed=number,
        shape=level.shape,
        players=players,
        enemies=enemies,
        boss=get_boss(level.boss_id) if level.boss_id else None,
    )
