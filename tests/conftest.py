"""
Pytest configuration and shared fixtures.

This file is automatically discovered by pytest and provides fixtures
available to all test files. None of them need a pygame display.
"""

from typing import Callable, Iterable, Optional, Sequence, Tuple

import pytest

from engine.config import EngineConfig
from engine.battle.state import BattleState
from engine.battle.turns import TurnEngine
from engine.battle.types import BattleUnit
from systems.bosses import BossSpec, apply_boss_upgrade
from systems.scenarios import build_battle, tutorial_scenario
from world.board import Board

UnitTuple = Tuple[str, int, int]


@pytest.fixture
def empty_board() -> Board:
    """
    Create an empty 10x10 board.
    """
    return Board(10, 10)


@pytest.fixture
def engine_config() -> EngineConfig:
    """
    Fresh config with default values, independent of the global instance.
    """
    return EngineConfig()


@pytest.fixture
def tutorial_battle(engine_config) -> BattleState:
    """
    Tutorial page 0: player pawn at (2,5) against an enemy pawn at (3,4).
    """
    return build_battle(tutorial_scenario(0), engine_config)


@pytest.fixture
def make_battle() -> Callable[..., BattleState]:
    """
    Builder for ad-hoc battles.

    Units are (archetype, x, y) tuples and get ids player_<i> / enemy_<i>.
    `boss` upgrades the enemy with that index and turns on boss-level AP.
    """

    def _make(
        players: Sequence[UnitTuple] = (),
        enemies: Sequence[UnitTuple] = (),
        width: int = 8,
        height: int = 8,
        obstacles: Iterable[Tuple[int, int]] = (),
        boss: Optional[int] = None,
        shadow_bishop: bool = False,
        survive_turns: Optional[int] = None,
    ) -> BattleState:
        board = Board(width, height)
        for x, y in obstacles:
            board.add_obstacle(x, y)
        units = [BattleUnit(f"player_{i}", a, "player", x, y) for i, (a, x, y) in enumerate(players)]
        foes = [BattleUnit(f"enemy_{i}", a, "enemy", x, y) for i, (a, x, y) in enumerate(enemies)]
        if boss is not None:
            apply_boss_upgrade(foes[boss], BossSpec(foes[boss].archetype, "Boss", shadow_bishop))
        is_boss_level = boss is not None
        return BattleState(
            board=board,
            units=units + foes,
            is_boss_level=is_boss_level,
            enemy_ap_max=18 if is_boss_level else 12,
            survive_turns=survive_turns,
        )

    return _make


@pytest.fixture
def make_engine(make_battle) -> Callable[..., TurnEngine]:
    """
    Same arguments as make_battle, wrapped in a TurnEngine.
    """

    def _make(**kwargs) -> TurnEngine:
        return TurnEngine(make_battle(**kwargs))

    return _make
