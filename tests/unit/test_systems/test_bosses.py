"""
Unit tests for boss upgrades and designation.
"""

import pytest

from engine.battle.types import BattleUnit
from systems.bosses import BOSSES, BossSpec, compute_boss_stats, designate_boss, get_boss


class TestBossStats:
    """Tests for compute_boss_stats."""

    @pytest.mark.parametrize("base,expected", [
        ((3, 1, 0), (12, 4, 2)),    # pawn: health floor
        ((4, 3, 1), (14, 6, 3)),    # knight
        ((5, 2, 1), (18, 5, 3)),    # rook: 17.5 rounds up
        ((6, 3, 1), (21, 6, 3)),    # queen
        ((10, 7, 3), (35, 8, 4)),   # caps
    ])
    def test_upgrade(self, base, expected):
        """Test boss stat multipliers, floor and caps."""
        assert compute_boss_stats(*base) == expected


class TestDesignateBoss:
    """Tests for designate_boss."""

    def test_first_matching_enemy_only(self):
        """Test that only the first matching enemy becomes the boss."""
        enemies = [
            BattleUnit("enemy_0", "pawn", "enemy", 0, 0),
            BattleUnit("enemy_1", "rook", "enemy", 1, 0),
            BattleUnit("enemy_2", "rook", "enemy", 2, 0),
        ]
        boss = designate_boss(enemies, get_boss("torvald"))
        assert boss is enemies[1]
        assert boss.is_boss is True
        assert boss.health == boss.max_health == 18
        assert boss.display_name == "Torvald the Iron Tower"
        assert enemies[2].is_boss is False
        assert enemies[2].max_health == 5

    def test_missing_archetype_degrades(self, caplog):
        """Test that a missing boss archetype leaves no boss."""
        enemies = [BattleUnit("enemy_0", "pawn", "enemy", 0, 0)]
        assert designate_boss(enemies, BossSpec("queen", "Nobody")) is None
        assert enemies[0].is_boss is False
        assert "No queen" in caplog.text

    def test_shadow_bishop(self):
        """Test that a shadow bishop boss gets its flag and parity."""
        bishop = BattleUnit("enemy_0", "bishop", "enemy", 3, 0)
        designate_boss([bishop], get_boss("valdris"))
        assert bishop.is_shadow_bishop is True
        assert bishop.bishop_diagonal_parity == 0

    def test_shadow_flag_ignored_for_non_bishops(self):
        """Test that only bishops become shadow bishops."""
        rook = BattleUnit("enemy_0", "rook", "enemy", 3, 0)
        designate_boss([rook], BossSpec("rook", "Odd", shadow_bishop=True))
        assert rook.is_shadow_bishop is False

    def test_registry(self):
        """Test looking up registered bosses."""
        assert set(BOSSES) == {"rourke", "valdris", "torvald", "morana", "aldric"}
