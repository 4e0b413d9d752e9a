"""
Unit tests for the enemy AI: priority tiers, boss abilities and scoring.
"""

from engine.battle.ai import CoordinationManager, EnemyAI, PositioningHelper, ThreatMap
from engine.battle.types import Phase


class TestTargetAssignment:
    """Tests for CoordinationManager."""

    def test_second_enemy_spreads_to_other_target(self, make_battle):
        """Test that a second enemy picks a different target when distances are close."""
        state = make_battle(
            players=[("pawn", 0, 7), ("pawn", 7, 7)],
            enemies=[("pawn", 0, 0), ("pawn", 1, 0)],
        )
        coordination = CoordinationManager(state)
        coordination.assign_targets()
        assert state.get_unit("enemy_0").assigned_target_id == "player_0"
        assert state.get_unit("enemy_1").assigned_target_id == "player_1"
        assert coordination.focus_counts == {"player_0": 1, "player_1": 1}

    def test_much_closer_target_still_wins(self, make_battle):
        """Test that the load penalty does not outweigh a much closer target."""
        state = make_battle(
            players=[("pawn", 0, 2), ("pawn", 39, 79)],
            enemies=[("pawn", 0, 0), ("pawn", 1, 0)],
            width=40,
            height=80,
        )
        CoordinationManager(state).assign_targets()
        assert state.get_unit("enemy_1").assigned_target_id == "player_0"

    def test_shadow_parity_follows_target(self, make_battle):
        """Test that the shadow bishop commits to its target's square colour."""
        state = make_battle(players=[("pawn", 4, 7)], enemies=[("bishop", 3, 3)], boss=0, shadow_bishop=True)
        coordination = CoordinationManager(state)
        coordination.assign_targets()
        coordination.commit_shadow_parity()
        assert state.get_unit("enemy_0").bishop_diagonal_parity == 1

    def test_shadow_parity_fallback_without_target(self, make_battle):
        """Test the shadow bishop parity fallback when no target exists."""
        state = make_battle(enemies=[("bishop", 3, 3)], boss=0, shadow_bishop=True)
        bishop = state.get_unit("enemy_0")
        state.turn = 3
        CoordinationManager(state).commit_shadow_parity()
        assert bishop.bishop_diagonal_parity == 1

        bishop.health = bishop.max_health // 2 - 1
        CoordinationManager(state).commit_shadow_parity()
        assert bishop.bishop_diagonal_parity == 0


class TestPositioning:
    """Tests for advance scoring and legal destinations."""

    def test_legal_destinations_stop_at_units(self, make_battle):
        """Test that sliding destinations stop before intervening units."""
        state = make_battle(players=[("pawn", 0, 7)], enemies=[("rook", 0, 0), ("pawn", 0, 2)])
        dests = PositioningHelper(state).legal_destinations(state.get_unit("enemy_0"))
        assert (0, 1) in dests
        assert (0, 2) not in dests
        assert (0, 3) not in dests
        assert (3, 0) in dests

    def test_knight_jumps_over_units(self, make_battle):
        """Test that knight destinations ignore units in between."""
        state = make_battle(players=[("pawn", 0, 7)], enemies=[("knight", 0, 0), ("pawn", 0, 1), ("pawn", 1, 1)])
        dests = PositioningHelper(state).legal_destinations(state.get_unit("enemy_0"))
        assert set(dests) == {(1, 2), (2, 1)}

    def test_strike_position_beats_closer_tile(self, make_battle):
        """Test that a tile threatening a player outscores a merely closer one."""
        state = make_battle(players=[("pawn", 5, 5)], enemies=[("knight", 0, 0)])
        helper = PositioningHelper(state)
        knight = state.get_unit("enemy_0")
        target = state.get_unit("player_0")
        assert helper.score_advance(knight, target, (3, 4), None) == -3 + 550
        assert helper.score_advance(knight, target, (4, 4), None) == -2

    def test_cluster_penalty_counts_unmoved_allies(self, make_battle):
        """Test that nearby unmoved allies lower a destination's score."""
        state = make_battle(players=[("pawn", 5, 5)], enemies=[("knight", 0, 0), ("pawn", 1, 1)])
        helper = PositioningHelper(state)
        knight = state.get_unit("enemy_0")
        target = state.get_unit("player_0")
        assert helper.score_advance(knight, target, (2, 2), None) == -6 - 40
        state.get_unit("enemy_1").has_moved = True
        assert helper.score_advance(knight, target, (2, 2), None) == -6

    def test_boss_advance_weighs_safety(self, make_battle):
        """Test that boss advance scoring rewards safe tiles and escapes."""
        state = make_battle(players=[("rook", 0, 7)], enemies=[("knight", 4, 2)], boss=0)
        helper = PositioningHelper(state)
        boss = state.get_unit("enemy_0")
        target = state.get_unit("player_0")
        threat = ThreatMap({(0, 3)})
        # (2,3): closer by 3, safe, boss not threatened
        assert helper.score_advance(boss, target, (2, 3), threat) == 3 + 150
        threat = ThreatMap({(2, 3), (4, 2)})
        assert helper.score_advance(boss, target, (2, 3), threat) == 3 - 300
        threat = ThreatMap({(4, 2)})
        assert helper.score_advance(boss, target, (2, 3), threat) == 3 + 400


class TestPriorityTiers:
    """Tests for EnemyAI.choose_action."""

    def test_no_ap_means_no_action(self, make_engine):
        """Test that an exhausted enemy pool yields no action."""
        engine = make_engine(players=[("pawn", 2, 5)], enemies=[("pawn", 3, 4)])
        engine.end_player_turn()
        engine.state.enemy_ap = 0
        assert engine.plan_enemy_action() is None

    def test_regular_rook_attacks_instead_of_blasting(self, make_engine):
        """Test that a non-boss rook makes a plain attack."""
        engine = make_engine(players=[("pawn", 3, 4)], enemies=[("rook", 3, 3)])
        engine.end_player_turn()
        action = engine.plan_enemy_action()
        assert action.kind == "attack"
        assert action.target_ids == ["player_0"]

    def test_boss_rook_area_blast(self, make_engine):
        """Test that a boss rook blasts every adjacent player."""
        engine = make_engine(
            players=[("pawn", 2, 2), ("pawn", 3, 4), ("knight", 4, 4), ("pawn", 7, 7)],
            enemies=[("rook", 3, 3)],
            boss=0,
        )
        state = engine.state
        engine.end_player_turn()
        assert state.enemy_ap == 18

        action = engine.plan_enemy_action()
        assert action.kind == "area_blast"
        assert action.cost == 3
        assert sorted(action.target_ids) == ["player_0", "player_1", "player_2"]

        engine.commit_enemy_action(action)
        assert state.enemy_ap == 15
        assert [u.id for u in state.player_units] == ["player_3"]
        assert sorted(state.units_lost) == ["knight", "pawn", "pawn"]
        assert state.last_attack_effect.style == "area"
        assert state.phase is Phase.ENEMY_TURN

    def test_boss_retreats_after_attacking(self, make_engine):
        """Test that a boss gets one free retreat after its first attack."""
        engine = make_engine(
            players=[("pawn", 3, 4), ("knight", 7, 7)],
            enemies=[("rook", 3, 3)],
            boss=0,
        )
        state = engine.state
        engine.end_player_turn()
        engine.commit_enemy_action(engine.plan_enemy_action())
        assert state.pending_retreat_id == "enemy_0"

        retreat = engine.plan_enemy_action()
        assert retreat.kind == "retreat"
        assert retreat.cost == 0
        assert engine.plan_enemy_action() == retreat

        engine.commit_enemy_action(retreat)
        boss = state.get_unit("enemy_0")
        assert boss.position == retreat.dest
        assert boss.has_done_free_retreat is True
        assert state.enemy_ap == 15
        assert state.pending_retreat_id is None
        assert abs(boss.x - 7) + abs(boss.y - 7) == 11

    def test_boss_king_line_attack(self, make_engine):
        """Test that a boss king performs a cardinal line attack."""
        engine = make_engine(
            players=[("pawn", 4, 1), ("pawn", 6, 4), ("rook", 7, 4)],
            enemies=[("king", 4, 4)],
            boss=0,
        )
        state = engine.state
        engine.end_player_turn()
        action = engine.plan_enemy_action()
        assert action.kind == "line_attack"
        assert action.target_ids == ["player_1", "player_2"]

        engine.commit_enemy_action(action)
        assert state.enemy_ap == 18 - 5
        assert [u.id for u in state.player_units] == ["player_0"]

    def test_boss_attack_is_lethal(self, make_engine):
        """Test that a boss's direct attack kills its target."""
        engine = make_engine(players=[("queen", 2, 3), ("pawn", 7, 7)], enemies=[("knight", 0, 2)], boss=0)
        state = engine.state
        engine.end_player_turn()
        action = engine.plan_enemy_action()
        assert action.kind == "attack"
        assert action.target_ids == ["player_0"]
        engine.commit_enemy_action(action)
        assert state.get_unit("player_0") is None
        assert state.units_lost == ["queen"]

    def test_shadow_bishop_switches_colour_for_free(self, make_engine):
        """Test that the shadow bishop switches colour without spending AP."""
        engine = make_engine(players=[("pawn", 4, 7)], enemies=[("bishop", 3, 3)], boss=0, shadow_bishop=True)
        state = engine.state
        engine.end_player_turn()
        action = engine.plan_enemy_action()
        assert action.kind == "color_switch"
        assert action.dest in {(4, 3), (3, 4)}

        engine.commit_enemy_action(action)
        bishop = state.get_unit("enemy_0")
        assert bishop.has_done_free_color_switch is True
        assert bishop.diagonal_parity == 1
        assert bishop.bishop_diagonal_parity == 1
        assert state.enemy_ap == 18

    def test_last_player_killed_ends_in_defeat(self, make_engine):
        """Test that killing the last player unit ends the battle in defeat."""
        engine = make_engine(players=[("pawn", 3, 4)], enemies=[("rook", 3, 3)], boss=0)
        state = engine.state
        engine.end_player_turn()
        engine.run_enemy_phase()
        assert state.phase is Phase.DEFEAT
        assert state.pending_retreat_id is None
        assert state.turn == 1

    def test_ai_skips_dead_assigned_target(self, make_battle):
        """Test that a dead assigned target is not pursued."""
        state = make_battle(players=[("pawn", 0, 7), ("pawn", 7, 7)], enemies=[("pawn", 0, 0)])
        ai = EnemyAI(state)
        state.phase = Phase.ENEMY_TURN
        state.enemy_ap = 12
        ai.begin_phase()
        enemy = state.get_unit("enemy_0")
        assert enemy.assigned_target_id == "player_0"
        state.remove_unit(state.get_unit("player_0"))
        assert state.assigned_target(enemy) is None
        # No live target: this enemy has nothing to advance toward.
        assert ai.choose_action() is None
