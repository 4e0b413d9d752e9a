"""
Unit tests for the movement rules.
"""

import pytest

from engine.battle.movement import (
    cast_rays,
    diagonal_parity,
    get_attack_range,
    get_moves,
)
from world.board import Board


def empty_grid(width, height):
    return [[False] * width for _ in range(height)]


class TestRook:
    """Tests for rook rays."""

    def test_corner_rook_on_empty_board(self):
        """Test rook moves from a corner of an empty board."""
        moves = get_moves("rook", 0, 0, 10, 10, empty_grid(10, 10))
        expected = {(x, 0) for x in range(1, 10)} | {(0, y) for y in range(1, 10)}
        assert len(moves) == 18
        assert set(moves) == expected

    def test_ray_includes_first_obstacle_and_stops(self):
        """Test that a rook ray includes the first obstacle tile and stops."""
        board = Board(8, 8)
        board.add_obstacle(3, 0)
        board.add_obstacle(5, 0)
        moves = get_moves("rook", 0, 0, 8, 8, board.obstacle_grid())
        row = sorted(m for m in moves if m[1] == 0)
        assert row == [(1, 0), (2, 0), (3, 0)]

    def test_ray_passes_through_at_most_one_obstacle(self):
        """Test that a rook ray never reaches past an obstacle."""
        board = Board(9, 9)
        for tile in [(4, 2), (4, 1), (6, 4), (7, 4), (4, 6), (1, 4)]:
            board.add_obstacle(*tile)
        moves = get_moves("rook", 4, 4, 9, 9, board.obstacle_grid())
        for direction in [(0, -1), (0, 1), (-1, 0), (1, 0)]:
            ray = cast_rays(4, 4, 9, 9, board.obstacle_grid(), [direction])
            assert sum(1 for t in ray if board.has_obstacle(*t)) <= 1
        assert (4, 1) not in moves
        assert (7, 4) not in moves
        assert (4, 2) in moves


class TestBishopAndQueen:
    """Tests for diagonal rays."""

    def test_bishop_center_of_empty_board(self):
        """Test bishop moves from the centre of an empty board."""
        moves = get_moves("bishop", 3, 3, 7, 7, empty_grid(7, 7))
        assert len(moves) == 12
        assert all(diagonal_parity(*m) == diagonal_parity(3, 3) for m in moves)

    def test_queen_is_rook_plus_bishop(self):
        """Test that queen moves are the union of rook and bishop moves."""
        grid = empty_grid(8, 8)
        queen = set(get_moves("queen", 2, 5, 8, 8, grid))
        rook = set(get_moves("rook", 2, 5, 8, 8, grid))
        bishop = set(get_moves("bishop", 2, 5, 8, 8, grid))
        assert queen == rook | bishop


class TestKnight:
    """Tests for knight jumps."""

    def test_knight_ignores_obstacles(self):
        """Test that knights jump over obstacles."""
        open_moves = set(get_moves("knight", 3, 3, 8, 8, empty_grid(8, 8)))
        board = Board(8, 8)
        for x in range(2, 5):
            for y in range(2, 5):
                if (x, y) != (3, 3):
                    board.add_obstacle(x, y)
        blocked_moves = set(get_moves("knight", 3, 3, 8, 8, board.obstacle_grid()))
        assert open_moves == blocked_moves
        assert len(open_moves) == 8

    def test_knight_clipped_by_board_edge(self):
        """Test that knight moves stay on the board."""
        moves = set(get_moves("knight", 0, 0, 8, 8, empty_grid(8, 8)))
        assert moves == {(1, 2), (2, 1)}

    def test_knight_attack_equals_moves(self):
        """Test that a knight attacks the tiles it can move to."""
        grid = empty_grid(8, 6)
        assert get_attack_range("knight", 2, 5, 8, 6, grid) == get_moves("knight", 2, 5, 8, 6, grid)


class TestPawn:
    """Tests for pawn moves and attacks."""

    def test_pawn_moves_vertically(self):
        """Test that pawns move one tile up or down."""
        moves = set(get_moves("pawn", 2, 3, 6, 6, empty_grid(6, 6)))
        assert moves == {(2, 2), (2, 4)}

    def test_pawn_blocked_by_obstacle(self):
        """Test that an obstacle blocks a pawn step."""
        board = Board(6, 6)
        board.add_obstacle(2, 2)
        moves = set(get_moves("pawn", 2, 3, 6, 6, board.obstacle_grid()))
        assert moves == {(2, 4)}

    def test_pawn_attacks_diagonals_only(self):
        """Test that pawns attack the four diagonal neighbours."""
        tiles = set(get_attack_range("pawn", 2, 5, 8, 6, empty_grid(8, 6)))
        assert (3, 4) in tiles
        assert (1, 4) in tiles
        assert (2, 4) not in tiles
        assert (2, 3) not in tiles

    def test_pawn_attacks_ignore_obstacles(self):
        """Test that pawn attack tiles are not filtered by obstacles."""
        board = Board(6, 6)
        board.add_obstacle(1, 1)
        tiles = set(get_attack_range("pawn", 2, 2, 6, 6, board.obstacle_grid()))
        assert tiles == {(1, 1), (3, 1), (1, 3), (3, 3)}


class TestKing:
    """Tests for king steps."""

    def test_king_eight_neighbours(self):
        """Test that a king reaches all eight neighbours."""
        assert len(get_moves("king", 3, 3, 8, 8, empty_grid(8, 8))) == 8

    def test_king_in_corner(self):
        """Test king moves from a corner."""
        assert set(get_moves("king", 0, 0, 8, 8, empty_grid(8, 8))) == {(1, 0), (0, 1), (1, 1)}


class TestDispatch:
    """Tests for archetype dispatch."""

    @pytest.mark.parametrize("archetype", ["dragon", "", "wizard"])
    def test_unknown_archetype_has_no_moves(self, archetype):
        """Test that an unknown archetype cannot move or attack."""
        grid = empty_grid(5, 5)
        assert get_moves(archetype, 2, 2, 5, 5, grid) == []
        assert get_attack_range(archetype, 2, 2, 5, 5, grid) == []

    def test_archetype_names_are_case_insensitive(self):
        """Test that archetype lookup ignores case."""
        grid = empty_grid(5, 5)
        assert get_moves("Rook", 0, 0, 5, 5, grid) == get_moves("rook", 0, 0, 5, 5, grid)
