"""Tests for the capture resolver (``process_move``)."""

import random

import pytest

from board_diagrams import board_from_rows
from edgeline.models import MoveRejection, StoneColor
from edgeline.rules.board import Board
from edgeline.rules.capture import check_legality, is_valid_move, process_move
from edgeline.rules.connectivity import find_region
from edgeline.rules.enclosure import validate_enclosures
from edgeline.rules.geometry import Position

B, W = StoneColor.BLACK, StoneColor.WHITE


def _cross_minus_one() -> Board:
    # White at (4,4) with black on three sides; (4,5) completes the ring.
    return board_from_rows([
        ".........",
        ".........",
        ".........",
        "....B....",
        "...BWB...",
        ".........",
        ".........",
        ".........",
        ".........",
    ])


class TestLegality:
    def test_out_of_bounds(self, empty_board):
        result = process_move(empty_board, Position(9, 0), B)
        assert not result.valid
        assert result.error_kind is MoveRejection.OUT_OF_BOUNDS
        assert result.board is None

    def test_occupied(self):
        board = _cross_minus_one()
        result = process_move(board, Position(4, 4), B)
        assert result.error_kind is MoveRejection.OCCUPIED

    def test_inside_any_enclosure_is_forbidden_for_both_colors(self):
        board = _cross_minus_one()
        first = process_move(board, Position(4, 5), B)
        enclosures = list(first.new_enclosures)

        for color in (B, W):
            result = process_move(first.board, Position(4, 4), color, enclosures)
            assert result.error_kind is MoveRejection.INSIDE_ENCLOSURE
        assert not is_valid_move(first.board, Position(4, 4), W, enclosures)
        assert check_legality(first.board, Position(0, 0), enclosures) is None

    def test_zero_liberty_placement_is_legal(self):
        board = board_from_rows([
            ".........",
            ".........",
            ".........",
            "....B....",
            "...B.B...",
            "....B....",
            ".........",
            ".........",
            ".........",
        ])
        result = process_move(board, Position(4, 4), W)
        assert result.valid
        assert result.captured_positions == frozenset()
        assert result.board.get_stone_at(Position(4, 4)) is W

    def test_own_stones_are_never_removed_by_own_move(self):
        # Black seals its own two-stone group inside white stones.
        board = board_from_rows([
            ".....",
            "..WW.",
            ".WB.W",
            "..WW.",
            ".....",
        ])
        result = process_move(board, Position(3, 2), B)
        assert result.valid
        assert result.board.get_stone_at(Position(2, 2)) is B
        assert result.board.get_stone_at(Position(3, 2)) is B


class TestCaptures:
    def test_fourth_enclosing_stone_captures_one(self):
        board = _cross_minus_one()
        result = process_move(board, Position(4, 5), B)

        assert result.valid
        assert result.captured_positions == {Position(4, 4)}
        assert len(result.new_enclosures) == 1
        enclosure = result.new_enclosures[0]
        assert enclosure.owner is B
        assert enclosure.wall_positions == {
            Position(4, 3),
            Position(3, 4),
            Position(5, 4),
            Position(4, 5),
        }
        assert enclosure.interior_positions == {Position(4, 4)}
        assert result.board.is_empty(Position(4, 4))
        assert result.capture_count == 1

    def test_capture_interior_includes_empty_cells(self):
        board = board_from_rows([
            ".........",
            ".........",
            ".........",
            "....BB...",
            "...BW.B..",
            "....BB...",
            ".........",
            ".........",
            ".........",
        ])
        assert find_region(board, Position(4, 4), W).can_escape is False
        # Already sealed; any black move triggers the capture.
        result = process_move(board, Position(0, 0), B)
        assert result.captured_positions == {Position(4, 4)}
        (enclosure,) = result.new_enclosures
        assert enclosure.interior_positions == {Position(4, 4), Position(5, 4)}

    def test_escaping_group_is_not_captured(self):
        board = board_from_rows([
            ".........",
            ".........",
            ".........",
            "....B....",
            "...BW....",
            "....B....",
            ".........",
            ".........",
            ".........",
        ])
        result = process_move(board, Position(7, 7), B)
        assert result.captured_positions == frozenset()
        assert result.new_enclosures == ()

    def test_multi_stone_group_is_captured_together(self):
        board = board_from_rows([
            ".......",
            "..BB...",
            ".BWWB..",
            "..B....",
            ".......",
            ".......",
            ".......",
        ])
        result = process_move(board, Position(3, 3), B)
        assert result.captured_positions == {Position(2, 2), Position(3, 2)}
        assert len(result.new_enclosures) == 1


class TestTerritory:
    def test_sealed_empty_pocket_becomes_territory(self):
        board = board_from_rows([
            ".......",
            ".......",
            "...B...",
            "..B.B..",
            ".......",
            ".......",
            ".......",
        ])
        result = process_move(board, Position(3, 4), B)
        assert result.captured_positions == frozenset()
        (enclosure,) = result.new_enclosures
        assert enclosure.owner is B
        assert enclosure.interior_positions == {Position(3, 3)}
        assert len(enclosure.wall_positions) == 4

    def test_pocket_with_opponent_border_is_not_territory(self):
        board = board_from_rows([
            ".......",
            ".......",
            "...B...",
            "..B.W..",
            ".......",
            ".......",
            ".......",
        ])
        result = process_move(board, Position(3, 4), B)
        assert result.new_enclosures == ()

    def test_existing_interior_is_not_claimed_again(self):
        board = _cross_minus_one()
        first = process_move(board, Position(4, 5), B)
        enclosures = list(first.new_enclosures)
        second = process_move(first.board, Position(0, 0), B, enclosures)
        assert second.new_enclosures == ()


class TestDeterminism:
    def test_same_inputs_same_result(self):
        board = _cross_minus_one()
        a = process_move(board, Position(4, 5), B)
        b = process_move(board, Position(4, 5), B)
        assert a.board == b.board
        assert a.captured_positions == b.captured_positions
        assert a.new_enclosures == b.new_enclosures

    @pytest.mark.parametrize("seed", range(5))
    def test_random_games_keep_interiors_disjoint(self, seed):
        rng = random.Random(seed)
        board = Board(9)
        enclosures = []
        color = B
        for _ in range(70):
            empties = [
                pos for pos in board.geometry.adjacent
                if check_legality(board, pos, enclosures) is None
            ]
            if not empties:
                break
            result = process_move(board, rng.choice(empties), color, enclosures)
            assert result.valid
            # Captures only ever remove opponent stones.
            for pos in result.captured_positions:
                assert board.get_stone_at(pos) is color.opponent
            board = result.board
            enclosures.extend(result.new_enclosures)
            validate_enclosures(enclosures)
            color = color.opponent
