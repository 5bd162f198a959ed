"""Tests for escape analysis, the capture-threat map and the veto filters."""

import random

import pytest

from board_diagrams import board_from_rows
from edgeline.ai.turn_cache import (
    EscapeResult,
    analyze_escape,
    build_turn_cache,
    escape_path,
    find_groups,
    independent_escape_routes,
)
from edgeline.ai.veto import (
    VetoReason,
    capturable_in_one_move,
    check_veto,
    exposed_cells,
    in_danger_zone,
    inside_opponent_fort,
)
from edgeline.models import StoneColor
from edgeline.rules.board import Board
from edgeline.rules.capture import check_legality, process_move
from edgeline.rules.connectivity import find_group, find_region
from edgeline.rules.enclosure import Enclosure
from edgeline.rules.geometry import Position

B, W = StoneColor.BLACK, StoneColor.WHITE

# Black to play at (3,3), with one, two or three open sides.
ONE_GAP = [
    ".......",
    ".......",
    ".......",
    "..W.W..",
    "...W...",
    ".......",
    ".......",
]
TWO_GAPS = [
    ".......",
    ".......",
    ".......",
    "..W.W..",
    ".......",
    ".......",
    ".......",
]
THREE_GAPS = [
    ".......",
    ".......",
    ".......",
    "..W....",
    ".......",
    ".......",
    ".......",
]

# Plenty of exits, all behind the single neck at (3,2).
BOTTLE = [
    ".......",
    ".......",
    "..W.W..",
    "..W.W..",
    "..W.W..",
    "..W.W..",
    "..WWW..",
]

# Black (1,1) can only leave through (2,1) and the lone exit (2,0).
CORRIDOR = [
    "WW.WW",
    "WB.WW",
    "WWWWW",
    "WWWWW",
    "WWWWW",
]


# Black (4,4) can only be cut off at (4,3).
SECOND_GROUP = [
    ".........",
    ".........",
    ".........",
    ".........",
    "...WBW...",
    "....W....",
    ".........",
    ".........",
    ".........",
]


def _single_reply_captures(board, color, enclosures=(), spared=frozenset()):
    """Brute force: does any legal opponent reply capture a stone of ``color``?"""
    for pos in board.geometry.adjacent:
        if check_legality(board, pos, enclosures) is not None:
            continue
        reply = process_move(board, pos, color.opponent, enclosures)
        if reply.captured_positions - spared:
            return True
    return False


def _sealed_elsewhere(board, color, group):
    """Stones of ``color`` outside ``group`` that already cannot reach the edge."""
    return frozenset(
        pos
        for pos in board.positions_of(color)
        if pos not in group and not find_region(board, pos, color).can_escape
    )


class TestEscapeAnalysis:
    def test_corridor(self):
        board = board_from_rows(CORRIDOR)
        escape = analyze_escape(board, {Position(1, 1)}, B)
        assert escape.can_escape
        assert escape.edge_exits == {Position(2, 0)}
        assert escape.empty_region == {Position(2, 1), Position(2, 0)}
        assert escape.opponent_ratio == 1.0
        assert escape.critical_gaps == {Position(2, 0), Position(2, 1)}
        assert escape.complete

    def test_friendly_stones_count_on_the_border(self):
        rows = list(CORRIDOR)
        rows[1] = "WB.BW"
        board = board_from_rows(rows)
        escape = analyze_escape(board, {Position(1, 1)}, B)
        # Opponent border: (1,0), (3,0), (2,2); friendly border: (3,1).
        assert escape.opponent_ratio == pytest.approx(0.75)

    def test_open_board_saturates(self):
        board = Board(9, {Position(4, 4): B})
        escape = analyze_escape(board, {Position(4, 4)}, B)
        assert escape.edge_exit_count == 10
        assert not escape.complete
        assert escape.opponent_ratio == 0.0

    def test_escape_path(self):
        board = board_from_rows(CORRIDOR)
        assert escape_path(board, {Position(1, 1)}, B) == [Position(2, 1), Position(2, 0)]
        sealed = board_from_rows(["WWWWW", "WBWWW", "WWWWW", "WWWWW", "WWWWW"])
        assert escape_path(sealed, {Position(1, 1)}, B) == []


class TestIndependentRoutes:
    def test_open_stone_has_four(self):
        board = Board(5, {Position(2, 2): B})
        assert independent_escape_routes(board, {Position(2, 2)}, B, limit=10) == 4
        assert independent_escape_routes(board, {Position(2, 2)}, B, limit=3) == 3

    def test_bottleneck_has_one(self):
        board = board_from_rows(BOTTLE).place_stone(Position(3, 4), B)
        assert independent_escape_routes(board, {Position(3, 4)}, B, limit=3) == 1

    @pytest.mark.parametrize("rows, expected", [(ONE_GAP, 1), (TWO_GAPS, 2), (THREE_GAPS, 3)])
    def test_gaps(self, rows, expected):
        board = board_from_rows(rows).place_stone(Position(3, 3), B)
        assert independent_escape_routes(board, {Position(3, 3)}, B, limit=4) == expected

    def test_routes_may_share_friendly_stones(self):
        # (2,3) reaches the black stone at (3,2) through two different empty
        # cells, and (3,2) fans out to two separate exits.
        board = board_from_rows([
            "WWW.WWW",
            "WWW.WWW",
            "WW.B...",
            "WWB.WWW",
            "WWWWWWW",
            "WWWWWWW",
            "WWWWWWW",
        ])
        group = find_group(board, Position(2, 3))
        assert group == {Position(2, 3)}
        assert independent_escape_routes(board, group, B, limit=3) == 2

    def test_sealed_group_has_none(self):
        board = board_from_rows(["WWWWW", "WBWWW", "WWWWW", "WWWWW", "WWWWW"])
        assert independent_escape_routes(board, {Position(1, 1)}, B) == 0


class TestThreatMap:
    def test_cut_point_is_a_threat(self):
        board = board_from_rows(ONE_GAP).place_stone(Position(3, 3), B)
        cache = build_turn_cache(board, B)
        assert cache.threats == {Position(3, 2): 1}
        assert cache.ai_groups[0].cuttable

    def test_no_threats_with_two_routes(self):
        board = board_from_rows(TWO_GAPS).place_stone(Position(3, 3), B)
        cache = build_turn_cache(board, B)
        assert cache.threats == {}
        assert not cache.ai_groups[0].cuttable

    def test_groups_and_lookups(self):
        board = board_from_rows(ONE_GAP).place_stone(Position(3, 3), B)
        cache = build_turn_cache(board, B, with_threats=False)
        assert cache.threats == {}
        assert cache.opponent is W
        assert len(cache.opponent_groups) == 3
        assert len(cache.opponent_groups_near(Position(0, 0))) == 0
        assert len(cache.opponent_groups_near(Position(3, 2), radius=1)) == 2
        assert [g.stones for g in find_groups(board, B)] == [{Position(3, 3)}]
        assert cache.ai_groups[0].liberties == {Position(3, 2)}
        assert cache.ai_groups[0].is_adjacent_to(Position(3, 2))


class TestVeto:
    def _veto(self, rows, pos, color=B, enclosures=()):
        board = board_from_rows(rows)
        result = process_move(board, pos, color, enclosures)
        return check_veto(pos, color, enclosures, result), result

    def test_one_gap_is_vetoed(self):
        reason, result = self._veto(ONE_GAP, Position(3, 3))
        assert reason is VetoReason.ONE_MOVE_CAPTURE
        assert _single_reply_captures(result.board, B)

    def test_two_gaps_survive(self):
        reason, result = self._veto(TWO_GAPS, Position(3, 3))
        assert reason is None
        assert not _single_reply_captures(result.board, B)

    def test_three_gaps_survive(self):
        reason, result = self._veto(THREE_GAPS, Position(3, 3))
        assert reason is None
        assert not _single_reply_captures(result.board, B)

    def test_bottleneck_with_many_exits_is_vetoed(self):
        reason, result = self._veto(BOTTLE, Position(3, 4))
        assert reason is VetoReason.ONE_MOVE_CAPTURE
        assert analyze_escape(result.board, {Position(3, 4)}, B).edge_exit_count >= 3

    def test_sealed_group_is_vetoed(self):
        board = board_from_rows(["WWWWW", "W.WWW", "WWWWW", "WWWWW", "WWW.W"])
        after = board.place_stone(Position(1, 1), B)
        assert capturable_in_one_move(after, frozenset({Position(1, 1)}), B, ())

    def test_fort_veto(self):
        fort = Enclosure(
            owner=W,
            wall_positions=[(4, 3), (3, 4), (5, 4), (4, 5)],
            interior_positions=[(4, 4)],
        )
        assert inside_opponent_fort(Position(4, 4), B, [fort])
        assert not inside_opponent_fort(Position(4, 4), W, [fort])
        board = Board(9)
        result = process_move(board, Position(4, 4), B, [fort])
        assert check_veto(Position(4, 4), B, [fort], result) is VetoReason.FORT

    def test_invalid_simulation_is_left_to_scoring(self):
        board = Board(9, {Position(0, 0): W})
        result = process_move(board, Position(0, 0), B)
        assert check_veto(Position(0, 0), B, (), result) is None

    @pytest.mark.parametrize("seed", range(12))
    def test_veto_matches_brute_force(self, seed):
        rng = random.Random(seed)
        stones = {}
        for x in range(7):
            for y in range(7):
                if rng.random() < 0.4:
                    stones[Position(x, y)] = rng.choice([B, W])
        board = Board(7, stones)
        empties = [p for p in board.geometry.adjacent if board.is_empty(p)]
        for pos in rng.sample(empties, min(6, len(empties))):
            result = process_move(board, pos, B)
            reason = check_veto(pos, B, (), result)
            group = find_group(result.board, pos)
            expected = _single_reply_captures(
                result.board,
                B,
                result.new_enclosures,
                _sealed_elsewhere(result.board, B, group),
            )
            assert (reason is VetoReason.ONE_MOVE_CAPTURE) == expected, (seed, pos)
            assert check_veto(pos, B, (), result, build_turn_cache(board, B)) is reason, (seed, pos)

    def test_reply_capturing_another_group_is_vetoed(self):
        board = board_from_rows(SECOND_GROUP)
        result = process_move(board, Position(3, 3), B)
        assert _single_reply_captures(result.board, B)
        assert check_veto(Position(3, 3), B, (), result) is VetoReason.ONE_MOVE_CAPTURE
        cache = build_turn_cache(board, B)
        assert cache.threats == {Position(4, 3): 1}
        assert check_veto(Position(3, 3), B, (), result, cache) is VetoReason.ONE_MOVE_CAPTURE

    def test_closing_the_gap_is_not_vetoed(self):
        board = board_from_rows(SECOND_GROUP)
        result = process_move(board, Position(4, 3), B)
        assert not _single_reply_captures(result.board, B)
        assert check_veto(Position(4, 3), B, (), result, build_turn_cache(board, B)) is None

    def test_group_sealed_before_the_move_does_not_veto_everything(self):
        board = Board(9, {Position(0, 0): B, Position(1, 0): W, Position(0, 1): W})
        cache = build_turn_cache(board, B)
        assert cache.sealed_stones == {Position(0, 0)}
        result = process_move(board, Position(5, 5), B)
        assert check_veto(Position(5, 5), B, (), result) is None
        assert check_veto(Position(5, 5), B, (), result, cache) is None

    def test_exposed_cells(self):
        board = board_from_rows(SECOND_GROUP).place_stone(Position(0, 0), B)
        board = board.place_stone(Position(1, 0), W).place_stone(Position(0, 1), W)
        cells, sealed = exposed_cells(board, B)
        assert Position(4, 3) in cells
        assert sealed == {Position(0, 0)}
        cells, sealed = exposed_cells(board, B, skip=frozenset({Position(4, 4)}))
        assert cells == []


class TestDangerZone:
    @staticmethod
    def _escape(exits, ratio, gaps=0):
        exit_cells = frozenset(Position(i, 0) for i in range(exits))
        gap_cells = frozenset(Position(i, 1) for i in range(gaps))
        return EscapeResult(
            can_escape=exits > 0,
            empty_region=exit_cells,
            edge_exits=exit_cells,
            opponent_ratio=ratio,
            critical_gaps=gap_cells,
        )

    @pytest.mark.parametrize(
        "exits, ratio, gaps, danger",
        [
            (0, 0.0, 0, True),
            (1, 0.6, 0, True),
            (2, 0.59, 0, False),
            (3, 0.4, 3, True),
            (3, 0.4, 2, False),
            (4, 0.39, 4, False),
            (5, 1.0, 5, False),
        ],
    )
    def test_table(self, exits, ratio, gaps, danger):
        assert in_danger_zone(self._escape(exits, ratio, gaps)) is danger
