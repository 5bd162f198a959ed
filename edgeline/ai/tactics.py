"""Tactical candidate sources for the heuristic AI.

Both finders work on the turn cache of the board the AI is about to move
on and return cells that are added to the candidate pool whatever the
candidate window is. Like capture-threat cells they skip the veto: an
attack or a break-out may leave the new stone exposed and still be the
right move.

* Attack positions press opponent groups that are already short of exits,
  or isolated single stones.
* Breaking moves reopen exits, or add independent escape routes, for AI
  groups that are being surrounded.
"""

from __future__ import annotations

from ..rules.capture import process_move
from ..rules.connectivity import count_edge_exits
from ..rules.geometry import Position, window
from .turn_cache import EXIT_CAP, TurnCache, independent_escape_routes

# Opponent groups with more exits than this are not worth an urgent attack.
ATTACK_MAX_EXITS = 8
# An isolated stone has at most this many friends within ISOLATION_RADIUS.
ISOLATION_MAX_FRIENDS = 1
ISOLATION_RADIUS = 2
# Pressing an isolated stone counts once it is down to this many exits.
ISOLATED_TARGET_EXITS = 3

BREAK_MAX_EXITS = 4
# Routes are only compared up to this count.
BREAK_ROUTE_LIMIT = 3


def _is_isolated(cache: TurnCache, stone: Position) -> bool:
    stones = cache.board.stones
    friends = sum(
        1
        for cell in window(stone, ISOLATION_RADIUS, cache.board.size)
        if cell != stone and stones.get(cell) == cache.opponent
    )
    return friends <= ISOLATION_MAX_FRIENDS


def find_attack_positions(cache: TurnCache) -> set[Position]:
    """Liberties of weak opponent groups where an AI stone cuts their exits.

    A liberty qualifies when the stone seals the group, drops it to two or
    fewer exits from more, or takes away at least two exits. For an isolated
    single stone any liberty that leaves it with three or fewer exits counts.
    """
    board = cache.board
    attacks: set[Position] = set()
    for group in cache.opponent_groups:
        before = group.edge_exit_count
        if len(group.stones) == 1:
            if not _is_isolated(cache, next(iter(group.stones))):
                continue
        elif before > ATTACK_MAX_EXITS:
            continue
        for cell in sorted(group.liberties):
            if cell in cache.forbidden:
                continue
            after = count_edge_exits(board.place_stone(cell, cache.color), group.stones, EXIT_CAP)
            if len(group.stones) == 1:
                hit = after <= ISOLATED_TARGET_EXITS
            else:
                hit = after == 0 or (after <= 2 < before) or before - after >= 2
            if hit:
                attacks.add(cell)
    return attacks


def find_breaking_moves(cache: TurnCache) -> set[Position]:
    """Cells that widen the way out for AI groups with few exits.

    Every empty cell next to an opponent stone that walls in the group is
    tried with the full capture resolver. It qualifies when the group ends
    up with more edge exits or more independent routes than before; taking
    wall stones off the board is the usual way to get there.
    """
    board = cache.board
    stones = board.stones
    adjacent = board.geometry.adjacent
    opponent = cache.opponent
    breaks: set[Position] = set()
    for group in cache.ai_groups:
        if group.edge_exit_count > BREAK_MAX_EXITS:
            continue
        wall = {
            adj
            for pos in group.escape.empty_region | group.stones
            for adj in adjacent[pos]
            if stones.get(adj) == opponent
        }
        cells = {adj for stone in wall for adj in adjacent[stone] if adj not in stones}
        routes_before = independent_escape_routes(board, group.stones, cache.color, BREAK_ROUTE_LIMIT)
        for cell in sorted(cells):
            if cell in breaks or cell in cache.forbidden:
                continue
            result = process_move(board, cell, cache.color, cache.enclosures)
            if not result.valid:
                continue
            after = result.board
            if count_edge_exits(after, group.stones, EXIT_CAP) > group.edge_exit_count or (
                independent_escape_routes(after, group.stones, cache.color, BREAK_ROUTE_LIMIT)
                > routes_before
            ):
                breaks.add(cell)
    return breaks
