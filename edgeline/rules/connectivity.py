"""Region and escape-to-edge search.

A group of stones survives as long as some path of empty cells or
same-colored stones connects it to an *empty* cell on the board edge. All
searches here are explicit-stack flood fills over the pre-computed
adjacency table in ``BoardGeometry``; none of them recurse.

``find_region`` is the search the capture resolver depends on. Once an
escape is found it stops expanding into empty cells and only finishes
collecting stones of the target color, so an open group costs roughly its
own size plus the distance to the edge instead of a flood of the whole
board.
"""
from __future__ import annotations

from collections.abc import Collection, Iterable
from dataclasses import dataclass

from ..models import StoneColor
from .board import Board
from .geometry import Position

__all__ = [
    "Region",
    "count_edge_exits",
    "find_enclosed_empty_region",
    "find_group",
    "find_region",
    "flood_empty_region",
    "group_liberties",
]


@dataclass(slots=True)
class Region:
    """Result of ``find_region``.

    ``positions`` holds the empty and target-color cells reached,
    ``wall`` the opposing stones that blocked the traversal. ``wall`` is only
    complete when ``can_escape`` is False.
    """

    positions: set[Position]
    can_escape: bool
    wall: set[Position]

    def stones(self, board: Board, color: StoneColor) -> set[Position]:
        stones = board.stones
        return {pos for pos in self.positions if stones.get(pos) == color}


def find_region(board: Board, start: Position, target_color: StoneColor) -> Region:
    """Flood from ``start`` through empty and ``target_color`` cells.

    Opposing stones are recorded as wall and never expanded. An empty edge
    cell sets ``can_escape``; after that only ``target_color`` neighbours are
    pushed, which finishes enumerating the group without flooding open
    territory.
    """
    geo = board.geometry
    adjacent = geo.adjacent
    edge_cells = geo.edge_cells
    stones = board.stones
    opposing = target_color.opponent

    region: set[Position] = set()
    wall: set[Position] = set()
    visited: set[Position] = set()
    stack: list[Position] = [start]
    can_escape = False

    while stack:
        pos = stack.pop()
        if pos in visited:
            continue
        if pos not in adjacent:
            continue
        visited.add(pos)

        stone = stones.get(pos)
        if stone == opposing:
            wall.add(pos)
            continue

        region.add(pos)
        if stone is None and pos in edge_cells:
            can_escape = True

        for adj in adjacent[pos]:
            if adj in visited:
                continue
            if not can_escape or stones.get(adj) == target_color:
                stack.append(adj)

    return Region(positions=region, can_escape=can_escape, wall=wall)


def find_group(board: Board, start: Position) -> frozenset[Position]:
    """Stones of the same color 4-connected to ``start`` (empty if none)."""
    color = board.get_stone_at(start)
    if color is None:
        return frozenset()
    adjacent = board.geometry.adjacent
    stones = board.stones
    group: set[Position] = {start}
    stack = [start]
    while stack:
        pos = stack.pop()
        for adj in adjacent[pos]:
            if adj not in group and stones.get(adj) == color:
                group.add(adj)
                stack.append(adj)
    return frozenset(group)


def group_liberties(board: Board, group: Iterable[Position]) -> set[Position]:
    """Empty cells orthogonally adjacent to any stone of ``group``."""
    adjacent = board.geometry.adjacent
    stones = board.stones
    return {adj for pos in group for adj in adjacent[pos] if adj not in stones}


def flood_empty_region(
    board: Board,
    seeds: Iterable[Position],
    exit_cap: int | None = None,
    through: StoneColor | None = None,
) -> tuple[set[Position], set[Position], bool]:
    """Flood empty cells from ``seeds``.

    Stones block the flood unless they are of the ``through`` color, in which
    case they are traversed and included in the returned region.

    Returns ``(region, edge_exits, complete)``. When ``exit_cap`` is given the
    flood stops as soon as that many distinct empty edge cells are found, in
    which case ``complete`` is False and the region is partial.
    """
    geo = board.geometry
    adjacent = geo.adjacent
    edge_cells = geo.edge_cells
    stones = board.stones

    def passable(pos: Position) -> bool:
        stone = stones.get(pos)
        return stone is None or (through is not None and stone == through)

    region: set[Position] = set()
    exits: set[Position] = set()
    stack = [pos for pos in seeds if pos in adjacent and passable(pos)]
    while stack:
        pos = stack.pop()
        if pos in region:
            continue
        region.add(pos)
        if pos in edge_cells and pos not in stones:
            exits.add(pos)
            if exit_cap is not None and len(exits) >= exit_cap:
                return region, exits, False
        for adj in adjacent[pos]:
            if adj not in region and passable(adj):
                stack.append(adj)
    return region, exits, True


def count_edge_exits(
    board: Board,
    group: Collection[Position],
    cap: int | None = None,
) -> int:
    """Distinct empty edge cells the group can reach.

    The flood runs through empty cells and stones of the group's own color,
    so friendly stones extend the group's reach. With ``cap`` set the count
    saturates at ``cap``. An empty ``group`` has no exits.
    """
    if not group:
        return 0
    color = board.get_stone_at(next(iter(group)))
    if color is None:
        return 0
    _, exits, _ = flood_empty_region(board, group, cap, through=color)
    return len(exits)


def find_enclosed_empty_region(
    board: Board,
    start: Position,
    owner: StoneColor,
    excluded: Collection[Position] = (),
) -> tuple[set[Position], set[Position]] | None:
    """Closed pocket of empty cells walled only by ``owner``'s stones.

    Returns ``(interior, wall)`` or None when the pocket reaches an empty
    edge cell, touches an opposing stone or runs into ``excluded`` cells
    (interiors that are already registered).
    """
    geo = board.geometry
    adjacent = geo.adjacent
    edge_cells = geo.edge_cells
    stones = board.stones

    if start not in adjacent or start in stones or start in excluded:
        return None

    interior: set[Position] = set()
    wall: set[Position] = set()
    stack = [start]
    while stack:
        pos = stack.pop()
        if pos in interior:
            continue
        if pos in edge_cells or pos in excluded:
            return None
        interior.add(pos)
        for adj in adjacent[pos]:
            stone = stones.get(adj)
            if stone is None:
                if adj not in interior:
                    stack.append(adj)
            elif stone == owner:
                wall.add(adj)
            else:
                return None
    return interior, wall
