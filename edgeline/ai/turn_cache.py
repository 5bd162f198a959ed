"""Per-turn scratch context for the heuristic AI.

Everything here is derived from the board the AI is asked to move on and is
thrown away when the turn ends. ``TurnCache`` is passed explicitly into the
veto and scoring stages; nothing is kept at module level, so concurrent turns
on different boards never share state.

Escape analysis floods from a group through empty cells and the group's own
color, the same connectivity the capture resolver uses, and stops once
``EXIT_CAP`` distinct empty edge cells have been seen. Counts above the cap
are never needed: every threshold that consumes them is well below it.

Whether one opponent stone can cut a group off is a different question
from how many exits it has: many exits may all sit behind one narrow gap.
``independent_escape_routes`` answers it exactly by counting routes that
share no empty cell.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from functools import cached_property

from ..models import StoneColor
from ..rules.board import Board
from ..rules.capture import process_move
from ..rules.connectivity import find_group, flood_empty_region, group_liberties
from ..rules.enclosure import Enclosure, forbidden_positions
from ..rules.geometry import Position

EXIT_CAP = 10


@dataclass(frozen=True)
class EscapeResult:
    """How well a group is connected to the board edge."""

    can_escape: bool
    # Empty cells reached by the flood (partial when ``complete`` is False).
    empty_region: frozenset[Position]
    edge_exits: frozenset[Position]
    opponent_ratio: float
    critical_gaps: frozenset[Position]
    complete: bool = True

    @property
    def edge_exit_count(self) -> int:
        return len(self.edge_exits)


def analyze_escape(
    board: Board,
    group: Iterable[Position],
    color: StoneColor,
    exit_cap: int = EXIT_CAP,
) -> EscapeResult:
    """Flood outward from ``group`` and summarize its escape routes.

    ``opponent_ratio`` is the share of occupied cells bordering the empty
    part of the region that belong to the opponent. Stones of ``group``
    itself are not counted; other friendly stones are.
    """
    group = frozenset(group)
    stones = board.stones
    adjacent = board.geometry.adjacent
    opponent = color.opponent

    region, exits, complete = flood_empty_region(board, group, exit_cap, through=color)
    empties = frozenset(pos for pos in region if pos not in stones)

    opponent_border: set[Position] = set()
    friendly_border: set[Position] = set()
    for pos in empties:
        for adj in adjacent[pos]:
            stone = stones.get(adj)
            if stone is None or adj in group:
                continue
            if stone == opponent:
                opponent_border.add(adj)
            else:
                friendly_border.add(adj)
    bordered = len(opponent_border) + len(friendly_border)
    ratio = len(opponent_border) / bordered if bordered else 0.0

    return EscapeResult(
        can_escape=bool(exits),
        empty_region=empties,
        edge_exits=frozenset(exits),
        opponent_ratio=ratio,
        critical_gaps=find_critical_gaps(board, exits, color),
        complete=complete,
    )


def find_critical_gaps(
    board: Board,
    edge_exits: Iterable[Position],
    color: StoneColor,
) -> frozenset[Position]:
    """Empty cells whose occupation would cut off edge exits.

    A gap is critical when it sits next to an exit and already touches an
    opponent stone, or when it is an exit flanked along the edge by an
    opponent stone. A lone exit is always critical.
    """
    geo = board.geometry
    adjacent = geo.adjacent
    edge_cells = geo.edge_cells
    stones = board.stones
    opponent = color.opponent

    exits = list(edge_exits)
    gaps: set[Position] = set()
    for exit_cell in exits:
        for adj in adjacent[exit_cell]:
            stone = stones.get(adj)
            if stone == opponent and adj in edge_cells:
                gaps.add(exit_cell)
                continue
            if stone is not None or adj in edge_cells:
                continue
            if any(stones.get(n) == opponent for n in adjacent[adj]):
                gaps.add(adj)
    if len(exits) == 1:
        gaps.update(exits)
    return frozenset(gaps)


def escape_path(board: Board, group: Iterable[Position], color: StoneColor) -> list[Position]:
    """Empty cells on one shortest route from ``group`` to an empty edge cell.

    Any single cell whose occupation separates the group from every exit lies
    on every such route, this one included. Returns an empty list when the
    group has no route at all.
    """
    geo = board.geometry
    adjacent = geo.adjacent
    edge_cells = geo.edge_cells
    stones = board.stones

    parent: dict[Position, Position | None] = {pos: None for pos in group}
    queue = deque(parent)
    target: Position | None = None
    while queue:
        pos = queue.popleft()
        if pos in edge_cells and pos not in stones:
            target = pos
            break
        for adj in adjacent[pos]:
            if adj in parent:
                continue
            stone = stones.get(adj)
            if stone is not None and stone != color:
                continue
            parent[adj] = pos
            queue.append(adj)

    path: list[Position] = []
    while target is not None:
        if target not in stones:
            path.append(target)
        target = parent[target]
    path.reverse()
    return path


_IN, _OUT = 0, 1


def independent_escape_routes(
    board: Board,
    group: Iterable[Position],
    color: StoneColor,
    limit: int = 2,
) -> int:
    """Count escape routes from ``group`` that share no empty cell.

    Routes may share friendly stones, which the opponent can never occupy,
    but every empty cell (the exit included) carries at most one route. A
    group with two such routes cannot be cut off by a single stone. The
    count stops at ``limit``.

    Each cell is split into an entry and an exit node so that augmenting
    paths can reroute earlier routes; this is a unit-capacity max-flow.
    """
    geo = board.geometry
    adjacent = geo.adjacent
    edge_cells = geo.edge_cells
    stones = board.stones
    sources = [(pos, _IN) for pos in group]

    cell_flow: dict[Position, int] = {}
    step_flow: dict[tuple[Position, Position], int] = {}

    def steps(node: tuple[Position, int]):
        pos, side = node
        if side == _IN:
            if pos in stones or cell_flow.get(pos, 0) < 1:
                yield pos, _OUT
            for adj in adjacent[pos]:
                if step_flow.get((adj, pos), 0) > 0:
                    yield adj, _OUT
        else:
            for adj in adjacent[pos]:
                stone = stones.get(adj)
                if stone is None or stone == color:
                    yield adj, _IN
            if cell_flow.get(pos, 0) > 0:
                yield pos, _IN

    routes = 0
    while routes < limit:
        parent: dict[tuple[Position, int], tuple[Position, int] | None] = {
            node: None for node in sources
        }
        queue = deque(sources)
        end = None
        while queue:
            node = queue.popleft()
            if node[1] == _OUT and node[0] in edge_cells and node[0] not in stones:
                end = node
                break
            for nxt in steps(node):
                if nxt not in parent:
                    parent[nxt] = node
                    queue.append(nxt)
        if end is None:
            break

        node = end
        while parent[node] is not None:
            prev = parent[node]
            if prev[0] == node[0]:
                cell_flow[node[0]] = cell_flow.get(node[0], 0) + (1 if node[1] == _OUT else -1)
            else:
                u, v = (prev[0], node[0]) if prev[1] == _OUT else (node[0], prev[0])
                delta = 1 if prev[1] == _OUT else -1
                step_flow[(u, v)] = step_flow.get((u, v), 0) + delta
                step_flow[(v, u)] = step_flow.get((v, u), 0) - delta
            node = prev
        routes += 1
    return routes


@dataclass(frozen=True, eq=False)
class GroupInfo:
    """A connected group and its lazily computed escape analysis."""

    stones: frozenset[Position]
    color: StoneColor
    board: Board = field(repr=False)

    @cached_property
    def escape(self) -> EscapeResult:
        return analyze_escape(self.board, self.stones, self.color)

    @cached_property
    def liberties(self) -> frozenset[Position]:
        return frozenset(group_liberties(self.board, self.stones))

    @cached_property
    def routes(self) -> int:
        """Independent escape routes, counted up to two."""
        return independent_escape_routes(self.board, self.stones, self.color, 2)

    @property
    def cuttable(self) -> bool:
        """True if a single stone can separate the group from every exit."""
        return self.routes == 1

    @property
    def sealed(self) -> bool:
        return self.routes == 0

    @property
    def edge_exit_count(self) -> int:
        return self.escape.edge_exit_count

    @property
    def opponent_ratio(self) -> float:
        return self.escape.opponent_ratio

    @property
    def critical_gaps(self) -> frozenset[Position]:
        return self.escape.critical_gaps

    def is_adjacent_to(self, pos: Position) -> bool:
        adjacent = self.board.geometry.adjacent
        return any(adj in self.stones for adj in adjacent[pos])


def find_groups(board: Board, color: StoneColor) -> list[GroupInfo]:
    """All groups of ``color``, in a deterministic order."""
    seen: set[Position] = set()
    groups: list[GroupInfo] = []
    for pos in sorted(board.positions_of(color)):
        if pos in seen:
            continue
        stones = find_group(board, pos)
        seen.update(stones)
        groups.append(GroupInfo(stones=stones, color=color, board=board))
    return groups


@dataclass
class TurnCache:
    """Intermediate structures shared by every candidate in one AI turn."""

    board: Board
    color: StoneColor
    enclosures: tuple[Enclosure, ...]
    forbidden: frozenset[Position]
    ai_groups: list[GroupInfo]
    opponent_groups: list[GroupInfo]
    # Opponent reply cell -> number of AI stones that reply would capture.
    threats: dict[Position, int] = field(default_factory=dict)

    @property
    def opponent(self) -> StoneColor:
        return self.color.opponent

    @property
    def sealed_stones(self) -> frozenset[Position]:
        """AI stones already cut off from the edge; no move of ours saves them."""
        return frozenset().union(*(g.stones for g in self.ai_groups if g.sealed))

    def endangered_groups(self, max_exits: int) -> list[GroupInfo]:
        return [g for g in self.ai_groups if g.edge_exit_count <= max_exits]

    def opponent_groups_near(self, pos: Position, radius: int = 2) -> list[GroupInfo]:
        x, y = pos
        return [
            g
            for g in self.opponent_groups
            if any(max(abs(s.x - x), abs(s.y - y)) <= radius for s in g.stones)
        ]


def build_turn_cache(
    board: Board,
    color: StoneColor,
    enclosures: Sequence[Enclosure] = (),
    *,
    with_threats: bool = True,
) -> TurnCache:
    enclosures = tuple(enclosures)
    cache = TurnCache(
        board=board,
        color=color,
        enclosures=enclosures,
        forbidden=forbidden_positions(enclosures),
        ai_groups=find_groups(board, color),
        opponent_groups=find_groups(board, color.opponent),
    )
    if with_threats:
        cache.threats = find_capture_threats(cache)
    return cache


def find_capture_threats(cache: TurnCache) -> dict[Position, int]:
    """Opponent replies that would capture AI stones on the current board.

    Only groups with exactly one independent escape route can be captured
    by a single stone, and the cutting cell lies on every route, so trying
    the cells of one shortest route finds every threat. Groups that are
    already sealed off are left out: no single move saves them.
    """
    board = cache.board
    tried: set[Position] = set()
    threats: dict[Position, int] = {}
    for group in cache.ai_groups:
        if not group.cuttable:
            continue
        for cell in escape_path(board, group.stones, cache.color):
            if cell in tried or cell in cache.forbidden:
                continue
            tried.add(cell)
            reply = process_move(board, cell, cache.opponent, cache.enclosures)
            if reply.valid and reply.captured_positions:
                threats[cell] = len(reply.captured_positions)
    return threats
