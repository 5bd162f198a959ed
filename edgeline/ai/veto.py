"""Pre-scoring veto filters.

A candidate that fails any check here is dropped before it is scored. All
checks look at the board *after* the AI stone has been placed and captures
resolved. The one-move check covers every AI stone on that board; the
danger-zone check looks only at the group that contains the new stone.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from enum import Enum
from typing import TYPE_CHECKING

from ..models import StoneColor
from ..rules.board import Board
from ..rules.capture import MoveResult, check_legality, process_move
from ..rules.connectivity import find_group
from ..rules.enclosure import Enclosure
from ..rules.geometry import Position
from .turn_cache import (
    EscapeResult,
    analyze_escape,
    escape_path,
    find_groups,
    independent_escape_routes,
)

if TYPE_CHECKING:
    from .turn_cache import TurnCache


# A group with at least this many independent escape routes needs no simulated replies.
SAFE_EXIT_COUNT = 3


class VetoReason(str, Enum):
    FORT = "fort"
    ONE_MOVE_CAPTURE = "one_move_capture"
    DANGER_ZONE = "danger_zone"


def inside_opponent_fort(
    pos: Position,
    color: StoneColor,
    enclosures: Sequence[Enclosure],
) -> bool:
    opponent = color.opponent
    return any(
        e.owner == opponent and pos in e.interior_positions for e in enclosures
    )


def exposed_cells(
    board: Board,
    color: StoneColor,
    skip: frozenset[Position] = frozenset(),
) -> tuple[list[Position], frozenset[Position]]:
    """Find where one reply could cut off a group of ``color``.

    Returns ``(cells, sealed)``: the empty cells of one shortest route for
    every group with a single independent route, and the stones of groups
    that have no route left at all. Groups touching ``skip`` are ignored.
    """
    cells: list[Position] = []
    sealed: set[Position] = set()
    for group in find_groups(board, color):
        if not group.stones.isdisjoint(skip):
            continue
        if group.sealed:
            sealed.update(group.stones)
        elif group.cuttable:
            cells.extend(escape_path(board, group.stones, color))
    return cells, frozenset(sealed)


def capturable_in_one_move(
    board: Board,
    group: frozenset[Position],
    color: StoneColor,
    enclosures: Sequence[Enclosure],
    watch: Iterable[Position] = (),
    spared: frozenset[Position] = frozenset(),
) -> bool:
    """True if some single opponent reply would capture stones of ``color``.

    ``group`` holds the new stone. Replies on its own escape route are tried together
    with the ``watch`` cells, where a reply may cut off another group. AI
    stones in ``spared`` were sealed off before the move and are lost
    whatever it is, so capturing them does not count.

    Replies are simulated with the full capture resolver. A group with no
    route at all is lost to any legal reply.
    """
    routes = independent_escape_routes(board, group, color, SAFE_EXIT_COUNT)
    if routes == 0:
        return any(
            check_legality(board, pos, enclosures) is None
            for pos in board.geometry.adjacent
        )
    cells = escape_path(board, group, color) if routes < SAFE_EXIT_COUNT else []
    for cell in watch:
        if cell not in cells:
            cells.append(cell)

    opponent = color.opponent
    for gap in cells:
        reply = process_move(board, gap, opponent, enclosures)
        if reply.valid and reply.captured_positions - spared:
            return True
    return False


def in_danger_zone(escape: EscapeResult) -> bool:
    """Classify a region by exits, opponent share of its border and critical gaps."""
    exits = escape.edge_exit_count
    if exits == 0:
        return True
    if exits <= 2:
        return escape.opponent_ratio >= 0.6
    if exits <= 4:
        return (
            escape.opponent_ratio >= 0.4
            and len(escape.critical_gaps) >= exits
        )
    return False


def check_veto(
    pos: Position,
    color: StoneColor,
    enclosures: Sequence[Enclosure],
    result: MoveResult,
    cache: TurnCache | None = None,
) -> VetoReason | None:
    """Return why ``pos`` must not be played, or None if it survives.

    ``result`` is the simulated placement of ``color`` at ``pos``. Invalid
    simulations are left for scoring to rank last.

    ``cache`` is the turn cache of the board before the move. Our own stone
    never takes an escape route away from another of our groups, so the
    cells where a reply cuts one off are among the turn's capture threats.
    Without a cache, or when the move captured stones and may have reopened
    a sealed group, they are recomputed from the simulated board.
    """
    if inside_opponent_fort(pos, color, enclosures):
        return VetoReason.FORT
    if not result.valid:
        return None

    after = result.board
    after_enclosures = tuple(enclosures) + result.new_enclosures
    group = find_group(after, pos)
    if cache is not None and not result.captured_positions:
        watch, spared = sorted(cache.threats), cache.sealed_stones - group
    else:
        watch, spared = exposed_cells(after, color, skip=group)
    if capturable_in_one_move(after, group, color, after_enclosures, watch, spared):
        return VetoReason.ONE_MOVE_CAPTURE
    if in_danger_zone(analyze_escape(after, group, color)):
        return VetoReason.DANGER_ZONE
    return None
