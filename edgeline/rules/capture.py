"""Capture resolution for a single placement.

``process_move`` is the one entry point both human input and AI simulation
go through. It runs in two phases:

1. Legality. The target cell must be on the board, empty and outside every
   registered enclosure interior (whoever owns it). A refused move is
   reported on the result, never raised.
2. Captures and enclosures. Every opponent stone not yet covered by an
   earlier search seeds ``find_region``. Regions that cannot reach an empty
   edge cell lose all their opponent stones, and a region with a wall
   becomes an enclosure owned by the mover. Afterwards any pocket of empty
   cells that the new stone sealed off with the mover's stones alone is
   registered as claimed territory.

There is no suicide rule: the mover's own stones are never removed by their
own move. For a fixed board and enclosure list the output is fully
deterministic.
"""
from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from ..models import MoveRejection, StoneColor
from .board import Board
from .connectivity import find_enclosed_empty_region, find_region
from .enclosure import Enclosure, forbidden_positions, is_inside_any
from .geometry import Position

logger = logging.getLogger(__name__)

__all__ = ["MoveResult", "is_valid_move", "process_move"]


@dataclass(frozen=True)
class MoveResult:
    """Outcome of ``process_move``.

    On a refused move ``valid`` is False, ``error_kind`` says why and
    ``board`` is None.
    """

    valid: bool
    error_kind: MoveRejection | None = None
    board: Board | None = None
    captured_positions: frozenset[Position] = frozenset()
    new_enclosures: tuple[Enclosure, ...] = ()

    @property
    def capture_count(self) -> int:
        return len(self.captured_positions)

    @classmethod
    def rejected(cls, kind: MoveRejection) -> MoveResult:
        return cls(valid=False, error_kind=kind)


def check_legality(
    board: Board,
    pos: Position,
    enclosures: Sequence[Enclosure] = (),
) -> MoveRejection | None:
    """Return the reason ``pos`` may not be played, or None if it may."""
    if not board.is_valid_position(pos):
        return MoveRejection.OUT_OF_BOUNDS
    if not board.is_empty(pos):
        return MoveRejection.OCCUPIED
    if is_inside_any(pos, enclosures):
        return MoveRejection.INSIDE_ENCLOSURE
    return None


def is_valid_move(
    board: Board,
    pos: Position,
    color: StoneColor,
    enclosures: Sequence[Enclosure] = (),
) -> bool:
    return check_legality(board, Position(*pos), enclosures) is None


def process_move(
    board: Board,
    pos: Position,
    color: StoneColor,
    enclosures: Sequence[Enclosure] = (),
) -> MoveResult:
    """Place ``color`` at ``pos`` and resolve captures and new enclosures."""
    pos = Position(*pos)
    rejection = check_legality(board, pos, enclosures)
    if rejection is not None:
        return MoveResult.rejected(rejection)

    placed = board.place_stone(pos, color)
    existing_interiors = forbidden_positions(enclosures)

    captured, capture_enclosures = _resolve_captures(placed, color, existing_interiors)
    final_board = placed.remove_stones(captured) if captured else placed

    claimed_cells = set(existing_interiors)
    for enclosure in capture_enclosures:
        claimed_cells.update(enclosure.interior_positions)
    territory = _claim_territory(final_board, pos, color, claimed_cells)

    if captured or capture_enclosures or territory:
        logger.debug(
            "%s at %s captured %d stone(s), %d capture enclosure(s), "
            "%d territory claim(s)",
            color.display_name,
            pos,
            len(captured),
            len(capture_enclosures),
            len(territory),
        )

    return MoveResult(
        valid=True,
        board=final_board,
        captured_positions=frozenset(captured),
        new_enclosures=tuple(capture_enclosures + territory),
    )


def _resolve_captures(
    board: Board,
    color: StoneColor,
    existing_interiors: frozenset[Position],
) -> tuple[set[Position], list[Enclosure]]:
    opponent = color.opponent
    checked: set[Position] = set()
    captured: set[Position] = set()
    enclosures: list[Enclosure] = []

    # Sorted so equal boards built in a different order resolve identically.
    for stone in sorted(board.positions_of(opponent)):
        if stone in checked:
            continue
        region = find_region(board, stone, opponent)
        checked.update(region.positions)
        if region.can_escape:
            continue

        captured.update(region.stones(board, opponent))
        if region.wall:
            enclosures.append(
                Enclosure(
                    owner=color,
                    wall_positions=frozenset(region.wall),
                    interior_positions=frozenset(region.positions - existing_interiors),
                )
            )
    return captured, enclosures


def _claim_territory(
    board: Board,
    pos: Position,
    color: StoneColor,
    excluded: set[Position],
) -> list[Enclosure]:
    # A newly sealed pocket must border the stone that sealed it, so the
    # empty neighbours of ``pos`` are the only seeds needed.
    claims: list[Enclosure] = []
    covered: set[Position] = set()
    for adj in board.geometry.adjacent[pos]:
        if adj in covered or not board.is_empty(adj):
            continue
        found = find_enclosed_empty_region(board, adj, color, excluded)
        if found is None:
            continue
        interior, wall = found
        covered.update(interior)
        claims.append(
            Enclosure(
                owner=color,
                wall_positions=frozenset(wall),
                interior_positions=frozenset(interior),
            )
        )
    return claims
