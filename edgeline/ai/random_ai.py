"""Random AI implementation for Edgeline.

This agent selects uniformly random legal placements using the per-instance
RNG on the :class:`BaseAI`. It is intended for soak tests and baselines
rather than competitive play.
"""

from __future__ import annotations

from collections.abc import Sequence

from ..rules.board import Board
from ..rules.enclosure import Enclosure
from ..rules.geometry import Position
from .base import BaseAI


class RandomAI(BaseAI):
    """AI that selects random valid placements."""

    def select_move(
        self,
        board: Board,
        enclosures: Sequence[Enclosure] = (),
        last_opponent_move: Position | None = None,
    ) -> Position | None:
        """Return a random legal placement or ``None`` if the board is full."""
        # Sorted so the pick depends only on the seed, not on dict order.
        valid_moves = sorted(self.get_valid_moves(board, enclosures))
        if not valid_moves:
            return None
        selected = self.get_random_element(valid_moves)
        self.move_count += 1
        return selected

    def evaluate_position(
        self,
        board: Board,
        enclosures: Sequence[Enclosure] = (),
    ) -> float:
        """RandomAI does not evaluate positions; it returns a small random value."""
        return self.rng.uniform(-0.1, 0.1)
