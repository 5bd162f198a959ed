"""Weighted move evaluators for the heuristic AI.

Each evaluator looks at one candidate placement, almost always on the board
produced by simulating it through the capture resolver, and returns a raw
score. :class:`MoveEvaluator` multiplies the raw scores by its ``WEIGHT_*``
attributes and sums them. The weights default to the balanced profile and
can be replaced per instance from
:data:`~edgeline.ai.heuristic_weights.HEURISTIC_WEIGHT_PROFILES`.

The three expensive evaluators (encirclement progress and block, urgent
defense) and capture blocking are gated by the difficulty profile.
"""

from __future__ import annotations

from ..rules.board import Board
from ..rules.capture import MoveResult
from ..rules.connectivity import count_edge_exits
from ..rules.geometry import Position, board_center, chebyshev_distance, window
from .heuristic_weights import get_weights
from .turn_cache import EXIT_CAP, TurnCache

# Score given to a candidate whose simulation was refused.
INVALID_MOVE_SCORE = -1000.0

# Pre-move thresholds for the self-rescue evaluators.
BLOCK_MAX_EXITS = 3
BLOCK_MIN_OPPONENT_RATIO = 0.5
URGENT_MAX_EXITS = 2


class MoveEvaluator:
    """Scores candidate placements for one side.

    Args:
        use_capture_blocking: Enable the capture-blocking evaluator.
        use_urgent_defense: Enable the urgent-defense evaluator.
        use_encirclement: Enable encirclement progress and block.
        profile_id: Optional weight profile name.
    """

    WEIGHT_POSITION = 1.0
    WEIGHT_LIBERTIES = 2.0
    WEIGHT_CONNECTION = 3.0
    WEIGHT_TERRITORY = 5.0
    WEIGHT_CAPTURE = 10.0
    WEIGHT_ENCIRCLEMENT_PROGRESS = 15.0
    WEIGHT_ENCIRCLEMENT_BLOCK = 30.0
    WEIGHT_URGENT_DEFENSE = 50.0
    WEIGHT_CAPTURE_BLOCKING = 100.0

    def __init__(
        self,
        *,
        use_capture_blocking: bool = True,
        use_urgent_defense: bool = True,
        use_encirclement: bool = True,
        profile_id: str | None = None,
    ) -> None:
        self.use_capture_blocking = use_capture_blocking
        self.use_urgent_defense = use_urgent_defense
        self.use_encirclement = use_encirclement
        self.profile_id = profile_id
        self._apply_weight_profile()

    def _apply_weight_profile(self) -> None:
        if not self.profile_id:
            return
        for name, value in get_weights(self.profile_id).items():
            setattr(self, name, value)

    def score(self, cache: TurnCache, pos: Position, result: MoveResult) -> float:
        return self.breakdown(cache, pos, result)["total"]

    def breakdown(
        self,
        cache: TurnCache,
        pos: Position,
        result: MoveResult,
    ) -> dict[str, float]:
        """Weighted contribution of every enabled evaluator plus ``total``."""
        if not result.valid:
            return {"total": INVALID_MOVE_SCORE}

        after = result.board
        parts = {
            "position": self.WEIGHT_POSITION * evaluate_position_bias(after, pos),
            "liberties": self.WEIGHT_LIBERTIES * evaluate_liberties(after, pos),
            "connection": self.WEIGHT_CONNECTION * evaluate_connection(after, pos, cache.color),
            "territory": self.WEIGHT_TERRITORY * evaluate_territory(after, pos, cache.color),
            "capture": self.WEIGHT_CAPTURE * evaluate_capture(result),
        }
        if self.use_encirclement:
            parts["encirclement_progress"] = (
                self.WEIGHT_ENCIRCLEMENT_PROGRESS
                * evaluate_encirclement_progress(cache, pos, after)
            )
            parts["encirclement_block"] = (
                self.WEIGHT_ENCIRCLEMENT_BLOCK
                * evaluate_encirclement_block(cache, after)
            )
        if self.use_urgent_defense:
            parts["urgent_defense"] = (
                self.WEIGHT_URGENT_DEFENSE * evaluate_urgent_defense(cache, pos, after)
            )
        if self.use_capture_blocking:
            parts["capture_blocking"] = (
                self.WEIGHT_CAPTURE_BLOCKING * evaluate_capture_blocking(cache, pos)
            )
        parts["total"] = sum(parts.values())
        return parts


def evaluate_position_bias(board: Board, pos: Position) -> float:
    """1 at the center, falling to 0 at the edge."""
    half = board.size / 2
    return 1.0 - chebyshev_distance(pos, board_center(board.size)) / half


def evaluate_liberties(board: Board, pos: Position) -> float:
    stones = board.stones
    return 5.0 * sum(1 for adj in board.geometry.adjacent[pos] if adj not in stones)


def evaluate_connection(board: Board, pos: Position, color) -> float:
    stones = board.stones
    adjacent = sum(1 for adj in board.geometry.adjacent[pos] if stones.get(adj) == color)
    near = 0
    for other in window(pos, 2, board.size):
        if abs(other.x - pos.x) + abs(other.y - pos.y) == 2 and stones.get(other) == color:
            near += 1
    return 10.0 * adjacent + 2.0 * near


def evaluate_territory(board: Board, pos: Position, color) -> float:
    """Friendly share of the 5x5 window around ``pos``."""
    stones = board.stones
    cells = list(window(pos, 2, board.size))
    friendly = sum(1 for cell in cells if stones.get(cell) == color)
    return 30.0 * friendly / len(cells)


def evaluate_capture(result: MoveResult) -> float:
    score = 50.0 * result.capture_count
    for enclosure in result.new_enclosures:
        score += 200.0 + 5.0 * len(enclosure.interior_positions)
    return score


def evaluate_encirclement_progress(cache: TurnCache, pos: Position, after: Board) -> float:
    """Reward cutting edge exits of nearby opponent groups."""
    opponent = cache.opponent
    score = 0.0
    for group in cache.opponent_groups_near(pos):
        survivors = [s for s in group.stones if after.stones.get(s) == opponent]
        if not survivors:
            continue
        before = group.edge_exit_count
        remaining = count_edge_exits(after, survivors, EXIT_CAP)
        reduction = before - remaining
        if reduction > 0:
            score += 30.0 + 10.0 * reduction
            if remaining <= 3:
                score += 5.0
    return score


def evaluate_encirclement_block(cache: TurnCache, after: Board) -> float:
    """Reward reopening exits of AI groups that are being surrounded."""
    score = 0.0
    for group in cache.endangered_groups(BLOCK_MAX_EXITS):
        if group.opponent_ratio < BLOCK_MIN_OPPONENT_RATIO:
            continue
        increase = count_edge_exits(after, group.stones, EXIT_CAP) - group.edge_exit_count
        if increase > 0:
            score += 40.0 + 15.0 * increase
    return score


def evaluate_urgent_defense(cache: TurnCache, pos: Position, after: Board) -> float:
    score = 0.0
    for group in cache.endangered_groups(URGENT_MAX_EXITS):
        if group.is_adjacent_to(pos):
            score += 50.0
        if count_edge_exits(after, group.stones, EXIT_CAP) > group.edge_exit_count:
            score += 100.0
        if pos in group.critical_gaps:
            score += 80.0
    return score


def evaluate_capture_blocking(cache: TurnCache, pos: Position) -> float:
    count = cache.threats.get(pos)
    if not count:
        return 0.0
    return 150.0 + 30.0 * count
