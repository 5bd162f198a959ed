"""
Heuristic AI implementation for Edgeline.

One turn runs a fixed pipeline over a single ply, with no lookahead:

1. Candidate generation. With fewer than four stones on the board the
   candidates are the cells within two of the center, within two of the
   opponent's last move, and the star points; otherwise every empty cell
   within two (Chebyshev) of any stone. Cells inside a registered enclosure
   are dropped. Opponent replies that would capture AI stones (the capture-
   threat map) are always added, and so are attack positions and breaking
   moves from :mod:`edgeline.ai.tactics` when the profile enables them.
2. Veto. Each candidate is simulated through the capture resolver and
   dropped if it lands in an opponent fort, lets a single reply capture
   any AI stone, or leaves its group in the danger zone. Capture-threat,
   attack and breaking cells are exempt.
3. Scoring. Survivors are scored by :class:`MoveEvaluator`; a refused
   simulation scores ``INVALID_MOVE_SCORE`` and sorts last.
4. Selection. A move that leads the field by more than ``DOMINANT_LEAD`` is
   always played, and a best score of ``CRITICAL_SCORE`` or more narrows
   the choice to the critical tier. Otherwise the ranked list is sampled
   according to the difficulty profile (see ``HeuristicAI._select``). A
   strict pick is uniform among moves within ``SCORE_MARGIN`` of the best.

The difficulty profile bounds the work: ``candidate_limit`` subsamples the
ordinary candidates with the instance RNG, and the expensive evaluators are
only enabled from the levels listed in :mod:`edgeline.ai.factory`.

All randomness comes from ``self.rng``, so a fixed ``rng_seed`` reproduces a
turn exactly.
"""

from __future__ import annotations

import logging
import time
from collections import Counter
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from random import Random
from typing import Optional

from ..metrics import AI_VETOED_MOVES
from ..models import AIConfig, StoneColor
from ..rules.board import Board
from ..rules.capture import process_move
from ..rules.enclosure import Enclosure
from ..rules.geometry import Position, board_center, star_points, window
from .base import BaseAI
from .decision_log import AIDecisionLog, log_ai_decision
from .evaluators import MoveEvaluator
from .factory import get_difficulty_profile
from .tactics import find_attack_positions, find_breaking_moves
from .turn_cache import TurnCache, build_turn_cache
from .veto import VetoReason, check_veto

logger = logging.getLogger(__name__)

# Moves within this many points of the best are interchangeable.
SCORE_MARGIN = 2.0

# A best move this far ahead of the runner-up is always played.
DOMINANT_LEAD = 200.0
# From this best score on only the critical tier (within CRITICAL_TIER of
# the best) is considered; blocks and captures score in this range.
CRITICAL_SCORE = 500.0
CRITICAL_TIER = 200.0
# Levels from here on always take the best critical move.
CRITICAL_BEST_LEVEL = 7

# Loose picks ignore moves below max(best * QUALITY_RATIO, best - QUALITY_GAP).
QUALITY_RATIO = 0.5
QUALITY_GAP = 50.0

# Below this many stones the candidates come from the opening pattern.
OPENING_STONE_THRESHOLD = 4

CANDIDATE_RADIUS = 2

# Mistakes only happen when there is a meaningful bottom half to pick from.
MISTAKE_MIN_MOVES = 5

# Groups with at most this many exits count against the evaluation.
ENDANGERED_EXITS = 2


@dataclass(frozen=True)
class ScoredCandidate:
    position: Position
    score: float
    valid: bool = True
    # window, threat, attack or break
    source: str = "window"
    breakdown: dict[str, float] = field(default_factory=dict, compare=False, repr=False)


class HeuristicAI(BaseAI):
    """Veto, score and sample single-ply placements.

    The difficulty profile is resolved once from ``config.difficulty``. The
    evaluator weights come from ``config.heuristic_profile_id`` when set,
    otherwise from the profile's own ``profile_id``.
    """

    def __init__(self, color: StoneColor, config: AIConfig) -> None:
        super().__init__(color, config)
        self.profile = get_difficulty_profile(config.difficulty)
        self.evaluator = MoveEvaluator(
            use_capture_blocking=self.profile.use_capture_blocking,
            use_urgent_defense=self.profile.use_urgent_defense,
            use_encirclement=self.profile.use_encirclement,
            profile_id=config.heuristic_profile_id or self.profile.profile_id,
        )
        self.last_decision: AIDecisionLog | None = None
        self.last_ranking: list[ScoredCandidate] = []

    def select_move(
        self,
        board: Board,
        enclosures: Sequence[Enclosure] = (),
        last_opponent_move: Optional[Position] = None,
    ) -> Optional[Position]:
        """Select a placement, or ``None`` when there is no legal one (pass)."""
        start = time.perf_counter()
        enclosures = tuple(enclosures)
        cache = build_turn_cache(board, self.color, enclosures)
        decision = AIDecisionLog(
            difficulty=self.profile.level,
            color=self.color.value,
            engine_type="heuristic",
            board_size=board.size,
            stone_count=board.stone_count,
        )

        ordinary, exempt = self.generate_candidates(cache, last_opponent_move)
        sources = Counter(exempt.values())
        decision.candidates = len(ordinary) + len(exempt)
        decision.threat_candidates = sources["threat"]
        decision.attack_candidates = sources["attack"]
        decision.breaking_candidates = sources["break"]

        ranked, vetoed = self.score_candidates(cache, ordinary, exempt)
        decision.vetoed = len(vetoed)
        decision.veto_reasons = dict(Counter(reason.value for _, reason in vetoed))

        if not any(c.valid for c in ranked) and vetoed:
            # Every candidate was vetoed: play the least bad of them rather
            # than pass with stones still exposed.
            decision.used_fallback = True
            decision.fallback_reason = "all_vetoed"
            logger.debug(
                "All %d candidates vetoed for %s; ranking them anyway",
                len(vetoed),
                self.color.value,
            )
            ranked = self._rank(cache, [pos for pos, _ in vetoed])
        if not any(c.valid for c in ranked):
            remaining = self._sample(self.get_valid_moves(board, enclosures))
            if remaining:
                decision.used_fallback = True
                decision.fallback_reason = "no_local_candidates"
                logger.debug("No local candidates for %s; scanning the board", self.color.value)
                ranked = self._rank(cache, remaining)

        self.last_ranking = ranked
        legal = [c for c in ranked if c.valid]
        if not legal:
            decision.pick_kind = "pass"
            chosen = None
        elif self.should_pick_random_move():
            decision.pick_kind = "random"
            chosen = self.rng.choice(legal)
        else:
            chosen, decision.pick_kind = self._select(legal)

        decision.time_ms = (time.perf_counter() - start) * 1000
        if chosen is not None:
            decision.chosen_move = str(chosen.position)
            decision.move_score = chosen.score
            decision.best_score = legal[0].score
            decision.breakdown = dict(chosen.breakdown)
            decision.top_alternatives = [(str(c.position), c.score) for c in legal[:5]]
            self.move_count += 1
        self.last_decision = decision
        log_ai_decision(decision)
        return chosen.position if chosen is not None else None

    def generate_candidates(
        self,
        cache: TurnCache,
        last_opponent_move: Optional[Position] = None,
    ) -> tuple[list[Position], dict[Position, str]]:
        """Return ``(ordinary, exempt)`` candidates.

        ``ordinary`` has already been subsampled to the profile's
        ``candidate_limit``. ``exempt`` maps capture-threat cells, plus the
        attack and breaking cells the profile enables, to their source; they
        are never subsampled or vetoed.
        """
        board = cache.board
        size = board.size
        stones = board.stones

        cells: set[Position] = set()
        if board.stone_count < OPENING_STONE_THRESHOLD:
            cells.update(window(board_center(size), CANDIDATE_RADIUS, size))
            if last_opponent_move is not None:
                last = Position(*last_opponent_move)
                if board.is_valid_position(last):
                    cells.update(window(last, CANDIDATE_RADIUS, size))
            cells.update(star_points(size))
        else:
            for stone in stones:
                cells.update(window(stone, CANDIDATE_RADIUS, size))

        exempt: dict[Position, str] = {pos: "threat" for pos in sorted(cache.threats)}
        if self.profile.use_attack_positions:
            for pos in sorted(find_attack_positions(cache)):
                exempt.setdefault(pos, "attack")
        if self.profile.use_breaking_moves:
            for pos in sorted(find_breaking_moves(cache)):
                exempt.setdefault(pos, "break")

        ordinary = sorted(
            pos
            for pos in cells
            if pos not in stones and pos not in cache.forbidden and pos not in exempt
        )
        return self._sample(ordinary), exempt

    def score_candidates(
        self,
        cache: TurnCache,
        ordinary: Sequence[Position],
        exempt: Mapping[Position, str] | None = None,
    ) -> tuple[list[ScoredCandidate], list[tuple[Position, VetoReason]]]:
        """Veto then score; returns the ranked survivors and the vetoed cells."""
        survivors: list[ScoredCandidate] = []
        vetoed: list[tuple[Position, VetoReason]] = []
        for pos, source in (exempt or {}).items():
            survivors.append(self._score(cache, pos, source=source))
        for pos in ordinary:
            result = process_move(cache.board, pos, self.color, cache.enclosures)
            reason = check_veto(pos, self.color, cache.enclosures, result, cache)
            if reason is not None:
                vetoed.append((pos, reason))
                AI_VETOED_MOVES.labels(reason.value).inc()
                continue
            survivors.append(self._score(cache, pos, result=result))
        return self._sorted(survivors), vetoed

    def _score(self, cache: TurnCache, pos: Position, *, source: str = "window", result=None) -> ScoredCandidate:
        if result is None:
            result = process_move(cache.board, pos, self.color, cache.enclosures)
        breakdown = self.evaluator.breakdown(cache, pos, result)
        return ScoredCandidate(
            position=pos,
            score=breakdown["total"],
            valid=result.valid,
            source=source,
            breakdown=breakdown,
        )

    def _rank(self, cache: TurnCache, positions: Sequence[Position]) -> list[ScoredCandidate]:
        return self._sorted([self._score(cache, pos) for pos in positions])

    @staticmethod
    def _sorted(candidates: list[ScoredCandidate]) -> list[ScoredCandidate]:
        # Position breaks ties so equal scores rank the same on every run.
        return sorted(candidates, key=lambda c: (-c.score, c.position))

    def _sample(self, positions: list[Position]) -> list[Position]:
        limit = self.profile.candidate_limit
        if limit is None or len(positions) <= limit:
            return positions
        return sorted(self.rng.sample(positions, limit))

    def _select(self, ranked: list[ScoredCandidate]) -> tuple[ScoredCandidate, str]:
        """Pick from a non-empty list sorted best first.

        - With probability ``mistake_chance`` (and more than
          ``MISTAKE_MIN_MOVES`` moves) pick from the bottom half.
        - A best move more than ``DOMINANT_LEAD`` ahead of the runner-up is
          taken outright.
        - When the best score reaches ``CRITICAL_SCORE`` the pick stays in
          the critical tier: its best move from ``CRITICAL_BEST_LEVEL`` on or
          with probability ``strength``, otherwise any move of the tier.
        - With probability ``1 - strength`` pick from the loose pool: the top
          ``top_fraction`` of the positive-score moves (all moves if none
          is positive), capped at ``pool_size`` and cut below the quality
          floor.
        - Otherwise pick among moves within ``SCORE_MARGIN`` of the best.
        """
        profile = self.profile
        n = len(ranked)
        if (
            profile.mistake_chance > 0
            and n > MISTAKE_MIN_MOVES
            and self.rng.random() < profile.mistake_chance
        ):
            return self.rng.choice(ranked[n // 2:]), "mistake"

        best = ranked[0].score
        runner_up = ranked[1].score if n > 1 else best
        if best - runner_up > DOMINANT_LEAD:
            return ranked[0], "dominant"

        if best >= CRITICAL_SCORE:
            tier = [c for c in ranked if c.score >= best - CRITICAL_TIER]
            if profile.level >= CRITICAL_BEST_LEVEL or self.rng.random() < profile.strength:
                return tier[0], "critical"
            return self.rng.choice(tier), "critical"

        if self.rng.random() >= profile.strength:
            pool = [c for c in ranked if c.score > 0] or ranked
            size = min(profile.pool_size, max(1, round(len(pool) * profile.top_fraction)))
            pool = pool[:size]
            lead = pool[0].score
            if lead > 0:
                floor = max(lead * QUALITY_RATIO, lead - QUALITY_GAP)
                pool = [c for c in pool if c.score >= floor]
            return self.rng.choice(pool), "loose"

        return self.rng.choice([c for c in ranked if c.score >= best - SCORE_MARGIN]), "strict"

    def evaluate_position(
        self,
        board: Board,
        enclosures: Sequence[Enclosure] = (),
    ) -> float:
        return self.get_evaluation_breakdown(board, enclosures)["total"]

    def get_evaluation_breakdown(
        self,
        board: Board,
        enclosures: Sequence[Enclosure] = (),
    ) -> dict[str, float]:
        """Static evaluation from this AI's side.

        Components: enclosed interior cells (own minus opponent's), stones
        on the board (own minus opponent's), and stones in groups with at
        most two edge exits (opponent's minus own).
        """
        cache = build_turn_cache(board, self.color, enclosures, with_threats=False)
        territory = 0.0
        for enclosure in cache.enclosures:
            size = len(enclosure.interior_positions)
            territory += size if enclosure.owner == self.color else -size
        material = float(board.count(self.color) - board.count(self.color.opponent))
        danger = 0.0
        for group in cache.ai_groups:
            if group.edge_exit_count <= ENDANGERED_EXITS:
                danger -= len(group.stones)
        for group in cache.opponent_groups:
            if group.edge_exit_count <= ENDANGERED_EXITS:
                danger += len(group.stones)
        return {
            "territory": territory,
            "material": material,
            "danger": danger,
            "total": territory + material + danger,
        }


def select_move(
    board: Board,
    color: StoneColor,
    difficulty: int,
    last_opponent_move: Optional[Position] = None,
    enclosures: Sequence[Enclosure] = (),
    rng: Random | None = None,
    heuristic_profile_id: str | None = None,
) -> Optional[Position]:
    """Pick a placement for ``color``, or ``None`` to pass.

    ``rng`` replaces the AI's seeded generator when given, so callers can
    thread one generator through a whole game.
    """
    config = AIConfig(
        difficulty=get_difficulty_profile(difficulty).level,
        heuristic_profile_id=heuristic_profile_id,
    )
    ai = HeuristicAI(color, config)
    if rng is not None:
        ai.rng = rng
    return ai.select_move(board, enclosures, last_opponent_move)
