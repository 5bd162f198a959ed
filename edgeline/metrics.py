"""Prometheus metrics for the Edgeline service.

This module centralises counters and histograms so that the HTTP handlers,
the game engine and the AI decision log can record lightweight telemetry
without each caller managing its own metric instances. Labels are kept to
low-cardinality values (difficulty, outcome, color, kind).
"""

from __future__ import annotations

from typing import Final

from prometheus_client import Counter, Histogram

from .rules.enclosure import EnclosureKind


AI_MOVE_REQUESTS: Final[Counter] = Counter(
    "edgeline_ai_move_requests_total",
    (
        "Total number of AI move computations, labeled by difficulty "
        "and outcome (move, pass, timeout, error)."
    ),
    labelnames=("difficulty", "outcome"),
)

AI_MOVE_LATENCY: Final[Histogram] = Histogram(
    "edgeline_ai_move_latency_seconds",
    "Wall-clock time of one AI turn in seconds, labeled by difficulty.",
    labelnames=("difficulty",),
    # Low levels finish in well under 100ms on small boards; level 10 on a
    # crowded 48x48 board can take several seconds.
    buckets=(
        0.05,
        0.1,
        0.25,
        0.5,
        1.0,
        2.0,
        5.0,
        10.0,
        30.0,
    ),
)

AI_CANDIDATES: Final[Histogram] = Histogram(
    "edgeline_ai_candidates",
    "Candidate moves generated per AI turn, labeled by difficulty.",
    labelnames=("difficulty",),
    buckets=(5, 10, 25, 50, 100, 200, 400, 800),
)

AI_VETOED_MOVES: Final[Counter] = Counter(
    "edgeline_ai_vetoed_moves_total",
    "Candidate moves dropped before scoring, labeled by veto reason.",
    labelnames=("reason",),
)

RULES_MOVES: Final[Counter] = Counter(
    "edgeline_rules_moves_total",
    "Placements resolved by the capture resolver, labeled by outcome.",
    labelnames=("outcome",),
)

STONES_CAPTURED: Final[Counter] = Counter(
    "edgeline_stones_captured_total",
    "Stones captured, labeled by the capturing color.",
    labelnames=("color",),
)

ENCLOSURES_CREATED: Final[Counter] = Counter(
    "edgeline_enclosures_created_total",
    "Enclosures registered, labeled by kind (capture or territory).",
    labelnames=("kind",),
)

INVARIANT_VIOLATIONS: Final[Counter] = Counter(
    "edgeline_invariant_violations_total",
    "Enclosure or board invariant violations detected in strict mode.",
    labelnames=("type",),
)


def observe_ai_move_start(difficulty: int) -> str:
    """Normalise difficulty into its metric label value."""
    return str(difficulty)


def record_rules_move(result, color) -> None:
    """Record the outcome of one ``process_move`` call.

    Args:
        result: The MoveResult returned by the capture resolver
        color: The StoneColor that moved
    """
    if not result.valid:
        RULES_MOVES.labels(result.error_kind.value).inc()
        return
    RULES_MOVES.labels("valid").inc()
    if result.captured_positions:
        STONES_CAPTURED.labels(color.value).inc(len(result.captured_positions))
    for enclosure in result.new_enclosures:
        kind = (
            EnclosureKind.CAPTURE
            if _has_captured_interior(enclosure, result)
            else EnclosureKind.TERRITORY
        )
        ENCLOSURES_CREATED.labels(kind).inc()


def _has_captured_interior(enclosure, result) -> bool:
    return not enclosure.interior_positions.isdisjoint(result.captured_positions)


__all__ = [
    "AI_MOVE_REQUESTS",
    "AI_MOVE_LATENCY",
    "AI_CANDIDATES",
    "AI_VETOED_MOVES",
    "RULES_MOVES",
    "STONES_CAPTURED",
    "ENCLOSURES_CREATED",
    "INVARIANT_VIOLATIONS",
    # Helper functions
    "observe_ai_move_start",
    "record_rules_move",
]
