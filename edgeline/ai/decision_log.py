"""Standardized AI decision logging.

Every heuristic turn produces one :class:`AIDecisionLog` entry: how many
candidates were generated, how many were vetoed and why, what was picked and
how long it took. Entries are logged through the standard ``logging`` module
and feed the candidate histogram in :mod:`edgeline.metrics`.

Entries are logged at DEBUG unless ``EDGELINE_AI_DECISION_LOG=true``, in
which case they are promoted to INFO.

Usage:
    from edgeline.ai.decision_log import AIDecisionLog, log_ai_decision

    decision = AIDecisionLog(
        difficulty=5,
        color="white",
        engine_type="heuristic",
        candidates=84,
        time_ms=150.5,
        chosen_move="(24,23)",
        move_score=412.0,
    )
    log_ai_decision(decision)
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from ..metrics import AI_CANDIDATES

logger = logging.getLogger(__name__)


def decision_log_level() -> int:
    """INFO when EDGELINE_AI_DECISION_LOG is enabled, DEBUG otherwise."""
    enabled = os.getenv("EDGELINE_AI_DECISION_LOG", "false").lower() in {"1", "true", "yes"}
    return logging.INFO if enabled else logging.DEBUG


@dataclass
class AIDecisionLog:
    """One AI turn, ready for structured logging."""

    # Context
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    difficulty: int = 0
    color: str = ""
    engine_type: str = ""  # heuristic, random
    board_size: int = 0
    stone_count: int = 0

    # Pipeline
    candidates: int = 0
    threat_candidates: int = 0
    attack_candidates: int = 0
    breaking_candidates: int = 0
    vetoed: int = 0
    veto_reasons: Dict[str, int] = field(default_factory=dict)

    # Timing
    time_ms: float = 0.0

    # Move selection
    chosen_move: str = ""
    move_score: float = 0.0
    best_score: float = 0.0
    pick_kind: str = ""  # strict, loose, dominant, critical, mistake, random, pass
    top_alternatives: List[Tuple[str, float]] = field(default_factory=list)
    breakdown: Dict[str, float] = field(default_factory=dict)

    # Fallback tracking
    used_fallback: bool = False
    fallback_reason: str = ""

    # Error tracking
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        data = asdict(self)
        data['timestamp'] = self.timestamp.isoformat()
        return data

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    def to_structured_log(self) -> Dict[str, Any]:
        """Convert to structured log format for logging frameworks."""
        return {
            "event": "ai_decision",
            "level": "info" if not self.error else "error",
            **self.to_dict(),
        }

    def summary(self) -> str:
        """Human-readable summary."""
        parts = [
            f"[{self.engine_type}:{self.difficulty}]",
            f"{self.color}",
            f"move={self.chosen_move or 'pass'}",
            f"score={self.move_score:.1f}",
            f"best={self.best_score:.1f}",
            f"pick={self.pick_kind}",
            f"candidates={self.candidates}",
            f"time={self.time_ms:.1f}ms",
        ]
        if self.vetoed:
            parts.append(f"vetoed={self.vetoed}")
        if self.used_fallback:
            parts.append(f"fallback={self.fallback_reason}")
        return " ".join(parts)


def log_ai_decision(decision: AIDecisionLog, log_level: int | None = None) -> None:
    """Log an AI decision and record its candidate count.

    Args:
        decision: The decision log entry
        log_level: Logging level (default: from EDGELINE_AI_DECISION_LOG)
    """
    if log_level is None:
        log_level = logging.ERROR if decision.error else decision_log_level()

    # ``extra`` keys must not collide with LogRecord attributes.
    logger.log(log_level, decision.summary(), extra={"ai_decision": decision.to_structured_log()})

    AI_CANDIDATES.labels(str(decision.difficulty)).observe(decision.candidates)
