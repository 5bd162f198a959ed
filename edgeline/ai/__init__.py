"""AI implementations for Edgeline.

The recommended entry point is the factory:

    from edgeline.ai import create_ai_from_difficulty

    ai = create_ai_from_difficulty(difficulty=5, color=StoneColor.WHITE)
    move = ai.select_move(board, enclosures, last_opponent_move)

Architecture:
- base.py: BaseAI abstract base class
- factory.py: difficulty ladder and AIFactory
- heuristic_ai.py: candidate / veto / score / select pipeline
- turn_cache.py: per-turn group and threat analysis
- veto.py: pre-scoring filters
- evaluators.py: weighted move evaluators
- worker.py: off-thread dispatch for one AI turn
"""

from .base import BaseAI
from .factory import (
    CANONICAL_DIFFICULTY_PROFILES,
    AIFactory,
    DifficultyProfile,
    create_ai,
    create_ai_from_difficulty,
    get_difficulty_profile,
)
from .heuristic_ai import HeuristicAI, ScoredCandidate, select_move
from .random_ai import RandomAI

__all__ = [
    "AIFactory",
    "BaseAI",
    "CANONICAL_DIFFICULTY_PROFILES",
    "DifficultyProfile",
    "HeuristicAI",
    "RandomAI",
    "ScoredCandidate",
    "create_ai",
    "create_ai_from_difficulty",
    "get_difficulty_profile",
    "select_move",
]
