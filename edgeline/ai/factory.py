"""Difficulty ladder and AI factory for Edgeline.

This module is the single place where the ten difficulty levels are tuned.
Levels change how much work the heuristic pipeline does (candidate breadth,
which evaluators and tactical candidate sources run) and how loosely it picks
from the ranked list; the margin-based strict pick is the same at every level.

Usage:
    from edgeline.ai.factory import AIFactory, get_difficulty_profile

    # Create AI from difficulty level
    ai = AIFactory.create_from_difficulty(difficulty=5, color=StoneColor.WHITE)

    # Get canonical difficulty profile
    profile = get_difficulty_profile(7)
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import TYPE_CHECKING, Any

from ..models import AIConfig, AIType, StoneColor

if TYPE_CHECKING:
    from .base import BaseAI

logger = logging.getLogger(__name__)

MIN_DIFFICULTY = 1
MAX_DIFFICULTY = 10


@dataclass(frozen=True)
class DifficultyProfile:
    """Tuning for a single ladder level.

    ``strength`` is the probability of a strict pick (uniform among moves
    within the score margin of the best). Otherwise the pick is uniform over
    a loose pool: the top ``top_fraction`` of the positive-score moves, at
    most ``pool_size`` of them. ``candidate_limit`` caps how many ordinary
    candidates are scored per turn (None = all).
    """

    level: int
    strength: float
    candidate_limit: int | None
    use_capture_blocking: bool
    use_urgent_defense: bool
    use_encirclement: bool
    use_attack_positions: bool
    use_breaking_moves: bool
    pool_size: int
    mistake_chance: float
    think_time_ms: int
    profile_id: str
    ai_type: AIType = AIType.HEURISTIC
    description: str = ""

    @property
    def top_fraction(self) -> float:
        return round(1.1 - self.strength, 2)

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["ai_type"] = self.ai_type.value
        data["top_fraction"] = self.top_fraction
        return data


def _pool_size(level: int) -> int:
    if level <= 2:
        return 10
    if level <= 5:
        return 7
    if level <= 8:
        return 5
    return 3


def _profile(
    level: int,
    strength: float,
    candidate_limit: int | None,
    description: str,
    *,
    mistake_chance: float = 0.0,
    think_time_ms: int = 300,
    profile_id: str = "balanced",
) -> DifficultyProfile:
    return DifficultyProfile(
        level=level,
        strength=strength,
        candidate_limit=candidate_limit,
        use_capture_blocking=level >= 2,
        use_urgent_defense=level >= 3,
        use_encirclement=level >= 6,
        use_attack_positions=level >= 4,
        use_breaking_moves=level >= 5,
        pool_size=_pool_size(level),
        mistake_chance=mistake_chance,
        think_time_ms=think_time_ms,
        profile_id=profile_id,
        description=description,
    )


# NOTE: think_time_ms is a presentation hint for hosts that want the AI to
# appear to think; the engine itself never sleeps.
CANONICAL_DIFFICULTY_PROFILES: dict[int, DifficultyProfile] = {
    1: _profile(1, 0.3, 30, "Beginner - narrow look, frequent mistakes", mistake_chance=0.30),
    2: _profile(2, 0.4, 45, "Novice - blocks direct captures", mistake_chance=0.15),
    3: _profile(3, 0.5, 60, "Casual - defends groups close to capture"),
    4: _profile(4, 0.6, 80, "Intermediate - wider candidate pool"),
    5: _profile(5, 0.7, 100, "Skilled - fewer loose picks", think_time_ms=400),
    6: _profile(6, 0.8, 140, "Advanced - tracks encirclements", think_time_ms=500),
    7: _profile(7, 0.85, 180, "Strong - hunts weak groups", think_time_ms=600),
    8: _profile(8, 0.9, 240, "Expert - broad search", think_time_ms=700),
    9: _profile(9, 0.95, None, "Master - scores every candidate", think_time_ms=800),
    10: _profile(10, 1.0, None, "Grandmaster - always within the margin", think_time_ms=1000),
}


def get_difficulty_profile(difficulty: int) -> DifficultyProfile:
    """Return the profile for ``difficulty``.

    Difficulty is clamped into [1, 10] so that out-of-range values still map
    to a well-defined profile instead of silently diverging between callers.
    """
    effective = max(MIN_DIFFICULTY, min(MAX_DIFFICULTY, difficulty))
    return CANONICAL_DIFFICULTY_PROFILES[effective]


def get_all_difficulties() -> dict[int, DifficultyProfile]:
    return CANONICAL_DIFFICULTY_PROFILES.copy()


def get_difficulty_description(difficulty: int) -> str:
    return get_difficulty_profile(difficulty).description


class AIFactory:
    """Centralized factory for creating AI instances."""

    _class_cache: dict[AIType, type[BaseAI]] = {}

    @classmethod
    def _get_ai_class(cls, ai_type: AIType) -> type[BaseAI]:
        if ai_type in cls._class_cache:
            return cls._class_cache[ai_type]

        # Lazy imports to avoid circular dependencies
        if ai_type == AIType.RANDOM:
            from .random_ai import RandomAI
            ai_class = RandomAI
        elif ai_type == AIType.HEURISTIC:
            from .heuristic_ai import HeuristicAI
            ai_class = HeuristicAI
        else:
            raise ValueError(f"Unsupported AI type: {ai_type}")

        cls._class_cache[ai_type] = ai_class
        return ai_class

    @classmethod
    def create(cls, ai_type: AIType, color: StoneColor, config: AIConfig) -> BaseAI:
        """Create an AI instance with explicit type and configuration."""
        ai_class = cls._get_ai_class(ai_type)
        return ai_class(color, config)

    @classmethod
    def create_from_difficulty(
        cls,
        difficulty: int,
        color: StoneColor,
        *,
        rng_seed: int | None = None,
        heuristic_profile_id: str | None = None,
        randomness_override: float | None = None,
    ) -> BaseAI:
        """Create an AI instance from a difficulty level.

        Args:
            difficulty: Difficulty level (clamped into 1-10)
            color: The color the AI plays
            rng_seed: Optional RNG seed for reproducibility
            heuristic_profile_id: Optional weight profile name
            randomness_override: Chance of a purely random candidate (0.0-1.0)

        Returns:
            Configured AI instance
        """
        profile = get_difficulty_profile(difficulty)
        config = AIConfig(
            difficulty=profile.level,
            think_time=profile.think_time_ms,
            randomness=randomness_override,
            rng_seed=rng_seed,
            heuristic_profile_id=heuristic_profile_id or profile.profile_id,
        )
        logger.debug(
            "Creating %s AI for %s at difficulty %d",
            profile.ai_type.value,
            color.value,
            profile.level,
        )
        return cls.create(profile.ai_type, color, config)


# Module-level function aliases
create_ai = AIFactory.create
create_ai_from_difficulty = AIFactory.create_from_difficulty
