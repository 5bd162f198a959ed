"""
Base AI Player class for Edgeline
Abstract base class that all AI implementations inherit from
"""

from abc import ABC, abstractmethod
from typing import Optional, List, Dict, Any, Sequence
import random

from ..models import AIConfig, StoneColor
from ..rules.board import Board
from ..rules.capture import check_legality
from ..rules.enclosure import Enclosure
from ..rules.geometry import Position


def derive_training_seed(config: AIConfig, color: StoneColor) -> int:
    """
    Derive a deterministic RNG seed when no explicit ``rng_seed`` is given.

    Mixes the difficulty and the side to move into a 32-bit value. Callers
    that care about reproducibility across games (self-play, tests) should
    pass ``rng_seed`` explicitly instead of relying on this fallback.
    """
    side = 1 if color == StoneColor.BLACK else 2
    base = (config.difficulty * 1_000_003) ^ (side * 97_911)
    return int(base & 0xFFFFFFFF)


class BaseAI(ABC):
    """Abstract base class for all AI implementations"""

    def __init__(self, color: StoneColor, config: AIConfig):
        """
        Initialize AI player

        Args:
            color: The color this AI plays
            config: AI configuration settings
        """
        self.color = StoneColor(color)
        self.config = config
        self.move_count = 0

        # Per-instance RNG used for all stochastic behaviour (candidate
        # subsampling, mistakes, final pick). Prefer an explicit rng_seed.
        if self.config.rng_seed is not None:
            self.rng_seed: int = int(self.config.rng_seed)
        else:
            self.rng_seed = derive_training_seed(self.config, self.color)
        self.rng: random.Random = random.Random(self.rng_seed)

    @abstractmethod
    def select_move(
        self,
        board: Board,
        enclosures: Sequence[Enclosure] = (),
        last_opponent_move: Optional[Position] = None,
    ) -> Optional[Position]:
        """
        Select a placement for the current position

        Args:
            board: Current board
            enclosures: Every enclosure registered so far
            last_opponent_move: The opponent's previous placement, if any

        Returns:
            Selected position, or None to pass
        """

    @abstractmethod
    def evaluate_position(
        self,
        board: Board,
        enclosures: Sequence[Enclosure] = (),
    ) -> float:
        """
        Evaluate the current position from this AI's perspective

        Returns:
            Evaluation score (positive = good for this AI, negative = bad)
        """

    def get_evaluation_breakdown(
        self,
        board: Board,
        enclosures: Sequence[Enclosure] = (),
    ) -> Dict[str, float]:
        return {
            "total": self.evaluate_position(board, enclosures)
        }

    def get_valid_moves(
        self,
        board: Board,
        enclosures: Sequence[Enclosure] = (),
    ) -> List[Position]:
        """
        Every legal placement on ``board``. Scans the whole grid.
        """
        return [
            pos
            for pos in board.geometry.adjacent
            if check_legality(board, pos, enclosures) is None
        ]

    def should_pick_random_move(self) -> bool:
        """
        Determine if AI should pick a random move based on randomness setting
        """
        if self.config.randomness is None or self.config.randomness == 0:
            return False
        return self.rng.random() < self.config.randomness

    def get_random_element(self, items: List[Any]) -> Optional[Any]:
        """
        Get random element from list using the per-instance RNG.
        """
        if not items:
            return None
        return self.rng.choice(items)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}"
            f"(color={self.color.value}, "
            f"difficulty={self.config.difficulty})"
        )
