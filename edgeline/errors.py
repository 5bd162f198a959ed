"""
Edgeline Error Hierarchy

Unified exception hierarchy for consistent error handling across the codebase.
All custom exceptions inherit from EdgelineError for easy catching and filtering.

Ordinary illegal placements are not exceptions: ``process_move`` reports
them on its ``MoveResult``. The errors below are raised by the layers that
are handed a move they must apply (board mutation, game-state folding) and
by the AI dispatch path.

Usage:
    from edgeline.errors import RulesViolationError

    try:
        state = GameEngine.place_stone(state, pos)
    except RulesViolationError as e:
        logger.warning("Invalid move: %s, rejection: %s", e.message, e.rejection)
"""

from typing import Any

from .models import MoveRejection

__all__ = [
    # AI errors
    "AIError",
    "AITimeoutError",
    "ConfigurationError",
    # Base error
    "EdgelineError",
    "GameOverError",
    "InvalidMoveError",
    "InvalidStateError",
    # Game rules errors
    "RulesViolationError",
]


class EdgelineError(Exception):
    """Base exception for all Edgeline errors.

    Attributes:
        code: Machine-readable error code for categorization
        message: Human-readable error description
        context: Additional context for debugging
    """
    code: str = "EDGELINE_ERROR"

    def __init__(
        self,
        message: str,
        code: str | None = None,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            ctx = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"[{self.code}] {self.message} ({ctx})"
        return f"[{self.code}] {self.message}"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "code": self.code,
            "message": self.message,
            "context": self.context,
        }


# =============================================================================
# Game Rules Errors
# =============================================================================


class RulesViolationError(EdgelineError):
    """Move refused by the capture resolver.

    Attributes:
        rejection: The MoveRejection reported for the placement
    """
    code: str = "RULES_VIOLATION"

    def __init__(
        self,
        message: str,
        rejection: MoveRejection | None = None,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(message, context=context)
        self.rejection = rejection
        if rejection is not None:
            self.context["rejection"] = rejection.value


class InvalidStateError(EdgelineError):
    """Corrupted or unexpected game state.

    Raised when a board or enclosure list is in a configuration that
    should not be possible through normal gameplay (for example two
    enclosure interiors that overlap).
    """
    code: str = "INVALID_STATE"


class InvalidMoveError(EdgelineError):
    """Placement that cannot be applied to a board.

    Raised by ``Board.place_stone`` for an occupied or off-board cell.
    """
    code: str = "INVALID_MOVE"

    def __init__(
        self,
        message: str,
        rejection: MoveRejection | None = None,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(message, context=context)
        self.rejection = rejection
        if rejection is not None:
            self.context["rejection"] = rejection.value


class GameOverError(InvalidStateError):
    """Action attempted on a finished game."""
    code: str = "GAME_OVER"


# =============================================================================
# AI Errors
# =============================================================================


class AIError(EdgelineError):
    """Base class for AI-related errors."""
    code: str = "AI_ERROR"


class AITimeoutError(AIError):
    """AI turn exceeded the caller's deadline.

    The worker is not interrupted; the caller discards the late result.
    """
    code: str = "AI_TIMEOUT"

    def __init__(
        self,
        message: str,
        time_limit_ms: int | None = None,
        actual_time_ms: int | None = None,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(message, context=context)
        if time_limit_ms:
            self.context["time_limit_ms"] = time_limit_ms
        if actual_time_ms:
            self.context["actual_time_ms"] = actual_time_ms


# =============================================================================
# Validation Errors
# =============================================================================


class ConfigurationError(EdgelineError):
    """Invalid configuration value (environment flag or profile id)."""
    code: str = "CONFIGURATION_ERROR"
