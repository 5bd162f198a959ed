"""Game-state record for Edgeline.

The rules layer is pure: ``process_move`` takes a board and an enclosure
list and returns what changed. This module folds those results into the
running record a host keeps between turns (capture counters, pass count,
move count, history for undo) and applies the win check after every action.

``GameState`` values are immutable; every ``GameEngine`` operation returns a
new state whose ``history`` ends with the state it was derived from, so
``undo`` restores everything, capture counters and enclosures included.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, replace
from typing import Optional

from .errors import GameOverError, InvalidStateError, RulesViolationError
from .metrics import INVARIANT_VIOLATIONS, record_rules_move
from .models import GameMode, GameSettings, GameStatus, StoneColor, WinCheckResult
from .rules.board import DEFAULT_BOARD_SIZE, Board
from .rules.capture import MoveResult, process_move
from .rules.enclosure import Enclosure, validate_enclosures
from .rules.geometry import Position
from .rules.win_checker import check_win_condition

logger = logging.getLogger(__name__)

# When enabled, enclosure invariants are re-validated after every placement.
# Off by default: the check is linear in the total enclosed area.
STRICT_INVARIANTS = os.getenv("EDGELINE_STRICT_INVARIANTS", "false").lower() == "true"


@dataclass(frozen=True)
class GameState:
    """Everything a host needs to continue or display a game."""

    settings: GameSettings
    board: Board
    enclosures: tuple[Enclosure, ...] = ()
    current_player: StoneColor = StoneColor.BLACK
    move_count: int = 0
    black_captures: int = 0
    white_captures: int = 0
    last_move: Optional[Position] = None
    status: GameStatus = GameStatus.PLAYING
    winner: Optional[StoneColor] = None
    end_reason: Optional[str] = None
    consecutive_passes: int = 0
    history: tuple["GameState", ...] = field(default=(), repr=False)

    def captures_for(self, color: StoneColor) -> int:
        return self.black_captures if color is StoneColor.BLACK else self.white_captures

    @property
    def can_undo(self) -> bool:
        return bool(self.history)

    @property
    def is_over(self) -> bool:
        return self.status is GameStatus.FINISHED

    @property
    def progress_text(self) -> str:
        if self.settings.mode is GameMode.FIXED_MOVES:
            return f"Move {self.move_count + 1}/{self.settings.target_value}"
        return f"First to {self.settings.target_value}"


class GameEngine:
    """Stateless operations over ``GameState``."""

    @staticmethod
    def new_game(
        settings: GameSettings | None = None,
        board_size: int = DEFAULT_BOARD_SIZE,
    ) -> GameState:
        return GameState(
            settings=settings or GameSettings(),
            board=Board(board_size),
        )

    @staticmethod
    def place_stone(state: GameState, pos: Position) -> GameState:
        """Play the current player's stone at ``pos``.

        Raises:
            GameOverError: if the game has already finished.
            RulesViolationError: if the capture resolver refuses the move.
        """
        GameEngine._require_playing(state)
        mover = state.current_player
        result = process_move(state.board, pos, mover, state.enclosures)
        record_rules_move(result, mover)
        if not result.valid:
            raise RulesViolationError(
                "Move rejected by the capture resolver",
                rejection=result.error_kind,
                context={"position": str(Position(*pos)), "player": mover.value},
            )
        return GameEngine._fold_move(state, Position(*pos), result)

    @staticmethod
    def try_place_stone(state: GameState, pos: Position) -> tuple[GameState, MoveResult]:
        """Like ``place_stone`` but reports a refused move instead of raising.

        The returned state is unchanged when the move was refused.
        """
        GameEngine._require_playing(state)
        mover = state.current_player
        result = process_move(state.board, pos, mover, state.enclosures)
        record_rules_move(result, mover)
        if not result.valid:
            return state, result
        return GameEngine._fold_move(state, Position(*pos), result), result

    @staticmethod
    def _fold_move(state: GameState, pos: Position, result: MoveResult) -> GameState:
        """Apply an accepted ``result`` for the current player."""
        mover = state.current_player
        black_captures = state.black_captures
        white_captures = state.white_captures
        if mover is StoneColor.BLACK:
            black_captures += result.capture_count
        else:
            white_captures += result.capture_count

        enclosures = state.enclosures + result.new_enclosures
        if STRICT_INVARIANTS:
            GameEngine._assert_enclosure_invariants(enclosures)

        next_state = replace(
            state,
            board=result.board,
            enclosures=enclosures,
            current_player=mover.opponent,
            move_count=state.move_count + 1,
            black_captures=black_captures,
            white_captures=white_captures,
            last_move=pos,
            consecutive_passes=0,
            history=state.history + (state,),
        )
        if result.capture_count:
            logger.info(
                "Move %d: %s at %s captured %d (black=%d, white=%d)",
                next_state.move_count,
                mover.display_name,
                pos,
                result.capture_count,
                black_captures,
                white_captures,
            )
        return GameEngine._apply_win_check(next_state)

    @staticmethod
    def pass_turn(state: GameState) -> GameState:
        GameEngine._require_playing(state)
        next_state = replace(
            state,
            current_player=state.current_player.opponent,
            move_count=state.move_count + 1,
            consecutive_passes=state.consecutive_passes + 1,
            last_move=None,
            history=state.history + (state,),
        )
        logger.debug(
            "Move %d: %s passed (consecutive passes=%d)",
            next_state.move_count,
            state.current_player.display_name,
            next_state.consecutive_passes,
        )
        return GameEngine._apply_win_check(next_state)

    @staticmethod
    def undo(state: GameState) -> GameState:
        """Return the state before the last placement or pass.

        Raises:
            InvalidStateError: if there is nothing to undo.
        """
        if not state.history:
            raise InvalidStateError("Nothing to undo", context={"move_count": state.move_count})
        return state.history[-1]

    @staticmethod
    def check_win(state: GameState) -> WinCheckResult:
        return check_win_condition(
            state.settings,
            state.move_count,
            state.black_captures,
            state.white_captures,
            state.consecutive_passes,
        )

    @staticmethod
    def _apply_win_check(state: GameState) -> GameState:
        outcome = GameEngine.check_win(state)
        if not outcome.over:
            return state
        logger.info("Game over after %d moves: %s", state.move_count, outcome.reason)
        return replace(
            state,
            status=GameStatus.FINISHED,
            winner=outcome.winner,
            end_reason=outcome.reason,
        )

    @staticmethod
    def _require_playing(state: GameState) -> None:
        if state.status is not GameStatus.PLAYING:
            raise GameOverError(
                "Game is not in progress",
                context={"status": state.status.value, "reason": state.end_reason},
            )

    @staticmethod
    def _assert_enclosure_invariants(enclosures: tuple[Enclosure, ...]) -> None:
        try:
            validate_enclosures(enclosures)
        except InvalidStateError:
            INVARIANT_VIOLATIONS.labels("enclosure_overlap").inc()
            logger.error("Enclosure invariant violated", exc_info=True)
            raise
