"""Win-condition checks over the accumulated game counters."""
from __future__ import annotations

from ..models import GameMode, GameSettings, StoneColor, WinCheckResult

__all__ = ["check_win_condition", "winner_by_captures"]


def winner_by_captures(black_captures: int, white_captures: int) -> StoneColor | None:
    """Color with strictly more captures, or None on a tie."""
    if black_captures > white_captures:
        return StoneColor.BLACK
    if white_captures > black_captures:
        return StoneColor.WHITE
    return None


def check_win_condition(
    settings: GameSettings,
    move_count: int,
    black_captures: int,
    white_captures: int,
    consecutive_passes: int,
) -> WinCheckResult:
    """Decide whether the game is over.

    In fixed-moves mode ``settings.target_value`` is the move limit; in
    capture-target mode it is the number of captures needed to win. Two
    consecutive passes end the game in either mode.
    """
    target = settings.target_value

    if settings.mode is GameMode.FIXED_MOVES:
        if move_count >= target:
            winner = winner_by_captures(black_captures, white_captures)
            return WinCheckResult.game_over(
                winner=winner,
                reason=(
                    f"{winner.display_name} wins with more captures!"
                    if winner is not None
                    else "Game ended in a tie!"
                ),
            )
    else:
        if black_captures >= target:
            return WinCheckResult.game_over(
                winner=StoneColor.BLACK,
                reason=f"Black reached {target} captures!",
            )
        if white_captures >= target:
            return WinCheckResult.game_over(
                winner=StoneColor.WHITE,
                reason=f"White reached {target} captures!",
            )

    if consecutive_passes >= 2:
        winner = winner_by_captures(black_captures, white_captures)
        return WinCheckResult.game_over(
            winner=winner,
            reason=(
                f"Both players passed. {winner.display_name} wins!"
                if winner is not None
                else "Both players passed. Game ended in a tie!"
            ),
        )

    return WinCheckResult.not_over()
