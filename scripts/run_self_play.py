#!/usr/bin/env python3
"""
AI-vs-AI self-play soak for Edgeline.

Plays complete games through ``GameEngine`` with one AI per side and prints a
summary. Every game is reproducible from ``--seed``: game ``i`` seeds the
black AI with ``seed + i * 1000 + 1`` and the white AI with ``+ 2``.

Usage:
    python -m scripts.run_self_play --num-games 4 --board-size 19 \\
        --black-difficulty 3 --white-difficulty 7 --output summary.json
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import time
from collections import Counter
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from edgeline.ai.base import BaseAI
from edgeline.ai.factory import AIFactory, MAX_DIFFICULTY, MIN_DIFFICULTY
from edgeline.errors import EdgelineError
from edgeline.game_engine import GameEngine, GameState
from edgeline.models import AIConfig, AIType, GameMode, GameSettings, StoneColor

logger = logging.getLogger(__name__)


@dataclass
class GameRecord:
    """Result of one self-play game."""

    index: int
    seed: int
    winner: Optional[str]
    end_reason: str
    move_count: int
    passes: int
    black_captures: int
    white_captures: int
    enclosures: int
    game_time_seconds: float
    moves: List[Optional[str]] = field(default_factory=list, repr=False)


def build_ai(engine: str, difficulty: int, color: StoneColor, seed: int) -> BaseAI:
    if engine == AIType.RANDOM.value:
        return AIFactory.create(
            AIType.RANDOM, color, AIConfig(difficulty=difficulty, rngSeed=seed)
        )
    return AIFactory.create_from_difficulty(difficulty, color, rng_seed=seed)


def play_game(
    index: int,
    *,
    board_size: int,
    settings: GameSettings,
    black: tuple[str, int],
    white: tuple[str, int],
    seed: int,
    max_moves: int,
) -> GameRecord:
    """Play one game to completion or ``max_moves`` turns.

    ``black`` and ``white`` are ``(engine, difficulty)`` pairs.
    """
    game_seed = seed + index * 1000
    ais = {
        StoneColor.BLACK: build_ai(black[0], black[1], StoneColor.BLACK, game_seed + 1),
        StoneColor.WHITE: build_ai(white[0], white[1], StoneColor.WHITE, game_seed + 2),
    }

    state: GameState = GameEngine.new_game(settings, board_size=board_size)
    moves: List[Optional[str]] = []
    passes = 0
    start = time.time()

    while not state.is_over and len(moves) < max_moves:
        ai = ais[state.current_player]
        last_opponent_move = state.last_move
        move = ai.select_move(state.board, state.enclosures, last_opponent_move)
        if move is None:
            state = GameEngine.pass_turn(state)
            passes += 1
        else:
            state = GameEngine.place_stone(state, move)
        moves.append(str(move) if move is not None else None)

    if state.is_over:
        end_reason = state.end_reason or ""
    else:
        end_reason = f"Stopped after {max_moves} moves"

    return GameRecord(
        index=index,
        seed=game_seed,
        winner=state.winner.value if state.winner is not None else None,
        end_reason=end_reason,
        move_count=state.move_count,
        passes=passes,
        black_captures=state.black_captures,
        white_captures=state.white_captures,
        enclosures=len(state.enclosures),
        game_time_seconds=round(time.time() - start, 3),
        moves=moves,
    )


def summarize(records: List[GameRecord]) -> Dict[str, Any]:
    wins = Counter(r.winner or "tie" for r in records)
    total_moves = sum(r.move_count for r in records)
    total_time = sum(r.game_time_seconds for r in records)
    return {
        "games": len(records),
        "wins": dict(wins),
        "total_moves": total_moves,
        "avg_moves": total_moves / len(records) if records else 0.0,
        "avg_black_captures": (
            sum(r.black_captures for r in records) / len(records) if records else 0.0
        ),
        "avg_white_captures": (
            sum(r.white_captures for r in records) / len(records) if records else 0.0
        ),
        "total_time_seconds": round(total_time, 3),
        "sec_per_move": round(total_time / total_moves, 4) if total_moves else 0.0,
    }


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run Edgeline AI-vs-AI self-play games")
    parser.add_argument("--num-games", type=int, default=2)
    parser.add_argument("--board-size", type=int, default=19)
    engines = [AIType.HEURISTIC.value, AIType.RANDOM.value]
    difficulties = range(MIN_DIFFICULTY, MAX_DIFFICULTY + 1)
    parser.add_argument("--black-ai", choices=engines, default=AIType.HEURISTIC.value)
    parser.add_argument("--white-ai", choices=engines, default=AIType.HEURISTIC.value)
    parser.add_argument("--black-difficulty", type=int, choices=difficulties, default=5)
    parser.add_argument("--white-difficulty", type=int, choices=difficulties, default=5)
    parser.add_argument(
        "--mode",
        choices=[m.value for m in GameMode],
        default=GameMode.FIXED_MOVES.value,
    )
    parser.add_argument(
        "--target",
        type=int,
        default=None,
        help="Move limit or capture goal (default: 200 moves or 25 captures).",
    )
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument("--max-moves", type=int, default=1000, help="Safety cap per game")
    parser.add_argument("--output", type=str, default=None, help="Write a JSON summary here")
    parser.add_argument("--include-moves", action="store_true", help="Keep move lists in the JSON")
    parser.add_argument("--log-level", default="INFO")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=args.log_level.upper(),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    mode = GameMode(args.mode)
    target = args.target
    if target is None:
        target = 200 if mode is GameMode.FIXED_MOVES else 25
    settings = GameSettings(mode=mode, target_value=target)

    logger.info(
        "[self-play] %d games on %dx%d, %s:%d vs %s:%d, %s %d",
        args.num_games,
        args.board_size,
        args.board_size,
        args.black_ai,
        args.black_difficulty,
        args.white_ai,
        args.white_difficulty,
        mode.value,
        target,
    )

    records: List[GameRecord] = []
    for i in range(args.num_games):
        try:
            record = play_game(
                i,
                board_size=args.board_size,
                settings=settings,
                black=(args.black_ai, args.black_difficulty),
                white=(args.white_ai, args.white_difficulty),
                seed=args.seed,
                max_moves=args.max_moves,
            )
        except EdgelineError as e:
            logger.error("Game %d aborted: %s", i + 1, e)
            return 1
        records.append(record)
        logger.info(
            "  Game %d/%d (seed=%d): %s in %d moves, captures %d-%d, %.1fs",
            i + 1,
            args.num_games,
            record.seed,
            record.end_reason,
            record.move_count,
            record.black_captures,
            record.white_captures,
            record.game_time_seconds,
        )

    summary = summarize(records)
    print(json.dumps(summary, indent=2))

    if args.output:
        games = [asdict(r) for r in records]
        if not args.include_moves:
            for game in games:
                game.pop("moves")
        payload = {"settings": settings.model_dump(mode="json"), "summary": summary, "games": games}
        Path(args.output).write_text(json.dumps(payload, indent=2))
        logger.info("Wrote summary to %s", args.output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
