"""One-shot off-thread dispatch for AI turns.

An AI turn is CPU-bound, so the service never runs it on the event loop.
The inputs are packed into an :class:`AIMoveTask`, handed to an executor,
and a single :class:`AIMoveOutcome` comes back. Nothing is shared with the
worker beyond the pickled task.

Dispatch is selected per call from ``EDGELINE_AI_DISPATCH``:

- ``process`` (default): a shared ``ProcessPoolExecutor``.
- ``thread``: a shared ``ThreadPoolExecutor``.
- ``inline``: run in the caller (tests, self-play).

``EDGELINE_AI_WORKERS`` sets the pool size (0 = executor default) and
``EDGELINE_AI_TIMEOUT_SEC`` the caller-side deadline. A turn that misses the
deadline raises :class:`AITimeoutError`; the worker is left to finish and its
result is discarded.
"""

from __future__ import annotations

import asyncio
import logging
import os
import time
from concurrent.futures import Executor, ProcessPoolExecutor, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass, field

from ..errors import AITimeoutError, ConfigurationError
from ..metrics import AI_MOVE_LATENCY, AI_MOVE_REQUESTS, observe_ai_move_start
from ..models import AIConfig, StoneColor
from ..rules.board import Board
from ..rules.capture import process_move
from ..rules.enclosure import Enclosure
from ..rules.geometry import Position
from .base import derive_training_seed
from .factory import AIFactory, get_difficulty_profile

logger = logging.getLogger(__name__)

DISPATCH_MODES = ("process", "thread", "inline")
DEFAULT_TIMEOUT_SEC = 30.0

# Global persistent pool, created on first use per dispatch mode.
_executor: Executor | None = None
_executor_mode: str | None = None


@dataclass(frozen=True)
class AIMoveTask:
    board: Board
    color: StoneColor
    difficulty: int = 5
    last_opponent_move: Position | None = None
    enclosures: tuple[Enclosure, ...] = ()
    seed: int | None = None
    heuristic_profile_id: str | None = None


@dataclass(frozen=True)
class AIMoveOutcome:
    move: Position | None
    evaluation: float
    seed: int
    seed_source: str
    difficulty: int
    thinking_time_ms: int = 0
    pick_kind: str = ""
    breakdown: dict[str, float] = field(default_factory=dict)


def dispatch_mode() -> str:
    mode = os.getenv("EDGELINE_AI_DISPATCH", "process").lower()
    if mode not in DISPATCH_MODES:
        raise ConfigurationError(
            f"Unknown AI dispatch mode: {mode}",
            context={"allowed": list(DISPATCH_MODES)},
        )
    return mode


def timeout_seconds() -> float | None:
    """Caller-side deadline; 0 or a negative value disables it."""
    raw = os.getenv("EDGELINE_AI_TIMEOUT_SEC", str(DEFAULT_TIMEOUT_SEC))
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigurationError(
            "EDGELINE_AI_TIMEOUT_SEC must be a number",
            context={"value": raw},
        ) from exc
    return value if value > 0 else None


def resolve_seed(task: AIMoveTask) -> tuple[int, str]:
    """Return ``(seed, source)``; source is ``explicit`` or ``derived``."""
    if task.seed is not None:
        return int(task.seed), "explicit"
    level = get_difficulty_profile(task.difficulty).level
    return derive_training_seed(AIConfig(difficulty=level), task.color), "derived"


def compute_ai_move(task: AIMoveTask) -> AIMoveOutcome:
    """Run one AI turn. Module-level so it pickles into worker processes."""
    start = time.perf_counter()
    seed, source = resolve_seed(task)
    ai = AIFactory.create_from_difficulty(
        task.difficulty,
        task.color,
        rng_seed=seed,
        heuristic_profile_id=task.heuristic_profile_id,
    )
    move = ai.select_move(task.board, task.enclosures, task.last_opponent_move)

    board, enclosures = task.board, task.enclosures
    if move is not None:
        result = process_move(board, move, task.color, enclosures)
        board, enclosures = result.board, enclosures + result.new_enclosures
    evaluation = ai.evaluate_position(board, enclosures)

    decision = getattr(ai, "last_decision", None)
    return AIMoveOutcome(
        move=move,
        evaluation=evaluation,
        seed=seed,
        seed_source=source,
        difficulty=ai.config.difficulty,
        thinking_time_ms=int((time.perf_counter() - start) * 1000),
        pick_kind=decision.pick_kind if decision else "",
        breakdown=dict(decision.breakdown) if decision else {},
    )


def _get_executor(mode: str) -> Executor:
    """Get or create the global executor for ``mode``."""
    global _executor, _executor_mode
    if _executor is not None and _executor_mode != mode:
        shutdown_executor()
    if _executor is None:
        workers = int(os.getenv("EDGELINE_AI_WORKERS", "0"))
        max_workers = workers if workers > 0 else None
        if mode == "process":
            _executor = ProcessPoolExecutor(max_workers=max_workers)
        else:
            _executor = ThreadPoolExecutor(
                max_workers=max_workers, thread_name_prefix="edgeline-ai"
            )
        _executor_mode = mode
        logger.info("Started %s AI executor (workers=%s)", mode, max_workers or "auto")
    return _executor


def shutdown_executor() -> None:
    """Shutdown the global executor."""
    global _executor, _executor_mode
    if _executor is not None:
        _executor.shutdown(wait=False)
        _executor = None
        _executor_mode = None


def _record(task: AIMoveTask, outcome: str, started: float) -> None:
    label = observe_ai_move_start(get_difficulty_profile(task.difficulty).level)
    AI_MOVE_REQUESTS.labels(label, outcome).inc()
    AI_MOVE_LATENCY.labels(label).observe(time.perf_counter() - started)


def _timed_out(task: AIMoveTask, timeout: float, started: float) -> AITimeoutError:
    elapsed_ms = int((time.perf_counter() - started) * 1000)
    _record(task, "timeout", started)
    logger.warning(
        "AI turn for %s at difficulty %d missed its %.1fs deadline; result discarded",
        task.color.value,
        task.difficulty,
        timeout,
    )
    return AITimeoutError(
        "AI turn exceeded its deadline",
        time_limit_ms=int(timeout * 1000),
        actual_time_ms=elapsed_ms,
        context={"difficulty": task.difficulty, "color": task.color.value},
    )


def _finish(task: AIMoveTask, outcome: AIMoveOutcome, started: float) -> AIMoveOutcome:
    _record(task, "move" if outcome.move is not None else "pass", started)
    return outcome


def run_ai_move(task: AIMoveTask) -> AIMoveOutcome:
    """Blocking dispatch honoring the configured mode and deadline."""
    mode = dispatch_mode()
    timeout = timeout_seconds()
    started = time.perf_counter()
    try:
        if mode == "inline":
            outcome = compute_ai_move(task)
            if timeout is not None and time.perf_counter() - started > timeout:
                raise _timed_out(task, timeout, started)
            return _finish(task, outcome, started)

        future = _get_executor(mode).submit(compute_ai_move, task)
        try:
            outcome = future.result(timeout=timeout)
        except FutureTimeoutError:
            future.cancel()
            raise _timed_out(task, timeout, started) from None
        return _finish(task, outcome, started)
    except AITimeoutError:
        raise
    except Exception:
        _record(task, "error", started)
        raise


async def run_ai_move_async(task: AIMoveTask) -> AIMoveOutcome:
    """Awaitable dispatch for the service; never blocks the event loop
    except in ``inline`` mode."""
    mode = dispatch_mode()
    timeout = timeout_seconds()
    started = time.perf_counter()
    try:
        if mode == "inline":
            outcome = compute_ai_move(task)
            if timeout is not None and time.perf_counter() - started > timeout:
                raise _timed_out(task, timeout, started)
            return _finish(task, outcome, started)

        loop = asyncio.get_running_loop()
        future = loop.run_in_executor(_get_executor(mode), compute_ai_move, task)
        try:
            outcome = await asyncio.wait_for(future, timeout=timeout)
        except asyncio.TimeoutError:
            raise _timed_out(task, timeout, started) from None
        return _finish(task, outcome, started)
    except AITimeoutError:
        raise
    except Exception:
        _record(task, "error", started)
        raise
