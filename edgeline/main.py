"""
Edgeline Service - FastAPI Application
Provides capture resolution, win checks and AI move selection endpoints
"""

import logging
import os
from contextlib import asynccontextmanager
from typing import List

from fastapi import FastAPI, HTTPException, Response
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from . import __version__
from .ai.factory import get_all_difficulties
from .ai.heuristic_weights import load_profiles_if_available
from .ai.worker import AIMoveTask, run_ai_move_async, shutdown_executor
from .errors import AITimeoutError, ConfigurationError, EdgelineError
from .metrics import record_rules_move
from .models import (
    AIMoveRequest,
    AIMoveResponse,
    EnclosureState,
    MoveRequest,
    MoveResponse,
    PositionModel,
    BoardState,
    WinCheckRequest,
    WinCheckResult,
)
from .rules.capture import process_move
from .rules.win_checker import check_win_condition

# Configure logging
logging.basicConfig(
    level=os.getenv("EDGELINE_LOG_LEVEL", "INFO").upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    load_profiles_if_available()
    yield
    shutdown_executor()


# Create FastAPI app
app = FastAPI(
    title="Edgeline Service",
    description="Rules engine and opponent AI for the Edgeline encirclement game",
    version=__version__,
    lifespan=lifespan,
)

# In production, restrict allow_origins to specific domains
cors_origins = os.getenv("CORS_ORIGINS", "*").split(",")
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/")
async def root():
    """Service banner"""
    return {
        "service": "Edgeline Service",
        "status": "running",
        "version": __version__
    }


@app.get("/health")
async def health_check():
    """Health check for container orchestration"""
    return {"status": "healthy"}


@app.get("/metrics")
async def metrics():
    """Prometheus metrics in the default text exposition format."""
    data = generate_latest()
    return Response(content=data, media_type=CONTENT_TYPE_LATEST)


@app.post("/rules/move", response_model=MoveResponse)
async def resolve_move(request: MoveRequest):
    """
    Apply one placement through the capture resolver.

    A refused placement is a normal response with ``valid=False`` and the
    rejection kind; only malformed state (e.g. overlapping enclosures or
    stones off the board) is an error.
    """
    try:
        board = request.board.to_board()
        enclosures = [e.to_enclosure() for e in request.enclosures]
        pos = request.position.to_position()

        result = process_move(board, pos, request.color, enclosures)
        record_rules_move(result, request.color)

        if not result.valid:
            return MoveResponse(valid=False, errorKind=result.error_kind)
        return MoveResponse(
            valid=True,
            board=BoardState.from_board(result.board),
            capturedPositions=[
                PositionModel.from_position(p) for p in sorted(result.captured_positions)
            ],
            newEnclosures=[
                EnclosureState.from_enclosure(e) for e in result.new_enclosures
            ],
        )
    except EdgelineError as e:
        logger.warning("Rejected /rules/move request: %s", e)
        raise HTTPException(status_code=400, detail=e.to_dict())
    except Exception as e:
        logger.error("Error in /rules/move: %s", str(e), exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


@app.post("/rules/win", response_model=WinCheckResult)
async def win_check(request: WinCheckRequest):
    """Decide whether the game described by the counters is over."""
    return check_win_condition(
        request.settings,
        request.move_count,
        request.black_captures,
        request.white_captures,
        request.consecutive_passes,
    )


@app.post("/ai/move", response_model=AIMoveResponse)
async def get_ai_move(request: AIMoveRequest):
    """
    Get an AI-selected placement for the given board.

    The turn runs off the event loop through the AI worker. ``move`` is
    None when the AI has no legal placement and passes. The seed actually
    used is echoed back with its provenance (``explicit`` or ``derived``)
    so hosts can replay the decision.
    """
    try:
        task = AIMoveTask(
            board=request.board.to_board(),
            color=request.color,
            difficulty=request.difficulty,
            last_opponent_move=(
                request.last_opponent_move.to_position()
                if request.last_opponent_move is not None
                else None
            ),
            enclosures=tuple(e.to_enclosure() for e in request.enclosures),
            seed=request.seed,
            heuristic_profile_id=request.heuristic_profile_id,
        )
        outcome = await run_ai_move_async(task)

        logger.info(
            "AI move: %s difficulty=%d move=%s eval=%.1f time=%dms seed=%d (%s)",
            request.color.value,
            outcome.difficulty,
            outcome.move,
            outcome.evaluation,
            outcome.thinking_time_ms,
            outcome.seed,
            outcome.seed_source,
        )
        return AIMoveResponse(
            move=(
                PositionModel.from_position(outcome.move)
                if outcome.move is not None
                else None
            ),
            passed=outcome.move is None,
            evaluation=outcome.evaluation,
            thinkingTimeMs=outcome.thinking_time_ms,
            difficulty=outcome.difficulty,
            seed=outcome.seed,
            seedSource=outcome.seed_source,
        )
    except AITimeoutError as e:
        raise HTTPException(status_code=504, detail=e.to_dict())
    except ConfigurationError as e:
        logger.error("AI dispatch misconfigured: %s", e)
        raise HTTPException(status_code=500, detail=e.to_dict())
    except EdgelineError as e:
        logger.warning("Rejected /ai/move request: %s", e)
        raise HTTPException(status_code=400, detail=e.to_dict())
    except Exception as e:
        logger.error("Error generating AI move: %s", str(e), exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))


@app.get("/ai/difficulties")
async def list_difficulties() -> List[dict]:
    """The ten difficulty profiles, weakest first."""
    return [profile.to_dict() for _, profile in sorted(get_all_difficulties().items())]


if __name__ == "__main__":
    import uvicorn

    port_str = os.getenv("EDGELINE_PORT", "8001")
    try:
        port = int(port_str)
    except ValueError:
        port = 8001

    uvicorn.run(app, host="0.0.0.0", port=port)
