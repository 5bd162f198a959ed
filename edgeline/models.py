"""
Pydantic Models for the Edgeline service
Shared enums plus the wire shapes accepted and returned by the HTTP API.

The rules and AI layers work on the lightweight value types in
``edgeline.rules`` (``Position``, ``Board``, ``Enclosure``). The models here
convert to and from those types at the service boundary.
"""

from pydantic import BaseModel, Field, field_validator
from typing import Optional, List, Tuple
from enum import Enum


class StoneColor(str, Enum):
    """Stone color enumeration. Black always moves first."""
    BLACK = "black"
    WHITE = "white"

    @property
    def opponent(self) -> "StoneColor":
        return StoneColor.WHITE if self is StoneColor.BLACK else StoneColor.BLACK

    @property
    def display_name(self) -> str:
        return self.value.capitalize()


class GameMode(str, Enum):
    """How a game ends"""
    FIXED_MOVES = "fixed_moves"
    CAPTURE_TARGET = "capture_target"

    @property
    def display_name(self) -> str:
        if self is GameMode.FIXED_MOVES:
            return "Fixed Moves"
        return "Capture Target"

    @property
    def description(self) -> str:
        if self is GameMode.FIXED_MOVES:
            return "Game ends after a set number of moves"
        return "First to capture target stones wins"

    @property
    def target_options(self) -> Tuple[int, ...]:
        if self is GameMode.FIXED_MOVES:
            return (100, 200, 500)
        return (10, 25, 50)


class GameStatus(str, Enum):
    """Game status enumeration"""
    SETUP = "setup"
    PLAYING = "playing"
    FINISHED = "finished"


class MoveRejection(str, Enum):
    """Why a placement was refused by the capture resolver"""
    OUT_OF_BOUNDS = "out_of_bounds"
    OCCUPIED = "occupied"
    INSIDE_ENCLOSURE = "inside_enclosure"


class AIType(str, Enum):
    """AI type enumeration"""
    RANDOM = "random"
    HEURISTIC = "heuristic"


class PositionModel(BaseModel):
    """Board coordinate on the wire"""
    x: int
    y: int

    class Config:
        frozen = True

    def to_position(self):
        from .rules.geometry import Position
        return Position(self.x, self.y)

    @classmethod
    def from_position(cls, pos) -> "PositionModel":
        return cls(x=pos.x, y=pos.y)


class StonePlacement(BaseModel):
    """One occupied cell"""
    position: PositionModel
    color: StoneColor


class BoardState(BaseModel):
    """Sparse board snapshot: only occupied cells are listed."""
    size: int = Field(48, ge=3, le=256)
    stones: List[StonePlacement] = Field(default_factory=list)

    def to_board(self):
        from .rules.board import Board
        return Board(
            self.size,
            {s.position.to_position(): s.color for s in self.stones},
        )

    @classmethod
    def from_board(cls, board) -> "BoardState":
        stones = [
            StonePlacement(position=PositionModel.from_position(pos), color=color)
            for pos, color in sorted(board.stones.items())
        ]
        return cls(size=board.size, stones=stones)


class EnclosureState(BaseModel):
    """Fort snapshot"""
    owner: StoneColor
    wall_positions: List[PositionModel] = Field(alias="wallPositions")
    interior_positions: List[PositionModel] = Field(alias="interiorPositions")

    class Config:
        populate_by_name = True

    def to_enclosure(self):
        from .rules.enclosure import Enclosure
        return Enclosure(
            owner=self.owner,
            wall_positions=frozenset(p.to_position() for p in self.wall_positions),
            interior_positions=frozenset(
                p.to_position() for p in self.interior_positions
            ),
        )

    @classmethod
    def from_enclosure(cls, enclosure) -> "EnclosureState":
        return cls(
            owner=enclosure.owner,
            wallPositions=[
                PositionModel.from_position(p) for p in sorted(enclosure.wall_positions)
            ],
            interiorPositions=[
                PositionModel.from_position(p)
                for p in sorted(enclosure.interior_positions)
            ],
        )


class GameSettings(BaseModel):
    """Mode plus its target (move limit or capture goal)"""
    mode: GameMode = GameMode.FIXED_MOVES
    target_value: int = Field(200, alias="targetValue", gt=0)

    class Config:
        frozen = True
        populate_by_name = True


class AIConfig(BaseModel):
    """AI configuration"""
    difficulty: int = Field(ge=1, le=10)
    think_time: Optional[int] = Field(None, alias="thinkTime")
    randomness: Optional[float] = Field(None, ge=0, le=1)
    rng_seed: Optional[int] = Field(None, alias="rngSeed")
    heuristic_profile_id: Optional[str] = Field(None, alias="heuristicProfileId")

    class Config:
        populate_by_name = True


class WinCheckResult(BaseModel):
    """Outcome of a win-condition check"""
    over: bool
    winner: Optional[StoneColor] = None
    reason: Optional[str] = None

    class Config:
        frozen = True

    @classmethod
    def not_over(cls) -> "WinCheckResult":
        return cls(over=False)

    @classmethod
    def game_over(
        cls,
        reason: str,
        winner: Optional[StoneColor] = None,
    ) -> "WinCheckResult":
        return cls(over=True, winner=winner, reason=reason)


class MoveRequest(BaseModel):
    """Request body for /rules/move"""
    board: BoardState
    position: PositionModel
    color: StoneColor
    enclosures: List[EnclosureState] = Field(default_factory=list)


class MoveResponse(BaseModel):
    """Response body for /rules/move"""
    valid: bool
    error_kind: Optional[MoveRejection] = Field(None, alias="errorKind")
    board: Optional[BoardState] = None
    captured_positions: List[PositionModel] = Field(
        default_factory=list, alias="capturedPositions"
    )
    new_enclosures: List[EnclosureState] = Field(
        default_factory=list, alias="newEnclosures"
    )

    class Config:
        populate_by_name = True


class WinCheckRequest(BaseModel):
    """Request body for /rules/win"""
    settings: GameSettings = Field(default_factory=GameSettings)
    move_count: int = Field(0, alias="moveCount", ge=0)
    black_captures: int = Field(0, alias="blackCaptures", ge=0)
    white_captures: int = Field(0, alias="whiteCaptures", ge=0)
    consecutive_passes: int = Field(0, alias="consecutivePasses", ge=0)

    class Config:
        populate_by_name = True


class AIMoveRequest(BaseModel):
    """Request body for /ai/move"""
    board: BoardState
    color: StoneColor
    difficulty: int = Field(5, ge=1, le=10)
    last_opponent_move: Optional[PositionModel] = Field(
        None, alias="lastOpponentMove"
    )
    enclosures: List[EnclosureState] = Field(default_factory=list)
    seed: Optional[int] = None
    heuristic_profile_id: Optional[str] = Field(None, alias="heuristicProfileId")

    class Config:
        populate_by_name = True

    @field_validator("seed")
    @classmethod
    def _non_negative_seed(cls, value: Optional[int]) -> Optional[int]:
        if value is not None and value < 0:
            raise ValueError("seed must be non-negative")
        return value


class AIMoveResponse(BaseModel):
    """Response body for /ai/move. ``move`` is None when the AI passes."""
    move: Optional[PositionModel] = None
    passed: bool
    evaluation: float
    thinking_time_ms: int = Field(alias="thinkingTimeMs")
    difficulty: int
    seed: int
    seed_source: str = Field(alias="seedSource")

    class Config:
        populate_by_name = True
