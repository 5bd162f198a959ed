"""Tests for the shared enums and the wire models."""

import pytest
from pydantic import ValidationError

from edgeline.ai import HeuristicAI, create_ai_from_difficulty
from edgeline.models import (
    AIConfig,
    AIMoveRequest,
    BoardState,
    EnclosureState,
    GameMode,
    GameSettings,
    MoveResponse,
    StoneColor,
)
from edgeline.rules.board import Board
from edgeline.rules.enclosure import Enclosure
from edgeline.rules.geometry import Position

B, W = StoneColor.BLACK, StoneColor.WHITE


class TestEnums:
    def test_opponent(self):
        assert B.opponent is W
        assert W.opponent is B

    def test_display_names(self):
        assert B.display_name == "Black"
        assert GameMode.FIXED_MOVES.display_name == "Fixed Moves"
        assert GameMode.CAPTURE_TARGET.display_name == "Capture Target"

    def test_mode_descriptions_and_targets(self):
        assert "moves" in GameMode.FIXED_MOVES.description
        assert "capture" in GameMode.CAPTURE_TARGET.description
        assert GameMode.FIXED_MOVES.target_options == (100, 200, 500)
        assert GameMode.CAPTURE_TARGET.target_options == (10, 25, 50)


class TestSettings:
    def test_defaults(self):
        settings = GameSettings()
        assert settings.mode is GameMode.FIXED_MOVES
        assert settings.target_value == 200

    def test_alias_and_field_name(self):
        assert GameSettings(targetValue=25).target_value == 25
        assert GameSettings(target_value=25).target_value == 25

    def test_target_must_be_positive(self):
        with pytest.raises(ValidationError):
            GameSettings(target_value=0)

    def test_ai_config_bounds(self):
        assert AIConfig(difficulty=1, rngSeed=3).rng_seed == 3
        with pytest.raises(ValidationError):
            AIConfig(difficulty=11)


class TestWireConversion:
    def test_board_state(self):
        board = Board(9, {Position(1, 2): B, Position(0, 0): W})
        state = BoardState.from_board(board)
        assert [(s.position.x, s.position.y) for s in state.stones] == [(0, 0), (1, 2)]
        assert state.to_board() == board

    def test_default_board_size(self):
        assert BoardState().size == 48

    def test_enclosure_state(self):
        enclosure = Enclosure(
            owner=B,
            wall_positions={(1, 0), (0, 1), (2, 1), (1, 2)},
            interior_positions={(1, 1)},
        )
        state = EnclosureState.from_enclosure(enclosure)
        dumped = state.model_dump(by_alias=True)
        assert dumped["interiorPositions"] == [{"x": 1, "y": 1}]
        assert len(dumped["wallPositions"]) == 4
        assert state.to_enclosure() == enclosure

    def test_move_response_serializes_with_aliases(self):
        dumped = MoveResponse(valid=False, errorKind="occupied").model_dump(by_alias=True, mode="json")
        assert dumped["errorKind"] == "occupied"
        assert dumped["capturedPositions"] == []

    def test_ai_move_request_rejects_negative_seed(self):
        with pytest.raises(ValidationError):
            AIMoveRequest(board=BoardState(size=9), color="white", seed=-1)


def test_package_factory_alias():
    ai = create_ai_from_difficulty(difficulty=5, color=W)
    assert isinstance(ai, HeuristicAI)
