"""Tests for AI decision logging.

Covers the AIDecisionLog dataclass (serialization, summary text) and the
log level switch driven by EDGELINE_AI_DECISION_LOG.
"""

import json
import logging
from datetime import datetime

import pytest

from edgeline.ai.decision_log import AIDecisionLog, decision_log_level, log_ai_decision
from edgeline.ai.heuristic_ai import HeuristicAI
from edgeline.metrics import AI_CANDIDATES
from edgeline.models import AIConfig, StoneColor
from edgeline.rules.board import Board
from edgeline.rules.geometry import Position

LOGGER = "edgeline.ai.decision_log"


class TestAIDecisionLog:
    """Tests for the AIDecisionLog dataclass."""

    def test_default_values(self):
        log = AIDecisionLog()
        assert log.difficulty == 0
        assert log.engine_type == ""
        assert log.candidates == 0
        assert log.veto_reasons == {}
        assert log.used_fallback is False
        assert log.error is None
        assert isinstance(log.timestamp, datetime)

    def test_to_dict_is_json_serializable(self):
        log = AIDecisionLog(
            difficulty=4,
            color="black",
            engine_type="heuristic",
            veto_reasons={"danger_zone": 2},
            top_alternatives=[("(3,4)", 12.5)],
        )
        data = log.to_dict()
        assert isinstance(data["timestamp"], str)
        assert data["veto_reasons"] == {"danger_zone": 2}

        parsed = json.loads(log.to_json())
        assert parsed["difficulty"] == 4
        assert parsed["top_alternatives"] == [["(3,4)", 12.5]]

    def test_structured_log(self):
        ok = AIDecisionLog().to_structured_log()
        assert ok["event"] == "ai_decision"
        assert ok["level"] == "info"
        assert AIDecisionLog(error="boom").to_structured_log()["level"] == "error"

    def test_summary(self):
        log = AIDecisionLog(
            difficulty=7,
            color="white",
            engine_type="heuristic",
            chosen_move="(10,12)",
            move_score=41.0,
            best_score=42.0,
            pick_kind="strict",
            candidates=90,
            vetoed=3,
            used_fallback=True,
            fallback_reason="all_vetoed",
            time_ms=12.34,
        )
        summary = log.summary()
        assert summary.startswith("[heuristic:7] white move=(10,12)")
        assert "score=41.0" in summary
        assert "best=42.0" in summary
        assert "vetoed=3" in summary
        assert "fallback=all_vetoed" in summary

    def test_summary_for_pass(self):
        summary = AIDecisionLog(pick_kind="pass").summary()
        assert "move=pass" in summary
        assert "vetoed" not in summary
        assert "fallback" not in summary


class TestLogAIDecision:
    def test_debug_by_default(self, caplog):
        caplog.set_level(logging.DEBUG, logger=LOGGER)
        assert decision_log_level() == logging.DEBUG
        log_ai_decision(AIDecisionLog(difficulty=3, engine_type="heuristic"))

        record = caplog.records[-1]
        assert record.levelno == logging.DEBUG
        assert record.ai_decision["event"] == "ai_decision"
        assert record.ai_decision["difficulty"] == 3

    @pytest.mark.parametrize("value", ["true", "1", "YES"])
    def test_promoted_to_info(self, caplog, monkeypatch, value):
        monkeypatch.setenv("EDGELINE_AI_DECISION_LOG", value)
        caplog.set_level(logging.DEBUG, logger=LOGGER)
        log_ai_decision(AIDecisionLog())
        assert caplog.records[-1].levelno == logging.INFO

    def test_errors_log_at_error(self, caplog):
        caplog.set_level(logging.DEBUG, logger=LOGGER)
        log_ai_decision(AIDecisionLog(error="worker died"))
        assert caplog.records[-1].levelno == logging.ERROR

    def test_explicit_level_wins(self, caplog):
        caplog.set_level(logging.DEBUG, logger=LOGGER)
        log_ai_decision(AIDecisionLog(), log_level=logging.WARNING)
        assert caplog.records[-1].levelno == logging.WARNING

    def test_candidates_are_observed(self):
        child = AI_CANDIDATES.labels("9")
        before = child._sum.get()
        log_ai_decision(AIDecisionLog(difficulty=9, candidates=17))
        assert child._sum.get() == before + 17

    def test_heuristic_turn_emits_one_entry(self, caplog):
        caplog.set_level(logging.DEBUG, logger=LOGGER)
        ai = HeuristicAI(StoneColor.WHITE, AIConfig(difficulty=2, rngSeed=4))
        ai.select_move(Board(9).place_stone(Position(4, 4), StoneColor.BLACK))

        entries = [r for r in caplog.records if hasattr(r, "ai_decision")]
        assert len(entries) == 1
        assert entries[0].ai_decision["engine_type"] == "heuristic"
        assert entries[0].ai_decision["chosen_move"] == ai.last_decision.chosen_move
