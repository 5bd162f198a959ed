"""
Shared pytest fixtures for Edgeline tests.

Board construction helpers live in ``board_diagrams``; the fixtures here
cover the process-wide switches (AI dispatch mode, decision log level) that
tests must not leak into each other.
"""

from __future__ import annotations

import pytest

from edgeline.ai import worker
from edgeline.rules.board import Board


@pytest.fixture
def empty_board() -> Board:
    return Board(9)


@pytest.fixture(autouse=True)
def inline_ai_dispatch(monkeypatch):
    """Run AI turns in the calling thread with no deadline unless a test
    opts out by setting the variables itself."""
    monkeypatch.setenv("EDGELINE_AI_DISPATCH", "inline")
    monkeypatch.setenv("EDGELINE_AI_TIMEOUT_SEC", "0")
    monkeypatch.delenv("EDGELINE_AI_DECISION_LOG", raising=False)
    yield
    worker.shutdown_executor()
