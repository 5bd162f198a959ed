"""Smoke tests for the self-play CLI."""

import json

import pytest

from edgeline.models import GameMode, GameSettings
from scripts.run_self_play import build_parser, main, play_game, summarize

TEST_TIMEOUT_SECONDS = 60


def _play(**overrides):
    params = dict(
        board_size=9,
        settings=GameSettings(target_value=200),
        black=("heuristic", 2),
        white=("random", 1),
        seed=7,
        max_moves=10,
    )
    params.update(overrides)
    return play_game(0, **params)


@pytest.mark.timeout(TEST_TIMEOUT_SECONDS)
class TestPlayGame:
    def test_same_seed_same_game(self):
        first = _play()
        second = _play()
        assert first.moves == second.moves
        assert first.move_count == second.move_count

    def test_move_cap(self):
        record = _play()
        assert len(record.moves) == 10
        assert record.end_reason == "Stopped after 10 moves"
        assert record.seed == 7

    def test_fixed_move_game_finishes(self):
        record = _play(settings=GameSettings(target_value=6), max_moves=50)
        assert record.move_count == 6
        assert not record.end_reason.startswith("Stopped")

    def test_game_index_shifts_the_seed(self):
        record = play_game(
            3,
            board_size=9,
            settings=GameSettings(target_value=4),
            black=("random", 1),
            white=("random", 1),
            seed=7,
            max_moves=10,
        )
        assert record.index == 3
        assert record.seed == 3007


def test_summarize():
    records = [_play(max_moves=4), _play(max_moves=6)]
    summary = summarize(records)
    assert summary["games"] == 2
    assert summary["total_moves"] == records[0].move_count + records[1].move_count
    # Both games hit the move cap, so neither has a winner.
    assert summary["wins"] == {"tie": 2}


def test_summarize_empty():
    summary = summarize([])
    assert summary["games"] == 0
    assert summary["avg_moves"] == 0.0
    assert summary["sec_per_move"] == 0.0


def test_parser_defaults():
    args = build_parser().parse_args([])
    assert args.num_games == 2
    assert args.board_size == 19
    assert args.mode == GameMode.FIXED_MOVES.value
    assert args.target is None


def test_parser_rejects_unknown_difficulty():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["--black-difficulty", "11"])


@pytest.mark.timeout(TEST_TIMEOUT_SECONDS)
def test_main_writes_summary(tmp_path, capsys):
    output = tmp_path / "summary.json"
    code = main([
        "--num-games", "2",
        "--board-size", "9",
        "--max-moves", "8",
        "--black-difficulty", "1",
        "--white-ai", "random",
        "--mode", "capture_target",
        "--output", str(output),
        "--log-level", "WARNING",
    ])
    assert code == 0

    printed = json.loads(capsys.readouterr().out)
    assert printed["games"] == 2

    payload = json.loads(output.read_text())
    assert payload["settings"] == {"mode": "capture_target", "target_value": 25}
    assert len(payload["games"]) == 2
    assert "moves" not in payload["games"][0]
    assert payload["summary"] == printed


@pytest.mark.timeout(TEST_TIMEOUT_SECONDS)
def test_main_can_keep_moves(tmp_path):
    output = tmp_path / "summary.json"
    assert main([
        "--num-games", "1",
        "--board-size", "9",
        "--max-moves", "5",
        "--black-ai", "random",
        "--white-ai", "random",
        "--output", str(output),
        "--include-moves",
        "--log-level", "WARNING",
    ]) == 0
    game = json.loads(output.read_text())["games"][0]
    assert len(game["moves"]) == 5
