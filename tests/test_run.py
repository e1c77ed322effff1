"""Tests for the run.py entry point."""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

import run
from connect4_events.data import EventLog
from connect4_events.game.events import CreateGame, PlaceToken, Player
from connect4_events.game.rules import CommandHandler
from connect4_events.utils import Token

ALICE = Player("alice", Token.RED)
BOB = Player("bob", Token.YELLOW)


def test_replay_prints_one_line_per_game(tmp_path, capsys):
    path = tmp_path / "events.json"
    handler = CommandHandler(event_log=EventLog(str(path)))
    handler.execute(CreateGame(ALICE, BOB))
    for i, column in enumerate([0, 1, 0, 1, 0, 1, 0]):
        handler.execute(PlaceToken(0, ALICE if i % 2 == 0 else BOB, column))
    handler.execute(CreateGame(Player("carol", Token.RED), Player("dave", Token.YELLOW)))

    assert run.main(["replay", str(path)]) == 0
    lines = capsys.readouterr().out.strip().splitlines()
    assert len(lines) == 2
    assert lines[0].startswith("Game 0: alice (Red) vs bob (Yellow) - 7 moves, terminated")
    assert "winner alice" in lines[0]
    assert lines[1].endswith("0 moves, ongoing, Red to play")


def test_replay_missing_log(tmp_path, capsys):
    assert run.main(["replay", str(tmp_path / "absent.json")]) == 1
    assert "not found" in capsys.readouterr().out


def test_replay_corrupt_log(tmp_path, capsys):
    path = tmp_path / "events.json"
    path.write_text("[")
    assert run.main(["replay", str(path)]) == 1
    assert "Could not replay" in capsys.readouterr().out


def test_info(capsys):
    assert run.main(["info"]) == 0
    out = capsys.readouterr().out
    assert "7 columns x 6 rows" in out
