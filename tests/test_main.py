"""Tests for the nextboard command line."""

from __future__ import annotations

import json

from nextboard.main import import_reminders, main, parse_arguments
from nextboard.reminder.repository import ReminderRepository


def test_parse_arguments():
    args = parse_arguments(["--db", "x.db", "--import", "seed.json", "--once", "--no-sound"])
    assert args.db == "x.db"
    assert args.import_file == "seed.json"
    assert args.once and args.no_sound and not args.no_gpio


def test_import_skips_bad_records(tmp_path):
    seed = tmp_path / "seed.json"
    seed.write_text(json.dumps([
        {"title": "Lunch", "targetTime": "12:00", "recurrenceType": "daily"},
        {"targetTime": "13:00"},
    ]))
    repository = ReminderRepository(str(tmp_path / "board.db"))

    assert import_reminders(repository, seed) == 1
    assert [r.title for r in repository.get_all_active()] == ["Lunch"]


async def test_once_prints_board(tmp_path, capsys):
    seed = tmp_path / "seed.json"
    seed.write_text(json.dumps([
        {"title": "Always", "targetTime": "23:59", "recurrenceType": "daily"},
    ]))

    code = await main(["--db", str(tmp_path / "board.db"), "--import", str(seed), "--once"])

    assert code == 0
    board = json.loads(capsys.readouterr().out)
    assert board["top"]["title"] == "Always"
    assert board["settings"] == {"theme": "dark", "flashMode": "card"}
