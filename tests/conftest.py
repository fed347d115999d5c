"""Shared fixtures for the nextboard test-suite."""

from __future__ import annotations

import threading

import pytest

from nextboard.reminder.repository import ReminderRepository


@pytest.fixture
def repository(tmp_path) -> ReminderRepository:
    """Empty SQLite store in a temporary directory."""
    return ReminderRepository(str(tmp_path / "board.db"))


class FakePlayer:
    """Records plays instead of producing sound."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.played: list[str] = []
        self.stops = 0
        self.stop_threads: list[int] = []

    async def play(self, sound_url: str) -> None:
        self.played.append(sound_url)
        if self.fail:
            raise RuntimeError("output blocked")

    def stop(self) -> None:
        self.stops += 1
        self.stop_threads.append(threading.get_ident())


@pytest.fixture
def player() -> FakePlayer:
    return FakePlayer()
