"""Tests for nextboard.core.coordinator wiring."""

from __future__ import annotations

from nextboard.core.coordinator import BoardCoordinator
from nextboard.reminder.repository import ReminderRepository


async def test_runs_against_store_and_tears_down(tmp_path):
    db_path = str(tmp_path / "board.db")
    ReminderRepository(db_path).create({
        "id": "lunch", "title": "Lunch", "targetTime": "12:00", "recurrenceType": "daily",
    })

    coordinator = BoardCoordinator(db_path=db_path, enable_sound=False, enable_gpio=False)
    assert await coordinator.initialize() is True
    assert coordinator.sound_loop is None
    assert coordinator.flash_indicator.simulation_mode

    await coordinator.start()
    assert coordinator.running
    assert coordinator.driver.state.top.reminder.id == "lunch"

    await coordinator.stop()
    assert not coordinator.running
    assert coordinator.driver.scheduler.get_jobs() == []
    assert coordinator.sink_task.done()
