from __future__ import annotations

import uuid
from datetime import date, timedelta

import pytest
from mongita import MongitaClientMemory

from schemas import DailyGoalStatus


@pytest.fixture
def db():
    # Unique name per test so in-memory data never leaks between tests
    return MongitaClientMemory()[f"test_{uuid.uuid4().hex}"]


@pytest.fixture
def make_history():
    def _make(start: date, perfect_flags: list[bool]) -> list[DailyGoalStatus]:
        return [
            DailyGoalStatus(
                day=start + timedelta(days=i),
                steps_achieved=flag,
                water_achieved=flag,
                sleep_achieved=flag,
            )
            for i, flag in enumerate(perfect_flags)
        ]

    return _make
