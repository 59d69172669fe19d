import asyncio
from datetime import date, datetime, timedelta, timezone
from typing import List, Optional

import pytest

from models.day_window import DayWindow
from models.energy import ExerciseSession
from models.profile import Sex, UserProfile

# Male, 80 kg, 180 cm, 26 years old on 2025-03-15: Mifflin-St Jeor gives 1800 kcal.
REFERENCE_DATE = date(2025, 3, 15)


@pytest.fixture
def profile() -> UserProfile:
    return UserProfile(
        sex=Sex.MALE,
        birth_date=date(1999, 1, 1),
        weight_kg=80.0,
        height_cm=180.0,
    )


@pytest.fixture
def utc_window() -> DayWindow:
    return DayWindow(
        start_instant=datetime(2025, 3, 15, tzinfo=timezone.utc),
        zone_offset_at_start=0,
        calendar_date=REFERENCE_DATE,
    )


class FakeEnergyPort:
    """
    Energy data port returning canned values. Either read can be made to
    raise, or to block until cancelled.
    """

    def __init__(
        self,
        total_kcal: float = 0.0,
        sessions: Optional[List[ExerciseSession]] = None,
        total_error: Optional[Exception] = None,
        sessions_error: Optional[Exception] = None,
        block_total: bool = False,
        block_sessions: bool = False,
    ):
        self.total_kcal = total_kcal
        self.sessions = sessions or []
        self.total_error = total_error
        self.sessions_error = sessions_error
        self.block_total = block_total
        self.block_sessions = block_sessions
        self.requested_windows = []
        self.started = set()
        self.cancelled = set()

    async def _run(self, name: str, block: bool, error: Optional[Exception]):
        self.started.add(name)
        try:
            if block:
                await asyncio.Event().wait()
            await asyncio.sleep(0)
        except asyncio.CancelledError:
            self.cancelled.add(name)
            raise
        if error is not None:
            raise error

    async def fetch_total_energy_kcal(self, start_instant, end_instant) -> float:
        self.requested_windows.append((start_instant, end_instant))
        await self._run("total", self.block_total, self.total_error)
        return self.total_kcal

    async def fetch_exercise_sessions(self, start_instant, end_instant):
        await self._run("sessions", self.block_sessions, self.sessions_error)
        return list(self.sessions)


def sessions_of(*kcal: float) -> List[ExerciseSession]:
    return [ExerciseSession(active_kcal=k, data_origin="watch") for k in kcal]


def minutes_after(window: DayWindow, minutes: float) -> datetime:
    return window.start_instant + timedelta(minutes=minutes)
