"""
Tracks the local day the energy engine is working on.

The day window is the only mutable state in the engine. It is pinned when
first created for a calendar date and persisted, so a process restart
reloads it verbatim and a mid-day zone change (travel) neither resets the
start of day nor produces negative elapsed time. A new window is created
exactly when the local calendar date of `now` stops matching the persisted
one.
"""

import asyncio
import json
import logging
import os
import tempfile
from datetime import date, datetime, time, tzinfo
from typing import Callable, Optional, Protocol

from pydantic import ValidationError

import config
from models.day_window import DayWindow, DayWindowRecord


class DayWindowStore(Protocol):
    async def load(self) -> Optional[DayWindow]: ...

    async def save(self, window: DayWindow) -> None: ...


class InMemoryDayWindowStore:
    def __init__(self, window: Optional[DayWindow] = None):
        self.window = window
        self.save_count = 0

    async def load(self) -> Optional[DayWindow]:
        return self.window

    async def save(self, window: DayWindow) -> None:
        self.window = window
        self.save_count += 1


class JsonFileDayWindowStore:
    """
    Persists the window record as a small JSON document. Writes go to a
    temporary file in the same directory which then replaces the target, so
    a reader sees either the old or the new window, never a partial one.
    """

    def __init__(self, path: str = config.DAY_WINDOW_STATE_PATH):
        self.path = path

    async def load(self) -> Optional[DayWindow]:
        return await asyncio.to_thread(self._read)

    async def save(self, window: DayWindow) -> None:
        await asyncio.to_thread(self._write, window)

    def _read(self) -> Optional[DayWindow]:
        if not os.path.exists(self.path):
            return None
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                record = DayWindowRecord.model_validate(json.load(f))
        except (OSError, ValueError, ValidationError) as e:
            logging.warning(
                f"Ignoring unreadable day window state at {self.path}: {e}"
            )
            return None
        return DayWindow.from_record(record)

    def _write(self, window: DayWindow) -> None:
        directory = os.path.dirname(os.path.abspath(self.path))
        fd, tmp_path = tempfile.mkstemp(dir=directory, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(window.to_record().model_dump(by_alias=True), f)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise


def local_midnight(calendar_date: date, zone: tzinfo) -> DayWindow:
    """
    Window starting at local midnight of `calendar_date` in `zone`. Where
    midnight falls in a DST gap, the instant lands on the first valid local
    time of that date.
    """
    start = datetime.combine(calendar_date, time.min, tzinfo=zone)
    return DayWindow(
        start_instant=start,
        zone_offset_at_start=int(start.utcoffset().total_seconds()),
        calendar_date=calendar_date,
    )


class DayBoundaryTracker:
    def __init__(self, store: DayWindowStore, zone_provider: Callable[[], tzinfo]):
        self.store = store
        self.zone_provider = zone_provider
        self._window: Optional[DayWindow] = None
        self._loaded = False
        self._lock = asyncio.Lock()

    async def current_window(self, now: datetime) -> DayWindow:
        if now.tzinfo is None:
            raise ValueError("now must be timezone-aware")
        async with self._lock:
            if not self._loaded:
                self._window = await self.store.load()
                self._loaded = True
                if self._window:
                    logging.info(
                        f"Reloaded day window for {self._window.calendar_date.isoformat()} "
                        f"starting {self._window.start_instant.isoformat()}"
                    )

            zone = self.zone_provider()
            local_now = now.astimezone(zone)
            today = local_now.date()

            if self._window and self._window.calendar_date == today:
                # Compared at midnight so a DST change later in the day is not travel.
                offset = local_midnight(today, zone).zone_offset_at_start
                if offset != self._window.zone_offset_at_start:
                    logging.warning(
                        f"Zone offset changed from {self._window.zone_offset_at_start}s "
                        f"to {offset}s during {today.isoformat()}; keeping pinned window."
                    )
                return self._window

            window = local_midnight(today, zone)
            await self.store.save(window)
            self._window = window
            logging.info(
                f"Started day window for {today.isoformat()} at "
                f"{window.start_instant.isoformat()} (offset {window.zone_offset_at_start}s)"
            )
            return window
