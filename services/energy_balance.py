import asyncio
import logging
from datetime import datetime
from typing import List, Tuple

from models.energy import EnergyAggregate, ExerciseSession
from models.outcome import EnergyBalanceOutcome
from models.profile import UserProfile
from services import passive_energy, telemetry
from services.day_boundary import DayBoundaryTracker
from services.energy_source import DataSourceError, EnergyDataPort
from services.outcome_classifier import classify_error, classify_result
from services.telemetry import TelemetrySink


class EnergyBalanceEngine:
    """
    Runs one passive energy calculation on demand: resolve the day window,
    read both energy streams for it, derive passive energy and classify the
    outcome. Telemetry is a side channel and never alters the result.
    """

    def __init__(
        self,
        tracker: DayBoundaryTracker,
        port: EnergyDataPort,
        telemetry_sink: TelemetrySink,
    ):
        self.tracker = tracker
        self.port = port
        self.telemetry_sink = telemetry_sink

    async def _fetch(
        self, start: datetime, end: datetime
    ) -> Tuple[float, List[ExerciseSession]]:
        total_task = asyncio.create_task(self.port.fetch_total_energy_kcal(start, end))
        sessions_task = asyncio.create_task(
            self.port.fetch_exercise_sessions(start, end)
        )
        tasks = (total_task, sessions_task)
        try:
            done, pending = await asyncio.wait(
                tasks, return_when=asyncio.FIRST_EXCEPTION
            )
            for task in tasks:
                if task in done and task.exception() is not None:
                    raise task.exception()
            return total_task.result(), sessions_task.result()
        finally:
            for task in tasks:
                if not task.done():
                    task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)

    async def calculate(
        self, profile: UserProfile, now: datetime
    ) -> EnergyBalanceOutcome:
        window = await self.tracker.current_window(now)
        try:
            total_kcal, sessions = await self._fetch(window.start_instant, now)
        except DataSourceError as e:
            outcome = classify_error(e)
            logging.warning(
                f"Energy data unavailable for {window.calendar_date.isoformat()}: "
                f"{outcome.kind} ({e})"
            )
            return outcome

        aggregate = EnergyAggregate.from_sources(total_kcal, sessions)
        result = passive_energy.compute(profile, window, now, aggregate)
        outcome = classify_result(result)
        telemetry.report(result, self.telemetry_sink)

        logging.info(
            f"Passive energy for {window.calendar_date.isoformat()}: "
            f"{result.passive_kcal:.0f} kcal (active {result.active_kcal:.0f}, "
            f"bmr elapsed {result.bmr_elapsed_kcal:.0f}, sessions {aggregate.session_count}, "
            f"origins {aggregate.distinct_data_origin_count})"
        )
        return outcome
