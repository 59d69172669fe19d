# main.py
import logging
import asyncio
from datetime import datetime, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import config
from models.energy_balance import EnergyBalanceSummary
from models.outcome import Success
from models.profile import ProfileNotConfiguredError, ProfileValidationError
from models.user import UserInDB
from services.day_boundary import DayBoundaryTracker
from services.energy_balance import EnergyBalanceEngine
from services.firestore import (
    FirestoreDayWindowStore,
    FirestoreEnergyDataSource,
    FirestoreService,
    FirestoreTelemetrySink,
)

logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s"
)


def resolve_zone(user: UserInDB) -> ZoneInfo:
    try:
        return ZoneInfo(user.time_zone)
    except (ZoneInfoNotFoundError, ValueError):
        logging.warning(
            f"User {user.uid} reports unknown time zone '{user.time_zone}'. "
            f"Falling back to {config.DEFAULT_TIME_ZONE}."
        )
        return ZoneInfo(config.DEFAULT_TIME_ZONE)


async def process_user(fs: FirestoreService, user: UserInDB):
    logging.info(f"--- Processing user: {user.uid} ({user.email}) ---")

    now = datetime.now(timezone.utc)
    zone = resolve_zone(user)
    try:
        if user.profile is None:
            raise ProfileNotConfiguredError("No profile stored")
        profile = user.profile.to_profile()
        profile.validate_ranges(now.astimezone(zone).date())
    except (ProfileNotConfiguredError, ProfileValidationError) as e:
        logging.warning(f"User {user.uid} has an unusable profile ({e}). Skipping.")
        return

    tracker = DayBoundaryTracker(FirestoreDayWindowStore(fs, user.uid), lambda: zone)
    sink = FirestoreTelemetrySink(fs, user.uid)
    engine = EnergyBalanceEngine(tracker, FirestoreEnergyDataSource(fs, user.uid), sink)

    outcome = await engine.calculate(profile, now)
    window = await tracker.current_window(now)

    if isinstance(outcome, Success):
        intake = await fs.get_nutrition_intake(user.uid, window.start_instant, now)
        summary = EnergyBalanceSummary.from_outcome(
            window.calendar_date, outcome, intake
        )
        await fs.save_energy_balance(user.uid, summary)
        logging.info(
            f"User {user.uid} on {window.calendar_date.isoformat()}: "
            f"TDEE {summary.tdee_kcal:.0f} kcal, {summary.formatted_deficit_surplus}."
        )
    else:
        await fs.save_energy_balance_failure(
            user.uid, window.calendar_date, outcome.kind
        )

    await sink.flush()


async def run_daily_job():
    logging.info("Starting energy balance job.")
    firestore_service = FirestoreService()
    user_count = 0
    async for user in firestore_service.get_all_users():
        user_count += 1
        try:
            await process_user(firestore_service, user)
        except Exception as e:
            logging.error(
                f"An unexpected error occurred while processing user {user.uid}: {e}",
                exc_info=True,
            )
    logging.info(f"Processed a total of {user_count} user(s).")
    logging.info("Energy balance job finished.")


if __name__ == "__main__":
    asyncio.run(run_daily_job())
