import logging
from datetime import datetime

import config
from models.day_window import DayWindow
from models.energy import EnergyAggregate, PassiveEnergyResult
from models.profile import UserProfile
from utils.bmr_calculator import bmr_elapsed, bmr_per_minute, daily_bmr


def compute(
    profile: UserProfile,
    window: DayWindow,
    now: datetime,
    aggregate: EnergyAggregate,
) -> PassiveEnergyResult:
    """
    Derives passive energy (NEAT) for the window as whatever the total
    aggregate holds beyond elapsed BMR and tracked exercise.

    The value is clamped at zero but never truncated from above; values past
    the plausible maximum are only flagged.
    """
    daily_bmr_kcal = daily_bmr(profile, window.calendar_date)
    bmr_elapsed_kcal = bmr_elapsed(bmr_per_minute(daily_bmr_kcal), window, now)

    raw_passive = aggregate.total_kcal - bmr_elapsed_kcal - aggregate.active_kcal
    passive = max(raw_passive, 0.0)
    plausible_max = daily_bmr_kcal * config.PLAUSIBLE_MAX_BMR_MULTIPLIER

    ratio = None
    if aggregate.total_kcal > 0:
        ratio = (passive + aggregate.active_kcal + bmr_elapsed_kcal) / aggregate.total_kcal

    logging.debug(
        f"Passive energy for {window.calendar_date.isoformat()}: raw={raw_passive:.1f} "
        f"clamped={passive:.1f} bmrElapsed={bmr_elapsed_kcal:.1f} "
        f"active={aggregate.active_kcal:.1f} total={aggregate.total_kcal:.1f}"
    )

    return PassiveEnergyResult(
        raw_passive_kcal=raw_passive,
        passive_kcal=passive,
        plausible_max_kcal=plausible_max,
        is_high_passive_anomaly=raw_passive > plausible_max,
        ratio=ratio,
        active_kcal=aggregate.active_kcal,
        bmr_elapsed_kcal=bmr_elapsed_kcal,
        total_kcal=aggregate.total_kcal,
        daily_bmr_kcal=daily_bmr_kcal,
    )
