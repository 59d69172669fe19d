from datetime import date, datetime, timedelta

import config
from models.day_window import DayWindow
from models.profile import Sex, UserProfile


def calculate_mifflin_st_jeor_bmr(
    sex: Sex, age: int, height_cm: float, weight_kg: float
) -> float:
    """Calculates BMR using the Mifflin-St Jeor equation."""
    base = (
        (config.BMR_WEIGHT_COEFFICIENT * weight_kg)
        + (config.BMR_HEIGHT_COEFFICIENT * height_cm)
        - (config.BMR_AGE_COEFFICIENT * age)
    )
    if sex == Sex.MALE:
        return base + config.BMR_MALE_OFFSET
    else:
        return base + config.BMR_FEMALE_OFFSET


def daily_bmr(profile: UserProfile, on_date: date) -> float:
    return calculate_mifflin_st_jeor_bmr(
        profile.sex, profile.age_on(on_date), profile.height_cm, profile.weight_kg
    )


def bmr_per_minute(daily_bmr_kcal: float) -> float:
    return daily_bmr_kcal / config.MINUTES_PER_DAY


def minutes_between(start: datetime, end: datetime) -> float:
    """
    Minutes of absolute time from `start` to `end`, never wall-clock.

    On a DST transition day this differs from "minutes since midnight" on the
    wall clock by up to an hour; BMR is modelled as a constant daily rate so
    that skew is accepted. Returns 0 when `end` precedes `start`.
    """
    return max((end - start) / timedelta(minutes=1), 0.0)


def bmr_elapsed(per_minute_kcal: float, window: DayWindow, now: datetime) -> float:
    return per_minute_kcal * minutes_between(window.start_instant, now)
