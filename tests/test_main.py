from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from google.api_core import exceptions as google_exceptions

from main import process_user, resolve_zone
from models.energy import ExerciseSession
from models.energy_balance import NutritionIntake
from models.user import UserInDB

PROFILE = {"sex": "male", "birthDate": "1999-01-01", "weightKg": 80, "heightCm": 180}


def _user(**overrides):
    data = {
        "uid": "u1",
        "createdAt": datetime(2025, 1, 1, tzinfo=timezone.utc),
        "timeZone": "Europe/London",
        "profile": PROFILE,
    }
    data.update(overrides)
    return UserInDB.model_validate(data)


def _firestore(total_kcal=2400.0, total_error=None):
    fs = MagicMock()
    fs.get_day_window = AsyncMock(return_value=None)
    fs.save_day_window = AsyncMock()
    fs.get_total_energy_kcal = AsyncMock(return_value=total_kcal, side_effect=total_error)
    fs.get_exercise_sessions = AsyncMock(return_value=[ExerciseSession(active_kcal=300.0)])
    fs.get_nutrition_intake = AsyncMock(
        return_value=NutritionIntake(
            energy=1800.0, protein=120.0, carbohydrates=200.0, fats=60.0
        )
    )
    fs.save_energy_balance = AsyncMock()
    fs.save_energy_balance_failure = AsyncMock()
    fs.save_telemetry_events = AsyncMock()
    return fs


def test_unknown_time_zone_falls_back_to_utc():
    assert resolve_zone(_user(timeZone="Mars/Olympus")).key == "UTC"


@pytest.mark.asyncio
async def test_user_without_profile_is_skipped():
    fs = _firestore()

    await process_user(fs, _user(profile=None))

    fs.get_day_window.assert_not_awaited()
    fs.save_energy_balance.assert_not_awaited()


@pytest.mark.asyncio
async def test_partial_profile_is_skipped():
    fs = _firestore()

    await process_user(fs, _user(profile={"sex": "male"}))

    fs.save_energy_balance.assert_not_awaited()


@pytest.mark.asyncio
async def test_successful_day_saves_summary_with_calories_in():
    fs = _firestore()

    await process_user(fs, _user())

    fs.save_day_window.assert_awaited_once()
    fs.save_energy_balance.assert_awaited_once()
    uid, summary = fs.save_energy_balance.await_args.args
    assert uid == "u1"
    assert summary.calories_in_kcal == 1800.0
    assert summary.total_protein_g == 120.0
    assert summary.total_carbs_g == 200.0
    assert summary.total_fat_g == 60.0
    assert summary.active_kcal == 300.0
    assert summary.passive_kcal >= 0
    fs.save_energy_balance_failure.assert_not_awaited()


@pytest.mark.asyncio
async def test_permission_loss_is_saved_as_status_not_zero():
    fs = _firestore(total_error=google_exceptions.PermissionDenied("revoked"))

    await process_user(fs, _user())

    fs.save_energy_balance.assert_not_awaited()
    fs.save_energy_balance_failure.assert_awaited_once()
    assert fs.save_energy_balance_failure.await_args.args[2] == "permissions_missing"
