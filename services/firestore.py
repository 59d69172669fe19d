# services/firestore.py
import logging
import os
from contextlib import contextmanager
from datetime import date, datetime
from typing import Any, AsyncGenerator, Dict, Iterator, List, Optional, Tuple

import firebase_admin
import numpy as np
from firebase_admin import credentials, firestore_async
from google.api_core import exceptions as google_exceptions
from google.auth import exceptions as google_auth_exceptions
from google.cloud.firestore_v1.async_client import AsyncClient
from google.cloud.firestore_v1.base_query import FieldFilter
from pydantic import ValidationError

import config
from models.day_window import DayWindow, DayWindowRecord
from models.energy import EnergyRecord, ExerciseSession
from models.energy_balance import EnergyBalanceSummary, NutritionIntake
from models.user import UserInDB
from services.energy_source import (
    PermissionsMissingError,
    PlatformUnavailableError,
    TransientFailureError,
)

_PERMISSION_ERRORS = (
    google_exceptions.PermissionDenied,
    google_exceptions.Unauthenticated,
)
_TRANSIENT_ERRORS = (
    google_exceptions.ServiceUnavailable,
    google_exceptions.DeadlineExceeded,
    google_exceptions.InternalServerError,
    google_exceptions.TooManyRequests,
    google_exceptions.RetryError,
)
_UNAVAILABLE_ERRORS = (
    google_exceptions.NotFound,
    google_exceptions.FailedPrecondition,
    google_auth_exceptions.DefaultCredentialsError,
)


def initialize_firebase_app():
    if not firebase_admin._apps:
        cred_path = config.SERVICE_ACCOUNT_PATH
        if not os.path.exists(cred_path):
            raise FileNotFoundError(f"Service account key not found at {cred_path}.")
        cred = credentials.Certificate(cred_path)
        firebase_admin.initialize_app(cred)
        logging.info("Firebase Admin SDK initialized successfully.")


@contextmanager
def translate_errors(operation: str) -> Iterator[None]:
    """Maps Firestore client failures onto the energy data source errors."""
    try:
        yield
    except _PERMISSION_ERRORS as e:
        raise PermissionsMissingError(f"{operation}: {e}") from e
    except _TRANSIENT_ERRORS as e:
        raise TransientFailureError(f"{operation}: {e}") from e
    except _UNAVAILABLE_ERRORS as e:
        raise PlatformUnavailableError(f"{operation}: {e}") from e


class FirestoreService:
    def __init__(self, db: Optional[AsyncClient] = None):
        if db is None:
            initialize_firebase_app()
            db = firestore_async.client()
        self.db: AsyncClient = db

    def _user(self, uid: str):
        return self.db.collection(config.USERS_COLLECTION).document(uid)

    async def get_all_users(
        self, page_size: int = 1000
    ) -> AsyncGenerator[UserInDB, None]:
        users_ref = self.db.collection(config.USERS_COLLECTION)
        cursor = None
        while True:
            query = users_ref.order_by("__name__").limit(page_size)
            if cursor:
                query = query.start_after(cursor)
            docs = await query.get()
            if not docs:
                break
            for doc in docs:
                try:
                    user = UserInDB(uid=doc.id, **doc.to_dict())
                except ValidationError as e:
                    logging.warning(
                        f"Skipping user document {doc.id} with invalid data: {e}"
                    )
                    continue
                yield user
            cursor = docs[-1]

    async def get_day_window(self, uid: str) -> Optional[DayWindow]:
        doc = await (
            self._user(uid)
            .collection(config.STATE_COLLECTION)
            .document(config.DAY_WINDOW_DOCUMENT)
            .get()
        )
        if not doc.exists:
            return None
        return DayWindow.from_record(DayWindowRecord.model_validate(doc.to_dict()))

    async def save_day_window(self, uid: str, window: DayWindow):
        # A single document set is atomic; readers never see a partial window.
        doc_ref = (
            self._user(uid)
            .collection(config.STATE_COLLECTION)
            .document(config.DAY_WINDOW_DOCUMENT)
        )
        await doc_ref.set(window.to_record().model_dump(by_alias=True))

    async def get_total_energy_kcal(
        self, uid: str, start: datetime, end: datetime
    ) -> float:
        records_ref = self._user(uid).collection(config.ENERGY_RECORDS_COLLECTION)
        query = records_ref.where(filter=FieldFilter("startTime", ">=", start)).where(
            filter=FieldFilter("startTime", "<", end)
        )
        docs = await query.get()
        records = [EnergyRecord.model_validate(doc.to_dict()) for doc in docs]
        values = np.fromiter(
            (r.total_kcal for r in records), dtype=np.float64, count=len(records)
        )
        return float(np.sum(values))

    async def get_exercise_sessions(
        self, uid: str, start: datetime, end: datetime
    ) -> List[ExerciseSession]:
        sessions_ref = self._user(uid).collection(config.EXERCISE_SESSIONS_COLLECTION)
        query = sessions_ref.where(
            filter=FieldFilter("startedAt", ">=", start)
        ).where(filter=FieldFilter("startedAt", "<", end))
        docs = await query.get()
        return [ExerciseSession.model_validate(doc.to_dict()) for doc in docs]

    async def get_nutrition_intake(
        self, uid: str, start: datetime, end: datetime
    ) -> NutritionIntake:
        meals_ref = self._user(uid).collection(config.MEAL_LOGS_COLLECTION)
        query = (
            meals_ref.where(filter=FieldFilter("createdAt", ">=", start))
            .where(filter=FieldFilter("createdAt", "<", end))
            .where(filter=FieldFilter("status", "==", "complete"))
        )
        docs = await query.get()
        totals = {"energy": 0.0, "protein": 0.0, "carbohydrates": 0.0, "fats": 0.0}
        for doc in docs:
            profile = doc.to_dict().get("data", {}).get("nutrientProfile", {})
            for key in totals:
                totals[key] += profile.get(key, 0)
        return NutritionIntake(**totals)

    async def save_telemetry_events(
        self, uid: str, events: List[Tuple[str, Dict[str, Any]]]
    ):
        if not events:
            return
        telemetry_ref = self._user(uid).collection(config.TELEMETRY_COLLECTION)
        batch = self.db.batch()
        for event, fields in events:
            batch.set(
                telemetry_ref.document(),
                {"event": event, "createdAt": datetime.now().astimezone(), **fields},
            )
        await batch.commit()

    async def save_energy_balance(self, uid: str, summary: EnergyBalanceSummary):
        doc_ref = (
            self._user(uid)
            .collection(config.ENERGY_BALANCE_COLLECTION)
            .document(summary.date.isoformat())
        )
        await doc_ref.set(summary.model_dump(by_alias=True, mode="json"))

    async def save_energy_balance_failure(self, uid: str, day: date, kind: str):
        doc_ref = (
            self._user(uid)
            .collection(config.ENERGY_BALANCE_COLLECTION)
            .document(day.isoformat())
        )
        await doc_ref.set({"date": day.isoformat(), "status": kind})
        logging.info(f"Saved {kind} energy balance status for user {uid} on {day}.")


class FirestoreDayWindowStore:
    def __init__(self, service: FirestoreService, uid: str):
        self.service = service
        self.uid = uid

    async def load(self) -> Optional[DayWindow]:
        return await self.service.get_day_window(self.uid)

    async def save(self, window: DayWindow) -> None:
        await self.service.save_day_window(self.uid, window)


class FirestoreEnergyDataSource:
    """Energy data port backed by records synced into the user's Firestore document."""

    def __init__(self, service: FirestoreService, uid: str):
        self.service = service
        self.uid = uid

    async def fetch_total_energy_kcal(
        self, start_instant: datetime, end_instant: datetime
    ) -> float:
        with translate_errors("total energy"):
            return await self.service.get_total_energy_kcal(
                self.uid, start_instant, end_instant
            )

    async def fetch_exercise_sessions(
        self, start_instant: datetime, end_instant: datetime
    ) -> List[ExerciseSession]:
        with translate_errors("exercise sessions"):
            return await self.service.get_exercise_sessions(
                self.uid, start_instant, end_instant
            )


class FirestoreTelemetrySink:
    """Buffers events during a calculation; `flush` writes them in one batch."""

    def __init__(self, service: FirestoreService, uid: str):
        self.service = service
        self.uid = uid
        self.pending: List[Tuple[str, Dict[str, Any]]] = []

    def emit(self, event: str, fields: Dict[str, Any]) -> None:
        logging.warning(f"Energy telemetry event {event} for user {self.uid}: {fields}")
        self.pending.append((event, dict(fields)))

    async def flush(self):
        events, self.pending = self.pending, []
        await self.service.save_telemetry_events(self.uid, events)
