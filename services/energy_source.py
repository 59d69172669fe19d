"""
Port through which the engine reads energy data for a day window.

Any concrete health data platform is an adapter implementing
`EnergyDataPort`; the engine depends on nothing else. Adapters report
failure by raising one of the `DataSourceError` subclasses below, which the
engine treats as terminal for the current calculation (no retry).
"""

from datetime import datetime
from typing import List, Protocol, runtime_checkable

from models.energy import ExerciseSession


class DataSourceError(Exception):
    """Base class for failures reported by an energy data source."""


class PermissionsMissingError(DataSourceError):
    """Read access to the energy data was revoked or never granted."""


class PlatformUnavailableError(DataSourceError):
    """The health data platform is not installed or cannot be reached."""


class TransientFailureError(DataSourceError):
    """A recoverable I/O failure while reading energy data."""


@runtime_checkable
class EnergyDataPort(Protocol):
    async def fetch_total_energy_kcal(
        self, start_instant: datetime, end_instant: datetime
    ) -> float:
        """
        All-inclusive calories burned (BMR, NEAT and exercise) in
        [start_instant, end_instant).
        """
        ...

    async def fetch_exercise_sessions(
        self, start_instant: datetime, end_instant: datetime
    ) -> List[ExerciseSession]:
        """Explicit exercise records in [start_instant, end_instant)."""
        ...
