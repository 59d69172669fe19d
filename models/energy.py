from datetime import datetime
from typing import Iterable, Optional

import numpy as np
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ExerciseSession(BaseModel):
    """An explicit, user-initiated exercise record from the health data platform."""

    active_kcal: float = Field(ge=0, allow_inf_nan=False)
    started_at: Optional[datetime] = None
    ended_at: Optional[datetime] = None
    data_origin: Optional[str] = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class EnergyRecord(BaseModel):
    """A 'total calories burned' record; one without a usable total is corrupt."""

    total_kcal: float = Field(ge=0, allow_inf_nan=False)
    start_time: Optional[datetime] = None
    data_origin: Optional[str] = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class EnergyAggregate(BaseModel):
    """
    Energy measured for one day window. `active_kcal` only ever comes from
    exercise sessions; a NEAT-inclusive aggregate would double count NEAT into
    the active bucket.
    """

    total_kcal: float = Field(ge=0, allow_inf_nan=False)
    active_kcal: float = Field(ge=0, allow_inf_nan=False)
    session_count: int = Field(ge=0)
    distinct_data_origin_count: int = Field(default=0, ge=0)

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_sources(
        cls, total_kcal: float, sessions: Iterable[ExerciseSession]
    ) -> "EnergyAggregate":
        sessions = list(sessions)
        active = np.fromiter(
            (s.active_kcal for s in sessions), dtype=np.float64, count=len(sessions)
        )
        origins = {s.data_origin for s in sessions if s.data_origin}
        return cls(
            total_kcal=total_kcal,
            active_kcal=float(np.sum(active)),
            session_count=len(sessions),
            distinct_data_origin_count=len(origins),
        )


class PassiveEnergyResult(BaseModel):
    """
    Outcome of one passive energy derivation. `raw_passive_kcal` is kept as
    computed (negative or implausibly large values included) for diagnostics.
    """

    raw_passive_kcal: float
    passive_kcal: float = Field(ge=0)
    plausible_max_kcal: float
    is_high_passive_anomaly: bool
    ratio: Optional[float] = Field(
        default=None, description="Undefined when the total aggregate is zero."
    )
    active_kcal: float
    bmr_elapsed_kcal: float
    total_kcal: float
    daily_bmr_kcal: float

    model_config = ConfigDict(frozen=True)
