from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from models.energy import PassiveEnergyResult


class _Outcome(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class Success(_Outcome):
    kind: Literal["success"] = "success"
    passive_kcal: float
    active_kcal: float
    bmr_elapsed_kcal: float
    is_high_passive_anomaly: bool
    result: PassiveEnergyResult = Field(exclude=True)


class PermissionsMissing(_Outcome):
    """Data access was revoked or never granted. The UI shows a reconnect prompt."""

    kind: Literal["permissions_missing"] = "permissions_missing"
    detail: Optional[str] = None


class PlatformUnavailable(_Outcome):
    """The health data platform is not installed or not reachable."""

    kind: Literal["platform_unavailable"] = "platform_unavailable"
    detail: Optional[str] = None


class TransientFailure(_Outcome):
    """A recoverable I/O failure; the caller may retry."""

    kind: Literal["transient_failure"] = "transient_failure"
    detail: Optional[str] = None
    retryable: bool = True


EnergyBalanceOutcome = Annotated[
    Union[Success, PermissionsMissing, PlatformUnavailable, TransientFailure],
    Field(discriminator="kind"),
]
