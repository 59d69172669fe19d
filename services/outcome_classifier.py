from typing import Union

from models.energy import PassiveEnergyResult
from models.outcome import (
    PermissionsMissing,
    PlatformUnavailable,
    Success,
    TransientFailure,
)
from services.energy_source import (
    DataSourceError,
    PermissionsMissingError,
    PlatformUnavailableError,
    TransientFailureError,
)


def classify_result(result: PassiveEnergyResult) -> Success:
    """A computed result is always a success, anomalous or not."""
    return Success(
        passive_kcal=result.passive_kcal,
        active_kcal=result.active_kcal,
        bmr_elapsed_kcal=result.bmr_elapsed_kcal,
        is_high_passive_anomaly=result.is_high_passive_anomaly,
        result=result,
    )


def classify_error(
    error: DataSourceError,
) -> Union[PermissionsMissing, PlatformUnavailable, TransientFailure]:
    detail = str(error) or None
    if isinstance(error, PermissionsMissingError):
        return PermissionsMissing(detail=detail)
    if isinstance(error, PlatformUnavailableError):
        return PlatformUnavailable(detail=detail)
    if isinstance(error, TransientFailureError):
        return TransientFailure(detail=detail)
    # A source that raises the bare base class gave no reason; retry later.
    return TransientFailure(detail=detail or type(error).__name__)
