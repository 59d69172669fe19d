import logging
from typing import Any, Dict, List, Protocol, Tuple

import config
from models.energy import PassiveEnergyResult

RATIO_OUT_OF_BOUNDS = "RatioOutOfBounds"
HIGH_PASSIVE = "HighPassive"


class TelemetrySink(Protocol):
    def emit(self, event: str, fields: Dict[str, Any]) -> None: ...


class RecordingTelemetrySink:
    """Keeps every emitted event in memory."""

    def __init__(self):
        self.events: List[Tuple[str, Dict[str, Any]]] = []

    def emit(self, event: str, fields: Dict[str, Any]) -> None:
        self.events.append((event, fields))

    def names(self) -> List[str]:
        return [event for event, _ in self.events]


def is_ratio_within_bounds(ratio: float) -> bool:
    return config.RATIO_LOWER_BOUND <= ratio <= config.RATIO_UPPER_BOUND


def report(result: PassiveEnergyResult, sink: TelemetrySink) -> None:
    """
    Sends the sanity-check events for one successful calculation. Observational
    only: a failing sink is logged and the result is left untouched.
    """
    try:
        if result.ratio is not None:
            logging.info(f"Energy balance ratio: {result.ratio:.4f}")
            # An anomalous raw value makes the ratio check meaningless.
            if not result.is_high_passive_anomaly and not is_ratio_within_bounds(
                result.ratio
            ):
                sink.emit(RATIO_OUT_OF_BOUNDS, {"ratio": result.ratio})
        if result.is_high_passive_anomaly:
            sink.emit(
                HIGH_PASSIVE,
                {
                    "rawPassiveKcal": result.raw_passive_kcal,
                    "plausibleMaxKcal": result.plausible_max_kcal,
                },
            )
    except Exception as e:
        logging.error(f"Failed to emit energy telemetry: {e}", exc_info=True)
