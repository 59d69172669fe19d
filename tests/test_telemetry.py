import pytest

from conftest import minutes_after, sessions_of
from models.energy import EnergyAggregate
from services.passive_energy import compute
from services.telemetry import (
    HIGH_PASSIVE,
    RATIO_OUT_OF_BOUNDS,
    RecordingTelemetrySink,
    is_ratio_within_bounds,
    report,
)


def _result(profile, window, total_kcal, *active_kcal):
    aggregate = EnergyAggregate.from_sources(total_kcal, sessions_of(*active_kcal))
    return compute(profile, window, minutes_after(window, 720), aggregate)


def test_consistent_day_emits_nothing(profile, utc_window):
    sink = RecordingTelemetrySink()
    report(_result(profile, utc_window, 2400.0, 300.0), sink)
    assert sink.events == []


def test_high_passive_event_carries_raw_and_ceiling(profile, utc_window):
    sink = RecordingTelemetrySink()
    report(_result(profile, utc_window, 8000.0, 300.0), sink)

    assert sink.names() == [HIGH_PASSIVE]
    _, fields = sink.events[0]
    assert fields["rawPassiveKcal"] == pytest.approx(6800.0)
    assert fields["plausibleMaxKcal"] == pytest.approx(5400.0)


def test_clamped_day_reports_ratio_out_of_bounds(profile, utc_window):
    sink = RecordingTelemetrySink()
    report(_result(profile, utc_window, 1000.0, 300.0), sink)

    assert sink.names() == [RATIO_OUT_OF_BOUNDS]
    assert sink.events[0][1]["ratio"] == pytest.approx(1.2)


def test_zero_total_skips_ratio_check(profile, utc_window):
    sink = RecordingTelemetrySink()
    report(_result(profile, utc_window, 0.0), sink)
    assert sink.events == []


def test_ratio_bounds_are_inclusive():
    assert is_ratio_within_bounds(0.95)
    assert is_ratio_within_bounds(1.05)
    assert not is_ratio_within_bounds(0.949)
    assert not is_ratio_within_bounds(1.051)


def test_failing_sink_does_not_raise(profile, utc_window):
    class BrokenSink:
        def emit(self, event, fields):
            raise RuntimeError("sink offline")

    result = _result(profile, utc_window, 8000.0, 300.0)
    report(result, BrokenSink())
    assert result.passive_kcal == pytest.approx(6800.0)
