"""
Tests for telemetry compaction
"""
import pytest
from pydantic import ValidationError

from flakiness_sdk.telemetry import (
    TelemetryPoint,
    TelemetrySeries,
    add_telemetry_point,
    to_transport_form,
)


def point(timestamp, value):
    return TelemetryPoint(timestamp=timestamp, value=value)


def test_transport_form_uses_deltas():
    series = [point(1000, 10), point(1500, 12)]
    assert to_transport_form(series) == [[1000, 10], [500, 12]]


def test_transport_form_of_empty_series():
    assert to_transport_form([]) == []


def test_transport_form_rounds_to_two_digits():
    series = [point(1000, 33.333), point(2000, 66.666)]
    assert to_transport_form(series) == [[1000, 33.33], [1000, 66.67]]


def test_first_two_points_are_always_kept():
    series = []
    add_telemetry_point(series, point(0, 50), 1)
    add_telemetry_point(series, point(10, 50), 1)
    assert len(series) == 2


def test_flat_signal_extends_last_point():
    series = []
    for i in range(1000):
        add_telemetry_point(series, point(i * 10, 50 + (i % 2) * 0.5), precision=1)

    assert len(series) == 2
    assert series[0].timestamp == 0
    assert series[-1].timestamp == 9990


def test_jump_is_appended():
    series = []
    for i, value in enumerate([10, 10, 10, 90]):
        add_telemetry_point(series, point(i, value), precision=1)

    assert [p.value for p in series] == [10, 10, 90]
    assert [p.timestamp for p in series] == [0, 2, 3]


def test_only_last_two_points_are_inspected():
    series = []
    for i, value in enumerate([10, 50, 50.5, 50.2]):
        add_telemetry_point(series, point(i, value), precision=1)

    # 50.5 follows a jump so it is kept; 50.2 is within precision of both.
    assert [p.value for p in series] == [10, 50, 50.5]
    assert series[-1].timestamp == 3


def test_value_must_be_a_percentage():
    with pytest.raises(ValidationError):
        TelemetryPoint(timestamp=0, value=101)
    with pytest.raises(ValidationError):
        TelemetryPoint(timestamp=0, value=-1)


def test_series_clamps_values():
    series = TelemetrySeries(precision=1)
    series.add(1000, 120)
    series.add(2000, -5)

    assert series.to_transport_form() == [[1000, 100], [1000, 0]]
    assert len(series) == 2
