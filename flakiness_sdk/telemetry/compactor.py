"""
Telemetry Compactor - lossy compaction of utilization time series

Samples arrive one at a time and are folded into a series that keeps only
the points needed to redraw the signal within a given precision.

Transport form
--------------
``to_transport_form`` emits ``[[t0, v0], [dt1, v1], [dt2, v2], ...]`` where
``t0`` is the absolute timestamp (Unix ms) of the first point, every later
``dtN`` is the non-negative delta from the previous point's timestamp and
every value is rounded to two decimal digits. Consumers recover absolute
timestamps with a running sum of the first column.
"""
import math
from typing import List, Union

from pydantic import BaseModel, Field


class TelemetryPoint(BaseModel):
    """One utilization sample."""

    timestamp: int = Field(..., description="Unix timestamp, ms")
    value: float = Field(..., ge=0, le=100, description="Percentage, 0-100")


def add_telemetry_point(series: List[TelemetryPoint], point: TelemetryPoint, precision: float):
    """
    Fold a new sample into a series.

    When the last two stored points and the new sample all lie within
    ``precision`` of each other, the signal is still flat: the last point is
    stretched to the new timestamp and the new value is discarded. Otherwise
    the sample is appended. Only the last two points are ever inspected.

    Args:
        series: Series to update in place, ordered by time
        point: New sample
        precision: Tolerance, in the same unit as values
    """
    if len(series) >= 2:
        last, pre_last = series[-1], series[-2]
        if (abs(last.value - pre_last.value) < precision
                and abs(last.value - point.value) < precision):
            last.timestamp = point.timestamp
            return
    series.append(point)


def _round2(value: float) -> Union[int, float]:
    rounded = math.floor(value * 100 + 0.5) / 100
    return int(rounded) if rounded.is_integer() else rounded


def to_transport_form(series: List[TelemetryPoint]) -> List[List[Union[int, float]]]:
    """
    Delta-encode a series for the report.

    Args:
        series: Series ordered by time

    Returns:
        List of ``[time, value]`` pairs, see the module docstring
    """
    result = []
    last_timestamp = None
    for point in series:
        dt = point.timestamp if last_timestamp is None else point.timestamp - last_timestamp
        last_timestamp = point.timestamp
        result.append([dt, _round2(point.value)])
    return result


class TelemetrySeries:
    """
    A compacted series with a fixed precision.

    This is the interface CPU/RAM samplers feed; the series is read once
    when the report is enriched.
    """

    def __init__(self, precision: float):
        self.precision = precision
        self.points: List[TelemetryPoint] = []

    def add(self, timestamp: int, value: float):
        """Record a sample, clamping the value into [0, 100]."""
        value = min(100.0, max(0.0, value))
        add_telemetry_point(
            self.points,
            TelemetryPoint(timestamp=timestamp, value=value),
            self.precision,
        )

    def to_transport_form(self) -> List[List[Union[int, float]]]:
        return to_transport_form(self.points)

    def __len__(self):
        return len(self.points)
