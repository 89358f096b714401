"""Telemetry package"""
from .compactor import (
    TelemetryPoint,
    TelemetrySeries,
    add_telemetry_point,
    to_transport_form,
)

__all__ = [
    "TelemetryPoint",
    "TelemetrySeries",
    "add_telemetry_point",
    "to_transport_form",
]
