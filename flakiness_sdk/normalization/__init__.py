"""Normalization package"""
from .identity import canonical_json, stable_hash
from .normalizer import (
    NormalizationContext,
    deduplicate_report,
    normalize_report,
    strip_defaults,
)

__all__ = [
    "canonical_json",
    "stable_hash",
    "NormalizationContext",
    "deduplicate_report",
    "normalize_report",
    "strip_defaults",
]
