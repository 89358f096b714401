"""
Content identity - stable hashes of semantically equal values
"""
import hashlib
import json
from typing import Any

from pydantic import BaseModel


def _to_plain(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True, exclude_none=True)
    return value


def canonical_json(value: Any) -> str:
    """
    Serialize a value so that equal content always yields equal text.

    Keys are sorted at every depth and separators are compact, so the
    result does not depend on field insertion order.

    Args:
        value: JSON-compatible value or pydantic model

    Returns:
        Canonical JSON text
    """
    return json.dumps(
        _to_plain(value),
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        default=_to_plain,
    )


def stable_hash(value: Any) -> str:
    """
    Compute a deterministic identifier for a value.

    Used for grouping only, never as a security primitive.

    Args:
        value: JSON-compatible value or pydantic model

    Returns:
        Hex SHA-1 of the canonical JSON form
    """
    return hashlib.sha1(canonical_json(value).encode("utf-8")).hexdigest()
