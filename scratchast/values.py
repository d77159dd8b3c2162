"""Scalar values as they appear in project.json (string, number or boolean)."""

import math
from typing import Any, Optional, Union

ScratchValue = Union[str, float, bool]


def as_scratch_value(raw: Any) -> Optional[ScratchValue]:
    """Return ``raw`` as a ScratchValue, or None if it is not a JSON scalar.

    Booleans are checked before numbers since ``bool`` is an ``int``.
    """
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, (int, float)):
        return float(raw)
    if isinstance(raw, str):
        return raw
    return None


def is_scratch_value(raw: Any) -> bool:
    return as_scratch_value(raw) is not None


def force_str(value: ScratchValue) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isfinite(value) and value.is_integer():
            return str(int(value))
        return str(value)
    return value


def force_num(value: ScratchValue) -> float:
    """Strings never parse as numbers here; only booleans convert."""
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, float):
        return value
    return 0.0


def force_bool(value: ScratchValue) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value != ""
    return value != 0.0
