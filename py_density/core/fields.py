"""Lenient readers for node field values."""

import math
from typing import Any, Mapping, Optional, Tuple


def as_float(value: Any, default: float = 0.0) -> float:
    """Read a numeric field, falling back to ``default`` when missing or unparsable."""
    if value is None or isinstance(value, (dict, list, tuple)):
        return default
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def as_nonzero(value: Any, default: float = 1.0) -> float:
    """Like ``as_float`` but zero (and NaN) also fall back to ``default``."""
    result = as_float(value, default)
    if result == 0 or math.isnan(result):
        return default
    return result


def as_int(value: Any, default: int = 0) -> int:
    result = as_float(value, float(default))
    if not math.isfinite(result):
        return default
    return int(result)


def as_str(value: Any, default: str = "") -> str:
    if value is None:
        return default
    return str(value)


def _component(vec: Mapping[str, Any], axis: str) -> Any:
    # Editor vectors are lower-case; exported assets use upper-case keys
    if axis in vec:
        return vec[axis]
    return vec.get(axis.upper())


def as_vec3(value: Any, default: Tuple[float, float, float] = (0.0, 0.0, 0.0)) -> Tuple[float, float, float]:
    """Read an ``{x, y, z}`` vector field, defaulting each component separately."""
    if not isinstance(value, Mapping):
        return default
    return (
        as_float(_component(value, "x"), default[0]),
        as_float(_component(value, "y"), default[1]),
        as_float(_component(value, "z"), default[2]),
    )


def as_range(value: Any, default_min: float, default_max: float) -> Tuple[float, float]:
    """Read a ``{Min, Max}`` range field."""
    if not isinstance(value, Mapping):
        return default_min, default_max
    return as_float(value.get("Min"), default_min), as_float(value.get("Max"), default_max)


def field(fields: Mapping[str, Any], *names: str) -> Optional[Any]:
    """Return the first present value among alternative field names."""
    for name in names:
        value = fields.get(name)
        if value is not None:
            return value
    return None
