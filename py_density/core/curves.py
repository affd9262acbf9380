"""
Curve evaluation for curve-driven density nodes.

Manual curves are control-point lists. They are sorted by x, densified with
Catmull-Rom interpolation into a lookup table, and queried by binary search
with linear interpolation between the bracketing samples. The query is
clamped to the curve's x domain.

Other curve subtypes are closed-form functions looked up by name.
"""

import bisect
import math
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence

from .fields import as_float, as_int, as_range

CurveFn = Callable[[float], float]

CURVE_TYPE_PREFIX = "Curve:"
MANUAL_CURVE = "Manual"

CURVE_PRESETS: Dict[str, List[List[float]]] = {
    "Linear": [[0.0, 0.0], [1.0, 1.0]],
    "Ease In": [[0.0, 0.0], [0.5, 0.2], [1.0, 1.0]],
    "Ease Out": [[0.0, 0.0], [0.5, 0.8], [1.0, 1.0]],
    "S-Curve": [[0.0, 0.0], [0.25, 0.1], [0.75, 0.9], [1.0, 1.0]],
    "Step": [[0.0, 0.0], [0.49, 0.0], [0.51, 1.0], [1.0, 1.0]],
}


@dataclass(frozen=True)
class CurvePoint:
    x: float
    y: float


def normalize_points(raw_points: Optional[Sequence[Any]]) -> List[CurvePoint]:
    """
    Accept ``[[x, y], ...]`` or ``[{"x": .., "y": ..}, ...]`` point lists.

    Malformed entries are skipped.
    """
    points = []
    for raw in raw_points or []:
        if isinstance(raw, Mapping):
            x = raw.get("x", raw.get("X"))
            y = raw.get("y", raw.get("Y"))
        elif isinstance(raw, (list, tuple)) and len(raw) >= 2:
            x, y = raw[0], raw[1]
        else:
            continue
        if x is None or y is None:
            continue
        points.append(CurvePoint(as_float(x), as_float(y)))
    return points


def to_output_format(points: Sequence[CurvePoint]) -> List[List[float]]:
    """Sort by x and round to 4 decimals, the serialized point format."""
    return [[round(p.x, 4), round(p.y, 4)] for p in sorted(points, key=lambda p: p.x)]


def _catmull_rom(p0: float, p1: float, p2: float, p3: float, t: float) -> float:
    t2 = t * t
    t3 = t2 * t
    return 0.5 * (
        2 * p1
        + (-p0 + p2) * t
        + (2 * p0 - 5 * p1 + 4 * p2 - p3) * t2
        + (-p0 + 3 * p1 - 3 * p2 + p3) * t3
    )


def catmull_rom_interpolate(points: Sequence[CurvePoint], samples_per_segment: int = 32) -> List[CurvePoint]:
    """
    Densify a control polyline with uniform Catmull-Rom segments.

    The curve passes through every control point; endpoints are duplicated
    as phantom neighbours. Y values are not clamped. Fewer than two points
    are returned unchanged.
    """
    if len(points) < 2:
        return list(points)

    samples_per_segment = max(1, samples_per_segment)
    result = []
    last = len(points) - 1
    for i in range(last):
        p0 = points[max(i - 1, 0)]
        p1 = points[i]
        p2 = points[i + 1]
        p3 = points[min(i + 2, last)]
        for step in range(samples_per_segment):
            t = step / samples_per_segment
            result.append(CurvePoint(
                _catmull_rom(p0.x, p1.x, p2.x, p3.x, t),
                _catmull_rom(p0.y, p1.y, p2.y, p3.y, t),
            ))
    result.append(points[last])
    return result


class ManualCurve:
    """Lookup table built once from a manual curve's control points."""

    def __init__(self, points: Sequence[CurvePoint], samples_per_segment: int = 32):
        ordered = sorted(points, key=lambda p: p.x)
        self.x_min = ordered[0].x
        self.x_max = ordered[-1].x
        self.samples = catmull_rom_interpolate(ordered, samples_per_segment)
        self._xs = [p.x for p in self.samples]

    @classmethod
    def from_raw(cls, raw_points: Optional[Sequence[Any]], samples_per_segment: int = 32) -> Optional["ManualCurve"]:
        points = normalize_points(raw_points)
        if len(points) < 2:
            return None
        return cls(points, samples_per_segment)

    def __call__(self, value: float) -> float:
        query = max(self.x_min, min(self.x_max, value))
        hi = bisect.bisect_right(self._xs, query)
        hi = max(1, min(hi, len(self.samples) - 1))
        p0 = self.samples[hi - 1]
        p1 = self.samples[hi]
        dx = p1.x - p0.x
        t = 0.0 if dx == 0 else (query - p0.x) / dx
        return p0.y + (p1.y - p0.y) * t


# Closed-form curve subtypes

def eval_constant(value: float) -> CurveFn:
    return lambda _x: value


def eval_power(exponent: float) -> CurveFn:
    def curve(x: float) -> float:
        if x == 0 and exponent < 0:
            return math.inf
        try:
            return math.pow(x, exponent)
        except (ValueError, OverflowError):
            return math.nan
    return curve


def eval_step_function(steps: int) -> CurveFn:
    if steps <= 0:
        return lambda x: x
    return lambda x: math.floor(x * steps) / steps


def eval_threshold(threshold: float) -> CurveFn:
    return lambda x: 1.0 if x >= threshold else 0.0


def eval_smooth_step(edge0: float, edge1: float) -> CurveFn:
    def curve(x: float) -> float:
        if edge1 == edge0:
            return 1.0 if x >= edge0 else 0.0
        t = max(0.0, min(1.0, (x - edge0) / (edge1 - edge0)))
        return t * t * (3 - 2 * t)
    return curve


def eval_distance_exponential(exponent: float, range_min: float, range_max: float) -> CurveFn:
    def curve(x: float) -> float:
        span = range_max - range_min
        if span == 0:
            return 0.0
        t = max(0.0, min(1.0, (x - range_min) / span))
        return eval_power(exponent)(t)
    return curve


def eval_inverter() -> CurveFn:
    return lambda x: 1 - x


def eval_clamp(min_value: float, max_value: float) -> CurveFn:
    return lambda x: max(min_value, min(max_value, x))


def eval_linear_remap(src_min: float, src_max: float, tgt_min: float, tgt_max: float) -> CurveFn:
    def curve(x: float) -> float:
        span = src_max - src_min
        t = 0.0 if span == 0 else (x - src_min) / span
        return tgt_min + t * (tgt_max - tgt_min)
    return curve


def _distance_exponential(fields: Mapping[str, Any]) -> CurveFn:
    range_min, range_max = as_range(fields.get("Range"), 0.0, 1.0)
    return eval_distance_exponential(
        as_float(fields.get("Exponent"), 1.0),
        as_float(fields.get("RangeMin"), range_min),
        as_float(fields.get("RangeMax"), range_max),
    )


def _linear_remap(fields: Mapping[str, Any]) -> CurveFn:
    src_min, src_max = as_range(fields.get("SourceRange"), 0.0, 1.0)
    tgt_min, tgt_max = as_range(fields.get("TargetRange"), 0.0, 1.0)
    return eval_linear_remap(src_min, src_max, tgt_min, tgt_max)


CURVE_EVALUATORS: Dict[str, Callable[[Mapping[str, Any]], CurveFn]] = {
    "Constant": lambda f: eval_constant(as_float(f.get("Value"), 0.0)),
    "Power": lambda f: eval_power(as_float(f.get("Exponent"), 1.0)),
    "StepFunction": lambda f: eval_step_function(as_int(f.get("Steps"), 4)),
    "Threshold": lambda f: eval_threshold(as_float(f.get("Threshold"), 0.5)),
    "SmoothStep": lambda f: eval_smooth_step(as_float(f.get("Edge0"), 0.0), as_float(f.get("Edge1"), 1.0)),
    "DistanceExponential": _distance_exponential,
    "Inverter": lambda f: eval_inverter(),
    "Clamp": lambda f: eval_clamp(as_float(f.get("Min"), 0.0), as_float(f.get("Max"), 1.0)),
    "LinearRemap": _linear_remap,
}


def curve_subtype(type_name: str) -> str:
    """Strip the ``Curve:`` prefix curve nodes carry in the editor."""
    if type_name.startswith(CURVE_TYPE_PREFIX):
        return type_name[len(CURVE_TYPE_PREFIX):]
    return type_name


def get_curve_evaluator(curve_type: str, fields: Mapping[str, Any]) -> Optional[CurveFn]:
    """Return the evaluator for a curve subtype, or None if it is not previewable."""
    factory = CURVE_EVALUATORS.get(curve_subtype(curve_type))
    if factory is None:
        return None
    return factory(fields)
