"""Tests for curve evaluation."""

import math

import pytest

from py_density.core.curves import (
    CURVE_PRESETS,
    CurvePoint,
    ManualCurve,
    catmull_rom_interpolate,
    curve_subtype,
    eval_clamp,
    eval_distance_exponential,
    eval_linear_remap,
    eval_power,
    eval_smooth_step,
    eval_step_function,
    eval_threshold,
    get_curve_evaluator,
    normalize_points,
    to_output_format,
)


class TestCatmullRom:
    """Test control point densification."""

    def test_passes_through_control_points(self):
        points = [CurvePoint(0, 0), CurvePoint(1, 1), CurvePoint(2, 0)]
        samples = catmull_rom_interpolate(points, samples_per_segment=8)

        assert len(samples) == 2 * 8 + 1
        assert samples[0] == points[0]
        assert samples[8].x == pytest.approx(1.0)
        assert samples[8].y == pytest.approx(1.0)
        assert samples[-1] == points[-1]

    def test_too_few_points_returned_unchanged(self):
        points = [CurvePoint(0, 0)]
        assert catmull_rom_interpolate(points) == points


class TestManualCurve:
    """Test manual curve lookup tables."""

    def test_linear_curve(self):
        curve = ManualCurve.from_raw([[0, 0], [1, 1]])
        for value in (0.0, 0.25, 0.5, 0.9, 1.0):
            assert curve(value) == pytest.approx(value, abs=1e-6)

    def test_query_clamped_to_domain(self):
        curve = ManualCurve.from_raw([[0, 0.2], [1, 0.8]])
        assert curve(-5) == pytest.approx(0.2)
        assert curve(5) == pytest.approx(0.8)

    def test_unsorted_points_are_sorted(self):
        a = ManualCurve.from_raw([[1, 1], [0, 0], [0.5, 0.3]])
        b = ManualCurve.from_raw([[0, 0], [0.5, 0.3], [1, 1]])
        assert a(0.7) == b(0.7)

    def test_object_points(self):
        curve = ManualCurve.from_raw([{"x": 0, "y": 1}, {"x": 2, "y": 1}])
        assert curve(1.0) == pytest.approx(1.0)

    def test_needs_two_points(self):
        assert ManualCurve.from_raw([[0, 0]]) is None
        assert ManualCurve.from_raw(None) is None

    def test_malformed_points_skipped(self):
        assert normalize_points([[0, 1], "junk", [2], {"x": 3}, {"x": 4, "y": 5}]) == [
            CurvePoint(0.0, 1.0), CurvePoint(4.0, 5.0)
        ]


class TestCurveEvaluators:
    """Test closed-form curve subtypes."""

    def test_power(self):
        assert eval_power(2)(3) == 9
        assert eval_power(-1)(0) == math.inf
        assert math.isnan(eval_power(0.5)(-4))

    def test_step_function(self):
        assert eval_step_function(4)(0.3) == 0.25
        assert eval_step_function(0)(0.3) == 0.3

    def test_threshold(self):
        assert eval_threshold(0.5)(0.5) == 1.0
        assert eval_threshold(0.5)(0.49) == 0.0

    def test_smooth_step(self):
        curve = eval_smooth_step(0, 1)
        assert curve(-1) == 0.0
        assert curve(0.5) == pytest.approx(0.5)
        assert curve(2) == 1.0
        assert eval_smooth_step(1, 1)(1) == 1.0

    def test_distance_exponential(self):
        curve = eval_distance_exponential(2, 0, 10)
        assert curve(5) == pytest.approx(0.25)
        assert curve(20) == pytest.approx(1.0)
        assert eval_distance_exponential(2, 3, 3)(5) == 0.0

    def test_clamp_and_remap(self):
        assert eval_clamp(0, 1)(2) == 1
        assert eval_linear_remap(0, 10, 0, 1)(5) == pytest.approx(0.5)
        assert eval_linear_remap(1, 1, 3, 7)(5) == 3

    def test_lookup_by_subtype(self):
        inverter = get_curve_evaluator("Curve:Inverter", {})
        assert inverter(0.25) == 0.75
        power = get_curve_evaluator("Power", {"Exponent": 3})
        assert power(2) == 8
        remap = get_curve_evaluator("LinearRemap", {"SourceRange": {"Min": -1, "Max": 1},
                                                    "TargetRange": {"Min": 0, "Max": 10}})
        assert remap(0) == pytest.approx(5)

    def test_unknown_subtype(self):
        assert get_curve_evaluator("Curve:Mystery", {}) is None

    def test_curve_subtype(self):
        assert curve_subtype("Curve:Manual") == "Manual"
        assert curve_subtype("Manual") == "Manual"


class TestCurveFormat:
    """Test presets and serialized points."""

    def test_presets_span_unit_interval(self):
        for name, points in CURVE_PRESETS.items():
            assert points[0] == [0.0, 0.0], name
            assert points[-1] == [1.0, 1.0], name

    def test_output_format_sorts_and_rounds(self):
        points = [CurvePoint(0.5, 0.123456), CurvePoint(0.1, 0.9)]
        assert to_output_format(points) == [[0.1, 0.9], [0.5, 0.1235]]
