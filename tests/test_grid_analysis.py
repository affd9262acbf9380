"""Tests for grid statistics, histograms and cross sections."""

import math

import numpy as np
import pytest

from py_density.core.grid_analysis import (
    FLAT_BIN_WIDTH,
    bilinear_sample,
    compute_histogram,
    compute_statistics,
    sample_cross_section,
)


@pytest.fixture
def column_grid():
    """4x4 buffer where each cell holds its column index."""
    return np.tile(np.arange(4, dtype=np.float32), 4)


class TestStatistics:
    """Test descriptive statistics."""

    def test_basic_values(self):
        stats = compute_statistics([4, 1, 3, 2])
        assert stats.min == 1
        assert stats.max == 4
        assert stats.mean == pytest.approx(2.5)
        assert stats.median == pytest.approx(2.5)
        assert stats.std_dev == pytest.approx(math.sqrt(1.25))
        assert stats.p25 == pytest.approx(1.75)
        assert stats.p75 == pytest.approx(3.25)

    def test_empty_buffer(self):
        stats = compute_statistics([])
        assert stats.to_dict() == {
            "min": 0.0, "max": 0.0, "mean": 0.0, "median": 0.0,
            "std_dev": 0.0, "p25": 0.0, "p75": 0.0,
        }

    def test_accepts_float32_arrays(self, column_grid):
        stats = compute_statistics(column_grid)
        assert stats.mean == pytest.approx(1.5)


class TestHistogram:
    """Test equal-width binning."""

    def test_max_lands_in_last_bin(self):
        hist = compute_histogram([0, 1, 2, 3], bin_count=3)
        assert hist.bins == [1, 1, 2]
        assert hist.bin_edges == pytest.approx([0, 1, 2, 3])

    def test_counts_sum_to_size(self, column_grid):
        hist = compute_histogram(column_grid, bin_count=7)
        assert sum(hist.bins) == column_grid.size
        assert len(hist.bin_edges) == 8

    def test_flat_buffer(self):
        hist = compute_histogram([5, 5, 5], bin_count=4)
        assert hist.bins == [3, 0, 0, 0]
        assert len(hist.bin_edges) == 5
        assert hist.bin_edges[1] == pytest.approx(5 + FLAT_BIN_WIDTH)

    def test_empty_buffer(self):
        hist = compute_histogram([])
        assert hist.bins == []
        assert hist.bin_edges == []


class TestCrossSection:
    """Test bilinear sampling along a segment."""

    def test_bilinear_midpoint(self):
        assert bilinear_sample([0, 1, 2, 3], 2, 0.5, 0.5) == pytest.approx(1.5)

    def test_bilinear_on_cell(self, column_grid):
        assert bilinear_sample(column_grid, 4, 2, 1) == pytest.approx(2)

    def test_bilinear_clamps_outside(self, column_grid):
        assert bilinear_sample(column_grid, 4, 10, -3) == pytest.approx(3)

    def test_degenerate_segment(self, column_grid):
        assert sample_cross_section(column_grid, 4, 0, 4, (1, 1), (1, 1)) == []
        assert sample_cross_section(column_grid, 4, 2, 2, (0, 0), (4, 0)) == []

    def test_sample_count_and_distance(self, column_grid):
        samples = sample_cross_section(column_grid, 4, 0, 4, (0, 0), (4, 0))

        assert len(samples) == 8
        assert samples[0].distance == 0
        assert samples[-1].distance == pytest.approx(4)
        assert samples[-1].x == pytest.approx(4)
        assert all(s.z == 0 for s in samples)
        # Column gradient: world x maps to grid x * 3/4
        for s in samples:
            assert s.value == pytest.approx(s.x * 0.75, abs=1e-6)

    def test_minimum_two_samples(self, column_grid):
        samples = sample_cross_section(column_grid, 4, 0, 4, (0, 0), (0.01, 0))
        assert len(samples) == 2
