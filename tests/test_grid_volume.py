"""Tests for grid and volume sweeps."""

import numpy as np
import pytest

from py_density.core.context import EvaluationOptions
from py_density.core.grid import evaluate_density_grid
from py_density.core.volume import evaluate_density_volume


def node(node_id, node_type, **fields):
    return {"id": node_id, "type": node_type, "fields": fields}


@pytest.fixture
def amplitude_graph():
    nodes = [node("c5", "Constant", Value=5), node("c3", "Constant", Value=3), node("amp", "Amplitude")]
    edges = [
        {"source": "c5", "target": "amp", "targetHandle": "Input"},
        {"source": "c3", "target": "amp", "targetHandle": "Amplitude"},
    ]
    return nodes, edges


@pytest.fixture
def noise_graph():
    nodes = [
        node("n", "SimplexNoise2D", Seed="grid", Frequency=0.05, Octaves=3),
        node("w", "DomainWarp2D", Seed=4, Amplitude=8, Frequency=0.02),
        node("v", "VoronoiNoise2D", Seed=1, Frequency=0.1),
        node("s", "Sum"),
    ]
    edges = [
        {"source": "n", "target": "w"},
        {"source": "w", "target": "s", "targetHandle": "InputA"},
        {"source": "v", "target": "s", "targetHandle": "InputB"},
    ]
    return nodes, edges


class TestDensityGrid:
    """Test the 2D grid driver."""

    def test_constant_graph(self, amplitude_graph):
        nodes, edges = amplitude_graph
        result = evaluate_density_grid(nodes, edges, resolution=8)

        assert result.values.shape == (64,)
        assert result.values.dtype == np.float32
        assert np.all(result.values == 15)
        assert result.min_value == 15
        assert result.max_value == 15

    def test_row_major_layout(self):
        n = 4
        result_x = evaluate_density_grid([node("x", "CoordinateX")], [], n, 0, 4, 0)
        result_z = evaluate_density_grid([node("z", "CoordinateZ")], [], n, 0, 4, 0)

        for row in range(n):
            for col in range(n):
                assert result_x.values[row * n + col] == col
                assert result_z.values[row * n + col] == row
        assert result_x.min_value == 0
        assert result_x.max_value == 3

    def test_y_level(self):
        result = evaluate_density_grid([node("y", "CoordinateY")], [], 2, -1, 1, y_level=42)
        assert np.all(result.values == 42)

    def test_as_2d(self):
        result = evaluate_density_grid([node("x", "CoordinateX")], [], 3, 0, 3, 0)
        np.testing.assert_array_equal(result.as_2d()[1], [0, 1, 2])

    def test_no_root_yields_zeros(self):
        result = evaluate_density_grid([], [], resolution=4)
        assert np.all(result.values == 0)
        assert result.values.size == 16
        assert result.min_value == 0
        assert result.max_value == 0

    def test_resolution_floor(self):
        result = evaluate_density_grid([node("c", "One")], [], resolution=0)
        assert result.values.size == 1

    def test_deterministic(self, noise_graph):
        nodes, edges = noise_graph
        a = evaluate_density_grid(nodes, edges, 16, -32, 32, 64)
        b = evaluate_density_grid(nodes, edges, 16, -32, 32, 64)
        assert a.values.tobytes() == b.values.tobytes()
        assert (a.min_value, a.max_value) == (b.min_value, b.max_value)

    def test_min_max_track_values(self, noise_graph):
        nodes, edges = noise_graph
        result = evaluate_density_grid(nodes, edges, 8, -32, 32, 64)
        assert result.min_value == pytest.approx(float(result.values.min()), abs=1e-6)
        assert result.max_value == pytest.approx(float(result.values.max()), abs=1e-6)

    def test_options_are_forwarded(self):
        options = EvaluationOptions(content_fields={"Base": 30})
        result = evaluate_density_grid([node("b", "BaseHeight")], [], 2, options=options)
        assert np.all(result.values == 30)

    def test_to_dict(self, amplitude_graph):
        nodes, edges = amplitude_graph
        payload = evaluate_density_grid(nodes, edges, resolution=2).to_dict()
        assert payload == {"values": [15.0] * 4, "minValue": 15, "maxValue": 15}

    def test_deep_chain(self):
        depth = 400
        nodes = [node("c", "Constant", Value=5)] + [node(f"p{i}", "Passthrough") for i in range(depth)]
        edges = [{"source": "c", "target": "p0"}]
        edges += [{"source": f"p{i - 1}", "target": f"p{i}"} for i in range(1, depth)]
        result = evaluate_density_grid(nodes, edges, 2, root_node_id=f"p{depth - 1}")
        assert np.all(result.values == 5)
        assert (result.min_value, result.max_value) == (5, 5)

    def test_malformed_edge_does_not_raise(self):
        nodes = [node("c", "Constant", Value=2)]
        result = evaluate_density_grid(nodes, [{"target": "c", "targetHandle": "Input"}], 2)
        assert np.all(result.values == 2)


class TestDensityVolume:
    """Test the 3D volume driver."""

    def test_y_major_layout(self):
        n = 3
        result = evaluate_density_volume([node("y", "CoordinateY")], [], n, 0, 3, 0, 30, 4)

        assert result.densities.size == n * n * 4
        for yi in range(4):
            for zi in range(n):
                for xi in range(n):
                    assert result.densities[yi * n * n + zi * n + xi] == yi * 10
        assert result.min_value == 0
        assert result.max_value == 30

    def test_x_and_z_positions(self):
        n = 2
        xs = evaluate_density_volume([node("x", "CoordinateX")], [], n, 0, 2, 0, 1, 2)
        zs = evaluate_density_volume([node("z", "CoordinateZ")], [], n, 0, 2, 0, 1, 2)
        np.testing.assert_array_equal(xs.as_3d()[1, 0], [0, 1])
        np.testing.assert_array_equal(zs.as_3d()[1, :, 0], [0, 1])

    def test_single_slice_samples_y_min(self):
        result = evaluate_density_volume([node("y", "CoordinateY")], [], 2, 0, 2, 12, 99, 1)
        assert np.all(result.densities == 12)
        assert result.y_slices == 1

    def test_no_root_yields_zeros(self):
        result = evaluate_density_volume([], [], 2, 0, 2, 0, 10, 3)
        assert result.densities.size == 12
        assert np.all(result.densities == 0)
        assert (result.min_value, result.max_value) == (0, 0)

    def test_solid_mask(self):
        # Plane at y = 5 with a downward normal: solid (>= 0) below it
        nodes = [node("p", "Plane", Normal={"x": 0, "y": -1, "z": 0}, Distance=-5)]
        result = evaluate_density_volume(nodes, [], 2, 0, 2, 0, 10, 3)
        mask = result.solid_mask()
        assert mask[0].all()
        assert mask[1].all()
        assert not mask[2].any()

    def test_matches_grid_slice(self, noise_graph):
        nodes, edges = noise_graph
        volume = evaluate_density_volume(nodes, edges, 6, -16, 16, 20, 20, 1)
        grid = evaluate_density_grid(nodes, edges, 6, -16, 16, 20)
        np.testing.assert_array_equal(volume.densities, grid.values)
