"""Tests for the preview API."""

import pytest
from fastapi.testclient import TestClient

from py_density import __version__
from py_density.api.main import app


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def amplitude_graph():
    return {
        "nodes": [
            {"id": "c5", "type": "Constant", "fields": {"Value": 5}},
            {"id": "c3", "type": "Constant", "fields": {"Value": 3}},
            {"id": "amp", "type": "Amplitude", "fields": {}},
        ],
        "edges": [
            {"source": "c5", "target": "amp", "targetHandle": "Input"},
            {"source": "c3", "target": "amp", "targetHandle": "Amplitude"},
        ],
    }


class TestServiceEndpoints:
    """Test informational endpoints."""

    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        data = response.json()
        assert data["message"] == "Density Graph Preview API"
        assert data["version"] == __version__
        assert data["status"] == "running"

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}

    @pytest.mark.parametrize("type_name,known,status", [
        ("Terrain", True, "unsupported"),
        ("VectorWarp", True, "approximated"),
        ("SimplexNoise2D", True, "full"),
        ("Foo", False, "full"),
    ])
    def test_node_type_status(self, client, type_name, known, status):
        response = client.get(f"/node-types/{type_name}/status")
        assert response.status_code == 200
        assert response.json() == {"type": type_name, "known": known, "status": status}


class TestDensityEndpoints:
    """Test the sweep endpoints."""

    def test_grid(self, client, amplitude_graph):
        response = client.post("/density/grid", json={**amplitude_graph, "resolution": 4})
        assert response.status_code == 200

        data = response.json()
        assert data["resolution"] == 4
        assert data["values"] == [15.0] * 16
        assert data["minValue"] == 15
        assert data["maxValue"] == 15

    def test_grid_with_content_fields(self, client):
        payload = {
            "nodes": [{"id": "b", "type": "BaseHeight", "fields": {"BaseHeightName": "Water"}}],
            "resolution": 2,
            "options": {"contentFields": {"Water": 62}},
        }
        response = client.post("/density/grid", json=payload)
        assert response.status_code == 200
        assert response.json()["values"] == [62.0] * 4

    def test_grid_empty_graph(self, client):
        response = client.post("/density/grid", json={"nodes": [], "resolution": 2})
        assert response.status_code == 200
        data = response.json()
        assert data["values"] == [0.0] * 4
        assert data["minValue"] == 0
        assert data["maxValue"] == 0

    def test_grid_rejects_inverted_range(self, client, amplitude_graph):
        response = client.post("/density/grid", json={**amplitude_graph, "rangeMin": 10, "rangeMax": -10})
        assert response.status_code == 422

    def test_grid_rejects_bad_resolution(self, client, amplitude_graph):
        response = client.post("/density/grid", json={**amplitude_graph, "resolution": 0})
        assert response.status_code == 422

    def test_grid_requires_nodes(self, client):
        response = client.post("/density/grid", json={"resolution": 4})
        assert response.status_code == 422

    def test_volume(self, client):
        payload = {
            "nodes": [{"id": "y", "type": "CoordinateY", "fields": {}}],
            "resolution": 2,
            "rangeMin": 0,
            "rangeMax": 2,
            "yMin": 0,
            "yMax": 20,
            "ySlices": 3,
        }
        response = client.post("/density/volume", json=payload)
        assert response.status_code == 200

        data = response.json()
        assert data["resolution"] == 2
        assert data["ySlices"] == 3
        assert data["densities"] == [0.0] * 4 + [10.0] * 4 + [20.0] * 4
        assert data["minValue"] == 0
        assert data["maxValue"] == 20

    def test_volume_rejects_inverted_range(self, client, amplitude_graph):
        response = client.post("/density/volume", json={**amplitude_graph, "rangeMin": 1, "rangeMax": 1})
        assert response.status_code == 422

    def test_statistics(self, client):
        payload = {
            "nodes": [{"id": "x", "type": "CoordinateX", "fields": {}}],
            "resolution": 4,
            "rangeMin": 0,
            "rangeMax": 4,
        }
        response = client.post("/density/grid/statistics?bins=3", json=payload)
        assert response.status_code == 200

        data = response.json()
        assert data["values"] == [0.0, 1.0, 2.0, 3.0] * 4
        assert data["statistics"]["mean"] == pytest.approx(1.5)
        assert data["statistics"]["min"] == 0
        assert data["statistics"]["max"] == 3
        assert data["histogram"]["bins"] == [4, 4, 8]
        assert data["histogram"]["binEdges"] == pytest.approx([0, 1, 2, 3])

    def test_statistics_rejects_bad_bins(self, client, amplitude_graph):
        response = client.post("/density/grid/statistics?bins=0", json=amplitude_graph)
        assert response.status_code == 422
