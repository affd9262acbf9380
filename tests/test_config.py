"""Tests for application settings."""

from py_density.config import Settings, settings


class TestSettings:
    """Test settings defaults and environment overrides."""

    def test_defaults(self):
        fresh = Settings()
        assert fresh.default_world_height == 320
        assert fresh.default_base_height == 100
        assert fresh.curve_samples_per_segment == 32
        assert fresh.gradient_epsilon == 0.5

    def test_singleton(self):
        assert isinstance(settings, Settings)

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("PY_DENSITY_WORKER_TIMEOUT_SECONDS", "5")
        monkeypatch.setenv("PY_DENSITY_MAX_RESOLUTION", "128")
        fresh = Settings()
        assert fresh.worker_timeout_seconds == 5.0
        assert fresh.max_resolution == 128
