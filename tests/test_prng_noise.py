"""Tests for seeding and noise primitives."""

import math

import pytest

from py_density.core.noise import (
    CELL_DISTANCE2_DIV,
    CELL_DISTANCE2_SUB,
    NoiseCache,
    create_noise_2d,
    create_noise_3d,
    fbm_2d,
    ridge_fbm_2d,
    voronoi_noise_2d,
    voronoi_noise_3d,
)
from py_density.core.prng import Mulberry32, hash_seed


class TestMulberry32:
    """Test the seeded PRNG."""

    def test_deterministic(self):
        a = Mulberry32(42)
        b = Mulberry32(42)
        assert [a() for _ in range(10)] == [b() for _ in range(10)]

    def test_range(self):
        rng = Mulberry32(7)
        values = [rng.random() for _ in range(1000)]
        assert all(0 <= v < 1 for v in values)

    def test_different_seeds(self):
        assert Mulberry32(1).next_uint32() != Mulberry32(2).next_uint32()

    def test_negative_and_large_seeds_wrap(self):
        assert Mulberry32(-1).next_uint32() == Mulberry32(0xFFFFFFFF).next_uint32()
        assert Mulberry32(2 ** 32 + 5).next_uint32() == Mulberry32(5).next_uint32()


class TestHashSeed:
    """Test seed field hashing."""

    def test_missing_seed(self):
        assert hash_seed(None) == 0

    def test_numbers_truncate(self):
        assert hash_seed(12) == 12
        assert hash_seed(12.9) == 12
        assert hash_seed(float("nan")) == 0

    def test_string_hash(self):
        assert hash_seed("a") == 97
        assert hash_seed("ab") == 97 * 31 + 98

    def test_string_hash_wraps_to_int32(self):
        h = hash_seed("a fairly long seed string that overflows")
        assert -2 ** 31 <= h < 2 ** 31

    def test_astral_characters_hash_as_surrogate_pairs(self):
        # U+1F600 is the UTF-16 pair D83D DE00
        assert hash_seed("\U0001F600") == 0xD83D * 31 + 0xDE00
        assert hash_seed("a\U0001F600") == (97 * 31 + 0xD83D) * 31 + 0xDE00


class TestSimplexNoise:
    """Test seeded smooth noise."""

    def test_deterministic_per_seed(self):
        assert create_noise_2d(5)(1.3, 2.7) == create_noise_2d(5)(1.3, 2.7)
        assert create_noise_3d(5)(1.3, 2.7, 0.4) == create_noise_3d(5)(1.3, 2.7, 0.4)

    def test_seed_changes_output(self):
        samples_a = [create_noise_2d(1)(i * 0.37, i * 0.11) for i in range(20)]
        samples_b = [create_noise_2d(2)(i * 0.37, i * 0.11) for i in range(20)]
        assert samples_a != samples_b

    def test_bounded(self):
        noise = create_noise_2d(9)
        values = [noise(i * 0.173, i * 0.291) for i in range(500)]
        assert all(-1.0 <= v <= 1.0 for v in values)

    def test_fbm_single_octave_is_scaled_noise(self):
        noise = create_noise_2d(3)
        assert fbm_2d(noise, 10, 20, 0.01, 1, 2.0, 0.5) == pytest.approx(noise(0.1, 0.2))

    def test_single_octave_ridge_range(self):
        noise = create_noise_2d(3)
        values = [ridge_fbm_2d(noise, i * 3.1, i * 1.7, 0.05, 1) for i in range(200)]
        assert all(-1.0 <= v <= 1.0 for v in values)


class TestVoronoiNoise:
    """Test cellular noise."""

    def test_deterministic(self):
        assert voronoi_noise_2d(4)(0.3, 0.8) == voronoi_noise_2d(4)(0.3, 0.8)

    def test_seed_moves_feature_points(self):
        samples_a = [voronoi_noise_2d(1)(i * 0.41, i * 0.23) for i in range(20)]
        samples_b = [voronoi_noise_2d(2)(i * 0.41, i * 0.23) for i in range(20)]
        assert samples_a != samples_b

    def test_distance2_div_range(self):
        noise = voronoi_noise_2d(0, CELL_DISTANCE2_DIV)
        values = [noise(i * 0.37, i * 0.19) for i in range(200)]
        assert all(-1.0 <= v <= 1.0 for v in values)

    def test_distance2_sub_non_negative_gap(self):
        noise = voronoi_noise_3d(0, CELL_DISTANCE2_SUB)
        values = [noise(i * 0.37, i * 0.19, i * 0.07) for i in range(50)]
        # d2 >= d1 so (d2 - d1) * 2 - 1 >= -1
        assert all(v >= -1.0 for v in values)

    def test_zero_jitter_is_regular_lattice(self):
        noise = voronoi_noise_2d(0, jitter=0.0)
        # Feature points sit on integer corners; (0.5, 0.5) is equidistant from four
        assert noise(0.5, 0.5) == pytest.approx(math.sqrt(0.5) * 2 - 1)


class TestNoiseCache:
    """Test per-context noise caching."""

    def test_same_seed_reuses_generator(self):
        cache = NoiseCache()
        assert cache.noise_2d(1) is cache.noise_2d(1)
        assert cache.noise_3d(1) is cache.noise_3d(1)
        assert len(cache) == 2

    def test_cellular_key_includes_metric_and_jitter(self):
        cache = NoiseCache()
        a = cache.voronoi_2d(1, "Euclidean", 1.0)
        b = cache.voronoi_2d(1, CELL_DISTANCE2_DIV, 1.0)
        c = cache.voronoi_2d(1, "Euclidean", 0.5)
        assert a is not b and a is not c
        assert cache.voronoi_2d(1, "Euclidean", 1.0) is a
        assert len(cache) == 3
