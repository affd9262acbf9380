"""
Noise primitives for density evaluation.

This module implements:
- Seeded 2D/3D simplex noise (OpenSimplex, seeded through Mulberry32)
- Cellular (Voronoi) noise over the 3x3(x3) neighbouring unit cells
- Fractal Brownian motion, ridged fbm and cellular fbm accumulation
- A per-context cache so each seed builds its generator exactly once
"""

import math
from typing import Callable, Dict, Tuple

import structlog
from opensimplex import OpenSimplex

from .prng import Mulberry32

logger = structlog.get_logger()

Noise2D = Callable[[float, float], float]
Noise3D = Callable[[float, float, float], float]

# Spatial hash primes for per-cell feature points
HASH_PRIME_A = 73856093
HASH_PRIME_B = 19349663
HASH_PRIME_C = 83492791
HASH_PRIME_D = 2654435761

CELL_EUCLIDEAN = "Euclidean"
CELL_DISTANCE2_DIV = "Distance2Div"
CELL_DISTANCE2_SUB = "Distance2Sub"


def _simplex_for_seed(seed: int) -> OpenSimplex:
    # Permutation seed is the first Mulberry32 draw for this seed
    rng = Mulberry32(seed)
    return OpenSimplex(seed=rng.next_uint32())


def create_noise_2d(seed: int) -> Noise2D:
    """Create a seeded 2D simplex noise function returning values in [-1, 1]."""
    return _simplex_for_seed(seed).noise2


def create_noise_3d(seed: int) -> Noise3D:
    """Create a seeded 3D simplex noise function returning values in [-1, 1]."""
    return _simplex_for_seed(seed).noise3


def _cell_value(d1: float, d2: float, cell_type: str) -> float:
    if cell_type == CELL_DISTANCE2_DIV:
        return (d1 / d2) * 2 - 1 if d2 > 0 else 0.0
    if cell_type == CELL_DISTANCE2_SUB:
        return (d2 - d1) * 2 - 1
    return d1 * 2 - 1


def voronoi_noise_2d(seed: int = 0, cell_type: str = CELL_EUCLIDEAN, jitter: float = 1.0) -> Noise2D:
    """
    Create a 2D cellular noise function.

    One jittered feature point is placed per unit cell, seeded by a spatial
    hash of the cell coordinates salted with ``seed``. The nearest (d1) and
    second-nearest (d2) distances among the 3x3 neighbourhood are combined
    according to ``cell_type``.
    """
    salt = seed * HASH_PRIME_D

    def noise(x: float, y: float) -> float:
        ix = math.floor(x)
        iy = math.floor(y)
        d1 = math.inf
        d2 = math.inf
        for dx in (-1, 0, 1):
            for dy in (-1, 0, 1):
                cx = ix + dx
                cy = iy + dy
                cell_rng = Mulberry32(cx * HASH_PRIME_A + cy * HASH_PRIME_B + salt)
                px = cx + cell_rng.random() * jitter
                py = cy + cell_rng.random() * jitter
                dist = math.sqrt((x - px) ** 2 + (y - py) ** 2)
                if dist < d1:
                    d2 = d1
                    d1 = dist
                elif dist < d2:
                    d2 = dist
        return _cell_value(d1, d2, cell_type)

    return noise


def voronoi_noise_3d(seed: int = 0, cell_type: str = CELL_EUCLIDEAN, jitter: float = 1.0) -> Noise3D:
    """Create a 3D cellular noise function over the 3x3x3 neighbourhood."""
    salt = seed * HASH_PRIME_D

    def noise(x: float, y: float, z: float) -> float:
        ix = math.floor(x)
        iy = math.floor(y)
        iz = math.floor(z)
        d1 = math.inf
        d2 = math.inf
        for dx in (-1, 0, 1):
            for dy in (-1, 0, 1):
                for dz in (-1, 0, 1):
                    cx = ix + dx
                    cy = iy + dy
                    cz = iz + dz
                    cell_rng = Mulberry32(cx * HASH_PRIME_A + cy * HASH_PRIME_B + cz * HASH_PRIME_C + salt)
                    px = cx + cell_rng.random() * jitter
                    py = cy + cell_rng.random() * jitter
                    pz = cz + cell_rng.random() * jitter
                    dist = math.sqrt((x - px) ** 2 + (y - py) ** 2 + (z - pz) ** 2)
                    if dist < d1:
                        d2 = d1
                        d1 = dist
                    elif dist < d2:
                        d2 = dist
        return _cell_value(d1, d2, cell_type)

    return noise


def fbm_2d(noise: Noise2D, x: float, z: float, freq: float, octaves: int,
           lacunarity: float, gain: float) -> float:
    """Sum ``octaves`` layers scaled by ``freq*lacunarity^i`` and ``gain^i``."""
    total = 0.0
    amp = 1.0
    f = freq
    for _ in range(octaves):
        total += noise(x * f, z * f) * amp
        f *= lacunarity
        amp *= gain
    return total


def fbm_3d(noise: Noise3D, x: float, y: float, z: float, freq: float, octaves: int,
           lacunarity: float, gain: float) -> float:
    total = 0.0
    amp = 1.0
    f = freq
    for _ in range(octaves):
        total += noise(x * f, y * f, z * f) * amp
        f *= lacunarity
        amp *= gain
    return total


def ridge_fbm_2d(noise: Noise2D, x: float, z: float, freq: float, octaves: int) -> float:
    """Accumulate ``(1 - |n|)^2`` per octave, halving amplitude; returns ``sum * 2 - 1``."""
    total = 0.0
    amp = 1.0
    f = freq
    for _ in range(octaves):
        n = 1 - abs(noise(x * f, z * f))
        total += n * n * amp
        f *= 2
        amp *= 0.5
    return total * 2 - 1


def ridge_fbm_3d(noise: Noise3D, x: float, y: float, z: float, freq: float, octaves: int) -> float:
    total = 0.0
    amp = 1.0
    f = freq
    for _ in range(octaves):
        n = 1 - abs(noise(x * f, y * f, z * f))
        total += n * n * amp
        f *= 2
        amp *= 0.5
    return total * 2 - 1


# Cellular fbm accumulates exactly like smooth-noise fbm
voronoi_fbm_2d = fbm_2d
voronoi_fbm_3d = fbm_3d


class NoiseCache:
    """
    Lazily built noise generators for one evaluation context.

    Simplex generators are keyed by seed; cellular generators by
    ``(seed, cell_type, jitter)``.
    """

    def __init__(self):
        self._noise_2d: Dict[int, Noise2D] = {}
        self._noise_3d: Dict[int, Noise3D] = {}
        self._voronoi_2d: Dict[Tuple[int, str, float], Noise2D] = {}
        self._voronoi_3d: Dict[Tuple[int, str, float], Noise3D] = {}

    def noise_2d(self, seed: int) -> Noise2D:
        fn = self._noise_2d.get(seed)
        if fn is None:
            logger.debug("Building noise generator", dims=2, seed=seed)
            fn = create_noise_2d(seed)
            self._noise_2d[seed] = fn
        return fn

    def noise_3d(self, seed: int) -> Noise3D:
        fn = self._noise_3d.get(seed)
        if fn is None:
            logger.debug("Building noise generator", dims=3, seed=seed)
            fn = create_noise_3d(seed)
            self._noise_3d[seed] = fn
        return fn

    def voronoi_2d(self, seed: int, cell_type: str = CELL_EUCLIDEAN, jitter: float = 1.0) -> Noise2D:
        key = (seed, cell_type, jitter)
        fn = self._voronoi_2d.get(key)
        if fn is None:
            fn = voronoi_noise_2d(seed, cell_type, jitter)
            self._voronoi_2d[key] = fn
        return fn

    def voronoi_3d(self, seed: int, cell_type: str = CELL_EUCLIDEAN, jitter: float = 1.0) -> Noise3D:
        key = (seed, cell_type, jitter)
        fn = self._voronoi_3d.get(key)
        if fn is None:
            fn = voronoi_noise_3d(seed, cell_type, jitter)
            self._voronoi_3d[key] = fn
        return fn

    def __len__(self) -> int:
        return len(self._noise_2d) + len(self._noise_3d) + len(self._voronoi_2d) + len(self._voronoi_3d)
