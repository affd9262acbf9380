"""
Descriptive analysis of evaluated density grids.

Works on the flat row-major buffers produced by ``grid.evaluate_density_grid``.
"""

import math
from dataclasses import asdict, dataclass
from typing import List, Sequence, Tuple

import numpy as np

# Spacing of the synthetic bin edges reported for a flat (constant) buffer
FLAT_BIN_WIDTH = 0.001


@dataclass
class Statistics:
    min: float
    max: float
    mean: float
    median: float
    std_dev: float
    p25: float
    p75: float

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class Histogram:
    bins: List[int]
    bin_edges: List[float]


@dataclass
class CrossSectionSample:
    distance: float
    x: float
    z: float
    value: float


def compute_statistics(values: Sequence[float]) -> Statistics:
    """Min, max, mean, median, population std dev and quartiles; all zero when empty."""
    arr = np.asarray(values, dtype=np.float64)
    if arr.size == 0:
        return Statistics(0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0)

    p25, median, p75 = np.percentile(arr, [25, 50, 75])
    return Statistics(
        min=float(arr.min()),
        max=float(arr.max()),
        mean=float(arr.mean()),
        median=float(median),
        std_dev=float(arr.std()),
        p25=float(p25),
        p75=float(p75),
    )


def compute_histogram(values: Sequence[float], bin_count: int = 32) -> Histogram:
    """
    Equal-width histogram between the buffer's min and max.

    The max value lands in the last bin. A flat buffer puts every value in
    the first bin.
    """
    arr = np.asarray(values, dtype=np.float64)
    if arr.size == 0 or bin_count <= 0:
        return Histogram([], [])

    lo = float(arr.min())
    hi = float(arr.max())
    if lo == hi:
        bins = [0] * bin_count
        bins[0] = int(arr.size)
        edges = [lo + i * FLAT_BIN_WIDTH for i in range(bin_count + 1)]
        return Histogram(bins, edges)

    width = (hi - lo) / bin_count
    indices = np.floor((arr - lo) / width).astype(np.int64)
    np.clip(indices, 0, bin_count - 1, out=indices)
    counts = np.bincount(indices, minlength=bin_count)
    edges = [lo + i * width for i in range(bin_count + 1)]
    return Histogram([int(c) for c in counts], edges)


def bilinear_sample(values: Sequence[float], resolution: int, grid_x: float, grid_z: float) -> float:
    """
    Bilinear interpolation on a flat ``resolution x resolution`` grid.

    Args:
        values: Row-major buffer (``row * resolution + col``)
        resolution: Cells per side
        grid_x: Column coordinate in cell units, 0..resolution-1
        grid_z: Row coordinate in cell units, 0..resolution-1

    Returns:
        Interpolated value; coordinates outside the grid use the edge cells
    """
    last = resolution - 1
    x0 = math.floor(grid_x)
    z0 = math.floor(grid_z)
    fx = grid_x - x0
    fz = grid_z - z0

    cx0 = max(0, min(last, x0))
    cz0 = max(0, min(last, z0))
    x1 = max(0, min(last, x0 + 1))
    z1 = max(0, min(last, z0 + 1))

    v00 = float(values[cz0 * resolution + cx0])
    v10 = float(values[cz0 * resolution + x1])
    v01 = float(values[z1 * resolution + cx0])
    v11 = float(values[z1 * resolution + x1])

    return (
        v00 * (1 - fx) * (1 - fz)
        + v10 * fx * (1 - fz)
        + v01 * (1 - fx) * fz
        + v11 * fx * fz
    )


def sample_cross_section(
    values: Sequence[float],
    resolution: int,
    range_min: float,
    range_max: float,
    start: Tuple[float, float],
    end: Tuple[float, float],
) -> List[CrossSectionSample]:
    """
    Sample a grid along a world-space XZ segment at twice the grid density.

    ``start`` and ``end`` are ``(x, z)`` pairs. A zero-length segment (or a
    zero-width range) yields no samples.
    """
    dx = end[0] - start[0]
    dz = end[1] - start[1]
    world_length = math.sqrt(dx * dx + dz * dz)
    span = range_max - range_min
    if world_length < 1e-6 or span == 0:
        return []

    sample_count = max(2, math.ceil(resolution * 2 * world_length / span))
    samples = []
    for i in range(sample_count):
        t = i / (sample_count - 1)
        wx = start[0] + t * dx
        wz = start[1] + t * dz
        grid_x = (wx - range_min) / span * (resolution - 1)
        grid_z = (wz - range_min) / span * (resolution - 1)
        samples.append(CrossSectionSample(
            distance=t * world_length,
            x=wx,
            z=wz,
            value=bilinear_sample(values, resolution, grid_x, grid_z),
        ))
    return samples
