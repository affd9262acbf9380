"""Smooth blending primitives and signed distance functions."""

import math
from typing import Tuple

Vec3 = Tuple[float, float, float]


def smooth_min(a: float, b: float, k: float) -> float:
    """Polynomial smooth minimum; hard ``min`` when ``k <= 0``."""
    if k <= 0:
        return min(a, b)
    h = max(0.0, min(1.0, 0.5 + 0.5 * (b - a) / k))
    return b + (a - b) * h - k * h * (1 - h)


def smooth_max(a: float, b: float, k: float) -> float:
    return -smooth_min(-a, -b, k)


def smooth_clamp(value: float, low: float, high: float, k: float) -> float:
    return smooth_max(smooth_min(value, high, k), low, k)


def ellipsoid(x: float, y: float, z: float, radius: Vec3) -> float:
    rx, ry, rz = radius
    return math.sqrt((x / rx) ** 2 + (y / ry) ** 2 + (z / rz) ** 2) - 1


def cuboid(x: float, y: float, z: float, half_size: Vec3) -> float:
    """Axis-aligned box: outside distance plus (non-positive) inside term."""
    dx = abs(x) - half_size[0]
    dy = abs(y) - half_size[1]
    dz = abs(z) - half_size[2]
    outside = math.sqrt(max(dx, 0.0) ** 2 + max(dy, 0.0) ** 2 + max(dz, 0.0) ** 2)
    inside = min(max(dx, dy, dz), 0.0)
    return outside + inside


def cylinder(x: float, y: float, z: float, radius: float, height: float) -> float:
    """Capped cylinder along the Y axis, centred on the origin."""
    d_radial = math.sqrt(x * x + z * z) - radius
    d_vertical = abs(y) - height / 2
    outside = math.sqrt(max(d_radial, 0.0) ** 2 + max(d_vertical, 0.0) ** 2)
    return outside + min(max(d_radial, d_vertical), 0.0)


def plane(x: float, y: float, z: float, normal: Vec3, distance: float) -> float:
    nx, ny, nz = normal
    length = math.sqrt(nx * nx + ny * ny + nz * nz) or 1.0
    return (nx * x + ny * y + nz * z) / length - distance


def shell(x: float, y: float, z: float, inner: float, outer: float) -> float:
    """Hollow sphere: negative inside the wall between ``inner`` and ``outer``."""
    dist = math.sqrt(x * x + y * y + z * z)
    mid = (inner + outer) / 2
    thickness = (outer - inner) / 2
    return abs(dist - mid) - thickness
