"""
Node evaluator: per-type numeric semantics of density nodes.

Each ``NodeType`` member has exactly one handler registered in ``HANDLERS``;
``evaluate_node`` dispatches on the parsed type and falls back to the
lenient unknown-type rule for strings outside the enum (follow ``Input``,
then ``Inputs[0]``, else 0).

Handlers share the signature ``handler(ctx, node, x, y, z) -> float`` and
recurse through ``ctx.input`` / ``ctx.evaluate`` so the context's cycle
guard and memo cache apply to every edge.
"""

import math
from typing import TYPE_CHECKING, Callable, Dict

from .fields import as_float, as_int, as_nonzero, as_range, as_str, as_vec3, field
from .graph_model import Node, indexed_handle
from .node_types import NodeType, UNSUPPORTED_TYPES
from .noise import (
    CELL_DISTANCE2_DIV,
    CELL_EUCLIDEAN,
    fbm_2d,
    fbm_3d,
    ridge_fbm_2d,
    ridge_fbm_3d,
    voronoi_fbm_2d,
    voronoi_fbm_3d,
)
from .prng import hash_seed
from . import shapes

if TYPE_CHECKING:
    from .context import EvaluationContext

Handler = Callable[["EvaluationContext", Node, float, float, float], float]

HANDLERS: Dict[NodeType, Handler] = {}

INPUT = "Input"
INPUTS_0 = indexed_handle("Inputs", 0)
INPUTS_1 = indexed_handle("Inputs", 1)


def handles(*node_types: NodeType) -> Callable[[Handler], Handler]:
    """Register a handler for one or more node types."""

    def register(fn: Handler) -> Handler:
        for node_type in node_types:
            if node_type in HANDLERS:
                raise ValueError(f"Duplicate handler for {node_type.value}")
            HANDLERS[node_type] = fn
        return fn

    return register


def evaluate_node(ctx: "EvaluationContext", node: Node, x: float, y: float, z: float) -> float:
    node_type = NodeType.parse(node.type)
    if node_type is None:
        return _unknown_type(ctx, node, x, y, z)
    return HANDLERS[node_type](ctx, node, x, y, z)


def _unknown_type(ctx, node, x, y, z):
    inputs = ctx.inputs_of(node.id)
    source = inputs.get(INPUT) or inputs.get(INPUTS_0)
    return ctx.evaluate(source, x, y, z) if source else 0.0


def _seed(node: Node) -> int:
    return hash_seed(node.fields.get("Seed"))


def _octaves(node: Node, default: int = 1) -> int:
    return max(1, as_int(node.fields.get("Octaves"), default))


def _remap(value: float, src_min: float, src_max: float, tgt_min: float, tgt_max: float) -> float:
    span = src_max - src_min
    t = 0.0 if span == 0 else (value - src_min) / span
    return tgt_min + t * (tgt_max - tgt_min)


def _ramp(y: float, from_y: float, to_y: float) -> float:
    span = to_y - from_y
    return 0.0 if span == 0 else (y - from_y) / span


# Noise

@handles(NodeType.SIMPLEX_NOISE_2D)
def _simplex_2d(ctx, node, x, y, z):
    f = node.fields
    noise = ctx.noise.noise_2d(_seed(node))
    return fbm_2d(noise, x, z, as_float(f.get("Frequency"), 0.01), _octaves(node),
                  as_float(f.get("Lacunarity"), 2.0), as_float(f.get("Gain"), 0.5)) * as_float(f.get("Amplitude"), 1.0)


@handles(NodeType.SIMPLEX_NOISE_3D)
def _simplex_3d(ctx, node, x, y, z):
    f = node.fields
    noise = ctx.noise.noise_3d(_seed(node))
    return fbm_3d(noise, x, y, z, as_float(f.get("Frequency"), 0.01), _octaves(node),
                  as_float(f.get("Lacunarity"), 2.0), as_float(f.get("Gain"), 0.5)) * as_float(f.get("Amplitude"), 1.0)


@handles(NodeType.SIMPLEX_RIDGE_NOISE_2D)
def _ridge_2d(ctx, node, x, y, z):
    f = node.fields
    noise = ctx.noise.noise_2d(_seed(node))
    return ridge_fbm_2d(noise, x, z, as_float(f.get("Frequency"), 0.01), _octaves(node)) * as_float(f.get("Amplitude"), 1.0)


@handles(NodeType.SIMPLEX_RIDGE_NOISE_3D)
def _ridge_3d(ctx, node, x, y, z):
    f = node.fields
    noise = ctx.noise.noise_3d(_seed(node))
    return ridge_fbm_3d(noise, x, y, z, as_float(f.get("Frequency"), 0.01), _octaves(node)) * as_float(f.get("Amplitude"), 1.0)


@handles(NodeType.VORONOI_NOISE_2D)
def _voronoi_2d(ctx, node, x, y, z):
    f = node.fields
    freq = as_float(f.get("Frequency"), 0.01)
    octaves = _octaves(node)
    noise = ctx.noise.voronoi_2d(_seed(node), as_str(f.get("CellType"), CELL_EUCLIDEAN), as_float(f.get("Jitter"), 1.0))
    if octaves > 1:
        return voronoi_fbm_2d(noise, x, z, freq, octaves, as_float(f.get("Lacunarity"), 2.0), as_float(f.get("Gain"), 0.5))
    return noise(x * freq, z * freq)


@handles(NodeType.VORONOI_NOISE_3D)
def _voronoi_3d(ctx, node, x, y, z):
    f = node.fields
    freq = as_float(f.get("Frequency"), 0.01)
    octaves = _octaves(node)
    noise = ctx.noise.voronoi_3d(_seed(node), as_str(f.get("CellType"), CELL_EUCLIDEAN), as_float(f.get("Jitter"), 1.0))
    if octaves > 1:
        return voronoi_fbm_3d(noise, x, y, z, freq, octaves, as_float(f.get("Lacunarity"), 2.0), as_float(f.get("Gain"), 0.5))
    return noise(x * freq, y * freq, z * freq)


@handles(NodeType.FRACTAL_NOISE_2D)
def _fractal_2d(ctx, node, x, y, z):
    f = node.fields
    noise = ctx.noise.noise_2d(_seed(node))
    return fbm_2d(noise, x, z, as_float(f.get("Frequency"), 0.01), _octaves(node, 4),
                  as_float(f.get("Lacunarity"), 2.0), as_float(f.get("Gain"), 0.5))


@handles(NodeType.FRACTAL_NOISE_3D)
def _fractal_3d(ctx, node, x, y, z):
    f = node.fields
    noise = ctx.noise.noise_3d(_seed(node))
    return fbm_3d(noise, x, y, z, as_float(f.get("Frequency"), 0.01), _octaves(node, 4),
                  as_float(f.get("Lacunarity"), 2.0), as_float(f.get("Gain"), 0.5))


@handles(NodeType.POSITIONS_CELL_NOISE)
def _positions_cell_noise(ctx, node, x, y, z):
    f = node.fields
    max_distance = as_float(f.get("MaxDistance"), 0.0)
    freq = 1 / max_distance if max_distance > 0 else as_float(f.get("Frequency"), 0.01)
    noise = ctx.noise.voronoi_2d(_seed(node), as_str(f.get("DistanceFunction"), CELL_EUCLIDEAN), 1.0)
    raw = noise(x * freq, z * freq)
    if as_str(f.get("ReturnType"), "Distance") == CELL_DISTANCE2_DIV:
        raw = abs(raw)
    return raw


@handles(NodeType.POSITIONS_3D)
def _positions_3d(ctx, node, x, y, z):
    freq = as_float(node.fields.get("Frequency"), 0.01)
    noise = ctx.noise.voronoi_3d(_seed(node), CELL_EUCLIDEAN, 1.0)
    return noise(x * freq, y * freq, z * freq)


# Domain warp

@handles(NodeType.DOMAIN_WARP_2D)
def _domain_warp_2d(ctx, node, x, y, z):
    f = node.fields
    amp = as_float(f.get("Amplitude"), 1.0)
    freq = as_float(f.get("Frequency"), 0.01)
    seed = _seed(node)
    warp_x = ctx.noise.noise_2d(seed)(x * freq, z * freq) * amp
    warp_z = ctx.noise.noise_2d(seed + 1)(x * freq, z * freq) * amp
    return ctx.input(node, INPUT, x + warp_x, y, z + warp_z)


@handles(NodeType.DOMAIN_WARP_3D)
def _domain_warp_3d(ctx, node, x, y, z):
    f = node.fields
    amp = as_float(f.get("Amplitude"), 1.0)
    freq = as_float(f.get("Frequency"), 0.01)
    seed = _seed(node)
    sx, sy, sz = x * freq, y * freq, z * freq
    warp_x = ctx.noise.noise_3d(seed)(sx, sy, sz) * amp
    warp_y = ctx.noise.noise_3d(seed + 1)(sx, sy, sz) * amp
    warp_z = ctx.noise.noise_3d(seed + 2)(sx, sy, sz) * amp
    return ctx.input(node, INPUT, x + warp_x, y + warp_y, z + warp_z)


@handles(NodeType.GRADIENT_WARP)
def _gradient_warp(ctx, node, x, y, z):
    # Forward difference of the warp source in X and Z
    warp_scale = as_float(node.fields.get("WarpScale"), 1.0)
    eps = ctx.gradient_epsilon
    base = ctx.input(node, "WarpSource", x, y, z)
    dfdx = (ctx.input(node, "WarpSource", x + eps, y, z) - base) / eps
    dfdz = (ctx.input(node, "WarpSource", x, y, z + eps) - base) / eps
    return ctx.input(node, INPUT, x + dfdx * warp_scale, y, z + dfdz * warp_scale)


# Constants

@handles(NodeType.CONSTANT)
def _constant(ctx, node, x, y, z):
    return as_float(node.fields.get("Value"), 0.0)


@handles(NodeType.ZERO)
def _zero(ctx, node, x, y, z):
    return 0.0


@handles(NodeType.ONE)
def _one(ctx, node, x, y, z):
    return 1.0


@handles(NodeType.SWITCH_STATE)
def _switch_state(ctx, node, x, y, z):
    return as_float(node.fields.get("State"), 0.0)


# Arithmetic

@handles(NodeType.NEGATE)
def _negate(ctx, node, x, y, z):
    return -ctx.input(node, INPUT, x, y, z)


@handles(NodeType.ABS)
def _abs(ctx, node, x, y, z):
    return abs(ctx.input(node, INPUT, x, y, z))


@handles(NodeType.SQUARE_ROOT)
def _square_root(ctx, node, x, y, z):
    return math.sqrt(abs(ctx.input(node, INPUT, x, y, z)))


@handles(NodeType.CUBE_ROOT)
def _cube_root(ctx, node, x, y, z):
    v = ctx.input(node, INPUT, x, y, z)
    return math.copysign(abs(v) ** (1.0 / 3.0), v)


@handles(NodeType.SQUARE)
def _square(ctx, node, x, y, z):
    v = ctx.input(node, INPUT, x, y, z)
    return v * v


@handles(NodeType.CUBE)
def _cube(ctx, node, x, y, z):
    v = ctx.input(node, INPUT, x, y, z)
    return v * v * v


@handles(NodeType.INVERSE)
def _inverse(ctx, node, x, y, z):
    v = ctx.input(node, INPUT, x, y, z)
    return 0.0 if v == 0 else 1 / v


@handles(NodeType.MODULO)
def _modulo(ctx, node, x, y, z):
    v = ctx.input(node, INPUT, x, y, z)
    divisor = as_float(node.fields.get("Divisor"), 1.0)
    if divisor == 0:
        return 0.0
    # Remainder keeps the sign of the dividend
    return math.fmod(v, divisor)


@handles(NodeType.FLOOR)
def _floor(ctx, node, x, y, z):
    return float(math.floor(ctx.input(node, INPUT, x, y, z)))


@handles(NodeType.CEILING)
def _ceiling(ctx, node, x, y, z):
    return float(math.ceil(ctx.input(node, INPUT, x, y, z)))


@handles(NodeType.AMPLITUDE_CONSTANT)
def _amplitude_constant(ctx, node, x, y, z):
    return ctx.input(node, INPUT, x, y, z) * as_float(node.fields.get("Value"), 1.0)


@handles(NodeType.AMPLITUDE)
def _amplitude(ctx, node, x, y, z):
    return ctx.input(node, INPUT, x, y, z) * ctx.input(node, "Amplitude", x, y, z)


@handles(NodeType.POW)
def _pow(ctx, node, x, y, z):
    v = ctx.input(node, INPUT, x, y, z)
    exponent = as_float(node.fields.get("Exponent"), 2.0)
    if v == 0:
        return 0.0
    return math.copysign(abs(v) ** exponent, v)


@handles(NodeType.SUM)
def _sum(ctx, node, x, y, z):
    return ctx.input(node, "InputA", x, y, z) + ctx.input(node, "InputB", x, y, z)


@handles(NodeType.SUM_SELF)
def _sum_self(ctx, node, x, y, z):
    count = max(1, as_int(node.fields.get("Count"), 2))
    return ctx.input(node, INPUT, x, y, z) * count


@handles(NodeType.WEIGHTED_SUM)
def _weighted_sum(ctx, node, x, y, z):
    weights = node.fields.get("Weights")
    if not isinstance(weights, (list, tuple)):
        weights = []
    w0 = as_float(weights[0], 1.0) if len(weights) > 0 else 1.0
    w1 = as_float(weights[1], 1.0) if len(weights) > 1 else 1.0
    return ctx.input(node, INPUTS_0, x, y, z) * w0 + ctx.input(node, INPUTS_1, x, y, z) * w1


@handles(NodeType.PRODUCT)
def _product(ctx, node, x, y, z):
    return ctx.input(node, INPUTS_0, x, y, z) * ctx.input(node, INPUTS_1, x, y, z)


@handles(NodeType.OFFSET)
def _offset(ctx, node, x, y, z):
    return ctx.input(node, INPUT, x, y, z) + ctx.input(node, "Offset", x, y, z)


# Range / remap

@handles(NodeType.CLAMP)
def _clamp(ctx, node, x, y, z):
    v = ctx.input(node, INPUT, x, y, z)
    return max(as_float(node.fields.get("Min"), 0.0), min(as_float(node.fields.get("Max"), 1.0), v))


@handles(NodeType.CLAMP_TO_INDEX)
def _clamp_to_index(ctx, node, x, y, z):
    v = math.floor(ctx.input(node, INPUT, x, y, z))
    return float(max(as_float(node.fields.get("Min"), 0.0), min(as_float(node.fields.get("Max"), 255.0), v)))


@handles(NodeType.NORMALIZER)
def _normalizer(ctx, node, x, y, z):
    v = ctx.input(node, INPUT, x, y, z)
    src_min, src_max = as_range(node.fields.get("SourceRange"), -1.0, 1.0)
    tgt_min, tgt_max = as_range(node.fields.get("TargetRange"), 0.0, 1.0)
    return _remap(v, src_min, src_max, tgt_min, tgt_max)


@handles(NodeType.DOUBLE_NORMALIZER)
def _double_normalizer(ctx, node, x, y, z):
    # Negative inputs use range A, the rest range B
    v = ctx.input(node, INPUT, x, y, z)
    f = node.fields
    if v < 0:
        src_min, src_max = as_range(f.get("SourceRangeA"), -1.0, 0.0)
        tgt_min, tgt_max = as_range(f.get("TargetRangeA"), 0.0, 0.5)
    else:
        src_min, src_max = as_range(f.get("SourceRangeB"), 0.0, 1.0)
        tgt_min, tgt_max = as_range(f.get("TargetRangeB"), 0.5, 1.0)
    return _remap(v, src_min, src_max, tgt_min, tgt_max)


@handles(NodeType.LINEAR_TRANSFORM)
def _linear_transform(ctx, node, x, y, z):
    v = ctx.input(node, INPUT, x, y, z)
    return v * as_float(node.fields.get("Scale"), 1.0) + as_float(node.fields.get("Offset"), 0.0)


def _choose(ctx, node, x, y, z, default_threshold):
    # Only the selected branch is evaluated
    condition = ctx.input(node, "Condition", x, y, z)
    threshold = as_float(node.fields.get("Threshold"), default_threshold)
    branch = "TrueInput" if condition >= threshold else "FalseInput"
    return ctx.input(node, branch, x, y, z)


@handles(NodeType.RANGE_CHOICE)
def _range_choice(ctx, node, x, y, z):
    return _choose(ctx, node, x, y, z, 0.5)


@handles(NodeType.CONDITIONAL)
def _conditional(ctx, node, x, y, z):
    return _choose(ctx, node, x, y, z, 0.0)


@handles(NodeType.INTERPOLATE)
def _interpolate(ctx, node, x, y, z):
    a = ctx.input(node, "InputA", x, y, z)
    b = ctx.input(node, "InputB", x, y, z)
    return a + (b - a) * ctx.input(node, "Factor", x, y, z)


# Coordinates and distances

@handles(NodeType.COORDINATE_X)
def _coordinate_x(ctx, node, x, y, z):
    return x


@handles(NodeType.COORDINATE_Y)
def _coordinate_y(ctx, node, x, y, z):
    return y


@handles(NodeType.COORDINATE_Z)
def _coordinate_z(ctx, node, x, y, z):
    return z


@handles(NodeType.DISTANCE_FROM_ORIGIN)
def _distance_from_origin(ctx, node, x, y, z):
    return math.sqrt(x * x + y * y + z * z)


@handles(NodeType.DISTANCE_FROM_AXIS)
def _distance_from_axis(ctx, node, x, y, z):
    axis = as_str(node.fields.get("Axis"), "Y")
    if axis == "X":
        return math.sqrt(y * y + z * z)
    if axis == "Z":
        return math.sqrt(x * x + y * y)
    return math.sqrt(x * x + z * z)


@handles(NodeType.DISTANCE_FROM_POINT)
def _distance_from_point(ctx, node, x, y, z):
    px, py, pz = as_vec3(node.fields.get("Point"))
    return math.sqrt((x - px) ** 2 + (y - py) ** 2 + (z - pz) ** 2)


@handles(NodeType.ANGLE_FROM_ORIGIN)
def _angle_from_origin(ctx, node, x, y, z):
    return math.atan2(z, x)


@handles(NodeType.ANGLE_FROM_POINT)
def _angle_from_point(ctx, node, x, y, z):
    px, _, pz = as_vec3(node.fields.get("Point"))
    return math.atan2(z - pz, x - px)


@handles(NodeType.DISTANCE)
def _distance(ctx, node, x, y, z):
    return ctx.apply_curve(node, "Curve", math.sqrt(x * x + y * y + z * z))


@handles(NodeType.GRADIENT, NodeType.Y_GRADIENT, NodeType.GRADIENT_DENSITY)
def _gradient(ctx, node, x, y, z):
    f = node.fields
    return _ramp(y, as_float(f.get("FromY"), 0.0), as_float(f.get("ToY"), ctx.world_height))


@handles(NodeType.BASE_HEIGHT)
def _base_height(ctx, node, x, y, z):
    name = as_str(node.fields.get("BaseHeightName"), "Base")
    base_y = ctx.content_fields.get(name, ctx.base_height)
    if node.fields.get("Distance") is True:
        return y - base_y
    return base_y


# Coordinate substitution

@handles(NodeType.X_OVERRIDE)
def _x_override(ctx, node, x, y, z):
    return ctx.input(node, INPUT, as_float(node.fields.get("OverrideX"), 0.0), y, z)


@handles(NodeType.Y_OVERRIDE)
def _y_override(ctx, node, x, y, z):
    return ctx.input(node, INPUT, x, as_float(field(node.fields, "OverrideY", "Y"), 0.0), z)


@handles(NodeType.Z_OVERRIDE)
def _z_override(ctx, node, x, y, z):
    return ctx.input(node, INPUT, x, y, as_float(node.fields.get("OverrideZ"), 0.0))


@handles(NodeType.Y_SAMPLED)
def _y_sampled(ctx, node, x, y, z):
    sampled_y = ctx.input(node, "YProvider", x, y, z)
    return ctx.input(node, INPUT, x, sampled_y, z)


@handles(NodeType.ANCHOR)
def _anchor(ctx, node, x, y, z):
    return ctx.input(node, INPUT, 0.0, 0.0, 0.0)


@handles(NodeType.TRANSLATED_POSITION)
def _translated_position(ctx, node, x, y, z):
    dx, dy, dz = as_vec3(node.fields.get("Translation"))
    return ctx.input(node, INPUT, x - dx, y - dy, z - dz)


@handles(NodeType.SCALED_POSITION)
def _scaled_position(ctx, node, x, y, z):
    scale = node.fields.get("Scale")
    if not isinstance(scale, dict):
        scale = {}
    sx = as_nonzero(scale.get("x", scale.get("X")))
    sy = as_nonzero(scale.get("y", scale.get("Y")))
    sz = as_nonzero(scale.get("z", scale.get("Z")))
    return ctx.input(node, INPUT, x / sx, y / sy, z / sz)


@handles(NodeType.ROTATED_POSITION)
def _rotated_position(ctx, node, x, y, z):
    # Rotation about the vertical axis, degrees
    rad = math.radians(as_float(node.fields.get("AngleDegrees"), 0.0))
    cos = math.cos(rad)
    sin = math.sin(rad)
    return ctx.input(node, INPUT, x * cos + z * sin, y, -x * sin + z * cos)


@handles(NodeType.MIRRORED_POSITION)
def _mirrored_position(ctx, node, x, y, z):
    axis = as_str(node.fields.get("Axis"), "X")
    return ctx.input(
        node, INPUT,
        abs(x) if axis == "X" else x,
        abs(y) if axis == "Y" else y,
        abs(z) if axis == "Z" else z,
    )


@handles(NodeType.QUANTIZED_POSITION)
def _quantized_position(ctx, node, x, y, z):
    step = as_nonzero(node.fields.get("StepSize"))
    return ctx.input(
        node, INPUT,
        math.floor(x / step) * step,
        math.floor(y / step) * step,
        math.floor(z / step) * step,
    )


@handles(NodeType.POSITIONS_PINCH)
def _positions_pinch(ctx, node, x, y, z):
    # Radial power-law warp in the XZ plane; strength 1 is the identity
    strength = as_float(node.fields.get("Strength"), 1.0)
    dist = math.sqrt(x * x + z * z)
    factor = dist ** strength / dist if dist > 0 else 1.0
    return ctx.input(node, INPUT, x * factor, y, z * factor)


@handles(NodeType.POSITIONS_TWIST)
def _positions_twist(ctx, node, x, y, z):
    # Angle (degrees per unit height) about the vertical axis
    rad = math.radians(as_float(node.fields.get("Angle"), 0.0)) * y
    cos = math.cos(rad)
    sin = math.sin(rad)
    return ctx.input(node, INPUT, x * cos - z * sin, y, x * sin + z * cos)


# Smoothing

def _smoothness(node: Node) -> float:
    return as_float(node.fields.get("Smoothness"), 0.1)


@handles(NodeType.SMOOTH_CLAMP)
def _smooth_clamp(ctx, node, x, y, z):
    v = ctx.input(node, INPUT, x, y, z)
    return shapes.smooth_clamp(v, as_float(node.fields.get("Min"), 0.0), as_float(node.fields.get("Max"), 1.0),
                               _smoothness(node))


@handles(NodeType.SMOOTH_FLOOR)
def _smooth_floor(ctx, node, x, y, z):
    v = ctx.input(node, INPUT, x, y, z)
    return shapes.smooth_max(v, as_float(node.fields.get("Threshold"), 0.0), _smoothness(node))


@handles(NodeType.SMOOTH_CEILING)
def _smooth_ceiling(ctx, node, x, y, z):
    v = ctx.input(node, INPUT, x, y, z)
    return shapes.smooth_min(v, as_float(node.fields.get("Threshold"), 1.0), _smoothness(node))


@handles(NodeType.SMOOTH_MIN)
def _smooth_min(ctx, node, x, y, z):
    return shapes.smooth_min(ctx.input(node, INPUTS_0, x, y, z), ctx.input(node, INPUTS_1, x, y, z), _smoothness(node))


@handles(NodeType.SMOOTH_MAX)
def _smooth_max(ctx, node, x, y, z):
    return shapes.smooth_max(ctx.input(node, INPUTS_0, x, y, z), ctx.input(node, INPUTS_1, x, y, z), _smoothness(node))


# Shape SDFs

def _nonzero_vec3(value) -> tuple:
    if not isinstance(value, dict):
        value = {}
    return tuple(as_nonzero(value.get(axis, value.get(axis.upper()))) for axis in ("x", "y", "z"))


@handles(NodeType.ELLIPSOID)
def _ellipsoid(ctx, node, x, y, z):
    return shapes.ellipsoid(x, y, z, _nonzero_vec3(node.fields.get("Radius")))


@handles(NodeType.CUBOID)
def _cuboid(ctx, node, x, y, z):
    return shapes.cuboid(x, y, z, _nonzero_vec3(node.fields.get("Size")))


@handles(NodeType.CYLINDER)
def _cylinder(ctx, node, x, y, z):
    return shapes.cylinder(x, y, z, as_nonzero(node.fields.get("Radius")), as_float(node.fields.get("Height"), 2.0))


@handles(NodeType.PLANE)
def _plane(ctx, node, x, y, z):
    normal = as_vec3(node.fields.get("Normal"), (0.0, 1.0, 0.0))
    return shapes.plane(x, y, z, normal, as_float(node.fields.get("Distance"), 0.0))


@handles(NodeType.SHELL)
def _shell(ctx, node, x, y, z):
    return shapes.shell(x, y, z, as_float(node.fields.get("InnerRadius"), 0.5),
                        as_float(node.fields.get("OuterRadius"), 1.0))


# Combinators

@handles(NodeType.MIN_FUNCTION)
def _min_function(ctx, node, x, y, z):
    return min(ctx.input(node, INPUTS_0, x, y, z), ctx.input(node, INPUTS_1, x, y, z))


@handles(NodeType.MAX_FUNCTION)
def _max_function(ctx, node, x, y, z):
    return max(ctx.input(node, INPUTS_0, x, y, z), ctx.input(node, INPUTS_1, x, y, z))


@handles(NodeType.AVERAGE_FUNCTION)
def _average_function(ctx, node, x, y, z):
    return (ctx.input(node, INPUTS_0, x, y, z) + ctx.input(node, INPUTS_1, x, y, z)) / 2


@handles(NodeType.BLEND)
def _blend(ctx, node, x, y, z):
    a = ctx.input(node, "InputA", x, y, z)
    b = ctx.input(node, "InputB", x, y, z)
    factor = ctx.input(node, "Factor", x, y, z) if ctx.has_input(node, "Factor") else 0.5
    return a + (b - a) * factor


@handles(NodeType.SWITCH)
def _switch(ctx, node, x, y, z):
    selector = max(0, math.floor(as_float(node.fields.get("Selector"), 0.0)))
    return ctx.input(node, indexed_handle("Inputs", selector), x, y, z)


@handles(NodeType.BLEND_CURVE)
def _blend_curve(ctx, node, x, y, z):
    a = ctx.input(node, "InputA", x, y, z)
    b = ctx.input(node, "InputB", x, y, z)
    factor = ctx.apply_curve(node, "Curve", ctx.input(node, "Factor", x, y, z))
    return a + (b - a) * factor


# Curves

@handles(NodeType.CURVE_FUNCTION)
def _curve_function(ctx, node, x, y, z):
    return ctx.apply_curve(node, "Curve", ctx.input(node, INPUT, x, y, z))


@handles(NodeType.SPLINE_FUNCTION)
def _spline_function(ctx, node, x, y, z):
    return ctx.apply_spline(node, ctx.input(node, INPUT, x, y, z))


# Passthrough / caching

@handles(NodeType.CACHE_ONCE)
def _cache_once(ctx, node, x, y, z):
    return ctx.memoized(node, x, y, z, lambda: ctx.input(node, INPUT, x, y, z))


@handles(
    NodeType.FLAT_CACHE,
    NodeType.WRAP,
    NodeType.PASSTHROUGH,
    NodeType.DEBUG,
    NodeType.EXPORTED,
    NodeType.IMPORTED_VALUE,
    NodeType.VECTOR_WARP,  # no vector-field evaluator; approximated as passthrough
)
def _passthrough(ctx, node, x, y, z):
    return ctx.input(node, INPUT, x, y, z)


# Context-dependent

@handles(*UNSUPPORTED_TYPES)
def _unsupported(ctx, node, x, y, z):
    return 0.0


def missing_handlers() -> set:
    """Node types without a registered handler; empty when the table is exhaustive."""
    return set(NodeType) - set(HANDLERS)


if missing_handlers():
    raise ImportError(f"No density handler for: {sorted(t.value for t in missing_handlers())}")
