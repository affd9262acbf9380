"""
Closed set of density node types.

Every type string the editor can emit for a density node maps to one
``NodeType`` member. Strings outside the set are "unknown" and are handled
by the evaluator's lenient default arm.
"""

from enum import Enum
from typing import FrozenSet, Optional


class NodeType(str, Enum):
    """Density node type tags."""

    # Noise
    SIMPLEX_NOISE_2D = "SimplexNoise2D"
    SIMPLEX_NOISE_3D = "SimplexNoise3D"
    SIMPLEX_RIDGE_NOISE_2D = "SimplexRidgeNoise2D"
    SIMPLEX_RIDGE_NOISE_3D = "SimplexRidgeNoise3D"
    VORONOI_NOISE_2D = "VoronoiNoise2D"
    VORONOI_NOISE_3D = "VoronoiNoise3D"
    FRACTAL_NOISE_2D = "FractalNoise2D"
    FRACTAL_NOISE_3D = "FractalNoise3D"
    POSITIONS_CELL_NOISE = "PositionsCellNoise"
    POSITIONS_3D = "Positions3D"

    # Domain warp
    DOMAIN_WARP_2D = "DomainWarp2D"
    DOMAIN_WARP_3D = "DomainWarp3D"
    GRADIENT_WARP = "GradientWarp"
    VECTOR_WARP = "VectorWarp"

    # Constants
    CONSTANT = "Constant"
    ZERO = "Zero"
    ONE = "One"
    SWITCH_STATE = "SwitchState"

    # Arithmetic
    NEGATE = "Negate"
    ABS = "Abs"
    SQUARE_ROOT = "SquareRoot"
    CUBE_ROOT = "CubeRoot"
    SQUARE = "Square"
    CUBE = "Cube"
    INVERSE = "Inverse"
    MODULO = "Modulo"
    FLOOR = "Floor"
    CEILING = "Ceiling"
    AMPLITUDE_CONSTANT = "AmplitudeConstant"
    AMPLITUDE = "Amplitude"
    POW = "Pow"
    SUM = "Sum"
    SUM_SELF = "SumSelf"
    WEIGHTED_SUM = "WeightedSum"
    PRODUCT = "Product"
    OFFSET = "Offset"

    # Range / remap
    CLAMP = "Clamp"
    CLAMP_TO_INDEX = "ClampToIndex"
    NORMALIZER = "Normalizer"
    DOUBLE_NORMALIZER = "DoubleNormalizer"
    LINEAR_TRANSFORM = "LinearTransform"
    RANGE_CHOICE = "RangeChoice"
    CONDITIONAL = "Conditional"
    INTERPOLATE = "Interpolate"

    # Coordinates and distances
    COORDINATE_X = "CoordinateX"
    COORDINATE_Y = "CoordinateY"
    COORDINATE_Z = "CoordinateZ"
    DISTANCE_FROM_ORIGIN = "DistanceFromOrigin"
    DISTANCE_FROM_AXIS = "DistanceFromAxis"
    DISTANCE_FROM_POINT = "DistanceFromPoint"
    ANGLE_FROM_ORIGIN = "AngleFromOrigin"
    ANGLE_FROM_POINT = "AngleFromPoint"
    DISTANCE = "Distance"
    GRADIENT = "Gradient"
    Y_GRADIENT = "YGradient"
    GRADIENT_DENSITY = "GradientDensity"
    BASE_HEIGHT = "BaseHeight"

    # Coordinate substitution
    X_OVERRIDE = "XOverride"
    Y_OVERRIDE = "YOverride"
    Z_OVERRIDE = "ZOverride"
    Y_SAMPLED = "YSampled"
    ANCHOR = "Anchor"
    TRANSLATED_POSITION = "TranslatedPosition"
    SCALED_POSITION = "ScaledPosition"
    ROTATED_POSITION = "RotatedPosition"
    MIRRORED_POSITION = "MirroredPosition"
    QUANTIZED_POSITION = "QuantizedPosition"
    POSITIONS_PINCH = "PositionsPinch"
    POSITIONS_TWIST = "PositionsTwist"

    # Smoothing
    SMOOTH_CLAMP = "SmoothClamp"
    SMOOTH_FLOOR = "SmoothFloor"
    SMOOTH_CEILING = "SmoothCeiling"
    SMOOTH_MIN = "SmoothMin"
    SMOOTH_MAX = "SmoothMax"

    # Shape SDFs
    ELLIPSOID = "Ellipsoid"
    CUBOID = "Cuboid"
    CYLINDER = "Cylinder"
    PLANE = "Plane"
    SHELL = "Shell"

    # Combinators
    MIN_FUNCTION = "MinFunction"
    MAX_FUNCTION = "MaxFunction"
    AVERAGE_FUNCTION = "AverageFunction"
    BLEND = "Blend"
    SWITCH = "Switch"
    BLEND_CURVE = "BlendCurve"

    # Curves
    CURVE_FUNCTION = "CurveFunction"
    SPLINE_FUNCTION = "SplineFunction"

    # Passthrough / caching
    CACHE_ONCE = "CacheOnce"
    FLAT_CACHE = "FlatCache"
    WRAP = "Wrap"
    PASSTHROUGH = "Passthrough"
    DEBUG = "Debug"
    EXPORTED = "Exported"
    IMPORTED_VALUE = "ImportedValue"

    # Context-dependent (need host-engine data)
    HEIGHT_ABOVE_SURFACE = "HeightAboveSurface"
    SURFACE_DENSITY = "SurfaceDensity"
    TERRAIN_BOOLEAN = "TerrainBoolean"
    TERRAIN_MASK = "TerrainMask"
    BEARD_DENSITY = "BeardDensity"
    COLUMN_DENSITY = "ColumnDensity"
    CAVE_DENSITY = "CaveDensity"
    TERRAIN = "Terrain"
    CELL_WALL_DISTANCE = "CellWallDistance"
    DISTANCE_TO_BIOME_EDGE = "DistanceToBiomeEdge"
    PIPELINE = "Pipeline"

    @classmethod
    def parse(cls, type_name: Optional[str]) -> Optional["NodeType"]:
        """Return the member for ``type_name`` or None for an unknown type."""
        if not type_name:
            return None
        try:
            return cls(type_name)
        except ValueError:
            return None


class EvalStatus(str, Enum):
    """How faithfully a node type is evaluated."""

    FULL = "full"
    APPROXIMATED = "approximated"
    UNSUPPORTED = "unsupported"


UNSUPPORTED_TYPES: FrozenSet[NodeType] = frozenset({
    NodeType.HEIGHT_ABOVE_SURFACE,
    NodeType.SURFACE_DENSITY,
    NodeType.TERRAIN_BOOLEAN,
    NodeType.TERRAIN_MASK,
    NodeType.BEARD_DENSITY,
    NodeType.COLUMN_DENSITY,
    NodeType.CAVE_DENSITY,
    NodeType.TERRAIN,
    NodeType.CELL_WALL_DISTANCE,
    NodeType.DISTANCE_TO_BIOME_EDGE,
    NodeType.PIPELINE,
})

APPROXIMATED_TYPES: FrozenSet[NodeType] = frozenset({
    NodeType.VECTOR_WARP,  # no vector-field evaluator, passes Input through
    NodeType.POSITIONS_CELL_NOISE,  # cellular noise stand-in
    NodeType.POSITIONS_3D,  # cellular noise stand-in
    NodeType.POSITIONS_PINCH,
    NodeType.POSITIONS_TWIST,
    NodeType.GRADIENT_WARP,  # finite-difference gradient
    NodeType.SHELL,
})

# Every member is a density type; root resolution treats them as candidates
DENSITY_TYPES: FrozenSet[NodeType] = frozenset(NodeType)


def is_density_type(type_name: Optional[str]) -> bool:
    return NodeType.parse(type_name) is not None


def get_eval_status(type_name: str) -> EvalStatus:
    """
    Get the evaluation status for a given density type.

    Unknown strings report FULL: they are not flagged in the editor, the
    evaluator simply follows their Input.
    """
    node_type = NodeType.parse(type_name)
    if node_type in UNSUPPORTED_TYPES:
        return EvalStatus.UNSUPPORTED
    if node_type in APPROXIMATED_TYPES:
        return EvalStatus.APPROXIMATED
    return EvalStatus.FULL
