"""
Density graph evaluation engine.

Evaluates node/edge graphs of noise and math operators into terrain
density values, sweeping them over 2D preview grids and 3D volumes.
"""

__version__ = "0.1.0"
