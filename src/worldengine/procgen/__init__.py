"""
Procedural building blocks for world generation.

This module provides:
- Seeded random streams and value noise (noise)
- Parameter clamping and the layer type registry (grammar)
- Shape containment and the predicate language (shapes, predicates)
- The per-run layer sampler (layers)
"""

from .noise import ValueNoise2D, make_rng, hash_unit, make_value_noise_2d, octave_noise
from .grammar import LayerTypeRegistry, ParameterSpec
from .shapes import shape_contains
from .predicates import EvalContext, pred_true
from .layers import LAYER_TYPES, LayerSampler

__all__ = [
    "ValueNoise2D",
    "make_rng",
    "hash_unit",
    "make_value_noise_2d",
    "octave_noise",
    "LayerTypeRegistry",
    "ParameterSpec",
    "shape_contains",
    "EvalContext",
    "pred_true",
    "LAYER_TYPES",
    "LayerSampler",
]
