"""
Named procedural layers sampled at grid coordinates.

A layer is a scalar field in [0, 1]. Supported types:
- const: fixed value
- fbm / valueNoise: the shared value-noise field with per-layer offsets
- radialGradient: 1 at the centre falling to 0 at the radius
- shape: 1 inside a shape, 0 outside
- combine: binary operator over constants and other layers
"""

import math
from typing import Any, Dict, Optional, Set, Tuple

from ..errors import LayerCycleError, LayerError, UnknownLayerError, UnsupportedLayerError
from .grammar import LayerTypeRegistry, ParameterSpec, safe_num
from .noise import ValueNoise2D, clamp01, hash_unit, make_rng, octave_noise
from .shapes import shape_contains

OFFSET_RANGE = 20000

FBM_PARAMS = ParameterSpec(
    {
        "scale": (1e-6, 1.0, 0.01),
        "octaves": (1, 8, 3),
        "persistence": (0.05, 0.95, 0.5),
    },
    integers=("octaves",),
)
VALUE_NOISE_PARAMS = ParameterSpec({"scale": (1e-6, 1.0, 0.01)})


def _is_number(value: Any) -> bool:
    return not isinstance(value, bool) and isinstance(value, (int, float)) and math.isfinite(value)


def combine_values(op: str, a: float, b: float, t: Any = None) -> float:
    """Apply a combine operator to two sampled values."""

    if op == "add":
        return clamp01(a + b)
    if op == "sub":
        return clamp01(a - b)
    if op == "mul":
        return clamp01(a * b)
    if op == "min":
        return min(a, b)
    if op == "max":
        return max(a, b)
    if op == "lerp":
        tt = clamp01(t) if _is_number(t) else 0.5
        return a + (b - a) * tt
    if op == "threshold":
        edge = t if _is_number(t) else 0.5
        return 1.0 if a >= edge else 0.0
    if op == "smoothstep":
        if isinstance(t, (list, tuple)) and len(t) >= 2 and _is_number(t[0]) and _is_number(t[1]):
            e0, e1 = float(t[0]), float(t[1])
        else:
            e0, e1 = 0.4, 0.6
        v = clamp01((a - e0) / ((e1 - e0) or 1e-9))
        return v * v * (3 - 2 * v)
    raise LayerError(f'Unsupported combine.op "{op}"')


def _eval_fbm(sampler: "LayerSampler", name: str, definition: Dict[str, Any], x: int, y: int) -> float:
    params = FBM_PARAMS.extract_params(definition)
    ox, oy = sampler.layer_offset(definition.get("seed") or name)
    scale = params["scale"]
    return octave_noise(
        sampler.base_noise,
        (x + ox) * scale,
        (y + oy) * scale,
        params["octaves"],
        params["persistence"],
    )


def _eval_value_noise(sampler: "LayerSampler", name: str, definition: Dict[str, Any], x: int, y: int) -> float:
    scale = VALUE_NOISE_PARAMS.extract_params(definition)["scale"]
    ox, oy = sampler.layer_offset(definition.get("seed") or name)
    return sampler.base_noise((x + ox) * scale, (y + oy) * scale)


def _eval_radial(sampler: "LayerSampler", name: str, definition: Dict[str, Any], x: int, y: int) -> float:
    cx = safe_num(definition.get("cx"), sampler.width / 2, -1e9, 1e9)
    cy = safe_num(definition.get("cy"), sampler.height / 2, -1e9, 1e9)
    r = safe_num(definition.get("r"), min(sampler.width, sampler.height) / 2, 1, 1e9)
    v = 1 - min(1.0, math.hypot(x - cx, y - cy) / r)
    if definition.get("invert"):
        v = 1 - v
    return v


def _eval_shape(sampler: "LayerSampler", name: str, definition: Dict[str, Any], x: int, y: int) -> float:
    return 1.0 if shape_contains(definition.get("shape"), x, y) else 0.0


def _eval_combine(sampler: "LayerSampler", name: str, definition: Dict[str, Any], x: int, y: int) -> float:
    op = str(definition.get("op") or "mul")
    a = sampler.operand(definition.get("a"), x, y)
    b = sampler.operand(definition.get("b"), x, y)
    return combine_values(op, a, b, definition.get("t"))


def _eval_const(sampler: "LayerSampler", name: str, definition: Dict[str, Any], x: int, y: int) -> float:
    value = definition.get("value")
    return clamp01(value) if _is_number(value) else 0.0


def build_layer_registry() -> LayerTypeRegistry:
    registry = LayerTypeRegistry()
    registry.register("const", _eval_const, ParameterSpec({"value": (0.0, 1.0, 0.0)}))
    registry.register("fbm", _eval_fbm, FBM_PARAMS)
    registry.register("valueNoise", _eval_value_noise, VALUE_NOISE_PARAMS)
    # cx, cy and r default to the world centre and half its short side
    registry.register("radialGradient", _eval_radial)
    registry.register("shape", _eval_shape)
    registry.register("combine", _eval_combine)
    return registry


LAYER_TYPES = build_layer_registry()


class LayerSampler:
    """
    Evaluates named layers for one generation run.

    Offsets, constant values and the cycle-tracking set live on the
    instance, so nothing is shared between runs.
    """

    def __init__(
        self,
        seed: str,
        width: int,
        height: int,
        layers: Optional[Dict[str, Any]] = None,
        base_noise: Optional[ValueNoise2D] = None,
        registry: Optional[LayerTypeRegistry] = None
    ):
        self.seed = seed
        self.width = width
        self.height = height
        self.layers = layers or {}
        self.base_noise = base_noise if base_noise is not None else ValueNoise2D(make_rng(seed))
        self.registry = registry or LAYER_TYPES

        self._offsets: Dict[str, Tuple[int, int]] = {}
        self._const_cache: Dict[str, float] = {}
        self._visiting: Set[str] = set()

    def layer_offset(self, seed_key: Any) -> Tuple[int, int]:
        """Stable noise-space offset so identical layer definitions differ."""

        key = str(seed_key or "")
        cached = self._offsets.get(key)
        if cached is not None:
            return cached
        ox = math.floor(hash_unit(f"{self.seed}|layer|{key}") * OFFSET_RANGE)
        oy = math.floor(hash_unit(f"{self.seed}|layer2|{key}") * OFFSET_RANGE)
        self._offsets[key] = (ox, oy)
        return ox, oy

    def operand(self, operand: Any, x: int, y: int) -> float:
        """Resolve a combine operand: a number, {"const": n} or {"ref": name}."""

        if isinstance(operand, dict):
            ref = operand.get("ref")
            if ref:
                return self.sample_layer(str(ref), x, y)
            operand = operand.get("const")
        return clamp01(operand) if _is_number(operand) else 0.0

    def sample_layer(self, name: str, x: int, y: int) -> float:
        """Sample layer `name` at (x, y); always in [0, 1]."""

        definition = self.layers.get(name) if isinstance(name, str) else None
        if definition is None:
            raise UnknownLayerError(str(name))
        if not isinstance(definition, dict):
            raise UnsupportedLayerError(f'Layer "{name}" must be an object')

        layer_type = definition.get("type")
        if layer_type == "const":
            if name not in self._const_cache:
                self._const_cache[name] = _eval_const(self, name, definition, x, y)
            return self._const_cache[name]

        evaluator = self.registry.get_evaluator(layer_type, name)

        key = f"{name}@{x},{y}"
        if key in self._visiting:
            raise LayerCycleError(name)
        self._visiting.add(key)
        try:
            value = evaluator(self, name, definition, x, y)
        finally:
            self._visiting.discard(key)
        return clamp01(value)
