"""
Parameter specification and layer type registry.

This module defines:
- ParameterSpec: Coercion and clamping of raw spec parameters
- LayerTypeRegistry: Registration and lookup of layer evaluators by type tag
"""

import math
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..errors import UnsupportedLayerError


def safe_num(value: Any, default: float, min_val: float, max_val: float) -> float:
    """Clamp a finite number into range; anything else becomes the default."""
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        value = default
    return max(min_val, min(max_val, value))


def safe_int(value: Any, default: int, min_val: int, max_val: int) -> int:
    """Like safe_num, but floors finite values first."""
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        value = default
    else:
        value = math.floor(value)
    return int(max(min_val, min(max_val, value)))


class ParameterSpec:
    """
    Specification for layer parameters with clamping.

    Each parameter has:
    - min_val: Minimum allowed value
    - max_val: Maximum allowed value
    - default: Value used when the spec omits it or gives a non-number
    """

    def __init__(
        self,
        params: Dict[str, Tuple[float, float, float]],
        integers: Tuple[str, ...] = ()
    ):
        """
        Args:
            params: Dict mapping param_name -> (min_val, max_val, default)
            integers: Names of parameters that are floored to ints
        """
        self.params = params
        self.integers = set(integers)

    def extract_params(self, values: Dict[str, Any]) -> Dict[str, float]:
        """Extract parameters from a raw layer definition, clamped to range."""

        result = {}
        for param_name, (min_val, max_val, default) in self.params.items():
            raw = values.get(param_name)
            if param_name in self.integers:
                result[param_name] = safe_int(raw, default, min_val, max_val)
            else:
                result[param_name] = safe_num(raw, default, min_val, max_val)
        return result

    def get_param_names(self) -> List[str]:
        return list(self.params.keys())

    def get_param_ranges(self) -> Dict[str, Tuple[float, float]]:
        """Get parameter ranges (min, max) for each parameter."""
        return {name: (min_val, max_val) for name, (min_val, max_val, _) in self.params.items()}


class LayerTypeRegistry:
    """
    Registry of layer evaluators keyed by the layer `type` tag.

    The set of tags is closed: looking up an unregistered tag raises
    UnsupportedLayerError instead of falling back to a default.
    """

    def __init__(self):
        self.evaluators: Dict[str, Callable] = {}
        self.param_specs: Dict[str, ParameterSpec] = {}

    def register(self, name: str, func: Callable, param_spec: Optional[ParameterSpec] = None):
        self.evaluators[name] = func
        self.param_specs[name] = param_spec or ParameterSpec({})

    def get_evaluator(self, name: str, layer_name: str = "") -> Callable:
        try:
            return self.evaluators[name]
        except (KeyError, TypeError):
            raise UnsupportedLayerError(
                f'Unsupported layer.type "{name}" (layer "{layer_name}")'
            ) from None

    def get_parameter_spec(self, name: str) -> ParameterSpec:
        return self.param_specs[name]

    def list_types(self) -> List[str]:
        return list(self.evaluators.keys())

    def get_all_parameters(self) -> Dict[str, Dict[str, Tuple[float, float, float]]]:
        """Parameter table per layer type (for the HTTP API)."""
        return {name: dict(spec.params) for name, spec in self.param_specs.items()}
