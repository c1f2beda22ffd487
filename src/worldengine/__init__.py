"""
WorldEngine: deterministic tile-world generation from declarative specs.

A spec declares tile palettes, named scalar fields ("layers") and an
ordered list of operations; `generate(spec, reference_seed)` interprets
it into a grid of background/foreground tile ids.
"""

from .config import EngineConfig
from .engine import WorldBuilder, generate
from .errors import (
    LayerCycleError,
    LayerError,
    LimitExceededError,
    OpError,
    PrefabError,
    SpecProviderError,
    SpecValidationError,
    UnknownLayerError,
    UnknownTileError,
    UnsupportedLayerError,
    UnsupportedOpError,
    WorldEngineError,
    WorldLoadError,
)

__version__ = "0.1.0"

__all__ = [
    "EngineConfig",
    "WorldBuilder",
    "generate",
    "WorldEngineError",
    "SpecValidationError",
    "LimitExceededError",
    "LayerError",
    "UnknownLayerError",
    "UnsupportedLayerError",
    "LayerCycleError",
    "OpError",
    "UnsupportedOpError",
    "UnknownTileError",
    "PrefabError",
    "WorldLoadError",
    "SpecProviderError",
]
