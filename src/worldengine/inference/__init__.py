"""
Inference pipeline: reference string to spec to world.

Provides the spec provider (hosted model with a local fallback), the
world sampler and the HTTP API.
"""

from .fallback import fallback_spec, fallback_tiles
from .spec_provider import fetch_spec
from .sampler import WorldSampler

__all__ = ["fallback_spec", "fallback_tiles", "fetch_spec", "WorldSampler"]
