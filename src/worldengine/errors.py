"""
Error taxonomy for world generation.

Every error here is fatal for a generation run: a failed run produces no
world. Malformed predicates are the exception and evaluate to False
instead of raising (see procgen.predicates).
"""

from typing import List, Optional


class WorldEngineError(Exception):
    """Base class for all world engine errors."""


class SpecValidationError(WorldEngineError, ValueError):
    """Malformed tile list, bad id/color/symbol, duplicate id or missing field."""

    def __init__(self, message: str, errors: Optional[List[str]] = None):
        super().__init__(message)
        self.errors = list(errors) if errors else [message]


class LimitExceededError(SpecValidationError):
    """Layer or op count above the hard limits."""


class LayerError(WorldEngineError, ValueError):
    """Base class for layer evaluation errors."""


class UnknownLayerError(LayerError):
    def __init__(self, name: str):
        super().__init__(f'Unknown layer "{name}"')
        self.name = name


class UnsupportedLayerError(LayerError):
    pass


class LayerCycleError(LayerError):
    def __init__(self, name: str):
        super().__init__(f'Layer cycle detected at "{name}"')
        self.name = name


class OpError(WorldEngineError, ValueError):
    """Base class for operation errors."""


class UnsupportedOpError(OpError):
    pass


class UnknownTileError(OpError):
    pass


class PrefabError(OpError):
    pass


class WorldLoadError(WorldEngineError):
    """A generation result could not be resolved to a world document."""


class SpecProviderError(WorldEngineError):
    """The external spec provider returned something that is not a spec."""
