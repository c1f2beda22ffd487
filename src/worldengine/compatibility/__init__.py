"""
Compatibility layer between spec documents, world documents and the engine.

Validates incoming specs and adapts the different shapes a generated
world can be handed around in.
"""

from .spec_validator import SpecValidator, TileIds
from .glyphs import ascii_printable, load_whitelist, sanitize_symbols
from .world_loader import is_world_object, resolve_world, write_world

__all__ = [
    "SpecValidator",
    "TileIds",
    "ascii_printable",
    "load_whitelist",
    "sanitize_symbols",
    "is_world_object",
    "resolve_world",
    "write_world",
]
