"""
Structural validator for world specifications.

Checks tile palettes (ids, names, colors, symbols, walkability), world
dimensions and the hard limits on layer and op counts.
"""

import re
from typing import Any, Dict, FrozenSet, List, NamedTuple, Tuple

from ..config import MAX_LAYERS, MAX_OPS, MAX_WORLD_SIZE
from ..errors import LimitExceededError, SpecValidationError

ID_RE = re.compile(r"^[a-z0-9][a-z0-9_-]{0,15}$")
HEX_RE = re.compile(r"^#[0-9a-fA-F]{6}$")


class TileIds(NamedTuple):
    """Id sets every tile reference made by an op is checked against."""

    background: FrozenSet[str]
    foreground: FrozenSet[str]


class SpecValidator:
    """
    Validates world specs before any generation work happens.

    The check_* methods report problems as lists of messages; the
    require_* methods raise on the first failing category.
    """

    def __init__(self, max_layers: int = MAX_LAYERS, max_ops: int = MAX_OPS):
        self.max_layers = max_layers
        self.max_ops = max_ops

    def check_spec(self, spec: Any) -> Tuple[bool, List[str]]:
        """
        Validate a whole spec document.

        Returns:
            Tuple of (is_valid, error_messages)
        """

        if not isinstance(spec, dict):
            return False, ["spec must be an object"]

        errors = []
        errors.extend(self.check_world(spec.get("world")))
        errors.extend(self.check_tiles(spec.get("tiles")))
        errors.extend(self.check_limits(spec.get("layers"), spec.get("ops")))
        return len(errors) == 0, errors

    def check_world(self, world: Any) -> List[str]:
        if world is None:
            return []
        if not isinstance(world, dict):
            return ["world must be an object"]

        errors = []
        for field in ("width", "height"):
            if field not in world:
                continue
            value = world[field]
            if isinstance(value, bool) or not isinstance(value, int):
                errors.append(f"world.{field} must be integer, got {type(value).__name__}")
            elif not 1 <= value <= MAX_WORLD_SIZE:
                errors.append(f"world.{field} = {value} out of range [1, {MAX_WORLD_SIZE}]")
        return errors

    def check_tiles(self, tiles: Any) -> List[str]:
        """Validate tile palettes; returns error messages."""

        if not isinstance(tiles, dict):
            return ["tiles missing/invalid"]

        errors = []
        background = tiles.get("background")
        foreground = tiles.get("foreground")
        if not isinstance(background, list) or len(background) < 1:
            errors.append("tiles.background must be a non-empty array")
            background = []
        if not isinstance(foreground, list):
            errors.append("tiles.foreground must be an array")
            foreground = []

        for tile in background:
            errors.extend(self._check_tile(tile, "background", "bg"))
        for tile in foreground:
            errors.extend(self._check_tile(tile, "foreground", "fg"))
            if isinstance(tile, dict):
                symbol = tile.get("symbol")
                if not isinstance(symbol, str) or not 1 <= len(symbol) <= 4:
                    errors.append(f"fg({tile.get('id')}).symbol must be short string")

        errors.extend(self._check_unique(background, "background"))
        errors.extend(self._check_unique(foreground, "foreground"))
        return errors

    def _check_tile(self, tile: Any, kind: str, short: str) -> List[str]:
        if not isinstance(tile, dict):
            return [f"{kind} tile must be an object"]

        errors = []
        tile_id = tile.get("id")
        if not isinstance(tile.get("name"), str):
            errors.append(f"{short}({tile_id}).name must be string")
        color = tile.get("color")
        if not isinstance(color, str) or not HEX_RE.match(color):
            errors.append(f"{short}({tile_id}).color must be hex #RRGGBB")
        if not isinstance(tile.get("walkable"), bool):
            errors.append(f"{short}({tile_id}).walkable must be boolean")
        return errors

    def _check_unique(self, tiles: List[Any], kind: str) -> List[str]:
        errors = []
        seen = set()
        for tile in tiles:
            if not isinstance(tile, dict):
                continue
            tile_id = tile.get("id")
            if not isinstance(tile_id, str) or not ID_RE.match(tile_id):
                errors.append(f'{kind} tile.id invalid: "{tile_id}"')
                continue
            if tile_id in seen:
                errors.append(f'{kind} tile.id must be unique: "{tile_id}"')
            seen.add(tile_id)
        return errors

    def check_limits(self, layers: Any, ops: Any) -> List[str]:
        errors = []
        if layers is not None and not isinstance(layers, dict):
            errors.append("layers must be an object")
        elif layers and len(layers) > self.max_layers:
            errors.append(f"Too many layers (max {self.max_layers})")
        if ops is not None and not isinstance(ops, list):
            errors.append("ops must be an array")
        elif ops and len(ops) > self.max_ops:
            errors.append(f"Too many ops (max {self.max_ops})")
        return errors

    def require_tiles(self, tiles: Any) -> TileIds:
        """Validate tiles or raise SpecValidationError listing every problem."""

        errors = self.check_tiles(tiles)
        if errors:
            raise SpecValidationError("; ".join(errors), errors)
        return TileIds(
            background=frozenset(t["id"] for t in tiles["background"]),
            foreground=frozenset(t["id"] for t in tiles["foreground"]),
        )

    def require_world(self, world: Any) -> None:
        errors = self.check_world(world)
        if errors:
            raise SpecValidationError("; ".join(errors), errors)

    def require_limits(self, layers: Any, ops: Any) -> Tuple[Dict[str, Any], List[Any]]:
        """
        Check layer/op containers and counts.

        Returns:
            (layers, ops) with missing containers replaced by empty ones
        """

        errors = self.check_limits(layers, ops)
        if errors:
            structural = [e for e in errors if not e.startswith("Too many")]
            if structural:
                raise SpecValidationError("; ".join(errors), errors)
            raise LimitExceededError("; ".join(errors), errors)
        return layers or {}, ops or []
