"""
Operation executor: turns a validated world spec into a tile grid.

Ops run strictly in list order over one grid:
- paint: set background and/or foreground wherever a predicate holds
- roads.grid: periodic road lines with optional intersection markers
- stamp.scatter: weighted random rectangular prefabs without overlap
"""

import copy
import math
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, NamedTuple, Optional, Tuple

from ..compatibility.glyphs import ascii_printable, sanitize_symbols
from ..compatibility.spec_validator import SpecValidator, TileIds
from ..config import DEFAULT_WORLD_SIZE
from ..errors import PrefabError, SpecValidationError, UnknownTileError, UnsupportedOpError
from ..procgen.grammar import safe_int, safe_num
from ..procgen.layers import LayerSampler
from ..procgen.noise import Rng, hash_unit, make_rng
from ..procgen.predicates import EvalContext, pred_true
from .grid_manager import TileGrid

MAX_PREFABS = 128


@dataclass
class PaintOp:
    index: int
    where: Any
    bg: Optional[str]
    set_fg: bool
    fg: Optional[str]


@dataclass
class RoadsOp:
    index: int
    where: Any
    bg: str
    origin: Tuple[int, int]
    spacing: int
    thickness: int
    marker_id: Optional[str] = None
    marker_p: float = 0.0
    marker_seed: str = ""


@dataclass
class Prefab:
    w: int
    h: int
    bg: Optional[str]
    fg: Optional[str]
    weight: float


@dataclass
class ScatterOp:
    index: int
    seed: str
    where: Any
    count: int
    max_attempts: int
    prefabs: List[Prefab] = field(default_factory=list)


class Placement(NamedTuple):
    op_index: int
    prefab_index: int
    x: int
    y: int
    w: int
    h: int


def pick_weighted(rng: Rng, weights: List[float]) -> int:
    """
    Index drawn proportionally to `weights` by a cumulative scan.

    No draw is consumed when the weights sum to zero; that case, and a
    draw left over by float rounding, select the last entry.
    """

    total = sum(weights)
    last = len(weights) - 1
    if total <= 0:
        return last
    t = rng() * total
    for i, w in enumerate(weights):
        if t < w:
            return i
        t -= w
    return last


class WorldBuilder:
    """
    Builds one world from a spec and a reference seed.

    The caller's spec is deep-copied, so a run never mutates its input.
    All per-run state (layer caches, occupancy, placement log) lives on
    the builder instance.
    """

    def __init__(
        self,
        spec: Dict[str, Any],
        reference_seed: str,
        width: Optional[int] = None,
        height: Optional[int] = None,
        allowed_glyphs: Optional[Iterable[str]] = None,
        validator: Optional[SpecValidator] = None
    ):
        if not isinstance(reference_seed, str):
            raise TypeError('generate(spec, reference_seed): "reference_seed" must be a string.')

        self.spec = copy.deepcopy(spec)
        self.seed = reference_seed
        self.requested_size = (width, height)
        self.allowed_glyphs = allowed_glyphs if allowed_glyphs is not None else ascii_printable()
        self.validator = validator or SpecValidator()

        self.placements: List[Placement] = []
        self.stats: Dict[str, Any] = {"ops_executed": 0, "scatter": []}

        self._handlers = {
            PaintOp: self._run_paint,
            RoadsOp: self._run_roads,
            ScatterOp: self._run_scatter,
        }

    # ------------------------------------------------------------------ setup

    def _resolve_size(self, world: Optional[Dict[str, Any]]) -> Tuple[int, int]:
        world = world or {}
        req_w, req_h = self.requested_size
        width = req_w if req_w is not None else world.get("width", DEFAULT_WORLD_SIZE)
        height = req_h if req_h is not None else world.get("height", DEFAULT_WORLD_SIZE)
        self.validator.require_world({"width": width, "height": height})
        return width, height

    def _require_bg(self, tile_id: Any, tile_ids: TileIds, where: str):
        if not isinstance(tile_id, str) or tile_id not in tile_ids.background:
            raise UnknownTileError(f'{where}: unknown background tile id "{tile_id}"')

    def _require_fg_or_null(self, tile_id: Any, tile_ids: TileIds, where: str):
        if tile_id is None:
            return
        if not isinstance(tile_id, str) or tile_id not in tile_ids.foreground:
            raise UnknownTileError(f'{where}: unknown foreground tile id "{tile_id}"')

    def plan_op(self, index: int, op: Any, tile_ids: TileIds):
        """Parse one raw op, checking its type and every tile it references."""

        op_type = str(op.get("type") or "") if isinstance(op, dict) else ""
        label = f"ops[{index}].{op_type}"

        if op_type == "paint":
            bg = op.get("bg")
            if bg is not None:
                self._require_bg(bg, tile_ids, f"{label}.bg")
            set_fg = "fg" in op
            if set_fg:
                self._require_fg_or_null(op["fg"], tile_ids, f"{label}.fg")
            return PaintOp(index, op.get("where"), bg, set_fg, op.get("fg"))

        if op_type == "roads.grid":
            self._require_bg(op.get("bg"), tile_ids, f"{label}.bg")
            origin = op.get("origin")
            if not isinstance(origin, list) or len(origin) < 2:
                origin = [0, 0]
            plan = RoadsOp(
                index=index,
                where=op.get("where"),
                bg=op["bg"],
                origin=(safe_int(origin[0], 0, -1e9, 1e9), safe_int(origin[1], 0, -1e9, 1e9)),
                spacing=safe_int(op.get("spacing"), 20, 2, 200),
                thickness=safe_int(op.get("thickness"), 2, 1, 20),
            )
            marker = op.get("fgAtIntersections")
            if isinstance(marker, dict):
                plan.marker_id = marker.get("id")
                self._require_fg_or_null(plan.marker_id, tile_ids, f"{label}.fgAtIntersections.id")
                plan.marker_p = safe_num(marker.get("p"), 0.0, 0.0, 1.0)
                plan.marker_seed = str(marker.get("seed") or "")
            return plan

        if op_type == "stamp.scatter":
            count = safe_int(op.get("count"), 200, 1, 200000)
            plan = ScatterOp(
                index=index,
                seed=str(op.get("seed") or "scatter"),
                where=op.get("where"),
                count=count,
                max_attempts=safe_int(op.get("maxAttempts"), count * 10, 1, 400000),
            )
            raw_prefabs = op.get("prefabs")
            if not isinstance(raw_prefabs, list) or not 1 <= len(raw_prefabs) <= MAX_PREFABS:
                raise PrefabError(f"{label}.prefabs must be 1..{MAX_PREFABS}")
            for i, pf in enumerate(raw_prefabs):
                plan.prefabs.append(self._plan_prefab(i, pf, tile_ids, label))
            return plan

        raise UnsupportedOpError(f'Unsupported op.type "{op_type}" at ops[{index}]')

    def _plan_prefab(self, i: int, pf: Any, tile_ids: TileIds, label: str) -> Prefab:
        if not isinstance(pf, dict):
            raise PrefabError(f"{label}.prefabs[{i}] must be object")
        bg, fg = pf.get("bg"), pf.get("fg")
        if bg is not None:
            self._require_bg(bg, tile_ids, f"{label}.prefabs[{i}].bg")
        if fg is not None:
            self._require_fg_or_null(fg, tile_ids, f"{label}.prefabs[{i}].fg")

        raw_weight = pf.get("weight", pf.get("p"))
        if raw_weight is None:
            weight = 1.0
        else:
            weight = safe_num(raw_weight, 0.0, 0.0, math.inf)
        return Prefab(
            w=safe_int(pf.get("w"), 1, 1, 200),
            h=safe_int(pf.get("h"), 1, 1, 200),
            bg=bg,
            fg=fg,
            weight=weight,
        )

    # -------------------------------------------------------------- execution

    def build(self) -> Dict[str, Any]:
        """
        Validate the spec and execute every op.

        Returns:
            {"tiles": {...}, "area": {"width", "height", "cells"}}
        """

        spec = self.spec
        if not isinstance(spec, dict):
            raise SpecValidationError("spec must be an object")

        self.validator.require_world(spec.get("world"))
        width, height = self._resolve_size(spec.get("world"))
        tile_ids = self.validator.require_tiles(spec.get("tiles"))
        tiles = spec["tiles"]
        sanitize_symbols(tiles["foreground"], self.allowed_glyphs)
        layers, ops = self.validator.require_limits(spec.get("layers"), spec.get("ops"))

        plans = [self.plan_op(i, op, tile_ids) for i, op in enumerate(ops)]

        sampler = LayerSampler(self.seed, width, height, layers)
        ctx = EvalContext(seed=self.seed, sample_layer=sampler.sample_layer)
        grid = TileGrid(width, height, tiles["background"][0]["id"])

        for plan in plans:
            self._handlers[type(plan)](plan, grid, ctx)
            self.stats["ops_executed"] += 1

        return {
            "tiles": {"background": tiles["background"], "foreground": tiles["foreground"]},
            "area": {"width": width, "height": height, "cells": grid.to_cells()},
        }

    def _run_paint(self, op: PaintOp, grid: TileGrid, ctx: EvalContext):
        if op.where is None:
            if op.bg is not None:
                grid.background[:, :] = op.bg
            if op.set_fg:
                grid.foreground[:, :] = op.fg
            return

        for y in range(grid.height):
            for x in range(grid.width):
                if not pred_true(op.where, x, y, ctx):
                    continue
                if op.bg is not None:
                    grid.background[y, x] = op.bg
                if op.set_fg:
                    grid.foreground[y, x] = op.fg

    def _run_roads(self, op: RoadsOp, grid: TileGrid, ctx: EvalContext):
        ox, oy = op.origin
        markers = op.marker_id is not None and op.marker_p > 0

        for y in range(grid.height):
            on_h = (y - oy) % op.spacing < op.thickness
            for x in range(grid.width):
                if not pred_true(op.where, x, y, ctx):
                    continue
                on_v = (x - ox) % op.spacing < op.thickness
                if not (on_v or on_h):
                    continue

                grid.background[y, x] = op.bg
                if markers and on_v and on_h:
                    roll = hash_unit(f"{self.seed}|roads|{op.marker_seed}|{x},{y}")
                    if roll < op.marker_p:
                        grid.foreground[y, x] = op.marker_id

    def _run_scatter(self, op: ScatterOp, grid: TileGrid, ctx: EvalContext):
        rng = make_rng(f"{self.seed}|scatter|{op.seed}")
        occupancy = grid.new_occupancy()
        weights = [pf.weight for pf in op.prefabs]

        placed = 0
        attempts = 0
        while attempts < op.max_attempts and placed < op.count:
            attempts += 1
            prefab_index = pick_weighted(rng, weights)
            pf = op.prefabs[prefab_index]

            x0 = math.floor(rng() * (grid.width - pf.w + 1))
            y0 = math.floor(rng() * (grid.height - pf.h + 1))

            # Only the centre cell is tested against the predicate
            cx = x0 + pf.w // 2
            cy = y0 + pf.h // 2
            if not pred_true(op.where, cx, cy, ctx):
                continue
            if not occupancy.can_place(x0, y0, pf.w, pf.h):
                continue

            if pf.bg is not None:
                grid.paint_rect(x0, y0, pf.w, pf.h, pf.bg)
            if pf.fg is not None:
                grid.foreground[cy, cx] = pf.fg

            occupancy.mark(x0, y0, pf.w, pf.h)
            self.placements.append(Placement(op.index, prefab_index, x0, y0, pf.w, pf.h))
            placed += 1

        self.stats["scatter"].append({"op_index": op.index, "placed": placed, "attempts": attempts})


def generate(spec: Dict[str, Any], reference_seed: str, **kwargs) -> Dict[str, Any]:
    """Generate a world from `spec`; deterministic for identical arguments."""
    return WorldBuilder(spec, reference_seed, **kwargs).build()
