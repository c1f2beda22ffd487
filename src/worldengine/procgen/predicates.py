"""
Boolean predicate language deciding whether an operation touches a cell.

Predicates are mappings keyed by one operator:
- all / any / not: composition
- layerGt / layerLt / layerBetween: thresholds on a sampled layer
- shape: geometric containment
- chance: seeded per-cell Bernoulli trial

A missing or falsy predicate (null, false, 0, "") is always true, and an
operator whose operand is falsy is skipped. Anything malformed or
unrecognised is false. Unknown layer names still raise, since that is a
spec error rather than a malformed expression.
"""

import math
from dataclasses import dataclass
from typing import Any, Callable

from .noise import clamp01, hash_unit
from .shapes import shape_contains


@dataclass(frozen=True)
class EvalContext:
    """Per-run state shared by every predicate evaluation."""

    seed: str
    sample_layer: Callable[[str, int, int], float]


def _is_number(value: Any) -> bool:
    return not isinstance(value, bool) and isinstance(value, (int, float)) and math.isfinite(value)


def _truthy(value: Any) -> bool:
    # JSON truthiness: empty objects and arrays count as present
    if isinstance(value, (dict, list)):
        return True
    if isinstance(value, float) and math.isnan(value):
        return False
    return bool(value)


def _layer_args(args: Any, arity: int):
    if not isinstance(args, (list, tuple)) or len(args) < arity:
        return None
    name = args[0]
    thresholds = args[1:arity]
    if not isinstance(name, str) or not all(_is_number(t) for t in thresholds):
        return None
    return name, thresholds


def chance_roll(seed: str, sub_seed: Any, x: int, y: int) -> float:
    """Deterministic per-cell draw for the `chance` predicate."""
    return hash_unit(f"{seed}|chance|{sub_seed or ''}|{x},{y}")


def pred_true(pred: Any, x: int, y: int, ctx: EvalContext) -> bool:
    """Evaluate predicate `pred` at cell (x, y)."""

    if not _truthy(pred):
        return True
    if not isinstance(pred, dict):
        return False

    if _truthy(pred.get("all")):
        subs = pred["all"]
        return isinstance(subs, list) and all(pred_true(p, x, y, ctx) for p in subs)
    if _truthy(pred.get("any")):
        subs = pred["any"]
        return isinstance(subs, list) and any(pred_true(p, x, y, ctx) for p in subs)
    if _truthy(pred.get("not")):
        return not pred_true(pred["not"], x, y, ctx)

    if _truthy(pred.get("layerGt")):
        parsed = _layer_args(pred["layerGt"], 2)
        if parsed is None:
            return False
        name, (t,) = parsed
        return ctx.sample_layer(name, x, y) > t
    if _truthy(pred.get("layerLt")):
        parsed = _layer_args(pred["layerLt"], 2)
        if parsed is None:
            return False
        name, (t,) = parsed
        return ctx.sample_layer(name, x, y) < t
    if _truthy(pred.get("layerBetween")):
        parsed = _layer_args(pred["layerBetween"], 3)
        if parsed is None:
            return False
        name, (lo, hi) = parsed
        v = ctx.sample_layer(name, x, y)
        return lo <= v <= hi

    if _truthy(pred.get("shape")):
        return shape_contains(pred["shape"], x, y)

    if pred.get("chance") is not None:
        raw = pred["chance"]
        p = clamp01(raw) if _is_number(raw) else 0.0
        return chance_roll(ctx.seed, pred.get("seed"), x, y) < p

    return False
