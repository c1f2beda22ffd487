"""
Geometric containment tests for spec shapes.

Shapes are plain mappings tagged by `kind`: rect, roundRect, circle,
polygon and line. Unknown kinds and malformed fields contain nothing.
"""

import math
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .grammar import safe_int, safe_num

COORD_LIMIT = 1e9


def _point(value: Any) -> Optional[Tuple[float, float]]:
    if not isinstance(value, (list, tuple)) or len(value) < 2:
        return None
    x, y = value[0], value[1]
    for v in (x, y):
        if isinstance(v, bool) or not isinstance(v, (int, float)) or not math.isfinite(v):
            return None
    return float(x), float(y)


def point_in_polygon(points: Sequence[Tuple[float, float]], x: float, y: float) -> bool:
    """Even-odd ray casting test."""
    inside = False
    j = len(points) - 1
    for i in range(len(points)):
        xi, yi = points[i]
        xj, yj = points[j]
        if (yi > y) != (yj > y):
            x_cross = (xj - xi) * (y - yi) / ((yj - yi) or 1e-9) + xi
            if x < x_cross:
                inside = not inside
        j = i
    return inside


def dist_point_to_segment(
    px: float, py: float,
    ax: float, ay: float,
    bx: float, by: float
) -> float:
    """Distance from a point to the closest point of segment [a, b]."""
    abx, aby = bx - ax, by - ay
    apx, apy = px - ax, py - ay
    ab2 = abx * abx + aby * aby
    t = max(0.0, min(1.0, (apx * abx + apy * aby) / ab2)) if ab2 else 0.0
    cx, cy = ax + t * abx, ay + t * aby
    return math.hypot(px - cx, py - cy)


def _rect_contains(shape: Dict[str, Any], kind: str, x: float, y: float) -> bool:
    rx = safe_int(shape.get("x"), 0, -COORD_LIMIT, COORD_LIMIT)
    ry = safe_int(shape.get("y"), 0, -COORD_LIMIT, COORD_LIMIT)
    rw = safe_int(shape.get("w"), 0, 0, COORD_LIMIT)
    rh = safe_int(shape.get("h"), 0, 0, COORD_LIMIT)
    if rw <= 0 or rh <= 0:
        return False

    inside_box = rx <= x < rx + rw and ry <= y < ry + rh
    round_r = safe_num(shape.get("round", 0), 0, 0, 1e6)
    if kind == "rect" or round_r <= 0 or not inside_box:
        return inside_box

    r = min(round_r, rw / 2, rh / 2)
    left, right = rx + r, rx + rw - r
    top, bottom = ry + r, ry + rh - r
    if left <= x < right or top <= y < bottom:
        return True

    cx = left if x < left else right
    cy = top if y < top else bottom
    return math.hypot(x - cx, y - cy) <= r


def _circle_contains(shape: Dict[str, Any], x: float, y: float) -> bool:
    cx = safe_num(shape.get("cx"), 0, -COORD_LIMIT, COORD_LIMIT)
    cy = safe_num(shape.get("cy"), 0, -COORD_LIMIT, COORD_LIMIT)
    r = safe_num(shape.get("r"), 0, 0, COORD_LIMIT)
    return math.hypot(x - cx, y - cy) <= r


def _polygon_contains(shape: Dict[str, Any], x: float, y: float) -> bool:
    raw = shape.get("points")
    if not isinstance(raw, list) or len(raw) < 3:
        return False
    points: List[Tuple[float, float]] = []
    for p in raw:
        pt = _point(p)
        if pt is None:
            return False
        points.append(pt)
    return point_in_polygon(points, x, y)


def _line_contains(shape: Dict[str, Any], x: float, y: float) -> bool:
    a = _point(shape.get("a"))
    b = _point(shape.get("b"))
    if a is None or b is None:
        return False
    thickness = safe_num(shape.get("thickness", 1), 1, 0.1, 1e6)
    return dist_point_to_segment(x, y, a[0], a[1], b[0], b[1]) <= thickness / 2


def shape_contains(shape: Any, x: float, y: float) -> bool:
    """True if cell (x, y) lies inside the shape."""

    if not isinstance(shape, dict):
        return False
    kind = shape.get("kind")

    if kind in ("rect", "roundRect"):
        return _rect_contains(shape, kind, x, y)
    if kind == "circle":
        return _circle_contains(shape, x, y)
    if kind == "polygon":
        return _polygon_contains(shape, x, y)
    if kind == "line":
        return _line_contains(shape, x, y)
    return False
