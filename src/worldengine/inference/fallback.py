"""
Deterministic local world spec, used when no external provider is
configured or the provider call fails.
"""

import math
from typing import Any, Dict, List

from ..config import DEFAULT_WORLD_SIZE
from ..procgen.noise import Rng, make_rng

BACKGROUND_COUNT = 6
FOREGROUND_COUNT = 4
FOREGROUND_SYMBOLS = ["■", "▲", "◆", "●", "▣", "▦", "▥"]


def rgb_to_hex(r: int, g: int, b: int) -> str:
    return f"#{r:02x}{g:02x}{b:02x}"


def _random_color(rng: Rng) -> str:
    r = math.floor(rng() * 200) + 30
    g = math.floor(rng() * 200) + 30
    b = math.floor(rng() * 200) + 30
    return rgb_to_hex(r, g, b)


def fallback_tiles(reference: str) -> Dict[str, List[Dict[str, Any]]]:
    """Six background and four foreground tiles with seeded colors."""

    rng = make_rng("tiles|" + reference)

    background = []
    for i in range(BACKGROUND_COUNT):
        background.append({
            "id": f"bg{i}",
            "name": f"BG {i}",
            "color": _random_color(rng),
            "walkable": i != 0,
        })

    foreground = []
    for i in range(FOREGROUND_COUNT):
        foreground.append({
            "id": f"fg{i}",
            "name": f"FG {i}",
            "symbol": FOREGROUND_SYMBOLS[i % len(FOREGROUND_SYMBOLS)],
            "color": _random_color(rng),
            "walkable": True,
        })

    return {"background": background, "foreground": foreground}


def _above_mask(pred: Dict[str, Any]) -> Dict[str, Any]:
    return {"all": [{"layerGt": ["mask", 0.05]}, pred]}


def fallback_spec(
    reference: str,
    width: int = DEFAULT_WORLD_SIZE,
    height: int = DEFAULT_WORLD_SIZE
) -> Dict[str, Any]:
    """
    Build the local spec for `reference`.

    Terrain bands come from an fbm layer inside a radial island mask; a
    second fbm adds patches, then foreground props are scattered.
    """

    return {
        "world": {"width": width, "height": height, "metersPerCell": 1},
        "tiles": fallback_tiles(reference),
        "layers": {
            "n0": {"type": "fbm", "seed": "n0", "scale": 0.006, "octaves": 4, "persistence": 0.5},
            "n1": {"type": "fbm", "seed": "n1", "scale": 0.012, "octaves": 2, "persistence": 0.6},
            "mask": {
                "type": "radialGradient",
                "cx": width / 2,
                "cy": height / 2,
                "r": min(width, height) * 0.54,
                "invert": False,
            },
        },
        "ops": [
            {"type": "paint", "where": {"layerLt": ["mask", 0.05]}, "bg": "bg0", "fg": None},
            {"type": "paint", "where": _above_mask({"layerLt": ["n0", 0.20]}), "bg": "bg1"},
            {"type": "paint", "where": _above_mask({"layerBetween": ["n0", 0.20, 0.45]}), "bg": "bg2"},
            {"type": "paint", "where": _above_mask({"layerBetween": ["n0", 0.45, 0.70]}), "bg": "bg3"},
            {"type": "paint", "where": _above_mask({"layerGt": ["n0", 0.70]}), "bg": "bg4"},
            {"type": "paint", "where": _above_mask({"layerGt": ["n1", 0.75]}), "bg": "bg5"},
            {
                "type": "stamp.scatter",
                "seed": "scatter",
                "where": {"layerGt": ["mask", 0.15]},
                "count": 16000,
                "maxAttempts": 120000,
                "prefabs": [
                    {"w": 1, "h": 1, "fg": "fg0", "weight": 0.40},
                    {"w": 1, "h": 1, "fg": "fg1", "weight": 0.30},
                    {"w": 2, "h": 1, "fg": "fg2", "weight": 0.20},
                    {"w": 2, "h": 2, "fg": "fg3", "weight": 0.10},
                ],
            },
        ],
    }
