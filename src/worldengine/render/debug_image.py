"""
Raster export of generated worlds.

One pixel per cell: the background tile color, blended 70% toward the
foreground tile color where the cell has a foreground tile.
"""

import argparse
import base64
import io
import re
from pathlib import Path
from typing import Any, Dict, Tuple, Union

import numpy as np
from PIL import Image

from ..compatibility.world_loader import resolve_world
from ..config import EngineConfig
from ..errors import WorldLoadError

FOREGROUND_BLEND = 0.7
HEX_COLOR_RE = re.compile(r"^#?([0-9a-fA-F]{6})$")


def hex_to_rgb(color: Any) -> Tuple[int, int, int]:
    """Parse #RRGGBB; anything else is black."""
    match = HEX_COLOR_RE.match(str(color or ""))
    if not match:
        return 0, 0, 0
    n = int(match.group(1), 16)
    return (n >> 16) & 0xFF, (n >> 8) & 0xFF, n & 0xFF


def _palette(tiles: Any) -> Dict[str, Tuple[int, int, int]]:
    palette = {}
    for tile in tiles or []:
        if isinstance(tile, dict) and isinstance(tile.get("id"), str):
            palette[tile["id"]] = hex_to_rgb(tile.get("color"))
    return palette


def world_to_rgb(world: Dict[str, Any]) -> np.ndarray:
    """
    Render a world to an (H, W, 3) uint8 array.

    Raises:
        WorldLoadError: if the world has no usable area
    """

    area = world.get("area") or {}
    width, height = area.get("width"), area.get("height")
    cells = area.get("cells")
    if not width or not height or not isinstance(cells, list):
        raise WorldLoadError("World missing area.width/height/cells")

    tiles = world.get("tiles") or {}
    bg_colors = _palette(tiles.get("background"))
    fg_colors = _palette(tiles.get("foreground"))

    bg = np.zeros((height, width, 3), dtype=np.float64)
    fg = np.zeros((height, width, 3), dtype=np.float64)
    has_fg = np.zeros((height, width), dtype=bool)

    for y, row in enumerate(cells[:height]):
        for x, pair in enumerate(row[:width]):
            if not isinstance(pair, list) or len(pair) < 2:
                continue
            bg[y, x] = bg_colors.get(pair[0], (0, 0, 0))
            if pair[1] is not None and pair[1] in fg_colors:
                fg[y, x] = fg_colors[pair[1]]
                has_fg[y, x] = True

    blended = bg + (fg - bg) * FOREGROUND_BLEND
    rgb = np.where(has_fg[..., None], blended, bg)
    # Round half up, matching the per-channel integer blend of the viewer
    return np.floor(rgb + 0.5).astype(np.uint8)


def save_debug_image(world: Dict[str, Any], path: Union[str, Path]) -> str:
    Image.fromarray(world_to_rgb(world)).save(path, format="PNG")
    return f"Wrote PNG: {path}"


def world_to_base64(world: Dict[str, Any]) -> str:
    """Encode the debug image as a PNG data URL."""

    buffer = io.BytesIO()
    Image.fromarray(world_to_rgb(world)).save(buffer, format="PNG")
    image_base64 = base64.b64encode(buffer.getvalue()).decode("utf-8")
    return f"data:image/png;base64,{image_base64}"


def load_world(source: str) -> Dict[str, Any]:
    """
    Resolve a CLI argument to a world.

    A JSON file (or world JSON text) is loaded directly; any other string
    is used as a reference and generated.
    """

    try:
        return resolve_world(source)
    except WorldLoadError:
        from ..inference.sampler import WorldSampler

        return resolve_world(WorldSampler().generate_world(source))


def main(argv=None):
    parser = argparse.ArgumentParser(description="Render a world to a debug PNG")
    parser.add_argument("input", nargs="?", default="example string", help="World JSON file or reference string")
    parser.add_argument(
        "output",
        nargs="?",
        default=str(EngineConfig.from_env().png_path),
        help="Output PNG path"
    )
    args = parser.parse_args(argv)

    world = load_world(args.input)
    print(save_debug_image(world, args.output))


if __name__ == "__main__":
    main()
