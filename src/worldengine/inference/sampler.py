"""
World sampler: reference string in, finished world out.

This is the main interface for generating a world from a reference: it
fetches a spec, pins the world size, enforces the glyph whitelist and
runs the engine.
"""

import argparse
import logging
import time
from typing import Any, Dict, Optional, Union

from ..compatibility.glyphs import load_whitelist
from ..compatibility.world_loader import resolve_world, write_world
from ..config import EngineConfig
from ..engine.world_builder import WorldBuilder
from .fallback import fallback_spec, fallback_tiles
from .spec_provider import fetch_spec

logger = logging.getLogger(__name__)


class WorldSampler:
    """
    Complete reference-to-world pipeline.

    Combines the spec provider with the world builder. The world is always
    square with the configured size, whatever the provider asked for.
    """

    def __init__(self, config: Optional[EngineConfig] = None, client: Optional[Any] = None):
        self.config = config or EngineConfig.from_env()
        self.client = client
        self.last_stats: Dict[str, Any] = {}

    def prepare_spec(self, reference: str, spec: Any) -> Dict[str, Any]:
        """Pin the world size and fill in tiles the provider left out."""

        size = self.config.world_size
        if not isinstance(spec, dict):
            spec = fallback_spec(reference, size, size)
        spec["world"] = {"width": size, "height": size, "metersPerCell": 1}
        if not spec.get("tiles"):
            spec["tiles"] = fallback_tiles(reference)
        return spec

    def generate_world(self, reference: str) -> Union[Dict[str, Any], str]:
        """
        Generate a world for `reference`.

        Returns:
            The world mapping, or the "Wrote terrain JSON to ..." message
            when an output file is configured
        """

        if not isinstance(reference, str):
            raise TypeError('generate_world(reference): "reference" must be a string.')

        start_time = time.time()
        spec = self.prepare_spec(reference, fetch_spec(reference, self.config, self.client))

        builder = WorldBuilder(
            spec,
            reference,
            allowed_glyphs=load_whitelist(self.config.whitelist_path),
        )
        world = builder.build()
        self.last_stats = dict(builder.stats, generation_time=time.time() - start_time)
        logger.info(
            "Generated %dx%d world for %r in %.2fs",
            world["area"]["width"], world["area"]["height"], reference,
            self.last_stats["generation_time"]
        )

        if self.config.outfile:
            return write_world(world, self.config.outfile)
        return world


def main():
    """CLI entry point for world generation."""

    parser = argparse.ArgumentParser(description="Generate a tile world from a reference string")
    parser.add_argument("reference", nargs="?", default="example string", help="Reference string")
    parser.add_argument("--out", help="Write the world JSON here (default: WORLD_ENGINE_OUTFILE)")
    parser.add_argument("--size", type=int, help="World width and height")
    parser.add_argument("--model", help="Model name for the spec provider")
    parser.add_argument("--png", help="Also save a debug PNG to this path")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    config = EngineConfig.from_env()
    if args.out:
        config.outfile = args.out
    if args.size:
        config.world_size = args.size
    if args.model:
        config.model = args.model

    sampler = WorldSampler(config)
    result = sampler.generate_world(args.reference)

    if args.png:
        from ..render.debug_image import save_debug_image

        print(save_debug_image(resolve_world(result), args.png))

    if isinstance(result, str):
        print(result)
    else:
        area = result["area"]
        print(f"Generated {area['width']}x{area['height']} world")
        print(f"  Ops executed: {sampler.last_stats['ops_executed']}")
        for entry in sampler.last_stats["scatter"]:
            print(f"  Scatter op {entry['op_index']}: {entry['placed']} placed in {entry['attempts']} attempts")


if __name__ == "__main__":
    main()
