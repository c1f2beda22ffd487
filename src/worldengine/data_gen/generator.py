"""
Batch world generator.

Generates datasets of worlds by:
1. Deriving one reference string per sample from a base seed
2. Building the local fallback spec for that reference
3. Running the world builder
4. Saving worlds as JSONL plus a manifest with tile usage statistics
"""

import argparse
import json
from collections import Counter
from pathlib import Path
from typing import Any, Dict, Optional

from tqdm import tqdm

from ..config import DEFAULT_WORLD_SIZE
from ..engine.world_builder import WorldBuilder
from ..errors import WorldEngineError
from ..inference.fallback import fallback_spec


class WorldDatasetGenerator:
    """
    Generates reproducible world datasets from the local fallback spec.

    The same (seed, size, num_samples) always produces byte-identical
    worlds.jsonl files.
    """

    def __init__(
        self,
        output_dir: str,
        seed: int = 42,
        size: int = DEFAULT_WORLD_SIZE,
        prefix: str = "world"
    ):
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

        self.seed = seed
        self.size = size
        self.prefix = prefix

        self.stats = {
            "total_generated": 0,
            "failed": 0,
            "background_usage": Counter(),
            "foreground_usage": Counter(),
            "scatter_placed": 0,
            "scatter_attempts": 0,
        }

    def reference_for(self, sample_id: int) -> str:
        return f"{self.prefix}-{self.seed}-{sample_id}"

    def generate_sample(self, sample_id: int) -> Dict[str, Any]:
        """Generate one world and its metadata."""

        reference = self.reference_for(sample_id)
        builder = WorldBuilder(fallback_spec(reference, self.size, self.size), reference)
        world = builder.build()
        self._update_stats(world, builder.stats)

        return {
            "id": sample_id,
            "reference": reference,
            "stats": builder.stats,
            "world": world,
        }

    def _update_stats(self, world: Dict[str, Any], build_stats: Dict[str, Any]):
        self.stats["total_generated"] += 1
        for row in world["area"]["cells"]:
            for bg, fg in row:
                self.stats["background_usage"][bg] += 1
                if fg is not None:
                    self.stats["foreground_usage"][fg] += 1
        for entry in build_stats["scatter"]:
            self.stats["scatter_placed"] += entry["placed"]
            self.stats["scatter_attempts"] += entry["attempts"]

    def generate_dataset(self, num_samples: int) -> str:
        """
        Generate the complete dataset.

        Returns:
            Path to the dataset manifest
        """

        print(f"Generating {num_samples} worlds to {self.output_dir}")

        worlds_path = self.output_dir / "worlds.jsonl"
        with open(worlds_path, "w", encoding="utf-8") as outfile:
            for i in tqdm(range(num_samples), desc="Generating worlds"):
                try:
                    sample = self.generate_sample(i)
                except WorldEngineError as e:
                    print(f"Error generating world {i}: {e}")
                    self.stats["failed"] += 1
                    continue
                outfile.write(json.dumps(sample, ensure_ascii=False, separators=(",", ":")) + "\n")

        manifest = {
            "dataset_info": {
                "total_samples": num_samples,
                "world_size": self.size,
                "seed": self.seed,
                "output_dir": str(self.output_dir),
                "generation_stats": self._stats_for_json(),
            },
            "dataset_file": worlds_path.name,
        }

        manifest_path = self.output_dir / "dataset_manifest.json"
        with open(manifest_path, "w", encoding="utf-8") as f:
            json.dump(manifest, f, indent=2)

        print(f"Worlds generated: {self.stats['total_generated']} ({self.stats['failed']} failed)")
        print(f"Manifest saved to: {manifest_path}")

        return str(manifest_path)

    def _stats_for_json(self) -> Dict[str, Any]:
        stats = dict(self.stats)
        stats["background_usage"] = dict(sorted(self.stats["background_usage"].items()))
        stats["foreground_usage"] = dict(sorted(self.stats["foreground_usage"].items()))
        return stats


def main(argv: Optional[list] = None):
    """CLI entry point for dataset generation."""

    parser = argparse.ArgumentParser(description="Generate a dataset of tile worlds")
    parser.add_argument("--n", type=int, default=100, help="Number of worlds to generate")
    parser.add_argument("--output", type=str, required=True, help="Output directory")
    parser.add_argument("--size", type=int, default=DEFAULT_WORLD_SIZE, help="World width and height")
    parser.add_argument("--seed", type=int, default=42, help="Base seed for reference strings")
    args = parser.parse_args(argv)

    generator = WorldDatasetGenerator(output_dir=args.output, seed=args.seed, size=args.size)
    generator.generate_dataset(num_samples=args.n)


if __name__ == "__main__":
    main()
