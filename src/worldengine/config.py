"""
Runtime configuration for the generation pipeline.

Values come from WORLD_ENGINE_* environment variables; the core engine
never reads configuration itself, it only receives what the caller passes.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

DEFAULT_MODEL = "meta-llama/Meta-Llama-3.1-8B-Instruct-Turbo"
DEFAULT_WORLD_SIZE = 200
MAX_WORLD_SIZE = 2048

MAX_LAYERS = 128
MAX_OPS = 256


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass
class EngineConfig:
    """Settings shared by the sampler, CLI tools and HTTP API."""

    model: str = DEFAULT_MODEL
    world_size: int = DEFAULT_WORLD_SIZE
    outfile: Optional[str] = None
    whitelist_path: Path = field(default_factory=lambda: Path.cwd() / "unicode-whitelist.txt")
    prompts_path: Path = field(default_factory=lambda: Path.cwd() / "prompts.json")
    llm_log_path: Path = field(default_factory=lambda: Path.cwd() / "llm-spec.log")
    png_path: Path = field(default_factory=lambda: Path.cwd() / "debug.png")

    @classmethod
    def from_env(cls) -> "EngineConfig":
        cwd = Path.cwd()
        size = _env_int("WORLD_ENGINE_SIZE", DEFAULT_WORLD_SIZE)
        return cls(
            model=os.getenv("WORLD_ENGINE_MODEL", DEFAULT_MODEL),
            world_size=max(1, min(MAX_WORLD_SIZE, size)),
            outfile=os.getenv("WORLD_ENGINE_OUTFILE") or None,
            whitelist_path=Path(os.getenv("WORLD_ENGINE_WHITELIST", cwd / "unicode-whitelist.txt")),
            prompts_path=Path(os.getenv("WORLD_ENGINE_PROMPTS", cwd / "prompts.json")),
            llm_log_path=Path(os.getenv("WORLD_ENGINE_LLM_LOG", cwd / "llm-spec.log")),
            png_path=Path(os.getenv("WORLD_ENGINE_PNG", cwd / "debug.png")),
        )
