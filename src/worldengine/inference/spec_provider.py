"""
Text-to-spec provider backed by a hosted chat model.

The reference string is sent to the model with the prompts from
prompts.json; the model must answer with a world spec as a JSON object.
Without an API key, or when the request fails, the deterministic local
spec is used instead.
"""

import json
import logging
import os
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from together import Together

from ..config import EngineConfig
from ..errors import SpecProviderError
from .fallback import fallback_spec

logger = logging.getLogger(__name__)

DEFAULT_SYSTEM_PROMPT = (
    "You are a generator. Return a JSON object only. "
    "Output strictly valid JSON with no extra commentary."
)
JSON_RE = re.compile(r"json", re.IGNORECASE)

_client: Optional[Together] = None


def get_client() -> Optional[Together]:
    """Shared client, created on first use; None when no API key is set."""

    global _client
    if _client is not None:
        return _client
    api_key = os.getenv("TOGETHER_API_KEY")
    if not api_key:
        return None
    _client = Together(api_key=api_key)
    return _client


def load_prompts(path: Path) -> Tuple[str, str]:
    """
    Read {"system": ..., "user": ...} from a prompts file.

    A missing file yields empty prompts; an unreadable one is an error.
    """

    if not path.is_file():
        return "", ""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        raise SpecProviderError(f"Error reading {path}: {e}") from e

    system = user = ""
    if isinstance(data, dict):
        if isinstance(data.get("system"), str):
            system = data["system"]
        if isinstance(data.get("user"), str):
            user = data["user"]
    return system, user


def build_messages(reference: str, system: str, user: str):
    # json_object responses require "json" to appear in the conversation
    if not JSON_RE.search(system) and not JSON_RE.search(user):
        system = DEFAULT_SYSTEM_PROMPT + ("\n" + system if system else "")

    if not user.strip():
        user = f'Generate a world specification for the reference "{reference}". Respond with a JSON object only.'

    return [
        {"role": "system", "content": system.strip()},
        {"role": "user", "content": user},
    ]


def append_llm_log(path: Path, model: str, kind: str, text: str):
    stamp = datetime.now(timezone.utc).isoformat()
    try:
        with open(path, "a", encoding="utf-8") as f:
            f.write(f"\n[{stamp}] model={model} {kind}\n{text}\n")
    except OSError as e:
        logger.warning("Could not write LLM log %s: %s", path, e)


def fetch_spec(
    reference: str,
    config: Optional[EngineConfig] = None,
    client: Optional[Any] = None
) -> Dict[str, Any]:
    """
    Ask the model for a world spec.

    Args:
        reference: Free-form reference string describing the world
        config: Model name, prompt and log paths
        client: Chat client; defaults to the shared Together client

    Returns:
        Parsed spec, or the local fallback spec

    Raises:
        SpecProviderError: if the model answered with invalid JSON
    """

    config = config or EngineConfig.from_env()
    client = client or get_client()
    if client is None:
        logger.info("No TOGETHER_API_KEY set, using local fallback spec")
        return fallback_spec(reference, config.world_size, config.world_size)

    system, user = load_prompts(config.prompts_path)
    messages = build_messages(reference, system, user)

    try:
        resp = client.chat.completions.create(
            model=config.model,
            messages=messages,
            response_format={"type": "json_object"},
        )
    except Exception as e:
        append_llm_log(config.llm_log_path, config.model, "error", str(e))
        logger.warning("Spec request failed (%s), using local fallback spec", e)
        return fallback_spec(reference, config.world_size, config.world_size)

    text = (resp.choices[0].message.content or "").strip() if resp.choices else ""
    append_llm_log(config.llm_log_path, config.model, "raw", text)

    try:
        return json.loads(text)
    except ValueError as e:
        append_llm_log(config.llm_log_path, config.model, "parse-error", str(e))
        raise SpecProviderError(f"Model returned invalid JSON: {e}") from e
