"""
Adapters between generation results and world documents.

A generation call may hand back a world object, raw JSON text, a path to
a JSON file, or the message written when the world was saved to disk.
Consumers (image export, HTTP API) resolve all of these to one mapping.
"""

import json
import re
from pathlib import Path
from typing import Any, Dict, Optional, Union

from ..errors import WorldLoadError

WRITE_MESSAGE_RE = re.compile(r"^Wrote terrain JSON to (.+)$")


def is_world_object(value: Any) -> bool:
    if not isinstance(value, dict):
        return False
    area = value.get("area")
    return bool(value.get("tiles")) and isinstance(area, dict) and isinstance(area.get("cells"), list)


def write_world(world: Dict[str, Any], path: Union[str, Path]) -> str:
    """
    Save a world as compact JSON.

    Returns:
        The "Wrote terrain JSON to <path>" message with the absolute path
    """

    abs_path = Path(path)
    if not abs_path.is_absolute():
        abs_path = Path.cwd() / abs_path
    abs_path.parent.mkdir(parents=True, exist_ok=True)
    with open(abs_path, "w", encoding="utf-8") as f:
        json.dump(world, f, ensure_ascii=False, separators=(",", ":"))
    return f"Wrote terrain JSON to {abs_path}"


def _try_parse_json(text: str) -> Optional[Any]:
    try:
        return json.loads(text)
    except ValueError:
        return None


def _load_json_file(path: Path) -> Optional[Any]:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, ValueError):
        return None


def load_from_write_message(message: str) -> Optional[Any]:
    match = WRITE_MESSAGE_RE.match(message.strip())
    if not match:
        return None
    return _load_json_file(Path(match.group(1).strip()))


def resolve_world(result: Any) -> Dict[str, Any]:
    """
    Resolve any generation result to a world mapping.

    Raises:
        WorldLoadError: if the result is not, and does not point to, a world
    """

    if is_world_object(result):
        return result

    if isinstance(result, (bytes, bytearray)):
        try:
            result = result.decode("utf-8")
        except UnicodeDecodeError as e:
            raise WorldLoadError(f"World bytes are not valid UTF-8: {e}") from e

    if isinstance(result, str):
        text = result.strip()
        if text.lower().endswith(".json"):
            candidate = Path(text)
            if not candidate.is_absolute():
                candidate = Path.cwd() / candidate
            if candidate.is_file():
                world = _load_json_file(candidate)
                if is_world_object(world):
                    return world

        world = load_from_write_message(text)
        if world is None:
            world = _try_parse_json(text)
        if is_world_object(world):
            return world

    raise WorldLoadError("Generate did not return a valid world JSON")
