"""
Foreground glyph whitelist.

ASCII printable characters are always allowed; an optional whitelist file
extends the set with glyphs the user's terminal renders correctly.
"""

from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

FALLBACK_GLYPHS = ["^", "*", "o", "@", "#", "~", "+", "x"]


def ascii_printable() -> str:
    return "".join(chr(cp) for cp in range(0x20, 0x7F))


def load_whitelist(path: Optional[Union[str, Path]] = None) -> str:
    """
    Merge ASCII with the characters of an optional whitelist file.

    A missing file is not an error and invalid UTF-8 is decoded with
    replacement characters; newlines and tabs are never allowed.
    """

    extra = ""
    if path is not None:
        fp = Path(path)
        if fp.is_file():
            extra = fp.read_text(encoding="utf-8", errors="replace")

    merged = dict.fromkeys(ascii_printable() + extra)
    for ch in ("\n", "\r", "\t"):
        merged.pop(ch, None)
    return "".join(merged)


def fallback_glyph(tile_id: Any, ch: str) -> str:
    id_len = len(tile_id) if isinstance(tile_id, str) else 0
    return FALLBACK_GLYPHS[(id_len + ord(ch)) % len(FALLBACK_GLYPHS)]


def sanitize_symbols(foreground: List[Dict[str, Any]], allowed: Iterable[str]) -> List[Dict[str, Any]]:
    """
    Reduce every foreground symbol to exactly one allowed character, in place.

    A symbol whose first character is not allowed is replaced by a fallback
    glyph chosen deterministically from the tile id and the character.
    """

    allowed_set = set(allowed)
    for tile in foreground:
        if not isinstance(tile, dict):
            continue
        symbol = tile.get("symbol")
        if not isinstance(symbol, str) or not symbol:
            continue
        ch = symbol[0]
        if ch not in allowed_set:
            tile["symbol"] = fallback_glyph(tile.get("id"), ch)
        elif len(symbol) > 1:
            tile["symbol"] = ch
    return foreground
