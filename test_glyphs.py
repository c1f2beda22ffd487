"""
Tests for the foreground glyph whitelist.
"""

from worldengine.compatibility.glyphs import (
    FALLBACK_GLYPHS,
    ascii_printable,
    fallback_glyph,
    load_whitelist,
    sanitize_symbols,
)


def test_ascii_printable():
    chars = ascii_printable()
    assert len(chars) == 95
    assert chars[0] == " " and chars[-1] == "~"


def test_load_whitelist_without_file(tmp_path):
    assert load_whitelist() == ascii_printable()
    assert load_whitelist(tmp_path / "missing.txt") == ascii_printable()


def test_load_whitelist_merges_file(tmp_path):
    path = tmp_path / "unicode-whitelist.txt"
    path.write_text("■▲\n\t◆A\r\n", encoding="utf-8")
    allowed = load_whitelist(path)
    assert allowed.startswith(ascii_printable())
    assert allowed.endswith("■▲◆")
    assert "\n" not in allowed and "\t" not in allowed and "\r" not in allowed
    # Duplicates are merged
    assert allowed.count("A") == 1


def test_sanitize_keeps_allowed_first_char():
    tiles = [{"id": "tree", "symbol": "T"}, {"id": "rock", "symbol": "Rk"}]
    sanitize_symbols(tiles, ascii_printable())
    assert tiles[0]["symbol"] == "T"
    assert tiles[1]["symbol"] == "R"


def test_sanitize_replaces_disallowed_glyph():
    tiles = [{"id": "fg0", "symbol": "■"}]
    sanitize_symbols(tiles, ascii_printable())
    expected = FALLBACK_GLYPHS[(len("fg0") + ord("■")) % len(FALLBACK_GLYPHS)]
    assert tiles[0]["symbol"] == expected
    assert fallback_glyph("fg0", "■") == expected


def test_sanitize_allows_whitelisted_unicode():
    tiles = [{"id": "fg0", "symbol": "■▲"}]
    sanitize_symbols(tiles, ascii_printable() + "■")
    assert tiles[0]["symbol"] == "■"


def test_sanitize_is_deterministic():
    a = [{"id": "x1", "symbol": "◆"}]
    b = [{"id": "x1", "symbol": "◆"}]
    sanitize_symbols(a, "")
    sanitize_symbols(b, "")
    assert a == b
    assert a[0]["symbol"] in FALLBACK_GLYPHS


def test_sanitize_skips_malformed_entries():
    tiles = [None, {"id": "a"}, {"id": "b", "symbol": ""}]
    assert sanitize_symbols(tiles, ascii_printable()) == [None, {"id": "a"}, {"id": "b", "symbol": ""}]


def test_load_whitelist_tolerates_invalid_utf8(tmp_path):
    path = tmp_path / "unicode-whitelist.txt"
    path.write_bytes(b"\xe2\x96\xa0\xff\xfe")
    allowed = load_whitelist(path)
    assert allowed.startswith(ascii_printable())
    assert "■" in allowed
