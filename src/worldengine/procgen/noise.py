"""
Deterministic random stream and value noise.

- make_rng: FNV-1a seeded xorshift-style generator from a string seed
- hash_unit: first draw of make_rng, used as a pure coordinate hash
- ValueNoise2D: permutation-table value noise with quintic fade
- octave_noise: fractional Brownian motion over any 2D noise function
"""

import math
from typing import Callable, Iterator

import numpy as np

MASK32 = 0xFFFFFFFF
FNV_OFFSET = 2166136261
FNV_PRIME = 16777619

Rng = Callable[[], float]


def _utf16_units(text: str) -> Iterator[int]:
    data = text.encode("utf-16-le", "surrogatepass")
    for i in range(0, len(data), 2):
        yield data[i] | (data[i + 1] << 8)


def make_rng(seed: str) -> Rng:
    """
    Build a reproducible stream of floats in [0, 1) from a string seed.

    Each call advances the internal 32-bit state; two generators built from
    the same seed produce the same sequence.
    """

    h = FNV_OFFSET
    for unit in _utf16_units(str(seed)):
        h ^= unit
        h = (h * FNV_PRIME) & MASK32

    def rng() -> float:
        nonlocal h
        h = (h + (h << 13)) & MASK32
        h ^= h >> 7
        h = (h + (h << 3)) & MASK32
        h ^= h >> 17
        h = (h + (h << 5)) & MASK32
        return h / 4294967296.0

    return rng


def hash_unit(key: str) -> float:
    """Pure hash of a string key to [0, 1)."""
    return make_rng(key)()


def clamp01(x: float) -> float:
    return 0.0 if x < 0 else 1.0 if x > 1 else x


def fade(t: float) -> float:
    """Quintic smoothing curve 6t^5 - 15t^4 + 10t^3."""
    return t * t * t * (t * (t * 6.0 - 15.0) + 10.0)


def lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


class ValueNoise2D:
    """
    2D value noise over a shuffled 256-entry permutation table.

    The table is duplicated to 512 entries so lattice lookups never need
    a wraparound check. Values are in [0, 1].
    """

    def __init__(self, rng: Rng):
        perm = np.arange(256, dtype=np.uint16)
        for i in range(255, 0, -1):
            j = int(math.floor(rng() * (i + 1)))
            perm[i], perm[j] = perm[j], perm[i]
        self.perm = np.concatenate([perm, perm])
        # Scalar lookups are far cheaper on a list than on numpy scalars
        self._table = self.perm.tolist()

    def _corner(self, ix: int, iy: int) -> float:
        table = self._table
        v = table[(ix + table[iy & 255]) & 255]
        return (v / 255.0) * 2.0 - 1.0

    def __call__(self, x: float, y: float) -> float:
        x0 = math.floor(x)
        y0 = math.floor(y)
        x1 = x0 + 1
        y1 = y0 + 1
        sx = fade(x - x0)
        sy = fade(y - y0)

        n00 = self._corner(x0, y0)
        n10 = self._corner(x1, y0)
        n01 = self._corner(x0, y1)
        n11 = self._corner(x1, y1)

        ix0 = lerp(n00, n10, sx)
        ix1 = lerp(n01, n11, sx)
        return (lerp(ix0, ix1, sy) + 1.0) / 2.0


def make_value_noise_2d(rng: Rng) -> ValueNoise2D:
    return ValueNoise2D(rng)


def octave_noise(
    noise_fn: Callable[[float, float], float],
    x: float,
    y: float,
    octaves: int,
    persistence: float
) -> float:
    """
    Fractional Brownian motion.

    Args:
        noise_fn: Base noise sampled at (x, y)
        octaves: Number of layers, each at double the previous frequency
        persistence: Amplitude multiplier per octave

    Returns:
        Amplitude-weighted mean of all octaves
    """

    amplitude = 1.0
    frequency = 1.0
    total = 0.0
    norm = 0.0
    for _ in range(octaves):
        total += noise_fn(x * frequency, y * frequency) * amplitude
        norm += amplitude
        amplitude *= persistence
        frequency *= 2.0
    return total / (norm or 1.0)
