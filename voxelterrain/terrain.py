"""Height-map noise and its interpolated sampling over a chunk."""

from __future__ import annotations

import math
import random
from dataclasses import dataclass
from functools import lru_cache
from typing import Protocol, Sequence


def lerp(a: float, b: float, t: float) -> float:
    """Linear interpolation between ``a`` and ``b``."""
    return a * (1.0 - t) + b * t


@dataclass(frozen=True)
class Shape3:
    """A 3-D box shape mapping points to flat indices, x varying fastest."""

    x: int
    y: int
    z: int

    @property
    def size(self) -> int:
        return self.x * self.y * self.z

    def as_array(self) -> tuple[int, int, int]:
        return (self.x, self.y, self.z)

    def linearize(self, point: Sequence[int]) -> int:
        px, py, pz = point
        return px + self.x * (py + self.y * pz)

    def delinearize(self, index: int) -> tuple[int, int, int]:
        if not 0 <= index < self.size:
            raise IndexError(f"index {index} outside shape of size {self.size}")
        rest, px = divmod(index, self.x)
        pz, py = divmod(rest, self.y)
        return (px, py, pz)


class NoiseSource(Protocol):
    def get(self, point: Sequence[float]) -> float: ...


_DIAG = math.sqrt(0.5)
_GRADIENTS = (
    (1.0, 0.0),
    (-1.0, 0.0),
    (0.0, 1.0),
    (0.0, -1.0),
    (_DIAG, _DIAG),
    (-_DIAG, _DIAG),
    (_DIAG, -_DIAG),
    (-_DIAG, -_DIAG),
)
_SCALE_2D = math.sqrt(2.0)


def _fade(t: float) -> float:
    return t * t * t * (t * (t * 6.0 - 15.0) + 10.0)


class Perlin:
    """Seeded 2-D gradient noise with output in [-1, 1]."""

    def __init__(self, seed: int = 0) -> None:
        self.seed = seed
        perm = list(range(256))
        random.Random(seed).shuffle(perm)
        self._perm = perm + perm

    def _gradient(self, ix: int, iy: int) -> tuple[float, float]:
        h = self._perm[self._perm[ix & 255] + (iy & 255)]
        return _GRADIENTS[h & 7]

    def get(self, point: Sequence[float]) -> float:
        if len(point) != 2:
            raise ValueError("Perlin noise takes a 2-D point")
        x, y = point
        x0, y0 = math.floor(x), math.floor(y)
        fx, fy = x - x0, y - y0

        def corner(dx: int, dy: int) -> float:
            gx, gy = self._gradient(x0 + dx, y0 + dy)
            return gx * (fx - dx) + gy * (fy - dy)

        u, v = _fade(fx), _fade(fy)
        bottom = lerp(corner(0, 0), corner(1, 0), u)
        top = lerp(corner(0, 1), corner(1, 1), u)
        return max(-1.0, min(1.0, lerp(bottom, top, v) * _SCALE_2D))


@lru_cache(maxsize=64)
def _perlin(seed: int) -> Perlin:
    return Perlin(seed)


class HybridMulti:
    """Hybrid multifractal built from octaves of Perlin noise."""

    def __init__(
        self,
        seed: int = 0,
        octaves: int = 6,
        frequency: float = 2.0,
        lacunarity: float = math.pi * 2.0 / 3.0,
        persistence: float = 0.25,
    ) -> None:
        self.seed = seed
        self.octaves = octaves
        self.frequency = frequency
        self.lacunarity = lacunarity
        self.persistence = persistence

    def get(self, point: Sequence[float]) -> float:
        if self.octaves < 1:
            raise ValueError("octaves must be at least 1")
        if len(point) != 2:
            raise ValueError("HybridMulti noise takes a 2-D point")
        x, y = point[0] * self.frequency, point[1] * self.frequency
        result = _perlin(self.seed).get((x, y))
        weight = result
        amplitude = 1.0
        total = 1.0
        for octave in range(1, self.octaves):
            x *= self.lacunarity
            y *= self.lacunarity
            amplitude *= self.persistence
            total += amplitude
            weight = min(weight, 1.0)
            signal = _perlin(self.seed + octave).get((x, y)) * amplitude
            result += weight * signal
            weight *= signal
        return result / total


def _trunc_div(a: int, b: int) -> int:
    q = abs(a) // abs(b)
    return q if (a >= 0) == (b >= 0) else -q


def generate_chunk_noise(
    chunk_wv: Sequence[int],
    chunk_shape: Shape3,
    sampling_rate: int,
    scale_xz: float,
    noise: NoiseSource,
) -> list[float]:
    """Sample ``noise`` on a coarse grid and interpolate it over a padded chunk.

    Returns one height value per cell of ``chunk_shape``; values are constant
    along y. Cell (x, y, z) corresponds to world position
    ``chunk_wv + (x, y, z) - 1``.
    """
    if sampling_rate <= 0:
        raise ValueError("sampling_rate must be positive")
    rate = sampling_rate
    size = chunk_shape.as_array()[0]
    cx, _, cz = chunk_wv

    def base(w: int) -> int:
        return _trunc_div(w - 1, rate) * rate + 1

    sample_min_x = base(cx - 1)
    sample_min_z = base(cz - 1)
    sample_max_x = base(cx + size - 2) + rate
    sample_max_z = base(cz + size - 2) + rate

    grid_x = (sample_max_x - sample_min_x) // rate + 1
    grid_z = (sample_max_z - sample_min_z) // rate + 1
    grid = [
        [
            noise.get(
                (
                    (sample_min_x + gx * rate) / scale_xz,
                    (sample_min_z + gz * rate) / scale_xz,
                )
            )
            for gx in range(grid_x)
        ]
        for gz in range(grid_z)
    ]

    def sample(sx: int, sz: int) -> float:
        return grid[(sz - sample_min_z) // rate][(sx - sample_min_x) // rate]

    buffer = [math.nan] * chunk_shape.size
    for lz in range(size):
        wz = cz + lz - 1
        z0 = base(wz)
        z1 = z0 + rate
        tz = (wz - z0) / rate
        for lx in range(size):
            wx = cx + lx - 1
            x0 = base(wx)
            x1 = x0 + rate
            tx = (wx - x0) / rate
            ix0 = lerp(sample(x0, z0), sample(x1, z0), tx)
            ix1 = lerp(sample(x0, z1), sample(x1, z1), tx)
            value = lerp(ix0, ix1, tz)
            for ly in range(size):
                buffer[chunk_shape.linearize((lx, ly, lz))] = value
    return buffer