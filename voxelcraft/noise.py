"""Layered improved-Perlin noise used as terrain density."""

from __future__ import annotations

import numpy as np

_PERIOD = 256.0


def _fade(t):
    return t * t * t * (t * (t * 6.0 - 15.0) + 10.0)


def _lerp(t, a, b):
    return a + t * (b - a)


def _grad(hash_value, x, y, z):
    h = hash_value & 15
    u = np.where(h < 8, x, y)
    v = np.where(h < 4, y, np.where((h == 12) | (h == 14), x, z))
    return np.where((h & 1) == 0, u, -u) + np.where((h & 2) == 0, v, -v)


class _ImprovedPerlin:
    """Three-dimensional improved Perlin noise with a seeded permutation table."""

    def __init__(self, seed: int) -> None:
        perm = np.random.default_rng(seed).permutation(256)
        self._p = np.concatenate([perm, perm]).astype(np.int64)

    def __call__(self, x, y, z):
        x = np.asarray(x, dtype=np.float64)
        y = np.asarray(y, dtype=np.float64)
        z = np.asarray(z, dtype=np.float64)
        fx, fy, fz = np.floor(x), np.floor(y), np.floor(z)
        xi = fx.astype(np.int64) & 255
        yi = fy.astype(np.int64) & 255
        zi = fz.astype(np.int64) & 255
        x, y, z = x - fx, y - fy, z - fz
        u, v, w = _fade(x), _fade(y), _fade(z)

        p = self._p
        a = p[xi] + yi
        aa = p[a] + zi
        ab = p[a + 1] + zi
        b = p[xi + 1] + yi
        ba = p[b] + zi
        bb = p[b + 1] + zi

        return _lerp(
            w,
            _lerp(
                v,
                _lerp(u, _grad(p[aa], x, y, z), _grad(p[ba], x - 1, y, z)),
                _lerp(u, _grad(p[ab], x, y - 1, z), _grad(p[bb], x - 1, y - 1, z)),
            ),
            _lerp(
                v,
                _lerp(u, _grad(p[aa + 1], x, y, z - 1), _grad(p[ba + 1], x - 1, y, z - 1)),
                _lerp(
                    u,
                    _grad(p[ab + 1], x, y - 1, z - 1),
                    _grad(p[bb + 1], x - 1, y - 1, z - 1),
                ),
            ),
        )


class Perlin:
    """Fractal noise: several octaves of Perlin noise averaged by amplitude.

    ``amplitude`` scales each next octave's weight, ``persistence`` its frequency,
    and ``scale`` the base frequency (bigger is more granular).
    """

    def __init__(self, seed, num_octaves, amplitude, persistence, scale) -> None:
        if num_octaves <= 0:
            raise ValueError("num_octaves must be positive")
        self.seed = seed
        self.amplitudes = [1.0]
        self.frequencies = [1.0 * scale]
        for _ in range(num_octaves - 1):
            self.amplitudes.append(self.amplitudes[-1] * amplitude)
            self.frequencies.append(self.frequencies[-1] * persistence)
        self.divisor = sum(self.amplitudes)
        self._source = _ImprovedPerlin(seed)

    def __repr__(self) -> str:
        return (
            f"Perlin(seed={self.seed!r}, amplitudes={self.amplitudes!r}, "
            f"frequencies={self.frequencies!r})"
        )

    def sample(self, x, y, z):
        """Noise value at a point; arrays of coordinates give an array of values."""
        x = np.asarray(x, dtype=np.float64)
        y = np.asarray(y, dtype=np.float64)
        z = np.asarray(z, dtype=np.float64)
        total = sum(
            self._source(
                np.mod(x * f, _PERIOD), np.mod(y * f, _PERIOD), np.mod(z * f, _PERIOD)
            )
            * a
            for f, a in zip(self.frequencies, self.amplitudes)
        )
        result = total / self.divisor
        if np.ndim(result) == 0:
            return float(result)
        return result