import numpy as np
import pytest

from voxelcraft.noise import Perlin


def test_octave_tables():
    perlin = Perlin(42, 3, 0.5, 2.0, 1.0 / 64.0)
    assert perlin.amplitudes == pytest.approx([1.0, 0.5, 0.25])
    assert perlin.frequencies == pytest.approx([1 / 64, 1 / 32, 1 / 16])
    assert perlin.divisor == pytest.approx(1.75)


def test_rejects_zero_octaves():
    with pytest.raises(ValueError):
        Perlin(42, 0, 0.5, 2.0, 1.0)


def test_lattice_points_are_zero():
    perlin = Perlin(42, 3, 2.0, 2.0, 1.0 / 16.0)
    assert perlin.sample(0.0, 0.0, 0.0) == 0.0
    assert perlin.sample(16.0, 32.0, -48.0) == pytest.approx(0.0, abs=1e-12)


def test_perlin_grid_in_range():
    perlin = Perlin(42, 3, 2.0, 2.0, 1.0 / 16.0)
    xs, zs = np.meshgrid(np.arange(64.0), np.arange(64.0), indexing="ij")
    values = perlin.sample(xs, np.zeros_like(xs), zs)
    assert values.shape == (64, 64)
    assert np.all(values >= -1.0) and np.all(values <= 1.0)
    assert np.any(values < 0.0) and np.any(values > 0.0)


def test_scalar_matches_array():
    perlin = Perlin(7, 2, 0.5, 2.0, 0.1)
    points = np.array([0.3, 5.7, -12.2])
    arr = perlin.sample(points, points * 2, points * -1)
    for i, p in enumerate(points):
        assert perlin.sample(p, p * 2, -p) == pytest.approx(arr[i])


def test_deterministic_per_seed():
    a = Perlin(42, 3, 0.5, 2.0, 0.05)
    b = Perlin(42, 3, 0.5, 2.0, 0.05)
    assert a.sample(3.3, 4.4, 5.5) == b.sample(3.3, 4.4, 5.5)


def test_negative_coordinates_wrap_with_period():
    perlin = Perlin(1, 1, 0.5, 2.0, 1.0)
    assert perlin.sample(-0.7, 1.3, 2.9) == pytest.approx(perlin.sample(255.3, 1.3, 2.9))
    assert perlin.sample(0.3, 0.7, 1.2) == pytest.approx(perlin.sample(256.3, 0.7, 1.2))