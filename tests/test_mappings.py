"""
test_mappings.py — Barycentric-to-Sphere Mapping Tests
=======================================================

Verifies:
  - All mappings fix the corners X, Y, Z
  - Spherical mappings land on the unit sphere
  - sines is on the unit circle along the face edges
  - parallels keeps grid rows on circles of latitude
  - asin_based reproduces the barycentric ratios in arc sines
  - Symmetric mappings commute with the x <-> z mirror
  - Registry lookups and aliases
"""

import pytest
import jax
jax.config.update("jax_enable_x64", True)
import jax.numpy as jnp
import numpy as np

import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from polysphere.grid import barycentric_grid
from polysphere.mappings import (MAPPINGS, apply_mapping, get_mapping, is_spherical,
                                 mapping_name, sine_based_parallel, sines)
from polysphere.triangulation import generate_triangulation


class TestCorners:
    """Exactness at the face corners."""

    def test_corners_fixed(self, mapping):
        """Barycentric corners map onto the axes."""
        out = np.asarray(apply_mapping(mapping, np.eye(3)))
        err = float(np.max(np.abs(out - np.eye(3))))
        assert err < 1e-12, f"{mapping}: corners off by {err:.2e}"

    def test_output_shape(self, mapping):
        bary = barycentric_grid(4)
        out = apply_mapping(mapping, bary)
        assert out.shape == bary.shape


class TestSphere:
    """Radial placement."""

    def test_unit_length(self, spherical_mapping):
        """Every grid point of a spherical mapping has |p| = 1."""
        out = apply_mapping(spherical_mapping, barycentric_grid(6))
        err = float(jnp.max(jnp.abs(jnp.linalg.norm(out, axis=-1) - 1.0)))
        assert err < 1e-9, f"{spherical_mapping}: off unit sphere by {err:.2e}"

    def test_sines_on_edges(self):
        """With one coordinate zero the sines point is on the unit circle."""
        t = jnp.linspace(0.0, 1.0, 9)
        out = sines(t, jnp.zeros_like(t), 1.0 - t)
        err = float(jnp.max(jnp.abs(jnp.linalg.norm(out, axis=-1) - 1.0)))
        assert err < 1e-14, f"sines off the edge circle by {err:.2e}"

    def test_sines_inside_sphere(self):
        """In the interior sines lies strictly inside the sphere."""
        out = sines(1 / 3, 1 / 3, 1 / 3)
        assert float(jnp.linalg.norm(out)) < 1.0

    def test_parallel_projection_moves_along_diagonal(self):
        """sine_based_parallel differs from sines by a multiple of (1, 1, 1)."""
        bary = barycentric_grid(5)
        x, y, z = bary[:, 0], bary[:, 1], bary[:, 2]
        d = np.asarray(sine_based_parallel(x, y, z) - sines(x, y, z))
        assert np.allclose(d[:, 0], d[:, 1]) and np.allclose(d[:, 1], d[:, 2])

    def test_flat_not_spherical(self):
        assert not is_spherical('flat')
        assert not is_spherical('sines')
        assert is_spherical('geodesic')


class TestShape:
    """Mapping-specific geometry."""

    def test_parallels_rows_are_latitudes(self):
        """All points of a grid row share the same height y = sin(pi/2 * i/n)."""
        n = 6
        rows = generate_triangulation(n, 'parallels')
        for i, row in enumerate(rows):
            heights = np.asarray(row)[:, 1]
            assert np.allclose(heights, np.sin(np.pi / 2 * i / n)), f"row {i}: {heights}"

    def test_asin_based_ratios(self):
        """asin(v) / sum(asin(v)) reproduces the barycentric target."""
        bary = barycentric_grid(8)
        v = np.asarray(apply_mapping('asin_based', bary))
        angles = np.arcsin(np.clip(v, -1, 1))
        ratios = angles / angles.sum(axis=1, keepdims=True)
        err = float(np.max(np.abs(ratios - bary)))
        assert err < 1e-8, f"asin ratios off by {err:.2e}"

    @pytest.mark.parametrize("name", ['geodesic', 'parallels', 'even_geodesics',
                                      'sine_based', 'asin_based'])
    def test_mirror_symmetry(self, name):
        """Swapping x and z in the input swaps x and z in the output."""
        bary = barycentric_grid(5)
        direct = np.asarray(apply_mapping(name, bary))
        mirrored = np.asarray(apply_mapping(name, bary[:, ::-1]))
        assert np.allclose(mirrored, direct[:, ::-1], atol=1e-9)


class TestRegistry:
    """Mapping lookup by id, alias and function."""

    def test_aliases(self):
        assert mapping_name('evenGeodesics') == 'even_geodesics'
        assert mapping_name('sineBased') == 'sine_based'
        assert mapping_name('sineBased2') == 'sine_based_parallel'
        assert mapping_name('asinBased') == 'asin_based'

    def test_function_lookup(self):
        for name, fn in MAPPINGS.items():
            assert mapping_name(fn) == name
            assert get_mapping(name) is fn

    def test_unknown(self):
        with pytest.raises(ValueError):
            mapping_name('mercator')
        with pytest.raises(ValueError):
            mapping_name(lambda x, y, z: x)
