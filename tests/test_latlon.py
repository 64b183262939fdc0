"""
test_latlon.py — Lon/Lat Grid Deformation Tests
================================================

Verifies:
  - Grid sizes, index range and outward winding when closed
  - closedness (1, 1) is the unit sphere, (0, 0) the flat map at x = 1
  - Continuity across the flat-limit branch
  - Unit normals pointing away from the sphere center
"""

import pytest
import jax
jax.config.update("jax_enable_x64", True)
import jax.numpy as jnp
import numpy as np

import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from polysphere.latlon import FLAT_LIMIT, deform_latlon, latlon_grid
from polysphere.sprite import lonlat_to_position


@pytest.fixture
def grid():
    return latlon_grid(16, 8)


class TestGrid:
    """Regular lon/lat grid."""

    def test_sizes(self, grid):
        assert grid['lonlat'].shape == (17 * 9, 2)
        assert grid['uvs'].shape == (17 * 9, 2)
        assert grid['indices'].shape == (16 * 8 * 6,)
        assert int(grid['indices'].max()) < 17 * 9

    def test_ranges(self, grid):
        lon, lat = grid['lonlat'][:, 0], grid['lonlat'][:, 1]
        assert np.isclose(lon.min(), -np.pi) and np.isclose(lon.max(), np.pi)
        assert np.isclose(lat.min(), -np.pi / 2) and np.isclose(lat.max(), np.pi / 2)
        assert grid['uvs'].min() == 0.0 and grid['uvs'].max() == 1.0

    def test_closed_winding_outward(self, grid, outward_fraction):
        """Non-degenerate triangles of the closed sphere face outward."""
        lonlat = grid['lonlat']
        pos, _ = deform_latlon(lonlat[:, 0], lonlat[:, 1], 1.0, 1.0)
        pos = np.asarray(pos)
        tri = grid['indices'].reshape(-1, 3).astype(np.int64)
        a, b, c = (pos[tri[:, s]] for s in range(3))
        area = np.linalg.norm(np.cross(b - a, c - a), axis=1)
        keep = tri[area > 1e-12].reshape(-1)
        assert outward_fraction(pos, keep) == 1.0

    def test_too_small(self):
        with pytest.raises(ValueError):
            latlon_grid(0, 4)


class TestDeformation:
    """Rolling the map onto the sphere."""

    def test_closed_is_sphere(self, grid):
        lon, lat = grid['lonlat'][:, 0], grid['lonlat'][:, 1]
        pos, _ = deform_latlon(lon, lat, 1.0, 1.0)
        assert np.allclose(pos, lonlat_to_position(lon, lat), atol=1e-12)

    def test_flat_is_plane(self, grid):
        lon, lat = grid['lonlat'][:, 0], grid['lonlat'][:, 1]
        pos, normals = deform_latlon(lon, lat, 0.0, 0.0)
        assert np.allclose(pos, np.column_stack([np.ones_like(lon), lat, lon]))
        assert np.allclose(normals, [1.0, 0.0, 0.0])

    def test_equator_point_fixed(self):
        """(lon, lat) = (0, 0) stays at (1, 0, 0) for every closedness."""
        for c_lat, c_lon in [(0.0, 0.0), (0.3, 0.7), (1.0, 0.2), (1.0, 1.0)]:
            pos, normal = deform_latlon(0.0, 0.0, c_lat, c_lon)
            assert np.allclose(pos, [1.0, 0.0, 0.0]), (c_lat, c_lon)
            assert np.allclose(normal, [1.0, 0.0, 0.0]), (c_lat, c_lon)

    def test_flat_limit_continuity(self, grid):
        """Just below and just above FLAT_LIMIT the surfaces nearly coincide."""
        lon, lat = grid['lonlat'][:, 0], grid['lonlat'][:, 1]
        below, _ = deform_latlon(lon, lat, FLAT_LIMIT / 2, FLAT_LIMIT / 2)
        above, _ = deform_latlon(lon, lat, FLAT_LIMIT * 2, FLAT_LIMIT * 2)
        err = float(jnp.max(jnp.linalg.norm(above - below, axis=-1)))
        assert err < 0.02, f"Jump across the flat limit: {err:.3e}"

    def test_meridian_length_preserved(self):
        """Half-closed meridians keep their arc length pi."""
        lat = jnp.linspace(-np.pi / 2, np.pi / 2, 2001)
        pos, _ = deform_latlon(jnp.zeros_like(lat), lat, 0.5, 0.0)
        length = float(jnp.sum(jnp.linalg.norm(jnp.diff(pos, axis=0), axis=-1)))
        assert abs(length - np.pi) < 1e-5

    @pytest.mark.parametrize("closedness", [(0.25, 0.5), (0.8, 0.1), (1.0, 1.0)])
    def test_normals(self, grid, closedness):
        """Normals are unit length, including the collapsed poles."""
        lon, lat = grid['lonlat'][:, 0], grid['lonlat'][:, 1]
        _, normals = deform_latlon(lon, lat, *closedness)
        assert np.allclose(jnp.linalg.norm(normals, axis=-1), 1.0)

    def test_sphere_normals_radial(self):
        lon = jnp.linspace(-3.0, 3.0, 7)
        lat = jnp.linspace(-1.4, 1.4, 7)
        pos, normals = deform_latlon(lon, lat, 1.0, 1.0)
        assert np.allclose(normals, pos, atol=1e-12)

    def test_invalid_closedness(self):
        with pytest.raises(ValueError):
            deform_latlon(0.0, 0.0, 1.5, 0.5)
        with pytest.raises(ValueError):
            deform_latlon(0.0, 0.0, 0.5, -0.1)
