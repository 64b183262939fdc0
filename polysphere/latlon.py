"""
latlon.py — Rolling a Flat Map onto the Sphere
================================================

A longitude/latitude grid whose vertices are bent from the flat
equirectangular map (plane x = 1, y = lat, z = lon) onto the unit
sphere.  Two closedness parameters in [0, 1] control latitude and
longitude independently:

    closedness = 0:  flat
    closedness = 1:  fully closed (meridians / parallels are circles)

In between, a meridian of length pi is wrapped onto a circle of radius
1 / closedness, so the radius diverges as closedness -> 0.  Below
FLAT_LIMIT the flat-limit formula is used instead of dividing by the
vanishing closedness.
"""

import jax.numpy as jnp
import numpy as np

from .vectors import TAU, normalize

FLAT_LIMIT = 1e-3


def latlon_grid(u_steps, v_steps):
    """
    Regular grid over the equirectangular map.

    Returns:
        dict with keys:
            lonlat:   (V, 2) (lon, lat) in radians, lon in [-pi, pi]
            uvs:      (V, 2) texture coordinates in [0, 1]^2
            indices:  (6 * u_steps * v_steps,) uint32, two triangles per cell
    """
    if u_steps < 1 or v_steps < 1:
        raise ValueError(f"grid needs at least one cell, got {u_steps}x{v_steps}")
    u = np.arange(u_steps + 1) / u_steps
    v = np.arange(v_steps + 1) / v_steps
    uu, vv = np.meshgrid(u, v, indexing='xy')        # index = u_idx + v_idx * (u_steps+1)
    uvs = np.column_stack([uu.ravel(), vv.ravel()])
    lonlat = np.column_stack([(uvs[:, 0] - 0.5) * TAU, (uvs[:, 1] - 0.5) * TAU / 2])

    row = u_steps + 1
    indices = []
    for v_idx in range(1, v_steps + 1):
        for u_idx in range(1, u_steps + 1):
            idx = u_idx + v_idx * row
            indices += [idx, idx - row, idx - 1,
                        idx - 1, idx - row, idx - row - 1]
    return {
        'lonlat': lonlat,
        'uvs': uvs,
        'indices': np.array(indices, dtype=np.uint32),
    }


def _check_closedness(name, value):
    if not 0.0 <= value <= 1.0:
        raise ValueError(f"{name} must be in [0, 1], got {value}")


def deform_latlon(lon, lat, lat_closedness, lon_closedness):
    """
    Positions and normals of map points for the given closedness.

    Args:
        lon, lat:        arrays of angles (radians)
        lat_closedness:  bending of the meridians, 0 (straight) to 1 (circle)
        lon_closedness:  bending of the parallels, 0 (straight) to 1 (circle)

    Returns:
        positions, normals: (..., 3) arrays
    """
    _check_closedness("lat_closedness", lat_closedness)
    _check_closedness("lon_closedness", lon_closedness)
    lon = jnp.asarray(lon, dtype=float)
    lat = jnp.asarray(lat, dtype=float)

    c_lat = jnp.cos(lat * lat_closedness)
    s_lat = jnp.sin(lat * lat_closedness)
    if lat_closedness < FLAT_LIMIT:
        # radial (xz) and axial (y) meridian coordinates
        radial, axial = jnp.zeros_like(lat), lat
    else:
        r_lat = 1.0 / lat_closedness
        radial, axial = (c_lat - 1.0) * r_lat, s_lat * r_lat

    c_lon = jnp.cos(lon * lon_closedness)
    s_lon = jnp.sin(lon * lon_closedness)
    if lon_closedness < FLAT_LIMIT:
        r_xz = None
        x, z = radial, lon
    else:
        r_lon = 1.0 / lon_closedness
        r_xz = r_lon + radial
        x, z = r_xz * c_lon - r_lon, r_xz * s_lon

    positions = jnp.stack([x + 1.0, axial, z], axis=-1)

    meridian_normal = jnp.stack([c_lat, s_lat, jnp.zeros_like(lat)], axis=-1)
    if r_xz is None:
        normals = meridian_normal
    else:
        d_lat = jnp.stack([-s_lat * c_lon, c_lat, -s_lat * s_lon], axis=-1)
        d_lon = jnp.stack([-r_xz * s_lon, jnp.zeros_like(lon), r_xz * c_lon], axis=-1)
        # at the poles of a closed meridian r_xz and the cross product vanish
        degenerate = (c_lat < FLAT_LIMIT)[..., None]
        normals = jnp.where(degenerate, meridian_normal, normalize(jnp.cross(d_lat, d_lon)))
    return positions, normals
