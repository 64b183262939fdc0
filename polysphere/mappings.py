"""
mappings.py — Barycentric-to-Sphere Vertex Placements
=======================================================

Each mapping takes normalized barycentric coordinates (x, y, z) on the
reference face with corners X=(1,0,0), Y=(0,1,0), Z=(0,0,1) and returns
a 3D point.  All of them send the three corners to X, Y, Z exactly, so
eight sign-flipped copies tile the octahedron / sphere.

    flat                 x X + y Y + z Z                 (planar facet)
    geodesic             normalize(flat)                 (dense at edges)
    parallels            slerp(slerp(X, Z, t), Y, y)      rows = latitudes
    even_geodesics       slerp(slerp(X, Y, y), slerp(Z, Y, y), t)
    sines                sin(pi/2 * (x, y, z))           (inside the sphere)
    sine_based           normalize(sines)
    sine_based_parallel  sines pushed out along (1, 1, 1)
    asin_based           asin ratios equal to (x, y, z)  (see solver.py)

with t = z / (x + z) the position along a row.

No single placement is uniform in edge lengths and angles and cheap at
the same time; the trade-offs are compared by compare_mappings.py.
"""

import jax.numpy as jnp

from .vectors import TAU, EX, EY, EZ, frac, normalize, slerp
from .solver import solve_angular_ratio


def _stack(x, y, z):
    x, y, z = jnp.broadcast_arrays(
        jnp.asarray(x, dtype=float), jnp.asarray(y, dtype=float), jnp.asarray(z, dtype=float))
    return jnp.stack([x, y, z], axis=-1)


def _row_param(x, y, z):
    """Position along the row of constant y: 0 at the X side, 1 at Z."""
    return frac(z, jnp.asarray(x, dtype=float) + z)


# ============================================================
# Mappings
# ============================================================

def flat(x, y, z):
    return _stack(x, y, z)


def geodesic(x, y, z):
    return normalize(flat(x, y, z))


def parallels(x, y, z):
    t = _row_param(x, y, z)
    y = jnp.asarray(y, dtype=float)
    return slerp(slerp(EX, EZ, t), EY, y)


def even_geodesics(x, y, z):
    t = _row_param(x, y, z)
    y = jnp.asarray(y, dtype=float)
    return slerp(slerp(EX, EY, y), slerp(EZ, EY, y), t)


def sines(x, y, z):
    """
    Component-wise sine.  Not on the unit sphere in the interior, but
    on an edge (one coordinate 0) the two others are sin(a), cos(a) and
    the point lies on the unit circle.
    """
    return jnp.sin(TAU / 4 * flat(x, y, z))


def sine_based(x, y, z):
    return normalize(sines(x, y, z))


def _parallel_projection(p):
    """Move p along (1, 1, 1) onto the unit sphere."""
    x, y, z = p[..., 0], p[..., 1], p[..., 2]
    s = x + y + z
    lam = (jnp.sqrt(2 * (x*y + x*z + y*z - x*x - y*y - z*z) + 3) - s) / 3
    return p + lam[..., None]


def sine_based_parallel(x, y, z):
    return _parallel_projection(sines(x, y, z))


def asin_based(x, y, z):
    v, _ = solve_angular_ratio(flat(x, y, z))
    return v


# ============================================================
# Registry
# ============================================================

MAPPINGS = {
    'flat': flat,
    'geodesic': geodesic,
    'parallels': parallels,
    'even_geodesics': even_geodesics,
    'sines': sines,
    'sine_based': sine_based,
    'sine_based_parallel': sine_based_parallel,
    'asin_based': asin_based,
}

# Mappings whose outputs are unit vectors
SPHERICAL = frozenset(MAPPINGS) - {'flat', 'sines'}

_ALIASES = {
    'evenGeodesics': 'even_geodesics',
    'sineBased': 'sine_based',
    'sineBased2': 'sine_based_parallel',
    'asinBased': 'asin_based',
}


def mapping_name(mapping):
    """Canonical id for a mapping id, alias or mapping function."""
    if callable(mapping):
        for name, fn in MAPPINGS.items():
            if fn is mapping:
                return name
        raise ValueError(f"Unknown mapping function: {mapping!r}")
    name = _ALIASES.get(mapping, mapping)
    if name not in MAPPINGS:
        raise ValueError(f"Unknown mapping: {mapping!r} (expected one of {sorted(MAPPINGS)})")
    return name


def get_mapping(mapping):
    """Look up a mapping function by id (snake_case or camelCase)."""
    return MAPPINGS[mapping_name(mapping)]


def is_spherical(mapping):
    return mapping_name(mapping) in SPHERICAL


def apply_mapping(mapping, bary):
    """Evaluate a mapping on an (..., 3) array of barycentric points."""
    bary = jnp.asarray(bary, dtype=float)
    return get_mapping(mapping)(bary[..., 0], bary[..., 1], bary[..., 2])
