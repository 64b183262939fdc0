"""
triangulation.py — Single-Face Triangulations
===============================================

A triangulation is the image of one face's barycentric grid under a
mapping, stored as a jagged list of rows:

    rows[i]  (n-i+1, 3) array of points (i, 0) ... (i, n-i)

so that rows[i][j] is the point at grid index (i, j).  The helpers here
build, flatten, interpolate and measure such triangulations.
"""

import jax.numpy as jnp
import numpy as np

from .grid import barycentric_grid, n_vertices, row_start, triangle_indices
from .mappings import apply_mapping
from .vectors import dot, lerp, norm, normalize, slerp


def _infer_n(n_points):
    """Invert N = (n+1)(n+2)/2."""
    n = int(round((np.sqrt(8 * n_points + 1) - 3) / 2))
    if (n + 1) * (n + 2) // 2 != n_points:
        raise ValueError(f"{n_points} points do not form a triangular grid")
    return n


def triangulation_rows(points, n=None):
    """Split an (N, 3) walker-ordered array into its jagged rows."""
    if n is None:
        n = _infer_n(points.shape[0])
    return [points[row_start(i, n):row_start(i + 1, n)] for i in range(n + 1)]


def flatten_triangulation(rows):
    """Concatenate jagged rows back into an (N, 3) array."""
    return jnp.concatenate([jnp.reshape(r, (-1, 3)) for r in rows], axis=0)


def generate_triangulation(n, mapping):
    """
    Triangulate the reference face.

    Args:
        n:       subdivision level (edge segments), n >= 0
        mapping: mapping id (see mappings.MAPPINGS) or mapping function

    Returns:
        list of n+1 arrays, row i of shape (n-i+1, 3)
    """
    bary = barycentric_grid(n)
    if callable(mapping):
        points = mapping(bary[:, 0], bary[:, 1], bary[:, 2])
    else:
        points = apply_mapping(mapping, bary)
    return triangulation_rows(points, n)


def collapsed(n):
    """All grid points at the origin."""
    return triangulation_rows(jnp.zeros((n_vertices(n), 3)), n)


def rays(triangulation):
    """
    Segments from the origin to every point.

    Returns:
        (N, 2, 3) array of (origin, point) pairs
    """
    points = flatten_triangulation(triangulation)
    return jnp.stack([jnp.zeros_like(points), points], axis=1)


def mirror_xz(triangulation):
    """Swap x and z of every point (reflection in the x = z plane)."""
    return [r[:, [2, 1, 0]] for r in triangulation]


def grid_lines(triangulation):
    """
    Polylines through the grid points along the three edge directions.

    Returns:
        list of (m, 3) arrays: rows of constant i (X to Z), columns of
        constant j (towards Y) and diagonals of constant k.
    """
    n = len(triangulation) - 1
    lines = [jnp.asarray(r) for r in triangulation if r.shape[0] > 1]
    for j in range(n):
        lines.append(jnp.stack([triangulation[i][j] for i in range(n - j + 1)]))
    for k in range(n):
        # k = n - i - j fixed: walk i up, j = n - k - i down
        lines.append(jnp.stack([triangulation[i][n - k - i] for i in range(n - k + 1)]))
    return lines


def interpolate_triangulations(a, b, lam, spherical=False):
    """
    Pointwise interpolation between two triangulations of equal shape.

    Args:
        a, b:      triangulations (jagged row lists)
        lam:       0 -> a, 1 -> b
        spherical: slerp instead of lerp (for two on-sphere states)

    Raises:
        ValueError: if the row structures differ (different n)
    """
    shape_a = [tuple(r.shape) for r in a]
    shape_b = [tuple(r.shape) for r in b]
    if shape_a != shape_b:
        raise ValueError(
            f"Cannot interpolate triangulations of different shape: "
            f"{len(a) - 1} vs {len(b) - 1} subdivisions")
    interp = slerp if spherical else lerp
    return [interp(ra, rb, jnp.full(ra.shape[:-1], lam)) for ra, rb in zip(a, b)]


def arc_length_stats(triangulation):
    """
    Great-circle lengths of all triangle edges, measured between the
    central projections of the points.

    Returns:
        dict with keys min, max, mean, ratio (max / min)
    """
    n = len(triangulation) - 1
    if n == 0:
        raise ValueError("A single point has no edges")
    points = normalize(flatten_triangulation(triangulation))
    tri = triangle_indices(n)
    edges = np.unique(np.sort(np.concatenate(
        [tri[:, [0, 1]], tri[:, [1, 2]], tri[:, [2, 0]]]), axis=1), axis=0)

    p, q = points[edges[:, 0]], points[edges[:, 1]]
    # atan2 form stays accurate for short arcs
    lengths = jnp.arctan2(norm(jnp.cross(p, q)), dot(p, q))
    lo, hi = float(jnp.min(lengths)), float(jnp.max(lengths))
    return {
        'min': lo,
        'max': hi,
        'mean': float(jnp.mean(lengths)),
        'ratio': hi / lo,
    }
