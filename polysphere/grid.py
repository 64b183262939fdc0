r"""
grid.py — Triangular Barycentric Grid
=======================================

Index bookkeeping for one subdivided triangular face.

A face subdivided into n segments per edge has grid points (i, j, k)
with i + j + k = n:

    i:  row,    grows towards corner Y
    j:  column, grows towards corner Z
    k:  n-i-j,  grows towards corner X

Points are visited row-major (i ascending, then j ascending), so row i
holds n-i+1 points and the whole face (n+1)(n+2)/2.  Triangle emission
relies on this order: when (i, j) is visited, its neighbours
(i-1, j), (i-1, j+1) and (i, j-1) already have vertex indices.

         (n,0)                 row n: 1 point
          / \
       (1,0)-(1,1) ...
        / \  / \
    (0,0)-(0,1)-(0,2) ...      row 0: n+1 points
"""

import numpy as np


def _check_n(n):
    if n < 0:
        raise ValueError(f"subdivision level must be >= 0, got {n}")


def grid_indices(n):
    """Yield (i, j) for every grid point in row-major order."""
    _check_n(n)
    for i in range(n + 1):
        for j in range(n - i + 1):
            yield i, j


def n_vertices(n):
    """Number of grid points on a face subdivided n times."""
    _check_n(n)
    return (n + 1) * (n + 2) // 2


def row_start(i, n):
    """
    Vertex index of (i, 0).

    This would be i * (n + 1) if all rows had n + 1 points; the
    decreasing row lengths subtract i * (i - 1) / 2.
    """
    return i * (2 * n + 3 - i) // 2


def vertex_index(i, j, n):
    """Row-major vertex index of grid point (i, j)."""
    return row_start(i, n) + j


def subdivide(a, b, n):
    """n+1 evenly spaced values from a to b (n = 0 gives [a])."""
    _check_n(n)
    if n == 0:
        return np.array([float(a)])
    return np.array([((n - s) * a + s * b) / n for s in range(n + 1)])


def grid_ijk(n):
    """
    Integer grid coordinates in walker order.

    Returns:
        (N, 3) int array of (i, j, k)
    """
    ij = np.array(list(grid_indices(n)), dtype=np.int64).reshape(-1, 2)
    k = n - ij[:, 0] - ij[:, 1]
    return np.column_stack([ij, k])


def barycentric_grid(n):
    """
    Normalized barycentric coordinates of every grid point.

    Returns:
        (N, 3) float array of (x, y, z) = (k, i, j) / n, rows summing to 1.
        For n = 0 the only point is the X corner (1, 0, 0).
    """
    ijk = grid_ijk(n)
    if n == 0:
        return np.array([[1.0, 0.0, 0.0]])
    i, j, k = ijk[:, 0], ijk[:, 1], ijk[:, 2]
    return np.column_stack([k, i, j]) / n


def triangle_indices(n, flip=False, offset=0):
    """
    Triangles of one face in emission order.

    For each visited vertex A = (i, j) with i > 0:
        (A, (i-1, j+1), (i-1, j))        upward triangle
        (A, (i-1, j), (i, j-1))          downward triangle, if j > 0

    With x, y, z corners X, Y, Z this winds counter-clockwise seen from
    the side the normal X+Y+Z points to.

    Args:
        n:      subdivision level
        flip:   reverse every triangle's winding
        offset: added to every index (for faces packed into one buffer)

    Returns:
        (n*n, 3) int64 array
    """
    _check_n(n)
    triangles = []
    for i, j in grid_indices(n):
        if i == 0:
            continue
        a = vertex_index(i, j, n)
        b = vertex_index(i - 1, j + 1, n)
        c = vertex_index(i - 1, j, n)
        triangles.append((a, b, c))
        if j > 0:
            triangles.append((a, c, vertex_index(i, j - 1, n)))

    tri = np.array(triangles, dtype=np.int64).reshape(-1, 3)
    if flip:
        tri = tri[:, [0, 2, 1]]
    return tri + offset
