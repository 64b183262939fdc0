"""
test_grid.py — Triangular Grid Walk and Triangle Emission Tests
================================================================

Verifies:
  - Vertex counts and row-major walk order
  - row_start / vertex_index agree with the walk
  - Barycentric coordinates sum to one and contain the corners
  - Triangle emission: count, index range, counter-clockwise winding
  - Package sources compile without escape-sequence warnings
"""

import glob
import warnings

import pytest
import numpy as np

import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from polysphere.grid import (barycentric_grid, grid_indices, grid_ijk, n_vertices,
                             row_start, subdivide, triangle_indices, vertex_index)


class TestGridWalk:
    """Walk order and indexing."""

    def test_vertex_counts(self):
        """(n+1)(n+2)/2 points for n = 0..5."""
        assert [n_vertices(n) for n in range(6)] == [1, 3, 6, 10, 15, 21]

    def test_walk_order(self):
        """Rows ascending, columns ascending inside a row."""
        assert list(grid_indices(2)) == [(0, 0), (0, 1), (0, 2), (1, 0), (1, 1), (2, 0)]

    @pytest.mark.parametrize("n", [0, 1, 4, 9])
    def test_vertex_index_matches_walk(self, n):
        """vertex_index(i, j) is the position of (i, j) in the walk."""
        for position, (i, j) in enumerate(grid_indices(n)):
            assert vertex_index(i, j, n) == position, f"({i},{j}) at {position}"

    def test_row_start_last(self):
        """One past the last row is the vertex count."""
        for n in range(8):
            assert row_start(n + 1, n) == n_vertices(n)

    def test_ijk_sums_to_n(self):
        ijk = grid_ijk(5)
        assert np.all(ijk.sum(axis=1) == 5)
        assert np.all(ijk >= 0)

    def test_negative_n_rejected(self):
        with pytest.raises(ValueError):
            n_vertices(-1)
        with pytest.raises(ValueError):
            list(grid_indices(-2))
        with pytest.raises(ValueError):
            triangle_indices(-1)

    def test_subdivide(self):
        assert np.allclose(subdivide(0.0, 1.0, 4), [0.0, 0.25, 0.5, 0.75, 1.0])
        assert np.allclose(subdivide(2.0, 5.0, 0), [2.0])


class TestBarycentricGrid:
    """Normalized barycentric coordinates."""

    @pytest.mark.parametrize("n", [1, 2, 7])
    def test_rows_sum_to_one(self, n):
        bary = barycentric_grid(n)
        assert bary.shape == (n_vertices(n), 3)
        assert np.allclose(bary.sum(axis=1), 1.0)
        assert np.all(bary >= 0)

    def test_corners(self):
        """First point is X, last of row 0 is Z, the single top point is Y."""
        n = 4
        bary = barycentric_grid(n)
        assert np.allclose(bary[vertex_index(0, 0, n)], [1, 0, 0])
        assert np.allclose(bary[vertex_index(0, n, n)], [0, 0, 1])
        assert np.allclose(bary[vertex_index(n, 0, n)], [0, 1, 0])

    def test_single_point(self):
        """n = 0 is the X corner alone."""
        assert np.allclose(barycentric_grid(0), [[1.0, 0.0, 0.0]])


class TestTriangleIndices:
    """Triangle emission."""

    @pytest.mark.parametrize("n", [0, 1, 2, 5])
    def test_count_and_range(self, n):
        tri = triangle_indices(n)
        assert tri.shape == (n * n, 3)
        if n:
            assert tri.min() >= 0 and tri.max() < n_vertices(n)

    def test_single_triangle(self):
        """n = 1: one triangle Y, Z, X."""
        assert triangle_indices(1).tolist() == [[2, 1, 0]]

    @pytest.mark.parametrize("n", [1, 3, 6])
    def test_counter_clockwise(self, n):
        """With corners X, Y, Z every normal points along +(1, 1, 1)."""
        bary = barycentric_grid(n)
        tri = triangle_indices(n)
        a, b, c = bary[tri[:, 0]], bary[tri[:, 1]], bary[tri[:, 2]]
        normal = np.cross(b - a, c - a)
        assert np.all(normal @ np.ones(3) > 0), "Triangle wound clockwise"

    def test_flip_and_offset(self):
        tri = triangle_indices(3)
        flipped = triangle_indices(3, flip=True, offset=10)
        assert np.array_equal(flipped[:, 0], tri[:, 0] + 10)
        assert np.array_equal(flipped[:, 1], tri[:, 2] + 10)
        assert np.array_equal(flipped[:, 2], tri[:, 1] + 10)

    def test_covers_every_vertex(self):
        tri = triangle_indices(4)
        assert set(np.unique(tri)) == set(range(n_vertices(4)))


class TestSources:
    """ASCII-art docstrings must not contain invalid escape sequences."""

    PACKAGE = os.path.join(os.path.dirname(__file__), '..', 'polysphere')

    @pytest.mark.parametrize("name", ['grid.py', 'polyhedra.py', 'folding.py', 'sprite.py'])
    def test_compiles_without_warnings(self, name):
        path = os.path.join(self.PACKAGE, name)
        with open(path, encoding='utf-8') as f:
            source = f.read()
        with warnings.catch_warnings():
            warnings.simplefilter('error')
            compile(source, path, 'exec')

    def test_every_module_compiles(self):
        paths = sorted(glob.glob(os.path.join(self.PACKAGE, '*.py')))
        assert len(paths) >= 10
        with warnings.catch_warnings():
            warnings.simplefilter('error')
            for path in paths:
                with open(path, encoding='utf-8') as f:
                    compile(f.read(), path, 'exec')
