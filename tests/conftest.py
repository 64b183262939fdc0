"""
conftest.py — Shared pytest fixtures for the polysphere test suite
"""

import pytest
import jax
jax.config.update("jax_enable_x64", True)
import numpy as np

import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from polysphere.mappings import MAPPINGS, SPHERICAL
from polysphere.polyhedra import POLYHEDRA


@pytest.fixture(params=sorted(MAPPINGS))
def mapping(request):
    """Every mapping id."""
    return request.param


@pytest.fixture(params=sorted(SPHERICAL))
def spherical_mapping(request):
    """Mappings whose points lie on the unit sphere."""
    return request.param


@pytest.fixture(params=list(POLYHEDRA))
def polyhedron(request):
    return request.param


@pytest.fixture
def sample_barycentrics():
    """Interior points of a face: centroid and points near each corner."""
    return np.array([
        [1 / 3, 1 / 3, 1 / 3],
        [0.6, 0.2, 0.2],
        [0.2, 0.6, 0.2],
        [0.2, 0.2, 0.6],
    ])


@pytest.fixture
def outward_fraction():
    """Factory: fraction of triangles whose normal points away from the origin."""
    def _fraction(positions, indices):
        positions = np.asarray(positions).reshape(-1, 3)
        tri = np.asarray(indices, dtype=np.int64).reshape(-1, 3)
        a, b, c = (positions[tri[:, s]] for s in range(3))
        normal = np.cross(b - a, c - a)
        centroid = (a + b + c) / 3
        return float(np.mean(np.sum(normal * centroid, axis=1) > 0))
    return _fraction
