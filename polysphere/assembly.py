"""
assembly.py — Polyhedron / Sphere Mesh Assembly
=================================================

Replicates the reference-face triangulation over all faces of an
octahedron (8 faces), icosahedron (20 faces) or one quarter of the
octahedron (2 faces) and packs the result into flat vertex buffers for a
rendering layer:

    positions  (3V,)  x, y, z per vertex
    normals    (3V,)  unit normals, one per position
    uvs        (2V,)  sprite texture coordinates
    indices    (3T,)  uint32 triangle vertex indices

The mapping is evaluated once on the reference face.  Each face then
applies its corner matrix (polyhedra.FaceDescriptor) to the shared
reference points, so positions on all faces come from one mapping run.
Faces are not welded: vertices on shared edges appear once per face with
that face's texture coordinates.  Normals do not split at seams: on the
closed sphere they are the positions themselves, otherwise area-weighted
sums are taken over all copies of a position.
"""

import logging

import jax.numpy as jnp
import numpy as np

from .grid import barycentric_grid, n_vertices, triangle_indices
from .mappings import apply_mapping, is_spherical, mapping_name
from .polyhedra import polyhedron_faces
from .vectors import normalize

logger = logging.getLogger(__name__)


def weld_vertices(positions, decimals=9):
    """
    Group vertices that share a position.

    Args:
        positions: (V, 3) vertex positions
        decimals:  rounding applied before comparing positions

    Returns:
        (V,) int array, the same id for every copy of one position
    """
    # adding 0.0 turns -0.0 into 0.0
    rounded = np.round(np.asarray(positions, dtype=float), decimals) + 0.0
    _, inverse = np.unique(rounded, axis=0, return_inverse=True)
    return np.asarray(inverse).reshape(-1)


def compute_vertex_normals(positions, indices, weld=True):
    """
    Area-weighted vertex normals.

    With weld=True the face normals are summed over all copies of a
    position, so vertices duplicated along face seams get one normal.

    Args:
        positions: (V, 3) vertex positions
        indices:   (T, 3) triangles
        weld:      share normals between vertices at the same position

    Returns:
        (V, 3) unit normals (zero for vertices without triangles)
    """
    positions = np.asarray(positions, dtype=float)
    indices = np.asarray(indices, dtype=np.int64).reshape(-1, 3)
    a, b, c = (positions[indices[:, s]] for s in range(3))
    # cross product length is twice the triangle area
    face_normals = np.cross(b - a, c - a)

    if weld:
        ids = weld_vertices(positions)
    else:
        ids = np.arange(positions.shape[0])
    sums = np.zeros_like(positions)
    for s in range(3):
        np.add.at(sums, ids[indices[:, s]], face_normals)
    normals = sums[ids]
    length = np.linalg.norm(normals, axis=1, keepdims=True)
    return normals / np.where(length == 0, 1.0, length)


def map_face(reference, face, spherical):
    """Move reference-face points onto one face (renormalizing spherical ones)."""
    points = reference @ jnp.asarray(face.corners)
    return normalize(points) if spherical else points


def assemble_polyhedron_mesh(n, mapping, polyhedron='octahedron', bend=1.0, gap=None):
    """
    Build the vertex buffers of a subdivided polyhedron or sphere.

    Args:
        n:          subdivision level per face edge (n >= 0)
        mapping:    mapping id, see mappings.MAPPINGS
        polyhedron: one of polyhedra.POLYHEDRA; 'quarter_octahedron' gives
                    the two faces of one longitude quadrant
        bend:       0 = flat faces, 1 = mapped positions, linear in between
        gap:        sprite safety gap (defaults to polyhedra.DU / DV)

    Returns:
        dict with keys:
            positions, normals, uvs, indices:  flat buffers (see module doc)
            n_faces:            number of polyhedron faces
            vertices_per_face:  (n+1)(n+2)/2
    """
    if not 0.0 <= bend <= 1.0:
        raise ValueError(f"bend must be in [0, 1], got {bend}")

    name = mapping_name(mapping)
    faces = polyhedron_faces(polyhedron, gap)
    per_face = n_vertices(n)

    bary = jnp.asarray(barycentric_grid(n))
    mapped = apply_mapping(name, bary)
    # Octahedron corner maps are signed permutations, which keep unit
    # vectors unit; icosahedron corners are not orthogonal.
    spherical = is_spherical(name) and polyhedron == 'icosahedron'

    positions, uvs, indices = [], [], []
    for f, face in enumerate(faces):
        flat_pos = map_face(bary, face, False)
        face_pos = map_face(mapped, face, spherical)
        if bend != 1.0:
            face_pos = (1.0 - bend) * flat_pos + bend * face_pos
        positions.append(np.asarray(face_pos))
        uvs.append(np.asarray(bary) @ face.corner_uvs)
        indices.append(triangle_indices(n, flip=face.flip, offset=f * per_face))

    positions = np.concatenate(positions)
    indices = np.concatenate(indices)
    if bend == 1.0 and is_spherical(name):
        normals = np.asarray(normalize(positions))
    else:
        normals = compute_vertex_normals(positions, indices)

    logger.debug("assembled %s/%s n=%d: %d vertices, %d triangles",
                 polyhedron, name, n, positions.shape[0], indices.shape[0])

    return {
        'positions': positions.reshape(-1),
        'normals': normals.reshape(-1),
        'uvs': np.concatenate(uvs).reshape(-1),
        'indices': indices.reshape(-1).astype(np.uint32),
        'n_faces': len(faces),
        'vertices_per_face': per_face,
    }
