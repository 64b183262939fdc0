r"""
polyhedra.py — Octahedron and Icosahedron Face Descriptors
============================================================

Every face of a polyhedron is described by the linear map taking the
reference face (corners X, Y, Z) onto it, together with the sprite
texture coordinates of its three corners:

    corners[0]  image of X  (barycentric x)
    corners[1]  image of Y  (barycentric y)
    corners[2]  image of Z  (barycentric z)

A point with barycentric (x, y, z) lands at (x, y, z) @ corners and at
texture position (x, y, z) @ corner_uvs.  Faces whose corner map has a
negative determinant are mirror images of the reference face and need
their triangle winding flipped to keep normals pointing outward.

Octahedron sprite (du = horizontal gap):

  1 +------------------------+
    |S0/\ S1 /\ S2 /\ S3 /\S0|
  v | /  \  /  \  /  \  /  \ |
    |/ N0 \/ N1 \/ N2 \/ N3 \|
  0 +------------------------+
    0           u            1

Northern faces sit on the equator (v = 0) with the pole at v = 1.
Southern faces are turned upside down and shifted left by 1/8; the half
of S0 beyond u = 0 wraps around to u = 1.

Icosahedron sprite (dv = vertical gap):

  1          -- |---X-------X-------X-------X-------X---|
  1 - dv     -- |19/.\ 15  /.\ 16  /.\ 17  /.\ 18  /.\19|
                | // \\   // \\   // \\   // \\   // \\ |
  1/2 + dv/2 -- '/  0  \'/  1  \'/  2  \'/  3  \'/  4  \'
  1/2 - dv/2 -- X-------X-------X-------X-------X-------X
                |\  5  / \  6  / \  7  / \  8  / \  9  /|
                |14\ / 10  \ / 11  \ / 12  \ / 13  \ /14|
  0          -- |---X-------X-------X-------X-------X---|
                0.0 0.1 0.2 0.3 0.4 0.5 0.6 0.7 0.8 0.9 1.0

Each icosahedron face has one west-east edge (W, E) and a poleward
corner P; the barycentric x, y, z axes map to W, P, E.

Quarter-octahedron sprite (no gap; one quadrant of longitude):

  1 +-----------+ Z
    |N        . |
  v |     .     |
    | .        S|
  0 +-----------+
    X     u     1

The northern face (pole at u = 0, v = 1) and the southern face (pole at
u = 1, v = 0) share the unit square along the diagonal X-Z, which is the
equator.  In all layouts u grows with longitude, so sprite u = 0 is the
meridian through +x.
"""

from enum import IntEnum
from typing import NamedTuple

import numpy as np


# Horizontal safety gap between octahedron sprite triangles
DU = 0.01
# Vertical safety gap between icosahedron sprite rows
DV = 0.01

# Ring vertices of the icosahedron: height above/below the equator and
# distance from the polar axis (HEIGHT**2 + RADIUS**2 == 1)
HEIGHT = np.sqrt(1 / 5)
RADIUS = 2 * HEIGHT

POLYHEDRA = ('octahedron', 'icosahedron', 'quarter_octahedron')


class FaceDescriptor(NamedTuple):
    name: str
    corners: np.ndarray      # (3, 3)
    corner_uvs: np.ndarray   # (3, 2)
    flip: bool


def _face(name, corners, corner_uvs):
    corners = np.asarray(corners, dtype=float)
    return FaceDescriptor(
        name=name,
        corners=corners,
        corner_uvs=np.asarray(corner_uvs, dtype=float),
        flip=bool(np.linalg.det(corners) < 0),
    )


# ============================================================
# Octahedron
# ============================================================

def octahedron_corner_uvs(du=DU):
    """
    Sprite positions of the reference corners on face N0:
    X (west end of the equator edge), Y (north pole), Z (east end).
    """
    return np.array([
        [du,          0.0],
        [1 / 8,       1.0],
        [1 / 4 - du,  0.0],
    ])


def octahedron_uv(pos, face_ref, du=DU):
    """
    Sprite UV of a point on the sphere or on an octahedron face.

    Points on a face boundary belong to several faces; face_ref (any
    vector pointing into the wanted face, e.g. the sum of its corners)
    selects one.  pos need not be normalized.

    Args:
        pos:      (..., 3) directions
        face_ref: (3,) sign reference of the face

    Returns:
        (..., 2) texture coordinates
    """
    bary = np.abs(np.asarray(pos, dtype=float))
    bary = bary / np.sum(bary, axis=-1, keepdims=True)
    uv = bary @ octahedron_corner_uvs(du)
    u, v = uv[..., 0], uv[..., 1]

    if face_ref[0] < 0:
        u = 0.5 - u
    if face_ref[2] < 0:
        u = 1.0 - u
    if face_ref[1] < 0:
        v = 1.0 - v
        u = u - 1 / 8
    return np.stack([u, v], axis=-1)


def octahedron_faces(du=DU):
    """
    The 8 faces, one per sign triple (sx, sy, sz) in lexicographic order
    from (-,-,-) to (+,+,+).
    """
    faces = []
    for sx in (-1, 1):
        for sy in (-1, 1):
            for sz in (-1, 1):
                signs = np.array([sx, sy, sz], dtype=float)
                corners = np.diag(signs)
                name = 'NS'[sy < 0] + ''.join('-+'[s > 0] for s in (sx, sy, sz))
                faces.append(_face(name, corners, octahedron_uv(corners, signs, du)))
    return faces


# ============================================================
# Icosahedron
# ============================================================

class IcoVertex(IntEnum):
    """
    Named icosahedron vertices.  Ring vertices R0..R9 sit at longitude
    36° * index, even ones above the equator, odd ones below.
    """
    NORTH = 0
    SOUTH = 1
    R0 = 2
    R1 = 3
    R2 = 4
    R3 = 5
    R4 = 6
    R5 = 7
    R6 = 8
    R7 = 9
    R8 = 10
    R9 = 11


def ring_vertex(i):
    """IcoVertex for ring index i (taken modulo 10)."""
    return IcoVertex(IcoVertex.R0 + i % 10)


def icosahedron_vertices():
    """
    Returns:
        (12, 3) array indexed by IcoVertex
    """
    vertices = np.zeros((len(IcoVertex), 3))
    vertices[IcoVertex.NORTH] = (0.0, 1.0, 0.0)
    vertices[IcoVertex.SOUTH] = (0.0, -1.0, 0.0)
    for i in range(10):
        angle = 2 * np.pi / 10 * i
        vertices[ring_vertex(i)] = (
            RADIUS * np.cos(angle),
            HEIGHT * (-1) ** i,
            RADIUS * np.sin(angle),
        )
    return vertices


# Faces per column c = 0..4 as (W, P, E) vertex triples plus the sprite
# placement (u of W, v of the W-E edge, v of P).
def _ico_face_table(c, dv):
    upper0, lower1, upper2, lower3 = (ring_vertex(2 * c + s) for s in range(4))
    return [
        # face       W       P                 E       u_w          v_we          v_p
        (c,       upper0, IcoVertex.NORTH, upper2,  c / 5,       (1 - dv) / 2, 1 - dv),
        (5 + c,   upper0, lower1,          upper2,  c / 5,       (1 - dv) / 2, 0.0),
        (10 + c,  lower1, upper2,          lower3,  (c + .5) / 5, 0.0,         (1 - dv) / 2),
        (15 + c,  lower1, IcoVertex.SOUTH, lower3,  (c + .5) / 5, 1.0,         (1 + dv) / 2),
    ]


def icosahedron_faces(dv=DV):
    """
    The 20 faces, ordered by face number of the sprite net.  Faces 10-19
    of column 4 extend past u = 1 (wrapping texture).
    """
    vertices = icosahedron_vertices()
    faces = [None] * 20
    for c in range(5):
        for number, w, p, e, u_w, v_we, v_p in _ico_face_table(c, dv):
            corner_uvs = [
                (u_w, v_we),
                (u_w + .1, v_p),
                (u_w + .2, v_we),
            ]
            faces[number] = _face(f"F{number}", vertices[[w, p, e]], corner_uvs)
    return faces


# ============================================================
# Quarter octahedron
# ============================================================

def quarter_octahedron_uv(pos, quadrant=0):
    """
    Quarter-octahedron sprite UV of a direction.

    The quarter is the longitude range [90° * quadrant, 90° * (quadrant + 1)];
    the direction is turned back into quadrant 0 first.  Points north of the
    equator use u = z, v = z + y, southern ones u = z - y, v = z, with
    (x, y, z) scaled onto the octahedron (|x| + |y| + |z| = 1).

    Args:
        pos:      (..., 3) directions inside the quarter
        quadrant: 0..3

    Returns:
        (..., 2) texture coordinates in the unit square
    """
    pos = np.asarray(pos, dtype=float)
    x, y, z = pos[..., 0], pos[..., 1], pos[..., 2]
    for _ in range(quadrant % 4):
        x, z = z, -x
    scale = 1.0 / (np.abs(x) + np.abs(y) + np.abs(z))
    v = z + np.maximum(y, 0.0)
    u = v - y
    return np.stack([u * scale, v * scale], axis=-1)


def quarter_octahedron_faces():
    """
    The two faces of quadrant 0 (x, z >= 0), north then south, sharing
    the unit square of the sprite along its diagonal u = v.
    """
    faces = []
    for sy in (1, -1):
        signs = np.array([1.0, sy, 1.0])
        corners = np.diag(signs)
        name = 'NS'[sy < 0] + ''.join('-+'[s > 0] for s in signs)
        faces.append(_face(name, corners, quarter_octahedron_uv(corners)))
    return faces


# ============================================================
# Dispatch
# ============================================================

def check_polyhedron(polyhedron):
    if polyhedron not in POLYHEDRA:
        raise ValueError(f"Unknown polyhedron: {polyhedron!r} (expected one of {POLYHEDRA})")


def default_gap(polyhedron):
    """Sprite safety gap; the quarter layout has none."""
    check_polyhedron(polyhedron)
    if polyhedron == 'quarter_octahedron':
        return 0.0
    return DU if polyhedron == 'octahedron' else DV


def polyhedron_faces(polyhedron, gap=None):
    """Face descriptors of a polyhedron (gap is ignored for the quarter layout)."""
    if gap is None:
        gap = default_gap(polyhedron)
    else:
        check_polyhedron(polyhedron)
    if polyhedron == 'octahedron':
        return octahedron_faces(gap)
    if polyhedron == 'quarter_octahedron':
        return quarter_octahedron_faces()
    return icosahedron_faces(gap)
