"""
sprite.py — Equirectangular Texture to Polyhedron Sprite
==========================================================

A sprite is a single texture holding one triangular region per
polyhedron face, laid out as the polyhedron's net (see polyhedra.py for
the layouts).  This module converts an equirectangular source
texture (longitude/latitude) into such a sprite.

For every sprite pixel (u, v):

    (u, v, 1)  --M-->  barycentric (w, p, e) on the owning face
               -->     3D point on the face  -->  normalized direction
               -->     (lon, lat)  -->  (s, t) in [0, 1]^2  -->  color

where M inverts the matrix of the face's corner (u, v, 1) rows.  Two
ways to find the owning face are provided:

    min_excess:   evaluate all faces, keep the one whose barycentric
                  coordinates are least negative (sum(max(-b, 0)));
                  pixels too far from every face are "unused"
    closed_form:  quadrant / diagonal arithmetic on the regular layout,
                  one reference face per face shape

Unused pixels are painted with a sentinel color (red by default, NaN
for gray images) so that mapping errors are visible instead of silently
sampled.
"""

import logging
from typing import NamedTuple

import jax.numpy as jnp
import numpy as np

from .polyhedra import (DU, DV, check_polyhedron, default_gap, icosahedron_faces,
                        octahedron_corner_uvs, polyhedron_faces)
from .vectors import TAU, bary_normalize, normalize

logger = logging.getLogger(__name__)

# Pixels whose barycentric excess exceeds this belong to no face
EXCESS_THRESHOLD = 0.06

STRATEGIES = ('closed_form', 'min_excess')


class SpriteFaceTransform(NamedTuple):
    name: str
    uv_to_bary: np.ndarray   # (3, 3), bary = uv_to_bary @ (u, v, 1)
    corners: np.ndarray      # (3, 3) 3D corners, rows W, P, E
    corner_uvs: np.ndarray   # (3, 2)


# ============================================================
# Per-face transforms
# ============================================================

def barycentric_transform(corner_uvs):
    """
    Matrix M with M @ (u, v, 1) = barycentric coordinates for the
    triangle with the given corner texture coordinates.

    The rows (u_c, v_c, 1) of the corner matrix A satisfy
    bary @ A = (u, v, 1); the 1s encode w + p + e = 1.
    """
    corner_uvs = np.asarray(corner_uvs, dtype=float)
    A = np.column_stack([corner_uvs, np.ones(3)])
    return np.linalg.inv(A).T


def make_transform(name, corners, corner_uvs):
    return SpriteFaceTransform(
        name=name,
        uv_to_bary=barycentric_transform(corner_uvs),
        corners=np.asarray(corners, dtype=float),
        corner_uvs=np.asarray(corner_uvs, dtype=float),
    )


def build_sprite_transform(polyhedron, gap=None, wrap=True):
    """
    Sprite transforms for all faces of a polyhedron.

    Args:
        polyhedron: one of polyhedra.POLYHEDRA
        gap:        safety gap (defaults to polyhedra.DU / DV)
        wrap:       also add copies, shifted by one texture width, of
                    faces reaching past u = 0 or u = 1

    Returns:
        list of SpriteFaceTransform
    """
    transforms = []
    for face in polyhedron_faces(polyhedron, gap):
        transforms.append(make_transform(face.name, face.corners, face.corner_uvs))
        if not wrap:
            continue
        us = face.corner_uvs[:, 0]
        shift = -1.0 if us.max() > 1 else 1.0 if us.min() < 0 else 0.0
        if shift:
            shifted = face.corner_uvs + [shift, 0.0]
            transforms.append(make_transform(face.name + '~', face.corners, shifted))
    return transforms


def uv_to_barycentric(transform, u, v):
    """(..., 3) barycentric coordinates of sprite points on a face."""
    u, v = jnp.broadcast_arrays(jnp.asarray(u, dtype=float), jnp.asarray(v, dtype=float))
    uv1 = jnp.stack([u, v, jnp.ones_like(u)], axis=-1)
    return uv1 @ jnp.asarray(transform.uv_to_bary).T


def barycentric_to_uv(transform, bary):
    return jnp.asarray(bary) @ jnp.asarray(transform.corner_uvs)


def barycentric_to_position(transform, bary):
    """Point on the (flat) face."""
    return jnp.asarray(bary) @ jnp.asarray(transform.corners)


def position_to_barycentric(transform, pos):
    """
    Central projection of a direction onto the face plane, expressed in
    barycentric coordinates of the face.
    """
    weights = jnp.asarray(pos) @ jnp.asarray(np.linalg.inv(transform.corners))
    return bary_normalize(weights)


def position_to_lonlat(pos):
    """Longitude atan2(z, x) and latitude asin(y / |pos|)."""
    pos = normalize(pos)
    lon = jnp.arctan2(pos[..., 2], pos[..., 0])
    lat = jnp.arcsin(jnp.clip(pos[..., 1], -1.0, 1.0))
    return lon, lat


def lonlat_to_position(lon, lat):
    lon = jnp.asarray(lon, dtype=float)
    lat = jnp.asarray(lat, dtype=float)
    return jnp.stack([
        jnp.cos(lat) * jnp.cos(lon),
        jnp.sin(lat),
        jnp.cos(lat) * jnp.sin(lon),
    ], axis=-1)


def lonlat_to_texcoord(lon, lat, offset=0.0):
    """
    Equirectangular texture coordinates: s = lon / 2pi - offset, wrapped
    into [0, 1); t = lat / pi + 1/2 (t = 1 at the north pole).
    """
    s = jnp.mod(lon / TAU - offset, 1.0)
    t = lat / (TAU / 2) + 0.5
    return s, t


# ============================================================
# Face selection: minimal barycentric excess
# ============================================================

def select_face_min_excess(transforms, u, v, threshold=EXCESS_THRESHOLD):
    """
    Find the owning face of sprite points by trying every face.

    Args:
        transforms: list of SpriteFaceTransform
        u, v:       sprite coordinates (any matching shape)
        threshold:  largest accepted excess sum(max(-bary, 0))

    Returns:
        face:   (...) int index into transforms, -1 for unused points
        bary:   (..., 3) barycentric coordinates on that face
        excess: (...) excess of the chosen face
    """
    u, v = jnp.broadcast_arrays(jnp.asarray(u, dtype=float), jnp.asarray(v, dtype=float))
    uv1 = jnp.stack([u, v, jnp.ones_like(u)], axis=-1)
    M = jnp.stack([jnp.asarray(t.uv_to_bary) for t in transforms])   # (F, 3, 3)

    bary_all = jnp.einsum('fij,...j->...fi', M, uv1)                   # (..., F, 3)
    excess_all = jnp.sum(jnp.maximum(-bary_all, 0.0), axis=-1)        # (..., F)
    best = jnp.argmin(excess_all, axis=-1)
    excess = jnp.take_along_axis(excess_all, best[..., None], axis=-1)[..., 0]
    bary = jnp.take_along_axis(bary_all, best[..., None, None], axis=-2)[..., 0, :]

    face = jnp.where(excess > threshold, -1, best)
    return face, bary, excess


def min_excess_lonlat(u, v, polyhedron, gap=None, threshold=EXCESS_THRESHOLD):
    """lon, lat, valid for sprite points via select_face_min_excess."""
    transforms = build_sprite_transform(polyhedron, gap)
    face, bary, _ = select_face_min_excess(transforms, u, v, threshold)
    corners = jnp.stack([jnp.asarray(t.corners) for t in transforms])
    pos = jnp.einsum('...i,...ij->...j', bary, corners[jnp.maximum(face, 0)])
    lon, lat = position_to_lonlat(pos)
    return lon, lat, face >= 0


# ============================================================
# Face selection: closed form
# ============================================================

def octahedron_sprite_lonlat(u, v, du=DU):
    """
    Closed-form inverse of the octahedron sprite layout.

    The quadrant q and the north/south flag follow from which side of
    the two diagonals through (u, v) the point lies.  The point is then
    moved onto face N0 (shifting southern faces right by 1/8 and turning
    them upside down), converted to barycentric (w, p, e), and the
    quadrant is added back as a longitude offset of q * 90°.

    Returns:
        lon, lat (radians); every point of the sprite is valid
    """
    u = jnp.asarray(u, dtype=float)
    v = jnp.asarray(v, dtype=float)
    M = jnp.asarray(barycentric_transform(octahedron_corner_uvs(du)))

    diag = du / 2 + (1 / 8 - du) * v
    q = jnp.floor((u + diag) * 4)
    north = q == jnp.floor((u - diag) * 4)

    uu = u - q / 4 + jnp.where(north, 0.0, 1 / 8)
    vv = jnp.where(north, v, 1.0 - v)
    uv1 = jnp.stack(jnp.broadcast_arrays(uu, vv, jnp.ones_like(uu)), axis=-1)
    bary = uv1 @ M.T
    w, e = bary[..., 0], bary[..., 2]
    # The pole coordinate p equals vv; its sign gives the hemisphere.
    y = jnp.where(north, v, v - 1.0)

    lat = jnp.arcsin(y / jnp.sqrt(w * w + y * y + e * e))
    lon = jnp.arctan2(e, w) + q * TAU / 4
    return lon, lat


def _icosahedron_reference_faces(dv):
    """
    Transforms of the reference faces 14, 5, 0, 19, indexed by
    2 * polar + upper.  Faces 14 and 19 are used in their copy left of
    u = 0, so that their apexes sit at u = 0.
    """
    faces = icosahedron_faces(dv)
    refs = []
    for number in (14, 5, 0, 19):
        face = faces[number]
        shift = -1.0 if number in (14, 19) else 0.0
        refs.append(make_transform(face.name, face.corners, face.corner_uvs + [shift, 0.0]))
    return refs


def icosahedron_sprite_lonlat(u, v, dv=DV):
    """
    Closed-form inverse of the icosahedron sprite layout.

    The sprite is cut into fifths (u) and into a polar and an equatorial
    band (v).  Inside a fifth, the diagonal edges split each band into an
    "upper" and a "lower" face.  The flags select one of four reference
    faces; the fifth index (plus one for some right halves) gives the u
    offset to that reference face, which becomes a longitude offset.

    Returns:
        lon, lat (radians); every point of the sprite is valid
    """
    u, v = jnp.broadcast_arrays(jnp.asarray(u, dtype=float), jnp.asarray(v, dtype=float))
    refs = _icosahedron_reference_faces(dv)
    M = jnp.stack([jnp.asarray(t.uv_to_bary) for t in refs])
    corners = jnp.stack([jnp.asarray(t.corners) for t in refs])

    u5 = u * 5
    fifth = jnp.floor(u5)
    u5frac = u5 - fifth
    right = u5frac > 0.5

    polar = v > (1 - dv) / 2
    lo = jnp.where(polar, 0.5, (1 - dv) / 2)
    hi = jnp.where(polar, 1 - dv / 2, 0.0)
    s = 2 * jnp.where(right, 1 - u5frac, u5frac)
    upper = v > lo + (hi - lo) * s

    u_offset = (fifth + (right & (upper == polar))) * 0.2
    ref = 2 * polar.astype(jnp.int32) + upper.astype(jnp.int32)

    uv1 = jnp.stack([u - u_offset, v, jnp.ones_like(u)], axis=-1)
    bary = jnp.einsum('...ij,...j->...i', M[ref], uv1)
    pos = jnp.einsum('...i,...ij->...j', bary, corners[ref])

    lon = jnp.arctan2(pos[..., 2], pos[..., 0]) + u_offset * TAU
    lat = jnp.arctan2(pos[..., 1], jnp.hypot(pos[..., 0], pos[..., 2]))
    return lon, lat


def quarter_octahedron_sprite_lonlat(u, v, quadrant=0):
    """
    Closed-form inverse of the quarter-octahedron sprite layout.

    The diagonal u = v is the equator; above it lies the northern face.
    Both faces are undone at once by

        x = 1 - max(u, v),  y = v - u,  z = min(u, v)

    and the quadrant adds a longitude offset of quadrant * 90°.

    Returns:
        lon, lat (radians); every point of the unit square is valid
    """
    u, v = jnp.broadcast_arrays(jnp.asarray(u, dtype=float), jnp.asarray(v, dtype=float))
    x = 1.0 - jnp.maximum(u, v)
    y = v - u
    z = jnp.minimum(u, v)

    lat = jnp.arcsin(y / jnp.sqrt(x * x + y * y + z * z))
    lon = jnp.arctan2(z, x) + quadrant * TAU / 4
    return lon, lat


# ============================================================
# Sampling
# ============================================================

def check_strategy(strategy):
    if strategy not in STRATEGIES:
        raise ValueError(f"Unknown face selection strategy: {strategy!r} (expected one of {STRATEGIES})")


def sprite_lonlat(u, v, polyhedron='octahedron', strategy='closed_form', gap=None,
                  threshold=EXCESS_THRESHOLD):
    """
    Longitude and latitude shown at sprite points.

    Returns:
        lon, lat: radians
        valid:    False where no face owns the point (min_excess only)
    """
    check_strategy(strategy)
    if gap is None:
        gap = default_gap(polyhedron)
    else:
        check_polyhedron(polyhedron)

    if strategy == 'min_excess':
        return min_excess_lonlat(u, v, polyhedron, gap, threshold)

    if polyhedron == 'octahedron':
        lon, lat = octahedron_sprite_lonlat(u, v, gap)
    elif polyhedron == 'quarter_octahedron':
        lon, lat = quarter_octahedron_sprite_lonlat(u, v)
    else:
        lon, lat = icosahedron_sprite_lonlat(u, v, gap)
    return lon, lat, jnp.ones(jnp.shape(lon), dtype=bool)


def sprite_size(polyhedron, width, gap=None):
    """
    (width, height) of a sprite whose face triangles are (roughly)
    equilateral in pixels.  The quarter-octahedron sprite is square.
    """
    if gap is None:
        gap = default_gap(polyhedron)
    check_polyhedron(polyhedron)
    if polyhedron == 'octahedron':
        height = width * (1 / 4 - 2 * gap) * np.sqrt(3) / 2
    elif polyhedron == 'quarter_octahedron':
        height = width
    else:
        height = width * np.sqrt(3) / (5 * (1 - gap))
    return width, max(1, int(round(height)))


def pixel_centers(width, height):
    """
    Sprite coordinates of pixel centers.

    Returns:
        u, v: (height, width) arrays; row 0 is the top (v close to 1)
    """
    u = (np.arange(width) + 0.5) / width
    v = 1.0 - (np.arange(height) + 0.5) / height
    return np.meshgrid(u, v, indexing='xy')


def equirectangular_sampler(image):
    """
    Nearest-neighbour sampler for an equirectangular image.

    Args:
        image: (H, W) or (H, W, C) array; row 0 is the north edge

    Returns:
        sample(s, t) -> colors of shape s.shape + (C,); s wraps around,
        t is clamped to [0, 1]
    """
    image = np.asarray(image)
    if image.ndim == 2:
        image = image[:, :, None]
    H, W = image.shape[:2]

    def sample(s, t):
        s = np.mod(np.asarray(s, dtype=float), 1.0)
        t = np.clip(np.asarray(t, dtype=float), 0.0, 1.0)
        col = np.minimum((s * W).astype(np.int64), W - 1)
        row = np.clip(((1.0 - t) * H).astype(np.int64), 0, H - 1)
        return image[row, col]

    return sample


def sample_sprite(sampler, width, height=None, polyhedron='octahedron',
                  strategy='closed_form', offset=0.0, gap=None,
                  sentinel=None, threshold=EXCESS_THRESHOLD):
    """
    Render a sprite texture from an equirectangular sampler.

    Args:
        sampler:    function (s, t) -> colors, see equirectangular_sampler
        width:      sprite width in pixels
        height:     sprite height (default: sprite_size)
        polyhedron: one of polyhedra.POLYHEDRA
        strategy:   'closed_form' or 'min_excess' face selection
        offset:     longitude rotation in turns (subtracted from s); the
                    quarter-octahedron sprite of quadrant q uses -q / 4
        gap:        safety gap (defaults to polyhedra.DU / DV)
        sentinel:   color of pixels owned by no face; defaults to red
                    (1, 0, 0) for color images and NaN for gray ones
                    (fewer than 3 channels).  Channels past the sentinel
                    are filled with 1.

    Returns:
        (height, width, C) numpy image, row 0 at the top
    """
    if height is None:
        _, height = sprite_size(polyhedron, width, gap)
    u, v = pixel_centers(width, height)

    lon, lat, valid = sprite_lonlat(u, v, polyhedron, strategy, gap, threshold)
    s, t = lonlat_to_texcoord(lon, lat, offset)
    colors = np.asarray(sampler(np.asarray(s), np.asarray(t)), dtype=float)
    if colors.ndim == 2:
        colors = colors[:, :, None]

    channels = colors.shape[-1]
    if sentinel is None:
        sentinel = (np.nan,) if channels < 3 else (1.0, 0.0, 0.0)
    fill = np.ones(channels)
    sentinel = np.asarray(sentinel, dtype=float)[:channels]
    fill[:sentinel.shape[0]] = sentinel

    valid = np.asarray(valid)
    n_unused = int(np.sum(~valid))
    if n_unused:
        logger.debug("%d of %d sprite pixels are unused", n_unused, valid.size)
    return np.where(valid[..., None], colors, fill)
