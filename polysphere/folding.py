"""
folding.py — Foldable Octahedron and Icosahedron Nets
=======================================================

Unfolds the (unsubdivided) polyhedra into the sprite nets of
polyhedra.py, so that a sprite texture can be shown on the flat net and
folded back onto the solid.

    bend   1 = closed polyhedron, 0 = flat net
    shift  0 = southern faces hang below the equator,
           1 = southern faces moved up between the northern ones,
               giving the rectangular sprite layout

Net vertices are addressed through IntEnum tables; vertices shared by
several faces in the solid are separate net vertices, because they have
different texture coordinates.
"""

from enum import IntEnum

import numpy as np

from .polyhedra import DU, DV, HEIGHT, RADIUS

TAU = 2 * np.pi


def _rotate(v, axis, angle):
    """Rotate v by angle around axis (Rodrigues' formula)."""
    k = axis / np.linalg.norm(axis)
    c, s = np.cos(angle), np.sin(angle)
    return v * c + np.cross(k, v) * s + k * np.dot(k, v) * (1 - c)


def _slerp(a, b, t):
    omega = np.arccos(np.clip(np.dot(a, b) / (np.linalg.norm(a) * np.linalg.norm(b)), -1, 1))
    if np.sin(omega) < 1e-12:
        return (1 - t) * a + t * b
    return (np.sin((1 - t) * omega) * a + np.sin(t * omega) * b) / np.sin(omega)


def flip_triangles(indices):
    """Reverse the winding of a flat triangle index buffer (back faces)."""
    return np.asarray(indices).reshape(-1, 3)[:, [0, 2, 1]].reshape(-1)


# ============================================================
# Octahedron
# ============================================================
#
#             .       .       .       .
#            / \     / \     / \     / \
#           /  0  \ /  1  \ /  2  \ /  3  \
#          X---+---X-------X-------X-------X
#           \4a|4b/ \  5  / \  6  / \  7  /
#            \ | /   \   /   \   /   \   /
#             '       '       '       '
#
# Face 4 is cut in halves so that the net fits into a rectangle.  Each
# face has an equator edge from W to E and a pole vertex (N or S).

class OctaNetVertex(IntEnum):
    E0 = 0
    N0 = 1
    W0 = 2
    E1 = 3
    N1 = 4
    W1 = 5
    E2 = 6
    N2 = 7
    W2 = 8
    E3 = 9
    N3 = 10
    W3 = 11
    W4A = 12
    S4A = 13
    E4A = 14
    W4B = 15
    S4B = 16
    E4B = 17
    W5 = 18
    S5 = 19
    E5 = 20
    W6 = 21
    S6 = 22
    E6 = 23
    W7 = 24
    S7 = 25
    E7 = 26


_O = OctaNetVertex

# Counter-clockwise seen from outside the folded octahedron
OCTA_NET_INDICES = np.array([
    _O.W0, _O.N0, _O.E0,
    _O.W1, _O.N1, _O.E1,
    _O.W2, _O.N2, _O.E2,
    _O.W3, _O.N3, _O.E3,
    _O.E4A, _O.S4A, _O.W4A,
    _O.E4B, _O.S4B, _O.W4B,
    _O.E5, _O.S5, _O.W5,
    _O.E6, _O.S6, _O.W6,
    _O.E7, _O.S7, _O.W7,
], dtype=np.uint32)


def octa_net_uvs(du=DU):
    """
    Texture coordinates of the octahedron net vertices:

      1  +---X.X-------X.X------ X.X-------X.X---+
         |4b// \\  5  // \\  6  // \\  7  // \\4a|
         |//  0  \\ //  1  \\ //  2  \\ //  3  \\|
      0  'X-------X'X-------X'X-------X'X-------X'
         0/8  1/8  2/8  3/8  4/8  5/8  6/8  7/8  8/8
    """
    uvs = np.zeros((len(OctaNetVertex), 2))
    uvs[_O.W4B] = (0 / 8, 1)
    uvs[_O.S4B] = (0 / 8, 0)
    uvs[_O.E4B] = (1 / 8 - du / 2, 1)
    uvs[_O.W4A] = (7 / 8 + du / 2, 1)
    uvs[_O.S4A] = (8 / 8, 0)
    uvs[_O.E4A] = (8 / 8, 1)
    for q, (w, n, e) in enumerate([(_O.W0, _O.N0, _O.E0), (_O.W1, _O.N1, _O.E1),
                                   (_O.W2, _O.N2, _O.E2), (_O.W3, _O.N3, _O.E3)]):
        uvs[w] = (2 * q / 8 + du / 2, 0)
        uvs[n] = ((2 * q + 1) / 8, 1)
        uvs[e] = ((2 * q + 2) / 8 - du / 2, 0)
    for q, (w, s, e) in enumerate([(_O.W5, _O.S5, _O.E5), (_O.W6, _O.S6, _O.E6),
                                   (_O.W7, _O.S7, _O.E7)]):
        uvs[w] = ((2 * q + 1) / 8 + du / 2, 1)
        uvs[s] = ((2 * q + 2) / 8, 0)
        uvs[e] = ((2 * q + 3) / 8 - du / 2, 1)
    return uvs


OCTA_NET_UVS = octa_net_uvs()


_HALF_DIHEDRAL = TAU / 4 - np.arccos(-1 / 3) / 2
# horizontal spacing of the unfolded faces
_DU_DISPLAY = 0.02


def fold_octahedron(bend, shift=0.0):
    """
    Net vertex positions of a partly folded octahedron.

    The faces hang off the quadrant edges of the equator square; bend
    turns the equator hinges by up to 45°/135° and the pole hinges by
    half the dihedral angle.

    Returns:
        (27, 3) positions indexed by OctaNetVertex
    """
    ex = np.array([1.0, 0.0, 0.0])
    r2, r1_5 = np.sqrt(2), np.sqrt(1.5)

    c45, s45 = np.cos(TAU / 8 * bend), np.sin(TAU / 8 * bend)
    c135, s135 = np.cos(3 * TAU / 8 * bend), np.sin(3 * TAU / 8 * bend)
    c_hd, s_hd = np.cos(_HALF_DIHEDRAL * bend), np.sin(_HALF_DIHEDRAL * bend)

    a = r2 * np.array([-s45, 0.0, c45])
    b = r2 * np.array([-s135, 0.0, c135])
    c = r1_5 * np.array([-s_hd * c45, c_hd, -s_hd * s45])
    d = r1_5 * np.array([-s_hd * c135, c_hd, -s_hd * s135])

    ex_a = ex + a
    ex_a_b = ex_a + b
    ex_a2_c = ex + a / 2 + c
    ex_a_b2 = ex_a + b / 2
    ex_a_b2_d = ex_a_b2 + d

    adj = np.array([shift * (1 - shift), shift * r1_5, -shift * np.sqrt(0.5)])
    flip_z = np.array([1.0, 1.0, -1.0])
    south = np.array([1.0, -1.0, 1.0])

    pos = np.zeros((len(OctaNetVertex), 3))

    def put(nw, ne, sw, se, p):
        pos[nw] = p * flip_z
        pos[ne] = p
        pos[sw] = p * south * flip_z + adj
        pos[se] = p * south + adj

    put(_O.W0, _O.E3, _O.W4A, _O.E7, ex_a_b)
    put(_O.N0, _O.N3, _O.S4A, _O.S7, ex_a_b2_d)
    put(_O.E0, _O.W3, _O.E4B, _O.W7, ex_a)
    put(_O.W1, _O.E2, _O.W5, _O.E6, ex_a)
    put(_O.N1, _O.N2, _O.S5, _O.S6, ex_a2_c)
    put(_O.E1, _O.W2, _O.E5, _O.W6, ex)

    pos[_O.E4A] = ex_a_b2 * south * flip_z + adj
    pos[_O.W4B] = ex_a_b2 * south * flip_z + adj
    pos[_O.S4B] = ex_a_b2_d * south * flip_z + adj

    # spread the unfolded faces apart along z
    dz = _DU_DISPLAY * shift
    for step, face in [(-4, (_O.W4B, _O.S4B, _O.E4B)), (-3, (_O.W0, _O.N0, _O.E0)),
                       (-2, (_O.W5, _O.S5, _O.E5)), (-1, (_O.W1, _O.N1, _O.E1)),
                       (1, (_O.W2, _O.N2, _O.E2)), (2, (_O.W7, _O.S7, _O.E7)),
                       (3, (_O.W3, _O.N3, _O.E3))]:
        pos[list(face), 2] += step * dz
    half_4a = [_O.W4A, _O.S4A, _O.E4A]
    pos[half_4a, 2] += 4 * (_DU_DISPLAY + r2) * shift
    pos[half_4a, 0] += adj[0]
    return pos


# ============================================================
# Icosahedron
# ============================================================
#
#             a       b       c       d       e
#            / \     / \     / \     / \     / \
#           /  0  \ /  1  \ /  2  \ /  3  \ /  4  \
#          f-------g-------h-------i-------j-------k
#         /|\  5  / \  6  / \  7  / \  8  / \  9  /|\
#        /  |14\ / 10  \ / 11  \ / 12  \ / 13  \ /14|  \
#       y---l---m-------n-------o-------p-------q---r---z
#        \  |19/ \ 15  / \ 16  / \ 17  / \ 18  / \19|  /
#         \|/     \ /     \ /     \ /     \ /     \|/
#          s       t       u       v       w       x
#
# Faces 14 and 19 are cut in halves; y and z are only used to place l
# and r at the middle of edges ym and qz.

class IcoFold(IntEnum):
    """Working vertices a..z of the icosahedron fold."""
    A = 0
    B = 1
    C = 2
    D = 3
    E = 4
    F = 5
    G = 6
    H = 7
    I = 8
    J = 9
    K = 10
    L = 11
    M = 12
    N = 13
    O = 14
    P = 15
    Q = 16
    R = 17
    S = 18
    T = 19
    U = 20
    V = 21
    W = 22
    X = 23
    Y = 24
    Z = 25


# Vertex out = rotate c around the hinge a-b (fixing a), in this order.
# h and i are fixed, o is placed separately.
_ICO_STEPS = tuple(
    tuple(IcoFold[ch.upper()] for ch in step)
    for step in """
        nhoi ghno mgnh fgmn yfmg
        poih jpio qpji kqjp zqkj
        agfm bhgn ciho djip ekjq
        symf tmng unoh vopi wpqj xqzk
    """.split()
)


class IcoNetVertex(IntEnum):
    """
    Net vertices.  L2..R2 duplicate l..r on the upper edge of the
    rectangle, where faces 15-19 are moved up.
    """
    A = 0
    B = 1
    C = 2
    D = 3
    E = 4
    F = 5
    G = 6
    H = 7
    I = 8
    J = 9
    K = 10
    L = 11
    M = 12
    N = 13
    O = 14
    P = 15
    Q = 16
    R = 17
    L2 = 18
    M2 = 19
    N2 = 20
    O2 = 21
    P2 = 22
    Q2 = 23
    R2 = 24
    S = 25
    T = 26
    U = 27
    V = 28
    W = 29
    X = 30


# working vertex of every net vertex
_ICO_NET_SOURCE = np.array([IcoFold[v.name[0]] for v in IcoNetVertex], dtype=np.int64)
# faces 15-19, moved by `shift`
_ICO_SOUTHERN = np.array([v >= IcoNetVertex.L2 for v in IcoNetVertex])


def _net_triangles(table):
    return np.array([IcoNetVertex[name] for tri in table.split() for name in tri.split(',')],
                    dtype=np.uint32)


# Counter-clockwise seen from outside the folded icosahedron
ICO_NET_INDICES = _net_triangles("""
    A,G,F  B,H,G  C,I,H  D,J,I  E,K,J
    G,M,F  H,N,G  I,O,H  J,P,I  K,Q,J
    F,M,L  G,N,M  H,O,N  I,P,O  J,Q,P  K,R,Q
    M2,S,L2  N2,T,M2  O2,U,N2  P2,V,O2  Q2,W,P2  R2,X,Q2
""")


def ico_net_uvs(dv=DV):
    """
    Texture coordinates of the icosahedron net vertices:

      1         L---M-------N-------O-------P-------Q---R
      1 - dv    |19/a\\ 15  /b\\ 16  /c\\ 17  /d\\ 18  /e\\19|
      1/2+dv/2  s/  0  \\t/  1  \\u/  2  \\v/  3  \\w/  4  \\x
      1/2-dv/2  f-------g-------h-------i-------j-------k
                |14\\ / 10  \\ / 11  \\ / 12  \\ / 13  \\ /14|
      0         l---m-------n-------o-------p-------q---r
    """
    rows = [
        ([0.1, 0.3, 0.5, 0.7, 0.9], 1 - dv),                 # a-e
        ([0.0, 0.2, 0.4, 0.6, 0.8, 1.0], (1 - dv) / 2),      # f-k
        ([0.0, 0.1, 0.3, 0.5, 0.7, 0.9, 1.0], 0.0),          # l-r
        ([0.0, 0.1, 0.3, 0.5, 0.7, 0.9, 1.0], 1.0),          # L2-R2
        ([0.0, 0.2, 0.4, 0.6, 0.8, 1.0], (1 + dv) / 2),      # s-x
    ]
    return np.array([(u, v) for us, v in rows for u in us])


ICO_NET_UVS = ico_net_uvs()

# external dihedral angle, ~ 180° - 138.2°
_ICO_EXTERNAL_DIHEDRAL = np.arccos(np.sqrt(5) / 3)


def fold_icosahedron(bend, shift=0.0, dv=DV):
    """
    Net vertex positions of a partly folded icosahedron.

    h and i stay where they are on the closed icosahedron.  o swings
    from straight below the middle of edge hi (flat) to its folded
    position; every other vertex follows by rotating a known vertex
    around a hinge edge by the interpolated dihedral angle.

    Returns:
        (31, 3) positions indexed by IcoNetVertex
    """
    ix = RADIUS * np.cos(TAU / 10)
    iz = RADIUS * np.sin(TAU / 10)

    work = np.zeros((len(IcoFold), 3))
    work[IcoFold.H] = (ix, HEIGHT, -iz)
    work[IcoFold.I] = (ix, HEIGHT, iz)

    mid_hi = np.array([ix, HEIGHT, 0.0])
    o_height = np.array([RADIUS, -HEIGHT, 0.0]) - mid_hi
    o_height_flat = np.array([0.0, -np.linalg.norm(o_height), 0.0])
    work[IcoFold.O] = mid_hi + _slerp(o_height_flat, o_height, bend)

    angle = TAU / 2 - bend * _ICO_EXTERNAL_DIHEDRAL
    for out, a, b, c in _ICO_STEPS:
        work[out] = work[a] + _rotate(work[c] - work[a], work[b] - work[a], angle)
    work[IcoFold.L] = (work[IcoFold.M] + work[IcoFold.Y]) / 2
    work[IcoFold.R] = (work[IcoFold.Q] + work[IcoFold.Z]) / 2

    shift_xy = np.array([
        shift * (1 - shift),
        (work[IcoFold.C, 1] - work[IcoFold.O, 1] + dv) * shift,
        0.0,
    ])
    pos = work[_ICO_NET_SOURCE]
    pos[_ICO_SOUTHERN] += shift_xy
    return pos
