"""
polysphere — Sphere Triangulation from Subdivided Polyhedra
============================================================

Triangulates the unit sphere by subdividing the faces of an octahedron
or icosahedron, placing the grid points with one of several mappings,
and packs the result into renderable vertex buffers together with a
sprite texture layout converted from equirectangular images.

Modules:
    vectors       — normalize, barycentric normalize, lerp / slerp
    grid          — triangular grid walk, vertex indexing, triangle emission
    solver        — angular-ratio fixed-point solver (asin_based mapping)
    mappings      — barycentric → sphere vertex placements, mapping registry
    triangulation — single-face triangulations, interpolation, edge statistics
    polyhedra     — octahedron / icosahedron face descriptors and sprite nets
    assembly      — whole-polyhedron vertex, normal, uv and index buffers
    sprite        — equirectangular → sprite conversion (two face selectors)
    latlon        — lon/lat grid rolled from the flat map onto the sphere
    folding       — foldable octahedron / icosahedron nets
"""
