"""
compare_mappings.py — Edge-Length Uniformity of the Vertex Mappings
====================================================================

Prints the great-circle edge length statistics of one subdivided face
for every mapping, and optionally plots the face grids side by side.

Usage:
    python compare_mappings.py                       # n = 4 8 16
    python compare_mappings.py --n 8 32 --mappings geodesic asin_based
    python compare_mappings.py --plot mappings.png --plot-n 8
"""
import argparse
import logging

import numpy as np
import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt

from polysphere.mappings import MAPPINGS
from polysphere.triangulation import arc_length_stats, generate_triangulation, grid_lines

logger = logging.getLogger("compare_mappings")


# ============================================================
# Table
# ============================================================

def uniformity_table(mappings, levels):
    """
    Returns:
        list of (mapping, n, stats) with stats from arc_length_stats
    """
    rows = []
    for name in mappings:
        for n in levels:
            logger.info("triangulating %s n=%d", name, n)
            rows.append((name, n, arc_length_stats(generate_triangulation(n, name))))
    return rows


def print_table(rows):
    print(f"  {'mapping':<20s} {'n':>4s} {'min':>10s} {'max':>10s} {'mean':>10s} {'max/min':>8s}")
    print("  " + "-" * 66)
    for name, n, s in rows:
        print(f"  {name:<20s} {n:4d} {s['min']:10.6f} {s['max']:10.6f} "
              f"{s['mean']:10.6f} {s['ratio']:8.4f}")


# ============================================================
# Plot
# ============================================================

def plot_faces(mappings, n, fname):
    """One face per mapping, seen along (1, 1, 1), projected onto its plane."""
    # orthonormal basis of the plane x + y + z = 0
    e1 = np.array([1.0, -1.0, 0.0]) / np.sqrt(2)
    e2 = np.array([1.0, 1.0, -2.0]) / np.sqrt(6)

    ncols = min(4, len(mappings))
    nrows = (len(mappings) + ncols - 1) // ncols
    fig, axes = plt.subplots(nrows, ncols, figsize=(4 * ncols, 4 * nrows), squeeze=False)
    for ax in axes.ravel():
        ax.set_axis_off()

    for ax, name in zip(axes.ravel(), mappings):
        for line in grid_lines(generate_triangulation(n, name)):
            line = np.asarray(line)
            ax.plot(line @ e1, line @ e2, 'k-', lw=0.6)
        ax.set_title(name)
        ax.set_aspect('equal')

    fig.suptitle(f"Face grids, n = {n}")
    fig.savefig(fname, dpi=150, bbox_inches='tight')
    plt.close(fig)
    print(f"  Plot → {fname}")


def main():
    parser = argparse.ArgumentParser(
        description="Compare edge-length uniformity of the sphere mappings")
    parser.add_argument('--n', nargs='+', type=int, default=[4, 8, 16],
                        help='subdivision levels')
    parser.add_argument('--mappings', nargs='+', default=list(MAPPINGS),
                        choices=list(MAPPINGS), help='mapping ids')
    parser.add_argument('--plot', default=None,
                        help='write a PNG with one face grid per mapping')
    parser.add_argument('--plot-n', type=int, default=8,
                        help='subdivision level of the plotted grids')
    parser.add_argument('--verbose', action='store_true')
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s | %(message)s",
    )

    print("=" * 70)
    print("  Mapping Uniformity (great-circle edge lengths)")
    print("=" * 70)
    print_table(uniformity_table(args.mappings, [n for n in args.n if n > 0]))

    if args.plot:
        plot_faces(args.mappings, args.plot_n, args.plot)


if __name__ == "__main__":
    main()
