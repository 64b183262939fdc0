"""
make_sprite.py — Equirectangular Image to Polyhedron Sprite
============================================================

Reads an equirectangular texture (.npy array or any image format
matplotlib can read, north at the top) and writes the octahedron,
icosahedron or quarter-octahedron sprite texture.

Usage:
    python make_sprite.py earth.png sprite.png
    python make_sprite.py earth.png sprite.png --polyhedron icosahedron --width 2048
    python make_sprite.py earth.npy sprite.png --strategy min_excess --offset 0.25
    python make_sprite.py earth.png quarter2.png --polyhedron quarter_octahedron --quadrant 2
"""
import argparse
import logging

import numpy as np
import matplotlib
matplotlib.use('Agg')
import matplotlib.pyplot as plt

from polysphere.polyhedra import POLYHEDRA
from polysphere.sprite import STRATEGIES, equirectangular_sampler, sample_sprite, sprite_size

logger = logging.getLogger("make_sprite")


def load_image(path):
    """Image as a float array in [0, 1], shape (H, W) or (H, W, C)."""
    if path.endswith('.npy'):
        image = np.load(path)
    else:
        image = plt.imread(path)
    image = np.asarray(image)
    if image.dtype.kind in 'ui':
        image = image / np.iinfo(image.dtype).max
    return image.astype(float)


def main():
    parser = argparse.ArgumentParser(
        description="Convert an equirectangular texture to a polyhedron sprite")
    parser.add_argument('source', help='equirectangular image (.npy, .png, ...)')
    parser.add_argument('output', help='sprite image (.png) or array (.npy)')
    parser.add_argument('--polyhedron', default='octahedron', choices=POLYHEDRA)
    parser.add_argument('--strategy', default='closed_form', choices=STRATEGIES,
                        help='face selection for sprite pixels')
    parser.add_argument('--width', type=int, default=1024, help='sprite width in pixels')
    parser.add_argument('--height', type=int, default=None,
                        help='sprite height (default: equilateral faces)')
    parser.add_argument('--offset', type=float, default=0.0,
                        help='longitude rotation in turns')
    parser.add_argument('--quadrant', type=int, default=0, choices=range(4),
                        help='longitude quadrant of a quarter_octahedron sprite')
    parser.add_argument('--gap', type=float, default=None,
                        help='safety gap between sprite triangles')
    parser.add_argument('--verbose', action='store_true')
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s | %(message)s",
    )

    image = load_image(args.source)
    logger.info("source %s: %s", args.source, image.shape)

    height = args.height
    if height is None:
        _, height = sprite_size(args.polyhedron, args.width, args.gap)
    logger.info("%s sprite %dx%d (%s)", args.polyhedron, args.width, height, args.strategy)

    sprite = sample_sprite(
        equirectangular_sampler(image), args.width, height,
        polyhedron=args.polyhedron, strategy=args.strategy,
        offset=args.offset - args.quadrant / 4, gap=args.gap,
    )

    if args.output.endswith('.npy'):
        np.save(args.output, sprite)
    else:
        if sprite.shape[-1] == 1:
            sprite = sprite[..., 0]
        plt.imsave(args.output, np.clip(sprite, 0.0, 1.0), cmap='gray' if sprite.ndim == 2 else None)
    print(f"  Sprite → {args.output}")


if __name__ == "__main__":
    main()
