"""
vectors.py — Vectorized 3-Vector Helpers
==========================================

Small building blocks shared by the mappings and the assembler.
Every function works on arrays whose last axis holds (x, y, z) and
broadcasts over all leading axes.

    normalize:       v / |v|
    bary_normalize:  v / (v.x + v.y + v.z)
    lerp / slerp:    straight-line and great-circle interpolation
"""

import jax
import jax.numpy as jnp
jax.config.update("jax_enable_x64", True)


TAU = 2 * jnp.pi

EX = jnp.array([1.0, 0.0, 0.0])
EY = jnp.array([0.0, 1.0, 0.0])
EZ = jnp.array([0.0, 0.0, 1.0])

# Below this sin(angle) two slerp endpoints count as parallel
_PARALLEL_EPS = 1e-12


def frac(x, y):
    """Division x / y with 0 / 0 := 0 (avoids NaN at degenerate grid rows)."""
    x = jnp.asarray(x, dtype=float)
    y = jnp.asarray(y, dtype=float)
    zero = y == 0
    return jnp.where(zero, 0.0, x / jnp.where(zero, 1.0, y))


def norm(v):
    return jnp.sqrt(jnp.sum(v * v, axis=-1))


def normalize(v):
    """Scale vectors to unit length.  Zero vectors stay zero."""
    v = jnp.asarray(v, dtype=float)
    length = norm(v)[..., None]
    return v / jnp.where(length == 0, 1.0, length)


def bary_normalize(v):
    """Scale vectors so that their components sum to 1."""
    v = jnp.asarray(v, dtype=float)
    total = jnp.sum(v, axis=-1)[..., None]
    return v / jnp.where(total == 0, 1.0, total)


def dot(a, b):
    return jnp.sum(a * b, axis=-1)


def lerp(a, b, t):
    """Linear interpolation, t broadcast against the leading axes."""
    t = jnp.asarray(t, dtype=float)[..., None]
    return (1.0 - t) * a + t * b


def slerp(a, b, t):
    """
    Spherical linear interpolation between directions a and b.

    Args:
        a, b: (..., 3) vectors (usually unit length)
        t:    (...)    interpolation parameter, 0 -> a, 1 -> b

    Returns:
        (..., 3) points on the great-circle arc from a to b.  Where a and b
        are parallel the arc is undefined and plain lerp is used instead.
    """
    a = jnp.asarray(a, dtype=float)
    b = jnp.asarray(b, dtype=float)
    t = jnp.asarray(t, dtype=float)

    cos_omega = dot(a, b) / jnp.where(norm(a) * norm(b) == 0, 1.0, norm(a) * norm(b))
    omega = jnp.arccos(jnp.clip(cos_omega, -1.0, 1.0))
    sin_omega = jnp.sin(omega)

    parallel = sin_omega < _PARALLEL_EPS
    safe_sin = jnp.where(parallel, 1.0, sin_omega)
    wa = jnp.where(parallel, 1.0 - t, jnp.sin((1.0 - t) * omega) / safe_sin)
    wb = jnp.where(parallel, t, jnp.sin(t * omega) / safe_sin)
    return wa[..., None] * a + wb[..., None] * b
