"""
solver.py — Angular-Ratio Fixed-Point Solver
==============================================

For a point p on the reference octahedron face (p.x + p.y + p.z = 1,
all components >= 0) find a unit vector v whose arc sines are in the
ratio of p:

    asin(v.x) : asin(v.y) : asin(v.z)  =  p.x : p.y : p.z

This is the vertex placement of the `asin_based` mapping.  Each point is
solved independently by the fixed-point iteration

    angles = bary_normalize(asin(guess))
    offset = angles - p
    guess  = normalize(bary_normalize(guess) - offset)

until |offset| < tolerance.  The whole batch runs in one jitted
jax.lax.while_loop that stops once every point has converged or the
iteration cap is hit.  The seed is the sine_based point, which is
already exact at the corners and along the edges.
"""

import logging

import jax
import jax.numpy as jnp

from .vectors import TAU, norm, normalize, bary_normalize

logger = logging.getLogger(__name__)

MAX_ITERATIONS = 30
TOLERANCE = 1e-10


@jax.jit
def _iterate(p, max_iterations, tolerance):
    """Run the fixed-point loop; returns (guess, iterations, done)."""
    batch_shape = p.shape[:-1]

    def cond(state):
        step, _, _, done = state
        return (step < max_iterations) & ~jnp.all(done)

    def body(state):
        step, guess, iterations, done = state
        angles = bary_normalize(jnp.arcsin(jnp.clip(guess, -1.0, 1.0)))
        offset = angles - p
        converged = norm(offset) < tolerance

        iterations = jnp.where(converged & ~done, step, iterations)
        done = done | converged
        update = normalize(bary_normalize(guess) - offset)
        guess = jnp.where(done[..., None], guess, update)
        return step + 1, guess, iterations, done

    state = (jnp.asarray(0, dtype=jnp.int32),
             normalize(jnp.sin(TAU / 4 * p)),
             jnp.full(batch_shape, max_iterations, dtype=jnp.int32),
             jnp.zeros(batch_shape, dtype=bool))
    _, guess, iterations, done = jax.lax.while_loop(cond, body, state)
    return guess, iterations, done


def solve_angular_ratio(p, max_iterations=MAX_ITERATIONS, tolerance=TOLERANCE):
    """
    Solve the angular ratio problem for a batch of target points.

    Args:
        p:              (..., 3) normalized barycentric targets
        max_iterations: hard cap on fixed-point steps
        tolerance:      L2 distance of the angle ratios from p

    Returns:
        v:          (..., 3) unit vectors
        iterations: (...) int array, steps each point needed (0 if the seed
                    was already exact, max_iterations if it never converged)
    """
    p = jnp.asarray(p, dtype=float)
    guess, iterations, done = _iterate(p, max_iterations, tolerance)

    n_failed = int(jnp.sum(~done))
    if n_failed:
        logger.warning(
            "angular ratio iteration failed for %d of %d points after %d steps",
            n_failed, done.size, max_iterations)

    return guess, iterations
