# collisions.py

import logging
from typing import List

import numba
import numpy as np

from constants import LOGGER_NAME
from particle import Particle

logger = logging.getLogger(LOGGER_NAME)

# --- JIT-Compiled Collision Kernel ---
# Kept outside the resolver class and operating only on NumPy arrays and
# scalars, as required by Numba's nopython mode.

@numba.jit(nopython=True)
def _resolve_collisions_jit(positions, velocities, collision_distance, elasticity, collided):
    """
    Numba-accelerated pairwise collision detection and impulse resolution.

    Visits every unordered pair (i < j) in index order. Pairs are resolved
    sequentially, so a correction applied to an earlier pair is seen by the
    later ones. Modifies positions, velocities and collided in place and
    returns the number of resolved pairs.
    """
    num_particles = positions.shape[0]
    resolved = 0

    for i in range(num_particles):
        for j in range(i + 1, num_particles):
            dx = positions[j, 0] - positions[i, 0]
            dy = positions[j, 1] - positions[i, 1]
            distance = np.sqrt(dx * dx + dy * dy)

            # Coincident particles have no collision normal.
            if distance >= collision_distance or distance == 0.0:
                continue

            nx = dx / distance
            ny = dy / distance

            # Relative velocity along the normal. Non-negative means separating.
            rvx = velocities[j, 0] - velocities[i, 0]
            rvy = velocities[j, 1] - velocities[i, 1]
            velocity_along_normal = rvx * nx + rvy * ny
            if velocity_along_normal >= 0.0:
                continue

            # Equal unit masses share the impulse evenly.
            impulse = -(1.0 + elasticity) * velocity_along_normal / 2.0
            velocities[i, 0] -= impulse * nx
            velocities[i, 1] -= impulse * ny
            velocities[j, 0] += impulse * nx
            velocities[j, 1] += impulse * ny

            # Push apart by half the overlap each so they end exactly collision_distance apart.
            correction = (collision_distance - distance) * 0.5
            positions[i, 0] -= correction * nx
            positions[i, 1] -= correction * ny
            positions[j, 0] += correction * nx
            positions[j, 1] += correction * ny

            collided[i] = True
            collided[j] = True
            resolved += 1

    return resolved


class CollisionResolver:
    """
    Resolves elastic collisions between all pairs of particles.

    The sweep is O(n^2) over every pair each frame. That is fine at the
    network's scale (a few hundred particles at most) and keeps the exact
    pairwise order; a spatial grid would be needed well beyond that.

    Data Contract:
    - Inputs:
        - enabled (bool): when False, resolve() does nothing and particles may overlap.
        - elasticity (float): coefficient of restitution in [0, 1].
        - collision_distance (float): centre distance below which two particles collide.
        - highlight_duration (int): frames of collision glow after a hit.
    - Side Effects: resolve() modifies particle positions, velocities and
      collision glow timers in place.
    """
    def __init__(self, enabled: bool, elasticity: float, collision_distance: float, highlight_duration: int):
        self.enabled = enabled
        self.elasticity = elasticity
        self.collision_distance = collision_distance
        self.highlight_duration = highlight_duration

    @classmethod
    def from_config(cls, config: dict) -> "CollisionResolver":
        return cls(
            enabled=config['collision_enabled'],
            elasticity=config['collision_elasticity'],
            collision_distance=config['collision_distance'],
            highlight_duration=config['collision_highlight_duration'],
        )

    def resolve(self, particles: List[Particle]) -> int:
        """
        Detects and resolves collisions among the given particles.
        Returns the number of colliding pairs that were resolved.
        """
        if not self.enabled or len(particles) < 2:
            return 0

        # Gather into arrays for the kernel, then scatter the results back.
        positions = np.array([p.position for p in particles], dtype=np.float64)
        velocities = np.array([p.velocity for p in particles], dtype=np.float64)
        collided = np.zeros(len(particles), dtype=np.bool_)

        resolved = _resolve_collisions_jit(
            positions,
            velocities,
            float(self.collision_distance),
            float(self.elasticity),
            collided
        )

        if resolved == 0:
            return 0

        for index in np.flatnonzero(collided):
            particle = particles[index]
            particle.position[:] = positions[index]
            particle.velocity[:] = velocities[index]
            # A flat reset, not additive.
            particle.collision_glow_timer = self.highlight_duration

        return resolved
