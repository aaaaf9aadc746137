# connections.py

"""
Proximity lines between particles.

Every pair of particles closer than the scaled connection threshold is joined
by a line whose opacity falls linearly with distance.

Data Contract:
- scaled_threshold(base, width, height) -> float
    - base * min(width, height) / CONNECTION_REFERENCE_SIZE
- connection_opacity(distance, threshold) -> float
    - Linear from CONNECTION_MAX_OPACITY at 0 to CONNECTION_MIN_OPACITY at the
      threshold. 0 (no line) at or beyond the threshold.
    - Monotonically non-increasing in distance.
"""

import logging
from typing import List, Tuple

import numba
import numpy as np
import pygame

from constants import (
    LOGGER_NAME, CONNECTION_REFERENCE_SIZE, CONNECTION_COLOR,
    CONNECTION_MAX_OPACITY, CONNECTION_MIN_OPACITY, CONNECTION_WIDTH
)
from particle import Particle, lerp

logger = logging.getLogger(LOGGER_NAME)


@numba.jit(nopython=True)
def _find_connections_jit(positions, threshold, pair_i, pair_j, distances):
    """
    Numba-accelerated search for every pair (i < j) closer than threshold.
    Writes matches into the preallocated output arrays and returns their count.
    """
    num_particles = positions.shape[0]
    count = 0
    for i in range(num_particles):
        for j in range(i + 1, num_particles):
            dx = positions[j, 0] - positions[i, 0]
            dy = positions[j, 1] - positions[i, 1]
            distance = np.sqrt(dx * dx + dy * dy)
            if distance < threshold:
                pair_i[count] = i
                pair_j[count] = j
                distances[count] = distance
                count += 1
    return count


def scaled_threshold(base_threshold: float, width: float, height: float) -> float:
    return base_threshold * min(width, height) / CONNECTION_REFERENCE_SIZE


def connection_opacity(distance: float, threshold: float) -> float:
    if threshold <= 0 or distance < 0 or distance >= threshold:
        return 0.0
    return lerp(CONNECTION_MAX_OPACITY, CONNECTION_MIN_OPACITY, distance / threshold)


class ConnectionRenderer:
    """
    Draws the connection lines onto a transparent overlay.

    pygame cannot blend a line's alpha directly onto an opaque surface, so
    lines go onto an SRCALPHA overlay that the caller blits over the frame.
    """
    def __init__(self, base_threshold: float):
        self.base_threshold = base_threshold

    def find_connections(self, particles: List[Particle], width: float, height: float) -> List[Tuple[int, int, float]]:
        """
        Returns (i, j, distance) for every pair within the scaled threshold,
        in pair order.
        """
        num_particles = len(particles)
        if num_particles < 2:
            return []

        threshold = scaled_threshold(self.base_threshold, width, height)
        positions = np.array([p.position for p in particles], dtype=np.float64)
        max_pairs = num_particles * (num_particles - 1) // 2
        pair_i = np.empty(max_pairs, dtype=np.int64)
        pair_j = np.empty(max_pairs, dtype=np.int64)
        distances = np.empty(max_pairs, dtype=np.float64)

        count = _find_connections_jit(positions, float(threshold), pair_i, pair_j, distances)
        return [(int(pair_i[k]), int(pair_j[k]), float(distances[k])) for k in range(count)]

    def draw(self, overlay: pygame.Surface, particles: List[Particle], width: float, height: float) -> int:
        """
        Draws every connection onto the overlay. Returns the number of lines drawn.
        """
        threshold = scaled_threshold(self.base_threshold, width, height)
        drawn = 0
        for i, j, distance in self.find_connections(particles, width, height):
            opacity = connection_opacity(distance, threshold)
            if opacity <= 0:
                continue
            start = particles[i].position
            end = particles[j].position
            pygame.draw.line(
                overlay,
                (CONNECTION_COLOR, CONNECTION_COLOR, CONNECTION_COLOR, int(opacity)),
                (int(start[0]), int(start[1])),
                (int(end[0]), int(end[1])),
                CONNECTION_WIDTH
            )
            drawn += 1
        return drawn
