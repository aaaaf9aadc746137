# particle.py

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np
import pygame

from constants import (
    LOGGER_NAME, POINTER_FADE_FRAMES, POINTER_SPEED_CAP_FACTOR, DAMPING_FACTOR,
    COLLISION_SIZE_FACTOR, POINTER_SIZE_FACTOR
)

logger = logging.getLogger(LOGGER_NAME)


def lerp(start: float, stop: float, amount: float) -> float:
    """Linear interpolation from start (amount 0) to stop (amount 1)."""
    return start + (stop - start) * amount


def grayscale(value: float) -> Tuple[int, int, int]:
    """Converts a 0-255 grayscale value into a pygame RGB tuple."""
    level = int(round(min(max(value, 0), 255)))
    return (level, level, level)


@dataclass
class LifecycleState:
    """
    Finite lifespan of a click-spawned particle.

    Data Contract:
    - remaining counts down by one per frame; the owner removes the particle
      once it reaches 0.
    - current_color is lerp(spawn_color, target_color, progress) when
      transitioning, and spawn_color before the first tick.
    """
    remaining: int
    initial: int
    spawn_color: float
    target_color: float
    transitioning: bool = True
    current_color: float = 0.0

    def __post_init__(self):
        self.current_color = self.spawn_color

    @property
    def progress(self) -> float:
        return 1 - (self.remaining / self.initial)

    @property
    def expired(self) -> bool:
        return self.remaining <= 0

    def tick(self) -> bool:
        """Ages the state by one frame. Returns True once expired."""
        self.remaining -= 1
        if self.transitioning:
            self.current_color = lerp(self.spawn_color, self.target_color, self.progress)
        return self.expired


class Particle:
    """
    Represents a single particle of the network.

    Data Contract:
    - Inputs:
        - position (np.ndarray): (x, y) in pixels.
        - velocity (np.ndarray): (vx, vy) in pixels per frame.
        - radius (float): drawing radius, must be positive.
        - base_color (float): grayscale value the particle rests at.
        - base_speed (float): speed free particles settle back to.
        - highlight_colors (dict): grayscale values for the 'pointer' and
          'collision' highlights.
        - lifecycle (LifecycleState | None): None for permanent particles.
    - Invariants:
        - radius > 0.
        - After update_kinematics, the position lies inside the canvas.
        - Speed only exceeds 2 * base_speed transiently inside respond_to_pointer.
    """
    def __init__(self, position, velocity, radius: float, base_color: float, base_speed: float,
                 highlight_colors: dict, lifecycle: Optional[LifecycleState] = None):
        if radius <= 0:
            raise ValueError(f"Particle radius must be positive, got {radius}.")

        self.position = np.array(position, dtype=float)
        self.velocity = np.array(velocity, dtype=float)
        self.radius = radius
        self.base_color = base_color
        self.base_speed = base_speed
        self.pointer_color = highlight_colors['pointer']
        self.collision_color = highlight_colors['collision']
        self.lifecycle = lifecycle

        self.pointer_affected = False
        self.pointer_effect_timer = 0
        self.collision_glow_timer = 0

    def __repr__(self):
        return (f"Particle(pos=({self.position[0]:.1f}, {self.position[1]:.1f}), "
                f"vel=({self.velocity[0]:.2f}, {self.velocity[1]:.2f}), lifecycle={self.lifecycle})")

    @property
    def speed(self) -> float:
        return float(np.hypot(self.velocity[0], self.velocity[1]))

    @property
    def kinetic_energy(self) -> float:
        # Unit mass
        return 0.5 * float(self.velocity[0] ** 2 + self.velocity[1] ** 2)

    @property
    def is_transitioning(self) -> bool:
        return self.lifecycle is not None and self.lifecycle.transitioning

    def respond_to_pointer(self, pointer_pos, influence_radius: float, repulsion_strength: float):
        """
        Pushes the particle away from the pointer when it is within range.

        The force falls linearly from repulsion_strength at the pointer to zero
        at influence_radius, and the resulting speed is capped at twice the base
        speed. Outside the radius the highlight fades out over a few frames.
        """
        offset = self.position - np.asarray(pointer_pos, dtype=float)
        distance = float(np.hypot(offset[0], offset[1]))

        if distance < influence_radius:
            # Exactly on the pointer there is no direction to push along.
            if distance > 0:
                force = lerp(repulsion_strength, 0.0, distance / influence_radius)
                self.velocity += (offset / distance) * force

            self._clamp_speed(POINTER_SPEED_CAP_FACTOR * self.base_speed)

            self.pointer_affected = True
            self.pointer_effect_timer = POINTER_FADE_FRAMES
        else:
            self.fade_pointer_effect()

    def fade_pointer_effect(self):
        """Counts down the pointer highlight; clears it when the timer runs out."""
        if self.pointer_effect_timer > 0:
            self.pointer_effect_timer -= 1
            if self.pointer_effect_timer == 0:
                self.pointer_affected = False

    def _clamp_speed(self, max_speed: float):
        speed = self.speed
        if speed > max_speed:
            self.velocity *= max_speed / speed

    def update_kinematics(self, width: float, height: float):
        """
        Advances the particle by one frame.
        p_new = p_old + v
        Then reflects off the canvas edges and damps excess speed on free particles.
        """
        self.position += self.velocity
        self.check_boundary_collision(width, height)

        # Particles pushed by the pointer keep their speed until the fade is over.
        if not self.pointer_affected and self.pointer_effect_timer == 0:
            if self.speed > self.base_speed:
                self.velocity *= DAMPING_FACTOR

    def check_boundary_collision(self, width: float, height: float):
        """
        Checks for and handles collisions with the canvas boundaries.
        Clamps the position to the edge and reverses the velocity component,
        independently per axis. No energy is lost.

        - Inputs:
            - width (float): The width of the canvas.
            - height (float): The height of the canvas.
        """
        # Left boundary
        if self.position[0] < 0:
            self.position[0] = 0
            self.velocity[0] *= -1
        # Right boundary
        elif self.position[0] > width:
            self.position[0] = width
            self.velocity[0] *= -1

        # Top boundary
        if self.position[1] < 0:
            self.position[1] = 0
            self.velocity[1] *= -1
        # Bottom boundary
        elif self.position[1] > height:
            self.position[1] = height
            self.velocity[1] *= -1

    def clamp_to(self, width: float, height: float):
        """Moves the particle inside the canvas without touching its velocity."""
        self.position[0] = min(max(self.position[0], 0), width)
        self.position[1] = min(max(self.position[1], 0), height)

    def tick_lifecycle(self) -> bool:
        """Ages a finite-lifespan particle. Returns True when it should be removed."""
        if self.lifecycle is None:
            return False
        return self.lifecycle.tick()

    def tick_collision_glow(self):
        if self.collision_glow_timer > 0:
            self.collision_glow_timer -= 1

    def display_state(self) -> Tuple[float, float]:
        """
        Resolves the color and radius to draw with.

        Precedence, highest first:
        1. collision glow
        2. lifecycle color transition
        3. pointer highlight
        4. base color
        """
        if self.collision_glow_timer > 0:
            return self.collision_color, self.radius * COLLISION_SIZE_FACTOR
        if self.is_transitioning:
            return self.lifecycle.current_color, self.radius
        if self.pointer_affected:
            return self.pointer_color, self.radius * POINTER_SIZE_FACTOR
        return self.base_color, self.radius

    @property
    def display_color(self) -> float:
        return self.display_state()[0]

    def draw(self, screen: pygame.Surface):
        """
        Draws the particle on the screen.
        """
        color, size = self.display_state()
        pygame.draw.circle(
            screen,
            grayscale(color),
            (int(self.position[0]), int(self.position[1])),
            max(1, int(round(size)))
        )
