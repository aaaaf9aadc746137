# particle_system.py

import logging
import math
from typing import List, Optional, Tuple

import numpy as np
import pygame

import constants
from collisions import CollisionResolver
from connections import ConnectionRenderer
from particle import LifecycleState, Particle, grayscale

logger = logging.getLogger(constants.LOGGER_NAME)


class ParticleSystem:
    """
    Owns the particle network and drives the per-frame pipeline.

    Data Contract:
    - Inputs:
        - config (dict): The 'network' section of the config file.
        - rng (np.random.Generator): The master seeded random number generator.
        - bounds (tuple): The (width, height) of the canvas.
        - populate (bool): Spawn the initial particles right away.
    - Outputs: None. This class modifies its internal state.
    - Side Effects: Manages the lifecycle of all particles.
    - Invariants:
        - len(self.particles) never exceeds config['max_particles'] through spawning.
        - Iteration order of self.particles is stable within a frame.
        - Spawns requested while a frame runs are applied at the start of the next one.
    """
    def __init__(self, config: dict, rng: np.random.Generator, bounds: Tuple[float, float], populate: bool = True):
        self.config = config
        self.rng = rng
        self.width, self.height = float(bounds[0]), float(bounds[1])

        self.particles: List[Particle] = []
        self.pointer_position = (0.0, 0.0)
        self.pointer_active = False
        self.frame_count = 0

        self.collision_resolver = CollisionResolver.from_config(config)
        self.connection_renderer = ConnectionRenderer(config['connection_threshold'])

        self.highlight_colors = {
            'pointer': config['cursor_highlight_color'],
            'collision': config['collision_highlight_color'],
        }

        # --- Frame bookkeeping ---
        self._in_frame = False
        self._pending_spawns: List[Tuple[float, float]] = []
        self._overlay: Optional[pygame.Surface] = None
        self._font: Optional[pygame.font.Font] = None

        # --- Diagnostics for throttled logging ---
        self.collisions_last_frame = 0
        self.connections_last_frame = 0
        self.expired_last_frame = 0

        if populate:
            self.spawn_initial()

        logger.info(
            f"ParticleSystem created on a {self.width:.0f}x{self.height:.0f} canvas "
            f"with {len(self.particles)} particles (max {config['max_particles']})."
        )

    # --- Spawning ---

    def _random_velocity(self, multiplier: float = 1.0) -> np.ndarray:
        speed = self.config['particle_speed']
        return self.rng.uniform(-speed, speed, 2) * multiplier

    def _make_particle(self, position, velocity, lifecycle: Optional[LifecycleState] = None) -> Particle:
        return Particle(
            position=position,
            velocity=velocity,
            radius=self.config['particle_radius'],
            base_color=self.config['particle_color'],
            base_speed=self.config['particle_speed'],
            highlight_colors=self.highlight_colors,
            lifecycle=lifecycle
        )

    def spawn_initial(self) -> List[Particle]:
        """
        Creates the permanent particles, scaling the configured count by the
        canvas area relative to the reference canvas so density stays constant.
        """
        scale_factor = (self.width * self.height) / (constants.REFERENCE_WIDTH * constants.REFERENCE_HEIGHT)
        count = math.floor(self.config['particle_count'] * scale_factor)

        spawned = []
        for _ in range(count):
            position = (self.rng.uniform(0, self.width), self.rng.uniform(0, self.height))
            spawned.append(self._make_particle(position, self._random_velocity()))
        self.particles.extend(spawned)

        logger.info(f"Spawned {count} initial particles (area scale factor {scale_factor:.3f}).")
        return spawned

    def spawn_at(self, x: Optional[float] = None, y: Optional[float] = None, from_click: bool = False) -> Optional[Particle]:
        """
        Adds one particle at (x, y), or at a random spot for a missing coordinate.
        Returns None without adding anything when the network is full.

        Click-spawned particles move faster, start in the spawn color and fade
        back to the base color over a finite lifespan.
        """
        if len(self.particles) >= self.config['max_particles']:
            logger.debug(f"Spawn rejected: already at {len(self.particles)}/{self.config['max_particles']} particles.")
            return None

        if x is None:
            x = self.rng.uniform(0, self.width)
        if y is None:
            y = self.rng.uniform(0, self.height)

        multiplier = constants.CLICK_SPEED_MULTIPLIER if from_click else 1.0
        velocity = self._random_velocity(multiplier)

        lifecycle = None
        if from_click:
            lifecycle = LifecycleState(
                remaining=self.config['particle_lifespan'],
                initial=self.config['particle_lifespan'],
                spawn_color=self.config['new_particle_color'],
                target_color=self.config['particle_color'],
            )

        particle = self._make_particle((x, y), velocity, lifecycle)
        self.particles.append(particle)
        logger.debug(f"Spawned {particle}.")
        return particle

    def remove_particle(self, index: int):
        """Removes the particle at index. Out-of-range indices are ignored."""
        if 0 <= index < len(self.particles):
            del self.particles[index]

    # --- Host events ---

    def on_click(self, x: float, y: float) -> List[Particle]:
        """
        Spawns a burst of short-lived particles jittered around the click.

        If a frame is in progress the burst is queued and applied before the
        next lifecycle tick; an empty list is returned in that case.
        """
        if self._in_frame:
            self._pending_spawns.append((x, y))
            logger.debug(f"Click at ({x:.0f}, {y:.0f}) deferred to the next frame.")
            return []
        return self._spawn_burst(x, y)

    def _spawn_burst(self, x: float, y: float) -> List[Particle]:
        jitter = constants.CLICK_JITTER
        spawned = []
        for _ in range(self.config['spawn_particle_count']):
            offset_x, offset_y = self.rng.uniform(-jitter, jitter, 2)
            particle = self.spawn_at(x + offset_x, y + offset_y, from_click=True)
            if particle is not None:
                spawned.append(particle)

        if len(spawned) < self.config['spawn_particle_count']:
            logger.info(
                f"Click at ({x:.0f}, {y:.0f}) spawned {len(spawned)}/{self.config['spawn_particle_count']} "
                f"particles; maximum of {self.config['max_particles']} reached."
            )
        return spawned

    def _flush_pending_spawns(self):
        pending, self._pending_spawns = self._pending_spawns, []
        for x, y in pending:
            self._spawn_burst(x, y)

    def update_pointer(self, x: float, y: float, active: bool):
        """Records the latest pointer state. The last call before a frame wins."""
        self.pointer_position = (float(x), float(y))
        self.pointer_active = active

    def on_resize(self, width: float, height: float):
        """
        Stores the new canvas size and clamps every particle into it.
        Velocities are left untouched.
        """
        self.width, self.height = float(width), float(height)
        for particle in self.particles:
            particle.clamp_to(self.width, self.height)
        self._overlay = None
        logger.info(f"Canvas resized to {self.width:.0f}x{self.height:.0f}.")

    # --- Simulation steps ---

    def tick_lifecycles(self) -> int:
        """
        Ages finite-lifespan particles, removing the expired ones, and counts
        down collision glow timers.

        Runs in reverse index order so removals do not shift the particles
        still to be visited. Returns the number of removed particles.
        """
        removed = 0
        for index in range(len(self.particles) - 1, -1, -1):
            particle = self.particles[index]
            if particle.tick_lifecycle():
                self.remove_particle(index)
                removed += 1
                continue
            particle.tick_collision_glow()

        if removed:
            logger.debug(f"{removed} particle(s) expired. New count: {len(self.particles)}.")
        self.expired_last_frame = removed
        return removed

    def resolve_collisions(self) -> int:
        self.collisions_last_frame = self.collision_resolver.resolve(self.particles)
        return self.collisions_last_frame

    def update_particles(self, screen: Optional[pygame.Surface] = None):
        """
        Applies pointer response and kinematics to every particle, drawing each
        one right after its update when a screen is given.

        Pointer response, including the highlight fade, only runs while the
        pointer is inside the canvas.
        """
        for particle in self.particles:
            if self.pointer_active:
                particle.respond_to_pointer(
                    self.pointer_position,
                    self.config['cursor_influence_radius'],
                    self.config['cursor_repulsion_strength']
                )

            particle.update_kinematics(self.width, self.height)

            if screen is not None:
                particle.draw(screen)

    def frame_step(self, screen: pygame.Surface):
        """
        Runs one full frame:
        deferred spawns -> lifecycle tick -> collisions -> particle update and
        draw -> connections -> pointer ring -> HUD.
        """
        self._in_frame = True
        try:
            self._flush_pending_spawns()

            screen.fill(grayscale(self.config['background_color']))

            self.tick_lifecycles()
            self.resolve_collisions()
            self.update_particles(screen)

            overlay = self._get_overlay(screen)
            overlay.fill((0, 0, 0, 0))
            self.connections_last_frame = self.connection_renderer.draw(
                overlay, self.particles, self.width, self.height
            )
            if self.pointer_active:
                self.draw_pointer_influence(overlay)
            screen.blit(overlay, (0, 0))

            self.draw_hud(screen)
        finally:
            self._in_frame = False
        self.frame_count += 1

    # --- Drawing helpers ---

    def _get_overlay(self, screen: pygame.Surface) -> pygame.Surface:
        if self._overlay is None or self._overlay.get_size() != screen.get_size():
            self._overlay = pygame.Surface(screen.get_size(), pygame.SRCALPHA)
        return self._overlay

    def draw_pointer_influence(self, overlay: pygame.Surface):
        """Outlines the area in which the pointer repels particles."""
        x, y = self.pointer_position
        pygame.draw.circle(
            overlay,
            constants.POINTER_RING_COLOR,
            (int(x), int(y)),
            int(self.config['cursor_influence_radius']),
            1
        )

    def hud_text(self) -> str:
        return f"Particles: {len(self.particles)}/{self.config['max_particles']}"

    def draw_hud(self, screen: pygame.Surface):
        if self._font is None:
            if not pygame.font.get_init():
                pygame.font.init()
            self._font = pygame.font.Font(None, constants.HUD_FONT_SIZE)
        text_surface = self._font.render(self.hud_text(), True, constants.HUD_COLOR)
        screen.blit(text_surface, constants.HUD_POSITION)

    # --- Diagnostics ---

    def get_total_kinetic_energy(self) -> float:
        """
        Calculates the total kinetic energy of the network.
        KE = sum(0.5 * v^2), unit mass per particle.
        """
        return sum(p.kinetic_energy for p in self.particles)

    def get_average_speed(self) -> float:
        if not self.particles:
            return 0.0
        return float(np.mean([p.speed for p in self.particles]))
