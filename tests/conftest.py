import os

# pygame must not try to open a real window during tests.
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")

import numpy as np
import pygame
import pytest


@pytest.fixture
def network_config():
    """Defaults of config.json's 'network' section."""
    return {
        'particle_count': 100,
        'connection_threshold': 100,
        'particle_radius': 5,
        'particle_speed': 2,
        'background_color': 0,
        'particle_color': 200,
        'cursor_influence_radius': 100,
        'cursor_repulsion_strength': 2,
        'cursor_highlight_color': 255,
        'max_particles': 200,
        'particle_lifespan': 300,
        'spawn_particle_count': 5,
        'new_particle_color': 150,
        'collision_enabled': True,
        'collision_elasticity': 0.8,
        'collision_distance': 10,
        'collision_highlight_duration': 15,
        'collision_highlight_color': 230,
    }


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture
def highlight_colors():
    return {'pointer': 255, 'collision': 230}


@pytest.fixture
def make_particle(highlight_colors):
    from particle import Particle

    def _make(position=(100.0, 100.0), velocity=(0.0, 0.0), radius=5, base_color=200, base_speed=2, lifecycle=None):
        return Particle(position, velocity, radius, base_color, base_speed, highlight_colors, lifecycle)

    return _make


@pytest.fixture
def screen():
    return pygame.Surface((1000, 1000))
