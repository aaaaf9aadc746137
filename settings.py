# settings.py

"""
Configuration loading for the particle network.

The configuration is read once at process start from config.json. There is no
runtime reconfiguration: the returned dictionaries are treated as read-only by
every component.

Data Contract:
- load_config(path) -> dict
    - Raises FileNotFoundError or json.JSONDecodeError (logged, then re-raised).
- validate_config(config) -> dict
    - Returns the 'network' section.
    - Raises ValueError naming the first missing or out-of-range key.
"""

import json
import logging

from constants import LOGGER_NAME

logger = logging.getLogger(LOGGER_NAME)

NETWORK_KEYS = (
    'particle_count',
    'connection_threshold',
    'particle_radius',
    'particle_speed',
    'background_color',
    'particle_color',
    'cursor_influence_radius',
    'cursor_repulsion_strength',
    'cursor_highlight_color',
    'max_particles',
    'particle_lifespan',
    'spawn_particle_count',
    'new_particle_color',
    'collision_enabled',
    'collision_elasticity',
    'collision_distance',
    'collision_highlight_duration',
    'collision_highlight_color',
)

# Keys that must be strictly positive for the simulation to make sense.
POSITIVE_KEYS = (
    'particle_radius',
    'particle_speed',
    'connection_threshold',
    'cursor_influence_radius',
    'max_particles',
    'particle_lifespan',
    'collision_distance',
)

COLOR_KEYS = (
    'background_color',
    'particle_color',
    'cursor_highlight_color',
    'new_particle_color',
    'collision_highlight_color',
)


def load_config(path: str = 'config.json') -> dict:
    """Loads a JSON configuration file."""
    logger.info(f"Loading configuration from {path}...")
    try:
        with open(path, 'r') as f:
            config = json.load(f)
    except FileNotFoundError:
        logger.error(f"Configuration file not found at {path}.")
        raise
    except json.JSONDecodeError:
        logger.error(f"Error decoding JSON from {path}.")
        raise
    logger.info("Configuration loaded successfully.")
    return config


def validate_config(config: dict) -> dict:
    """
    Checks the 'network' section and returns it.

    Validation happens once at startup so the per-frame code can index the
    settings directly.
    """
    if 'network' not in config:
        raise ValueError("Configuration is missing the 'network' section.")
    network = config['network']

    for key in NETWORK_KEYS:
        if key not in network:
            raise ValueError(f"Network configuration is missing '{key}'.")

    if not isinstance(network['collision_enabled'], bool):
        raise ValueError(
            f"Network setting 'collision_enabled' must be true or false, got {network['collision_enabled']!r}."
        )

    for key in NETWORK_KEYS:
        if key == 'collision_enabled':
            continue
        value = network[key]
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError(f"Network setting '{key}' must be a number, got {value!r}.")

    for key in POSITIVE_KEYS:
        if network[key] <= 0:
            raise ValueError(f"Network setting '{key}' must be positive, got {network[key]}.")

    for key in COLOR_KEYS:
        if not 0 <= network[key] <= 255:
            raise ValueError(f"Network setting '{key}' must be a grayscale value in [0, 255], got {network[key]}.")

    if network['particle_count'] < 0 or network['spawn_particle_count'] < 0:
        raise ValueError("Particle counts must not be negative.")

    if not 0 <= network['collision_elasticity'] <= 1:
        raise ValueError(
            f"Network setting 'collision_elasticity' must lie in [0, 1], got {network['collision_elasticity']}."
        )

    return network
