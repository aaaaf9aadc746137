# constants.py

"""
Application Constants

This module defines static configuration values for the application's framework.
These are not expected to change between simulation runs. Tunable network
behaviour (counts, speeds, colors) lives in config.json instead.

Data Contract:
- All values are immutable constants.
- Units are specified in comments where applicable.
"""

# Initial window dimensions. The window is resizable.
WIDTH = 1280  # Pixels
HEIGHT = 800  # Pixels

# Framerate
FPS = 60  # Frames per second

# Window Title
TITLE = "Particle Network"

# Name of the dedicated application logger.
LOGGER_NAME = "particle_network"

# Reference canvas used to scale the initial particle count by area.
REFERENCE_WIDTH = 1000  # Pixels
REFERENCE_HEIGHT = 1000  # Pixels

# Reference size used to scale the connection threshold by min(width, height).
CONNECTION_REFERENCE_SIZE = 500  # Pixels

# Connection lines (grayscale and alpha, 0-255)
CONNECTION_COLOR = 150
CONNECTION_MAX_OPACITY = 180  # At distance 0
CONNECTION_MIN_OPACITY = 50   # Just below the scaled threshold
CONNECTION_WIDTH = 1  # Pixels

# Pointer interaction
POINTER_FADE_FRAMES = 10  # Frames a particle stays highlighted after leaving the pointer.
POINTER_SPEED_CAP_FACTOR = 2.0  # Max speed under repulsion, as a multiple of base speed.
POINTER_RING_COLOR = (100, 100, 100, 50)  # RGBA outline of the influence area.

# Free particles drift back to base speed by this factor per frame.
DAMPING_FACTOR = 0.98

# Size multipliers for highlighted particles
COLLISION_SIZE_FACTOR = 1.3
POINTER_SIZE_FACTOR = 1.5

# Click-spawn jitter around the click point, per axis.
CLICK_JITTER = 10  # Pixels

# Spawned-from-click particles move faster than ambient ones.
CLICK_SPEED_MULTIPLIER = 1.5

# HUD text
HUD_COLOR = (180, 180, 180)
HUD_FONT_SIZE = 18  # pygame default font size, renders close to 14px text
HUD_POSITION = (10, 10)  # Top-left anchor, pixels
