# main.py

import cProfile
import io
import logging
import pstats

import numpy as np
import pygame

import constants
import logger_setup
import settings
from particle_system import ParticleSystem

# Get the application's dedicated logger
logger = logging.getLogger(constants.LOGGER_NAME)


def pointer_inside(pos, size) -> bool:
    """True when the pointer lies strictly inside the viewport."""
    x, y = pos
    width, height = size
    return 0 < x < width and 0 < y < height


def handle_event(event: pygame.event.Event, particle_system: ParticleSystem, screen: pygame.Surface) -> bool:
    """
    Forwards one host event to the particle system.
    Returns False when the application should quit.
    """
    if event.type == pygame.QUIT:
        return False

    if event.type == pygame.VIDEORESIZE:
        particle_system.on_resize(event.w, event.h)
    elif event.type == pygame.WINDOWRESIZED:
        particle_system.on_resize(event.x, event.y)
    elif event.type == pygame.MOUSEMOTION:
        particle_system.update_pointer(*event.pos, pointer_inside(event.pos, screen.get_size()))
    elif event.type == pygame.WINDOWLEAVE:
        particle_system.update_pointer(*particle_system.pointer_position, False)
    elif event.type == pygame.WINDOWENTER:
        # The next MOUSEMOTION brings the real position.
        position = particle_system.pointer_position
        particle_system.update_pointer(*position, pointer_inside(position, screen.get_size()))
    elif event.type == pygame.MOUSEBUTTONDOWN:
        # Primary button only, and only inside the viewport.
        if event.button == 1 and pointer_inside(event.pos, screen.get_size()):
            particle_system.on_click(*event.pos)
    return True


def run_loop(particle_system: ParticleSystem, screen: pygame.Surface, clock: pygame.time.Clock, run_control: dict):
    """
    The main frame loop: one frame_step per clock tick until the window is
    closed or max_frames is reached (0 runs until closed).
    """
    log_throttle = run_control.get('log_throttle_frames', 300)
    max_frames = run_control.get('max_frames', 0)

    running = True
    frame = 0
    while running:
        # Event handling
        for event in pygame.event.get():
            if not handle_event(event, particle_system, screen):
                running = False

        # The display surface changes on resize.
        screen = pygame.display.get_surface()

        particle_system.frame_step(screen)
        pygame.display.flip()
        clock.tick(constants.FPS)
        frame += 1

        # --- Logging (throttled) ---
        if frame % log_throttle == 0:
            logger.debug(
                f"Frame={frame}, "
                f"Particles={len(particle_system.particles)}, "
                f"Kinetic={particle_system.get_total_kinetic_energy():.2f}, "
                f"AvgSpeed={particle_system.get_average_speed():.3f}, "
                f"Collisions={particle_system.collisions_last_frame}, "
                f"Connections={particle_system.connections_last_frame}, "
                f"FPS={clock.get_fps():.1f}"
            )

        if max_frames and frame >= max_frames:
            logger.info(f"Reached max_frames ({max_frames}). Stopping.")
            running = False

    return frame


def main(config_path: str = 'config.json'):
    """
    Main function to initialize and run the particle network.
    """
    # --- Setup ---
    # Logging is not set up until the config is read, so failures here are printed.
    try:
        config = settings.load_config(config_path)
        network_config = settings.validate_config(config)
    except (OSError, ValueError) as e:
        print(f"FATAL: Could not load {config_path}. Error: {e}")
        return

    logger_setup.setup_logging(config)
    logger.info("Application starting...")
    logger.info(f"Loaded configuration: {config}")

    # Initialize the master random number generator (RNG)
    rng = np.random.default_rng(config['master_seed'])
    logger.info(f"Master RNG initialized with seed: {config['master_seed']}")

    run_control = config.get('run_control', {})

    # --- Initialization ---
    pygame.init()
    try:
        screen = pygame.display.set_mode((constants.WIDTH, constants.HEIGHT), pygame.RESIZABLE)
        pygame.display.set_caption(constants.TITLE)
        clock = pygame.time.Clock()

        particle_system = ParticleSystem(
            config=network_config,
            rng=rng,
            bounds=screen.get_size()
        )

        if run_control.get('profile', False):
            profiler = cProfile.Profile()
            profiler.enable()
            frames = run_loop(particle_system, screen, clock, run_control)
            profiler.disable()

            logger.info("Profiling complete.")
            s = io.StringIO()
            stats = pstats.Stats(profiler, stream=s).sort_stats('cumtime')
            stats.print_stats(20)  # Top 20 by cumulative time
            logger.info(f"\n{s.getvalue()}")
        else:
            frames = run_loop(particle_system, screen, clock, run_control)

        logger.info(f"Ran {frames} frames. Final particle count: {len(particle_system.particles)}.")
    finally:
        logger.info("Application shutting down.")
        pygame.quit()


if __name__ == "__main__":
    main()
