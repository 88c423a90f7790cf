# main.py

import pygame
import constants
import logging
import logger_setup
import numpy as np
from errors import ConfigError
from frame_source import open_frame_source
from heatmap import HeatmapRenderer
from thermal_config import load_config, load_sensor_config

# Get the application's dedicated logger
logger = logging.getLogger(constants.LOGGER_NAME)


def handle_events(renderer, grid):
    """
    Processes pending pygame events.
    Returns False when the user asked to quit.
    """
    for event in pygame.event.get():
        if event.type == pygame.QUIT:
            return False
        if event.type == pygame.KEYDOWN:
            if event.key == pygame.K_ESCAPE:
                return False
            if event.key == pygame.K_i:
                renderer.toggle_interpolation()
        elif event.type == pygame.MOUSEBUTTONDOWN and grid is not None:
            temperature = renderer.temperature_at(grid, event.pos)
            logger.info(f"Temperature at {event.pos}: {temperature:.2f}")
    return True


def run_viewer_loop(renderer, source, screen, clock, log_interval):
    """
    The main frame loop. One tick per display frame; a tick with no new
    frame redraws the last good grid.
    """
    # --- Loop Setup ---
    running = True
    tick = 0
    grid = None
    frames_since_log = 0

    while running:
        running = handle_events(renderer, grid)

        # --- Frame Ingest ---
        new_grid = source.read()
        if new_grid is not None:
            grid = new_grid
            frames_since_log += 1

        # --- Logging (throttled) ---
        if tick % log_interval == 0 and grid is not None:
            logger.debug(
                f"Tick={tick}, "
                f"NewFrames={frames_since_log}, "
                f"Min={np.min(grid):.2f}, "
                f"Max={np.max(grid):.2f}, "
                f"Mean={np.mean(grid):.2f}, "
                f"{source.stats}"
            )
            frames_since_log = 0

        # --- Drawing ---
        if grid is None:
            screen.fill(constants.BLACK)
        else:
            renderer.draw(screen, grid)
        pygame.display.flip()
        clock.tick(constants.FPS)
        tick += 1


def main(config_path='config.json', log_root='runs'):
    """
    Main function to initialize and run the thermal viewer.
    A bad configuration is logged and exits with status 1 before any window opens.
    """
    # --- Setup ---
    logger_setup.setup_logging(config_path, log_root=log_root)

    config = load_config(config_path)
    logger.info("Application starting...")
    logger.info(f"Loaded configuration: {config}")

    try:
        sensor_config = load_sensor_config(config_path)
        renderer = HeatmapRenderer(sensor_config, viewport=(constants.WIDTH, constants.HEIGHT))
    except ConfigError as e:
        logger.error(f"Invalid configuration: {e}")
        raise SystemExit(1)

    # Seeds the synthetic frame source when no sensor is attached
    rng = np.random.default_rng(config.get('master_seed'))
    log_interval = config.get('display', {}).get('log_interval', 100)

    # --- Initialization ---
    pygame.init()
    screen = pygame.display.set_mode((constants.WIDTH, constants.HEIGHT))
    pygame.display.set_caption(constants.TITLE)
    clock = pygame.time.Clock()

    with open_frame_source(config, sensor_config.rows, sensor_config.cols, rng) as source:
        run_viewer_loop(renderer, source, screen, clock, log_interval)

    logger.info("Application shutting down.")
    pygame.quit()

if __name__ == "__main__":
    main()
