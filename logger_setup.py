# logger_setup.py

import logging
import os

from constants import LOGGER_NAME

def setup_logging(config: dict, log_root: str = 'runs'):
    """
    Sets up logging for the application.

    Creates a run-specific log directory and configures a dedicated application
    logger (not the root logger) to output to both the console and a log file.
    This keeps pygame and Numba chatter out of the run log.

    Data Contract:
    - Inputs:
        - config (dict) - The loaded configuration. Must contain 'run_id' and a
          'logging' dictionary with 'level' and 'format'.
        - log_root (str) - Directory under which run directories are created.
    - Outputs: The path of the log file (str).
    - Side Effects:
        - Configures the "particle_network" logger.
        - Creates directories for log files.
    """
    run_id = config['run_id']
    log_config = config['logging']

    # --- Get a dedicated logger for the application ---
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(log_config['level'])

    # --- Prevent logs from propagating to the root logger ---
    logger.propagate = False

    # --- Create directories for logs ---
    log_dir = os.path.join(log_root, run_id)
    os.makedirs(log_dir, exist_ok=True)
    log_file = os.path.join(log_dir, 'network.log')

    # --- Create formatter and handlers ---
    formatter = logging.Formatter(log_config['format'])

    # File handler
    file_handler = logging.FileHandler(log_file)
    file_handler.setFormatter(formatter)

    # Console handler
    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)

    # --- Add handlers to the logger ---
    # Clear existing handlers to avoid duplication if this function is called again
    if logger.hasHandlers():
        for handler in list(logger.handlers):
            handler.close()
        logger.handlers.clear()
    logger.addHandler(file_handler)
    logger.addHandler(stream_handler)

    logger.info(f"Logging initialized. Run ID: {run_id}. Log file: {log_file}")
    return log_file
