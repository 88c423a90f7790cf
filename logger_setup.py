# logger_setup.py

import logging
import os
import json

from constants import LOGGER_NAME

def setup_logging(config_path='config.json', log_root='runs'):
    """
    Configures the viewer's dedicated "thermal_cam" logger.

    The logger writes to the console and to runs/<run_id>/thermal.log. It does
    not propagate to the root logger, so pygame and numba output stays out of
    the viewer's log.

    Data Contract:
    - Inputs:
        - config_path (str) - Path to config.json.
        - log_root (str) - Directory that holds one folder per run.
    - Outputs: logging.Logger - the configured logger.
    - Side Effects:
        - Replaces any handlers previously attached to "thermal_cam".
        - Creates the run's log directory.
    - Invariants: The config file has 'run_id' and a 'logging' section with
      'level' and 'format'.
    """
    with open(config_path, 'r') as f:
        config = json.load(f)

    run_id = config['run_id']
    log_config = config['logging']

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(log_config['level'])
    logger.propagate = False

    # --- One folder per run ---
    log_dir = os.path.join(log_root, run_id)
    os.makedirs(log_dir, exist_ok=True)
    log_file = os.path.join(log_dir, 'thermal.log')

    # --- Swap in fresh handlers; repeated calls must not duplicate output ---
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)

    formatter = logging.Formatter(log_config['format'])
    for handler in (logging.FileHandler(log_file), logging.StreamHandler()):
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.info(f"Logging initialized. Run ID: {run_id}. Log file: {log_file}")
    return logger
