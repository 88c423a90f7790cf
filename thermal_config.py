# thermal_config.py

import json
import math
import logging
from collections import namedtuple

import constants
from errors import ConfigError

logger = logging.getLogger(constants.LOGGER_NAME)

# Immutable view of the 'sensor' section of the config file.
SensorConfig = namedtuple(
    'SensorConfig',
    ['rows', 'cols', 'interpolate', 'factor', 'min_temp', 'max_temp', 'palette']
)


def load_config(config_path='config.json'):
    """Reads the JSON run configuration into a plain dict."""
    with open(config_path, 'r') as f:
        return json.load(f)


def _positive_int(section, key, default):
    value = section.get(key, default)
    # bool is an int subclass; reject it explicitly
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ConfigError(f"sensor.{key} must be a positive integer, got {value!r}")
    return value


def _parse_palette(raw):
    """Accepts ints or hex strings such as "0x480F"."""
    palette = []
    for entry in raw:
        if isinstance(entry, str):
            try:
                entry = int(entry, 0)
            except ValueError:
                raise ConfigError(f"Palette entry {entry!r} is not a number") from None
        elif isinstance(entry, bool) or not isinstance(entry, int):
            raise ConfigError(f"Palette entry {entry!r} is not an integer")
        palette.append(entry)
    return tuple(palette)


def parse_sensor_config(sensor_section: dict) -> SensorConfig:
    """
    Validates the 'sensor' section and turns it into a SensorConfig.

    Data Contract:
    - Inputs: sensor_section (dict) - the 'sensor' section of config.json.
    - Outputs: SensorConfig with all defaults filled in.
    - Side Effects: None.
    - Invariants: rows, cols and factor are positive ints, interpolate is a bool,
      min_temp < max_temp and both are finite,
      the palette is non-empty. Any violation raises ConfigError.
    """
    rows = _positive_int(sensor_section, 'rows', constants.SENSOR_ROWS)
    cols = _positive_int(sensor_section, 'cols', constants.SENSOR_COLS)
    factor = _positive_int(sensor_section, 'factor', 1)
    interpolate = sensor_section.get('interpolate', False)
    if not isinstance(interpolate, bool):
        raise ConfigError(f"sensor.interpolate must be true or false, got {interpolate!r}")

    try:
        min_temp = float(sensor_section.get('min_temp', constants.DEFAULT_MIN_TEMP))
        max_temp = float(sensor_section.get('max_temp', constants.DEFAULT_MAX_TEMP))
    except (TypeError, ValueError):
        raise ConfigError("sensor.min_temp and sensor.max_temp must be numbers") from None
    # json accepts NaN and Infinity
    if not (math.isfinite(min_temp) and math.isfinite(max_temp)):
        raise ConfigError(f"sensor.min_temp and sensor.max_temp must be finite, got [{min_temp}, {max_temp}]")
    if not min_temp < max_temp:
        raise ConfigError(f"sensor.min_temp ({min_temp}) must be below sensor.max_temp ({max_temp})")

    if 'palette' in sensor_section:
        palette = _parse_palette(sensor_section['palette'])
    else:
        palette = constants.DEFAULT_PALETTE_565
    if len(palette) == 0:
        raise ConfigError("sensor.palette must contain at least one color")

    return SensorConfig(
        rows=rows,
        cols=cols,
        interpolate=interpolate,
        factor=factor,
        min_temp=min_temp,
        max_temp=max_temp,
        palette=palette,
    )


def load_sensor_config(config_path='config.json') -> SensorConfig:
    config = load_config(config_path)
    if 'sensor' not in config:
        raise ConfigError(f"{config_path} has no 'sensor' section")
    sensor_config = parse_sensor_config(config['sensor'])
    logger.info(f"Sensor configuration: {sensor_config.rows}x{sensor_config.cols}, "
                f"interpolate={sensor_config.interpolate}, factor={sensor_config.factor}, "
                f"range=[{sensor_config.min_temp}, {sensor_config.max_temp}], "
                f"palette={len(sensor_config.palette)} colors")
    return sensor_config
