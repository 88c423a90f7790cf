# errors.py

"""Exceptions raised by the heat-map core."""


class ConfigError(ValueError):
    """Invalid configuration detected at startup. The viewer refuses to run."""


class GridShapeError(ValueError):
    """A sample grid handed to the core does not have the configured shape."""
