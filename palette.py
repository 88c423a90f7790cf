# palette.py

"""
Palette Mapper

Turns packed RGB565 colors into 8-bit-per-channel RGB once at startup, and
maps temperatures onto palette indices every frame. Out-of-range readings
saturate to the nearest end of the palette.
"""

import logging
import math

import numpy as np

from constants import LOGGER_NAME
from errors import ConfigError

logger = logging.getLogger(LOGGER_NAME)

# Bit layout of a packed 16-bit color: rrrrrggggggbbbbb
RED_SHIFT, RED_MASK = 11, 0x1F
GREEN_SHIFT, GREEN_MASK = 5, 0x3F
BLUE_MASK = 0x1F


def pack_rgb565(r: int, g: int, b: int) -> int:
    """Packs 8-bit channels into RGB565 by dropping the low bits."""
    return ((r >> 3) << RED_SHIFT) | ((g >> 2) << GREEN_SHIFT) | (b >> 3)


def build_palette(packed) -> np.ndarray:
    """
    Expands packed RGB565 colors to full 8-bit RGB.

    Each channel is widened by bit replication (the top bits are copied into
    the freed low bits), so 0x1F becomes 255 rather than 248.

    Data Contract:
    - Inputs: packed (sequence of int) - N colors in 5-6-5 layout.
    - Outputs: np.ndarray of shape (N, 3), dtype uint8, read-only.
    - Side Effects: None.
    - Invariants: N > 0 and every value lies in [0, 0xFFFF], otherwise
      ConfigError is raised.
    """
    values = np.asarray(packed, dtype=np.int64)
    if values.ndim != 1 or values.size == 0:
        raise ConfigError("Palette must be a non-empty sequence of packed colors")
    if np.any(values < 0) or np.any(values > 0xFFFF):
        raise ConfigError("Palette values must be 16-bit RGB565 colors (0x0000-0xFFFF)")

    r5 = (values >> RED_SHIFT) & RED_MASK
    g6 = (values >> GREEN_SHIFT) & GREEN_MASK
    b5 = values & BLUE_MASK

    colors = np.empty((values.size, 3), dtype=np.uint8)
    colors[:, 0] = (r5 << 3) | (r5 >> 2)
    colors[:, 1] = (g6 << 2) | (g6 >> 4)
    colors[:, 2] = (b5 << 3) | (b5 >> 2)
    colors.setflags(write=False)
    return colors


def linear_map(x, in_min, in_max, out_min, out_max):
    """Arduino-style map() on floats. Works element-wise on arrays."""
    return (x - in_min) * (out_max - out_min) / (in_max - in_min) + out_min


def _check_lookup_args(min_temp, max_temp, size):
    if size < 1:
        raise ConfigError(f"Palette size must be at least 1, got {size}")
    if not (math.isfinite(min_temp) and math.isfinite(max_temp)):
        raise ConfigError(f"Temperature range must be finite: [{min_temp}, {max_temp}]")
    if not min_temp < max_temp:
        raise ConfigError(f"Temperature range is empty: [{min_temp}, {max_temp}]")


def map_to_indices(grid, min_temp: float, max_temp: float, size: int) -> np.ndarray:
    """
    Maps every temperature in `grid` to a palette index in [0, size - 1].

    NaN is treated as min_temp and everything else is clamped into the range
    before scaling, so no reading can produce an index outside the palette.
    """
    _check_lookup_args(min_temp, max_temp, size)
    sane = np.nan_to_num(
        np.asarray(grid, dtype=np.float64),
        nan=min_temp,
        posinf=max_temp,
        neginf=min_temp
    )
    sane = np.clip(sane, min_temp, max_temp)
    scaled = np.rint(linear_map(sane, min_temp, max_temp, 0, size - 1))
    return np.clip(scaled, 0, size - 1).astype(np.intp)


def temperature_to_index(value: float, min_temp: float, max_temp: float, size: int) -> int:
    """Scalar form of map_to_indices."""
    _check_lookup_args(min_temp, max_temp, size)
    sane = float(np.nan_to_num(float(value), nan=min_temp, posinf=max_temp, neginf=min_temp))
    sane = min(max(sane, min_temp), max_temp)
    idx = int(np.rint(linear_map(sane, min_temp, max_temp, 0, size - 1)))
    return min(max(idx, 0), size - 1)


class PaletteMapper:
    """
    Holds the expanded palette and the temperature range it covers.

    Data Contract:
    - Inputs:
        - packed (sequence of int): RGB565 palette, coldest first.
        - min_temp, max_temp (float): temperature range mapped onto the palette.
    - Outputs: None.
    - Side Effects: None after construction.
    - Invariants: `colors` is read-only for the lifetime of the object.
    """
    def __init__(self, packed, min_temp: float, max_temp: float):
        self.colors = build_palette(packed)
        self.size = len(self.colors)
        _check_lookup_args(min_temp, max_temp, self.size)
        self.min_temp = min_temp
        self.max_temp = max_temp

        logger.info(f"Palette built with {self.size} colors for range [{min_temp}, {max_temp}].")

    def index_of(self, value: float) -> int:
        return temperature_to_index(value, self.min_temp, self.max_temp, self.size)

    def indices(self, grid) -> np.ndarray:
        return map_to_indices(grid, self.min_temp, self.max_temp, self.size)

    def color_of(self, value: float) -> tuple:
        r, g, b = self.colors[self.index_of(value)]
        return (int(r), int(g), int(b))

    def colorize(self, grid) -> np.ndarray:
        """Returns an (H, W, 3) uint8 image for a temperature grid."""
        return self.colors[self.indices(grid)]
