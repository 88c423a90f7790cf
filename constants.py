# constants.py

"""
Application Constants

This module defines static configuration values for the viewer's framework.
These are not expected to change between runs.

Data Contract:
- All values are immutable constants.
- Units are specified in comments where applicable.
"""

# Screen dimensions
WIDTH = 640  # Pixels
HEIGHT = 640  # Pixels

# Framerate
FPS = 30  # Frames per second

# Colors (RGB)
BLACK = (0, 0, 0)
WHITE = (255, 255, 255)

# Window Title
TITLE = "Thermal Camera"

# Name of the application's dedicated logger
LOGGER_NAME = "thermal_cam"

# Default sensor geometry (AMG88xx style 8x8 array)
SENSOR_ROWS = 8
SENSOR_COLS = 8

# Default temperature range mapped onto the palette (degrees Celsius)
DEFAULT_MIN_TEMP = 20.0
DEFAULT_MAX_TEMP = 32.0

# Default heat palette as packed 16-bit RGB565 values, coldest first.
# Sampled from the gradient black -> purple -> blue -> green -> yellow -> red -> white.
DEFAULT_PALETTE_565 = (
    0x0000, 0x1805, 0x300A, 0x480F, 0x3813, 0x2816, 0x1819, 0x081D,
    0x007E, 0x0237, 0x03D0, 0x0589, 0x0742, 0x27E0, 0x57E0, 0x8FE0,
    0xC7E0, 0xFFE0, 0xFE40, 0xFCA0, 0xFAE0, 0xF920, 0xF841, 0xF904,
    0xF9E7, 0xFACB, 0xFBAE, 0xFC92, 0xFD75, 0xFE59, 0xFF1C, 0xFFFF,
)
