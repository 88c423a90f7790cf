# frame_source.py

"""
Frame Sources

I/O glue that delivers sample grids to the viewer. The heat-map core never
sees serial framing: a source either returns a complete, correctly sized grid
or None for the tick. Malformed lines are counted and logged so a frozen
display can be diagnosed.
"""

import logging

import numpy as np
import serial

from constants import LOGGER_NAME

logger = logging.getLogger(LOGGER_NAME)

# Optional prefix the sensor firmware puts in front of a frame line.
FRAME_PREFIX = "T:"


def parse_frame(line: str, rows: int, cols: int):
    """
    Parses one comma-separated frame line into a rows x cols grid.

    Returns None for anything that is not exactly rows * cols numbers.
    A trailing comma is tolerated.
    """
    text = line.strip()
    if text.startswith(FRAME_PREFIX):
        text = text[len(FRAME_PREFIX):]
    if not text:
        return None

    parts = text.split(',')
    if parts[-1].strip() == '':
        parts = parts[:-1]
    if len(parts) != rows * cols:
        return None

    try:
        values = [float(part) for part in parts]
    except ValueError:
        return None
    return np.array(values, dtype=np.float64).reshape(rows, cols)


class FrameStats:
    """Running counts of frame lines seen by a source."""
    def __init__(self):
        self.received = 0
        self.accepted = 0
        self.dropped = 0

    def record(self, accepted: bool):
        self.received += 1
        if accepted:
            self.accepted += 1
        else:
            self.dropped += 1

    def __repr__(self):
        return f"FrameStats(received={self.received}, accepted={self.accepted}, dropped={self.dropped})"


class SerialFrameSource:
    """
    Reads comma-separated frames from a serial port.

    Data Contract:
    - Inputs:
        - serial_port: an open pyserial port (or any object with
          `in_waiting`, `readline()` and `close()`).
        - rows, cols (int): expected grid shape.
    - Outputs: read() returns the newest valid grid or None.
    - Side Effects: Consumes bytes from the port. Updates `stats`.
    - Invariants: Never returns a grid with a shape other than (rows, cols).
    """
    def __init__(self, serial_port, rows: int, cols: int):
        self.port = serial_port
        self.rows = rows
        self.cols = cols
        self.stats = FrameStats()

    @classmethod
    def open(cls, port: str, baud: int, rows: int, cols: int, timeout: float = 1.0):
        try:
            serial_port = serial.Serial(port, baud, timeout=timeout)
        except serial.SerialException as e:
            logger.error(f"Could not open serial port {port}: {e}")
            raise
        serial_port.reset_input_buffer()
        logger.info(f"Connected to {port} at {baud} baud.")
        return cls(serial_port, rows, cols)

    def read(self):
        """
        Drains every pending line and returns the newest valid grid.
        Returns None when nothing valid arrived since the last call.
        """
        latest = None
        while self.port.in_waiting:
            raw_line = self.port.readline()
            line = raw_line.decode('utf-8', errors='ignore').strip()
            if not line:
                continue

            grid = parse_frame(line, self.rows, self.cols)
            self.stats.record(grid is not None)
            if grid is None:
                logger.warning(
                    f"Dropped malformed frame ({len(line)} chars, "
                    f"expected {self.rows * self.cols} values). {self.stats}"
                )
                continue
            latest = grid
        return latest

    def close(self):
        self.port.close()
        logger.info(f"Serial source closed. {self.stats}")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()


class SyntheticFrameSource:
    """
    Generates frames without hardware: a warm spot drifting in a circle over
    an ambient background, plus sensor-like noise.
    """
    def __init__(self, rows: int, cols: int, rng: np.random.Generator,
                 ambient: float = 24.0, hotspot: float = 34.0, noise: float = 0.3):
        self.rows = rows
        self.cols = cols
        self.rng = rng
        self.ambient = ambient
        self.hotspot = hotspot
        self.noise = noise
        self.stats = FrameStats()
        self.tick = 0

        # Cell coordinates, reused every frame.
        self._ys, self._xs = np.mgrid[0:rows, 0:cols]

    def read(self):
        angle = self.tick * 0.05
        self.tick += 1

        center_y = (self.rows - 1) / 2 * (1 + 0.6 * np.sin(angle))
        center_x = (self.cols - 1) / 2 * (1 + 0.6 * np.cos(angle))
        spread = max(self.rows, self.cols) / 4
        dist_sq = (self._ys - center_y)**2 + (self._xs - center_x)**2

        grid = self.ambient + (self.hotspot - self.ambient) * np.exp(-dist_sq / (2 * spread**2))
        grid = grid + self.rng.normal(0.0, self.noise, (self.rows, self.cols))
        self.stats.record(True)
        return grid

    def close(self):
        logger.info(f"Synthetic source closed. {self.stats}")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()


def open_frame_source(config: dict, rows: int, cols: int, rng: np.random.Generator):
    """
    Picks the frame source from the 'serial' section of the config.
    A missing or null port selects the synthetic source.
    """
    serial_config = config.get('serial', {})
    port = serial_config.get('port')
    if port:
        return SerialFrameSource.open(
            port,
            serial_config.get('baud', 115200),
            rows,
            cols,
            timeout=serial_config.get('timeout', 1.0)
        )
    logger.info("No serial port configured. Using synthetic frames.")
    return SyntheticFrameSource(rows, cols, rng)
