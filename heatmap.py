# heatmap.py

import logging
from collections import namedtuple

import numpy as np
import pygame

import constants
from errors import GridShapeError
from interpolator import check_factor, interpolate
from palette import PaletteMapper

logger = logging.getLogger(constants.LOGGER_NAME)

# One filled rectangle of the heat map: a pygame.Rect and an (r, g, b) tuple.
DrawCommand = namedtuple('DrawCommand', ['rect', 'color'])


def tile_edges(length: int, cells: int) -> list:
    """
    Pixel edges that split `length` into `cells` integer spans with no gaps.
    Returns cells + 1 values starting at 0 and ending at `length`.
    """
    return [k * length // cells for k in range(cells + 1)]


class HeatmapRenderer:
    """
    Turns sample grids into colored rectangles covering the viewport.

    Owns the immutable palette and the sensor configuration. Each call works
    on the grid it is given and keeps no per-frame state.

    Data Contract:
    - Inputs:
        - sensor_config (SensorConfig): grid shape, interpolation settings,
          temperature range and packed palette.
        - viewport (tuple): (width, height) in pixels of the drawing area.
    - Outputs: None.
    - Side Effects: None at construction beyond logging.
    - Invariants: Only grids of shape (rows, cols) are accepted. The factor
      and palette are validated here, so a bad configuration fails before the
      first frame is drawn.
    """
    def __init__(self, sensor_config, viewport: tuple = (constants.WIDTH, constants.HEIGHT)):
        check_factor(sensor_config.factor)
        self.config = sensor_config
        self.viewport = (int(viewport[0]), int(viewport[1]))
        self.interpolate_enabled = sensor_config.interpolate
        self.mapper = PaletteMapper(sensor_config.palette, sensor_config.min_temp, sensor_config.max_temp)

        # Python-native color tuples for pygame, indexed like the palette.
        self._color_tuples = [tuple(int(c) for c in rgb) for rgb in self.mapper.colors]
        self._rect_cache = {}

        logger.info(
            f"HeatmapRenderer created for {sensor_config.rows}x{sensor_config.cols} grid, "
            f"viewport {self.viewport[0]}x{self.viewport[1]}, "
            f"interpolation {'on' if self.interpolate_enabled else 'off'} (factor {sensor_config.factor})."
        )

    @property
    def output_shape(self) -> tuple:
        """Shape of the grid that actually gets drawn."""
        rows, cols = self.config.rows, self.config.cols
        if self.interpolate_enabled:
            return (rows * self.config.factor, cols * self.config.factor)
        return (rows, cols)

    def toggle_interpolation(self) -> bool:
        self.interpolate_enabled = not self.interpolate_enabled
        logger.info(f"Interpolation {'enabled' if self.interpolate_enabled else 'disabled'}.")
        return self.interpolate_enabled

    def validate_grid(self, grid) -> np.ndarray:
        """Returns the grid as a float array or raises GridShapeError."""
        try:
            array = np.asarray(grid, dtype=np.float64)
        except (TypeError, ValueError) as e:
            raise GridShapeError(f"Grid is not a rectangular array of numbers: {e}") from e
        expected = (self.config.rows, self.config.cols)
        if array.shape != expected:
            raise GridShapeError(f"Expected a {expected[0]}x{expected[1]} grid, got shape {array.shape}")
        return array

    def prepare(self, grid) -> np.ndarray:
        """Validates the grid and interpolates it when interpolation is on."""
        array = self.validate_grid(grid)
        if self.interpolate_enabled:
            return interpolate(array, self.config.factor)
        return array

    def _cell_rects(self, rows: int, cols: int) -> list:
        key = (rows, cols)
        if key not in self._rect_cache:
            width, height = self.viewport
            xs = tile_edges(width, cols)
            ys = tile_edges(height, rows)
            self._rect_cache[key] = [
                [pygame.Rect(xs[j], ys[i], xs[j + 1] - xs[j], ys[i + 1] - ys[i]) for j in range(cols)]
                for i in range(rows)
            ]
        return self._rect_cache[key]

    def draw_commands(self, grid) -> list:
        """
        Builds the draw commands for one frame in row-major order.

        The rectangles evenly tile the viewport; there is one command per
        cell of the drawn grid (raw or interpolated).
        """
        prepared = self.prepare(grid)
        indices = self.mapper.indices(prepared)
        rows, cols = indices.shape
        rects = self._cell_rects(rows, cols)

        commands = []
        for i in range(rows):
            for j in range(cols):
                commands.append(DrawCommand(rects[i][j], self._color_tuples[indices[i, j]]))
        return commands

    def draw(self, screen: pygame.Surface, grid) -> int:
        """Draws one frame onto `screen`. Returns the number of cells drawn."""
        commands = self.draw_commands(grid)
        for command in commands:
            pygame.draw.rect(screen, command.color, command.rect)
        return len(commands)

    def temperature_at(self, grid, pos: tuple) -> float:
        """Temperature of the drawn cell under viewport pixel `pos` (x, y)."""
        prepared = self.prepare(grid)
        rows, cols = prepared.shape
        width, height = self.viewport
        x = min(max(int(pos[0]), 0), width - 1)
        y = min(max(int(pos[1]), 0), height - 1)
        # Inverse of tile_edges: the last cell whose leading edge is <= the pixel.
        row = ((y + 1) * rows - 1) // height
        col = ((x + 1) * cols - 1) // width
        return float(prepared[row, col])
