# interpolator.py

import logging

import numba
import numpy as np

from constants import LOGGER_NAME
from errors import ConfigError, GridShapeError

logger = logging.getLogger(LOGGER_NAME)

# --- JIT-Compiled Interpolation Functions ---
# Compiled by Numba in nopython mode. They operate only on NumPy arrays and
# scalars; validation happens in the Python wrapper below.

@numba.jit(nopython=True)
def bilinear_weights(fx, fy):
    """
    Weights of the four corner samples for fractional offsets (fx, fy).
    Order: top-left, bottom-left, top-right, bottom-right. They sum to 1.
    """
    return (
        (1.0 - fx) * (1.0 - fy),
        (1.0 - fx) * fy,
        fx * (1.0 - fy),
        fx * fy,
    )

@numba.jit(nopython=True)
def _source_coordinate(index, src_size, out_size):
    """Maps an output index onto the continuous source axis [0, src_size - 1]."""
    denominator = out_size - 1
    if denominator <= 0:
        return 0.0
    # Multiply first so the last output index lands exactly on src_size - 1.
    return index * (src_size - 1) / denominator

@numba.jit(nopython=True)
def _bilinear_interpolate_jit(src, out, factor):
    """
    Fills `out` (rows*factor x cols*factor) from `src` (rows x cols).
    Corners clamp to the last row/column via min() instead of wrapping.
    """
    rows, cols = src.shape
    out_rows = rows * factor
    out_cols = cols * factor

    for i in range(out_rows):
        x = _source_coordinate(i, rows, out_rows)
        x1 = int(np.floor(x))
        x2 = min(x1 + 1, rows - 1)
        fx = x - x1
        for j in range(out_cols):
            y = _source_coordinate(j, cols, out_cols)
            y1 = int(np.floor(y))
            y2 = min(y1 + 1, cols - 1)
            fy = y - y1

            w_tl, w_bl, w_tr, w_br = bilinear_weights(fx, fy)
            out[i, j] = (
                w_tl * src[x1, y1] +
                w_bl * src[x1, y2] +
                w_tr * src[x2, y1] +
                w_br * src[x2, y2]
            )


def check_factor(factor):
    """Raises ConfigError unless factor is a positive integer."""
    if isinstance(factor, bool) or not isinstance(factor, (int, np.integer)) or factor <= 0:
        raise ConfigError(f"Interpolation factor must be a positive integer, got {factor!r}")


def interpolate(grid, factor: int) -> np.ndarray:
    """
    Expands a sample grid by an integer factor using bilinear interpolation.

    Data Contract:
    - Inputs:
        - grid (array-like) - 2D R x C grid of temperatures.
        - factor (int) - upsampling factor k, k > 0.
    - Outputs: np.ndarray of shape (R*k, C*k), dtype float64. A new array;
      the input is never modified.
    - Side Effects: None.
    - Invariants: The four output corners equal the four source corners and
      k == 1 returns a copy of the source. A bad factor raises ConfigError,
      a non-2D or empty grid raises GridShapeError.
    """
    check_factor(factor)
    src = np.ascontiguousarray(grid, dtype=np.float64)
    if src.ndim != 2 or src.size == 0:
        raise GridShapeError(f"Expected a non-empty 2D grid, got shape {src.shape}")

    rows, cols = src.shape
    out = np.empty((rows * factor, cols * factor), dtype=np.float64)
    _bilinear_interpolate_jit(src, out, int(factor))
    return out
