"""Halo-padded grid buffers and the initial configuration."""

from __future__ import annotations

import logging

import numpy as np

from .errors import HostAllocationError
from .rng import Rand48

logger = logging.getLogger(__name__)

CELL = np.uint8


def allocate(lines: int, xsize: int, xp=np):
    """
    Allocate a zeroed ``(lines + 2, xsize + 2)`` grid.

    The outer ring is the halo; rows ``1..lines`` and columns ``1..xsize``
    hold the simulation state.
    """
    if lines < 1:
        raise ValueError(f"lines must be >= 1, got {lines}")
    if xsize < 1:
        raise ValueError(f"xsize must be >= 1, got {xsize}")
    return xp.zeros((lines + 2, xsize + 2), dtype=CELL)


def interior(grid):
    """View of the non-halo cells of ``grid``."""
    return grid[1:-1, 1:-1]


def shape_of(grid) -> tuple[int, int]:
    """Return ``(lines, xsize)`` of a padded grid."""
    return grid.shape[0] - 2, grid.shape[1] - 2


def init_grid(lines: int, xsize: int, seed: int) -> np.ndarray:
    """
    Build the initial host grid.

    Interior cells are drawn row-major from a :class:`Rand48` seeded with
    ``seed``; each is alive with probability one half. The halo is left at
    zero until the first boundary synchronisation.
    """
    try:
        grid = allocate(lines, xsize)
    except MemoryError as exc:
        raise HostAllocationError(
            f"cannot allocate {lines + 2}x{xsize + 2} host grid"
        ) from exc

    rng = Rand48(seed)
    cells = interior(grid)
    for y in range(lines):
        row = [rng.randint(100) >= 50 for _ in range(xsize)]
        cells[y] = row
    logger.debug("initialised %dx%d grid, seed=%d, alive=%d", lines, xsize, seed, int(cells.sum()))
    return grid


# CUDA caps on blocks per grid dimension
MAX_GRID_X = 2**31 - 1
MAX_GRID_Y = 65535


def launch_dims(lines: int, xsize: int, block: tuple, threads: int):
    """
    Block counts for the transition (2D) and boundary (1D) kernels.

    Counts are clamped to the device limits; the kernels stride over any
    rows or columns the launch does not cover directly.
    """
    grid_x = min((xsize + block[0] - 1) // block[0], MAX_GRID_X)
    grid_y = min((lines + block[1] - 1) // block[1], MAX_GRID_Y)
    span = max(lines, xsize)
    boundary = min((span + threads - 1) // threads, MAX_GRID_X)
    return (grid_x, grid_y), (boundary,)
