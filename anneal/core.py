"""Core CPU simulation – vectorised NumPy version."""

from __future__ import annotations

import logging

import numpy as np

from . import config
from .errors import HostAllocationError
from .grid import allocate, init_grid, interior, shape_of

logger = logging.getLogger(__name__)

# next state indexed by the sum of a cell and its 8 neighbours
ANNEAL = np.array([0, 0, 0, 0, 1, 0, 1, 1, 1, 1], dtype=np.uint8)
ANNEAL.setflags(write=False)

DEFAULT_XSIZE = 1024
DEFAULT_SEED = 424243


def rule(total: int) -> int:
    """Look up the next state for a neighbourhood sum in ``[0, 9]``."""
    if not 0 <= total <= 9:
        raise IndexError(f"neighbourhood sum {total} outside [0, 9]")
    return int(ANNEAL[total])


def sync_boundary(grid: np.ndarray) -> np.ndarray:
    """
    Copy the opposite interior edges into the halo of ``grid``, in place.

    Rows and columns are wrapped first, then each corner takes the
    diagonally opposite interior cell. Only halo cells are written.
    """
    lines, xsize = shape_of(grid)
    grid[0, 1:-1] = grid[lines, 1:-1]
    grid[lines + 1, 1:-1] = grid[1, 1:-1]
    grid[1:-1, 0] = grid[1:-1, xsize]
    grid[1:-1, xsize + 1] = grid[1:-1, 1]
    grid[0, 0] = grid[lines, xsize]
    grid[0, xsize + 1] = grid[lines, 1]
    grid[lines + 1, 0] = grid[1, xsize]
    grid[lines + 1, xsize + 1] = grid[1, 1]
    return grid


def neighbourhood_sum(src: np.ndarray) -> np.ndarray:
    """Sum every interior cell with its 8 neighbours, read through the halo."""
    lines, xsize = shape_of(src)
    tot = np.zeros((lines, xsize), np.uint8)
    for dy in (0, 1, 2):
        for dx in (0, 1, 2):
            tot += src[dy:dy + lines, dx:dx + xsize]
    return tot


def transition(src: np.ndarray, dst: np.ndarray) -> np.ndarray:
    """Write the next state of every interior cell of ``src`` into ``dst``."""
    interior(dst)[...] = ANNEAL[neighbourhood_sum(src)]
    return dst


def next_state(src: np.ndarray, row: int, col: int) -> int:
    """Next state of the single cell at padded position ``(row, col)``."""
    total = int(src[row - 1:row + 2, col - 1:col + 2].sum())
    return rule(total)


class Simulation:
    """
    Double-buffered anneal automaton on a torus.

    Owns a source/destination grid pair. Each :meth:`step` refreshes the
    source halo, writes the next generation into the destination and swaps
    the two roles; the source always holds the authoritative state.
    """

    xp = np

    def __init__(self, lines: int, xsize: int | None = None, seed: int | None = None):
        cfg = config.load_config()
        grid_cfg = cfg.get("grid", {})

        self.lines = lines
        self.xsize = xsize if xsize is not None else grid_cfg.get("xsize", DEFAULT_XSIZE)
        self.seed = seed if seed is not None else grid_cfg.get("seed", DEFAULT_SEED)
        self.generation = 0

        self.host = init_grid(self.lines, self.xsize, self.seed)
        self.src = None
        self.dst = None

    @classmethod
    def from_grid(cls, grid: np.ndarray) -> "Simulation":
        """Wrap an existing padded host grid instead of a seeded one."""
        sim = cls.__new__(cls)
        sim.lines, sim.xsize = shape_of(grid)
        sim.seed = None
        sim.generation = 0
        sim.host = np.array(grid, dtype=np.uint8)
        sim.src = None
        sim.dst = None
        return sim

    # --- buffer management ---------------------------------------------
    def upload(self):
        """Make the grid pair resident on the compute side."""
        try:
            self.src = self.host.copy()
            self.dst = allocate(self.lines, self.xsize, xp=self.xp)
        except MemoryError as exc:
            self.close()
            raise HostAllocationError(
                f"cannot allocate {self.lines + 2}x{self.xsize + 2} grid pair"
            ) from exc

    def download(self) -> np.ndarray:
        """Copy the authoritative grid back to host memory."""
        self._require_uploaded()
        try:
            self.host = self.src.copy()
        except MemoryError as exc:
            raise HostAllocationError("cannot allocate host copy of the final grid") from exc
        return self.host

    def close(self):
        """Release the grid pair."""
        self.src = None
        self.dst = None

    def _require_uploaded(self):
        if self.src is None:
            self.upload()

    # --- stages ---------------------------------------------------------
    def _sync_boundary(self, grid):
        sync_boundary(grid)

    def _transition(self, src, dst):
        transition(src, dst)

    # --- external API ---------------------------------------------------
    def step(self):
        """Advance the automaton by one generation."""
        self._require_uploaded()
        self._sync_boundary(self.src)
        self._transition(self.src, self.dst)
        self.src, self.dst = self.dst, self.src
        self.generation += 1

    def run(self, iterations: int):
        """Perform exactly ``iterations`` steps; zero leaves the grid unchanged."""
        if iterations < 0:
            raise ValueError(f"iterations must be >= 0, got {iterations}")
        self._require_uploaded()
        logger.info("running %d iterations on %dx%d grid", iterations, self.lines, self.xsize)
        for _ in range(iterations):
            self.step()
        return self

    def interior(self) -> np.ndarray:
        """Interior of the last downloaded (or initial) host grid."""
        return interior(self.host)

    # iterable convenience
    def __iter__(self):
        return self

    def __next__(self):
        self.step()
        return self.src


# shorthand
def step(sim: "Simulation"):
    """Functional-style step function."""
    sim.step()
