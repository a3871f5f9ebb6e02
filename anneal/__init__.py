"""Top‑level convenience API."""
from .core import ANNEAL, Simulation, step, sync_boundary, transition
from .config import load_config
from .digest import grid_digest
from .errors import AnnealError
__all__ = ['ANNEAL', 'Simulation', 'step', 'sync_boundary', 'transition',
           'load_config', 'grid_digest', 'AnnealError']
