"""Checksum and result line for a finished run."""

import hashlib

import numpy as np


def grid_digest(cells: np.ndarray) -> str:
    """MD5 of the row-major bytes of ``cells`` as 32 uppercase hex characters."""
    data = np.ascontiguousarray(cells, dtype=np.uint8)
    return hashlib.md5(data.tobytes()).hexdigest().upper()


def format_report(digest: str, elapsed_ms: float) -> str:
    return f"hash gpu: {digest}\ttime: {elapsed_ms:.1f} ms"
