from __future__ import annotations
from typing import Sequence, Tuple
import numpy as np
import logging

def get_logger(name: str = "metamesh") -> logging.Logger:
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        fmt = logging.Formatter("[%(levelname)s] %(message)s")
        handler.setFormatter(fmt)
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
    return logger

def ensure_unit_vectors(
    v: np.ndarray, fallback: Sequence[float] = (0.0, 1.0, 0.0), eps: float = 1e-12
) -> Tuple[np.ndarray, np.ndarray]:
    """Normalize rows of ``v``; rows with (near) zero or non-finite length become ``fallback``.

    Returns the unit vectors and a boolean mask of the rows that fell back.
    """
    v = np.asarray(v, dtype=np.float64)
    norms = np.linalg.norm(v, axis=1, keepdims=True)
    degenerate = ~np.isfinite(norms[:, 0]) | (norms[:, 0] <= eps)
    safe = np.where(degenerate[:, None], 1.0, norms)
    out = v / safe
    if np.any(degenerate):
        fb = np.asarray(fallback, dtype=np.float64)
        out[degenerate] = fb / np.linalg.norm(fb)
    return out, degenerate

def as_vec3(value: Sequence[float], name: str = "value") -> np.ndarray:
    arr = np.asarray(value, dtype=np.float64)
    if arr.shape != (3,):
        raise ValueError(f"{name} must have 3 components, got shape {arr.shape}")
    return arr
