from __future__ import annotations
from dataclasses import dataclass
from typing import Tuple
import numpy as np

from .field import ScalarField, sample_field
from .utils import ensure_unit_vectors


@dataclass
class NormalEstimator:
    """Outward unit normals from central differences of the field gradient.

    ``normal = -normalize(g)`` where ``g_a = F(p + eps*e_a) - F(p - eps*e_a)``;
    the field grows towards the inside, so the negated gradient points out.
    Points where ``g`` vanishes get ``fallback`` instead of NaN.
    """
    epsilon: float = 0.01
    fallback: Tuple[float, float, float] = (0.0, 1.0, 0.0)

    def __post_init__(self) -> None:
        if not np.isfinite(self.epsilon) or self.epsilon <= 0.0:
            raise ValueError("epsilon must be a positive finite number.")
        fb = np.asarray(self.fallback, dtype=np.float64)
        if fb.shape != (3,) or not np.isfinite(np.linalg.norm(fb)) or np.linalg.norm(fb) == 0.0:
            raise ValueError("fallback must be a non-zero 3-vector.")
        # Offsets ordered +x, -x, +y, -y, +z, -z
        self._offsets = np.repeat(np.eye(3), 2, axis=0) * np.tile([1.0, -1.0], 3)[:, None] * self.epsilon

    def gradient(self, scalar_field: ScalarField, points: np.ndarray) -> np.ndarray:
        """Unscaled central-difference gradient at each of the (N, 3) ``points``."""
        pts = np.asarray(points, dtype=np.float64).reshape(-1, 3)
        if len(pts) == 0:
            return np.zeros((0, 3), dtype=np.float64)
        probes = (pts[:, None, :] + self._offsets[None, :, :]).reshape(-1, 3)
        vals = sample_field(scalar_field, probes).reshape(len(pts), 6)
        return vals[:, 0::2] - vals[:, 1::2]

    def estimate(self, scalar_field: ScalarField, points: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """Unit normals for ``points`` plus a mask of the ones that used the fallback."""
        g = self.gradient(scalar_field, points)
        if len(g) == 0:
            return g, np.zeros((0,), dtype=bool)
        return ensure_unit_vectors(-g, fallback=self.fallback)

    def estimate_one(self, scalar_field: ScalarField, point: np.ndarray) -> np.ndarray:
        normals, _ = self.estimate(scalar_field, np.asarray(point, dtype=np.float64).reshape(1, 3))
        return normals[0]
