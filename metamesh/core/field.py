from __future__ import annotations
from dataclasses import dataclass, field
from typing import List, Optional, Protocol, Sequence, runtime_checkable
import numpy as np

from ..motion.paths import BallMotion, StaticMotion
from .utils import as_vec3


@runtime_checkable
class ScalarField(Protocol):
    """Contract consumed by the extractor.

    ``evaluate(p) >= 0`` means ``p`` is inside the surface. ``update`` is
    called exactly once per extraction pass, before any sampling.
    """

    def update(self) -> None: ...

    def evaluate(self, point: np.ndarray) -> float: ...


def sample_field(scalar_field: ScalarField, points: np.ndarray) -> np.ndarray:
    """Evaluate ``scalar_field`` at an (N, 3) array of points.

    Uses the field's vectorised ``evaluate_many`` when it has one, otherwise
    falls back to one ``evaluate`` call per point.
    """
    pts = np.asarray(points, dtype=np.float64).reshape(-1, 3)
    many = getattr(scalar_field, "evaluate_many", None)
    if callable(many):
        out = np.asarray(many(pts), dtype=np.float64)
        if out.shape != (len(pts),):
            raise ValueError(f"evaluate_many returned shape {out.shape}, expected ({len(pts)},)")
        return out
    return np.fromiter((scalar_field.evaluate(p) for p in pts), dtype=np.float64, count=len(pts))


@dataclass
class MetaBall:
    """Point influence source with a rest center, a radius and an optional motion."""
    center: np.ndarray
    radius: float = 1.0
    motion: BallMotion = field(default_factory=StaticMotion)

    def __post_init__(self) -> None:
        self.center = as_vec3(self.center, "center")
        if self.radius <= 0.0:
            raise ValueError("MetaBall radius must be positive.")
        self.rest_center = self.center.copy()


class MetaBallField:
    """Sum of inverse-square metaball potentials minus a threshold.

    ``F(p) = sum_i r_i**2 / |p - c_i|**2 - threshold``. With the default
    threshold of 1 a lone ball's surface is the sphere of radius ``r_i``.
    Squared distances are clamped from below by ``min_dist2`` so sampling a
    center exactly stays finite.
    """

    def __init__(
        self,
        balls: Sequence[MetaBall],
        threshold: float = 1.0,
        time_step_s: float = 1.0 / 60.0,
        min_dist2: float = 1e-12,
    ) -> None:
        if not balls:
            raise ValueError("MetaBallField requires at least one ball.")
        if time_step_s < 0.0:
            raise ValueError("time_step_s must be non-negative.")
        self.balls: List[MetaBall] = list(balls)
        self.threshold = float(threshold)
        self.time_step_s = float(time_step_s)
        self.min_dist2 = float(min_dist2)
        self.tick = 0
        self._refresh_arrays()

    @property
    def time_s(self) -> float:
        return self.tick * self.time_step_s

    def _refresh_arrays(self) -> None:
        self._centers = np.vstack([b.center for b in self.balls])
        self._r2 = np.array([b.radius * b.radius for b in self.balls], dtype=np.float64)

    def update(self) -> None:
        """Advance one tick and move every ball along its motion."""
        self.tick += 1
        t = self.time_s
        for ball in self.balls:
            ball.center = ball.rest_center + ball.motion.offset(t)
        self._refresh_arrays()

    def reset(self) -> None:
        self.tick = 0
        for ball in self.balls:
            ball.center = ball.rest_center.copy()
        self._refresh_arrays()

    def evaluate(self, point: np.ndarray) -> float:
        return float(self.evaluate_many(np.asarray(point, dtype=np.float64).reshape(1, 3))[0])

    def evaluate_many(self, points: np.ndarray) -> np.ndarray:
        pts = np.asarray(points, dtype=np.float64).reshape(-1, 3)
        d = pts[:, None, :] - self._centers[None, :, :]
        dist2 = np.maximum(np.einsum("nbk,nbk->nb", d, d), self.min_dist2)
        return (self._r2[None, :] / dist2).sum(axis=1) - self.threshold

    def centers(self) -> np.ndarray:
        return self._centers.copy()


def single_ball_field(radius: float = 1.0, center: Optional[Sequence[float]] = None) -> MetaBallField:
    c = (0.0, 0.0, 0.0) if center is None else center
    return MetaBallField([MetaBall(center=np.asarray(c, dtype=np.float64), radius=radius)])
