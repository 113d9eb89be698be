from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Tuple

import numpy as np


class BallMotion:
    """Base interface for metaball motion: displacement from the rest center at time ``t``."""

    def offset(self, t: float) -> np.ndarray:
        raise NotImplementedError


@dataclass
class StaticMotion(BallMotion):
    """A ball that never moves."""

    def offset(self, t: float) -> np.ndarray:
        return np.zeros(3, dtype=np.float64)


@dataclass
class OscillatingMotion(BallMotion):
    """Independent sinusoid per axis: ``amplitude * sin(2*pi*f*t + phase)``."""

    amplitude: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    frequency_hz: float = 0.5
    phase_rad: Tuple[float, float, float] = (0.0, 0.0, 0.0)

    def __post_init__(self) -> None:
        if self.frequency_hz < 0.0:
            raise ValueError("frequency_hz must be non-negative.")
        self._amplitude = np.asarray(self.amplitude, dtype=np.float64)
        self._phase = np.asarray(self.phase_rad, dtype=np.float64)
        if self._amplitude.shape != (3,) or self._phase.shape != (3,):
            raise ValueError("amplitude and phase_rad must have 3 components.")

    def offset(self, t: float) -> np.ndarray:
        return self._amplitude * np.sin(2.0 * np.pi * self.frequency_hz * t + self._phase)


_PLANE_AXES = {"xy": (0, 1), "yz": (1, 2), "xz": (0, 2)}


@dataclass
class OrbitMotion(BallMotion):
    """Circular path of ``radius`` around the rest center in an axis-aligned plane.

    The orbit starts on the first axis of the plane (``t = 0`` gives an offset
    of ``+radius`` along it), so the rest center is the circle's center.
    """

    radius: float = 1.0
    period_s: float = 4.0
    plane: Literal["xy", "yz", "xz"] = "xy"
    phase_rad: float = 0.0
    _axes: Tuple[int, int] = field(init=False, repr=False, default=(0, 1))

    def __post_init__(self) -> None:
        if self.period_s <= 0.0:
            raise ValueError("period_s must be positive.")
        if self.radius < 0.0:
            raise ValueError("radius must be non-negative.")
        if self.plane not in _PLANE_AXES:
            raise ValueError(f"plane must be one of {sorted(_PLANE_AXES)}.")
        self._axes = _PLANE_AXES[self.plane]

    def offset(self, t: float) -> np.ndarray:
        angle = 2.0 * np.pi * t / self.period_s + self.phase_rad
        out = np.zeros(3, dtype=np.float64)
        a, b = self._axes
        out[a] = self.radius * np.cos(angle)
        out[b] = self.radius * np.sin(angle)
        return out

