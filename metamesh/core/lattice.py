from __future__ import annotations
from dataclasses import dataclass
from typing import Iterator, Sequence, Tuple
import numpy as np

from .tables import CUBE_CORNERS
from .utils import as_vec3


@dataclass
class VoxelLattice:
    """Uniform grid of cube cells covering ``[origin, origin + extent]``.

    Cells are enumerated x-outer, then y, then z (C order over ``shape``).
    Corner positions of a cell follow the ``CUBE_CORNERS`` order, which the
    case table's edge indexing depends on.
    """
    origin: Sequence[float] = (-2.5, -2.5, -2.5)
    extent: Sequence[float] = (5.0, 5.0, 5.0)
    step: float = 0.2

    def __post_init__(self) -> None:
        self.origin = as_vec3(self.origin, "origin")
        self.extent = as_vec3(self.extent, "extent")
        if not np.isfinite(self.step) or self.step <= 0.0:
            raise ValueError("step must be a positive finite number.")
        if np.any(self.extent <= 0.0):
            raise ValueError("extent must be positive along every axis.")
        self.step = float(self.step)
        # Cover the whole extent; exact multiples stay exact despite float noise.
        counts = np.maximum(np.ceil(self.extent / self.step - 1e-9), 1).astype(np.int64)
        self._shape: Tuple[int, int, int] = (int(counts[0]), int(counts[1]), int(counts[2]))
        self._points = self._build_points()
        self._points.setflags(write=False)

    def _build_points(self) -> np.ndarray:
        axes = [
            self.origin[a] + self.step * np.arange(self._shape[a] + 1, dtype=np.float64)
            for a in range(3)
        ]
        xv, yv, zv = np.meshgrid(*axes, indexing="ij")
        return np.stack([xv, yv, zv], axis=-1)

    @property
    def shape(self) -> Tuple[int, int, int]:
        """Number of cells along x, y, z."""
        return self._shape

    @property
    def num_cells(self) -> int:
        nx, ny, nz = self._shape
        return nx * ny * nz

    def grid_points(self) -> np.ndarray:
        """Lattice nodes as a read-only ``(nx+1, ny+1, nz+1, 3)`` array."""
        return self._points

    def corner_positions(self, i: int, j: int, k: int) -> np.ndarray:
        nx, ny, nz = self._shape
        if not (0 <= i < nx and 0 <= j < ny and 0 <= k < nz):
            raise IndexError(f"Cell ({i}, {j}, {k}) outside lattice of shape {self._shape}")
        idx = CUBE_CORNERS + np.array([i, j, k], dtype=np.int64)
        return self._points[idx[:, 0], idx[:, 1], idx[:, 2]]

    def corner_values(self, values: np.ndarray, i: int, j: int, k: int) -> np.ndarray:
        """Pick the 8 corner samples of cell ``(i, j, k)`` from a node-shaped value grid."""
        idx = CUBE_CORNERS + np.array([i, j, k], dtype=np.int64)
        return values[idx[:, 0], idx[:, 1], idx[:, 2]]

    def cells(self) -> Iterator[Tuple[Tuple[int, int, int], np.ndarray]]:
        nx, ny, nz = self._shape
        for i in range(nx):
            for j in range(ny):
                for k in range(nz):
                    yield (i, j, k), self.corner_positions(i, j, k)

    def corner_masks(self, values: np.ndarray) -> np.ndarray:
        """Per-cell corner masks (uint8, shape ``self.shape``) from node values."""
        nx, ny, nz = self._shape
        if values.shape != (nx + 1, ny + 1, nz + 1):
            raise ValueError(f"values shape {values.shape} does not match lattice nodes {(nx + 1, ny + 1, nz + 1)}")
        masks = np.zeros(self._shape, dtype=np.uint8)
        for bit, (dx, dy, dz) in enumerate(CUBE_CORNERS):
            inside = values[dx:dx + nx, dy:dy + ny, dz:dz + nz] >= 0
            masks |= inside.astype(np.uint8) << np.uint8(bit)
        return masks
