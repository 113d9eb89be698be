from __future__ import annotations
from dataclasses import dataclass
import numpy as np


@dataclass
class MeshBuffers:
    """Triangle soup produced by one extraction pass.

    Every triangle owns three consecutive vertices, so ``indices`` is always
    ``arange(len(vertices))``.
    """
    vertices: np.ndarray                  # (N, 3)
    normals: np.ndarray                   # (N, 3)
    indices: np.ndarray                   # (N,)

    def __post_init__(self) -> None:
        self.validate()

    @property
    def vertex_count(self) -> int:
        return len(self.vertices)

    @property
    def triangle_count(self) -> int:
        return len(self.indices) // 3

    def triangles(self) -> np.ndarray:
        """Indices reshaped to (T, 3)."""
        return self.indices.reshape(-1, 3)

    def is_finite(self) -> bool:
        return bool(np.all(np.isfinite(self.vertices)) and np.all(np.isfinite(self.normals)))

    def nonfinite_vertex_count(self) -> int:
        bad = ~np.all(np.isfinite(self.vertices), axis=1) | ~np.all(np.isfinite(self.normals), axis=1)
        return int(np.count_nonzero(bad))

    def validate(self, require_finite: bool = False) -> None:
        n = len(self.vertices)
        if self.vertices.ndim != 2 or self.vertices.shape[1] != 3:
            raise ValueError(f"vertices must be (N, 3), got {self.vertices.shape}")
        if self.normals.shape != self.vertices.shape:
            raise ValueError(f"normals shape {self.normals.shape} != vertices shape {self.vertices.shape}")
        if self.indices.shape != (n,):
            raise ValueError(f"indices length {len(self.indices)} != vertex count {n}")
        if n % 3 != 0:
            raise ValueError(f"vertex count {n} is not a multiple of 3")
        if not np.array_equal(self.indices, np.arange(n)):
            raise ValueError("indices must be the sequence 0..N-1")
        if require_finite and not self.is_finite():
            raise ValueError(f"{self.nonfinite_vertex_count()} vertices carry non-finite coordinates or normals")

    @classmethod
    def empty(cls) -> "MeshBuffers":
        return cls(
            vertices=np.zeros((0, 3), dtype=np.float64),
            normals=np.zeros((0, 3), dtype=np.float64),
            indices=np.zeros((0,), dtype=np.int64),
        )


class MeshAssembler:
    """Reusable vertex/normal arena filled in lock-step during a pass.

    ``reset`` rewinds the arena without freeing it; ``build`` hands out copies
    so a consumer never sees the arena being overwritten by the next pass.
    """

    def __init__(self, initial_capacity: int = 1024) -> None:
        cap = max(int(initial_capacity), 3)
        self._vertices = np.empty((cap, 3), dtype=np.float64)
        self._normals = np.empty((cap, 3), dtype=np.float64)
        self._size = 0

    def __len__(self) -> int:
        return self._size

    @property
    def capacity(self) -> int:
        return len(self._vertices)

    def reset(self) -> None:
        self._size = 0

    def _reserve(self, extra: int) -> None:
        need = self._size + extra
        cap = self.capacity
        if need <= cap:
            return
        while cap < need:
            cap *= 2
        vertices = np.empty((cap, 3), dtype=np.float64)
        normals = np.empty((cap, 3), dtype=np.float64)
        vertices[: self._size] = self._vertices[: self._size]
        normals[: self._size] = self._normals[: self._size]
        self._vertices, self._normals = vertices, normals

    def extend(self, vertices: np.ndarray, normals: np.ndarray) -> None:
        vertices = np.asarray(vertices, dtype=np.float64).reshape(-1, 3)
        normals = np.asarray(normals, dtype=np.float64).reshape(-1, 3)
        if len(vertices) != len(normals):
            raise ValueError(f"{len(vertices)} vertices but {len(normals)} normals")
        n = len(vertices)
        if n == 0:
            return
        self._reserve(n)
        self._vertices[self._size: self._size + n] = vertices
        self._normals[self._size: self._size + n] = normals
        self._size += n

    def append(self, vertex: np.ndarray, normal: np.ndarray) -> int:
        """Add a single vertex and return its index."""
        idx = self._size
        self.extend(vertex, normal)
        return idx

    def build(self) -> MeshBuffers:
        n = self._size
        return MeshBuffers(
            vertices=self._vertices[:n].copy(),
            normals=self._normals[:n].copy(),
            indices=np.arange(n, dtype=np.int64),
        )
