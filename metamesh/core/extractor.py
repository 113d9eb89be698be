from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Tuple
import time
import numpy as np

from .field import ScalarField, sample_field
from .lattice import VoxelLattice
from .mesh import MeshAssembler, MeshBuffers
from .normals import NormalEstimator
from .tables import CASE_TABLE, CaseTable, InvariantViolation, corner_mask
from .utils import get_logger

_log = get_logger()


@dataclass
class ExtractorConfig:
    origin: Tuple[float, float, float] = (-2.5, -2.5, -2.5)
    extent: Tuple[float, float, float] = (5.0, 5.0, 5.0)
    step: float = 0.2
    gradient_epsilon: float = 0.01
    clamp_interpolation: bool = True
    fallback_normal: Tuple[float, float, float] = (0.0, 1.0, 0.0)


@dataclass
class ExtractionStats:
    cells: int = 0
    active_cells: int = 0
    triangles: int = 0
    vertices: int = 0
    degenerate_edges: int = 0
    degenerate_normals: int = 0
    elapsed_s: float = 0.0

    def as_dict(self) -> dict:
        return {
            "cells": self.cells,
            "active_cells": self.active_cells,
            "triangles": self.triangles,
            "vertices": self.vertices,
            "degenerate_edges": self.degenerate_edges,
            "degenerate_normals": self.degenerate_normals,
            "elapsed_s": self.elapsed_s,
        }


def interpolate_crossing(
    left: np.ndarray, right: np.ndarray, fl: np.ndarray, fr: np.ndarray, clamp: bool = True
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Zero crossing along edges ``left -> right`` with end values ``fl``, ``fr``.

    ``t = -fl / (fr - fl)``; edges with ``fr == fl`` use ``t = 0.5``.
    Returns ``(t, points, degenerate)``; inputs may be single edges or batches.
    """
    left = np.asarray(left, dtype=np.float64)
    right = np.asarray(right, dtype=np.float64)
    fl = np.asarray(fl, dtype=np.float64)
    fr = np.asarray(fr, dtype=np.float64)
    denom = fr - fl
    degenerate = denom == 0.0
    with np.errstate(divide="ignore", invalid="ignore"):
        t = np.where(degenerate, 0.5, -fl / np.where(degenerate, 1.0, denom))
    if clamp:
        t = np.clip(t, 0.0, 1.0)
    t = np.asarray(t)
    points = left + t[..., None] * (right - left)
    return t, points, degenerate


class IsosurfaceExtractor:
    """Marching-cubes pass over a fixed lattice, rebuilt on every ``extract`` call.

    Each pass: reset buffers, advance the field once, classify every cell,
    emit one private vertex per triangle edge with its gradient normal.
    Cells are visited in lattice order and triangles in case-table order, so
    output is deterministic for a given field state.
    """

    def __init__(
        self,
        scalar_field: ScalarField,
        cfg: Optional[ExtractorConfig] = None,
        table: CaseTable = CASE_TABLE,
    ) -> None:
        self.field = scalar_field
        self.table = table
        self.assembler = MeshAssembler()
        self.last_stats = ExtractionStats()
        self.initialize(cfg or ExtractorConfig())

    def initialize(self, cfg: ExtractorConfig) -> None:
        """(Re)build the lattice and normal estimator from ``cfg``."""
        self.cfg = cfg
        self.lattice = VoxelLattice(origin=cfg.origin, extent=cfg.extent, step=cfg.step)
        self.normals = NormalEstimator(epsilon=cfg.gradient_epsilon, fallback=cfg.fallback_normal)
        _log.debug(
            "Extractor initialised: %s cells (%d total), step=%g, eps=%g",
            "x".join(str(n) for n in self.lattice.shape),
            self.lattice.num_cells,
            cfg.step,
            cfg.gradient_epsilon,
        )

    def triangulate_voxel(self, corners: np.ndarray, values: np.ndarray) -> Tuple[np.ndarray, int, int]:
        """Crossing points for one cell, three per triangle in emission order.

        Returns ``(vertices, mask, degenerate_edge_count)``.
        """
        corners = np.asarray(corners, dtype=np.float64)
        values = np.asarray(values, dtype=np.float64)
        if corners.shape != (8, 3):
            raise InvariantViolation(f"Expected (8, 3) corner positions, got {corners.shape}")
        mask = corner_mask(values)
        tris = self.table.triangles(mask)
        if not tris:
            return np.zeros((0, 3), dtype=np.float64), mask, 0
        edge_ids = np.fromiter((e for tri in tris for e in tri), dtype=np.int64, count=3 * len(tris))
        ends = self.table.edges[edge_ids]
        _, points, degenerate = interpolate_crossing(
            corners[ends[:, 0]],
            corners[ends[:, 1]],
            values[ends[:, 0]],
            values[ends[:, 1]],
            clamp=self.cfg.clamp_interpolation,
        )
        return points, mask, int(np.count_nonzero(degenerate))

    def extract(self, advance: bool = True) -> MeshBuffers:
        """Run one pass and return freshly built buffers.

        ``advance=False`` skips ``field.update()``; two such calls on an
        unchanged field give bit-identical output.
        """
        t0 = time.perf_counter()
        self.assembler.reset()
        if advance:
            self.field.update()

        lattice = self.lattice
        points = lattice.grid_points()
        values = sample_field(self.field, points.reshape(-1, 3)).reshape(points.shape[:3])
        masks = lattice.corner_masks(values)

        stats = ExtractionStats(cells=lattice.num_cells)
        active = np.argwhere((masks != 0) & (masks != 255))
        stats.active_cells = len(active)

        for i, j, k in active:
            corners = lattice.corner_positions(i, j, k)
            fv = lattice.corner_values(values, i, j, k)
            verts, mask, degenerate = self.triangulate_voxel(corners, fv)
            if mask != masks[i, j, k]:
                raise InvariantViolation(f"Cell ({i}, {j}, {k}) reclassified from {masks[i, j, k]} to {mask}")
            if len(verts) == 0:
                continue
            normals, fallback = self.normals.estimate(self.field, verts)
            self.assembler.extend(verts, normals)
            stats.degenerate_edges += degenerate
            stats.degenerate_normals += int(np.count_nonzero(fallback))

        mesh = self.assembler.build()
        stats.vertices = mesh.vertex_count
        stats.triangles = mesh.triangle_count
        stats.elapsed_s = time.perf_counter() - t0
        self.last_stats = stats
        _log.debug(
            "Pass done: %d/%d active cells, %d triangles, %d degenerate edges, %d fallback normals (%.3fs)",
            stats.active_cells,
            stats.cells,
            stats.triangles,
            stats.degenerate_edges,
            stats.degenerate_normals,
            stats.elapsed_s,
        )
        if not mesh.is_finite():
            _log.warning("Pass produced %d non-finite vertices", mesh.nonfinite_vertex_count())
        return mesh
