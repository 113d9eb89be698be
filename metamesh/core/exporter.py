from __future__ import annotations
from typing import Optional
import numpy as np
import pathlib

from .mesh import MeshBuffers
from .utils import get_logger

_log = get_logger()


class MeshWriter:
    """Buffers one mesh and writes it on ``close``."""

    def __init__(self, path: str) -> None:
        self.path = path
        self._mesh: Optional[MeshBuffers] = None

    def write_mesh(self, mesh: MeshBuffers) -> None:
        self._mesh = mesh

    def close(self) -> None:
        if self._mesh is None:
            return
        path = pathlib.Path(self.path)
        path.parent.mkdir(parents=True, exist_ok=True)
        self._write(path, self._mesh)
        _log.debug("Wrote %d triangles to %s", self._mesh.triangle_count, path.name)
        self._mesh = None

    def _write(self, path: pathlib.Path, mesh: MeshBuffers) -> None:  # pragma: no cover - abstract
        raise NotImplementedError


class PlyWriter(MeshWriter):
    """ASCII PLY with per-vertex normals and a triangle face list."""

    def _write(self, path: pathlib.Path, mesh: MeshBuffers) -> None:
        tris = mesh.triangles()
        with open(path, "w", encoding="utf-8") as f:
            f.write("ply\nformat ascii 1.0\n")
            f.write(f"element vertex {mesh.vertex_count}\n")
            f.write("property float x\nproperty float y\nproperty float z\n")
            f.write("property float nx\nproperty float ny\nproperty float nz\n")
            f.write(f"element face {len(tris)}\n")
            f.write("property list uchar int vertex_indices\n")
            f.write("end_header\n")
            for (x, y, z), (nx, ny, nz) in zip(mesh.vertices, mesh.normals):
                f.write(f"{float(x)} {float(y)} {float(z)} {float(nx)} {float(ny)} {float(nz)}\n")
            for a, b, c in tris:
                f.write(f"3 {int(a)} {int(b)} {int(c)}\n")


class ObjWriter(MeshWriter):
    """Wavefront OBJ; face corners reference matching position and normal indices."""

    def _write(self, path: pathlib.Path, mesh: MeshBuffers) -> None:
        with open(path, "w", encoding="utf-8") as f:
            f.write("# metamesh isosurface\n")
            for x, y, z in mesh.vertices:
                f.write(f"v {float(x)} {float(y)} {float(z)}\n")
            for x, y, z in mesh.normals:
                f.write(f"vn {float(x)} {float(y)} {float(z)}\n")
            # OBJ indices are 1-based
            for a, b, c in mesh.triangles() + 1:
                f.write(f"f {a}//{a} {b}//{b} {c}//{c}\n")


class NpzWriter(MeshWriter):
    def _write(self, path: pathlib.Path, mesh: MeshBuffers) -> None:
        np.savez_compressed(
            path,
            vertices=mesh.vertices.astype(np.float32),
            normals=mesh.normals.astype(np.float32),
            indices=mesh.indices.astype(np.int64),
        )


WRITER_BY_FORMAT = {
    "ply": PlyWriter,
    "obj": ObjWriter,
    "npz": NpzWriter,
}
