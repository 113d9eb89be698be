"""metamesh – marching-cubes isosurfaces of animated metaball fields.

This package contains:
- CaseTable & corner/edge conventions (core.tables)
- ScalarField contract and MetaBallField (core.field)
- VoxelLattice (core.lattice)
- NormalEstimator (core.normals)
- MeshAssembler / MeshBuffers (core.mesh)
- IsosurfaceExtractor, the per-frame pass (core.extractor)
- PLY / OBJ / NPZ mesh writers (core.exporter)

Each ``IsosurfaceExtractor.extract()`` call advances the field by one tick
and rebuilds the mesh from scratch; triangles never share vertices.
"""

from .core.tables import CASE_TABLE, CaseTable, InvariantViolation, corner_mask
from .core.field import MetaBall, MetaBallField, ScalarField, sample_field
from .core.lattice import VoxelLattice
from .core.normals import NormalEstimator
from .core.mesh import MeshAssembler, MeshBuffers
from .core.extractor import ExtractionStats, ExtractorConfig, IsosurfaceExtractor, interpolate_crossing
from .core.exporter import NpzWriter, ObjWriter, PlyWriter
from .motion.paths import OrbitMotion, OscillatingMotion, StaticMotion

__version__ = "0.1.0"
