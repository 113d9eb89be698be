from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterator, List, Literal, Optional, Tuple, Union

from ..config import ScenarioConfig, load_config
from ..core.extractor import IsosurfaceExtractor
from ..core.mesh import MeshBuffers
from ..core.utils import get_logger
from ..runtime.builders import build_extractor, build_writer

_log = get_logger()

_EXT_TO_FORMAT: Dict[str, Literal["ply", "obj", "npz"]] = {".ply": "ply", ".obj": "obj", ".npz": "npz"}


@dataclass(frozen=True)
class ConfigRunResult:
    """Summary of an extraction run driven by a configuration file."""

    stats: List[Dict[str, float]]
    output_paths: List[Path]
    config: ScenarioConfig


def frame_path(base: Path, frame: int, frames: int) -> Path:
    """Output path of ``frame``; multi-frame runs get a ``_NNNN`` suffix."""
    if frames <= 1:
        return base
    return base.with_name(f"{base.stem}_{frame:04d}{base.suffix}")


def iter_frames(extractor: IsosurfaceExtractor, frames: int) -> Iterator[Tuple[int, MeshBuffers]]:
    """Drive ``frames`` extraction passes, one field tick each."""
    for frame in range(frames):
        yield frame, extractor.extract()


def extract_from_config(
    config: Union[str, Path, ScenarioConfig],
    *,
    output: Optional[Path] = None,
    frames: Optional[int] = None,
) -> ConfigRunResult:
    """Run an extraction scenario described by a configuration file or object.

    Parameters
    ----------
    config:
        Path to a YAML file or a pre-loaded :class:`~metamesh.config.schema.ScenarioConfig`.
    output:
        Optional override for the output file. The extension drives the format
        (``.ply``, ``.obj`` or ``.npz``).
    frames:
        Optional override for the number of passes. Each pass advances the
        field by one tick and writes its own file.

    Returns
    -------
    ConfigRunResult
        Per-frame statistics, the written paths, and the resolved
        configuration object used for the run.
    """

    cfg = load_config(config) if not isinstance(config, ScenarioConfig) else config.model_copy(deep=True)

    if frames is not None:
        if frames < 1:
            raise ValueError("frames must be at least 1")
        cfg.frames = frames

    if output is not None:
        out_path = Path(output).resolve()
        ext = out_path.suffix.lower()
        if ext not in _EXT_TO_FORMAT:
            raise ValueError(f"Unsupported output extension '{ext}'")
        cfg.output.path = out_path
        cfg.output.format = _EXT_TO_FORMAT[ext]
    else:
        cfg.output.path = Path(cfg.output.path).resolve()
    cfg.output.path.parent.mkdir(parents=True, exist_ok=True)

    extractor = build_extractor(cfg)

    stats: List[Dict[str, float]] = []
    paths: List[Path] = []
    for frame, mesh in iter_frames(extractor, cfg.frames):
        if cfg.fail_on_nonfinite:
            mesh.validate(require_finite=True)
        path = frame_path(cfg.output.path, frame, cfg.frames)
        writer = build_writer(cfg, path)
        try:
            writer.write_mesh(mesh)
        finally:
            writer.close()
        frame_stats = extractor.last_stats.as_dict()
        frame_stats["frame"] = frame
        stats.append(frame_stats)
        paths.append(path)
        _log.info("Frame %d: %d triangles -> %s", frame, mesh.triangle_count, path.name)

    return ConfigRunResult(stats=stats, output_paths=paths, config=cfg)
