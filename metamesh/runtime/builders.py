from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import numpy as np

from ..config import ScenarioConfig
from ..config.schema import MetaBallConfig, MotionConfig
from ..core.exporter import WRITER_BY_FORMAT, MeshWriter
from ..core.extractor import ExtractorConfig, IsosurfaceExtractor
from ..core.field import MetaBall, MetaBallField
from ..core.lattice import VoxelLattice
from ..examples.synthetic import preset_balls
from ..motion.paths import BallMotion, OrbitMotion, OscillatingMotion, StaticMotion


def build_motion(motion_cfg: MotionConfig) -> BallMotion:
    if motion_cfg.kind == "static":
        return StaticMotion()
    if motion_cfg.kind == "oscillating":
        return OscillatingMotion(
            amplitude=motion_cfg.amplitude,
            frequency_hz=motion_cfg.frequency_hz,
            phase_rad=motion_cfg.phase_rad,
        )
    if motion_cfg.kind == "orbit":
        return OrbitMotion(
            radius=motion_cfg.radius,
            period_s=motion_cfg.period_s,
            plane=motion_cfg.plane,
            phase_rad=motion_cfg.phase_rad,
        )
    raise ValueError(f"Unsupported motion kind: {motion_cfg.kind}")


def _resolve_balls(cfg: ScenarioConfig) -> List[MetaBallConfig]:
    field_cfg = cfg.field
    if field_cfg.balls:
        return list(field_cfg.balls)
    # Presets are laid out around the origin; move them to the lattice center.
    lat = cfg.lattice
    size = float(min(lat.extent))
    center = np.asarray(lat.origin) + 0.5 * np.asarray(lat.extent)
    balls = preset_balls(field_cfg.preset, size=size)
    return [
        b.model_copy(update={"center": tuple(float(c) for c in np.asarray(b.center) + center)})
        for b in balls
    ]


def build_field(cfg: ScenarioConfig) -> MetaBallField:
    field_cfg = cfg.field
    if field_cfg.kind != "metaballs":
        raise ValueError(f"Unsupported field kind: {field_cfg.kind}")
    balls = [
        MetaBall(center=np.asarray(b.center, dtype=np.float64), radius=b.radius, motion=build_motion(b.motion))
        for b in _resolve_balls(cfg)
    ]
    return MetaBallField(balls, threshold=field_cfg.threshold, time_step_s=field_cfg.time_step_s)


def build_lattice(cfg: ScenarioConfig) -> VoxelLattice:
    lat = cfg.lattice
    return VoxelLattice(origin=lat.origin, extent=lat.extent, step=lat.step)


def build_extractor_config(cfg: ScenarioConfig) -> ExtractorConfig:
    lat = cfg.lattice
    ext = cfg.extractor
    return ExtractorConfig(
        origin=lat.origin,
        extent=lat.extent,
        step=lat.step,
        gradient_epsilon=ext.gradient_epsilon,
        clamp_interpolation=ext.clamp_interpolation,
        fallback_normal=ext.fallback_normal,
    )


def build_extractor(cfg: ScenarioConfig, field: Optional[MetaBallField] = None) -> IsosurfaceExtractor:
    return IsosurfaceExtractor(field if field is not None else build_field(cfg), cfg=build_extractor_config(cfg))


def build_writer(cfg: ScenarioConfig, path: Optional[Path] = None) -> MeshWriter:
    out_cfg = cfg.output
    format_lower = out_cfg.format.lower()
    writer_cls = WRITER_BY_FORMAT.get(format_lower)
    if writer_cls is None:
        raise ValueError(f"Unsupported output format: {out_cfg.format}")
    return writer_cls(str(path if path is not None else out_cfg.path))
