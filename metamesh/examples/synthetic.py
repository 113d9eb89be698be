from __future__ import annotations

from pathlib import Path
from typing import List

from ..config.schema import (
    FieldConfig,
    LatticeConfig,
    MetaBallConfig,
    OrbitMotionConfig,
    OscillatingMotionConfig,
    OutputConfig,
    ScenarioConfig,
)

PRESETS = ("single", "pair", "cluster")


def _single(size: float) -> List[MetaBallConfig]:
    return [MetaBallConfig(center=(0.0, 0.0, 0.0), radius=0.3 * size)]


def _pair(size: float) -> List[MetaBallConfig]:
    # Two balls drifting towards each other and apart again.
    return [
        MetaBallConfig(
            center=(-0.2 * size, 0.0, 0.0),
            radius=0.18 * size,
            motion=OscillatingMotionConfig(kind="oscillating", amplitude=(0.12 * size, 0.0, 0.0), frequency_hz=0.25),
        ),
        MetaBallConfig(
            center=(0.2 * size, 0.0, 0.0),
            radius=0.18 * size,
            motion=OscillatingMotionConfig(
                kind="oscillating",
                amplitude=(0.12 * size, 0.0, 0.0),
                frequency_hz=0.25,
                phase_rad=(3.141592653589793, 0.0, 0.0),
            ),
        ),
    ]


def _cluster(size: float) -> List[MetaBallConfig]:
    return [
        MetaBallConfig(center=(0.0, 0.0, 0.0), radius=0.16 * size),
        MetaBallConfig(
            center=(0.0, 0.0, 0.0),
            radius=0.1 * size,
            motion=OrbitMotionConfig(kind="orbit", radius=0.22 * size, period_s=3.0, plane="xy"),
        ),
        MetaBallConfig(
            center=(0.0, 0.0, 0.0),
            radius=0.1 * size,
            motion=OrbitMotionConfig(kind="orbit", radius=0.22 * size, period_s=5.0, plane="yz", phase_rad=1.5),
        ),
        MetaBallConfig(
            center=(0.0, -0.25 * size, 0.1 * size),
            radius=0.08 * size,
            motion=OscillatingMotionConfig(kind="oscillating", amplitude=(0.0, 0.1 * size, 0.1 * size), frequency_hz=0.4),
        ),
    ]


def preset_balls(preset: str, size: float = 5.0) -> List[MetaBallConfig]:
    """Ball layouts scaled to fit a cube of edge ``size`` centred on the origin."""
    preset = preset.lower()
    if size <= 0.0:
        raise ValueError("size must be positive.")
    if preset == "single":
        return _single(size)
    if preset == "pair":
        return _pair(size)
    if preset == "cluster":
        return _cluster(size)
    raise ValueError(f"Unknown metaball preset '{preset}'.")


def preset_scenario(
    preset: str,
    output: Path,
    size: float = 5.0,
    step: float = 0.2,
    frames: int = 1,
    fmt: str = "ply",
) -> ScenarioConfig:
    """Complete scenario for ``preset`` over a lattice of edge ``size`` centred on the origin."""
    half = size / 2.0
    return ScenarioConfig(
        lattice=LatticeConfig(origin=(-half, -half, -half), extent=(size, size, size), step=step),
        field=FieldConfig(balls=preset_balls(preset, size)),
        output=OutputConfig(path=Path(output), format=fmt),
        frames=frames,
    )
