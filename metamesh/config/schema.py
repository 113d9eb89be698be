from __future__ import annotations

from pathlib import Path
from typing import Annotated, List, Literal, Optional, Union

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator


Vec3 = tuple[float, float, float]


class LatticeConfig(BaseModel):
    origin: Vec3 = (-2.5, -2.5, -2.5)
    extent: Vec3 = (5.0, 5.0, 5.0)
    step: float = Field(0.2, gt=0.0)

    @field_validator("extent")
    @classmethod
    def _positive_extent(cls, v: Vec3) -> Vec3:
        if any(e <= 0.0 for e in v):
            raise ValueError("extent must be positive along every axis")
        return v


class StaticMotionConfig(BaseModel):
    kind: Literal["static"] = "static"


class OscillatingMotionConfig(BaseModel):
    kind: Literal["oscillating"]
    amplitude: Vec3 = (0.0, 0.0, 0.0)
    frequency_hz: float = Field(0.5, ge=0.0)
    phase_rad: Vec3 = (0.0, 0.0, 0.0)


class OrbitMotionConfig(BaseModel):
    kind: Literal["orbit"]
    radius: float = Field(1.0, ge=0.0)
    period_s: float = Field(4.0, gt=0.0)
    plane: Literal["xy", "yz", "xz"] = "xy"
    phase_rad: float = 0.0


MotionConfig = Annotated[
    Union[StaticMotionConfig, OscillatingMotionConfig, OrbitMotionConfig],
    Field(discriminator="kind"),
]


class MetaBallConfig(BaseModel):
    center: Vec3 = (0.0, 0.0, 0.0)
    radius: float = Field(1.0, gt=0.0)
    motion: MotionConfig = Field(default_factory=StaticMotionConfig)


class FieldConfig(BaseModel):
    kind: Literal["metaballs"] = "metaballs"
    balls: List[MetaBallConfig] = Field(default_factory=list)
    preset: Optional[Literal["single", "pair", "cluster"]] = None
    threshold: float = 1.0
    time_step_s: float = Field(1.0 / 60.0, ge=0.0)

    @model_validator(mode="after")
    def _ensure_balls(self) -> "FieldConfig":
        if not self.balls and self.preset is None:
            raise ValueError("Field requires at least one ball or a preset")
        return self


class ExtractorConfigModel(BaseModel):
    gradient_epsilon: float = Field(0.01, gt=0.0)
    clamp_interpolation: bool = True
    fallback_normal: Vec3 = (0.0, 1.0, 0.0)

    @field_validator("fallback_normal")
    @classmethod
    def _nonzero_fallback(cls, v: Vec3) -> Vec3:
        if all(c == 0.0 for c in v):
            raise ValueError("fallback_normal must be non-zero")
        return v


class OutputConfig(BaseModel):
    path: Path
    format: Literal["ply", "obj", "npz"] = "ply"


class ScenarioConfig(BaseModel):
    lattice: LatticeConfig = LatticeConfig()
    field: FieldConfig
    extractor: ExtractorConfigModel = ExtractorConfigModel()
    output: OutputConfig
    frames: int = Field(1, ge=1)
    fail_on_nonfinite: bool = False


def load_config(path: str | Path) -> ScenarioConfig:
    path = Path(path)
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if not isinstance(data, dict):
        raise ValueError("Configuration root must be a mapping.")
    cfg = ScenarioConfig.model_validate(data)
    if not cfg.output.path.is_absolute():
        cfg.output.path = (path.parent / cfg.output.path).resolve()
    return cfg


def dump_config(cfg: ScenarioConfig, path: str | Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    data = cfg.model_dump(mode="json")
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(data, f, sort_keys=False)
    return path
