from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest
import yaml
from pydantic import ValidationError

from metamesh.config import ScenarioConfig, dump_config, load_config
from metamesh.config.schema import OrbitMotionConfig, OscillatingMotionConfig, StaticMotionConfig
from metamesh.examples.synthetic import PRESETS, preset_balls, preset_scenario
from metamesh.runtime.builders import build_extractor, build_field, build_writer
from metamesh.core.exporter import MeshWriter, ObjWriter
from metamesh.motion.paths import OrbitMotion, OscillatingMotion, StaticMotion


def _write_yaml(path: Path, data: dict) -> None:
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(data, f)


def test_load_config_parses_motions_and_resolves_output(tmp_path: Path) -> None:
    cfg_path = tmp_path / "scene.yaml"
    _write_yaml(
        cfg_path,
        {
            "lattice": {"origin": [-1.0, -1.0, -1.0], "extent": [2.0, 2.0, 2.0], "step": 0.25},
            "field": {
                "balls": [
                    {"center": [0.0, 0.0, 0.0], "radius": 0.5},
                    {"center": [0.5, 0.0, 0.0], "radius": 0.3, "motion": {"kind": "oscillating", "amplitude": [0.1, 0.0, 0.0]}},
                    {"center": [0.0, 0.5, 0.0], "radius": 0.3, "motion": {"kind": "orbit", "radius": 0.2, "plane": "xz"}},
                ],
            },
            "output": {"path": "out/mesh.obj", "format": "obj"},
        },
    )
    cfg = load_config(cfg_path)
    assert cfg.output.path == (tmp_path / "out" / "mesh.obj").resolve()
    assert isinstance(cfg.field.balls[0].motion, StaticMotionConfig)
    assert isinstance(cfg.field.balls[1].motion, OscillatingMotionConfig)
    assert isinstance(cfg.field.balls[2].motion, OrbitMotionConfig)

    field = build_field(cfg)
    assert isinstance(field.balls[0].motion, StaticMotion)
    assert isinstance(field.balls[1].motion, OscillatingMotion)
    assert isinstance(field.balls[2].motion, OrbitMotion)

    extractor = build_extractor(cfg, field)
    assert extractor.lattice.shape == (8, 8, 8)
    writer = build_writer(cfg)
    assert isinstance(writer, ObjWriter)
    assert isinstance(writer, MeshWriter)


def test_invalid_configs_are_rejected(tmp_path: Path) -> None:
    with pytest.raises(ValidationError):
        ScenarioConfig.model_validate({"field": {"balls": []}, "output": {"path": "x.ply"}})
    with pytest.raises(ValidationError):
        ScenarioConfig.model_validate(
            {"lattice": {"step": 0.0}, "field": {"preset": "single"}, "output": {"path": "x.ply"}}
        )
    with pytest.raises(ValidationError):
        ScenarioConfig.model_validate(
            {"lattice": {"extent": [1.0, 0.0, 1.0]}, "field": {"preset": "single"}, "output": {"path": "x.ply"}}
        )
    with pytest.raises(ValidationError):
        ScenarioConfig.model_validate(
            {"field": {"preset": "single"}, "extractor": {"fallback_normal": [0, 0, 0]}, "output": {"path": "x.ply"}}
        )
    cfg_path = tmp_path / "list.yaml"
    cfg_path.write_text("- 1\n- 2\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(cfg_path)


def test_preset_field_is_centred_on_lattice() -> None:
    cfg = ScenarioConfig.model_validate(
        {
            "lattice": {"origin": [10.0, 0.0, 0.0], "extent": [4.0, 4.0, 4.0], "step": 0.5},
            "field": {"preset": "single"},
            "output": {"path": "x.ply"},
        }
    )
    field = build_field(cfg)
    np.testing.assert_allclose(field.centers()[0], [12.0, 2.0, 2.0])
    assert field.balls[0].radius == pytest.approx(0.3 * 4.0)


def test_presets_and_dump_round_trip(tmp_path: Path) -> None:
    for name in PRESETS:
        assert preset_balls(name)
    with pytest.raises(ValueError):
        preset_balls("nope")

    cfg = preset_scenario("cluster", tmp_path / "cluster.ply", frames=3)
    path = dump_config(cfg, tmp_path / "cluster.yaml")
    loaded = load_config(path)
    assert loaded.frames == 3
    assert len(loaded.field.balls) == len(cfg.field.balls)
    assert loaded.field.balls[1].motion.kind == "orbit"
