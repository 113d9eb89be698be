from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest
import yaml

from metamesh.sdk import extract_from_config
from metamesh.sdk.run import frame_path


def _write_config(path: Path, **overrides) -> Path:
    data = {
        "lattice": {"origin": [-1.5, -1.5, -1.5], "extent": [3.0, 3.0, 3.0], "step": 0.3},
        "field": {"balls": [{"center": [0.0, 0.0, 0.0], "radius": 1.0}]},
        "output": {"path": "mesh.npz", "format": "npz"},
    }
    data.update(overrides)
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(data, f)
    return path


def test_extract_from_config_writes_npz(tmp_path: Path) -> None:
    cfg_path = _write_config(tmp_path / "scene.yaml")
    result = extract_from_config(cfg_path)

    assert result.output_paths == [(tmp_path / "mesh.npz").resolve()]
    assert len(result.stats) == 1
    stats = result.stats[0]
    assert stats["frame"] == 0
    assert stats["triangles"] > 0
    assert stats["vertices"] == 3 * stats["triangles"]

    with np.load(result.output_paths[0]) as data:
        vertices = data["vertices"]
        assert vertices.shape == (stats["vertices"], 3)
        np.testing.assert_array_equal(data["indices"], np.arange(len(vertices)))
        dist = np.linalg.norm(vertices, axis=1)
        assert np.all(np.abs(dist - 1.0) < 0.15)


def test_multiple_frames_get_numbered_files(tmp_path: Path) -> None:
    cfg_path = _write_config(
        tmp_path / "scene.yaml",
        field={
            "balls": [
                {
                    "center": [0.0, 0.0, 0.0],
                    "radius": 0.8,
                    "motion": {"kind": "oscillating", "amplitude": [0.3, 0.0, 0.0], "frequency_hz": 2.0},
                }
            ],
            "time_step_s": 0.1,
        },
    )
    result = extract_from_config(cfg_path, frames=3)

    names = [p.name for p in result.output_paths]
    assert names == ["mesh_0000.npz", "mesh_0001.npz", "mesh_0002.npz"]
    assert all(p.exists() for p in result.output_paths)
    assert [s["frame"] for s in result.stats] == [0, 1, 2]
    with np.load(result.output_paths[0]) as a, np.load(result.output_paths[1]) as b:
        assert not np.array_equal(a["vertices"], b["vertices"])


def test_output_override_selects_format(tmp_path: Path) -> None:
    cfg_path = _write_config(tmp_path / "scene.yaml")
    out = tmp_path / "nested" / "ball.obj"
    result = extract_from_config(cfg_path, output=out)

    assert result.config.output.format == "obj"
    assert result.output_paths == [out.resolve()]
    text = out.read_text(encoding="utf-8")
    assert text.startswith("# metamesh isosurface")
    assert "f 1//1 2//2 3//3" in text


def test_config_object_is_not_mutated(tmp_path: Path) -> None:
    from metamesh.examples.synthetic import preset_scenario

    cfg = preset_scenario("single", tmp_path / "single.ply", size=3.0, step=0.5)
    result = extract_from_config(cfg, output=tmp_path / "single.npz")
    assert cfg.output.format == "ply"
    assert result.config.output.format == "npz"
    assert (tmp_path / "single.npz").exists()


def test_invalid_overrides_are_rejected(tmp_path: Path) -> None:
    cfg_path = _write_config(tmp_path / "scene.yaml")
    with pytest.raises(ValueError):
        extract_from_config(cfg_path, output=tmp_path / "mesh.stl")
    with pytest.raises(ValueError):
        extract_from_config(cfg_path, frames=0)


def test_frame_path() -> None:
    base = Path("out/mesh.ply")
    assert frame_path(base, 0, 1) == base
    assert frame_path(base, 12, 20) == Path("out/mesh_0012.ply")


class _NanBeyondField:
    """Unit ball whose samples turn into NaN for x > 0.4."""

    def __init__(self, inner) -> None:
        self.inner = inner

    def update(self) -> None:
        self.inner.update()

    def evaluate(self, point: np.ndarray) -> float:
        return float("nan") if point[0] > 0.4 else self.inner.evaluate(point)


def _nan_extractor(monkeypatch: pytest.MonkeyPatch) -> None:
    import metamesh.sdk.run as run_module
    from metamesh.runtime.builders import build_extractor, build_field

    def _build(cfg):
        return build_extractor(cfg, _NanBeyondField(build_field(cfg)))

    monkeypatch.setattr(run_module, "build_extractor", _build)


def test_fail_on_nonfinite_raises(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _nan_extractor(monkeypatch)
    cfg_path = _write_config(tmp_path / "scene.yaml", fail_on_nonfinite=True)
    with pytest.raises(ValueError):
        extract_from_config(cfg_path)
    assert not (tmp_path / "mesh.npz").exists()


def test_nonfinite_mesh_is_written_when_allowed(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _nan_extractor(monkeypatch)
    cfg_path = _write_config(tmp_path / "scene.yaml")
    result = extract_from_config(cfg_path)
    with np.load(result.output_paths[0]) as data:
        assert not np.all(np.isfinite(data["vertices"]))
