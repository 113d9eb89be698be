from __future__ import annotations

import importlib.util
import sys
from pathlib import Path

import numpy as np
import pytest

matplotlib = pytest.importorskip("matplotlib")

SCRIPT = Path(__file__).resolve().parents[2] / "scripts" / "render_examples.py"


def _load_script():
    module_spec = importlib.util.spec_from_file_location("render_examples", SCRIPT)
    module = importlib.util.module_from_spec(module_spec)
    sys.modules[module_spec.name] = module
    module_spec.loader.exec_module(module)
    return module


def test_render_script_uses_headless_backend(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    module = _load_script()
    assert matplotlib.get_backend().lower() == "agg"

    monkeypatch.setattr(module, "IMAGE_DIR", tmp_path)
    vertices = np.array([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 1.0, 0.0]])
    normals = np.tile([0.0, 0.0, 1.0], (3, 1))
    bounds = np.array([[-1.0, -1.0, -1.0], [1.0, 1.0, 1.0]])
    out = module.render_mesh("tri", vertices, normals, bounds)
    assert out == tmp_path / "tri.png"
    assert out.exists()
