from __future__ import annotations

import argparse
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
import numpy as np
from mpl_toolkits.mplot3d.art3d import Poly3DCollection

from metamesh.examples.synthetic import preset_scenario
from metamesh.runtime.builders import build_lattice
from metamesh.sdk import extract_from_config


@dataclass(frozen=True)
class ExampleSpec:
    name: str
    preset: Optional[str] = None
    frames: int = 1


PREVIEW_EXAMPLES: List[ExampleSpec] = [
    ExampleSpec(name="single", preset="single"),
    ExampleSpec(name="pair", preset="pair", frames=4),
    ExampleSpec(name="cluster", preset="cluster", frames=4),
]

OUTPUT_DIR = Path("examples/outputs")
IMAGE_DIR = Path("examples/images")
LIGHT_DIR = np.array([0.4, 0.5, 0.75]) / np.linalg.norm([0.4, 0.5, 0.75])


def _ensure_dirs() -> None:
    OUTPUT_DIR.mkdir(parents=True, exist_ok=True)
    IMAGE_DIR.mkdir(parents=True, exist_ok=True)


def run_example(spec: ExampleSpec, step: float):
    out_path = OUTPUT_DIR / f"{spec.name}.npz"
    if spec.preset is None:
        raise ValueError(f"Example '{spec.name}' has no preset.")
    cfg = preset_scenario(spec.preset, out_path, step=step, frames=spec.frames, fmt="npz")
    return extract_from_config(cfg, output=out_path, frames=spec.frames)


def _load_mesh(path: Path) -> tuple[np.ndarray, np.ndarray]:
    with np.load(path) as data:
        return data["vertices"], data["normals"]


def render_mesh(name: str, vertices: np.ndarray, normals: np.ndarray, bounds: np.ndarray) -> Path:
    if vertices.size == 0:
        raise ValueError(f"No triangles to render for {name}")
    tris = vertices.reshape(-1, 3, 3)
    # Lambert shading from the mean vertex normal of each triangle
    face_n = normals.reshape(-1, 3, 3).mean(axis=1)
    face_n /= np.clip(np.linalg.norm(face_n, axis=1, keepdims=True), 1e-12, None)
    shade = 0.25 + 0.75 * np.clip(face_n @ LIGHT_DIR, 0.0, 1.0)
    colors = plt.get_cmap("viridis")(shade)

    fig = plt.figure(figsize=(6, 6), dpi=150)
    ax = fig.add_subplot(1, 1, 1, projection="3d")
    ax.add_collection3d(Poly3DCollection(tris, facecolors=colors, linewidths=0.0))
    lo, hi = bounds
    ax.set_xlim(lo[0], hi[0])
    ax.set_ylim(lo[1], hi[1])
    ax.set_zlim(lo[2], hi[2])
    ax.set_box_aspect((1, 1, 1))
    ax.set_title(f"{name.replace('_', ' ').title()} ({len(tris)} triangles)")
    fig.tight_layout()
    out_path = IMAGE_DIR / f"{name}.png"
    fig.savefig(out_path)
    plt.close(fig)
    return out_path


def generate_examples(names: List[str], step: float) -> None:
    _ensure_dirs()
    selected = PREVIEW_EXAMPLES if not names else [spec for spec in PREVIEW_EXAMPLES if spec.name in names]
    if not selected:
        raise ValueError("No matching examples selected.")
    for spec in selected:
        logging.info("Running example '%s'", spec.name)
        result = run_example(spec, step)
        lattice = build_lattice(result.config)
        bounds = np.stack([lattice.origin, lattice.origin + lattice.extent])
        for path in result.output_paths:
            vertices, normals = _load_mesh(path)
            if vertices.size == 0:
                logging.warning("No triangles generated for %s, skipping image", path.name)
                continue
            image_path = render_mesh(path.stem, vertices, normals, bounds)
            logging.info("Saved %s", image_path)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate metamesh example meshes and preview images.")
    parser.add_argument("--example", "-e", action="append", help="Example name to run (default: all).")
    parser.add_argument("--step", type=float, default=0.2, help="Lattice step size (default: 0.2).")
    parser.add_argument("--log-level", default="INFO", help="Logging level (default: INFO).")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.INFO), format="[%(levelname)s] %(message)s")
    generate_examples(args.example or [], step=args.step)


if __name__ == "__main__":
    main()
