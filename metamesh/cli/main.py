from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer

from ..config import dump_config, load_config
from ..examples.synthetic import PRESETS, preset_scenario
from ..sdk.run import ConfigRunResult, extract_from_config

app = typer.Typer(help="Metaball isosurface extraction utilities")
preset_app = typer.Typer(help="Preset scenario helpers")
app.add_typer(preset_app, name="preset")

_OUTPUT_SUFFIXES = {".ply", ".obj", ".npz"}


def _configure_logging(level: str) -> None:
    numeric = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(level=numeric, format="[%(levelname)s] %(message)s")
    logging.getLogger("metamesh").setLevel(numeric)


def _report(result: ConfigRunResult) -> None:
    total = sum(int(s["triangles"]) for s in result.stats)
    last = result.output_paths[-1]
    typer.echo(f"Completed {len(result.stats)} frame(s), {total} triangles → {last}")


def _execute_extract(
    config: Path,
    output_override: Optional[Path],
    frames_override: Optional[int],
    log_level: str,
) -> None:
    _configure_logging(log_level)
    cfg = load_config(config)
    if output_override is not None and output_override.suffix.lower() not in _OUTPUT_SUFFIXES:
        raise typer.BadParameter(f"Unsupported output extension '{output_override.suffix}'", param_hint="--output")
    result = extract_from_config(cfg, output=output_override, frames=frames_override)
    _report(result)


@app.command("extract")
def extract(
    config: Path = typer.Argument(..., exists=True, readable=True, help="Path to YAML configuration file."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Override output path (extension sets format)."),
    frames: Optional[int] = typer.Option(None, "--frames", min=1, help="Override number of animation frames."),
    log_level: str = typer.Option("INFO", "--log-level", help="Logging level (e.g. INFO, DEBUG)."),
) -> None:
    """Extract isosurface meshes for a scenario specified by a YAML config."""

    _execute_extract(config, output, frames, log_level)


@app.command("run")
def run(
    config: Path = typer.Argument(..., exists=True, readable=True, help="Path to YAML configuration file."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Override output path (extension sets format)."),
    frames: Optional[int] = typer.Option(None, "--frames", min=1, help="Override number of animation frames."),
    log_level: str = typer.Option("INFO", "--log-level", help="Logging level (e.g. INFO, DEBUG)."),
) -> None:
    """Alias for `extract`"""

    _execute_extract(config, output, frames, log_level)


@app.command("quick")
def quick(
    output: Path = typer.Option(Path("outputs/metaballs.ply"), "--output", "-o", help="Output mesh path (.ply/.obj/.npz)."),
    preset: str = typer.Option("pair", "--preset", help=f"Metaball preset ({', '.join(PRESETS)})."),
    size: float = typer.Option(5.0, "--size", help="Edge length of the cubic region centred on the origin."),
    step: float = typer.Option(0.2, "--step", help="Lattice step size."),
    frames: int = typer.Option(1, "--frames", min=1, help="Number of animation frames."),
    gradient_epsilon: float = typer.Option(0.01, "--gradient-epsilon", help="Finite-difference offset for normals."),
    no_clamp: bool = typer.Option(False, "--no-clamp", help="Keep extrapolated edge crossings instead of clamping."),
    log_level: str = typer.Option("INFO", "--log-level", help="Logging level (e.g. INFO, DEBUG)."),
) -> None:
    """Extract a preset metaball scene driven entirely from CLI options."""

    if preset.lower() not in PRESETS:
        raise typer.BadParameter(f"preset must be one of {list(PRESETS)}.", param_hint="--preset")
    if size <= 0.0:
        raise typer.BadParameter("size must be positive.", param_hint="--size")
    if step <= 0.0 or step > size:
        raise typer.BadParameter("step must be positive and no larger than size.", param_hint="--step")
    if gradient_epsilon <= 0.0:
        raise typer.BadParameter("gradient_epsilon must be positive.", param_hint="--gradient-epsilon")
    fmt = output.suffix.lower()
    if fmt not in _OUTPUT_SUFFIXES:
        raise typer.BadParameter("Output must end with .ply, .obj, or .npz", param_hint="--output")

    _configure_logging(log_level)
    output = output.resolve()
    cfg = preset_scenario(preset, output, size=size, step=step, frames=frames, fmt=fmt.lstrip("."))
    cfg.extractor.gradient_epsilon = gradient_epsilon
    cfg.extractor.clamp_interpolation = not no_clamp

    result = extract_from_config(cfg)
    _report(result)


@preset_app.command("write")
def preset_write(
    output: Path = typer.Argument(..., help="Output YAML path."),
    preset: str = typer.Option("pair", "--preset", help=f"Metaball preset ({', '.join(PRESETS)})."),
    mesh_path: Path = typer.Option(Path("metaballs.ply"), "--mesh-path", help="Mesh output path stored in the config."),
    size: float = typer.Option(5.0, "--size", help="Edge length of the cubic region centred on the origin."),
    step: float = typer.Option(0.2, "--step", help="Lattice step size."),
    frames: int = typer.Option(1, "--frames", min=1, help="Number of animation frames."),
) -> None:
    """Write a preset scenario to a YAML config for editing."""

    if preset.lower() not in PRESETS:
        raise typer.BadParameter(f"preset must be one of {list(PRESETS)}.", param_hint="--preset")
    fmt = mesh_path.suffix.lower()
    if fmt not in _OUTPUT_SUFFIXES:
        raise typer.BadParameter("Mesh path must end with .ply, .obj, or .npz", param_hint="--mesh-path")
    cfg = preset_scenario(preset, mesh_path, size=size, step=step, frames=frames, fmt=fmt.lstrip("."))
    out = dump_config(cfg, output.resolve())
    typer.echo(f"Wrote {preset} scenario to {out}")


def main() -> None:
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
