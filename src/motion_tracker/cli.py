"""motion-tracker CLI - inspect, capture and compare gesture files.

Usage:
    motion-tracker inspect FILE          - Show a gesture file's name and extent
    motion-tracker capture CSV NAME      - Normalize x,y,z samples into a gesture file
    motion-tracker compare A B           - Confidence between two gestures
    motion-tracker match CANDIDATE DIR   - Rank a directory of gestures against one
"""

from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import Optional

try:
    import typer
except ImportError:
    raise ImportError("typer is required for CLI. Install with: pip install typer")

from motion_tracker.config import RecognizerConfig
from motion_tracker.similarity import confidence, score_all
from motion_tracker.storage import load_directory, load_trace, save_trace
from motion_tracker.recorder import TrajectoryRecorder
from motion_tracker.trajectory import GestureTrace

app = typer.Typer(
    name="motion-tracker",
    help="3D gesture capture and recognition tools.",
    add_completion=False,
)


@app.callback()
def main(
    log_level: str = typer.Option("warning", help="Log level"),
):
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.WARNING),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )


def _load_or_exit(path: str) -> GestureTrace:
    trace = load_trace(path)
    if trace is None:
        typer.echo(f"❌ Could not load gesture: {path}", err=True)
        raise typer.Exit(1)
    return trace


def _config(points: int, threshold: float, resample: bool) -> RecognizerConfig:
    try:
        return RecognizerConfig(
            use_resampling=resample,
            target_point_count=points,
            similarity_threshold=threshold,
        )
    except ValueError as e:
        typer.echo(f"❌ {e}", err=True)
        raise typer.Exit(1)


@app.command()
def inspect(
    path: str = typer.Argument(..., help="Gesture file"),
):
    """Print a gesture file's name, point count and bounding box."""
    trace = _load_or_exit(path)
    lo, hi = trace.bounds()
    typer.echo(f"Name:   {trace.name}")
    typer.echo(f"Points: {len(trace)}")
    typer.echo(f"Min:    ({lo.x:.3f}, {lo.y:.3f}, {lo.z:.3f})")
    typer.echo(f"Max:    ({hi.x:.3f}, {hi.y:.3f}, {hi.z:.3f})")


@app.command()
def capture(
    samples: str = typer.Argument(..., help="CSV file of world-space x,y,z rows"),
    name: str = typer.Argument(..., help="Gesture name (also the output file name)"),
    out_dir: str = typer.Option(".", "--out-dir", "-o", help="Directory to save into"),
    forward: tuple[float, float, float] = typer.Option(
        (0.0, 0.0, 1.0), help="Forward direction at capture start"
    ),
    origin: tuple[float, float, float] = typer.Option(
        (0.0, 0.0, 0.0), help="Reference origin at capture start"
    ),
):
    """Run recorded samples through capture normalization and save the gesture."""
    path = Path(samples)
    if not path.exists():
        typer.echo(f"❌ Samples file not found: {samples}", err=True)
        raise typer.Exit(1)

    recorder = TrajectoryRecorder()
    recorder.begin_capture("cli", origin=origin, forward=forward)
    with open(path, newline="") as f:
        for row in csv.reader(f):
            if not row or row[0].startswith("#"):
                continue
            try:
                recorder.sample("cli", [float(v) for v in row[:3]])
            except ValueError:
                # header or malformed row
                continue

    trace = recorder.end_capture("cli", name)
    if trace is None:
        typer.echo("❌ No samples found", err=True)
        raise typer.Exit(1)

    saved = save_trace(trace, out_dir)
    typer.echo(f"✅ Saved {trace.name} ({len(trace)} points) to {saved}")


@app.command()
def compare(
    first: str = typer.Argument(..., help="First gesture file"),
    second: str = typer.Argument(..., help="Second gesture file"),
    points: int = typer.Option(32, help="Resample target point count"),
    threshold: float = typer.Option(0.7, help="Distance at which confidence reaches 0"),
    resample: bool = typer.Option(True, help="Resample both gestures before comparing"),
):
    """Print the similarity confidence between two gestures."""
    config = _config(points, threshold, resample)
    a = _load_or_exit(first)
    b = _load_or_exit(second)
    typer.echo(f"{a.name} vs {b.name}: {confidence(a, b, config):.3f}")


@app.command()
def match(
    candidate: str = typer.Argument(..., help="Gesture file to recognize"),
    library_dir: str = typer.Argument(..., help="Directory of reference gestures"),
    points: int = typer.Option(32, help="Resample target point count"),
    threshold: float = typer.Option(0.7, help="Distance at which confidence reaches 0"),
    resample: bool = typer.Option(True, help="Resample gestures before comparing"),
    top: Optional[int] = typer.Option(None, help="Only show the N best matches"),
):
    """Rank every reference gesture in a directory against a candidate."""
    config = _config(points, threshold, resample)
    trace = _load_or_exit(candidate)
    references = load_directory(library_dir)
    if not references:
        typer.echo(f"❌ No gestures found in {library_dir}", err=True)
        raise typer.Exit(1)

    ranked = sorted(score_all(trace, references, config), key=lambda s: s[1], reverse=True)
    if top:
        ranked = ranked[:top]
    for ref, score in ranked:
        typer.echo(f"{score:.3f}  {ref.name}")


if __name__ == "__main__":
    app()
