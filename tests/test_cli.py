"""Tests for the motion-tracker command line."""

import math

import numpy as np
import pytest
from typer.testing import CliRunner

from motion_tracker.cli import app
from motion_tracker.storage import load_trace, save_trace
from motion_tracker.trajectory import GestureTrace, normalize_trace

runner = CliRunner()


@pytest.fixture
def gesture_dir(tmp_path):
    angles = np.linspace(0, 2 * math.pi, 40)
    circle = GestureTrace("circle", np.column_stack([np.cos(angles), np.sin(angles), np.zeros(40)]))
    line = GestureTrace("line", np.column_stack([np.linspace(0, 1, 20), np.zeros(20), np.zeros(20)]))
    folder = tmp_path / "gestures"
    save_trace(normalize_trace(circle), folder)
    save_trace(normalize_trace(line), folder)
    return folder


class TestInspect:
    def test_inspect(self, gesture_dir):
        result = runner.invoke(app, ["inspect", str(gesture_dir / "line")])
        assert result.exit_code == 0
        assert "Name:   line" in result.output
        assert "Points: 51" in result.output

    def test_inspect_missing(self, tmp_path):
        result = runner.invoke(app, ["inspect", str(tmp_path / "nope")])
        assert result.exit_code == 1


class TestCompare:
    def test_identical(self, gesture_dir):
        path = str(gesture_dir / "circle")
        result = runner.invoke(app, ["compare", path, path])
        assert result.exit_code == 0
        assert "circle vs circle: 1.000" in result.output

    def test_invalid_points(self, gesture_dir):
        path = str(gesture_dir / "circle")
        result = runner.invoke(app, ["compare", path, path, "--points", "1"])
        assert result.exit_code == 1


class TestMatch:
    def test_ranking(self, gesture_dir):
        result = runner.invoke(app, ["match", str(gesture_dir / "line"), str(gesture_dir)])
        assert result.exit_code == 0
        lines = result.output.strip().splitlines()
        assert lines[0].endswith("line")
        assert lines[0].startswith("1.000")
        assert len(lines) == 2

    def test_top(self, gesture_dir):
        result = runner.invoke(app, ["match", str(gesture_dir / "line"), str(gesture_dir), "--top", "1"])
        assert len(result.output.strip().splitlines()) == 1

    def test_empty_directory(self, gesture_dir, tmp_path):
        empty = tmp_path / "empty"
        empty.mkdir()
        result = runner.invoke(app, ["match", str(gesture_dir / "line"), str(empty)])
        assert result.exit_code == 1


class TestCapture:
    def test_capture_csv(self, tmp_path):
        samples = tmp_path / "samples.csv"
        rows = ["x,y,z"] + [f"{i * 0.05},1.2,0.4" for i in range(11)]
        samples.write_text("\n".join(rows) + "\n")
        out = tmp_path / "out"

        result = runner.invoke(app, ["capture", str(samples), "swipe", "--out-dir", str(out)])
        assert result.exit_code == 0

        trace = load_trace(out / "swipe")
        assert trace.name == "swipe"
        np.testing.assert_allclose(trace.points[0], [0, 0, 0])
        np.testing.assert_allclose(trace.points[-1], [1, 0, 0], atol=1e-6)

    def test_capture_with_heading(self, tmp_path):
        samples = tmp_path / "samples.csv"
        samples.write_text("\n".join(f"0,0,{i * 0.1}" for i in range(5)) + "\n")
        result = runner.invoke(app, [
            "capture", str(samples), "push", "--out-dir", str(tmp_path), "--forward", "1", "0", "0",
        ])
        assert result.exit_code == 0
        trace = load_trace(tmp_path / "push")
        # world +Z is local -X when facing +X
        np.testing.assert_allclose(trace.points[-1], [-1, 0, 0], atol=1e-6)

    def test_capture_no_samples(self, tmp_path):
        samples = tmp_path / "samples.csv"
        samples.write_text("x,y,z\n")
        result = runner.invoke(app, ["capture", str(samples), "none", "--out-dir", str(tmp_path)])
        assert result.exit_code == 1
