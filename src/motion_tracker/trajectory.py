"""Gesture traces and the normalization pipeline applied to finished captures.

A finished capture goes through three steps, each returning a new trace:

    trace = translate_to_origin(raw)      # first point at (0, 0, 0)
    trace = scale_by_max_axis(trace)      # longest bounding-box side == 1
    trace = quantize_by_step(trace)       # snap to a 0.02 lattice, fill gaps

or simply ``normalize_trace(raw)``.

Quantization walks the trace on an integer lattice and joins consecutive
cells with a 3D Bresenham line, so neighbouring output points are never
more than one cell apart regardless of how fast the gesture was drawn.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from motion_tracker.geometry import Point3, as_array, component_max, component_min

QUANTIZE_STEP = 0.02
MIN_SPAN = 1e-6

Cell = tuple[int, int, int]


@dataclass(eq=False)
class GestureTrace:
    """A named, ordered sequence of 3D points.

    Traces compare and hash by identity: two traces with the same name and
    points are still different gestures as far as a library is concerned.
    """
    name: str
    points: np.ndarray = field(default_factory=lambda: np.zeros((0, 3)))

    def __post_init__(self):
        self.points = as_array(self.points)

    def __len__(self) -> int:
        return len(self.points)

    def point(self, index: int) -> Point3:
        return Point3.of(self.points[index])

    def with_points(self, points) -> GestureTrace:
        return GestureTrace(name=self.name, points=points)

    def bounds(self) -> tuple[Point3, Point3]:
        """(min corner, max corner) of the bounding box."""
        if len(self.points) == 0:
            raise ValueError(f"trace {self.name!r} has no points")
        return component_min(self.points), component_max(self.points)

    def __repr__(self) -> str:
        return f"GestureTrace(name={self.name!r}, points={len(self.points)})"


def translate_to_origin(trace: GestureTrace) -> GestureTrace:
    """Shift the trace so its first point sits at the origin."""
    if len(trace) == 0:
        return trace.with_points(trace.points.copy())
    return trace.with_points(trace.points - trace.points[0])


def scale_by_max_axis(trace: GestureTrace) -> GestureTrace:
    """Scale uniformly so the widest axis of the bounding box has length 1.

    Stationary traces (span below 1e-6) are left at their original scale.
    """
    if len(trace) == 0:
        return trace.with_points(trace.points.copy())
    span = float(np.max(trace.points.max(axis=0) - trace.points.min(axis=0)))
    if abs(span) < MIN_SPAN:
        span = 1.0
    return trace.with_points(trace.points * (1.0 / span))


def _round_half_away(values: np.ndarray) -> np.ndarray:
    return np.sign(values) * np.floor(np.abs(values) + 0.5)


def bresenham_3d(start: Cell, end: Cell) -> list[Cell]:
    """Every lattice cell on the digital line from start to end, both included.

    The axis with the largest delta drives the walk; the other two axes
    step when their doubled error term turns non-negative.
    """
    x0, y0, z0 = start
    x1, y1, z1 = end
    dx, dy, dz = abs(x1 - x0), abs(y1 - y0), abs(z1 - z0)
    xs = 1 if x1 > x0 else -1
    ys = 1 if y1 > y0 else -1
    zs = 1 if z1 > z0 else -1

    cells: list[Cell] = []
    if dx >= dy and dx >= dz:
        p1, p2 = 2 * dy - dx, 2 * dz - dx
        while x0 != x1:
            cells.append((x0, y0, z0))
            if p1 >= 0:
                y0 += ys
                p1 -= 2 * dx
            if p2 >= 0:
                z0 += zs
                p2 -= 2 * dx
            p1 += 2 * dy
            p2 += 2 * dz
            x0 += xs
    elif dy >= dx and dy >= dz:
        p1, p2 = 2 * dx - dy, 2 * dz - dy
        while y0 != y1:
            cells.append((x0, y0, z0))
            if p1 >= 0:
                x0 += xs
                p1 -= 2 * dy
            if p2 >= 0:
                z0 += zs
                p2 -= 2 * dy
            p1 += 2 * dx
            p2 += 2 * dz
            y0 += ys
    else:
        p1, p2 = 2 * dy - dz, 2 * dx - dz
        while z0 != z1:
            cells.append((x0, y0, z0))
            if p1 >= 0:
                y0 += ys
                p1 -= 2 * dz
            if p2 >= 0:
                x0 += xs
                p2 -= 2 * dz
            p1 += 2 * dy
            p2 += 2 * dx
            z0 += zs

    cells.append((x1, y1, z1))
    return cells


def quantize_by_step(trace: GestureTrace, step: float = QUANTIZE_STEP) -> GestureTrace:
    """Snap the trace onto a cubic lattice and rasterize between samples.

    Output always begins at the origin cell. Samples landing in the cell
    already reached are dropped, and no two consecutive output points are
    equal. Traces with fewer than two points are returned as-is.
    """
    if len(trace) < 2:
        return trace.with_points(trace.points.copy())

    lattice = _round_half_away(trace.points / step).astype(np.int64)
    prev: Cell = (0, 0, 0)
    cells: list[Cell] = [prev]

    for q in map(tuple, lattice.tolist()):
        if q == prev:
            continue
        for cell in bresenham_3d(prev, q):
            if cell != cells[-1]:
                cells.append(cell)
        prev = q

    return trace.with_points(np.asarray(cells, dtype=np.float64) * step)


def normalize_trace(trace: GestureTrace, step: float = QUANTIZE_STEP) -> GestureTrace:
    """Full capture normalization: translate, scale, then quantize."""
    return quantize_by_step(scale_by_max_axis(translate_to_origin(trace)), step)
