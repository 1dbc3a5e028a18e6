"""Point and vector helpers shared by the capture and scoring code."""

from __future__ import annotations

import math
from typing import Iterable, NamedTuple

import numpy as np

_EPS = 1e-6


class Point3(NamedTuple):
    x: float
    y: float
    z: float

    @classmethod
    def of(cls, value) -> Point3:
        """Coerce a 3-sequence (tuple, list, ndarray) into a Point3."""
        x, y, z = (float(v) for v in value)
        return cls(x, y, z)


ORIGIN = Point3(0.0, 0.0, 0.0)


def distance(a, b) -> float:
    """Euclidean distance between two points."""
    return float(np.linalg.norm(np.asarray(a, dtype=np.float64) - np.asarray(b, dtype=np.float64)))


def lerp(a, b, t: float) -> Point3:
    """Linear interpolation from a (t=0) to b (t=1)."""
    pa = np.asarray(a, dtype=np.float64)
    pb = np.asarray(b, dtype=np.float64)
    return Point3.of(pa + (pb - pa) * t)


def component_min(points: Iterable) -> Point3:
    return Point3.of(np.min(as_array(points), axis=0))


def component_max(points: Iterable) -> Point3:
    return Point3.of(np.max(as_array(points), axis=0))


def as_array(points: Iterable) -> np.ndarray:
    """Return points as a float64 array of shape (N, 3)."""
    if not isinstance(points, np.ndarray):
        points = list(points)
    arr = np.asarray(points, dtype=np.float64)
    if arr.size == 0:
        return np.zeros((0, 3), dtype=np.float64)
    return arr.reshape(-1, 3)


def path_length(points: np.ndarray) -> float:
    """Sum of consecutive segment lengths."""
    if len(points) < 2:
        return 0.0
    return float(np.sum(np.linalg.norm(np.diff(points, axis=0), axis=1)))


def yaw_rotation(forward) -> np.ndarray:
    """Rotation about +Y that turns +Z onto ``forward`` flattened to the XZ plane.

    Pitch and roll are discarded, so the resulting frame stays
    gravity-aligned. A forward vector with no horizontal component
    yields the identity.
    """
    fx, _, fz = (float(v) for v in forward)
    norm = math.hypot(fx, fz)
    if norm < _EPS:
        return np.eye(3)
    s, c = fx / norm, fz / norm
    return np.array([
        [c, 0.0, s],
        [0.0, 1.0, 0.0],
        [-s, 0.0, c],
    ])


def to_local(world, origin, rotation: np.ndarray) -> Point3:
    """World position into the frame given by origin + rotation."""
    offset = np.asarray(world, dtype=np.float64) - np.asarray(origin, dtype=np.float64)
    # rotation is orthonormal, so its transpose is the inverse
    return Point3.of(rotation.T @ offset)


def to_world(local_points: np.ndarray, origin, rotation: np.ndarray) -> np.ndarray:
    """Inverse of :func:`to_local` for a whole (N, 3) array."""
    if len(local_points) == 0:
        return np.zeros((0, 3), dtype=np.float64)
    return local_points @ rotation.T + np.asarray(origin, dtype=np.float64)
