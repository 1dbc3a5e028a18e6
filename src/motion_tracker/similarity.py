"""Arc-length resampling and point-wise similarity between gesture traces.

After optional resampling to a common point count, points are compared
index by index (no DTW alignment) and the mean distance is mapped
linearly onto a [0, 1] confidence.

Usage:
    config = RecognizerConfig(target_point_count=32, similarity_threshold=0.7)
    score = confidence(recorded, reference, config)
    match = best_match(recorded, library.all_traces(), config)
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

import numpy as np

from motion_tracker.config import RecognizerConfig
from motion_tracker.geometry import distance, lerp, path_length
from motion_tracker.trajectory import GestureTrace

logger = logging.getLogger("motion_tracker.similarity")

_MIN_LENGTH = 1e-8


def resample_path(points: np.ndarray, n_points: int = 32) -> np.ndarray:
    """Resample a path to ``n_points`` points evenly spaced by arc length.

    Walks the polyline and emits an interpolated point every
    ``total / (n_points - 1)``, restarting each interval from the point
    just emitted. Float drift that leaves the result short is padded with
    the last original point. Paths with fewer than two points are returned
    unchanged.
    """
    if n_points < 2:
        raise ValueError(f"n_points must be >= 2, got {n_points}")
    points = np.asarray(points, dtype=np.float64)
    n = len(points)
    if n < 2:
        return points

    total = path_length(points)
    if total < _MIN_LENGTH:
        return np.tile(points[0], (n_points, 1))

    interval = total / (n_points - 1)
    resampled = [points[0]]
    so_far = 0.0
    prev = points[0]
    index = 1

    while index < n and len(resampled) < n_points:
        current = points[index]
        d = distance(prev, current)
        if d > 0 and so_far + d >= interval:
            t = (interval - so_far) / d
            new_point = np.asarray(lerp(prev, current, t))
            resampled.append(new_point)
            prev = new_point
            so_far = 0.0
        else:
            so_far += d
            prev = current
            index += 1

    while len(resampled) < n_points:
        resampled.append(points[-1])

    return np.array(resampled, dtype=np.float64)


def confidence(a: GestureTrace, b: GestureTrace, config: RecognizerConfig) -> float:
    """Similarity of two traces in [0, 1]; 1 means identical point sequences."""
    a_pts, b_pts = a.points, b.points
    if config.use_resampling:
        a_pts = resample_path(a_pts, config.target_point_count)
        b_pts = resample_path(b_pts, config.target_point_count)

    count = min(len(a_pts), len(b_pts))
    if count == 0:
        return 0.0

    mean_distance = float(np.mean(np.linalg.norm(a_pts[:count] - b_pts[:count], axis=1)))
    score = 1.0 - mean_distance / config.similarity_threshold
    return float(min(1.0, max(0.0, score)))


def score_all(
    candidate: GestureTrace,
    traces: Iterable[Optional[GestureTrace]],
    config: RecognizerConfig,
) -> list[tuple[GestureTrace, float]]:
    """Confidence of ``candidate`` against every trace, in input order.

    None entries are skipped.
    """
    scores = []
    for trace in traces:
        if trace is None:
            continue
        score = confidence(candidate, trace, config)
        logger.debug("%s vs %s: %.3f", candidate.name, trace.name, score)
        scores.append((trace, score))
    return scores


def find_best(
    candidate: Optional[GestureTrace],
    traces: Iterable[Optional[GestureTrace]],
    config: RecognizerConfig,
) -> Optional[tuple[GestureTrace, float]]:
    """(trace, confidence) with the strictly highest confidence, or None.

    Ties keep the earlier trace. No minimum confidence is applied.
    """
    if candidate is None:
        return None

    best: Optional[tuple[GestureTrace, float]] = None
    for trace, score in score_all(candidate, traces, config):
        if best is None or score > best[1]:
            best = (trace, score)
    return best


def best_match(
    candidate: Optional[GestureTrace],
    traces: Iterable[Optional[GestureTrace]],
    config: RecognizerConfig,
) -> Optional[GestureTrace]:
    """The most similar trace in ``traces``, or None if there is nothing to pick."""
    found = find_best(candidate, traces, config)
    return found[0] if found else None
