"""Gesture capture - turn a stream of world positions into a normalized trace.

Each tracked point (``"left"``, ``"right"``, a controller serial...) gets
its own capture session. At session start the recorder fixes a local
frame: the given origin plus a yaw-only rotation from the forward
direction, so head pitch/roll during the gesture does not leak into the
captured shape.

Usage:
    recorder = TrajectoryRecorder()
    recorder.begin_capture("right", origin=head_pos, forward=head_forward)
    # Every tick (the caller owns the sampling rate, typically 60 Hz):
    recorder.sample("right", hand_pos)
    # On trigger release:
    trace = recorder.end_capture("right", "circle")
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Callable, Mapping, Optional

import numpy as np

from motion_tracker.errors import AlreadyRecordingError, NotRecordingError
from motion_tracker.geometry import Point3, as_array, to_local, to_world, yaw_rotation
from motion_tracker.trajectory import QUANTIZE_STEP, GestureTrace, normalize_trace

logger = logging.getLogger("motion_tracker.recorder")

SampleListener = Callable[[str, Sequence[Point3]], None]
FinishListener = Callable[[str, np.ndarray], None]


@dataclass
class CaptureSession:
    """Capture state for one tracked point."""
    tracked_id: str
    origin: Point3
    rotation: np.ndarray  # (3, 3) yaw-only, local -> world
    points: list[Point3] = field(default_factory=list)

    def world_points(self) -> np.ndarray:
        """The captured samples mapped back into world space."""
        return to_world(as_array(self.points), self.origin, self.rotation)


class TrailView(Sequence):
    """Read-only, uncopied view of a session's local-frame samples.

    The view tracks the live buffer while the session runs; copy it
    (``list(view)``) to keep a snapshot.
    """

    __slots__ = ("_points",)

    def __init__(self, points: list[Point3]):
        self._points = points

    def __getitem__(self, index):
        return self._points[index]

    def __len__(self) -> int:
        return len(self._points)

    def __repr__(self) -> str:
        return f"TrailView({len(self)} points)"


class TrajectoryRecorder:
    """Records capture sessions keyed by tracked-point id.

    A session exists in the recorder only while it is recording; ending
    it removes it. Sessions for different ids are fully independent and
    may overlap in time. The recorder does no timing of its own; it stores
    whatever samples the caller feeds it.

    Failures (double begin, end without begin) are logged and reported by
    the return value. Pass ``strict=True`` to get
    :class:`AlreadyRecordingError` / :class:`NotRecordingError` raised
    instead.
    """

    def __init__(self, step: float = QUANTIZE_STEP, strict: bool = False):
        self.step = step
        self.strict = strict
        self._sessions: dict[str, CaptureSession] = {}
        self._sample_listeners: list[SampleListener] = []
        self._finish_listeners: list[FinishListener] = []

    def on_sample(self, callback: SampleListener):
        """Register a listener for the running local-frame trail of a session."""
        self._sample_listeners.append(callback)

    def on_finish(self, callback: FinishListener):
        """Register a listener for the finished world-space trail of a session."""
        self._finish_listeners.append(callback)

    def begin_capture(self, tracked_id: str, origin, forward) -> bool:
        """Start a session for ``tracked_id``. Returns False if it is already active."""
        if self.is_recording(tracked_id):
            if self.strict:
                raise AlreadyRecordingError(tracked_id)
            logger.warning("[%s] already recording, begin ignored", tracked_id)
            return False

        self._sessions[tracked_id] = CaptureSession(
            tracked_id=tracked_id,
            origin=Point3.of(origin),
            rotation=yaw_rotation(forward),
        )
        logger.info("[%s] gesture recording started", tracked_id)
        return True

    def sample(self, tracked_id: str, world_position) -> Optional[Point3]:
        """Add one world-space sample. Ignored when ``tracked_id`` is not recording.

        Returns the sample in the session's local frame.
        """
        session = self._sessions.get(tracked_id)
        if session is None:
            return None

        local = to_local(world_position, session.origin, session.rotation)
        session.points.append(local)

        if self._sample_listeners:
            trail = TrailView(session.points)
            for cb in self._sample_listeners:
                cb(tracked_id, trail)
        return local

    def sample_all(self, positions: Mapping[str, object]) -> dict[str, Point3]:
        """Sample every active session present in ``positions`` for one tick.

        Sessions are visited in sorted id order.
        """
        taken = {}
        for tracked_id in sorted(positions):
            local = self.sample(tracked_id, positions[tracked_id])
            if local is not None:
                taken[tracked_id] = local
        return taken

    def end_capture(self, tracked_id: str, gesture_name: str) -> Optional[GestureTrace]:
        """Finish the session and return its normalized trace.

        Returns None if ``tracked_id`` was not recording or no samples
        arrived; the session is discarded either way.
        """
        session = self._sessions.pop(tracked_id, None)
        if session is None:
            if self.strict:
                raise NotRecordingError(tracked_id)
            logger.warning("[%s] not recording, cannot end", tracked_id)
            return None

        for cb in self._finish_listeners:
            cb(tracked_id, session.world_points())

        if not session.points:
            logger.warning("[%s] recording ended without samples, no gesture produced", tracked_id)
            return None

        raw = GestureTrace(name=gesture_name, points=session.points)
        logger.info(
            "[%s] gesture recording ended, %d points, name=%s",
            tracked_id, len(raw), gesture_name,
        )
        return normalize_trace(raw, self.step)

    def is_recording(self, tracked_id: str) -> bool:
        return tracked_id in self._sessions

    def point_count(self, tracked_id: str) -> int:
        """Samples collected so far for an active session (0 if inactive)."""
        session = self._sessions.get(tracked_id)
        return len(session.points) if session else 0

    @property
    def active_ids(self) -> list[str]:
        return sorted(self._sessions)
