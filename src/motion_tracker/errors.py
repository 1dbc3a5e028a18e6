"""Failure kinds reported by the gesture pipeline.

Most operations report these as a logged warning plus a None/False
return value. The exception types exist for callers that want to raise
(strict recorder, ``read_trace``) and for the one real contract
violation: dispatching a trace the library never registered.
"""

from __future__ import annotations


class MotionTrackerError(Exception):
    """Base class for all motion_tracker errors."""


class AlreadyRecordingError(MotionTrackerError):
    """A capture session is already active for this tracked point."""

    def __init__(self, tracked_id: str):
        super().__init__(f"{tracked_id!r} is already recording")
        self.tracked_id = tracked_id


class NotRecordingError(MotionTrackerError):
    """No capture session is active for this tracked point."""

    def __init__(self, tracked_id: str):
        super().__init__(f"{tracked_id!r} is not recording")
        self.tracked_id = tracked_id


class UnknownTraceError(MotionTrackerError, KeyError):
    """The trace was not registered in the library being dispatched."""


class LoadFailureError(MotionTrackerError):
    """A persisted gesture could not be read or is malformed."""


class NoActionError(MotionTrackerError):
    """A mapping exists but no action was bound to it."""


class NoMatchError(MotionTrackerError):
    """Scoring found no viable candidate."""
