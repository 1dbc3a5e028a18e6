"""MotionTracker - 3D gesture capture, recognition and state-bound dispatch."""

__version__ = "0.1.0"

from motion_tracker.geometry import Point3
from motion_tracker.trajectory import GestureTrace, normalize_trace
from motion_tracker.recorder import TrajectoryRecorder, CaptureSession
from motion_tracker.config import RecognizerConfig
from motion_tracker.similarity import resample_path, confidence, best_match
from motion_tracker.library import GestureLibrary, GestureMapping, load_states
from motion_tracker.coordinator import RecognitionCoordinator, RecognitionResult
from motion_tracker.storage import load_trace, save_trace
