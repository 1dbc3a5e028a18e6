"""Recognition coordinator: finished capture -> best library match -> action.

The coordinator holds the active state's library and the recognizer
configuration. States are plain GestureLibrary objects; switching state
just swaps the reference and notifies listeners.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Mapping, Optional

import yaml

from motion_tracker.config import RecognizerConfig
from motion_tracker.errors import NoMatchError
from motion_tracker.library import ActionFn, GestureLibrary, load_states
from motion_tracker.similarity import find_best
from motion_tracker.trajectory import GestureTrace

logger = logging.getLogger("motion_tracker.coordinator")

StateListener = Callable[[GestureLibrary, GestureLibrary], None]


@dataclass
class RecognitionResult:
    """Outcome of matching one performed gesture."""
    state: str
    identifier: str
    trace: GestureTrace
    confidence: float
    dispatched: bool


@dataclass
class RecognitionStats:
    processed: int = 0
    recognized: int = 0
    unrecognized: int = 0
    rejected: int = 0


class RecognitionCoordinator:
    """Matches recorded gestures against the active state and fires actions.

    By default the best-scoring reference is dispatched however low its
    confidence. Set ``min_confidence`` to reject weak matches instead.
    """

    def __init__(
        self,
        initial_state: GestureLibrary,
        config: Optional[RecognizerConfig] = None,
        min_confidence: Optional[float] = None,
    ):
        self.config = config or RecognizerConfig()
        self.min_confidence = min_confidence
        self._active = initial_state
        self._states: dict[str, GestureLibrary] = {initial_state.state_name: initial_state}
        self._state_listeners: list[StateListener] = []
        self._result_listeners: list[Callable[[RecognitionResult], None]] = []
        self.stats = RecognitionStats()

    @property
    def active_state(self) -> GestureLibrary:
        return self._active

    @property
    def states(self) -> dict[str, GestureLibrary]:
        return dict(self._states)

    def add_state(self, library: GestureLibrary):
        """Make a library available to ``change_state`` by name."""
        self._states[library.state_name] = library

    def on_state_changed(self, callback: StateListener):
        """Register ``callback(old, new)`` for state switches."""
        self._state_listeners.append(callback)

    def on_recognized(self, callback: Callable[[RecognitionResult], None]):
        self._result_listeners.append(callback)

    def change_state(self, state: GestureLibrary | str):
        """Switch the active library, by object or by registered state name."""
        if isinstance(state, str):
            if state not in self._states:
                raise KeyError(f"unknown state {state!r}")
            state = self._states[state]
        else:
            self._states.setdefault(state.state_name, state)

        old, self._active = self._active, state
        logger.info("State changed to %s", state.state_name)
        for cb in self._state_listeners:
            cb(old, state)

    def recognize(self, candidate: Optional[GestureTrace]) -> tuple[GestureTrace, float]:
        """Best reference in the active state and its confidence, without dispatching.

        Raises NoMatchError when there is no candidate or the active state
        has no traces.
        """
        state = self._active.state_name
        if candidate is None:
            raise NoMatchError(f"No gesture to recognize in state {state}")
        found = find_best(candidate, self._active.all_traces(), self.config)
        if found is None:
            raise NoMatchError(f"Gesture {candidate.name} not recognized in state {state}")
        return found

    def process(self, candidate: Optional[GestureTrace]) -> Optional[RecognitionResult]:
        """Match ``candidate`` against the active state and dispatch the winner.

        Returns None when there is no candidate, nothing to match against,
        or the best confidence falls below ``min_confidence``.
        """
        if candidate is None:
            logger.warning("Recorded gesture is None")
            return None

        self.stats.processed += 1
        library = self._active
        try:
            match, score = self.recognize(candidate)
        except NoMatchError as e:
            self.stats.unrecognized += 1
            logger.warning("%s", e)
            return None

        if self.min_confidence is not None and score < self.min_confidence:
            self.stats.rejected += 1
            logger.info(
                "Gesture %s best match %s rejected (%.2f < %.2f)",
                candidate.name, match.name, score, self.min_confidence,
            )
            return None

        self.stats.recognized += 1
        logger.info("Gesture recognized as %s (confidence=%.2f)", match.name, score)
        identifier = library.identifier_of(match)
        dispatched = library.dispatch(match)

        result = RecognitionResult(
            state=library.state_name,
            identifier=identifier,
            trace=match,
            confidence=score,
            dispatched=dispatched,
        )
        for cb in self._result_listeners:
            cb(result)
        return result

    @classmethod
    def from_yaml(
        cls,
        path: str | Path,
        actions: Optional[Mapping[str, ActionFn]] = None,
    ) -> RecognitionCoordinator:
        """Build a coordinator with all states, config and initial state from YAML."""
        with open(path) as f:
            data = yaml.safe_load(f) or {}

        libraries = load_states(path, actions)
        if not libraries:
            raise ValueError(f"no states declared in {path}")

        initial_name = data.get("initial_state") or next(iter(libraries))
        if initial_name not in libraries:
            raise ValueError(f"initial_state {initial_name!r} is not declared in {path}")

        coordinator = cls(
            libraries[initial_name],
            config=RecognizerConfig.from_dict(data.get("recognizer")),
            min_confidence=data.get("min_confidence"),
        )
        for library in libraries.values():
            coordinator.add_state(library)
        return coordinator
