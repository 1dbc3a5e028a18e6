"""Per-state gesture libraries: which reference gestures exist and what they do.

An interaction state ("interface", "mage", "game"...) owns one library.
Each entry binds an identifier (usually the gesture file path) to a
reference trace and a zero-argument action.

Configuration via YAML:

    states:
      - name: mage
        gestures:
          - path: gestures/fireball
            action: cast_fireball

Action names are resolved through a ``{name: callable}`` table supplied
by the application.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Mapping, Optional

import yaml

from motion_tracker.errors import NoActionError, UnknownTraceError
from motion_tracker.storage import load_trace
from motion_tracker.trajectory import GestureTrace

logger = logging.getLogger("motion_tracker.library")

ActionFn = Callable[[], Any]


def _action_name(action: Optional[ActionFn]) -> str:
    if action is None:
        return "<unset>"
    return getattr(action, "__name__", None) or repr(action)


@dataclass
class GestureMapping:
    """A reference trace and the action fired when it is recognized."""
    identifier: str
    trace: GestureTrace
    action: Optional[ActionFn] = None


class GestureLibrary:
    """Gesture-to-action bindings for one interaction state.

    Keeps a forward map (identifier -> mapping) and a reverse index
    (trace -> identifier) so a recognized trace finds its action directly.
    Traces hash by identity, so the reverse index is keyed by reference.
    """

    def __init__(
        self,
        state_name: str,
        initial_mappings: Optional[Mapping[str, Optional[ActionFn]]] = None,
    ):
        self.state_name = state_name
        self._mappings: dict[str, GestureMapping] = {}
        self._identifiers: dict[GestureTrace, str] = {}

        for path, action in (initial_mappings or {}).items():
            self.add_from_file(path, action)

    def add(self, identifier: str, trace: GestureTrace, action: Optional[ActionFn] = None):
        """Bind ``identifier`` to ``trace`` and ``action``.

        If the identifier is already mapped only its action is replaced;
        the existing trace stays registered.
        """
        existing = self._mappings.get(identifier)
        if existing is not None:
            existing.action = action
            logger.info("[%s] updated action for %s", self.state_name, identifier)
            return

        if len(trace) == 0:
            raise ValueError(f"cannot register empty trace for {identifier!r}")
        if trace in self._identifiers:
            raise ValueError(
                f"trace {trace.name!r} is already registered as {self._identifiers[trace]!r}"
            )

        self._mappings[identifier] = GestureMapping(identifier, trace, action)
        self._identifiers[trace] = identifier
        logger.info("[%s] added gesture %s", self.state_name, identifier)

    def add_from_file(self, path: str | Path, action: Optional[ActionFn] = None) -> bool:
        """Map the gesture stored at ``path``, keyed by the path itself.

        An already-mapped path only has its action updated and the file is
        not re-read. Returns False if the file could not be loaded.
        """
        identifier = str(path)
        if identifier in self._mappings:
            self.add(identifier, self._mappings[identifier].trace, action)
            return True

        trace = load_trace(path)
        if trace is None:
            logger.warning("[%s] could not load gesture from %s", self.state_name, path)
            return False

        self.add(identifier, trace, action)
        return True

    def set_action(self, identifier: str, action: Optional[ActionFn]) -> bool:
        mapping = self._mappings.get(identifier)
        if mapping is None:
            return False
        mapping.action = action
        return True

    def remove(self, identifier: str) -> bool:
        """Drop a mapping and its reverse entry. False if it did not exist."""
        mapping = self._mappings.pop(identifier, None)
        if mapping is None:
            logger.warning("[%s] no mapping for %s", self.state_name, identifier)
            return False
        del self._identifiers[mapping.trace]
        return True

    def all_traces(self) -> list[GestureTrace]:
        """Snapshot of every registered reference trace."""
        return list(self._identifiers)

    def identifier_of(self, trace: GestureTrace) -> str:
        try:
            return self._identifiers[trace]
        except KeyError:
            raise UnknownTraceError(
                f"trace {trace.name!r} is not registered in state {self.state_name!r}"
            ) from None

    def get(self, identifier: str) -> Optional[GestureMapping]:
        return self._mappings.get(identifier)

    def action_for(self, trace: GestureTrace) -> ActionFn:
        """The action bound to a registered trace. Raises NoActionError if unset."""
        identifier = self.identifier_of(trace)
        action = self._mappings[identifier].action
        if action is None:
            raise NoActionError(f"no action bound to {identifier}")
        return action

    def dispatch(self, trace: GestureTrace) -> bool:
        """Run the action bound to ``trace``. Returns True if an action ran.

        Raises UnknownTraceError if ``trace`` did not come from this
        library. A missing action or one that raises is logged and
        reported as False.
        """
        identifier = self.identifier_of(trace)
        try:
            action = self.action_for(trace)
        except NoActionError as e:
            logger.warning("[%s] %s", self.state_name, e)
            return False

        logger.info("[%s] dispatching %s -> %s", self.state_name, identifier, _action_name(action))
        try:
            action()
        except Exception as e:
            logger.error("[%s] action for %s failed: %s", self.state_name, identifier, e)
            return False
        return True

    def describe(self) -> list[str]:
        """One line per mapping: identifier, action and gesture name. Also logged."""
        lines = [
            f"{m.identifier} -> {_action_name(m.action)} (gesture: {m.trace.name})"
            for m in self._mappings.values()
        ]
        logger.info("State: %s", self.state_name)
        for line in lines:
            logger.info("  %s", line)
        return lines

    @classmethod
    def from_config(
        cls,
        entry: dict,
        actions: Optional[Mapping[str, ActionFn]] = None,
        base_dir: str | Path = ".",
    ) -> GestureLibrary:
        """Build a library from one ``states`` entry of a YAML config."""
        actions = actions or {}
        library = cls(entry["name"])
        for gesture in entry.get("gestures", []):
            path = Path(gesture["path"])
            if not path.is_absolute():
                path = Path(base_dir) / path

            action_name = gesture.get("action")
            action = actions.get(action_name) if action_name else None
            if action_name and action is None:
                logger.warning(
                    "[%s] unknown action %r for %s", library.state_name, action_name, path
                )
            library.add_from_file(path, action)
        return library

    @property
    def identifiers(self) -> list[str]:
        return list(self._mappings.keys())

    def __len__(self) -> int:
        return len(self._mappings)

    def __contains__(self, identifier: str) -> bool:
        return identifier in self._mappings

    def __repr__(self) -> str:
        return f"GestureLibrary(state_name={self.state_name!r}, gestures={len(self)})"


def load_states(
    path: str | Path,
    actions: Optional[Mapping[str, ActionFn]] = None,
) -> dict[str, GestureLibrary]:
    """Load every state library declared in a YAML file, keyed by state name."""
    path = Path(path)
    with open(path) as f:
        config = yaml.safe_load(f) or {}

    libraries = {}
    for entry in config.get("states", []):
        library = GestureLibrary.from_config(entry, actions, base_dir=path.parent)
        libraries[library.state_name] = library
    return libraries
