"""Recognizer configuration."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from pathlib import Path

import yaml


@dataclass
class RecognizerConfig:
    """Knobs for similarity scoring.

    Mutable; scoring functions read it on every call, so changes take
    effect on the next comparison. Every assignment is checked, so an
    invalid value is rejected when set and the previous one is kept.
    """
    use_resampling: bool = True
    target_point_count: int = 32
    similarity_threshold: float = 0.7

    def __setattr__(self, name, value):
        if name == "target_point_count" and int(value) < 2:
            raise ValueError(f"target_point_count must be >= 2, got {value}")
        if name == "similarity_threshold" and not float(value) > 0:
            raise ValueError(f"similarity_threshold must be > 0, got {value}")
        super().__setattr__(name, value)

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict | None) -> RecognizerConfig:
        data = data or {}
        return cls(
            use_resampling=bool(data.get("use_resampling", True)),
            target_point_count=int(data.get("target_point_count", 32)),
            similarity_threshold=float(data.get("similarity_threshold", 0.7)),
        )

    @classmethod
    def from_yaml(cls, path: str | Path) -> RecognizerConfig:
        """Read the ``recognizer`` section of a YAML file (or the whole file)."""
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        return cls.from_dict(data.get("recognizer", data))

    def to_yaml(self, path: str | Path):
        with open(path, "w") as f:
            yaml.dump({"recognizer": self.to_dict()}, f, default_flow_style=False, sort_keys=False)
