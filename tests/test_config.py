"""Tests for RecognizerConfig."""

import pytest
import yaml

from motion_tracker.config import RecognizerConfig


class TestRecognizerConfig:
    def test_defaults(self):
        config = RecognizerConfig()
        assert config.use_resampling is True
        assert config.target_point_count == 32
        assert config.similarity_threshold == pytest.approx(0.7)

    @pytest.mark.parametrize("points", [1, 0, -5])
    def test_rejects_small_point_count(self, points):
        with pytest.raises(ValueError):
            RecognizerConfig(target_point_count=points)

    @pytest.mark.parametrize("threshold", [0.0, -0.1])
    def test_rejects_non_positive_threshold(self, threshold):
        with pytest.raises(ValueError):
            RecognizerConfig(similarity_threshold=threshold)

    def test_rejects_bad_values_after_construction(self):
        config = RecognizerConfig()
        with pytest.raises(ValueError):
            config.similarity_threshold = 0.0
        with pytest.raises(ValueError):
            config.target_point_count = 1
        assert config.similarity_threshold == pytest.approx(0.7)
        assert config.target_point_count == 32

    def test_valid_change_after_construction(self):
        config = RecognizerConfig()
        config.target_point_count = 8
        config.similarity_threshold = 1.5
        assert config == RecognizerConfig(True, 8, 1.5)

    def test_from_dict_partial(self):
        config = RecognizerConfig.from_dict({"target_point_count": 64})
        assert config.target_point_count == 64
        assert config.use_resampling is True

    def test_from_dict_none(self):
        assert RecognizerConfig.from_dict(None) == RecognizerConfig()

    def test_yaml_roundtrip(self, tmp_path):
        path = tmp_path / "recognizer.yml"
        RecognizerConfig(use_resampling=False, target_point_count=16, similarity_threshold=0.5).to_yaml(path)

        with open(path) as f:
            assert yaml.safe_load(f)["recognizer"]["target_point_count"] == 16

        loaded = RecognizerConfig.from_yaml(path)
        assert loaded == RecognizerConfig(False, 16, 0.5)

    def test_from_yaml_without_section(self, tmp_path):
        path = tmp_path / "flat.yml"
        path.write_text("similarity_threshold: 1.5\n")
        assert RecognizerConfig.from_yaml(path).similarity_threshold == pytest.approx(1.5)
