"""Tests for point/vector helpers and the yaw-only capture frame."""

import numpy as np
import pytest

from motion_tracker.geometry import (
    Point3,
    as_array,
    component_max,
    component_min,
    distance,
    lerp,
    path_length,
    to_local,
    to_world,
    yaw_rotation,
)


class TestPointOps:
    def test_distance(self):
        assert distance((0, 0, 0), (3, 4, 0)) == pytest.approx(5.0)

    def test_lerp(self):
        assert lerp((0, 0, 0), (2, 4, 6), 0.5) == Point3(1.0, 2.0, 3.0)

    def test_min_max(self):
        pts = [(1, 5, -2), (3, -1, 0), (-4, 2, 7)]
        assert component_min(pts) == Point3(-4.0, -1.0, -2.0)
        assert component_max(pts) == Point3(3.0, 5.0, 7.0)

    def test_point3_of(self):
        p = Point3.of(np.array([1, 2, 3], dtype=np.float32))
        assert p == (1.0, 2.0, 3.0)
        assert isinstance(p.x, float)

    def test_as_array_empty(self):
        assert as_array([]).shape == (0, 3)

    def test_path_length(self):
        pts = as_array([(0, 0, 0), (1, 0, 0), (1, 2, 0)])
        assert path_length(pts) == pytest.approx(3.0)
        assert path_length(pts[:1]) == 0.0


class TestYawFrame:
    def test_forward_z_is_identity(self):
        np.testing.assert_allclose(yaw_rotation((0, 0, 1)), np.eye(3))

    def test_vertical_forward_falls_back_to_identity(self):
        np.testing.assert_allclose(yaw_rotation((0, 1, 0)), np.eye(3))
        np.testing.assert_allclose(yaw_rotation((0, 0, 0)), np.eye(3))

    def test_pitch_is_discarded(self):
        np.testing.assert_allclose(yaw_rotation((0, 1, 1)), np.eye(3), atol=1e-12)

    def test_forward_x(self):
        rot = yaw_rotation((1, 0, 0))
        local = to_local((1, 0, 0), (0, 0, 0), rot)
        np.testing.assert_allclose(local, (0, 0, 1), atol=1e-12)

    def test_rotation_is_orthonormal(self):
        rot = yaw_rotation((0.3, -0.7, -0.9))
        np.testing.assert_allclose(rot @ rot.T, np.eye(3), atol=1e-12)
        np.testing.assert_allclose(rot[1], (0, 1, 0))

    def test_to_world_inverts_to_local(self):
        rot = yaw_rotation((-0.4, 0.2, 0.8))
        origin = (1.0, 2.0, -3.0)
        world = np.array([[0.5, 1.0, 2.0], [-1.0, 0.0, 4.0]])
        local = as_array([to_local(p, origin, rot) for p in world])
        np.testing.assert_allclose(to_world(local, origin, rot), world, atol=1e-12)
