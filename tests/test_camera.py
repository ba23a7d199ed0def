import math
import struct

import numpy as np
import pytest

from voxelcraft.camera import (
    Camera,
    CameraController,
    CameraUniform,
    Key,
    KeyEvent,
    LightingUniform,
    angles_to_vec3,
)
from voxelcraft.world import WorldPos


def _project(camera, point):
    clip = camera.view_proj_matrix() @ np.array([*point, 1.0])
    return clip[:3] / clip[3]


@pytest.mark.parametrize("yaw,pitch", [(0.0, 0.0), (1.0, 0.3), (4.0, -1.2), (-2.5, 0.7)])
def test_angles_to_vec3_is_unit_and_matches_pitch(yaw, pitch):
    vec = angles_to_vec3(yaw, pitch)
    assert math.isclose(sum(c * c for c in vec), 1.0, rel_tol=1e-9)
    assert vec[1] == pytest.approx(math.sin(pitch))


def test_angles_to_vec3_yaw_quarter_turn_points_along_z():
    x, y, z = angles_to_vec3(math.pi / 2, 0.0)
    assert x == pytest.approx(0.0, abs=1e-12)
    assert y == pytest.approx(0.0, abs=1e-12)
    assert z == pytest.approx(1.0)


def test_camera_aabb_dimensions():
    camera = Camera(pos=WorldPos(3.0, 10.0, -2.0))
    box = camera.aabb()
    assert box.end[1] == pytest.approx(10.0)
    assert box.end[1] - box.start[1] == pytest.approx(1.8)
    assert box.end[0] - box.start[0] == pytest.approx(0.8)
    assert box.end[2] - box.start[2] == pytest.approx(0.8)


def test_camera_ray_follows_view_direction():
    camera = Camera(pos=WorldPos(1.0, 2.0, 3.0), yaw=0.4, pitch=-0.2)
    ray = camera.ray()
    assert ray.pos == (1.0, 2.0, 3.0)
    assert ray.direction == pytest.approx(angles_to_vec3(0.4, -0.2))


def test_depth_maps_near_and_far_planes_to_zero_and_one():
    camera = Camera(pos=WorldPos(0.0, 0.0, 0.0), znear=0.1, zfar=100.0)
    near = _project(camera, (0.1, 0.0, 0.0))
    far = _project(camera, (100.0, 0.0, 0.0))
    assert near[2] == pytest.approx(0.0, abs=1e-6)
    assert far[2] == pytest.approx(1.0)
    assert near[0] == pytest.approx(0.0, abs=1e-9)
    assert near[1] == pytest.approx(0.0, abs=1e-9)


def test_point_ahead_is_in_view():
    camera = Camera(pos=WorldPos(5.0, 5.0, 5.0), yaw=0.0, pitch=0.0)
    assert camera.in_view(WorldPos(15.0, 5.0, 5.0)) is True


def test_invalid_field_of_view_rejected():
    camera = Camera(pos=WorldPos(0.0, 0.0, 0.0), fovy=0.0)
    with pytest.raises(ValueError):
        camera.view_proj_matrix()


def test_camera_uniform_starts_as_identity():
    uniform = CameraUniform()
    data = np.frombuffer(uniform.to_bytes(), dtype="<f4")
    assert data.size == 16
    assert np.array_equal(data.reshape(4, 4), np.eye(4))


def test_camera_uniform_is_column_major():
    camera = Camera(pos=WorldPos(1.0, -4.0, 2.0), yaw=0.7, pitch=0.2, aspect=1.5)
    uniform = CameraUniform()
    uniform.update_view_proj(camera)
    restored = np.frombuffer(uniform.to_bytes(), dtype="<f4").reshape(4, 4).T
    assert np.allclose(restored, camera.view_proj_matrix(), rtol=1e-5, atol=1e-5)


def test_lighting_uniform_layout():
    light = LightingUniform(position=(2.0, 3.0, 1.0), color=(1.0, 0.5, 0.25))
    values = struct.unpack("<3fI3fI", light.to_bytes())
    assert values[:3] == (2.0, 3.0, 1.0)
    assert values[4:7] == (1.0, 0.5, 0.25)
    assert values[3] == values[7] == 0


def test_camera_controller_is_abstract():
    with pytest.raises(TypeError):
        CameraController()


def test_key_event_defaults_to_not_repeat():
    event = KeyEvent(Key.W, True)
    assert event.repeat is False
    assert event.key is Key.W