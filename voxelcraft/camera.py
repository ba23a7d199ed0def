"""Camera state, its projection, the GPU uniforms and the controller interface."""

from __future__ import annotations

import math
import struct
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Tuple

import numpy as np

from .geometry import AABB, Ray
from .world import WorldPos

# Converts OpenGL normalised device coordinates (z in -1..1) to WebGPU ones (z in 0..1).
_OPENGL_TO_WGPU = np.array(
    [
        [1.0, 0.0, 0.0, 0.0],
        [0.0, 1.0, 0.0, 0.0],
        [0.0, 0.0, 0.5, 0.5],
        [0.0, 0.0, 0.0, 1.0],
    ]
)

_PLAYER_HEIGHT = 1.8
_PLAYER_WIDTH = 0.8
_HEAD_HEIGHT = 1.8


class Key(Enum):
    """Physical keys the game reacts to."""

    W = "w"
    A = "a"
    S = "s"
    D = "d"
    SPACE = "space"
    Z = "z"
    ESCAPE = "escape"
    F4 = "f4"


@dataclass(frozen=True)
class KeyEvent:
    """A key changing state."""

    key: Key
    pressed: bool
    repeat: bool = False


def angles_to_vec3(yaw: float, pitch: float) -> Tuple[float, float, float]:
    """Unit vector pointing along the given yaw and pitch (radians)."""
    verticality = math.cos(pitch)
    vec = np.array(
        [math.cos(yaw) * verticality, math.sin(pitch), math.sin(yaw) * verticality]
    )
    vec /= np.linalg.norm(vec)
    return tuple(float(c) for c in vec)


def _look_to_rh(eye: np.ndarray, direction: np.ndarray, up: np.ndarray) -> np.ndarray:
    f = direction / np.linalg.norm(direction)
    s = np.cross(f, up)
    s /= np.linalg.norm(s)
    u = np.cross(s, f)
    return np.array(
        [
            [s[0], s[1], s[2], -float(eye @ s)],
            [u[0], u[1], u[2], -float(eye @ u)],
            [-f[0], -f[1], -f[2], float(eye @ f)],
            [0.0, 0.0, 0.0, 1.0],
        ]
    )


def _perspective(fovy_degrees: float, aspect: float, near: float, far: float) -> np.ndarray:
    if not 0.0 < fovy_degrees < 180.0:
        raise ValueError("field of view must be between 0 and 180 degrees")
    if not aspect > 0.0:
        raise ValueError("aspect ratio must be positive")
    if not (near > 0.0 and far > 0.0) or near == far:
        raise ValueError("clip planes must be positive and distinct")
    f = 1.0 / math.tan(math.radians(fovy_degrees) / 2.0)
    return np.array(
        [
            [f / aspect, 0.0, 0.0, 0.0],
            [0.0, f, 0.0, 0.0],
            [0.0, 0.0, (far + near) / (near - far), 2.0 * far * near / (near - far)],
            [0.0, 0.0, -1.0, 0.0],
        ]
    )


@dataclass
class Camera:
    """Where the player looks from; yaw and pitch in radians, fovy in degrees."""

    pos: WorldPos
    yaw: float = 0.0
    pitch: float = 0.0
    aspect: float = 1.0
    fovy: float = 90.0
    znear: float = 0.1
    zfar: float = 100.0

    def view_proj_matrix(self) -> np.ndarray:
        """The 4x4 view-projection matrix, acting on column vectors."""
        eye = np.array(tuple(self.pos), dtype=float)
        direction = np.array(angles_to_vec3(self.yaw, self.pitch))
        view = _look_to_rh(eye, direction, np.array([0.0, 1.0, 0.0]))
        proj = _perspective(self.fovy, self.aspect, self.znear, self.zfar)
        return _OPENGL_TO_WGPU @ proj @ view

    def in_view(self, pos: WorldPos) -> bool:
        """Whether the projected point falls within the normalised device range."""
        projected = self.view_proj_matrix() @ np.array([*tuple(pos), 1.0])
        with np.errstate(divide="ignore", invalid="ignore"):
            x, y, z = projected[:3] / projected[3]
        return bool(abs(x) <= 1.0 or abs(y) <= 1.0 or abs(z) <= 1.0)

    def aabb(self) -> AABB:
        """Bounding box of the player's body; the camera sits at its top."""
        x, y, z = self.pos
        half_w = _PLAYER_WIDTH / 2.0
        half_h = _PLAYER_HEIGHT / 2.0
        head = _HEAD_HEIGHT / 2.0
        return AABB(
            (x - half_w, y - half_h - head, z - half_w),
            (x + half_w, y + half_h - head, z + half_w),
        )

    def ray(self) -> Ray:
        """The line of sight."""
        return Ray(tuple(self.pos), angles_to_vec3(self.yaw, self.pitch))


@dataclass
class CameraUniform:
    """The view-projection matrix as stored for the shaders."""

    view_proj: np.ndarray = field(default_factory=lambda: np.eye(4))

    def update_view_proj(self, camera: Camera) -> None:
        """Refresh from the camera; call whenever the camera changes."""
        self.view_proj = camera.view_proj_matrix()

    def to_bytes(self) -> bytes:
        """Column-major little-endian f32 matrix, 64 bytes."""
        return np.asarray(self.view_proj, dtype="<f4").T.tobytes()


@dataclass
class LightingUniform:
    """A point light as stored for the shaders."""

    position: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    color: Tuple[float, float, float] = (0.0, 0.0, 0.0)

    def to_bytes(self) -> bytes:
        """Position and colour, each padded to 16 bytes."""
        return struct.pack("<3fI3fI", *self.position, 0, *self.color, 0)


class CameraController(ABC):
    """Turns user input into camera movement."""

    enabled: bool = True

    @abstractmethod
    def handle_keypress(self, event: KeyEvent) -> None:
        """Track movement keys."""

    @abstractmethod
    def handle_mouse_move(self, delta, camera: Camera) -> None:
        """Turn the camera; delta is in normalised screen coordinates."""

    @abstractmethod
    def update_camera(self, camera: Camera, world, duration) -> None:
        """Move the camera for the time that has passed."""

    @abstractmethod
    def toggle(self) -> None:
        """Switch input handling on or off."""