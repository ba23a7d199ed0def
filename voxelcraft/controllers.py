"""Camera controllers: free flight, inertial flight and walking."""

from __future__ import annotations

import math
from dataclasses import dataclass, fields
from typing import Dict, Optional

import numpy as np

from .camera import Camera, CameraController, Key, KeyEvent, angles_to_vec3
from .world import BlockType

_FULL_TURN = 2.0 * math.pi
_PITCH_LIMIT = math.pi / 2.0 * 0.99
_UP = np.array([0.0, 1.0, 0.0])
_UNIT = np.eye(3, dtype=int)

_FLIGHT_KEYS: Dict[Key, str] = {
    Key.W: "forward",
    Key.S: "backwards",
    Key.A: "left",
    Key.D: "right",
    Key.SPACE: "up",
    Key.Z: "down",
}
_WALKING_KEYS: Dict[Key, str] = {k: v for k, v in _FLIGHT_KEYS.items() if k is not Key.Z}


def _seconds(duration) -> float:
    total = getattr(duration, "total_seconds", None)
    return float(total()) if total is not None else float(duration)


def _normalize(vector: np.ndarray) -> np.ndarray:
    return vector / np.linalg.norm(vector)


def _axis(positive: bool, negative: bool) -> int:
    return int(positive) - int(negative)


@dataclass
class _MovementKeys:
    forward: bool = False
    backwards: bool = False
    left: bool = False
    right: bool = False
    up: bool = False
    down: bool = False

    def release(self) -> None:
        for f in fields(self):
            setattr(self, f.name, False)

    def apply(self, event: KeyEvent, keymap: Dict[Key, str]) -> None:
        action = keymap.get(event.key)
        if action is not None:
            setattr(self, action, event.pressed)

    def direction(self, forward: np.ndarray, right: np.ndarray, vertical: bool) -> np.ndarray:
        vector = right * _axis(self.right, self.left) + forward * _axis(
            self.forward, self.backwards
        )
        if vertical:
            vector[1] += _axis(self.up, self.down)
        return vector


def _turn(camera: Camera, turn_speed: float, delta) -> None:
    dx, dy = delta
    camera.yaw = (camera.yaw + turn_speed * dx) % _FULL_TURN
    camera.pitch = min(max(camera.pitch - turn_speed * dy, -_PITCH_LIMIT), _PITCH_LIMIT)


def _basis(yaw: float, pitch: float):
    forward = np.array(angles_to_vec3(yaw, pitch))
    right = _normalize(np.cross(forward, _UP))
    return forward, right


class _Collider:
    """Checks the blocks next to the camera against its body."""

    def __init__(self, world, camera: Camera) -> None:
        self._world = world
        self._aabb = camera.aabb()
        self._block = camera.pos.to_block_pos()

    def blocked(self, offset) -> bool:
        block = self._world.get_block(self._block + tuple(int(c) for c in offset))
        return (
            block is not None
            and block.block_type != BlockType.AIR
            and self._aabb.intersects(block.aabb().to_float())
        )

    def clip(self, vector: np.ndarray, axes=(0, 1, 2)) -> np.ndarray:
        clipped = vector.copy()
        for axis in axes:
            if clipped[axis] != 0.0 and self.blocked(np.sign(clipped[axis]) * _UNIT[axis]):
                clipped[axis] = 0.0
        return clipped


def _move(camera: Camera, displacement: np.ndarray) -> None:
    camera.pos = camera.pos + tuple(float(c) for c in displacement)


class BasicFlightCameraController(CameraController):
    """Flies at constant speed wherever the keys point, stopping at blocks."""

    def __init__(self, move_speed: float, turn_speed: float) -> None:
        if not move_speed > 0.0:
            raise ValueError("move_speed must be positive")
        if not turn_speed > 0.0:
            raise ValueError("turn_speed must be positive")
        self.move_speed = move_speed
        self.turn_speed = turn_speed
        self.enabled = True
        self._keys = _MovementKeys()

    def toggle(self) -> None:
        if self.enabled:
            self._keys.release()
        self.enabled = not self.enabled

    def handle_keypress(self, event: KeyEvent) -> None:
        if self.enabled:
            self._keys.apply(event, _FLIGHT_KEYS)

    def handle_mouse_move(self, delta, camera: Camera) -> None:
        if self.enabled:
            _turn(camera, self.turn_speed, delta)

    def update_camera(self, camera: Camera, world, duration) -> None:
        if not self.enabled:
            return
        forward, right = _basis(camera.yaw, camera.pitch)
        movement = self._keys.direction(forward, right, vertical=True)
        if movement @ movement == 0.0:
            return
        movement = _Collider(world, camera).clip(_normalize(movement))
        _move(camera, movement * self.move_speed * _seconds(duration))


class SpaceFlightCameraController(CameraController):
    """Flies with momentum: keys accelerate, drag slows, slow drift stops dead."""

    def __init__(
        self,
        acceleration: float,
        turn_speed: float,
        max_speed: Optional[float],
        drag: float,
    ) -> None:
        if acceleration < 0.0:
            raise ValueError("acceleration must not be negative")
        if turn_speed < 0.0:
            raise ValueError("turn_speed must not be negative")
        if max_speed is not None and max_speed < 0.0:
            raise ValueError("max_speed must not be negative")
        if drag < 0.0:
            raise ValueError("drag must not be negative")
        self.acceleration = acceleration
        self.turn_speed = turn_speed
        self.max_speed = max_speed
        self.drag = drag
        self.deadstop_speed = 0.5
        self.enabled = True
        self.velocity = np.zeros(3)
        self._keys = _MovementKeys()

    def toggle(self) -> None:
        if self.enabled:
            self._keys.release()
        self.enabled = not self.enabled

    def handle_keypress(self, event: KeyEvent) -> None:
        if self.enabled:
            self._keys.apply(event, _FLIGHT_KEYS)

    def handle_mouse_move(self, delta, camera: Camera) -> None:
        if self.enabled:
            _turn(camera, self.turn_speed, delta)

    def update_camera(self, camera: Camera, world, duration) -> None:
        if not self.enabled:
            return
        secs = _seconds(duration)
        forward, right = _basis(camera.yaw, camera.pitch)
        thrust = self._keys.direction(forward, right, vertical=True)

        if thrust @ thrust > 0.0:
            self.velocity = self.velocity + _normalize(thrust) * self.acceleration * secs
        elif self.velocity @ self.velocity < self.deadstop_speed**2:
            self.velocity = np.zeros(3)
            return
        speed2 = float(self.velocity @ self.velocity)
        if speed2 == 0.0:
            return

        drag_force = speed2 * self.drag * secs
        self.velocity = self.velocity - _normalize(self.velocity) * drag_force

        speed2 = float(self.velocity @ self.velocity)
        if self.max_speed is not None and speed2 > 0.0 and speed2 > self.max_speed**2:
            self.velocity = _normalize(self.velocity) * self.max_speed

        self.velocity = _Collider(world, camera).clip(self.velocity)
        _move(camera, self.velocity * secs)


class WalkingCameraController(CameraController):
    """Walks on the ground under gravity, with jumping."""

    def __init__(
        self, move_speed: float, turn_speed: float, gravity: float, jump_height: float
    ) -> None:
        for name, value in (
            ("move_speed", move_speed),
            ("turn_speed", turn_speed),
            ("gravity", gravity),
            ("jump_height", jump_height),
        ):
            if value < 0.0:
                raise ValueError(f"{name} must not be negative")
        self.move_speed = move_speed
        self.turn_speed = turn_speed
        self.gravity = gravity
        self.jump_force = math.sqrt(2.0 * gravity * jump_height)
        self.enabled = True
        self.vertical_velocity = 0.0
        self._keys = _MovementKeys()

    def toggle(self) -> None:
        if self.enabled:
            self._keys.release()
        self.enabled = not self.enabled

    def handle_keypress(self, event: KeyEvent) -> None:
        if self.enabled:
            self._keys.apply(event, _WALKING_KEYS)

    def handle_mouse_move(self, delta, camera: Camera) -> None:
        if self.enabled:
            _turn(camera, self.turn_speed, delta)

    def update_camera(self, camera: Camera, world, duration) -> None:
        secs = _seconds(duration)
        forward, right = _basis(camera.yaw, 0.0)
        movement = self._keys.direction(forward, right, vertical=False)
        if movement @ movement > 0.0:
            movement = _normalize(movement) * self.move_speed

        collider = _Collider(world, camera)
        movement = collider.clip(movement, axes=(0, 2))

        if self.vertical_velocity > 0.0 and collider.blocked(_UNIT[1]):
            self.vertical_velocity = 0.0

        on_floor = collider.blocked(-_UNIT[1])
        if not on_floor:
            self.vertical_velocity -= self.gravity * secs
        elif self.vertical_velocity < 0.0:
            self.vertical_velocity = 0.0

        if self._keys.up and on_floor and self.vertical_velocity <= 0.0:
            self.vertical_velocity += self.jump_force

        movement[1] = self.vertical_velocity
        _move(camera, movement * secs)