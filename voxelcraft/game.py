"""Game state independent of rendering: the player, the world and their interaction."""

from __future__ import annotations

import itertools
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

import numpy as np

from .camera import Camera, KeyEvent
from .geometry import Ray
from .world import CHUNK_SIZE, Block, BlockPos, BlockType, Chunk, World, WorldPos

_MOUSE_BUTTONS = ("left", "right", "middle")
_TARGET_SEARCH_CHUNKS = 3
# Slack added to the squared reach when picking candidate blocks by their corner.
_REACH_SLACK = 3.0


def _seconds(duration) -> float:
    total = getattr(duration, "total_seconds", None)
    return float(total()) if total is not None else float(duration)


class InteractionMode(Enum):
    """Whether input drives the game or a menu."""

    GAME = "game"
    UI = "ui"

    def toggled(self) -> InteractionMode:
        """The other mode."""
        return InteractionMode.UI if self is InteractionMode.GAME else InteractionMode.GAME


@dataclass
class Player:
    """The player's view and how far they can reach."""

    camera: Camera
    arm_length: float = 5.0


@dataclass
class Hotbar:
    """The row of selectable item slots."""

    selected: int = 0
    num_hotbars: int = 10

    def scroll(self, up: bool) -> None:
        """Move the selection by one slot, wrapping around at either end."""
        step = 1 if up else -1
        self.selected = (self.selected + step) % self.num_hotbars


@dataclass
class GameState:
    """The player and the world, advanced by input and time."""

    player: Player
    world: World
    elapsed: float = field(default=0.0)

    def init(self) -> None:
        """Once-off set-up for a new game."""
        self.generate_chunks()

    def update(self, time_passed) -> None:
        """Advance the game clock by ``time_passed`` (seconds or a timedelta)."""
        seconds = _seconds(time_passed)
        if seconds < 0.0:
            raise ValueError("time cannot run backwards")
        self.elapsed += seconds

    def handle_keypress(self, event: KeyEvent) -> None:
        """React to a key: the player may have moved, so fill in nearby chunks."""
        self.generate_chunks()

    def handle_mouse_click(
        self, button: str, pressed: bool, mode: InteractionMode
    ) -> Optional[Block]:
        """Handle a mouse button; a left press in game mode breaks the targeted block.

        Returns the block that was broken, or None.
        """
        if button not in _MOUSE_BUTTONS:
            raise ValueError(f"unknown mouse button: {button!r}")
        if mode is not InteractionMode.GAME:
            return None
        if not (pressed and button == "left"):
            return None
        target = self.get_player_target_block()
        if target is None:
            return None
        self.world.set_block(target.block_pos, BlockType.AIR)
        print(f"Breaking block: {target}")
        chunk_pos, _ = target.block_pos.to_chunk_offset()
        self.world.update_exposed_blocks(chunk_pos)
        return target

    def generate_chunks(self) -> None:
        """Generate every chunk within the player's vision distance, plus one."""
        camera = self.player.camera
        player_chunk, _ = camera.pos.to_block_pos().to_chunk_offset()
        vision_chunks = -(-int(camera.zfar) // CHUNK_SIZE)
        for chunk_pos in player_chunk.chunks_within(vision_chunks + 1):
            self.world.get_or_generate_chunk(chunk_pos)

    def get_player_target_block(self) -> Optional[Block]:
        """The solid block the player is looking at within reach, or None."""
        camera = self.player.camera
        ray = camera.ray()
        player_chunk_pos, _ = camera.pos.to_block_pos().to_chunk_offset()
        try:
            player_chunk = self.world.chunks[player_chunk_pos]
        except KeyError:
            raise KeyError(f"player's chunk {player_chunk_pos} doesn't exist") from None

        reach = self.player.arm_length
        nearby = []
        for chunk_pos in player_chunk_pos.chunks_within(_TARGET_SEARCH_CHUNKS):
            if chunk_pos == player_chunk_pos:
                continue
            distance = chunk_pos.aabb().to_float().intersect_ray(ray)
            if distance is not None and distance <= reach:
                nearby.append((distance, chunk_pos))
        nearby.sort(key=lambda item: item[0])

        candidates = itertools.chain(
            [player_chunk],
            (self.world.chunks[pos] for _, pos in nearby if pos in self.world.chunks),
        )
        for chunk in candidates:
            block = self._closest_target(chunk, ray)
            if block is not None:
                return block
        return None

    def _closest_target(self, chunk: Chunk, ray: Ray) -> Optional[Block]:
        coords = np.argwhere(chunk.blocks != BlockType.AIR)
        if coords.size == 0:
            return None
        positions = coords + np.array(tuple(chunk.world_pos))
        eye = np.array(tuple(self.player.camera.pos), dtype=float)
        distance2 = ((positions - eye) ** 2).sum(axis=1)
        in_reach = distance2 <= self.player.arm_length**2 + _REACH_SLACK
        coords, positions = coords[in_reach], positions[in_reach]
        # Visit blocks with x varying fastest, then y, then z, as the chunk iterates them.
        order = np.lexsort((positions[:, 0], positions[:, 1], positions[:, 2]))

        best_distance = math.inf
        best: Optional[Block] = None
        for local, world in zip(coords[order], positions[order]):
            block = Block(
                BlockPos(*(int(c) for c in world)),
                chunk.get_block(tuple(int(c) for c in local)),
            )
            distance = block.aabb().to_float().intersect_ray(ray)
            if distance is not None and distance < best_distance:
                best_distance, best = distance, block
        return best


def new_game() -> GameState:
    """A fresh game with the default camera, player and world, chunks generated."""
    camera = Camera(
        pos=WorldPos(-7.0, -20.0, -14.0),
        yaw=0.0,
        pitch=0.0,
        aspect=1.0,
        fovy=90.0,
        znear=0.1,
        zfar=100.0,
    )
    state = GameState(player=Player(camera=camera, arm_length=5.0), world=World())
    state.init()
    return state