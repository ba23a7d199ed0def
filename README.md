# voxelcraft

The simulation core of a block-based voxel game: a world split into
16×16×16 chunks, terrain generated from layered Perlin noise, block
picking by ray casting, and first-person camera controllers with simple
collision against solid blocks.

The package holds the game state and the rules that change it. A front
end of your choice feeds it input and time, then reads the state back to
draw it.

## What is inside

- `voxelcraft.geometry`: `Ray` (its direction is normalised on creation;
  a zero direction raises `ValueError`) and the axis-aligned box `AABB`,
  whose corners are reordered so that `start <= end` on every axis.
  `AABB.intersects` tests box overlap (touching counts),
  `AABB.to_float` converts integer corners to floats, and
  `AABB.intersect_ray` returns the distance to the nearest hit in front
  of the ray, or `None`.
- `voxelcraft.noise`: `Perlin(seed, num_octaves, amplitude, persistence,
  scale)`, several octaves of improved Perlin noise averaged by their
  weights. `Perlin.sample(x, y, z)` takes numbers or NumPy arrays and
  returns a float or an array.
- `voxelcraft.world`:
  - positions in three spaces: `ChunkPos`, `BlockPos` and `WorldPos`,
    with conversions between them (`to_block_pos`, `to_chunk_offset`,
    `to_world_pos`). `ChunkPos.chunks_within(n)` yields the chunk
    positions within a sphere of radius `n`.
  - `BlockType` (`AIR`, `DIRT`, `STONE`, `SMILEY`, `SMILEY2`) and `Block`.
  - `Chunk`, holding block types and an "exposed" flag per block in
    16×16×16 NumPy arrays indexed `[x, y, z]`, with `get_block`,
    `set_block`, `is_block_exposed` and `iter_blocks`.
  - `ChunkGenerator`, which turns noise density into blocks: below 0 is
    air, below 0.05 is dirt, the rest is stone.
  - `World`, which generates chunks on demand (`get_or_generate_chunk`),
    reads and writes blocks (`get_block`, `set_block`), marks blocks
    next to air as exposed (`update_exposed_blocks`, `is_block_exposed`),
    and saves to or loads from a folder (`save`, `World.load`). A new
    `World()` uses seed 42, three octaves, amplitude 0.5, persistence 2
    and scale 1/64.
- `voxelcraft.camera`: the `Camera` (position, yaw and pitch in radians,
  aspect ratio, vertical field of view in degrees, near and far planes),
  with `view_proj_matrix`, `in_view`, the player's bounding box `aabb`
  and the look `ray`; `angles_to_vec3` for the look direction; the
  shader-ready byte layouts `CameraUniform` and `LightingUniform`; the
  key input types `Key` and `KeyEvent`; and the abstract
  `CameraController`.
- `voxelcraft.controllers`: three camera controllers, all driven by
  W/A/S/D and the mouse:
  - `BasicFlightCameraController(move_speed, turn_speed)`: flies at a
    constant speed; Space rises, Z sinks.
  - `SpaceFlightCameraController(acceleration, turn_speed, max_speed,
    drag)`: keys accelerate, drag slows, an optional speed cap applies,
    and slow drift with no keys held stops dead.
  - `WalkingCameraController(move_speed, turn_speed, gravity,
    jump_height)`: walks on the horizontal plane, falls under gravity and
    jumps with Space when standing on a block.

  Each controller stops movement along an axis when the neighbouring
  block that way is solid and overlaps the player's box. `toggle`
  switches a controller off (releasing any held keys) or back on.
- `voxelcraft.game`: `GameState` with its `Player`, the `Hotbar`
  selection (`scroll` wraps around at either end), the `InteractionMode`
  switch between `GAME` and `UI`, and `new_game()`, which builds a state
  at the default start position and generates every chunk in view.

## A short tour

```python
from voxelcraft.game import InteractionMode, new_game

game = new_game()                 # generates the chunks around the player
target = game.get_player_target_block()
if target is not None:
    print("Looking at", target.block_type, "at", target.block_pos)

# A left click in game mode breaks the targeted block and returns it.
broken = game.handle_mouse_click("left", True, InteractionMode.GAME)

game.world.save("saves")          # one file per chunk
```

`new_game()` generates a few thousand chunks, so it takes a moment.

Moving the camera:

```python
from datetime import timedelta

from voxelcraft.camera import Key, KeyEvent
from voxelcraft.controllers import BasicFlightCameraController

controller = BasicFlightCameraController(move_speed=5.0, turn_speed=6.28)
controller.handle_keypress(KeyEvent(Key.W, pressed=True))
controller.update_camera(game.player.camera, game.world, timedelta(seconds=0.1))
```

Durations may be given as a `timedelta` or as a number of seconds.

A saved world is read back with `World.load`, which also rebuilds the
exposure flags:

```python
from voxelcraft.world import World

world = World.load("saves")
```

## Save format

A save folder holds one file per chunk, named `<x>_<y>_<z>.chunk` after
the chunk position. Each file is the chunk's 4096 block types as
little-endian unsigned 16-bit values. `World.save` deletes the folder
if it exists and writes it anew. `World.load` raises `ValueError` for a
badly named file, a file of the wrong length or an unknown block type.

## What it does not do

There is no window, no rendering and no command to start a game. The
package opens no display and reads no keyboard or mouse itself:
`Key`, `KeyEvent` and the mouse button names (`"left"`, `"right"`,
`"middle"`) are the inputs a front end passes in. `CameraUniform` and
`LightingUniform` only produce the bytes a renderer would upload; loading
models and textures is not part of the package.

## Running the tests

The test suite uses pytest and lives in `tests/`. Install the `test`
extra and run `pytest`.