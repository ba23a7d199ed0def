from datetime import timedelta

import pytest

from voxelcraft.camera import Camera, Key, KeyEvent
from voxelcraft.game import GameState, Hotbar, InteractionMode, Player
from voxelcraft.world import BlockPos, BlockType, Chunk, ChunkPos, World, WorldPos


def _empty_world(*chunk_positions):
    chunks = {pos: Chunk(pos, pos.to_block_pos()) for pos in chunk_positions}
    return World(chunks)


def _state(world, pos=(0.5, 0.5, 0.5), zfar=0.5, arm_length=5.0):
    camera = Camera(pos=WorldPos(*pos), yaw=0.0, pitch=0.0, zfar=zfar)
    return GameState(player=Player(camera=camera, arm_length=arm_length), world=world)


def test_interaction_mode_toggle_round_trip():
    assert InteractionMode.GAME.toggled() is InteractionMode.UI
    assert InteractionMode.UI.toggled() is InteractionMode.GAME
    assert InteractionMode.GAME.toggled().toggled() is InteractionMode.GAME


def test_hotbar_scroll_wraps_both_ways():
    hotbar = Hotbar()
    assert hotbar.selected == 0
    hotbar.scroll(True)
    assert hotbar.selected == 1
    hotbar.scroll(False)
    hotbar.scroll(False)
    assert hotbar.selected == hotbar.num_hotbars - 1
    hotbar.scroll(True)
    assert hotbar.selected == 0


def test_hotbar_full_cycle_returns_to_start():
    hotbar = Hotbar(selected=3)
    for _ in range(hotbar.num_hotbars):
        hotbar.scroll(True)
    assert hotbar.selected == 3


def test_update_accumulates_time():
    state = _state(_empty_world(ChunkPos(0, 0, 0)))
    state.update(0.25)
    state.update(timedelta(seconds=0.5))
    assert state.elapsed == pytest.approx(0.75)


def test_update_rejects_negative_time():
    state = _state(_empty_world(ChunkPos(0, 0, 0)))
    with pytest.raises(ValueError):
        state.update(-1.0)


def test_generate_chunks_covers_vision_distance():
    state = _state(World(), zfar=0.5)
    state.init()
    assert set(state.world.chunks) == set(ChunkPos(0, 0, 0).chunks_within(1))


def test_keypress_generates_around_new_position():
    state = _state(World(), zfar=0.5)
    state.init()
    state.player.camera.pos = WorldPos(40.0, 0.5, 0.5)
    state.handle_keypress(KeyEvent(Key.W, pressed=True))
    assert set(ChunkPos(2, 0, 0).chunks_within(1)) <= set(state.world.chunks)


def test_target_block_in_front():
    world = _empty_world(ChunkPos(0, 0, 0))
    world.set_block(BlockPos(3, 0, 0), BlockType.STONE)
    target = _state(world).get_player_target_block()
    assert target.block_pos == BlockPos(3, 0, 0)
    assert target.block_type == BlockType.STONE


def test_target_picks_closest_block():
    world = _empty_world(ChunkPos(0, 0, 0))
    world.set_block(BlockPos(3, 0, 0), BlockType.STONE)
    world.set_block(BlockPos(2, 0, 0), BlockType.DIRT)
    target = _state(world).get_player_target_block()
    assert target.block_pos == BlockPos(2, 0, 0)
    assert target.block_type == BlockType.DIRT


def test_target_out_of_reach_is_none():
    world = _empty_world(ChunkPos(0, 0, 0))
    world.set_block(BlockPos(10, 0, 0), BlockType.STONE)
    assert _state(world).get_player_target_block() is None


def test_target_not_in_line_of_sight_is_none():
    world = _empty_world(ChunkPos(0, 0, 0))
    world.set_block(BlockPos(0, 3, 0), BlockType.STONE)
    assert _state(world).get_player_target_block() is None


def test_target_in_neighbouring_chunk():
    world = _empty_world(ChunkPos(0, 0, 0), ChunkPos(1, 0, 0))
    world.set_block(BlockPos(17, 0, 0), BlockType.STONE)
    target = _state(world, pos=(14.5, 0.5, 0.5)).get_player_target_block()
    assert target.block_pos == BlockPos(17, 0, 0)


def test_target_requires_player_chunk():
    state = _state(_empty_world(ChunkPos(5, 5, 5)))
    with pytest.raises(KeyError):
        state.get_player_target_block()


def test_left_click_breaks_target_and_updates_exposure():
    world = _empty_world(ChunkPos(0, 0, 0))
    world.set_block(BlockPos(3, 0, 0), BlockType.STONE)
    world.set_block(BlockPos(4, 0, 0), BlockType.STONE)
    assert not world.is_block_exposed(BlockPos(4, 0, 0))
    state = _state(world)
    broken = state.handle_mouse_click("left", True, InteractionMode.GAME)
    assert broken.block_pos == BlockPos(3, 0, 0)
    assert world.get_block(BlockPos(3, 0, 0)).block_type == BlockType.AIR
    assert world.get_block(BlockPos(4, 0, 0)).block_type == BlockType.STONE
    assert world.is_block_exposed(BlockPos(4, 0, 0))


def test_click_in_ui_mode_does_nothing():
    world = _empty_world(ChunkPos(0, 0, 0))
    world.set_block(BlockPos(3, 0, 0), BlockType.STONE)
    state = _state(world)
    assert state.handle_mouse_click("left", True, InteractionMode.UI) is None
    assert world.get_block(BlockPos(3, 0, 0)).block_type == BlockType.STONE


@pytest.mark.parametrize("button, pressed", [("right", True), ("left", False)])
def test_other_clicks_do_not_break(button, pressed):
    world = _empty_world(ChunkPos(0, 0, 0))
    world.set_block(BlockPos(3, 0, 0), BlockType.STONE)
    state = _state(world)
    assert state.handle_mouse_click(button, pressed, InteractionMode.GAME) is None
    assert world.get_block(BlockPos(3, 0, 0)).block_type == BlockType.STONE


def test_unknown_mouse_button_rejected():
    state = _state(_empty_world(ChunkPos(0, 0, 0)))
    with pytest.raises(ValueError):
        state.handle_mouse_click("thumb", True, InteractionMode.GAME)