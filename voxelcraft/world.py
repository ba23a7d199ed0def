"""Block world: positions, chunks, terrain generation, persistence and exposure."""

from __future__ import annotations

import itertools
import shutil
from dataclasses import dataclass, field
from enum import IntEnum
from pathlib import Path
from typing import ClassVar, Dict, Iterator, Optional, Tuple

import numpy as np

from .geometry import AABB
from .noise import Perlin

CHUNK_SIZE = 16
_SHAPE = (CHUNK_SIZE, CHUNK_SIZE, CHUNK_SIZE)


@dataclass(frozen=True)
class ChunkPos:
    """Position of a chunk in chunk space (one unit is one chunk length)."""

    x: int
    y: int
    z: int

    def __iter__(self):
        return iter((self.x, self.y, self.z))

    def __add__(self, offset) -> ChunkPos:
        dx, dy, dz = offset
        return ChunkPos(self.x + dx, self.y + dy, self.z + dz)

    def to_block_pos(self) -> BlockPos:
        """Position of this chunk's origin block."""
        return BlockPos(self.x * CHUNK_SIZE, self.y * CHUNK_SIZE, self.z * CHUNK_SIZE)

    def chunks_within(self, num_chunks: int) -> Iterator[ChunkPos]:
        """Chunk positions within a spherical distance of ``num_chunks``."""
        if num_chunks < 0:
            raise ValueError("num_chunks must not be negative")
        limit = num_chunks * num_chunks
        span = range(-num_chunks, num_chunks + 1)
        for offset in itertools.product(span, repeat=3):
            if sum(c * c for c in offset) <= limit:
                yield self + offset

    def aabb(self) -> AABB:
        return AABB(tuple(self.to_block_pos()), tuple((self + (1, 1, 1)).to_block_pos()))


@dataclass(frozen=True)
class BlockPos:
    """Position of a block in block space (one unit is one block length)."""

    x: int
    y: int
    z: int

    def __iter__(self):
        return iter((self.x, self.y, self.z))

    def __add__(self, offset) -> BlockPos:
        dx, dy, dz = offset
        return BlockPos(self.x + dx, self.y + dy, self.z + dz)

    def to_chunk_offset(self) -> Tuple[ChunkPos, Tuple[int, int, int]]:
        """The containing chunk and the block's position inside it."""
        chunk = ChunkPos(self.x // CHUNK_SIZE, self.y // CHUNK_SIZE, self.z // CHUNK_SIZE)
        local = (self.x % CHUNK_SIZE, self.y % CHUNK_SIZE, self.z % CHUNK_SIZE)
        return chunk, local

    def to_world_pos(self) -> WorldPos:
        return WorldPos(float(self.x), float(self.y), float(self.z))


@dataclass(frozen=True)
class WorldPos:
    """Any position in the world, in block units."""

    x: float
    y: float
    z: float

    def __iter__(self):
        return iter((self.x, self.y, self.z))

    def __add__(self, offset) -> WorldPos:
        dx, dy, dz = offset
        return WorldPos(self.x + dx, self.y + dy, self.z + dz)

    def to_block_pos(self) -> BlockPos:
        """The block containing this point, rounding down."""
        return BlockPos(int(np.floor(self.x)), int(np.floor(self.y)), int(np.floor(self.z)))


class BlockType(IntEnum):
    AIR = 0
    DIRT = 1
    STONE = 2
    SMILEY = 3
    SMILEY2 = 4


@dataclass(frozen=True)
class Block:
    block_pos: BlockPos
    block_type: BlockType

    def aabb(self) -> AABB:
        """Integer bounding box of this block."""
        return AABB(tuple(self.block_pos), tuple(self.block_pos + (1, 1, 1)))


def _local(pos) -> Tuple[int, int, int]:
    x, y, z = (int(c) for c in pos)
    if not all(0 <= c < CHUNK_SIZE for c in (x, y, z)):
        raise IndexError(f"block offset {pos!r} outside chunk")
    return x, y, z


@dataclass(eq=False)
class Chunk:
    """A cube of CHUNK_SIZE³ blocks, indexed [x][y][z]."""

    CHUNK_SIZE: ClassVar[int] = CHUNK_SIZE
    BLOCKS_PER_CHUNK: ClassVar[int] = CHUNK_SIZE**3
    ADJACENT_OFFSETS: ClassVar[tuple] = (
        (-1, 0, 0),
        (1, 0, 0),
        (0, -1, 0),
        (0, 1, 0),
        (0, 0, -1),
        (0, 0, 1),
    )
    CORNER_OFFSETS: ClassVar[tuple] = tuple(itertools.product((0, 1), repeat=3))

    chunk_pos: ChunkPos
    world_pos: BlockPos
    blocks: np.ndarray = field(default_factory=lambda: np.zeros(_SHAPE, dtype=np.uint16))
    exposed_blocks: np.ndarray = field(default_factory=lambda: np.zeros(_SHAPE, dtype=bool))

    def __post_init__(self) -> None:
        self.blocks = np.array(self.blocks, dtype=np.uint16)
        self.exposed_blocks = np.array(self.exposed_blocks, dtype=bool)
        if self.blocks.shape != _SHAPE or self.exposed_blocks.shape != _SHAPE:
            raise ValueError(f"chunk arrays must have shape {_SHAPE}")

    def iter_blocks(self) -> Iterator[Block]:
        """Every block in the chunk, x varying fastest, then y, then z."""
        ox, oy, oz = self.world_pos
        for z in range(CHUNK_SIZE):
            for y in range(CHUNK_SIZE):
                for x in range(CHUNK_SIZE):
                    yield Block(
                        BlockPos(ox + x, oy + y, oz + z), BlockType(int(self.blocks[x, y, z]))
                    )

    def get_block(self, pos) -> BlockType:
        return BlockType(int(self.blocks[_local(pos)]))

    def set_block(self, pos, block_type: BlockType) -> None:
        self.blocks[_local(pos)] = BlockType(block_type)

    def is_block_exposed(self, pos) -> bool:
        return bool(self.exposed_blocks[_local(pos)])


class ChunkGenerator:
    """Fills chunks from a noise density field."""

    def __init__(self, rng: Perlin) -> None:
        self.rng = rng

    def generate_chunk(self, world_pos: BlockPos) -> Chunk:
        """Generate the chunk whose origin block is ``world_pos``; exposure is left empty."""
        ox, oy, oz = world_pos
        r = np.arange(CHUNK_SIZE)
        gx, gy, gz = np.meshgrid(ox + r, oy + r, oz + r, indexing="ij")
        density = np.asarray(
            self.rng.sample(gx.astype(float), gy.astype(float), gz.astype(float))
        )
        if np.any(~((density >= -1.0) & (density < 1.0))):
            raise ValueError("noise density generated outside -1 .. 1")
        blocks = np.select(
            [density < 0.0, density < 0.05],
            [int(BlockType.AIR), int(BlockType.DIRT)],
            default=int(BlockType.STONE),
        )
        chunk_pos, _ = world_pos.to_chunk_offset()
        return Chunk(chunk_pos, world_pos, blocks)


def _default_generator() -> ChunkGenerator:
    return ChunkGenerator(Perlin(42, 3, 0.5, 2.0, 1.0 / 64.0))


class World:
    """All generated chunks and the generator that makes new ones."""

    def __init__(self, chunks: Optional[Dict[ChunkPos, Chunk]] = None, generator=None) -> None:
        self.chunks: Dict[ChunkPos, Chunk] = dict(chunks) if chunks else {}
        self.generator = generator if generator is not None else _default_generator()

    def save(self, folder) -> None:
        """Replace ``folder`` with one file per chunk of little-endian u16 block types."""
        folder = Path(folder)
        if folder.exists():
            shutil.rmtree(folder)
        folder.mkdir()
        for pos, chunk in self.chunks.items():
            path = folder / f"{pos.x}_{pos.y}_{pos.z}.chunk"
            with path.open("xb") as fh:
                fh.write(chunk.blocks.astype("<u2").tobytes())

    @classmethod
    def load(cls, folder) -> World:
        """Read a world written by :meth:`save` and rebuild block exposure."""
        folder = Path(folder)
        if not folder.is_dir():
            raise NotADirectoryError(str(folder))
        chunks = {}
        for path in sorted(folder.glob("*.chunk")):
            parts = path.stem.split("_")
            if len(parts) != 3:
                raise ValueError(f"bad chunk file name: {path.name}")
            chunk_pos = ChunkPos(*(int(p) for p in parts))
            data = path.read_bytes()
            values = np.frombuffer(data[: len(data) // 2 * 2], dtype="<u2")
            if values.size != Chunk.BLOCKS_PER_CHUNK:
                raise ValueError(f"{path.name} holds {values.size} blocks")
            if values.size and int(values.max()) > max(BlockType):
                raise ValueError(f"{path.name} holds an unknown block type")
            blocks = values.astype(np.uint16).reshape(_SHAPE)
            chunks[chunk_pos] = Chunk(chunk_pos, chunk_pos.to_block_pos(), blocks)
        world = cls(chunks)
        for pos in list(world.chunks):
            world.update_exposed_blocks(pos)
        return world

    def _chunk(self, chunk_pos: ChunkPos) -> Chunk:
        try:
            return self.chunks[chunk_pos]
        except KeyError:
            raise KeyError(f"chunk {chunk_pos} doesn't exist") from None

    def update_exposed_blocks(self, chunk_pos: ChunkPos) -> None:
        """Mark every block next to an air block of this chunk as exposed."""
        chunk = self._chunk(chunk_pos)
        coords = np.argwhere(chunk.blocks == BlockType.AIR)
        if coords.size == 0:
            return
        for offset in Chunk.ADJACENT_OFFSETS:
            shifted = coords + np.array(offset)
            inside = np.all((shifted >= 0) & (shifted < CHUNK_SIZE), axis=1)
            own = shifted[inside]
            chunk.exposed_blocks[own[:, 0], own[:, 1], own[:, 2]] = True
            neighbour = self.chunks.get(chunk_pos + offset)
            if neighbour is not None:
                other = shifted[~inside] % CHUNK_SIZE
                neighbour.exposed_blocks[other[:, 0], other[:, 1], other[:, 2]] = True

    def is_block_exposed(self, pos: BlockPos) -> bool:
        chunk_pos, local = pos.to_chunk_offset()
        return self._chunk(chunk_pos).is_block_exposed(local)

    def get_or_generate_chunk(self, pos: ChunkPos) -> Chunk:
        if pos not in self.chunks:
            self.chunks[pos] = self.generator.generate_chunk(pos.to_block_pos())
            self.update_exposed_blocks(pos)
            for neighbour in [pos + o for o in Chunk.ADJACENT_OFFSETS]:
                if neighbour in self.chunks:
                    self.update_exposed_blocks(neighbour)
        return self.chunks[pos]

    def get_block(self, pos: BlockPos) -> Optional[Block]:
        chunk_pos, local = pos.to_chunk_offset()
        chunk = self.chunks.get(chunk_pos)
        if chunk is None:
            return None
        return Block(pos, chunk.get_block(local))

    def set_block(self, pos: BlockPos, block_type: BlockType) -> bool:
        """Set a block; False when its chunk has not been generated."""
        chunk_pos, local = pos.to_chunk_offset()
        chunk = self.chunks.get(chunk_pos)
        if chunk is None:
            return False
        chunk.set_block(local, block_type)
        return True