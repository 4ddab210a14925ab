"""Already compressed pixel blocks and how they are laid out in a file."""

from __future__ import annotations

from dataclasses import dataclass
from typing import BinaryIO, Sequence, Union

from .primitives import (
    IntegerBounds,
    InvalidError,
    Vec2,
    read_bytes,
    read_i32,
    read_u64,
    write_i32,
    write_u64,
)

# There can be at most 31 levels: the largest level would otherwise be
# larger than the maximum 32-bit integer value.
_MAX_LEVEL_INDEX = 31


def calculate_block_size(total_size: int, block_size: int, block_position: int) -> int:
    """The size of the block starting at `block_position`, clipped at `total_size`."""
    if block_position >= total_size:
        raise InvalidError("block index")
    if block_position + block_size <= total_size:
        return block_size
    return total_size - block_position


def _read_limited_bytes(stream: BinaryIO, size: int, hard_max: int, purpose: str) -> bytes:
    if size < 0 or size > hard_max:
        raise InvalidError(purpose)
    return read_bytes(stream, size)


def _read_i32_sized_bytes(stream: BinaryIO, hard_max: int, purpose: str) -> bytes:
    return _read_limited_bytes(stream, read_i32(stream), hard_max, purpose)


def _write_i32_sized_bytes(stream: BinaryIO, data: bytes) -> None:
    write_i32(stream, len(data))
    stream.write(data)


def _require_content(data: bytes) -> None:
    if not data:
        raise ValueError("empty blocks must not be put in the file")


@dataclass(frozen=True)
class TileCoordinates:
    """The index of a tile and of the mip or rip level it belongs to."""

    tile_index: Vec2
    level_index: Vec2

    def __post_init__(self) -> None:
        object.__setattr__(self, "tile_index", Vec2(*self.tile_index))
        object.__setattr__(self, "level_index", Vec2(*self.level_index))

    @classmethod
    def read(cls, stream: BinaryIO) -> "TileCoordinates":
        """Read the coordinates, rejecting negative indices and impossible levels."""
        tile_x = read_i32(stream)
        tile_y = read_i32(stream)
        level_x = read_i32(stream)
        level_y = read_i32(stream)

        if level_x > _MAX_LEVEL_INDEX or level_y > _MAX_LEVEL_INDEX:
            raise InvalidError("level index exceeding integer maximum")
        if tile_x < 0 or tile_y < 0:
            raise InvalidError("tile coordinate index")
        if level_x < 0 or level_y < 0:
            raise InvalidError("tile coordinate level")

        return cls(Vec2(tile_x, tile_y), Vec2(level_x, level_y))

    def write(self, stream: BinaryIO) -> None:
        """Write the coordinates as four little-endian 32-bit integers."""
        for value in (*self.tile_index, *self.level_index):
            write_i32(stream, value)

    def to_data_indices(self, tile_size, max_size) -> IntegerBounds:
        """The pixel rectangle of this tile relative to the data window origin."""
        tile_size = Vec2(*tile_size)
        max_size = Vec2(*max_size)
        x = self.tile_index.x * tile_size.width
        y = self.tile_index.y * tile_size.height

        if x >= max_size.x or y >= max_size.y:
            raise InvalidError("tile index")

        return IntegerBounds(
            position=Vec2(x, y),
            size=Vec2(
                calculate_block_size(max_size.x, tile_size.width, x),
                calculate_block_size(max_size.y, tile_size.height, y),
            ),
        )

    def to_absolute_indices(self, tile_size, data_window: IntegerBounds) -> IntegerBounds:
        """The pixel rectangle of this tile in the global space of the file; may be negative."""
        return self.to_data_indices(tile_size, data_window.size).with_origin(data_window.position)

    def is_largest_resolution_level(self) -> bool:
        """Whether this tile belongs to the original resolution rather than a smaller copy."""
        return self.level_index == Vec2(0, 0)


@dataclass(frozen=True)
class CompressedScanLineBlock:
    """One or more possibly compressed flat scan lines."""

    y_coordinate: int
    compressed_pixels: bytes

    @classmethod
    def read(cls, stream: BinaryIO, max_block_byte_size: int) -> "CompressedScanLineBlock":
        y_coordinate = read_i32(stream)
        pixels = _read_i32_sized_bytes(stream, max_block_byte_size, "scan line block sample count")
        return cls(y_coordinate, pixels)

    def write(self, stream: BinaryIO) -> None:
        _require_content(self.compressed_pixels)
        write_i32(stream, self.y_coordinate)
        _write_i32_sized_bytes(stream, self.compressed_pixels)


@dataclass(frozen=True)
class CompressedTileBlock:
    """A possibly compressed tile of flat data."""

    coordinates: TileCoordinates
    compressed_pixels: bytes

    @classmethod
    def read(cls, stream: BinaryIO, max_block_byte_size: int) -> "CompressedTileBlock":
        coordinates = TileCoordinates.read(stream)
        pixels = _read_i32_sized_bytes(stream, max_block_byte_size, "tile block sample count")
        return cls(coordinates, pixels)

    def write(self, stream: BinaryIO) -> None:
        _require_content(self.compressed_pixels)
        self.coordinates.write(stream)
        _write_i32_sized_bytes(stream, self.compressed_pixels)


def _write_deep_contents(stream: BinaryIO, table: bytes, samples: bytes, decompressed_size: int) -> None:
    _require_content(samples)
    write_u64(stream, len(table))
    write_u64(stream, len(samples))
    write_u64(stream, decompressed_size)
    stream.write(table)
    stream.write(samples)


def _read_deep_contents(stream: BinaryIO, hard_max: int, purpose: str):
    table_size = read_u64(stream)
    sample_data_size = read_u64(stream)
    decompressed_size = read_u64(stream)
    table = _read_limited_bytes(stream, table_size, hard_max, f"{purpose} table size")
    samples = _read_limited_bytes(stream, sample_data_size, hard_max, f"{purpose} sample count")
    return decompressed_size, table, samples


@dataclass(frozen=True)
class CompressedDeepScanLineBlock:
    """One or more possibly compressed deep scan lines.

    The offset table holds the raw signed bytes of the compressed table.
    """

    y_coordinate: int
    decompressed_sample_data_size: int
    compressed_pixel_offset_table: bytes
    compressed_sample_data: bytes

    @classmethod
    def read(cls, stream: BinaryIO, max_block_byte_size: int) -> "CompressedDeepScanLineBlock":
        y_coordinate = read_i32(stream)
        size, table, samples = _read_deep_contents(stream, max_block_byte_size, "deep scan line block")
        return cls(y_coordinate, size, table, samples)

    def write(self, stream: BinaryIO) -> None:
        _require_content(self.compressed_sample_data)
        write_i32(stream, self.y_coordinate)
        _write_deep_contents(
            stream, self.compressed_pixel_offset_table,
            self.compressed_sample_data, self.decompressed_sample_data_size,
        )


@dataclass(frozen=True)
class CompressedDeepTileBlock:
    """A possibly compressed tile of deep data.

    The offset table holds the raw signed bytes of the compressed table.
    """

    coordinates: TileCoordinates
    decompressed_sample_data_size: int
    compressed_pixel_offset_table: bytes
    compressed_sample_data: bytes

    @classmethod
    def read(cls, stream: BinaryIO, max_block_byte_size: int) -> "CompressedDeepTileBlock":
        coordinates = TileCoordinates.read(stream)
        size, table, samples = _read_deep_contents(stream, max_block_byte_size, "deep tile block")
        return cls(coordinates, size, table, samples)

    def write(self, stream: BinaryIO) -> None:
        _require_content(self.compressed_sample_data)
        self.coordinates.write(stream)
        _write_deep_contents(
            stream, self.compressed_pixel_offset_table,
            self.compressed_sample_data, self.decompressed_sample_data_size,
        )


CompressedBlock = Union[
    CompressedScanLineBlock, CompressedTileBlock,
    CompressedDeepScanLineBlock, CompressedDeepTileBlock,
]


@dataclass(frozen=True)
class LayerLayout:
    """What a chunk reader needs to know about a layer to decode its chunks."""

    tiled: bool
    deep: bool
    max_block_byte_size: int


@dataclass(frozen=True)
class Chunk:
    """A compressed block of pixels together with the index of its layer."""

    layer_index: int
    compressed_block: CompressedBlock

    @classmethod
    def read(cls, stream: BinaryIO, layouts: Sequence[LayerLayout]) -> "Chunk":
        """Read a chunk; the layer index is only stored when there are several layers."""
        layer_number = read_i32(stream) if len(layouts) > 1 else 0
        if layer_number < 0 or layer_number >= len(layouts):
            raise InvalidError("chunk data part number")

        layout = layouts[layer_number]
        if layout.tiled:
            block_type = CompressedDeepTileBlock if layout.deep else CompressedTileBlock
        else:
            block_type = CompressedDeepScanLineBlock if layout.deep else CompressedScanLineBlock

        return cls(layer_number, block_type.read(stream, layout.max_block_byte_size))

    def write(self, stream: BinaryIO, header_count: int) -> None:
        """Write the chunk, prefixed with its layer index if the file has several layers."""
        if not 0 <= self.layer_index < header_count:
            raise ValueError("layer index out of range")
        if header_count != 1:
            write_i32(stream, self.layer_index)
        self.compressed_block.write(stream)