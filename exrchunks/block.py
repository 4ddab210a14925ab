"""Uncompressed blocks of pixel data and the lines of samples inside them."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable, Iterator, Union

from .lines import BlockIndex, ChannelDescription, ChannelList, LineSlice, lines_in_block

Channels = Union[ChannelList, Iterable[ChannelDescription]]


def _as_channel_list(channels: Channels) -> ChannelList:
    if isinstance(channels, ChannelList):
        return channels
    return ChannelList(tuple(channels))


def _block_byte_size(channels: ChannelList, block_index: BlockIndex) -> int:
    return block_index.pixel_size.area() * channels.bytes_per_pixel()


def collect_block_data_from_lines(
    channels: Channels,
    block_index: BlockIndex,
    extract_line: Callable[[LineSlice], None],
) -> bytes:
    """Build the bytes of a block by letting `extract_line` fill one line after another.

    Each line handed to `extract_line` holds a writable view of zeroed bytes,
    to be filled with `LineSlice.write_samples` or `write_samples_from_list`.
    """
    channel_list = _as_channel_list(channels)
    block_bytes = bytearray(_block_byte_size(channel_list, block_index))

    with memoryview(block_bytes) as view:
        for byte_range, line_index in lines_in_block(block_index, channel_list):
            with view[byte_range] as line_view:
                extract_line(LineSlice(location=line_index, value=line_view))

    return bytes(block_bytes)


@dataclass(frozen=True)
class UncompressedBlock:
    """Uncompressed pixel bytes of a whole block, together with where the block belongs.

    The bytes hold all pixel rows one after another; within a row, all samples
    of the first channel come first, then those of the second channel, and so on.
    """

    index: BlockIndex
    data: bytes

    def __post_init__(self) -> None:
        object.__setattr__(self, "data", bytes(self.data))

    def lines(self, channels: Channels) -> Iterator[LineSlice]:
        """Iterate all lines in this block; each holds the samples of one channel in one row."""
        channel_list = _as_channel_list(channels)
        expected = _block_byte_size(channel_list, self.index)
        if expected != len(self.data):
            raise ValueError(
                f"block holds {len(self.data)} bytes, but its size and channels need {expected}"
            )

        view = memoryview(self.data)
        for byte_range, line_index in lines_in_block(self.index, channel_list):
            yield LineSlice(location=line_index, value=view[byte_range])

    @classmethod
    def from_lines(
        cls,
        channels: Channels,
        block_index: BlockIndex,
        extract_line: Callable[[LineSlice], None],
    ) -> "UncompressedBlock":
        """Create a block by letting `extract_line` fill one line of samples after another."""
        return cls(
            index=block_index,
            data=collect_block_data_from_lines(channels, block_index, extract_line),
        )