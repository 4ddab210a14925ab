"""Channel descriptions and the lines of pixel samples inside a block."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from typing import Callable, Iterable, Iterator, Tuple, Union

from .primitives import Vec2
from .samples import Sample, SampleType

_FORMATS = {SampleType.F16: "e", SampleType.F32: "f", SampleType.U32: "I"}

Number = Union[int, float, Sample]


@dataclass(frozen=True)
class ChannelDescription:
    """The name and sample type of one channel."""

    name: str
    sample_type: SampleType
    quantize_linearly: bool = False
    sampling: Vec2 = Vec2(1, 1)


@dataclass(frozen=True)
class ChannelList:
    """The channels of a layer, in the order they are stored."""

    channels: Tuple[ChannelDescription, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "channels", tuple(self.channels))

    def __iter__(self) -> Iterator[ChannelDescription]:
        return iter(self.channels)

    def __len__(self) -> int:
        return len(self.channels)

    def __getitem__(self, index: int) -> ChannelDescription:
        return self.channels[index]

    def bytes_per_pixel(self) -> int:
        """The number of bytes one pixel of all channels occupies."""
        return sum(channel.sample_type.bytes_per_sample() for channel in self.channels)


@dataclass(frozen=True)
class BlockIndex:
    """Where a block of pixels lies inside the image."""

    layer: int
    pixel_position: Vec2
    pixel_size: Vec2
    level: Vec2


@dataclass(frozen=True)
class LineIndex:
    """Where a row of samples of one channel lies inside the image."""

    layer: int
    channel: int
    level: Vec2
    position: Vec2
    sample_count: int


def _native(value: Number, sample_type: SampleType) -> Union[int, float]:
    if not isinstance(value, Sample):
        if isinstance(value, int) and not isinstance(value, bool) and 0 <= value <= 0xFFFF_FFFF:
            value = Sample.u32(value)
        else:
            value = Sample.f32(float(value))
    if sample_type is SampleType.F16:
        return value.to_f16()
    if sample_type is SampleType.F32:
        return value.to_f32()
    return value.to_u32()


@dataclass
class LineSlice:
    """The raw little-endian bytes of one line of samples and where it belongs."""

    location: LineIndex
    value: Union[bytes, bytearray, memoryview]

    def _check_size(self, sample_type: SampleType) -> None:
        expected = self.location.sample_count * sample_type.bytes_per_sample()
        if len(self.value) != expected:
            raise ValueError(
                f"line holds {len(self.value)} bytes, but {expected} are needed "
                f"for {self.location.sample_count} {sample_type.name} samples"
            )

    def read_samples(self, sample_type: SampleType) -> Iterator[Union[int, float]]:
        """Iterate the samples of this line from left to right."""
        self._check_size(sample_type)
        return (value for (value,) in struct.iter_unpack("<" + _FORMATS[sample_type], self.value))

    def write_samples(self, sample_type: SampleType, get_sample: Callable[[int], Number]) -> None:
        """Fill the line, asking `get_sample` for the sample at each index within the line."""
        self._check_size(sample_type)
        count = self.location.sample_count
        values = [_native(get_sample(index), sample_type) for index in range(count)]
        try:
            struct.pack_into(f"<{count}{_FORMATS[sample_type]}", self.value, 0, *values)
        except struct.error as error:
            raise ValueError(str(error)) from error

    def write_samples_from_list(self, sample_type: SampleType, samples: Iterable[Number]) -> None:
        """Fill the line from a sequence holding exactly one sample per pixel."""
        samples = list(samples)
        if len(samples) != self.location.sample_count:
            raise ValueError(
                f"got {len(samples)} samples for a line of width {self.location.sample_count}"
            )
        self.write_samples(sample_type, samples.__getitem__)


def lines_in_block(block: BlockIndex, channels: Iterable[ChannelDescription]) -> Iterator[Tuple[slice, LineIndex]]:
    """Yield the byte range and index of each line, row by row and channel by channel within a row."""
    width = block.pixel_size.x
    line_sizes = [width * channel.sample_type.bytes_per_sample() for channel in channels]
    start_y = block.pixel_position.y
    byte = 0
    for y in range(start_y, start_y + block.pixel_size.y):
        for channel, size in enumerate(line_sizes):
            yield slice(byte, byte + size), LineIndex(
                layer=block.layer,
                channel=channel,
                level=block.level,
                position=Vec2(block.pixel_position.x, y),
                sample_count=width,
            )
            byte += size