import math

import pytest

from exrchunks.lines import (
    BlockIndex,
    ChannelDescription,
    ChannelList,
    LineIndex,
    LineSlice,
    lines_in_block,
)
from exrchunks.primitives import Vec2
from exrchunks.samples import Sample, SampleType, round_f16

CHANNELS = ChannelList(
    [
        ChannelDescription("B", SampleType.F16),
        ChannelDescription("G", SampleType.F32),
        ChannelDescription("Z", SampleType.U32),
    ]
)


def make_block():
    return BlockIndex(layer=1, pixel_position=Vec2(4, 5), pixel_size=Vec2(3, 2), level=Vec2(0, 0))


def make_line(sample_type, count, data=None):
    location = LineIndex(layer=0, channel=0, level=Vec2(0, 0), position=Vec2(0, 0), sample_count=count)
    if data is None:
        data = bytearray(count * sample_type.bytes_per_sample())
    return LineSlice(location, memoryview(data) if isinstance(data, bytearray) else data)


def test_bytes_per_pixel():
    assert CHANNELS.bytes_per_pixel() == 10
    assert ChannelList([]).bytes_per_pixel() == 0


def test_channel_list_sequence_protocol():
    assert len(CHANNELS) == 3
    assert [channel.name for channel in CHANNELS] == ["B", "G", "Z"]
    assert CHANNELS[1].sample_type is SampleType.F32


def test_lines_are_interleaved_by_row_then_channel():
    block = make_block()
    lines = list(lines_in_block(block, CHANNELS))
    assert len(lines) == block.pixel_size.y * len(CHANNELS)
    assert [index.channel for _, index in lines] == [0, 1, 2, 0, 1, 2]
    rows = [index.position.y for _, index in lines]
    assert rows == sorted(rows)
    assert set(rows) == {block.pixel_position.y, block.pixel_position.y + 1}


def test_lines_carry_block_location():
    block = make_block()
    for _, index in lines_in_block(block, CHANNELS):
        assert index.layer == block.layer
        assert index.level == block.level
        assert index.position.x == block.pixel_position.x
        assert index.sample_count == block.pixel_size.x


def test_line_byte_ranges_are_contiguous_and_cover_block():
    block = make_block()
    lines = list(lines_in_block(block, CHANNELS))
    assert lines[0][0].start == 0
    for (previous, _), (current, _) in zip(lines, lines[1:]):
        assert current.start == previous.stop
    assert lines[-1][0].stop == CHANNELS.bytes_per_pixel() * block.pixel_size.area()
    for byte_range, index in lines:
        width = CHANNELS[index.channel].sample_type.bytes_per_sample() * index.sample_count
        assert byte_range.stop - byte_range.start == width


def test_no_channels_yield_no_lines():
    assert list(lines_in_block(make_block(), ChannelList([]))) == []


def test_write_then_read_whole_block():
    block = make_block()
    buffer = bytearray(CHANNELS.bytes_per_pixel() * block.pixel_size.area())
    lines = list(lines_in_block(block, CHANNELS))
    for byte_range, index in lines:
        sample_type = CHANNELS[index.channel].sample_type
        line = LineSlice(index, memoryview(buffer)[byte_range])
        line.write_samples(sample_type, lambda i, y=index.position.y, c=index.channel: i + y + c)

    for byte_range, index in lines:
        sample_type = CHANNELS[index.channel].sample_type
        line = LineSlice(index, bytes(buffer[byte_range]))
        expected = [i + index.position.y + index.channel for i in range(index.sample_count)]
        assert list(line.read_samples(sample_type)) == expected


def test_f16_wire_bytes():
    line = make_line(SampleType.F16, 1)
    line.write_samples_from_list(SampleType.F16, [1.0])
    assert bytes(line.value) == b"\x00\x3c"


def test_write_samples_from_list_round_trip():
    values = [0.25, -3.0, 1024.5]
    line = make_line(SampleType.F32, len(values))
    line.write_samples_from_list(SampleType.F32, values)
    assert list(line.read_samples(SampleType.F32)) == values


def test_write_samples_converts_sample_objects():
    line = make_line(SampleType.F32, 2)
    line.write_samples_from_list(SampleType.F32, [Sample.f16(0.5), Sample.u32(9)])
    assert list(line.read_samples(SampleType.F32)) == [0.5, 9.0]


def test_f16_line_rounds_and_overflows():
    line = make_line(SampleType.F16, 2)
    line.write_samples_from_list(SampleType.F16, [0.1, 1e6])
    first, second = line.read_samples(SampleType.F16)
    assert first == round_f16(0.1)
    assert second == math.inf


def test_u32_line_round_trip():
    values = [0, 4, 2**32 - 1]
    line = make_line(SampleType.U32, len(values))
    line.write_samples_from_list(SampleType.U32, values)
    assert list(line.read_samples(SampleType.U32)) == values


def test_write_samples_from_list_wrong_length_raises():
    line = make_line(SampleType.F32, 3)
    with pytest.raises(ValueError):
        line.write_samples_from_list(SampleType.F32, [1.0, 2.0])


def test_read_samples_with_wrong_byte_size_raises():
    line = make_line(SampleType.F32, 2, data=b"\x00" * 6)
    with pytest.raises(ValueError):
        line.read_samples(SampleType.F32)


def test_write_samples_with_wrong_type_size_raises():
    line = make_line(SampleType.F16, 2)
    with pytest.raises(ValueError):
        line.write_samples(SampleType.F32, lambda i: 0.0)