import pytest

from exrchunks.block import UncompressedBlock, collect_block_data_from_lines
from exrchunks.lines import BlockIndex, ChannelDescription, ChannelList, LineIndex
from exrchunks.primitives import Vec2
from exrchunks.samples import SampleType


CHANNELS = ChannelList((
    ChannelDescription("A", SampleType.F16),
    ChannelDescription("B", SampleType.F32),
    ChannelDescription("C", SampleType.U32),
))

BLOCK = BlockIndex(
    layer=0,
    pixel_position=Vec2(2, 5),
    pixel_size=Vec2(3, 2),
    level=Vec2(0, 0),
)


def _fill(line):
    sample_type = CHANNELS[line.location.channel].sample_type
    if sample_type is SampleType.U32:
        line.write_samples(sample_type, lambda i: line.location.position.y * 10 + i)
    else:
        line.write_samples(sample_type, lambda i: float(i) + line.location.channel)


def test_block_data_has_size_of_area_times_bytes_per_pixel():
    data = collect_block_data_from_lines(CHANNELS, BLOCK, _fill)
    assert len(data) == BLOCK.pixel_size.area() * CHANNELS.bytes_per_pixel()


def test_lines_are_visited_row_by_row_then_channel_by_channel():
    seen = []
    collect_block_data_from_lines(CHANNELS, BLOCK, lambda line: seen.append(line.location))
    expected = [
        LineIndex(layer=0, channel=channel, level=Vec2(0, 0), position=Vec2(2, y), sample_count=3)
        for y in (5, 6)
        for channel in range(len(CHANNELS))
    ]
    assert seen == expected


def test_unfilled_lines_stay_zero():
    data = collect_block_data_from_lines(CHANNELS, BLOCK, lambda line: None)
    assert set(data) == {0}


def test_round_trip_through_lines():
    block = UncompressedBlock.from_lines(CHANNELS, BLOCK, _fill)
    assert block.index == BLOCK

    for line in block.lines(CHANNELS):
        sample_type = CHANNELS[line.location.channel].sample_type
        values = list(line.read_samples(sample_type))
        if sample_type is SampleType.U32:
            assert values == [line.location.position.y * 10 + i for i in range(3)]
        else:
            assert values == [float(i) + line.location.channel for i in range(3)]


def test_lines_locations_match_block():
    block = UncompressedBlock.from_lines(CHANNELS, BLOCK, _fill)
    locations = [line.location for line in block.lines(CHANNELS)]
    assert len(locations) == BLOCK.pixel_size.y * len(CHANNELS)
    assert all(location.sample_count == BLOCK.pixel_size.x for location in locations)
    assert all(location.layer == BLOCK.layer for location in locations)


def test_wire_bytes_of_single_pixel_block():
    block_index = BlockIndex(layer=0, pixel_position=Vec2(0, 0), pixel_size=Vec2(1, 1), level=Vec2(0, 0))

    def fill_one(line):
        line.write_samples(CHANNELS[line.location.channel].sample_type, lambda i: 1)

    data = collect_block_data_from_lines(CHANNELS, block_index, fill_one)
    assert data == b"\x00\x3c" + b"\x00\x00\x80\x3f" + b"\x01\x00\x00\x00"


def test_accepts_plain_iterable_of_channels():
    from_list = collect_block_data_from_lines(list(CHANNELS), BLOCK, _fill)
    from_channel_list = collect_block_data_from_lines(CHANNELS, BLOCK, _fill)
    assert from_list == from_channel_list


def test_lines_reject_wrong_data_length():
    block = UncompressedBlock(index=BLOCK, data=b"\x00" * 7)
    with pytest.raises(ValueError):
        list(block.lines(CHANNELS))


def test_write_with_wrong_sample_type_fails():
    def bad_fill(line):
        line.write_samples(SampleType.F16, lambda i: 0.0)

    with pytest.raises(ValueError):
        collect_block_data_from_lines(CHANNELS, BLOCK, bad_fill)


def test_data_is_stored_as_bytes():
    block = UncompressedBlock(index=BLOCK, data=bytearray(b"\x01\x02"))
    assert block.data == b"\x01\x02"
    assert isinstance(block.data, bytes)