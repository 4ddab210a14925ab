# exrchunks

Low-level access to the pixel chunks of OpenEXR files. These are the blocks
of scan lines or tiles that follow the header and the offset tables. The
package depends only on the standard library.

## Modules

- `exrchunks.primitives` holds the errors `ExrError`, `InvalidError` and
  `NotSupportedError`. It also holds the geometry types `Vec2` and
  `IntegerBounds`, and little-endian helpers: `read_bytes`, `read_i32`,
  `write_i32`, `read_u64` and `write_u64`.
- `exrchunks.samples` provides:
  - `SampleType`, which is `U32`, `F16` or `F32` and has `bytes_per_sample()`.
  - `Sample`, which holds one value of one of those types and converts it with
    `to_f16`, `to_f32` and `to_u32`. Float values are truncated and saturated
    when converted to u32.
  - `round_f16`, which rounds a number to half precision.
- `exrchunks.lines` provides:
  - `ChannelDescription`, `ChannelList`, `BlockIndex` and `LineIndex`.
  - `lines_in_block`, which yields the byte range and the `LineIndex` of every
    line in a block. It goes row by row, and within a row channel by channel.
  - `LineSlice`, which reads the samples of one line with `read_samples`. It
    fills them with `write_samples` or `write_samples_from_list`.
- `exrchunks.chunk` provides:
  - `Chunk`, `CompressedScanLineBlock`, `CompressedTileBlock`,
    `CompressedDeepScanLineBlock` and `CompressedDeepTileBlock`, each with
    `read` and `write`.
  - `TileCoordinates`, which reads and writes itself and computes the data
    and absolute pixel rectangles of a tile.
  - `calculate_block_size`.
  - `LayerLayout`, which tells `Chunk.read` whether a layer is tiled and
    whether it is deep, and gives its maximum block byte size. The layer index
    is only read and written when there is more than one layer.
- `exrchunks.block` provides `UncompressedBlock` and
  `collect_block_data_from_lines`. They build raw block bytes one line at a
  time. `UncompressedBlock.lines` iterates the lines of an existing block.
- `exrchunks.writer` provides:
  - `write_chunks_with`, which reserves zeroed offset tables at the current
    stream position, calls your function with an `OffsetTableChunkWriter`,
    and then fills in the tables.
  - `ChunksWriter.on_progress`, which wraps a writer in an
    `OnProgressChunkWriter`. It reports 0.0 before the first chunk and 1.0
    after the last.
  - `SortedBlocksWriter`, which stashes chunks that arrive out of order and
    writes them in file order.
- `exrchunks.reader` provides:
  - `read_offset_tables` and `validate_offset_tables`.
  - `AllChunksReader`, which reads every chunk in order.
  - `FilteredChunksReader`, which seeks to the given offsets in increasing
    order.
  - `ChunksReader.on_progress`, which wraps a reader in an
    `OnProgressChunksReader`.

Malformed data raises `InvalidError`, a subclass of `ExrError`. Misuse raises
`ValueError`. This covers writing an empty block, a layer index out of range,
and a line whose byte size does not fit its samples.

## Example

```python
import io

from exrchunks.chunk import Chunk, CompressedScanLineBlock, LayerLayout
from exrchunks.reader import AllChunksReader, read_offset_tables
from exrchunks.writer import write_chunks_with

chunks = [Chunk(0, CompressedScanLineBlock(y, bytes([y + 1]) * 4)) for y in range(2)]

def write_all(writer):
    for index, chunk in enumerate(chunks):
        writer.write_chunk(index, chunk)

stream = io.BytesIO()
write_chunks_with(stream, [2], write_all)

stream.seek(0)
tables = read_offset_tables(stream, [2])
layouts = [LayerLayout(tiled=False, deep=False, max_block_byte_size=64)]
for chunk in AllChunksReader(stream, layouts, chunk_count=2, pedantic=True):
    print(chunk.compressed_block.y_coordinate)
```

## What it does not do

This package works only with chunks, offset tables and uncompressed block
bytes. It does not:

- read, write or validate EXR headers, attributes or the magic number;
- compress or decompress pixel data;
- decode deep data;
- assemble whole images from blocks;
- spread work across threads.

You describe each layer yourself, with a `LayerLayout` and chunk counts.