"""Writing compressed chunks to a byte stream and keeping the offset tables."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import BinaryIO, Callable, Dict, List, Sequence, Tuple

from .chunk import Chunk
from .primitives import InvalidError, write_u64

_OFFSET_BYTE_SIZE = 8

ProgressCallback = Callable[[float], None]


class ChunksWriter(ABC):
    """Something that accepts compressed chunks, each with its index within its layer."""

    @abstractmethod
    def total_chunks_count(self) -> int:
        """The total number of chunks that the complete file will contain."""

    @abstractmethod
    def write_chunk(self, index_in_header_increasing_y: int, chunk: Chunk) -> None:
        """Write one chunk; raises InvalidError if the chunk at this index was already written."""

    def on_progress(self, on_progress: ProgressCallback) -> "OnProgressChunkWriter":
        """A writer that passes chunks on to this one and reports the progress for each."""
        return OnProgressChunkWriter(self, on_progress)


class OffsetTableChunkWriter(ChunksWriter):
    """Writes chunks to a seekable stream and fills in the offset tables in front of them.

    On creation, zeroed offset tables are written at the current stream position
    as a placeholder. Call `complete` after all chunks have been written.
    """

    def __init__(self, stream: BinaryIO, chunk_counts: Sequence[int]) -> None:
        counts = list(chunk_counts)
        if any(count < 0 for count in counts):
            raise ValueError("chunk counts must not be negative")

        self._stream = stream
        self._header_count = len(counts)
        self._chunk_count = sum(counts)
        self._offset_tables: List[List[int]] = [[0] * count for count in counts]
        self._table_start = stream.tell()
        stream.write(bytes(self._chunk_count * _OFFSET_BYTE_SIZE))
        self._table_end = stream.tell()
        self._completed = False

    def total_chunks_count(self) -> int:
        return self._chunk_count

    def write_chunk(self, index_in_header_increasing_y: int, chunk: Chunk) -> None:
        if self._completed:
            raise InvalidError("offset tables have already been written")
        if not 0 <= chunk.layer_index < self._header_count:
            raise InvalidError("chunk layer index")

        table = self._offset_tables[chunk.layer_index]
        if not 0 <= index_in_header_increasing_y < len(table):
            raise InvalidError("too large chunk index")
        if table[index_in_header_increasing_y] != 0:
            raise InvalidError(f"chunk at index {index_in_header_increasing_y} is already written")

        position = self._stream.tell()
        chunk.write(self._stream, self._header_count)
        table[index_in_header_increasing_y] = position

    @property
    def offset_tables(self) -> Tuple[Tuple[int, ...], ...]:
        """The byte position of each chunk written so far, per layer; zero where missing."""
        return tuple(tuple(table) for table in self._offset_tables)

    def complete(self) -> None:
        """Write the offset tables over the placeholder and flush the stream."""
        if self._completed:
            raise InvalidError("offset tables have already been written")
        if any(offset == 0 for table in self._offset_tables for offset in table):
            raise InvalidError("some chunks are not written yet")

        end = self._stream.tell()
        self._stream.seek(self._table_start)
        for table in self._offset_tables:
            for offset in table:
                write_u64(self._stream, offset)
        self._stream.seek(end)
        self._stream.flush()
        self._completed = True


class OnProgressChunkWriter(ChunksWriter):
    """Passes chunks on to another writer and calls back with the progress after each.

    The callback receives 0.0 before the first chunk and exactly 1.0 after the last.
    """

    def __init__(self, chunk_writer: ChunksWriter, on_progress: ProgressCallback) -> None:
        self._chunk_writer = chunk_writer
        self._on_progress = on_progress
        self._written_chunks = 0

    def total_chunks_count(self) -> int:
        return self._chunk_writer.total_chunks_count()

    def write_chunk(self, index_in_header_increasing_y: int, chunk: Chunk) -> None:
        total = self.total_chunks_count()
        if self._written_chunks == 0:
            self._on_progress(0.0)

        self._chunk_writer.write_chunk(index_in_header_increasing_y, chunk)
        self._written_chunks += 1

        if self._written_chunks == total:
            self._on_progress(1.0)
        else:
            self._on_progress(self._written_chunks / total)


class SortedBlocksWriter:
    """Accepts chunks in any order and writes them in their order in the file.

    Sorting is skipped when `requires_sorting` is false, which is the case
    when every layer has an unspecified line order.
    """

    def __init__(self, chunk_writer: ChunksWriter, requires_sorting: bool = True) -> None:
        self.chunk_writer = chunk_writer
        self.requires_sorting = requires_sorting
        self._total = chunk_writer.total_chunks_count()
        self._next_index = 0
        self._pending: Dict[int, Tuple[int, Chunk]] = {}

    @property
    def pending_count(self) -> int:
        """The number of chunks stashed until their predecessors arrive."""
        return len(self._pending)

    def write_or_stash_chunk(self, chunk_index_in_file: int, chunk_y_index: int, chunk: Chunk) -> None:
        """Write the chunk now if it is next in the file, otherwise keep it until it is."""
        if not self.requires_sorting:
            self.chunk_writer.write_chunk(chunk_y_index, chunk)
            return

        if self._next_index < self._total and chunk_index_in_file == self._next_index:
            self.chunk_writer.write_chunk(chunk_y_index, chunk)
            self._next_index += 1

            while self._next_index < self._total and self._next_index in self._pending:
                next_y_index, next_chunk = self._pending.pop(self._next_index)
                self.chunk_writer.write_chunk(next_y_index, next_chunk)
                self._next_index += 1
        else:
            self._pending[chunk_index_in_file] = (chunk_y_index, chunk)


def write_chunks_with(
    stream: BinaryIO,
    chunk_counts: Sequence[int],
    write_chunks: Callable[[OffsetTableChunkWriter], None],
) -> None:
    """Reserve the offset tables, let `write_chunks` write all chunks, then fill in the tables.

    The stream must be seekable and positioned just after the meta data.
    """
    writer = OffsetTableChunkWriter(stream, chunk_counts)
    write_chunks(writer)
    writer.complete()