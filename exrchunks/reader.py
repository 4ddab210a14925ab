"""Reading offset tables and compressed chunks from a byte stream."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections import deque
from typing import BinaryIO, Callable, Iterable, List, Sequence, Tuple

from .chunk import Chunk, LayerLayout
from .primitives import InvalidError, read_u64

ProgressCallback = Callable[[float], None]


def read_offset_tables(stream: BinaryIO, chunk_counts: Sequence[int]) -> List[List[int]]:
    """Read one table of little-endian u64 chunk offsets for each layer, in layer order."""
    tables = []
    for count in chunk_counts:
        if count < 0:
            raise ValueError("chunk counts must not be negative")
        tables.append([read_u64(stream) for _ in range(count)])
    return tables


def validate_offset_tables(
    offset_tables: Iterable[Iterable[int]], chunks_start_byte: int, max_pixel_bytes: int
) -> None:
    """Raise InvalidError if any offset lies before the chunks or beyond their largest possible end."""
    end_byte = chunks_start_byte + max_pixel_bytes
    if any(
        offset < chunks_start_byte or offset > end_byte
        for table in offset_tables
        for offset in table
    ):
        raise InvalidError("offset table")


class ChunksReader(ABC):
    """An iterator of compressed chunks read from a byte stream."""

    layouts: Tuple[LayerLayout, ...]

    @abstractmethod
    def expected_chunk_count(self) -> int:
        """The number of chunks this reader returns in total."""

    @abstractmethod
    def __next__(self) -> Chunk:
        """Read the next compressed chunk."""

    @abstractmethod
    def __len__(self) -> int:
        """The number of chunks that are still to be read."""

    def __iter__(self) -> "ChunksReader":
        return self

    def on_progress(self, callback: ProgressCallback) -> "OnProgressChunksReader":
        """A reader that passes on the chunks of this one and reports the progress for each."""
        return OnProgressChunksReader(self, callback)


class AllChunksReader(ChunksReader):
    """Reads every chunk in file order, without seeking.

    The stream must be positioned at the first chunk, just after the offset tables.
    When pedantic, bytes left after the last chunk are an error.
    """

    def __init__(
        self,
        stream: BinaryIO,
        layouts: Sequence[LayerLayout],
        chunk_count: int,
        pedantic: bool = False,
    ) -> None:
        if chunk_count < 0:
            raise ValueError("chunk count must not be negative")
        self._stream = stream
        self.layouts = tuple(layouts)
        self._total = chunk_count
        self._remaining = chunk_count
        self._pedantic = pedantic
        self._end_checked = False

    def expected_chunk_count(self) -> int:
        return self._total

    def __len__(self) -> int:
        return self._remaining

    def __next__(self) -> Chunk:
        if self._remaining > 0:
            self._remaining -= 1
            return Chunk.read(self._stream, self.layouts)

        if self._pedantic and not self._end_checked:
            self._end_checked = True
            if self._stream.read(1):
                raise InvalidError("end of file expected")

        raise StopIteration


class FilteredChunksReader(ChunksReader):
    """Reads only the chunks at the given byte offsets, in increasing file order.

    When pedantic, the same offset appearing twice is an error.
    """

    def __init__(
        self,
        stream: BinaryIO,
        layouts: Sequence[LayerLayout],
        offsets: Iterable[int],
        pedantic: bool = False,
    ) -> None:
        sorted_offsets = sorted(offsets)
        if sorted_offsets and sorted_offsets[0] < 0:
            raise InvalidError("chunk offset table")
        if pedantic and any(a == b for a, b in zip(sorted_offsets, sorted_offsets[1:])):
            raise InvalidError("chunk offset table")

        self._stream = stream
        self.layouts = tuple(layouts)
        self._expected = len(sorted_offsets)
        self._remaining_offsets = deque(sorted_offsets)

    def expected_chunk_count(self) -> int:
        return self._expected

    def __len__(self) -> int:
        return len(self._remaining_offsets)

    def __next__(self) -> Chunk:
        if not self._remaining_offsets:
            raise StopIteration
        offset = self._remaining_offsets.popleft()
        self._stream.seek(offset)
        return Chunk.read(self._stream, self.layouts)


class OnProgressChunksReader(ChunksReader):
    """Passes on the chunks of another reader and calls back with the progress.

    The callback receives the fraction of chunks read before each chunk,
    starting with 0.0, and exactly 1.0 once the reader is exhausted.
    """

    def __init__(self, chunks_reader: ChunksReader, callback: ProgressCallback) -> None:
        self._chunks_reader = chunks_reader
        self._callback = callback
        self._decoded_chunks = 0

    @property
    def layouts(self) -> Tuple[LayerLayout, ...]:  # type: ignore[override]
        return self._chunks_reader.layouts

    def expected_chunk_count(self) -> int:
        return self._chunks_reader.expected_chunk_count()

    def __len__(self) -> int:
        return len(self._chunks_reader)

    def __next__(self) -> Chunk:
        try:
            chunk = next(self._chunks_reader)
        except StopIteration:
            self._callback(1.0)
            raise

        self._callback(self._decoded_chunks / self.expected_chunk_count())
        self._decoded_chunks += 1
        return chunk