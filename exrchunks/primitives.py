"""Errors, small geometry types and little-endian integer helpers."""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import BinaryIO, NamedTuple


class ExrError(Exception):
    """Base class of all errors raised while handling image data."""


class InvalidError(ExrError):
    """The data does not form a valid image file."""


class NotSupportedError(ExrError):
    """The data is valid but uses a feature that is not supported."""


class Vec2(NamedTuple):
    """A pair of integers: a position, a size or an index."""

    x: int
    y: int

    @property
    def width(self) -> int:
        return self.x

    @property
    def height(self) -> int:
        return self.y

    def area(self) -> int:
        """The number of cells covered when this is read as a size."""
        return self.x * self.y

    def __add__(self, other) -> "Vec2":  # type: ignore[override]
        return Vec2(self.x + other[0], self.y + other[1])

    def __sub__(self, other) -> "Vec2":
        return Vec2(self.x - other[0], self.y - other[1])

    def __neg__(self) -> "Vec2":
        return Vec2(-self.x, -self.y)

    def __floordiv__(self, other) -> "Vec2":
        return Vec2(self.x // other[0], self.y // other[1])


@dataclass(frozen=True)
class IntegerBounds:
    """A rectangle of pixels, given by its top left corner and its size."""

    position: Vec2
    size: Vec2

    @property
    def end(self) -> Vec2:
        """The first position to the right of and below the rectangle."""
        return self.position + self.size

    def with_origin(self, origin) -> "IntegerBounds":
        """The same rectangle, moved by `origin`."""
        return IntegerBounds(self.position + Vec2(*origin), self.size)


_I32 = struct.Struct("<i")
_U64 = struct.Struct("<Q")


def read_bytes(stream: BinaryIO, count: int) -> bytes:
    """Read exactly `count` bytes, raising InvalidError if the stream ends early."""
    if count < 0:
        raise ValueError("byte count must not be negative")
    data = stream.read(count)
    if len(data) != count:
        raise InvalidError("reference to missing bytes")
    return data


def read_i32(stream: BinaryIO) -> int:
    """Read a little-endian signed 32-bit integer."""
    return _I32.unpack(read_bytes(stream, _I32.size))[0]


def write_i32(stream: BinaryIO, value: int) -> None:
    """Write a little-endian signed 32-bit integer."""
    try:
        stream.write(_I32.pack(value))
    except struct.error as error:
        raise ValueError(f"{value} does not fit into a signed 32-bit integer") from error


def read_u64(stream: BinaryIO) -> int:
    """Read a little-endian unsigned 64-bit integer."""
    return _U64.unpack(read_bytes(stream, _U64.size))[0]


def write_u64(stream: BinaryIO, value: int) -> None:
    """Write a little-endian unsigned 64-bit integer."""
    try:
        stream.write(_U64.pack(value))
    except struct.error as error:
        raise ValueError(f"{value} does not fit into an unsigned 64-bit integer") from error