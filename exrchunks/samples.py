"""Sample types and a single sample value of one of them."""

from __future__ import annotations

import math
import struct
from dataclasses import dataclass
from enum import Enum
from typing import Union

_U32_MAX = 0xFFFF_FFFF


class SampleType(Enum):
    """The numeric type of the samples in a channel."""

    U32 = 0
    F16 = 1
    F32 = 2

    def bytes_per_sample(self) -> int:
        """The number of bytes one sample of this type occupies."""
        return 2 if self is SampleType.F16 else 4


def _round_float(value: float, fmt: str) -> float:
    value = float(value)
    try:
        return struct.unpack(fmt, struct.pack(fmt, value))[0]
    except OverflowError:
        return math.copysign(math.inf, value)


def round_f16(value: float) -> float:
    """Round a number to the nearest half-precision float; too large values become infinite."""
    return _round_float(value, "<e")


def _round_f32(value: float) -> float:
    return _round_float(value, "<f")


def _saturating_u32(value: float) -> int:
    if math.isnan(value) or value <= 0:
        return 0
    if value >= _U32_MAX + 1:
        return _U32_MAX
    return int(value)


@dataclass(frozen=True, eq=False)
class Sample:
    """A single red, green, blue, alpha or other channel value."""

    sample_type: SampleType
    value: Union[float, int]

    def __post_init__(self) -> None:
        if self.sample_type is SampleType.U32:
            if isinstance(self.value, bool) or not isinstance(self.value, int):
                raise TypeError("a u32 sample needs an integer value")
            if not 0 <= self.value <= _U32_MAX:
                raise ValueError(f"{self.value} does not fit into an unsigned 32-bit integer")
        elif self.sample_type is SampleType.F16:
            object.__setattr__(self, "value", round_f16(self.value))
        else:
            object.__setattr__(self, "value", _round_f32(self.value))

    @classmethod
    def f16(cls, value: float) -> "Sample":
        """A sample holding a 16-bit float."""
        return cls(SampleType.F16, value)

    @classmethod
    def f32(cls, value: float) -> "Sample":
        """A sample holding a 32-bit float."""
        return cls(SampleType.F32, value)

    @classmethod
    def u32(cls, value: int) -> "Sample":
        """A sample holding an unsigned 32-bit integer."""
        return cls(SampleType.U32, value)

    def to_f16(self) -> float:
        """The value as a 16-bit float, with less precision than f32."""
        if self.sample_type is SampleType.F16:
            return self.value
        if self.sample_type is SampleType.F32:
            return round_f16(self.value)
        return round_f16(_round_f32(float(self.value)))

    def to_f32(self) -> float:
        """The value as a 32-bit float."""
        if self.sample_type is SampleType.U32:
            return _round_f32(float(self.value))
        return self.value

    def to_u32(self) -> int:
        """The value as an unsigned integer; floats are truncated and saturated."""
        if self.sample_type is SampleType.U32:
            return self.value
        return _saturating_u32(self.value)

    def is_nan(self) -> bool:
        """Whether the value is not a number."""
        return self.sample_type is not SampleType.U32 and math.isnan(self.value)

    def is_zero(self) -> bool:
        """Whether the value is zero or negative zero."""
        return self.value == 0

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Sample):
            return NotImplemented
        if self.sample_type is SampleType.F16:
            return self.value == other.to_f16()
        if self.sample_type is SampleType.F32:
            return self.value == other.to_f32()
        return self.value == other.to_u32()

    __hash__ = None  # type: ignore[assignment]

    def __float__(self) -> float:
        return float(self.to_f32())

    def __int__(self) -> int:
        return self.to_u32()