"""IEEE 754 floating point types."""

from __future__ import annotations

import math
import struct
from typing import Any, ClassVar, Self

from chainabi.proto.serialization import ABISerializableObject, NonConformingValueError
from chainabi.proto.stream import BinaryReader, BinaryWriter


class Float(ABISerializableObject, float):
    byte_width: ClassVar[int]

    @classmethod
    def from_value(cls, value: Any) -> Self:
        if type(value) is cls:
            return value
        if isinstance(value, bool):
            raise NonConformingValueError(f"Invalid number for {cls.abi_name}: {value!r}")
        try:
            return cls(float(value))
        except (TypeError, ValueError) as e:
            raise NonConformingValueError(f"Invalid number for {cls.abi_name}: {value!r}") from e

    @classmethod
    def from_abi(cls, decoder: BinaryReader) -> Self:
        return cls(decoder.read_float(cls.byte_width))

    @classmethod
    def abi_default(cls) -> Self:
        return cls(0.0)

    def to_abi(self, encoder: BinaryWriter) -> None:
        encoder.write_float(self, self.byte_width)

    def to_json(self) -> float | str:
        # NaN and infinities have no JSON number form
        if math.isfinite(self):
            return float(self)
        return str(float(self))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({float(self)!r})"


class Float32(Float):
    """Single precision float, rounded to float32 on construction."""

    abi_name: ClassVar[str] = "float32"
    byte_width = 4

    def __new__(cls, value: Any = 0.0) -> Self:
        value = float(value)
        if math.isfinite(value):
            try:
                (value,) = struct.unpack("<f", struct.pack("<f", value))
            except OverflowError as e:
                raise NonConformingValueError(f"{value} is out of range for float32") from e
        return super().__new__(cls, value)


class Float64(Float):
    abi_name: ClassVar[str] = "float64"
    byte_width = 8
