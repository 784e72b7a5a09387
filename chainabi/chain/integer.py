"""Fixed and variable width integer types."""

from __future__ import annotations

from typing import Any, ClassVar, Self

from chainabi.proto.serialization import ABISerializableObject, NonConformingValueError
from chainabi.proto.stream import BinaryReader, BinaryWriter

# Largest value a JSON number carries without loss in common parsers
JSON_SAFE_MAX = 0xFFFFFFFF


class Int(ABISerializableObject, int):
    """Base for integer types; instances are plain ``int`` subclasses."""

    byte_width: ClassVar[int]
    is_signed: ClassVar[bool]

    def __new__(cls, value: Any = 0) -> Self:
        rv = super().__new__(cls, value)
        if not cls.min_value() <= rv <= cls.max_value():
            raise NonConformingValueError(f"{int(rv)} is out of range for {cls.abi_name}")
        return rv

    @classmethod
    def min_value(cls) -> int:
        return -(1 << (cls.byte_width * 8 - 1)) if cls.is_signed else 0

    @classmethod
    def max_value(cls) -> int:
        if cls.is_signed:
            return (1 << (cls.byte_width * 8 - 1)) - 1
        return (1 << (cls.byte_width * 8)) - 1

    @classmethod
    def from_value(cls, value: Any) -> Self:
        if type(value) is cls:
            return value
        if isinstance(value, bool):
            raise NonConformingValueError(f"Invalid number for {cls.abi_name}: {value!r}")
        if isinstance(value, int):
            return cls(value)
        if isinstance(value, float):
            if not value.is_integer():
                raise NonConformingValueError(f"Invalid number for {cls.abi_name}: {value!r}")
            return cls(int(value))
        if isinstance(value, str):
            try:
                return cls(int(value.strip(), 10))
            except ValueError as e:
                raise NonConformingValueError(
                    f"Invalid number for {cls.abi_name}: {value!r}"
                ) from e
        raise NonConformingValueError(f"Invalid number for {cls.abi_name}: {value!r}")

    @classmethod
    def from_abi(cls, decoder: BinaryReader) -> Self:
        return cls(decoder.read_num(cls.byte_width, cls.is_signed))

    @classmethod
    def abi_default(cls) -> Self:
        return cls(0)

    def to_abi(self, encoder: BinaryWriter) -> None:
        encoder.write_num(self, self.byte_width, self.is_signed)

    def to_json(self) -> int | str:
        value = int(self)
        if self.byte_width > 4 and abs(value) > JSON_SAFE_MAX:
            return str(value)
        return value

    def __repr__(self) -> str:
        return f"{type(self).__name__}({int(self)})"


class Int8(Int):
    abi_name: ClassVar[str] = "int8"
    byte_width = 1
    is_signed = True


class Int16(Int):
    abi_name: ClassVar[str] = "int16"
    byte_width = 2
    is_signed = True


class Int32(Int):
    abi_name: ClassVar[str] = "int32"
    byte_width = 4
    is_signed = True


class Int64(Int):
    abi_name: ClassVar[str] = "int64"
    byte_width = 8
    is_signed = True


class Int128(Int):
    abi_name: ClassVar[str] = "int128"
    byte_width = 16
    is_signed = True


class UInt8(Int):
    abi_name: ClassVar[str] = "uint8"
    byte_width = 1
    is_signed = False


class UInt16(Int):
    abi_name: ClassVar[str] = "uint16"
    byte_width = 2
    is_signed = False


class UInt32(Int):
    abi_name: ClassVar[str] = "uint32"
    byte_width = 4
    is_signed = False


class UInt64(Int):
    abi_name: ClassVar[str] = "uint64"
    byte_width = 8
    is_signed = False


class UInt128(Int):
    abi_name: ClassVar[str] = "uint128"
    byte_width = 16
    is_signed = False


class VarInt32(Int):
    """Zig-zag encoded signed variable length integer."""

    abi_name: ClassVar[str] = "varint32"
    byte_width = 4
    is_signed = True

    @classmethod
    def from_abi(cls, decoder: BinaryReader) -> Self:
        return cls(decoder.read_varint32())

    def to_abi(self, encoder: BinaryWriter) -> None:
        encoder.write_varint32(self)


class VarUInt32(Int):
    """Unsigned variable length integer, used for lengths and counts."""

    abi_name: ClassVar[str] = "varuint32"
    byte_width = 4
    is_signed = False

    @classmethod
    def from_abi(cls, decoder: BinaryReader) -> Self:
        return cls(decoder.read_varuint32())

    def to_abi(self, encoder: BinaryWriter) -> None:
        encoder.write_varuint32(self)


INTEGER_TYPES: tuple[type[Int], ...] = (
    Int8,
    Int16,
    Int32,
    Int64,
    Int128,
    UInt8,
    UInt16,
    UInt32,
    UInt64,
    UInt128,
    VarInt32,
    VarUInt32,
)
