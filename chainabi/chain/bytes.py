"""Variable length byte strings."""

from __future__ import annotations

from typing import Any, ClassVar, Self

from chainabi.proto.serialization import (
    ABISerializableObject,
    BufferUnderrunError,
    NonConformingValueError,
)
from chainabi.proto.stream import BinaryReader, BinaryWriter


def to_raw_bytes(value: Any, abi_name: str) -> bytes:
    """Coerce hex strings, bytes-like objects and int lists to bytes."""
    if isinstance(value, bytes | bytearray | memoryview):
        return bytes(value)
    if isinstance(value, str):
        try:
            return bytes.fromhex(value.removeprefix("0x"))
        except ValueError as e:
            raise NonConformingValueError(f"Invalid hex string for {abi_name}: {value!r}") from e
    if isinstance(value, list | tuple):
        try:
            return bytes(value)
        except (TypeError, ValueError) as e:
            raise NonConformingValueError(f"Invalid byte list for {abi_name}") from e
    raise NonConformingValueError(f"Unable to create {abi_name} from {type(value).__name__}")


class Bytes(ABISerializableObject, bytes):
    """Length prefixed bytes, JSON encoded as lowercase hex."""

    abi_name: ClassVar[str] = "bytes"

    @classmethod
    def from_value(cls, value: Any) -> Self:
        if type(value) is cls:
            return value
        return cls(to_raw_bytes(value, cls.abi_name))

    @classmethod
    def from_abi(cls, decoder: BinaryReader) -> Self:
        start = decoder.position
        size = decoder.read_varuint32()
        try:
            return cls(decoder.read_bytes(size))
        except BufferUnderrunError:
            decoder.set_position(start)
            raise

    @classmethod
    def abi_default(cls) -> Self:
        return cls()

    def to_abi(self, encoder: BinaryWriter) -> None:
        encoder.write_varuint32(len(self))
        encoder.write_bytes(self)

    def to_json(self) -> str:
        return self.hex()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.hex()!r})"
