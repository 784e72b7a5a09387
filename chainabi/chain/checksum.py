"""Fixed size digests."""

from __future__ import annotations

from typing import Any, ClassVar, Self

from chainabi.proto.serialization import ABISerializableObject, NonConformingValueError
from chainabi.proto.stream import BinaryReader, BinaryWriter

from .bytes import to_raw_bytes


class Checksum(ABISerializableObject, bytes):
    byte_size: ClassVar[int]

    def __new__(cls, value: bytes = b"") -> Self:
        rv = super().__new__(cls, value)
        if len(rv) != cls.byte_size:
            raise NonConformingValueError(
                f"{cls.abi_name} expects {cls.byte_size} bytes, got {len(rv)}"
            )
        return rv

    @classmethod
    def from_value(cls, value: Any) -> Self:
        if type(value) is cls:
            return value
        return cls(to_raw_bytes(value, cls.abi_name))

    @classmethod
    def from_abi(cls, decoder: BinaryReader) -> Self:
        return cls(decoder.read_bytes(cls.byte_size))

    @classmethod
    def abi_default(cls) -> Self:
        return cls(bytes(cls.byte_size))

    def to_abi(self, encoder: BinaryWriter) -> None:
        encoder.write_bytes(self)

    def to_json(self) -> str:
        return self.hex()

    def __str__(self) -> str:
        return self.hex()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.hex()!r})"


class Checksum160(Checksum):
    abi_name: ClassVar[str] = "checksum160"
    byte_size = 20


class Checksum256(Checksum):
    abi_name: ClassVar[str] = "checksum256"
    byte_size = 32


class Checksum512(Checksum):
    abi_name: ClassVar[str] = "checksum512"
    byte_size = 64
