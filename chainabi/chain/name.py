"""Account and action names packed into 64 bits."""

from __future__ import annotations

import re
from typing import Any, ClassVar, Self

from chainabi.proto.serialization import ABISerializableObject, NonConformingValueError
from chainabi.proto.stream import BinaryReader, BinaryWriter

from .integer import UInt64

NAME_CHARS = ".12345abcdefghijklmnopqrstuvwxyz"
NAME_PATTERN = re.compile(r"^[a-z1-5.]{0,13}$")


def _char_to_symbol(char: str) -> int:
    index = NAME_CHARS.find(char)
    if index < 0:
        raise NonConformingValueError(f"Invalid name character: {char!r}")
    return index


def string_to_name(value: str) -> int:
    """Pack a name string into its 64-bit integer value.

    The first twelve characters take five bits each from the high end; a
    thirteenth character fills the remaining four bits.
    """
    if not NAME_PATTERN.match(value):
        raise NonConformingValueError(f"Invalid name: {value!r}")
    if len(value) == 13 and _char_to_symbol(value[12]) > 0x0F:
        raise NonConformingValueError(f"Invalid 13th character in name: {value!r}")
    rv = 0
    for i in range(13):
        symbol = _char_to_symbol(value[i]) if i < len(value) else 0
        if i < 12:
            rv |= (symbol & 0x1F) << (64 - 5 * (i + 1))
        else:
            rv |= symbol & 0x0F
    return rv


def name_to_string(value: int) -> str:
    """Unpack a 64-bit name value, dropping trailing dots."""
    chars = ["."] * 13
    tmp = value
    for i in range(13):
        mask, width = (0x0F, 4) if i == 0 else (0x1F, 5)
        chars[12 - i] = NAME_CHARS[tmp & mask]
        tmp >>= width
    return "".join(chars).rstrip(".")


class Name(ABISerializableObject, str):
    """Compact account name, a ``str`` holding the normalized form."""

    abi_name: ClassVar[str] = "name"

    def __new__(cls, value: str = "") -> Self:
        return super().__new__(cls, name_to_string(string_to_name(value)))

    @classmethod
    def from_value(cls, value: Any) -> Self:
        if type(value) is cls:
            return value
        if isinstance(value, str):
            return cls(value)
        if isinstance(value, int) and not isinstance(value, bool):
            return cls.from_int(value)
        raise NonConformingValueError(f"Unable to create name from {type(value).__name__}")

    @classmethod
    def from_int(cls, value: int) -> Self:
        return cls(name_to_string(UInt64.from_value(value)))

    @property
    def value(self) -> UInt64:
        return UInt64(string_to_name(self))

    @classmethod
    def from_abi(cls, decoder: BinaryReader) -> Self:
        return cls.from_int(UInt64.from_abi(decoder))

    @classmethod
    def abi_default(cls) -> Self:
        return cls("")

    def to_abi(self, encoder: BinaryWriter) -> None:
        self.value.to_abi(encoder)

    def to_json(self) -> str:
        return str(self)

    def __repr__(self) -> str:
        return f"Name({str(self)!r})"
