"""Built-in type descriptors and per-call type lookup tables."""

from collections.abc import Iterable, Mapping
from functools import cache
from types import MappingProxyType
from typing import Any, ClassVar

from chainabi.chain import (
    AnyValue,
    Asset,
    BlockTimestamp,
    Bytes,
    Checksum160,
    Checksum256,
    Checksum512,
    ExtendedAsset,
    Float32,
    Float64,
    Name,
    Struct,
    Symbol,
    SymbolCode,
    TimePoint,
    TimePointSec,
)
from chainabi.chain.integer import INTEGER_TYPES
from chainabi.proto.serialization import NonConformingValueError
from chainabi.proto.stream import BinaryReader, BinaryWriter
from chainabi.proto.types import ABIField, TypeDescriptor, descriptor_name


class StringType:
    """``string``: length prefixed UTF-8, decoded to a plain ``str``."""

    abi_name: ClassVar[str] = "string"

    @staticmethod
    def from_value(value: Any) -> str:
        if not isinstance(value, str):
            raise NonConformingValueError(f"Expected string, got {type(value).__name__}")
        return value

    @staticmethod
    def from_abi(decoder: BinaryReader) -> str:
        return decoder.read_string()

    @staticmethod
    def write_abi(value: Any, encoder: BinaryWriter) -> None:
        encoder.write_string(StringType.from_value(value))

    @staticmethod
    def abi_default() -> str:
        return ""


class BoolType:
    """``bool``: a single byte, decoded to a plain ``bool``."""

    abi_name: ClassVar[str] = "bool"

    @staticmethod
    def from_value(value: Any) -> bool:
        if isinstance(value, bool):
            return value
        if isinstance(value, int) and value in (0, 1):
            return bool(value)
        raise NonConformingValueError(f"Expected bool, got {value!r}")

    @staticmethod
    def from_abi(decoder: BinaryReader) -> bool:
        return decoder.read_byte() != 0

    @staticmethod
    def write_abi(value: Any, encoder: BinaryWriter) -> None:
        encoder.write_byte(1 if BoolType.from_value(value) else 0)

    @staticmethod
    def abi_default() -> bool:
        return False


@cache
def builtin_types() -> Mapping[str, Any]:
    """The shared, immutable table of built-in descriptors."""
    types = (
        StringType,
        BoolType,
        Bytes,
        *INTEGER_TYPES,
        Float32,
        Float64,
        Checksum160,
        Checksum256,
        Checksum512,
        Name,
        SymbolCode,
        Symbol,
        Asset,
        ExtendedAsset,
        TimePoint,
        TimePointSec,
        BlockTimestamp,
        AnyValue,
    )
    return MappingProxyType({t.abi_name: t for t in types})


def build_type_lookup(additional: Iterable[TypeDescriptor] = ()) -> dict[str, Any]:
    """Overlay caller supplied descriptors on the built-ins; later entries win."""
    rv = dict(builtin_types())
    for descriptor in additional:
        rv[descriptor_name(descriptor)] = descriptor
    return rv


def get_type_name(value: Any) -> str | None:
    """Infer the ABI type name of an untyped value, if possible."""
    name = getattr(type(value), "abi_name", None)
    if isinstance(name, str):
        return name
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list | tuple) and value:
        names = {get_type_name(v) for v in value}
        if len(names) == 1 and None not in names:
            return f"{names.pop()}[]"
    return None


def get_type(value: Any, name: str = "object") -> Any:
    """Infer a descriptor for an untyped value.

    Mappings become ad-hoc Struct subclasses named after their position in
    the value. Returns None when any part cannot be inferred; lists report
    their element type.
    """
    value_type = type(value)
    if isinstance(getattr(value_type, "abi_name", None), str):
        return value_type
    if isinstance(value, bool):
        return BoolType
    if isinstance(value, str):
        return StringType
    if isinstance(value, list | tuple):
        return get_type(value[0], name) if value else None
    if isinstance(value, Mapping):
        fields = []
        for key, member in value.items():
            member_type = get_type(member, f"{name}_{key}")
            if member_type is None:
                return None
            fields.append(ABIField(key, member_type, array=isinstance(member, list | tuple)))
        return type(name, (Struct,), {"abi_name": name, "abi_fields": tuple(fields)})
    return None
