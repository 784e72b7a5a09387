"""Encode, decode and synthesize ABI values, plus the JSON projection.

Every call builds its own schema graph, type lookup and cursor; nothing is
shared between calls except the immutable table of built-in types.
"""

import json
import logging
from collections.abc import Iterable, Mapping
from typing import Any

from dataclasses_json import DataClassJsonMixin

from chainabi.chain import ABI, Bytes, ResolvedType
from chainabi.proto.serialization import (
    AmbiguousSourceTypeError,
    NonConformingValueError,
    SerializationError,
)
from chainabi.proto.stream import BinaryReader, BinaryWriter
from chainabi.proto.types import (
    ABIType,
    TypeDescriptor,
    abi_type_string,
    descriptor_name,
    to_type_descriptor,
)

from .context import DecodingContext, EncodingContext
from .decoder import decode_binary, decode_object, default_value
from .encoder import encode_any
from .registry import build_type_lookup, builtin_types, get_type, get_type_name
from .synthesis import SynthesizedABI, synthesize_abi

logger = logging.getLogger(__name__)

# Sentinel for a missing value, None is a valid optional value
_MISSING: Any = object()


def encode(
    value: Any,
    type: Any = None,
    *,
    abi: Any = None,
    custom_types: Iterable[TypeDescriptor] | None = None,
    encoder: BinaryWriter | None = None,
    metadata: dict[str, Any] | None = None,
) -> Bytes:
    """Encode a value to its binary form.

    Args:
        value: The value to encode.
        type: Type name (e.g. "name[]"), descriptor or ABIType. Inferred from
            the value when omitted.
        abi: Schema to resolve a type name against. Synthesized from the
            type's declared shape when omitted.
        custom_types: Extra descriptors, overriding built-ins by name.
        encoder: Writer to append to; a fresh one is created by default.
        metadata: Merged into the writer's metadata.

    Returns:
        The encoded bytes.
    """
    custom = list(custom_types or ())
    descriptor: Any = None
    if isinstance(type, str):
        type_name = type
    elif isinstance(type, ABIType):
        type_name = abi_type_string(type)
        if not isinstance(type.type, str):
            descriptor = type.type
    elif type is not None:
        descriptor = type
        type_name = descriptor_name(type)
    else:
        descriptor = get_type(value)
        if descriptor is None:
            raise AmbiguousSourceTypeError(
                f"Unable to determine the type of {value!r}, pass an explicit type"
            )
        type_name = descriptor_name(descriptor)
        if isinstance(value, list | tuple):
            type_name += "[]"

    if descriptor is not None:
        custom.insert(0, descriptor)
    elif abi is None:
        root_name = ResolvedType.parse(type_name).name
        descriptor = next((t for t in custom if descriptor_name(t) == root_name), None)

    if abi is not None:
        root = ABI.from_value(abi).resolve_type(type_name)
    elif descriptor is not None:
        synthesized = synthesize_abi(descriptor)
        custom.extend(synthesized.types)
        root = synthesized.abi.resolve_type(type_name)
    else:
        root = ResolvedType.parse(type_name)

    ctx = EncodingContext(build_type_lookup(custom), encoder=encoder or BinaryWriter())
    if metadata:
        ctx.encoder.metadata.update(metadata)
    ctx.path.append(("root", root))
    try:
        encode_any(value, root, ctx)
    except SerializationError as e:
        e.annotate("Encoding", ctx.path_string())
        raise
    except (ValueError, TypeError) as e:
        raise NonConformingValueError(str(e)).annotate("Encoding", ctx.path_string()) from e
    return Bytes(ctx.encoder.data)


def _to_reader(
    data: Any, ignore_invalid_utf8: bool, metadata: dict[str, Any] | None
) -> BinaryReader:
    if isinstance(data, BinaryReader):
        if metadata:
            data.metadata.update(metadata)
        return data
    if isinstance(data, str):
        try:
            data = bytes.fromhex(data.removeprefix("0x"))
        except ValueError as e:
            raise NonConformingValueError(f"Invalid hex data: {e}") from e
    if not isinstance(data, bytes | bytearray | memoryview):
        raise NonConformingValueError(
            f"Unable to decode binary data of type {type(data).__name__}"
        )
    return BinaryReader(data, ignore_invalid_utf8=ignore_invalid_utf8, metadata=metadata)


def decode(
    type: Any,
    *,
    data: Any = None,
    value: Any = _MISSING,
    json_text: str | None = None,
    abi: Any = None,
    custom_types: Iterable[TypeDescriptor] | None = None,
    metadata: dict[str, Any] | None = None,
    ignore_invalid_utf8: bool = False,
    strict_extensions: bool = True,
) -> Any:
    """Decode binary data, a loosely typed value or JSON text into ``type``.

    Args:
        type: Type name, descriptor or ABIType.
        data: Bytes-like object, hex string or BinaryReader.
        value: A loosely typed object (dicts, lists, strings, numbers).
        json_text: JSON text, parsed and then decoded like ``value``.
        abi: Schema to resolve against; synthesized from the type when omitted.
        custom_types: Extra descriptors, overriding built-ins by name.
        metadata: Merged into the reader's metadata.
        ignore_invalid_utf8: Replace invalid UTF-8 in strings instead of failing.
        strict_extensions: Give absent binary extension fields their type's
            default value; when False they decode as None.

    Returns:
        The decoded value, typed where a descriptor is registered.
    """
    if data is None and value is _MISSING and json_text is None:
        raise TypeError("Nothing to decode, pass one of data, value or json_text")

    descriptor = to_type_descriptor(type)
    type_name = abi_type_string(descriptor)
    custom = list(custom_types or ())
    root_descriptor = descriptor.type
    if abi is None and isinstance(root_descriptor, str):
        root_name = ResolvedType.parse(root_descriptor).name
        root_descriptor = build_type_lookup(custom).get(root_name)
    if abi is not None:
        schema = ABI.from_value(abi)
    elif root_descriptor is not None:
        synthesized = synthesize_abi(root_descriptor)
        schema = synthesized.abi
        custom.extend(synthesized.types)
    else:
        # Unknown names resolve to a bare leaf and fail once a value needs it
        schema = ABI()
    if not isinstance(descriptor.type, str):
        custom.insert(0, descriptor.type)

    root = schema.resolve_type(type_name)
    ctx = DecodingContext(build_type_lookup(custom), strict_extensions=strict_extensions)
    ctx.path.append(("root", root))
    try:
        if data is not None:
            ctx.decoder = _to_reader(data, ignore_invalid_utf8, metadata)
            return decode_binary(root, ctx)
        if json_text is not None:
            value = json.loads(json_text)
        return decode_object(value, root, ctx)
    except SerializationError as e:
        e.annotate("Decoding", ctx.path_string())
        raise
    except (ValueError, TypeError) as e:
        raise NonConformingValueError(str(e)).annotate("Decoding", ctx.path_string()) from e


def synthesize(type: Any) -> ABI:
    """Build the ABI describing a descriptor's declared shape."""
    return synthesize_abi(type).abi


def objectify(value: Any) -> Any:
    """Project a value onto plain JSON-compatible Python objects."""
    if isinstance(value, DataClassJsonMixin):
        return objectify(value.to_dict())
    to_json = getattr(value, "to_json", None)
    if callable(to_json) and not isinstance(value, type):
        return objectify(to_json())
    if isinstance(value, Mapping):
        return {str(k): objectify(v) for k, v in value.items()}
    if isinstance(value, list | tuple):
        return [objectify(v) for v in value]
    if isinstance(value, bytes | bytearray | memoryview):
        return bytes(value).hex()
    return value


def stringify(value: Any, indent: int | None = None) -> str:
    """Serialize the JSON projection of a value to text."""
    separators = (",", ":") if indent is None else None
    return json.dumps(objectify(value), indent=indent, separators=separators, ensure_ascii=False)


__all__ = [
    "SynthesizedABI",
    "build_type_lookup",
    "builtin_types",
    "decode",
    "default_value",
    "encode",
    "get_type",
    "get_type_name",
    "objectify",
    "stringify",
    "synthesize",
    "synthesize_abi",
]
