"""Binary encoding of values against a resolved type graph."""

from typing import Any

from chainabi.chain import ResolvedType
from chainabi.proto.serialization import (
    NonConformingValueError,
    UnknownTypeError,
    UnsupportedBinaryError,
)

from .context import EncodingContext, coerce, get_member, is_compound, is_record


def encode_any(value: Any, abi_type: ResolvedType, ctx: EncodingContext) -> None:
    """Write ``value`` as ``abi_type``, handling the optional and array modifiers."""
    if abi_type.is_optional:
        ctx.encoder.write_byte(0 if value is None else 1)
        if value is None:
            return
    if value is None and abi_type.is_extension:
        return
    if abi_type.is_array:
        if not isinstance(value, list | tuple):
            raise NonConformingValueError(f"Expected array for: {abi_type.type_name}")
        ctx.encoder.write_varuint32(len(value))
        for i, item in enumerate(value):
            ctx.path.append((i, abi_type))
            _encode_inner(item, abi_type, ctx)
            ctx.path.pop()
    else:
        _encode_inner(value, abi_type, ctx)


def _encode_inner(value: Any, abi_type: ResolvedType, ctx: EncodingContext) -> None:
    descriptor = ctx.types.get(abi_type.name)
    write_abi = getattr(descriptor, "write_abi", None)
    if value is None:
        # The alias target may itself be optional
        if abi_type.ref is not None and write_abi is None:
            abi_type.resolve_alias()
            encode_any(None, abi_type.ref, ctx)
            return
        raise NonConformingValueError(f"Found None for non-optional type: {abi_type.type_name}")

    if write_abi is not None:
        write_abi(value, ctx.encoder)
        return

    to_abi = getattr(value, "to_abi", None)
    value_name = getattr(type(value), "abi_name", None)
    if callable(to_abi) and value_name == abi_type.name:
        to_abi(ctx.encoder)
        return

    if abi_type.ref is not None:
        abi_type.resolve_alias()
        encode_any(value, abi_type.ref, ctx)
    elif abi_type.fields is not None:
        if not is_record(value):
            raise NonConformingValueError(f"Expected object for: {abi_type.type_name}")
        for f in abi_type.all_fields:
            ctx.path.append((f.name, f.type))
            encode_any(get_member(value, f.name), f.type, ctx)
            ctx.path.pop()
    elif abi_type.variant is not None:
        raise UnsupportedBinaryError(
            f"Binary encoding of variant {abi_type.name} is not implemented"
        )
    elif descriptor is not None:
        if is_compound(descriptor):
            _encode_inner(value, ctx.descriptor_node(descriptor), ctx)
            return
        instance = coerce(descriptor, value)
        to_abi = getattr(instance, "to_abi", None)
        if not callable(to_abi):
            raise UnsupportedBinaryError(f"Unable to encode {abi_type.name} to binary")
        to_abi(ctx.encoder)
    elif callable(to_abi):
        raise NonConformingValueError(f"Expected {abi_type.name}, got {value_name}")
    else:
        raise UnknownTypeError(f"Unknown type: {abi_type.name}")
