"""Decoding from binary and from loosely typed objects, and default values."""

from typing import Any

from chainabi.chain import ResolvedType, Variant
from chainabi.proto.serialization import (
    CircularTypeError,
    NonConformingValueError,
    SerializationError,
    UnknownTypeError,
    UnsupportedBinaryError,
)

from .context import (
    CodingContext,
    DecodingContext,
    build_resolved,
    coerce,
    get_member,
    is_compound,
    is_record,
)
from .registry import get_type_name


def decode_binary(abi_type: ResolvedType, ctx: DecodingContext) -> Any:
    """Read a value of ``abi_type`` from the context's reader."""
    decoder = ctx.decoder
    if abi_type.is_extension and not decoder.can_read():
        return default_value(abi_type, ctx) if ctx.strict_extensions else None
    # Re-entering a node without consuming input would never terminate
    key = (id(abi_type), decoder.position)
    if key in ctx.active:
        raise CircularTypeError(f"Circular type reference: {abi_type.type_name}")
    ctx.active.add(key)
    if abi_type.is_optional and decoder.read_byte() == 0:
        rv = None
    elif abi_type.is_array:
        rv = []
        for i in range(decoder.read_varuint32()):
            ctx.path.append((i, abi_type))
            rv.append(_decode_binary_inner(abi_type, ctx))
            ctx.path.pop()
    else:
        rv = _decode_binary_inner(abi_type, ctx)
    ctx.active.discard(key)
    return rv


def _decode_binary_inner(abi_type: ResolvedType, ctx: DecodingContext) -> Any:
    descriptor = ctx.types.get(abi_type.name)
    from_abi = getattr(descriptor, "from_abi", None)
    if from_abi is not None:
        return from_abi(ctx.decoder)

    if abi_type.ref is not None:
        abi_type.resolve_alias()
        return build_resolved(descriptor, decode_binary(abi_type.ref, ctx))
    if abi_type.fields is not None:
        rv = {}
        for f in abi_type.all_fields:
            ctx.path.append((f.name, f.type))
            rv[f.name] = decode_binary(f.type, ctx)
            ctx.path.pop()
        return build_resolved(descriptor, rv)
    if abi_type.variant is not None:
        raise UnsupportedBinaryError(
            f"Binary decoding of variant {abi_type.name} is not implemented"
        )
    if descriptor is not None:
        if is_compound(descriptor):
            return _decode_binary_inner(ctx.descriptor_node(descriptor), ctx)
        raise UnsupportedBinaryError(f"Unable to decode {abi_type.name} from binary")
    raise UnknownTypeError(f"Unknown type: {abi_type.name}")


def decode_object(value: Any, abi_type: ResolvedType, ctx: CodingContext) -> Any:
    """Validate and convert a loosely typed value into ``abi_type``."""
    if value is None:
        if abi_type.is_optional:
            return None
        if abi_type.is_extension:
            return default_value(abi_type, ctx) if ctx.strict_extensions else None
        if abi_type.ref is not None and not abi_type.is_array:
            descriptor = ctx.types.get(abi_type.name)
            if descriptor is None or is_compound(descriptor):
                abi_type.resolve_alias()
                rv = decode_object(None, abi_type.ref, ctx)
                return None if rv is None else build_resolved(descriptor, rv)
        raise NonConformingValueError(
            f"Unexpectedly encountered None for non-optional type: {abi_type.type_name}"
        )
    if abi_type.is_array:
        if not isinstance(value, list | tuple):
            raise NonConformingValueError(f"Expected array for: {abi_type.type_name}")
        rv = []
        for i, item in enumerate(value):
            ctx.path.append((i, abi_type))
            rv.append(_decode_object_inner(item, abi_type, ctx))
            ctx.path.pop()
        return rv
    return _decode_object_inner(value, abi_type, ctx)


def _decode_object_inner(value: Any, abi_type: ResolvedType, ctx: CodingContext) -> Any:
    descriptor = ctx.types.get(abi_type.name)

    if abi_type.ref is not None and (descriptor is None or is_compound(descriptor)):
        abi_type.resolve_alias()
        return build_resolved(descriptor, decode_object(value, abi_type.ref, ctx))
    if abi_type.fields is not None:
        if isinstance(descriptor, type) and isinstance(value, descriptor):
            return value
        if not is_record(value):
            raise NonConformingValueError(f"Expected object for: {abi_type.type_name}")
        rv = {}
        for f in abi_type.all_fields:
            ctx.path.append((f.name, f.type))
            rv[f.name] = decode_object(get_member(value, f.name), f.type, ctx)
            ctx.path.pop()
        return build_resolved(descriptor, rv)
    if abi_type.variant is not None:
        if isinstance(descriptor, type) and isinstance(value, descriptor):
            return value
        idx, branch_value = _select_branch(value, abi_type, ctx)
        branch = abi_type.variant[idx]
        ctx.path.append((f"v{idx}", branch))
        rv = [branch.type_name, decode_object(branch_value, branch, ctx)]
        ctx.path.pop()
        return build_resolved(descriptor, rv)
    if descriptor is None:
        raise UnknownTypeError(f"Unknown type: {abi_type.name}")
    if is_compound(descriptor):
        return _decode_object_inner(value, ctx.descriptor_node(descriptor), ctx)
    return coerce(descriptor, value)


def _select_branch(value: Any, abi_type: ResolvedType, ctx: CodingContext) -> tuple[int, Any]:
    """Pick a variant branch: explicit tag, then inferred type, then first match."""
    names = [branch.type_name for branch in abi_type.variant]
    if isinstance(value, Variant):
        if value.variant_name not in names:
            raise NonConformingValueError(
                f"Unknown variant type {value.variant_name!r} for {abi_type.name}"
            )
        return names.index(value.variant_name), value.value
    if (
        isinstance(value, list | tuple)
        and len(value) == 2
        and isinstance(value[0], str)
        and value[0] in names
    ):
        return names.index(value[0]), value[1]

    inferred = get_type_name(value)
    if inferred in names:
        return names.index(inferred), value
    for idx, branch in enumerate(abi_type.variant):
        if _accepts(value, branch, ctx):
            return idx, value
    raise NonConformingValueError(f"No variant type of {abi_type.name} accepts {value!r}")


def _accepts(value: Any, branch: ResolvedType, ctx: CodingContext) -> bool:
    depth = len(ctx.path)
    try:
        decode_object(value, branch, ctx)
    except (SerializationError, ValueError, TypeError):
        del ctx.path[depth:]
        return False
    return True


def default_value(
    abi_type: ResolvedType, ctx: CodingContext, seen: frozenset[str] = frozenset()
) -> Any:
    """The value an absent binary extension field takes."""
    if abi_type.is_array:
        return []
    if abi_type.is_optional:
        return None
    descriptor = ctx.types.get(abi_type.name)
    abi_default = getattr(descriptor, "abi_default", None)
    if abi_default is not None:
        return abi_default()
    if (
        descriptor is not None
        and is_compound(descriptor)
        and abi_type.ref is None
        and abi_type.fields is None
        and abi_type.variant is None
    ):
        return default_value(ctx.descriptor_node(descriptor), ctx, seen)

    if abi_type.name in seen:
        raise CircularTypeError(f"Circular type reference: {abi_type.name}")
    seen = seen | {abi_type.name}
    if abi_type.ref is not None:
        abi_type.resolve_alias()
        return build_resolved(descriptor, default_value(abi_type.ref, ctx, seen))
    if abi_type.fields is not None:
        rv = {f.name: default_value(f.type, ctx, seen) for f in abi_type.all_fields}
        return build_resolved(descriptor, rv)
    if abi_type.variant:
        branch = abi_type.variant[0]
        return build_resolved(descriptor, [branch.type_name, default_value(branch, ctx, seen)])
    raise UnknownTypeError(f"Unable to determine default value for {abi_type.name}")
