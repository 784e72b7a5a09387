"""Per-call state shared by the structural codecs."""

from dataclasses import dataclass, field
from typing import Any

from chainabi.chain import ResolvedType, Struct, Variant
from chainabi.proto.serialization import UnknownTypeError
from chainabi.proto.stream import BinaryReader, BinaryWriter
from chainabi.proto.types import descriptor_name

from .synthesis import synthesize_abi


@dataclass
class CodingContext:
    """Type lookup and the breadcrumb path of the value being coded.

    Entries are pushed when entering a field or array element and popped
    only on success, so after a failure ``path`` still points at it.
    """

    types: dict[str, Any]
    path: list[tuple[str | int, ResolvedType]] = field(default_factory=list)
    strict_extensions: bool = True
    _descriptor_nodes: dict[int, ResolvedType] = field(default_factory=dict, repr=False)

    def path_string(self) -> str:
        """Render the path as ``root<type>.field<type>.0.field<type>``."""
        return ".".join(
            str(segment) if isinstance(segment, int) else f"{segment}<{node.type_name}>"
            for segment, node in self.path
        )

    def descriptor_node(self, descriptor: Any) -> ResolvedType:
        """Resolve a compound descriptor from its own declared shape."""
        key = id(descriptor)
        node = self._descriptor_nodes.get(key)
        if node is None:
            synthesized = synthesize_abi(descriptor)
            for t in synthesized.types:
                self.types.setdefault(descriptor_name(t), t)
            node = synthesized.abi.resolve_type(synthesized.root)
            self._descriptor_nodes[key] = node
        return node


@dataclass
class EncodingContext(CodingContext):
    encoder: BinaryWriter = field(default_factory=BinaryWriter)


@dataclass
class DecodingContext(CodingContext):
    decoder: BinaryReader | None = None
    # (node identity, reader position) pairs being decoded
    active: set[tuple[int, int]] = field(default_factory=set, repr=False)


def is_compound(descriptor: Any) -> bool:
    """Whether a descriptor declares a struct, variant or alias shape."""
    return any(
        getattr(descriptor, attr, None) is not None
        for attr in ("abi_fields", "abi_variant", "abi_alias")
    )


def is_record(value: Any) -> bool:
    """Whether struct members can be read off the value."""
    return not isinstance(value, str | bytes | bytearray | int | float | list | tuple)


def get_member(value: Any, name: str) -> Any:
    if hasattr(value, "get") and hasattr(value, "keys"):
        return value.get(name)
    return getattr(value, name, None)


def build_resolved(descriptor: Any, value: Any) -> Any:
    """Hand a decoded struct or variant to its registered descriptor, if any."""
    if descriptor is None:
        return value
    if isinstance(value, Struct | Variant):
        value = value.to_json()
    build = getattr(descriptor, "from_resolved", None)
    if build is not None:
        return build(value)
    return coerce(descriptor, value)


def coerce(descriptor: Any, value: Any) -> Any:
    """Run a descriptor's value constructor."""
    from_value = getattr(descriptor, "from_value", None)
    if from_value is None:
        raise UnknownTypeError(f"Type {descriptor_name(descriptor)} cannot be built from a value")
    return from_value(value)
