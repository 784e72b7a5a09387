"""Runtime type descriptors for ABI serialization.

These dataclasses describe a reference to a type together with its wire
modifiers, used by declared structs and variants and by the codec entry
points.
"""

from dataclasses import dataclass
from typing import Any, Protocol

from .serialization import NonConformingValueError


class TypeDescriptor(Protocol):
    """Anything the registry can hold: a class or object with an ``abi_name``.

    Optional capabilities looked up by the codecs: ``from_value``,
    ``from_abi``, ``write_abi``, ``from_resolved``, ``abi_default`` and, for
    declared compound types, ``abi_fields``, ``abi_base``, ``abi_variant``
    and ``abi_alias``.
    """

    abi_name: str


@dataclass(frozen=True, slots=True)
class ABIType:
    """A type reference with wire modifiers."""

    type: Any  # type name or descriptor
    array: bool = False
    optional: bool = False
    extension: bool = False


@dataclass(frozen=True, slots=True)
class ABIField:
    """A named member of a declared struct."""

    name: str
    type: Any  # type name or descriptor
    array: bool = False
    optional: bool = False
    extension: bool = False


def descriptor_name(descriptor: Any) -> str:
    """Return the ABI name a descriptor declares."""
    name = getattr(descriptor, "abi_name", None)
    if not isinstance(name, str) or not name:
        raise NonConformingValueError(f"Encountered non-conforming type: {descriptor!r}")
    return name


def abi_type_string(ref: Any) -> str:
    """Render a type reference as an ABI type string, e.g. ``name[]?``."""
    if isinstance(ref, str):
        return ref
    if isinstance(ref, ABIType | ABIField):
        name = ref.type if isinstance(ref.type, str) else descriptor_name(ref.type)
        if ref.array:
            name += "[]"
        if ref.optional:
            name += "?"
        if ref.extension:
            name += "$"
        return name
    return descriptor_name(ref)


def to_type_descriptor(ref: Any) -> ABIType:
    """Normalize a type name, descriptor or field into an ``ABIType``."""
    if isinstance(ref, ABIType):
        return ref
    if isinstance(ref, ABIField):
        return ABIType(ref.type, ref.array, ref.optional, ref.extension)
    return ABIType(ref)
