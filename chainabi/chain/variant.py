"""Base class for declared tagged union types."""

from __future__ import annotations

from typing import Any, ClassVar, Self

from chainabi.proto.serialization import NonConformingValueError
from chainabi.proto.types import abi_type_string


class Variant:
    """A value of one of several declared branch types.

    Subclasses set ``abi_name`` and list the branches in ``abi_variant`` as
    type names, descriptors or ``ABIType`` references. The JSON form is a
    ``[branch_type, value]`` pair.

    Example:
        class Thing(Variant):
            abi_name: ClassVar[str] = "thing"
            abi_variant = (Name, "string", ABIType("bool", array=True))
    """

    abi_name: ClassVar[str]
    abi_variant: ClassVar[tuple[Any, ...]] = ()

    def __init__(self, variant_name: str, value: Any) -> None:
        names = self.variant_names()
        if variant_name not in names:
            raise NonConformingValueError(
                f"Unknown variant type {variant_name!r} for {type(self).__name__}"
            )
        self.variant_idx = names.index(variant_name)
        self.value = value

    @classmethod
    def variant_names(cls) -> list[str]:
        return [abi_type_string(branch) for branch in cls.abi_variant]

    @property
    def variant_name(self) -> str:
        return self.variant_names()[self.variant_idx]

    @classmethod
    def from_value(cls, value: Any, variant_type: Any = None) -> Self:
        """Build a variant, optionally naming the branch explicitly."""
        if isinstance(value, cls):
            return value
        if variant_type is not None:
            value = [abi_type_string(variant_type), value]
        from chainabi.serializer import decode

        return decode(cls, value=value)

    @classmethod
    def from_resolved(cls, pair: list[Any] | tuple[Any, Any]) -> Self:
        return cls(pair[0], pair[1])

    def to_json(self) -> list[Any]:
        return [self.variant_name, self.value]

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Variant):
            return self.to_json() == other.to_json()
        if isinstance(other, list | tuple) and len(other) == 2:
            return self.to_json() == list(other)
        return NotImplemented

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.variant_name!r}, {self.value!r})"
