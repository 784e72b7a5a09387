"""Base class for declared struct types."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, ClassVar, Self

from chainabi.proto.serialization import CircularTypeError
from chainabi.proto.types import ABIField


class Struct:
    """Base class for struct types with a statically declared shape.

    Subclasses set ``abi_name`` and list their members in ``abi_fields``;
    inherited members come from ``abi_base``.

    Example:
        class Transfer(Struct):
            abi_name: ClassVar[str] = "transfer"
            abi_fields = (
                ABIField("from", Name),
                ABIField("to", Name),
                ABIField("quantity", Asset),
                ABIField("memo", "string"),
            )
    """

    abi_name: ClassVar[str]
    abi_fields: ClassVar[tuple[ABIField, ...]] = ()
    abi_base: ClassVar[type[Struct] | None] = None

    def __init__(self, **values: Any) -> None:
        fields = self.struct_fields()
        unknown = set(values) - {f.name for f in fields}
        if unknown:
            raise TypeError(f"{type(self).__name__} got unexpected fields: {sorted(unknown)}")
        for f in fields:
            setattr(self, f.name, values.get(f.name))

    @classmethod
    def struct_fields(cls) -> list[ABIField]:
        """All members including inherited ones, base members first."""
        chain: list[type[Struct]] = []
        current: type[Struct] | None = cls
        while current is not None:
            if current in chain:
                raise CircularTypeError(f"Circular base chain in {cls.__name__}")
            chain.append(current)
            current = current.abi_base
        return [f for struct in reversed(chain) for f in struct.abi_fields]

    @classmethod
    def from_value(cls, value: Any) -> Self:
        if isinstance(value, cls):
            return value
        from chainabi.serializer import decode

        return decode(cls, value=value)

    @classmethod
    def from_resolved(cls, values: Mapping[str, Any]) -> Self:
        """Build an instance from already decoded member values."""
        return cls(**dict(values))

    def to_json(self) -> dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in self.struct_fields()}

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Struct):
            if type(other).struct_fields() != self.struct_fields():
                return False
            other = other.to_json()
        if not isinstance(other, Mapping):
            return NotImplemented
        return self.to_json() == {f.name: other.get(f.name) for f in self.struct_fields()}

    def __repr__(self) -> str:
        members = ", ".join(f"{name}={value!r}" for name, value in self.to_json().items())
        return f"{type(self).__name__}({members})"
