"""Unvalidated values for the ``any`` type."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Self


@dataclass(frozen=True, slots=True)
class AnyValue:
    """Wraps a generic JSON value that was accepted without validation.

    Only the object codec handles ``any``; it has no binary form.
    """

    abi_name: ClassVar[str] = "any"

    value: Any

    @classmethod
    def from_value(cls, value: Any) -> Self:
        if isinstance(value, cls):
            return value
        return cls(value)

    def to_json(self) -> Any:
        return self.value
