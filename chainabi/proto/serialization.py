"""Error kinds and the base class for ABI leaf types."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar, Self

if TYPE_CHECKING:
    from .stream import BinaryReader, BinaryWriter


class SerializationError(RuntimeError):
    """Raised when serialization or deserialization fails."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message
        self.path: str | None = None

    def annotate(self, action: str, path: str) -> Self:
        """Attach the coding path where the error happened.

        Only the first (innermost) annotation is kept so nested codec calls
        do not stack prefixes.
        """
        if self.path is None:
            self.path = path
            self.args = (f"{action} error at {path}: {self.message}",)
        return self


class UnknownTypeError(SerializationError):
    """A type name resolved to nothing in the schema or the registry."""


class NonConformingValueError(SerializationError):
    """A value does not match the shape its type requires."""


class BufferUnderrunError(SerializationError):
    """A read needed more bytes than the buffer holds."""


class CircularTypeError(SerializationError):
    """An alias, base or struct chain refers back to itself."""


class AmbiguousSourceTypeError(SerializationError):
    """No type was given and none could be inferred from the value."""


class SchemaFormatError(SerializationError):
    """A schema document could not be parsed."""


class UnsupportedBinaryError(SerializationError, NotImplementedError):
    """The type has no binary representation (variants, ``any``)."""


class ABISerializableObject:
    """Base class for leaf types with a fixed binary and JSON form.

    Subclasses set ``abi_name`` and implement ``from_value``, ``from_abi``,
    ``to_abi`` and ``to_json``.

    Example:
        class Flag(ABISerializableObject, int):
            abi_name: ClassVar[str] = "flag"
    """

    abi_name: ClassVar[str]

    @classmethod
    def from_value(cls, value: Any) -> Self:
        """Construct and validate an instance from a loosely typed value."""
        raise NotImplementedError("from_value() must be implemented by subclasses")

    @classmethod
    def from_abi(cls, decoder: BinaryReader) -> Self:
        """Read an instance from the binary stream."""
        raise NotImplementedError("from_abi() must be implemented by subclasses")

    @classmethod
    def write_abi(cls, value: Any, encoder: BinaryWriter) -> None:
        """Coerce ``value`` to this type and write it."""
        cls.from_value(value).to_abi(encoder)

    def to_abi(self, encoder: BinaryWriter) -> None:
        """Write this instance to the binary stream."""
        raise NotImplementedError("to_abi() must be implemented by subclasses")

    def to_json(self) -> Any:
        """Return the JSON-compatible projection of this instance."""
        raise NotImplementedError("to_json() must be implemented by subclasses")
