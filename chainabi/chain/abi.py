"""Schema document model, type graph resolution and the ABI binary form."""

import itertools
import json
import logging
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any, ClassVar, TypeVar

from dataclasses_json import DataClassJsonMixin

from chainabi.proto.serialization import (
    CircularTypeError,
    SchemaFormatError,
    SerializationError,
    UnknownTypeError,
)
from chainabi.proto.stream import BinaryReader, BinaryWriter

from .name import Name

logger = logging.getLogger(__name__)

DEFAULT_VERSION = "eosio::abi/1.1"

T = TypeVar("T")


@dataclass
class TypeDef(DataClassJsonMixin):
    """An alias: ``new_type_name`` stands for ``type``."""

    new_type_name: str
    type: str


@dataclass
class FieldDef(DataClassJsonMixin):
    name: str
    type: str


@dataclass
class StructDef(DataClassJsonMixin):
    """A struct; ``base`` is an empty string when there is none."""

    name: str
    base: str = ""
    fields: list[FieldDef] = field(default_factory=list)


@dataclass
class ActionDef(DataClassJsonMixin):
    name: str
    type: str
    ricardian_contract: str = ""


@dataclass
class TableDef(DataClassJsonMixin):
    name: str
    index_type: str = "i64"
    key_names: list[str] = field(default_factory=list)
    key_types: list[str] = field(default_factory=list)
    type: str = ""


@dataclass
class ClauseDef(DataClassJsonMixin):
    id: str
    body: str = ""


@dataclass
class VariantDef(DataClassJsonMixin):
    """A tagged union; the tag is the index into ``types``."""

    name: str
    types: list[str] = field(default_factory=list)


@dataclass
class ActionResultDef(DataClassJsonMixin):
    name: str
    result_type: str


@dataclass(eq=False)
class ResolvedField:
    name: str
    type: "ResolvedType"


@dataclass(eq=False)
class ResolvedType:
    """A node of a resolved type graph.

    ``name`` is the bare type name; the wire modifiers are kept as flags.
    Exactly one of ``ref`` (alias target), ``fields`` (struct) or ``variant``
    is set for declared types; leaves have none.
    """

    name: str
    id: int = 0
    is_array: bool = False
    is_optional: bool = False
    is_extension: bool = False
    ref: "ResolvedType | None" = field(default=None, repr=False)
    base: "ResolvedType | None" = field(default=None, repr=False)
    fields: list[ResolvedField] | None = field(default=None, repr=False)
    variant: "list[ResolvedType] | None" = field(default=None, repr=False)

    @classmethod
    def parse(cls, type_name: str, id: int = 0) -> "ResolvedType":
        """Split the ``$``, ``?`` and ``[]`` suffixes off a type name, in that order."""
        name = type_name
        is_extension = name.endswith("$")
        if is_extension:
            name = name[:-1]
        is_optional = name.endswith("?")
        if is_optional:
            name = name[:-1]
        is_array = name.endswith("[]")
        if is_array:
            name = name[:-2]
        return cls(name, id, is_array, is_optional, is_extension)

    @property
    def type_name(self) -> str:
        rv = self.name
        if self.is_array:
            rv += "[]"
        if self.is_optional:
            rv += "?"
        if self.is_extension:
            rv += "$"
        return rv

    def resolve_alias(self) -> "ResolvedType":
        """Follow the alias chain to its end, detecting cycles."""
        seen: set[int] = set()
        current = self
        while current.ref is not None:
            if current.id in seen:
                raise CircularTypeError(f"Circular type reference: {self.type_name}")
            seen.add(current.id)
            current = current.ref
        return current

    @property
    def all_fields(self) -> list[ResolvedField]:
        """Struct members with inherited ones first."""
        rv: list[ResolvedField] = []
        seen: set[str] = set()
        current: "ResolvedType | None" = self
        while current is not None:
            current = current.resolve_alias()
            if current.fields is None:
                raise UnknownTypeError(f"Invalid base type {current.name} for {self.name}")
            if current.name in seen:
                raise CircularTypeError(f"Circular base chain in {self.name}")
            seen.add(current.name)
            rv[0:0] = current.fields
            current = current.base
        return rv


def _read_list(decoder: BinaryReader, read_item: Callable[[BinaryReader], T]) -> list[T]:
    return [read_item(decoder) for _ in range(decoder.read_varuint32())]


def _write_list(
    encoder: BinaryWriter, items: list[T], write_item: Callable[[BinaryWriter, T], None]
) -> None:
    encoder.write_varuint32(len(items))
    for item in items:
        write_item(encoder, item)


def _read_strings(decoder: BinaryReader) -> list[str]:
    return _read_list(decoder, BinaryReader.read_string)


def _write_strings(encoder: BinaryWriter, items: list[str]) -> None:
    _write_list(encoder, items, BinaryWriter.write_string)


def _read_name(decoder: BinaryReader) -> str:
    return str(Name.from_abi(decoder))


def _write_name(encoder: BinaryWriter, value: str) -> None:
    Name.from_value(value).to_abi(encoder)


@dataclass
class ABI(DataClassJsonMixin):
    """A contract ABI: the schema that drives the structural codecs."""

    abi_name: ClassVar[str] = "abi_def"

    version: str = DEFAULT_VERSION
    types: list[TypeDef] = field(default_factory=list)
    structs: list[StructDef] = field(default_factory=list)
    actions: list[ActionDef] = field(default_factory=list)
    tables: list[TableDef] = field(default_factory=list)
    ricardian_clauses: list[ClauseDef] = field(default_factory=list)
    variants: list[VariantDef] = field(default_factory=list)
    action_results: list[ActionResultDef] = field(default_factory=list)

    @classmethod
    def from_value(cls, value: Any) -> "ABI":
        """Load from an ABI, a mapping, a JSON string or a binary blob."""
        if isinstance(value, ABI):
            return value
        if isinstance(value, bytes | bytearray | memoryview):
            try:
                return cls.from_abi(BinaryReader(value))
            except SerializationError as e:
                raise SchemaFormatError(f"Invalid binary ABI: {e}") from e
        if isinstance(value, str):
            try:
                value = json.loads(value)
            except json.JSONDecodeError as e:
                raise SchemaFormatError(f"Invalid ABI JSON: {e}") from e
        if not isinstance(value, Mapping):
            raise SchemaFormatError(f"Unable to load ABI from {type(value).__name__}")
        try:
            return cls.from_dict(dict(value))
        except (KeyError, TypeError, ValueError) as e:
            raise SchemaFormatError(f"Invalid ABI document: {e}") from e

    def get_alias(self, name: str) -> TypeDef | None:
        return next((t for t in self.types if t.new_type_name == name), None)

    def get_struct(self, name: str) -> StructDef | None:
        return next((s for s in self.structs if s.name == name), None)

    def get_variant(self, name: str) -> VariantDef | None:
        return next((v for v in self.variants if v.name == name), None)

    def resolve_type(self, name: str) -> ResolvedType:
        """Expand a type name into a graph of ResolvedType nodes."""
        return self._resolve(name, {}, itertools.count())

    def resolve_all(self) -> dict[str, ResolvedType]:
        """Resolve every declared alias, struct and variant in one graph."""
        memo: dict[str, ResolvedType] = {}
        counter = itertools.count()
        names = [t.new_type_name for t in self.types]
        names += [s.name for s in self.structs]
        names += [v.name for v in self.variants]
        return {name: self._resolve(name, memo, counter) for name in names}

    def _resolve(
        self, name: str, memo: dict[str, ResolvedType], counter: Iterator[int]
    ) -> ResolvedType:
        existing = memo.get(name)
        if existing is not None:
            return existing
        node = ResolvedType.parse(name, next(counter))
        # Registered before recursing so self references share this node
        memo[name] = node

        alias = self.get_alias(node.name)
        if alias is not None:
            node.ref = self._resolve(alias.type, memo, counter)
            return node

        struct = self.get_struct(node.name)
        if struct is not None:
            if struct.base:
                node.base = self._resolve(struct.base, memo, counter)
            node.fields = [
                ResolvedField(f.name, self._resolve(f.type, memo, counter)) for f in struct.fields
            ]
            return node

        variant = self.get_variant(node.name)
        if variant is not None:
            node.variant = [self._resolve(t, memo, counter) for t in variant.types]
        return node

    @classmethod
    def from_abi(cls, decoder: BinaryReader) -> "ABI":
        """Read the self-describing binary form of an ABI."""
        version = decoder.read_string()
        types = _read_list(decoder, _read_type_def)
        structs = _read_list(decoder, _read_struct_def)
        actions = _read_list(decoder, _read_action_def)
        tables = _read_list(decoder, _read_table_def)
        clauses = _read_list(decoder, _read_clause_def)
        # Legacy error messages and abi extensions, kept on the wire only
        _read_list(decoder, _skip_error_message)
        _read_list(decoder, _skip_abi_extension)
        variants: list[VariantDef] = []
        if decoder.can_read():
            variants = _read_list(decoder, _read_variant_def)
        action_results: list[ActionResultDef] = []
        if decoder.can_read():
            action_results = _read_list(decoder, _read_action_result_def)
        if decoder.can_read():
            logger.debug("Ignoring %d trailing bytes after ABI", decoder.remaining)
        return cls(version, types, structs, actions, tables, clauses, variants, action_results)

    @classmethod
    def write_abi(cls, value: Any, encoder: BinaryWriter) -> None:
        cls.from_value(value).to_abi(encoder)

    def to_abi(self, encoder: BinaryWriter) -> None:
        encoder.write_string(self.version)
        _write_list(encoder, self.types, _write_type_def)
        _write_list(encoder, self.structs, _write_struct_def)
        _write_list(encoder, self.actions, _write_action_def)
        _write_list(encoder, self.tables, _write_table_def)
        _write_list(encoder, self.ricardian_clauses, _write_clause_def)
        encoder.write_varuint32(0)  # error messages
        encoder.write_varuint32(0)  # abi extensions
        _write_list(encoder, self.variants, _write_variant_def)
        _write_list(encoder, self.action_results, _write_action_result_def)

    def to_bytes(self) -> bytes:
        encoder = BinaryWriter()
        self.to_abi(encoder)
        return encoder.data

    def equals(self, other: Any) -> bool:
        """Structural equality: cheap length checks, then the binary forms."""
        other = ABI.from_value(other)
        if (
            self.version != other.version
            or len(self.types) != len(other.types)
            or len(self.structs) != len(other.structs)
            or len(self.actions) != len(other.actions)
            or len(self.tables) != len(other.tables)
            or len(self.ricardian_clauses) != len(other.ricardian_clauses)
            or len(self.variants) != len(other.variants)
            or len(self.action_results) != len(other.action_results)
        ):
            return False
        return self.to_bytes() == other.to_bytes()


def _read_type_def(decoder: BinaryReader) -> TypeDef:
    new_type_name = decoder.read_string()
    return TypeDef(new_type_name, decoder.read_string())


def _write_type_def(encoder: BinaryWriter, item: TypeDef) -> None:
    encoder.write_string(item.new_type_name)
    encoder.write_string(item.type)


def _read_field_def(decoder: BinaryReader) -> FieldDef:
    name = decoder.read_string()
    return FieldDef(name, decoder.read_string())


def _write_field_def(encoder: BinaryWriter, item: FieldDef) -> None:
    encoder.write_string(item.name)
    encoder.write_string(item.type)


def _read_struct_def(decoder: BinaryReader) -> StructDef:
    name = decoder.read_string()
    base = decoder.read_string()
    return StructDef(name, base, _read_list(decoder, _read_field_def))


def _write_struct_def(encoder: BinaryWriter, item: StructDef) -> None:
    encoder.write_string(item.name)
    encoder.write_string(item.base)
    _write_list(encoder, item.fields, _write_field_def)


def _read_action_def(decoder: BinaryReader) -> ActionDef:
    name = _read_name(decoder)
    type_name = decoder.read_string()
    return ActionDef(name, type_name, decoder.read_string())


def _write_action_def(encoder: BinaryWriter, item: ActionDef) -> None:
    _write_name(encoder, item.name)
    encoder.write_string(item.type)
    encoder.write_string(item.ricardian_contract)


def _read_table_def(decoder: BinaryReader) -> TableDef:
    name = _read_name(decoder)
    index_type = decoder.read_string()
    key_names = _read_strings(decoder)
    key_types = _read_strings(decoder)
    return TableDef(name, index_type, key_names, key_types, decoder.read_string())


def _write_table_def(encoder: BinaryWriter, item: TableDef) -> None:
    _write_name(encoder, item.name)
    encoder.write_string(item.index_type)
    _write_strings(encoder, item.key_names)
    _write_strings(encoder, item.key_types)
    encoder.write_string(item.type)


def _read_clause_def(decoder: BinaryReader) -> ClauseDef:
    clause_id = decoder.read_string()
    return ClauseDef(clause_id, decoder.read_string())


def _write_clause_def(encoder: BinaryWriter, item: ClauseDef) -> None:
    encoder.write_string(item.id)
    encoder.write_string(item.body)


def _skip_error_message(decoder: BinaryReader) -> None:
    decoder.advance(8)
    decoder.read_string()


def _skip_abi_extension(decoder: BinaryReader) -> None:
    decoder.advance(2)
    decoder.advance(decoder.read_varuint32())


def _read_variant_def(decoder: BinaryReader) -> VariantDef:
    name = decoder.read_string()
    return VariantDef(name, _read_strings(decoder))


def _write_variant_def(encoder: BinaryWriter, item: VariantDef) -> None:
    encoder.write_string(item.name)
    _write_strings(encoder, item.types)


def _read_action_result_def(decoder: BinaryReader) -> ActionResultDef:
    name = _read_name(decoder)
    return ActionResultDef(name, decoder.read_string())


def _write_action_result_def(encoder: BinaryWriter, item: ActionResultDef) -> None:
    _write_name(encoder, item.name)
    encoder.write_string(item.result_type)
