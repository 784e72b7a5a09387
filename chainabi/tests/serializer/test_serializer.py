"""Tests for the binary and object codecs"""

import json
import os
from typing import Any, ClassVar, Self

from pytest import raises

from chainabi.chain import ABI, Asset, Int32, Name, Struct, UInt128, Variant
from chainabi.proto.serialization import (
    ABISerializableObject,
    AmbiguousSourceTypeError,
    CircularTypeError,
    NonConformingValueError,
    SerializationError,
    UnknownTypeError,
    UnsupportedBinaryError,
)
from chainabi.proto.stream import BinaryReader, BinaryWriter
from chainabi.proto.types import ABIField, ABIType
from chainabi.serializer import decode, encode, objectify, stringify

FILE_DIR = os.path.dirname(os.path.realpath(__file__))

with open(os.path.join(FILE_DIR, "..", "data", "token.abi.json")) as f:
    TOKEN_ABI = f.read()

FOO_BAR_ABI = {
    "structs": [
        {
            "name": "foo",
            "base": "",
            "fields": [{"name": "one", "type": "string"}, {"name": "two", "type": "int8"}],
        },
        {
            "name": "bar",
            "base": "foo",
            "fields": [{"name": "three", "type": "name?"}, {"name": "four", "type": "string[]?"}],
        },
    ]
}
BAR_OBJECT = {"one": "one", "two": 2, "three": "two", "four": ["f", "o", "u", "r"]}
BAR_HEX = "036f6e65020100000000000028cf01040166016f01750172"

ALIAS_ABI = {
    "types": [
        {"new_type_name": "maybe", "type": "uint8?"},
        {"new_type_name": "a1", "type": "a2"},
        {"new_type_name": "a2", "type": "a3"},
        {"new_type_name": "a3", "type": "uint32"},
    ],
    "structs": [
        {"name": "holder", "base": "", "fields": [{"name": "m", "type": "maybe"}]},
        {"name": "node", "base": "", "fields": [{"name": "next", "type": "node?"}]},
    ],
}


class Foo(Struct):
    abi_name: ClassVar[str] = "foo"
    abi_fields = (
        ABIField("one", "string"),
        ABIField("two", "int8"),
    )


class Bar(Struct):
    abi_name: ClassVar[str] = "bar"
    abi_base = Foo
    abi_fields = (
        ABIField("three", Name, optional=True),
        ABIField("four", "string", array=True, optional=True),
    )


class Node(Struct):
    abi_name: ClassVar[str] = "node"


Node.abi_fields = (ABIField("next", Node, optional=True),)


class SuperInt(Int32):
    abi_name: ClassVar[str] = "super_int"
    abi_alias = Int32


class Thing(Variant):
    abi_name: ClassVar[str] = "thing"
    abi_variant = (Name, "string")


class Flag(ABISerializableObject, int):
    abi_name: ClassVar[str] = "flag"

    @classmethod
    def from_value(cls, value: Any) -> Self:
        return cls(1 if value else 0)

    @classmethod
    def from_abi(cls, decoder: BinaryReader) -> Self:
        return cls(decoder.read_byte())

    def to_abi(self, encoder: BinaryWriter) -> None:
        encoder.write_byte(int(self))

    def to_json(self) -> bool:
        return bool(self)


class BadType:
    abi_name = "santa"


def describe_encode():
    def encodes_structs_against_an_abi(expect):
        expect(encode(BAR_OBJECT, "bar", abi=FOO_BAR_ABI).hex()) == BAR_HEX

    def encodes_declared_structs(expect):
        bar = Bar(one="one", two=2, three="two", four=["f", "o", "u", "r"])
        expect(encode(bar).hex()) == BAR_HEX
        expect(encode(BAR_OBJECT, Bar).hex()) == BAR_HEX

    def encodes_leaf_values(expect):
        expect(encode(Name("two")).hex()) == "00000000000028cf"
        expect(encode("foobar", "name").hex()) == "000000005c73285d"
        expect(encode("hello world").hex()) == "0b68656c6c6f20776f726c64"
        expect(encode(True).hex()) == "01"
        expect(encode("1.2345 FOO", "asset").hex()) == "393000000000000004464f4f00000000"

    def encodes_arrays(expect):
        expect(encode(["foo", "bar", "baz"], "string[]").hex()) == "0303666f6f036261720362617a"
        expect(encode(["foo", "bar", "baz"]).hex()) == "0303666f6f036261720362617a"
        expect(encode([Name("foo")], ABIType(Name, array=True)).hex()) == "01000000000000285d"

    def encodes_optionals(expect):
        expect(encode(None, "signature?").hex()) == "00"
        expect(encode(5, "uint8?").hex()) == "0105"

    def follows_aliases(expect):
        abi = {"types": [{"new_type_name": "super_string", "type": "string"}]}
        expect(encode("foo", "super_string", abi=abi).hex()) == "03666f6f"

    def follows_aliases_to_structs(expect):
        abi = {
            "types": [{"new_type_name": "super_foo", "type": "foo"}],
            "structs": [{"name": "foo", "base": "", "fields": [{"name": "bar", "type": "string"}]}],
        }
        expect(encode({"bar": "foo"}, "super_foo", abi=abi).hex()) == "03666f6f"

    def follows_chained_aliases(expect):
        expect(encode(123456, "a1", abi=ALIAS_ABI)) == encode(123456, "uint32")
        expect(encode(123456, "a1", abi=ALIAS_ABI).hex()) == "40e20100"

    def encodes_absent_values_through_optional_aliases(expect):
        expect(encode(None, "maybe", abi=ALIAS_ABI).hex()) == "00"
        expect(encode(5, "maybe", abi=ALIAS_ABI).hex()) == "0105"
        expect(encode({"m": None}, "holder", abi=ALIAS_ABI).hex()) == "00"
        expect(encode({"m": 5}, "holder", abi=ALIAS_ABI).hex()) == "0105"

    def rejects_absent_values_through_required_aliases():
        abi = {"types": [{"new_type_name": "super_string", "type": "string"}]}
        with raises(NonConformingValueError):
            encode(None, "super_string", abi=abi)

    def accepts_typed_values_for_aliases(expect):
        value = {"from": Name("alice"), "to": "bob", "quantity": "1.0000 EOS", "memo": ""}
        data = encode(value, "transfer", abi=TOKEN_ABI)
        expect(data.hex()[:16]) == Name("alice").value.to_bytes(8, "little").hex()

    def encodes_alias_classes(expect):
        expect(encode(SuperInt(5)).hex()) == "05000000"

    def infers_types_for_untyped_objects(expect):
        value = {
            "name": Name("foobar"),
            "string": "hello",
            "flag": False,
            "nest": {"grains": UInt128(75000000000000000)},
        }
        expected = "000000005c73285d0568656c6c6f00008027461a740a010000000000000000"
        expect(encode(value).hex()) == expected

    def encodes_recursive_structs(expect):
        expect(encode(Node(next=Node())).hex()) == "0100"

    def writes_to_a_given_encoder(expect):
        writer = BinaryWriter()
        writer.write_byte(0xFF)
        data = encode(True, encoder=writer, metadata={"chain": "test"})
        expect(data.hex()) == "ff01"
        expect(writer.metadata) == {"chain": "test"}

    def uses_custom_types(expect):
        abi = {"structs": [{"name": "s", "base": "", "fields": [{"name": "f", "type": "flag"}]}]}
        expect(encode({"f": "yes"}, "s", abi=abi, custom_types=[Flag]).hex()) == "01"

    def requires_a_type_for_plain_numbers():
        with raises(AmbiguousSourceTypeError):
            encode(42)

    def rejects_variants_in_binary(expect):
        with raises(UnsupportedBinaryError) as excinfo:
            encode(["string", "hi"], "name_or_string", abi=TOKEN_ABI)
        expect(isinstance(excinfo.value, NotImplementedError)) == True

    def rejects_circular_aliases():
        abi = {"types": [{"new_type_name": "a", "type": "a"}]}
        with raises(CircularTypeError):
            encode("x", "a", abi=abi)

    def rejects_unusable_descriptors():
        with raises(SerializationError):
            encode(BadType())


def describe_decode_binary():
    def decodes_structs_against_an_abi(expect):
        value = decode("bar", data=BAR_HEX, abi=FOO_BAR_ABI)
        expect(value) == BAR_OBJECT
        expect(type(value["three"])) == Name

    def decodes_declared_structs(expect):
        bar = decode(Bar, data=bytes.fromhex(BAR_HEX))
        expect(type(bar)) == Bar
        expect(bar) == BAR_OBJECT

    def decodes_optionals_without_an_abi(expect):
        expect(decode("public_key?", data="00")) == None
        expect(decode("bool?", data="0101")) == True

    def decodes_arrays(expect):
        expect(decode("string[]", data="0303666f6f036261720362617a")) == ["foo", "bar", "baz"]

    def round_trips_empty_arrays(expect):
        expect(encode([], "name[]").hex()) == "00"
        expect(decode("name[]", data="00")) == []

    def rejects_unknown_types():
        with raises(UnknownTypeError):
            decode("santa", data="00")

    def accepts_readers(expect):
        reader = BinaryReader(bytes.fromhex("0102"))
        expect(decode("uint8", data=reader)) == 1
        expect(decode("uint8", data=reader)) == 2

    def decodes_alias_classes(expect):
        value = decode(SuperInt, data="05000000")
        expect(type(value)) == SuperInt
        expect(value) == 5

    def decodes_recursive_structs(expect):
        expect(decode(Node, data="0100")) == Node(next=Node())

    def fills_missing_extensions_with_defaults(expect):
        data = encode(
            {"from": "alice", "to": "bob", "quantity": "1.0000 EOS", "memo": "hi"},
            "transfer",
            abi=TOKEN_ABI,
        )
        value = decode("memo_ext", data=data, abi=TOKEN_ABI)
        expect(value["memo"]) == "hi"
        expect(value["tags"]) == []

    def can_leave_missing_extensions_empty(expect):
        data = encode(
            {"from": "alice", "to": "bob", "quantity": "1.0000 EOS", "memo": "hi"},
            "transfer",
            abi=TOKEN_ABI,
        )
        value = decode("memo_ext", data=data, abi=TOKEN_ABI, strict_extensions=False)
        expect(value["tags"]) == None

    def decodes_through_optional_aliases(expect):
        expect(decode("maybe", data="00", abi=ALIAS_ABI)) == None
        expect(decode("holder", data="0105", abi=ALIAS_ABI)) == {"m": 5}

    def decodes_long_recursive_chains(expect):
        value = None
        for _ in range(70):
            value = {"next": value}
        data = encode(value, "node", abi=ALIAS_ABI)
        expect(len(data)) == 70
        expect(decode("node", data=data, abi=ALIAS_ABI)) == value

    def uses_custom_types(expect):
        abi = {"structs": [{"name": "s", "base": "", "fields": [{"name": "f", "type": "flag"}]}]}
        value = decode("s", data="01", abi=abi, custom_types=[Flag])
        expect(type(value["f"])) == Flag

    def stops_runaway_recursion():
        abi = {
            "types": [
                {"new_type_name": "c1", "type": "c2"},
                {"new_type_name": "c2", "type": "c3"},
            ],
            "structs": [
                {"name": "c3", "base": "", "fields": [{"name": "f", "type": "c4"}]},
                {"name": "c4", "base": "", "fields": [{"name": "f", "type": "c1"}]},
            ],
        }
        with raises(SerializationError):
            decode("c1", data="beef", abi=abi)

    def rejects_variants_in_binary():
        with raises(UnsupportedBinaryError):
            decode("name_or_string", data="00", abi=TOKEN_ABI)

    def rejects_bad_hex():
        with raises(NonConformingValueError):
            decode("uint8", data="zz")

    def rejects_unusable_descriptors():
        with raises(SerializationError):
            decode(BadType, data="00")

    def requires_something_to_decode():
        with raises(TypeError):
            decode("uint8")


def describe_decode_object():
    def validates_and_types_values(expect):
        value = decode("bar", value=BAR_OBJECT, abi=FOO_BAR_ABI)
        expect(type(value["two"]).__name__) == "Int8"
        expect(value["three"]) == Name("two")

    def parses_json_text(expect):
        text = '{"from":"alice","to":"bob","quantity":"1.0000 EOS","memo":"hi"}'
        value = decode("transfer", json_text=text, abi=TOKEN_ABI)
        expect(type(value["quantity"])) == Asset
        expect(stringify(value)) == text

    def fills_missing_extensions_with_defaults(expect):
        value = decode(
            "memo_ext",
            value={"from": "alice", "to": "bob", "quantity": "1.0000 EOS", "memo": ""},
            abi=TOKEN_ABI,
        )
        expect(value["tags"]) == []

    def accepts_absent_values_through_optional_aliases(expect):
        expect(decode("maybe", value=None, abi=ALIAS_ABI)) == None
        expect(decode("holder", value={}, abi=ALIAS_ABI)) == {"m": None}
        expect(decode("holder", value={"m": "7"}, abi=ALIAS_ABI)) == {"m": 7}

    def rejects_absent_values_through_required_aliases():
        with raises(NonConformingValueError):
            decode("a1", value=None, abi=ALIAS_ABI)

    def selects_variant_branches(expect):
        expect(decode("name_or_string", value=["string", "hi"], abi=TOKEN_ABI)) == ["string", "hi"]
        expect(decode("name_or_string", value="hi", abi=TOKEN_ABI)) == ["string", "hi"]
        expect(decode("name_or_string", value=Name("foo"), abi=TOKEN_ABI)) == ["name", "foo"]

    def builds_declared_variants(expect):
        thing = decode(Thing, value="hello")
        expect(type(thing)) == Thing
        expect(thing.variant_name) == "string"

    def rejects_unknown_types():
        with raises(UnknownTypeError):
            decode("santa", json_text='"foo"')

    def rejects_missing_members():
        with raises(NonConformingValueError):
            decode("foo", value={"one": "a"}, abi=FOO_BAR_ABI)

    def rejects_non_arrays():
        with raises(NonConformingValueError):
            decode("string[]", value="foo")


def describe_json_projection():
    def projects_typed_values(expect):
        value = decode("bar", data=BAR_HEX, abi=FOO_BAR_ABI)
        expect(objectify(value)) == BAR_OBJECT

    def projects_wide_integers_as_strings(expect):
        expect(stringify(decode("uint64", data="ffffffffffffffff"))) == '"18446744073709551615"'

    def projects_bytes_as_hex(expect):
        expect(objectify({"raw": b"\xbe\xef"})) == {"raw": "beef"}

    def projects_abis(expect):
        abi = ABI.from_value(TOKEN_ABI)
        expect(json.loads(stringify(abi))) == json.loads(TOKEN_ABI)

    def indents_on_request(expect):
        expect(stringify({"a": 1}, indent=2)) == '{\n  "a": 1\n}'
