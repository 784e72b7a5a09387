"""Tests for error kinds and error paths"""

from pytest import raises

from chainabi.proto.serialization import (
    BufferUnderrunError,
    CircularTypeError,
    NonConformingValueError,
    SerializationError,
    UnknownTypeError,
)
from chainabi.serializer import decode, encode

NESTED_ABI = {
    "structs": [
        {"name": "type1", "base": "", "fields": [{"name": "foo", "type": "type2?"}]},
        {"name": "type2", "base": "", "fields": [{"name": "bar", "type": "type3[]"}]},
        {"name": "type3", "base": "", "fields": [{"name": "baz", "type": "int8"}]},
    ]
}
NESTED_OBJECT = {"foo": {"bar": [{"baz": "not int"}]}}
NESTED_PATH = "root<type1>.foo<type2?>.bar<type3[]>.0.baz<int8>"


def describe_error_kinds():
    def share_a_base_class(expect):
        for kind in (UnknownTypeError, NonConformingValueError, BufferUnderrunError):
            expect(issubclass(kind, SerializationError)) == True
        expect(issubclass(SerializationError, RuntimeError)) == True

    def keep_only_the_first_annotation(expect):
        error = NonConformingValueError("bad value")
        error.annotate("Decoding", "root<a>")
        error.annotate("Decoding", "root<b>")
        expect(error.path) == "root<a>"
        expect(str(error)) == "Decoding error at root<a>: bad value"
        expect(error.message) == "bad value"


def describe_error_paths():
    def point_at_the_failing_member_when_decoding(expect):
        with raises(NonConformingValueError) as excinfo:
            decode("type1", value=NESTED_OBJECT, abi=NESTED_ABI)
        expect(excinfo.value.path) == NESTED_PATH
        expect(str(excinfo.value)).includes(f"Decoding error at {NESTED_PATH}: ")
        expect(str(excinfo.value)).includes("not int")

    def point_at_the_failing_member_when_encoding(expect):
        with raises(NonConformingValueError) as excinfo:
            encode(NESTED_OBJECT, "type1", abi=NESTED_ABI)
        expect(str(excinfo.value)).includes(f"Encoding error at {NESTED_PATH}: ")

    def report_buffer_underruns(expect):
        with raises(BufferUnderrunError) as excinfo:
            decode("uint64", data="0102")
        expect(excinfo.value.path) == "root<uint64>"

    def report_underruns_inside_structs(expect):
        fields = [{"name": "a", "type": "uint8"}, {"name": "b", "type": "uint32"}]
        abi = {"structs": [{"name": "pair", "base": "", "fields": fields}]}
        with raises(BufferUnderrunError) as excinfo:
            decode("pair", data="0102", abi=abi)
        expect(excinfo.value.path) == "root<pair>.b<uint32>"

    def report_none_for_required_values(expect):
        with raises(NonConformingValueError) as excinfo:
            encode(None, "string")
        expect(str(excinfo.value)).includes("root<string>")

    def report_unknown_types(expect):
        abi = {"structs": [{"name": "s", "base": "", "fields": [{"name": "f", "type": "santa"}]}]}
        with raises(UnknownTypeError) as excinfo:
            encode({"f": 1}, "s", abi=abi)
        expect(excinfo.value.path) == "root<s>.f<santa>"

    def report_circular_structs_in_binary():
        abi = {"structs": [{"name": "loop", "base": "", "fields": [{"name": "f", "type": "loop"}]}]}
        with raises(CircularTypeError):
            decode("loop", data="00", abi=abi)

    def report_circular_aliases():
        abi = {
            "types": [
                {"new_type_name": "b1", "type": "b2"},
                {"new_type_name": "b2", "type": "b1"},
            ]
        }
        with raises(CircularTypeError):
            decode("b1", value="x", abi=abi)
