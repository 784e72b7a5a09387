"""Tests for names, bytes and checksums"""

from pytest import raises

from chainabi.chain import Bytes, Checksum256, Name
from chainabi.chain.name import name_to_string, string_to_name
from chainabi.proto.serialization import BufferUnderrunError, NonConformingValueError
from chainabi.proto.stream import BinaryReader, BinaryWriter


def to_hex(value):
    writer = BinaryWriter()
    value.to_abi(writer)
    return writer.data.hex()


def describe_name():
    def packs_into_64_bits(expect):
        expect(to_hex(Name("foobar"))) == "000000005c73285d"
        expect(to_hex(Name("two"))) == "00000000000028cf"

    def round_trips_through_integers(expect):
        value = string_to_name("eosio.token")
        expect(name_to_string(value)) == "eosio.token"
        expect(Name.from_value(value)) == "eosio.token"
        expect(Name("foobar").value) == int.from_bytes(bytes.fromhex("000000005c73285d"), "little")

    def drops_trailing_dots(expect):
        expect(Name("abc..")) == "abc"

    def decodes(expect):
        expect(Name.from_abi(BinaryReader(bytes.fromhex("00000000000028cf")))) == "two"

    def supports_thirteen_characters(expect):
        expect(Name("zzzzzzzzzzzzj")) == "zzzzzzzzzzzzj"

    def rejects_invalid_names():
        for value in ("Foo", "toolongnameabcd", "abc6", "zzzzzzzzzzzzz"):
            with raises(NonConformingValueError):
                Name.from_value(value)
        with raises(NonConformingValueError):
            Name.from_value(1.5)

    def is_a_string(expect):
        expect(Name("foo").to_json()) == "foo"
        expect(isinstance(Name("foo"), str)) == True


def describe_bytes():
    def accepts_hex_and_byte_lists(expect):
        expect(Bytes.from_value("0xbeef")) == b"\xbe\xef"
        expect(Bytes.from_value([1, 2])) == b"\x01\x02"
        expect(Bytes.from_value("beef").to_json()) == "beef"

    def is_length_prefixed(expect):
        expect(to_hex(Bytes(b"\xbe\xef"))) == "02beef"

    def restores_position_on_underrun(expect):
        reader = BinaryReader(bytes.fromhex("05beef"))
        with raises(BufferUnderrunError):
            Bytes.from_abi(reader)
        expect(reader.position) == 0

    def rejects_bad_hex():
        with raises(NonConformingValueError):
            Bytes.from_value("xyz")


def describe_checksum():
    def requires_exact_size():
        with raises(NonConformingValueError):
            Checksum256.from_value("beef")

    def encodes_raw(expect):
        digest = Checksum256.from_value("ab" * 32)
        expect(to_hex(digest)) == "ab" * 32
        expect(digest.to_json()) == "ab" * 32
        expect(Checksum256.abi_default()) == bytes(32)
