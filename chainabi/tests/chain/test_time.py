"""Tests for timestamp types"""

from datetime import UTC, datetime

from pytest import raises

from chainabi.chain import AnyValue, BlockTimestamp, TimePoint, TimePointSec
from chainabi.proto.serialization import NonConformingValueError
from chainabi.proto.stream import BinaryWriter


def to_hex(value):
    writer = BinaryWriter()
    value.to_abi(writer)
    return writer.data.hex()


def describe_time_point():
    def counts_microseconds(expect):
        value = TimePoint.from_value(1234567890123000)
        expect(to_hex(value)) == "f8b88a3cd5620400"
        expect(value.to_json()) == "2009-02-13T23:31:30.123"

    def parses_iso_strings_as_utc(expect):
        expect(TimePoint.from_value("2009-02-13T23:31:30.123")) == 1234567890123000
        expect(TimePoint.from_value("2009-02-13T23:31:30.123Z")) == 1234567890123000

    def accepts_datetimes(expect):
        moment = datetime(2009, 2, 13, 23, 31, 30, tzinfo=UTC)
        expect(TimePoint.from_value(moment)) == 1234567890000000
        expect(TimePoint(1234567890000000).to_datetime()) == moment

    def rejects_garbage():
        with raises(NonConformingValueError):
            TimePoint.from_value("yesterday")


def describe_time_point_sec():
    def counts_seconds(expect):
        value = TimePointSec.from_value(1234567890)
        expect(to_hex(value)) == "d2029649"
        expect(value.to_json()) == "2009-02-13T23:31:30"

    def parses_iso_strings(expect):
        expect(TimePointSec.from_value("2009-02-13T23:31:30")) == 1234567890


def describe_block_timestamp():
    def counts_half_seconds_since_2000(expect):
        expect(BlockTimestamp.from_value("2000-01-01T00:00:01.000")) == 2
        expect(BlockTimestamp(3).to_json()) == "2000-01-01T00:00:01.500"
        expect(BlockTimestamp.abi_name) == "block_timestamp_type"


def describe_any_value():
    def wraps_without_validation(expect):
        value = AnyValue.from_value({"a": [1, 2]})
        expect(value.to_json()) == {"a": [1, 2]}
        expect(AnyValue.from_value(value)) == value
