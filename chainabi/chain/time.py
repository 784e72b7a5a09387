"""Timestamps, JSON encoded as ISO 8601 strings in UTC without offset."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Any, ClassVar, Self

from chainabi.proto.serialization import NonConformingValueError

from .integer import Int64, UInt32

EPOCH = datetime(1970, 1, 1, tzinfo=UTC)
BLOCK_EPOCH = datetime(2000, 1, 1, tzinfo=UTC)


def _parse_date(value: str) -> datetime:
    try:
        rv = datetime.fromisoformat(value)
    except ValueError as e:
        raise NonConformingValueError(f"Invalid date: {value!r}") from e
    if rv.tzinfo is None:
        rv = rv.replace(tzinfo=UTC)
    return rv


def _format_date(value: datetime, timespec: str) -> str:
    return value.astimezone(UTC).replace(tzinfo=None).isoformat(timespec=timespec)


class TimePoint(Int64):
    """Microseconds since the unix epoch."""

    abi_name: ClassVar[str] = "time_point"

    @classmethod
    def from_value(cls, value: Any) -> Self:
        if isinstance(value, str) and not value.strip().lstrip("-").isdigit():
            value = _parse_date(value)
        if isinstance(value, datetime):
            return cls((value - EPOCH) // timedelta(microseconds=1))
        return super().from_value(value)

    def to_datetime(self) -> datetime:
        return EPOCH + timedelta(microseconds=int(self))

    def to_json(self) -> str:
        return _format_date(self.to_datetime(), "milliseconds")


class TimePointSec(UInt32):
    """Seconds since the unix epoch."""

    abi_name: ClassVar[str] = "time_point_sec"

    @classmethod
    def from_value(cls, value: Any) -> Self:
        if isinstance(value, str) and not value.strip().isdigit():
            value = _parse_date(value)
        if isinstance(value, datetime):
            return cls((value - EPOCH) // timedelta(seconds=1))
        return super().from_value(value)

    def to_datetime(self) -> datetime:
        return EPOCH + timedelta(seconds=int(self))

    def to_json(self) -> str:
        return _format_date(self.to_datetime(), "seconds")


class BlockTimestamp(UInt32):
    """Half second block slots since 2000-01-01."""

    abi_name: ClassVar[str] = "block_timestamp_type"

    @classmethod
    def from_value(cls, value: Any) -> Self:
        if isinstance(value, str) and not value.strip().isdigit():
            value = _parse_date(value)
        if isinstance(value, datetime):
            return cls((value - BLOCK_EPOCH) // timedelta(milliseconds=500))
        return super().from_value(value)

    def to_datetime(self) -> datetime:
        return BLOCK_EPOCH + timedelta(milliseconds=500 * int(self))

    def to_json(self) -> str:
        return _format_date(self.to_datetime(), "milliseconds")
