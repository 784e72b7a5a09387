"""Binary reader and writer for the ABI wire format.

All multi-byte integers are little-endian. Variable length integers use
7-bit groups with a continuation bit; signed varints are zig-zag encoded.
"""

import logging
import struct
from typing import Any

from .serialization import BufferUnderrunError, NonConformingValueError

logger = logging.getLogger(__name__)

FLOAT_FORMATS: dict[int, str] = {4: "<f", 8: "<d"}

# varuint32 needs at most 5 groups of 7 bits
MAX_VARUINT32_BYTES = 5


class BinaryReader:
    """Cursor over an immutable buffer.

    Every read is bounds checked before it happens; a read that would run
    past the end raises BufferUnderrunError and leaves the position unchanged.
    """

    def __init__(
        self,
        data: bytes | bytearray | memoryview,
        *,
        ignore_invalid_utf8: bool = False,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        self._data = bytes(data)
        self._pos = 0
        self.ignore_invalid_utf8 = ignore_invalid_utf8
        self.metadata: dict[str, Any] = metadata if metadata is not None else {}

    @property
    def position(self) -> int:
        return self._pos

    @property
    def remaining(self) -> int:
        return len(self._data) - self._pos

    def can_read(self, size: int = 1) -> bool:
        """Check whether ``size`` more bytes are available."""
        return self._pos + size <= len(self._data)

    def set_position(self, pos: int) -> None:
        if pos < 0 or pos > len(self._data):
            raise BufferUnderrunError(f"Invalid position {pos}")
        self._pos = pos

    def advance(self, size: int) -> None:
        self._ensure(size)
        self._pos += size

    def _ensure(self, size: int) -> None:
        if size < 0 or not self.can_read(size):
            raise BufferUnderrunError(
                f"Read past end of buffer: need {size} bytes at offset {self._pos}, "
                f"have {self.remaining}"
            )

    def read_byte(self) -> int:
        self._ensure(1)
        value = self._data[self._pos]
        self._pos += 1
        return value

    def read_bytes(self, size: int) -> bytes:
        self._ensure(size)
        value = self._data[self._pos : self._pos + size]
        self._pos += size
        return value

    def read_num(self, byte_width: int, signed: bool = False) -> int:
        """Read a fixed width little-endian integer."""
        return int.from_bytes(self.read_bytes(byte_width), "little", signed=signed)

    def read_float(self, byte_width: int) -> float:
        """Read an IEEE 754 float of 4 or 8 bytes."""
        (value,) = struct.unpack(FLOAT_FORMATS[byte_width], self.read_bytes(byte_width))
        return value

    def read_varuint32(self) -> int:
        value = 0
        shift = 0
        pos = self._pos
        while True:
            if pos >= len(self._data):
                raise BufferUnderrunError(
                    f"Read past end of buffer in varint at offset {self._pos}"
                )
            if pos - self._pos >= MAX_VARUINT32_BYTES:
                raise NonConformingValueError(f"Varint at offset {self._pos} is too long")
            byte = self._data[pos]
            pos += 1
            value |= (byte & 0x7F) << shift
            shift += 7
            if not byte & 0x80:
                break
        if value > 0xFFFFFFFF:
            raise NonConformingValueError(f"Varint at offset {self._pos} overflows 32 bits")
        self._pos = pos
        return value

    def read_varint32(self) -> int:
        value = self.read_varuint32()
        if value & 1:
            return (~value) >> 1
        return value >> 1

    def read_string(self) -> str:
        start = self._pos
        size = self.read_varuint32()
        try:
            raw = self.read_bytes(size)
        except BufferUnderrunError:
            self._pos = start
            raise
        if self.ignore_invalid_utf8:
            return raw.decode("utf-8", errors="replace")
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as e:
            self._pos = start
            raise NonConformingValueError(f"Invalid UTF-8 string at offset {start}") from e


class BinaryWriter:
    """Growable output buffer.

    The backing bytearray grows in whole pages only when a write would
    overflow it. ``data`` returns exactly the bytes written so far.
    """

    def __init__(self, page_size: int = 1024, *, metadata: dict[str, Any] | None = None) -> None:
        if page_size <= 0:
            raise ValueError("page_size must be positive")
        self.page_size = page_size
        self._buffer = bytearray(page_size)
        self._pos = 0
        self.metadata: dict[str, Any] = metadata if metadata is not None else {}

    @property
    def position(self) -> int:
        return self._pos

    @property
    def capacity(self) -> int:
        return len(self._buffer)

    @property
    def data(self) -> bytes:
        return bytes(self._buffer[: self._pos])

    def _ensure(self, size: int) -> None:
        if self._pos + size <= len(self._buffer):
            return
        missing = self._pos + size - len(self._buffer)
        pages = -(-missing // self.page_size)
        self._buffer.extend(bytes(pages * self.page_size))
        logger.debug("Grew writer buffer to %d bytes", len(self._buffer))

    def write_byte(self, value: int) -> None:
        if not 0 <= value <= 0xFF:
            raise NonConformingValueError(f"Byte out of range: {value}")
        self._ensure(1)
        self._buffer[self._pos] = value
        self._pos += 1

    def write_bytes(self, value: bytes | bytearray | memoryview) -> None:
        size = len(value)
        self._ensure(size)
        self._buffer[self._pos : self._pos + size] = value
        self._pos += size

    def write_num(self, value: int, byte_width: int, signed: bool = False) -> None:
        """Write a fixed width little-endian integer."""
        try:
            raw = int(value).to_bytes(byte_width, "little", signed=signed)
        except OverflowError as e:
            kind = "int" if signed else "uint"
            raise NonConformingValueError(f"{value} does not fit in {kind}{byte_width * 8}") from e
        self.write_bytes(raw)

    def write_float(self, value: float, byte_width: int) -> None:
        self.write_bytes(struct.pack(FLOAT_FORMATS[byte_width], value))

    def write_varuint32(self, value: int) -> None:
        if not 0 <= value <= 0xFFFFFFFF:
            raise NonConformingValueError(f"{value} does not fit in varuint32")
        while True:
            if value >> 7:
                self.write_byte(0x80 | (value & 0x7F))
                value >>= 7
            else:
                self.write_byte(value)
                break

    def write_varint32(self, value: int) -> None:
        if not -0x80000000 <= value <= 0x7FFFFFFF:
            raise NonConformingValueError(f"{value} does not fit in varint32")
        self.write_varuint32(((value << 1) ^ (value >> 31)) & 0xFFFFFFFF)

    def write_string(self, value: str) -> None:
        raw = value.encode("utf-8")
        self.write_varuint32(len(raw))
        self.write_bytes(raw)
