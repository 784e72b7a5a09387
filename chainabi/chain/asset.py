"""Token amounts: symbols, assets and extended assets."""

from __future__ import annotations

import re
from typing import Any, ClassVar, Self

from chainabi.proto.serialization import ABISerializableObject, NonConformingValueError
from chainabi.proto.stream import BinaryReader, BinaryWriter
from chainabi.proto.types import ABIField

from .integer import Int64, UInt64
from .name import Name
from .struct import Struct

SYMBOL_CODE_PATTERN = re.compile(r"^[A-Z]{1,7}$")
SYMBOL_PATTERN = re.compile(r"^(\d+),([A-Z]{1,7})$")
ASSET_PATTERN = re.compile(r"^(-?\d+)(?:\.(\d+))?\s+([A-Z]{1,7})$")
MAX_PRECISION = 18


def _code_to_int(code: str) -> int:
    if not SYMBOL_CODE_PATTERN.match(code):
        raise NonConformingValueError(f"Invalid symbol code: {code!r}")
    return int.from_bytes(code.encode("ascii"), "little")


def _int_to_code(value: int) -> str:
    return value.to_bytes(7, "little").rstrip(b"\x00").decode("ascii")


class SymbolCode(ABISerializableObject, str):
    """Up to seven uppercase letters packed into 64 bits."""

    abi_name: ClassVar[str] = "symbol_code"

    def __new__(cls, value: str) -> Self:
        _code_to_int(value)
        return super().__new__(cls, value)

    @classmethod
    def from_value(cls, value: Any) -> Self:
        if type(value) is cls:
            return value
        if isinstance(value, str):
            return cls(value)
        if isinstance(value, int) and not isinstance(value, bool):
            return cls(_int_to_code(UInt64.from_value(value)))
        raise NonConformingValueError(f"Unable to create symbol code from {value!r}")

    @property
    def value(self) -> UInt64:
        return UInt64(_code_to_int(self))

    @classmethod
    def from_abi(cls, decoder: BinaryReader) -> Self:
        return cls.from_value(UInt64.from_abi(decoder))

    @classmethod
    def abi_default(cls) -> Self:
        return cls("SYS")

    def to_abi(self, encoder: BinaryWriter) -> None:
        self.value.to_abi(encoder)

    def to_json(self) -> str:
        return str(self)


class Symbol(ABISerializableObject):
    """Precision byte followed by a symbol code, JSON form ``4,EOS``."""

    abi_name: ClassVar[str] = "symbol"

    __slots__ = ("precision", "code")

    def __init__(self, precision: int, code: str) -> None:
        if not 0 <= precision <= MAX_PRECISION:
            raise NonConformingValueError(f"Invalid asset precision: {precision}")
        self.precision = precision
        self.code = SymbolCode.from_value(code)

    @classmethod
    def from_value(cls, value: Any) -> Self:
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            match = SYMBOL_PATTERN.match(value.strip())
            if not match:
                raise NonConformingValueError(f"Invalid symbol string: {value!r}")
            return cls(int(match.group(1)), match.group(2))
        if isinstance(value, int) and not isinstance(value, bool):
            raw = UInt64.from_value(value)
            return cls(raw & 0xFF, _int_to_code(raw >> 8))
        raise NonConformingValueError(f"Unable to create symbol from {value!r}")

    @property
    def value(self) -> UInt64:
        return UInt64(self.precision | (_code_to_int(self.code) << 8))

    @property
    def units(self) -> int:
        """Number of integer units in one whole token."""
        return 10**self.precision

    @classmethod
    def from_abi(cls, decoder: BinaryReader) -> Self:
        return cls.from_value(UInt64.from_abi(decoder))

    @classmethod
    def abi_default(cls) -> Self:
        return cls(4, "SYS")

    def to_abi(self, encoder: BinaryWriter) -> None:
        self.value.to_abi(encoder)

    def to_json(self) -> str:
        return str(self)

    def __str__(self) -> str:
        return f"{self.precision},{self.code}"

    def __repr__(self) -> str:
        return f"Symbol({str(self)!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, str):
            try:
                other = Symbol.from_value(other)
            except NonConformingValueError:
                return False
        if not isinstance(other, Symbol):
            return NotImplemented
        return self.precision == other.precision and self.code == other.code

    def __hash__(self) -> int:
        return hash((self.precision, str(self.code)))


class Asset(ABISerializableObject):
    """Fixed point amount with a symbol, JSON form ``1.0000 EOS``."""

    abi_name: ClassVar[str] = "asset"

    __slots__ = ("units", "symbol")

    def __init__(self, units: int, symbol: Symbol | str) -> None:
        self.units = Int64.from_value(units)
        self.symbol = Symbol.from_value(symbol)

    @classmethod
    def from_value(cls, value: Any) -> Self:
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            raise NonConformingValueError(f"Unable to create asset from {value!r}")
        match = ASSET_PATTERN.match(value.strip())
        if not match:
            raise NonConformingValueError(f"Invalid asset string: {value!r}")
        whole, fraction, code = match.groups()
        fraction = fraction or ""
        precision = len(fraction)
        negative = whole.startswith("-")
        units = int(whole.lstrip("-") + fraction)
        return cls(-units if negative else units, Symbol(precision, code))

    @property
    def value(self) -> float:
        return self.units / self.symbol.units

    @classmethod
    def from_abi(cls, decoder: BinaryReader) -> Self:
        units = Int64.from_abi(decoder)
        return cls(units, Symbol.from_abi(decoder))

    @classmethod
    def abi_default(cls) -> Self:
        return cls(0, Symbol.abi_default())

    def to_abi(self, encoder: BinaryWriter) -> None:
        self.units.to_abi(encoder)
        self.symbol.to_abi(encoder)

    def to_json(self) -> str:
        return str(self)

    def __str__(self) -> str:
        digits = str(abs(self.units))
        precision = self.symbol.precision
        sign = "-" if self.units < 0 else ""
        if precision:
            digits = digits.rjust(precision + 1, "0")
            digits = f"{digits[:-precision]}.{digits[-precision:]}"
        return f"{sign}{digits} {self.symbol.code}"

    def __repr__(self) -> str:
        return f"Asset({str(self)!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, str):
            try:
                other = Asset.from_value(other)
            except NonConformingValueError:
                return False
        if not isinstance(other, Asset):
            return NotImplemented
        return self.units == other.units and self.symbol == other.symbol

    def __hash__(self) -> int:
        return hash((int(self.units), self.symbol))


class ExtendedAsset(Struct):
    """An asset qualified by the contract that issued it."""

    abi_name: ClassVar[str] = "extended_asset"
    abi_fields = (
        ABIField("quantity", Asset),
        ABIField("contract", Name),
    )
