"""Chain value types and the ABI schema model."""

from .abi import (
    ABI,
    ActionDef,
    ActionResultDef,
    ClauseDef,
    FieldDef,
    ResolvedField,
    ResolvedType,
    StructDef,
    TableDef,
    TypeDef,
    VariantDef,
)
from .any import AnyValue
from .asset import Asset, ExtendedAsset, Symbol, SymbolCode
from .bytes import Bytes
from .checksum import Checksum160, Checksum256, Checksum512
from .float import Float32, Float64
from .integer import (
    Int8,
    Int16,
    Int32,
    Int64,
    Int128,
    UInt8,
    UInt16,
    UInt32,
    UInt64,
    UInt128,
    VarInt32,
    VarUInt32,
)
from .name import Name
from .struct import Struct
from .time import BlockTimestamp, TimePoint, TimePointSec
from .variant import Variant

__all__ = [
    "ABI",
    "ActionDef",
    "ActionResultDef",
    "AnyValue",
    "Asset",
    "BlockTimestamp",
    "Bytes",
    "Checksum160",
    "Checksum256",
    "Checksum512",
    "ClauseDef",
    "ExtendedAsset",
    "FieldDef",
    "Float32",
    "Float64",
    "Int8",
    "Int16",
    "Int32",
    "Int64",
    "Int128",
    "Name",
    "ResolvedField",
    "ResolvedType",
    "Struct",
    "StructDef",
    "Symbol",
    "SymbolCode",
    "TableDef",
    "TimePoint",
    "TimePointSec",
    "TypeDef",
    "UInt8",
    "UInt16",
    "UInt32",
    "UInt64",
    "UInt128",
    "VarInt32",
    "VarUInt32",
    "Variant",
]
