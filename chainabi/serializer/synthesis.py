"""Derive an ABI from the declared shape of a type descriptor."""

import logging
from dataclasses import dataclass
from typing import Any

from chainabi.chain import ABI, Struct
from chainabi.chain.abi import FieldDef, StructDef, TypeDef, VariantDef
from chainabi.proto.serialization import NonConformingValueError
from chainabi.proto.types import ABIField, ABIType, abi_type_string, descriptor_name

logger = logging.getLogger(__name__)

ROOT_ALIAS = "root"


@dataclass(frozen=True, slots=True)
class SynthesizedABI:
    """Result of synthesis: the ABI plus every descriptor it reached."""

    abi: ABI
    types: tuple[Any, ...]
    root: str


class _Synthesizer:
    def __init__(self) -> None:
        self.aliases: list[TypeDef] = []
        self.structs: list[StructDef] = []
        self.variants: list[VariantDef] = []
        self.seen: list[Any] = []

    def type_string(self, ref: Any) -> str:
        """Render a type reference, synthesizing any descriptor it names."""
        if isinstance(ref, ABIType | ABIField):
            if not isinstance(ref.type, str):
                self.resolve(ref.type)
            return abi_type_string(ref)
        if isinstance(ref, str):
            return ref
        return self.resolve(ref)

    def resolve(self, descriptor: Any) -> str:
        if isinstance(descriptor, type) and issubclass(descriptor, Struct):
            if "abi_name" not in vars(descriptor):
                raise NonConformingValueError(
                    f"Struct subclass {descriptor.__name__} does not declare an abi_name"
                )
        name = descriptor_name(descriptor)
        if any(descriptor is t for t in self.seen):
            return name
        self.seen.append(descriptor)

        alias = getattr(descriptor, "abi_alias", None)
        fields = getattr(descriptor, "abi_fields", None)
        variant = getattr(descriptor, "abi_variant", None)
        if alias is not None:
            self.aliases.append(TypeDef(name, self.type_string(alias)))
        elif fields is not None:
            base = getattr(descriptor, "abi_base", None)
            base_name = self.resolve(base) if base is not None else ""
            members = [FieldDef(f.name, self.type_string(f)) for f in fields]
            self.structs.append(StructDef(name, base_name, members))
        elif variant is not None:
            self.variants.append(VariantDef(name, [self.type_string(t) for t in variant]))
        return name


def synthesize_abi(descriptor: Any) -> SynthesizedABI:
    """Walk a descriptor's declared shape depth-first and build an ABI.

    Aliases come from ``abi_alias``, structs from ``abi_fields`` and
    ``abi_base``, variants from ``abi_variant``. A final ``root`` alias
    points at the descriptor's own name.
    """
    synthesizer = _Synthesizer()
    root = synthesizer.resolve(descriptor)
    if root != ROOT_ALIAS:
        synthesizer.aliases.append(TypeDef(ROOT_ALIAS, root))
    abi = ABI(
        types=synthesizer.aliases,
        structs=synthesizer.structs,
        variants=synthesizer.variants,
    )
    logger.debug(
        "Synthesized ABI for %s: %d structs, %d variants, %d aliases",
        root,
        len(abi.structs),
        len(abi.variants),
        len(abi.types),
    )
    return SynthesizedABI(abi, tuple(synthesizer.seen), root)
