"""
Catalog Model.

An immutable snapshot of the vendor catalog with its name index.

INVARIANTS:
- The index is built eagerly at construction and never mutated
- Every variant is indexed under exactly one key (its name_normalized)
- A refresh produces a new Catalog; readers never see a partial update
"""

from collections.abc import Iterator
from dataclasses import dataclass, field
from types import MappingProxyType

from deckmatch.models.card_variant import CardVariant

# Separator used by split, adventure and modal double-faced names
FACE_SEPARATOR = " // "


@dataclass(frozen=True)
class Catalog:
    """
    Indexed vendor catalog.

    Attributes:
        variants: All variants, in catalog order
        index: name_normalized -> variants under that key (catalog order)
        face_index: primary face key -> variants of multi-face cards
    """

    variants: tuple[CardVariant, ...]
    index: MappingProxyType[str, tuple[CardVariant, ...]] = field(
        init=False, repr=False, compare=False
    )
    face_index: MappingProxyType[str, tuple[CardVariant, ...]] = field(
        init=False, repr=False, compare=False
    )
    _by_sku: MappingProxyType[str, CardVariant] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        # Local import: services depend on models, not the reverse
        from deckmatch.services.normalizer import primary_face

        # Accept any sequence but store a tuple so the snapshot cannot change
        variants = tuple(self.variants)
        object.__setattr__(self, "variants", variants)

        by_name: dict[str, list[CardVariant]] = {}
        by_face: dict[str, list[CardVariant]] = {}
        by_sku: dict[str, CardVariant] = {}

        for variant in variants:
            by_name.setdefault(variant.name_normalized, []).append(variant)
            by_sku.setdefault(variant.sku, variant)
            if FACE_SEPARATOR in variant.name_original:
                face = primary_face(variant.name_original)
                if face and face != variant.name_normalized:
                    by_face.setdefault(face, []).append(variant)

        object.__setattr__(
            self, "index", MappingProxyType({k: tuple(v) for k, v in by_name.items()})
        )
        object.__setattr__(
            self, "face_index", MappingProxyType({k: tuple(v) for k, v in by_face.items()})
        )
        object.__setattr__(self, "_by_sku", MappingProxyType(by_sku))

    def by_normalized_name(self, key: str) -> tuple[CardVariant, ...]:
        """Look up variants by normalized name. Empty tuple if absent."""
        return self.index.get(key, ())

    def by_face(self, key: str) -> tuple[CardVariant, ...]:
        """Look up multi-face variants by the normalized primary face."""
        return self.face_index.get(key, ())

    def by_sku(self, sku: str) -> CardVariant | None:
        """Look up a variant by SKU (first listing wins)."""
        return self._by_sku.get(sku)

    def keys(self) -> tuple[str, ...]:
        """All normalized names, in first-seen order."""
        return tuple(self.index.keys())

    def __len__(self) -> int:
        return len(self.variants)

    def __iter__(self) -> Iterator[CardVariant]:
        return iter(self.variants)
