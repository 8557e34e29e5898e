"""
Catalog indexing.

Deduplicates parsed variants and builds the immutable Catalog.

INVARIANT: within a (name_normalized, set_code, variant_type) group exactly
one variant survives, the cheapest one. Ties keep the first-seen listing.
"""

import logging
from collections.abc import Iterable

from deckmatch.models.card_variant import CardVariant
from deckmatch.models.catalog import Catalog

logger = logging.getLogger(__name__)

GroupKey = tuple[str, str, str]


def group_key(variant: CardVariant) -> GroupKey:
    """Deduplication key for a variant."""
    return (variant.name_normalized, variant.set_code, variant.variant_type)


def deduplicate_variants(variants: Iterable[CardVariant]) -> list[CardVariant]:
    """
    Keep the cheapest variant of each (name, set, finish) group.

    Output order follows the first appearance of each group, so the
    result is deterministic for a given input order.
    """
    survivors: dict[GroupKey, CardVariant] = {}
    seen = 0

    for variant in variants:
        seen += 1
        key = group_key(variant)
        current = survivors.get(key)
        # Strictly lower price replaces; equal price keeps the first seen
        if current is None or variant.price_in_cents < current.price_in_cents:
            survivors[key] = variant

    result = list(survivors.values())
    if seen != len(result):
        logger.info(
            "catalog_deduplicated",
            extra={"input_count": seen, "output_count": len(result)},
        )
    return result


def build_catalog(variants: Iterable[CardVariant]) -> Catalog:
    """
    Build an indexed Catalog from variants.

    Deduplication is applied here as well, so the Catalog invariant holds
    no matter where the variants came from.

    Args:
        variants: Parsed variants (possibly with duplicates)

    Returns:
        New immutable Catalog
    """
    return Catalog(tuple(deduplicate_variants(variants)))
