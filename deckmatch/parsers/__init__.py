from deckmatch.parsers.catalog import (
    canonical_variant_type,
    load_catalog,
    parse_catalog,
    parse_price_cents,
)
from deckmatch.parsers.decklist import parse_decklist, parse_line

__all__ = [
    "canonical_variant_type",
    "load_catalog",
    "parse_catalog",
    "parse_decklist",
    "parse_line",
    "parse_price_cents",
]
