"""
Price a decklist against a saved catalog page.

Reads the catalog (HTML or CSV) and the decklist from local files, runs the
match pass and writes the purchase CSV.

Usage:
    python -m deckmatch.jobs.price_deck --catalog catalog.html --deck deck.txt
"""

import argparse
import logging
import sys
from collections.abc import Sequence
from datetime import datetime
from pathlib import Path

from deckmatch.config import settings
from deckmatch.models.failure import CatalogParseError
from deckmatch.models.match import DeckEntryMatch, MatchConfig, MatchStatus
from deckmatch.parsers.catalog import load_catalog
from deckmatch.parsers.decklist import parse_decklist
from deckmatch.services.export import format_price, render_export_csv
from deckmatch.services.matcher import apply_inclusion_policy, match_all, summarize_matches
from deckmatch.services.promotions import calculate_promotion

logger = logging.getLogger(__name__)


def price_deck(
    catalog_text: str,
    deck_text: str,
    include_sideboard: bool = False,
    include_commanders: bool = False,
    fuzzy_enabled: bool = True,
) -> list[DeckEntryMatch]:
    """
    Run the full pipeline on raw catalog and decklist text.

    Raises:
        CatalogParseError: If the catalog cannot be read
    """
    catalog = load_catalog(catalog_text)
    entries = apply_inclusion_policy(
        parse_decklist(deck_text),
        include_sideboard=include_sideboard,
        include_commanders=include_commanders,
    )
    config = MatchConfig.create(
        variant_priority=settings.variant_priority,
        set_priority=settings.set_priority,
        fuzzy_enabled=fuzzy_enabled,
    )
    return match_all(entries, catalog, config)


def default_output_path() -> Path:
    return Path(f"export-{datetime.now().strftime('%Y%m%d-%H%M%S')}.csv")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Match a decklist against a vendor catalog")
    parser.add_argument("--catalog", type=Path, required=True, help="Catalog HTML or CSV file")
    parser.add_argument("--deck", type=Path, required=True, help="Decklist text file")
    parser.add_argument("--output", type=Path, default=None, help="Export CSV path")
    parser.add_argument(
        "--include-sideboard",
        action="store_true",
        default=settings.include_sideboard,
        help="Match and export sideboard entries",
    )
    parser.add_argument(
        "--include-commanders",
        action="store_true",
        default=settings.include_commanders,
        help="Match and export commander entries",
    )
    parser.add_argument(
        "--no-fuzzy",
        dest="fuzzy_enabled",
        action="store_false",
        default=settings.fuzzy_enabled,
        help="Disable the edit-distance fallback",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """CLI entry point. Returns the process exit code."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    args = build_parser().parse_args(argv)

    try:
        results = price_deck(
            args.catalog.read_text(encoding="utf-8"),
            args.deck.read_text(encoding="utf-8"),
            include_sideboard=args.include_sideboard,
            include_commanders=args.include_commanders,
            fuzzy_enabled=args.fuzzy_enabled,
        )
    except CatalogParseError as e:
        logger.error("Failed to parse catalog: %s", e.message)
        if e.snippet:
            logger.error("Catalog starts with: %r", e.snippet)
        return 1

    for result in results:
        if result.status in (MatchStatus.AMBIGUOUS, MatchStatus.NOT_FOUND):
            logger.warning(
                "%s: %s (%d candidates)",
                result.status.value,
                result.entry.original_line,
                len(result.candidates),
            )

    summary = summarize_matches(results)
    logger.info(
        "Matched %d of %d entries (%d ambiguous, %d not found, %d excluded)",
        summary.auto_matched,
        summary.total,
        summary.ambiguous,
        summary.not_found,
        summary.unresolved,
    )

    output = args.output or default_output_path()
    output.write_text(render_export_csv(results), encoding="utf-8")

    promotion = calculate_promotion(results)
    logger.info(
        "Wrote %s: total %s, %d%% off, shipping %s, grand total %s",
        output,
        format_price(promotion.base_total_cents),
        promotion.discount_percent,
        format_price(promotion.shipping_cents),
        format_price(promotion.grand_total_cents),
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
