"""
Export aggregation.

Turns resolved matches into purchase rows and renders the vendor CSV:

    Card Name,Set,SKU,Card Type,Quantity,Base Price
    Lightning Bolt,M11,SKU1,Regular,4,2.20
    ...

    --- Summary ---
    Regular Cards,4
    Holo Cards,0
    Foil Cards,0
    Total Price,8.80

Only matches with a selected variant (AUTO_MATCHED or MANUAL_SELECTED)
contribute. Writing the text to disk is the caller's concern.
"""

import csv
from collections.abc import Iterable
from dataclasses import dataclass, replace
from io import StringIO

from deckmatch.models.match import DeckEntryMatch

EXPORT_HEADER = ("Card Name", "Set", "SKU", "Card Type", "Quantity", "Base Price")
SUMMARY_MARKER = "--- Summary ---"

# Always listed in the summary, even at zero
SUMMARY_TYPES = ("Regular", "Holo", "Foil")


@dataclass(frozen=True, slots=True)
class ExportRow:
    """One aggregated purchase line."""

    card_name: str
    set_code: str
    sku: str
    variant_type: str
    quantity: int
    price_in_cents: int

    @property
    def line_total_cents(self) -> int:
        return self.quantity * self.price_in_cents


@dataclass(frozen=True, slots=True)
class ExportSummary:
    """
    Totals for an export.

    Attributes:
        quantities_by_type: Card quantity per variant type, summary order
        total_cents: Sum of quantity * price over all rows
    """

    quantities_by_type: tuple[tuple[str, int], ...]
    total_cents: int

    def quantity_of(self, variant_type: str) -> int:
        for name, quantity in self.quantities_by_type:
            if name.lower() == variant_type.lower():
                return quantity
        return 0


def format_price(cents: int) -> str:
    """Format cents as a plain decimal amount: 1080 -> "10.80"."""
    sign = "-" if cents < 0 else ""
    dollars, remainder = divmod(abs(cents), 100)
    return f"{sign}{dollars}.{remainder:02d}"


def build_export_rows(matches: Iterable[DeckEntryMatch]) -> list[ExportRow]:
    """
    Aggregate resolved matches by (name, set, SKU, finish), summing quantity.

    Rows appear in the order their group was first seen.
    """
    groups: dict[tuple[str, str, str, str], ExportRow] = {}

    for result in matches:
        variant = result.selected_variant
        if variant is None:
            continue
        key = (variant.name_original, variant.set_code, variant.sku, variant.variant_type)
        existing = groups.get(key)
        if existing is None:
            groups[key] = ExportRow(
                card_name=variant.name_original,
                set_code=variant.set_code,
                sku=variant.sku,
                variant_type=variant.variant_type,
                quantity=result.entry.qty,
                price_in_cents=variant.price_in_cents,
            )
        else:
            groups[key] = replace(existing, quantity=existing.quantity + result.entry.qty)

    return list(groups.values())


def summarize_export(rows: Iterable[ExportRow]) -> ExportSummary:
    """Per-type card quantities and the grand total price."""
    quantities: dict[str, int] = {name: 0 for name in SUMMARY_TYPES}
    canonical = {name.lower(): name for name in SUMMARY_TYPES}
    total = 0

    for row in rows:
        name = canonical.get(row.variant_type.lower(), row.variant_type)
        quantities[name] = quantities.get(name, 0) + row.quantity
        total += row.line_total_cents

    return ExportSummary(quantities_by_type=tuple(quantities.items()), total_cents=total)


def render_export_csv(matches: Iterable[DeckEntryMatch]) -> str:
    """Render the export CSV text (header, rows, blank line, summary)."""
    rows = build_export_rows(matches)
    summary = summarize_export(rows)

    buffer = StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(EXPORT_HEADER)
    for row in rows:
        writer.writerow(
            [
                row.card_name,
                row.set_code,
                row.sku,
                row.variant_type,
                row.quantity,
                format_price(row.price_in_cents),
            ]
        )
    buffer.write("\n")
    buffer.write(f"{SUMMARY_MARKER}\n")
    for name, quantity in summary.quantities_by_type:
        writer.writerow([f"{name} Cards", quantity])
    writer.writerow(["Total Price", format_price(summary.total_cents)])
    return buffer.getvalue()
