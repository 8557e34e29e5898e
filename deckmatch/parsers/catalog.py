"""
Parser for vendor catalog sources.

Supports:
- HTML tables: the largest <table> whose header row names the
  Name, Set, SKU, Type and Price columns (aliases allowed)
- HTML card blocks: one element per listing holding
  "<strong>SKU:</strong> ..." style label/value pairs
- CSV exports: header row with SKU, Card Name, Set, Card Type and an
  optional Base Price column

Every source yields CardVariants which are then deduplicated: the cheapest
listing of each (name, set, finish) group survives.

Failure is a CatalogParseError carrying the start of the offending input.
Individual bad rows are skipped, never raised.
"""

import csv
import logging
import re
from collections.abc import Iterable, Mapping
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from io import StringIO

from bs4 import BeautifulSoup, NavigableString, Tag

from deckmatch.config import settings
from deckmatch.models.card_variant import CardVariant
from deckmatch.models.catalog import Catalog
from deckmatch.models.failure import CatalogParseError, FailureKind
from deckmatch.services.catalog_index import build_catalog, deduplicate_variants
from deckmatch.services.normalizer import normalize

logger = logging.getLogger(__name__)

# Header text (lowercase, punctuation collapsed) -> logical column
HEADER_ALIASES: dict[str, str] = {
    "name": "name",
    "card name": "name",
    "cardname": "name",
    "card": "name",
    "set": "set",
    "set code": "set",
    "edition": "set",
    "sku": "sku",
    "item number": "sku",
    "type": "type",
    "card type": "type",
    "cardtype": "type",
    "finish": "type",
    "variant": "type",
    "price": "price",
    "base price": "price",
    "baseprice": "price",
    "collector number": "collector_number",
    "collector": "collector_number",
    "number": "collector_number",
    "image": "image_url",
    "image url": "image_url",
}

REQUIRED_COLUMNS = ("name", "set", "sku", "type", "price")

# CSV exports may omit prices; the per-type default price applies instead
CSV_REQUIRED_COLUMNS = ("name", "set", "sku", "type")

# Set codes as vendors print them, e.g. "M11", "LEA", "SLP"
SET_CODE_PATTERN = re.compile(r"^[A-Z0-9]{2,5}$")

# Trailing set code in a name cell: "An Offer You Can't Refuse SLP"
NAME_SET_SUFFIX = re.compile(r" ([A-Z0-9]{2,5})$")

# Trailing collector number in a name cell: "Lightning Bolt #163"
NAME_COLLECTOR_SUFFIX = re.compile(r" #([0-9A-Za-z]+)$")

# Collapsed single-line exports: every row starts with a "SKU<digits>," token
COLLAPSED_ROW_START = re.compile(r"[ \t]+(SKU\d+,)")

_TAG_PATTERN = re.compile(r"<[^>]+>")
_WHITESPACE = re.compile(r"\s+")
_HTML_HINT = re.compile(r"<\s*(?:html|body|table|tr|td|th|div|p|strong|span)\b", re.IGNORECASE)
_HEADER_PUNCTUATION = re.compile(r"[^a-z0-9]+")

REGULAR = "Regular"
FOIL = "Foil"
HOLO = "Holo"

_REGULAR_WORDS = frozenset({"", "regular", "normal", "non-foil", "nonfoil", "non foil"})


# =============================================================================
# FIELD CLEANING
# =============================================================================


def normalize_header(header: str) -> str | None:
    """Map a header cell to its logical column, or None if unknown."""
    spaced = _HEADER_PUNCTUATION.sub(" ", header.lower()).strip()
    if spaced in HEADER_ALIASES:
        return HEADER_ALIASES[spaced]
    return HEADER_ALIASES.get(spaced.replace(" ", ""))


def map_columns(headers: Iterable[str]) -> dict[str, int]:
    """Map logical column names to cell indexes (first occurrence wins)."""
    columns: dict[str, int] = {}
    for i, header in enumerate(headers):
        column = normalize_header(header)
        if column is not None and column not in columns:
            columns[column] = i
    return columns


def canonical_variant_type(raw: str) -> str:
    """
    Canonicalize a finish description.

    "Foil", "Etched Foil", "Holofoil" -> Foil; "Holo" -> Holo;
    blank, "Regular", "Non-Foil" -> Regular. Anything else is kept as written.
    """
    text = _WHITESPACE.sub(" ", raw).strip()
    lower = text.lower()
    if lower in _REGULAR_WORDS:
        return REGULAR
    if "foil" in lower:
        return FOIL
    if "holo" in lower:
        return HOLO
    if "regular" in lower or "normal" in lower:
        return REGULAR
    return text


def parse_price_cents(raw: str | None) -> int | None:
    """
    Parse a price cell to whole cents.

    Strips currency symbols and thousands separators and rounds half up.
    When both "." and "," appear, the later one is the decimal separator
    ("1,234.56" and "1.234,56"). A lone comma followed by exactly two digits
    is read as a decimal comma.

    Returns:
        Cents, or None if the cell holds no readable number.
    """
    if raw is None:
        return None
    cleaned = re.sub(r"[^0-9.,]", "", raw)
    if not cleaned:
        return None

    if "." in cleaned and "," in cleaned:
        if cleaned.rfind(",") > cleaned.rfind("."):
            cleaned = cleaned.replace(".", "").replace(",", ".")
        else:
            cleaned = cleaned.replace(",", "")
    elif cleaned.count(",") == 1 and re.search(r",\d{2}$", cleaned):
        cleaned = cleaned.replace(",", ".")
    else:
        cleaned = cleaned.replace(",", "")

    try:
        dollars = Decimal(cleaned)
    except InvalidOperation:
        return None
    return int((dollars * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _clean_cell(value: str) -> str:
    """Strip HTML tags and common entities from a CSV cell."""
    text = _TAG_PATTERN.sub(" ", value)
    text = text.replace("&nbsp;", " ").replace("&amp;", "&")
    return _WHITESPACE.sub(" ", text).strip()


def _is_type_cell(value: str) -> bool:
    lower = value.lower()
    return "foil" in lower or "holo" in lower or "regular" in lower


def make_variant(
    name: str,
    set_code: str,
    sku: str,
    type_raw: str,
    price_raw: str | None,
    type_prices: Mapping[str, int],
    collector_number: str | None = None,
    image_url: str | None = None,
) -> CardVariant | None:
    """
    Build a CardVariant from cleaned field values.

    Returns None when name or SKU is blank. A blank or zero price falls
    back to the default price for the variant type.
    """
    name = name.strip()
    sku = sku.strip()
    if not name or not sku:
        return None

    variant_type = canonical_variant_type(type_raw)
    price = parse_price_cents(price_raw)
    if not price:
        price = type_prices.get(variant_type, price or 0)

    return CardVariant(
        name_original=name,
        name_normalized=normalize(name),
        set_code=set_code.strip(),
        sku=sku,
        variant_type=variant_type,
        price_in_cents=max(price, 0),
        collector_number=collector_number or None,
        image_url=image_url or None,
    )


# =============================================================================
# HTML
# =============================================================================


def _cell_value(cell: Tag, column: str) -> str:
    if column == "image_url":
        img = cell.find("img")
        if isinstance(img, Tag) and img.get("src"):
            return str(img["src"])
    return _WHITESPACE.sub(" ", cell.get_text(" ", strip=True)).strip()


def _best_table(soup: BeautifulSoup) -> tuple[list[Tag], dict[str, int]] | None:
    """
    Pick the qualifying table with the most rows.

    A table qualifies when its first row names every required column.
    Ties keep the first table in document order.
    """
    best: tuple[list[Tag], dict[str, int]] | None = None

    for table in soup.find_all("table"):
        rows = [row for row in table.find_all("tr") if isinstance(row, Tag)]
        if not rows:
            continue
        header_cells = rows[0].find_all(["th", "td"])
        columns = map_columns(cell.get_text(" ", strip=True) for cell in header_cells)
        if any(column not in columns for column in REQUIRED_COLUMNS):
            continue
        if best is None or len(rows) > len(best[0]):
            best = (rows, columns)

    return best


def _variants_from_table(
    rows: list[Tag],
    columns: dict[str, int],
    type_prices: Mapping[str, int],
) -> tuple[list[CardVariant], int]:
    variants: list[CardVariant] = []
    skipped = 0
    width = max(columns.values()) + 1

    for row in rows[1:]:
        cells = row.find_all(["td", "th"])
        if len(cells) < width:
            skipped += 1
            continue

        def get(column: str, cells: list[Tag] = cells) -> str:
            idx = columns.get(column)
            if idx is None:
                return ""
            return _cell_value(cells[idx], column)

        variant = make_variant(
            name=get("name"),
            set_code=get("set"),
            sku=get("sku"),
            type_raw=get("type"),
            price_raw=get("price"),
            type_prices=type_prices,
            collector_number=get("collector_number"),
            image_url=get("image_url"),
        )
        if variant is None:
            skipped += 1
            continue
        variants.append(variant)

    return variants, skipped


def _label_value(strong: Tag) -> str:
    """Text following a <strong>Label:</strong> up to the next label."""
    parts: list[str] = []
    for sibling in strong.next_siblings:
        if isinstance(sibling, Tag):
            if sibling.name == "strong":
                break
            parts.append(sibling.get_text(" ", strip=True))
        elif isinstance(sibling, NavigableString):
            parts.append(str(sibling))
    value = _WHITESPACE.sub(" ", " ".join(parts)).strip()
    return value.lstrip(":").strip()


def _variants_from_blocks(
    soup: BeautifulSoup,
    type_prices: Mapping[str, int],
) -> tuple[list[CardVariant], int]:
    """Parse listings rendered as blocks of labelled fields."""
    variants: list[CardVariant] = []
    skipped = 0
    seen_blocks: set[int] = set()

    for strong in soup.find_all("strong"):
        if not isinstance(strong, Tag):
            continue
        if normalize_header(strong.get_text(strip=True).rstrip(":")) != "sku":
            continue
        block = strong.find_parent(["div", "li", "article", "section"])
        if block is None or id(block) in seen_blocks:
            continue
        seen_blocks.add(id(block))

        fields: dict[str, str] = {}
        for label in block.find_all("strong"):
            column = normalize_header(label.get_text(strip=True).rstrip(":"))
            if column is not None and column not in fields:
                fields[column] = _label_value(label)

        if any(column not in fields for column in ("name", "set", "sku", "type")):
            skipped += 1
            continue

        img = block.find("img")
        image_url = str(img["src"]) if isinstance(img, Tag) and img.get("src") else None

        variant = make_variant(
            name=fields["name"],
            set_code=fields["set"],
            sku=fields["sku"],
            type_raw=fields["type"],
            price_raw=fields.get("price"),
            type_prices=type_prices,
            collector_number=fields.get("collector_number"),
            image_url=fields.get("image_url") or image_url,
        )
        if variant is None:
            skipped += 1
            continue
        variants.append(variant)

    return variants, skipped


def parse_catalog_html(
    raw: str,
    type_prices: Mapping[str, int] | None = None,
) -> list[CardVariant]:
    """
    Parse catalog HTML into (not yet deduplicated) variants.

    Raises:
        CatalogParseError: If neither a qualifying table nor labelled
            listing blocks are found
    """
    prices = settings.default_type_prices if type_prices is None else type_prices
    soup = BeautifulSoup(raw, "html.parser")

    table = _best_table(soup)
    if table is not None:
        rows, columns = table
        variants, skipped = _variants_from_table(rows, columns, prices)
        source = "html_table"
    else:
        variants, skipped = _variants_from_blocks(soup, prices)
        source = "html_blocks"
        if not variants:
            raise CatalogParseError(
                "No catalog table with Name, Set, SKU, Type and Price columns found"
                if not skipped
                else "No readable catalog listings found",
                raw,
            )

    _log_skipped(source, skipped)
    return variants


# =============================================================================
# CSV
# =============================================================================


def _align_row(cells: list[str], width: int, columns: dict[str, int]) -> list[str]:
    """
    Re-join a name that was split by unquoted commas.

    Assumes the surplus cells belong to the name column, and accepts the
    result only if the set and type cells then look right.
    """
    if len(cells) <= width:
        return cells
    name_idx = columns["name"]
    surplus = len(cells) - width
    name = ",".join(cells[name_idx : name_idx + surplus + 1])
    aligned = cells[:name_idx] + [_WHITESPACE.sub(" ", name).strip()]
    aligned += cells[name_idx + surplus + 1 :]

    if SET_CODE_PATTERN.match(aligned[columns["set"]]) and _is_type_cell(
        aligned[columns["type"]]
    ):
        return aligned
    return cells


def parse_catalog_csv(
    raw: str,
    type_prices: Mapping[str, int] | None = None,
) -> list[CardVariant]:
    """
    Parse a CSV catalog export into (not yet deduplicated) variants.

    Raises:
        CatalogParseError: If the header row lacks required columns
    """
    prices = settings.default_type_prices if type_prices is None else type_prices

    text = COLLAPSED_ROW_START.sub(r"\n\1", raw.replace("\r", ""))
    try:
        rows = [row for row in csv.reader(StringIO(text)) if any(cell.strip() for cell in row)]
    except csv.Error as e:
        raise CatalogParseError(f"Malformed CSV catalog: {e}", raw) from e
    if not rows:
        raise CatalogParseError("Catalog input contains no rows", raw)

    header = [_clean_cell(cell) for cell in rows[0]]
    columns = map_columns(header)
    missing = [column for column in CSV_REQUIRED_COLUMNS if column not in columns]
    if missing:
        raise CatalogParseError(f"Missing required catalog columns: {missing}", raw)

    variants: list[CardVariant] = []
    skipped = 0

    for row in rows[1:]:
        cells = _align_row([_clean_cell(cell) for cell in row], len(header), columns)
        if len(cells) < len(header):
            skipped += 1
            continue

        def get(column: str, cells: list[str] = cells) -> str:
            idx = columns.get(column)
            return cells[idx] if idx is not None and idx < len(cells) else ""

        name = get("name")
        set_code = get("set")

        suffix = NAME_SET_SUFFIX.search(name)
        if suffix and (not set_code or set_code.upper() == suffix.group(1)):
            set_code = suffix.group(1)
            name = name[: suffix.start()].strip()

        collector_number = get("collector_number") or None
        suffix = NAME_COLLECTOR_SUFFIX.search(name)
        if suffix:
            collector_number = collector_number or suffix.group(1)
            name = name[: suffix.start()].strip()

        if not set_code:
            skipped += 1
            continue

        variant = make_variant(
            name=name,
            set_code=set_code,
            sku=get("sku"),
            type_raw=get("type"),
            price_raw=get("price") if "price" in columns else None,
            type_prices=prices,
            collector_number=collector_number,
            image_url=get("image_url"),
        )
        if variant is None:
            skipped += 1
            continue
        variants.append(variant)

    _log_skipped("csv", skipped)
    return variants


# =============================================================================
# ENTRY POINTS
# =============================================================================


def _log_skipped(source: str, skipped: int) -> None:
    if skipped:
        logger.info(
            "catalog_rows_skipped",
            extra={"source": source, "skipped_row_count": skipped},
        )


def looks_like_html(raw: str) -> bool:
    """True if the input should go through the HTML parser."""
    first_line = next((line for line in raw.splitlines() if line.strip()), "")
    if "," in first_line and len(map_columns(first_line.split(","))) >= 2:
        return False
    return bool(_HTML_HINT.search(raw))


def parse_catalog(
    raw: str,
    max_bytes: int | None = None,
    type_prices: Mapping[str, int] | None = None,
) -> list[CardVariant]:
    """
    Parse a raw catalog source into deduplicated CardVariants.

    Args:
        raw: HTML page or CSV export text
        max_bytes: Size cap in UTF-8 bytes (defaults to settings)
        type_prices: Fallback price in cents per variant type

    Returns:
        Deduplicated variants in first-seen order

    Raises:
        CatalogParseError: If the input is oversized, empty or has no
            recognizable header
    """
    limit = settings.max_catalog_bytes if max_bytes is None else max_bytes
    # Characters never outnumber UTF-8 bytes, so the cheap check comes first
    if len(raw) > limit or len(raw.encode("utf-8")) > limit:
        raise CatalogParseError(
            f"Catalog input exceeds the {limit}-byte limit",
            raw,
            kind=FailureKind.INPUT_TOO_LARGE,
            status_code=413,
        )
    if not raw.strip():
        raise CatalogParseError("Catalog input is empty", raw)

    if looks_like_html(raw):
        variants = parse_catalog_html(raw, type_prices)
    else:
        variants = parse_catalog_csv(raw, type_prices)

    result = deduplicate_variants(variants)
    logger.info(
        "catalog_parsed",
        extra={"row_count": len(variants), "variant_count": len(result)},
    )
    return result


def load_catalog(
    raw: str,
    max_bytes: int | None = None,
    type_prices: Mapping[str, int] | None = None,
) -> Catalog:
    """Parse a raw catalog source straight into an indexed Catalog."""
    return build_catalog(parse_catalog(raw, max_bytes=max_bytes, type_prices=type_prices))
