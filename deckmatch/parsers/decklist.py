"""
Parser for free-text decklists.

Line format:
    [<quantity>[x]] <card name>[ (<SET>[ <collector>])][ <collector>]

Examples:
    4 Lightning Bolt (M11)
    4x Brainstorm (MMQ 123)
    4 Lightning Bolt (LEB) 163
    Black Lotus

Sections:
    Lines start in MAIN. "SIDEBOARD:" / "SB:" (optionally followed by a card
    on the same line) switches to SIDEBOARD. A blank line while in SIDEBOARD
    switches to COMMANDER. Arena-style headers (Deck, Sideboard,
    Commander, Companion) are also recognised.

The parser never raises on bad input. Lines it cannot read are skipped.
Duplicate lines are kept as separate entries; merging is an export concern.
"""

import html
import logging
import re

from deckmatch.models.deck_entry import DeckEntry, Section

logger = logging.getLogger(__name__)

# "SIDEBOARD: 3 Thoughtseize" / "SB: 3 Thoughtseize" / "Sideboard:"
SIDEBOARD_PREFIX = re.compile(r"^(?:sideboard|sb)\s*:\s*(.*)$", re.IGNORECASE)

# "Commander: 1 Atraxa, Praetors' Voice"
COMMANDER_PREFIX = re.compile(r"^(?:commander|cmdr)\s*:\s*(.*)$", re.IGNORECASE)

# Bare section headers, compared lowercase with any trailing colon removed
SECTION_HEADERS: dict[str, Section] = {
    "deck": Section.MAIN,
    "main": Section.MAIN,
    "maindeck": Section.MAIN,
    "main deck": Section.MAIN,
    "sideboard": Section.SIDEBOARD,
    "companion": Section.SIDEBOARD,
    "commander": Section.COMMANDER,
}

# Pattern: "4 Lightning Bolt" or "4x Lightning Bolt"
# Groups: (quantity, remainder)
QUANTITY_PATTERN = re.compile(r"^(\d+)(?:\s*[xX])?\s+(.+)$")

# Pattern: "<name> (SET)", "<name> (SET 123)", "<name> (SET) 123"
# Groups: (name, set_code, collector_inside, collector_after)
SET_SUFFIX_PATTERN = re.compile(
    r"^(.+?)\s*\(([A-Za-z0-9]{2,6})(?:\s+([A-Za-z0-9][\w\-*★]*))?\)"
    r"(?:\s+([A-Za-z0-9][\w\-*★]*))?$"
)

_TAG_PATTERN = re.compile(r"<[^>]+>")
_WHITESPACE = re.compile(r"\s+")

DEFAULT_INCLUDE: dict[Section, bool] = {
    Section.MAIN: True,
    Section.SIDEBOARD: False,
    Section.COMMANDER: False,
}


def strip_markup(line: str) -> str:
    """Remove HTML tags, decode entities and collapse whitespace."""
    text = _TAG_PATTERN.sub(" ", line)
    text = html.unescape(text).replace("\xa0", " ")
    return _WHITESPACE.sub(" ", text).strip()


def parse_line(
    line: str,
    section: Section = Section.MAIN,
    original_line: str | None = None,
) -> DeckEntry | None:
    """
    Parse one decklist line into a DeckEntry.

    Args:
        line: Raw line (may contain HTML)
        section: Section the line belongs to
        original_line: Line to record for diagnostics (defaults to line)

    Returns:
        DeckEntry, or None if the line holds no usable card.
    """
    if original_line is None:
        original_line = line
    return _parse_text(strip_markup(line), section, original_line)


def _parse_text(text: str, section: Section, original_line: str) -> DeckEntry | None:
    if not text:
        return None

    qty = 1
    match = QUANTITY_PATTERN.match(text)
    if match:
        qty = int(match.group(1))
        text = match.group(2).strip()
    elif text.isdigit():
        return None

    if qty <= 0:
        return None

    set_hint: str | None = None
    collector_hint: str | None = None
    match = SET_SUFFIX_PATTERN.match(text)
    if match:
        name, set_code, collector_inside, collector_after = match.groups()
        text = name.strip()
        set_hint = set_code.upper()
        collector_hint = collector_inside or collector_after

    if not text:
        return None

    return DeckEntry(
        original_line=original_line.strip(),
        qty=qty,
        card_name=text,
        section=section,
        include=DEFAULT_INCLUDE[section],
        set_hint=set_hint,
        collector_hint=collector_hint,
    )


def parse_decklist(text: str) -> list[DeckEntry]:
    """
    Parse decklist text into ordered DeckEntry objects.

    Args:
        text: Raw decklist (plain text, possibly with embedded HTML)

    Returns:
        One DeckEntry per card line, in input order. Empty list for
        empty input.
    """
    if not text or not text.strip():
        return []

    entries: list[DeckEntry] = []
    section = Section.MAIN
    skipped = 0

    for raw_line in text.splitlines():
        line = strip_markup(raw_line)

        if not line:
            if section is Section.SIDEBOARD:
                section = Section.COMMANDER
            continue

        if line.startswith("#") or line.startswith("//"):
            continue

        prefix = SIDEBOARD_PREFIX.match(line)
        if prefix:
            section = Section.SIDEBOARD
            remainder = prefix.group(1).strip()
            if not remainder:
                continue
            line = remainder
        else:
            prefix = COMMANDER_PREFIX.match(line)
            if prefix:
                section = Section.COMMANDER
                remainder = prefix.group(1).strip()
                if not remainder:
                    continue
                line = remainder
            else:
                header = SECTION_HEADERS.get(line.lower().rstrip(":").strip())
                if header is not None:
                    section = header
                    continue

        entry = _parse_text(line, section, raw_line)
        if entry is None:
            skipped += 1
            logger.debug("Skipping unreadable decklist line: %r", raw_line)
            continue

        entries.append(entry)

    logger.info(
        "deck_parsed",
        extra={"entry_count": len(entries), "skipped_line_count": skipped},
    )
    return entries
