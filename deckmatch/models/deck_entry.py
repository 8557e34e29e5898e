from dataclasses import dataclass
from enum import Enum


class Section(str, Enum):
    """Decklist section a line belongs to."""

    MAIN = "main"
    SIDEBOARD = "sideboard"
    COMMANDER = "commander"


@dataclass(frozen=True, slots=True)
class DeckEntry:
    """
    One parsed decklist line.

    Entries are never mutated after parsing. Match results live in
    DeckEntryMatch, keyed by entry position.

    Attributes:
        original_line: Raw line as it appeared in the input
        qty: Number of copies (defaults to 1 when the line has no quantity)
        card_name: Card name with markup stripped
        section: MAIN, SIDEBOARD or COMMANDER
        include: Whether the entry takes part in matching and export
        set_hint: Set code from a trailing "(SET)" parenthetical, uppercased
        collector_hint: Collector number following the set code
    """

    original_line: str
    qty: int
    card_name: str
    section: Section = Section.MAIN
    include: bool = True
    set_hint: str | None = None
    collector_hint: str | None = None
