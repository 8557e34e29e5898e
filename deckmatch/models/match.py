"""
Match Models.

DeckEntryMatch lifecycle:
    UNRESOLVED -> AUTO_MATCHED | AMBIGUOUS | NOT_FOUND   (automatic pass)
    any automatic status -> MANUAL_SELECTED              (explicit caller action)

MANUAL_SELECTED is final except for a forced override. Transitions produce
new DeckEntryMatch values; nothing is mutated in place.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from deckmatch.models.card_variant import CardVariant
from deckmatch.models.deck_entry import DeckEntry

if TYPE_CHECKING:
    from deckmatch.config import Settings

DEFAULT_VARIANT_PRIORITY: tuple[str, ...] = ("Regular", "Foil", "Holo")


class MatchStatus(str, Enum):
    """Outcome of matching a deck entry against the catalog."""

    UNRESOLVED = "unresolved"
    AUTO_MATCHED = "auto_matched"
    AMBIGUOUS = "ambiguous"
    NOT_FOUND = "not_found"
    MANUAL_SELECTED = "manual_selected"


@dataclass(frozen=True, slots=True)
class MatchCandidate:
    """
    A catalog variant considered for a deck entry.

    Attributes:
        variant: The candidate listing
        score: 0 for exact-family matches, edit distance for fuzzy matches
        reason: Stage that produced the candidate ("exact", "case-insensitive",
            "normalized", "fuzzy:<distance>", "manual")
    """

    variant: CardVariant
    score: int
    reason: str


@dataclass(frozen=True, slots=True)
class DeckEntryMatch:
    """Match state for one DeckEntry."""

    entry: DeckEntry
    status: MatchStatus = MatchStatus.UNRESOLVED
    selected_variant: CardVariant | None = None
    candidates: tuple[MatchCandidate, ...] = ()
    notes: str = ""

    @property
    def is_resolved(self) -> bool:
        """True if a variant has been chosen (automatically or manually)."""
        return self.selected_variant is not None


@dataclass(frozen=True, slots=True)
class MatchConfig:
    """
    Matching preferences supplied by the caller.

    Attributes:
        variant_priority: Preferred finishes, most preferred first
        set_priority: Preferred set codes, most preferred first (empty = none)
        fuzzy_enabled: Run the edit-distance fallback when name stages miss
    """

    variant_priority: tuple[str, ...] = DEFAULT_VARIANT_PRIORITY
    set_priority: tuple[str, ...] = ()
    fuzzy_enabled: bool = True

    @classmethod
    def create(
        cls,
        variant_priority: Sequence[str] | None = None,
        set_priority: Sequence[str] | None = None,
        fuzzy_enabled: bool = True,
    ) -> "MatchConfig":
        """Build a config from any sequences (lists from JSON, settings, ...)."""
        return cls(
            variant_priority=(
                tuple(variant_priority)
                if variant_priority is not None
                else DEFAULT_VARIANT_PRIORITY
            ),
            set_priority=tuple(set_priority or ()),
            fuzzy_enabled=fuzzy_enabled,
        )

    @classmethod
    def from_settings(cls, settings: "Settings") -> "MatchConfig":
        """Build a config from application settings."""
        return cls.create(
            variant_priority=settings.variant_priority,
            set_priority=settings.set_priority,
            fuzzy_enabled=settings.fuzzy_enabled,
        )


@dataclass(frozen=True, slots=True)
class ManualOverride:
    """
    Caller-forced choice for a deck entry.

    Any field left as None falls back to the entry's own data (card name)
    or to whatever the catalog lookup finds.
    """

    card_name: str | None = None
    set_code: str | None = None
    variant_type: str | None = None
    sku: str | None = None
    price_in_cents: int | None = None
