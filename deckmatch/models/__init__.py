from deckmatch.models.card_variant import CardVariant
from deckmatch.models.catalog import FACE_SEPARATOR, Catalog
from deckmatch.models.deck_entry import DeckEntry, Section
from deckmatch.models.failure import (
    CatalogParseError,
    FailureDetail,
    FailureKind,
    KnownError,
    MatchStateError,
)
from deckmatch.models.match import (
    DEFAULT_VARIANT_PRIORITY,
    DeckEntryMatch,
    ManualOverride,
    MatchCandidate,
    MatchConfig,
    MatchStatus,
)

__all__ = [
    "DEFAULT_VARIANT_PRIORITY",
    "FACE_SEPARATOR",
    "CardVariant",
    "Catalog",
    "CatalogParseError",
    "DeckEntry",
    "DeckEntryMatch",
    "FailureDetail",
    "FailureKind",
    "KnownError",
    "ManualOverride",
    "MatchCandidate",
    "MatchConfig",
    "MatchStateError",
    "MatchStatus",
    "Section",
]
