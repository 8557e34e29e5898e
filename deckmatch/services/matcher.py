"""
Deck entry matcher.

Resolves each DeckEntry against an immutable Catalog in ordered stages:

    1. exact name           (name_original == card_name)
    2. case-insensitive     (name_original.lower() == card_name.lower())
    3. normalized           (name_normalized == normalize(card_name),
                             then the primary face of split/MDFC names)
    4. set hint             narrow to the entry's "(SET)" if that leaves any
    5. set priority         narrow to the highest-priority set present
    6. variant priority     narrow to the first preferred finish present
    7. fuzzy fallback       bounded edit distance, only when 1-3 found nothing

The first name stage with a non-empty pool wins; stages 4-6 only narrow it
and never empty it. One survivor is AUTO_MATCHED, several are AMBIGUOUS.
Fuzzy results are always AMBIGUOUS so a human confirms the guess.

Everything here is a pure function of (entry, catalog, config). The same
inputs always give identical results.
"""

import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, replace
from typing import assert_never

from deckmatch.models.card_variant import CardVariant
from deckmatch.models.catalog import Catalog
from deckmatch.models.deck_entry import DeckEntry, Section
from deckmatch.models.failure import MatchStateError
from deckmatch.models.match import (
    DeckEntryMatch,
    ManualOverride,
    MatchCandidate,
    MatchConfig,
    MatchStatus,
)
from deckmatch.services.levenshtein import bounded_distance
from deckmatch.services.normalizer import normalize, primary_face

logger = logging.getLogger(__name__)

EXCLUDED_NOTE = "Excluded"

REASON_EXACT = "exact"
REASON_CASE_INSENSITIVE = "case-insensitive"
REASON_NORMALIZED = "normalized"
REASON_MANUAL = "manual"

# Variant type given to synthetic override variants with no type
SYNTHETIC_VARIANT_TYPE = "Regular"


# =============================================================================
# ORDERING
# =============================================================================


def variant_rank(variant: CardVariant, variant_priority: Sequence[str]) -> int:
    """Position of the variant's finish in the priority list (unknown = last)."""
    finish = variant.variant_type.lower()
    for i, preferred in enumerate(variant_priority):
        if preferred.lower() == finish:
            return i
    return len(variant_priority)


def _candidate_order(
    variant_priority: Sequence[str],
) -> Callable[[CardVariant], tuple[int, int, str, str]]:
    def key(variant: CardVariant) -> tuple[int, int, str, str]:
        return (
            variant_rank(variant, variant_priority),
            variant.price_in_cents,
            variant.set_code,
            variant.sku,
        )

    return key


def _as_candidates(
    pool: Iterable[CardVariant],
    reason: str,
    config: MatchConfig,
) -> tuple[MatchCandidate, ...]:
    ordered = sorted(pool, key=_candidate_order(config.variant_priority))
    return tuple(MatchCandidate(variant=v, score=0, reason=reason) for v in ordered)


# =============================================================================
# STAGES
# =============================================================================


def _name_stage(entry: DeckEntry, catalog: Catalog) -> tuple[list[CardVariant], str]:
    """
    Stages 1-3: find the widest non-empty pool by name.

    Equal names always share a normalized key, so the exact and
    case-insensitive stages only need to look inside that key's family.
    """
    key = normalize(entry.card_name)
    family = catalog.by_normalized_name(key)

    if family:
        exact = [v for v in family if v.name_original == entry.card_name]
        if exact:
            return exact, REASON_EXACT

        folded = entry.card_name.lower()
        insensitive = [v for v in family if v.name_original.lower() == folded]
        if insensitive:
            return insensitive, REASON_CASE_INSENSITIVE

        return list(family), REASON_NORMALIZED

    # Query is a multi-face name whose front face is listed on its own
    face = primary_face(entry.card_name)
    if face and face != key:
        pool = catalog.by_normalized_name(face) or catalog.by_face(face)
        if pool:
            return list(pool), REASON_NORMALIZED

    pool = catalog.by_face(key)
    if pool:
        return list(pool), REASON_NORMALIZED

    return [], ""


def _narrow(
    pool: list[CardVariant],
    keep: Callable[[CardVariant], bool],
) -> list[CardVariant] | None:
    """Filter the pool; None when the filter would empty it."""
    narrowed = [v for v in pool if keep(v)]
    return narrowed or None


def _narrow_by_set_hint(
    pool: list[CardVariant],
    set_hint: str | None,
) -> tuple[list[CardVariant], bool]:
    """Stage 4. Returns (pool, hint_discarded)."""
    if not set_hint or len(pool) <= 1:
        return pool, False
    hint = set_hint.upper()
    narrowed = _narrow(pool, lambda v: v.set_code.upper() == hint)
    if narrowed is None:
        return pool, True
    return narrowed, False


def _narrow_by_set_priority(
    pool: list[CardVariant],
    set_priority: Sequence[str],
) -> list[CardVariant]:
    """Stage 5."""
    if len(pool) <= 1:
        return pool
    for set_code in set_priority:
        wanted = set_code.upper()
        narrowed = _narrow(pool, lambda v, wanted=wanted: v.set_code.upper() == wanted)
        if narrowed is not None:
            return narrowed
    return pool


def _narrow_by_variant_priority(
    pool: list[CardVariant],
    variant_priority: Sequence[str],
) -> list[CardVariant]:
    """Stage 6. Several listings of the preferred finish stay ambiguous."""
    if len(pool) <= 1:
        return pool
    for finish in variant_priority:
        wanted = finish.lower()
        narrowed = _narrow(pool, lambda v, wanted=wanted: v.variant_type.lower() == wanted)
        if narrowed is not None:
            return narrowed
    return pool


def fuzzy_candidates(query: str, catalog: Catalog) -> tuple[MatchCandidate, ...]:
    """
    Stage 7: every variant under a catalog key close enough to the query.

    Args:
        query: Normalized card name
        catalog: Catalog to scan

    Returns:
        Candidates ordered by distance, then price (ties resolved by
        name, set and SKU so the order never depends on dict iteration)
    """
    if not query:
        return ()

    scored: list[MatchCandidate] = []
    for key in catalog.keys():
        dist = bounded_distance(query, key)
        if dist is None:
            continue
        for variant in catalog.by_normalized_name(key):
            scored.append(MatchCandidate(variant=variant, score=dist, reason=f"fuzzy:{dist}"))

    scored.sort(
        key=lambda c: (
            c.score,
            c.variant.price_in_cents,
            c.variant.name_normalized,
            c.variant.set_code,
            c.variant.sku,
        )
    )
    return tuple(scored)


# =============================================================================
# MATCHING
# =============================================================================


def fuzzy_match(entry: DeckEntry, catalog: Catalog) -> DeckEntryMatch:
    """
    Run only the fuzzy fallback for one entry.

    Used on demand when fuzzy matching is disabled in the config but the
    caller wants suggestions for a specific NOT_FOUND entry.
    """
    candidates = fuzzy_candidates(normalize(entry.card_name), catalog)
    if not candidates:
        return DeckEntryMatch(
            entry=entry,
            status=MatchStatus.NOT_FOUND,
            notes="No catalog listing found",
        )
    return DeckEntryMatch(
        entry=entry,
        status=MatchStatus.AMBIGUOUS,
        candidates=candidates,
        notes="Fuzzy match, confirm the card",
    )


def match_entry(
    entry: DeckEntry,
    catalog: Catalog,
    config: MatchConfig | None = None,
) -> DeckEntryMatch:
    """
    Match one deck entry against the catalog.

    Args:
        entry: Parsed deck entry
        catalog: Catalog snapshot
        config: Matching preferences (defaults to MatchConfig())

    Returns:
        DeckEntryMatch with an automatic terminal status
    """
    config = config or MatchConfig()

    widest, reason = _name_stage(entry, catalog)
    if not widest:
        if config.fuzzy_enabled:
            return fuzzy_match(entry, catalog)
        return DeckEntryMatch(
            entry=entry,
            status=MatchStatus.NOT_FOUND,
            notes="No catalog listing found",
        )

    pool, hint_discarded = _narrow_by_set_hint(widest, entry.set_hint)
    pool = _narrow_by_set_priority(pool, config.set_priority)
    pool = _narrow_by_variant_priority(pool, config.variant_priority)

    notes = f"Set {entry.set_hint} not listed" if hint_discarded else ""

    if len(pool) == 1:
        return DeckEntryMatch(
            entry=entry,
            status=MatchStatus.AUTO_MATCHED,
            selected_variant=pool[0],
            candidates=_as_candidates(widest, reason, config),
            notes=notes,
        )

    ambiguity = f"{len(pool)} listings match"
    return DeckEntryMatch(
        entry=entry,
        status=MatchStatus.AMBIGUOUS,
        candidates=_as_candidates(pool, reason, config),
        notes=f"{notes}; {ambiguity}" if notes else ambiguity,
    )


def match_all(
    entries: Sequence[DeckEntry],
    catalog: Catalog | None,
    config: MatchConfig | None = None,
) -> list[DeckEntryMatch]:
    """
    Match every entry, preserving entry order.

    Entries with include=False are not matched; they stay UNRESOLVED with
    an "Excluded" note so the result still covers every entry.

    Raises:
        ValueError: If no catalog is given
    """
    if catalog is None:
        raise ValueError("match_all requires a catalog")
    config = config or MatchConfig()

    results = [
        match_entry(entry, catalog, config)
        if entry.include
        else DeckEntryMatch(entry=entry, notes=EXCLUDED_NOTE)
        for entry in entries
    ]

    summary = summarize_matches(results)
    logger.info(
        "match_pass_complete",
        extra={
            "entry_count": summary.total,
            "auto_matched": summary.auto_matched,
            "ambiguous": summary.ambiguous,
            "not_found": summary.not_found,
            "excluded": summary.unresolved,
        },
    )
    return results


# =============================================================================
# CALLER ACTIONS
# =============================================================================


def select_candidate(result: DeckEntryMatch, variant: CardVariant) -> DeckEntryMatch:
    """
    Resolve a match by picking one of its candidates.

    Raises:
        MatchStateError: If the match is already MANUAL_SELECTED or the
            variant is not among its candidates
    """
    name = result.entry.card_name
    if result.status is MatchStatus.MANUAL_SELECTED:
        raise MatchStateError(name, "a variant was already selected manually")
    if not any(candidate.variant == variant for candidate in result.candidates):
        raise MatchStateError(name, f"SKU {variant.sku!r} is not among the candidates")

    return replace(
        result,
        status=MatchStatus.MANUAL_SELECTED,
        selected_variant=variant,
        notes="Selected manually",
    )


def _override_lookup(
    catalog: Catalog,
    name: str,
    override: ManualOverride,
) -> CardVariant | None:
    # A forced SKU is never swapped for another listing
    if override.sku:
        return catalog.by_sku(override.sku)

    pool = list(catalog.by_normalized_name(normalize(name)))
    if override.set_code:
        wanted_set = override.set_code.upper()
        pool = [v for v in pool if v.set_code.upper() == wanted_set]
    if override.variant_type:
        wanted_type = override.variant_type.lower()
        pool = [v for v in pool if v.variant_type.lower() == wanted_type]
    if not pool:
        return None
    return min(pool, key=lambda v: v.price_in_cents)


def apply_override(
    result: DeckEntryMatch,
    catalog: Catalog | None,
    override: ManualOverride,
) -> DeckEntryMatch:
    """
    Force a choice for an entry, bypassing the automatic stages.

    The override is looked up in the catalog: by SKU when one is given,
    otherwise by name narrowed by set and finish. If nothing is found a
    synthetic variant is built from the override fields. Accepted from any status.
    """
    name = override.card_name or result.entry.card_name
    variant = _override_lookup(catalog, name, override) if catalog is not None else None

    if variant is None:
        variant = CardVariant(
            name_original=name,
            name_normalized=normalize(name),
            set_code=override.set_code or "",
            sku=override.sku or "",
            variant_type=override.variant_type or SYNTHETIC_VARIANT_TYPE,
            price_in_cents=max(override.price_in_cents or 0, 0),
        )
        source = "synthetic"
    else:
        if override.price_in_cents is not None:
            variant = replace(variant, price_in_cents=max(override.price_in_cents, 0))
        source = "catalog"

    logger.info(
        "manual_override_applied",
        extra={"card_name": result.entry.card_name, "sku": variant.sku, "source": source},
    )
    return DeckEntryMatch(
        entry=result.entry,
        status=MatchStatus.MANUAL_SELECTED,
        selected_variant=variant,
        candidates=(MatchCandidate(variant=variant, score=0, reason=REASON_MANUAL),),
        notes="Manual override",
    )


def apply_inclusion_policy(
    entries: Iterable[DeckEntry],
    include_sideboard: bool = False,
    include_commanders: bool = False,
) -> list[DeckEntry]:
    """Return entries with include set per section. MAIN is always included."""
    policy: list[DeckEntry] = []
    for entry in entries:
        match entry.section:
            case Section.MAIN:
                include = True
            case Section.SIDEBOARD:
                include = include_sideboard
            case Section.COMMANDER:
                include = include_commanders
            case _:
                assert_never(entry.section)
        policy.append(entry if entry.include == include else replace(entry, include=include))
    return policy


# =============================================================================
# SUMMARY
# =============================================================================


@dataclass(frozen=True, slots=True)
class MatchSummary:
    """Number of entries per MatchStatus."""

    unresolved: int = 0
    auto_matched: int = 0
    ambiguous: int = 0
    not_found: int = 0
    manual_selected: int = 0

    @property
    def total(self) -> int:
        return (
            self.unresolved
            + self.auto_matched
            + self.ambiguous
            + self.not_found
            + self.manual_selected
        )

    @property
    def needs_attention(self) -> int:
        """Entries a person still has to look at."""
        return self.ambiguous + self.not_found


def summarize_matches(matches: Iterable[DeckEntryMatch]) -> MatchSummary:
    """Count matches per status."""
    counts = dict.fromkeys(MatchStatus, 0)
    for result in matches:
        match result.status:
            case MatchStatus.UNRESOLVED:
                counts[MatchStatus.UNRESOLVED] += 1
            case MatchStatus.AUTO_MATCHED:
                counts[MatchStatus.AUTO_MATCHED] += 1
            case MatchStatus.AMBIGUOUS:
                counts[MatchStatus.AMBIGUOUS] += 1
            case MatchStatus.NOT_FOUND:
                counts[MatchStatus.NOT_FOUND] += 1
            case MatchStatus.MANUAL_SELECTED:
                counts[MatchStatus.MANUAL_SELECTED] += 1
            case _:
                assert_never(result.status)

    return MatchSummary(
        unresolved=counts[MatchStatus.UNRESOLVED],
        auto_matched=counts[MatchStatus.AUTO_MATCHED],
        ambiguous=counts[MatchStatus.AMBIGUOUS],
        not_found=counts[MatchStatus.NOT_FOUND],
        manual_selected=counts[MatchStatus.MANUAL_SELECTED],
    )
