"""
Match and export endpoints.

Both endpoints run the full pipeline on caller-supplied text:
parse catalog -> parse decklist -> inclusion policy -> match -> overrides.
Fetching the catalog page is the caller's job.
"""

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel, Field

from deckmatch.config import settings
from deckmatch.models.card_variant import CardVariant
from deckmatch.models.failure import KnownError
from deckmatch.models.match import DeckEntryMatch, ManualOverride, MatchConfig
from deckmatch.parsers.catalog import load_catalog
from deckmatch.parsers.decklist import parse_decklist
from deckmatch.services.export import render_export_csv
from deckmatch.services.matcher import (
    apply_inclusion_policy,
    apply_override,
    match_all,
    summarize_matches,
)
from deckmatch.services.promotions import calculate_promotion

router = APIRouter(tags=["match"])


# =============================================================================
# REQUEST MODELS
# =============================================================================


class PreferencesRequest(BaseModel):
    """Matching preferences. Unset fields fall back to server settings."""

    variant_priority: list[str] | None = Field(
        default=None,
        description="Preferred finishes, most preferred first",
        examples=[["Regular", "Foil", "Holo"]],
    )
    set_priority: list[str] | None = Field(
        default=None,
        description="Preferred set codes, most preferred first",
    )
    fuzzy_enabled: bool | None = None
    include_sideboard: bool | None = None
    include_commanders: bool | None = None


class OverrideRequest(BaseModel):
    """Forced choice for the entry at `index` (position in the parsed deck)."""

    index: int = Field(..., ge=0)
    card_name: str | None = None
    set_code: str | None = None
    variant_type: str | None = None
    sku: str | None = None
    price_in_cents: int | None = Field(default=None, ge=0)


class MatchRequest(BaseModel):
    """Request model for matching a decklist against a catalog."""

    catalog: str = Field(
        ...,
        description="Raw catalog page (HTML) or CSV export",
    )
    decklist: str = Field(
        ...,
        description="Decklist text, one card per line",
        examples=["4 Lightning Bolt (M11)\n1 Black Lotus"],
    )
    preferences: PreferencesRequest = Field(default_factory=PreferencesRequest)
    overrides: list[OverrideRequest] = Field(default_factory=list)


# =============================================================================
# RESPONSE MODELS
# =============================================================================


class VariantResponse(BaseModel):
    """A catalog listing."""

    name: str
    set_code: str
    sku: str
    variant_type: str
    price_in_cents: int
    collector_number: str | None = None
    image_url: str | None = None


class CandidateResponse(BaseModel):
    variant: VariantResponse
    score: int
    reason: str


class EntryMatchResponse(BaseModel):
    """Match result for one decklist line."""

    line: str
    qty: int
    card_name: str
    section: str
    include: bool
    set_hint: str | None = None
    status: str
    selected: VariantResponse | None = None
    candidates: list[CandidateResponse] = Field(default_factory=list)
    notes: str = ""


class MatchResponse(BaseModel):
    """Response model for a match pass."""

    entries: list[EntryMatchResponse]
    summary: dict[str, int]


class PromotionResponse(BaseModel):
    base_total_cents: int
    discount_percent: int
    discount_cents: int
    subtotal_cents: int
    shipping_type: str
    shipping_cents: int
    grand_total_cents: int


class ExportResponse(BaseModel):
    """Response model for an export."""

    csv: str
    promotion: PromotionResponse


# =============================================================================
# PIPELINE
# =============================================================================


def _variant_response(variant: CardVariant) -> VariantResponse:
    return VariantResponse(
        name=variant.name_original,
        set_code=variant.set_code,
        sku=variant.sku,
        variant_type=variant.variant_type,
        price_in_cents=variant.price_in_cents,
        collector_number=variant.collector_number,
        image_url=variant.image_url,
    )


def _entry_response(result: DeckEntryMatch) -> EntryMatchResponse:
    entry = result.entry
    return EntryMatchResponse(
        line=entry.original_line,
        qty=entry.qty,
        card_name=entry.card_name,
        section=entry.section.value,
        include=entry.include,
        set_hint=entry.set_hint,
        status=result.status.value,
        selected=(
            _variant_response(result.selected_variant)
            if result.selected_variant is not None
            else None
        ),
        candidates=[
            CandidateResponse(
                variant=_variant_response(candidate.variant),
                score=candidate.score,
                reason=candidate.reason,
            )
            for candidate in result.candidates
        ],
        notes=result.notes,
    )


def run_pipeline(request: MatchRequest) -> list[DeckEntryMatch]:
    """
    Run the full match pipeline for a request.

    Raises:
        HTTPException: 422/413 for unreadable or oversized catalogs,
            400 for an override pointing past the end of the deck
    """
    try:
        catalog = load_catalog(request.catalog)
    except KnownError as e:
        raise HTTPException(
            status_code=e.status_code,
            detail=e.to_detail().model_dump(mode="json"),
        ) from e

    prefs = request.preferences
    entries = apply_inclusion_policy(
        parse_decklist(request.decklist),
        include_sideboard=(
            settings.include_sideboard
            if prefs.include_sideboard is None
            else prefs.include_sideboard
        ),
        include_commanders=(
            settings.include_commanders
            if prefs.include_commanders is None
            else prefs.include_commanders
        ),
    )
    config = MatchConfig.create(
        variant_priority=(
            settings.variant_priority if prefs.variant_priority is None else prefs.variant_priority
        ),
        set_priority=settings.set_priority if prefs.set_priority is None else prefs.set_priority,
        fuzzy_enabled=(
            settings.fuzzy_enabled if prefs.fuzzy_enabled is None else prefs.fuzzy_enabled
        ),
    )
    results = match_all(entries, catalog, config)

    for override in request.overrides:
        if override.index >= len(results):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Override index {override.index} out of range "
                f"(deck has {len(results)} entries)",
            )
        results[override.index] = apply_override(
            results[override.index],
            catalog,
            ManualOverride(
                card_name=override.card_name,
                set_code=override.set_code,
                variant_type=override.variant_type,
                sku=override.sku,
                price_in_cents=override.price_in_cents,
            ),
        )

    return results


# =============================================================================
# ENDPOINTS
# =============================================================================


@router.post("/match", response_model=MatchResponse)
def match_deck(request: MatchRequest) -> MatchResponse:
    """
    Match a decklist against a catalog.

    Every parsed line appears in the response, in input order. Missing and
    ambiguous cards are reported by status, not as errors.
    """
    results = run_pipeline(request)
    summary = summarize_matches(results)

    return MatchResponse(
        entries=[_entry_response(result) for result in results],
        summary={
            "total": summary.total,
            "auto_matched": summary.auto_matched,
            "ambiguous": summary.ambiguous,
            "not_found": summary.not_found,
            "manual_selected": summary.manual_selected,
            "unresolved": summary.unresolved,
        },
    )


@router.post("/export", response_model=ExportResponse)
def export_deck(request: MatchRequest) -> ExportResponse:
    """
    Match a decklist and render the purchase CSV.

    Only resolved entries are exported; use overrides to resolve the rest.
    """
    results = run_pipeline(request)
    promotion = calculate_promotion(results)

    return ExportResponse(
        csv=render_export_csv(results),
        promotion=PromotionResponse(
            base_total_cents=promotion.base_total_cents,
            discount_percent=promotion.discount_percent,
            discount_cents=promotion.discount_cents,
            subtotal_cents=promotion.subtotal_cents,
            shipping_type=promotion.shipping_type.value,
            shipping_cents=promotion.shipping_cents,
            grand_total_cents=promotion.grand_total_cents,
        ),
    )
