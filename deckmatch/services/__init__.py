from deckmatch.services.catalog_index import build_catalog, deduplicate_variants
from deckmatch.services.export import (
    ExportRow,
    ExportSummary,
    build_export_rows,
    format_price,
    render_export_csv,
    summarize_export,
)
from deckmatch.services.matcher import (
    MatchSummary,
    apply_inclusion_policy,
    apply_override,
    fuzzy_match,
    match_all,
    match_entry,
    select_candidate,
    summarize_matches,
)
from deckmatch.services.normalizer import normalize, primary_face
from deckmatch.services.promotions import PromotionResult, ShippingType, calculate_promotion

__all__ = [
    "ExportRow",
    "ExportSummary",
    "MatchSummary",
    "PromotionResult",
    "ShippingType",
    "apply_inclusion_policy",
    "apply_override",
    "build_catalog",
    "build_export_rows",
    "calculate_promotion",
    "deduplicate_variants",
    "format_price",
    "fuzzy_match",
    "match_all",
    "match_entry",
    "normalize",
    "primary_face",
    "render_export_csv",
    "select_candidate",
    "summarize_export",
    "summarize_matches",
]
