from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class CardVariant:
    """
    A single purchasable listing from the vendor catalog.

    Attributes:
        name_original: Card name exactly as the vendor lists it
        name_normalized: Comparison key derived from name_original
        set_code: Vendor set abbreviation (e.g., "M11", "LEA")
        sku: Vendor SKU, unique per listing
        variant_type: Finish (Regular, Foil, Holo, ...), open-ended
        price_in_cents: Non-negative price in cents
        collector_number: Collector number within set (optional)
        image_url: Listing image (optional)
    """

    name_original: str
    name_normalized: str
    set_code: str
    sku: str
    variant_type: str
    price_in_cents: int
    collector_number: str | None = None
    image_url: str | None = None
