"""
Order discount and shipping.

The discount tier depends on the base total; shipping depends on the total
after discount. All amounts are integer cents.
"""

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from deckmatch.models.match import DeckEntryMatch

# (base total must exceed, discount percent), highest tier first
DISCOUNT_TIERS: tuple[tuple[int, int], ...] = (
    (400_00, 50),
    (300_00, 35),
    (200_00, 30),
    (160_00, 25),
    (100_00, 15),
    (60_00, 5),
)

EXPRESS_SHIPPING_THRESHOLD = 300_00
FREE_SHIPPING_THRESHOLD = 100_00
NORMAL_SHIPPING_CENTS = 10_00


class ShippingType(str, Enum):
    NORMAL = "normal"
    EXPRESS = "express"


@dataclass(frozen=True, slots=True)
class PromotionResult:
    """Price breakdown for an order."""

    base_total_cents: int
    discount_percent: int
    discount_cents: int
    subtotal_cents: int
    shipping_type: ShippingType
    shipping_cents: int
    grand_total_cents: int


def discount_percent_for(base_total_cents: int) -> int:
    for threshold, percent in DISCOUNT_TIERS:
        if base_total_cents > threshold:
            return percent
    return 0


def shipping_for(subtotal_cents: int) -> tuple[ShippingType, int]:
    if subtotal_cents > EXPRESS_SHIPPING_THRESHOLD:
        return ShippingType.EXPRESS, 0
    if subtotal_cents > FREE_SHIPPING_THRESHOLD:
        return ShippingType.NORMAL, 0
    return ShippingType.NORMAL, NORMAL_SHIPPING_CENTS


def calculate_promotion(matches: Iterable[DeckEntryMatch]) -> PromotionResult:
    """
    Price an order made of every match with a selected variant.

    The discount amount is truncated to whole cents.
    """
    base = sum(
        result.selected_variant.price_in_cents * result.entry.qty
        for result in matches
        if result.selected_variant is not None
    )
    percent = discount_percent_for(base)
    discount = base * percent // 100
    subtotal = base - discount
    shipping_type, shipping = shipping_for(subtotal)

    return PromotionResult(
        base_total_cents=base,
        discount_percent=percent,
        discount_cents=discount,
        subtotal_cents=subtotal,
        shipping_type=shipping_type,
        shipping_cents=shipping,
        grand_total_cents=subtotal + shipping,
    )
