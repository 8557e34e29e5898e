"""Tests for discount and shipping calculation."""

import pytest

from deckmatch.models import CardVariant, DeckEntry, DeckEntryMatch, MatchStatus
from deckmatch.services.promotions import (
    ShippingType,
    calculate_promotion,
    discount_percent_for,
    shipping_for,
)


def _order(price_in_cents: int, qty: int = 1) -> list[DeckEntryMatch]:
    variant = CardVariant(
        name_original="Black Lotus",
        name_normalized="black lotus",
        set_code="LEA",
        sku="SKU1",
        variant_type="Regular",
        price_in_cents=price_in_cents,
    )
    entry = DeckEntry(original_line=f"{qty} Black Lotus", qty=qty, card_name="Black Lotus")
    return [DeckEntryMatch(entry=entry, status=MatchStatus.AUTO_MATCHED, selected_variant=variant)]


class TestDiscountTiers:
    @pytest.mark.parametrize(
        ("base", "percent"),
        [
            (0, 0),
            (60_00, 0),
            (60_01, 5),
            (100_01, 15),
            (160_01, 25),
            (200_01, 30),
            (300_01, 35),
            (400_00, 35),
            (400_01, 50),
        ],
    )
    def test_tiers(self, base: int, percent: int) -> None:
        assert discount_percent_for(base) == percent


class TestShipping:
    def test_small_order_pays_shipping(self) -> None:
        assert shipping_for(100_00) == (ShippingType.NORMAL, 10_00)

    def test_free_normal(self) -> None:
        assert shipping_for(100_01) == (ShippingType.NORMAL, 0)

    def test_express(self) -> None:
        assert shipping_for(300_01) == (ShippingType.EXPRESS, 0)


class TestCalculatePromotion:
    def test_small_order(self) -> None:
        result = calculate_promotion(_order(2_20))

        assert result.base_total_cents == 2_20
        assert result.discount_percent == 0
        assert result.shipping_cents == 10_00
        assert result.grand_total_cents == 12_20

    def test_discount_then_shipping(self) -> None:
        result = calculate_promotion(_order(100_00, qty=5))

        assert result.base_total_cents == 500_00
        assert result.discount_percent == 50
        assert result.discount_cents == 250_00
        assert result.subtotal_cents == 250_00
        assert result.shipping_type is ShippingType.NORMAL
        assert result.shipping_cents == 0
        assert result.grand_total_cents == 250_00

    def test_express_after_discount(self) -> None:
        result = calculate_promotion(_order(700_00))

        assert result.subtotal_cents == 350_00
        assert result.shipping_type is ShippingType.EXPRESS

    def test_discount_truncates_to_cents(self) -> None:
        result = calculate_promotion(_order(61_01))

        assert result.discount_cents == 305
        assert result.subtotal_cents == 61_01 - 305

    def test_unresolved_entries_ignored(self) -> None:
        entry = DeckEntry(original_line="1 Nope", qty=1, card_name="Nope")
        matches = [DeckEntryMatch(entry=entry, status=MatchStatus.NOT_FOUND), *_order(50_00)]

        assert calculate_promotion(matches).base_total_cents == 50_00
