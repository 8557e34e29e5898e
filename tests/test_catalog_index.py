"""Tests for catalog deduplication and the Catalog index."""

from collections.abc import Callable
from dataclasses import FrozenInstanceError

import pytest

from deckmatch.models import CardVariant, Catalog
from deckmatch.services.catalog_index import build_catalog, deduplicate_variants

VariantFactory = Callable[..., CardVariant]


class TestDeduplicateVariants:
    def test_keeps_minimum_price(self, make_variant: VariantFactory) -> None:
        variants = [
            make_variant("Lightning Bolt", sku="A", price=300),
            make_variant("Lightning Bolt", sku="B", price=150),
            make_variant("Lightning Bolt", sku="C", price=200),
        ]

        result = deduplicate_variants(variants)

        assert [v.sku for v in result] == ["B"]

    def test_tie_keeps_first_seen(self, make_variant: VariantFactory) -> None:
        variants = [
            make_variant("Lightning Bolt", sku="A", price=150),
            make_variant("Lightning Bolt", sku="B", price=150),
        ]

        assert [v.sku for v in deduplicate_variants(variants)] == ["A"]

    def test_groups_by_name_set_and_type(self, make_variant: VariantFactory) -> None:
        variants = [
            make_variant("Lightning Bolt", "M11", sku="A"),
            make_variant("Lightning Bolt", "M11", sku="B", variant_type="Foil"),
            make_variant("Lightning Bolt", "LEB", sku="C"),
            make_variant("LIGHTNING BOLT", "M11", sku="D", price=100),
        ]

        result = deduplicate_variants(variants)

        # "LIGHTNING BOLT" shares the normalized key with "Lightning Bolt"
        assert [v.sku for v in result] == ["D", "B", "C"]

    def test_one_survivor_per_group(self, make_variant: VariantFactory) -> None:
        prices = [500, 120, 480, 120, 999]
        variants = [
            make_variant("Brainstorm", "ICE", sku=f"K{i}", price=p) for i, p in enumerate(prices)
        ]

        result = deduplicate_variants(variants)

        assert len(result) == 1
        assert result[0].price_in_cents == min(prices)


class TestCatalog:
    def test_index_built_on_construction(self, catalog: Catalog) -> None:
        assert [v.sku for v in catalog.by_normalized_name("lightning bolt")] == [
            "SKU100",
            "SKU101",
            "SKU102",
        ]
        assert catalog.by_normalized_name("nothing here") == ()

    def test_face_index(self, catalog: Catalog) -> None:
        assert [v.sku for v in catalog.by_face("fire")] == ["SKU500"]
        assert catalog.by_face("lightning bolt") == ()

    def test_by_sku(self, catalog: Catalog) -> None:
        variant = catalog.by_sku("SKU301")

        assert variant is not None
        assert variant.set_code == "ICE"
        assert catalog.by_sku("missing") is None

    def test_keys_in_first_seen_order(self, catalog: Catalog) -> None:
        assert catalog.keys() == (
            "lightning bolt",
            "black lotus",
            "brainstorm",
            "juzam djinn",
            "fire ice",
        )

    def test_len_and_iter(self, catalog: Catalog) -> None:
        assert len(catalog) == 8
        assert len(list(catalog)) == 8

    def test_immutable(self, catalog: Catalog) -> None:
        with pytest.raises(FrozenInstanceError):
            catalog.variants = ()  # type: ignore[misc]
        with pytest.raises(TypeError):
            catalog.index["new"] = ()  # type: ignore[index]

    def test_refresh_builds_new_value(self, catalog: Catalog, make_variant: VariantFactory) -> None:
        refreshed = build_catalog([*catalog.variants, make_variant("Ponder", "LRW", sku="P1")])

        assert refreshed is not catalog
        assert catalog.by_normalized_name("ponder") == ()
        assert len(refreshed.by_normalized_name("ponder")) == 1

    def test_build_catalog_deduplicates(self, make_variant: VariantFactory) -> None:
        catalog = build_catalog(
            [
                make_variant("Black Lotus", "LEA", sku="A", price=900),
                make_variant("Black Lotus", "LEA", sku="B", price=800),
            ]
        )

        assert [v.sku for v in catalog] == ["B"]
