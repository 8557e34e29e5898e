from collections.abc import Callable

import pytest

from deckmatch.models import CardVariant, Catalog
from deckmatch.services.catalog_index import build_catalog
from deckmatch.services.normalizer import normalize

VariantFactory = Callable[..., CardVariant]


@pytest.fixture
def make_variant() -> VariantFactory:
    """Build CardVariants with sensible defaults."""

    def _make(
        name: str,
        set_code: str = "M11",
        sku: str | None = None,
        variant_type: str = "Regular",
        price: int = 220,
        collector_number: str | None = None,
    ) -> CardVariant:
        return CardVariant(
            name_original=name,
            name_normalized=normalize(name),
            set_code=set_code,
            sku=sku or f"{set_code}-{normalize(name).replace(' ', '-')}-{variant_type}",
            variant_type=variant_type,
            price_in_cents=price,
            collector_number=collector_number,
        )

    return _make


@pytest.fixture
def catalog(make_variant: VariantFactory) -> Catalog:
    """Small catalog covering the common matching paths."""
    return build_catalog(
        [
            make_variant("Lightning Bolt", "M11", sku="SKU100", price=220),
            make_variant("Lightning Bolt", "M11", sku="SKU101", variant_type="Foil", price=350),
            make_variant("Lightning Bolt", "LEB", sku="SKU102", price=900),
            make_variant("Black Lotus", "LEA", sku="SKU200", price=220),
            make_variant("Brainstorm", "EMA", sku="SKU300", price=150),
            make_variant("Brainstorm", "ICE", sku="SKU301", price=120),
            make_variant("Juzám Djinn", "ARN", sku="SKU400", price=500),
            make_variant("Fire // Ice", "MH2", sku="SKU500", price=80),
        ]
    )


@pytest.fixture
def sample_catalog_html() -> str:
    """Vendor page with a navigation table and the catalog table."""
    return """<html><body>
<table id="nav"><tr><td>Home</td><td>Cart</td></tr></table>
<table class="catalog">
  <thead>
    <tr><th>Card Name</th><th>Set</th><th>SKU</th><th>Card Type</th><th>Price</th></tr>
  </thead>
  <tbody>
    <tr><td>Lightning Bolt</td><td>M11</td><td>SKU100</td><td>Regular</td><td>$2.20</td></tr>
    <tr><td>Lightning Bolt</td><td>M11</td><td>SKU101</td><td>Foil</td><td>$3.50</td></tr>
    <tr><td>Black Lotus</td><td>LEA</td><td>SKU200</td><td>Regular</td><td>$2.20</td></tr>
    <tr><td>Brainstorm</td><td>EMA</td><td>SKU300</td><td>Regular</td><td>$1.50</td></tr>
    <tr><td>Brainstorm</td><td>ICE</td><td>SKU301</td><td>Regular</td><td>$1.20</td></tr>
  </tbody>
</table>
</body></html>"""


@pytest.fixture
def sample_catalog_csv() -> str:
    """CSV export in the vendor's layout."""
    return """SKU,Card Name,Set,Card Type,Base Price
SKU100,Lightning Bolt,M11,Regular,2.20
SKU200,Black Lotus,LEA,Regular,2.20
SKU300,Brainstorm,EMA,Regular,1.50
SKU301,Brainstorm,ICE,Regular,1.20
"""


@pytest.fixture
def sample_decklist() -> str:
    return "4 Lightning Bolt (M11)\n1 Black Lotus"
