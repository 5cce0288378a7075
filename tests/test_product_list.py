"""
tests/test_product_list.py

Pytest unit tests for app/scraping/parsing/product_list.py.
"""

from __future__ import annotations

from decimal import Decimal

import pytest

from conftest import ml_detail, ml_item, ml_listing, paris_listing

from app.domain.marketplace import MarketplaceSource
from app.scraping.errors import ProductValidationError
from app.scraping.parsing import (
    extract_items,
    extract_product_from_detail,
    extract_product_from_listing,
    extract_products,
    synthesize_sku,
)
from app.scraping.parsing.product_list import absolutize_url, is_valid_source_id

FALABELLA_PAGE = "https://www.falabella.com/falabella-cl/category/cat70057/Notebooks"


def _falabella_pod(name: str, extra_attributes: str = "") -> str:
    return (
        f'<div data-testid="pod" {extra_attributes}>'
        f'<b class="pod-subTitle">{name}</b>'
        '<span class="copy10 primary high">$ 499.990</span>'
        '<span class="crossed">$ 599.990</span>'
        '<img id="testId-pod-image-1" src="https://media.falabella.com/falabellaCL/1/public">'
        "</div>"
    )


# ---------------------------------------------------------------------------
# Listing
# ---------------------------------------------------------------------------


class TestExtractProducts:
    def test_mercado_libre_listing(self, soup, mercado_libre) -> None:
        doc = soup(ml_listing([ml_item("MLA1001", "Samsung Galaxy A15", previous="149.999")]))
        products = extract_products(extract_items(doc, mercado_libre.listing.items), mercado_libre)

        assert len(products) == 1
        product = products[0]
        assert product.sku == "MLA1001"
        assert product.name == "Samsung Galaxy A15"
        assert product.source is MarketplaceSource.MERCADO_LIBRE
        assert product.current_price == Decimal("125999")
        assert product.previous_price == Decimal("149999")
        assert product.images == ("https://http2.mlstatic.com/D_MLA1001.jpg",)
        assert product.available is True
        assert product.source_url == "https://www.mercadolibre.com.ar/p/MLA1001"

    def test_order_preserved_and_invalid_items_dropped(self, soup, mercado_libre) -> None:
        doc = soup(
            ml_listing(
                [
                    ml_item("MLA3", "Tercero"),
                    ml_item("MLA1", None),
                    '<li class="ui-search-layout__item"><h2>Sin link</h2></li>',
                    ml_item("MLA2", "Segundo"),
                ]
            )
        )
        products = extract_products(extract_items(doc, mercado_libre.listing.items), mercado_libre)
        assert [product.sku for product in products] == ["MLA3", "MLA2"]

    def test_seen_skus_deduplicates_across_calls(self, soup, mercado_libre) -> None:
        seen: set[str] = {"MLA1"}
        first = soup(ml_listing([ml_item("MLA1", "Uno"), ml_item("MLA2", "Dos"), ml_item("MLA2", "Dos bis")]))
        second = soup(ml_listing([ml_item("MLA2", "Dos"), ml_item("MLA3", "Tres")]))

        page_one = extract_products(extract_items(first, mercado_libre.listing.items), mercado_libre, seen_skus=seen)
        page_two = extract_products(extract_items(second, mercado_libre.listing.items), mercado_libre, seen_skus=seen)

        assert [product.sku for product in page_one] == ["MLA2"]
        assert [product.sku for product in page_two] == ["MLA3"]
        assert seen == {"MLA1", "MLA2", "MLA3"}

    def test_without_seen_set_duplicates_are_kept(self, soup, mercado_libre) -> None:
        doc = soup(ml_listing([ml_item("MLA1", "Uno"), ml_item("MLA1", "Uno")]))
        products = extract_products(extract_items(doc, mercado_libre.listing.items), mercado_libre)
        assert len(products) == 2

    def test_paris_listing_uses_item_attribute_and_base_url(self, soup, paris) -> None:
        doc = soup(paris_listing(["7501", "7502"]))
        products = extract_products(extract_items(doc, paris.listing.items), paris)

        assert [product.sku for product in products] == ["7501", "7502"]
        assert products[0].name == "Producto 7501"
        assert products[0].current_price == Decimal("9990")
        assert products[0].previous_price == Decimal("12990")
        assert products[0].source_url == "https://www.paris.cl/producto-7501.html"


class TestFalabellaListing:
    def test_synthetic_sku_and_listing_url_fallback(self, soup, falabella) -> None:
        item = soup(_falabella_pod("Notebook Lenovo IdeaPad")).div
        product = extract_product_from_listing(item, falabella, page_url=FALABELLA_PAGE)

        assert product.sku.startswith("FAL-")
        assert product.name == "Notebook Lenovo IdeaPad"
        assert product.current_price == Decimal("499990")
        assert product.previous_price == Decimal("599990")
        assert product.source_url == FALABELLA_PAGE

    def test_random_mode_differs_between_scrapes(self, soup, falabella) -> None:
        item = soup(_falabella_pod("Notebook Lenovo IdeaPad")).div
        first = extract_product_from_listing(item, falabella, page_url=FALABELLA_PAGE)
        second = extract_product_from_listing(item, falabella, page_url=FALABELLA_PAGE)
        assert first.sku != second.sku

    def test_hash_mode_is_stable(self, soup, falabella) -> None:
        item = soup(_falabella_pod("Notebook Lenovo IdeaPad")).div
        first = extract_product_from_listing(item, falabella, synthetic_sku_mode="hash")
        second = extract_product_from_listing(item, falabella, synthetic_sku_mode="hash")
        assert first.sku == second.sku
        assert first.sku.startswith("FAL-")
        assert first.source_url is None

    def test_valid_data_attribute_beats_synthesis(self, soup, falabella) -> None:
        item = soup(_falabella_pod("Notebook", 'data-product-id="17463382"')).div
        product = extract_product_from_listing(item, falabella)
        assert product.sku == "17463382"

    def test_product_link_gives_real_sku(self, soup, falabella) -> None:
        html = _falabella_pod("Notebook").replace(
            "</b>",
            '</b><a href="https://www.falabella.com/falabella-cl/product/17463382/Notebook">ver</a>',
        )
        product = extract_product_from_listing(soup(html).div, falabella, page_url=FALABELLA_PAGE)
        assert product.sku == "17463382"
        assert product.source_url == "https://www.falabella.com/falabella-cl/product/17463382/Notebook"

    def test_missing_name_is_rejected(self, soup, falabella) -> None:
        item = soup('<div data-testid="pod"><span class="copy10 primary high">$ 1.000</span></div>').div
        with pytest.raises(ProductValidationError):
            extract_product_from_listing(item, falabella, synthetic_sku_mode="hash")


class TestSyntheticIdentifiers:
    def test_prefix_per_source(self) -> None:
        assert synthesize_sku("Zapatilla", source="PARIS", mode="hash").startswith("PAR-")
        assert synthesize_sku("Zapatilla", source="MERCADO_LIBRE", mode="hash").startswith("MLA-")

    def test_hash_ignores_case_and_spacing(self) -> None:
        assert synthesize_sku("Notebook  Lenovo", mode="hash") == synthesize_sku("notebook lenovo ", mode="hash")
        assert synthesize_sku(None, mode="hash") is None

    def test_random_mode_without_name(self) -> None:
        sku = synthesize_sku(None)
        assert sku is not None
        assert sku.startswith("FAL-")

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("17463382", True),
            ("pod", False),
            ("SSR-POD", False),
            ("product", False),
            ("test-123", False),
            ("ab", False),
            ("---", False),
            ("", False),
            (None, False),
        ],
    )
    def test_source_id_validation(self, value, expected) -> None:
        assert is_valid_source_id(value) is expected

    @pytest.mark.parametrize(
        ("href", "expected"),
        [
            ("https://a.cl/x", "https://a.cl/x"),
            ("//cdn.paris.cl/x", "https://cdn.paris.cl/x"),
            ("/producto-1.html", "https://www.paris.cl/producto-1.html"),
            ("producto-1.html", "https://www.paris.cl/producto-1.html"),
        ],
    )
    def test_absolutize_url(self, href, expected) -> None:
        assert absolutize_url(href, "https://www.paris.cl") == expected


# ---------------------------------------------------------------------------
# Repeated extraction
# ---------------------------------------------------------------------------


class TestRepeatedExtraction:
    """Extracting an unchanged page twice yields identical products."""

    def test_mercado_libre_listing(self, soup, mercado_libre) -> None:
        html = ml_listing([ml_item("MLA1", "Uno", previous="$150.000"), ml_item("MLA2", "Dos")])
        first = extract_products(extract_items(soup(html), mercado_libre.listing.items), mercado_libre)
        second = extract_products(extract_items(soup(html), mercado_libre.listing.items), mercado_libre)

        assert len(first) == 2
        assert first == second

    def test_paris_listing(self, soup, paris) -> None:
        html = paris_listing(["7501", "7502", "7503"])
        first = extract_products(extract_items(soup(html), paris.listing.items), paris)
        second = extract_products(extract_items(soup(html), paris.listing.items), paris)

        assert len(first) == 3
        assert first == second

    def test_detail_page(self, soup, mercado_libre) -> None:
        url = "https://www.mercadolibre.com.ar/samsung-galaxy-a15/p/MLA19813486"
        first = extract_product_from_detail(soup(ml_detail()), url, mercado_libre)
        second = extract_product_from_detail(soup(ml_detail()), url, mercado_libre)

        assert first is not None
        assert first == second

    def test_falabella_listing_in_hash_mode(self, soup, falabella) -> None:
        html = "<html><body>" + _falabella_pod("Notebook Lenovo") + _falabella_pod("Notebook HP") + "</body></html>"

        def extract():
            return extract_products(
                extract_items(soup(html), falabella.listing.items),
                falabella,
                page_url=FALABELLA_PAGE,
                synthetic_sku_mode="hash",
            )

        first, second = extract(), extract()
        assert len(first) == 2
        assert first == second

    def test_falabella_listing_in_random_mode_is_not_repeatable(self, soup, falabella) -> None:
        html = "<html><body>" + _falabella_pod("Notebook Lenovo") + "</body></html>"
        first = extract_products(extract_items(soup(html), falabella.listing.items), falabella)
        second = extract_products(extract_items(soup(html), falabella.listing.items), falabella)

        assert first != second
        assert [product.name for product in first] == [product.name for product in second]


# ---------------------------------------------------------------------------
# Detail
# ---------------------------------------------------------------------------


class TestExtractProductFromDetail:
    URL = "https://www.mercadolibre.com.ar/samsung-galaxy-a15/p/MLA19813486"

    def test_full_detail_page(self, soup, mercado_libre) -> None:
        product = extract_product_from_detail(soup(ml_detail()), self.URL, mercado_libre)

        assert product is not None
        assert product.sku == "MLA19813486"
        assert product.name == "Samsung Galaxy A15"
        assert product.current_price == Decimal("189990")
        assert product.previous_price == Decimal("219990")
        assert len(product.images) == 3
        assert product.available is True
        assert product.source_url == self.URL

    def test_no_buy_button_means_unavailable(self, soup, mercado_libre) -> None:
        product = extract_product_from_detail(soup(ml_detail(buy_button=False)), self.URL, mercado_libre)
        assert product is not None
        assert product.available is False

    def test_missing_name_returns_none(self, soup, mercado_libre) -> None:
        assert extract_product_from_detail(soup(ml_detail(name=None)), self.URL, mercado_libre) is None

    def test_sku_from_dom_when_url_has_none(self, soup, mercado_libre) -> None:
        html = ml_detail().replace("<body>", '<body><div data-item-id="MLA555"></div>')
        product = extract_product_from_detail(soup(html), "https://www.mercadolibre.com.ar/x", mercado_libre)
        assert product is not None
        assert product.sku == "MLA555"

    def test_no_sku_returns_none(self, soup, mercado_libre) -> None:
        assert extract_product_from_detail(soup(ml_detail()), "https://www.mercadolibre.com.ar/x", mercado_libre) is None
