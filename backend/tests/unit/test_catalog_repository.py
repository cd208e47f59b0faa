from decimal import Decimal

import pytest

from app.core.exceptions import RepositoryException
from app.repositories.catalog_repository import normalize_category


def test_normalize_category_collapses_whitespace():
    assert normalize_category("  Ground   Chakras ") == "ground_chakras"
    assert normalize_category("sparklers") == "sparklers"


def test_list_categories(catalog):
    assert catalog.list_categories() == {"sparklers", "ground_chakras"}


def test_list_available_skips_products_switched_off(catalog):
    products = catalog.list_available("sparklers")

    assert [p.product_id for p in products] == [1, 2]


def test_lookup_accepts_unnormalized_label(catalog):
    product = catalog.get_product("Ground Chakras", 1)

    assert product is not None
    assert product.productname == "Big Chakra"


def test_product_ids_are_scoped_to_category(catalog):
    assert catalog.get_product("sparklers", 1).productname == "10 cm Electric Sparklers"
    assert catalog.get_product("ground_chakras", 1).productname == "Big Chakra"
    assert catalog.get_product("ground_chakras", 2) is None


def test_add_product_numbers_within_category(db, catalog):
    chakra = catalog.add_product(
        "ground_chakras", serial_number="GC-02", productname="Wire Chakra", price=Decimal("25")
    )
    sparkler = catalog.add_product(
        "sparklers", serial_number="SP-04", productname="Gold Sparklers", price=Decimal("60")
    )

    assert chakra.product_id == 2
    assert sparkler.product_id == 4


def test_add_product_requires_existing_category(catalog):
    with pytest.raises(RepositoryException):
        catalog.add_product(
            "rockets", serial_number="RK-01", productname="Sky Shot", price=Decimal("90")
        )


def test_is_available(catalog):
    assert catalog.is_available("sparklers", 1) is True
    assert catalog.is_available("sparklers", 3) is False
    assert catalog.is_available("sparklers", 99) is False


def test_reserve_stock_without_tracking_always_succeeds(catalog):
    assert catalog.reserve_stock("sparklers", 1, 1000) is True


def test_reserve_stock_decrements_when_enough(db, catalog):
    assert catalog.reserve_stock("ground_chakras", 1, 3) is True
    db.commit()

    assert catalog.get_product("ground_chakras", 1).stock == 2


def test_reserve_stock_refuses_oversell(db, catalog):
    assert catalog.reserve_stock("ground_chakras", 1, 6) is False
    db.commit()

    assert catalog.get_product("ground_chakras", 1).stock == 5


def test_reserve_stock_ignores_counts_outside_tracked_categories(db, catalog):
    catalog.add_product(
        "sparklers",
        serial_number="SP-04",
        productname="Gold Sparklers",
        price=Decimal("60.00"),
        stock=1,
    )
    db.commit()

    assert catalog.reserve_stock("sparklers", 4, 10) is True
    db.commit()

    assert catalog.get_product("sparklers", 4).stock == 1
