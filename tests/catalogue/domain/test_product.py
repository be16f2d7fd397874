"""Tests for the Product aggregate."""

import pytest
from protean.exceptions import ValidationError
from storefront.catalogue.product.events import ProductCreated, ProductRatingUpdated, StockAdjusted
from storefront.catalogue.product.product import Product, ProductStatus


def _make_product(**overrides):
    defaults = {
        "name": "Trail Runner 2",
        "description": "Lightweight trail shoe.",
        "category_id": "cat-001",
        "brand": "Acme",
        "price": 90.0,
        "inventory": {"quantity": 20, "low_stock_threshold": 5},
    }
    defaults.update(overrides)
    return Product.create(**defaults)


class TestCreate:
    def test_defaults(self):
        product = _make_product()

        assert product.slug == "trail-runner-2"
        assert product.status == ProductStatus.DRAFT.value
        assert product.currency == "USD"
        assert product.rating.average == 0.0
        assert product.rating.count == 0
        assert product.sales.count == 0
        assert product.inventory.quantity == 20

    def test_raises_created_event(self):
        product = _make_product()
        assert isinstance(product._events[0], ProductCreated)

    def test_tags_round_trip(self):
        product = _make_product(tags=["running", "trail"])
        assert product.tag_list == ["running", "trail"]

    def test_price_cannot_be_negative(self):
        with pytest.raises(ValidationError):
            _make_product(price=-1.0)


class TestDerivedViews:
    def test_discount_percentage_rounds_half_up(self):
        assert _make_product(price=75.0, compare_at_price=100.0).discount_percentage == 25
        assert _make_product(price=89.99, compare_at_price=119.99).discount_percentage == 25
        assert _make_product(price=100.0, compare_at_price=90.0).discount_percentage == 0
        assert _make_product().discount_percentage == 0

    def test_stock_flags(self):
        product = _make_product(inventory={"quantity": 3, "low_stock_threshold": 5})
        assert product.in_stock is True
        assert product.low_stock is True

        empty = _make_product(inventory={"quantity": 0})
        assert empty.in_stock is False
        assert empty.low_stock is False

    def test_backorder_counts_as_in_stock(self):
        product = _make_product(inventory={"quantity": 0, "allow_backorder": True})
        assert product.in_stock is True

    def test_can_supply(self):
        product = _make_product(inventory={"quantity": 2})
        assert product.can_supply(1) is False  # still a draft

        product.activate()
        assert product.can_supply(2) is True
        assert product.can_supply(3) is False


class TestLifecycle:
    def test_activate_from_draft(self):
        product = _make_product()
        product.activate()
        assert product.is_active is True

    def test_cannot_activate_archived(self):
        product = _make_product()
        product.archive()
        with pytest.raises(ValidationError):
            product.activate()

    def test_deactivate_only_when_active(self):
        product = _make_product()
        with pytest.raises(ValidationError):
            product.deactivate()

        product.activate()
        product.deactivate()
        assert product.status == ProductStatus.INACTIVE.value
        product.activate()
        assert product.is_active is True

    def test_archive_twice(self):
        product = _make_product()
        product.archive()
        with pytest.raises(ValidationError):
            product.archive()


class TestPricingAndDetails:
    def test_change_price(self):
        product = _make_product()
        product.change_price(80.0, compare_at_price=100.0)

        assert product.price == 80.0
        assert product.compare_at_price == 100.0
        assert product.discount_percentage == 20

    def test_update_details_reslugs(self):
        product = _make_product()
        product.update_details(name="Trail Runner 3", tags=["new"])

        assert product.slug == "trail-runner-3"
        assert product.tag_list == ["new"]
        assert product.brand == "Acme"


class TestStock:
    def test_adjust_stock(self):
        product = _make_product()
        product.adjust_stock(-5, reason="damaged")

        assert product.inventory.quantity == 15
        event = [e for e in product._events if isinstance(e, StockAdjusted)][0]
        assert event.previous_quantity == 20
        assert event.reason == "damaged"

    def test_stock_cannot_go_negative(self):
        product = _make_product()
        with pytest.raises(ValidationError) as exc:
            product.adjust_stock(-21)
        assert exc.value.messages == {"inventory": ["Stock cannot go below zero"]}

    def test_record_sale(self):
        product = _make_product()
        product.record_sale(3, 270.0)

        assert product.sales.count == 3
        assert product.sales.total == 270.0
        assert product.inventory.quantity == 17

    def test_view_count(self):
        product = _make_product()
        product.increment_view_count()
        product.increment_view_count()
        assert product.view_count == 2


class TestRating:
    def test_average_rounds_half_up_to_one_decimal(self):
        product = _make_product()
        product.update_rating([5, 4, 4, 4])  # 4.25

        assert product.rating.average == 4.3
        assert product.rating.count == 4

    def test_no_ratings(self):
        product = _make_product()
        product.update_rating([5])
        product.update_rating([])

        assert product.rating.average == 0.0
        assert product.rating.count == 0
        assert isinstance(product._events[-1], ProductRatingUpdated)


class TestImages:
    def test_first_image_is_primary(self):
        product = _make_product()
        product.add_image("https://cdn.example.com/a.jpg")
        product.add_image("https://cdn.example.com/b.jpg")

        assert product.primary_image == "https://cdn.example.com/a.jpg"

    def test_new_primary_replaces_old(self):
        product = _make_product()
        product.add_image("https://cdn.example.com/a.jpg")
        product.add_image("https://cdn.example.com/b.jpg", is_primary=True)

        assert [i.is_primary for i in product.images] == [False, True]
        assert product.primary_image == "https://cdn.example.com/b.jpg"

    def test_removing_primary_promotes_next(self):
        product = _make_product()
        first = product.add_image("https://cdn.example.com/a.jpg")
        product.add_image("https://cdn.example.com/b.jpg")

        product.remove_image(first.id)

        assert len(product.images) == 1
        assert product.images[0].is_primary is True

    def test_remove_unknown_image(self):
        product = _make_product()
        with pytest.raises(ValidationError):
            product.remove_image("missing")
