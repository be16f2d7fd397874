import json

import pytest
from protean import current_domain
from protean.exceptions import ObjectNotFoundError, ValidationError
from storefront.catalogue.product.creation import CreateProduct
from storefront.catalogue.product.details import (
    AdjustStock,
    ChangeProductPrice,
    RecordProductView,
    UpdateProductDetails,
)
from storefront.catalogue.product.images import AddProductImage, RemoveProductImage
from storefront.catalogue.product.lifecycle import ArchiveProduct, DeactivateProduct
from storefront.catalogue.product.product import Product, ProductStatus


def _load(product_id):
    return current_domain.repository_for(Product).get(product_id)


class TestCreateProduct:
    def test_created_as_draft(self, make_product):
        product = _load(make_product(name="Rain Jacket", inventory={"quantity": 7}, active=False))

        assert product.status == ProductStatus.DRAFT.value
        assert product.slug == "rain-jacket"
        assert product.inventory.quantity == 7

    def test_default_order_limit(self, make_product):
        product = _load(make_product())
        assert product.inventory.max_order_quantity == 100

    def test_unknown_category(self):
        with pytest.raises(ObjectNotFoundError):
            current_domain.process(
                CreateProduct(
                    name="Lost",
                    description="No home",
                    category_id="missing",
                    brand="Acme",
                    price=10.0,
                ),
                asynchronous=False,
            )


class TestLifecycle:
    def test_deactivate_then_archive(self, make_product):
        product_id = make_product()

        current_domain.process(DeactivateProduct(product_id=product_id), asynchronous=False)
        assert _load(product_id).status == ProductStatus.INACTIVE.value

        current_domain.process(ArchiveProduct(product_id=product_id), asynchronous=False)
        assert _load(product_id).status == ProductStatus.ARCHIVED.value

    def test_cannot_deactivate_draft(self, make_product):
        product_id = make_product(active=False)
        with pytest.raises(ValidationError):
            current_domain.process(DeactivateProduct(product_id=product_id), asynchronous=False)


class TestDetailsAndPricing:
    def test_update_details(self, make_product):
        product_id = make_product()
        current_domain.process(
            UpdateProductDetails(
                product_id=product_id,
                details=json.dumps({"name": "Trail Runner Pro", "featured": True, "tags": ["pro"]}),
            ),
            asynchronous=False,
        )

        product = _load(product_id)
        assert product.slug == "trail-runner-pro"
        assert product.featured is True
        assert product.tag_list == ["pro"]

    def test_change_price_keeps_compare_at(self, make_product):
        product_id = make_product(price=50.0, compare_at_price=80.0)
        current_domain.process(ChangeProductPrice(product_id=product_id, price=40.0), asynchronous=False)

        product = _load(product_id)
        assert product.price == 40.0
        assert product.compare_at_price == 80.0
        assert product.discount_percentage == 50


class TestStockAndViews:
    def test_adjust_stock_returns_quantity(self, make_product):
        product_id = make_product(inventory={"quantity": 5})
        quantity = current_domain.process(
            AdjustStock(product_id=product_id, delta=10, reason="restock"),
            asynchronous=False,
        )
        assert quantity == 15

    def test_stock_floor(self, make_product):
        product_id = make_product(inventory={"quantity": 5})
        with pytest.raises(ValidationError):
            current_domain.process(AdjustStock(product_id=product_id, delta=-6), asynchronous=False)
        assert _load(product_id).inventory.quantity == 5

    def test_record_view(self, make_product):
        product_id = make_product()
        current_domain.process(RecordProductView(product_id=product_id), asynchronous=False)
        count = current_domain.process(RecordProductView(product_id=product_id), asynchronous=False)
        assert count == 2


class TestImages:
    def test_add_and_remove(self, make_product):
        product_id = make_product()
        first = current_domain.process(
            AddProductImage(product_id=product_id, url="https://cdn.example.com/1.jpg"),
            asynchronous=False,
        )
        current_domain.process(
            AddProductImage(product_id=product_id, url="https://cdn.example.com/2.jpg"),
            asynchronous=False,
        )

        current_domain.process(RemoveProductImage(product_id=product_id, image_id=first), asynchronous=False)

        product = _load(product_id)
        assert len(product.images) == 1
        assert product.primary_image == "https://cdn.example.com/2.jpg"
        assert product.images[0].is_primary is True


class TestQueries:
    def test_search_matches_active_products(self, make_product):
        make_product(name="Trail Runner", tags=json.dumps(["outdoor"]))
        make_product(name="City Sneaker")
        make_product(name="Trail Draft", active=False)

        repo = current_domain.repository_for(Product)
        assert [p.name for p in repo.search("TRAIL")] == ["Trail Runner"]
        assert [p.name for p in repo.search("outdoor")] == ["Trail Runner"]
        assert repo.search("   ") == []

    def test_featured_and_in_category(self, make_category, make_product):
        shoes = make_category(name="Shoes")
        make_product(name="Runner", category_id=shoes, featured=True)
        make_product(name="Walker", category_id=shoes)

        repo = current_domain.repository_for(Product)
        assert [p.name for p in repo.featured()] == ["Runner"]
        assert sorted(p.name for p in repo.in_category(shoes)) == ["Runner", "Walker"]
        assert repo.find("missing") is None

    def test_queries_return_every_match(self, make_category, make_product):
        shoes = make_category(name="Shoes")
        for i in range(110):
            make_product(name=f"Runner {i}", category_id=shoes, featured=True)

        repo = current_domain.repository_for(Product)
        assert len(repo.active()) == 110
        assert len(repo.in_category(shoes)) == 110
        assert len(repo.featured()) == 110
        assert len(repo.search("runner")) == 110
