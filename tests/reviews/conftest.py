import json

import pytest
from protean import current_domain
from storefront.ordering.cart.items import AddToCart
from storefront.ordering.cart.management import CreateCart
from storefront.ordering.order.placement import PlaceOrder
from storefront.ordering.order.status import UpdateOrderStatus
from storefront.reviews.review.review import Review
from storefront.reviews.review.submission import SubmitReview


@pytest.fixture()
def delivered_purchase(shipping_address):
    """Buy one unit of a product and mark the order delivered. Returns the order id."""

    def _deliver(user_id, product_id):
        cart_id = current_domain.process(CreateCart(user_id=user_id), asynchronous=False)
        current_domain.process(AddToCart(cart_id=cart_id, product_id=product_id, quantity=1), asynchronous=False)
        order_id = current_domain.process(
            PlaceOrder(
                cart_id=cart_id,
                payment_method="credit_card",
                shipping_address=json.dumps(shipping_address),
            ),
            asynchronous=False,
        )
        current_domain.process(UpdateOrderStatus(order_id=order_id, status="delivered"), asynchronous=False)
        return order_id

    return _deliver


@pytest.fixture()
def submit_review():
    def _submit(user_id, product_id, rating=4, title="Solid", comment="Does the job.", **kwargs):
        return current_domain.process(
            SubmitReview(
                user_id=user_id,
                product_id=product_id,
                rating=rating,
                title=title,
                comment=comment,
                **kwargs,
            ),
            asynchronous=False,
        )

    return _submit


@pytest.fixture()
def load_review():
    def _load(review_id):
        return current_domain.repository_for(Review).get(review_id)

    return _load
