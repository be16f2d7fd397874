"""BDD tests for review moderation and product ratings."""

import pytest
from protean import current_domain
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, scenarios, then, when
from storefront.catalogue.product.product import Product
from storefront.reviews.review.moderation import ApproveReview, RejectReview

scenarios("features/product_rating.feature")


@pytest.fixture()
def catalogue():
    """Product ids by name."""
    return {}


@pytest.fixture()
def reviews():
    """Review ids by reviewer."""
    return {}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a product "{name}"'))
def a_product(catalogue, make_product, name):
    catalogue[name] = make_product(name=name, inventory={"quantity": 20})


@given(parsers.cfparse('"{user}" has received "{name}"'))
def received(catalogue, delivered_purchase, user, name):
    delivered_purchase(user, catalogue[name])


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse('"{user}" reviews "{name}" with {stars:d} stars'))
def review_product(catalogue, reviews, submit_review, error, user, name, stars):
    try:
        reviews[user] = submit_review(user, catalogue[name], rating=stars)
    except ValidationError as exc:
        error["exc"] = exc


@when("every review is approved")
def approve_all(reviews):
    for review_id in reviews.values():
        current_domain.process(ApproveReview(review_id=review_id), asynchronous=False)


@when(parsers.cfparse('the review by "{user}" is rejected'))
def reject(reviews, user):
    current_domain.process(RejectReview(review_id=reviews[user]), asynchronous=False)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('"{name}" is rated {average:f} from {count:d} reviews'))
def rated(catalogue, name, average, count):
    rating = current_domain.repository_for(Product).get(catalogue[name]).rating
    assert rating.average == pytest.approx(average)
    assert rating.count == count


@then("the review is refused")
def refused(error):
    assert isinstance(error["exc"], ValidationError)


@then(parsers.cfparse('the review by "{user}" is a verified purchase'))
def verified(reviews, load_review, user):
    assert load_review(reviews[user]).verified_purchase is True
