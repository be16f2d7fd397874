"""Keeping a product's rating summary in step with its approved reviews."""

import structlog

logger = structlog.get_logger(__name__)


def refresh_product_rating(review, reviews, products):
    """Recompute the rating of ``review``'s product and stage the product.

    ``reviews`` answers ``approved_for_product``; ``products`` answers
    ``find`` and ``add``. The review being changed is taken from memory, not
    from the store, since it is not saved yet.
    """
    product = products.find(review.product_id)
    if product is None:
        logger.warning("Rating refresh skipped for unknown product", product_id=str(review.product_id))
        return None

    ratings = [r.rating for r in reviews.approved_for_product(review.product_id) if str(r.id) != str(review.id)]
    if review.is_approved:
        ratings.append(review.rating)

    product.update_rating(ratings)
    products.add(product)
    return product
