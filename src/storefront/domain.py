"""Domain initialization and configuration.

A single Protean domain composes every bounded context (identity,
catalogue, ordering, reviews). Aggregates reference each other by
identifier only and share one document store.
"""

from protean.domain import Domain

from storefront.utils.logging import configure_logging, get_logger

# Configure logging for the application
configure_logging()

# Get logger for this module
logger = get_logger(__name__)

# Domain Composition Root
storefront = Domain(name="storefront")
