"""Storefront e-commerce backend: identity, catalogue, ordering and reviews."""
