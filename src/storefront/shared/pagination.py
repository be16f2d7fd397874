"""Page/limit handling shared by every list query."""

from storefront.settings import get_settings


def page_window(page=1, limit=None):
    """Translate 1-based ``page`` and ``limit`` into ``(offset, limit)``.

    ``limit`` falls back to the configured default and is capped at the
    configured maximum.
    """
    settings = get_settings()
    limit = limit or settings.default_page_size
    limit = max(1, min(int(limit), settings.max_page_size))
    page = max(1, int(page or 1))
    return (page - 1) * limit, limit
