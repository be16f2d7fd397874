"""URL slug generation for catalogue names."""

import re
import unicodedata
from uuid import uuid4


def slugify(value: str | None) -> str:
    """Lower-case, ASCII-fold and hyphenate ``value``.

    Falls back to a random hex slug when nothing usable is left.
    """
    ascii_name = unicodedata.normalize("NFKD", (value or "").strip().lower()).encode("ascii", "ignore").decode("ascii")
    slug = re.sub(r"[^a-z0-9]+", "-", ascii_name).strip("-")
    if not slug:
        slug = uuid4().hex
    return slug
