"""
Slug and link derivation for articles.
"""

from __future__ import annotations

import re
import unicodedata

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def slugify(text: str) -> str:
    """
    Lowercase, ASCII-only, hyphen-separated slug. "&" is spelled out as "and".

    >>> slugify("My Post")
    'my-post'
    >>> slugify("  Café & Crème  ")
    'cafe-and-creme'
    """
    value = (text or "").replace("&", " and ")
    value = unicodedata.normalize("NFKD", value).encode("ascii", "ignore").decode("ascii")
    value = _NON_ALNUM.sub("-", value.lower())
    return value.strip("-")


def article_link(slug: str) -> str:
    return f"/article/{slug}"
