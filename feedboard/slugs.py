"""
Slug derivation for company and board names.
"""

from __future__ import annotations

import re

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def slugify(text: str) -> str:
    """Lowercase, collapse runs of non-alphanumerics to "-", strip edge hyphens."""
    slug = _NON_ALNUM.sub("-", (text or "").lower())
    return slug.strip("-")
