"""Small text helpers."""
from __future__ import annotations

import re
import unicodedata


def slugify(value: str) -> str:
    """Lowercase ``value`` and join its words with hyphens ("Grade 5" -> "grade-5")."""
    normalized = unicodedata.normalize("NFKD", value).encode("ascii", "ignore").decode("ascii")
    normalized = re.sub(r"[^\w\s-]", "", normalized.lower()).strip()
    return re.sub(r"[\s_-]+", "-", normalized).strip("-")
