import re
import unicodedata
from typing import Iterable, Optional, Set

from sqlalchemy.orm import Session


_NON_SLUG_CHARS = re.compile(r"[^a-z0-9-]+")
_DASHES = re.compile(r"-{2,}")


# Route segments that must never be handed out as catalog slugs.
RESERVED_SLUGS: Set[str] = {
    "api",
    "auth",
    "me",
    "nearby",
    "search",
    "new",
    "admin",
    "dashboard",
    "urgent",
    "unread",
    "analytics",
    "batch",
    "pages",
}


def slugify_name(raw: str) -> str:
    """Convert an arbitrary name to a URL-safe slug.

    Accents are folded to ASCII first so "Zoé Encre" becomes "zoe-encre".
    """
    if not raw:
        return ""
    s = unicodedata.normalize("NFKD", raw).encode("ascii", "ignore").decode("ascii")
    s = s.strip().lower()
    if not s:
        return ""
    s = re.sub(r"[\s_'’]+", "-", s)
    s = _NON_SLUG_CHARS.sub("", s)
    s = _DASHES.sub("-", s)
    return s.strip("-")


def generate_unique_slug(base: str, existing: Iterable[str], fallback: str = "item") -> str:
    """Return a unique slug based on *base* given an iterable of existing slugs.

    If the normalized base slug is free, use it. Otherwise append a numeric
    suffix: ``slug-2``, ``slug-3``, etc.
    """
    base_slug = slugify_name(base) or fallback
    taken: Set[str] = {s for s in existing if s}
    taken.update(RESERVED_SLUGS)
    if base_slug not in taken:
        return base_slug
    counter = 2
    while True:
        candidate = f"{base_slug}-{counter}"
        if candidate not in taken:
            return candidate
        counter += 1


def unique_slug_for(
    db: Session,
    model,
    base: str,
    *,
    exclude_id: Optional[object] = None,
    fallback: str = "item",
) -> str:
    """Pick a free slug for ``model`` by looking at rows sharing the prefix."""
    prefix = slugify_name(base) or fallback
    query = db.query(model.slug).filter(model.slug.like(f"{prefix}%"))
    if exclude_id is not None:
        query = query.filter(model.id != exclude_id)
    return generate_unique_slug(prefix, (row[0] for row in query.all()), fallback=fallback)
