"""
Slug derivation and collision resolution for items.

A slug is computed once, when an item is created, from its name.
Collisions are resolved by extrapolating from the highest existing
numeric suffix, so a deleted slug in the middle of a family is never
handed out again.
"""

from __future__ import annotations

import re
import unicodedata
from typing import Iterable

_NON_ALNUM = re.compile(r"[^a-z0-9]+")
_DIGITS = re.compile(r"(\d+)")


def slugify(name: str) -> str:
    """Lower-case, ASCII-only, dash separated form of `name`."""
    ascii_name = unicodedata.normalize("NFKD", name).encode("ascii", "ignore").decode("ascii")
    slug = _NON_ALNUM.sub("-", ascii_name.lower()).strip("-")
    return slug or "item"


def slug_family_pattern(base_slug: str) -> re.Pattern[str]:
    """Matches `base_slug` itself and `base_slug-N`."""
    return re.compile(rf"^{re.escape(base_slug)}(-\d+)?$")


def natural_key(value: str) -> list[int | str]:
    """Sort key ordering embedded numbers numerically ("a-2" < "a-10")."""
    return [int(part) if part.isdigit() else part.lower() for part in _DIGITS.split(value)]


def next_available_slug(base_slug: str, slugs: Iterable[str]) -> str:
    """
    Next free slug for `base_slug` given the existing `slugs` of its family.

    Examples:
        next_available_slug("cabin", [])                   -> "cabin"
        next_available_slug("cabin", ["cabin"])            -> "cabin-1"
        next_available_slug("cabin", ["cabin", "cabin-2"]) -> "cabin-3"
    """
    family = [s for s in slugs if slug_family_pattern(base_slug).match(s)]
    if not family:
        return base_slug

    last_slug = max(family, key=natural_key)

    suffix = re.fullmatch(rf"{re.escape(base_slug)}-(\d+)", last_slug)
    if suffix:
        return f"{base_slug}-{int(suffix.group(1)) + 1}"

    return f"{base_slug}-1"
