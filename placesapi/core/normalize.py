"""Text normalization shared by name matching, sorting and account lookups."""

import re
import unicodedata
from typing import Optional

_WHITESPACE = re.compile(r"\s+")


def fold_name(value: Optional[str]) -> str:
    """Lowercase and strip combining diacritics ("Zürich" -> "zurich")."""
    if not value:
        return ""
    decomposed = unicodedata.normalize("NFD", str(value).lower())
    return "".join(ch for ch in decomposed if not ("\u0300" <= ch <= "\u036f"))


def compact_key(value: Optional[str]) -> str:
    """Folded name with all whitespace removed ("North Macedonia" -> "northmacedonia")."""
    return _WHITESPACE.sub("", fold_name(value))


def city_key(value: Optional[str]) -> str:
    """Folded name, trimmed, inner whitespace runs collapsed to one space."""
    return _WHITESPACE.sub(" ", fold_name(value)).strip()


def normalize_email(value: Optional[str]) -> str:
    return str(value or "").strip().lower()


def normalize_user_name(value: Optional[str]) -> str:
    return _WHITESPACE.sub(" ", fold_name(str(value or "").strip()))
