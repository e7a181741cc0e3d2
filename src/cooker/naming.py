"""Identifier derivation used to turn a theme name into machine tokens."""

from __future__ import annotations

import re
import unicodedata

__all__ = [
    "PREFIX_MIN_LENGTH",
    "derive_namespace",
    "derive_prefix",
    "derive_slug",
    "is_valid_prefix",
    "is_valid_slug",
]


PREFIX_MIN_LENGTH = 2

_WHITESPACE = re.compile(r"\s+")
_SLUG_PATTERN = re.compile(r"^[a-z0-9_-]+$")
_PREFIX_PATTERN = re.compile(r"^[A-Z0-9_]+$")
_NAMESPACE_SEPARATORS = re.compile(r"[\W_]+")


def _ascii_fold(value: str) -> str:
    text = unicodedata.normalize("NFKD", value)
    return text.encode("ascii", "ignore").decode("ascii")


def derive_slug(name: str, *, separator: str = "_") -> str:
    """Create a lowercase package slug from ``name``.

    Parameters
    ----------
    name:
        Free text entered by the user, usually the theme name.
    separator:
        Either ``"_"`` or ``"-"``. Runs of whitespace are replaced by it.
    """

    if separator not in {"_", "-"}:
        raise ValueError("separator must be '_' or '-'")

    text = _ascii_fold(name).strip().lower()
    text = _WHITESPACE.sub(separator, text)
    text = re.sub(r"[^a-z0-9_\-]", "", text)
    text = re.sub(rf"{re.escape(separator)}+", separator, text)
    return text.strip("_-")


def derive_namespace(slug: str) -> str:
    """Return the capitalised, underscore joined namespace for ``slug``."""

    segments = [segment for segment in _NAMESPACE_SEPARATORS.split(slug) if segment]
    return "_".join(segment[0].upper() + segment[1:] for segment in segments)


def derive_prefix(name: str) -> str:
    """Return the short uppercase prefix for ``name``.

    Names with two or more words use the initial of every word. Otherwise the
    first three characters are used, provided the name is longer than two
    characters. Shorter single words produce an empty prefix which callers
    must reject. Accented letters are folded to ASCII first.
    """

    name = _ascii_fold(name)
    words = name.split()
    prefix = ""
    if len(words) >= 2:
        prefix = "".join(word[0].upper() for word in words)

    stripped = name.strip()
    if len(prefix) < PREFIX_MIN_LENGTH and len(stripped) > 2:
        prefix = stripped[:3].upper()

    return prefix


def is_valid_slug(value: str) -> bool:
    return bool(_SLUG_PATTERN.match(value))


def is_valid_prefix(value: str) -> bool:
    return len(value) >= PREFIX_MIN_LENGTH and bool(_PREFIX_PATTERN.match(value))
