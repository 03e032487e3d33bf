"""
Interest normalization and overlap.

Profiles hold interests as free text (``"Music, Travel;Art"``). The
matcher compares canonical token sets: split on ``,`` or ``;``, trimmed,
lowercased, empties dropped, first occurrence order kept.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

_SEPARATOR = re.compile(r"[,;]\s*")


def normalize_interests(text: str | Iterable[str] | None) -> tuple[str, ...]:
    """
    Convert free-text interests into an ordered, de-duplicated token tuple.

    ``None`` and empty input give an empty tuple. A list of strings
    (array columns, webhook metadata) is joined with commas first.
    Malformed input only ever yields fewer tokens, never an error.
    """
    if not text:
        return ()
    if not isinstance(text, str):
        text = ",".join(str(part) for part in text if part is not None)

    seen: dict[str, None] = {}
    for raw in _SEPARATOR.split(text):
        token = raw.strip().lower()
        if token:
            seen.setdefault(token, None)
    return tuple(seen)


def shared_interests(a: Iterable[str], b: Iterable[str]) -> tuple[str, ...]:
    """Return the tokens of *a* that also appear in *b*, in *a*'s order."""
    other = set(b)
    return tuple(token for token in a if token in other)
