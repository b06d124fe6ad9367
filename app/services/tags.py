"""
Tag codec: list-of-labels <-> the single comma-joined scalar stored in
`entries.tags`.

    encode(["gym", " ", "run"]) -> "gym,run"
    encode([])                  -> None
    decode("gym, run,,")        -> ["gym", "run"]
"""
from __future__ import annotations

from typing import Any, Iterable, Optional

SEPARATOR = ","


def encode(tags: Optional[Iterable[Any]]) -> Optional[str]:
    """Drop falsy / whitespace-only labels and join the rest, or None if nothing is left."""
    if not tags:
        return None
    kept = [str(t) for t in tags if t and str(t).strip()]
    if not kept:
        return None
    return SEPARATOR.join(kept)


def decode(value: Any) -> list[str]:
    if not isinstance(value, str):
        return []
    return [part.strip() for part in value.split(SEPARATOR) if part.strip()]
