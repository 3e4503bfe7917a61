"""Shared utilities for script generation stages and nodes."""

import math
import re
from typing import Iterator, List, Sequence, Tuple, TypeVar

T = TypeVar("T")

_NON_ALNUM = re.compile(r"[^a-z0-9\s]")
_WHITESPACE = re.compile(r"\s+")
_PARAGRAPH_BREAKS = re.compile(r"\s*\n\s*\n\s*")


def normalize_text(text: str) -> str:
    """Lowercase, drop non-alphanumerics, collapse whitespace."""
    lowered = _NON_ALNUM.sub("", (text or "").lower())
    return _WHITESPACE.sub(" ", lowered).strip()


def count_words(text: str) -> int:
    """Whitespace-token count."""
    return len((text or "").split())


def collapse_paragraphs(text: str) -> str:
    """Join paragraphs into one continuous string."""
    single = _PARAGRAPH_BREAKS.sub(" ", (text or "").strip())
    return single.replace("\n", " ").strip()


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def iter_batches(items: Sequence[T], batch_size: int) -> Iterator[Tuple[int, Sequence[T]]]:
    """Yield (batch_start, batch) pairs."""
    if batch_size < 1:
        raise ValueError(f"batch_size must be >= 1, got {batch_size}")
    for start in range(0, len(items), batch_size):
        yield start, items[start:start + batch_size]


def global_index(batch_start: int, local_index: int, batch_len: int) -> int:
    """
    Map an index reported inside a batch to its position in the full list.

    Indices outside the batch are clamped into it so a malformed reply can
    never point at another batch's item.
    """
    if batch_len <= 0:
        return batch_start
    local = min(max(int(local_index), 0), batch_len - 1)
    return batch_start + local


def safe_local_index(raw_index, position: int, batch_len: int) -> int:
    """Use the LLM-reported index when it lies within the batch, else the list position."""
    try:
        idx = int(raw_index)
    except (TypeError, ValueError):
        return position
    if 0 <= idx < batch_len:
        return idx
    return position


def string_list(value) -> List[str]:
    """Coerce an LLM field to a list of non-empty strings."""
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value.strip() else []
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value if v is not None and str(v).strip()]
    return [str(value)]
