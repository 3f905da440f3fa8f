"""
Mission filter: pick the working set of records for a review.
"""

from typing import Iterable

from .types import HIDDEN_TAG, Record


def in_scope(record: Record, scope: str) -> bool:
    """True if ``record.timestamp`` starts with ``scope`` (blank scope matches all)."""
    if not scope or not scope.strip():
        return True
    return record.timestamp.startswith(scope)


def select(
    records: Iterable[Record],
    scope: str,
    hidden_tag: str = HIDDEN_TAG,
) -> list[Record]:
    """
    Records that are not hidden and fall within ``scope``.

    ``scope`` is a case-sensitive timestamp prefix such as ``2022`` or
    ``2022-12``. Input order is preserved. An empty result is returned
    as-is; the caller decides how to report it.
    """
    return [
        r for r in records
        if hidden_tag not in r.tags and in_scope(r, scope)
    ]


def hidden(records: Iterable[Record], hidden_tag: str = HIDDEN_TAG) -> list[Record]:
    """Records carrying the hidden marker."""
    return [r for r in records if hidden_tag in r.tags]
