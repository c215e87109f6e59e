"""Read-only filtering and pagination over an annotated ledger.

:func:`project` selects and pages rows; it never recomputes balances. Each row
keeps the ``running_balance`` it was given when the full stream was
accumulated, so a filtered view shows the same balance a row has in the
unfiltered ledger.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import date, datetime

from .models import AnnotatedTransaction, FilterCriteria, Page, Projection


def _as_day(value: date | datetime | None) -> date | None:
    # A datetime bound compares by calendar day, so a ``to_date`` of
    # "2025-04-30 00:00" still includes everything dated the 30th.
    if isinstance(value, datetime):
        return value.date()
    return value


def _contains(haystack: str | None, needle: str) -> bool:
    return bool(haystack) and needle in haystack.lower()


def matches(row: AnnotatedTransaction, criteria: FilterCriteria) -> bool:
    """Return True when ``row`` satisfies every set predicate of ``criteria``."""

    start = _as_day(criteria.from_date)
    if start is not None and row.date < start:
        return False
    end = _as_day(criteria.to_date)
    if end is not None and row.date > end:
        return False

    if criteria.voucher_type and criteria.voucher_type != "all":
        if row.voucher_type != criteria.voucher_type:
            return False

    if criteria.voucher_no:
        if criteria.voucher_no.strip().lower() not in row.voucher_no.lower():
            return False

    if criteria.balance_type and criteria.balance_type.lower() != "all":
        if row.balance_type.lower() != criteria.balance_type.strip().lower():
            return False

    needle = (criteria.free_text or "").strip().lower()
    if needle and not (
        _contains(row.voucher_no, needle)
        or _contains(row.particulars, needle)
        or _contains(row.voucher_type, needle)
    ):
        return False

    return True


def project(
    annotated: Sequence[AnnotatedTransaction],
    criteria: FilterCriteria | None = None,
    page: Page | None = None,
) -> Projection:
    """Filter ``annotated`` by ``criteria`` and return one page of matches.

    ``total_matched`` counts every matching row, not just the page. A page
    beyond the last match returns no rows. With ``page=None`` all matches are
    returned.
    """

    crit = criteria or FilterCriteria()
    matched = [row for row in annotated if matches(row, crit)]
    if page is None:
        return Projection(rows=tuple(matched), total_matched=len(matched), page=None)
    rows = matched[page.start : page.start + page.size]
    return Projection(rows=tuple(rows), total_matched=len(matched), page=page)


def voucher_types(annotated: Iterable[AnnotatedTransaction]) -> list[str]:
    """Distinct non-empty voucher types in first-seen order."""

    seen: dict[str, None] = {}
    for row in annotated:
        if row.voucher_type:
            seen.setdefault(row.voucher_type, None)
    return list(seen)


__all__ = ["matches", "project", "voucher_types"]
