"""Voucher-type count aggregation.

Counts annotated rows per voucher type under display labels, or passes through
the per-type counts the upstream ledger endpoint already computed.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from .models import AnnotatedTransaction, TypeCount

# Display labels used by the customer ledger's count table.
CUSTOMER_LABELS: dict[str, str] = {
    "Opening": "Opening Balance",
    "Invoice": "Sales",
    "Payment": "Receipt",
    "Return": "Sales Return",
}

# Display labels used by the vendor ledger's count table.
VENDOR_LABELS: dict[str, str] = {
    "Opening": "Opening Balance",
    "Purchase": "Purchase",
    "Payment": "Payment",
    "Purchase Return": "Purchase Return",
    "Expense": "Expense",
}

_TOTAL_KEYS = ("total_transactions", "total")


def _authoritative_counts(authoritative: Mapping[str, Any]) -> TypeCount:
    counts: dict[str, int] = {}
    total: int | None = None
    for key, value in authoritative.items():
        if isinstance(value, bool):
            continue
        try:
            n = int(value)
        except (TypeError, ValueError):
            continue
        if key in _TOTAL_KEYS:
            total = n
        else:
            counts[str(key)] = n
    return TypeCount(
        counts=counts,
        total=sum(counts.values()) if total is None else total,
        source="authoritative",
    )


def aggregate_counts(
    annotated: Iterable[AnnotatedTransaction],
    label_map: Mapping[str, str] | None = None,
    *,
    authoritative: Mapping[str, Any] | None = None,
) -> TypeCount:
    """Count rows per voucher-type label.

    - Raw voucher types are mapped through ``label_map``; unmapped types keep
      their raw name (rows without a type count under ``""``).
    - Every label in ``label_map`` is present in the result, with ``0`` when
      no row carries it.
    - When ``authoritative`` is given, its entries are used verbatim instead
      of the local grouping. A ``total_transactions`` (or ``total``) entry
      becomes :attr:`TypeCount.total`; other non-numeric entries are ignored.
    """

    if authoritative is not None:
        return _authoritative_counts(authoritative)

    labels = dict(label_map or {})
    counts: dict[str, int] = {label: 0 for label in labels.values()}
    total = 0
    for row in annotated:
        label = labels.get(row.voucher_type, row.voucher_type)
        counts[label] = counts.get(label, 0) + 1
        total += 1
    return TypeCount(counts=counts, total=total, source="local")


def default_labels(source: str) -> dict[str, str]:
    """Label map matching the count table of a ledger source."""

    if source == "customer":
        return dict(CUSTOMER_LABELS)
    if source == "vendor":
        return dict(VENDOR_LABELS)
    return {}


__all__ = ["CUSTOMER_LABELS", "VENDOR_LABELS", "aggregate_counts", "default_labels"]
