"""End-to-end ledger pipeline shared by the customer, vendor and general ledgers.

:func:`build_ledger` runs normalize → accumulate → reconcile/aggregate once
over the full record set and returns an immutable :class:`LedgerView`. Views
for display are then taken with :meth:`LedgerView.project`, which only
filters and pages the already-annotated rows.

Opening balance
---------------
A ledger can carry its starting position either as an explicit seed or as
``Opening`` voucher rows in the stream. Applying both counts the opening
balance twice. When both are present the ``Opening`` rows are kept (they are
part of the ledger), the explicit seed is not applied, and an
``opening_double_count`` warning is reported.

Opening rows are also what the summary reads as the opening balance: their
net amount is the reported opening and they are left out of the debit and
credit totals, which is how the upstream ledger summary states them.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from .accumulator import accumulate
from .aggregate import aggregate_counts, default_labels
from .logging_setup import get_logger
from .models import (
    AnnotatedTransaction,
    FilterCriteria,
    LedgerSummary,
    LedgerWarning,
    NormalizationResult,
    Page,
    Projection,
    RawRecord,
    TypeCount,
)
from .money import ZERO, format_balance
from .normalizers import normalize, opening_row_balance, split_opening_rows
from .projection import project as project_rows
from .projection import voucher_types as list_voucher_types
from .reconcile import AuthoritativeInput, coerce_authoritative, reconcile
from .sources import Convention, SourceSchema, get_source

_logger = get_logger("ledger_analysis.ledger")


@dataclass(frozen=True, slots=True)
class LedgerView:
    """The computed ledger: annotated rows, reconciled summary and counts."""

    source: str
    convention: Convention
    opening_balance: Decimal
    normalization: NormalizationResult
    annotated: tuple[AnnotatedTransaction, ...]
    summary: LedgerSummary
    counts: TypeCount
    warnings: tuple[LedgerWarning, ...] = ()

    @property
    def skipped_count(self) -> int:
        return self.normalization.skipped_count

    def project(
        self, criteria: FilterCriteria | None = None, page: Page | None = None
    ) -> Projection:
        return project_rows(self.annotated, criteria, page)

    def voucher_types(self) -> list[str]:
        return list_voucher_types(self.annotated)


def _resolve_seed(
    normalized: NormalizationResult, opening_balance: Decimal | None
) -> tuple[Decimal, list[LedgerWarning]]:
    opening_rows, _ = split_opening_rows(normalized.transactions)
    if opening_balance is None or opening_balance == ZERO or not opening_rows:
        return (ZERO if opening_balance is None else opening_balance), []

    carried = opening_row_balance(opening_rows)
    message = (
        f"opening balance {format_balance(opening_balance)} was supplied but the ledger "
        f"already has {len(opening_rows)} Opening row(s) totalling {format_balance(carried)}; "
        "the Opening rows are used and the supplied seed is ignored"
    )
    _logger.warning("Opening balance double count avoided: %s", message)
    return ZERO, [LedgerWarning(code="opening_double_count", message=message)]


def build_ledger(
    raw_records: Iterable[RawRecord],
    *,
    source: str | SourceSchema = "customer",
    convention: Convention | None = None,
    opening_balance: Decimal | None = None,
    authoritative_summary: AuthoritativeInput | None = None,
    authoritative_counts: Mapping[str, Any] | None = None,
    label_map: Mapping[str, str] | None = None,
    tolerance: Decimal | None = None,
) -> LedgerView:
    """Compute the full ledger view from upstream records.

    Parameters
    ----------
    raw_records:
        Transaction records as returned by the ledger endpoint.
    source:
        Ledger source name or schema; selects field mapping and sign convention.
    convention:
        Optional override of the source's sign convention.
    opening_balance:
        Starting position. ``None`` means ``0`` (or whatever ``Opening`` rows
        carry).
    authoritative_summary:
        Upstream totals in book (debtor) convention. For creditor ledgers they
        are re-expressed with sides swapped before reconciliation.
    authoritative_counts:
        Upstream per-type counts, used verbatim when given.
    label_map:
        Voucher-type → display label map; defaults to the source's labels.
    tolerance:
        Summary mismatch tolerance (see :func:`ledger_analysis.reconcile.reconcile`).
    """

    schema = get_source(source)
    conv: Convention = convention or schema.convention

    normalized = normalize(raw_records, source=schema, convention=conv)
    warnings = [
        LedgerWarning(code="skipped_row", message=f"row {s.position}: {s.reason}")
        for s in normalized.skipped
    ]

    seed, seed_warnings = _resolve_seed(normalized, opening_balance)
    warnings.extend(seed_warnings)

    annotated = accumulate(normalized.transactions, seed)

    auth = coerce_authoritative(authoritative_summary)
    if auth is not None and conv == "creditor":
        auth = auth.for_creditor_ledger()
    summary = reconcile(
        annotated,
        auth,
        opening_balance=seed,
        tolerance=tolerance,
        opening_rows_as_balance=True,
    )
    warnings.extend(
        LedgerWarning(
            code="summary_discrepancy",
            message=(
                f"{d.field}: authoritative {d.authoritative} differs from "
                f"computed {d.local} by {d.difference}"
            ),
        )
        for d in summary.discrepancies
    )

    labels = default_labels(schema.name) if label_map is None else label_map
    counts = aggregate_counts(annotated, labels, authoritative=authoritative_counts)

    _logger.debug(
        "Built %s ledger: %d rows (%d skipped), closing %s",
        schema.name,
        len(annotated),
        normalized.skipped_count,
        format_balance(summary.closing_balance),
    )

    return LedgerView(
        source=schema.name,
        convention=conv,
        opening_balance=seed,
        normalization=normalized,
        annotated=tuple(annotated),
        summary=summary,
        counts=counts,
        warnings=tuple(warnings),
    )


__all__ = ["LedgerView", "build_ledger"]
