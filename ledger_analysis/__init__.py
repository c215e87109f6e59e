"""Public interface for the ``ledger_analysis`` package.

This module exposes the package's pipeline functions and public models/types
as the stable import surface. There is no runtime logic here, only symbol
re-exports.
"""

from .accumulator import UnsortedTransactionsError, accumulate, closing_balance
from .aggregate import aggregate_counts, default_labels
from .ledger import LedgerView, build_ledger
from .models import (
    AnnotatedTransaction,
    AuthoritativeSummary,
    Discrepancy,
    FilterCriteria,
    LedgerSummary,
    LedgerWarning,
    LineItem,
    NormalizationResult,
    Page,
    Projection,
    SkippedRow,
    Transaction,
    TypeCount,
)
from .normalizers import normalize, parse_date
from .projection import project, voucher_types
from .reconcile import reconcile
from .sources import SourceSchema, get_source

__all__ = [
    # Pipeline
    "normalize",
    "parse_date",
    "accumulate",
    "closing_balance",
    "reconcile",
    "project",
    "voucher_types",
    "aggregate_counts",
    "default_labels",
    "build_ledger",
    "get_source",
    # Models / types
    "Transaction",
    "AnnotatedTransaction",
    "LineItem",
    "NormalizationResult",
    "SkippedRow",
    "AuthoritativeSummary",
    "LedgerSummary",
    "Discrepancy",
    "LedgerWarning",
    "FilterCriteria",
    "Page",
    "Projection",
    "TypeCount",
    "LedgerView",
    "SourceSchema",
    # Errors
    "UnsortedTransactionsError",
]
