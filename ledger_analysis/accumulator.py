"""Running-balance accumulation over a canonical, date-ordered ledger.

One forward pass: starting from the opening balance, each row adds
``debit - credit`` and is annotated with the balance after it and that
balance's Dr/Cr side. The pass is the same for every ledger; creditor ledgers
arrive with their sides already swapped by the normalizer.

The annotated stream must always be computed from the full transaction set.
Filtering is a projection over the result (:mod:`ledger_analysis.projection`);
running this pass over a filtered subset produces different, wrong balances.
"""

from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal

from .models import AnnotatedTransaction, Transaction
from .money import ZERO


class UnsortedTransactionsError(ValueError):
    """Raised when :func:`accumulate` receives rows out of ``(date, seq)`` order."""


def _ensure_sorted(transactions: Sequence[Transaction]) -> None:
    for prev, cur in zip(transactions, transactions[1:], strict=False):
        if cur.sort_key < prev.sort_key:
            raise UnsortedTransactionsError(
                f"transactions must be sorted by (date, seq): {cur.id!r} "
                f"({cur.date.isoformat()}, seq={cur.seq}) follows {prev.id!r} "
                f"({prev.date.isoformat()}, seq={prev.seq})"
            )


def accumulate(
    transactions: Sequence[Transaction],
    opening_balance: Decimal | None = None,
) -> list[AnnotatedTransaction]:
    """Annotate each transaction with the running balance after it.

    ``opening_balance`` defaults to ``0``. Intermediate balances are exact
    ``Decimal`` values; nothing is rounded here.

    Raises :class:`UnsortedTransactionsError` if the input is not sorted
    ascending by ``(date, seq)``. Sorting is left to the caller because the
    correct tie-break is source specific.
    """

    _ensure_sorted(transactions)

    balance = ZERO if opening_balance is None else opening_balance
    annotated: list[AnnotatedTransaction] = []
    for tx in transactions:
        balance = balance + tx.debit - tx.credit
        annotated.append(AnnotatedTransaction.from_transaction(tx, running_balance=balance))
    return annotated


def closing_balance(
    annotated: Sequence[AnnotatedTransaction],
    opening_balance: Decimal | None = None,
) -> Decimal:
    """Balance after the last row, or the opening balance for an empty stream."""

    if annotated:
        return annotated[-1].running_balance
    return ZERO if opening_balance is None else opening_balance


__all__ = ["UnsortedTransactionsError", "accumulate", "closing_balance"]
