"""Ledger summary reconciliation.

Totals can come from two places: an authoritative summary sent by the upstream
system of record (which may cover rows outside the loaded window), and a local
recomputation over the annotated stream. :func:`reconcile` resolves each field
independently: an authoritative non-null value wins, otherwise the local value
is used. Whenever both exist and differ by more than the tolerance, the
difference is recorded on the result and logged; it is never raised.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from decimal import Decimal
from typing import Any, TypeAlias

from .accumulator import closing_balance
from .config import get_summary_tolerance
from .logging_setup import get_logger
from .models import (
    SUMMARY_FIELDS,
    AnnotatedTransaction,
    AuthoritativeSummary,
    Discrepancy,
    LedgerSummary,
)
from .money import ZERO

_logger = get_logger("ledger_analysis.reconcile")

AuthoritativeInput: TypeAlias = AuthoritativeSummary | LedgerSummary | Mapping[str, Any]


def derive_opening_balance(annotated: Sequence[AnnotatedTransaction]) -> Decimal:
    """Back out the opening balance from the first annotated row.

    ``first.running_balance - first.debit + first.credit``; ``0`` when empty.
    """

    if not annotated:
        return ZERO
    first = annotated[0]
    return first.running_balance - first.debit + first.credit


def local_summary(
    annotated: Sequence[AnnotatedTransaction],
    *,
    opening_balance: Decimal | None = None,
    opening_rows_as_balance: bool = False,
) -> dict[str, Decimal]:
    """Recompute every summary field from the annotated stream alone.

    With ``opening_rows_as_balance``, rows whose voucher type is ``Opening``
    are read as the carried-in position: their net amount is added to the
    opening balance and they are left out of the debit and credit totals.
    The closing balance is the same either way.
    """

    seed = derive_opening_balance(annotated) if opening_balance is None else opening_balance
    rows: Sequence[AnnotatedTransaction] = annotated
    opening = seed
    if opening_rows_as_balance:
        rows = [row for row in annotated if not row.is_opening]
        opening = seed + sum((row.net for row in annotated if row.is_opening), ZERO)
    return {
        "total_debit": sum((row.debit for row in rows), ZERO),
        "total_credit": sum((row.credit for row in rows), ZERO),
        "opening_balance": opening,
        "closing_balance": closing_balance(annotated, seed),
    }


def coerce_authoritative(value: AuthoritativeInput | None) -> AuthoritativeSummary | None:
    """Accept the supported authoritative shapes and return a validated model.

    Raises ``pydantic.ValidationError`` (a ``ValueError``) for malformed
    mappings.
    """

    if value is None or isinstance(value, AuthoritativeSummary):
        return value
    if isinstance(value, LedgerSummary):
        return AuthoritativeSummary(
            total_debit=value.total_debit,
            total_credit=value.total_credit,
            opening_balance=value.opening_balance,
            closing_balance=value.closing_balance,
        )
    if isinstance(value, Mapping):
        return AuthoritativeSummary.model_validate(dict(value))
    raise TypeError(f"unsupported authoritative summary type: {type(value).__name__}")


def reconcile(
    annotated: Sequence[AnnotatedTransaction],
    authoritative: AuthoritativeInput | None = None,
    *,
    opening_balance: Decimal | None = None,
    tolerance: Decimal | None = None,
    opening_rows_as_balance: bool = False,
) -> LedgerSummary:
    """Resolve the ledger summary, preferring authoritative values per field.

    Parameters
    ----------
    annotated:
        The full annotated stream (never a filtered projection).
    authoritative:
        Optional upstream summary; any subset of fields may be present.
    opening_balance:
        The seed the stream was accumulated from. When omitted it is derived
        from the first row (``0`` for an empty stream).
    tolerance:
        Maximum tolerated absolute difference between authoritative and local
        values. Defaults to ``LEDGER_SUMMARY_TOLERANCE`` (``0.01``).
    opening_rows_as_balance:
        Treat ``Opening`` voucher rows as the starting position rather than
        as activity (see :func:`local_summary`). Upstream ledgers that send
        an ``Opening`` row report their opening balance and totals this way.
    """

    tol = get_summary_tolerance() if tolerance is None else tolerance
    auth = coerce_authoritative(authoritative)
    supplied = auth.supplied() if auth is not None else {}

    local = local_summary(
        annotated,
        opening_balance=opening_balance,
        opening_rows_as_balance=opening_rows_as_balance,
    )
    if not annotated and "opening_balance" in supplied and opening_balance is None:
        # With no rows the closing position is wherever the ledger opened.
        local["opening_balance"] = supplied["opening_balance"]
        local["closing_balance"] = supplied["opening_balance"]

    resolved: dict[str, Decimal] = {}
    sources: dict[str, str] = {}
    discrepancies: list[Discrepancy] = []
    for name in SUMMARY_FIELDS:
        if name in supplied:
            resolved[name] = supplied[name]
            sources[name] = "authoritative"
            if abs(supplied[name] - local[name]) > tol:
                discrepancies.append(
                    Discrepancy(field=name, authoritative=supplied[name], local=local[name])
                )
        else:
            resolved[name] = local[name]
            sources[name] = "local"

    for d in discrepancies:
        _logger.warning(
            "Ledger summary mismatch on %s: authoritative=%s local=%s (difference %s)",
            d.field,
            d.authoritative,
            d.local,
            d.difference,
        )

    return LedgerSummary(
        total_debit=resolved["total_debit"],
        total_credit=resolved["total_credit"],
        opening_balance=resolved["opening_balance"],
        closing_balance=resolved["closing_balance"],
        sources=sources,
        discrepancies=tuple(discrepancies),
    )


__all__ = [
    "coerce_authoritative",
    "derive_opening_balance",
    "local_summary",
    "reconcile",
]
