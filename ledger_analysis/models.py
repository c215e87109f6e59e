"""Data models and type aliases for ``ledger_analysis``.

Internal value types (canonical and annotated transactions, summaries, filter
criteria, projections) are frozen ``dataclass`` instances: they are created by
the normalizer and accumulator and only read downstream.

Objects that arrive from upstream systems and are trusted over local
recomputation (the authoritative ledger summary) are validated with Pydantic,
since their field names and value shapes vary by endpoint.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from datetime import date
from decimal import Decimal
from types import MappingProxyType
from typing import Any, Literal, TypeAlias

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from .money import ZERO, format_balance, quantize_currency, to_decimal

# ---------------------------------------------------------------------------
# Raw input and small aliases
# ---------------------------------------------------------------------------

# An upstream transaction record as decoded from JSON. Field names differ per
# endpoint (``vch_no`` vs ``voucher_no`` and so on); see ``sources.py``.
RawRecord: TypeAlias = Mapping[str, Any]

BalanceType: TypeAlias = Literal["Dr", "Cr"]

OPENING_VOUCHER_TYPE = "Opening"


def balance_type(value: Decimal) -> BalanceType:
    """Classify a signed balance under debtor-ledger convention."""

    return "Dr" if value >= 0 else "Cr"


# ---------------------------------------------------------------------------
# Canonical and annotated transactions
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class LineItem:
    """A display-only sub-record of a voucher (goods, quantities, tax).

    Values are kept as the upstream strings; nothing in this package
    aggregates them.
    """

    name: str | None = None
    quantity: str | None = None
    rate: str | None = None
    discount: str | None = None
    tax_percent: str | None = None
    tax_amount: str | None = None
    value: str | None = None
    description: str | None = None


@dataclass(frozen=True, slots=True)
class Transaction:
    """A canonical ledger row after normalization.

    ``seq`` is the row's position in the upstream list and breaks ties
    between rows that share a ``date``. ``particulars`` carries the
    counterparty or description text shown in the ledger table.
    """

    id: str
    date: date
    voucher_no: str
    voucher_type: str
    debit: Decimal
    credit: Decimal
    seq: int = 0
    particulars: str | None = None
    narration: str | None = None
    line_items: tuple[LineItem, ...] = ()

    def __post_init__(self) -> None:
        if self.debit < 0 or self.credit < 0:
            raise ValueError(
                f"Transaction {self.id!r}: debit and credit must be non-negative "
                f"(debit={self.debit}, credit={self.credit})"
            )

    @property
    def is_opening(self) -> bool:
        return self.voucher_type.strip().lower() == OPENING_VOUCHER_TYPE.lower()

    @property
    def net(self) -> Decimal:
        """Signed effect on the running balance (``debit - credit``)."""

        return self.debit - self.credit

    @property
    def sort_key(self) -> tuple[date, int]:
        return (self.date, self.seq)


@dataclass(frozen=True, slots=True, kw_only=True)
class AnnotatedTransaction(Transaction):
    """A :class:`Transaction` with the running balance after it was applied."""

    running_balance: Decimal
    balance_type: BalanceType

    @classmethod
    def from_transaction(cls, tx: Transaction, *, running_balance: Decimal) -> AnnotatedTransaction:
        values = {f.name: getattr(tx, f.name) for f in fields(Transaction)}
        return cls(
            **values,
            running_balance=running_balance,
            balance_type=balance_type(running_balance),
        )

    @property
    def balance_display(self) -> str:
        return format_balance(self.running_balance)


# ---------------------------------------------------------------------------
# Normalization results and warnings
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class SkippedRow:
    """An upstream record that could not be normalized."""

    position: int
    reason: str


@dataclass(frozen=True, slots=True)
class NormalizationResult:
    """Canonical rows (sorted by ``(date, seq)``) and the rows that were dropped."""

    transactions: tuple[Transaction, ...]
    skipped: tuple[SkippedRow, ...] = ()

    @property
    def skipped_count(self) -> int:
        return len(self.skipped)


@dataclass(frozen=True, slots=True)
class LedgerWarning:
    """A non-fatal data-quality finding reported alongside results.

    ``code`` is one of ``"skipped_row"``, ``"summary_discrepancy"`` or
    ``"opening_double_count"``.
    """

    code: str
    message: str


# ---------------------------------------------------------------------------
# Summary
# ---------------------------------------------------------------------------

SUMMARY_FIELDS: tuple[str, ...] = (
    "total_debit",
    "total_credit",
    "opening_balance",
    "closing_balance",
)


@dataclass(frozen=True, slots=True)
class Discrepancy:
    """Authoritative and local values for one summary field disagree."""

    field: str
    authoritative: Decimal
    local: Decimal

    @property
    def difference(self) -> Decimal:
        return self.authoritative - self.local


@dataclass(frozen=True, slots=True)
class LedgerSummary:
    """Reconciled totals for a ledger.

    ``sources`` records, per field in :data:`SUMMARY_FIELDS`, whether the
    value came from the ``"authoritative"`` upstream summary or the
    ``"local"`` recomputation. Values are unrounded; use :meth:`as_dict` or
    the ``money`` helpers for display.
    ``sources`` is stored as a read-only mapping.
    """

    total_debit: Decimal
    total_credit: Decimal
    opening_balance: Decimal
    closing_balance: Decimal
    sources: Mapping[str, str] = field(default_factory=dict)
    discrepancies: tuple[Discrepancy, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "sources", MappingProxyType(dict(self.sources)))

    @property
    def opening_balance_type(self) -> BalanceType:
        return balance_type(self.opening_balance)

    @property
    def closing_balance_type(self) -> BalanceType:
        return balance_type(self.closing_balance)

    @property
    def is_consistent(self) -> bool:
        return not self.discrepancies

    def as_dict(self) -> dict[str, Any]:
        """JSON-friendly view with currency-scale strings."""

        return {
            "total_debit": str(quantize_currency(self.total_debit)),
            "total_credit": str(quantize_currency(self.total_credit)),
            "opening_balance": str(quantize_currency(self.opening_balance)),
            "opening_balance_type": self.opening_balance_type,
            "closing_balance": str(quantize_currency(self.closing_balance)),
            "closing_balance_type": self.closing_balance_type,
            "sources": dict(self.sources),
            "discrepancies": [
                {
                    "field": d.field,
                    "authoritative": str(d.authoritative),
                    "local": str(d.local),
                }
                for d in self.discrepancies
            ],
        }


def _signed_balance(value: Any) -> Decimal | None:
    """Read a balance given as a signed number or ``{amount, type}`` object."""

    if value is None:
        return None
    if isinstance(value, Mapping):
        amount = to_decimal(value.get("amount"), default=None)
        side = str(value.get("type") or "Dr").strip().title()
        if side not in ("Dr", "Cr"):
            raise ValueError(f"balance type must be 'Dr' or 'Cr', got {value.get('type')!r}")
        return ZERO - amount if side == "Cr" else amount
    if isinstance(value, str) and not value.strip():
        return None
    return to_decimal(value, default=None)


class AuthoritativeSummary(BaseModel):
    """Upstream ledger totals, trusted over local recomputation when present.

    Every field is optional. Accepted spellings mirror the dashboard API:
    ``total_debit``/``total_debits``, ``total_credit``/``total_credits``, and
    ``closing_balance``/``outstanding_balance``/``balance``. Balances may be
    signed numbers, numeric strings, or ``{"amount": ..., "type": "Dr"|"Cr"}``
    objects (``Cr`` is negative). A sibling ``balance_type`` key next to a
    bare ``balance`` is folded into the sign. When no opening balance is
    given, an ``"Opening Balance"`` entry of ``description_summary`` is used.
    """

    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    total_debit: Decimal | None = Field(
        default=None, validation_alias=AliasChoices("total_debit", "total_debits", "totalDebit")
    )
    total_credit: Decimal | None = Field(
        default=None,
        validation_alias=AliasChoices("total_credit", "total_credits", "totalCredit"),
    )
    opening_balance: Decimal | None = Field(
        default=None, validation_alias=AliasChoices("opening_balance", "openingBalance")
    )
    closing_balance: Decimal | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "closing_balance", "closingBalance", "outstanding_balance", "balance"
        ),
    )

    @model_validator(mode="before")
    @classmethod
    def _fold_balance_shapes(cls, data: Any) -> Any:
        if not isinstance(data, Mapping):
            return data
        out = dict(data)
        side = out.get("balance_type")
        if side is not None and "balance" in out and not isinstance(out["balance"], Mapping):
            out["balance"] = {"amount": out["balance"], "type": side}
        has_opening = any(out.get(k) is not None for k in ("opening_balance", "openingBalance"))
        details = out.get("description_summary")
        if not has_opening and isinstance(details, list):
            for item in details:
                if isinstance(item, Mapping) and item.get("description") == "Opening Balance":
                    out["opening_balance"] = {
                        "amount": item.get("amount"),
                        "type": item.get("type") or "Dr",
                    }
                    break
        return out

    @field_validator("total_debit", "total_credit", mode="before")
    @classmethod
    def _amount(cls, v: Any) -> Decimal | None:
        if v is None or (isinstance(v, str) and not v.strip()):
            return None
        return to_decimal(v, default=None)

    @field_validator("opening_balance", "closing_balance", mode="before")
    @classmethod
    def _balance(cls, v: Any) -> Decimal | None:
        return _signed_balance(v)

    def supplied(self) -> dict[str, Decimal]:
        """Return only the fields that carry a value."""

        values = {name: getattr(self, name) for name in SUMMARY_FIELDS}
        return {name: v for name, v in values.items() if v is not None}

    def for_creditor_ledger(self) -> AuthoritativeSummary:
        """Return the summary re-expressed with debit and credit swapped.

        Upstream summaries are stated in book (debtor) convention; a creditor
        ledger accumulates with the sides swapped, so totals trade places and
        balances change sign.
        """

        def _neg(d: Decimal | None) -> Decimal | None:
            return None if d is None else ZERO - d

        return AuthoritativeSummary(
            total_debit=self.total_credit,
            total_credit=self.total_debit,
            opening_balance=_neg(self.opening_balance),
            closing_balance=_neg(self.closing_balance),
        )


# ---------------------------------------------------------------------------
# Counts
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class TypeCount:
    """Voucher-type label → number of transactions, plus the overall total.

    ``counts`` is stored as a read-only mapping in label order.
    """

    counts: Mapping[str, int]
    total: int
    source: Literal["authoritative", "local"] = "local"

    def __post_init__(self) -> None:
        object.__setattr__(self, "counts", MappingProxyType(dict(self.counts)))


# ---------------------------------------------------------------------------
# Filtering and pagination
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class FilterCriteria:
    """Read-only predicate descriptor for projecting an annotated ledger.

    All fields are optional and AND-combined. ``balance_type`` of ``None`` or
    ``"all"`` disables that predicate.
    """

    from_date: date | None = None
    to_date: date | None = None
    voucher_type: str | None = None
    voucher_no: str | None = None
    free_text: str | None = None
    balance_type: str | None = None

    @property
    def is_empty(self) -> bool:
        return all(
            getattr(self, name) in (None, "", "all")
            for name in (
                "from_date",
                "to_date",
                "voucher_type",
                "voucher_no",
                "free_text",
                "balance_type",
            )
        )


@dataclass(frozen=True, slots=True)
class Page:
    """A 0-based page request."""

    index: int = 0
    size: int = 10

    def __post_init__(self) -> None:
        # Booleans are ints; disallow them explicitly.
        if isinstance(self.index, bool) or not isinstance(self.index, int) or self.index < 0:
            raise ValueError("Page.index must be a non-negative integer")
        if isinstance(self.size, bool) or not isinstance(self.size, int) or self.size <= 0:
            raise ValueError("Page.size must be a positive integer")

    @property
    def start(self) -> int:
        return self.index * self.size


@dataclass(frozen=True, slots=True)
class Projection:
    """One page of rows matching a :class:`FilterCriteria`."""

    rows: tuple[AnnotatedTransaction, ...]
    total_matched: int
    page: Page | None = None

    @property
    def page_count(self) -> int:
        if self.page is None:
            return 1 if self.total_matched else 0
        return -(-self.total_matched // self.page.size)


__all__ = [
    "OPENING_VOUCHER_TYPE",
    "SUMMARY_FIELDS",
    "AnnotatedTransaction",
    "AuthoritativeSummary",
    "BalanceType",
    "Discrepancy",
    "FilterCriteria",
    "LedgerSummary",
    "LedgerWarning",
    "LineItem",
    "NormalizationResult",
    "Page",
    "Projection",
    "RawRecord",
    "SkippedRow",
    "Transaction",
    "TypeCount",
    "balance_type",
]
