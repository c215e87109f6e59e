"""Per-source field-name mapping tables for upstream ledger records.

Each dashboard endpoint names the same concepts differently: the customer and
vendor ledgers send ``vch_no``/``vch_type``, the general-ledger report sends
``voucher_no``/``voucher_type`` with the counterparty in ``from_to``, and the
per-account ledger adds ``ref_no``. Rather than guessing per call site, every
source declares an explicit :class:`SourceSchema` listing, for each canonical
field, the upstream keys to try in order.

Sign convention
---------------
``debtor`` ledgers (customer, general, account) accumulate ``debit - credit``
as sent. ``creditor`` ledgers (vendor) have debit and credit swapped by the
normalizer, so the accumulator never needs to know which side is "normal".
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, TypeAlias

Convention: TypeAlias = Literal["debtor", "creditor"]

CONVENTIONS: frozenset[str] = frozenset({"debtor", "creditor"})


@dataclass(frozen=True, slots=True)
class SourceSchema:
    """Upstream key candidates per canonical field, tried left to right."""

    name: str
    convention: Convention
    id: tuple[str, ...] = ("id", "_id", "transaction_id")
    date: tuple[str, ...] = ("date", "voucher_date", "transaction_date")
    voucher_no: tuple[str, ...] = ("vch_no", "voucher_no", "voucherNo")
    voucher_type: tuple[str, ...] = ("vch_type", "voucher_type", "voucherType")
    debit: tuple[str, ...] = ("debit", "dr")
    credit: tuple[str, ...] = ("credit", "cr")
    particulars: tuple[str, ...] = ("particulars", "from_to", "description")
    narration: tuple[str, ...] = ("narration", "remarks")
    line_items: tuple[str, ...] = ("items", "line_items", "lineItems")


CUSTOMER = SourceSchema(name="customer", convention="debtor")

VENDOR = SourceSchema(name="vendor", convention="creditor")

GENERAL = SourceSchema(
    name="general",
    convention="debtor",
    voucher_no=("voucher_no", "vch_no", "voucherNo"),
    voucher_type=("voucher_type", "vch_type", "voucherType"),
    particulars=("from_to", "particulars", "account_name", "description"),
)

ACCOUNT = SourceSchema(
    name="account",
    convention="debtor",
    voucher_no=("vch_no", "voucher_no", "ref_no"),
)

SOURCES: dict[str, SourceSchema] = {s.name: s for s in (CUSTOMER, VENDOR, GENERAL, ACCOUNT)}

# Aliases accepted from the CLI and callers.
_ALIASES: dict[str, str] = {
    "customers": "customer",
    "debtor": "customer",
    "debtors": "customer",
    "vendors": "vendor",
    "supplier": "vendor",
    "creditor": "vendor",
    "creditors": "vendor",
    "gl": "general",
    "general_ledger": "general",
    "general-ledger": "general",
    "ledger_report": "general",
    "accounts": "account",
}


def get_source(source: str | SourceSchema) -> SourceSchema:
    """Resolve a source name (or alias) to its schema.

    Raises ``ValueError`` for unknown names.
    """

    if isinstance(source, SourceSchema):
        return source
    key = source.strip().lower().replace(" ", "_")
    key = _ALIASES.get(key, key)
    try:
        return SOURCES[key]
    except KeyError:
        raise ValueError(
            f"unknown ledger source: {source!r}. Known: {sorted(SOURCES)}"
        ) from None


__all__ = [
    "ACCOUNT",
    "CONVENTIONS",
    "CUSTOMER",
    "GENERAL",
    "SOURCES",
    "VENDOR",
    "Convention",
    "SourceSchema",
    "get_source",
]
