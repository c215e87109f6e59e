"""Upstream ledger records → canonical :class:`~ledger_analysis.models.Transaction`.

The dashboard's ledger endpoints return transaction lists whose field names,
date formats and amount types differ per source. :func:`normalize` maps them
through the source's explicit mapping table (see :mod:`ledger_analysis.sources`)
into one canonical, date-sorted sequence.

Rules
-----
- Dates become ``datetime.date``. Accepted inputs: ``date``/``datetime``
  objects, ISO-8601 strings (optionally with a time and ``Z``/offset, which
  is converted to UTC before taking the day), ``DD/MM/YYYY`` or
  ``DD-MM-YYYY`` strings, and epoch numbers in seconds or milliseconds.
- A missing or unparseable date drops the row. Dropped rows are reported in
  :attr:`NormalizationResult.skipped` and logged; they never raise.
- Missing debit/credit amounts are ``0``. Non-numeric or negative amounts drop
  the row.
- Creditor-convention sources have debit and credit swapped here.
- The output is stably sorted by date, so rows sharing a date keep their input
  order.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping, Sequence
from datetime import UTC, date, datetime
from decimal import Decimal
from typing import Any

from .logging_setup import get_logger
from .models import LineItem, NormalizationResult, RawRecord, SkippedRow, Transaction
from .money import ZERO, to_decimal
from .sources import CONVENTIONS, Convention, SourceSchema, get_source

_logger = get_logger("ledger_analysis.normalizers")

# Epoch values at or above this magnitude are taken to be milliseconds.
_EPOCH_MS_THRESHOLD = 10**11

_EPOCH_RE = re.compile(r"^-?\d{9,}(\.\d+)?$")

_DAY_FIRST_FORMATS = ("%d/%m/%Y", "%d-%m-%Y")


# ---------------------------------------------------------------------------
# Field helpers
# ---------------------------------------------------------------------------


def _first_present(record: Mapping[str, Any], keys: Sequence[str]) -> Any:
    """Return the first value under ``keys`` that is not ``None`` or blank."""

    for key in keys:
        value = record.get(key)
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return value
    return None


def _text(value: Any) -> str | None:
    if value is None:
        return None
    s = str(value).strip()
    return s or None


def _from_epoch(value: float) -> date:
    seconds = value / 1000 if abs(value) >= _EPOCH_MS_THRESHOLD else value
    try:
        return datetime.fromtimestamp(seconds, tz=UTC).date()
    except (OverflowError, OSError, ValueError) as exc:
        raise ValueError(f"invalid epoch date: {value!r}") from exc


def parse_date(raw: Any) -> date:
    """Parse an upstream date value into a calendar date.

    Raises ``ValueError`` when the value is missing or cannot be parsed.
    """

    if raw is None:
        raise ValueError("date is missing")
    if isinstance(raw, datetime):
        return raw.astimezone(UTC).date() if raw.tzinfo else raw.date()
    if isinstance(raw, date):
        return raw
    if isinstance(raw, bool):
        raise ValueError(f"invalid date: {raw!r}")
    if isinstance(raw, int | float):
        return _from_epoch(float(raw))
    if not isinstance(raw, str):
        raise ValueError(f"invalid date: {raw!r}")

    s = raw.strip()
    if not s:
        raise ValueError("date is empty")
    if _EPOCH_RE.fullmatch(s):
        return _from_epoch(float(s))

    iso = s[:-1] + "+00:00" if s.endswith(("Z", "z")) else s
    try:
        dt = datetime.fromisoformat(iso)
    except ValueError:
        pass
    else:
        return dt.astimezone(UTC).date() if dt.tzinfo else dt.date()

    # Dates shown in the dashboard's en-IN locale are day-first.
    first = s.split()[0]
    for fmt in _DAY_FIRST_FORMATS:
        try:
            return datetime.strptime(first, fmt).date()
        except ValueError:
            continue
    raise ValueError(f"invalid date: {raw!r}")


def _amount(record: Mapping[str, Any], keys: Sequence[str], label: str) -> Decimal:
    raw = _first_present(record, keys)
    try:
        value = to_decimal(raw, default=ZERO)
    except ValueError as exc:
        raise ValueError(f"{label}: {exc}") from exc
    if value < 0:
        raise ValueError(f"{label} is negative: {raw!r}")
    return value


def _line_items(raw: Any) -> tuple[LineItem, ...]:
    if not isinstance(raw, list | tuple):
        return ()
    items: list[LineItem] = []
    for entry in raw:
        if not isinstance(entry, Mapping):
            continue
        items.append(
            LineItem(
                name=_text(_first_present(entry, ("item_name", "item", "name"))),
                quantity=_text(entry.get("quantity")),
                rate=_text(entry.get("rate")),
                discount=_text(entry.get("discount")),
                tax_percent=_text(_first_present(entry, ("tax_percent", "tax"))),
                tax_amount=_text(_first_present(entry, ("tax_amount", "taxAmt"))),
                value=_text(entry.get("value")),
                description=_text(entry.get("description")),
            )
        )
    return tuple(items)


# ---------------------------------------------------------------------------
# Record and collection normalization
# ---------------------------------------------------------------------------


def normalize_record(
    record: RawRecord,
    *,
    position: int,
    schema: SourceSchema,
    convention: Convention | None = None,
) -> Transaction:
    """Map one upstream record to a :class:`Transaction`.

    Raises ``ValueError`` describing why the record cannot be used.
    """

    tx_date = parse_date(_first_present(record, schema.date))
    debit = _amount(record, schema.debit, "debit")
    credit = _amount(record, schema.credit, "credit")
    if (convention or schema.convention) == "creditor":
        debit, credit = credit, debit

    raw_id = _first_present(record, schema.id)
    return Transaction(
        id=_text(raw_id) or f"{schema.name}-{position}",
        date=tx_date,
        voucher_no=_text(_first_present(record, schema.voucher_no)) or "",
        voucher_type=_text(_first_present(record, schema.voucher_type)) or "",
        debit=debit,
        credit=credit,
        seq=position,
        particulars=_text(_first_present(record, schema.particulars)),
        narration=_text(_first_present(record, schema.narration)),
        line_items=_line_items(_first_present(record, schema.line_items)),
    )


def normalize(
    raw_records: Iterable[RawRecord],
    *,
    source: str | SourceSchema = "customer",
    convention: Convention | None = None,
) -> NormalizationResult:
    """Normalize upstream records into a date-sorted canonical sequence.

    Parameters
    ----------
    raw_records:
        Records as decoded from the ledger endpoint's JSON.
    source:
        Source name (``customer``, ``vendor``, ``general``, ``account``) or a
        :class:`SourceSchema`. Selects the field mapping table and default
        sign convention.
    convention:
        Optional override of the source's sign convention.
    """

    schema = get_source(source)
    if convention is not None and convention not in CONVENTIONS:
        raise ValueError(f"unknown sign convention: {convention!r}")

    transactions: list[Transaction] = []
    skipped: list[SkippedRow] = []
    for position, record in enumerate(raw_records):
        if not isinstance(record, Mapping):
            reason = f"record is not an object: {type(record).__name__}"
        else:
            try:
                transactions.append(
                    normalize_record(
                        record, position=position, schema=schema, convention=convention
                    )
                )
                continue
            except ValueError as exc:
                reason = str(exc)
        skipped.append(SkippedRow(position=position, reason=reason))
        _logger.warning("Skipping %s ledger row %d: %s", schema.name, position, reason)

    if skipped:
        _logger.warning(
            "Normalized %d %s ledger rows; skipped %d malformed rows",
            len(transactions),
            schema.name,
            len(skipped),
        )

    transactions.sort(key=lambda tx: tx.sort_key)
    return NormalizationResult(transactions=tuple(transactions), skipped=tuple(skipped))


def split_opening_rows(
    transactions: Iterable[Transaction],
) -> tuple[tuple[Transaction, ...], tuple[Transaction, ...]]:
    """Partition rows into ``(opening_rows, other_rows)``, preserving order."""

    opening: list[Transaction] = []
    other: list[Transaction] = []
    for tx in transactions:
        (opening if tx.is_opening else other).append(tx)
    return tuple(opening), tuple(other)


def opening_row_balance(rows: Iterable[Transaction]) -> Decimal:
    """Net signed amount (``debit - credit``) carried by opening rows."""

    return sum((tx.net for tx in rows), ZERO)


__all__ = [
    "normalize",
    "normalize_record",
    "opening_row_balance",
    "parse_date",
    "split_opening_rows",
]
