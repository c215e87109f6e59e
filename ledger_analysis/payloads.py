"""Upstream ledger response envelopes → records and authoritative objects.

Each dashboard endpoint wraps its transaction list differently:

- customer: ``{"customer": {...}, "transactions": [...], "ledger_summary": {...},
  "transaction_summary": {...}, "description_summary": [...]}``
- vendor: ``{"vendor": {...}, "transactions": [...], "ledger_summary": {...},
  "transaction_summary": {...}}``
- general: ``{"success": true, "data": [...]}``
- account: ``{"success": true, "ledger": [...], "opening_balance": ...,
  "closing_balance": ...}``

:func:`extract_payload` pulls out the pieces the pipeline consumes. A bare JSON
list is accepted for any source as the transaction list alone.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from decimal import Decimal
from os import PathLike
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError

from .models import AuthoritativeSummary
from .money import to_decimal
from .sources import get_source


class PayloadError(ValueError):
    """The upstream response cannot be interpreted as a ledger."""


class LedgerPayload(BaseModel):
    """The parts of an upstream ledger response used by :func:`build_ledger`."""

    model_config = ConfigDict(frozen=True)

    source: str
    records: list[Any]
    authoritative_summary: AuthoritativeSummary | None = None
    authoritative_counts: dict[str, Any] | None = None
    opening_balance: Decimal | None = None
    party: dict[str, Any] | None = None


def _records(value: Any, *, key: str) -> list[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise PayloadError(f"expected '{key}' to be a list, got {type(value).__name__}")
    # Non-object entries are kept so the normalizer can report them as skipped.
    return list(value)


def _mapping_or_none(value: Any) -> dict[str, Any] | None:
    return dict(value) if isinstance(value, Mapping) else None


def _party_ledger(body: Mapping[str, Any], *, party_key: str) -> dict[str, Any]:
    summary = _mapping_or_none(body.get("ledger_summary"))
    details = body.get("description_summary")
    if isinstance(details, list):
        summary = dict(summary or {})
        summary.setdefault("description_summary", details)
    return {
        "records": _records(body.get("transactions"), key="transactions"),
        "authoritative_summary": summary,
        "authoritative_counts": _mapping_or_none(body.get("transaction_summary")),
        "party": _mapping_or_none(body.get(party_key)),
    }


def _account_ledger(body: Mapping[str, Any]) -> dict[str, Any]:
    try:
        opening = to_decimal(body.get("opening_balance"), default=None)
    except ValueError:
        opening = None
    closing = body.get("closing_balance")
    return {
        "records": _records(body.get("ledger"), key="ledger"),
        "authoritative_summary": (
            {"closing_balance": closing} if closing not in (None, "") else None
        ),
        "opening_balance": opening,
        "party": _mapping_or_none(body.get("account")),
    }


def extract_payload(body: Any, *, source: str) -> LedgerPayload:
    """Interpret a decoded ledger response for ``source``.

    Raises :class:`PayloadError` when the envelope reports failure, has the
    wrong shape, or carries an unreadable summary.
    """

    schema = get_source(source)
    if isinstance(body, list):
        return LedgerPayload(source=schema.name, records=list(body))
    if not isinstance(body, Mapping):
        raise PayloadError(f"expected a JSON object or list, got {type(body).__name__}")
    if body.get("success") is False:
        detail = body.get("message") or body.get("error") or "no details"
        raise PayloadError(f"upstream reported failure: {detail}")

    if schema.name == "customer":
        parts = _party_ledger(body, party_key="customer")
    elif schema.name == "vendor":
        parts = _party_ledger(body, party_key="vendor")
    elif schema.name == "account":
        parts = _account_ledger(body)
    else:
        data = body.get("data")
        if data is None:
            data = body.get("transactions")
        parts = {"records": _records(data, key="data")}

    try:
        return LedgerPayload(source=schema.name, **parts)
    except ValidationError as exc:
        raise PayloadError(f"invalid {schema.name} ledger payload: {exc}") from exc


def load_payload_file(path: str | PathLike[str], *, source: str) -> LedgerPayload:
    """Read a JSON file holding a ledger response body and extract it."""

    p = Path(path)
    with p.open(encoding="utf-8") as f:
        try:
            body = json.load(f)
        except json.JSONDecodeError as exc:
            raise PayloadError(f"{p}: not valid JSON: {exc}") from exc
    return extract_payload(body, source=source)


__all__ = ["LedgerPayload", "PayloadError", "extract_payload", "load_payload_file"]
