"""Pytest configuration for test isolation and shared ledger data.

Settings are read from ``LEDGER_*`` environment variables at call time, and the
CLI loads a ``.env`` from the working directory. A developer's shell (or a
stray ``.env``) could otherwise change tolerances, page sizes or the API base
URL under the tests, so every test starts with those variables cleared.
"""

from __future__ import annotations

import os
from decimal import Decimal
from typing import Any

import pytest

from ledger_analysis import LedgerView, build_ledger


@pytest.fixture(autouse=True)
def _isolate_ledger_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove any ``LEDGER_*`` variables inherited from the environment."""

    for name in list(os.environ):
        if name.startswith("LEDGER_"):
            monkeypatch.delenv(name, raising=False)


@pytest.fixture
def customer_records() -> list[dict[str, Any]]:
    """April statement for one customer, as the customer-ledger endpoint sends it.

    With an opening balance of 5,000 Dr the running balances are
    15,000 / 10,000 / 9,000 / 16,500 / 13,500 (all Dr).
    """

    return [
        {
            "id": "1",
            "date": "2025-04-03",
            "vch_no": "INV101",
            "vch_type": "Invoice",
            "particulars": "Sales Invoice INV101",
            "debit": 10000,
            "credit": 0,
        },
        {
            "id": "2",
            "date": "2025-04-10",
            "vch_no": "RCPT201",
            "vch_type": "Payment",
            "particulars": "Payment Received",
            "debit": 0,
            "credit": 5000,
        },
        {
            "id": "3",
            "date": "2025-04-15",
            "vch_no": "CN301",
            "vch_type": "Return",
            "particulars": "Sales Return",
            "debit": 0,
            "credit": 1000,
        },
        {
            "id": "4",
            "date": "2025-04-20",
            "vch_no": "INV102",
            "vch_type": "Invoice",
            "particulars": "Sales Invoice INV102",
            "debit": "7,500.00",
            "credit": 0,
        },
        {
            "id": "5",
            "date": "2025-04-30",
            "vch_no": "RCPT202",
            "vch_type": "Payment",
            "particulars": "Payment Received",
            "debit": 0,
            "credit": "3000",
        },
    ]


@pytest.fixture
def customer_view(customer_records: list[dict[str, Any]]) -> LedgerView:
    return build_ledger(customer_records, source="customer", opening_balance=Decimal("5000"))
