# ruff: noqa: E501
import json
import logging
import textwrap
from datetime import date, datetime, timezone, timedelta
from decimal import Decimal

import pytest

from ledger_analysis import Transaction, normalize, parse_date
from ledger_analysis.normalizers import opening_row_balance, split_opening_rows


def _dedent(s: str) -> str:
    # Keep internal newlines, but normalize indentation for readability.
    return textwrap.dedent(s).lstrip("\n").rstrip()


def test_customer_ledger_snapshot_to_transactions():
    body = _dedent(
        r"""
        [
          {"id": 1, "date": "2025-04-01", "vch_no": "OB-001", "vch_type": "Opening", "particulars": "Opening Balance", "debit": "5,000.00", "credit": 0},
          {"id": 2, "date": "2025-04-03", "vch_no": "INV101", "vch_type": "Invoice", "particulars": "Sales Invoice INV101", "debit": 10000, "credit": 0,
           "items": [{"item": "Laptop", "quantity": "2", "rate": "5000", "tax": "18%", "taxAmt": "1800", "value": "11800"}],
           "narration": "Two laptops"},
          {"id": 3, "date": "2025-04-10", "vch_no": "RCPT201", "vch_type": "Payment", "particulars": "Payment Received", "debit": null, "credit": "₹5,000"}
        ]
        """
    )

    result = normalize(json.loads(body), source="customer")
    assert result.skipped == ()
    assert [tx.id for tx in result.transactions] == ["1", "2", "3"]

    opening, invoice, payment = result.transactions
    assert opening == Transaction(
        id="1",
        date=date(2025, 4, 1),
        voucher_no="OB-001",
        voucher_type="Opening",
        debit=Decimal("5000.00"),
        credit=Decimal("0"),
        seq=0,
        particulars="Opening Balance",
    )
    assert opening.is_opening

    assert invoice.narration == "Two laptops"
    assert len(invoice.line_items) == 1
    item = invoice.line_items[0]
    assert (item.name, item.quantity, item.rate) == ("Laptop", "2", "5000")
    assert (item.tax_percent, item.tax_amount, item.value) == ("18%", "1800", "11800")

    assert payment.debit == Decimal("0")
    assert payment.credit == Decimal("5000")


def test_general_ledger_field_names():
    rows = [
        {
            "voucher_date": "2025-05-02",
            "voucher_no": "JV-9",
            "voucher_type": "Journal",
            "from_to": "Office Rent",
            "debit": "1200.50",
            "credit": "0",
        }
    ]

    (tx,) = normalize(rows, source="general").transactions
    assert tx.voucher_no == "JV-9"
    assert tx.voucher_type == "Journal"
    assert tx.particulars == "Office Rent"
    assert tx.debit == Decimal("1200.50")
    # No id upstream: synthesized from source and list position.
    assert tx.id == "general-0"


def test_vendor_source_swaps_debit_and_credit():
    rows = [
        {"id": "p1", "date": "2025-04-02", "vch_no": "PUR-1", "vch_type": "Purchase", "debit": 0, "credit": 8000},
        {"id": "p2", "date": "2025-04-09", "vch_no": "PAY-1", "vch_type": "Payment", "debit": 3000, "credit": 0},
    ]

    purchase, payment = normalize(rows, source="vendor").transactions
    assert (purchase.debit, purchase.credit) == (Decimal("8000"), Decimal("0"))
    assert (payment.debit, payment.credit) == (Decimal("0"), Decimal("3000"))

    # The same rows read under debtor convention keep their sides.
    purchase, _ = normalize(rows, source="vendor", convention="debtor").transactions
    assert (purchase.debit, purchase.credit) == (Decimal("0"), Decimal("8000"))


def test_sorted_by_date_with_input_order_tiebreak():
    rows = [
        {"id": "c", "date": "2025-04-05", "debit": 1},
        {"id": "a", "date": "2025-04-01", "debit": 1},
        {"id": "b2", "date": "2025-04-03", "debit": 1},
        {"id": "b1", "date": "2025-04-03", "credit": 1},
    ]

    result = normalize(rows)
    assert [tx.id for tx in result.transactions] == ["a", "b2", "b1", "c"]
    assert [tx.seq for tx in result.transactions] == [1, 2, 3, 0]


def test_malformed_rows_are_skipped_not_raised(caplog: pytest.LogCaptureFixture):
    rows = [
        {"id": "ok", "date": "2025-04-03", "debit": 100},
        {"id": "no-date", "debit": 100},
        {"id": "bad-date", "date": "sometime in April", "debit": 100},
        {"id": "bad-amount", "date": "2025-04-03", "debit": "abc"},
        {"id": "negative", "date": "2025-04-03", "credit": "-5"},
        "not a record",
    ]

    with caplog.at_level(logging.WARNING, logger="ledger_analysis"):
        result = normalize(rows)

    assert [tx.id for tx in result.transactions] == ["ok"]
    assert result.skipped_count == 5
    assert [s.position for s in result.skipped] == [1, 2, 3, 4, 5]
    assert "date is missing" in result.skipped[0].reason
    assert "negative" in result.skipped[3].reason
    assert "not an object" in result.skipped[4].reason
    assert any("Skipping customer ledger row 3" in r.getMessage() for r in caplog.records)


def test_missing_amounts_default_to_zero():
    (tx,) = normalize([{"id": "x", "date": "2025-04-03", "debit": "", "credit": None}]).transactions
    assert tx.debit == Decimal("0")
    assert tx.credit == Decimal("0")


def test_input_records_are_not_mutated():
    rows = [{"id": "1", "date": "2025-04-03", "debit": "1,000"}]
    snapshot = json.dumps(rows)
    normalize(rows)
    assert json.dumps(rows) == snapshot


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("2025-04-03", date(2025, 4, 3)),
        ("2025-04-03T23:30:00Z", date(2025, 4, 3)),
        # 02:00 in India is 20:30 UTC on the previous day.
        ("2025-04-03T02:00:00+05:30", date(2025, 4, 2)),
        ("03/04/2025", date(2025, 4, 3)),
        ("03-04-2025", date(2025, 4, 3)),
        (1743638400, date(2025, 4, 3)),
        (1743638400000, date(2025, 4, 3)),
        ("1743638400", date(2025, 4, 3)),
        (date(2025, 4, 3), date(2025, 4, 3)),
        (datetime(2025, 4, 3, 1, 0, tzinfo=timezone(timedelta(hours=5, minutes=30))), date(2025, 4, 2)),
    ],
)
def test_parse_date_accepts_upstream_shapes(raw, expected):
    assert parse_date(raw) == expected


@pytest.mark.parametrize("raw", [None, "", "   ", "April 3rd", True, [2025, 4, 3]])
def test_parse_date_rejects_unusable_values(raw):
    with pytest.raises(ValueError):
        parse_date(raw)


def test_unknown_source_raises():
    with pytest.raises(ValueError, match="unknown ledger source"):
        normalize([], source="payroll")


def test_split_opening_rows():
    rows = [
        {"id": "o", "date": "2025-04-01", "vch_type": "opening", "debit": 5000},
        {"id": "i", "date": "2025-04-03", "vch_type": "Invoice", "debit": 100},
    ]

    opening, other = split_opening_rows(normalize(rows).transactions)
    assert [tx.id for tx in opening] == ["o"]
    assert [tx.id for tx in other] == ["i"]
    assert opening_row_balance(opening) == Decimal("5000")
