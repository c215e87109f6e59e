from decimal import Decimal
from typing import Any

from ledger_analysis import LedgerView, build_ledger
from ledger_analysis.payloads import extract_payload


def test_full_pipeline_on_customer_statement(customer_view: LedgerView):
    assert customer_view.source == "customer"
    assert customer_view.convention == "debtor"
    assert [r.running_balance for r in customer_view.annotated] == [
        Decimal("15000"),
        Decimal("10000"),
        Decimal("9000"),
        Decimal("16500"),
        Decimal("13500"),
    ]

    s = customer_view.summary
    assert (s.total_debit, s.total_credit) == (Decimal("17500"), Decimal("9000"))
    assert (s.opening_balance, s.closing_balance) == (Decimal("5000"), Decimal("13500"))
    assert customer_view.warnings == ()
    assert customer_view.skipped_count == 0


def test_pipeline_is_idempotent(customer_records: list[dict[str, Any]]):
    first = build_ledger(customer_records, opening_balance=Decimal("5000"))
    second = build_ledger(customer_records, opening_balance=Decimal("5000"))
    assert first == second


def test_opening_rows_and_seed_are_not_both_applied(customer_records: list[dict[str, Any]]):
    records = [
        {
            "id": "0",
            "date": "2025-04-01",
            "vch_no": "OB",
            "vch_type": "Opening",
            "particulars": "Opening Balance",
            "debit": 5000,
            "credit": 0,
        },
        *customer_records,
    ]

    view = build_ledger(records, opening_balance=Decimal("5000"))

    assert view.opening_balance == Decimal("0")
    assert view.annotated[0].running_balance == Decimal("5000")
    assert view.summary.closing_balance == Decimal("13500")
    assert [w.code for w in view.warnings] == ["opening_double_count"]
    # The Opening row is still part of the ledger and its counts.
    assert view.counts.counts["Opening Balance"] == 1


def test_opening_rows_without_seed_start_from_zero(customer_records: list[dict[str, Any]]):
    records = [
        {"id": "0", "date": "2025-04-01", "vch_type": "Opening", "debit": 5000},
        *customer_records,
    ]

    view = build_ledger(records)
    assert view.warnings == ()
    assert view.summary.closing_balance == Decimal("13500")


def test_skipped_rows_and_discrepancies_become_warnings(customer_records: list[dict[str, Any]]):
    records = [*customer_records, {"id": "bad", "vch_type": "Invoice", "debit": 1}]

    view = build_ledger(
        records,
        opening_balance=Decimal("5000"),
        authoritative_summary={"total_debit": 17500, "closing_balance": 14000},
    )

    assert view.skipped_count == 1
    codes = [w.code for w in view.warnings]
    assert codes == ["skipped_row", "summary_discrepancy"]
    assert "row 5" in view.warnings[0].message
    assert "closing_balance" in view.warnings[1].message
    assert view.summary.closing_balance == Decimal("14000")


def test_vendor_ledger_reads_book_convention_summary():
    records = [
        {
            "id": "1",
            "date": "2025-04-02",
            "vch_no": "PUR-1",
            "vch_type": "Purchase",
            "credit": 8000,
        },
        {"id": "2", "date": "2025-04-09", "vch_no": "PAY-1", "vch_type": "Payment", "debit": 3000},
    ]
    # Upstream states the payable as a 5,000 Cr balance in book terms.
    authoritative = {
        "total_debit": 3000,
        "total_credit": 8000,
        "balance": 5000,
        "balance_type": "Cr",
    }

    view = build_ledger(records, source="vendor", authoritative_summary=authoritative)

    assert view.convention == "creditor"
    assert [r.running_balance for r in view.annotated] == [Decimal("8000"), Decimal("5000")]
    assert view.summary.total_debit == Decimal("8000")
    assert view.summary.total_credit == Decimal("3000")
    assert view.summary.closing_balance == Decimal("5000")
    assert view.summary.is_consistent
    assert view.counts.counts["Purchase"] == 1
    assert view.counts.counts["Payment"] == 1


def test_authoritative_counts_pass_through(customer_records: list[dict[str, Any]]):
    view = build_ledger(
        customer_records,
        authoritative_counts={"sales": 2, "receipt": 2, "sales_return": 1, "total_transactions": 5},
    )
    assert view.counts.source == "authoritative"
    assert view.counts.counts["sales_return"] == 1


def test_empty_ledger():
    view = build_ledger([], opening_balance=Decimal("5000"))

    assert view.annotated == ()
    assert view.summary.closing_balance == Decimal("5000")
    assert view.counts.total == 0
    assert view.project().rows == ()


def _with_opening_row(customer_records: list[dict[str, Any]]) -> list[dict[str, Any]]:
    return [
        {
            "id": "0",
            "date": "2025-04-01",
            "vch_no": "OB",
            "vch_type": "Opening",
            "particulars": "Opening Balance",
            "debit": 5000,
            "credit": 0,
        },
        *customer_records,
    ]


def test_customer_response_with_opening_row_reconciles_cleanly(
    customer_records: list[dict[str, Any]],
):
    body = {
        "customer": {"id": 7},
        "transactions": _with_opening_row(customer_records),
        "ledger_summary": {
            "opening_balance": 5000,
            "total_debit": 17500,
            "total_credit": 9000,
            "balance": 13500,
            "balance_type": "Dr",
        },
    }
    payload = extract_payload(body, source="customer")

    view = build_ledger(
        payload.records,
        source=payload.source,
        opening_balance=payload.opening_balance,
        authoritative_summary=payload.authoritative_summary,
    )

    assert view.warnings == ()
    s = view.summary
    assert s.is_consistent
    assert (s.opening_balance, s.closing_balance) == (Decimal("5000"), Decimal("13500"))
    assert s.total_debit - s.total_credit == s.closing_balance - s.opening_balance


def test_opening_row_read_as_opening_balance_without_upstream_totals(
    customer_records: list[dict[str, Any]],
):
    payload = extract_payload(
        {
            "transactions": _with_opening_row(customer_records),
            "description_summary": [
                {"description": "Opening Balance", "amount": 5000, "type": "Dr"}
            ],
        },
        source="customer",
    )

    view = build_ledger(
        payload.records, authoritative_summary=payload.authoritative_summary
    )

    s = view.summary
    assert view.warnings == ()
    assert s.sources["opening_balance"] == "authoritative"
    assert s.sources["total_debit"] == "local"
    assert (s.total_debit, s.total_credit) == (Decimal("17500"), Decimal("9000"))
    assert s.total_debit - s.total_credit == s.closing_balance - s.opening_balance
