import json
from decimal import Decimal
from pathlib import Path

import pytest

from ledger_analysis.payloads import PayloadError, extract_payload, load_payload_file


def test_customer_envelope():
    body = {
        "customer": {"id": 7, "name_english": "Acme Traders"},
        "transactions": [{"id": 1, "date": "2025-04-03", "debit": 100}],
        "ledger_summary": {
            "total_debit": 100,
            "total_credit": 0,
            "outstanding_balance": {"amount": 100, "type": "Dr"},
        },
        "transaction_summary": {"sales": 1, "total_transactions": 1},
        "description_summary": [{"description": "Opening Balance", "amount": 0, "type": "Dr"}],
    }

    payload = extract_payload(body, source="customer")

    assert payload.source == "customer"
    assert len(payload.records) == 1
    assert payload.party == {"id": 7, "name_english": "Acme Traders"}
    assert payload.authoritative_counts == {"sales": 1, "total_transactions": 1}
    summary = payload.authoritative_summary
    assert summary is not None
    assert summary.closing_balance == Decimal("100")
    assert summary.opening_balance == Decimal("0")


def test_vendor_envelope_uses_vendor_party():
    body = {
        "vendor": {"id": 3},
        "transactions": [],
        "ledger_summary": {"opening_balance": 0, "balance": 1200, "balance_type": "Cr"},
    }

    payload = extract_payload(body, source="supplier")

    assert payload.source == "vendor"
    assert payload.party == {"id": 3}
    assert payload.authoritative_summary is not None
    assert payload.authoritative_summary.closing_balance == Decimal("-1200")
    assert payload.authoritative_counts is None


def test_general_ledger_envelope():
    payload = extract_payload({"success": True, "data": [{"voucher_no": "JV-1"}]}, source="gl")

    assert payload.source == "general"
    assert payload.records == [{"voucher_no": "JV-1"}]
    assert payload.authoritative_summary is None


def test_account_ledger_envelope():
    body = {
        "success": True,
        "ledger": [{"date": "2025-04-01", "ref_no": "R-1", "debit": 50}],
        "opening_balance": "1,000.00",
        "closing_balance": 1050,
    }

    payload = extract_payload(body, source="account")

    assert payload.opening_balance == Decimal("1000.00")
    assert payload.authoritative_summary is not None
    assert payload.authoritative_summary.closing_balance == Decimal("1050")


def test_bare_list_is_the_transaction_list():
    payload = extract_payload([{"id": 1}, "junk"], source="customer")
    assert payload.records == [{"id": 1}, "junk"]


def test_failure_envelope_raises():
    with pytest.raises(PayloadError, match="Company not found"):
        extract_payload({"success": False, "message": "Company not found"}, source="general")


def test_wrong_shapes_raise():
    with pytest.raises(PayloadError, match="expected 'transactions' to be a list"):
        extract_payload({"transactions": {"id": 1}}, source="customer")
    with pytest.raises(PayloadError):
        extract_payload("nope", source="customer")
    with pytest.raises(PayloadError, match="invalid customer ledger payload"):
        extract_payload(
            {"transactions": [], "ledger_summary": {"total_debit": "lots"}}, source="customer"
        )


def test_load_payload_file(tmp_path: Path):
    path = tmp_path / "ledger.json"
    path.write_text(json.dumps({"success": True, "data": []}), encoding="utf-8")
    assert extract_payload({"success": True, "data": []}, source="general") == load_payload_file(
        path, source="general"
    )

    bad = tmp_path / "bad.json"
    bad.write_text("{not json", encoding="utf-8")
    with pytest.raises(PayloadError, match="not valid JSON"):
        load_payload_file(bad, source="general")
