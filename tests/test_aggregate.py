import pytest

from ledger_analysis import LedgerView, aggregate_counts, default_labels
from ledger_analysis.aggregate import CUSTOMER_LABELS


def test_customer_counts_use_display_labels(customer_view: LedgerView):
    counts = customer_view.counts

    assert counts.source == "local"
    assert counts.counts == {
        "Opening Balance": 0,
        "Sales": 2,
        "Receipt": 2,
        "Sales Return": 1,
    }
    assert counts.total == 5


def test_unmapped_types_keep_raw_label(customer_view: LedgerView):
    counts = aggregate_counts(customer_view.annotated, {"Invoice": "Sales"})
    assert counts.counts == {"Sales": 2, "Payment": 2, "Return": 1}

    raw = aggregate_counts(customer_view.annotated)
    assert raw.counts == {"Invoice": 2, "Payment": 2, "Return": 1}


def test_authoritative_counts_used_verbatim(customer_view: LedgerView):
    counts = aggregate_counts(
        customer_view.annotated,
        CUSTOMER_LABELS,
        authoritative={
            "opening_balance": 1,
            "sales": 40,
            "receipt": "12",
            "journal": 0,
            "total_transactions": 60,
            "note": "server computed",
        },
    )

    assert counts.source == "authoritative"
    assert counts.counts == {"opening_balance": 1, "sales": 40, "receipt": 12, "journal": 0}
    assert counts.total == 60


def test_authoritative_total_defaults_to_sum():
    counts = aggregate_counts([], authoritative={"sales": 3, "receipt": 2})
    assert counts.total == 5


def test_empty_stream_keeps_every_label():
    counts = aggregate_counts([], default_labels("vendor"))
    assert counts.total == 0
    assert set(counts.counts) == {
        "Opening Balance",
        "Purchase",
        "Payment",
        "Purchase Return",
        "Expense",
    }
    assert all(n == 0 for n in counts.counts.values())
    assert default_labels("general") == {}


def test_counts_cannot_be_changed_in_place(customer_view: LedgerView):
    labels = {"Invoice": "Sales"}
    counts = aggregate_counts(customer_view.annotated, labels)
    labels["Payment"] = "Receipt"

    with pytest.raises(TypeError):
        counts.counts["Sales"] = 99  # type: ignore[index]
    assert counts.counts["Sales"] == 2
    assert list(counts.counts) == ["Sales", "Payment", "Return"]
