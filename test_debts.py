from decimal import Decimal

from debt_settlement.debts import get_incoming_debts, get_outgoing_debts, summarize_user_debts
from debt_settlement.models import Transfer

TRANSFERS = [
    Transfer(from_user_id="B", to_user_id="A", amount=Decimal("40.00")),
    Transfer(from_user_id="C", to_user_id="A", amount=Decimal("25.50")),
    Transfer(from_user_id="C", to_user_id="D", amount=Decimal("10.00")),
]


def test_incoming_debts():
    assert get_incoming_debts(TRANSFERS, "A") == TRANSFERS[:2]
    assert get_incoming_debts(TRANSFERS, "C") == []


def test_outgoing_debts():
    assert get_outgoing_debts(TRANSFERS, "C") == TRANSFERS[1:]
    assert get_outgoing_debts(TRANSFERS, "A") == []


def test_unknown_user_gets_empty_lists():
    assert get_incoming_debts(TRANSFERS, "Z") == []
    assert get_outgoing_debts(TRANSFERS, "Z") == []
    assert get_incoming_debts([], "A") == []


def test_summary_totals():
    summary = summarize_user_debts(TRANSFERS, "A")

    assert summary["total_incoming"] == Decimal("65.50")
    assert summary["total_outgoing"] == Decimal("0.00")
    assert summary["net"] == Decimal("65.50")

    summary = summarize_user_debts(TRANSFERS, "C")

    assert summary["outgoing"] == TRANSFERS[1:]
    assert summary["net"] == Decimal("-35.50")


def test_summary_for_unknown_user():
    summary = summarize_user_debts(TRANSFERS, "Z")

    assert summary == {
        "user_id": "Z",
        "incoming": [],
        "outgoing": [],
        "total_incoming": Decimal("0.00"),
        "total_outgoing": Decimal("0.00"),
        "net": Decimal("0.00"),
    }
