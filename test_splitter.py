"""Tests for splitter.resolve_expense_shares and splitter.calculate_balances."""

import logging
import random
from decimal import Decimal

import pytest

from debt_settlement.models import Expense, Payment
from debt_settlement.splitter import (
    calculate_balances,
    from_cents,
    resolve_expense_shares,
    to_cents,
)


# ── resolve_expense_shares ─────────────────────────────────────────────────

def test_single_payer_equal_split():
    expense = Expense(amount=300, paid_by=["A"], split_between=["A", "B", "C"])

    assert resolve_expense_shares(expense) == {
        "A": Decimal("-200.00"),
        "B": Decimal("100.00"),
        "C": Decimal("100.00"),
    }


def test_multiple_payers():
    expense = Expense(amount=90, paid_by=["A", "B"], split_between=["A", "B", "C"])

    assert resolve_expense_shares(expense) == {
        "A": Decimal("-15.00"),
        "B": Decimal("-15.00"),
        "C": Decimal("30.00"),
    }


def test_payer_not_in_split():
    expense = Expense(amount=50, paid_by=["A"], split_between=["B", "C"])

    assert resolve_expense_shares(expense) == {
        "A": Decimal("-50.00"),
        "B": Decimal("25.00"),
        "C": Decimal("25.00"),
    }


def test_uneven_split_shares_still_net_to_zero():
    expense = Expense(amount=100, paid_by=["C"], split_between=["C", "B", "A"])

    shares = resolve_expense_shares(expense)

    assert sum(shares.values()) == Decimal("0")
    assert abs(shares["A"] - Decimal("33.33")) <= Decimal("0.01")
    assert abs(shares["B"] - Decimal("33.33")) <= Decimal("0.01")
    assert abs(shares["C"] - Decimal("-66.67")) <= Decimal("0.01")


def test_user_paying_own_share_is_still_listed():
    expense = Expense(amount=10, paid_by=["C"], split_between=["C"])

    assert resolve_expense_shares(expense) == {"C": Decimal("0.00")}


def test_empty_split_only_credits_payers(caplog):
    expense = Expense(amount=40, paid_by=["A", "B"], split_between=[], expense_id="E001")

    with caplog.at_level(logging.WARNING):
        shares = resolve_expense_shares(expense)

    assert shares == {"A": Decimal("-20.00"), "B": Decimal("-20.00")}
    assert "E001" in caplog.text


def test_empty_payers_only_debits_split():
    expense = Expense(amount=40, paid_by=[], split_between=["A", "B"])

    assert resolve_expense_shares(expense) == {"A": Decimal("20.00"), "B": Decimal("20.00")}


def test_both_sides_empty():
    assert resolve_expense_shares(Expense(amount=40, paid_by=[], split_between=[])) == {}


@pytest.mark.parametrize("amount", [-10, float("nan"), float("inf"), "abc", None])
def test_invalid_amount_is_skipped_with_warning(amount, caplog):
    expense = Expense(amount=amount, paid_by=["A"], split_between=["A", "B"], expense_id="BAD")

    with caplog.at_level(logging.WARNING):
        assert resolve_expense_shares(expense) == {}

    assert "BAD" in caplog.text


def test_duplicate_ids_are_collapsed():
    expense = Expense(amount=30, paid_by=["A", "A"], split_between=["A", "B", "B", "C"])

    assert expense.paid_by == ["A"]
    assert expense.split_between == ["A", "B", "C"]
    assert resolve_expense_shares(expense)["A"] == Decimal("-20.00")


def test_resolve_does_not_mutate_expense():
    expense = Expense(amount=90, paid_by=["B", "A"], split_between=["C", "A"])

    resolve_expense_shares(expense)

    assert expense.paid_by == ["B", "A"]
    assert expense.split_between == ["C", "A"]
    assert expense.amount == 90


# ── calculate_balances ─────────────────────────────────────────────────────

def test_empty_input_returns_empty_map():
    assert calculate_balances([], []) == {}
    assert calculate_balances([]) == {}


def test_scenario_single_payer():
    expenses = [Expense(amount=300, paid_by=["A"], split_between=["A", "B", "C"])]

    assert calculate_balances(expenses) == {
        "A": Decimal("200.00"),
        "B": Decimal("-100.00"),
        "C": Decimal("-100.00"),
    }


def test_scenario_multi_payer():
    expenses = [Expense(amount=90, paid_by=["A", "B"], split_between=["A", "B", "C"])]

    assert calculate_balances(expenses) == {
        "A": Decimal("15.00"),
        "B": Decimal("15.00"),
        "C": Decimal("-30.00"),
    }


def test_completed_payment_reduces_debt_and_zero_is_omitted():
    expenses = [Expense(amount=300, paid_by=["A"], split_between=["A", "B", "C"])]
    payments = [Payment(amount=100, from_user_id="B", to_user_id="A", status="completed")]

    assert calculate_balances(expenses, payments) == {
        "A": Decimal("100.00"),
        "C": Decimal("-100.00"),
    }


def test_pending_payment_is_ignored():
    expenses = [Expense(amount=300, paid_by=["A"], split_between=["A", "B", "C"])]
    payments = [Payment(amount=100, from_user_id="B", to_user_id="A", status="pending")]

    assert calculate_balances(expenses, payments)["B"] == Decimal("-100.00")


def test_invalid_payment_amount_is_skipped(caplog):
    payments = [
        Payment(amount=-5, from_user_id="B", to_user_id="A", status="completed", payment_id="PAY001"),
        Payment(amount=float("nan"), from_user_id="B", to_user_id="A", status="completed", payment_id="PAY002"),
    ]

    with caplog.at_level(logging.WARNING):
        assert calculate_balances([], payments) == {}

    assert "PAY001" in caplog.text
    assert "PAY002" in caplog.text


def test_zero_sum_with_awkward_amounts():
    expenses = [
        Expense(amount=10, paid_by=["A"], split_between=["A", "B", "C"]),
        Expense(amount=0.07, paid_by=["B", "C"], split_between=["A", "B", "C", "D"]),
        Expense(amount=99.99, paid_by=["A", "B", "C"], split_between=["D", "E", "F", "G", "H", "I", "J"]),
        Expense(amount=1234.56, paid_by=["D"], split_between=["A", "D", "J"]),
    ]
    payments = [Payment(amount=12.34, from_user_id="J", to_user_id="D", status="completed")]

    balances = calculate_balances(expenses, payments)

    assert sum(balances.values()) == Decimal("0")


def test_many_uneven_splits_stay_within_a_cent():
    expenses = [Expense(amount=1, paid_by=["P"], split_between=["A", "B", "C"]) for _ in range(100)]

    balances = calculate_balances(expenses)

    assert balances["P"] == Decimal("100.00")
    assert sum(balances.values()) == Decimal("0")
    for user_id in ["A", "B", "C"]:
        assert abs(balances[user_id] - Decimal("-33.33")) <= Decimal("0.01")
    assert abs(balances["A"] - balances["B"]) <= Decimal("0.01")
    assert abs(balances["B"] - balances["C"]) <= Decimal("0.01")


def test_thirds_add_back_up_exactly():
    expenses = [Expense(amount=1, paid_by=["P"], split_between=["A", "B", "C"]) for _ in range(3)]

    assert calculate_balances(expenses) == {
        "A": Decimal("-1.00"),
        "B": Decimal("-1.00"),
        "C": Decimal("-1.00"),
        "P": Decimal("3.00"),
    }


def test_rounding_cent_does_not_depend_on_input_order():
    expenses = [
        Expense(amount=1, paid_by=["P"], split_between=["C", "A", "B"]),
        Expense(amount=1, paid_by=["P"], split_between=["B", "C", "A"]),
    ]

    assert calculate_balances(expenses) == calculate_balances(list(reversed(expenses)))


def test_order_does_not_change_result():
    expenses = [
        Expense(amount=17.5, paid_by=["A"], split_between=["A", "B", "C"]),
        Expense(amount=33.33, paid_by=["B", "C"], split_between=["A", "B", "C", "D"]),
        Expense(amount=8, paid_by=["D"], split_between=["C", "D"]),
    ]
    payments = [Payment(amount=3, from_user_id="C", to_user_id="A", status="completed")]

    expected = calculate_balances(expenses, payments)

    shuffled_expenses = list(expenses)
    shuffled_payments = list(payments)
    random.Random(7).shuffle(shuffled_expenses)
    random.Random(7).shuffle(shuffled_payments)

    assert calculate_balances(shuffled_expenses, shuffled_payments) == expected


def test_accepts_generators():
    expenses = (e for e in [Expense(amount=20, paid_by=["A"], split_between=["A", "B"])])

    assert calculate_balances(expenses) == {"A": Decimal("10.00"), "B": Decimal("-10.00")}


# ── cents helpers ──────────────────────────────────────────────────────────

def test_to_cents_rounds_half_up():
    assert to_cents("10.005") == 1001
    assert to_cents(0.1) == 10
    assert to_cents(Decimal("-2.5")) == -250


def test_to_cents_rejects_non_numbers():
    assert to_cents(None) is None
    assert to_cents(True) is None
    assert to_cents("ten") is None
    assert to_cents(float("-inf")) is None


def test_from_cents():
    assert from_cents(1001) == Decimal("10.01")
    assert from_cents(-5) == Decimal("-0.05")
