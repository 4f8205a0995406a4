"""
Utilities Module

This module provides utility functions and helpers for the debt settlement
engine.

Features:
    - Transparency and traceability of balance calculations
    - Per-user expense and payment breakdown explanations
    - Currency formatting
    - Amount validation

Data Model:
    Input - expenses: list of Expense
    Input - payments: list of Payment (optional)

Functions:
    explain_user_balance: Get detailed breakdown for one user.
    format_currency: Format amount with currency symbol.
    validate_amount: Validate if input is a valid monetary amount.
"""

from decimal import Decimal
from typing import Iterable, Optional

from debt_settlement.config.settings import config
from debt_settlement.models import Expense, Payment
from debt_settlement.splitter import calculate_balances, from_cents, resolve_expense_shares, to_cents


def explain_user_balance(
    user_id: str,
    expenses: Iterable[Expense],
    payments: Optional[Iterable[Payment]] = None
) -> dict:
    """
    Generate detailed explanation of how a user's balance was calculated.

    For each expense the user takes part in:
        - Shows expense details (id, category, description, total amount)
        - Shows the user's share (owed - paid) and its effect on the balance

    For each completed payment the user sent or received:
        - Shows the counterparty, amount and effect on the balance

    Args:
        user_id: ID of the user to explain.
        expenses: List of expenses.
        payments: Optional list of payments.

    Returns:
        dict: Explanation containing:
            - user_id: string
            - expense_contributions: list of dicts with expense breakdown
            - payment_contributions: list of dicts with payment breakdown
            - net_balance: Decimal (same value calculate_balances() gives)

    Notes:
        - Each expense share is rounded to cents on its own, so with uneven
          splits the balance changes may not add up to net_balance exactly
    """
    expenses = list(expenses)
    payments = list(payments or [])

    expense_contributions = []
    for expense in expenses:
        shares = resolve_expense_shares(expense)
        if user_id not in shares:
            continue

        share = shares[user_id]
        expense_contributions.append({
            "expense_id": expense.expense_id,
            "category": expense.category,
            "description": expense.description,
            "total_expense_amount": expense.amount,
            "paid": user_id in expense.paid_by,
            "split": user_id in expense.split_between,
            "share": share,
            "balance_change": -share
        })

    payment_contributions = []
    for payment in payments:
        if not payment.is_completed:
            continue
        if user_id not in (payment.from_user_id, payment.to_user_id):
            continue

        # Mirrors the skip rule in calculate_balances()
        cents = to_cents(payment.amount)
        if cents is None or cents < 0:
            continue

        amount = from_cents(cents)
        sent = payment.from_user_id == user_id
        payment_contributions.append({
            "payment_id": payment.payment_id,
            "counterparty": payment.to_user_id if sent else payment.from_user_id,
            "direction": "sent" if sent else "received",
            "amount": amount,
            "balance_change": amount if sent else -amount
        })

    balances = calculate_balances(expenses, payments)

    return {
        "user_id": user_id,
        "expense_contributions": expense_contributions,
        "payment_contributions": payment_contributions,
        "net_balance": balances.get(user_id, Decimal("0.00"))
    }


def format_currency(amount, symbol: Optional[str] = None) -> str:
    """
    Format a monetary amount with the appropriate currency symbol.

    Args:
        amount: The amount to format.
        symbol: Currency symbol (default: config.CURRENCY_SYMBOL).

    Returns:
        str: Formatted string like "₽1,234.56" or "-₽12.50".
    """
    if symbol is None:
        symbol = config.CURRENCY_SYMBOL
    value = Decimal(str(amount))
    sign = "-" if value < 0 else ""
    return f"{sign}{symbol}{abs(value):,.2f}"


def validate_amount(value) -> bool:
    """
    Validate if the input is a valid monetary amount.

    Args:
        value: Value to validate.

    Returns:
        bool: True if a finite number greater than zero.
    """
    cents = to_cents(value)
    return cents is not None and cents > 0
