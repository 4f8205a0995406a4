"""
Splitter Module

This module handles the expense splitting logic for the debt settlement
engine.

Features:
    - Equal splitting among split recipients
    - Multiple payers per expense
    - Completed payments folded into balances
    - Exact (Fraction of a cent) shares, rounded to cents only in the output
    - Decimal at the boundaries

Data Model:
    Input - expenses (list of Expense):
        - amount: number (non-negative)
        - paid_by: list of user ids
        - split_between: list of user ids

    Input - payments (list of Payment, optional):
        - amount: number
        - from_user_id / to_user_id: string
        - status: "pending" or "completed"

    Output - balances (dict keyed by user id):
        - Decimal rounded to 2 places
        - Positive = user is owed money, negative = user owes money

Functions:
    resolve_expense_shares: Signed share (owed - paid) of one expense per user.
    calculate_balances: Net balance per user across expenses and payments.
    to_cents / from_cents: Convert between currency units and integer cents.
"""

import logging
import math
from collections import defaultdict
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from fractions import Fraction
from typing import Iterable, Optional

from debt_settlement.models import Expense, Payment

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")


def to_cents(value) -> Optional[int]:
    """
    Convert a monetary value to integer cents.

    Rounds half up to 2 decimal places first (10.005 -> 1001).

    Args:
        value: int, float, str or Decimal.

    Returns:
        int | None: Amount in cents, or None if the value is not a finite number.
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None
    if not amount.is_finite():
        return None
    return int(amount.quantize(CENTS, rounding=ROUND_HALF_UP) * 100)


def from_cents(cents: int) -> Decimal:
    """Convert integer cents back to a 2-place Decimal."""
    return (Decimal(cents) / 100).quantize(CENTS)


def _round_half_up(value: Fraction) -> int:
    """Round an exact cent amount to whole cents, halves away from zero."""
    magnitude = math.floor(abs(value) + Fraction(1, 2))
    return magnitude if value >= 0 else -magnitude


def _round_to_cents(exact: dict[str, Fraction]) -> dict[str, int]:
    """
    Round exact cent amounts to whole cents without changing their total.

    Each value is rounded half up on its own. If that moves the total, the
    difference is handed back one cent at a time to the users whose rounding
    went furthest the other way, lowest user id first on ties. Exact zeros
    never pick up a cent.

    Args:
        exact: user id -> amount in cents as a Fraction.

    Returns:
        dict: user id -> int cents, summing to the rounded exact total.
    """
    rounded = {user_id: _round_half_up(value) for user_id, value in exact.items()}

    drift = _round_half_up(sum(exact.values(), Fraction(0))) - sum(rounded.values())
    if drift:
        step = 1 if drift > 0 else -1
        candidates = sorted(
            (user_id for user_id, value in exact.items() if value != 0),
            key=lambda user_id: (-(exact[user_id] - rounded[user_id]) * step, user_id)
        )
        for user_id in candidates[:abs(drift)]:
            rounded[user_id] += step

    return rounded


def _valid_amount_cents(amount, kind: str, record_id) -> Optional[int]:
    """Return the amount in cents, or None (with a warning) if it can't be used."""
    cents = to_cents(amount)
    if cents is None:
        logger.warning("Skipping %s %s: amount %r is not a finite number", kind, record_id, amount)
        return None
    if cents < 0:
        logger.warning("Skipping %s %s: negative amount %r", kind, record_id, amount)
        return None
    return cents


def _exact_expense_shares(expense: Expense) -> dict[str, Fraction]:
    """Signed share in exact cents (owed - paid) for every user involved in an expense."""
    amount = _valid_amount_cents(expense.amount, "expense", expense.expense_id)
    if amount is None:
        return {}

    # Expense already drops duplicate ids
    paid_by = expense.paid_by or []
    split_between = expense.split_between or []

    if not paid_by or not split_between:
        # Only one side is recorded, so this expense alone won't net to zero
        logger.warning(
            "Expense %s has %s; it will not balance on its own",
            expense.expense_id,
            "no payers" if not paid_by else "no split participants",
        )

    shares = defaultdict(Fraction)

    if split_between:
        owed = Fraction(amount, len(split_between))
        for user_id in split_between:
            shares[user_id] += owed

    if paid_by:
        paid = Fraction(amount, len(paid_by))
        for user_id in paid_by:
            shares[user_id] -= paid

    return dict(shares)


def resolve_expense_shares(expense: Expense) -> dict[str, Decimal]:
    """
    Compute each involved user's signed share of one expense.

    For the expense:
        1. Each split participant is debited amount / len(split_between)
        2. Each payer is credited amount / len(paid_by)
        3. A user on both sides gets the sum of the two

    Args:
        expense: The expense to resolve.

    Returns:
        dict: user id -> Decimal share (owed - paid).
            - Positive = user owes money on this expense
            - Negative = user fronted more than their share

    Notes:
        - An empty side contributes nothing (no division by zero)
        - Negative or non-finite amounts give an empty result
        - Shares are exact until they are rounded to cents here; the rounded
          shares of a two-sided expense still sum to zero
    """
    return {
        user_id: from_cents(cents)
        for user_id, cents in _round_to_cents(_exact_expense_shares(expense)).items()
    }


def _balance_cents(
    expenses: Iterable[Expense],
    payments: Optional[Iterable[Payment]] = None
) -> dict[str, int]:
    balances = defaultdict(Fraction)

    for expense in expenses:
        for user_id, share in _exact_expense_shares(expense).items():
            balances[user_id] -= share

    for payment in payments or []:
        if not payment.is_completed:
            continue

        amount = _valid_amount_cents(payment.amount, "payment", payment.payment_id)
        if amount is None:
            continue

        # Sender has already paid out, recipient has been paid
        balances[payment.from_user_id] += amount
        balances[payment.to_user_id] -= amount

    return {user_id: cents for user_id, cents in _round_to_cents(balances).items() if cents != 0}


def calculate_balances(
    expenses: Iterable[Expense],
    payments: Optional[Iterable[Payment]] = None
) -> dict[str, Decimal]:
    """
    Calculate per-user net balances from expenses and payments.

    For each expense the user's balance moves by -share (see
    resolve_expense_shares). For each completed payment the sender's balance
    increases by the amount and the recipient's decreases by it. Pending
    payments are ignored.

    Args:
        expenses: Expenses of the group.
        payments: Optional payments of the group.

    Returns:
        dict: user id -> Decimal net balance (2 places).
            - Positive = user is owed money
            - Negative = user owes money

    Notes:
        - Users whose balance is zero are omitted
        - Result does not depend on the order of expenses or payments
        - Shares are summed exactly and rounded to cents once, so a closed
          set of expenses and payments still sums to exactly zero
        - Does NOT mutate inputs or touch Firestore
    """
    return {
        user_id: from_cents(cents)
        for user_id, cents in _balance_cents(expenses, payments).items()
    }
