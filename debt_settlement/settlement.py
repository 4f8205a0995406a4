"""
Settlement Module

This module handles the settlement calculations for the debt settlement
engine.

Features:
    - Convert net balances into settlement transfers
    - Greedy largest-first matching of debtors and creditors
    - Deterministic ordering (ties broken by user id)
    - Tolerance for tiny residual balances

Data Model:
    Input - balances (dict keyed by user id):
        - net balance as Decimal/float/int/str
          (positive = owed money, negative = owes money)

    Output - list of Transfer:
        - from_user_id: string (debtor who pays)
        - to_user_id: string (creditor who receives)
        - amount: Decimal (rounded to 2 decimal places)

Functions:
    optimize_settlements: Convert balances into settlement transfers.
"""

import logging
from decimal import Decimal
from typing import Optional

from debt_settlement.config.settings import config
from debt_settlement.models import Transfer
from debt_settlement.splitter import from_cents, to_cents

logger = logging.getLogger(__name__)


def optimize_settlements(balances: dict, epsilon: Optional[Decimal] = None) -> list[Transfer]:
    """
    Convert net balances into settlement transfers.

    Uses a greedy algorithm:
        1. Separate users into debtors (balance < -epsilon) and creditors
           (balance > epsilon)
        2. Sort both by amount, largest first, ties by ascending user id
        3. Match the current debtor with the current creditor:
           - Settle the minimum of the two amounts
           - Move past whichever side is now within tolerance
           - Repeat until either side runs out

    Args:
        balances: Dictionary of user id -> net balance.
        epsilon: Tolerance in currency units. Defaults to
            config.SETTLEMENT_EPSILON (0.01); 0 disables it.

    Returns:
        list[Transfer]: Ordered settlement transfers.

    Notes:
        - Heuristic: at most n - 1 transfers, not a guaranteed minimum
        - Does NOT modify input balances
        - Does NOT write to Firebase
    """
    if epsilon is None:
        epsilon = config.SETTLEMENT_EPSILON
    tolerance = to_cents(epsilon)
    if tolerance is None or tolerance < 0:
        raise ValueError(f"epsilon must be a non-negative number, got: {epsilon}")

    # Amounts are kept as positive cents on both sides
    debtors = []
    creditors = []

    for user_id, balance in balances.items():
        net = to_cents(balance)
        if net is None:
            logger.warning("Skipping balance of %s: %r is not a finite number", user_id, balance)
            continue

        if net < -tolerance:
            debtors.append([user_id, -net])
        elif net > tolerance:
            creditors.append([user_id, net])

    debtors.sort(key=lambda x: (-x[1], x[0]))
    creditors.sort(key=lambda x: (-x[1], x[0]))

    settlements = []
    debtor_idx = 0
    creditor_idx = 0

    while debtor_idx < len(debtors) and creditor_idx < len(creditors):
        debtor_id, debt_amount = debtors[debtor_idx]
        creditor_id, credit_amount = creditors[creditor_idx]

        amount = min(debt_amount, credit_amount)

        if amount > tolerance:
            settlements.append(Transfer(
                from_user_id=debtor_id,
                to_user_id=creditor_id,
                amount=from_cents(amount)
            ))

        debtors[debtor_idx][1] = debt_amount - amount
        creditors[creditor_idx][1] = credit_amount - amount

        if debtors[debtor_idx][1] <= tolerance:
            debtor_idx += 1

        if creditors[creditor_idx][1] <= tolerance:
            creditor_idx += 1

    return settlements
