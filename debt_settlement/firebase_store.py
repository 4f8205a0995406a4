"""
Firebase Store Module

This module loads group snapshots from, and saves results and payments to,
Firebase Firestore for the debt settlement engine.

Features:
    - Load expenses and payments for a group
    - Record an accepted settlement transfer as a pending payment
    - Mark a payment as completed
    - Save balances and settlement transfers (idempotent overwrite)

Firestore Structure:
    groups/{group_id}/expenses/{expense_id}
        - see models.Expense

    groups/{group_id}/payments/{payment_id}
        - payment_id: string (PAY001, PAY002, ...)
        - see models.Payment
        - created_at: timestamp

    groups/{group_id}/results/balances/balances/{user_id}
        - user_id: string
        - net_balance: float
        - updated_at: timestamp

    groups/{group_id}/results/settlements/settlements/{settlement_id}
        - settlement_id: string (S001, S002, ...)
        - from_user_id: string
        - to_user_id: string
        - amount: float
        - updated_at: timestamp

Functions:
    get_group_expenses: Get all expenses for a group.
    get_group_payments: Get all payments for a group.
    record_payment: Store a transfer as a new pending payment.
    complete_payment: Mark a payment as completed.
    save_settlements: Save balances and settlement transfers.
"""

import logging
import re
from datetime import datetime, timezone
from typing import Optional

from debt_settlement.config.firebase_config import get_db
from debt_settlement.models import (
    DEFAULT_PAYMENT_DESCRIPTION,
    PAYMENT_COMPLETED,
    Expense,
    Payment,
    Transfer,
)
from debt_settlement.utils import validate_amount

logger = logging.getLogger(__name__)


def _get_timestamp() -> str:
    """
    Get current UTC timestamp in ISO format.

    Returns:
        str: ISO formatted timestamp.
    """
    return datetime.now(timezone.utc).isoformat()


def _validate_group_id(group_id: str) -> None:
    """
    Validate that group_id is a non-empty string.

    Raises:
        ValueError: If group_id is invalid.
    """
    if not isinstance(group_id, str) or not group_id.strip():
        raise ValueError("group_id must be a non-empty string")


def _require_db():
    db = get_db()
    if db is None:
        raise RuntimeError("Firestore is not available")
    return db


def _group_ref(db, group_id: str):
    return db.collection("groups").document(group_id)


def _generate_next_payment_id(db, group_id: str) -> str:
    """
    Generate the next sequential payment ID for a group.

    Format: PAY001, PAY002, ... IDs not matching PAY### are ignored.
    """
    docs = _group_ref(db, group_id).collection("payments").stream()

    max_num = 0
    pattern = re.compile(r'^PAY(\d+)$')

    for doc in docs:
        match = pattern.match(doc.id)
        if match:
            max_num = max(max_num, int(match.group(1)))

    return f"PAY{max_num + 1:03d}"


def get_group_expenses(group_id: str) -> list[Expense]:
    """
    Get all expenses for a group.

    Raises:
        ValueError: If group_id is invalid.
        RuntimeError: If Firestore is not available.
    """
    _validate_group_id(group_id)
    db = _require_db()

    expenses = []
    for doc in _group_ref(db, group_id).collection("expenses").stream():
        data = doc.to_dict()
        data.setdefault("expense_id", doc.id)
        data.setdefault("group_id", group_id)
        expenses.append(Expense.from_dict(data))
    return expenses


def get_group_payments(group_id: str) -> list[Payment]:
    """
    Get all payments (pending and completed) for a group.

    Raises:
        ValueError: If group_id is invalid.
        RuntimeError: If Firestore is not available.
    """
    _validate_group_id(group_id)
    db = _require_db()

    payments = []
    for doc in _group_ref(db, group_id).collection("payments").stream():
        data = doc.to_dict()
        data.setdefault("payment_id", doc.id)
        data.setdefault("group_id", group_id)
        payments.append(Payment.from_dict(data))
    return payments


def record_payment(group_id: str, transfer: Transfer, description: Optional[str] = None) -> Payment:
    """
    Store an accepted settlement transfer as a new pending payment.

    Args:
        group_id: The ID of the group.
        transfer: The transfer the debtor accepted.
        description: Optional note (default: "Debt payment").

    Returns:
        Payment: The stored payment, status "pending".

    Raises:
        ValueError: If group_id, the users or the amount are invalid.
        RuntimeError: If Firestore is not available.
    """
    _validate_group_id(group_id)

    if not transfer.from_user_id or not transfer.to_user_id:
        raise ValueError("from_user_id and to_user_id must be non-empty")
    if transfer.from_user_id == transfer.to_user_id:
        raise ValueError("from_user_id and to_user_id must be different users")
    if not validate_amount(transfer.amount):
        raise ValueError(f"amount must be a positive number, got: {transfer.amount}")

    db = _require_db()

    payment = transfer.to_payment(
        group_id=group_id,
        description=description.strip() if description and description.strip() else DEFAULT_PAYMENT_DESCRIPTION
    )
    payment.payment_id = _generate_next_payment_id(db, group_id)

    doc_data = payment.to_dict()
    doc_data["created_at"] = _get_timestamp()

    _group_ref(db, group_id).collection("payments").document(payment.payment_id).set(doc_data)
    logger.info(
        "Recorded payment %s in group %s: %s -> %s %s",
        payment.payment_id, group_id, payment.from_user_id, payment.to_user_id, payment.amount
    )

    return payment


def complete_payment(group_id: str, payment_id: str) -> Payment:
    """
    Mark a payment as completed so it counts towards balances.

    Raises:
        ValueError: If group_id is invalid or the payment does not exist.
        RuntimeError: If Firestore is not available.
    """
    _validate_group_id(group_id)
    db = _require_db()

    doc_ref = _group_ref(db, group_id).collection("payments").document(payment_id)
    snapshot = doc_ref.get()
    if not snapshot.exists:
        raise ValueError(f"payment '{payment_id}' does not exist in group {group_id}")

    doc_ref.update({"status": PAYMENT_COMPLETED, "completed_at": _get_timestamp()})
    logger.info("Completed payment %s in group %s", payment_id, group_id)

    data = snapshot.to_dict()
    data.setdefault("payment_id", payment_id)
    data.setdefault("group_id", group_id)
    data["status"] = PAYMENT_COMPLETED
    return Payment.from_dict(data)


def _clear_collection(collection_ref) -> None:
    for doc in collection_ref.stream():
        doc.reference.delete()


def save_settlements(group_id: str, balances: dict, settlements: list[Transfer]) -> dict:
    """
    Save net balances and settlement transfers to Firestore.

    Args:
        group_id: The ID of the group.
        balances: Output of calculate_balances().
        settlements: Output of optimize_settlements().

    Returns:
        dict: Summary with saved counts and timestamp.

    Raises:
        ValueError: If group_id is invalid.
        RuntimeError: If Firestore is not available.

    Notes:
        - Replaces previously saved results (idempotent)
        - Settlement IDs are regenerated sequentially (S001, S002, ...)
    """
    _validate_group_id(group_id)
    db = _require_db()

    timestamp = _get_timestamp()
    results_ref = _group_ref(db, group_id).collection("results")
    balances_ref = results_ref.document("balances").collection("balances")
    settlements_ref = results_ref.document("settlements").collection("settlements")

    # Drop results of the previous run
    _clear_collection(balances_ref)
    _clear_collection(settlements_ref)

    for user_id, net_balance in balances.items():
        balances_ref.document(user_id).set({
            "user_id": user_id,
            "net_balance": float(net_balance),
            "updated_at": timestamp
        })

    settlement_ids = []
    for index, settlement in enumerate(settlements, start=1):
        settlement_id = f"S{index:03d}"
        doc_data = settlement.to_dict()
        doc_data["settlement_id"] = settlement_id
        doc_data["updated_at"] = timestamp

        settlements_ref.document(settlement_id).set(doc_data)
        settlement_ids.append(settlement_id)

    logger.debug("Saved %d balances and %d settlements for group %s", len(balances), len(settlement_ids), group_id)

    return {
        "saved_balances": len(balances),
        "settlement_ids": settlement_ids,
        "updated_at": timestamp
    }
