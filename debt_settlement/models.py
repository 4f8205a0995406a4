"""
Models Module

This module defines the value objects passed into and out of the settlement
engine.

Data Model:
    Expense stored at: groups/{group_id}/expenses/{expense_id}
    Fields:
        - expense_id: string
        - group_id: string
        - amount: number (must be >= 0)
        - paidBy: list of user ids who fronted the money
        - splitBetween: list of user ids responsible for the cost
        - category: string or None
        - description: string or None

    Payment stored at: groups/{group_id}/payments/{payment_id}
    Fields:
        - payment_id: string (PAY001, PAY002, ... format)
        - group_id: string
        - amount: number (must be > 0)
        - fromUserId: string
        - toUserId: string
        - status: string (pending, completed)
        - description: string or None
        - expenseId: string or None

    Transfer (never stored by the engine):
        - from_user_id: string (debtor who pays)
        - to_user_id: string (creditor who receives)
        - amount: Decimal (2 decimal places, > 0)

Classes:
    Expense: A shared expense.
    Payment: A money movement between two group members.
    Transfer: A recommended settlement payment.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional


PAYMENT_PENDING = "pending"
PAYMENT_COMPLETED = "completed"
PAYMENT_STATUSES = {PAYMENT_PENDING, PAYMENT_COMPLETED}

DEFAULT_PAYMENT_DESCRIPTION = "Debt payment"


def _unique(user_ids) -> list:
    """Drop repeated ids, keeping first-seen order."""
    return list(dict.fromkeys(user_ids or []))


class Expense:
    """
    Represents a shared expense in a group.

    Attributes:
        amount: Amount of the expense (non-negative).
        paid_by (list[str]): Users who fronted the money.
        split_between (list[str]): Users responsible for the cost.
        expense_id (str | None): Store identifier.
        group_id (str | None): Owning group.
        category (str | None): Free-form category.
        description (str | None): Optional description.
    """

    def __init__(
        self,
        amount,
        paid_by: list[str],
        split_between: list[str],
        expense_id: Optional[str] = None,
        group_id: Optional[str] = None,
        category: Optional[str] = None,
        description: Optional[str] = None
    ):
        self.amount = amount
        self.paid_by = _unique(paid_by)
        self.split_between = _unique(split_between)
        self.expense_id = expense_id
        self.group_id = group_id
        self.category = category
        self.description = description

    def to_dict(self) -> dict:
        """Convert expense to dictionary for Firestore storage."""
        return {
            "expense_id": self.expense_id,
            "group_id": self.group_id,
            "amount": float(self.amount),
            "paidBy": self.paid_by,
            "splitBetween": self.split_between,
            "category": self.category,
            "description": self.description
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Expense":
        """Create an Expense from a stored document (camelCase or snake_case keys)."""
        return cls(
            amount=data.get("amount", 0),
            paid_by=data.get("paidBy", data.get("paid_by", [])),
            split_between=data.get("splitBetween", data.get("split_between", [])),
            expense_id=data.get("expense_id", data.get("id")),
            group_id=data.get("group_id", data.get("groupId")),
            category=data.get("category"),
            description=data.get("description")
        )

    def __repr__(self) -> str:
        return (
            f"Expense(id='{self.expense_id}', amount={self.amount}, "
            f"paid_by={self.paid_by}, split_between={self.split_between})"
        )


class Payment:
    """
    Represents a payment from one group member to another.

    Only completed payments move balances; pending ones are informational.
    """

    def __init__(
        self,
        amount,
        from_user_id: str,
        to_user_id: str,
        status: str = PAYMENT_PENDING,
        payment_id: Optional[str] = None,
        group_id: Optional[str] = None,
        description: Optional[str] = None,
        expense_id: Optional[str] = None
    ):
        self.amount = amount
        self.from_user_id = from_user_id
        self.to_user_id = to_user_id
        self.status = status
        self.payment_id = payment_id
        self.group_id = group_id
        self.description = description
        self.expense_id = expense_id

    @property
    def is_completed(self) -> bool:
        return self.status == PAYMENT_COMPLETED

    def to_dict(self) -> dict:
        """Convert payment to dictionary for Firestore storage."""
        return {
            "payment_id": self.payment_id,
            "group_id": self.group_id,
            "amount": float(self.amount),
            "fromUserId": self.from_user_id,
            "toUserId": self.to_user_id,
            "status": self.status,
            "description": self.description,
            "expenseId": self.expense_id
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Payment":
        """Create a Payment from a stored document (camelCase or snake_case keys)."""
        return cls(
            amount=data.get("amount", 0),
            from_user_id=data.get("fromUserId", data.get("from_user_id")),
            to_user_id=data.get("toUserId", data.get("to_user_id")),
            status=data.get("status", PAYMENT_PENDING),
            payment_id=data.get("payment_id", data.get("id")),
            group_id=data.get("group_id", data.get("groupId")),
            description=data.get("description"),
            expense_id=data.get("expenseId", data.get("expense_id"))
        )

    def __repr__(self) -> str:
        return (
            f"Payment(id='{self.payment_id}', from='{self.from_user_id}', "
            f"to='{self.to_user_id}', amount={self.amount}, status='{self.status}')"
        )


@dataclass(frozen=True)
class Transfer:
    from_user_id: str
    to_user_id: str
    amount: Decimal

    def to_dict(self) -> dict:
        return {
            "from_user_id": self.from_user_id,
            "to_user_id": self.to_user_id,
            "amount": float(self.amount)
        }

    def to_payment(self, group_id: Optional[str] = None, description: Optional[str] = None) -> Payment:
        """Materialize an accepted transfer as a new pending payment."""
        return Payment(
            amount=self.amount,
            from_user_id=self.from_user_id,
            to_user_id=self.to_user_id,
            status=PAYMENT_PENDING,
            group_id=group_id,
            description=description or DEFAULT_PAYMENT_DESCRIPTION
        )
