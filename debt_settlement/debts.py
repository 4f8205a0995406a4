"""
Debts Module

Filters over an already computed list of settlement transfers.

Functions:
    get_incoming_debts: Transfers a user should receive.
    get_outgoing_debts: Transfers a user should pay.
    summarize_user_debts: Both lists with totals for one user.
"""

from decimal import Decimal

from debt_settlement.models import Transfer


def get_incoming_debts(transfers: list[Transfer], user_id: str) -> list[Transfer]:
    """Transfers where others pay user_id."""
    return [t for t in transfers if t.to_user_id == user_id]


def get_outgoing_debts(transfers: list[Transfer], user_id: str) -> list[Transfer]:
    """Transfers where user_id pays others."""
    return [t for t in transfers if t.from_user_id == user_id]


def summarize_user_debts(transfers: list[Transfer], user_id: str) -> dict:
    """
    Summarize what one user owes and is owed.

    Args:
        transfers: Output of optimize_settlements().
        user_id: The user to summarize.

    Returns:
        dict: Contains:
            - user_id: string
            - incoming: list[Transfer]
            - outgoing: list[Transfer]
            - total_incoming: Decimal
            - total_outgoing: Decimal
            - net: Decimal (total_incoming - total_outgoing)
    """
    incoming = get_incoming_debts(transfers, user_id)
    outgoing = get_outgoing_debts(transfers, user_id)

    total_incoming = sum((t.amount for t in incoming), Decimal("0.00"))
    total_outgoing = sum((t.amount for t in outgoing), Decimal("0.00"))

    return {
        "user_id": user_id,
        "incoming": incoming,
        "outgoing": outgoing,
        "total_incoming": total_incoming,
        "total_outgoing": total_outgoing,
        "net": total_incoming - total_outgoing
    }
