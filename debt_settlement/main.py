"""
Debt Settlement - FastAPI Web Backend

This module serves as the HTTP entry point for the group debt settlement
engine using FastAPI.

Features:
    - Stateless settlement preview for ad-hoc expense lists
    - Settlement of a stored group (Firebase Firestore backend)
    - Per-user debt summaries and balance explanations
    - Recording and completing settlement payments

Endpoints:
    POST /settlement/preview                                  - Settle posted expenses/payments
    POST /groups/{group_id}/settlement                        - Calculate and persist group results
    GET  /groups/{group_id}/users/{user_id}/debts             - What a user owes / is owed
    GET  /groups/{group_id}/users/{user_id}/explanation       - How a user's balance arose
    POST /groups/{group_id}/payments                          - Record an accepted transfer
    POST /groups/{group_id}/payments/{payment_id}/complete    - Mark a payment completed

Usage:
    uvicorn debt_settlement.main:app --reload
"""

import logging
from decimal import Decimal
from typing import Literal, Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field, model_validator

from debt_settlement.config.settings import config
from debt_settlement.debts import summarize_user_debts
from debt_settlement.firebase_store import (
    complete_payment,
    get_group_expenses,
    get_group_payments,
    record_payment,
    save_settlements,
)
from debt_settlement.models import Expense, Payment, Transfer
from debt_settlement.settlement import optimize_settlements
from debt_settlement.splitter import calculate_balances
from debt_settlement.utils import explain_user_balance

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)


# =============================================================================
# Pydantic Models for Request/Response Validation
# =============================================================================

class ExpenseIn(BaseModel):
    """Request model for an expense in a preview."""
    expense_id: Optional[str] = None
    amount: float = Field(..., ge=0, description="Expense amount")
    paid_by: list[str] = Field(default_factory=list, description="User IDs who paid")
    split_between: list[str] = Field(default_factory=list, description="User IDs sharing the cost")


class PaymentIn(BaseModel):
    """Request model for a payment in a preview."""
    payment_id: Optional[str] = None
    amount: float = Field(..., gt=0, description="Payment amount")
    from_user_id: str = Field(..., min_length=1)
    to_user_id: str = Field(..., min_length=1)
    status: Literal["pending", "completed"] = "pending"

    @model_validator(mode="after")
    def check_distinct_users(self):
        if self.from_user_id == self.to_user_id:
            raise ValueError("from_user_id and to_user_id must be different users")
        return self


class SettlementRequest(BaseModel):
    """Request model for a settlement preview."""
    expenses: list[ExpenseIn] = Field(default_factory=list)
    payments: list[PaymentIn] = Field(default_factory=list)


class TransferOut(BaseModel):
    """Response model for a settlement transfer."""
    from_user_id: str
    to_user_id: str
    amount: float


class SettlementResponse(BaseModel):
    """Response model for settlement results."""
    balances: dict[str, float]
    settlements: list[TransferOut]


class DebtSummaryResponse(BaseModel):
    """Response model for one user's debts."""
    user_id: str
    net_balance: float
    incoming: list[TransferOut]
    outgoing: list[TransferOut]
    total_incoming: float
    total_outgoing: float


class PaymentCreate(BaseModel):
    """Request model for recording an accepted transfer."""
    from_user_id: str = Field(..., min_length=1)
    to_user_id: str = Field(..., min_length=1)
    amount: float = Field(..., gt=0)
    description: Optional[str] = None


class PaymentResponse(BaseModel):
    """Response model for payment data."""
    payment_id: str
    group_id: str
    from_user_id: str
    to_user_id: str
    amount: float
    status: str
    description: Optional[str]


# =============================================================================
# FastAPI Application
# =============================================================================

app = FastAPI(
    title="Debt Settlement",
    description="Net balances and settlement transfers for shared group expenses",
    version="1.0.0"
)


# =============================================================================
# Helper Functions
# =============================================================================

def _transfer_out(t: Transfer) -> TransferOut:
    return TransferOut(from_user_id=t.from_user_id, to_user_id=t.to_user_id, amount=float(t.amount))


def _settlement_response(balances: dict, settlements: list[Transfer]) -> SettlementResponse:
    return SettlementResponse(
        balances={user_id: float(amount) for user_id, amount in balances.items()},
        settlements=[_transfer_out(t) for t in settlements]
    )


def _payment_response(p: Payment) -> PaymentResponse:
    return PaymentResponse(
        payment_id=p.payment_id,
        group_id=p.group_id,
        from_user_id=p.from_user_id,
        to_user_id=p.to_user_id,
        amount=float(p.amount),
        status=p.status,
        description=p.description
    )


def _load_group(group_id: str) -> tuple[list[Expense], list[Payment]]:
    return get_group_expenses(group_id), get_group_payments(group_id)


# =============================================================================
# API Endpoints
# =============================================================================

@app.post("/settlement/preview", response_model=SettlementResponse)
async def preview_settlement(request: SettlementRequest):
    """
    Settle the posted expenses and payments without touching Firestore.

    Payments count only when sent with status "completed"; like stored
    payments they default to "pending".
    """
    expenses = [
        Expense(
            amount=e.amount,
            paid_by=e.paid_by,
            split_between=e.split_between,
            expense_id=e.expense_id
        )
        for e in request.expenses
    ]
    payments = [
        Payment(
            amount=p.amount,
            from_user_id=p.from_user_id,
            to_user_id=p.to_user_id,
            status=p.status,
            payment_id=p.payment_id
        )
        for p in request.payments
    ]

    balances = calculate_balances(expenses, payments)
    settlements = optimize_settlements(balances)

    return _settlement_response(balances, settlements)


@app.post("/groups/{group_id}/settlement", response_model=SettlementResponse)
async def settle_group(group_id: str):
    """
    Calculate and persist settlement results for a group.

    Request flow:
        1. Fetch expenses and payments from Firestore
        2. Calculate balances (splitter.py)
        3. Optimize settlements (settlement.py)
        4. Persist results (firebase_store.py)
        5. Return balances and settlements
    """
    try:
        expenses, payments = _load_group(group_id)

        balances = calculate_balances(expenses, payments)
        settlements = optimize_settlements(balances)

        save_settlements(group_id, balances, settlements)

        return _settlement_response(balances, settlements)

    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except RuntimeError as e:
        raise HTTPException(status_code=503, detail=str(e))
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Settlement failed for group %s", group_id)
        raise HTTPException(status_code=500, detail=str(e))


@app.get("/groups/{group_id}/users/{user_id}/debts", response_model=DebtSummaryResponse)
async def get_user_debts(group_id: str, user_id: str):
    """
    Get what a user owes others and what others owe them.
    """
    try:
        expenses, payments = _load_group(group_id)

        balances = calculate_balances(expenses, payments)
        settlements = optimize_settlements(balances)
        summary = summarize_user_debts(settlements, user_id)

        return DebtSummaryResponse(
            user_id=user_id,
            net_balance=float(balances.get(user_id, Decimal("0"))),
            incoming=[_transfer_out(t) for t in summary["incoming"]],
            outgoing=[_transfer_out(t) for t in summary["outgoing"]],
            total_incoming=float(summary["total_incoming"]),
            total_outgoing=float(summary["total_outgoing"])
        )

    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except RuntimeError as e:
        raise HTTPException(status_code=503, detail=str(e))
    except Exception as e:
        logger.exception("Debt lookup failed for %s in group %s", user_id, group_id)
        raise HTTPException(status_code=500, detail=str(e))


@app.get("/groups/{group_id}/users/{user_id}/explanation")
async def get_user_explanation(group_id: str, user_id: str):
    """
    Explain how a user's balance was calculated, expense by expense.
    """
    try:
        expenses, payments = _load_group(group_id)
        return explain_user_balance(user_id, expenses, payments)

    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except RuntimeError as e:
        raise HTTPException(status_code=503, detail=str(e))
    except Exception as e:
        logger.exception("Explanation failed for %s in group %s", user_id, group_id)
        raise HTTPException(status_code=500, detail=str(e))


@app.post("/groups/{group_id}/payments", response_model=PaymentResponse, status_code=201)
async def create_group_payment(group_id: str, payment_data: PaymentCreate):
    """
    Record an accepted settlement transfer as a pending payment.
    """
    try:
        transfer = Transfer(
            from_user_id=payment_data.from_user_id,
            to_user_id=payment_data.to_user_id,
            amount=Decimal(str(payment_data.amount))
        )
        payment = record_payment(group_id, transfer, payment_data.description)
        return _payment_response(payment)

    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except RuntimeError as e:
        raise HTTPException(status_code=503, detail=str(e))
    except Exception as e:
        logger.exception("Recording payment failed for group %s", group_id)
        raise HTTPException(status_code=500, detail=str(e))


@app.post("/groups/{group_id}/payments/{payment_id}/complete", response_model=PaymentResponse)
async def complete_group_payment(group_id: str, payment_id: str):
    """
    Mark a payment as completed so it counts towards balances.
    """
    try:
        payment = complete_payment(group_id, payment_id)
        return _payment_response(payment)

    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except RuntimeError as e:
        raise HTTPException(status_code=503, detail=str(e))
    except Exception as e:
        logger.exception("Completing payment %s failed for group %s", payment_id, group_id)
        raise HTTPException(status_code=500, detail=str(e))


# =============================================================================
# Health Check Endpoint
# =============================================================================

@app.get("/health")
async def health_check():
    """Health check endpoint to verify API is running."""
    return {"status": "healthy", "service": "Debt Settlement"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("debt_settlement.main:app", host="127.0.0.1", port=8000, reload=True)
