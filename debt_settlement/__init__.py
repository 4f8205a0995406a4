"""
Debt Settlement

Group-expense debt-settlement engine: per-expense shares, net balances and
greedy settlement transfers, plus a thin Firestore/FastAPI layer around it.
"""

__version__ = "1.0.0"
