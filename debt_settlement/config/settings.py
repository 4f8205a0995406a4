"""
Settings for the debt settlement service.

Values come from environment variables, with a local .env file loaded
first. Import the module-level `config` instance rather than Config itself.
"""

import os
from decimal import Decimal, InvalidOperation

from dotenv import load_dotenv

load_dotenv()


def _decimal_env(name: str, default: str) -> Decimal:
    """Read a numeric setting, naming the variable if it does not parse."""
    raw = os.environ.get(name, default)
    try:
        return Decimal(raw.strip())
    except InvalidOperation:
        raise ValueError(f"{name} must be a number, got: {raw!r}") from None


class Config:
    # Settlement tolerance in currency units (0 disables it)
    SETTLEMENT_EPSILON = _decimal_env("SETTLEMENT_EPSILON", "0.01")

    CURRENCY_SYMBOL = os.environ.get("CURRENCY_SYMBOL", "₽")

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

    # Firebase (empty credentials path -> application default credentials)
    FIREBASE_CREDENTIALS = os.environ.get("FIREBASE_CREDENTIALS", "")
    FIREBASE_PROJECT_ID = os.environ.get("FIREBASE_PROJECT_ID") or None


config = Config()
