"""
Domain Models Package
Export all domain entities
"""

from .entities import (
    # Money
    EXTRA_DECIMALS,
    MONEY_DECIMALS,
    ZERO_MONEY,
    is_zero_money,
    percentage,
    rounded,

    # Entities
    Exchange,
    Quote,
    Stock,
)

__all__ = [
    # Money
    "EXTRA_DECIMALS",
    "MONEY_DECIMALS",
    "ZERO_MONEY",
    "is_zero_money",
    "percentage",
    "rounded",

    # Entities
    "Exchange",
    "Quote",
    "Stock",
]
